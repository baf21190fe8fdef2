from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

ActivationHook = Callable[[Any], Any]
"""Receive a freshly built service and return it, a replacement, or an awaitable of either."""


@dataclass(frozen=True, slots=True)
class ActivationAnnotation:
    """Annotation carrying a hook run after a service is built."""

    hook: ActivationHook


@dataclass(frozen=True, slots=True)
class DeprecatedAnnotation:
    """Annotation marking a service as deprecated."""

    comment: str


def on_activation(hook: ActivationHook) -> ActivationAnnotation:
    """Build an annotation running ``hook`` once the service is built."""
    return ActivationAnnotation(hook)


def deprecated(comment: str) -> DeprecatedAnnotation:
    """Build an annotation reporting the service as deprecated on creation."""
    return DeprecatedAnnotation(comment)


def is_activation_annotation(annotation: object) -> bool:
    """Return whether ``annotation`` was built by ``on_activation``."""
    return isinstance(annotation, ActivationAnnotation)


def is_deprecated_annotation(annotation: object) -> bool:
    """Return whether ``annotation`` was built by ``deprecated``."""
    return isinstance(annotation, DeprecatedAnnotation)
