from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from defwire._internal.annotations import is_deprecated_annotation

if TYPE_CHECKING:
    from defwire._internal.container import Middleware, NextMiddleware
    from defwire._internal.definition import Definition

logger = logging.getLogger(__name__)

DeprecationMessageFunc: TypeAlias = Callable[[str], None]
"""Report a deprecation message."""


def _log_deprecation(message: str) -> None:
    logger.warning(message)


def deprecated_middleware(message_func: DeprecationMessageFunc | None = None) -> Middleware:
    """Build a middleware reporting creation of services annotated with ``deprecated``.

    Args:
        message_func: Reporter receiving ``Service <name> is deprecated: <notes>``.
            Defaults to a WARNING record on this module's logger.

    """
    report = _log_deprecation if message_func is None else message_func

    def middleware(definition: Definition, next_: NextMiddleware) -> Any:
        comments = [
            annotation.comment
            for annotation in definition.annotations
            if is_deprecated_annotation(annotation)
        ]
        if comments:
            report(f"Service {definition.name} is deprecated: {', '.join(comments)}")
        return next_(definition)

    return middleware
