from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from defwire._internal.arguments import (
    MISSING,
    ConfigArgument,
    ContainerArgument,
    ReferenceArgument,
    TransformArgument,
)
from defwire._internal.definition import ServiceName

T = TypeVar("T")
R = TypeVar("R")


class _Reference:
    """Shorthand builder for reference arguments.

    ``reference("db")`` references a service by name. The ``predicate``,
    ``annotation`` and ``type`` attributes build single-service references and
    ``reference.multi`` builds references to every matching service.

    Examples:
        .. code-block:: python

            container.define("repo").use_constructor(Repo).with_arguments(
                reference("db"),
                reference.multi.type(EventHandler),
            )

    """

    def __init__(self) -> None:
        self.predicate = ReferenceArgument.one.predicate
        self.annotation = ReferenceArgument.one.annotation
        self.type = ReferenceArgument.one.type
        self.multi = ReferenceArgument.multi

    def __call__(self, name: ServiceName) -> ReferenceArgument:
        return ReferenceArgument.one.name(name)


reference = _Reference()


def config(path: str, default: Any = MISSING) -> ConfigArgument[Any]:
    """Build an argument resolved from the container's config provider at ``path``."""
    return ConfigArgument(path, default)


def transform(
    argument: ContainerArgument[T],
    transformer: Callable[[T], R],
) -> TransformArgument[T, R]:
    """Build an argument applying ``transformer`` to the resolved ``argument``."""
    return TransformArgument(argument, transformer)
