from __future__ import annotations

from typing import TYPE_CHECKING

from defwire._internal.arguments import ContainerArgument
from defwire.exceptions import DefWireCircularDependencyError

if TYPE_CHECKING:
    from defwire._internal.container import Container
    from defwire._internal.definition import Definition


def assert_no_circular_dependencies(container: Container, definition: Definition) -> None:
    """Walk the static dependency graph of ``definition`` and fail on the first cycle.

    Dependencies are discovered with the same lookups used at resolution time,
    without resolving any value: the arguments of a dependency are looked up
    in the container owning it. Arguments are explored depth-first, left to
    right, so the reported cycle is the first one in that order.

    Raises:
        DefWireCircularDependencyError: With the path from ``definition`` to the
            repeated definition, both ends included.
        DefWireNoMatchingServiceError: If a single-service reference has no match.
        DefWireAmbiguousServiceError: If a single-service reference has several.

    """
    _detect_circular_dependencies(container, definition, [definition])


def _detect_circular_dependencies(
    container: Container,
    definition: Definition,
    path: list[Definition],
) -> None:
    for argument in definition.arguments:
        if not isinstance(argument, ContainerArgument):
            continue
        for dependency in argument.dependencies(container):
            if any(dependency is visited for visited in path):
                raise DefWireCircularDependencyError([d.name for d in [*path, dependency]])
            # A dependency resolves its arguments in its owner.
            owner = dependency.owner or container
            _detect_circular_dependencies(owner, dependency, [*path, dependency])
