from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any


class DefWireError(Exception):
    """Represent a base class for all DefWire-specific failures.

    Catch this type when you want to handle any DefWire error path without
    matching each concrete exception class individually.
    """


class DefWireServiceNotFoundError(DefWireError):
    """Signal that no definition exists for a requested service name.

    Raised (as a rejected future) by ``Container.resolve`` when the name is
    missing from the container and all of its ancestors, and by
    ``Container.resolve_by_class`` when no definition matches the class.

    Typical fixes include registering the service in the container (or one of
    its parents) before resolving it.
    """


class DefWireAmbiguousServiceError(DefWireError):
    """Signal that a single-service lookup matched more than one definition.

    Raised by ``ReferenceArgument.one`` lookups and by
    ``Container.resolve_by_class``. ``service_names`` lists the matched
    definitions and ``lookup_description`` describes the query.

    Typical fixes include narrowing the predicate/annotation or switching to a
    ``multi`` reference.
    """

    def __init__(self, service_names: Sequence[Hashable], lookup_description: str) -> None:
        self.service_names = tuple(service_names)
        self.lookup_description = lookup_description
        names = ", ".join(str(name) for name in self.service_names)
        super().__init__(
            f"Multiple services found ({names}) with following lookup: {lookup_description}",
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.service_names, self.lookup_description))


class DefWireNoMatchingServiceError(DefWireError):
    """Signal that a single-service lookup matched no definition.

    ``multi`` lookups never raise this error; they yield an empty sequence.
    """

    def __init__(self, lookup_description: str) -> None:
        self.lookup_description = lookup_description
        super().__init__(f"No matching service for following lookup: {lookup_description}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.lookup_description,))


class DefWireCircularDependencyError(DefWireError):
    """Signal a cycle in the static dependency graph of a definition.

    Detected before the definition is locked or constructed. ``path`` holds the
    service names in depth-first discovery order, ending with the repeated one.
    """

    def __init__(self, path: Sequence[Hashable]) -> None:
        self.path = tuple(path)
        joined = " -> ".join(str(name) for name in self.path)
        super().__init__(f"Circular dependency found: {joined}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.path,))


class DefWireAlreadyDefinedError(DefWireError):
    """Signal that a service name is already registered in the same container.

    Names only have to be unique per container; a child container may shadow a
    parent's definition.
    """


class DefWireDefinitionLockedError(DefWireError):
    """Signal a mutation of a definition that has been locked.

    Definitions lock on their first construction attempt. Use
    ``Definition.clone`` to derive a new, mutable definition.
    """


class DefWireOwnerCannotBeChangedError(DefWireError):
    """Signal an attempt to register one definition in two containers.

    Use ``Container.alias`` to expose a service from another container.
    """


class DefWireDefinitionWithoutContainerError(DefWireError):
    """Signal resolution of an alias whose source definition has no owner."""


class DefWireInvalidTypeReferenceTargetError(DefWireError):
    """Signal a ``TypeReference`` built over a non-class or a reserved root type.

    Reserved roots are ``object``, ``type``, function and coroutine types, and
    ``asyncio.Future``.
    """


class DefWireContainerNotSetError(DefWireError):
    """Signal use of ``current_container`` outside of service construction.

    Factories, middlewares and activation hooks run with the creating
    container bound; code running elsewhere must hold a container reference.
    """


class DefWireIncompleteDefinitionError(DefWireError):
    """Signal resolution of a definition that has no factory.

    Typical fix is calling ``use_factory``, ``use_constructor`` or
    ``use_value`` on the definition before it is resolved.
    """


class DefWireInvalidArgumentError(DefWireError):
    """Signal an argument descriptor built with invalid parameters."""


class DefWireMissingConfigValueError(DefWireError):
    """Signal a config path without a value and without a default."""


class DefWireConfigProviderNotAttachedError(DefWireError):
    """Signal resolution of a config argument without a config provider.

    Typical fix is adding ``config_middleware(...)`` to the container or using
    ``create_container(config=...)``.
    """
