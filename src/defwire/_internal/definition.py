from __future__ import annotations

import uuid
from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Any, TypeAlias

from defwire._internal.type_reference import TypeReference, to_type_reference
from defwire.exceptions import (
    DefWireDefinitionLockedError,
    DefWireDefinitionWithoutContainerError,
    DefWireOwnerCannotBeChangedError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

    from defwire._internal.container import Container

ServiceName: TypeAlias = Hashable
"""A service name: usually a string, any other hashable object acts as a symbolic key."""

ServiceFactory: TypeAlias = Callable[..., Any]
"""A callable building a service. It may return the service or an awaitable of it."""

AnnotationPredicate: TypeAlias = Callable[[Any], bool]
"""A callable classifying opaque annotation values."""

DefinitionPredicate: TypeAlias = Callable[["Definition"], bool]
"""A callable selecting definitions."""


def random_name(prefix: str = "service") -> str:
    """Return a unique service name starting with ``prefix``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def from_constructor(constructor: type[Any]) -> ServiceFactory:
    """Return a factory instantiating ``constructor`` with the resolved arguments."""

    def create_from_constructor(*args: Any) -> Any:
        return constructor(*args)

    return create_from_constructor


def from_value(value: Any) -> ServiceFactory:
    """Return a factory that always returns ``value``."""

    def create_from_value(*_args: Any) -> Any:
        return value

    return create_from_value


class Definition:
    """Describe how to build one service.

    A definition holds a factory, the ordered arguments passed to it,
    opaque annotations used for filtering, an optional final type and the
    owning container. It starts mutable and locks on its first construction
    attempt; a locked definition rejects every mutation with
    ``DefWireDefinitionLockedError`` and is safe to share.

    Examples:
        .. code-block:: python

            definition = (
                Definition("mailer")
                .use_constructor(Mailer)
                .with_arguments(reference("transport"), config("mailer.sender"))
                .annotate("notifications")
            )

    """

    def __init__(self, name: ServiceName | None = None) -> None:
        self._name: ServiceName = random_name() if name is None else name
        self._factory: ServiceFactory | None = None
        self._arguments: list[Any] = []
        self._annotations: list[Any] = []
        self._final_type: TypeReference | None = None
        self._owner: Container | None = None
        self._is_locked = False

    @classmethod
    def create(
        cls,
        factory: ServiceFactory,
        *,
        name: ServiceName | None = None,
        final_type: TypeReference | type[Any] | None = None,
    ) -> Definition:
        """Build a definition from a factory and an optional name and final type."""
        return cls(name).use_factory(factory, final_type=final_type)

    @property
    def name(self) -> ServiceName:
        """Return the service name."""
        return self._name

    @property
    def factory(self) -> ServiceFactory | None:
        """Return the service factory, if one has been set."""
        return self._factory

    @property
    def arguments(self) -> list[Any]:
        """Return a copy of the factory arguments."""
        return list(self._arguments)

    @property
    def annotations(self) -> list[Any]:
        """Return a copy of the annotations."""
        return list(self._annotations)

    @property
    def final_type(self) -> TypeReference | None:
        """Return the declared type of the built service, if known."""
        return self._final_type

    @property
    def owner(self) -> Container | None:
        """Return the container the definition is registered in."""
        return self._owner

    @property
    def is_locked(self) -> bool:
        """Return whether the definition has been locked."""
        return self._is_locked

    def use_constructor(self, constructor: type[Any]) -> Self:
        """Build the service by instantiating ``constructor``."""
        self._assert_not_locked()
        self._factory = from_constructor(constructor)
        self._set_final_type(TypeReference.create_from_class(constructor))
        return self

    def use_class(self, constructor: type[Any]) -> Self:
        """Alias for ``use_constructor``."""
        return self.use_constructor(constructor)

    def use_factory(
        self,
        factory: ServiceFactory,
        final_type: TypeReference | type[Any] | None = None,
    ) -> Self:
        """Build the service by calling ``factory``.

        The factory may be a coroutine function or return an awaitable; the
        container awaits the result before caching it.
        """
        self._assert_not_locked()
        self._factory = factory
        self._set_final_type(None if final_type is None else to_type_reference(final_type))
        return self

    def use_value(self, value: Any) -> Self:
        """Use ``value`` as the service, inferring the final type from it."""
        self._assert_not_locked()
        self._factory = from_value(value)
        self._set_final_type(TypeReference.create_from_value(value))
        return self

    def set_final_type(self, final_type: TypeReference | type[Any]) -> Self:
        """Declare the type of the built service."""
        self._assert_not_locked()
        self._set_final_type(to_type_reference(final_type))
        return self

    def with_arguments(self, *arguments: Any) -> Self:
        """Replace the arguments passed to the factory.

        Values that are ``ContainerArgument`` instances are resolved against the
        container first; every other value is passed through unchanged.
        """
        self._assert_not_locked()
        self._arguments = list(arguments)
        return self

    def annotate(self, *annotations: Any) -> Self:
        """Append opaque metadata values used for lookups and middlewares."""
        self._assert_not_locked()
        self._annotations.extend(annotations)
        return self

    def set_owner(self, container: Container) -> Self:
        """Assign the owning container; a different owner cannot be set later.

        Raises:
            DefWireOwnerCannotBeChangedError: If the definition is already owned
                by another container.

        """
        self._assert_not_locked()
        if self._owner is not None and self._owner is not container:
            msg = (
                "Owner of definition cannot be changed. Make sure you are not using "
                "same definition in multiple containers"
            )
            raise DefWireOwnerCannotBeChangedError(msg)
        self._owner = container
        return self

    def lock(self) -> Self:
        """Make the definition immutable. Locking is permanent."""
        self._is_locked = True
        return self

    def clone(self, name: ServiceName | None = None) -> Definition:
        """Return an unlocked, unowned copy, optionally under a new name."""
        copy = Definition(self._name if name is None else name)
        copy._factory = self._factory
        copy._arguments = list(self._arguments)
        copy._annotations = list(self._annotations)
        copy._final_type = self._final_type
        return copy

    def create_alias(
        self,
        *,
        name: ServiceName | None = None,
        forward_annotations: bool | AnnotationPredicate = False,
    ) -> Definition:
        """Build a definition that resolves this one through its owning container.

        Args:
            name: Alias name. Defaults to the name of this definition.
            forward_annotations: ``True`` copies every annotation, ``False``
                copies none, and a predicate copies the annotations it accepts.

        Returns:
            A new, unowned definition. Resolving it never runs this
            definition's factory a second time.

        """
        alias = Definition(self._name if name is None else name)

        def resolve_aliased() -> Any:
            if self._owner is None:
                msg = f'Cannot create service "{alias.name}" due to lack of assigned container'
                raise DefWireDefinitionWithoutContainerError(msg)
            return self._owner.resolve(self)

        alias.use_factory(resolve_aliased)

        if callable(forward_annotations):
            annotations = [value for value in self._annotations if forward_annotations(value)]
        elif forward_annotations:
            annotations = list(self._annotations)
        else:
            annotations = []

        if annotations:
            alias.annotate(*annotations)
        if self._final_type is not None:
            alias.set_final_type(self._final_type)
        return alias

    def _set_final_type(self, final_type: TypeReference | None) -> None:
        previous = self._final_type
        self._final_type = final_type
        if self._owner is not None and previous != final_type:
            self._owner._reindex_definition_type(self, previous)

    def _assert_not_locked(self) -> None:
        if self._is_locked:
            msg = f'Definition "{self._name}" is locked and cannot be modified'
            raise DefWireDefinitionLockedError(msg)

    def __repr__(self) -> str:
        return f"Definition(name={self._name!r}, locked={self._is_locked})"
