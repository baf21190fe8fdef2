from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from defwire._internal.config_provider import get_config_provider_for_container
from defwire._internal.definition import AnnotationPredicate, DefinitionPredicate, ServiceName
from defwire._internal.lookup import ByAnnotation, ByPredicate, ByServiceName, ByType, Lookup
from defwire._internal.type_reference import TypeReference, to_type_reference
from defwire.exceptions import (
    DefWireAmbiguousServiceError,
    DefWireInvalidArgumentError,
    DefWireNoMatchingServiceError,
)

if TYPE_CHECKING:
    from defwire._internal.container import Container
    from defwire._internal.definition import Definition

T = TypeVar("T")
R = TypeVar("R")


class _MissingDefault:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingDefault()


class ContainerArgument(ABC, Generic[T]):
    """Base class for factory arguments that must be resolved against a container.

    Every argument of a definition that is not a ``ContainerArgument`` is a
    literal and reaches the factory unchanged.
    """

    __slots__ = ()

    @abstractmethod
    async def resolve(self, container: Container) -> T:
        """Return the argument value for ``container``."""

    @abstractmethod
    def dependencies(self, container: Container) -> Iterable[Definition]:
        """Return the definitions this argument needs, without resolving them."""


def is_container_argument(value: object) -> bool:
    """Return whether ``value`` must be resolved before reaching a factory."""
    return isinstance(value, ContainerArgument)


class ReferenceKind(Enum):
    """Number of services a reference resolves to."""

    ONE = "one"
    """Exactly one matching definition; zero or several matches are errors."""

    MULTI = "multi"
    """Any number of matching definitions, resolved to a list."""


class _ReferenceBuilder:
    """Build references of one kind from the supported lookups."""

    def __init__(self, kind: ReferenceKind) -> None:
        self._kind = kind

    def name(self, name: ServiceName) -> ReferenceArgument:
        """Reference the service registered under ``name``."""
        return ReferenceArgument(self._kind, ByServiceName(name))

    def predicate(self, predicate: DefinitionPredicate) -> ReferenceArgument:
        """Reference services whose definition satisfies ``predicate``."""
        return ReferenceArgument(self._kind, ByPredicate(predicate))

    def annotation(self, predicate: AnnotationPredicate) -> ReferenceArgument:
        """Reference services holding an annotation that satisfies ``predicate``."""
        return ReferenceArgument(self._kind, ByAnnotation(predicate))

    def type(self, type_or_reference: TypeReference | type[Any]) -> ReferenceArgument:
        """Reference services of the given type or one of its subtypes."""
        return ReferenceArgument(self._kind, ByType(to_type_reference(type_or_reference)))


@dataclass(frozen=True, slots=True)
class ReferenceArgument(ContainerArgument[Any]):
    """Resolve one or many services found by a lookup.

    Examples:
        .. code-block:: python

            ReferenceArgument.one.name("database")
            ReferenceArgument.multi.type(EventHandler)

    """

    one: ClassVar[_ReferenceBuilder]
    multi: ClassVar[_ReferenceBuilder]

    kind: ReferenceKind
    lookup: Lookup

    async def resolve(self, container: Container) -> Any:
        definitions = self._find_definitions(container)
        if self.kind is ReferenceKind.ONE:
            return await container.resolve(definitions[0])
        return list(await asyncio.gather(*(container.resolve(d) for d in definitions)))

    def dependencies(self, container: Container) -> list[Definition]:
        return self._find_definitions(container)

    def _find_definitions(self, container: Container) -> list[Definition]:
        definitions = self.lookup.find(container)
        if self.kind is ReferenceKind.MULTI:
            return definitions

        if not definitions:
            raise DefWireNoMatchingServiceError(str(self.lookup))
        if len(definitions) > 1:
            raise DefWireAmbiguousServiceError(
                [definition.name for definition in definitions],
                str(self.lookup),
            )
        return definitions


ReferenceArgument.one = _ReferenceBuilder(ReferenceKind.ONE)
ReferenceArgument.multi = _ReferenceBuilder(ReferenceKind.MULTI)


@dataclass(frozen=True, slots=True)
class ConfigArgument(ContainerArgument[T]):
    """Resolve a value from the config provider attached to the container.

    ``path`` is a dotted path such as ``"database.url"``. Without a default the
    value must exist in the config.
    """

    path: str
    default: T = field(default=MISSING)

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path.strip():
            msg = 'Config "path" cannot be blank'
            raise DefWireInvalidArgumentError(msg)

    @property
    def has_default_value(self) -> bool:
        """Return whether a default value was provided, including ``None``."""
        return self.default is not MISSING

    async def resolve(self, container: Container) -> T:
        provider = get_config_provider_for_container(container)
        return provider(self)

    def dependencies(self, container: Container) -> list[Definition]:
        return []


@dataclass(frozen=True, slots=True)
class TransformArgument(ContainerArgument[R], Generic[T, R]):
    """Apply ``transformer`` to the resolved value of another argument.

    The transformer may be a coroutine function.
    """

    argument: ContainerArgument[T]
    transformer: Callable[[T], R]

    async def resolve(self, container: Container) -> R:
        result = self.transformer(await self.argument.resolve(container))
        if inspect.isawaitable(result):
            return await result
        return result

    def dependencies(self, container: Container) -> Iterable[Definition]:
        return self.argument.dependencies(container)
