from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from defwire._internal.definition import AnnotationPredicate, DefinitionPredicate, ServiceName
from defwire._internal.type_reference import TypeReference

if TYPE_CHECKING:
    from defwire._internal.container import Container
    from defwire._internal.definition import Definition


class Lookup(ABC):
    """A query strategy locating definitions in a container and its ancestors.

    Lookups are pure: they never mutate container state or resolve services.
    """

    @abstractmethod
    def find(self, container: Container) -> list[Definition]:
        """Return the matching definitions, local ones before inherited ones."""

    @abstractmethod
    def __str__(self) -> str: ...


@dataclass(frozen=True, slots=True)
class ByServiceName(Lookup):
    """Find the definition registered under ``name``."""

    name: ServiceName

    def find(self, container: Container) -> list[Definition]:
        definition = container.find_definition_by_name(self.name)
        return [] if definition is None else [definition]

    def __str__(self) -> str:
        return f"by service name: {self.name}"


@dataclass(frozen=True, slots=True)
class ByPredicate(Lookup):
    """Find definitions accepted by ``predicate``."""

    predicate: DefinitionPredicate

    def find(self, container: Container) -> list[Definition]:
        return container.find_definition_by_predicate(self.predicate)

    def __str__(self) -> str:
        return "by service predicate"


@dataclass(frozen=True, slots=True)
class ByAnnotation(Lookup):
    """Find definitions holding at least one annotation accepted by ``predicate``."""

    predicate: AnnotationPredicate

    def find(self, container: Container) -> list[Definition]:
        return container.find_definition_by_annotation(self.predicate)

    def __str__(self) -> str:
        return "by annotation predicate"


@dataclass(frozen=True, slots=True)
class ByType(Lookup):
    """Find definitions whose final type is ``type_reference`` or a subtype of it."""

    type_reference: TypeReference

    def find(self, container: Container) -> list[Definition]:
        return container.find_definition_by_class(self.type_reference)

    def __str__(self) -> str:
        return f"by type: {self.type_reference}"

