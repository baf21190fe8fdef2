from __future__ import annotations

import asyncio
import types
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, TypeGuard

from defwire.exceptions import DefWireInvalidTypeReferenceTargetError

if TYPE_CHECKING:
    from defwire._internal.definition import Definition

RESERVED_TYPES: frozenset[type[Any]] = frozenset(
    {
        object,
        type,
        types.FunctionType,
        types.BuiltinFunctionType,
        types.MethodType,
        types.CoroutineType,
        asyncio.Future,
    },
)

# Values of these types behave like primitives and never carry a final type.
_SCALAR_TYPES: frozenset[type[Any]] = frozenset(
    {type(None), bool, int, float, complex, str, bytes},
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations."""
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


class TypeReference:
    """Identity wrapper over a class used for covariant type lookups.

    ``TypeReference(Base).matches(TypeReference(Derived))`` is true when
    ``Derived`` is ``Base`` or one of its subclasses. Reserved root types
    (``object``, ``type``, function types, coroutines and futures) can never be
    wrapped.

    Examples:
        .. code-block:: python

            class Repo: ...


            class SqlRepo(Repo): ...


            assert TypeReference(Repo).matches(TypeReference(SqlRepo))

    """

    __slots__ = ("_target",)

    def __init__(self, target: type[Any]) -> None:
        if not self.is_valid_target(target):
            msg = (
                f'Invalid type reference "{target!r}". Expected non-internal class but '
                f'"{type(target).__name__}" given'
            )
            raise DefWireInvalidTypeReferenceTargetError(msg)
        self._target = target

    @property
    def target(self) -> type[Any]:
        """Return the wrapped class."""
        return self._target

    @property
    def predicate(self) -> Callable[[Definition], bool]:
        """Return a definition predicate matching definitions of this type or its subtypes."""

        def _matches_definition(definition: Definition) -> bool:
            final_type = definition.final_type
            return final_type is not None and self.matches(final_type)

        return _matches_definition

    def matches(self, other: TypeReference) -> bool:
        """Return whether ``other`` is the same class or a descendant of it."""
        return other.target is self._target or issubclass(other.target, self._target)

    def prototype_chain(self) -> Iterator[type[Any]]:
        """Yield the class and each ancestor, skipping reserved root types."""
        for klass in self._target.__mro__:
            if klass in RESERVED_TYPES:
                continue
            yield klass

    @staticmethod
    def is_valid_target(target: object) -> bool:
        """Return whether ``target`` is a class that may be wrapped."""
        return is_runtime_class(target) and target not in RESERVED_TYPES

    @classmethod
    def create_from_class(cls, target: type[Any]) -> TypeReference | None:
        """Wrap ``target`` or return ``None`` when it is not a valid target."""
        if cls.is_valid_target(target):
            return cls(target)
        return None

    @classmethod
    def create_from_value(cls, value: object) -> TypeReference | None:
        """Infer a type reference from an instance, ignoring scalars and reserved types."""
        value_type = type(value)
        if value_type in _SCALAR_TYPES:
            return None
        return cls.create_from_class(value_type)

    @classmethod
    def predicate_for_class(cls, target: type[Any]) -> Callable[[Definition], bool] | None:
        """Return the definition predicate for ``target`` or ``None`` for reserved types."""
        reference = cls.create_from_class(target)
        if reference is None:
            return None
        return reference.predicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeReference):
            return NotImplemented
        return other.target is self._target

    def __hash__(self) -> int:
        return hash(self._target)

    def __repr__(self) -> str:
        return f"TypeReference({self._target.__qualname__})"

    def __str__(self) -> str:
        return f'instance of class "{self._target.__name__}"'


def to_type_reference(type_or_reference: TypeReference | type[Any]) -> TypeReference:
    """Return ``type_or_reference`` as a ``TypeReference``."""
    if isinstance(type_or_reference, TypeReference):
        return type_or_reference
    return TypeReference(type_or_reference)
