from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Literal, Protocol, TypeAlias, overload

from defwire._internal.arguments import ContainerArgument
from defwire._internal.circular import assert_no_circular_dependencies
from defwire._internal.definition import (
    AnnotationPredicate,
    Definition,
    DefinitionPredicate,
    ServiceFactory,
    ServiceName,
    random_name,
)
from defwire._internal.type_reference import TypeReference, to_type_reference
from defwire.exceptions import (
    DefWireAlreadyDefinedError,
    DefWireAmbiguousServiceError,
    DefWireContainerNotSetError,
    DefWireIncompleteDefinitionError,
    DefWireServiceNotFoundError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)

DEFAULT_SLOW_LOG_THRESHOLD = 10_000
"""Milliseconds after which a still running service creation is logged."""

NextMiddleware: TypeAlias = Callable[[Definition], Any]
"""Continuation passed to a middleware; returns the value or an awaitable of it."""

Middleware: TypeAlias = Callable[[Definition, NextMiddleware], Any]
"""An interceptor wrapping service construction."""

_current_container: ContextVar[Container | None] = ContextVar("current_container", default=None)


class AttachableMiddleware(Protocol):
    """A middleware with a one-time hook run when it is added to a container."""

    def __call__(self, definition: Definition, next_: NextMiddleware) -> Any: ...

    def on_attach(self, container: Container) -> None: ...


def current_container() -> Container:
    """Return the container creating the current service.

    Factories, middlewares and activation hooks run with the creating container
    bound, so they can resolve further services lazily.

    Raises:
        DefWireContainerNotSetError: If called outside of service construction.

    """
    container = _current_container.get()
    if container is None:
        msg = "No container is creating a service in the current context."
        raise DefWireContainerNotSetError(msg)
    return container


class Container:
    """Register service definitions and resolve them into memoized instances.

    Every service is built at most once per owning container: the first
    ``resolve`` call stores a pending future in the cache before anything is
    awaited, so concurrent callers share the same in-flight construction.
    Child containers see the definitions of their parents and delegate the
    resolution of inherited definitions to the owner, so a service inherited
    by several children is still built once.

    Resolution is asynchronous and must run inside an event loop. Arguments of
    a definition are resolved concurrently, then the middleware chain wraps the
    factory call.

    Examples:
        .. code-block:: python

            container = Container()
            container.define_with_value({"url": "sqlite://"}, name="settings")
            container.define("db").use_factory(connect).with_arguments(reference("settings"))

            db = await container.resolve("db")

    """

    def __init__(
        self,
        parent: Container | None = None,
        *,
        slow_log_threshold: int = DEFAULT_SLOW_LOG_THRESHOLD,
    ) -> None:
        """Initialize an empty container.

        Args:
            parent: Container to inherit definitions from. Cannot be changed
                later.
            slow_log_threshold: Milliseconds after which an unfinished service
                creation is logged. ``0`` disables the timer.

        """
        self._parent = parent
        self.slow_log_threshold = slow_log_threshold

        self._definitions: dict[ServiceName, Definition] = {}
        self._registration_order: dict[Definition, int] = {}
        self._definitions_by_type: dict[type[Any], list[Definition]] = {}
        self._services: dict[Definition, asyncio.Future[Any]] = {}
        self._middlewares: list[Middleware] = []

    @property
    def parent(self) -> Container | None:
        """Return the parent container."""
        return self._parent

    @property
    def middlewares(self) -> list[Middleware]:
        """Return a copy of the middlewares registered in this container."""
        return list(self._middlewares)

    # region Registration Methods
    def register_definition(self, definition: Definition) -> Self:
        """Register ``definition`` and take ownership of it.

        Raises:
            DefWireAlreadyDefinedError: If a definition with the same name is
                registered in this container. Parent definitions may be shadowed.
            DefWireOwnerCannotBeChangedError: If another container owns the
                definition.

        """
        if definition.name in self._definitions:
            msg = f'Service "{definition.name}" already defined'
            raise DefWireAlreadyDefinedError(msg)

        definition.set_owner(self)
        self._definitions[definition.name] = definition
        self._registration_order[definition] = len(self._registration_order)
        self._index_definition_type(definition)
        logger.debug("Service %s defined", definition.name)
        return self

    def define(self, name: ServiceName | None = None) -> Definition:
        """Create, register and return a definition for further configuration."""
        definition = Definition(name)
        self.register_definition(definition)
        return definition

    def define_with_constructor(
        self,
        constructor: type[Any],
        *,
        name: ServiceName | None = None,
    ) -> Definition:
        """Register a definition instantiating ``constructor``.

        Without ``name`` a unique name prefixed with the class name is used.
        """
        resolved_name = random_name(constructor.__name__) if name is None else name
        return self.define(resolved_name).use_constructor(constructor)

    def define_with_factory(
        self,
        factory: ServiceFactory,
        *,
        name: ServiceName | None = None,
        final_type: TypeReference | type[Any] | None = None,
    ) -> Definition:
        """Register a definition built by ``factory`` with an optional final type."""
        return self.define(name).use_factory(factory, final_type=final_type)

    def define_with_value(self, value: Any, *, name: ServiceName | None = None) -> Definition:
        """Register ``value`` as a ready-made service.

        Without ``name`` a unique name prefixed with the value's class name is
        used.
        """
        resolved_name = random_name(type(value).__name__) if name is None else name
        return self.define(resolved_name).use_value(value)

    def load_definitions(self, definitions: Iterable[Definition]) -> Self:
        """Register every definition of ``definitions`` in iteration order."""
        for definition in definitions:
            self.register_definition(definition)
        return self

    def alias(
        self,
        definition: Definition,
        *,
        name: ServiceName | None = None,
        forward_annotations: bool | AnnotationPredicate = False,
    ) -> Definition:
        """Register an alias of ``definition`` in this container and return it.

        Resolving the alias resolves ``definition`` through its own owner, so
        its factory still runs only once.
        """
        alias = definition.create_alias(name=name, forward_annotations=forward_annotations)
        self.register_definition(alias)
        return alias

    def add_middleware(self, *middlewares: Middleware) -> Self:
        """Append middlewares to the creation chain.

        Middlewares run in registration order as ``middleware(definition, next_)``.
        A middleware exposing ``on_attach(container)`` has it called once, here.
        """
        for middleware in middlewares:
            on_attach = getattr(middleware, "on_attach", None)
            if callable(on_attach):
                on_attach(self)
        self._middlewares.extend(middlewares)
        return self

    # endregion Registration Methods

    # region Lookup Methods
    def find_definition_by_name(self, name: ServiceName) -> Definition | None:
        """Return the definition named ``name`` from this container or its ancestors."""
        definition = self._definitions.get(name)
        if definition is not None:
            return definition
        if self._parent is not None:
            return self._parent.find_definition_by_name(name)
        return None

    def find_definition_by_predicate(self, predicate: DefinitionPredicate) -> list[Definition]:
        """Return definitions satisfying ``predicate``, local ones first."""
        found = [definition for definition in self._definitions.values() if predicate(definition)]
        if self._parent is not None:
            found.extend(self._parent.find_definition_by_predicate(predicate))
        return found

    @overload
    def find_definition_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: Literal[False] = False,
    ) -> list[Definition]: ...

    @overload
    def find_definition_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: Literal[True],
    ) -> list[tuple[Definition, Any]]: ...

    def find_definition_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: bool = False,
    ) -> list[Definition] | list[tuple[Definition, Any]]:
        """Return definitions holding an annotation accepted by ``predicate``.

        Args:
            predicate: Annotation classifier.
            with_annotation: Return ``(definition, annotation)`` pairs with the
                first accepted annotation instead of bare definitions.

        """
        pairs = self._find_annotated(predicate)
        if with_annotation:
            return pairs
        return [definition for definition, _annotation in pairs]

    def find_definition_by_class(
        self,
        type_or_reference: TypeReference | type[Any],
    ) -> list[Definition]:
        """Return definitions whose final type is the given type or a subtype of it."""
        type_reference = to_type_reference(type_or_reference)
        found = list(self._definitions_by_type.get(type_reference.target, ()))
        if self._parent is not None:
            found.extend(self._parent.find_definition_by_class(type_reference))
        return found

    def _find_annotated(self, predicate: AnnotationPredicate) -> list[tuple[Definition, Any]]:
        pairs: list[tuple[Definition, Any]] = []
        for definition in self._definitions.values():
            for annotation in definition.annotations:
                if predicate(annotation):
                    pairs.append((definition, annotation))
                    break
        if self._parent is not None:
            pairs.extend(self._parent._find_annotated(predicate))
        return pairs

    # endregion Lookup Methods

    # region Resolution Methods
    def resolve(self, name_or_definition: ServiceName | Definition) -> asyncio.Future[Any]:
        """Return a future of the service for a name or a definition.

        The future is shared: every call for the same definition returns the
        same object, and the factory runs at most once. Lookup, cycle and
        factory errors are set on the future rather than raised.

        Must be called while an event loop is running.
        """
        loop = asyncio.get_running_loop()

        if isinstance(name_or_definition, Definition):
            definition = name_or_definition
        else:
            found = self.find_definition_by_name(name_or_definition)
            if found is None:
                msg = f'Service "{name_or_definition}" does not exist'
                return _failed_future(loop, DefWireServiceNotFoundError(msg))
            definition = found

        owner = definition.owner
        if owner is not None and owner is not self:
            return owner.resolve(definition)

        service = self._services.get(definition)
        if service is not None:
            return service

        try:
            service = self._create(loop, definition)
        except Exception as error:  # noqa: BLE001
            return _failed_future(loop, error)

        self._services[definition] = service
        return service

    async def resolve_by_predicate(self, predicate: DefinitionPredicate) -> list[Any]:
        """Resolve every service whose definition satisfies ``predicate``."""
        definitions = self.find_definition_by_predicate(predicate)
        return list(await asyncio.gather(*(self.resolve(d) for d in definitions)))

    @overload
    async def resolve_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: Literal[False] = False,
    ) -> list[Any]: ...

    @overload
    async def resolve_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: Literal[True],
    ) -> list[tuple[Any, Any]]: ...

    async def resolve_by_annotation(
        self,
        predicate: AnnotationPredicate,
        *,
        with_annotation: bool = False,
    ) -> list[Any] | list[tuple[Any, Any]]:
        """Resolve every service holding an annotation accepted by ``predicate``.

        With ``with_annotation=True`` each item is a ``(service, annotation)``
        pair.
        """
        pairs = self._find_annotated(predicate)
        services = await asyncio.gather(*(self.resolve(definition) for definition, _ in pairs))
        if with_annotation:
            return [
                (service, annotation)
                for service, (_definition, annotation) in zip(services, pairs, strict=True)
            ]
        return list(services)

    async def resolve_by_class(self, type_or_reference: TypeReference | type[Any]) -> Any:
        """Resolve the single service of the given type or one of its subtypes.

        Raises:
            DefWireServiceNotFoundError: If no definition matches.
            DefWireAmbiguousServiceError: If more than one definition matches.

        """
        type_reference = to_type_reference(type_or_reference)
        definitions = self.find_definition_by_class(type_reference)
        if not definitions:
            msg = f'Service for class "{type_reference.target.__name__}" not found'
            raise DefWireServiceNotFoundError(msg)
        if len(definitions) > 1:
            raise DefWireAmbiguousServiceError(
                [definition.name for definition in definitions],
                f'Class "{type_reference.target.__name__}"',
            )
        return await self.resolve(definitions[0])

    def _create(
        self,
        loop: asyncio.AbstractEventLoop,
        definition: Definition,
    ) -> asyncio.Future[Any]:
        _assert_has_factory(definition)
        assert_no_circular_dependencies(self, definition)

        definition.lock()
        return loop.create_task(self._construct(loop, definition))

    async def _construct(self, loop: asyncio.AbstractEventLoop, definition: Definition) -> Any:
        _current_container.set(self)

        slow_log_handle: asyncio.TimerHandle | None = None
        if self.slow_log_threshold > 0:
            slow_log_handle = loop.call_later(
                self.slow_log_threshold / 1000,
                _log_slow_creation,
                definition.name,
                self.slow_log_threshold,
            )

        logger.debug("Creating service %s - started", definition.name)
        middlewares = list(self._middlewares)

        def continuation(index: int) -> NextMiddleware:
            def next_(current: Definition) -> Any:
                if index < len(middlewares):
                    return middlewares[index](current, continuation(index + 1))
                return self._invoke_factory(current)

            return next_

        try:
            result = await settle(continuation(0)(definition))
        finally:
            if slow_log_handle is not None:
                slow_log_handle.cancel()

        logger.debug("Creating service %s - finished", definition.name)
        return result

    async def _invoke_factory(self, definition: Definition) -> Any:
        factory = _assert_has_factory(definition)

        arguments = definition.arguments
        pending = {
            index: argument.resolve(self)
            for index, argument in enumerate(arguments)
            if isinstance(argument, ContainerArgument)
        }
        if pending:
            resolved = await asyncio.gather(*pending.values())
            for index, value in zip(pending, resolved, strict=True):
                arguments[index] = value

        return await settle(factory(*arguments))

    # endregion Resolution Methods

    def _index_definition_type(self, definition: Definition) -> None:
        final_type = definition.final_type
        if final_type is None:
            return
        for klass in final_type.prototype_chain():
            indexed = self._definitions_by_type.setdefault(klass, [])
            indexed.append(definition)
            indexed.sort(key=self._registration_order.__getitem__)

    def _reindex_definition_type(
        self,
        definition: Definition,
        previous: TypeReference | None,
    ) -> None:
        if previous is not None:
            for klass in previous.prototype_chain():
                indexed = self._definitions_by_type.get(klass, [])
                if definition in indexed:
                    indexed.remove(definition)
        self._index_definition_type(definition)

    def __repr__(self) -> str:
        return f"Container(definitions={len(self._definitions)}, parent={self._parent!r})"


async def settle(value: Any) -> Any:
    """Await ``value`` until it is no longer awaitable."""
    while inspect.isawaitable(value):
        value = await value
    return value


def _assert_has_factory(definition: Definition) -> ServiceFactory:
    factory = definition.factory
    if factory is None:
        msg = (
            f'Missing factory for service definition "{definition.name}". '
            "Define it as constructor, factory or value"
        )
        raise DefWireIncompleteDefinitionError(msg)
    return factory


def _failed_future(loop: asyncio.AbstractEventLoop, error: BaseException) -> asyncio.Future[Any]:
    future: asyncio.Future[Any] = loop.create_future()
    future.set_exception(error)
    return future


def _log_slow_creation(name: ServiceName, threshold: int) -> None:
    logger.warning("Service %s takes a long time to create. Over %d ms", name, threshold)


__all__ = [
    "DEFAULT_SLOW_LOG_THRESHOLD",
    "AttachableMiddleware",
    "Container",
    "Middleware",
    "NextMiddleware",
    "current_container",
    "settle",
]
