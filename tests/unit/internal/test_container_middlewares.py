from __future__ import annotations

import asyncio
from typing import Any

import pytest

from defwire import Container, Definition, current_container
from defwire._internal.container import NextMiddleware
from defwire.exceptions import DefWireContainerNotSetError


class _Service:
    def __init__(self) -> None:
        self.tags: list[str] = []


@pytest.mark.asyncio
async def test_middlewares_run_in_registration_order(container: Container) -> None:
    events: list[str] = []

    async def outer(definition: Definition, next_: NextMiddleware) -> Any:
        events.append("outer:before")
        result = await next_(definition)
        events.append("outer:after")
        return result

    async def inner(definition: Definition, next_: NextMiddleware) -> Any:
        events.append("inner:before")
        result = await next_(definition)
        events.append("inner:after")
        return result

    container.add_middleware(outer, inner)
    container.define_with_factory(lambda: events.append("factory") or "built", name="service")

    assert await container.resolve("service") == "built"
    assert events == ["outer:before", "inner:before", "factory", "inner:after", "outer:after"]


@pytest.mark.asyncio
async def test_middleware_calling_next_twice_reruns_downstream_chain(
    container: Container,
) -> None:
    events: list[str] = []
    attempts = 0

    async def retry(definition: Definition, next_: NextMiddleware) -> Any:
        try:
            return await next_(definition)
        except ConnectionError:
            events.append("retry")
            return await next_(definition)

    def record(definition: Definition, next_: NextMiddleware) -> Any:
        events.append("record")
        return next_(definition)

    def flaky() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            msg = "first attempt fails"
            raise ConnectionError(msg)
        return "connected"

    container.add_middleware(retry, record)
    container.define_with_factory(flaky, name="service")

    assert await container.resolve("service") == "connected"
    assert events == ["record", "retry", "record"]
    assert attempts == 2


@pytest.mark.asyncio
async def test_middleware_may_short_circuit_factory(container: Container) -> None:
    calls: list[str] = []

    def short_circuit(definition: Definition, _next: NextMiddleware) -> Any:
        return f"stub for {definition.name}"

    container.add_middleware(short_circuit)
    container.define_with_factory(lambda: calls.append("factory"), name="service")

    assert await container.resolve("service") == "stub for service"
    assert calls == []


@pytest.mark.asyncio
async def test_middleware_may_substitute_definition(container: Container) -> None:
    def substitute(definition: Definition, next_: NextMiddleware) -> Any:
        if definition.name == "real":
            return next_(definition.clone().use_value("replacement"))
        return next_(definition)

    container.add_middleware(substitute)
    container.define_with_value("original", name="real")

    assert await container.resolve("real") == "replacement"


@pytest.mark.asyncio
async def test_middleware_may_decorate_result(container: Container) -> None:
    async def tag(definition: Definition, next_: NextMiddleware) -> Any:
        service = await next_(definition)
        service.tags.append("decorated")
        return service

    container.add_middleware(tag)
    container.define_with_constructor(_Service, name="service")

    service = await container.resolve("service")

    assert service.tags == ["decorated"]


@pytest.mark.asyncio
async def test_middleware_error_fails_resolution(container: Container) -> None:
    def reject(definition: Definition, _next: NextMiddleware) -> Any:
        msg = f"{definition.name} rejected"
        raise PermissionError(msg)

    container.add_middleware(reject)
    container.define_with_value(1, name="service")

    with pytest.raises(PermissionError, match="service rejected"):
        await container.resolve("service")


@pytest.mark.asyncio
async def test_middleware_chain_is_captured_when_creation_starts(container: Container) -> None:
    events: list[str] = []

    def late(definition: Definition, next_: NextMiddleware) -> Any:
        events.append("late")
        return next_(definition)

    container.define_with_value(1, name="first")
    await container.resolve("first")
    container.add_middleware(late)
    container.define_with_value(2, name="second")
    await container.resolve("second")

    assert events == ["late"]


@pytest.mark.asyncio
async def test_inherited_definitions_use_owner_middlewares(
    parent_container: Container,
    child_container: Container,
) -> None:
    seen: list[tuple[str, object]] = []

    def parent_middleware(definition: Definition, next_: NextMiddleware) -> Any:
        seen.append(("parent", definition.name))
        return next_(definition)

    def child_middleware(definition: Definition, next_: NextMiddleware) -> Any:
        seen.append(("child", definition.name))
        return next_(definition)

    parent_container.add_middleware(parent_middleware)
    child_container.add_middleware(child_middleware)
    parent_container.define_with_value(1, name="inherited")
    child_container.define_with_value(2, name="local")

    await child_container.resolve("inherited")
    await child_container.resolve("local")

    assert seen == [("parent", "inherited"), ("child", "local")]


@pytest.mark.asyncio
async def test_current_container_is_bound_during_creation(
    parent_container: Container,
    child_container: Container,
) -> None:
    seen: list[Container] = []

    def factory() -> str:
        seen.append(current_container())
        return "value"

    def middleware(definition: Definition, next_: NextMiddleware) -> Any:
        seen.append(current_container())
        return next_(definition)

    child_container.add_middleware(middleware)
    child_container.define_with_factory(factory, name="local")
    parent_container.define_with_factory(factory, name="inherited")

    await child_container.resolve("local")
    await child_container.resolve("inherited")

    assert seen == [child_container, child_container, parent_container]


@pytest.mark.asyncio
async def test_factory_may_resolve_lazily_through_current_container(
    container: Container,
) -> None:
    async def factory() -> str:
        dependency = await current_container().resolve("dependency")
        return f"uses {dependency}"

    container.define_with_value("dependency value", name="dependency")
    container.define_with_factory(factory, name="service")

    assert await container.resolve("service") == "uses dependency value"


@pytest.mark.asyncio
async def test_current_container_is_not_leaked_to_caller(container: Container) -> None:
    container.define_with_value(1, name="service")

    await container.resolve("service")

    with pytest.raises(DefWireContainerNotSetError):
        current_container()


def test_current_container_outside_creation_fails() -> None:
    with pytest.raises(DefWireContainerNotSetError, match="No container is creating a service"):
        current_container()


@pytest.mark.asyncio
async def test_concurrent_middleware_creations_do_not_share_state(container: Container) -> None:
    async def slow(definition: Definition, next_: NextMiddleware) -> Any:
        await asyncio.sleep(0)
        return await next_(definition)

    container.add_middleware(slow)
    container.define_with_value("a", name="a")
    container.define_with_value("b", name="b")

    assert await asyncio.gather(container.resolve("a"), container.resolve("b")) == ["a", "b"]
