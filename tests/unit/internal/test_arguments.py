from __future__ import annotations

import pytest

from defwire import (
    ByAnnotation,
    ByPredicate,
    ByServiceName,
    ByType,
    ConfigArgument,
    Container,
    ReferenceArgument,
    ReferenceKind,
    TransformArgument,
    TypeReference,
    config,
    config_middleware,
    config_provider_from_object,
    reference,
    transform,
)
from defwire._internal.arguments import MISSING, is_container_argument
from defwire.exceptions import (
    DefWireAmbiguousServiceError,
    DefWireInvalidArgumentError,
    DefWireNoMatchingServiceError,
)


class _Handler:
    pass


class _EmailHandler(_Handler):
    pass


class _SmsHandler(_Handler):
    pass


def _is_handler_tag(annotation: object) -> bool:
    return annotation == "handler"


def test_reference_shorthand_builds_single_name_reference() -> None:
    argument = reference("db")

    assert argument == ReferenceArgument(ReferenceKind.ONE, ByServiceName("db"))


def test_reference_builders_choose_lookup_and_kind() -> None:
    def predicate(_definition: object) -> bool:
        return True

    assert reference.predicate(predicate).lookup == ByPredicate(predicate)
    assert reference.annotation(_is_handler_tag).lookup == ByAnnotation(_is_handler_tag)
    assert reference.type(_Handler).lookup == ByType(TypeReference(_Handler))
    assert reference.multi.name("db").kind is ReferenceKind.MULTI
    assert ReferenceArgument.one.type(TypeReference(_Handler)).kind is ReferenceKind.ONE


def test_lookup_descriptions() -> None:
    assert str(ByServiceName("db")) == "by service name: db"
    assert str(ByPredicate(lambda _definition: True)) == "by service predicate"
    assert str(ByAnnotation(_is_handler_tag)) == "by annotation predicate"
    assert str(ByType(TypeReference(_Handler))) == 'by type: instance of class "_Handler"'


def test_is_container_argument_distinguishes_literals() -> None:
    assert is_container_argument(reference("db")) is True
    assert is_container_argument(config("path")) is True
    assert is_container_argument("db") is False
    assert is_container_argument(None) is False


@pytest.mark.parametrize("path", ["", "   "])
def test_config_argument_rejects_blank_path(path: str) -> None:
    with pytest.raises(DefWireInvalidArgumentError, match='Config "path" cannot be blank'):
        ConfigArgument(path)


def test_config_argument_tracks_whether_default_was_given() -> None:
    assert ConfigArgument("path").has_default_value is False
    assert ConfigArgument("path").default is MISSING
    assert ConfigArgument("path", None).has_default_value is True
    assert config("path", default=0).default == 0


def test_transform_shorthand_wraps_argument() -> None:
    inner = reference("db")

    def transformer(value: object) -> str:
        return str(value)

    assert transform(inner, transformer) == TransformArgument(inner, transformer)


@pytest.mark.asyncio
async def test_single_reference_resolves_service_by_name(container: Container) -> None:
    container.define_with_value("value", name="db")

    assert await reference("db").resolve(container) == "value"


@pytest.mark.asyncio
async def test_single_reference_without_match_fails(container: Container) -> None:
    with pytest.raises(
        DefWireNoMatchingServiceError,
        match="No matching service for following lookup: by service name: db",
    ):
        await reference("db").resolve(container)


@pytest.mark.asyncio
async def test_single_reference_with_several_matches_fails(container: Container) -> None:
    container.define_with_constructor(_EmailHandler, name="email")
    container.define_with_constructor(_SmsHandler, name="sms")

    with pytest.raises(DefWireAmbiguousServiceError) as error_info:
        await reference.type(_Handler).resolve(container)

    assert error_info.value.service_names == ("email", "sms")
    assert str(error_info.value) == (
        "Multiple services found (email, sms) with following lookup: "
        'by type: instance of class "_Handler"'
    )


@pytest.mark.asyncio
async def test_multi_reference_resolves_every_match_in_order(container: Container) -> None:
    container.define("email").use_constructor(_EmailHandler).annotate("handler")
    container.define("unrelated").use_value([]).annotate("other")
    container.define("sms").use_constructor(_SmsHandler).annotate("handler")

    handlers = await reference.multi.annotation(_is_handler_tag).resolve(container)

    assert [type(handler) for handler in handlers] == [_EmailHandler, _SmsHandler]


@pytest.mark.asyncio
async def test_multi_reference_without_match_resolves_to_empty_list(
    container: Container,
) -> None:
    assert await reference.multi.type(_Handler).resolve(container) == []


@pytest.mark.asyncio
async def test_multi_reference_reuses_cached_services(container: Container) -> None:
    container.define_with_constructor(_EmailHandler, name="email")

    [handler] = await reference.multi.type(_Handler).resolve(container)

    assert handler is await container.resolve("email")


@pytest.mark.asyncio
async def test_predicate_reference_matches_definitions(container: Container) -> None:
    container.define_with_value(1, name="one")
    container.define_with_value(2, name="two")

    value = await reference.predicate(lambda definition: definition.name == "two").resolve(
        container,
    )

    assert value == 2


@pytest.mark.asyncio
async def test_config_argument_reads_provider(container: Container) -> None:
    container.add_middleware(config_middleware(config_provider_from_object({"a": {"b": 1}})))

    assert await config("a.b").resolve(container) == 1
    assert await config("a.c", default="fallback").resolve(container) == "fallback"


@pytest.mark.asyncio
async def test_transform_argument_applies_sync_transformer(container: Container) -> None:
    container.define_with_value([3, 1, 2], name="numbers")

    assert await transform(reference("numbers"), sorted).resolve(container) == [1, 2, 3]


@pytest.mark.asyncio
async def test_transform_argument_awaits_async_transformer(container: Container) -> None:
    container.define_with_value("db", name="name")

    async def upper(value: str) -> str:
        return value.upper()

    assert await transform(reference("name"), upper).resolve(container) == "DB"


def test_dependencies_do_not_resolve_services(container: Container) -> None:
    calls: list[str] = []
    definition = container.define_with_factory(lambda: calls.append("built"), name="service")

    assert reference("service").dependencies(container) == [definition]
    assert transform(reference("service"), str).dependencies(container) == [definition]
    assert list(config("path").dependencies(container)) == []
    assert calls == []
