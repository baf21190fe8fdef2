from __future__ import annotations

import pytest

from defwire import Container, config, deprecated, on_activation

pytest_plugins = ["defwire.integrations.pytest_plugin"]


class _Clock:
    def __init__(self) -> None:
        self.started = False


def _start(clock: _Clock) -> _Clock:
    clock.started = True
    return clock


def test_public_defwire_container_fixture_is_available(defwire_container: Container) -> None:
    assert isinstance(defwire_container, Container)
    assert len(defwire_container.middlewares) == 3


def test_fixture_container_starts_empty(defwire_container: Container) -> None:
    defwire_container.define_with_value(1, name="isolated")

    assert defwire_container.find_definition_by_name("isolated") is not None


def test_fixture_container_is_not_shared_between_tests(defwire_container: Container) -> None:
    assert defwire_container.find_definition_by_name("isolated") is None


@pytest.mark.asyncio
async def test_fixture_container_runs_activation_hooks(defwire_container: Container) -> None:
    defwire_container.define_with_constructor(_Clock, name="clock").annotate(on_activation(_start))

    clock = await defwire_container.resolve("clock")

    assert clock.started is True


@pytest.mark.asyncio
async def test_fixture_container_has_empty_config(defwire_container: Container) -> None:
    defwire_container.define_with_factory(lambda port: port, name="port").with_arguments(
        config("port", 8080),
    )

    assert await defwire_container.resolve("port") == 8080


@pytest.mark.asyncio
async def test_fixture_container_reports_deprecations(
    defwire_container: Container,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level("WARNING", logger="defwire._internal.middlewares.deprecated")
    defwire_container.define_with_value(1, name="legacy").annotate(deprecated("use clock"))

    await defwire_container.resolve("legacy")

    assert "Service legacy is deprecated: use clock" in caplog.messages
