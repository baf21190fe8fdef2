"""Shared pytest fixtures for defwire tests."""

import pytest

from defwire import Container, create_container


@pytest.fixture()
def container() -> Container:
    """Bare container without middlewares."""
    return Container()


@pytest.fixture()
def parent_container() -> Container:
    """Container used as the parent of ``child_container``."""
    return Container()


@pytest.fixture()
def child_container(parent_container: Container) -> Container:
    """Container inheriting definitions from ``parent_container``."""
    return Container(parent_container)


@pytest.fixture()
def standard_container() -> Container:
    """Container with the activation, config and deprecation middlewares."""
    return create_container(config={"foo": "bar", "nested": {"foo": "zar"}})
