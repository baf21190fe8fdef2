from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeAlias
from weakref import WeakKeyDictionary

from defwire.exceptions import (
    DefWireConfigProviderNotAttachedError,
    DefWireMissingConfigValueError,
)

if TYPE_CHECKING:
    from defwire._internal.arguments import ConfigArgument
    from defwire._internal.container import Container

ConfigProvider: TypeAlias = Callable[["ConfigArgument[Any]"], Any]
"""Return the config value requested by a ``ConfigArgument``.

A provider returns the argument's default when the path has no value and
raises ``DefWireMissingConfigValueError`` when there is no default either.
"""

_PATH_SEPARATOR = "."
_MISSING_VALUE: Any = object()

_providers_by_container: WeakKeyDictionary[Container, ConfigProvider] = WeakKeyDictionary()


def config_provider_from_object(config: Any) -> ConfigProvider:
    """Build a config provider reading dotted paths from ``config``.

    Path segments are looked up as keys in mappings and as attributes on any
    other object, so plain dicts, dataclasses and pydantic settings models can
    be mixed at any nesting level.

    Args:
        config: Root config object.

    Returns:
        A provider suitable for ``config_middleware``.

    Examples:
        .. code-block:: python

            provider = config_provider_from_object({"database": {"url": "sqlite://"}})
            container.add_middleware(config_middleware(provider))

    """

    def provide(request: ConfigArgument[Any]) -> Any:
        value = _get_path(config, request.path)
        if value is not _MISSING_VALUE:
            return value
        if request.has_default_value:
            return request.default
        msg = f'Config at path "{request.path}" is not defined and default value is not provided'
        raise DefWireMissingConfigValueError(msg)

    return provide


def _get_path(config: Any, path: str) -> Any:
    current = config
    for segment in path.split(_PATH_SEPARATOR):
        if isinstance(current, Mapping):
            current = current.get(segment, _MISSING_VALUE)
        else:
            current = getattr(current, segment, _MISSING_VALUE)
        if current is _MISSING_VALUE:
            return _MISSING_VALUE
    return current


def attach_config_provider(container: Container, provider: ConfigProvider) -> None:
    """Bind ``provider`` to ``container``, replacing any previous binding."""
    _providers_by_container[container] = provider


def get_config_provider_for_container(container: Container) -> ConfigProvider:
    """Return the provider bound to ``container`` or to its closest ancestor.

    Raises:
        DefWireConfigProviderNotAttachedError: If neither the container nor
            any ancestor has a config provider.

    """
    current: Container | None = container
    while current is not None:
        provider = _providers_by_container.get(current)
        if provider is not None:
            return provider
        current = current.parent

    msg = "Config provider not attached to container. You need to use config middleware first."
    raise DefWireConfigProviderNotAttachedError(msg)
