from __future__ import annotations

from typing import TYPE_CHECKING, Any

from defwire._internal.config_provider import ConfigProvider, attach_config_provider

if TYPE_CHECKING:
    from defwire._internal.container import Container, NextMiddleware
    from defwire._internal.definition import Definition


class ConfigMiddleware:
    """Bind a config provider to every container the middleware is added to.

    The middleware itself is a pass-through; ``ConfigArgument`` values read the
    provider bound during ``on_attach``.
    """

    def __init__(self, provider: ConfigProvider) -> None:
        self.provider = provider

    def __call__(self, definition: Definition, next_: NextMiddleware) -> Any:
        return next_(definition)

    def on_attach(self, container: Container) -> None:
        """Bind the provider to ``container``."""
        attach_config_provider(container, self.provider)


def config_middleware(provider: ConfigProvider) -> ConfigMiddleware:
    """Build a middleware making ``provider`` available to config arguments."""
    return ConfigMiddleware(provider)
