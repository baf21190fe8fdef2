from __future__ import annotations

from typing import Any

from defwire._internal.config_provider import config_provider_from_object
from defwire._internal.container import DEFAULT_SLOW_LOG_THRESHOLD, Container
from defwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from defwire._internal.middlewares.activation import activation_middleware
from defwire._internal.middlewares.config import config_middleware
from defwire._internal.middlewares.deprecated import DeprecationMessageFunc, deprecated_middleware


def create_container(
    *,
    config: Any = None,
    parent: Container | None = None,
    deprecation_message_func: DeprecationMessageFunc | None = None,
    slow_log_threshold: int = DEFAULT_SLOW_LOG_THRESHOLD,
) -> Container:
    """Create a container with the standard middlewares attached.

    The activation, config and deprecation middlewares are added in that
    order.

    Args:
        config: Source for ``ConfigArgument`` values: a mapping, any object
            with attributes, or a pydantic-settings ``BaseSettings`` subclass,
            which is instantiated once. Defaults to an empty mapping.
        parent: Parent container.
        deprecation_message_func: Reporter for deprecated services. Defaults to
            a WARNING log record.
        slow_log_threshold: Milliseconds after which an unfinished service
            creation is logged. ``0`` disables the timer.

    Returns:
        The configured container.

    Examples:
        .. code-block:: python

            container = create_container(config={"database": {"url": "sqlite://"}})
            container.define("db").use_factory(connect).with_arguments(config("database.url"))

    """
    if config is None:
        config = {}
    elif is_pydantic_settings_subclass(config):
        config = config()

    container = Container(parent, slow_log_threshold=slow_log_threshold)
    container.add_middleware(
        activation_middleware,
        config_middleware(config_provider_from_object(config)),
        deprecated_middleware(deprecation_message_func),
    )
    return container
