from __future__ import annotations

import pytest

from defwire._internal.container import Container
from defwire._internal.create_container import create_container


@pytest.fixture()
def defwire_container() -> Container:
    """Create a per-test container with the standard middlewares attached.

    The fixture is function-scoped, so definitions and cached services are
    isolated between tests unless users override fixture scope explicitly.
    Override the fixture to pass ``config`` or a parent container.

    Returns:
        A new ``Container`` built by ``create_container``.

    """
    return create_container()


__all__ = ["defwire_container"]
