from __future__ import annotations

from typing import TYPE_CHECKING, Any

from defwire._internal.annotations import ActivationHook, is_activation_annotation
from defwire._internal.container import NextMiddleware, settle

if TYPE_CHECKING:
    from defwire._internal.definition import Definition


def activation_middleware(definition: Definition, next_: NextMiddleware) -> Any:
    """Run the ``on_activation`` hooks of a definition on the built service.

    Hooks run in annotation order; each receives the value returned by the
    previous one. Definitions without hooks are passed through untouched.
    """
    service = next_(definition)
    hooks = [
        annotation.hook
        for annotation in definition.annotations
        if is_activation_annotation(annotation)
    ]
    if not hooks:
        return service
    return _run_hooks(service, hooks)


async def _run_hooks(service: Any, hooks: list[ActivationHook]) -> Any:
    result = await settle(service)
    for hook in hooks:
        result = await settle(hook(result))
    return result
