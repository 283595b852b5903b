"""Dispatch of scenario actions to their registered handlers."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from scenario.dsl.models import Action

from . import handlers  # noqa: F401  registers the built-in handlers
from .context import ActionContext, ActionOutcome, RunContext, StepState
from .errors import UnsupportedAction
from .frames import resolve_frame
from .registry import HandlerRegistry, registry as default_registry

log = logging.getLogger(__name__)

# Extension point for ``custom`` actions.  A hook only sees the action and the
# context it runs in; it must not keep references to either past the call.
Hook = Callable[[ActionContext, Action], Union[Optional[ActionOutcome], Awaitable[Optional[ActionOutcome]]]]


class ActionDispatcher:
    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        hooks: Optional[Dict[str, Hook]] = None,
    ) -> None:
        self.registry = registry or default_registry
        self._hooks: Dict[str, Hook] = dict(hooks or {})

    def register_hook(self, name: str, hook: Hook) -> Hook:
        if not name:
            raise ValueError("hook name must not be empty")
        self._hooks[name] = hook
        return hook

    def hook(self, name: str) -> Hook:
        try:
            return self._hooks[name]
        except KeyError as exc:
            raise UnsupportedAction("custom", message=f"No hook registered under '{name}'") from exc

    def supports(self, tag: str) -> bool:
        return tag in self.registry

    async def execute(self, ctx: ActionContext, action: Action) -> ActionOutcome:
        """Run ``action`` against the execution context already in ``ctx``."""

        spec = self.registry.get(action.type)
        spec.validate(action)
        return await spec.handler(ctx, action)

    async def dispatch(self, run: RunContext, step: StepState, action: Action) -> ActionOutcome:
        """Resolve the action's frame afresh and execute it.

        The tag is checked first so an unsupported action never touches the
        browser.
        """

        spec = self.registry.get(action.type)
        spec.validate(action)
        ref = action.frame
        if ref is None and spec.follows_step_frame:
            ref = step.frame_ref
        frame = await resolve_frame(run.page, ref)
        if ref is not None:
            run.logger.debug("frame_resolved", f"On frame {ref!r}", frame=ref)
        return await self.execute(ActionContext(frame, run, step, dispatcher=self), action)

    def describe(self) -> Dict[str, Any]:
        return {"actions": self.registry.schema(), "hooks": sorted(self._hooks)}
