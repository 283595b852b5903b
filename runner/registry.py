"""Registry mapping action tags to their handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterator, Optional, Tuple

from scenario.dsl.models import Action, ActionTag

from .errors import ExecutionError, UnsupportedAction

if TYPE_CHECKING:  # pragma: no cover
    from .context import ActionContext, ActionOutcome

Handler = Callable[["ActionContext", Action], Awaitable["ActionOutcome"]]


@dataclass(slots=True)
class HandlerSpec:
    tag: ActionTag
    handler: Handler
    requires: Tuple[str, ...] = ()
    # switchFrame chooses its own frame; everything else follows the step's selection.
    follows_step_frame: bool = True
    description: str | None = None

    def validate(self, action: Action) -> None:
        missing = [name for name in self.requires if getattr(action, name) in (None, "")]
        if missing:
            raise ExecutionError(
                f"Action '{action.type}' requires {', '.join(missing)}",
                code="VALIDATION",
                details={"missing": missing},
            )

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            "requires": list(self.requires),
            "description": self.description or "",
        }


class HandlerRegistry:
    """Central registry of the action tags the dispatcher can execute."""

    def __init__(self) -> None:
        self._handlers: Dict[ActionTag, HandlerSpec] = {}

    def register(
        self,
        tag: ActionTag,
        *,
        requires: Tuple[str, ...] = (),
        follows_step_frame: bool = True,
        description: str | None = None,
    ) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            if tag in self._handlers:
                raise ValueError(f"Handler for '{tag.value}' already registered")
            self._handlers[tag] = HandlerSpec(
                tag=tag,
                handler=handler,
                requires=requires,
                follows_step_frame=follows_step_frame,
                description=description or (handler.__doc__ or "").strip() or None,
            )
            return handler

        return decorator

    def get(self, tag: str) -> HandlerSpec:
        try:
            return self._handlers[ActionTag(tag)]
        except (ValueError, KeyError) as exc:
            raise UnsupportedAction(str(tag)) from exc

    def lookup(self, tag: str) -> Optional[HandlerSpec]:
        try:
            return self.get(tag)
        except UnsupportedAction:
            return None

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and self.lookup(tag) is not None

    def __iter__(self) -> Iterator[HandlerSpec]:
        return iter(self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)

    def schema(self) -> Dict[str, Any]:
        return {spec.tag.value: spec.to_metadata() for spec in self._handlers.values()}


registry = HandlerRegistry()
