"""Per-run and per-action execution state."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from playwright.async_api import Frame, Page

from scenario.dsl.models import FrameRef

from .config import RunConfig
from .structured_logging import RunLogger

if TYPE_CHECKING:  # pragma: no cover
    from .dispatcher import ActionDispatcher


async def pause(ms: int) -> None:
    """Suspend for ``ms`` milliseconds; zero or negative returns at once."""

    if ms > 0:
        await asyncio.sleep(ms / 1000)


@dataclass(slots=True)
class ActionOutcome:
    ok: bool
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    artifacts: List[Path] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": self.ok, "message": self.message, "details": self.details}
        if self.artifacts:
            payload["artifacts"] = [str(path) for path in self.artifacts]
        return payload


@dataclass(slots=True)
class RunContext:
    """Mutable state owned by exactly one run."""

    run_index: int
    output_dir: Path
    page: Page
    logger: RunLogger
    config: RunConfig = field(default_factory=RunConfig)
    artifacts: List[Path] = field(default_factory=list)

    def add_artifact(self, path: Path) -> Path:
        self.artifacts.append(path)
        return path

    async def pause(self, ms: int) -> None:
        await pause(ms)


@dataclass(slots=True)
class StepState:
    """Frame selection made by ``switchFrame``; lives for one step only."""

    frame_ref: FrameRef = None


class ActionContext:
    """Everything a handler may touch while executing one action."""

    def __init__(
        self,
        frame: Frame,
        run: RunContext,
        step: StepState,
        dispatcher: Optional["ActionDispatcher"] = None,
    ) -> None:
        self.frame = frame
        self.run = run
        self.step = step
        self.dispatcher = dispatcher

    @property
    def page(self) -> Page:
        return self.run.page

    @property
    def config(self) -> RunConfig:
        return self.run.config

    @property
    def logger(self) -> RunLogger:
        return self.run.logger

    @property
    def output_dir(self) -> Path:
        return self.run.output_dir

    async def pause(self, ms: int) -> None:
        await pause(ms)
