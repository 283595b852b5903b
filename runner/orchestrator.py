"""Repeated scenario runs and their aggregated report."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncContextManager, Callable, ClassVar, Dict, List, Optional, Tuple, Union

from playwright.async_api import Page

from scenario.dsl.models import Scenario

from .config import RunConfig
from .context import RunContext
from .dispatcher import ActionDispatcher
from .step_executor import StepExecutor
from .structured_logging import RunLogger

log = logging.getLogger(__name__)

REPORT_FILE = "report.txt"

SessionFactory = Callable[[], AsyncContextManager[Page]]


@dataclass(frozen=True, slots=True)
class Success:
    ok: ClassVar[bool] = True

    def describe(self) -> str:
        return "Success"


@dataclass(frozen=True, slots=True)
class Failure:
    reason: str
    ok: ClassVar[bool] = False

    def describe(self) -> str:
        return f"Error: {self.reason}"


Outcome = Union[Success, Failure]


@dataclass(frozen=True, slots=True)
class RunResult:
    run_index: int
    outcome: Outcome
    artifact_paths: Tuple[Path, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "run": self.run_index,
            "success": self.ok,
            "artifacts": [str(path) for path in self.artifact_paths],
        }
        if isinstance(self.outcome, Failure):
            payload["reason"] = self.outcome.reason
        return payload


@dataclass(slots=True)
class BatchResult:
    results: List[RunResult] = field(default_factory=list)

    @property
    def run_count(self) -> int:
        return len(self.results)

    @property
    def successes(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def success_rate(self) -> int:
        if not self.results:
            return 0
        # Half-up rounding, so 2/8 reports 25% and 1/8 reports 13%.
        return int(math.floor(self.successes / self.run_count * 100 + 0.5))

    @property
    def all_passed(self) -> bool:
        return self.successes == self.run_count

    def summary_line(self) -> str:
        return f"success: {self.successes}/{self.run_count} ({self.success_rate}%)"

    def summary(self) -> str:
        lines = [self.summary_line()]
        lines.extend(f"{result.run_index}. {result.outcome.describe()}" for result in self.results)
        return "\n".join(lines) + "\n"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "runs": self.run_count,
            "successes": self.successes,
            "success_rate": self.success_rate,
            "results": [result.as_dict() for result in self.results],
        }


def _reason(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class RunOrchestrator:
    """Executes a scenario ``run_count`` times, one fresh session per run."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        dispatcher: Optional[ActionDispatcher] = None,
        config: Optional[RunConfig] = None,
    ) -> None:
        self.session_factory = session_factory
        self.dispatcher = dispatcher or ActionDispatcher()
        self.config = config or RunConfig()

    async def execute_batch(self, scenario: Scenario, run_count: int, output_root: Path) -> BatchResult:
        """Run the scenario ``run_count`` times; never raises for a failed run."""

        batch = BatchResult()
        for run_index in range(1, run_count + 1):
            log.info("------ Run %d ------", run_index)
            result = await self.execute_run(scenario, run_index, Path(output_root))
            log.log(
                logging.INFO if result.ok else logging.WARNING,
                "Run %d: %s",
                run_index,
                result.outcome.describe(),
            )
            batch.results.append(result)
        return batch

    async def execute_run(self, scenario: Scenario, run_index: int, output_root: Path) -> RunResult:
        output_dir = output_root / f"run-{run_index}"
        artifacts: List[Path] = []
        logger: Optional[RunLogger] = None
        outcome: Outcome
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            logger = RunLogger(run_index, output_dir)
            async with self.session_factory() as page:
                run = RunContext(
                    run_index=run_index,
                    output_dir=output_dir,
                    page=page,
                    logger=logger,
                    config=self.config,
                    artifacts=artifacts,
                )
                await StepExecutor(scenario, self.dispatcher).run(run)
            outcome = Success()
        except Exception as exc:
            log.debug("Run %d failed", run_index, exc_info=True)
            outcome = Failure(_reason(exc))
        finally:
            if logger is not None:
                logger.info("run_finished", "Complete.")
                logger.close()
        return RunResult(run_index=run_index, outcome=outcome, artifact_paths=tuple(artifacts))


async def execute_batch(
    scenario: Scenario,
    run_count: int,
    output_root: Path,
    *,
    session_factory: SessionFactory,
    dispatcher: Optional[ActionDispatcher] = None,
    config: Optional[RunConfig] = None,
) -> BatchResult:
    orchestrator = RunOrchestrator(session_factory, dispatcher=dispatcher, config=config)
    return await orchestrator.execute_batch(scenario, run_count, Path(output_root))


def run_batch(
    scenario: Scenario,
    run_count: int,
    output_root: Path,
    *,
    session_factory: SessionFactory,
    dispatcher: Optional[ActionDispatcher] = None,
    config: Optional[RunConfig] = None,
) -> BatchResult:
    """Blocking wrapper around :func:`execute_batch`."""

    return asyncio.run(
        execute_batch(
            scenario,
            run_count,
            output_root,
            session_factory=session_factory,
            dispatcher=dispatcher,
            config=config,
        )
    )


def write_report(batch: BatchResult, output_root: Path) -> Optional[Path]:
    """Write ``report.txt`` at the batch root; a write failure is only logged."""

    path = Path(output_root) / REPORT_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(batch.summary(), encoding="utf-8")
    except OSError as exc:
        log.error("Could not write report %s: %s", path, exc)
        return None
    return path
