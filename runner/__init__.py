"""Scenario execution engine."""

from .config import RunConfig, load_config
from .context import ActionContext, ActionOutcome, RunContext, StepState
from .dispatcher import ActionDispatcher
from .orchestrator import BatchResult, Failure, RunOrchestrator, RunResult, Success, execute_batch, run_batch, write_report
from .step_executor import StepExecutor

__all__ = [
    "ActionContext",
    "ActionDispatcher",
    "ActionOutcome",
    "BatchResult",
    "Failure",
    "RunConfig",
    "RunContext",
    "RunOrchestrator",
    "RunResult",
    "StepExecutor",
    "StepState",
    "Success",
    "execute_batch",
    "load_config",
    "run_batch",
    "write_report",
]
