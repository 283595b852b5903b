"""Sequential execution of scenario steps."""

from __future__ import annotations

from typing import Optional

from scenario.dsl.models import Scenario, Step

from .context import RunContext, StepState
from .diagnostics import capture, html_dump_name, screenshot_name, take_screenshot, write_html
from .dispatcher import ActionDispatcher


class StepExecutor:
    """Runs the steps of one scenario inside a single run."""

    def __init__(self, scenario: Scenario, dispatcher: Optional[ActionDispatcher] = None) -> None:
        self.scenario = scenario
        self.dispatcher = dispatcher or ActionDispatcher()

    async def run(self, run: RunContext) -> None:
        """Execute every step in order; the first failure propagates."""

        for index, step in enumerate(self.scenario.steps, start=1):
            await self.run_step(run, step, index)

    async def run_step(self, run: RunContext, step: Step, index: int) -> None:
        """Execute one step; ``index`` is its 1-based position in the scenario."""

        if step.skip:
            run.logger.info("step_skipped", f"Step {index}: {step.name} (skipped)", step=index)
            return
        run.logger.info("step_started", f"Step {index}: {step.name}", step=index)
        state = StepState()
        try:
            for position, action in enumerate(step.actions, start=1):
                run.logger.debug("action_started", f"action: {action.type}", step=index, action=position)
                outcome = await self.dispatcher.dispatch(run, state, action)
                for path in outcome.artifacts:
                    run.add_artifact(path)
                run.logger.info(
                    "action_done",
                    f"{action.display_name}: {outcome.message}",
                    step=index,
                    action=position,
                    result=outcome.as_dict(),
                )
                await run.pause(action.sleep_after_ms)
                await run.pause(self.scenario.inter_action_delay_ms)

            await run.pause(self.scenario.inter_step_delay_ms)
            run.add_artifact(
                await take_screenshot(
                    run.page,
                    run.output_dir / screenshot_name(index),
                    full_page=run.config.full_page_screenshots,
                )
            )
            if step.capture_html_on_success:
                content = await run.page.content()
                run.add_artifact(write_html(run.output_dir / html_dump_name(index), content))
        except Exception as exc:
            run.logger.error("step_failed", f"Step {index} failed: {exc}", step=index, error=str(exc))
            artifacts = await capture(
                run.page,
                run.output_dir,
                index,
                run.logger,
                full_page=run.config.full_page_screenshots,
            )
            run.artifacts.extend(artifacts)
            raise
