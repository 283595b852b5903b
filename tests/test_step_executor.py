import json

import pytest

from conftest import FakeFrame, FakePage, fill_disk
from runner.dispatcher import ActionDispatcher
from runner.errors import AssertionMismatch, ElementNotFound
from runner.step_executor import StepExecutor
from scenario.dsl import Action, Matcher, Scenario, Step


def _scenario(*steps: Step, **kwargs) -> Scenario:
    return Scenario(steps=steps, **kwargs)


@pytest.mark.asyncio
async def test_successful_step_takes_boundary_screenshot(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(name="Search", actions=[Action(type="click", target="a.first")])

    await StepExecutor(_scenario(step)).run_step(run, step, 1)

    assert run.artifacts == [run.output_dir / "step-1.png"]
    assert not (run.output_dir / "html-step-1.html").exists()


@pytest.mark.asyncio
async def test_capture_html_on_success_writes_dom_dump(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(name="Search", capture_html_on_success=True, actions=[Action(type="click", target="a.first")])

    await StepExecutor(_scenario(step)).run_step(run, step, 2)

    dump = run.output_dir / "html-step-2.html"
    assert run.artifacts == [run.output_dir / "step-2.png", dump]
    assert "<p>\n" in dump.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_skipped_step_does_nothing(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(name="Later", skip=True, actions=[Action(type="hover")])

    await StepExecutor(_scenario(step)).run_step(run, step, 1)

    assert fake_page.record == []
    assert run.artifacts == []


@pytest.mark.asyncio
async def test_pacing_order(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(
        name="Paced",
        actions=[
            Action(type="click", target="a.first", sleep_after_ms=300),
            Action(type="click", target="a.first"),
        ],
    )
    scenario = _scenario(step, inter_action_delay_ms=50, inter_step_delay_ms=1000)

    await StepExecutor(scenario).run_step(run, step, 1)

    assert no_pause == [300, 50, 0, 50, 1000]


@pytest.mark.asyncio
async def test_failure_stops_step_and_captures_diagnostics_once(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(
        name="Search",
        actions=[
            Action(type="click", target="a.first"),
            Action(type="assertTitle", expected=Matcher.exact("wrong")),
            Action(type="click", target="#never"),
        ],
    )

    with pytest.raises(AssertionMismatch):
        await StepExecutor(_scenario(step)).run_step(run, step, 3)

    assert ("main", "wait_for_selector", "#never") not in fake_page.record
    screenshots = [entry for entry in fake_page.record if entry[1] == "screenshot"]
    assert screenshots == [("page", "screenshot", "step-3.png")]
    assert run.artifacts == [run.output_dir / "step-3.png", run.output_dir / "html-step-3.html"]
    assert (run.output_dir / "html-step-3.html").exists()


@pytest.mark.asyncio
async def test_diagnostics_failure_does_not_mask_original_error(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    fake_page.fail_content = RuntimeError("page crashed")
    step = Step(name="Broken", actions=[Action(type="click", target="#missing")])

    with pytest.raises(ElementNotFound):
        await StepExecutor(_scenario(step)).run_step(run, step, 1)

    assert run.artifacts == [run.output_dir / "step-1.png"]


@pytest.mark.asyncio
async def test_run_stops_at_first_failing_step(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    scenario = _scenario(
        Step(name="one", actions=[Action(type="click", target="a.first")]),
        Step(name="two", actions=[Action(type="click", target="#missing")]),
        Step(name="three", actions=[Action(type="click", target="a.first")]),
    )

    with pytest.raises(ElementNotFound):
        await StepExecutor(scenario).run(run)

    clicks = [entry for entry in fake_page.record if entry[1] == "click"]
    assert clicks == [("main", "click", "a.first")]
    assert [path.name for path in run.artifacts] == ["step-1.png", "step-2.png", "html-step-2.html"]


@pytest.mark.asyncio
async def test_skipped_steps_keep_their_index(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    scenario = _scenario(
        Step(name="skipped", skip=True),
        Step(name="runs", actions=[Action(type="click", target="a.first")]),
    )

    await StepExecutor(scenario).run(run)

    assert [path.name for path in run.artifacts] == ["step-2.png"]


@pytest.mark.asyncio
async def test_frame_switch_does_not_leak_into_next_step(make_run, no_pause):
    page = FakePage(elements={"a": "main"}, children=[FakeFrame("viewer", elements={"a": "inner"})])
    run = make_run(page)
    scenario = _scenario(
        Step(name="inner", actions=[Action(type="switchFrame", frame="viewer"), Action(type="click", target="a")]),
        Step(name="outer", actions=[Action(type="click", target="a")]),
    )

    await StepExecutor(scenario, ActionDispatcher()).run(run)

    clicks = [entry for entry in page.record if entry[1] == "click"]
    assert clicks == [("viewer", "click", "a"), ("main", "click", "a")]


@pytest.mark.asyncio
async def test_events_are_logged_with_increasing_sequence(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    step = Step(name="Search", actions=[Action(type="click", target="a.first", label="Open first")])

    await StepExecutor(_scenario(step)).run_step(run, step, 1)
    run.logger.close()

    events = [json.loads(line) for line in (run.output_dir / "events.jsonl").read_text().splitlines()]
    assert [event["seq"] for event in events] == list(range(1, len(events) + 1))
    done = [event for event in events if event["event"] == "action_done"]
    assert done[0]["message"] == "Open first: Clicked element a.first"


@pytest.mark.asyncio
async def test_unwritable_event_log_keeps_the_original_error(fake_page, make_run, no_pause):
    run = make_run(fake_page)
    fill_disk(run.logger)
    step = Step(name="Broken", actions=[Action(type="click", target="#missing")])

    with pytest.raises(ElementNotFound):
        await StepExecutor(_scenario(step)).run_step(run, step, 1)

    assert [path.name for path in run.artifacts] == ["step-1.png", "html-step-1.html"]
