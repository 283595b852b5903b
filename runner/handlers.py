"""Built-in action handlers.

Each handler executes one :class:`~scenario.dsl.models.ActionTag` against
the frame already resolved into :class:`~runner.context.ActionContext`.
Playwright timeouts are translated into the runner's own error kinds here so
callers only ever deal with :class:`~runner.errors.ExecutionError`.
"""

from __future__ import annotations

import inspect
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from scenario.dsl.models import Action, ActionTag, Matcher

from .context import ActionContext, ActionOutcome
from .diagnostics import take_screenshot, write_html
from .errors import (
    ActionTimeout,
    ArtifactWriteError,
    AssertionMismatch,
    ElementNotFound,
    ExecutionError,
    NavigationFailed,
    UnsupportedAction,
)
from .registry import registry


def _artifact_path(ctx: ActionContext, filename: str) -> Path:
    if not filename or Path(filename).name != filename or filename in {".", ".."}:
        raise ExecutionError(f"Invalid output filename {filename!r}", code="VALIDATION")
    return ctx.output_dir / filename


def _check(subject: str, matcher: Optional[Matcher], actual: str) -> Matcher:
    if matcher is None:
        raise ExecutionError(f"{subject} assertion has no expected value", code="VALIDATION")
    if not matcher.matches(actual):
        raise AssertionMismatch(subject, expected=matcher.describe(), actual=actual)
    return matcher


async def wait_for_element(ctx: ActionContext, selector: str) -> None:
    timeout = ctx.config.wait_timeout_ms
    try:
        await ctx.frame.wait_for_selector(selector, state="attached", timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise ElementNotFound(selector, timeout_ms=timeout) from exc


@registry.register(ActionTag.NAVIGATE, requires=("value",))
async def navigate(ctx: ActionContext, action: Action) -> ActionOutcome:
    """Load an absolute URL and wait for the network to go idle."""

    url = action.value or ""
    if not urlsplit(url).scheme:
        raise ExecutionError(f"Navigation target {url!r} is not an absolute URL", code="VALIDATION")
    timeout = ctx.config.navigation_timeout_ms
    try:
        await ctx.frame.goto(url, wait_until="load", timeout=timeout)
        await ctx.frame.wait_for_load_state("networkidle", timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise ActionTimeout(f"Navigation to {url} timed out after {timeout} ms", timeout_ms=timeout) from exc
    except PlaywrightError as exc:
        raise NavigationFailed(url, exc.message) from exc
    return ActionOutcome(ok=True, message=f"Opened URL {url}", details={"url": url})


@registry.register(ActionTag.TYPE_AND_SUBMIT, requires=("target", "value"))
async def type_and_submit(ctx: ActionContext, action: Action) -> ActionOutcome:
    """Type text into an element and press Enter."""

    selector = action.target or ""
    await wait_for_element(ctx, selector)
    timeout = ctx.config.wait_timeout_ms
    try:
        await ctx.frame.type(selector, action.value or "", timeout=timeout)
        await ctx.frame.press(selector, "Enter", timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise ActionTimeout(f"Typing into '{selector}' timed out after {timeout} ms", timeout_ms=timeout) from exc
    return ActionOutcome(
        ok=True,
        message=f"Typed in element {selector} with {action.value}",
        details={"selector": selector, "text": action.value},
    )


@registry.register(ActionTag.CLICK, requires=("target",))
async def click(ctx: ActionContext, action: Action) -> ActionOutcome:
    selector = action.target or ""
    await wait_for_element(ctx, selector)
    timeout = ctx.config.wait_timeout_ms
    try:
        await ctx.frame.click(selector, timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise ActionTimeout(f"Clicking '{selector}' timed out after {timeout} ms", timeout_ms=timeout) from exc
    return ActionOutcome(ok=True, message=f"Clicked element {selector}", details={"selector": selector})


@registry.register(ActionTag.WAIT_FOR_SELECTOR, requires=("target",))
async def wait_for_selector(ctx: ActionContext, action: Action) -> ActionOutcome:
    selector = action.target or ""
    await wait_for_element(ctx, selector)
    return ActionOutcome(ok=True, message=f"Waited for element {selector}", details={"selector": selector})


@registry.register(ActionTag.WAIT_FOR_DURATION, requires=("value",))
async def wait_for_duration(ctx: ActionContext, action: Action) -> ActionOutcome:
    try:
        duration = int(float(action.value or "0"))
    except ValueError as exc:
        raise ExecutionError(f"Duration {action.value!r} is not a number of milliseconds", code="VALIDATION") from exc
    await ctx.pause(duration)
    return ActionOutcome(ok=True, message=f"Waited for {duration} ms", details={"waited_ms": duration})


@registry.register(ActionTag.ASSERT_TITLE, requires=("expected",))
async def assert_title(ctx: ActionContext, action: Action) -> ActionOutcome:
    title = await ctx.frame.title()
    matcher = _check("Page title", action.expected, title)
    return ActionOutcome(
        ok=True,
        message=f'Page title "{title}" matches {matcher.describe()}',
        details={"title": title},
    )


@registry.register(ActionTag.ASSERT_TEXT, requires=("target", "expected"))
async def assert_text(ctx: ActionContext, action: Action) -> ActionOutcome:
    selector = action.target or ""
    await wait_for_element(ctx, selector)
    timeout = ctx.config.wait_timeout_ms
    try:
        text = await ctx.frame.inner_text(selector, timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise ElementNotFound(selector, timeout_ms=timeout) from exc
    _check(f"Text of '{selector}'", action.expected, text)
    return ActionOutcome(ok=True, message=f"Matched text for element {selector}", details={"selector": selector, "text": text})


@registry.register(ActionTag.SWITCH_FRAME, follows_step_frame=False)
async def switch_frame(ctx: ActionContext, action: Action) -> ActionOutcome:
    """Make the resolved frame the target of the rest of the step."""

    # The frame was already resolved (and validated) by the dispatcher; only
    # the reference is kept so later actions re-resolve it themselves.
    ctx.step.frame_ref = action.frame
    where = "main document" if action.frame is None else f"frame {action.frame!r}"
    return ActionOutcome(ok=True, message=f"Switched to {where}", details={"frame": action.frame})


@registry.register(ActionTag.CAPTURE_SCREENSHOT, requires=("value",))
async def capture_screenshot(ctx: ActionContext, action: Action) -> ActionOutcome:
    path = _artifact_path(ctx, action.value or "")
    try:
        await take_screenshot(ctx.page, path, full_page=ctx.config.full_page_screenshots)
    except (OSError, PlaywrightError) as exc:
        raise ArtifactWriteError(path, str(exc)) from exc
    return ActionOutcome(ok=True, message=f"Screenshot saved to {path.name}", artifacts=[path])


@registry.register(ActionTag.DUMP_CONTENT, requires=("target", "value"))
async def dump_content(ctx: ActionContext, action: Action) -> ActionOutcome:
    """Write the pretty-printed outer markup of an element to a file."""

    selector = action.target or ""
    path = _artifact_path(ctx, action.value or "")
    await wait_for_element(ctx, selector)
    content = await ctx.frame.eval_on_selector(selector, "el => el.outerHTML")
    try:
        write_html(path, content or "")
    except OSError as exc:
        raise ArtifactWriteError(path, str(exc)) from exc
    return ActionOutcome(ok=True, message=f"Wrote {selector} to {path.name}", artifacts=[path])


@registry.register(ActionTag.CUSTOM, requires=("value",))
async def custom(ctx: ActionContext, action: Action) -> ActionOutcome:
    """Invoke a hook registered on the dispatcher under ``action.value``."""

    if ctx.dispatcher is None:
        raise UnsupportedAction(action.type, message="Custom actions need a dispatcher with registered hooks")
    name = action.value or ""
    hook = ctx.dispatcher.hook(name)
    result = hook(ctx, action)
    if inspect.isawaitable(result):
        result = await result
    if result is None:
        return ActionOutcome(ok=True, message=f"Hook '{name}' completed", details={"hook": name})
    if not result.ok:
        raise ExecutionError(
            f"Hook '{name}' reported failure: {result.message or 'no reason given'}",
            code="CUSTOM_FAILED",
            details={"hook": name, **result.details},
        )
    return result
