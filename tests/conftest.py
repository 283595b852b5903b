"""Pytest configuration ensuring local packages are importable, plus page doubles."""

from __future__ import annotations

import errno
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError  # noqa: E402


class FakeElement:
    def __init__(self, element_id: Optional[str]) -> None:
        self.element_id = element_id

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.element_id if name == "id" else None


class FakeFrame:
    """Records every call made against it; selectors map to inner text."""

    def __init__(
        self,
        name: str = "",
        *,
        title: str = "",
        elements: Optional[Dict[str, str]] = None,
        element_id: Optional[str] = None,
        record: Optional[List[tuple]] = None,
    ) -> None:
        self.name = name
        self._title = title
        self.elements = dict(elements or {})
        self.element_id = element_id
        self.record: List[tuple] = record if record is not None else []
        self.typed: Dict[str, str] = {}
        self.fail_goto: Optional[Exception] = None

    def _log(self, action: str, *args: Any) -> None:
        self.record.append((self.name or "main", action) + args)

    async def goto(self, url: str, **kwargs: Any) -> None:
        self._log("goto", url)
        if self.fail_goto is not None:
            raise self.fail_goto

    async def wait_for_load_state(self, state: str = "load", **kwargs: Any) -> None:
        self._log("wait_for_load_state", state)

    async def wait_for_selector(self, selector: str, **kwargs: Any) -> None:
        self._log("wait_for_selector", selector)
        if selector not in self.elements:
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded waiting for {selector}")

    async def type(self, selector: str, text: str, **kwargs: Any) -> None:
        self._log("type", selector, text)
        self.typed[selector] = text

    async def press(self, selector: str, key: str, **kwargs: Any) -> None:
        self._log("press", selector, key)

    async def click(self, selector: str, **kwargs: Any) -> None:
        self._log("click", selector)

    async def title(self) -> str:
        self._log("title")
        return self._title

    async def inner_text(self, selector: str, **kwargs: Any) -> str:
        self._log("inner_text", selector)
        return self.elements[selector]

    async def eval_on_selector(self, selector: str, expression: str) -> str:
        self._log("eval_on_selector", selector)
        return f"<div class=\"dump\"><p>{self.elements[selector]}</p></div>"

    async def frame_element(self) -> FakeElement:
        if self.element_id is None and not self.name:
            raise PlaywrightError("Frame has been detached.")
        return FakeElement(self.element_id)


class FakePage:
    """Minimal stand-in for :class:`playwright.async_api.Page`."""

    def __init__(
        self,
        *,
        title: str = "",
        elements: Optional[Dict[str, str]] = None,
        html: str = "<html><head><title>t</title></head><body><p>hello</p></body></html>",
        children: Optional[List[FakeFrame]] = None,
    ) -> None:
        self.record: List[tuple] = []
        self.main_frame = FakeFrame(title=title, elements=elements, record=self.record)
        self.child_frames = list(children or [])
        for child in self.child_frames:
            child.record = self.record
        self.html = html
        self.screenshots: List[Path] = []
        self.fail_screenshot: Optional[Exception] = None
        self.fail_content: Optional[Exception] = None
        self.closed = False

    @property
    def frames(self) -> List[FakeFrame]:
        return [self.main_frame, *self.child_frames]

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        self.record.append(("page", "screenshot", Path(path).name if path else None))
        if self.fail_screenshot is not None:
            raise self.fail_screenshot
        data = b"\x89PNG fake"
        if path:
            Path(path).write_bytes(data)
            self.screenshots.append(Path(path))
        return data

    async def content(self) -> str:
        self.record.append(("page", "content"))
        if self.fail_content is not None:
            raise self.fail_content
        return self.html


class FakeBrowser:
    """Session factory handing out a fresh :class:`FakePage` per run."""

    def __init__(self, make_page: Callable[[], FakePage]) -> None:
        self.make_page = make_page
        self.pages: List[FakePage] = []
        self.fail_open: Optional[Exception] = None

    @asynccontextmanager
    async def session(self):
        if self.fail_open is not None:
            raise self.fail_open
        page = self.make_page()
        self.pages.append(page)
        try:
            yield page
        finally:
            page.closed = True


class FullDiskFile:
    """Event file stand-in whose writes fail like a full disk."""

    def __init__(self) -> None:
        self.writes = 0
        self.closed = False

    def write(self, data: str) -> int:
        self.writes += 1
        raise OSError(errno.ENOSPC, "No space left on device")

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


def fill_disk(logger) -> FullDiskFile:
    """Swap ``logger``'s events file for one that can no longer be written."""

    if logger._events_file is not None:
        logger._events_file.close()
    logger._events_file = FullDiskFile()
    return logger._events_file


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage(
        title="amp-list - Example Search",
        elements={"input[name=q]": "", "#result": "amp-list docs", "a.first": "First"},
    )


@pytest.fixture
def no_pause(monkeypatch) -> List[int]:
    """Replace run pacing with a recorder; returns the list of requested pauses."""

    pauses: List[int] = []

    async def fake_pause(ms: int) -> None:
        pauses.append(ms)

    monkeypatch.setattr("runner.context.pause", fake_pause)
    return pauses


@pytest.fixture
def make_run(tmp_path):
    """Build a :class:`RunContext` around a page, writing into ``tmp_path``."""

    from runner.config import RunConfig
    from runner.context import RunContext
    from runner.structured_logging import RunLogger

    def _make(page: FakePage, *, run_index: int = 1, config: Optional[RunConfig] = None) -> RunContext:
        output_dir = tmp_path / f"run-{run_index}"
        output_dir.mkdir(parents=True, exist_ok=True)
        return RunContext(
            run_index=run_index,
            output_dir=output_dir,
            page=page,
            logger=RunLogger(run_index, output_dir),
            config=config or RunConfig(wait_timeout_ms=50, navigation_timeout_ms=50),
        )

    return _make
