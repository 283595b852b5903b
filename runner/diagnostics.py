"""Screenshots and DOM dumps written to a run's output directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.formatter import HTMLFormatter
from playwright.async_api import Page

from .structured_logging import RunLogger

log = logging.getLogger(__name__)

# Bodies of these tags are written back exactly as the page served them.
UNFORMATTED_TAGS = {"pre", "textarea", "script", "style"}

_FORMATTER = HTMLFormatter(indent=2)


def screenshot_name(tag: int | str) -> str:
    return f"step-{tag}.png"


def html_dump_name(tag: int | str) -> str:
    return f"html-step-{tag}.html"


def prettify_html(content: str) -> str:
    """Pretty-print markup with a two space indent."""

    soup = BeautifulSoup(content, "html.parser", preserve_whitespace_tags=UNFORMATTED_TAGS)
    return soup.prettify(formatter=_FORMATTER)


def write_html(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(prettify_html(content), encoding="utf-8")
    return path


async def take_screenshot(page: Page, path: Path, *, full_page: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    await page.screenshot(path=str(path), full_page=full_page)
    return path


async def capture(
    page: Page,
    output_dir: Path,
    tag: int | str,
    logger: Optional[RunLogger] = None,
    *,
    full_page: bool = True,
) -> List[Path]:
    """Best-effort screenshot plus DOM dump for a failing step.

    Never raises: each capture is attempted on its own and a failure is only
    logged, so the error that triggered the capture stays the one reported.
    """

    artifacts: List[Path] = []
    try:
        artifacts.append(await take_screenshot(page, output_dir / screenshot_name(tag), full_page=full_page))
    except Exception as exc:
        _report(logger, "screenshot", tag, exc)
    try:
        content = await page.content()
        artifacts.append(write_html(output_dir / html_dump_name(tag), content))
    except Exception as exc:
        _report(logger, "DOM dump", tag, exc)
    return artifacts


def _report(logger: Optional[RunLogger], what: str, tag: int | str, exc: Exception) -> None:
    message = f"Diagnostics {what} for step {tag} failed: {exc}"
    if logger is not None:
        logger.warning("diagnostics_failed", message, step=tag, capture=what)
    else:
        log.warning(message)
