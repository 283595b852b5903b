"""Resolution of frame references to live execution contexts."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError, Frame, Page

from scenario.dsl.models import FrameRef

from .errors import FrameNotFound

log = logging.getLogger(__name__)


async def _element_id(frame: Frame) -> str | None:
    try:
        element = await frame.frame_element()
        return await element.get_attribute("id")
    except PlaywrightError:
        # The main frame and detached frames have no owning element.
        return None


async def resolve_frame(page: Page, ref: FrameRef) -> Frame:
    """Return the frame ``ref`` points at in ``page``'s current frame tree.

    Resolution is done from scratch on every call; frames may detach and
    reattach between two actions of the same step.
    """

    if ref is None:
        return page.main_frame
    frames = list(page.frames)
    if isinstance(ref, int):
        if 0 <= ref < len(frames):
            return frames[ref]
        raise FrameNotFound(ref, available=len(frames))
    for frame in frames:
        if frame.name == ref:
            return frame
    for frame in frames:
        if frame is page.main_frame:
            continue
        if await _element_id(frame) == ref:
            return frame
    log.debug("No frame named %r among %d frame(s)", ref, len(frames))
    raise FrameNotFound(ref, available=len(frames))
