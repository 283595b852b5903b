"""Failure kinds raised while executing a scenario."""

from __future__ import annotations

from typing import Any, Dict, Optional


class ExecutionError(Exception):
    def __init__(self, message: str, *, code: str = "EXECUTION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class UnsupportedAction(ExecutionError):
    """The action tag (or custom hook) is unknown to the dispatcher."""

    def __init__(self, tag: str, *, message: Optional[str] = None):
        super().__init__(message or f"Action '{tag}' is not supported", code="UNSUPPORTED_ACTION", details={"tag": tag})
        self.tag = tag


class ElementNotFound(ExecutionError):
    def __init__(self, selector: str, *, timeout_ms: Optional[int] = None):
        message = f"Element '{selector}' not found"
        if timeout_ms is not None:
            message += f" within {timeout_ms} ms"
        super().__init__(message, code="ELEMENT_NOT_FOUND", details={"selector": selector, "timeout_ms": timeout_ms})
        self.selector = selector


class ActionTimeout(ExecutionError):
    def __init__(self, message: str, *, timeout_ms: Optional[int] = None):
        super().__init__(message, code="TIMEOUT", details={"timeout_ms": timeout_ms})


class NavigationFailed(ExecutionError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Navigation to {url} failed: {reason}", code="NAVIGATION_FAILED", details={"url": url})


class AssertionMismatch(ExecutionError):
    """Observed content does not satisfy the expected matcher."""

    def __init__(self, subject: str, *, expected: str, actual: str):
        super().__init__(
            f'{subject} mismatch: expected {expected}, got "{actual}"',
            code="ASSERTION_MISMATCH",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class FrameNotFound(ExecutionError):
    def __init__(self, ref: Any, *, available: int = 0):
        super().__init__(
            f"Frame {ref!r} not found ({available} frame(s) attached)",
            code="FRAME_NOT_FOUND",
            details={"frame": ref, "available": available},
        )
        self.ref = ref


class ArtifactWriteError(ExecutionError):
    def __init__(self, path: Any, reason: str):
        super().__init__(f"Could not write {path}: {reason}", code="IO_ERROR", details={"path": str(path)})
