"""Run-scoped structured logging."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

EVENTS_FILE = "events.jsonl"


class RunLogger:
    """Writes JSONL events for one run and mirrors them to :mod:`logging`.

    Every event gets a sequence number from a counter that starts at 1 for
    each new run; one instance must never be shared between runs.
    """

    def __init__(self, run_index: int, output_dir: Optional[Path] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self.run_index = run_index
        self._seq = 0
        self._logger = logger or log
        self._events_file = None
        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
            self._events_file = (output_dir / EVENTS_FILE).open("a", encoding="utf-8")

    @property
    def seq(self) -> int:
        return self._seq

    def event(self, level: int, event: str, message: str, **fields: Any) -> int:
        self._seq += 1
        self._logger.log(level, "[run %d #%d] %s", self.run_index, self._seq, message)
        if self._events_file is not None:
            payload: Dict[str, Any] = {
                "ts": time.time(),
                "run": self.run_index,
                "seq": self._seq,
                "level": logging.getLevelName(level),
                "event": event,
                "message": message,
            }
            payload.update(fields)
            try:
                self._events_file.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
                self._events_file.flush()
            except OSError as exc:
                # Events keep going to stdlib logging once the file is dropped.
                log.warning("Event log for run %d disabled: %s", self.run_index, exc)
                self.close()
        return self._seq

    def debug(self, event: str, message: str, **fields: Any) -> int:
        return self.event(logging.DEBUG, event, message, **fields)

    def info(self, event: str, message: str, **fields: Any) -> int:
        return self.event(logging.INFO, event, message, **fields)

    def warning(self, event: str, message: str, **fields: Any) -> int:
        return self.event(logging.WARNING, event, message, **fields)

    def error(self, event: str, message: str, **fields: Any) -> int:
        return self.event(logging.ERROR, event, message, **fields)

    def close(self) -> None:
        if self._events_file is None:
            return
        try:
            self._events_file.close()
        except OSError as exc:
            log.debug("Closing event log failed: %s", exc)
        self._events_file = None
