"""Configuration loader for the scenario runner."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

ENV_PREFIX = "RUNNER_"

DEFAULTS: Dict[str, Any] = {
    "navigation_timeout_ms": 30000,
    "wait_timeout_ms": 10000,
    "output_root": "output",
    "runs": 1,
    "headless": True,
    "browser": "chromium",
    "full_page_screenshots": True,
    "verbose": False,
}

_BROWSERS = {"chromium", "firefox", "webkit"}


def _as_bool(value: Any) -> bool:
    return str(value).lower() in {"true", "1", "yes", "on"}


@dataclass(slots=True)
class RunConfig:
    navigation_timeout_ms: int = DEFAULTS["navigation_timeout_ms"]
    wait_timeout_ms: int = DEFAULTS["wait_timeout_ms"]
    output_root: Path = field(default_factory=lambda: Path(DEFAULTS["output_root"]))
    runs: int = DEFAULTS["runs"]
    headless: bool = DEFAULTS["headless"]
    browser: str = DEFAULTS["browser"]
    full_page_screenshots: bool = DEFAULTS["full_page_screenshots"]
    verbose: bool = DEFAULTS["verbose"]

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "RunConfig":
        data = dict(DEFAULTS)
        data.update(mapping)
        browser = str(data["browser"]).lower()
        if browser not in _BROWSERS:
            raise ValueError(f"Unknown browser '{browser}', expected one of {sorted(_BROWSERS)}")
        return cls(
            navigation_timeout_ms=int(data["navigation_timeout_ms"]),
            wait_timeout_ms=int(data["wait_timeout_ms"]),
            output_root=Path(data["output_root"]),
            runs=int(data["runs"]),
            headless=_as_bool(data["headless"]),
            browser=browser,
            full_page_screenshots=_as_bool(data["full_page_screenshots"]),
            verbose=_as_bool(data["verbose"]),
        )


def _load_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Path | None = None, *, environ: Dict[str, str] | None = None) -> RunConfig:
    """Load configuration from environment, optional TOML file, and defaults."""

    env = os.environ if environ is None else environ
    env_map: Dict[str, Any] = {}
    for key, value in env.items():
        if key.startswith(ENV_PREFIX):
            env_map[key[len(ENV_PREFIX):].lower()] = value

    path = config_path or Path("runner.toml")
    file_map: Dict[str, Any] = _load_toml(path).get("runner", {})

    merged = {**file_map, **{k: v for k, v in env_map.items() if k in DEFAULTS}}
    return RunConfig.from_mapping(merged)
