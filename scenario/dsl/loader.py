"""Loading of scenario definitions from JSON or YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import Scenario


def read_scenario_data(path: Path) -> Any:
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(content)
    # Anything else is treated as YAML, which is also a superset of JSON.
    return yaml.safe_load(content)


def load_scenario(path: str | Path) -> Scenario:
    """Parse ``path`` into a validated :class:`Scenario`.

    Raises ``FileNotFoundError`` for a missing file and
    ``pydantic.ValidationError`` for a malformed definition.
    """

    data = read_scenario_data(Path(path))
    if data is None:
        data = {}
    return Scenario.model_validate(data)
