"""Scenario definitions shared by the runner and its tooling."""

from .dsl import models
from .dsl.loader import load_scenario

__all__ = ["models", "load_scenario"]
