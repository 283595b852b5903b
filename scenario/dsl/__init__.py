"""Typed scenario DSL."""

from .loader import load_scenario
from .models import Action, ActionTag, FrameRef, Matcher, Scenario, Step

__all__ = [
    "Action",
    "ActionTag",
    "FrameRef",
    "Matcher",
    "Scenario",
    "Step",
    "load_scenario",
]
