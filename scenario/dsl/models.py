"""Typed scenario models: actions, steps and matchers."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Literal, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .dialects import normalize_action, normalize_matcher, normalize_scenario, normalize_step


class ActionTag(str, Enum):
    """Canonical action vocabulary understood by the dispatcher."""

    NAVIGATE = "navigate"
    TYPE_AND_SUBMIT = "typeAndSubmit"
    CLICK = "click"
    WAIT_FOR_SELECTOR = "waitForSelector"
    WAIT_FOR_DURATION = "waitForDuration"
    ASSERT_TITLE = "assertTitle"
    ASSERT_TEXT = "assertText"
    SWITCH_FRAME = "switchFrame"
    CAPTURE_SCREENSHOT = "captureScreenshot"
    DUMP_CONTENT = "dumpContent"
    CUSTOM = "custom"


FrameRef = Union[None, int, str]


class Matcher(BaseModel):
    """Expected value of an assertion with explicit comparison semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["exact", "pattern"]
    value: str

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        return normalize_matcher(value)

    @model_validator(mode="after")
    def _check_pattern(self) -> "Matcher":
        if self.kind == "pattern":
            try:
                re.compile(self.value)
            except re.error as exc:
                raise ValueError(f"invalid pattern {self.value!r}: {exc}") from exc
        return self

    @classmethod
    def exact(cls, value: str) -> "Matcher":
        return cls(kind="exact", value=value)

    @classmethod
    def pattern(cls, value: str) -> "Matcher":
        return cls(kind="pattern", value=value)

    def matches(self, actual: str) -> bool:
        if self.kind == "exact":
            return actual == self.value
        return re.search(self.value, actual) is not None

    def describe(self) -> str:
        if self.kind == "exact":
            return f'exactly "{self.value}"'
        return f"pattern /{self.value}/"


class Action(BaseModel):
    """One atomic browser interaction or assertion.

    ``type`` is deliberately a plain string: tags outside :class:`ActionTag`
    load without error and are rejected when dispatched.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    type: str = Field(validation_alias=AliasChoices("type", "actionType", "action"))
    target: Optional[str] = Field(default=None, validation_alias=AliasChoices("target", "selector", "cssSelector"))
    value: Optional[str] = None
    frame: FrameRef = None
    expected: Optional[Matcher] = None
    sleep_after_ms: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("sleep_after_ms", "sleepAfterMs", "sleepAfter"),
    )
    label: Optional[str] = Field(default=None, validation_alias=AliasChoices("label", "log"))

    @model_validator(mode="before")
    @classmethod
    def _coerce_dialect(cls, value: Any) -> Any:
        return normalize_action(value)

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("frame", mode="before")
    @classmethod
    def _validate_frame(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("frame must be an index or a name")
        if isinstance(value, int) and value < 0:
            raise ValueError("frame index must be >= 0")
        return value

    @property
    def tag(self) -> Optional[ActionTag]:
        """The canonical tag, or ``None`` when the type is not supported."""

        try:
            return ActionTag(self.type)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return self.label or self.type


class Step(BaseModel):
    """Named group of actions; the unit of pacing and diagnostics."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = ""
    actions: Tuple[Action, ...] = ()
    skip: bool = False
    capture_html_on_success: bool = Field(
        default=False,
        validation_alias=AliasChoices("capture_html_on_success", "captureHtmlOnSuccess", "outputHtmlToFile"),
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_dialect(cls, value: Any) -> Any:
        return normalize_step(value)


class Scenario(BaseModel):
    """Ordered steps plus scenario-wide pacing."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    steps: Tuple[Step, ...] = ()
    inter_action_delay_ms: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("inter_action_delay_ms", "interActionDelayMs", "sleepAfterEachAction"),
    )
    inter_step_delay_ms: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("inter_step_delay_ms", "interStepDelayMs", "sleepAfterEachStep"),
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_dialect(cls, value: Any) -> Any:
        return normalize_scenario(value)
