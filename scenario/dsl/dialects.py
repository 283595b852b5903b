"""Normalisation of older scenario dialects onto the canonical vocabulary.

Scenario files written for earlier runners use different tag names
(``url``, ``typeThenSubmit``, ``VerifyTitle`` ...) and different keys
(``inputText``, ``matchRegex``, ``textEqualsTo`` ...).  The helpers below are
used as ``mode="before"`` validators by :mod:`scenario.dsl.models` so every
dialect ends up as the same typed model.  Unknown tags are passed through
untouched; they are rejected at dispatch time.
"""

from __future__ import annotations

from typing import Any, Dict, List

TAG_ALIASES: Dict[str, str] = {
    "url": "navigate",
    "URL": "navigate",
    "goto": "navigate",
    "typeThenSubmit": "typeAndSubmit",
    "InputThenEnter": "typeAndSubmit",
    "Click": "click",
    "waitFor": "waitForSelector",
    "waitInSeconds": "waitForDuration",
    "VerifyTitle": "assertTitle",
    "verifyTitle": "assertTitle",
    "assertPageTitle": "assertTitle",
    "VerifyText": "assertText",
    "assertInnerText": "assertText",
    "SwitchIframe": "switchFrame",
    "screenshot": "captureScreenshot",
    "Screenshot": "captureScreenshot",
    "outputContentToFile": "dumpContent",
    "customFunc": "custom",
}

# Legacy keys that all carry the action's free-form ``value``.
_VALUE_KEYS = ("url", "inputText", "filename", "hook", "customFunc")

_TYPE_KEYS = ("type", "actionType", "action")


def _tag_key(data: Dict[str, Any]) -> str | None:
    for key in _TYPE_KEYS:
        if key in data:
            return key
    return None


def _is_flat_entry(entry: Any) -> bool:
    return isinstance(entry, dict) and "actions" not in entry and _tag_key(entry) is not None

def normalize_matcher(value: Any) -> Any:
    """Accept ``{"exact": ...}`` / ``{"pattern": ...}`` shorthands."""

    if isinstance(value, str):
        raise ValueError("matcher must declare its semantics: use {'exact': ...} or {'pattern': ...}")
    if isinstance(value, dict) and "kind" not in value:
        for kind in ("exact", "pattern"):
            if kind in value:
                return {"kind": kind, "value": value[kind]}
    return value


def normalize_action(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    data = dict(value)
    key = _tag_key(data)
    if key is not None and key != "type":
        data["type"] = data.pop(key)
    tag = data.get("type")
    if isinstance(tag, str):
        data["type"] = TAG_ALIASES.get(tag, tag)

    for legacy in _VALUE_KEYS:
        if legacy in data:
            legacy_value = data.pop(legacy)
            data.setdefault("value", legacy_value)

    if "iframe" in data:
        data.setdefault("frame", data.pop("iframe"))
    if "iframeId" in data:
        ref = data.pop("iframeId")
        # Selenium counts child frames only; index 0 here is the main document.
        if isinstance(ref, int) and not isinstance(ref, bool) and ref >= 0:
            ref += 1
        data.setdefault("frame", ref)

    # Older scenarios named screenshots by suffix and wrote them elsewhere;
    # the output directory is always the run's own now.
    suffix = data.pop("suffix", None)
    data.pop("outputFolder", None)
    if suffix is not None and data.get("type") == "captureScreenshot":
        data.setdefault("value", f"screenshot-{suffix}.png")

    if "matchRegex" in data:
        data.setdefault("expected", {"kind": "pattern", "value": data.pop("matchRegex")})
    if "textEqualsTo" in data:
        data.setdefault("expected", {"kind": "exact", "value": data.pop("textEqualsTo")})
    return data


def normalize_step(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    data = dict(value)
    if _is_flat_entry(data):
        # Flat dialect: every entry of ``steps`` is a single action.
        return {"name": data.get("log") or data.get("label") or "", "actions": [data]}
    if data.get("actions") is None:
        data["actions"] = []
    return data


def _carry_frame_selection(entries: List[Any]) -> List[Any]:
    """Pin the frame chosen by a flat ``SwitchIframe`` onto the entries after it.

    In the flat dialect every entry becomes its own step, while a frame
    switch used to stay in effect until the next one.
    """

    current: Any = None
    carried: List[Any] = []
    for entry in entries:
        if not _is_flat_entry(entry):
            current = None
            carried.append(entry)
            continue
        data = normalize_action(entry)
        if data.get("type") == "switchFrame":
            current = data.get("frame")
        elif current is not None and "frame" not in data:
            data["frame"] = current
        carried.append(data)
    return carried


def normalize_scenario(value: Any) -> Any:
    if isinstance(value, list):
        value = {"steps": value}
    if isinstance(value, dict) and isinstance(value.get("steps"), list):
        value = dict(value)
        value["steps"] = _carry_frame_selection(value["steps"])
    return value
