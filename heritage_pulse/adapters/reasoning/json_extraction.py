"""Recover a JSON object from free-text model output.

Reasoning models wrap their answer in ``<think>`` traces, markdown fences
or prose. This is the fallback path for replies produced without
structured output.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict

_THINK_RE = re.compile(r"<think>.*?(</think>|$)", re.DOTALL | re.IGNORECASE)
_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def strip_reasoning(text: str) -> str:
    """Remove ``<think>...</think>`` blocks, including an unterminated one."""
    return _THINK_RE.sub("", text).strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the JSON object embedded in ``text``.

    Tried in order: the whole text, each fenced code block, then the span
    from the first ``{`` to the last ``}``.

    Raises:
        ValueError: If no candidate parses to a JSON object.
    """
    if not text or not text.strip():
        raise ValueError("Model reply is empty")

    cleaned = strip_reasoning(text)
    candidates = [cleaned]
    candidates.extend(m.group(1).strip() for m in _FENCE_RE.finditer(cleaned))
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        candidates.append(cleaned[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise ValueError("No JSON object found in model reply")
