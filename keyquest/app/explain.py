from __future__ import annotations

"""Explain Mode: one-line traces of the engine's decisions.

Turned on by ``keyquest quiz --explain`` or ``KEYQUEST_EXPLAIN=1``. Lines look
like ``[EXPLAIN] question_selected :: {"mode":"exploit","id":1001}``.
"""

import json
import os
from typing import Any, Dict

_ENABLED = os.environ.get("KEYQUEST_EXPLAIN", "") == "1"


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def _encode(value: Any) -> Any:
    # SkillState and friends render as their table key
    to_key = getattr(value, "to_key", None)
    if callable(to_key):
        return to_key()
    return str(value)


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    data = json.dumps(payload or {}, separators=(",", ":"), default=_encode)
    print(f"[EXPLAIN] {event} :: {data}")
