from __future__ import annotations

"""Durable JSON persistence for the learner's Q-table and skill state.

Document shape (other top-level sections are kept as-is)::

    {
      "qtable": {
        "newUser": true,
        "table": {"[0,0,0]": {"[1001]": 0.25}},
        "userState": {"notes": 0, "chords": 0, "scales": 0}
      }
    }
"""

import json
from pathlib import Path
from typing import Any, Dict

from ..quiz.qtable import QTable, decode_table, encode_table
from ..quiz.report import QuizReport
from ..quiz.skill_state import SkillState

DATA_FILE = "data.json"


def _default_qtable_section() -> Dict[str, Any]:
    return {"newUser": True, "table": {}, "userState": SkillState().to_json()}


def _default_document() -> Dict[str, Any]:
    return {"qtable": _default_qtable_section()}


class DataStore:
    """Load/save the adaptive quiz's cross-session memory in one JSON file."""

    def __init__(self, path: str | Path) -> None:
        p = Path(path)
        self.path = p / DATA_FILE if p.suffix != ".json" else p
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _default_document()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"WARNING: Could not read {self.path} ({e}); starting from defaults.")
            return _default_document()
        if not isinstance(data, dict):
            print(f"WARNING: Unexpected content in {self.path}; starting from defaults.")
            return _default_document()
        if not isinstance(data.get("qtable"), dict):
            data["qtable"] = _default_qtable_section()
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    @property
    def _section(self) -> Dict[str, Any]:
        return self._data.setdefault("qtable", _default_qtable_section())

    def load_qtable(self) -> QTable:
        return decode_table(self._section.get("table", {}))

    def save_qtable(self, table: QTable) -> None:
        self._section["table"] = encode_table(table)
        self._section["newUser"] = False
        self._save()

    def load_skill_state(self) -> SkillState:
        state = self._section.get("userState")
        try:
            return SkillState.from_json(state if isinstance(state, dict) else None)
        except (TypeError, ValueError):
            print(f"WARNING: Invalid userState {state!r} in {self.path}; using {SkillState().to_key()}.")
            return SkillState()

    def save_skill_state(self, state: SkillState) -> None:
        self._section["userState"] = state.to_json()
        self._save()

    def is_new_user(self) -> bool:
        # Anything but a JSON true (or a missing flag) marks a returning user
        return self._section.get("newUser", True) is True

    def set_new_user(self, is_new: bool) -> None:
        self._section["newUser"] = bool(is_new)
        self._save()

    def reset(self) -> None:
        """Forget everything learned: remove the data file."""
        if self.path.exists():
            self.path.unlink()
        self._data = _default_document()


def save_quiz_report(path: str | Path, report: QuizReport) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(report.to_json(), f, indent=2)


def load_quiz_report(path: str | Path) -> QuizReport:
    """Read a quiz report; missing or invalid files give an empty report."""
    p = Path(path)
    if not p.exists():
        return QuizReport()
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return QuizReport()
    if not isinstance(data, dict):
        return QuizReport()
    return QuizReport.from_json(data)
