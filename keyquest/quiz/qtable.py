from __future__ import annotations

"""Q-table helpers: lookups and the bracketed textual encoding used on disk.

On disk a table looks like::

    {"[0,1,0]": {"[1001]": 0.25, "[2003]": -0.25}, ...}
"""

import math
from typing import Any, Dict, Mapping

from .skill_state import SkillState

QTable = Dict[SkillState, Dict[int, float]]


def q_value(table: Mapping[SkillState, Mapping[int, float]], state: SkillState, question_id: int) -> float:
    return float(table.get(state, {}).get(question_id, 0.0))


def max_q(table: Mapping[SkillState, Mapping[int, float]], state: SkillState) -> float:
    """Best recorded value for ``state``; floors at 0.0 (also for all-negative rows)."""
    best = 0.0
    for value in table.get(state, {}).values():
        if value > best:
            best = value
    return best


def copy_table(table: Mapping[SkillState, Mapping[int, float]]) -> QTable:
    return {state: dict(actions) for state, actions in table.items()}


def action_key(question_id: int) -> str:
    return f"[{int(question_id)}]"


def parse_action_key(key: str) -> int:
    return int(key.strip().strip("[]"))


def encode_table(table: Mapping[SkillState, Mapping[int, float]]) -> Dict[str, Dict[str, float]]:
    out: Dict[str, Dict[str, float]] = {}
    for state in sorted(table):
        actions = table[state]
        out[state.to_key()] = {action_key(qid): float(actions[qid]) for qid in sorted(actions)}
    return out


def decode_table(data: Any) -> QTable:
    """Inverse of :func:`encode_table`.

    Malformed keys and non-finite values are skipped with a warning.
    """
    table: QTable = {}
    if not isinstance(data, dict):
        return table
    for state_key, actions in data.items():
        try:
            state = SkillState.from_key(str(state_key))
        except ValueError:
            print(f"WARNING: Skipping malformed Q-table state key {state_key!r}.")
            continue
        if not isinstance(actions, dict):
            continue
        for a_key, raw in actions.items():
            try:
                qid = parse_action_key(str(a_key))
                value = float(raw)
            except (TypeError, ValueError):
                print(f"WARNING: Skipping malformed Q-table entry {state_key}/{a_key}.")
                continue
            if not math.isfinite(value):
                print(f"WARNING: Skipping non-finite Q-value at {state_key}/{a_key}.")
                continue
            table.setdefault(state, {})[qid] = value
    return table
