from __future__ import annotations

"""Tabular views over the Q-table and answer history."""

from typing import Iterable, Mapping

import numpy as np
import pandas as pd

from ..quiz.question import skill_domain
from ..quiz.report import HistoryEntry
from ..quiz.skill_state import DOMAINS, SkillState

QTABLE_COLUMNS = ["state", "notes", "chords", "scales", "question_id", "q_value"]


def qtable_frame(table: Mapping[SkillState, Mapping[int, float]]) -> pd.DataFrame:
    """Long format: one row per (state, question) entry, sorted by state then id."""
    rows = [
        (state.to_key(), state.notes, state.chords, state.scales, int(qid), float(value))
        for state in sorted(table)
        for qid, value in sorted(table[state].items())
    ]
    df = pd.DataFrame(rows, columns=QTABLE_COLUMNS)
    return df.astype({"notes": "int8", "chords": "int8", "scales": "int8", "question_id": "int64", "q_value": "float64"})


def greedy_policy(table: Mapping[SkillState, Mapping[int, float]]) -> pd.DataFrame:
    """Best recorded question per state; the lowest id wins ties."""
    df = qtable_frame(table)
    if df.empty:
        return df.assign(n_actions=pd.Series(dtype="int64"))
    counts = df.groupby("state", sort=False)["question_id"].transform("size")
    df = df.assign(n_actions=counts.astype("int64"))
    best = df.loc[df.groupby("state", sort=False)["q_value"].idxmax()]
    return best.reset_index(drop=True)


def history_frame(history: Iterable[HistoryEntry]) -> pd.DataFrame:
    rows = [
        {
            "seq": i,
            "question_id": h.question_id,
            "description": h.description,
            "correct": bool(h.correct),
            "notes": h.state.notes,
            "chords": h.state.chords,
            "scales": h.state.scales,
        }
        for i, h in enumerate(history, start=1)
    ]
    return pd.DataFrame(rows, columns=["seq", "question_id", "description", "correct", "notes", "chords", "scales"])


def domain_accuracy(answers: pd.DataFrame) -> pd.DataFrame:
    """Asked / correct / accuracy (%) per skill domain.

    Accepts the Parquet answer log (has ``domain``) or any frame with
    ``topic_id`` and ``correct`` columns. Domains never asked report 0.
    """
    df = answers.copy()
    if "domain" not in df.columns:
        df["domain"] = df["topic_id"].map(lambda t: skill_domain(int(t)))
    df = df[df["domain"].notna()]
    correct = df["correct"].astype("float64")
    out = (
        pd.DataFrame({"domain": df["domain"].astype("string"), "correct": correct})
        .groupby("domain")["correct"]
        .agg(asked="size", correct="sum")
        .reindex(list(DOMAINS), fill_value=0)
    )
    asked = out["asked"].to_numpy(dtype="float64")
    out["accuracy"] = np.divide(
        out["correct"].to_numpy(dtype="float64") * 100.0,
        asked,
        out=np.zeros_like(asked),
        where=asked > 0,
    )
    out["asked"] = out["asked"].astype("int64")
    out["correct"] = out["correct"].astype("int64")
    out.index.name = "domain"
    return out.reset_index()
