from __future__ import annotations

"""Schema constants and Pydantic models for the Parquet-backed quiz history."""

from datetime import datetime, timezone
from typing import Literal

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, field_validator, model_validator

from ..quiz.skill_state import DOMAINS

# --- Constants ---


def _cat_dtype(categories: tuple[str, ...]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


ANSWER_DTYPES = {
    "session_id": "string",
    # timezone-aware UTC timestamps
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "seq": "UInt16",
    "question_id": "Int32",
    "topic_id": "UInt16",
    "domain": _cat_dtype(DOMAINS),
    "difficulty": "UInt8",
    "correct": "boolean",
    "notes": "UInt8",
    "chords": "UInt8",
    "scales": "UInt8",
}

SESSION_DTYPES = {
    "session_id": "string",
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "score": "float32",
    "accuracy": "float32",
    "total": "UInt16",
    "correct": "UInt16",
}


def _ensure_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


# --- Pydantic models ---

class AnswerRow(BaseModel):
    """One answered question; levels are the learner's state when it was asked."""

    session_id: str
    session_start: datetime
    seq: int = Field(ge=1, le=65535)
    question_id: int
    topic_id: int = Field(ge=0, le=65535)
    domain: Literal["notes", "chords", "scales"]
    difficulty: int = Field(ge=0, le=255)
    correct: bool
    notes: int = Field(ge=0, le=2)
    chords: int = Field(ge=0, le=2)
    scales: int = Field(ge=0, le=2)

    @field_validator("session_start")
    @classmethod
    def _start_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)


class QuizSessionRow(BaseModel):
    session_id: str
    session_start: datetime
    score: float = Field(ge=0)
    accuracy: float = Field(ge=0, le=100)
    total: int = Field(ge=0, le=65535)
    correct: int = Field(ge=0, le=65535)

    @field_validator("session_start")
    @classmethod
    def _start_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)

    @model_validator(mode="after")
    def _correct_le_total(self) -> "QuizSessionRow":
        if self.correct > self.total:
            raise ValueError("correct must be <= total")
        return self
