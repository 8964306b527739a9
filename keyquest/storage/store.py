from __future__ import annotations

"""Append-only Parquet log of finished quizzes (one row per answer, one per session)."""

from pathlib import Path
from typing import Sequence

import pandas as pd

from .schema import ANSWER_DTYPES, SESSION_DTYPES, AnswerRow, QuizSessionRow

ANSWERS_FILE = "answers.parquet"
SESSIONS_FILE = "sessions.parquet"


def _empty_df(dtypes: dict) -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})


def _fix_dtypes(df: pd.DataFrame, dtypes: dict) -> pd.DataFrame:
    for col, dt in dtypes.items():
        if col not in df.columns:
            df[col] = pd.Series(pd.NA, index=df.index)
        df[col] = df[col].astype(dt)
    return df[list(dtypes.keys())]


def init_store(data_dir: Path) -> None:
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, dtypes in ((ANSWERS_FILE, ANSWER_DTYPES), (SESSIONS_FILE, SESSION_DTYPES)):
        f = data_dir / name
        if not f.exists():
            _empty_df(dtypes).to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def validate_records(records: Sequence[AnswerRow | dict]) -> pd.DataFrame:
    """Validate answer rows and return them as a typed DataFrame."""
    if not isinstance(records, (list, tuple)):
        raise TypeError("records must be a list[AnswerRow]")
    rows = [r if isinstance(r, AnswerRow) else AnswerRow.model_validate(r) for r in records]
    if not rows:
        return _empty_df(ANSWER_DTYPES)
    df = pd.DataFrame([r.model_dump() for r in rows])
    return _fix_dtypes(df, ANSWER_DTYPES)


def _append(df_new: pd.DataFrame, f: Path, dtypes: dict) -> None:
    if f.exists():
        df_old = pd.read_parquet(f, engine="pyarrow")
    else:
        df_old = _empty_df(dtypes)
    frames = [_fix_dtypes(d.copy(), dtypes) for d in (df_old, df_new) if not d.empty]
    combined = pd.concat(frames, ignore_index=True) if frames else _empty_df(dtypes)
    combined = _fix_dtypes(combined, dtypes).drop_duplicates()
    f.parent.mkdir(parents=True, exist_ok=True)
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def append_answers(df_new: pd.DataFrame, data_dir: Path) -> None:
    _append(df_new, Path(data_dir) / ANSWERS_FILE, ANSWER_DTYPES)


def append_session(row: QuizSessionRow | dict, data_dir: Path) -> None:
    rec = row if isinstance(row, QuizSessionRow) else QuizSessionRow.model_validate(row)
    df_new = _fix_dtypes(pd.DataFrame([rec.model_dump()]), SESSION_DTYPES)
    f = Path(data_dir) / SESSIONS_FILE
    if f.exists():
        df = _fix_dtypes(pd.read_parquet(f, engine="pyarrow"), SESSION_DTYPES)
        # Re-finishing a session replaces its row
        df = df[df["session_id"] != rec.session_id]
        if not df.empty:
            df_new = pd.concat([df, df_new], ignore_index=True)
    f.parent.mkdir(parents=True, exist_ok=True)
    df_new.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_answers(data_dir: Path) -> pd.DataFrame:
    f = Path(data_dir) / ANSWERS_FILE
    if not f.exists():
        return _empty_df(ANSWER_DTYPES)
    df = pd.read_parquet(f, engine="pyarrow")
    return _fix_dtypes(df, ANSWER_DTYPES).sort_values(["session_start", "seq"], kind="stable").reset_index(drop=True)


def load_sessions(data_dir: Path) -> pd.DataFrame:
    f = Path(data_dir) / SESSIONS_FILE
    if not f.exists():
        return _empty_df(SESSION_DTYPES)
    df = pd.read_parquet(f, engine="pyarrow")
    return _fix_dtypes(df, SESSION_DTYPES).sort_values("session_start", kind="stable").reset_index(drop=True)
