from .schema import ANSWER_DTYPES, SESSION_DTYPES, AnswerRow, QuizSessionRow
from .data_store import DataStore, load_quiz_report, save_quiz_report
from .store import (
    init_store,
    validate_records,
    append_answers,
    append_session,
    load_answers,
    load_sessions,
)

__all__ = [
    "ANSWER_DTYPES",
    "SESSION_DTYPES",
    "AnswerRow",
    "QuizSessionRow",
    "DataStore",
    "load_quiz_report",
    "save_quiz_report",
    "init_store",
    "validate_records",
    "append_answers",
    "append_session",
    "load_answers",
    "load_sessions",
]
