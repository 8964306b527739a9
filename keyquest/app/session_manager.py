from __future__ import annotations

"""Quiz Session: orchestrates the adaptive engine, grading, and persistence.

Front-end agnostic: a CLI or GUI subscribes to the event bus and feeds
played notes into :meth:`QuizSession.submit_answer`.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from ..config.config import engine_config_from
from ..quiz.engine import AdaptiveEngine
from ..quiz.question import Question, QuestionBank, default_question_bank_path, load_question_bank
from ..quiz.report import QuizReport
from ..quiz.skill_state import SkillState
from ..storage.data_store import DataStore, save_quiz_report
from ..storage.schema import AnswerRow, QuizSessionRow
from ..storage.store import append_answers, append_session, init_store, validate_records
from ..theory.notes import group_chords, is_correct_answer
from ..util.randomness import make_rng
from .events import QUIZ_FINISHED, QUIZ_REFRESH, EventBus
from .explain import trace as xtrace


class QuizNotStartedError(RuntimeError):
    pass


@dataclass(frozen=True)
class SessionContext:
    session_id: str
    started_at: datetime
    num_questions: int
    data_dir: Path
    report_path: Path
    history_enabled: bool
    chord_timeout_ms: int


@dataclass(frozen=True)
class QuizRefresh:
    score: float
    title: str
    description: str
    accuracy: float


class QuizSession:
    def __init__(
        self,
        cfg: Dict[str, Any],
        *,
        store: Optional[DataStore] = None,
        question_bank: Optional[QuestionBank] = None,
        events: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cfg = cfg
        quiz = cfg.get("quiz", {})
        storage = cfg.get("storage", {})
        data_dir = Path(storage.get("data_dir", "./keyquest_data"))
        self.store = store or DataStore(data_dir)
        self.events = events or EventBus()
        self._bank = question_bank
        self._rng = rng
        self.ctx = SessionContext(
            session_id=str(uuid4()),
            started_at=datetime.now(timezone.utc),
            num_questions=int(quiz.get("questions", 10)),
            data_dir=data_dir,
            report_path=Path(quiz.get("report_path", "quiz_report.json")),
            history_enabled=bool(storage.get("history_enabled", True)),
            chord_timeout_ms=int(quiz.get("chord_timeout_ms", 1000)),
        )
        self.engine: Optional[AdaptiveEngine] = None
        self._current_id: Optional[int] = None
        self._answered = 0
        self._report: Optional[QuizReport] = None

    # --- lifecycle ---

    def _load_bank(self) -> QuestionBank:
        if self._bank is not None:
            return self._bank
        path = self.cfg.get("quiz", {}).get("question_bank") or default_question_bank_path()
        return load_question_bank(path)

    def _initial_state(self, new_user_levels: Optional[SkillState]) -> SkillState:
        if not self.store.is_new_user():
            return self.store.load_skill_state()
        state = new_user_levels if new_user_levels is not None else SkillState.from_json(self.cfg.get("new_user"))
        self.store.save_skill_state(state)
        self.store.set_new_user(False)
        xtrace("new_user", state.to_json())
        return state

    def start(self, new_user_levels: Optional[SkillState] = None) -> Question:
        """Build the engine from persisted memory and return the first question.

        ``new_user_levels`` seeds a first-run learner (default: the configured
        ``new_user`` levels); returning learners resume their saved state.
        Raises ValueError if no questions could be loaded.
        """
        bank = self._load_bank()
        if not bank:
            raise ValueError("Failed to load questions for the quiz.")
        state = self._initial_state(new_user_levels)
        self.engine = AdaptiveEngine(
            bank,
            self.store.load_qtable(),
            state,
            config=engine_config_from(self.cfg),
            rng=self._rng or make_rng(),
            events=self.events,
        )
        self._answered = 0
        self._report = None
        xtrace("session_started", {"session": self.ctx.session_id, "state": state.to_key(), "questions": len(bank)})
        return self._advance()

    def _require_engine(self) -> AdaptiveEngine:
        if self.engine is None:
            raise QuizNotStartedError("call start() first")
        return self.engine

    def _advance(self) -> Question:
        engine = self._require_engine()
        self._current_id = engine.select_next_question()
        question = engine.get_question(self._current_id)
        self.events.emit(
            QUIZ_REFRESH,
            QuizRefresh(engine.score, question.title, question.description, engine.accuracy),
        )
        return question

    @property
    def finished(self) -> bool:
        return self._report is not None

    @property
    def answered(self) -> int:
        return self._answered

    def current_question(self) -> Question:
        engine = self._require_engine()
        if self._current_id is None:
            raise QuizNotStartedError("no question has been selected")
        return engine.get_question(self._current_id)

    def submit_answer(self, notes: Iterable[str]) -> bool:
        """Grade the played notes against the current question and move on.

        Returns whether the answer was correct. The quiz finishes on its own
        after the configured number of questions.
        """
        engine = self._require_engine()
        if self.finished:
            raise QuizNotStartedError("quiz is already finished")
        question = self.current_question()
        tokens: List[str] = list(notes)
        correct = is_correct_answer(tokens, question.expected_input)
        xtrace("graded", {"id": question.question_id, "answer": "-".join(tokens), "correct": correct})
        engine.evaluate_response(question.question_id, correct)
        self._answered += 1
        if self._answered >= self.ctx.num_questions:
            self.finish()
        else:
            self._advance()
        return correct

    def submit_presses(self, presses: Iterable[Tuple[int, float]]) -> List[bool]:
        """Grade timed keyboard presses ((midi, time_ms)).

        Presses split into chords at gaps longer than the chord timeout; each
        chord answers one question until the quiz finishes.
        """
        results: List[bool] = []
        for chord in group_chords(presses, self.ctx.chord_timeout_ms):
            if self.finished:
                break
            results.append(self.submit_answer(chord))
        return results

    def finish(self) -> QuizReport:
        """Persist the Q-table, skill state, report and history. Idempotent."""
        if self._report is not None:
            return self._report
        engine = self._require_engine()
        report = engine.build_report()
        self.store.save_qtable(engine.get_q_table())
        self.store.save_skill_state(engine.current_state)
        save_quiz_report(self.ctx.report_path, report)
        if self.ctx.history_enabled and report.history:
            self._append_history(engine, report)
        self._report = report
        xtrace("session_ended", {"score": report.score, "accuracy": report.accuracy, "total": report.total_questions})
        self.events.emit(QUIZ_FINISHED, report)
        return report

    def _append_history(self, engine: AdaptiveEngine, report: QuizReport) -> None:
        rows: List[AnswerRow] = []
        for seq, entry in enumerate(report.history, start=1):
            q = engine.get_question(entry.question_id)
            if q.domain is None:
                continue
            rows.append(
                AnswerRow(
                    session_id=self.ctx.session_id,
                    session_start=self.ctx.started_at,
                    seq=seq,
                    question_id=entry.question_id,
                    topic_id=q.topic_id,
                    domain=q.domain,
                    difficulty=q.difficulty,
                    correct=entry.correct,
                    notes=entry.state.notes,
                    chords=entry.state.chords,
                    scales=entry.state.scales,
                )
            )
        session_row = QuizSessionRow(
            session_id=self.ctx.session_id,
            session_start=self.ctx.started_at,
            score=report.score,
            accuracy=report.accuracy,
            total=report.total_questions,
            correct=report.correct_answers,
        )
        try:
            init_store(self.ctx.data_dir)
            append_answers(validate_records(rows), self.ctx.data_dir)
            append_session(session_row, self.ctx.data_dir)
        except (OSError, ImportError, ValueError) as e:
            # Q-table and skill state are already on disk at this point
            print(f"WARNING: Could not write quiz history to {self.ctx.data_dir}: {e}")
