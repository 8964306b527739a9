from __future__ import annotations

"""Quiz history entries and the end-of-quiz report."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .skill_state import SkillState


@dataclass(frozen=True)
class HistoryEntry:
    state: SkillState
    question_id: int
    description: str
    correct: bool

    def to_json(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_json(),
            "questionID": self.question_id,
            "description": self.description,
            "correct": self.correct,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "HistoryEntry":
        state_obj = data.get("state")
        return cls(
            state=SkillState.from_json(state_obj if isinstance(state_obj, dict) else None),
            question_id=int(data.get("questionID", -1)),
            description=str(data.get("description", "")),
            correct=bool(data.get("correct", False)),
        )


@dataclass
class QuizReport:
    score: float = 0.0
    accuracy: float = 0.0
    total_questions: int = 0
    correct_answers: int = 0
    history: List[HistoryEntry] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "score": float(self.score),
            "accuracy": float(self.accuracy),
            "totalQuestions": int(self.total_questions),
            "correctAnswers": int(self.correct_answers),
            "history": [entry.to_json() for entry in self.history],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QuizReport":
        history = data.get("history", [])
        return cls(
            score=float(data.get("score", 0.0)),
            accuracy=float(data.get("accuracy", 0.0)),
            total_questions=int(data.get("totalQuestions", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            history=[HistoryEntry.from_json(h) for h in history if isinstance(h, dict)] if isinstance(history, list) else [],
        )


def format_summary(report: QuizReport) -> str:
    """Return the human-readable end-of-quiz message."""
    lines = [
        "Quiz complete!",
        "",
        f"Score: {report.score:g}",
        f"Accuracy: {report.accuracy:.0f}%",
        f"Questions Answered: {report.total_questions}",
        f"Correct Answers: {report.correct_answers}",
    ]
    return "\n".join(lines)
