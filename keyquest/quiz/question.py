from __future__ import annotations

"""Question records and the question-bank loader."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .skill_state import Domain

NOTES_TOPIC = 101
CHORD_TOPICS = (102, 103)
FIRST_SCALE_TOPIC = 104

QuestionBank = Dict[int, "Question"]


def skill_domain(topic_id: int) -> Domain | None:
    """Map a topic id onto the skill domain it trains.

    101 -> notes, 102..103 -> chords, >=104 -> scales. Anything below 101
    belongs to no domain.
    """
    if topic_id == NOTES_TOPIC:
        return "notes"
    if CHORD_TOPICS[0] <= topic_id <= CHORD_TOPICS[1]:
        return "chords"
    if topic_id >= FIRST_SCALE_TOPIC:
        return "scales"
    return None


@dataclass(frozen=True)
class Question:
    question_id: int = -1
    topic_id: int = 0
    difficulty: int = 0
    title: str = ""
    description: str = ""
    expected_input: str = ""
    topic_name: str = ""

    @property
    def domain(self) -> Domain | None:
        return skill_domain(self.topic_id)

    def is_empty(self) -> bool:
        return self.question_id < 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "questionID": self.question_id,
            "topicID": self.topic_id,
            "Title": self.title,
            "Description": self.description,
            "ExpectedInput": self.expected_input,
            "difficulty": self.difficulty,
            "topicName": self.topic_name,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any], *, topic_id: int | None = None, topic_name: str | None = None) -> "Question":
        return cls(
            question_id=int(data.get("questionID", -1)),
            topic_id=int(topic_id if topic_id is not None else data.get("topicID", 0)),
            difficulty=int(data.get("difficulty", 0)),
            title=str(data.get("Title", "")),
            description=str(data.get("Description", "")),
            expected_input=str(data.get("ExpectedInput", "")),
            topic_name=str(topic_name if topic_name is not None else data.get("topicName", "")),
        )


EMPTY_QUESTION = Question()


def parse_question_bank(data: Any) -> QuestionBank:
    """Build ``{questionID: Question}`` from the topics document.

    Non-object topics and questions are skipped; a document without a
    ``topics`` array yields an empty bank.
    """
    bank: QuestionBank = {}
    if not isinstance(data, dict) or not isinstance(data.get("topics"), list):
        return bank
    for topic in data["topics"]:
        if not isinstance(topic, dict):
            continue
        topic_id = int(topic.get("topicID", 0))
        topic_name = str(topic.get("topicName", ""))
        questions = topic.get("questions")
        if not isinstance(questions, list):
            continue
        for q in questions:
            if not isinstance(q, dict):
                continue
            question = Question.from_json(q, topic_id=topic_id, topic_name=topic_name)
            bank[question.question_id] = question
    return bank


def load_question_bank(path: str | Path) -> QuestionBank:
    """Load a question bank JSON file. Missing or invalid files give an empty bank."""
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}
    return parse_question_bank(data)


def default_question_bank_path() -> Path:
    return Path(__file__).resolve().parent.parent / "resources" / "questionBank.json"
