from __future__ import annotations

from typing import Sequence

from keyquest.quiz.question import Question


class ScriptedRandom:
    """Stand-in for random.Random with fixed draws.

    ``random()`` cycles through ``values``; ``randrange`` returns ``group``
    (mod n); ``choice`` returns the first element.
    """

    def __init__(self, values: Sequence[float] = (0.0,), group: int = 0) -> None:
        self.values = list(values)
        self.group = group
        self._i = 0

    def random(self) -> float:
        v = self.values[self._i % len(self.values)]
        self._i += 1
        return v

    def randrange(self, n: int) -> int:
        return self.group % n

    def choice(self, seq):
        return seq[0]


EXPLORE = 0.0  # below every epsilon tier
EXPLOIT = 0.99  # above every epsilon tier


def q(qid: int, topic: int, difficulty: int = 0, expected: str = "C4", description: str | None = None) -> Question:
    return Question(
        question_id=qid,
        topic_id=topic,
        difficulty=difficulty,
        title=f"Q{qid}",
        description=description if description is not None else f"question {qid}",
        expected_input=expected,
    )


def bank(*questions: Question) -> dict[int, Question]:
    return {x.question_id: x for x in questions}
