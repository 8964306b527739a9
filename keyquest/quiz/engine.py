from __future__ import annotations

"""Adaptive question selection with tabular Q-learning.

The engine keeps a Q-table keyed by the learner's :class:`SkillState` and the
question id, picks the next question epsilon-greedily and updates its values
after every answer. Skill levels move one step at a time once a per-question
streak crosses its threshold.

One engine serves one quiz attempt from one thread; callers alternate
``select_next_question`` and ``evaluate_response``.
"""

import random
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Set

from ..app.events import ANSWER_FEEDBACK, EventBus
from ..app.explain import trace as xtrace
from ..config.config import EngineConfig
from .qtable import QTable, copy_table, max_q, q_value
from .question import EMPTY_QUESTION, Question, QuestionBank
from .report import HistoryEntry, QuizReport
from .skill_state import DOMAINS, SkillState

REWARD_LEVEL_UP = 5.0
REWARD_CORRECT = 2.5
REWARD_INCORRECT = -2.5

# Below any reachable Q-value
_BEST_VALUE_SENTINEL = -1e9


def compute_reward(before: SkillState, after: SkillState, correct: bool) -> float:
    if correct and after.improved_over(before):
        return REWARD_LEVEL_UP
    if correct:
        return REWARD_CORRECT
    return REWARD_INCORRECT


class AdaptiveEngine:
    def __init__(
        self,
        question_bank: Mapping[int, Question],
        q_table: Optional[QTable] = None,
        initial_state: Optional[SkillState] = None,
        *,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._bank: QuestionBank = dict(question_bank)
        self._q_table: QTable = q_table if q_table is not None else {}
        self._state = initial_state or SkillState()
        self._rng = rng or random.Random()
        self._events = events

        self._correct_streak: Dict[int, int] = defaultdict(int)
        self._incorrect_streak: Dict[int, int] = defaultdict(int)
        self._asked: Set[int] = set()
        self._history: List[HistoryEntry] = []

        self._score = 0.0
        self._correct_answers = 0
        self._total_questions = 0

    # --- selection ---

    def select_candidate_questions(self, allow_stretch: bool) -> Set[int]:
        """Ids whose difficulty fits the current level of their skill domain.

        With ``allow_stretch`` a question may sit one level above the learner.
        """
        stretch = 1 if allow_stretch else 0
        valid: Set[int] = set()
        for qid, q in self._bank.items():
            domain = q.domain
            if domain is not None and q.difficulty <= self._state.level(domain) + stretch:
                valid.add(qid)
        return valid

    def select_next_question(self) -> int:
        """Pick the next question id epsilon-greedily.

        The same coin flip decides explore vs. exploit and whether the
        candidate pool may stretch one difficulty level up. An empty bank
        yields the empty question's id (-1).
        """
        if not self._bank:
            xtrace("question_selected", {"mode": "fallback", "id": EMPTY_QUESTION.question_id, "pool": 0})
            return EMPTY_QUESTION.question_id

        epsilon = self.config.epsilon_for(self._state.average_level())
        explore = self._rng.random() < epsilon

        candidates = sorted(self.select_candidate_questions(allow_stretch=explore))
        pool = [qid for qid in candidates if qid not in self._asked]
        if not pool:
            # Everything eligible was asked already: start repeating
            self._asked.clear()
            pool = candidates
        if not pool:
            qid = min(self._bank)
            xtrace("question_selected", {"mode": "fallback", "id": qid, "pool": 0})
            return qid

        qid = self._explore(pool) if explore else self._exploit(pool)
        xtrace(
            "question_selected",
            {"mode": "explore" if explore else "exploit", "id": qid, "pool": len(pool), "state": self._state.to_key()},
        )
        return qid

    def _explore(self, pool: List[int]) -> int:
        groups: Dict[str, List[int]] = {d: [] for d in DOMAINS}
        for qid in pool:
            domain = self._bank[qid].domain
            if domain is not None:
                groups[domain].append(qid)
        group = groups[DOMAINS[self._rng.randrange(len(DOMAINS))]]
        if group:
            return self._rng.choice(group)
        return self._rng.choice(pool)

    def _exploit(self, pool: List[int]) -> int:
        best_qid = pool[0]
        best_value = _BEST_VALUE_SENTINEL
        for qid in pool:
            value = q_value(self._q_table, self._state, qid)
            if value > best_value:
                best_qid, best_value = qid, value
        return best_qid

    # --- learning ---

    def evaluate_response(self, question_id: int, correct: bool) -> None:
        """Record an answer, move skill levels and update the Q-table.

        An id outside the bank is recorded against the empty question and
        moves no skill level.
        """
        question = self.get_question(question_id)
        self._history.append(HistoryEntry(self._state, question_id, question.description, bool(correct)))

        self._total_questions += 1
        if correct:
            self._correct_answers += 1
            self._score += self.config.correct_points
        else:
            self._score = max(0.0, self._score - self.config.incorrect_penalty)

        if self._events is not None:
            self._events.emit(ANSWER_FEEDBACK, bool(correct))

        before = self._state
        self._state = self.update_skill_state(question_id, correct, before)
        reward = compute_reward(before, self._state, correct)
        self.update_q_value(before, question_id, reward, self._state)
        self._asked.add(question_id)

    def update_skill_state(self, question_id: int, correct: bool, state: SkillState) -> SkillState:
        """Advance the streak counters for ``question_id`` and return the resulting state.

        Correct answers add difficulty-weighted points; wrong answers count
        one each. Crossing a threshold moves the question's domain by one
        level and resets that streak.
        """
        question = self.get_question(question_id)
        domain = question.domain
        new_state = state
        if correct:
            self._correct_streak[question_id] += self.config.points_for(question.difficulty)
            self._incorrect_streak[question_id] = 0
            if self._correct_streak[question_id] >= self.config.correct_threshold:
                if domain is not None:
                    new_state = state.shifted(domain, +1)
                self._correct_streak[question_id] = 0
        else:
            self._incorrect_streak[question_id] += 1
            self._correct_streak[question_id] = 0
            if self._incorrect_streak[question_id] >= self.config.incorrect_threshold:
                if domain is not None:
                    new_state = state.shifted(domain, -1)
                self._incorrect_streak[question_id] = 0
        if new_state != state:
            xtrace("skill_changed", {"from": state.to_key(), "to": new_state.to_key(), "question": question_id})
        return new_state

    def compute_reward(self, before: SkillState, after: SkillState, correct: bool) -> float:
        return compute_reward(before, after, correct)

    def update_q_value(self, state: SkillState, question_id: int, reward: float, next_state: SkillState) -> None:
        row = self._q_table.setdefault(state, {})
        current = row.get(question_id, 0.0)
        next_max = max_q(self._q_table, next_state)
        row[question_id] = current + self.config.learning_rate * (
            reward + self.config.discount_factor * next_max - current
        )
        xtrace("qvalue_updated", {"state": state.to_key(), "id": question_id, "reward": reward, "q": row[question_id]})

    # --- accessors ---

    @property
    def score(self) -> float:
        return self._score

    @property
    def total_questions(self) -> int:
        return self._total_questions

    @property
    def correct_answers(self) -> int:
        return self._correct_answers

    @property
    def accuracy(self) -> float:
        if self._total_questions == 0:
            return 0.0
        return self._correct_answers / self._total_questions * 100.0

    @property
    def current_state(self) -> SkillState:
        return self._state

    @property
    def history(self) -> List[HistoryEntry]:
        return list(self._history)

    @property
    def asked_this_session(self) -> Set[int]:
        return set(self._asked)

    def get_q_table(self) -> QTable:
        return copy_table(self._q_table)

    def get_q_value(self, state: SkillState, question_id: int) -> float:
        return q_value(self._q_table, state, question_id)

    def get_question(self, question_id: int) -> Question:
        return self._bank.get(question_id, EMPTY_QUESTION)

    def correct_streak(self, question_id: int) -> int:
        return self._correct_streak.get(question_id, 0)

    def incorrect_streak(self, question_id: int) -> int:
        return self._incorrect_streak.get(question_id, 0)

    def build_report(self) -> QuizReport:
        return QuizReport(
            score=self._score,
            accuracy=self.accuracy,
            total_questions=self._total_questions,
            correct_answers=self._correct_answers,
            history=self.history,
        )
