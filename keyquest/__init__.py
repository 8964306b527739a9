"""KeyQuest package initialization.

Adaptive piano-theory quizzes: a Q-learning engine picks the next question
from the learner's skill levels in notes, chords, and scales.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
