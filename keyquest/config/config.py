from __future__ import annotations

"""Configuration loading and validation for KeyQuest.

YAML holds the application settings; the adaptive engine's hyperparameters
are validated into an :class:`EngineConfig` pydantic model.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..quiz.skill_state import clamp_level, DOMAINS


class EngineConfig(BaseModel):
    """Hyperparameters of the Q-learning question selector.

    - learning_rate / discount_factor: one-step Q-learning constants
    - correct_threshold / incorrect_threshold: streak points needed to
      promote / demote a skill domain
    - epsilon_by_level: exploration probability by average skill level,
      epsilon_default for levels not listed
    - correct_points / incorrect_penalty: session score deltas
    - difficulty_points: streak points earned per correct answer by difficulty
    """

    learning_rate: float = Field(0.1, gt=0, le=1)
    discount_factor: float = Field(0.9, ge=0, le=1)
    correct_threshold: int = Field(4, ge=1)
    incorrect_threshold: int = Field(4, ge=1)
    epsilon_by_level: Dict[int, float] = Field(default_factory=lambda: {0: 0.9, 1: 0.7})
    epsilon_default: float = Field(0.5, ge=0, le=1)
    correct_points: float = Field(10.0, ge=0)
    incorrect_penalty: float = Field(5.0, ge=0)
    difficulty_points: Dict[int, int] = Field(default_factory=lambda: {0: 1, 1: 2, 2: 3})

    @field_validator("epsilon_by_level")
    @classmethod
    def _epsilons_are_probabilities(cls, v: Dict[int, float]) -> Dict[int, float]:
        for level, eps in v.items():
            if not (0.0 <= float(eps) <= 1.0):
                raise ValueError(f"epsilon for level {level} must be in [0, 1]")
        return v

    @field_validator("difficulty_points")
    @classmethod
    def _points_positive(cls, v: Dict[int, int]) -> Dict[int, int]:
        if any(int(p) < 1 for p in v.values()):
            raise ValueError("difficulty points must be >= 1")
        return v

    def epsilon_for(self, avg_level: int) -> float:
        return float(self.epsilon_by_level.get(avg_level, self.epsilon_default))

    def points_for(self, difficulty: int) -> int:
        return int(self.difficulty_points.get(difficulty, 1))


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Could not parse config file {path}: {e}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Invalid values print a warning and fall back to their defaults.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    for section in ("quiz", "storage", "engine", "new_user"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    quiz = cfg["quiz"]
    storage = cfg["storage"]
    new_user = cfg["new_user"]

    quiz.setdefault("questions", 10)
    quiz.setdefault("question_bank", None)
    quiz.setdefault("report_path", "quiz_report.json")
    quiz.setdefault("chord_timeout_ms", 1000)

    storage.setdefault("data_dir", "./keyquest_data")
    storage.setdefault("history_enabled", True)

    try:
        questions = int(quiz["questions"])
    except (TypeError, ValueError):
        questions = 0
    if questions < 1:
        print(f"WARNING: Invalid quiz.questions '{quiz['questions']}', using 10.")
        questions = 10
    quiz["questions"] = questions

    try:
        cfg["engine"] = engine_config_from(cfg).model_dump()
    except ValidationError as e:
        print(f"WARNING: Invalid engine settings ({e.error_count()} errors), using defaults.")
        cfg["engine"] = EngineConfig().model_dump()

    for domain in DOMAINS:
        raw = new_user.get(domain, 0)
        try:
            level = int(raw)
        except (TypeError, ValueError):
            print(f"WARNING: Invalid new_user.{domain} '{raw}', using 0.")
            level = 0
        if clamp_level(level) != level:
            print(f"WARNING: new_user.{domain}={level} out of range, clamping to [0, 2].")
        new_user[domain] = clamp_level(level)

    storage["history_enabled"] = bool(storage["history_enabled"])
    return cfg


def engine_config_from(cfg: Dict[str, Any]) -> EngineConfig:
    """Build the engine hyperparameters from a config dictionary's ``engine`` section."""
    return EngineConfig.model_validate(cfg.get("engine") or {})
