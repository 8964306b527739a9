from __future__ import annotations

"""Learner skill state: three bounded levels keyed into the Q-table."""

from dataclasses import dataclass, replace
from typing import Any, Dict, Literal

MIN_LEVEL = 0
MAX_LEVEL = 2

Domain = Literal["notes", "chords", "scales"]
DOMAINS: tuple[Domain, ...] = ("notes", "chords", "scales")


def clamp_level(value: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, int(value)))


@dataclass(frozen=True, order=True)
class SkillState:
    """Proficiency tuple (notes, chords, scales), each 0 (beginner) .. 2 (advanced).

    Field order gives the lexicographic notes -> chords -> scales ordering.
    Values are clamped on construction so no state outside [0, 2] exists.
    """

    notes: int = 0
    chords: int = 0
    scales: int = 0

    def __post_init__(self) -> None:
        for name in DOMAINS:
            object.__setattr__(self, name, clamp_level(getattr(self, name)))

    def level(self, domain: Domain) -> int:
        return getattr(self, domain)

    def with_level(self, domain: Domain, value: int) -> "SkillState":
        return replace(self, **{domain: clamp_level(value)})

    def shifted(self, domain: Domain, delta: int) -> "SkillState":
        """Return a copy with one domain moved by ``delta`` (clamped)."""
        return self.with_level(domain, self.level(domain) + delta)

    def average_level(self) -> int:
        return (self.notes + self.chords + self.scales) // 3

    def improved_over(self, before: "SkillState") -> bool:
        return any(self.level(d) > before.level(d) for d in DOMAINS)

    # --- serialization ---

    def to_key(self) -> str:
        return f"[{self.notes},{self.chords},{self.scales}]"

    @classmethod
    def from_key(cls, key: str) -> "SkillState":
        """Parse ``"[n,c,s]"``. Raises ValueError on malformed keys."""
        parts = key.strip().strip("[]").split(",")
        if len(parts) < 3:
            raise ValueError(f"Invalid skill state key: {key!r}")
        return cls(int(parts[0]), int(parts[1]), int(parts[2]))

    def to_json(self) -> Dict[str, int]:
        return {"notes": self.notes, "chords": self.chords, "scales": self.scales}

    @classmethod
    def from_json(cls, data: Dict[str, Any] | None) -> "SkillState":
        data = data or {}
        return cls(
            notes=int(data.get("notes", 0)),
            chords=int(data.get("chords", 0)),
            scales=int(data.get("scales", 0)),
        )
