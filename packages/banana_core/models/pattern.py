"""Chop sequencer pattern and pad recording."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import COLUMNS, NUM_CHOPS


def _check_chop(chop_index: int) -> None:
    if not 0 <= chop_index < NUM_CHOPS:
        raise IndexError(f"Chop index out of range: {chop_index}")


@dataclass
class ChopPattern:
    """
    Per-step chop assignments, independent of the drum grid.

    Each step is either None (empty) or a chop index 0-15.
    """

    columns: int = COLUMNS
    steps: list[int | None] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.steps:
            self.steps = [None] * self.columns
        elif len(self.steps) != self.columns:
            raise ValueError(f"Pattern must have {self.columns} steps")
        for chop in self.steps:
            if chop is not None:
                _check_chop(chop)

    def chop_at(self, step: int) -> int | None:
        return self.steps[step]

    def set(self, step: int, chop_index: int | None) -> None:
        if not 0 <= step < self.columns:
            raise IndexError(f"Step out of range: {step}")
        if chop_index is not None:
            _check_chop(chop_index)
        self.steps[step] = chop_index

    def clear(self) -> None:
        self.steps = [None] * self.columns

    @property
    def is_empty(self) -> bool:
        return all(chop is None for chop in self.steps)

    def copy(self) -> ChopPattern:
        return ChopPattern(self.columns, list(self.steps))

    def to_dict(self) -> dict[str, Any]:
        return {"steps": list(self.steps)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChopPattern:
        steps = data.get("steps", [])
        return cls(columns=len(steps) or COLUMNS, steps=list(steps))


@dataclass(frozen=True, slots=True)
class PadHit:
    """A recorded chop trigger at a loop-relative time."""

    time: float
    chop_index: int

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "chop_index": self.chop_index}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PadHit:
        chop_index = int(data["chop_index"])
        _check_chop(chop_index)
        return cls(time=float(data["time"]), chop_index=chop_index)


@dataclass
class PadRecording:
    """Ordered chop triggers captured over one loop."""

    hits: list[PadHit] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.hits

    def append(self, hit: PadHit) -> None:
        self.hits.append(hit)

    def clear(self) -> None:
        self.hits = []

    def sort_hits(self) -> None:
        self.hits.sort(key=lambda h: h.time)

    def copy(self) -> PadRecording:
        return PadRecording(list(self.hits))

    def __len__(self) -> int:
        return len(self.hits)

    def to_dict(self) -> dict[str, Any]:
        return {"hits": [h.to_dict() for h in self.hits]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PadRecording:
        return cls([PadHit.from_dict(h) for h in data.get("hits", [])])
