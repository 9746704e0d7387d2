"""StatName, StatBlock and GrowthRates: the eight-attribute stat system."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from enum import StrEnum

from sigilgen.errors import InvariantViolationError


class StatName(StrEnum):
    """The eight heritable attributes, in canonical order."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    AGILITY = "agility"
    VITALITY = "vitality"
    ENDURANCE = "endurance"
    INTELLECT = "intellect"
    WISDOM = "wisdom"
    LUCK = "luck"

    @property
    def abbrev(self) -> str:
        """Three-letter display code (STR, DEX, ...)."""
        return _ABBREVIATIONS[self]


_ABBREVIATIONS = {
    StatName.STRENGTH: "STR",
    StatName.DEXTERITY: "DEX",
    StatName.AGILITY: "AGI",
    StatName.VITALITY: "VIT",
    StatName.ENDURANCE: "END",
    StatName.INTELLECT: "INT",
    StatName.WISDOM: "WIS",
    StatName.LUCK: "LCK",
}

STAT_NAMES: tuple[StatName, ...] = tuple(StatName)


@dataclass(frozen=True)
class StatBlock:
    """Eight integer attributes. Every value is at least 1."""

    strength: int
    dexterity: int
    agility: int
    vitality: int
    endurance: int
    intellect: int
    wisdom: int
    luck: int

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 1:
                msg = f"Stat '{f.name}' must be >= 1, got {value}"
                raise InvariantViolationError(msg)

    @classmethod
    def from_mapping(cls, values: Mapping[StatName | str, int]) -> StatBlock:
        """Build a block from a stat -> value mapping covering all eight stats."""
        try:
            return cls(**{str(stat): values[stat] for stat in STAT_NAMES})
        except KeyError as e:
            msg = f"Stat mapping is missing {e.args[0]}"
            raise InvariantViolationError(msg) from e

    def get(self, stat: StatName | str) -> int:
        return getattr(self, StatName(stat).value)

    def with_delta(self, stat: StatName | str, amount: int) -> StatBlock:
        """Return a copy with `amount` added to one stat."""
        return replace(self, **{StatName(stat).value: self.get(stat) + amount})

    def with_deltas(self, deltas: Mapping[StatName, int]) -> StatBlock:
        """Return a copy with several stat deltas applied at once."""
        return replace(self, **{StatName(s).value: self.get(s) + n for s, n in deltas.items()})

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    def diff(self, older: StatBlock) -> dict[StatName, int]:
        """Per-stat change from `older` to this block, omitting zeros."""
        changes = {s: self.get(s) - older.get(s) for s in STAT_NAMES}
        return {s: d for s, d in changes.items() if d != 0}

    def total(self) -> int:
        return sum(self.get(s) for s in STAT_NAMES)


@dataclass(frozen=True)
class GrowthRates:
    """Per-stat probability of gaining +1 on a growth roll."""

    strength: float
    dexterity: float
    agility: float
    vitality: float
    endurance: float
    intellect: float
    wisdom: float
    luck: float

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not 0.0 <= value <= 1.0:
                msg = f"Growth rate '{f.name}' must be in [0, 1], got {value}"
                raise InvariantViolationError(msg)

    def get(self, stat: StatName | str) -> float:
        return getattr(self, StatName(stat).value)

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def format_stats(stats: StatBlock) -> str:
    """One-line summary, e.g. 'STR:12 DEX:7 ...'."""
    return " ".join(f"{s.abbrev}:{stats.get(s)}" for s in STAT_NAMES)
