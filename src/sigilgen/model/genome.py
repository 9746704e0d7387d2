"""Gene slots and genomes.

Each creature carries six independent slots. Every slot has three layers:
dominant (expressed), recessive and hidden. Slot values come from a closed
domain per slot kind.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import Any

from sigilgen.errors import InvariantViolationError
from sigilgen.model.stats import STAT_NAMES, StatName


class ArchetypeId(StrEnum):
    """The six creature archetypes."""

    EMBER = "ember"
    THORN = "thorn"
    VEIL = "veil"
    TIDECALLER = "tidecaller"
    SPARKWRIGHT = "sparkwright"
    HOLLOW = "hollow"


class Profession(StrEnum):
    """Quest professions a creature can be attuned to."""

    MINING = "mining"
    FISHING = "fishing"
    FORAGING = "foraging"
    GARDENING = "gardening"


class ActiveAbility(StrEnum):
    POWER_STRIKE = "power_strike"  # bonus mining yield on crit
    KEEN_EYE = "keen_eye"  # bonus rare drops
    SWIFT_HANDS = "swift_hands"  # reduced quest time
    IRON_WILL = "iron_will"  # resist stamina drain
    DEEP_FOCUS = "deep_focus"  # bonus XP gain
    LUCKY_FIND = "lucky_find"  # double loot chance
    SECOND_WIND = "second_wind"  # stamina recovery burst
    ELEMENTAL_SURGE = "elemental_surge"  # random stat boost per quest


class PassiveAbility(StrEnum):
    STURDY = "sturdy"  # +5% HP
    NIMBLE = "nimble"  # +5% evasion
    SCHOLAR = "scholar"  # +10% quest XP
    HARVESTER = "harvester"  # +10% quest rewards
    ENDURING = "enduring"  # +2 max stamina
    FORTUNATE = "fortunate"  # +1 effective LCK
    RESILIENT = "resilient"  # slower tier degradation
    PRODIGY = "prodigy"  # +5% stat growth rates


class SlotKind(StrEnum):
    """The six gene slots, in genome order."""

    ARCHETYPE = "archetype"
    SUBTYPE = "subtype"
    PROFESSION = "profession"
    ACTIVE_ABILITY = "active_ability"
    PASSIVE_ABILITY = "passive_ability"
    STAT_BOOST = "stat_boost"


_DOMAINS: dict[SlotKind, tuple[Any, ...]] = {
    SlotKind.ARCHETYPE: tuple(ArchetypeId),
    SlotKind.SUBTYPE: tuple(ArchetypeId),
    SlotKind.PROFESSION: tuple(Profession),
    SlotKind.ACTIVE_ABILITY: tuple(ActiveAbility),
    SlotKind.PASSIVE_ABILITY: tuple(PassiveAbility),
    SlotKind.STAT_BOOST: STAT_NAMES,
}


def slot_domain(kind: SlotKind) -> tuple[Any, ...]:
    """Every value a slot of this kind may hold."""
    return _DOMAINS[kind]


@dataclass(frozen=True)
class GeneSlot:
    """One heritable trait: the expressed value plus two carried values."""

    dominant: Any
    recessive: Any
    hidden: Any

    def layers(self) -> tuple[Any, Any, Any]:
        return (self.dominant, self.recessive, self.hidden)


@dataclass(frozen=True)
class Genome:
    """Fixed set of six independent gene slots."""

    archetype: GeneSlot
    subtype: GeneSlot
    profession: GeneSlot
    active_ability: GeneSlot
    passive_ability: GeneSlot
    stat_boost: GeneSlot

    def __post_init__(self) -> None:
        for kind, slot in self.slots():
            if not isinstance(slot, GeneSlot):
                msg = f"Genome slot '{kind}' is not a GeneSlot: {slot!r}"
                raise InvariantViolationError(msg)
            # Layers are stored as the slot's enum type, so plain strings from
            # an external record become members here
            enum_type = type(slot_domain(kind)[0])
            try:
                members = [enum_type(value) for value in slot.layers()]
            except ValueError as e:
                msg = f"Slot {slot!r} holds a value outside the '{kind}' domain"
                raise InvariantViolationError(msg) from e
            object.__setattr__(self, kind.value, GeneSlot(*members))

    def slot(self, kind: SlotKind) -> GeneSlot:
        return getattr(self, kind.value)

    def slots(self) -> Iterator[tuple[SlotKind, GeneSlot]]:
        """Yield (kind, slot) pairs in genome order."""
        for f in fields(self):
            yield SlotKind(f.name), getattr(self, f.name)

    @classmethod
    def from_slots(cls, slots: Mapping[SlotKind, GeneSlot]) -> Genome:
        """Build a genome from a kind -> slot mapping.

        Raises:
            InvariantViolationError: If any of the six slots is missing.
        """
        missing = [kind.value for kind in SlotKind if kind not in slots]
        if missing:
            msg = f"Genome is missing slots: {', '.join(missing)}"
            raise InvariantViolationError(msg)
        return cls(**{kind.value: slots[kind] for kind in SlotKind})

    # Expressed traits

    @property
    def expressed_archetype(self) -> ArchetypeId:
        return self.archetype.dominant

    @property
    def expressed_subtype(self) -> ArchetypeId:
        return self.subtype.dominant

    @property
    def expressed_profession(self) -> Profession:
        return self.profession.dominant

    @property
    def boosted_stat(self) -> StatName:
        return self.stat_boost.dominant


def has_profession_bonus(genome: Genome, profession: Profession) -> bool:
    """True when the expressed profession gene matches a quest's profession."""
    return genome.expressed_profession == profession


def format_genome(genome: Genome, boost_amount: int = 2) -> str:
    a = genome.archetype
    return "\n".join(
        [
            f"Archetype: {a.dominant} (R1:{a.recessive} R2:{a.hidden})",
            f"Subtype: {genome.subtype.dominant}",
            f"Profession: {genome.profession.dominant}",
            f"Active: {genome.active_ability.dominant}",
            f"Passive: {genome.passive_ability.dominant}",
            f"Stat Boost: +{boost_amount} {genome.boosted_stat.abbrev}",
        ]
    )
