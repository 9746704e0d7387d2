"""Trait registry: archetype and rarity tables.

The registry is built once at startup and passed by reference to the stat
synthesizer and the breeding orchestrator. It never changes after
construction; an unknown id is a programmer error.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from sigilgen.errors import InvariantViolationError
from sigilgen.model.creature import Rarity
from sigilgen.model.genome import ArchetypeId, Profession
from sigilgen.model.stats import GrowthRates, StatBlock, StatName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchetypeDefinition:
    """Static description of one archetype."""

    name: str
    role: str
    description: str
    primary_stats: tuple[StatName, StatName]
    profession: Profession
    base_stats: StatBlock
    primary_growth: GrowthRates
    secondary_growth: GrowthRates


@dataclass(frozen=True)
class BonusPass:
    """One pass of a rarity bonus: `count` distinct stats each gain `amount`.

    A random pass draws only from stats not yet bonused earlier in the same
    application.
    """

    count: int
    amount: int
    random: bool = False


@dataclass(frozen=True)
class RarityDefinition:
    """Static description of one rarity tier."""

    name: str
    chance: float
    bonus_passes: tuple[BonusPass, ...] = ()
    # Scales the parent-rarity bonus added to this tier's offspring threshold
    parent_bonus_weight: float = 0.0


@dataclass(frozen=True)
class TraitRegistry:
    """Read-only lookup surface over archetype and rarity definitions."""

    archetypes: Mapping[ArchetypeId, ArchetypeDefinition]
    rarities: Mapping[Rarity, RarityDefinition]
    quest_stat_pairs: Mapping[Profession, tuple[StatName, StatName]]
    _cumulative: dict[Rarity, float] = field(init=False, repr=False, compare=False)
    _tiers: tuple[Rarity, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        missing = [a.value for a in ArchetypeId if a not in self.archetypes]
        if missing:
            msg = f"Registry is missing archetypes: {', '.join(missing)}"
            raise InvariantViolationError(msg)
        missing = [r.name for r in Rarity if r not in self.rarities]
        if missing:
            msg = f"Registry is missing rarities: {', '.join(missing)}"
            raise InvariantViolationError(msg)

        total = sum(d.chance for d in self.rarities.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            msg = f"Rarity chances must sum to 1, got {total}"
            raise InvariantViolationError(msg)

        # Cumulative chance of rolling this tier or anything rarer
        cumulative: dict[Rarity, float] = {}
        running = 0.0
        for tier in sorted(Rarity, reverse=True):
            running += self.rarities[tier].chance
            cumulative[tier] = running

        object.__setattr__(self, "archetypes", MappingProxyType(dict(self.archetypes)))
        object.__setattr__(self, "rarities", MappingProxyType(dict(self.rarities)))
        object.__setattr__(self, "quest_stat_pairs", MappingProxyType(dict(self.quest_stat_pairs)))
        object.__setattr__(self, "_cumulative", cumulative)
        object.__setattr__(self, "_tiers", tuple(sorted(self.rarities)))

    def archetype(self, archetype_id: ArchetypeId | str) -> ArchetypeDefinition:
        """Look up an archetype.

        Raises:
            InvariantViolationError: If the id is unknown.
        """
        try:
            return self.archetypes[ArchetypeId(archetype_id)]
        except (KeyError, ValueError) as e:
            msg = f"Unknown archetype: {archetype_id!r}"
            raise InvariantViolationError(msg) from e

    def rarity(self, tier: Rarity | int) -> RarityDefinition:
        """Look up a rarity tier.

        Raises:
            InvariantViolationError: If the tier is unknown.
        """
        try:
            return self.rarities[Rarity(tier)]
        except (KeyError, ValueError) as e:
            msg = f"Unknown rarity tier: {tier!r}"
            raise InvariantViolationError(msg) from e

    def archetype_ids(self) -> tuple[ArchetypeId, ...]:
        return tuple(self.archetypes)

    def tiers(self) -> tuple[Rarity, ...]:
        """Rarity tiers from most common to rarest."""
        return self._tiers

    def cumulative_threshold(self, tier: Rarity) -> float:
        """Probability of a base roll landing on `tier` or anything rarer."""
        return self._cumulative[Rarity(tier)]

    def profession_for(self, archetype_id: ArchetypeId | str) -> Profession:
        """Profession affinity implied by an archetype."""
        return self.archetype(archetype_id).profession

    def quest_stats(self, profession: Profession) -> tuple[StatName, StatName]:
        """The two stats a profession's quest rewards scale with."""
        try:
            return self.quest_stat_pairs[Profession(profession)]
        except (KeyError, ValueError) as e:
            msg = f"Unknown profession: {profession!r}"
            raise InvariantViolationError(msg) from e


def _stats(s: int, d: int, a: int, v: int, e: int, i: int, w: int, lck: int) -> StatBlock:
    return StatBlock(s, d, a, v, e, i, w, lck)


def _rates(
    s: float, d: float, a: float, v: float, e: float, i: float, w: float, lck: float
) -> GrowthRates:
    return GrowthRates(s, d, a, v, e, i, w, lck)


# Columns: STR DEX AGI VIT END INT WIS LCK
DEFAULT_ARCHETYPES: dict[ArchetypeId, ArchetypeDefinition] = {
    ArchetypeId.EMBER: ArchetypeDefinition(
        name="Ember",
        role="Warrior",
        description="Aggressive fighters who excel in direct competition and mining.",
        primary_stats=(StatName.STRENGTH, StatName.ENDURANCE),
        profession=Profession.MINING,
        base_stats=_stats(12, 7, 8, 9, 11, 5, 4, 6),
        primary_growth=_rates(0.75, 0.20, 0.30, 0.35, 0.70, 0.10, 0.10, 0.20),
        secondary_growth=_rates(0.30, 0.10, 0.15, 0.20, 0.30, 0.05, 0.05, 0.10),
    ),
    ArchetypeId.THORN: ArchetypeDefinition(
        name="Thorn",
        role="Cultivator",
        description="Patient cultivators who excel at gardening and resource management.",
        primary_stats=(StatName.VITALITY, StatName.WISDOM),
        profession=Profession.GARDENING,
        base_stats=_stats(5, 6, 5, 12, 9, 8, 11, 6),
        primary_growth=_rates(0.10, 0.15, 0.10, 0.75, 0.35, 0.30, 0.70, 0.20),
        secondary_growth=_rates(0.05, 0.10, 0.05, 0.30, 0.20, 0.15, 0.30, 0.10),
    ),
    ArchetypeId.VEIL: ArchetypeDefinition(
        name="Veil",
        role="Oracle",
        description="Analytical oracles who excel at foraging and information gathering.",
        primary_stats=(StatName.INTELLECT, StatName.WISDOM),
        profession=Profession.FORAGING,
        base_stats=_stats(4, 7, 6, 7, 5, 13, 12, 8),
        primary_growth=_rates(0.05, 0.20, 0.15, 0.20, 0.10, 0.80, 0.70, 0.30),
        secondary_growth=_rates(0.05, 0.10, 0.10, 0.10, 0.05, 0.35, 0.30, 0.15),
    ),
    ArchetypeId.TIDECALLER: ArchetypeDefinition(
        name="Tidecaller",
        role="Merchant",
        description="Opportunistic merchants who excel at fishing and deal-making.",
        primary_stats=(StatName.AGILITY, StatName.LUCK),
        profession=Profession.FISHING,
        base_stats=_stats(6, 8, 11, 7, 6, 8, 7, 12),
        primary_growth=_rates(0.15, 0.30, 0.70, 0.20, 0.15, 0.25, 0.20, 0.75),
        secondary_growth=_rates(0.10, 0.15, 0.30, 0.10, 0.10, 0.15, 0.10, 0.30),
    ),
    ArchetypeId.SPARKWRIGHT: ArchetypeDefinition(
        name="Sparkwright",
        role="Builder",
        description="Creative builders who excel at mining and tool creation.",
        primary_stats=(StatName.INTELLECT, StatName.DEXTERITY),
        profession=Profession.MINING,
        base_stats=_stats(7, 11, 6, 6, 7, 13, 7, 8),
        primary_growth=_rates(0.20, 0.70, 0.15, 0.15, 0.20, 0.75, 0.20, 0.30),
        secondary_growth=_rates(0.10, 0.30, 0.10, 0.10, 0.10, 0.35, 0.10, 0.15),
    ),
    ArchetypeId.HOLLOW: ArchetypeDefinition(
        name="Hollow",
        role="Phantom",
        description="Unpredictable phantoms who excel at fishing and high-risk strategies.",
        primary_stats=(StatName.AGILITY, StatName.STRENGTH),
        profession=Profession.FISHING,
        base_stats=_stats(10, 8, 12, 4, 5, 9, 6, 11),
        primary_growth=_rates(0.65, 0.25, 0.75, 0.05, 0.10, 0.30, 0.15, 0.45),
        secondary_growth=_rates(0.25, 0.15, 0.30, 0.05, 0.05, 0.15, 0.10, 0.20),
    ),
}

DEFAULT_RARITIES: dict[Rarity, RarityDefinition] = {
    Rarity.COMMON: RarityDefinition(name="Common", chance=0.75),
    Rarity.UNCOMMON: RarityDefinition(
        name="Uncommon",
        chance=0.20,
        bonus_passes=(BonusPass(count=2, amount=1),),
        parent_bonus_weight=0.15,
    ),
    Rarity.RARE: RarityDefinition(
        name="Rare",
        chance=0.04,
        bonus_passes=(BonusPass(count=3, amount=1), BonusPass(count=1, amount=1, random=True)),
        parent_bonus_weight=0.10,
    ),
    Rarity.LEGENDARY: RarityDefinition(
        name="Legendary",
        chance=0.009,
        bonus_passes=(
            BonusPass(count=3, amount=1),
            BonusPass(count=2, amount=1),
            BonusPass(count=1, amount=2),
        ),
        parent_bonus_weight=0.05,
    ),
    Rarity.MYTHIC: RarityDefinition(
        name="Mythic",
        chance=0.001,
        bonus_passes=(
            BonusPass(count=3, amount=2),
            BonusPass(count=3, amount=1),
            BonusPass(count=1, amount=1),
        ),
        parent_bonus_weight=0.01,
    ),
}

DEFAULT_QUEST_STATS: dict[Profession, tuple[StatName, StatName]] = {
    Profession.MINING: (StatName.STRENGTH, StatName.ENDURANCE),
    Profession.FISHING: (StatName.AGILITY, StatName.LUCK),
    Profession.FORAGING: (StatName.DEXTERITY, StatName.INTELLECT),
    Profession.GARDENING: (StatName.WISDOM, StatName.VITALITY),
}


def build_default_registry() -> TraitRegistry:
    """Construct the standard registry from the module-level tables."""
    registry = TraitRegistry(
        archetypes=DEFAULT_ARCHETYPES,
        rarities=DEFAULT_RARITIES,
        quest_stat_pairs=DEFAULT_QUEST_STATS,
    )
    logger.debug(
        "Built trait registry: %d archetypes, %d rarity tiers",
        len(registry.archetypes),
        len(registry.rarities),
    )
    return registry


@lru_cache
def get_default_registry() -> TraitRegistry:
    """Process-wide default registry, built on first use."""
    return build_default_registry()
