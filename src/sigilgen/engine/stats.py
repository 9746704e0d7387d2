"""Stat synthesis: base rolls, rarity bonuses, growth rolls and derived maxima.

Shared by the breeding orchestrator (offspring stats) and the leveling flow
(growth on level up). All randomness comes from an injected random.Random so
tests can seed it.
"""

from __future__ import annotations

import logging
import math
import random
from collections import Counter

from sigilgen.config import BreedingConfig, get_breeding_config
from sigilgen.engine.registry import TraitRegistry
from sigilgen.model.creature import Rarity
from sigilgen.model.genome import ArchetypeId
from sigilgen.model.stats import STAT_NAMES, GrowthRates, StatBlock, StatName

logger = logging.getLogger(__name__)

# Derived-stat coefficients
HP_BASE = 50
HP_PER_VITALITY = 5
HP_PER_LEVEL = 10
MP_BASE = 25
MP_PER_INTELLECT = 3
MP_PER_WISDOM = 2
MP_PER_LEVEL = 5
STAMINA_BASE = 25
STAMINA_CAP = 50

XP_BASE = 100
XP_GROWTH = 1.1


def max_health(stats: StatBlock, level: int) -> int:
    """Vitality drives health."""
    return HP_BASE + stats.vitality * HP_PER_VITALITY + level * HP_PER_LEVEL


def max_mana(stats: StatBlock, level: int) -> int:
    """Intellect and wisdom drive mana."""
    return (
        MP_BASE
        + stats.intellect * MP_PER_INTELLECT
        + stats.wisdom * MP_PER_WISDOM
        + level * MP_PER_LEVEL
    )


def max_stamina(level: int) -> int:
    """Base 25, +1 every even level, capped at 50."""
    return min(STAMINA_BASE + level // 2, STAMINA_CAP)


def xp_for_level(level: int) -> int:
    """XP needed to advance from `level` to `level + 1`."""
    if level <= 0:
        return 0
    return math.floor(XP_BASE * XP_GROWTH ** (level - 1))


def total_xp_to_level(target_level: int) -> int:
    """Cumulative XP from level 1 to `target_level`."""
    return sum(xp_for_level(level) for level in range(1, target_level))


class StatSynthesizer:
    """Generates and mutates stat blocks using the trait registry.

    Example:
        >>> synth = StatSynthesizer(build_default_registry(), random.Random(7))
        >>> stats = synth.generate_base_stats(ArchetypeId.EMBER)
        >>> stats = synth.apply_rarity_bonus(stats, Rarity.RARE)
    """

    def __init__(
        self,
        registry: TraitRegistry,
        rng: random.Random | None = None,
        config: BreedingConfig | None = None,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            registry: Trait registry for base stats and rarity schedules.
            rng: Random source. Defaults to an unseeded random.Random.
            config: Breeding configuration. Loads from environment if not provided.
        """
        self._registry = registry
        self._rng = rng or random.Random()
        self._config = config or get_breeding_config()

    @property
    def registry(self) -> TraitRegistry:
        return self._registry

    @property
    def rng(self) -> random.Random:
        return self._rng

    def generate_base_stats(self, archetype: ArchetypeId) -> StatBlock:
        """Archetype base stats with independent per-stat jitter, floored at 1."""
        base = self._registry.archetype(archetype).base_stats
        jitter = self._config.stat_jitter
        values = {
            stat: max(1, base.get(stat) + self._rng.randint(-jitter, jitter))
            for stat in STAT_NAMES
        }
        return StatBlock.from_mapping(values)

    def apply_rarity_bonus(self, stats: StatBlock, rarity: Rarity) -> StatBlock:
        """Apply every bonus pass of a rarity's schedule.

        Each pass picks `count` distinct stats. Plain passes draw from all
        eight stats; random passes draw only from stats no earlier pass in
        this call has touched. A stat never gains twice within one pass.
        """
        definition = self._registry.rarity(rarity)
        deltas: Counter[StatName] = Counter()
        bonused: set[StatName] = set()

        for bonus in definition.bonus_passes:
            if bonus.random:
                pool = [s for s in STAT_NAMES if s not in bonused]
            else:
                pool = list(STAT_NAMES)
            for _ in range(bonus.count):
                if not pool:
                    break
                stat = pool.pop(self._rng.randrange(len(pool)))
                deltas[stat] += bonus.amount
                bonused.add(stat)

        if deltas:
            logger.debug("Rarity %s bonus: %s", Rarity(rarity).name, dict(deltas))
        return stats.with_deltas(deltas)

    def roll_stat_growth(
        self,
        stats: StatBlock,
        primary: GrowthRates,
        secondary: GrowthRates,
    ) -> StatBlock:
        """Roll primary and secondary growth for every stat.

        Each stat gets two independent Bernoulli trials, so it gains 0, 1 or 2.
        """
        deltas: dict[StatName, int] = {}
        for stat in STAT_NAMES:
            gain = 0
            if self._rng.random() < primary.get(stat):
                gain += 1
            if self._rng.random() < secondary.get(stat):
                gain += 1
            if gain:
                deltas[stat] = gain
        return stats.with_deltas(deltas)
