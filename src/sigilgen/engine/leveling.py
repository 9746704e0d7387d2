"""Level progression built on the stat synthesizer's growth roll.

Each level up rolls primary and secondary growth from the rates the
creature was created with, optionally adds a player-chosen +1, has a 50%
chance of +1 to two distinct random stats, and re-applies the rarity bonus
every fifth level for non-common creatures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from sigilgen.engine.stats import (
    StatSynthesizer,
    max_health,
    max_mana,
    max_stamina,
    xp_for_level,
)
from sigilgen.errors import LevelUpError
from sigilgen.model.creature import CreatureProfile, Rarity
from sigilgen.model.stats import STAT_NAMES, StatBlock, StatName

logger = logging.getLogger(__name__)

MAX_LEVEL = 100
RARITY_BONUS_INTERVAL = 5
BLESSING_CHANCE = 0.5


@dataclass(frozen=True)
class LevelCheck:
    ok: bool
    reason: str | None = None


@dataclass(frozen=True)
class LevelUpResult:
    """Outcome of a level up. `profile` is the updated copy."""

    profile: CreatureProfile
    new_level: int
    old_stats: StatBlock
    new_stats: StatBlock
    stat_changes: dict[StatName, int]
    rarity_bonus_applied: bool
    new_max_hp: int
    new_max_mp: int
    new_max_stamina: int


def can_level_up(profile: CreatureProfile) -> LevelCheck:
    if profile.level >= MAX_LEVEL:
        return LevelCheck(False, f"Already at max level ({MAX_LEVEL})")
    if profile.xp < profile.xp_to_next_level:
        missing = profile.xp_to_next_level - profile.xp
        return LevelCheck(
            False,
            f"Need {missing} more XP ({profile.xp}/{profile.xp_to_next_level})",
        )
    return LevelCheck(True)


def level_up(
    profile: CreatureProfile,
    synthesizer: StatSynthesizer,
    chosen_stat: StatName | None = None,
) -> LevelUpResult:
    """Advance a creature by one level.

    The input profile is left untouched; the result carries an updated copy.

    Args:
        profile: Creature to level. Must pass can_level_up.
        synthesizer: Supplies the growth roll, rarity bonus and random source.
        chosen_stat: Optional stat that receives a guaranteed +1.

    Returns:
        LevelUpResult with the new profile and per-stat deltas.

    Raises:
        LevelUpError: If the creature cannot level up.
    """
    check = can_level_up(profile)
    if not check.ok:
        raise LevelUpError(profile.id, check.reason or "Cannot level up")

    rng = synthesizer.rng
    old_stats = profile.stats
    stats = synthesizer.roll_stat_growth(
        old_stats, profile.growth_primary, profile.growth_secondary
    )

    if chosen_stat is not None:
        stats = stats.with_delta(StatName(chosen_stat), 1)

    if rng.random() < BLESSING_CHANCE:
        first, second = rng.sample(STAT_NAMES, 2)
        stats = stats.with_deltas({first: 1, second: 1})

    new_level = profile.level + 1
    rarity_bonus_applied = new_level % RARITY_BONUS_INTERVAL == 0 and profile.rarity > Rarity.COMMON
    if rarity_bonus_applied:
        stats = synthesizer.apply_rarity_bonus(stats, profile.rarity)

    new_max_hp = max_health(stats, new_level)
    new_max_mp = max_mana(stats, new_level)
    new_max_stamina = max_stamina(new_level)
    stamina = profile.stamina
    if new_level % 2 == 0:
        stamina = min(stamina + 1, new_max_stamina)

    updated = replace(
        profile,
        level=new_level,
        xp=profile.xp - profile.xp_to_next_level,
        xp_to_next_level=xp_for_level(new_level),
        stats=stats,
        max_hp=new_max_hp,
        hp=new_max_hp,
        max_mp=new_max_mp,
        mp=new_max_mp,
        max_stamina=new_max_stamina,
        stamina=stamina,
    )

    logger.debug("%s reached level %d", profile.id, new_level)
    return LevelUpResult(
        profile=updated,
        new_level=new_level,
        old_stats=old_stats,
        new_stats=stats,
        stat_changes=stats.diff(old_stats),
        rarity_bonus_applied=rarity_bonus_applied,
        new_max_hp=new_max_hp,
        new_max_mp=new_max_mp,
        new_max_stamina=new_max_stamina,
    )


def format_level_up(result: LevelUpResult) -> str:
    lines = [f"Level Up! -> Level {result.new_level}", "Stat Changes:"]
    for stat, change in result.stat_changes.items():
        lines.append(f"  {stat.abbrev}: +{change}")
    if result.rarity_bonus_applied:
        lines.append("Rarity bonus applied!")
    lines.append(
        f"HP: {result.new_max_hp} | MP: {result.new_max_mp} | Stamina: {result.new_max_stamina}"
    )
    return "\n".join(lines)
