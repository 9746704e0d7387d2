"""Domain model: stats, genomes, creature profiles, breeding receipts."""

from sigilgen.model.creature import BreedingReceipt, CreatureProfile, Rarity
from sigilgen.model.genome import (
    ActiveAbility,
    ArchetypeId,
    GeneSlot,
    Genome,
    PassiveAbility,
    Profession,
    SlotKind,
    format_genome,
    has_profession_bonus,
    slot_domain,
)
from sigilgen.model.stats import STAT_NAMES, GrowthRates, StatBlock, StatName, format_stats

__all__ = [
    "STAT_NAMES",
    "ActiveAbility",
    "ArchetypeId",
    "BreedingReceipt",
    "CreatureProfile",
    "GeneSlot",
    "Genome",
    "GrowthRates",
    "PassiveAbility",
    "Profession",
    "Rarity",
    "SlotKind",
    "StatBlock",
    "StatName",
    "format_genome",
    "format_stats",
    "has_profession_bonus",
    "slot_domain",
]
