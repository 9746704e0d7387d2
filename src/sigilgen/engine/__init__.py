"""Summoning engine: trait registry, stat synthesis, inheritance, breeding, leveling."""

from sigilgen.engine.bootstrap import create_gen0
from sigilgen.engine.breeding import (
    BreedingOrchestrator,
    BreedingResult,
    EligibilityResult,
    ParentUpdate,
    apply_parent_update,
    are_too_related,
    breeding_cost,
    cooldown_hours,
    parent_cost,
    roll_rarity,
)
from sigilgen.engine.inheritance import (
    LAYER_WEIGHTS,
    InheritanceEngine,
    inherit_slot,
    maybe_mutate,
    select_layer,
)
from sigilgen.engine.leveling import (
    MAX_LEVEL,
    LevelCheck,
    LevelUpResult,
    can_level_up,
    format_level_up,
    level_up,
)
from sigilgen.engine.registry import (
    ArchetypeDefinition,
    BonusPass,
    RarityDefinition,
    TraitRegistry,
    build_default_registry,
    get_default_registry,
)
from sigilgen.engine.stats import (
    StatSynthesizer,
    max_health,
    max_mana,
    max_stamina,
    total_xp_to_level,
    xp_for_level,
)

__all__ = [
    "LAYER_WEIGHTS",
    "MAX_LEVEL",
    "ArchetypeDefinition",
    "BonusPass",
    "BreedingOrchestrator",
    "BreedingResult",
    "EligibilityResult",
    "InheritanceEngine",
    "LevelCheck",
    "LevelUpResult",
    "ParentUpdate",
    "RarityDefinition",
    "StatSynthesizer",
    "TraitRegistry",
    "apply_parent_update",
    "are_too_related",
    "breeding_cost",
    "build_default_registry",
    "can_level_up",
    "cooldown_hours",
    "create_gen0",
    "format_level_up",
    "get_default_registry",
    "inherit_slot",
    "level_up",
    "max_health",
    "max_mana",
    "max_stamina",
    "maybe_mutate",
    "parent_cost",
    "roll_rarity",
    "select_layer",
    "total_xp_to_level",
    "xp_for_level",
]
