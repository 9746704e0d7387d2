"""Tunable summoning economics loaded from the environment.

Every field can be overridden with a SIGIL_-prefixed environment variable
or a .env file, e.g. SIGIL_BASE_COST=2500. Inheritance layer weights are not
configurable; only the mutation rate is.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class BreedingConfig(BaseSettings):
    """Cost, cooldown and synthesis constants for summoning.

    Environment Variables:
        SIGIL_BASE_COST: Cost of a summon before usage/generation surcharges
        SIGIL_COST_PER_SUMMON: Surcharge per summon a parent has already used
        SIGIL_COST_PER_GENERATION: Surcharge per parent generation
        SIGIL_GEN0_BASE_COOLDOWN_HOURS: Gen-0 cooldown before any usage
        SIGIL_GEN0_COOLDOWN_INCREMENT_HOURS: Gen-0 cooldown growth per summon used
        SIGIL_GEN0_MAX_SUMMONS: Summon budget given to bootstrapped creatures
        SIGIL_MUTATION_RATE: Per-layer mutation probability
        SIGIL_STAT_JITTER: Half-width of the base stat jitter range
        SIGIL_STAT_BOOST_AMOUNT: Flat bonus for the stat-boost gene's target
        SIGIL_RARITY_PARENT_BONUS: Offspring rarity bonus per average parent tier

    Example:
        >>> config = BreedingConfig()  # environment
        >>> config = BreedingConfig(base_cost=3000)  # explicit override
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cost (in $SIGIL)
    base_cost: int = Field(default=2000, ge=0, description="Base summon cost")
    cost_per_summon: int = Field(default=1000, ge=0, description="Surcharge per summon used")
    cost_per_generation: int = Field(default=500, ge=0, description="Surcharge per generation")

    # Cooldown (in hours); gen >= 1 uses the fixed (24 + 8*gen) * (used + 1) schedule
    gen0_base_cooldown_hours: float = Field(default=4.0, ge=0, description="Gen-0 base cooldown")
    gen0_cooldown_increment_hours: float = Field(
        default=4.0,
        ge=0,
        description="Gen-0 cooldown increment per summon used",
    )

    gen0_max_summons: int = Field(default=10, ge=1, le=100, description="Gen-0 summon budget")

    # Synthesis
    mutation_rate: float = Field(default=0.02, ge=0.0, le=1.0, description="Per-layer mutation")
    stat_jitter: int = Field(default=2, ge=0, le=10, description="Base stat jitter half-width")
    stat_boost_amount: int = Field(default=2, ge=0, description="Stat-boost gene bonus")
    rarity_parent_bonus: float = Field(
        default=0.03,
        ge=0.0,
        le=1.0,
        description="Rarity threshold bonus per average parent tier",
    )

    def __repr__(self) -> str:
        return (
            f"BreedingConfig("
            f"base_cost={self.base_cost}, "
            f"cost_per_summon={self.cost_per_summon}, "
            f"cost_per_generation={self.cost_per_generation}, "
            f"gen0_cooldown={self.gen0_base_cooldown_hours}h"
            f"+{self.gen0_cooldown_increment_hours}h, "
            f"gen0_max_summons={self.gen0_max_summons}, "
            f"mutation_rate={self.mutation_rate}"
            f")"
        )


@lru_cache
def get_breeding_config() -> BreedingConfig:
    """Return the process-wide BreedingConfig.

    Call get_breeding_config.cache_clear() to reload from the environment.
    """
    config = BreedingConfig()
    logger.info("Loaded breeding configuration: %s", config)
    return config
