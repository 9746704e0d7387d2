"""Shared fixtures for sigilgen tests.

Every fixture builds its own BreedingConfig so SIGIL_* variables in the
developer's environment never leak into assertions.
"""

from __future__ import annotations

import itertools
import random
from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from sigilgen.config import BreedingConfig
from sigilgen.engine import (
    BreedingOrchestrator,
    InheritanceEngine,
    StatSynthesizer,
    TraitRegistry,
    build_default_registry,
)
from sigilgen.model import (
    ActiveAbility,
    ArchetypeId,
    CreatureProfile,
    GeneSlot,
    Genome,
    PassiveAbility,
    Profession,
    Rarity,
    StatBlock,
    StatName,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class ScriptedRandom(random.Random):
    """random.Random whose random() replays a fixed script of floats.

    Other methods (choice, randrange, randint) use the seeded generator.
    """

    def __init__(self, values: list[float], seed: int = 0) -> None:
        super().__init__(seed)
        self._values = list(values)

    # Defining getrandbits keeps choice/randrange off the scripted random().
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)

    def random(self) -> float:
        if not self._values:
            msg = "ScriptedRandom ran out of scripted values"
            raise AssertionError(msg)
        return self._values.pop(0)


@pytest.fixture
def config() -> BreedingConfig:
    """Default economics, independent of the environment."""
    return BreedingConfig(
        _env_file=None,
        base_cost=2000,
        cost_per_summon=1000,
        cost_per_generation=500,
        gen0_base_cooldown_hours=4.0,
        gen0_cooldown_increment_hours=4.0,
        gen0_max_summons=10,
        mutation_rate=0.02,
        stat_jitter=2,
        stat_boost_amount=2,
        rarity_parent_bonus=0.03,
    )


@pytest.fixture
def registry() -> TraitRegistry:
    return build_default_registry()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def synthesizer(
    registry: TraitRegistry, rng: random.Random, config: BreedingConfig
) -> StatSynthesizer:
    return StatSynthesizer(registry, rng, config)


@pytest.fixture
def orchestrator(
    registry: TraitRegistry, rng: random.Random, config: BreedingConfig
) -> BreedingOrchestrator:
    """Orchestrator with a frozen clock and sequential ids."""
    counter = itertools.count(1)
    return BreedingOrchestrator(
        registry=registry,
        synthesizer=StatSynthesizer(registry, rng, config),
        inheritance=InheritanceEngine(rng, config.mutation_rate),
        config=config,
        rng=rng,
        clock=lambda: NOW,
        id_factory=lambda: f"id-{next(counter)}",
    )


def fixed_genome(archetype: ArchetypeId = ArchetypeId.EMBER) -> Genome:
    """A genome with distinct values in every layer."""
    return Genome(
        archetype=GeneSlot(archetype, ArchetypeId.THORN, ArchetypeId.VEIL),
        subtype=GeneSlot(ArchetypeId.HOLLOW, ArchetypeId.SPARKWRIGHT, ArchetypeId.TIDECALLER),
        profession=GeneSlot(Profession.MINING, Profession.FISHING, Profession.FORAGING),
        active_ability=GeneSlot(
            ActiveAbility.POWER_STRIKE, ActiveAbility.KEEN_EYE, ActiveAbility.SWIFT_HANDS
        ),
        passive_ability=GeneSlot(
            PassiveAbility.STURDY, PassiveAbility.NIMBLE, PassiveAbility.SCHOLAR
        ),
        stat_boost=GeneSlot(StatName.STRENGTH, StatName.DEXTERITY, StatName.AGILITY),
    )


@pytest.fixture
def make_profile(registry: TraitRegistry) -> Callable[..., CreatureProfile]:
    """Factory for hand-built profiles."""

    def factory(
        profile_id: str,
        generation: int = 0,
        summons_remaining: int = 10,
        max_summons: int = 10,
        parent_ids: tuple[str, str] | None = None,
        rarity: Rarity = Rarity.COMMON,
        cooldown_until: datetime | None = None,
        archetype: ArchetypeId = ArchetypeId.EMBER,
        genome: Genome | None = None,
    ) -> CreatureProfile:
        definition = registry.archetype(archetype)
        return CreatureProfile(
            id=profile_id,
            name=f"Sigil {profile_id}",
            owner="owner-1",
            archetype=archetype,
            subtype=ArchetypeId.HOLLOW,
            rarity=rarity,
            generation=generation,
            genome=genome or fixed_genome(archetype),
            profession=definition.profession,
            parent_ids=parent_ids,
            stats=StatBlock(10, 10, 10, 10, 10, 10, 10, 10),
            growth_primary=definition.primary_growth,
            growth_secondary=definition.secondary_growth,
            summons_remaining=summons_remaining,
            max_summons=max_summons,
            cooldown_until=cooldown_until,
            created_at=NOW,
        )

    return factory
