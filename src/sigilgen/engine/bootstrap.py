"""Generation-0 creature creation.

Root creatures have no parents. They use the stat synthesizer directly:
base stats, the stat-boost gene's flat bonus, then the rarity schedule.
"""

from __future__ import annotations

import logging

from sigilgen.engine.breeding import BreedingOrchestrator, roll_rarity
from sigilgen.engine.stats import max_health, max_mana, max_stamina, xp_for_level
from sigilgen.model.creature import CreatureProfile, Rarity
from sigilgen.model.genome import ArchetypeId

logger = logging.getLogger(__name__)


def create_gen0(
    orchestrator: BreedingOrchestrator,
    archetype: ArchetypeId | str,
    name: str,
    owner: str,
    rarity: Rarity | None = None,
) -> CreatureProfile:
    """Create a root creature of the given archetype.

    Args:
        orchestrator: Supplies registry, synthesizer, inheritance, config,
            random source, clock and id factory.
        archetype: Archetype the creature expresses.
        name: Display name.
        owner: Owner identity.
        rarity: Fixed rarity. Rolled from base probabilities when None.

    Returns:
        A fresh generation-0 profile with the configured summon budget.
    """
    registry = orchestrator.registry
    config = orchestrator.config
    definition = registry.archetype(archetype)
    archetype = ArchetypeId(archetype)

    genome = orchestrator.inheritance.generate_gen0_genome(archetype, registry)
    subtype = genome.expressed_subtype
    if rarity is None:
        rarity = roll_rarity(registry, orchestrator.rng)

    synthesizer = orchestrator.synthesizer
    stats = synthesizer.generate_base_stats(archetype)
    stats = stats.with_delta(genome.boosted_stat, config.stat_boost_amount)
    if rarity > registry.tiers()[0]:
        stats = synthesizer.apply_rarity_bonus(stats, rarity)

    hp = max_health(stats, 1)
    mp = max_mana(stats, 1)
    stamina = max_stamina(1)

    profile = CreatureProfile(
        id=orchestrator.new_id(),
        name=name,
        owner=owner,
        archetype=archetype,
        subtype=subtype,
        rarity=rarity,
        generation=0,
        genome=genome,
        profession=definition.profession,
        parent_ids=None,
        stats=stats,
        growth_primary=definition.primary_growth,
        growth_secondary=registry.archetype(subtype).secondary_growth,
        xp_to_next_level=xp_for_level(1),
        hp=hp,
        max_hp=hp,
        mp=mp,
        max_mp=mp,
        stamina=stamina,
        max_stamina=stamina,
        summons_remaining=config.gen0_max_summons,
        max_summons=config.gen0_max_summons,
        created_at=orchestrator.now(),
    )
    logger.debug("Bootstrapped gen-0 %s %s (%s)", rarity.name, archetype, profile.id)
    return profile
