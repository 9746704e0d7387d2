"""Genetic inheritance: weighted layer selection plus mutation.

For each slot, offspring layers are built in two stages:

1. Parental selection. A layer is drawn from parent A's slot (dominant 75%,
   recessive 18.75%, hidden 6.25%) and becomes the offspring's dominant; a
   layer drawn the same way from parent B becomes its recessive. The hidden
   layer is a uniform draw from the slot's domain.
2. Mutation. Each of the three resulting layers is independently replaced by
   a uniform domain draw with probability `mutation_rate` (2% by default).

Slots are processed independently; parent order matters.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Any, TypeVar

from sigilgen.config import get_breeding_config
from sigilgen.engine.registry import TraitRegistry
from sigilgen.model.genome import (
    ArchetypeId,
    GeneSlot,
    Genome,
    Profession,
    SlotKind,
    slot_domain,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DOMINANT_WEIGHT = 0.75
RECESSIVE_WEIGHT = 0.1875
HIDDEN_WEIGHT = 0.0625
LAYER_WEIGHTS: tuple[float, float, float] = (DOMINANT_WEIGHT, RECESSIVE_WEIGHT, HIDDEN_WEIGHT)


def select_layer(
    slot: GeneSlot,
    rng: random.Random,
    weights: tuple[float, float, float] = LAYER_WEIGHTS,
) -> Any:
    """Draw one layer value from a parent's slot by layer weight.

    Args:
        slot: The parent's gene slot.
        rng: Random source.
        weights: (dominant, recessive, hidden) weights summing to 1.

    Returns:
        The selected layer's value.
    """
    roll = rng.random()
    if roll < weights[0]:
        return slot.dominant
    if roll < weights[0] + weights[1]:
        return slot.recessive
    return slot.hidden


def maybe_mutate(value: T, domain: Sequence[T], rate: float, rng: random.Random) -> T:
    """With probability `rate`, replace `value` with a uniform draw from `domain`.

    The replacement may coincide with the original value.
    """
    if rng.random() < rate:
        return rng.choice(domain)
    return value


def inherit_slot(
    parent_a: GeneSlot,
    parent_b: GeneSlot,
    domain: Sequence[Any],
    rng: random.Random,
    mutation_rate: float,
) -> GeneSlot:
    """Combine two parents' slots into an offspring slot."""
    dominant = select_layer(parent_a, rng)
    recessive = select_layer(parent_b, rng)
    hidden = rng.choice(domain)

    return GeneSlot(
        dominant=maybe_mutate(dominant, domain, mutation_rate, rng),
        recessive=maybe_mutate(recessive, domain, mutation_rate, rng),
        hidden=maybe_mutate(hidden, domain, mutation_rate, rng),
    )


class InheritanceEngine:
    """Applies slot inheritance across whole genomes.

    Example:
        >>> engine = InheritanceEngine(random.Random(1))
        >>> child = engine.inherit_genome(mother.genome, father.genome)
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        mutation_rate: float | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            rng: Random source. Defaults to an unseeded random.Random.
            mutation_rate: Per-layer mutation probability. Defaults to the
                configured SIGIL_MUTATION_RATE.
        """
        self._rng = rng or random.Random()
        if mutation_rate is None:
            mutation_rate = get_breeding_config().mutation_rate
        if not 0.0 <= mutation_rate <= 1.0:
            msg = f"mutation_rate must be in [0, 1], got {mutation_rate}"
            raise ValueError(msg)
        self.mutation_rate = mutation_rate

    def inherit_slot(self, kind: SlotKind, parent_a: GeneSlot, parent_b: GeneSlot) -> GeneSlot:
        return inherit_slot(parent_a, parent_b, slot_domain(kind), self._rng, self.mutation_rate)

    def inherit_genome(self, genome_a: Genome, genome_b: Genome) -> Genome:
        """Six independent slot inheritances; A supplies dominants, B recessives."""
        slots = {
            kind: self.inherit_slot(kind, slot_a, genome_b.slot(kind))
            for kind, slot_a in genome_a.slots()
        }
        child = Genome.from_slots(slots)
        logger.debug(
            "Inherited genome: archetype=%s subtype=%s profession=%s",
            child.expressed_archetype,
            child.expressed_subtype,
            child.expressed_profession,
        )
        return child

    def generate_gen0_genome(self, archetype: ArchetypeId, registry: TraitRegistry) -> Genome:
        """Genome for a bootstrapped generation-0 creature.

        The archetype slot expresses `archetype` and carries a different
        archetype as recessive; the profession slot expresses the
        archetype's profession. Everything else is uniform.
        """
        archetype = ArchetypeId(archetype)
        rng = self._rng
        others = [a for a in ArchetypeId if a != archetype]

        def uniform(kind: SlotKind) -> GeneSlot:
            domain = slot_domain(kind)
            return GeneSlot(rng.choice(domain), rng.choice(domain), rng.choice(domain))

        professions = tuple(Profession)
        return Genome(
            archetype=GeneSlot(archetype, rng.choice(others), rng.choice(tuple(ArchetypeId))),
            subtype=uniform(SlotKind.SUBTYPE),
            profession=GeneSlot(
                registry.profession_for(archetype),
                rng.choice(professions),
                rng.choice(professions),
            ),
            active_ability=uniform(SlotKind.ACTIVE_ABILITY),
            passive_ability=uniform(SlotKind.PASSIVE_ABILITY),
            stat_boost=uniform(SlotKind.STAT_BOOST),
        )
