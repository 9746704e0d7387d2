"""Summoning orchestration: eligibility, cost, cooldown and offspring synthesis.

The orchestrator never writes to parent profiles on its own. execute_breeding
returns the offspring, a receipt and one ParentUpdate per parent; the caller
applies those updates inside whatever transaction boundary it owns.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sigilgen.config import BreedingConfig, get_breeding_config
from sigilgen.engine.inheritance import InheritanceEngine
from sigilgen.engine.registry import TraitRegistry, get_default_registry
from sigilgen.engine.stats import (
    StatSynthesizer,
    max_health,
    max_mana,
    max_stamina,
    xp_for_level,
)
from sigilgen.errors import IneligibilityReason, IneligibleBreedingError, InvariantViolationError
from sigilgen.model.creature import BreedingReceipt, CreatureProfile, Rarity

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check.

    On success `cost` and `cooldown_hours` hold the quote: the price of the
    summon and the cooldown each parent will receive, in parent order.
    """

    eligible: bool
    reason: str | None = None
    category: IneligibilityReason | None = None
    cost: int | None = None
    cooldown_hours: tuple[float, float] | None = None

    def raise_if_ineligible(self) -> None:
        if self.eligible:
            return
        if self.category is None or self.reason is None:
            msg = "Ineligible result carries no category or reason"
            raise InvariantViolationError(msg)
        raise IneligibleBreedingError(self.category, self.reason)


@dataclass(frozen=True)
class ParentUpdate:
    """Instruction to commit one parent's side of a summon.

    `expected_version` is the parent version the summon was computed from;
    a store should reject the update if the stored version differs.
    """

    parent_id: str
    expected_version: int
    summons_remaining: int
    cooldown_until: datetime


@dataclass(frozen=True)
class BreedingResult:
    offspring: CreatureProfile
    receipt: BreedingReceipt
    cost: int
    parent_updates: tuple[ParentUpdate, ParentUpdate]


# Cost and cooldown


def parent_cost(parent: CreatureProfile, config: BreedingConfig) -> int:
    """base + per_summon * summons used + per_generation * generation."""
    return (
        config.base_cost
        + config.cost_per_summon * parent.summons_used
        + config.cost_per_generation * parent.generation
    )


def breeding_cost(
    parent1: CreatureProfile, parent2: CreatureProfile, config: BreedingConfig
) -> int:
    """The more expensive parent sets the price."""
    return max(parent_cost(parent1, config), parent_cost(parent2, config))


def cooldown_hours_for(generation: int, summons_used: int, config: BreedingConfig) -> float:
    """Cooldown length for a parent with the given history.

    Generation 0 grows linearly with usage; later generations use
    (24 + 8 * generation) * (summons_used + 1).
    """
    if generation == 0:
        return (
            config.gen0_base_cooldown_hours
            + config.gen0_cooldown_increment_hours * summons_used
        )
    return float((24 + 8 * generation) * (summons_used + 1))


def cooldown_hours(parent: CreatureProfile, config: BreedingConfig) -> float:
    """Cooldown for a parent at its current usage."""
    return cooldown_hours_for(parent.generation, parent.summons_used, config)


# Relatedness


def are_too_related(parent1: CreatureProfile, parent2: CreatureProfile) -> bool:
    """Parent-child pairs and full siblings (either parent order) are related."""
    if parent1.parent_ids and parent2.id in parent1.parent_ids:
        return True
    if parent2.parent_ids and parent1.id in parent2.parent_ids:
        return True
    if parent1.parent_ids and parent2.parent_ids:
        return set(parent1.parent_ids) == set(parent2.parent_ids)
    return False


# Rarity


def roll_rarity(registry: TraitRegistry, rng: random.Random, bonus: float = 0.0) -> Rarity:
    """Roll a rarity tier.

    Walks tiers from rarest to most common and returns the first whose
    threshold (cumulative base chance plus `bonus` scaled by the tier's
    parent-bonus weight) exceeds a single uniform draw. Falls back to the
    most common tier.
    """
    tiers = registry.tiers()
    draw = rng.random()
    for tier in reversed(tiers[1:]):
        threshold = (
            registry.cumulative_threshold(tier)
            + bonus * registry.rarity(tier).parent_bonus_weight
        )
        if draw < threshold:
            return tier
    return tiers[0]


class BreedingOrchestrator:
    """Gatekeeper and synthesizer for summoning.

    Example:
        >>> orchestrator = BreedingOrchestrator.from_defaults(rng=random.Random(3))
        >>> quote = orchestrator.check_eligibility(mother, father)
        >>> if quote.eligible:
        ...     result = orchestrator.execute_breeding(mother, father, "Ash", "owner-1")
        ...     for parent in (mother, father):
        ...         orchestrator.apply_breeding_side_effects(parent)
    """

    def __init__(
        self,
        registry: TraitRegistry,
        synthesizer: StatSynthesizer,
        inheritance: InheritanceEngine,
        config: BreedingConfig | None = None,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Trait registry shared with the synthesizer.
            synthesizer: Stat synthesizer for offspring stats.
            inheritance: Inheritance engine for offspring genomes.
            config: Breeding configuration. Loads from environment if not provided.
            rng: Random source for the rarity roll.
            clock: Returns the current aware datetime.
            id_factory: Produces identities for offspring and receipts.
        """
        self.registry = registry
        self.synthesizer = synthesizer
        self.inheritance = inheritance
        self.config = config or get_breeding_config()
        self._rng = rng or random.Random()
        self._clock = clock
        self._id_factory = id_factory

    @classmethod
    def from_defaults(
        cls,
        rng: random.Random | None = None,
        config: BreedingConfig | None = None,
        registry: TraitRegistry | None = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ) -> BreedingOrchestrator:
        """Wire an orchestrator whose components share one random source."""
        rng = rng or random.Random()
        config = config or get_breeding_config()
        registry = registry or get_default_registry()
        return cls(
            registry=registry,
            synthesizer=StatSynthesizer(registry, rng, config),
            inheritance=InheritanceEngine(rng, config.mutation_rate),
            config=config,
            rng=rng,
            clock=clock,
            id_factory=id_factory,
        )

    def now(self) -> datetime:
        return self._clock()

    def new_id(self) -> str:
        return self._id_factory()

    @property
    def rng(self) -> random.Random:
        return self._rng

    # Quotes

    def parent_cost(self, parent: CreatureProfile) -> int:
        return parent_cost(parent, self.config)

    def breeding_cost(self, parent1: CreatureProfile, parent2: CreatureProfile) -> int:
        return breeding_cost(parent1, parent2, self.config)

    def quoted_cooldown_hours(self, parent: CreatureProfile) -> float:
        """Cooldown the parent would receive from a summon started now.

        Reads usage after the summon's own decrement.
        """
        return cooldown_hours_for(parent.generation, parent.summons_used + 1, self.config)

    def check_eligibility(
        self,
        parent1: CreatureProfile,
        parent2: CreatureProfile,
        now: datetime | None = None,
    ) -> EligibilityResult:
        """Check whether two creatures may be summoned together.

        Checks run in order: self pairing, relatedness, remaining summons,
        cooldown. The first failure is reported.

        Args:
            parent1: First parent.
            parent2: Second parent.
            now: Time to evaluate cooldowns against. Defaults to the clock.

        Returns:
            EligibilityResult with the quote on success.
        """
        now = now or self.now()

        if parent1.id == parent2.id:
            return _ineligible(IneligibilityReason.SELF, "Cannot summon with self")

        if are_too_related(parent1, parent2):
            return _ineligible(
                IneligibilityReason.RELATED,
                "Parents are too closely related (siblings or parent-child)",
            )

        for parent in (parent1, parent2):
            if parent.summons_remaining <= 0:
                return _ineligible(
                    IneligibilityReason.NO_SUMMONS_REMAINING,
                    f"{parent.name} has no summons remaining",
                )

        for parent in (parent1, parent2):
            until = parent.cooldown_until
            if until is not None and until > now:
                return _ineligible(
                    IneligibilityReason.ON_COOLDOWN,
                    f"{parent.name} is on cooldown until {until.isoformat()}",
                )

        return EligibilityResult(
            eligible=True,
            cost=self.breeding_cost(parent1, parent2),
            cooldown_hours=(
                self.quoted_cooldown_hours(parent1),
                self.quoted_cooldown_hours(parent2),
            ),
        )

    # Synthesis

    def roll_offspring_rarity(self, rarity1: Rarity, rarity2: Rarity) -> Rarity:
        """Roll offspring rarity, nudged upward by the parents' average tier."""
        average_tier = (int(rarity1) + int(rarity2)) / 2
        bonus = average_tier * self.config.rarity_parent_bonus
        return roll_rarity(self.registry, self._rng, bonus)

    def execute_breeding(
        self,
        parent1: CreatureProfile,
        parent2: CreatureProfile,
        offspring_name: str,
        owner: str,
    ) -> BreedingResult:
        """Summon an offspring from two eligible parents.

        Neither parent is modified; the returned parent_updates describe the
        changes the caller must commit.

        Raises:
            IneligibleBreedingError: If the pair fails the eligibility check.
        """
        now = self.now()
        self.check_eligibility(parent1, parent2, now).raise_if_ineligible()

        cost = self.breeding_cost(parent1, parent2)
        generation = max(parent1.generation, parent2.generation) + 1

        genome = self.inheritance.inherit_genome(parent1.genome, parent2.genome)
        archetype = genome.expressed_archetype
        subtype = genome.expressed_subtype
        rarity = self.roll_offspring_rarity(parent1.rarity, parent2.rarity)

        stats = self.synthesizer.generate_base_stats(archetype)
        stats = stats.with_delta(genome.boosted_stat, self.config.stat_boost_amount)
        if rarity > self.registry.tiers()[0]:
            stats = self.synthesizer.apply_rarity_bonus(stats, rarity)

        max_summons = max(1, min(parent1.summons_remaining, parent2.summons_remaining) - 1)
        hp = max_health(stats, 1)
        mp = max_mana(stats, 1)
        stamina = max_stamina(1)

        offspring = CreatureProfile(
            id=self.new_id(),
            name=offspring_name,
            owner=owner,
            archetype=archetype,
            subtype=subtype,
            rarity=rarity,
            generation=generation,
            genome=genome,
            profession=genome.expressed_profession,
            parent_ids=(parent1.id, parent2.id),
            stats=stats,
            growth_primary=self.registry.archetype(archetype).primary_growth,
            growth_secondary=self.registry.archetype(subtype).secondary_growth,
            level=1,
            xp=0,
            xp_to_next_level=xp_for_level(1),
            hp=hp,
            max_hp=hp,
            mp=mp,
            max_mp=mp,
            stamina=stamina,
            max_stamina=stamina,
            summons_remaining=max_summons,
            max_summons=max_summons,
            cooldown_until=None,
            created_at=now,
        )

        receipt = BreedingReceipt(
            id=self.new_id(),
            parent1_id=parent1.id,
            parent2_id=parent2.id,
            offspring_id=offspring.id,
            cost=cost,
            generation=generation,
            timestamp=now,
        )

        logger.info(
            "Summoned %s (gen %d, %s %s) from %s + %s for %d",
            offspring.id,
            generation,
            rarity.name,
            archetype,
            parent1.id,
            parent2.id,
            cost,
            extra={"receipt_id": receipt.id, "cost": cost},
        )

        return BreedingResult(
            offspring=offspring,
            receipt=receipt,
            cost=cost,
            parent_updates=(self.parent_update(parent1, now), self.parent_update(parent2, now)),
        )

    # Parent side effects

    def parent_update(self, parent: CreatureProfile, now: datetime | None = None) -> ParentUpdate:
        """Describe a parent's post-summon state without touching it."""
        if parent.summons_remaining <= 0:
            msg = f"{parent.id} has no summons left to consume"
            raise InvariantViolationError(msg)
        now = now or self.now()
        remaining = parent.summons_remaining - 1
        used = parent.max_summons - remaining
        hours = cooldown_hours_for(parent.generation, used, self.config)
        return ParentUpdate(
            parent_id=parent.id,
            expected_version=parent.version,
            summons_remaining=remaining,
            cooldown_until=now + timedelta(hours=hours),
        )

    def apply_breeding_side_effects(
        self, parent: CreatureProfile, now: datetime | None = None
    ) -> None:
        """Consume one summon and start the cooldown, in place.

        Not idempotent: every call consumes another summon. Callers apply it
        exactly once per parent per committed summon.
        """
        apply_parent_update(parent, self.parent_update(parent, now))

    def format_preview(self, parent1: CreatureProfile, parent2: CreatureProfile) -> str:
        """Human-readable summon quote."""
        quote = self.check_eligibility(parent1, parent2)
        if not quote.eligible:
            return f"Cannot summon: {quote.reason}"

        cd1 = self.quoted_cooldown_hours(parent1)
        cd2 = self.quoted_cooldown_hours(parent2)
        lines = ["Summoning Preview"]
        for index, parent in enumerate((parent1, parent2), start=1):
            lines.append(
                f"Parent {index}: {parent.name} ({parent.archetype}, Gen{parent.generation}, "
                f"{parent.summons_remaining} summons left)"
            )
        lines.extend(
            [
                f"Cost: {quote.cost} $SIGIL",
                f"Offspring Generation: Gen{max(parent1.generation, parent2.generation) + 1}",
                f"Cooldown: P1 {cd1:g}h, P2 {cd2:g}h",
            ]
        )
        return "\n".join(lines)


def apply_parent_update(parent: CreatureProfile, update: ParentUpdate) -> None:
    """Write a ParentUpdate onto the matching profile."""
    if update.parent_id != parent.id:
        msg = f"Update for {update.parent_id} applied to {parent.id}"
        raise InvariantViolationError(msg)
    parent.summons_remaining = update.summons_remaining
    parent.cooldown_until = update.cooldown_until


def _ineligible(category: IneligibilityReason, reason: str) -> EligibilityResult:
    logger.debug("Summon rejected (%s): %s", category, reason)
    return EligibilityResult(eligible=False, reason=reason, category=category)
