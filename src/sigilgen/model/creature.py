"""CreatureProfile and BreedingReceipt records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum

from sigilgen.errors import InvariantViolationError
from sigilgen.model.genome import ArchetypeId, Genome, Profession
from sigilgen.model.stats import GrowthRates, StatBlock


class Rarity(IntEnum):
    """Rarity tiers. The integer value is the tier rank used in averaging."""

    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    LEGENDARY = 3
    MYTHIC = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class CreatureProfile:
    """A single creature (a "sigil").

    Generation-0 profiles come from bootstrap; every other profile is
    produced by the breeding orchestrator. After creation only the leveling
    flow and the breeding side effects change a profile.
    """

    # Identity
    id: str
    name: str
    owner: str

    # Lineage
    archetype: ArchetypeId
    subtype: ArchetypeId
    rarity: Rarity
    generation: int
    genome: Genome
    profession: Profession

    # Progression
    stats: StatBlock
    growth_primary: GrowthRates
    growth_secondary: GrowthRates

    parent_ids: tuple[str, str] | None = None
    level: int = 1
    xp: int = 0
    xp_to_next_level: int = 100
    profession_skill_level: float = 0.0
    hp: int = 0
    max_hp: int = 0
    mp: int = 0
    max_mp: int = 0
    stamina: int = 25
    max_stamina: int = 25

    # Summoning budget
    summons_remaining: int = 0
    max_summons: int = 1
    cooldown_until: datetime | None = None

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    # Bumped by the repository on every committed change
    version: int = 1

    def __post_init__(self) -> None:
        if self.generation < 0:
            msg = f"Profile '{self.id}' has negative generation {self.generation}"
            raise InvariantViolationError(msg)
        if self.max_summons < 1:
            msg = f"Profile '{self.id}' max_summons must be >= 1, got {self.max_summons}"
            raise InvariantViolationError(msg)
        if not 0 <= self.summons_remaining <= self.max_summons:
            msg = (
                f"Profile '{self.id}' summons_remaining must be in [0, {self.max_summons}], "
                f"got {self.summons_remaining}"
            )
            raise InvariantViolationError(msg)

    @property
    def summons_used(self) -> int:
        return self.max_summons - self.summons_remaining

    def is_on_cooldown(self, now: datetime) -> bool:
        return self.cooldown_until is not None and self.cooldown_until > now


@dataclass(frozen=True)
class BreedingReceipt:
    """Immutable record of one successful summon."""

    id: str
    parent1_id: str
    parent2_id: str
    offspring_id: str
    cost: int
    generation: int
    timestamp: datetime
