"""Tests for the trait registry (sigilgen.engine.registry)."""

from __future__ import annotations

import dataclasses

import pytest

from sigilgen.engine import (
    RarityDefinition,
    TraitRegistry,
    build_default_registry,
    get_default_registry,
)
from sigilgen.engine.registry import DEFAULT_ARCHETYPES, DEFAULT_QUEST_STATS, DEFAULT_RARITIES
from sigilgen.errors import InvariantViolationError
from sigilgen.model import ArchetypeId, Profession, Rarity, StatName


class TestLookups:
    """Archetype and rarity lookups."""

    def test_all_archetypes_defined(self, registry: TraitRegistry) -> None:
        assert set(registry.archetype_ids()) == set(ArchetypeId)

    def test_archetype_by_string(self, registry: TraitRegistry) -> None:
        """String ids resolve the same as enum members."""
        assert registry.archetype("veil") is registry.archetype(ArchetypeId.VEIL)

    def test_ember_definition(self, registry: TraitRegistry) -> None:
        ember = registry.archetype(ArchetypeId.EMBER)
        assert ember.profession == Profession.MINING
        assert ember.base_stats.strength == 12
        assert ember.primary_growth.strength == 0.75
        assert ember.primary_stats == (StatName.STRENGTH, StatName.ENDURANCE)

    def test_unknown_archetype_raises(self, registry: TraitRegistry) -> None:
        with pytest.raises(InvariantViolationError, match="gryphon"):
            registry.archetype("gryphon")

    def test_unknown_rarity_raises(self, registry: TraitRegistry) -> None:
        with pytest.raises(InvariantViolationError):
            registry.rarity(9)

    def test_rarity_by_int(self, registry: TraitRegistry) -> None:
        assert registry.rarity(2).name == "Rare"

    def test_profession_for(self, registry: TraitRegistry) -> None:
        assert registry.profession_for(ArchetypeId.TIDECALLER) == Profession.FISHING
        assert registry.profession_for(ArchetypeId.THORN) == Profession.GARDENING

    def test_quest_stats(self, registry: TraitRegistry) -> None:
        assert registry.quest_stats(Profession.FORAGING) == (StatName.DEXTERITY, StatName.INTELLECT)

    def test_tables_are_read_only(self, registry: TraitRegistry) -> None:
        with pytest.raises(TypeError):
            registry.archetypes[ArchetypeId.EMBER] = None  # type: ignore[index]


class TestRarityTable:
    """Rarity chances and cumulative thresholds."""

    def test_tiers_common_to_rarest(self, registry: TraitRegistry) -> None:
        assert registry.tiers() == tuple(Rarity)

    def test_chances(self, registry: TraitRegistry) -> None:
        chances = [registry.rarity(r).chance for r in Rarity]
        assert chances == [0.75, 0.20, 0.04, 0.009, 0.001]

    @pytest.mark.parametrize(
        ("tier", "expected"),
        [
            (Rarity.MYTHIC, 0.001),
            (Rarity.LEGENDARY, 0.01),
            (Rarity.RARE, 0.05),
            (Rarity.UNCOMMON, 0.25),
            (Rarity.COMMON, 1.0),
        ],
    )
    def test_cumulative_threshold(
        self, registry: TraitRegistry, tier: Rarity, expected: float
    ) -> None:
        """Probability of rolling the tier or anything rarer."""
        assert registry.cumulative_threshold(tier) == pytest.approx(expected)

    def test_bonus_points_grow_with_rarity(self, registry: TraitRegistry) -> None:
        points = [
            sum(p.count * p.amount for p in registry.rarity(r).bonus_passes) for r in Rarity
        ]
        assert points == [0, 2, 4, 7, 10]

    def test_chances_must_sum_to_one(self) -> None:
        rarities = dict(DEFAULT_RARITIES)
        rarities[Rarity.COMMON] = RarityDefinition(name="Common", chance=0.5)
        with pytest.raises(InvariantViolationError, match="sum to 1"):
            TraitRegistry(DEFAULT_ARCHETYPES, rarities, DEFAULT_QUEST_STATS)


class TestConstruction:
    """Registry completeness."""

    def test_missing_archetype_rejected(self) -> None:
        archetypes = dict(DEFAULT_ARCHETYPES)
        del archetypes[ArchetypeId.HOLLOW]
        with pytest.raises(InvariantViolationError, match="hollow"):
            TraitRegistry(archetypes, DEFAULT_RARITIES, DEFAULT_QUEST_STATS)

    def test_missing_rarity_rejected(self) -> None:
        rarities = {r: d for r, d in DEFAULT_RARITIES.items() if r != Rarity.MYTHIC}
        with pytest.raises(InvariantViolationError, match="MYTHIC"):
            TraitRegistry(DEFAULT_ARCHETYPES, rarities, DEFAULT_QUEST_STATS)

    def test_registry_is_frozen(self) -> None:
        registry = build_default_registry()
        with pytest.raises(dataclasses.FrozenInstanceError):
            registry.archetypes = {}  # type: ignore[misc]

    def test_default_registry_is_cached(self) -> None:
        assert get_default_registry() is get_default_registry()
