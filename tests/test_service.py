"""Tests for the versioned repository and summoning service (sigilgen.service)."""

from __future__ import annotations

import dataclasses
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from sigilgen.engine import BreedingOrchestrator
from sigilgen.errors import (
    ConcurrencyConflictError,
    IneligibilityReason,
    IneligibleBreedingError,
    ProfileNotFoundError,
    SigilError,
)
from sigilgen.service import InMemoryProfileRepository, SummoningService
from tests.conftest import NOW


@pytest.fixture
def repository(make_profile):
    return InMemoryProfileRepository(
        [make_profile("a"), make_profile("b"), make_profile("c"), make_profile("d")]
    )


@pytest.fixture
def service(repository, orchestrator):
    return SummoningService(repository, orchestrator)


class TestInMemoryProfileRepository:
    """Tests for InMemoryProfileRepository."""

    def test_get_returns_detached_copy(self, repository):
        snapshot = repository.get("a")
        snapshot.name = "Changed"
        assert repository.get("a").name == "Sigil a"

    def test_get_unknown_raises(self, repository):
        with pytest.raises(ProfileNotFoundError) as exc_info:
            repository.get("zzz")
        assert exc_info.value.profile_id == "zzz"

    def test_duplicate_add_raises(self, repository, make_profile):
        with pytest.raises(SigilError, match="already exists"):
            repository.add(make_profile("a"))

    def test_len_and_contains(self, repository):
        assert len(repository) == 4
        assert "a" in repository
        assert "x" not in repository

    def test_save_bumps_version(self, repository):
        snapshot = repository.get("a")
        snapshot.name = "Renamed"

        saved = repository.save(snapshot)

        assert saved.version == 2
        assert repository.get("a").name == "Renamed"

    def test_stale_save_conflicts(self, repository):
        """A write based on an outdated read is rejected."""
        first = repository.get("a")
        second = repository.get("a")
        repository.save(first)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            repository.save(second)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2

    def test_lock_for_is_stable_per_id(self, repository):
        assert repository.lock_for("a") is repository.lock_for("a")
        assert repository.lock_for("a") is not repository.lock_for("b")


class TestSummoningService:
    """Tests for SummoningService."""

    def test_quote(self, service):
        quote = service.quote("a", "b")
        assert quote.eligible
        assert quote.cost == 2000

    def test_summon_commits_everything(self, service, repository):
        result = service.summon("a", "b", "Kid", "owner-1")

        parent_a = repository.get("a")
        assert parent_a.summons_remaining == 9
        assert parent_a.version == 2
        assert parent_a.cooldown_until is not None
        assert parent_a.cooldown_until > NOW
        assert repository.get("b").summons_remaining == 9
        assert repository.get(result.offspring.id).parent_ids == ("a", "b")
        assert repository.receipts() == [result.receipt]

    def test_cooldown_blocks_immediate_repeat(self, service):
        """Parents are on cooldown right after a committed summon."""
        service.summon("a", "b", "Kid", "owner-1")

        with pytest.raises(IneligibleBreedingError) as exc_info:
            service.summon("a", "c", "Kid2", "owner-1")

        assert exc_info.value.category == IneligibilityReason.ON_COOLDOWN

    def test_ineligible_summon_commits_nothing(self, service, repository):
        with pytest.raises(IneligibleBreedingError):
            service.summon("a", "a", "Kid", "owner-1")
        assert len(repository) == 4
        assert repository.get("a").version == 1

    def test_unknown_parent(self, service):
        with pytest.raises(ProfileNotFoundError):
            service.summon("a", "nope", "Kid", "owner-1")

    def test_stale_commit_conflicts(self, repository, orchestrator: BreedingOrchestrator):
        """A result computed from old snapshots cannot be committed."""
        parent_a = repository.get("a")
        parent_b = repository.get("b")
        result = orchestrator.execute_breeding(parent_a, parent_b, "Kid", "owner-1")
        repository.save(repository.get("b"))

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            repository.commit_summon(result)

        assert exc_info.value.profile_id == "b"
        # Nothing from the rejected commit was written
        assert repository.get("a").summons_remaining == 10
        assert result.offspring.id not in repository
        assert repository.receipts() == []

    def test_offspring_id_collision_commits_nothing(
        self, repository, orchestrator: BreedingOrchestrator
    ):
        """An offspring may not overwrite a stored profile."""
        result = orchestrator.execute_breeding(
            repository.get("a"), repository.get("b"), "Kid", "owner-1"
        )
        colliding = dataclasses.replace(
            result, offspring=dataclasses.replace(result.offspring, id="c")
        )

        with pytest.raises(SigilError, match="'c' already exists"):
            repository.commit_summon(colliding)

        assert repository.get("a").version == 1
        assert repository.get("b").summons_remaining == 10
        assert repository.get("c").generation == 0
        assert repository.receipts() == []


class TestConcurrentSummons:
    """Racing summons against a shared parent."""

    def test_last_summon_consumed_once(self, make_profile, orchestrator):
        """Two threads racing for a parent's last summon: exactly one wins."""
        repository = InMemoryProfileRepository(
            [
                make_profile("shared", summons_remaining=1, max_summons=1),
                make_profile("x"),
                make_profile("y"),
            ]
        )
        service = SummoningService(repository, orchestrator)
        barrier = threading.Barrier(2)

        def attempt(partner: str) -> str:
            barrier.wait()
            try:
                service.summon("shared", partner, f"Kid-{partner}", "owner-1")
            except IneligibleBreedingError as e:
                return e.category
            return "ok"

        with ThreadPoolExecutor(max_workers=2) as executor:
            outcomes = list(executor.map(attempt, ["x", "y"]))

        assert sorted(outcomes) == ["no_summons_remaining", "ok"]
        assert repository.get("shared").summons_remaining == 0
        assert len(repository.receipts()) == 1

    def test_many_disjoint_summons_in_parallel(self, make_profile, orchestrator):
        """Pairs with no shared parent all commit."""
        profiles = [make_profile(f"p{i}") for i in range(20)]
        repository = InMemoryProfileRepository(profiles)
        service = SummoningService(repository, orchestrator)
        pairs = [(f"p{i}", f"p{i + 1}") for i in range(0, 20, 2)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda p: service.summon(*p, "Kid", "owner-1"), pairs))

        assert len(results) == 10
        assert len(repository.receipts()) == 10
        assert len({r.offspring.id for r in results}) == 10
