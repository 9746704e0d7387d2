"""Serialized summon commits over a versioned profile repository.

Concurrent summons must not both consume a parent's last summon. The
SummoningService holds a per-identity lock for each parent (taken in sorted
id order) across re-fetch, eligibility check and commit, and the repository
rejects any commit whose expected version no longer matches. A rejected
commit raises ConcurrencyConflictError; the caller re-fetches and retries.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from typing import Protocol

from sigilgen.engine.breeding import (
    BreedingOrchestrator,
    BreedingResult,
    EligibilityResult,
    ParentUpdate,
    apply_parent_update,
)
from sigilgen.errors import ConcurrencyConflictError, ProfileNotFoundError, SigilError
from sigilgen.model.creature import BreedingReceipt, CreatureProfile

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """What the summoning service needs from a profile store."""

    def get(self, profile_id: str) -> CreatureProfile: ...

    def lock_for(self, profile_id: str) -> threading.Lock: ...

    def commit_summon(self, result: BreedingResult) -> None: ...


class InMemoryProfileRepository:
    """Thread-safe in-process profile store with optimistic versioning.

    Profiles are copied on the way in and out, so callers never hold a
    reference to stored state. Each committed change bumps the version.

    Example:
        >>> repo = InMemoryProfileRepository()
        >>> repo.add(profile)
        >>> snapshot = repo.get(profile.id)
        >>> snapshot.name = "Renamed"
        >>> repo.save(snapshot)  # version 1 -> 2
    """

    def __init__(self, profiles: Iterable[CreatureProfile] = ()) -> None:
        self._lock = threading.RLock()
        self._profiles: dict[str, CreatureProfile] = {}
        self._id_locks: dict[str, threading.Lock] = {}
        self._receipts: list[BreedingReceipt] = []
        for profile in profiles:
            self.add(profile)

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def __contains__(self, profile_id: object) -> bool:
        with self._lock:
            return profile_id in self._profiles

    def lock_for(self, profile_id: str) -> threading.Lock:
        """The lock serializing summons that involve `profile_id`."""
        with self._lock:
            return self._id_locks.setdefault(profile_id, threading.Lock())

    def get(self, profile_id: str) -> CreatureProfile:
        """Return a detached snapshot of a stored profile.

        Raises:
            ProfileNotFoundError: If the id is unknown.
        """
        with self._lock:
            try:
                return copy.deepcopy(self._profiles[profile_id])
            except KeyError:
                raise ProfileNotFoundError(profile_id) from None

    def add(self, profile: CreatureProfile) -> None:
        """Store a new profile.

        Raises:
            SigilError: If a profile with the same id already exists.
        """
        with self._lock:
            if profile.id in self._profiles:
                msg = f"Profile '{profile.id}' already exists"
                raise SigilError(msg)
            self._profiles[profile.id] = copy.deepcopy(profile)

    def save(self, profile: CreatureProfile) -> CreatureProfile:
        """Replace a stored profile if its version is still current.

        Returns:
            The stored snapshot with its bumped version.

        Raises:
            ProfileNotFoundError: If the id is unknown.
            ConcurrencyConflictError: If the stored version moved on.
        """
        with self._lock:
            stored = self._stored(profile.id)
            self._check_version(profile.id, profile.version, stored.version)
            updated = copy.deepcopy(profile)
            updated.version = stored.version + 1
            self._profiles[profile.id] = updated
            return copy.deepcopy(updated)

    def receipts(self) -> list[BreedingReceipt]:
        with self._lock:
            return list(self._receipts)

    def commit_summon(self, result: BreedingResult) -> None:
        """Atomically apply both parent updates and store the offspring.

        The offspring id and all parent versions are checked before anything
        is written.

        Raises:
            SigilError: If a profile with the offspring's id already exists.
            ConcurrencyConflictError: If either parent changed since it was read.
        """
        with self._lock:
            if result.offspring.id in self._profiles:
                msg = f"Profile '{result.offspring.id}' already exists"
                raise SigilError(msg)
            self._apply_updates(result.parent_updates)
            self._profiles[result.offspring.id] = copy.deepcopy(result.offspring)
            self._receipts.append(result.receipt)

    def _apply_updates(self, updates: Sequence[ParentUpdate]) -> None:
        for update in updates:
            stored = self._stored(update.parent_id)
            self._check_version(update.parent_id, update.expected_version, stored.version)
        for update in updates:
            stored = self._profiles[update.parent_id]
            apply_parent_update(stored, update)
            stored.version += 1

    def _stored(self, profile_id: str) -> CreatureProfile:
        try:
            return self._profiles[profile_id]
        except KeyError:
            raise ProfileNotFoundError(profile_id) from None

    @staticmethod
    def _check_version(profile_id: str, expected: int, actual: int) -> None:
        if expected != actual:
            logger.warning(
                "Version conflict on %s: expected %d, found %d", profile_id, expected, actual
            )
            raise ConcurrencyConflictError(profile_id, expected, actual)


class SummoningService:
    """Quote and commit summons with at most one in-flight summon per parent.

    Example:
        >>> service = SummoningService(repo, BreedingOrchestrator.from_defaults())
        >>> service.quote(a_id, b_id).cost
        2000
        >>> result = service.summon(a_id, b_id, "Ash", owner="owner-1")
    """

    def __init__(self, repository: ProfileRepository, orchestrator: BreedingOrchestrator) -> None:
        self._repository = repository
        self._orchestrator = orchestrator

    def quote(self, parent1_id: str, parent2_id: str) -> EligibilityResult:
        """Eligibility and price for a summon, without locking or committing."""
        return self._orchestrator.check_eligibility(
            self._repository.get(parent1_id), self._repository.get(parent2_id)
        )

    def summon(
        self, parent1_id: str, parent2_id: str, offspring_name: str, owner: str
    ) -> BreedingResult:
        """Re-validate and commit a summon under both parents' locks.

        Raises:
            IneligibleBreedingError: If the pair is not eligible at commit time.
            ConcurrencyConflictError: If a parent changed outside the lock.
            ProfileNotFoundError: If either parent is unknown.
        """
        with ExitStack() as stack:
            for profile_id in sorted({parent1_id, parent2_id}):
                stack.enter_context(self._repository.lock_for(profile_id))

            parent1 = self._repository.get(parent1_id)
            parent2 = self._repository.get(parent2_id)
            result = self._orchestrator.execute_breeding(parent1, parent2, offspring_name, owner)
            self._repository.commit_summon(result)

        logger.info(
            "Committed summon %s -> %s",
            result.receipt.id,
            result.offspring.id,
            extra={"receipt_id": result.receipt.id, "cost": result.cost},
        )
        return result
