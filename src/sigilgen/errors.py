"""Error hierarchy for sigilgen.

Four kinds of failure leave the core:

- IneligibleBreedingError: expected and user-facing (self pairing, relatedness,
  exhausted summons, active cooldown). Carries a machine-checkable category.
- LevelUpError: expected and user-facing (max level reached, not enough XP).
- InvariantViolationError: programmer error (unknown archetype or rarity,
  malformed genome, stat below 1, summon budget out of range). Never recovered.
- ConcurrencyConflictError: a profile changed between read and commit. Retryable
  by re-fetching and re-checking eligibility.
"""

from __future__ import annotations

from enum import StrEnum


class IneligibilityReason(StrEnum):
    """Categories reported when two creatures cannot be summoned together."""

    SELF = "self"
    RELATED = "related"
    NO_SUMMONS_REMAINING = "no_summons_remaining"
    ON_COOLDOWN = "on_cooldown"


class SigilError(Exception):
    """Base for all sigilgen errors."""

    pass


class InvariantViolationError(SigilError):
    """A registry lookup or data structure broke a core invariant."""

    pass


class IneligibleBreedingError(SigilError):
    """Two creatures failed the eligibility check."""

    def __init__(self, category: IneligibilityReason, reason: str) -> None:
        self.category = category
        self.reason = reason
        super().__init__(reason)


class ConcurrencyConflictError(SigilError):
    """A profile's version changed between read and commit."""

    def __init__(self, profile_id: str, expected_version: int, actual_version: int) -> None:
        self.profile_id = profile_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Profile '{profile_id}' changed during commit "
            f"(expected version {expected_version}, found {actual_version})"
        )


class ProfileNotFoundError(SigilError):
    """No profile is stored under the requested identity."""

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"Profile '{profile_id}' not found")


class LevelUpError(SigilError):
    """A creature is not ready to level up (max level or too little XP)."""

    def __init__(self, profile_id: str, reason: str) -> None:
        self.profile_id = profile_id
        self.reason = reason
        super().__init__(reason)
