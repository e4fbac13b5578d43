"""Keeper selection validation with structured, human-readable results."""

import logging

from keeper_cascade.cascade import CascadeConflict
from keeper_cascade.config import LeagueKeeperSettings
from keeper_cascade.eligibility import EligibilityResult
from keeper_cascade.models import Keeper, KeeperType

logger = logging.getLogger(__name__)


class ValidationResult:
    """Container for keeper validation results."""

    def __init__(self) -> None:
        """Initialize validation result container."""
        self.passed: bool = True
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.messages: list[str] = []

    def add_failure(self, message: str) -> None:
        """Add a validation failure message."""
        self.passed = False
        self.errors.append(message)
        self.messages.append(f"❌ {message}")
        logger.warning(message)

    def add_warning(self, message: str) -> None:
        """Add a warning that does not fail validation."""
        self.warnings.append(message)
        self.messages.append(f"⚠️  {message}")
        logger.info(message)

    def add_success(self, message: str) -> None:
        """Add a validation success message."""
        self.messages.append(f"✅ {message}")
        logger.info(message)

    def add_info(self, message: str) -> None:
        """Add informational message."""
        self.messages.append(f"ℹ️  {message}")
        logger.info(message)


def _count_types(keepers: list[Keeper]) -> tuple[int, int]:
    franchise = sum(1 for k in keepers if k.keeper_type == KeeperType.FRANCHISE)
    return franchise, len(keepers) - franchise


def validate_keeper_addition(
    player_id: str,
    keeper_type: KeeperType,
    season_keepers: list[Keeper],
    eligibility: EligibilityResult,
    settings: LeagueKeeperSettings,
) -> ValidationResult:
    """Check whether a player can be added as a keeper.

    Rejected when the roster is at max_keepers, at the limit for the requested
    type, already keeps the player, or the player is not eligible for the type.

    Args:
        player_id: Player to add
        keeper_type: FRANCHISE or REGULAR
        season_keepers: The roster's keepers for the season
        eligibility: Eligibility of the player on the roster
        settings: League keeper settings

    Returns:
        ValidationResult; passed is False when the addition must be rejected
    """
    result = ValidationResult()
    franchise_count, regular_count = _count_types(season_keepers)

    if any(k.player_id == player_id for k in season_keepers):
        result.add_failure("Player is already a keeper")
        return result

    if len(season_keepers) >= settings.max_keepers:
        result.add_failure(f"Maximum {settings.max_keepers} keepers allowed")

    if keeper_type == KeeperType.FRANCHISE:
        if franchise_count >= settings.max_franchise_tags:
            result.add_failure(
                f"Maximum {settings.max_franchise_tags} franchise tags allowed"
            )
    else:
        if regular_count >= settings.max_regular_keepers:
            result.add_failure(
                f"Maximum {settings.max_regular_keepers} regular keepers allowed"
            )
        if eligibility.is_eligible and not eligibility.regular_eligible:
            result.add_failure(
                eligibility.reason or "Player can only be kept with a Franchise Tag"
            )

    if not eligibility.is_eligible:
        result.add_failure(eligibility.reason or "Player is not eligible to keep")

    if result.passed:
        result.add_success(f"{player_id} can be kept as {keeper_type.value}")
    return result


def validate_keeper_removal(keeper: Keeper) -> ValidationResult:
    """Check whether a keeper can be removed or edited."""
    result = ValidationResult()
    if keeper.is_locked:
        result.add_failure("This keeper is locked and cannot be removed")
    return result


def validate_keeper_selections(
    season_keepers: list[Keeper],
    eligibility: dict[str, EligibilityResult],
    settings: LeagueKeeperSettings,
    player_names: dict[str, str] | None = None,
    conflicts: list[CascadeConflict] | None = None,
) -> ValidationResult:
    """Validate a roster's complete keeper set for a season.

    Limit overruns, ineligible regular keepers and keepers the cascade could not
    place are errors. Regular keepers in their final eligible year are warnings.

    Args:
        season_keepers: The roster's keepers for the season
        eligibility: player_id -> eligibility for each keeper
        settings: League keeper settings
        player_names: player_id -> display name for messages
        conflicts: Cascade conflicts for the season's keepers

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()
    names = player_names or {}
    franchise_count, regular_count = _count_types(season_keepers)
    total = len(season_keepers)

    if total > settings.max_keepers:
        result.add_failure(
            f"Too many keepers selected ({total}/{settings.max_keepers})"
        )
    if franchise_count > settings.max_franchise_tags:
        result.add_failure(
            f"Too many franchise tags ({franchise_count}/{settings.max_franchise_tags})"
        )
    if regular_count > settings.max_regular_keepers:
        result.add_failure(
            f"Too many regular keepers ({regular_count}/{settings.max_regular_keepers})"
        )

    for keeper in season_keepers:
        name = names.get(keeper.player_id, keeper.player_id)
        status = eligibility.get(keeper.player_id)
        if status is None:
            result.add_info(f"{name}: no eligibility data")
            continue

        if keeper.keeper_type == KeeperType.REGULAR:
            if not status.regular_eligible:
                reason = status.reason or "not eligible as a regular keeper"
                result.add_failure(f"{name}: {reason}")
            elif status.years_kept == settings.regular_keeper_max_years:
                result.add_warning(
                    f"{name} is in their final year of keeper eligibility"
                )

    for conflict in conflicts or []:
        name = names.get(conflict.player_id, conflict.player_id)
        result.add_failure(f"{name}: {conflict.reason}")

    if result.passed:
        result.add_success(f"{total} keepers within league limits")
    return result
