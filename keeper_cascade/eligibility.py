"""Keeper eligibility and base/escalated cost calculation.

All functions here are pure: the caller pre-fetches a player's draft picks,
inbound transactions and keeper history into a PlayerFacts record.

Cost rules:
    - Drafted players: draft round - cost_reduction_per_year (min minimum_round)
    - Traded players (before the deadline): same formula on the ORIGINAL round
    - Waiver/free agent/undrafted: undrafted_round
    - Traded after the deadline: undrafted_round and the years-kept run restarts
    - Each consecutive year kept improves the cost by one round
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from keeper_cascade.config import (
    FRANCHISE_ROUND,
    LeagueKeeperSettings,
    is_trade_after_deadline,
    trade_season_for_date,
)
from keeper_cascade.errors import ConfigurationError
from keeper_cascade.models import (
    AcquisitionType,
    Keeper,
    KeeperType,
    PlayerFacts,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

_TRANSACTION_ACQUISITIONS = {
    TransactionType.TRADE: AcquisitionType.TRADE,
    TransactionType.WAIVER: AcquisitionType.WAIVER,
    TransactionType.FREE_AGENT: AcquisitionType.FREE_AGENT,
}


@dataclass(frozen=True)
class Acquisition:
    """How a roster obtained a player.

    Attributes:
        acquisition_type: DRAFTED, TRADE, WAIVER or FREE_AGENT
        acquired_at: Timestamp of the acquiring transaction, if any
        draft_round: Round of the most recent draft selection (DRAFTED only)
        original_draft_round: Round of the player's first draft selection
        from_roster_id: Roster that traded the player away (TRADE only)
    """

    acquisition_type: AcquisitionType
    acquired_at: datetime | None = None
    draft_round: int | None = None
    original_draft_round: int | None = None
    from_roster_id: str | None = None


@dataclass(frozen=True)
class KeeperTerms:
    """Cost terms for keeping a player on a roster in a season."""

    player_id: str
    roster_id: str
    season: int
    acquisition: Acquisition
    is_post_deadline_trade: bool
    base_cost: int
    consecutive_years: int
    escalated_cost: int
    cost_breakdown: str

    @property
    def years_kept(self) -> int:
        """Keeper year this season would be (1 = first year kept)."""
        return self.consecutive_years + 1


@dataclass(frozen=True)
class EligibilityResult:
    """Whether and how a player can be kept."""

    player_id: str
    is_eligible: bool
    reason: str | None
    years_kept: int
    consecutive_years: int
    acquisition_type: AcquisitionType
    is_post_deadline_trade: bool
    regular_eligible: bool
    franchise_available: bool
    original_draft_round: int | None = None
    draft_round: int | None = None
    acquisition_date: datetime | None = None

    @property
    def franchise_only(self) -> bool:
        """True when the player can only be kept with a franchise tag."""
        return self.is_eligible and not self.regular_eligible


@dataclass(frozen=True)
class CostOption:
    """Cost of one keeper designation."""

    base_cost: int
    final_cost: int
    breakdown: str


@dataclass(frozen=True)
class CostResult:
    """Keeper cost per designation; None where the designation is unavailable."""

    player_id: str
    franchise: CostOption | None
    regular: CostOption | None


def require_settings(settings: LeagueKeeperSettings | None) -> LeagueKeeperSettings:
    """Return settings or raise if the league has none configured."""
    if settings is None:
        raise ConfigurationError("League keeper settings not configured")
    return settings


def _is_trade_after_draft(transaction: Transaction | None, draft_season: int) -> bool:
    """Check whether an inbound trade happened after a draft."""
    if transaction is None or transaction.transaction_type != TransactionType.TRADE:
        return False
    return trade_season_for_date(transaction.timestamp) >= draft_season


def determine_acquisition(facts: PlayerFacts, roster_id: str) -> Acquisition:
    """Classify how a roster acquired a player.

    Order of checks:
        1. Most recent draft pick was this roster's (and no trade since) -> DRAFTED
        2. Most recent inbound transaction is a trade -> TRADE
        3. Drafted elsewhere, picked up within one season of the draft -> DRAFTED
        4. Most recent inbound transaction type (WAIVER/FREE_AGENT)
        5. No record at all -> WAIVER

    Args:
        facts: Pre-fetched history for the player
        roster_id: Roster to classify the acquisition for

    Returns:
        Acquisition describing type, timing and draft rounds
    """
    recent_pick = facts.most_recent_draft_pick()
    original_pick = facts.original_draft_pick()
    original_round = original_pick.round if original_pick else None
    latest = facts.latest_transaction_to(roster_id)

    if (
        recent_pick is not None
        and recent_pick.roster_id == roster_id
        and not _is_trade_after_draft(latest, recent_pick.season)
    ):
        return Acquisition(
            acquisition_type=AcquisitionType.DRAFTED,
            draft_round=recent_pick.round,
            original_draft_round=original_round,
        )

    if latest is not None and latest.transaction_type == TransactionType.TRADE:
        return Acquisition(
            acquisition_type=AcquisitionType.TRADE,
            acquired_at=latest.timestamp,
            original_draft_round=original_round,
            from_roster_id=latest.from_roster_id,
        )

    if recent_pick is not None and latest is not None:
        # Dropped and picked up the same season keeps the draft value
        if latest.timestamp.year <= recent_pick.season + 1:
            return Acquisition(
                acquisition_type=AcquisitionType.DRAFTED,
                acquired_at=latest.timestamp,
                draft_round=recent_pick.round,
                original_draft_round=original_round,
            )

    if latest is not None:
        return Acquisition(
            acquisition_type=_TRANSACTION_ACQUISITIONS.get(
                latest.transaction_type, AcquisitionType.WAIVER
            ),
            acquired_at=latest.timestamp,
            original_draft_round=original_round,
        )

    return Acquisition(
        acquisition_type=AcquisitionType.WAIVER, original_draft_round=original_round
    )


def detect_post_deadline_trade(
    acquisition: Acquisition, settings: LeagueKeeperSettings
) -> bool:
    """Check whether a TRADE acquisition happened after the trade deadline."""
    if acquisition.acquisition_type != AcquisitionType.TRADE:
        return False
    if acquisition.acquired_at is None:
        return False
    return is_trade_after_deadline(acquisition.acquired_at, settings)


def draft_round_cost(draft_round: int, settings: LeagueKeeperSettings) -> int:
    """Base cost for a player drafted in a round.

    Never better than minimum_round and never worse than undrafted_round.
    """
    cost = max(settings.minimum_round, draft_round - settings.cost_reduction_per_year)
    return min(cost, settings.undrafted_round)


def calculate_base_cost(
    acquisition: Acquisition,
    settings: LeagueKeeperSettings,
    is_post_deadline_trade: bool = False,
) -> tuple[int, str]:
    """Calculate a player's base keeper cost before consecutive-year escalation.

    Args:
        acquisition: How the roster acquired the player
        settings: League keeper settings
        is_post_deadline_trade: Trade after the deadline forces undrafted_round

    Returns:
        Tuple of (base_cost, human-readable breakdown)
    """
    undrafted = settings.undrafted_round
    reduction = settings.cost_reduction_per_year

    if is_post_deadline_trade:
        return undrafted, f"Traded after deadline = Round {undrafted}"

    acq_type = acquisition.acquisition_type
    if acq_type == AcquisitionType.DRAFTED and acquisition.draft_round is not None:
        cost = draft_round_cost(acquisition.draft_round, settings)
        return cost, (
            f"Drafted in Round {acquisition.draft_round} - {reduction} = Round {cost}"
        )

    if acq_type == AcquisitionType.TRADE:
        if acquisition.original_draft_round is None:
            return undrafted, f"Traded, never drafted = Round {undrafted}"
        cost = draft_round_cost(acquisition.original_draft_round, settings)
        return cost, (
            f"Traded - inherits original Round {acquisition.original_draft_round} "
            f"- {reduction} = Round {cost}"
        )

    if acq_type == AcquisitionType.FREE_AGENT:
        return undrafted, f"Free agent pickup = Round {undrafted}"

    return undrafted, f"Waiver pickup = Round {undrafted}"


def count_consecutive_years(
    facts: PlayerFacts,
    roster_id: str,
    season: int,
    acquisition: Acquisition,
    is_post_deadline_trade: bool = False,
) -> int:
    """Count the unbroken run of seasons the player was kept before `season`.

    Walks backward from season - 1. Seasons kept by the roster that traded the
    player away count for a pre-deadline trade. After a post-deadline trade only
    seasons after the trade's season count.

    Args:
        facts: Pre-fetched history for the player
        roster_id: Roster keeping the player
        season: Season being evaluated
        acquisition: How the roster acquired the player
        is_post_deadline_trade: Whether the acquisition reset keeper value

    Returns:
        Number of consecutive prior seasons kept
    """
    rosters = {roster_id}
    earliest_counted: int | None = None

    if acquisition.acquisition_type == AcquisitionType.TRADE:
        if is_post_deadline_trade and acquisition.acquired_at is not None:
            earliest_counted = trade_season_for_date(acquisition.acquired_at) + 1
        elif acquisition.from_roster_id:
            rosters.add(acquisition.from_roster_id)

    kept_seasons = {
        k.season
        for k in facts.keeper_history
        if k.player_id == facts.player_id and k.roster_id in rosters
    }

    consecutive = 0
    check_season = season - 1
    while check_season in kept_seasons:
        if earliest_counted is not None and check_season < earliest_counted:
            break
        consecutive += 1
        check_season -= 1

    return consecutive


def escalate_cost(
    base_cost: int, consecutive_years: int, settings: LeagueKeeperSettings
) -> int:
    """Improve a base cost by one round per consecutive year kept."""
    return max(settings.minimum_round, base_cost - consecutive_years)


def calculate_keeper_terms(
    player_id: str,
    roster_id: str,
    season: int,
    facts: PlayerFacts,
    settings: LeagueKeeperSettings | None,
) -> KeeperTerms:
    """Derive acquisition, base cost, years kept and escalated cost.

    Args:
        player_id: Player to evaluate
        roster_id: Roster that would keep the player
        season: Season the player would be kept for
        facts: Pre-fetched history for the player
        settings: League keeper settings

    Returns:
        KeeperTerms for the player on the roster

    Raises:
        ConfigurationError: If settings are missing
    """
    settings = require_settings(settings)

    acquisition = determine_acquisition(facts, roster_id)
    post_deadline = detect_post_deadline_trade(acquisition, settings)
    base_cost, breakdown = calculate_base_cost(acquisition, settings, post_deadline)

    consecutive = count_consecutive_years(
        facts, roster_id, season, acquisition, post_deadline
    )

    escalated = escalate_cost(base_cost, consecutive, settings)
    if consecutive > 0:
        breakdown = (
            f"{breakdown}; kept {consecutive} consecutive year(s) = Round {escalated}"
        )

    logger.debug(
        f"Keeper terms {player_id} on {roster_id} ({season}): "
        f"{acquisition.acquisition_type.value}, base {base_cost}, "
        f"{consecutive} yrs, escalated {escalated}"
        + (" [post-deadline trade]" if post_deadline else "")
    )

    return KeeperTerms(
        player_id=player_id,
        roster_id=roster_id,
        season=season,
        acquisition=acquisition,
        is_post_deadline_trade=post_deadline,
        base_cost=base_cost,
        consecutive_years=consecutive,
        escalated_cost=escalated,
        cost_breakdown=breakdown,
    )


def _franchise_tags_used(
    player_id: str, roster_id: str, season: int, current_keepers: list[Keeper]
) -> int:
    return sum(
        1
        for k in current_keepers
        if k.roster_id == roster_id
        and k.season == season
        and k.keeper_type == KeeperType.FRANCHISE
        and k.player_id != player_id
    )


def evaluate_keeper(
    player_id: str,
    roster_id: str,
    season: int,
    facts: PlayerFacts,
    settings: LeagueKeeperSettings | None,
    current_keepers: list[Keeper] | None = None,
) -> tuple[EligibilityResult, CostResult]:
    """Evaluate eligibility and cost options for keeping one player.

    A player kept regular_keeper_max_years consecutive years can only be kept
    with a franchise tag. With every franchise tag in use the player is
    ineligible.

    Args:
        player_id: Player to evaluate
        roster_id: Roster that would keep the player
        season: Season the player would be kept for
        facts: Pre-fetched history for the player
        settings: League keeper settings
        current_keepers: The roster's keeper records for `season`

    Returns:
        Tuple of (EligibilityResult, CostResult)

    Raises:
        ConfigurationError: If settings are missing
    """
    settings = require_settings(settings)
    terms = calculate_keeper_terms(player_id, roster_id, season, facts, settings)

    franchise_used = _franchise_tags_used(
        player_id, roster_id, season, current_keepers or []
    )
    franchise_available = franchise_used < settings.max_franchise_tags
    regular_eligible = terms.consecutive_years < settings.regular_keeper_max_years

    reason: str | None = None
    if regular_eligible:
        is_eligible = True
    elif franchise_available:
        is_eligible = True
        reason = (
            f"Kept {terms.consecutive_years} consecutive years "
            f"(max {settings.regular_keeper_max_years}) - Franchise Tag only"
        )
    else:
        is_eligible = False
        reason = (
            f"Kept {terms.consecutive_years} consecutive years "
            f"(max {settings.regular_keeper_max_years}) and all "
            f"{settings.max_franchise_tags} franchise tags are used"
        )

    eligibility = EligibilityResult(
        player_id=player_id,
        is_eligible=is_eligible,
        reason=reason,
        years_kept=terms.years_kept,
        consecutive_years=terms.consecutive_years,
        acquisition_type=terms.acquisition.acquisition_type,
        is_post_deadline_trade=terms.is_post_deadline_trade,
        regular_eligible=regular_eligible,
        franchise_available=franchise_available,
        original_draft_round=terms.acquisition.original_draft_round,
        draft_round=terms.acquisition.draft_round,
        acquisition_date=terms.acquisition.acquired_at,
    )

    franchise = (
        CostOption(
            base_cost=FRANCHISE_ROUND,
            final_cost=FRANCHISE_ROUND,
            breakdown=f"Franchise Tag = Round {FRANCHISE_ROUND}",
        )
        if franchise_available
        else None
    )
    regular = (
        CostOption(
            base_cost=terms.base_cost,
            final_cost=terms.escalated_cost,
            breakdown=terms.cost_breakdown,
        )
        if regular_eligible
        else None
    )

    cost = CostResult(player_id=player_id, franchise=franchise, regular=regular)
    return eligibility, cost


def calculate_keeper_eligibility(
    player_id: str,
    roster_id: str,
    season: int,
    facts: PlayerFacts,
    settings: LeagueKeeperSettings | None,
    current_keepers: list[Keeper] | None = None,
) -> EligibilityResult:
    """Eligibility half of evaluate_keeper."""
    eligibility, _ = evaluate_keeper(
        player_id, roster_id, season, facts, settings, current_keepers
    )
    return eligibility


def calculate_keeper_cost(
    player_id: str,
    roster_id: str,
    season: int,
    facts: PlayerFacts,
    settings: LeagueKeeperSettings | None,
    current_keepers: list[Keeper] | None = None,
) -> CostResult:
    """Cost half of evaluate_keeper."""
    _, cost = evaluate_keeper(
        player_id, roster_id, season, facts, settings, current_keepers
    )
    return cost
