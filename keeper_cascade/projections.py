"""Multi-season keeper cost projections and league keeper summaries."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from keeper_cascade.config import FRANCHISE_ROUND, LeagueKeeperSettings
from keeper_cascade.eligibility import KeeperTerms, escalate_cost
from keeper_cascade.models import Keeper, KeeperType, Player

logger = logging.getLogger(__name__)

DEFAULT_PROJECTION_YEARS = 3


class ProjectionStatus(str, Enum):
    REGULAR = "REGULAR"
    FRANCHISE_ONLY = "FRANCHISE_ONLY"
    INELIGIBLE = "INELIGIBLE"


class ValueTrajectory(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    EXPIRING = "EXPIRING"


@dataclass(frozen=True)
class YearProjection:
    """Projected keeper terms for one future season, assuming kept every year."""

    season: int
    cost: int | None
    status: ProjectionStatus
    years_kept: int
    reason: str

    @property
    def is_eligible(self) -> bool:
        return self.status != ProjectionStatus.INELIGIBLE


@dataclass(frozen=True)
class KeeperProjection:
    """Keeper outlook for one player on one roster."""

    player_id: str
    player_name: str
    position: str | None
    current_cost: int
    consecutive_years: int
    regular_years_remaining: int
    projections: tuple[YearProjection, ...]
    value_trajectory: ValueTrajectory


@dataclass
class LeagueKeeperSummary:
    """League-wide keeper counts for one season."""

    season: int
    total_keepers: int = 0
    franchise_tags_used: int = 0
    expiring_this_season: int = 0
    expiring_next_season: int = 0
    average_keeper_cost: float = 0.0
    keepers_by_position: dict[str, int] = field(default_factory=dict)


def _project_year(
    terms: KeeperTerms,
    offset: int,
    settings: LeagueKeeperSettings,
    franchise_available: bool,
) -> YearProjection:
    season = terms.season + offset
    years_kept = terms.years_kept + offset
    max_years = settings.regular_keeper_max_years

    if years_kept <= max_years:
        consecutive = terms.consecutive_years + offset
        cost = escalate_cost(terms.base_cost, consecutive, settings)
        if years_kept == max_years:
            reason = f"Round {cost} - final regular year, Franchise Tag only after"
        else:
            reason = f"Round {cost} (Year {years_kept} of {max_years})"
        return YearProjection(
            season, cost, ProjectionStatus.REGULAR, years_kept, reason
        )

    if franchise_available:
        return YearProjection(
            season,
            FRANCHISE_ROUND,
            ProjectionStatus.FRANCHISE_ONLY,
            years_kept,
            f"Exceeded {max_years} regular years - Franchise Tag only",
        )

    return YearProjection(
        season,
        None,
        ProjectionStatus.INELIGIBLE,
        years_kept,
        f"Exceeded {max_years} regular years and no franchise tag available",
    )


def project_keeper(
    player: Player,
    terms: KeeperTerms,
    settings: LeagueKeeperSettings,
    years: int = DEFAULT_PROJECTION_YEARS,
    franchise_available: bool = True,
) -> KeeperProjection:
    """Project a player's keeper cost and status over the next seasons.

    The first projected season is terms.season. Each later season assumes the
    player was kept the season before, so cost improves one round per year
    until the regular-keeper limit is reached.

    Args:
        player: Player being projected
        terms: Keeper terms for the player's current roster and season
        settings: League keeper settings
        years: Number of seasons to project
        franchise_available: Whether the roster can spend a franchise tag

    Returns:
        KeeperProjection with one YearProjection per season
    """
    projections = tuple(
        _project_year(terms, offset, settings, franchise_available)
        for offset in range(years)
    )

    remaining = max(0, settings.regular_keeper_max_years - terms.consecutive_years)
    if remaining <= 1:
        trajectory = ValueTrajectory.EXPIRING
    elif terms.escalated_cost > settings.minimum_round:
        trajectory = ValueTrajectory.IMPROVING
    else:
        trajectory = ValueTrajectory.STABLE

    return KeeperProjection(
        player_id=player.player_id,
        player_name=player.name,
        position=player.position,
        current_cost=terms.escalated_cost,
        consecutive_years=terms.consecutive_years,
        regular_years_remaining=remaining,
        projections=projections,
        value_trajectory=trajectory,
    )


def summarize_league_keepers(
    season: int,
    keepers: list[Keeper],
    players: dict[str, Player],
    settings: LeagueKeeperSettings,
) -> LeagueKeeperSummary:
    """Count keepers, franchise tags and expiring regular keepers for a season.

    Args:
        season: Season to summarize
        keepers: Keeper records from every roster (other seasons are ignored)
        players: player_id -> Player for position breakdowns
        settings: League keeper settings

    Returns:
        LeagueKeeperSummary for the season
    """
    season_keepers = [k for k in keepers if k.season == season]
    max_years = settings.regular_keeper_max_years

    summary = LeagueKeeperSummary(season=season, total_keepers=len(season_keepers))
    positions: Counter[str] = Counter()

    for keeper in season_keepers:
        if keeper.keeper_type == KeeperType.FRANCHISE:
            summary.franchise_tags_used += 1
        elif keeper.years_kept >= max_years:
            summary.expiring_this_season += 1
        elif keeper.years_kept == max_years - 1:
            summary.expiring_next_season += 1

        player = players.get(keeper.player_id)
        position = player.position if player and player.position else "UNKNOWN"
        positions[position] += 1

    if season_keepers:
        total_cost = sum(k.final_cost for k in season_keepers)
        summary.average_keeper_cost = total_cost / len(season_keepers)
    summary.keepers_by_position = dict(positions)

    logger.debug(
        f"Keeper summary {season}: {summary.total_keepers} keepers, "
        f"{summary.franchise_tags_used} franchise tags"
    )
    return summary
