"""Trade value calculator.

Reports how a proposed trade moves keeper value, roster composition and draft
capital between two rosters. Keeper costs after the trade follow the same
rules as eligibility: a trade before the deadline keeps cost and years kept,
a trade after the deadline resets both.

The output is facts and a 0-100 fairness score (50 = perfectly fair), never a
recommendation.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from keeper_cascade.config import (
    AGE_MAX_BONUS,
    AGE_PEAK,
    BASE_POSITION_VALUES,
    DEFAULT_POSITION_VALUE,
    DRAFT_PICK_BASE_VALUE,
    DRAFT_PICK_DECAY,
    DRAFT_PICK_MIN_VALUE,
    FAIR_TRADE_SCORE,
    FANTASY_POSITIONS,
    FUTURE_SEASON_DISCOUNT,
    KEEPER_BONUS_PER_ROUND,
    LeagueKeeperSettings,
    is_trade_after_deadline,
)
from keeper_cascade.eligibility import calculate_keeper_terms, require_settings
from keeper_cascade.models import KeeperType, Player, PlayerFacts, RosterSnapshot
from keeper_cascade.ownership import PickOwnership

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PickAsset:
    """A draft pick offered in a trade."""

    season: int
    round: int


@dataclass(frozen=True)
class TradeProposal:
    """Players and picks each side gives up.

    Attributes:
        team1_roster_id: First roster in the trade
        team2_roster_id: Second roster in the trade
        team1_player_ids: Players team 1 gives to team 2
        team2_player_ids: Players team 2 gives to team 1
        team1_picks: Picks team 1 gives to team 2
        team2_picks: Picks team 2 gives to team 1
        trade_date: When the trade is (or would be) processed
    """

    team1_roster_id: str
    team2_roster_id: str
    team1_player_ids: tuple[str, ...] = ()
    team2_player_ids: tuple[str, ...] = ()
    team1_picks: tuple[PickAsset, ...] = ()
    team2_picks: tuple[PickAsset, ...] = ()
    trade_date: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class KeeperStatus:
    """A player's keeper standing on the roster trading the player away."""

    is_current_keeper: bool
    current_cost: int | None
    years_kept: int
    max_years_allowed: int
    is_eligible_for_regular: bool
    is_eligible_for_franchise: bool
    keeper_type: KeeperType | None = None


@dataclass(frozen=True)
class CostTrajectoryYear:
    """Keeper cost in one future year on the new roster."""

    year: int
    cost: int
    is_final_year: bool


@dataclass(frozen=True)
class TradeProjection:
    """Keeper terms the player carries to the new roster."""

    new_cost: int
    cost_change: int  # negative = better (earlier round)
    new_years_kept: int
    years_kept_reset: bool
    deadline_impact: str  # "preserved" or "reset"
    cost_trajectory: tuple[CostTrajectoryYear, ...]


@dataclass(frozen=True)
class PlayerTradeValue:
    """Trade value of one player with its components."""

    player_id: str
    player_name: str
    position: str | None
    age: int | None
    keeper_status: KeeperStatus
    projection: TradeProjection
    base_position_value: int
    age_modifier: int
    keeper_value_bonus: int

    @property
    def trade_value(self) -> int:
        return self.base_position_value + self.age_modifier + self.keeper_value_bonus


@dataclass(frozen=True)
class DraftPickValue:
    """Value of a draft pick changing hands."""

    season: int
    round: int
    original_owner_id: str
    original_owner_name: str | None
    value: int
    is_owned: bool = True


@dataclass(frozen=True)
class PositionChange:
    position: str
    before: int
    after: int

    @property
    def change(self) -> int:
        return self.after - self.before


@dataclass
class TeamTradeAnalysis:
    """One roster's side of a trade."""

    roster_id: str
    roster_name: str
    trading_away: list[PlayerTradeValue]
    acquiring: list[PlayerTradeValue]
    roster_before: dict[str, int]
    roster_after: dict[str, int]
    position_changes: list[PositionChange]
    keeper_slots_before: int
    keeper_slots_after: int
    keeper_slots_max: int
    keeper_value_lost: int
    keeper_value_gained: int
    picks_given: list[DraftPickValue]
    picks_received: list[DraftPickValue]
    total_value_given: int
    total_value_received: int

    @property
    def net_keeper_value(self) -> int:
        return self.keeper_value_gained - self.keeper_value_lost

    @property
    def draft_capital_change(self) -> int:
        received = sum(p.value for p in self.picks_received)
        given = sum(p.value for p in self.picks_given)
        return received - given

    @property
    def net_value(self) -> int:
        return self.total_value_received - self.total_value_given


@dataclass(frozen=True)
class TradeFact:
    """A human-readable observation about a trade.

    Attributes:
        category: "keeper", "roster", "draft" or "value"
        description: The fact itself
    """

    category: str
    description: str


@dataclass
class TradeAnalysis:
    """Full analysis of a proposed trade."""

    season: int
    trade_date: datetime
    is_after_deadline: bool
    team1: TeamTradeAnalysis
    team2: TeamTradeAnalysis
    fairness_score: int
    value_differential: int
    facts: list[TradeFact] = field(default_factory=list)


def calculate_age_modifier(age: int | None) -> int:
    """Youth bonus: 15 points at age 24, one point more or less per year.

    24yo = +15, 30yo = +9, 39yo and up = 0. Unknown age is 0.
    """
    if not age:
        return 0
    return max(0, AGE_MAX_BONUS - (age - AGE_PEAK))


def calculate_keeper_value_bonus(cost: int | None, undrafted_round: int) -> int:
    """Bonus for a cheap keeper cost: 3 points per round better than undrafted."""
    if not cost:
        return 0
    return max(0, (undrafted_round - cost) * KEEPER_BONUS_PER_ROUND)


def calculate_position_value(position: str | None) -> int:
    return BASE_POSITION_VALUES.get(position or "", DEFAULT_POSITION_VALUE)


def calculate_cost_trajectory(
    starting_cost: int, starting_years_kept: int, max_years: int, minimum_round: int
) -> list[CostTrajectoryYear]:
    """Keeper cost for each remaining regular year on a new roster.

    Args:
        starting_cost: Cost in the first year on the new roster
        starting_years_kept: Consecutive years already kept
        max_years: regular_keeper_max_years
        minimum_round: Best round a keeper can cost

    Returns:
        One entry per remaining year, cost improving one round per year
    """
    years_remaining = max_years - starting_years_kept

    trajectory = []
    for year in range(1, years_remaining + 1):
        trajectory.append(
            CostTrajectoryYear(
                year=year,
                cost=max(minimum_round, starting_cost - (year - 1)),
                is_final_year=year == years_remaining,
            )
        )
    return trajectory


def calculate_draft_pick_value(round_num: int, season: int, current_season: int) -> int:
    """Value of a pick: 32 for round 1, 4 less per round, floor 2.

    Picks in future seasons are discounted 10% per year out.
    """
    decayed = DRAFT_PICK_BASE_VALUE - (round_num - 1) * DRAFT_PICK_DECAY
    value = float(max(DRAFT_PICK_MIN_VALUE, decayed))

    years_out = season - current_season
    if years_out > 0:
        value *= (1 - FUTURE_SEASON_DISCOUNT) ** years_out

    return round(value)


def calculate_fairness_score(value_given1: int, value_given2: int) -> int:
    """Score a trade from 0 to 100 where 50 is perfectly balanced.

    score = 50 - 50 * |v1 - v2| / (v1 + v2), clamped to [0, 100]. With no
    value on either side the trade is scored 50.
    """
    total = value_given1 + value_given2
    if total <= 0:
        return FAIR_TRADE_SCORE

    diff = abs(value_given1 - value_given2)
    score = round(FAIR_TRADE_SCORE - (diff / total) * FAIR_TRADE_SCORE)
    return max(0, min(100, score))


def _keeper_status(
    player_id: str,
    source: RosterSnapshot,
    season: int,
    consecutive_years: int,
    settings: LeagueKeeperSettings,
) -> KeeperStatus:
    season_keepers = source.keepers_for(season)
    current = next((k for k in season_keepers if k.player_id == player_id), None)
    franchise_count = sum(
        1 for k in season_keepers if k.keeper_type == KeeperType.FRANCHISE
    )
    regular_count = len(season_keepers) - franchise_count

    return KeeperStatus(
        is_current_keeper=current is not None,
        current_cost=current.final_cost if current else None,
        years_kept=consecutive_years,
        max_years_allowed=settings.regular_keeper_max_years,
        is_eligible_for_regular=(
            consecutive_years < settings.regular_keeper_max_years
            and regular_count < settings.max_regular_keepers
        ),
        is_eligible_for_franchise=franchise_count < settings.max_franchise_tags,
        keeper_type=current.keeper_type if current else None,
    )


def project_player_after_trade(
    player: Player,
    source: RosterSnapshot,
    facts: PlayerFacts,
    settings: LeagueKeeperSettings,
    season: int,
    trade_date: datetime,
) -> PlayerTradeValue:
    """Project a player's keeper terms and trade value on the receiving roster.

    Args:
        player: Player being traded
        source: Roster trading the player away
        facts: Pre-fetched history for the player
        settings: League keeper settings
        season: Keeper season the projection is for
        trade_date: When the trade is processed

    Returns:
        PlayerTradeValue with keeper status, projection and value breakdown
    """
    terms = calculate_keeper_terms(
        player.player_id, source.roster_id, season, facts, settings
    )
    status = _keeper_status(
        player.player_id, source, season, terms.consecutive_years, settings
    )

    if is_trade_after_deadline(trade_date, settings):
        new_cost = settings.undrafted_round
        new_years_kept = 0
        reset = True
    else:
        new_cost = terms.escalated_cost
        new_years_kept = terms.consecutive_years
        reset = False

    current_cost = status.current_cost or terms.escalated_cost
    trajectory = calculate_cost_trajectory(
        new_cost,
        new_years_kept,
        settings.regular_keeper_max_years,
        settings.minimum_round,
    )

    projection = TradeProjection(
        new_cost=new_cost,
        cost_change=new_cost - current_cost,
        new_years_kept=new_years_kept,
        years_kept_reset=reset,
        deadline_impact="reset" if reset else "preserved",
        cost_trajectory=tuple(trajectory),
    )

    value = PlayerTradeValue(
        player_id=player.player_id,
        player_name=player.name,
        position=player.position,
        age=player.age,
        keeper_status=status,
        projection=projection,
        base_position_value=calculate_position_value(player.position),
        age_modifier=calculate_age_modifier(player.age),
        keeper_value_bonus=calculate_keeper_value_bonus(
            new_cost, settings.undrafted_round
        ),
    )
    logger.debug(
        f"Trade value {player.name}: {value.trade_value} "
        f"(R{current_cost} -> R{new_cost}, {projection.deadline_impact})"
    )
    return value


def _position_breakdown(positions: list[str | None]) -> dict[str, int]:
    counts = Counter(p for p in positions if p in FANTASY_POSITIONS)
    return {position: counts[position] for position in FANTASY_POSITIONS}


def build_team_analysis(
    roster: RosterSnapshot,
    season: int,
    trading_away: list[PlayerTradeValue],
    acquiring: list[PlayerTradeValue],
    picks_given: list[DraftPickValue],
    picks_received: list[DraftPickValue],
    players: dict[str, Player],
    settings: LeagueKeeperSettings,
) -> TeamTradeAnalysis:
    """Aggregate one roster's side of a trade.

    Args:
        roster: The roster, with its current players and keepers
        season: Keeper season
        trading_away: Players the roster gives up
        acquiring: Players the roster receives
        picks_given: Picks the roster gives up
        picks_received: Picks the roster receives
        players: player_id -> Player for position lookups
        settings: League keeper settings

    Returns:
        TeamTradeAnalysis for the roster
    """
    positions = [
        players[pid].position if pid in players else None for pid in roster.player_ids
    ]
    before = _position_breakdown(positions)

    after = dict(before)
    for player in trading_away:
        if player.position in after:
            after[player.position] -= 1
    for player in acquiring:
        if player.position in after:
            after[player.position] += 1

    changes = [
        PositionChange(position=pos, before=before[pos], after=after[pos])
        for pos in FANTASY_POSITIONS
        if before[pos] != after[pos]
    ]

    departing_keepers = [p for p in trading_away if p.keeper_status.is_current_keeper]
    slots_before = len(roster.keepers_for(season))

    capital_given = sum(p.value for p in picks_given)
    capital_received = sum(p.value for p in picks_received)

    return TeamTradeAnalysis(
        roster_id=roster.roster_id,
        roster_name=roster.name,
        trading_away=trading_away,
        acquiring=acquiring,
        roster_before=before,
        roster_after=after,
        position_changes=changes,
        keeper_slots_before=slots_before,
        keeper_slots_after=slots_before - len(departing_keepers),
        keeper_slots_max=settings.max_keepers,
        keeper_value_lost=sum(p.trade_value for p in departing_keepers),
        keeper_value_gained=sum(p.trade_value for p in acquiring),
        picks_given=picks_given,
        picks_received=picks_received,
        total_value_given=sum(p.trade_value for p in trading_away) + capital_given,
        total_value_received=sum(p.trade_value for p in acquiring) + capital_received,
    )


def _keeper_facts(players: list[PlayerTradeValue]) -> list[TradeFact]:
    facts = []
    for player in players:
        projection = player.projection
        if projection.years_kept_reset:
            reason = "post-deadline trade reset"
        else:
            reason = "preserved value"
        if projection.cost_change != 0:
            current = projection.new_cost - projection.cost_change
            direction = "increases" if projection.cost_change > 0 else "improves"
            description = (
                f"{player.player_name}: Cost {direction} from R{current} "
                f"to R{projection.new_cost} ({reason})"
            )
        else:
            description = (
                f"{player.player_name}: Cost stays R{projection.new_cost} ({reason})"
            )
        facts.append(TradeFact(category="keeper", description=description))

        if projection.years_kept_reset and player.keeper_status.years_kept > 0:
            facts.append(
                TradeFact(
                    category="keeper",
                    description=(
                        f"{player.player_name}: {player.keeper_status.years_kept} "
                        "keeper year(s) reset to 0"
                    ),
                )
            )
    return facts


def _team_facts(team: TeamTradeAnalysis) -> list[TradeFact]:
    facts = []
    for change in team.position_changes:
        direction = "gains" if change.change > 0 else "loses"
        facts.append(
            TradeFact(
                category="roster",
                description=(
                    f"{team.roster_name}: {direction} {abs(change.change)} "
                    f"{change.position}"
                ),
            )
        )

    if team.keeper_slots_before != team.keeper_slots_after:
        change = team.keeper_slots_after - team.keeper_slots_before
        direction = "gains" if change > 0 else "frees"
        plural = "s" if abs(change) > 1 else ""
        facts.append(
            TradeFact(
                category="keeper",
                description=(
                    f"{team.roster_name}: Keeper slots {team.keeper_slots_before}"
                    f"→{team.keeper_slots_after} ({direction} {abs(change)} "
                    f"slot{plural})"
                ),
            )
        )

    if team.draft_capital_change != 0:
        sign = "+" if team.draft_capital_change > 0 else ""
        facts.append(
            TradeFact(
                category="draft",
                description=(
                    f"{team.roster_name}: Draft capital "
                    f"{sign}{team.draft_capital_change} points"
                ),
            )
        )
    return facts


def generate_trade_facts(
    team1: TeamTradeAnalysis, team2: TeamTradeAnalysis
) -> list[TradeFact]:
    """List facts about a trade: keeper costs, rosters, slots, capital, value."""
    facts = _keeper_facts(team1.trading_away) + _keeper_facts(team2.trading_away)
    facts += _team_facts(team1) + _team_facts(team2)

    differential = abs(team1.net_value)
    if differential > 0:
        facts.append(
            TradeFact(
                category="value",
                description=f"Trade value differential: {differential} points",
            )
        )
    return facts


def _pick_values(
    picks: tuple[PickAsset, ...],
    roster: RosterSnapshot,
    season: int,
    ownership: PickOwnership | None,
) -> list[DraftPickValue]:
    values = []
    for pick in picks:
        is_owned = True
        if ownership is not None and ownership.season == pick.season:
            is_owned = ownership.owns(roster.roster_id, pick.round)
            if not is_owned:
                logger.warning(
                    f"{roster.name} is offering a {pick.season} round {pick.round} "
                    "pick it does not own"
                )
        values.append(
            DraftPickValue(
                season=pick.season,
                round=pick.round,
                original_owner_id=roster.roster_id,
                original_owner_name=roster.name,
                value=calculate_draft_pick_value(pick.round, pick.season, season),
                is_owned=is_owned,
            )
        )
    return values


def analyze_trade(
    proposal: TradeProposal,
    team1: RosterSnapshot,
    team2: RosterSnapshot,
    players: dict[str, Player],
    facts: dict[str, PlayerFacts],
    settings: LeagueKeeperSettings | None,
    season: int,
    ownership: PickOwnership | None = None,
) -> TradeAnalysis:
    """Analyze a proposed trade between two rosters.

    Args:
        proposal: Players and picks each side gives up
        team1: Roster giving proposal.team1_* assets
        team2: Roster giving proposal.team2_* assets
        players: player_id -> Player for every traded and rostered player
        facts: player_id -> pre-fetched history for every traded player
        settings: League keeper settings
        season: Keeper season the trade affects
        ownership: Pick ownership used to flag picks a side does not hold

    Returns:
        TradeAnalysis with both sides, fairness score and facts

    Raises:
        ConfigurationError: If settings are missing
        KeyError: If a traded player has no Player record
    """
    settings = require_settings(settings)
    after_deadline = is_trade_after_deadline(proposal.trade_date, settings)

    def project(
        player_ids: tuple[str, ...], source: RosterSnapshot
    ) -> list[PlayerTradeValue]:
        return [
            project_player_after_trade(
                players[pid],
                source,
                facts.get(pid, PlayerFacts(player_id=pid)),
                settings,
                season,
                proposal.trade_date,
            )
            for pid in player_ids
        ]

    team1_players = project(proposal.team1_player_ids, team1)
    team2_players = project(proposal.team2_player_ids, team2)
    team1_picks = _pick_values(proposal.team1_picks, team1, season, ownership)
    team2_picks = _pick_values(proposal.team2_picks, team2, season, ownership)

    team1_analysis = build_team_analysis(
        team1,
        season,
        team1_players,
        team2_players,
        team1_picks,
        team2_picks,
        players,
        settings,
    )
    team2_analysis = build_team_analysis(
        team2,
        season,
        team2_players,
        team1_players,
        team2_picks,
        team1_picks,
        players,
        settings,
    )

    fairness = calculate_fairness_score(
        team1_analysis.total_value_given, team2_analysis.total_value_given
    )
    differential = abs(
        team1_analysis.total_value_given - team2_analysis.total_value_given
    )

    logger.info(
        f"Trade {team1.name} <-> {team2.name}: fairness {fairness}, "
        f"differential {differential}"
        + (" (after deadline)" if after_deadline else "")
    )

    return TradeAnalysis(
        season=season,
        trade_date=proposal.trade_date,
        is_after_deadline=after_deadline,
        team1=team1_analysis,
        team2=team2_analysis,
        fairness_score=fairness,
        value_differential=differential,
        facts=generate_trade_facts(team1_analysis, team2_analysis),
    )
