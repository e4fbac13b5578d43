"""League snapshot pipeline: eligibility, keeper lifecycle, board and trades.

A LeagueSnapshot holds every fact for one league and keeper season. The
functions here look facts up in the snapshot and hand them to the pure
calculators. Keeper lifecycle functions (add, remove, lock) mutate the
snapshot's rosters and always re-run the cascade before returning.
"""

import logging
from dataclasses import dataclass, field, replace

from keeper_cascade.cascade import CascadeInput, CascadeResult, resolve_cascade
from keeper_cascade.config import FRANCHISE_ROUND, LeagueKeeperSettings
from keeper_cascade.draft_board import DraftBoard, build_draft_board
from keeper_cascade.eligibility import (
    CostResult,
    EligibilityResult,
    calculate_keeper_terms,
    evaluate_keeper,
    require_settings,
)
from keeper_cascade.models import (
    DraftPick,
    Keeper,
    KeeperType,
    Player,
    PlayerFacts,
    RosterSnapshot,
    TradedPick,
    Transaction,
)
from keeper_cascade.ownership import PickOwnership, build_pick_ownership
from keeper_cascade.projections import (
    DEFAULT_PROJECTION_YEARS,
    KeeperProjection,
    LeagueKeeperSummary,
    project_keeper,
    summarize_league_keepers,
)
from keeper_cascade.trade_value import TradeAnalysis, TradeProposal, analyze_trade
from keeper_cascade.validation import (
    ValidationResult,
    validate_keeper_addition,
    validate_keeper_removal,
    validate_keeper_selections,
)

logger = logging.getLogger(__name__)


@dataclass
class LeagueSnapshot:
    """Every fact the engine needs for one league and keeper season.

    Attributes:
        league_id: League identifier
        season: Keeper season (the draft the keepers are for)
        settings: League keeper settings, None when not configured
        rosters: Rosters in draft board column order
        players: player_id -> Player
        draft_picks: Historical draft picks, all seasons
        transactions: Inbound roster transactions, all seasons
        traded_picks: Pick trade records, all seasons
    """

    league_id: str
    season: int
    settings: LeagueKeeperSettings | None
    rosters: list[RosterSnapshot] = field(default_factory=list)
    players: dict[str, Player] = field(default_factory=dict)
    draft_picks: list[DraftPick] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    traded_picks: list[TradedPick] = field(default_factory=list)

    def roster(self, roster_id: str) -> RosterSnapshot:
        """Look up a roster by id.

        Raises:
            KeyError: If the roster is not in the snapshot
        """
        for roster in self.rosters:
            if roster.roster_id == roster_id:
                return roster
        raise KeyError(f"Unknown roster: {roster_id}")

    def player(self, player_id: str) -> Player:
        """Look up a player by id.

        Raises:
            KeyError: If the player is not in the snapshot
        """
        try:
            return self.players[player_id]
        except KeyError:
            raise KeyError(f"Unknown player: {player_id}") from None

    def roster_names(self) -> dict[str, str]:
        return {roster.roster_id: roster.name for roster in self.rosters}

    def all_keepers(self) -> list[Keeper]:
        return [keeper for roster in self.rosters for keeper in roster.keepers]

    def facts_for(self, player_id: str) -> PlayerFacts:
        """Collect one player's draft, transaction and keeper history."""
        return PlayerFacts(
            player_id=player_id,
            draft_picks=tuple(p for p in self.draft_picks if p.player_id == player_id),
            transactions=tuple(
                t for t in self.transactions if t.player_id == player_id
            ),
            keeper_history=tuple(
                k for k in self.all_keepers() if k.player_id == player_id
            ),
        )


@dataclass(frozen=True)
class PlayerKeeperOption:
    """Eligibility and cost of keeping one rostered player."""

    player: Player
    eligibility: EligibilityResult
    cost: CostResult


@dataclass
class KeeperChange:
    """Outcome of a keeper add/remove: validation plus the re-cascaded keepers."""

    validation: ValidationResult
    cascade: CascadeResult | None
    keepers: list[Keeper]


def evaluate_roster(
    snapshot: LeagueSnapshot, roster_id: str
) -> list[PlayerKeeperOption]:
    """Eligibility and cost for every player on a roster.

    Args:
        snapshot: League facts
        roster_id: Roster to evaluate

    Returns:
        One PlayerKeeperOption per rostered player, in roster order

    Raises:
        ConfigurationError: If the league has no keeper settings
        KeyError: If the roster or one of its players is unknown
    """
    settings = require_settings(snapshot.settings)
    roster = snapshot.roster(roster_id)
    season_keepers = roster.keepers_for(snapshot.season)

    options = []
    for player_id in roster.player_ids:
        player = snapshot.player(player_id)
        eligibility, cost = evaluate_keeper(
            player_id,
            roster_id,
            snapshot.season,
            snapshot.facts_for(player_id),
            settings,
            season_keepers,
        )
        options.append(PlayerKeeperOption(player, eligibility, cost))

    eligible = sum(1 for o in options if o.eligibility.is_eligible)
    logger.info(
        f"Evaluated {len(options)} players on {roster.name} ({snapshot.season}): "
        f"{eligible} eligible"
    )
    return options


def pick_ownership(snapshot: LeagueSnapshot) -> PickOwnership:
    """Round ownership for the snapshot's draft season."""
    settings = require_settings(snapshot.settings)
    return build_pick_ownership(
        snapshot.season,
        settings.draft_rounds,
        snapshot.roster_names(),
        snapshot.traded_picks,
    )


def _cascade_inputs(
    snapshot: LeagueSnapshot, roster: RosterSnapshot, settings: LeagueKeeperSettings
) -> list[CascadeInput]:
    inputs = []
    for keeper in roster.keepers_for(snapshot.season):
        player = snapshot.players.get(keeper.player_id)
        if keeper.keeper_type == KeeperType.FRANCHISE:
            base_cost = escalated = FRANCHISE_ROUND
        else:
            terms = calculate_keeper_terms(
                keeper.player_id,
                roster.roster_id,
                snapshot.season,
                snapshot.facts_for(keeper.player_id),
                settings,
            )
            base_cost, escalated = terms.base_cost, terms.escalated_cost
        inputs.append(
            CascadeInput(
                player_id=keeper.player_id,
                keeper_type=keeper.keeper_type,
                base_cost=base_cost,
                escalated_cost=escalated,
                player_name=player.name if player else None,
            )
        )
    return inputs


def recalculate_cascade(
    snapshot: LeagueSnapshot,
    roster_id: str,
    ownership: PickOwnership | None = None,
) -> tuple[CascadeResult, list[Keeper]]:
    """Re-run the cascade for a roster's keepers in the snapshot season.

    Does not modify the snapshot.

    Args:
        snapshot: League facts
        roster_id: Roster to resolve
        ownership: Precomputed pick ownership for the season

    Returns:
        Tuple of (CascadeResult, season keepers with final costs applied).
        Keepers reported as conflicts keep their previous final cost.
    """
    settings = require_settings(snapshot.settings)
    roster = snapshot.roster(roster_id)
    ownership = ownership or pick_ownership(snapshot)

    result = resolve_cascade(
        roster_id,
        snapshot.season,
        _cascade_inputs(snapshot, roster, settings),
        ownership.owned_rounds.get(roster_id, set()),
        settings,
    )

    placed = {keeper.player_id: keeper for keeper in result.keepers}
    updated = []
    for keeper in roster.keepers_for(snapshot.season):
        assignment = placed.get(keeper.player_id)
        if assignment is not None:
            keeper = replace(
                keeper,
                base_cost=assignment.base_cost,
                final_cost=assignment.final_cost,
            )
        updated.append(keeper)

    if result.has_errors:
        logger.warning(
            f"{roster.name}: {len(result.conflicts)} keeper(s) could not be placed"
        )
    return result, updated


def _player_name(snapshot: LeagueSnapshot, player_id: str) -> str:
    player = snapshot.players.get(player_id)
    return player.name if player else player_id


def _store_season_keepers(
    roster: RosterSnapshot, season: int, keepers: list[Keeper]
) -> None:
    roster.keepers = [k for k in roster.keepers if k.season != season] + keepers


def add_keeper(
    snapshot: LeagueSnapshot, roster_id: str, player_id: str, keeper_type: KeeperType
) -> KeeperChange:
    """Add a keeper to a roster and re-cascade its keepers.

    Args:
        snapshot: League facts (modified in place on success)
        roster_id: Roster keeping the player
        player_id: Player to keep
        keeper_type: FRANCHISE or REGULAR

    Returns:
        KeeperChange; on rejection keepers are unchanged. cascade is None when
        the player is ineligible and holds the rejected cascade when the new
        keeper would leave a keeper without an owned round.

    Raises:
        ConfigurationError: If the league has no keeper settings
        KeyError: If the roster or player is unknown
    """
    settings = require_settings(snapshot.settings)
    roster = snapshot.roster(roster_id)
    snapshot.player(player_id)
    season_keepers = roster.keepers_for(snapshot.season)

    if player_id not in roster.player_ids:
        validation = ValidationResult()
        validation.add_failure(f"Player {player_id} is not on {roster.name}")
        return KeeperChange(validation, None, season_keepers)

    eligibility, cost = evaluate_keeper(
        player_id,
        roster_id,
        snapshot.season,
        snapshot.facts_for(player_id),
        settings,
        season_keepers,
    )
    validation = validate_keeper_addition(
        player_id, keeper_type, season_keepers, eligibility, settings
    )
    option = cost.franchise if keeper_type == KeeperType.FRANCHISE else cost.regular
    if not validation.passed or option is None:
        if validation.passed:
            validation.add_failure(f"No {keeper_type.value} cost available")
        return KeeperChange(validation, None, season_keepers)

    prior_conflicts = {
        c.player_id for c in recalculate_cascade(snapshot, roster_id)[0].conflicts
    }
    keeper = Keeper(
        player_id=player_id,
        roster_id=roster_id,
        season=snapshot.season,
        keeper_type=keeper_type,
        base_cost=option.base_cost,
        final_cost=option.final_cost,
        years_kept=eligibility.years_kept,
        acquisition_type=eligibility.acquisition_type,
    )
    roster.keepers.append(keeper)

    result, updated = recalculate_cascade(snapshot, roster_id)
    new_conflicts = [c for c in result.conflicts if c.player_id not in prior_conflicts]
    if new_conflicts:
        roster.keepers = [k for k in roster.keepers if k is not keeper]
        for conflict in new_conflicts:
            validation.add_failure(
                f"{_player_name(snapshot, conflict.player_id)}: {conflict.reason}"
            )
        return KeeperChange(validation, result, season_keepers)

    logger.info(f"Added {keeper_type.value} keeper {player_id} to {roster.name}")
    _store_season_keepers(roster, snapshot.season, updated)
    return KeeperChange(validation, result, updated)


def _find_keeper(roster: RosterSnapshot, season: int, player_id: str) -> Keeper:
    for keeper in roster.keepers_for(season):
        if keeper.player_id == player_id:
            return keeper
    raise KeyError(f"{player_id} is not a {season} keeper on {roster.roster_id}")


def remove_keeper(
    snapshot: LeagueSnapshot, roster_id: str, player_id: str
) -> KeeperChange:
    """Remove an unlocked keeper and re-cascade the roster's remaining keepers.

    Raises:
        KeyError: If the roster is unknown or the player is not a keeper on it
    """
    roster = snapshot.roster(roster_id)
    keeper = _find_keeper(roster, snapshot.season, player_id)

    validation = validate_keeper_removal(keeper)
    if not validation.passed:
        return KeeperChange(validation, None, roster.keepers_for(snapshot.season))

    roster.keepers = [k for k in roster.keepers if k.key != keeper.key]
    logger.info(f"Removed keeper {player_id} from {roster.name}")

    result, updated = recalculate_cascade(snapshot, roster_id)
    for conflict in result.conflicts:
        validation.add_warning(
            f"{_player_name(snapshot, conflict.player_id)}: {conflict.reason}"
        )
    _store_season_keepers(roster, snapshot.season, updated)
    return KeeperChange(validation, result, updated)


def toggle_keeper_lock(
    snapshot: LeagueSnapshot, roster_id: str, player_id: str
) -> Keeper:
    """Flip a keeper's commissioner lock without touching its costs."""
    roster = snapshot.roster(roster_id)
    keeper = _find_keeper(roster, snapshot.season, player_id)
    toggled = replace(keeper, is_locked=not keeper.is_locked)
    roster.keepers = [toggled if k.key == keeper.key else k for k in roster.keepers]

    state = "Locked" if toggled.is_locked else "Unlocked"
    logger.info(f"{state} keeper {player_id} on {roster.name}")
    return toggled


def validate_roster_keepers(
    snapshot: LeagueSnapshot, roster_id: str
) -> ValidationResult:
    """Validate a roster's full keeper set.

    Keepers the cascade cannot place fail validation alongside limit and
    eligibility errors.
    """
    settings = require_settings(snapshot.settings)
    roster = snapshot.roster(roster_id)
    season_keepers = roster.keepers_for(snapshot.season)

    eligibility = {
        keeper.player_id: evaluate_keeper(
            keeper.player_id,
            roster_id,
            snapshot.season,
            snapshot.facts_for(keeper.player_id),
            settings,
            season_keepers,
        )[0]
        for keeper in season_keepers
    }
    names = {
        pid: player.name
        for pid, player in snapshot.players.items()
        if pid in eligibility
    }
    result, _ = recalculate_cascade(snapshot, roster_id)
    return validate_keeper_selections(
        season_keepers, eligibility, settings, names, result.conflicts
    )


def cascade_league(
    snapshot: LeagueSnapshot,
) -> dict[str, tuple[CascadeResult, list[Keeper]]]:
    """Run the cascade for every roster with one shared ownership pass."""
    ownership = pick_ownership(snapshot)
    results = {
        roster.roster_id: recalculate_cascade(snapshot, roster.roster_id, ownership)
        for roster in snapshot.rosters
    }
    conflicts = sum(len(result.conflicts) for result, _ in results.values())
    logger.info(
        f"Cascaded {len(results)} rosters for {snapshot.season}: "
        f"{conflicts} conflict(s)"
    )
    return results


def build_league_draft_board(snapshot: LeagueSnapshot) -> DraftBoard:
    """Cascade every roster and render the season's draft board."""
    settings = require_settings(snapshot.settings)
    ownership = pick_ownership(snapshot)
    cascades = {
        roster.roster_id: recalculate_cascade(snapshot, roster.roster_id, ownership)[0]
        for roster in snapshot.rosters
    }
    logger.info(f"Building draft board for {snapshot.league_id} ({snapshot.season})")
    return build_draft_board(
        snapshot.league_id,
        snapshot.season,
        snapshot.roster_names(),
        ownership,
        cascades,
        settings.draft_rounds,
    )


def analyze_snapshot_trade(
    snapshot: LeagueSnapshot, proposal: TradeProposal
) -> TradeAnalysis:
    """Analyze a proposed trade using the snapshot's rosters and history."""
    traded = proposal.team1_player_ids + proposal.team2_player_ids
    return analyze_trade(
        proposal,
        snapshot.roster(proposal.team1_roster_id),
        snapshot.roster(proposal.team2_roster_id),
        snapshot.players,
        {pid: snapshot.facts_for(pid) for pid in traded},
        snapshot.settings,
        snapshot.season,
        pick_ownership(snapshot),
    )


def project_roster(
    snapshot: LeagueSnapshot,
    roster_id: str,
    years: int = DEFAULT_PROJECTION_YEARS,
    player_ids: list[str] | None = None,
) -> list[KeeperProjection]:
    """Project keeper costs for a roster's players.

    Defaults to the roster's keepers for the season, or every rostered player
    when none have been selected yet.
    """
    settings = require_settings(snapshot.settings)
    roster = snapshot.roster(roster_id)
    season_keepers = roster.keepers_for(snapshot.season)
    if player_ids is None:
        player_ids = [k.player_id for k in season_keepers] or list(roster.player_ids)

    projections = []
    for player_id in player_ids:
        facts = snapshot.facts_for(player_id)
        eligibility, _ = evaluate_keeper(
            player_id, roster_id, snapshot.season, facts, settings, season_keepers
        )
        terms = calculate_keeper_terms(
            player_id, roster_id, snapshot.season, facts, settings
        )
        projections.append(
            project_keeper(
                snapshot.player(player_id),
                terms,
                settings,
                years=years,
                franchise_available=eligibility.franchise_available,
            )
        )
    return projections


def league_summary(snapshot: LeagueSnapshot) -> LeagueKeeperSummary:
    """Summarize keeper usage across the league for the snapshot season."""
    settings = require_settings(snapshot.settings)
    return summarize_league_keepers(
        snapshot.season, snapshot.all_keepers(), snapshot.players, settings
    )
