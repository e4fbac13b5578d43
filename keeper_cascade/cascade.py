"""Cascade resolution of keeper costs into unique, owned draft rounds."""

import logging
from dataclasses import dataclass, field

from keeper_cascade.config import FRANCHISE_ROUND, LeagueKeeperSettings
from keeper_cascade.eligibility import require_settings
from keeper_cascade.models import KeeperType

logger = logging.getLogger(__name__)

# Keepers claim rounds in this order: best escalated cost first, then player id.
# Changing it changes every cascaded assignment in the league.
CASCADE_SORT_POLICY = ("escalated_cost", "player_id")


@dataclass(frozen=True)
class CascadeInput:
    """A keeper proposed for a roster, with the round its cost asks for.

    Attributes:
        player_id: Player being kept
        keeper_type: FRANCHISE or REGULAR
        base_cost: Cost before consecutive-year escalation
        escalated_cost: Desired round after escalation (ignored for franchise tags)
        player_name: Display name used in cascade reasons
    """

    player_id: str
    keeper_type: KeeperType
    base_cost: int
    escalated_cost: int
    player_name: str | None = None

    @property
    def label(self) -> str:
        return self.player_name or self.player_id


@dataclass(frozen=True)
class CascadeKeeper:
    """Final round assignment for one keeper."""

    player_id: str
    keeper_type: KeeperType
    base_cost: int
    escalated_cost: int
    final_cost: int
    is_cascaded: bool
    cascade_steps: int = 0
    reason: str | None = None


@dataclass(frozen=True)
class CascadeConflict:
    """A keeper the resolver could not place in an owned, unclaimed round."""

    player_id: str
    round: int
    reason: str


@dataclass
class CascadeResult:
    """Cascade output for one roster and season."""

    roster_id: str
    season: int
    keepers: list[CascadeKeeper] = field(default_factory=list)
    conflicts: list[CascadeConflict] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """True when at least one keeper could not be placed."""
        return bool(self.conflicts)

    def final_cost_for(self, player_id: str) -> int | None:
        """Assigned round for a player, or None if unplaced."""
        for keeper in self.keepers:
            if keeper.player_id == player_id:
                return keeper.final_cost
        return None


def cascade_sort_key(keeper: CascadeInput) -> tuple[int, str]:
    """Sort key implementing CASCADE_SORT_POLICY."""
    return (keeper.escalated_cost, keeper.player_id)


def _place_franchise_tags(
    franchise: list[CascadeInput],
    owned_rounds: set[int],
    claimed: dict[int, CascadeInput],
    result: CascadeResult,
) -> None:
    for keeper in sorted(franchise, key=lambda k: k.player_id):
        if FRANCHISE_ROUND not in owned_rounds:
            reason = (
                f"Round {FRANCHISE_ROUND} pick traded away - franchise tag has no slot"
            )
        elif FRANCHISE_ROUND in claimed:
            holder = claimed[FRANCHISE_ROUND].label
            reason = (
                f"Round {FRANCHISE_ROUND} already used by franchise tag on {holder}"
            )
        else:
            claimed[FRANCHISE_ROUND] = keeper
            result.keepers.append(
                CascadeKeeper(
                    player_id=keeper.player_id,
                    keeper_type=KeeperType.FRANCHISE,
                    base_cost=FRANCHISE_ROUND,
                    escalated_cost=FRANCHISE_ROUND,
                    final_cost=FRANCHISE_ROUND,
                    is_cascaded=False,
                )
            )
            continue

        logger.warning(f"Cascade conflict for {keeper.label}: {reason}")
        result.conflicts.append(
            CascadeConflict(
                player_id=keeper.player_id, round=FRANCHISE_ROUND, reason=reason
            )
        )


def _shift_reason(
    desired: int, final: int, owned_rounds: set[int], claimed: dict[int, CascadeInput]
) -> str:
    if desired in claimed:
        blocker = f"Round {desired} taken by {claimed[desired].label}"
    elif desired not in owned_rounds:
        blocker = f"Round {desired} pick traded away"
    else:
        blocker = f"Round {desired} unavailable"
    return f"{blocker}; cascaded to Round {final}"


def resolve_cascade(
    roster_id: str,
    season: int,
    keepers: list[CascadeInput],
    owned_rounds: set[int],
    settings: LeagueKeeperSettings | None,
) -> CascadeResult:
    """Assign each keeper on a roster a unique round the roster owns.

    Franchise tags take round 1 first. Regular keepers then claim rounds in
    CASCADE_SORT_POLICY order: a keeper whose round is taken or traded away
    moves to the next later round the roster owns and has not claimed. A keeper
    with no such round up to undrafted_round is reported as a conflict instead
    of being assigned.

    Args:
        roster_id: Roster the keepers belong to
        season: Season being resolved
        keepers: Every keeper currently selected for the roster/season
        owned_rounds: Rounds the roster holds a pick in
        settings: League keeper settings

    Returns:
        CascadeResult with assignments in processing order and any conflicts

    Raises:
        ConfigurationError: If settings are missing
        ValueError: If the same player appears twice
    """
    settings = require_settings(settings)

    seen: set[str] = set()
    for keeper in keepers:
        if keeper.player_id in seen:
            raise ValueError(f"Duplicate keeper for player {keeper.player_id}")
        seen.add(keeper.player_id)

    result = CascadeResult(roster_id=roster_id, season=season)
    claimed: dict[int, CascadeInput] = {}

    franchise = [k for k in keepers if k.keeper_type == KeeperType.FRANCHISE]
    regular = [k for k in keepers if k.keeper_type != KeeperType.FRANCHISE]

    _place_franchise_tags(franchise, owned_rounds, claimed, result)

    ceiling = settings.undrafted_round
    for keeper in sorted(regular, key=cascade_sort_key):
        desired = max(keeper.escalated_cost, settings.minimum_round)

        final = None
        for round_num in range(desired, ceiling + 1):
            if round_num in owned_rounds and round_num not in claimed:
                final = round_num
                break

        if final is None:
            reason = (
                f"No owned, unclaimed round from Round {desired} to Round {ceiling} "
                f"({len(owned_rounds)} rounds owned, {len(keepers)} keepers)"
            )
            logger.warning(f"Cascade conflict for {keeper.label}: {reason}")
            result.conflicts.append(
                CascadeConflict(
                    player_id=keeper.player_id, round=desired, reason=reason
                )
            )
            continue

        shift_reason: str | None = None
        if final != desired:
            shift_reason = _shift_reason(desired, final, owned_rounds, claimed)
            logger.debug(f"Cascade {keeper.label}: {shift_reason}")

        claimed[final] = keeper
        result.keepers.append(
            CascadeKeeper(
                player_id=keeper.player_id,
                keeper_type=keeper.keeper_type,
                base_cost=keeper.base_cost,
                escalated_cost=keeper.escalated_cost,
                final_cost=final,
                is_cascaded=final != desired,
                cascade_steps=final - desired,
                reason=shift_reason,
            )
        )

    logger.debug(
        f"Cascade for roster {roster_id} ({season}): {len(result.keepers)} placed, "
        f"{len(result.conflicts)} conflicts"
    )
    return result
