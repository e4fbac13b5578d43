"""Draft board grid: one cell per round and roster."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from keeper_cascade.cascade import CascadeConflict, CascadeKeeper, CascadeResult
from keeper_cascade.ownership import PickOwnership

logger = logging.getLogger(__name__)


class SlotStatus(str, Enum):
    """What occupies a roster's pick in a round."""

    KEEPER = "keeper"
    TRADED = "traded"
    AVAILABLE = "available"


@dataclass(frozen=True)
class BoardSlot:
    """One roster's cell in a draft round.

    Attributes:
        roster_id: Roster the cell belongs to
        roster_name: Display name of the roster
        status: KEEPER, TRADED or AVAILABLE
        keeper: Keeper assigned to this round (KEEPER only)
        traded_to: Name of the roster now holding the pick (TRADED only)
        acquired_from: Names of rosters whose pick in this round this roster holds
    """

    roster_id: str
    roster_name: str
    status: SlotStatus
    keeper: CascadeKeeper | None = None
    traded_to: str | None = None
    acquired_from: tuple[str, ...] = ()


@dataclass(frozen=True)
class BoardRound:
    """All roster cells for one round, in roster input order."""

    round: int
    slots: tuple[BoardSlot, ...]


@dataclass
class DraftBoard:
    """Round x roster grid of keepers, traded picks and open picks.

    Keepers the cascade could not place have no cell; they are listed in
    conflicts by roster_id instead.
    """

    league_id: str
    season: int
    rounds: list[BoardRound] = field(default_factory=list)
    conflicts: dict[str, list[CascadeConflict]] = field(default_factory=dict)

    def slot(self, round_num: int, roster_id: str) -> BoardSlot:
        """Look up one cell.

        Raises:
            KeyError: If the round or roster is not on the board
        """
        for board_round in self.rounds:
            if board_round.round != round_num:
                continue
            for slot in board_round.slots:
                if slot.roster_id == roster_id:
                    return slot
        raise KeyError(f"No slot for roster {roster_id} in round {round_num}")


def _keepers_by_round(result: CascadeResult | None) -> dict[int, CascadeKeeper]:
    if result is None:
        return {}
    return {keeper.final_cost: keeper for keeper in result.keepers}


def build_draft_board(
    league_id: str,
    season: int,
    rosters: dict[str, str],
    ownership: PickOwnership,
    cascade_results: dict[str, CascadeResult],
    draft_rounds: int,
) -> DraftBoard:
    """Classify every (round, roster) cell of the draft.

    A cell is KEEPER when a cascaded keeper lands in that round, TRADED when the
    roster does not own the round (showing who does), otherwise AVAILABLE.

    Args:
        league_id: League the board belongs to
        season: Draft season
        rosters: roster_id -> display name, in board column order
        ownership: Pick ownership for the season
        cascade_results: roster_id -> cascade output for the season
        draft_rounds: Total rounds in the draft

    Returns:
        DraftBoard with one BoardRound per round 1..draft_rounds
    """
    keepers = {
        roster_id: _keepers_by_round(cascade_results.get(roster_id))
        for roster_id in rosters
    }

    board = DraftBoard(
        league_id=league_id,
        season=season,
        conflicts={
            roster_id: list(result.conflicts)
            for roster_id, result in cascade_results.items()
            if result is not None and result.conflicts
        },
    )
    for round_num in range(1, draft_rounds + 1):
        slots = []
        for roster_id, roster_name in rosters.items():
            acquired_from = tuple(
                rosters.get(original, original)
                for original in ownership.acquired_from(roster_id, round_num)
            )
            keeper = keepers[roster_id].get(round_num)

            if keeper is not None:
                slot = BoardSlot(
                    roster_id=roster_id,
                    roster_name=roster_name,
                    status=SlotStatus.KEEPER,
                    keeper=keeper,
                    acquired_from=acquired_from,
                )
            elif not ownership.owns(roster_id, round_num):
                slot = BoardSlot(
                    roster_id=roster_id,
                    roster_name=roster_name,
                    status=SlotStatus.TRADED,
                    traded_to=ownership.owner_name_of(roster_id, round_num),
                )
            else:
                slot = BoardSlot(
                    roster_id=roster_id,
                    roster_name=roster_name,
                    status=SlotStatus.AVAILABLE,
                    acquired_from=acquired_from,
                )
            slots.append(slot)

        board.rounds.append(BoardRound(round=round_num, slots=tuple(slots)))

    keeper_count = sum(len(by_round) for by_round in keepers.values())
    logger.debug(
        f"Draft board {league_id} ({season}): {draft_rounds} rounds, "
        f"{len(rosters)} rosters, {keeper_count} keepers, "
        f"{len(board.conflicts)} roster(s) with conflicts"
    )
    return board
