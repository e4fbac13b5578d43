"""Tests for the draft board grid."""

import pytest

from keeper_cascade.cascade import CascadeInput, resolve_cascade
from keeper_cascade.config import LeagueKeeperSettings
from keeper_cascade.draft_board import SlotStatus, build_draft_board
from keeper_cascade.models import KeeperType, TradedPick
from keeper_cascade.ownership import build_pick_ownership

ROSTERS = {"A": "Alpha", "B": "Bravo"}


@pytest.fixture
def board(settings: LeagueKeeperSettings):
    """Scenario C: A keeps a player in round 4 and traded its round-2 pick to B."""
    ownership = build_pick_ownership(
        2025, settings.draft_rounds, ROSTERS, [TradedPick(2025, 2, "A", "B")]
    )
    result = resolve_cascade(
        "A",
        2025,
        [CascadeInput("p1", KeeperType.REGULAR, 4, 4, "Amon Brooks")],
        ownership.owned_rounds["A"],
        settings,
    )
    return build_draft_board(
        "L1", 2025, ROSTERS, ownership, {"A": result}, settings.draft_rounds
    )


class TestBuildDraftBoard:
    """Tests for build_draft_board."""

    def test_shape(self, board, settings: LeagueKeeperSettings) -> None:
        """Test one round per draft round, one cell per roster in order."""
        assert len(board.rounds) == settings.draft_rounds
        assert [r.round for r in board.rounds] == list(range(1, 17))
        assert [s.roster_id for s in board.rounds[0].slots] == ["A", "B"]

    def test_keeper_cell(self, board) -> None:
        """Test the keeper occupies its final round."""
        slot = board.slot(4, "A")
        assert slot.status == SlotStatus.KEEPER
        assert slot.keeper.player_id == "p1"
        assert slot.keeper.final_cost == 4

    def test_traded_cell_names_new_owner(self, board) -> None:
        """Test a traded-away pick shows who holds it."""
        slot = board.slot(2, "A")
        assert slot.status == SlotStatus.TRADED
        assert slot.traded_to == "Bravo"
        assert slot.keeper is None

    def test_acquired_pick_is_available(self, board) -> None:
        """Test the receiving roster sees an open pick with its origin."""
        slot = board.slot(2, "B")
        assert slot.status == SlotStatus.AVAILABLE
        assert slot.acquired_from == ("Alpha",)

    def test_remaining_cells_available(self, board) -> None:
        """Test every other cell is an open pick."""
        special = {(2, "A"), (4, "A"), (2, "B")}
        for board_round in board.rounds:
            for slot in board_round.slots:
                if (board_round.round, slot.roster_id) in special:
                    continue
                assert slot.status == SlotStatus.AVAILABLE
                assert slot.acquired_from == ()

    def test_roster_without_cascade_result(self, board) -> None:
        """Test rosters without keepers still get cells."""
        assert board.slot(1, "B").status == SlotStatus.AVAILABLE

    def test_unknown_slot(self, board) -> None:
        """Test lookups outside the grid raise KeyError."""
        with pytest.raises(KeyError):
            board.slot(17, "A")
        with pytest.raises(KeyError):
            board.slot(1, "Z")

    def test_no_conflicts(self, board) -> None:
        """Test a fully placed cascade leaves the conflict list empty."""
        assert board.conflicts == {}

    def test_unplaced_keeper_is_listed(self, settings: LeagueKeeperSettings) -> None:
        """Test a keeper with no owned round is reported instead of dropped."""
        ownership = build_pick_ownership(
            2025,
            settings.draft_rounds,
            ROSTERS,
            [TradedPick(2025, r, "A", "B") for r in range(4, 11)],
        )
        result = resolve_cascade(
            "A",
            2025,
            [CascadeInput("p1", KeeperType.REGULAR, 4, 4, "Amon Brooks")],
            ownership.owned_rounds["A"],
            settings,
        )
        board = build_draft_board(
            "L1", 2025, ROSTERS, ownership, {"A": result}, settings.draft_rounds
        )

        assert [c.player_id for c in board.conflicts["A"]] == ["p1"]
        assert "B" not in board.conflicts
        for board_round in board.rounds:
            assert board.slot(board_round.round, "A").keeper is None
