"""Tests for the trade value calculator."""

from datetime import datetime

import pytest

from keeper_cascade.config import LeagueKeeperSettings
from keeper_cascade.models import (
    DraftPick,
    Keeper,
    KeeperType,
    Player,
    PlayerFacts,
    RosterSnapshot,
    TradedPick,
    Transaction,
    TransactionType,
)
from keeper_cascade.ownership import build_pick_ownership
from keeper_cascade.trade_value import (
    PickAsset,
    TradeProposal,
    analyze_trade,
    calculate_age_modifier,
    calculate_cost_trajectory,
    calculate_draft_pick_value,
    calculate_fairness_score,
    calculate_keeper_value_bonus,
    calculate_position_value,
    project_player_after_trade,
)

SEASON = 2025
BEFORE_DEADLINE = datetime(2024, 10, 15, 12, 0)
AFTER_DEADLINE = datetime(2024, 12, 20, 12, 0)

PLAYERS = {
    "p1": Player("p1", "Amon Brooks", "WR", "DET", age=25),
    "p2": Player("p2", "Ben Carver", "RB", "ATL", age=23),
    "p3": Player("p3", "Cal Dorsey", "TE", "SF", age=27),
}

FACTS = {
    "p1": PlayerFacts("p1", draft_picks=(DraftPick("p1", "A", 5, 2024),)),
    "p2": PlayerFacts(
        "p2",
        transactions=(
            Transaction(TransactionType.WAIVER, datetime(2024, 9, 20), "p2", "B"),
        ),
    ),
    "p3": PlayerFacts(
        "p3",
        draft_picks=(DraftPick("p3", "A", 6, 2023),),
        keeper_history=(Keeper("p3", "A", 2024, KeeperType.REGULAR, 5, 5),),
    ),
}


@pytest.fixture
def alpha() -> RosterSnapshot:
    return RosterSnapshot(
        "A",
        "Alpha",
        player_ids=["p1", "p3"],
        keepers=[Keeper("p1", "A", SEASON, KeeperType.REGULAR, 4, 4)],
    )


@pytest.fixture
def bravo() -> RosterSnapshot:
    return RosterSnapshot("B", "Bravo", player_ids=["p2"])


class TestValueComponents:
    """Tests for the individual value formulas."""

    def test_age_modifier(self) -> None:
        """Test the youth bonus peaks at 24 and floors at 0."""
        assert calculate_age_modifier(24) == 15
        assert calculate_age_modifier(30) == 9
        assert calculate_age_modifier(39) == 0
        assert calculate_age_modifier(45) == 0
        assert calculate_age_modifier(None) == 0

    def test_keeper_value_bonus(self) -> None:
        """Test three points per round better than undrafted."""
        assert calculate_keeper_value_bonus(4, 10) == 18
        assert calculate_keeper_value_bonus(10, 10) == 0
        assert calculate_keeper_value_bonus(None, 10) == 0

    def test_position_value(self) -> None:
        """Test known positions use the table and others the default."""
        assert calculate_position_value("RB") == 30
        assert calculate_position_value("K") == 5
        assert calculate_position_value("LB") == 10
        assert calculate_position_value(None) == 10

    def test_draft_pick_value(self) -> None:
        """Test round decay, the floor and the future-season discount."""
        assert calculate_draft_pick_value(1, 2025, 2025) == 32
        assert calculate_draft_pick_value(8, 2025, 2025) == 4
        assert calculate_draft_pick_value(9, 2025, 2025) == 2
        assert calculate_draft_pick_value(16, 2025, 2025) == 2
        assert calculate_draft_pick_value(1, 2026, 2025) == 29
        assert calculate_draft_pick_value(1, 2027, 2025) == 26

    def test_fairness_score(self) -> None:
        """Test 50 is even and lopsided trades approach 0."""
        assert calculate_fairness_score(0, 0) == 50
        assert calculate_fairness_score(10, 10) == 50
        assert calculate_fairness_score(10, 20) == 33
        assert calculate_fairness_score(10, 0) == 0

    def test_cost_trajectory(self) -> None:
        """Test one entry per remaining regular year."""
        trajectory = calculate_cost_trajectory(4, 0, 2, 1)
        assert [(y.year, y.cost, y.is_final_year) for y in trajectory] == [
            (1, 4, False),
            (2, 3, True),
        ]
        assert calculate_cost_trajectory(1, 1, 3, 1)[-1].cost == 1
        assert calculate_cost_trajectory(10, 2, 2, 1) == []


class TestProjectPlayerAfterTrade:
    """Tests for project_player_after_trade."""

    def test_pre_deadline_preserves_cost(
        self, alpha: RosterSnapshot, settings: LeagueKeeperSettings
    ) -> None:
        """Test a trade before the deadline keeps cost and years."""
        value = project_player_after_trade(
            PLAYERS["p3"], alpha, FACTS["p3"], settings, SEASON, BEFORE_DEADLINE
        )
        assert value.projection.new_cost == 4
        assert value.projection.new_years_kept == 1
        assert value.projection.deadline_impact == "preserved"
        assert value.projection.cost_change == 0

    def test_post_deadline_resets(
        self, alpha: RosterSnapshot, settings: LeagueKeeperSettings
    ) -> None:
        """Test a trade after the deadline resets to undrafted and zero years."""
        for player_id in ("p1", "p3"):
            value = project_player_after_trade(
                PLAYERS[player_id],
                alpha,
                FACTS[player_id],
                settings,
                SEASON,
                AFTER_DEADLINE,
            )
            assert value.projection.new_cost == settings.undrafted_round
            assert value.projection.new_years_kept == 0
            assert value.projection.years_kept_reset
            assert value.keeper_value_bonus == 0

    def test_value_breakdown(
        self, alpha: RosterSnapshot, settings: LeagueKeeperSettings
    ) -> None:
        """Test trade value sums position, age and keeper bonus."""
        value = project_player_after_trade(
            PLAYERS["p1"], alpha, FACTS["p1"], settings, SEASON, BEFORE_DEADLINE
        )
        assert value.keeper_status.is_current_keeper
        assert value.keeper_status.current_cost == 4
        assert value.keeper_status.keeper_type == KeeperType.REGULAR
        assert value.base_position_value == 28
        assert value.age_modifier == 14
        assert value.keeper_value_bonus == 18
        assert value.trade_value == 60


class TestAnalyzeTrade:
    """Tests for analyze_trade."""

    def test_pre_deadline_trade(
        self,
        alpha: RosterSnapshot,
        bravo: RosterSnapshot,
        settings: LeagueKeeperSettings,
    ) -> None:
        """Test both sides, fairness and the fact list."""
        proposal = TradeProposal(
            "A",
            "B",
            team1_player_ids=("p1",),
            team2_player_ids=("p2",),
            trade_date=BEFORE_DEADLINE,
        )
        analysis = analyze_trade(
            proposal, alpha, bravo, PLAYERS, FACTS, settings, SEASON
        )

        assert not analysis.is_after_deadline
        assert analysis.team1.total_value_given == 60
        assert analysis.team2.total_value_given == 46
        assert analysis.value_differential == 14
        assert analysis.fairness_score == 43
        assert analysis.team1.keeper_slots_before == 1
        assert analysis.team1.keeper_slots_after == 0
        assert analysis.team1.net_value == -14

        descriptions = [f.description for f in analysis.facts]
        assert "Amon Brooks: Cost stays R4 (preserved value)" in descriptions
        assert "Alpha: Keeper slots 1→0 (frees 1 slot)" in descriptions
        assert "Alpha: loses 1 WR" in descriptions
        assert "Alpha: gains 1 RB" in descriptions
        assert "Trade value differential: 14 points" in descriptions

    def test_post_deadline_reset_facts(
        self,
        alpha: RosterSnapshot,
        bravo: RosterSnapshot,
        settings: LeagueKeeperSettings,
    ) -> None:
        """Test reset facts name the cost change and lost keeper years."""
        proposal = TradeProposal(
            "A", "B", team1_player_ids=("p3",), trade_date=AFTER_DEADLINE
        )
        analysis = analyze_trade(
            proposal, alpha, bravo, PLAYERS, FACTS, settings, SEASON
        )
        descriptions = [f.description for f in analysis.facts]
        assert analysis.is_after_deadline
        assert (
            "Cal Dorsey: Cost increases from R4 to R10 (post-deadline trade reset)"
            in descriptions
        )
        assert "Cal Dorsey: 1 keeper year(s) reset to 0" in descriptions

    def test_picks_change_draft_capital(
        self,
        alpha: RosterSnapshot,
        bravo: RosterSnapshot,
        settings: LeagueKeeperSettings,
    ) -> None:
        """Test traded picks count toward draft capital and total value."""
        proposal = TradeProposal(
            "A",
            "B",
            team1_picks=(PickAsset(2025, 1),),
            team2_picks=(PickAsset(2025, 8),),
            trade_date=BEFORE_DEADLINE,
        )
        analysis = analyze_trade(
            proposal, alpha, bravo, PLAYERS, FACTS, settings, SEASON
        )
        assert analysis.team1.draft_capital_change == -28
        assert analysis.team2.draft_capital_change == 28
        assert analysis.fairness_score == 11
        descriptions = [f.description for f in analysis.facts]
        assert "Bravo: Draft capital +28 points" in descriptions
        assert "Alpha: Draft capital -28 points" in descriptions

    def test_pick_not_owned_flagged(
        self,
        alpha: RosterSnapshot,
        bravo: RosterSnapshot,
        settings: LeagueKeeperSettings,
        caplog,
    ) -> None:
        """Test offering a pick the roster no longer holds is flagged."""
        ownership = build_pick_ownership(
            SEASON,
            settings.draft_rounds,
            {"A": "Alpha", "B": "Bravo"},
            [TradedPick(SEASON, 2, "A", "B")],
        )
        proposal = TradeProposal(
            "A", "B", team1_picks=(PickAsset(SEASON, 2),), trade_date=BEFORE_DEADLINE
        )
        analysis = analyze_trade(
            proposal, alpha, bravo, PLAYERS, FACTS, settings, SEASON, ownership
        )
        assert analysis.team1.picks_given[0].is_owned is False
        assert "does not own" in caplog.text

    def test_unknown_player(
        self,
        alpha: RosterSnapshot,
        bravo: RosterSnapshot,
        settings: LeagueKeeperSettings,
    ) -> None:
        """Test a traded player without reference data is a KeyError."""
        proposal = TradeProposal("A", "B", team1_player_ids=("p99",))
        with pytest.raises(KeyError):
            analyze_trade(proposal, alpha, bravo, PLAYERS, FACTS, settings, SEASON)
