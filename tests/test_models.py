"""Tests for fact records."""

from datetime import datetime

from keeper_cascade.models import (
    DraftPick,
    Keeper,
    KeeperType,
    PlayerFacts,
    RosterSnapshot,
    Transaction,
    TransactionType,
)


class TestPlayerFacts:
    """Tests for PlayerFacts lookups."""

    def test_keeper_slot_picks_are_not_provenance(self) -> None:
        """Test picks consumed by a keeper are ignored as draft history."""
        facts = PlayerFacts(
            player_id="p1",
            draft_picks=(
                DraftPick("p1", "A", round=6, season=2023),
                DraftPick("p1", "A", round=5, season=2024, is_keeper=True),
            ),
        )
        assert len(facts.selection_picks()) == 1
        assert facts.most_recent_draft_pick() == DraftPick("p1", "A", 6, 2023)

    def test_original_and_most_recent_pick(self) -> None:
        """Test first and latest selections are found regardless of input order."""
        facts = PlayerFacts(
            player_id="p1",
            draft_picks=(
                DraftPick("p1", "B", round=2, season=2024),
                DraftPick("p1", "A", round=7, season=2021),
            ),
        )
        assert facts.original_draft_pick().round == 7
        assert facts.most_recent_draft_pick().round == 2

    def test_no_draft_history(self) -> None:
        """Test undrafted players have no picks."""
        facts = PlayerFacts(player_id="p1")
        assert facts.original_draft_pick() is None
        assert facts.most_recent_draft_pick() is None

    def test_latest_transaction_to_roster(self) -> None:
        """Test only transactions onto the roster are considered."""
        facts = PlayerFacts(
            player_id="p1",
            transactions=(
                Transaction(TransactionType.WAIVER, datetime(2024, 9, 10), "p1", "A"),
                Transaction(
                    TransactionType.TRADE, datetime(2024, 10, 1), "p1", "B", "A"
                ),
                Transaction(
                    TransactionType.FREE_AGENT, datetime(2024, 9, 20), "p1", "A"
                ),
            ),
        )
        latest = facts.latest_transaction_to("A")
        assert latest.transaction_type == TransactionType.FREE_AGENT
        assert facts.latest_transaction_to("C") is None


class TestKeeperRecords:
    """Tests for Keeper and RosterSnapshot."""

    def test_keeper_key(self) -> None:
        """Test the unique key is (player, roster, season)."""
        keeper = Keeper("p1", "A", 2025, KeeperType.REGULAR, base_cost=4, final_cost=4)
        assert keeper.key == ("p1", "A", 2025)
        assert keeper.years_kept == 1
        assert keeper.is_locked is False

    def test_keepers_for_season(self) -> None:
        """Test keepers are filtered by season."""
        roster = RosterSnapshot(
            roster_id="A",
            name="Alpha",
            keepers=[
                Keeper("p1", "A", 2024, KeeperType.REGULAR, 4, 4),
                Keeper("p1", "A", 2025, KeeperType.REGULAR, 4, 3),
                Keeper("p2", "A", 2025, KeeperType.FRANCHISE, 1, 1),
            ],
        )
        assert [k.player_id for k in roster.keepers_for(2025)] == ["p1", "p2"]
        assert roster.keepers_for(2023) == []

    def test_enums_serialize_to_names(self) -> None:
        """Test enums are string-valued."""
        assert KeeperType.FRANCHISE == "FRANCHISE"
        assert TransactionType("TRADE") is TransactionType.TRADE
