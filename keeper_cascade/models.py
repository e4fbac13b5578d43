"""Fact records and enums shared by the keeper cost engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AcquisitionType(str, Enum):
    """How a roster obtained a player."""

    DRAFTED = "DRAFTED"
    TRADE = "TRADE"
    WAIVER = "WAIVER"
    FREE_AGENT = "FREE_AGENT"


class TransactionType(str, Enum):
    """Roster transaction kinds recorded by the league platform."""

    TRADE = "TRADE"
    WAIVER = "WAIVER"
    FREE_AGENT = "FREE_AGENT"


class KeeperType(str, Enum):
    """Keeper designation: franchise tags always cost round 1."""

    FRANCHISE = "FRANCHISE"
    REGULAR = "REGULAR"


@dataclass(frozen=True)
class Player:
    """Player reference data.

    Attributes:
        player_id: Unique player identifier
        name: Player's full name
        position: Position (QB, RB, WR, TE, K, DEF)
        team: NFL team abbreviation
        age: Age in years, if known
        years_exp: Seasons of NFL experience, if known
    """

    player_id: str
    name: str
    position: str | None = None
    team: str | None = None
    age: int | None = None
    years_exp: int | None = None


@dataclass(frozen=True)
class DraftPick:
    """A historical draft selection.

    Attributes:
        player_id: Player selected
        roster_id: Roster that made the pick
        round: Draft round (1-based)
        season: Season of the draft
        is_keeper: True when the slot was consumed by a keeper, not a selection
    """

    player_id: str
    roster_id: str
    round: int
    season: int
    is_keeper: bool = False


@dataclass(frozen=True)
class Transaction:
    """A player moving onto a roster.

    Attributes:
        transaction_type: TRADE, WAIVER or FREE_AGENT
        timestamp: When the transaction was processed
        player_id: Player that moved
        to_roster_id: Roster receiving the player
        from_roster_id: Roster giving the player up (trades only)
    """

    transaction_type: TransactionType
    timestamp: datetime
    player_id: str
    to_roster_id: str
    from_roster_id: str | None = None


@dataclass(frozen=True)
class TradedPick:
    """Current ownership of one season/round pick after pick trades."""

    season: int
    round: int
    original_owner_id: str
    current_owner_id: str


@dataclass(frozen=True)
class Keeper:
    """A keeper selection for one roster and season.

    (player_id, roster_id, season) is unique. final_cost is only meaningful
    after a cascade pass over the roster's complete keeper set.
    """

    player_id: str
    roster_id: str
    season: int
    keeper_type: KeeperType
    base_cost: int
    final_cost: int
    years_kept: int = 1
    acquisition_type: AcquisitionType = AcquisitionType.WAIVER
    is_locked: bool = False

    @property
    def key(self) -> tuple[str, str, int]:
        """Unique key of this keeper record."""
        return (self.player_id, self.roster_id, self.season)


@dataclass(frozen=True)
class PlayerFacts:
    """Pre-fetched history for one player, used by the eligibility calculator.

    Attributes:
        player_id: Player the facts describe
        draft_picks: Every draft pick of this player, any roster, any season
        transactions: Every transaction moving this player onto a roster
        keeper_history: Every keeper record for this player, any roster, any season
    """

    player_id: str
    draft_picks: tuple[DraftPick, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    keeper_history: tuple[Keeper, ...] = ()

    def selection_picks(self) -> list[DraftPick]:
        """Draft picks that were real selections, oldest first."""
        picks = [p for p in self.draft_picks if not p.is_keeper]
        picks.sort(key=lambda p: (p.season, p.round))
        return picks

    def original_draft_pick(self) -> DraftPick | None:
        """The player's first draft selection, if any."""
        picks = self.selection_picks()
        return picks[0] if picks else None

    def most_recent_draft_pick(self) -> DraftPick | None:
        """The player's latest draft selection, if any."""
        picks = self.selection_picks()
        return picks[-1] if picks else None

    def latest_transaction_to(self, roster_id: str) -> Transaction | None:
        """Most recent transaction landing the player on a roster."""
        inbound = [t for t in self.transactions if t.to_roster_id == roster_id]
        if not inbound:
            return None
        return max(inbound, key=lambda t: t.timestamp)


@dataclass
class RosterSnapshot:
    """One roster as supplied by the sync collaborator.

    Attributes:
        roster_id: Unique roster identifier
        name: Display name of the team
        player_ids: Players currently on the roster
        keepers: Keeper records for this roster across seasons
    """

    roster_id: str
    name: str
    player_ids: list[str] = field(default_factory=list)
    keepers: list[Keeper] = field(default_factory=list)

    def keepers_for(self, season: int) -> list[Keeper]:
        """Keeper records for one season."""
        return [k for k in self.keepers if k.season == season]
