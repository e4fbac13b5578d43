"""Draft pick ownership after pick trades."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from keeper_cascade.models import TradedPick

logger = logging.getLogger(__name__)


@dataclass
class PickOwnership:
    """Which rounds each roster holds for one season's draft.

    Attributes:
        season: Draft season
        draft_rounds: Total rounds in the draft
        owned_rounds: roster_id -> rounds the roster holds at least one pick in
        current_owner: (original_owner_id, round) -> roster_id holding that pick
        roster_names: roster_id -> display name
    """

    season: int
    draft_rounds: int
    owned_rounds: dict[str, set[int]] = field(default_factory=dict)
    current_owner: dict[tuple[str, int], str] = field(default_factory=dict)
    roster_names: dict[str, str] = field(default_factory=dict)

    def owns(self, roster_id: str, round_num: int) -> bool:
        """Check whether a roster holds a pick in a round."""
        return round_num in self.owned_rounds.get(roster_id, set())

    def owner_of(self, original_owner_id: str, round_num: int) -> str:
        """Roster currently holding a roster's original pick in a round."""
        return self.current_owner.get((original_owner_id, round_num), original_owner_id)

    def owner_name_of(self, original_owner_id: str, round_num: int) -> str:
        """Display name of whoever holds a roster's original pick in a round."""
        owner_id = self.owner_of(original_owner_id, round_num)
        return self.roster_names.get(owner_id, owner_id)

    def is_traded_away(self, roster_id: str, round_num: int) -> bool:
        """Check whether a roster's own pick in a round belongs to someone else."""
        return self.owner_of(roster_id, round_num) != roster_id

    def acquired_from(self, roster_id: str, round_num: int) -> list[str]:
        """Original owners of picks a roster holds via trade in a round."""
        return sorted(
            original
            for (original, rnd), owner in self.current_owner.items()
            if owner == roster_id and rnd == round_num and original != roster_id
        )


def build_pick_ownership(
    season: int,
    draft_rounds: int,
    roster_names: dict[str, str],
    traded_picks: list[TradedPick],
) -> PickOwnership:
    """Compute per-roster round ownership from pick trade records.

    Every roster starts with one pick in each round 1..draft_rounds. A traded
    pick moves from its original owner to its current owner. Records from other
    seasons are ignored; the last record for an (original owner, round) wins.

    Args:
        season: Draft season to compute ownership for
        draft_rounds: Total rounds in the draft
        roster_names: roster_id -> display name for every roster in the league
        traded_picks: Pick trade records (any season)

    Returns:
        PickOwnership for the season
    """
    current_owner: dict[tuple[str, int], str] = {}

    for pick in traded_picks:
        if pick.season != season:
            continue
        if pick.round < 1 or pick.round > draft_rounds:
            logger.warning(
                f"Skipping traded pick for round {pick.round}: "
                f"outside 1..{draft_rounds}"
            )
            continue
        if (
            pick.original_owner_id not in roster_names
            or pick.current_owner_id not in roster_names
        ):
            logger.warning(
                f"Skipping traded pick round {pick.round}: unknown roster "
                f"({pick.original_owner_id} -> {pick.current_owner_id})"
            )
            continue

        key = (pick.original_owner_id, pick.round)
        if pick.current_owner_id == pick.original_owner_id:
            # Traded back home
            current_owner.pop(key, None)
        else:
            current_owner[key] = pick.current_owner_id

    # Count picks per roster per round so a swap within a round keeps it owned
    pick_counts: dict[str, Counter[int]] = {
        roster_id: Counter(range(1, draft_rounds + 1)) for roster_id in roster_names
    }
    for (original_id, round_num), owner_id in current_owner.items():
        pick_counts[original_id][round_num] -= 1
        pick_counts[owner_id][round_num] += 1

    owned_rounds = {
        roster_id: {rnd for rnd, count in counts.items() if count > 0}
        for roster_id, counts in pick_counts.items()
    }

    logger.debug(
        f"Pick ownership for {season}: {len(current_owner)} traded picks "
        f"across {len(roster_names)} rosters"
    )

    return PickOwnership(
        season=season,
        draft_rounds=draft_rounds,
        owned_rounds=owned_rounds,
        current_owner=current_owner,
        roster_names=dict(roster_names),
    )
