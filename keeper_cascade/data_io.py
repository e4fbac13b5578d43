"""Data input/output: JSON league snapshots in, CSV cascade and board reports out."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from keeper_cascade.cascade import CascadeResult
from keeper_cascade.config import settings_from_dict
from keeper_cascade.draft_board import DraftBoard
from keeper_cascade.engine import LeagueSnapshot
from keeper_cascade.models import (
    AcquisitionType,
    DraftPick,
    Keeper,
    KeeperType,
    Player,
    RosterSnapshot,
    TradedPick,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

CASCADE_FIELDNAMES = [
    "roster_id",
    "roster_name",
    "player_id",
    "player_name",
    "keeper_type",
    "base_cost",
    "escalated_cost",
    "final_cost",
    "is_cascaded",
    "cascade_steps",
    "status",
    "reason",
]

BOARD_FIELDNAMES = [
    "round",
    "roster_id",
    "roster_name",
    "status",
    "player_id",
    "player_name",
    "keeper_type",
    "traded_to",
    "acquired_from",
]


def _parse_keeper(roster_id: str, row: dict[str, Any]) -> Keeper:
    return Keeper(
        player_id=str(row["player_id"]),
        roster_id=roster_id,
        season=int(row["season"]),
        keeper_type=KeeperType(row.get("keeper_type", KeeperType.REGULAR.value)),
        base_cost=int(row["base_cost"]),
        final_cost=int(row.get("final_cost", row["base_cost"])),
        years_kept=int(row.get("years_kept", 1)),
        acquisition_type=AcquisitionType(
            row.get("acquisition_type", AcquisitionType.WAIVER.value)
        ),
        is_locked=bool(row.get("is_locked", False)),
    )


def _parse_roster(row: dict[str, Any]) -> RosterSnapshot:
    roster_id = str(row["roster_id"])
    return RosterSnapshot(
        roster_id=roster_id,
        name=row.get("name") or f"Team {roster_id}",
        player_ids=[str(pid) for pid in row.get("player_ids", [])],
        keepers=[_parse_keeper(roster_id, k) for k in row.get("keepers", [])],
    )


def _parse_player(row: dict[str, Any]) -> Player:
    return Player(
        player_id=str(row["player_id"]),
        name=row["name"],
        position=row.get("position"),
        team=row.get("team"),
        age=row.get("age"),
        years_exp=row.get("years_exp"),
    )


def _parse_draft_pick(row: dict[str, Any]) -> DraftPick:
    return DraftPick(
        player_id=str(row["player_id"]),
        roster_id=str(row["roster_id"]),
        round=int(row["round"]),
        season=int(row["season"]),
        is_keeper=bool(row.get("is_keeper", False)),
    )


def _parse_transaction(row: dict[str, Any]) -> Transaction:
    from_roster = row.get("from_roster_id")
    return Transaction(
        transaction_type=TransactionType(row["type"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        player_id=str(row["player_id"]),
        to_roster_id=str(row["to_roster_id"]),
        from_roster_id=str(from_roster) if from_roster is not None else None,
    )


def _parse_traded_pick(row: dict[str, Any]) -> TradedPick:
    return TradedPick(
        season=int(row["season"]),
        round=int(row["round"]),
        original_owner_id=str(row["original_owner_id"]),
        current_owner_id=str(row["current_owner_id"]),
    )


def load_league_snapshot(json_path: str) -> LeagueSnapshot:
    """Load a league snapshot from a JSON file.

    Args:
        json_path: Path to the snapshot JSON file

    Returns:
        LeagueSnapshot with validated settings

    Raises:
        ConfigurationError: If keeper settings are missing or invalid
        ValueError: If a record is missing a field or has an invalid value
    """
    with open(json_path, "r") as f:
        data = json.load(f)

    settings = settings_from_dict(data.get("settings"))

    try:
        snapshot = LeagueSnapshot(
            league_id=str(data["league_id"]),
            season=int(data["season"]),
            settings=settings,
            rosters=[_parse_roster(r) for r in data.get("rosters", [])],
            players={
                p.player_id: p for p in map(_parse_player, data.get("players", []))
            },
            draft_picks=[_parse_draft_pick(p) for p in data.get("draft_picks", [])],
            transactions=[
                _parse_transaction(t) for t in data.get("transactions", [])
            ],
            traded_picks=[_parse_traded_pick(p) for p in data.get("traded_picks", [])],
        )
    except KeyError as e:
        raise ValueError(f"Invalid league snapshot {json_path}: missing {e}") from e

    logger.info(
        f"Loaded league {snapshot.league_id} ({snapshot.season}): "
        f"{len(snapshot.rosters)} rosters, {len(snapshot.players)} players, "
        f"{len(snapshot.transactions)} transactions"
    )
    return snapshot


def save_cascade_csv(
    output_file_path: str,
    results: dict[str, CascadeResult],
    roster_names: dict[str, str],
    player_names: dict[str, str],
) -> None:
    """Save cascade results for one or more rosters to a CSV file.

    Placed keepers are written in processing order, followed by conflicts.

    Args:
        output_file_path: Path where to save the CSV file
        results: roster_id -> cascade result
        roster_names: roster_id -> display name
        player_names: player_id -> display name
    """
    rows = []
    for roster_id, result in results.items():
        roster_name = roster_names.get(roster_id, roster_id)
        for keeper in result.keepers:
            rows.append(
                {
                    "roster_id": roster_id,
                    "roster_name": roster_name,
                    "player_id": keeper.player_id,
                    "player_name": player_names.get(keeper.player_id, ""),
                    "keeper_type": keeper.keeper_type.value,
                    "base_cost": keeper.base_cost,
                    "escalated_cost": keeper.escalated_cost,
                    "final_cost": keeper.final_cost,
                    "is_cascaded": keeper.is_cascaded,
                    "cascade_steps": keeper.cascade_steps,
                    "status": "placed",
                    "reason": keeper.reason or "",
                }
            )
        for conflict in result.conflicts:
            rows.append(
                {
                    "roster_id": roster_id,
                    "roster_name": roster_name,
                    "player_id": conflict.player_id,
                    "player_name": player_names.get(conflict.player_id, ""),
                    "escalated_cost": conflict.round,
                    "status": "conflict",
                    "reason": conflict.reason,
                }
            )

    Path(output_file_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_file_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CASCADE_FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)

    logger.info(f"Saved {len(rows)} cascade rows to {output_file_path}")


def save_draft_board_csv(
    output_file_path: str, board: DraftBoard, player_names: dict[str, str]
) -> None:
    """Save a draft board to CSV, one row per round and roster.

    Args:
        output_file_path: Path where to save the CSV file
        board: Draft board to write
        player_names: player_id -> display name
    """
    Path(output_file_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_file_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=BOARD_FIELDNAMES)
        writer.writeheader()
        for board_round in board.rounds:
            for slot in board_round.slots:
                keeper = slot.keeper
                writer.writerow(
                    {
                        "round": board_round.round,
                        "roster_id": slot.roster_id,
                        "roster_name": slot.roster_name,
                        "status": slot.status.value,
                        "player_id": keeper.player_id if keeper else "",
                        "player_name": (
                            player_names.get(keeper.player_id, "") if keeper else ""
                        ),
                        "keeper_type": keeper.keeper_type.value if keeper else "",
                        "traded_to": slot.traded_to or "",
                        "acquired_from": "; ".join(slot.acquired_from),
                    }
                )

    logger.info(f"Saved draft board to {output_file_path}")
