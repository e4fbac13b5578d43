"""Command-line interface for keeper costs, cascades, draft boards and trades."""

import logging
import sys
from datetime import datetime
from typing import NoReturn

import click

from keeper_cascade.data_io import (
    load_league_snapshot,
    save_cascade_csv,
    save_draft_board_csv,
)
from keeper_cascade.draft_board import SlotStatus
from keeper_cascade.engine import (
    LeagueSnapshot,
    analyze_snapshot_trade,
    build_league_draft_board,
    cascade_league,
    evaluate_roster,
    league_summary,
    project_roster,
    validate_roster_keepers,
)
from keeper_cascade.errors import ConfigurationError
from keeper_cascade.projections import DEFAULT_PROJECTION_YEARS
from keeper_cascade.trade_value import PickAsset, TradeProposal


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""

    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors and emojis for different log levels."""

    LEVEL_COLORS = {
        "DEBUG": Colors.BLUE,
        "INFO": "",  # No color - plain white/default
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
        "CRITICAL": Colors.RED,
    }

    LEVEL_EMOJIS = {
        "DEBUG": "🔍 ",
        "INFO": "",  # No emoji for info messages
        "WARNING": "⚠️  ",
        "ERROR": "❌ ",
        "CRITICAL": "💥 ",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors and emojis."""
        level_color = self.LEVEL_COLORS.get(record.levelname, "")
        level_emoji = self.LEVEL_EMOJIS.get(record.levelname, "")

        message = record.getMessage()
        if level_color:
            return f"{level_emoji}{level_color}{message}{Colors.RESET}"
        return f"{level_emoji}{message}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application with colors and emojis.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()  # Remove any existing handlers
    root_logger.addHandler(handler)


verbose_option = click.option(
    "--verbose", is_flag=True, help="Enable verbose (DEBUG level) logging"
)
snapshot_argument = click.argument("snapshot", type=click.Path(exists=True))

BOARD_COLUMN_WIDTH = 18


def _fail(message: str) -> NoReturn:
    print(f"❌ {message}")
    sys.exit(1)


def _load(snapshot_path: str) -> LeagueSnapshot:
    try:
        return load_league_snapshot(snapshot_path)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")
    except ValueError as e:
        _fail(str(e))


def _parse_pick(value: str) -> PickAsset:
    try:
        season, round_num = value.split(":")
        return PickAsset(season=int(season), round=int(round_num))
    except ValueError:
        raise click.BadParameter(f"expected SEASON:ROUND, got {value!r}") from None


def _parse_picks(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> tuple[PickAsset, ...]:
    return tuple(_parse_pick(v) for v in values)


def _player_names(snapshot: LeagueSnapshot) -> dict[str, str]:
    return {pid: player.name for pid, player in snapshot.players.items()}


@click.group()
def cli() -> None:
    """Keeper cost and draft-slot cascade engine for keeper leagues."""


@cli.command()
@snapshot_argument
@click.argument("roster_id")
@verbose_option
def eligibility(snapshot: str, roster_id: str, verbose: bool) -> None:
    """Show keeper eligibility and cost for every player on a roster."""
    setup_logging(verbose)
    league = _load(snapshot)

    try:
        options = evaluate_roster(league, roster_id)
    except KeyError as e:
        _fail(e.args[0])

    click.echo(f"{'Player':<24} {'Pos':<4} {'Acquired':<10} {'Yr':>2}  Cost")
    for option in options:
        status = option.eligibility
        regular = option.cost.regular
        if not status.is_eligible:
            cost = f"INELIGIBLE - {status.reason}"
        elif regular is None:
            cost = f"Franchise only (R1) - {status.reason}"
        else:
            cost = f"R{regular.final_cost} ({regular.breakdown})"
        click.echo(
            f"{option.player.name:<24} {option.player.position or '-':<4} "
            f"{status.acquisition_type.value:<10} {status.years_kept:>2}  {cost}"
        )


@cli.command()
@snapshot_argument
@click.option("--roster", "roster_id", help="Only cascade this roster")
@click.option("--output", type=click.Path(), help="Write cascade results to CSV")
@verbose_option
def cascade(
    snapshot: str, roster_id: str | None, output: str | None, verbose: bool
) -> None:
    """Resolve keeper draft rounds for every roster (exit 1 on conflicts)."""
    setup_logging(verbose)
    league = _load(snapshot)

    results = {rid: result for rid, (result, _) in cascade_league(league).items()}
    if roster_id is not None:
        if roster_id not in results:
            _fail(f"Unknown roster: {roster_id}")
        results = {roster_id: results[roster_id]}

    names = _player_names(league)
    roster_names = league.roster_names()
    for rid, result in results.items():
        click.echo(f"{roster_names[rid]} ({result.season})")
        for keeper in result.keepers:
            name = names.get(keeper.player_id, keeper.player_id)
            line = f"  R{keeper.final_cost:<3} {name} [{keeper.keeper_type.value}]"
            if keeper.is_cascaded:
                line += f" - {keeper.reason}"
            click.echo(line)
        for conflict in result.conflicts:
            name = names.get(conflict.player_id, conflict.player_id)
            click.echo(f"  ❌ {name}: {conflict.reason}")

    if output:
        save_cascade_csv(output, results, roster_names, names)

    if any(result.has_errors for result in results.values()):
        sys.exit(1)


@cli.command()
@snapshot_argument
@click.option("--output", type=click.Path(), help="Write the draft board to CSV")
@verbose_option
def board(snapshot: str, output: str | None, verbose: bool) -> None:
    """Render the draft board: keepers, traded picks and open picks.

    Exits 1 when a keeper could not be placed.
    """
    setup_logging(verbose)
    league = _load(snapshot)
    draft_board = build_league_draft_board(league)
    names = _player_names(league)

    roster_names = league.roster_names()
    width = BOARD_COLUMN_WIDTH
    columns = [f"{name[: width - 1]:<{width}}" for name in roster_names.values()]
    click.echo("Rd  " + "".join(columns))
    for board_round in draft_board.rounds:
        cells = []
        for slot in board_round.slots:
            if slot.status == SlotStatus.KEEPER and slot.keeper is not None:
                text = names.get(slot.keeper.player_id, slot.keeper.player_id)
            elif slot.status == SlotStatus.TRADED:
                text = f"-> {slot.traded_to}"
            else:
                text = "."
            cells.append(f"{text[: width - 1]:<{width}}")
        click.echo(f"{board_round.round:<4}" + "".join(cells))

    for rid, conflicts in draft_board.conflicts.items():
        for conflict in conflicts:
            name = names.get(conflict.player_id, conflict.player_id)
            click.echo(f"❌ {roster_names[rid]}: {name}: {conflict.reason}")

    if output:
        save_draft_board_csv(output, draft_board, names)

    if draft_board.conflicts:
        sys.exit(1)


@cli.command()
@snapshot_argument
@click.option("--team1", required=True, help="First roster id")
@click.option("--team2", required=True, help="Second roster id")
@click.option("--give1", multiple=True, help="Player id team 1 gives (repeatable)")
@click.option("--give2", multiple=True, help="Player id team 2 gives (repeatable)")
@click.option(
    "--pick1",
    multiple=True,
    callback=_parse_picks,
    help="SEASON:ROUND pick team 1 gives (repeatable)",
)
@click.option(
    "--pick2",
    multiple=True,
    callback=_parse_picks,
    help="SEASON:ROUND pick team 2 gives (repeatable)",
)
@click.option(
    "--date", "trade_date", type=click.DateTime(), help="Trade date (default: now)"
)
@verbose_option
def trade(
    snapshot: str,
    team1: str,
    team2: str,
    give1: tuple[str, ...],
    give2: tuple[str, ...],
    pick1: tuple[PickAsset, ...],
    pick2: tuple[PickAsset, ...],
    trade_date: datetime | None,
    verbose: bool,
) -> None:
    """Analyze a proposed trade between two rosters."""
    setup_logging(verbose)
    league = _load(snapshot)

    proposal = TradeProposal(
        team1_roster_id=team1,
        team2_roster_id=team2,
        team1_player_ids=give1,
        team2_player_ids=give2,
        team1_picks=pick1,
        team2_picks=pick2,
        trade_date=trade_date or datetime.now(),
    )
    try:
        analysis = analyze_snapshot_trade(league, proposal)
    except KeyError as e:
        _fail(e.args[0])

    timing = "after" if analysis.is_after_deadline else "before"
    click.echo(f"Trade on {proposal.trade_date:%Y-%m-%d} ({timing} the deadline)")
    for team in (analysis.team1, analysis.team2):
        click.echo(
            f"{team.roster_name}: gives {team.total_value_given}, "
            f"receives {team.total_value_received} (net {team.net_value:+d})"
        )
        for player in team.acquiring:
            projection = player.projection
            click.echo(
                f"  + {player.player_name} ({player.position or '-'}): value "
                f"{player.trade_value}, R{projection.new_cost}, "
                f"{projection.new_years_kept} yrs kept ({projection.deadline_impact})"
            )
    click.echo(f"Fairness score: {analysis.fairness_score}/100 (50 = even)")
    for fact in analysis.facts:
        click.echo(f"  [{fact.category}] {fact.description}")


@cli.command()
@snapshot_argument
@click.argument("roster_id")
@click.option(
    "--years",
    type=int,
    default=DEFAULT_PROJECTION_YEARS,
    help=f"Seasons to project (default: {DEFAULT_PROJECTION_YEARS})",
)
@verbose_option
def project(snapshot: str, roster_id: str, years: int, verbose: bool) -> None:
    """Project keeper costs for a roster's keepers over future seasons."""
    setup_logging(verbose)
    league = _load(snapshot)

    try:
        projections = project_roster(league, roster_id, years=years)
    except KeyError as e:
        _fail(e.args[0])

    for projection in projections:
        click.echo(
            f"{projection.player_name} ({projection.position or '-'}): "
            f"R{projection.current_cost} now, {projection.value_trajectory.value}"
        )
        for year in projection.projections:
            click.echo(f"  {year.season} {year.status.value:<15} {year.reason}")


@cli.command()
@snapshot_argument
@click.argument("roster_id")
@verbose_option
def validate(snapshot: str, roster_id: str, verbose: bool) -> None:
    """Validate a roster's keepers against league limits (exit 1 on errors)."""
    setup_logging(verbose)
    league = _load(snapshot)

    try:
        result = validate_roster_keepers(league, roster_id)
    except KeyError as e:
        _fail(e.args[0])

    for message in result.messages:
        click.echo(message)
    sys.exit(0 if result.passed else 1)


@cli.command()
@snapshot_argument
@verbose_option
def summary(snapshot: str, verbose: bool) -> None:
    """Summarize keeper usage across the league."""
    setup_logging(verbose)
    league = _load(snapshot)
    result = league_summary(league)

    click.echo(f"Season {result.season}: {result.total_keepers} keepers")
    click.echo(f"  Franchise tags used: {result.franchise_tags_used}")
    click.echo(f"  Expiring this season: {result.expiring_this_season}")
    click.echo(f"  Expiring next season: {result.expiring_next_season}")
    click.echo(f"  Average keeper cost: {result.average_keeper_cost:.1f}")
    for position, count in sorted(result.keepers_by_position.items()):
        click.echo(f"  {position}: {count}")


if __name__ == "__main__":
    cli()
