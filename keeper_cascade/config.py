"""League keeper settings, rule constants and season/deadline helpers."""

from dataclasses import dataclass, field, fields
from datetime import date, datetime, time, timedelta
from typing import Any

from keeper_cascade.errors import ConfigurationError

# Default keeper rules - a league must opt into these explicitly
DEFAULT_KEEPER_RULES = {
    "max_keepers": 7,
    "max_franchise_tags": 2,
    "max_regular_keepers": 5,
    "regular_keeper_max_years": 2,
    "undrafted_round": 10,
    "minimum_round": 1,
    "cost_reduction_per_year": 1,
    "draft_rounds": 16,
    "trade_deadline_week": 11,
}

# Franchise tags always cost a first round pick
FRANCHISE_ROUND = 1

# NFL week 1 kicks off around September 7
SEASON_KICKOFF_MONTH = 9
SEASON_KICKOFF_DAY = 7

# Positions tracked for roster breakdowns
FANTASY_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")

# Trade value model
BASE_POSITION_VALUES = {
    "QB": 25,
    "RB": 30,
    "WR": 28,
    "TE": 20,
    "K": 5,
    "DEF": 8,
}
DEFAULT_POSITION_VALUE = 10
AGE_PEAK = 24  # Age with the full youth bonus
AGE_MAX_BONUS = 15
KEEPER_BONUS_PER_ROUND = 3

DRAFT_PICK_BASE_VALUE = 32  # Round 1 value
DRAFT_PICK_DECAY = 4  # Value lost per round
DRAFT_PICK_MIN_VALUE = 2
FUTURE_SEASON_DISCOUNT = 0.1  # 10% discount per year out

# Value of a perfectly balanced trade on the 0-100 fairness scale
FAIR_TRADE_SCORE = 50

_REQUIRED_FIELDS = (
    "max_keepers",
    "max_franchise_tags",
    "max_regular_keepers",
    "regular_keeper_max_years",
    "undrafted_round",
    "minimum_round",
    "cost_reduction_per_year",
    "draft_rounds",
)

# camelCase aliases accepted from collaborator payloads
_FIELD_ALIASES = {
    "maxKeepers": "max_keepers",
    "maxFranchiseTags": "max_franchise_tags",
    "maxRegularKeepers": "max_regular_keepers",
    "regularKeeperMaxYears": "regular_keeper_max_years",
    "undraftedRound": "undrafted_round",
    "minimumRound": "minimum_round",
    "costReductionPerYear": "cost_reduction_per_year",
    "draftRounds": "draft_rounds",
    "tradeDeadlineWeek": "trade_deadline_week",
    "tradeDeadlines": "trade_deadlines",
}


@dataclass(frozen=True)
class LeagueKeeperSettings:
    """Keeper rules for one league.

    Attributes:
        max_keepers: Total keepers allowed per roster
        max_franchise_tags: Franchise tags allowed per roster
        max_regular_keepers: Regular keepers allowed per roster
        regular_keeper_max_years: Consecutive years a player may be kept as REGULAR
        undrafted_round: Cost for undrafted/waiver players and post-deadline trades
        minimum_round: Best round a keeper can cost
        cost_reduction_per_year: Rounds subtracted from the draft round for base cost
        draft_rounds: Total rounds in the league draft
        trade_deadline_week: NFL week of the in-season trade deadline
        trade_deadlines: Explicit deadline per season, overriding the week rule
    """

    max_keepers: int
    max_franchise_tags: int
    max_regular_keepers: int
    regular_keeper_max_years: int
    undrafted_round: int
    minimum_round: int
    cost_reduction_per_year: int
    draft_rounds: int
    trade_deadline_week: int = DEFAULT_KEEPER_RULES["trade_deadline_week"]
    trade_deadlines: dict[int, datetime] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate rule values and their ordering."""
        for f in fields(self):
            if f.name == "trade_deadlines":
                continue
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"Keeper setting '{f.name}' must be an integer, got {value!r}",
                    field=f.name,
                )
            if value < 0:
                raise ConfigurationError(
                    f"Keeper setting '{f.name}' must not be negative ({value})",
                    field=f.name,
                )

        if self.minimum_round < 1:
            raise ConfigurationError(
                f"minimum_round must be at least 1 ({self.minimum_round})",
                field="minimum_round",
            )
        if self.trade_deadline_week < 1:
            raise ConfigurationError(
                f"trade_deadline_week must be at least 1 ({self.trade_deadline_week})",
                field="trade_deadline_week",
            )
        if not self.minimum_round <= self.undrafted_round <= self.draft_rounds:
            raise ConfigurationError(
                "Keeper rounds must satisfy minimum_round <= undrafted_round <= "
                f"draft_rounds (got {self.minimum_round}, {self.undrafted_round}, "
                f"{self.draft_rounds})",
                field="undrafted_round",
            )

    def trade_deadline_for(self, season: int) -> datetime:
        """Return the trade deadline for a season.

        Args:
            season: NFL season year (2024 = Sept 2024 - Feb 2025)

        Returns:
            Explicit deadline if configured, else kickoff plus
            (trade_deadline_week - 1) weeks at end of day
        """
        if season in self.trade_deadlines:
            return self.trade_deadlines[season]

        kickoff = date(season, SEASON_KICKOFF_MONTH, SEASON_KICKOFF_DAY)
        deadline_day = kickoff + timedelta(weeks=self.trade_deadline_week - 1)
        return datetime.combine(deadline_day, time(23, 59, 59))


def default_settings(**overrides: Any) -> LeagueKeeperSettings:
    """Build settings from DEFAULT_KEEPER_RULES with explicit overrides."""
    values = dict(DEFAULT_KEEPER_RULES)
    values.update(overrides)
    return LeagueKeeperSettings(**values)


def settings_from_dict(data: dict[str, Any] | None) -> LeagueKeeperSettings:
    """Build validated settings from a collaborator payload.

    Accepts snake_case or camelCase keys. Every keeper rule must be present:
    missing rules are a configuration error, not a silent default.

    Args:
        data: Settings mapping (None when the league has no keeper settings)

    Returns:
        Validated LeagueKeeperSettings

    Raises:
        ConfigurationError: If settings are missing or invalid
    """
    if data is None:
        raise ConfigurationError("League keeper settings not configured")

    normalized: dict[str, Any] = {}
    for key, value in data.items():
        normalized[_FIELD_ALIASES.get(key, key)] = value

    missing = [name for name in _REQUIRED_FIELDS if normalized.get(name) is None]
    if missing:
        raise ConfigurationError(
            f"Missing keeper settings: {', '.join(missing)}", field=missing[0]
        )

    known = {f.name for f in fields(LeagueKeeperSettings)}
    unknown = sorted(set(normalized) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown keeper settings: {', '.join(unknown)}", field=unknown[0]
        )

    deadlines = normalized.pop("trade_deadlines", None) or {}
    try:
        parsed_deadlines = {
            int(season): (
                value if isinstance(value, datetime) else datetime.fromisoformat(value)
            )
            for season, value in deadlines.items()
        }
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid trade deadline: {e}", field="trade_deadlines"
        ) from e

    if normalized.get("trade_deadline_week") is None:
        normalized.pop("trade_deadline_week", None)

    return LeagueKeeperSettings(**normalized, trade_deadlines=parsed_deadlines)


def season_for_date(moment: date) -> int:
    """Return the NFL season a date belongs to.

    January and February are still the previous season's playoffs.
    """
    if moment.month < 3:
        return moment.year - 1
    return moment.year


def keeper_planning_season(moment: date) -> int:
    """Return the season whose draft keeper planning targets.

    September-December plan next year's draft; January-August plan this year's.
    """
    if moment.month >= SEASON_KICKOFF_MONTH:
        return moment.year + 1
    return moment.year


def trade_season_for_date(moment: datetime) -> int:
    """Return the season a trade counts against for deadline purposes.

    Trades from September on belong to that year's season. January-August
    trades are the offseason of the previous season.
    """
    if moment.month >= SEASON_KICKOFF_MONTH:
        return moment.year
    return moment.year - 1


def is_trade_after_deadline(
    trade_time: datetime, settings: LeagueKeeperSettings
) -> bool:
    """Check whether a trade happened after its season's trade deadline.

    Args:
        trade_time: When the trade was processed
        settings: League settings supplying the deadline rule

    Returns:
        True if keeper value should reset for the receiving roster
    """
    season = trade_season_for_date(trade_time)
    deadline = settings.trade_deadline_for(season)
    # Compare naive wall-clock times
    return trade_time.replace(tzinfo=None) > deadline.replace(tzinfo=None)
