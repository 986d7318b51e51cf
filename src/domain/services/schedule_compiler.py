"""
Schedule Compiler - Domain Service

Translates job schedules into cron trigger specifications.

Day tokens are resolved against the closed Weekday set:
- single days: "mon", "monday"
- inclusive ranges in week order: "mon-fri"
- aliases: "weekdays", "weekends", "daily", "everyday", "*"

Anything else (unknown tokens, wrap-around ranges like "fri-mon") is
rejected instead of silently defaulting.
"""
from typing import Iterable, List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.domain.entities.job import Schedule, Weekday
from src.domain.exceptions import JobValidationError, ScheduleCompileError
from src.domain.value_objects.trigger_spec import TriggerSpec


_DAY_NAMES = {
    "mon": Weekday.MON, "monday": Weekday.MON,
    "tue": Weekday.TUE, "tues": Weekday.TUE, "tuesday": Weekday.TUE,
    "wed": Weekday.WED, "wednesday": Weekday.WED,
    "thu": Weekday.THU, "thur": Weekday.THU, "thurs": Weekday.THU, "thursday": Weekday.THU,
    "fri": Weekday.FRI, "friday": Weekday.FRI,
    "sat": Weekday.SAT, "saturday": Weekday.SAT,
    "sun": Weekday.SUN, "sunday": Weekday.SUN,
}

_ALIASES = {
    "weekdays": (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI),
    "weekends": (Weekday.SAT, Weekday.SUN),
    "daily": tuple(Weekday),
    "everyday": tuple(Weekday),
    "*": tuple(Weekday),
}


def _resolve_day(token: str, original: str) -> Weekday:
    try:
        return _DAY_NAMES[token]
    except KeyError:
        raise ScheduleCompileError(
            f"Unrecognised day token {original!r}. "
            f"Expected one of mon..sun, a range such as mon-fri, or weekdays/weekends/daily",
            field="schedule.days",
        )


def parse_day_token(token: str) -> Tuple[Weekday, ...]:
    """
    Resolve one day token into weekdays.

    Args:
        token: Day token (e.g., "mon", "mon-fri", "weekdays")

    Returns:
        Weekdays in calendar order

    Raises:
        ScheduleCompileError: If the token is not recognised
    """
    if not isinstance(token, str):
        raise ScheduleCompileError(f"Day token must be a string, got {token!r}", field="schedule.days")

    normalized = token.strip().lower()
    if normalized in _ALIASES:
        return _ALIASES[normalized]

    if "-" in normalized:
        parts = normalized.split("-")
        if len(parts) != 2:
            raise ScheduleCompileError(f"Malformed day range {token!r}", field="schedule.days")
        start = _resolve_day(parts[0].strip(), token)
        end = _resolve_day(parts[1].strip(), token)
        if end.index < start.index:
            raise ScheduleCompileError(
                f"Ambiguous day range {token!r}: ranges must run forward from mon to sun",
                field="schedule.days",
            )
        return tuple(Weekday)[start.index:end.index + 1]

    return (_resolve_day(normalized, token),)


def parse_day_tokens(tokens: Iterable[str]) -> Tuple[Weekday, ...]:
    """
    Resolve a list of day tokens into a canonical weekday tuple.

    Raises:
        ScheduleCompileError: If any token is unknown or the list is empty
    """
    if isinstance(tokens, str):
        tokens = [tokens]
    days: List[Weekday] = []
    for token in tokens:
        days.extend(parse_day_token(token))
    if not days:
        raise ScheduleCompileError("schedule.days must not be empty", field="schedule.days")
    return Weekday.ordered(days)


def format_day_of_week(days: Iterable[Weekday]) -> str:
    """
    Collapse weekdays into a cron day_of_week expression.

    Runs of three or more consecutive days become ranges, e.g.
    (mon, tue, wed, fri) -> "mon-wed,fri"; (sat, sun) -> "sat,sun".
    """
    ordered = Weekday.ordered(days)
    if not ordered:
        raise ScheduleCompileError("schedule.days must not be empty", field="schedule.days")

    runs: List[List[Weekday]] = []
    for day in ordered:
        if runs and runs[-1][-1].index + 1 == day.index:
            runs[-1].append(day)
        else:
            runs.append([day])

    parts: List[str] = []
    for run in runs:
        if len(run) >= 3:
            parts.append(f"{run[0].value}-{run[-1].value}")
        else:
            parts.extend(day.value for day in run)
    return ",".join(parts)


def validate_timezone(timezone: str) -> str:
    """
    Check that a timezone is a known IANA zone.

    Returns:
        The timezone unchanged

    Raises:
        ScheduleCompileError: If the zone is unknown
    """
    if not isinstance(timezone, str) or not timezone.strip():
        raise ScheduleCompileError("timezone must be a non-empty string", field="timezone")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ScheduleCompileError(f"Unknown timezone: {timezone!r}", field="timezone")
    return timezone


def compile_schedule(schedule: Schedule, timezone: str) -> TriggerSpec:
    """
    Compile a job schedule into a trigger specification.

    Pure and deterministic: the same schedule and timezone always produce an
    equal TriggerSpec.

    Args:
        schedule: Job schedule
        timezone: IANA timezone the hour/minute are interpreted in

    Returns:
        TriggerSpec for the workflow engine

    Raises:
        ScheduleCompileError: If any field is invalid
    """
    if not isinstance(schedule, Schedule):
        raise ScheduleCompileError("schedule is required", field="schedule")

    try:
        Schedule(days=schedule.days, hour=schedule.hour, minute=schedule.minute)
    except JobValidationError as e:
        raise ScheduleCompileError(e.message, field=e.field)

    return TriggerSpec(
        day_of_week=format_day_of_week(schedule.days),
        hour=schedule.hour,
        minute=schedule.minute,
        timezone=validate_timezone(timezone),
    )
