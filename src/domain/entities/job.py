"""
Job Domain Entities

A job is a named recurring instruction to submit one trade order.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Tuple

from src.domain.exceptions import JobValidationError


JOB_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,99}$")
TICKER_PATTERN = re.compile(r"^[A-Z][A-Z0-9./-]{0,14}$")


class OrderSide(Enum):
    """Order side (buy or sell)."""
    BUY = "buy"
    SELL = "sell"


class Weekday(Enum):
    """
    Closed set of recognised days of the week.

    Member order is the calendar order used for sorting and range
    compression (mon first).
    """
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @property
    def index(self) -> int:
        """Zero-based position in the week (mon=0)."""
        return _WEEKDAY_ORDER.index(self)

    @classmethod
    def ordered(cls, days: Iterable[Weekday]) -> Tuple[Weekday, ...]:
        """Deduplicate and sort days in calendar order."""
        unique = set(days)
        return tuple(day for day in _WEEKDAY_ORDER if day in unique)


_WEEKDAY_ORDER = tuple(Weekday)


@dataclass(frozen=True)
class Schedule:
    """
    Recurring fire time of a job.

    Attributes:
        days: Weekdays on which the job fires (canonical order, no duplicates)
        hour: Hour of day, 0-23
        minute: Minute of hour, 0-59
    """
    days: Tuple[Weekday, ...]
    hour: int
    minute: int

    def __post_init__(self) -> None:
        """Validate and canonicalise schedule fields."""
        days = tuple(self.days)
        if not days:
            raise JobValidationError("schedule.days must not be empty", field="schedule.days")
        for day in days:
            if not isinstance(day, Weekday):
                raise JobValidationError(
                    f"schedule.days contains an unrecognised day: {day!r}",
                    field="schedule.days",
                )
        # frozen dataclass: canonical form is written through object.__setattr__
        object.__setattr__(self, "days", Weekday.ordered(days))

        if not _is_int(self.hour) or not 0 <= self.hour <= 23:
            raise JobValidationError(
                f"schedule.hour must be an integer between 0 and 23, got {self.hour!r}",
                field="schedule.hour",
            )
        if not _is_int(self.minute) or not 0 <= self.minute <= 59:
            raise JobValidationError(
                f"schedule.minute must be an integer between 0 and 59, got {self.minute!r}",
                field="schedule.minute",
            )

    @property
    def day_values(self) -> list[str]:
        """Days as plain string tokens."""
        return [day.value for day in self.days]


@dataclass(frozen=True)
class JobDefinition:
    """
    Definition of a scheduled trade.

    Attributes:
        name: Unique key of the job
        action: Buy or sell
        ticker: Instrument symbol (e.g., "TSLA")
        quantity: Number of shares, strictly positive
        schedule: When the job fires
        enabled: Disabled jobs keep their definition but have no trigger
    """
    name: str
    action: OrderSide
    ticker: str
    quantity: int
    schedule: Schedule
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate job definition."""
        if not isinstance(self.name, str) or not JOB_NAME_PATTERN.match(self.name):
            raise JobValidationError(
                f"name must match {JOB_NAME_PATTERN.pattern}, got {self.name!r}",
                field="name",
            )
        if not isinstance(self.action, OrderSide):
            try:
                object.__setattr__(self, "action", OrderSide(self.action))
            except ValueError:
                raise JobValidationError(
                    f"action must be one of buy, sell, got {self.action!r}",
                    field="action",
                )
        if not isinstance(self.ticker, str) or not TICKER_PATTERN.match(self.ticker):
            raise JobValidationError(
                f"ticker must match {TICKER_PATTERN.pattern}, got {self.ticker!r}",
                field="ticker",
            )
        if not _is_int(self.quantity) or self.quantity <= 0:
            raise JobValidationError(
                f"quantity must be a positive integer, got {self.quantity!r}",
                field="quantity",
            )
        if not isinstance(self.schedule, Schedule):
            raise JobValidationError("schedule is required", field="schedule")
        if not isinstance(self.enabled, bool):
            raise JobValidationError(
                f"enabled must be a boolean, got {self.enabled!r}",
                field="enabled",
            )

    def with_enabled(self, enabled: bool) -> JobDefinition:
        """Return a copy with the enabled flag changed."""
        return JobDefinition(
            name=self.name,
            action=self.action,
            ticker=self.ticker,
            quantity=self.quantity,
            schedule=self.schedule,
            enabled=enabled,
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
