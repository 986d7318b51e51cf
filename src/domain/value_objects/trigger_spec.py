"""
TriggerSpec Value Object

Recurring fire specification in the cron vocabulary of the workflow engine.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class TriggerSpec:
    """
    Cron-style recurring trigger.

    Attributes:
        day_of_week: Canonical day expression (e.g., "mon-fri", "mon,wed,fri")
        hour: Hour of day, 0-23
        minute: Minute of hour, 0-59
        timezone: IANA timezone the hour/minute are interpreted in
    """
    day_of_week: str
    hour: int
    minute: int
    timezone: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "day_of_week": self.day_of_week,
            "hour": self.hour,
            "minute": self.minute,
            "timezone": self.timezone,
        }

    def __str__(self) -> str:
        return f"{self.day_of_week} {self.hour:02d}:{self.minute:02d} ({self.timezone})"
