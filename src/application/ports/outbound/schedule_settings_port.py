"""
ScheduleSettingsPort - Interface for global schedule settings.

Currently holds the timezone used to interpret job hour/minute fields.
"""
from abc import ABC, abstractmethod


class ScheduleSettingsPort(ABC):
    """
    Port interface for the global timezone setting.
    """

    @abstractmethod
    async def get_timezone(self) -> str:
        """
        Get the configured timezone (IANA name).

        Returns the default timezone when nothing has been stored yet.
        """
        pass

    @abstractmethod
    async def set_timezone(self, timezone: str) -> str:
        """
        Store a new timezone.

        Args:
            timezone: Already validated IANA timezone name

        Returns:
            The stored timezone
        """
        pass
