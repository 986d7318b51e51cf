"""Domain services."""
from src.domain.services.schedule_compiler import (
    compile_schedule,
    format_day_of_week,
    parse_day_token,
    parse_day_tokens,
    validate_timezone,
)

__all__ = [
    "compile_schedule",
    "format_day_of_week",
    "parse_day_token",
    "parse_day_tokens",
    "validate_timezone",
]
