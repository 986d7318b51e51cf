"""Domain value objects."""
from src.domain.value_objects.trigger_spec import TriggerSpec

__all__ = [
    "TriggerSpec",
]
