"""Data Transfer Objects for application layer."""
from src.application.dto.trading import (
    OrderRequest,
    OrderResponse,
)

__all__ = [
    "OrderRequest",
    "OrderResponse",
]
