"""
Trading DTOs for order submission.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any

from src.domain.entities.job import OrderSide


@dataclass(frozen=True)
class OrderRequest:
    """
    Request to submit a market order.

    Attributes:
        ticker: Instrument symbol (e.g., "TSLA")
        side: Buy or sell
        quantity: Number of shares
        client_order_id: Caller-chosen ID used by the broker to reject duplicates
        time_in_force: Broker time-in-force ("day" or "gtc")
    """
    ticker: str
    side: OrderSide
    quantity: int
    client_order_id: str
    time_in_force: str = "day"

    def __post_init__(self) -> None:
        """Validate order request."""
        if self.quantity <= 0:
            raise ValueError("Order quantity must be positive")
        if not self.client_order_id:
            raise ValueError("Order requires client_order_id")


@dataclass(frozen=True)
class OrderResponse:
    """
    Response from order submission.

    Attributes:
        success: Whether the broker accepted the order
        ticker: Instrument symbol
        side: Buy or sell
        quantity: Requested quantity
        order_id: Broker order ID
        client_order_id: Client order ID sent with the request
        status: Broker order status string
        error_message: Error message if failed
        raw_response: Raw broker response
        submitted_at: Submission timestamp
        duplicate: The client_order_id matched an order placed earlier
    """
    success: bool
    ticker: str
    side: OrderSide
    quantity: int
    order_id: Optional[str] = None
    client_order_id: Optional[str] = None
    status: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None
    submitted_at: datetime = field(default_factory=datetime.now)
    duplicate: bool = False

    @classmethod
    def success_response(
        cls,
        request: OrderRequest,
        order_id: str,
        status: Optional[str] = None,
        raw_response: Optional[Dict[str, Any]] = None,
        duplicate: bool = False,
    ) -> OrderResponse:
        """Create successful order response."""
        return cls(
            success=True,
            ticker=request.ticker,
            side=request.side,
            quantity=request.quantity,
            order_id=order_id,
            client_order_id=request.client_order_id,
            status=status,
            raw_response=raw_response,
            duplicate=duplicate,
        )

    @classmethod
    def failure_response(cls, request: OrderRequest, error_message: str) -> OrderResponse:
        """Create failed order response."""
        return cls(
            success=False,
            ticker=request.ticker,
            side=request.side,
            quantity=request.quantity,
            client_order_id=request.client_order_id,
            error_message=error_message,
        )
