"""
BrokerPort - Interface for the external trading API.

Adapters translate OrderRequest into the broker's order API and map its
errors onto BrokerError.
"""
from abc import ABC, abstractmethod
from typing import Optional

from src.application.dto.trading import OrderRequest, OrderResponse


class BrokerError(Exception):
    """
    Raised when the broker call fails.

    Attributes:
        retryable: True for transient failures (connection errors, 5xx, 429)
        status_code: HTTP status returned by the broker, if any
    """

    def __init__(self, message: str, retryable: bool = False, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.status_code = status_code


class BrokerPort(ABC):
    """
    Port interface for order submission.
    """

    @property
    @abstractmethod
    def paper(self) -> bool:
        """True when orders are simulated (paper trading)."""
        pass

    @abstractmethod
    async def submit_order(self, request: OrderRequest) -> OrderResponse:
        """
        Submit a market order.

        Args:
            request: Order to submit

        Returns:
            OrderResponse; success=False when the broker rejected the order

        Raises:
            BrokerError: If the call itself failed
        """
        pass
