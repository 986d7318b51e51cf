"""
InMemoryBrokerAdapter - In-memory implementation of BrokerPort.

Accepts every order and keeps it in a list; queued failures let tests
script broker errors and rejections. Orders with a client_order_id seen
before resolve to the original order, as a real broker would.
"""
import asyncio
from typing import Dict, List, Optional, Union

from src.application.dto.trading import OrderRequest, OrderResponse
from src.application.ports.outbound.broker_port import BrokerError, BrokerPort


class InMemoryBrokerAdapter(BrokerPort):
    """
    In-memory broker for testing and dry runs.
    """

    def __init__(self, paper: bool = True, delay_seconds: float = 0.0):
        """
        Initialize the broker.

        Args:
            paper: Reported paper flag
            delay_seconds: Artificial latency per submission (timeout tests)
        """
        self._paper = paper
        self.delay_seconds = delay_seconds
        self._orders: Dict[str, OrderRequest] = {}
        self._order_ids: Dict[str, str] = {}
        self._failures: List[Union[BrokerError, Exception, str]] = []
        self.submissions: List[OrderRequest] = []

    @property
    def paper(self) -> bool:
        return self._paper

    @property
    def orders(self) -> List[OrderRequest]:
        """Accepted orders, in submission order (for testing)."""
        return list(self._orders.values())

    def fail_next(self, failure: Union[BrokerError, Exception, str]) -> None:
        """
        Queue a failure for the next submission.

        An exception is raised; a string is returned as a rejection message.
        """
        self._failures.append(failure)

    def clear(self):
        """Clear all orders and queued failures. Useful for test cleanup."""
        self._orders.clear()
        self._order_ids.clear()
        self._failures.clear()
        self.submissions.clear()

    async def submit_order(self, request: OrderRequest) -> OrderResponse:
        self.submissions.append(request)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        if self._failures:
            failure = self._failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return OrderResponse.failure_response(request, failure)

        order_id: Optional[str] = self._order_ids.get(request.client_order_id)
        duplicate = order_id is not None
        if not duplicate:
            order_id = f"mem-{len(self._orders) + 1}"
            self._orders[request.client_order_id] = request
            self._order_ids[request.client_order_id] = order_id

        return OrderResponse.success_response(
            request, order_id=order_id, status="accepted", duplicate=duplicate
        )
