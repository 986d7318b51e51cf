"""
AlpacaBrokerAdapter - Alpaca implementation of BrokerPort.

Wraps alpaca-py's TradingClient. Orders are market orders carrying the
caller's client_order_id, so a resubmission after an ambiguous failure is
rejected by Alpaca as a duplicate and resolved to the existing order here.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import requests
from alpaca.common.exceptions import APIError
from alpaca.trading.client import TradingClient
from alpaca.trading.enums import OrderSide as AlpacaOrderSide
from alpaca.trading.enums import TimeInForce
from alpaca.trading.requests import MarketOrderRequest

from src.application.dto.trading import OrderRequest, OrderResponse
from src.application.ports.outbound.broker_port import BrokerError, BrokerPort
from src.domain.entities.job import OrderSide

logger = logging.getLogger(__name__)

_SIDES = {
    OrderSide.BUY: AlpacaOrderSide.BUY,
    OrderSide.SELL: AlpacaOrderSide.SELL,
}

_TIME_IN_FORCE = {
    "day": TimeInForce.DAY,
    "gtc": TimeInForce.GTC,
}


def _status_code(error: APIError) -> Optional[int]:
    try:
        return error.status_code
    except AttributeError:
        return None


def _is_duplicate_client_order_id(error: APIError) -> bool:
    return "client_order_id" in str(error).lower() and "unique" in str(error).lower()


def _order_payload(order) -> Dict[str, Any]:
    return {
        "id": str(order.id),
        "client_order_id": order.client_order_id,
        "symbol": order.symbol,
        "qty": str(order.qty) if order.qty is not None else None,
        "side": str(getattr(order.side, "value", order.side)),
        "status": str(getattr(order.status, "value", order.status)),
    }


class AlpacaBrokerAdapter(BrokerPort):
    """
    Alpaca broker adapter implementing BrokerPort.

    TradingClient is synchronous (requests); calls run in a worker thread.
    """

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        paper: bool = True,
        client: Optional[TradingClient] = None,
    ):
        """
        Initialize Alpaca adapter.

        Args:
            api_key: Alpaca API key ID
            secret_key: Alpaca API secret key
            paper: Use the paper trading endpoint
            client: Pre-built TradingClient (tests)
        """
        self._api_key = api_key
        self._secret_key = secret_key
        self._paper = paper
        self._client = client

    @property
    def paper(self) -> bool:
        return self._paper

    @property
    def client(self) -> TradingClient:
        """Lazy initialization of TradingClient."""
        if self._client is None:
            self._client = TradingClient(
                api_key=self._api_key,
                secret_key=self._secret_key,
                paper=self._paper,
            )
        return self._client

    async def submit_order(self, request: OrderRequest) -> OrderResponse:
        """Submit a market order and map the result onto OrderResponse."""
        order_data = MarketOrderRequest(
            symbol=request.ticker,
            qty=request.quantity,
            side=_SIDES[request.side],
            time_in_force=_TIME_IN_FORCE.get(request.time_in_force, TimeInForce.DAY),
            client_order_id=request.client_order_id,
        )

        try:
            order = await asyncio.to_thread(self.client.submit_order, order_data=order_data)
        except APIError as e:
            if _is_duplicate_client_order_id(e):
                return await self._resolve_duplicate(request)
            return self._handle_api_error(request, e)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise BrokerError(f"Alpaca connection failed: {e}", retryable=True) from e

        logger.info(
            f"📈 Alpaca order submitted: {request.side.value} {request.quantity} {request.ticker} "
            f"(id={order.id}, client_order_id={request.client_order_id}, paper={self._paper})"
        )
        return OrderResponse.success_response(
            request,
            order_id=str(order.id),
            status=str(getattr(order.status, "value", order.status)),
            raw_response=_order_payload(order),
        )

    async def _resolve_duplicate(self, request: OrderRequest) -> OrderResponse:
        """An earlier attempt already placed this order; return it instead."""
        try:
            order = await asyncio.to_thread(
                self.client.get_order_by_client_id, request.client_order_id
            )
        except APIError as e:
            raise BrokerError(
                f"Duplicate client_order_id {request.client_order_id} could not be resolved: {e}",
                retryable=True,
                status_code=_status_code(e),
            ) from e

        logger.info(
            f"Alpaca order already exists for client_order_id={request.client_order_id} (id={order.id})"
        )
        return OrderResponse.success_response(
            request,
            order_id=str(order.id),
            status=str(getattr(order.status, "value", order.status)),
            raw_response=_order_payload(order),
            duplicate=True,
        )

    @staticmethod
    def _handle_api_error(request: OrderRequest, error: APIError) -> OrderResponse:
        status_code = _status_code(error)
        if status_code is None or status_code == 429 or status_code >= 500:
            raise BrokerError(
                f"Alpaca API error: {error}",
                retryable=True,
                status_code=status_code,
            ) from error

        # 4xx: the order itself was rejected (insufficient buying power, bad symbol, ...)
        logger.warning(f"Alpaca rejected order {request.client_order_id}: {error}")
        return OrderResponse.failure_response(request, f"rejected: {error}")
