"""
AlpacaBrokerAdapter 테스트

TradingClient를 Mock으로 대체하여 주문 변환과 오류 매핑을 검증합니다.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

pytest.importorskip("alpaca")

import requests
from alpaca.common.exceptions import APIError
from alpaca.trading.enums import OrderSide as AlpacaOrderSide

from src.application.dto.trading import OrderRequest
from src.application.ports.outbound.broker_port import BrokerError
from src.domain.entities.job import OrderSide
from src.infrastructure.adapters.broker.alpaca_broker_adapter import AlpacaBrokerAdapter

CLIENT_ORDER_ID = "buy-tsla-20240108T1435Z"


def _api_error(message: str, status_code: int = None) -> APIError:
    http_error = None
    if status_code is not None:
        http_error = MagicMock()
        http_error.response.status_code = status_code
    return APIError(f'{{"code": 40010001, "message": "{message}"}}', http_error)


def _order(order_id: str = "alpaca-1"):
    return SimpleNamespace(
        id=order_id,
        client_order_id=CLIENT_ORDER_ID,
        symbol="TSLA",
        qty="10",
        side=SimpleNamespace(value="buy"),
        status=SimpleNamespace(value="accepted"),
    )


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def adapter(client):
    return AlpacaBrokerAdapter("key", "secret", paper=True, client=client)


@pytest.fixture
def request_():
    return OrderRequest(ticker="TSLA", side=OrderSide.BUY, quantity=10, client_order_id=CLIENT_ORDER_ID)


class TestSubmitOrder:

    @pytest.mark.asyncio
    async def test_success(self, adapter, client, request_):
        """시장가 주문 변환 및 성공 응답"""
        client.submit_order.return_value = _order()

        response = await adapter.submit_order(request_)

        assert response.success
        assert response.order_id == "alpaca-1"
        assert response.status == "accepted"
        order_data = client.submit_order.call_args.kwargs["order_data"]
        assert order_data.symbol == "TSLA"
        assert order_data.qty == 10
        assert order_data.side == AlpacaOrderSide.BUY
        assert order_data.client_order_id == CLIENT_ORDER_ID

    @pytest.mark.asyncio
    async def test_duplicate_client_order_id_resolves_existing(self, adapter, client, request_):
        """중복 client_order_id → 기존 주문 조회 후 성공 처리 (두 번째 주문 없음)"""
        client.submit_order.side_effect = _api_error("client_order_id must be unique", 422)
        client.get_order_by_client_id.return_value = _order("alpaca-existing")

        response = await adapter.submit_order(request_)

        assert response.success
        assert response.order_id == "alpaca-existing"
        assert response.duplicate is True
        client.get_order_by_client_id.assert_called_once_with(CLIENT_ORDER_ID)

    @pytest.mark.asyncio
    async def test_duplicate_lookup_failure_is_retryable(self, adapter, client, request_):
        client.submit_order.side_effect = _api_error("client_order_id must be unique", 422)
        client.get_order_by_client_id.side_effect = _api_error("internal error", 500)

        with pytest.raises(BrokerError) as exc_info:
            await adapter.submit_order(request_)

        assert exc_info.value.retryable

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [429, 500, 503, None])
    async def test_transient_api_errors_are_retryable(self, adapter, client, request_, status_code):
        client.submit_order.side_effect = _api_error("try again", status_code)

        with pytest.raises(BrokerError) as exc_info:
            await adapter.submit_order(request_)

        assert exc_info.value.retryable
        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_client_error_is_rejection(self, adapter, client, request_):
        """4xx → 거부 응답 (재시도 안 함)"""
        client.submit_order.side_effect = _api_error("insufficient buying power", 403)

        response = await adapter.submit_order(request_)

        assert not response.success
        assert response.error_message.startswith("rejected:")
        assert "insufficient buying power" in response.error_message

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable(self, adapter, client, request_):
        client.submit_order.side_effect = requests.ConnectionError("reset by peer")

        with pytest.raises(BrokerError) as exc_info:
            await adapter.submit_order(request_)

        assert exc_info.value.retryable


def test_paper_flag(client):
    assert AlpacaBrokerAdapter("k", "s", paper=False, client=client).paper is False
