"""Unit tests for Pyth oracle — price response parsing and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lending_controller.config import PythConfig
from lending_controller.oracles.pyth import PythOracle, to_price_mantissa

E18 = 10**18


@pytest.fixture()
def oracle(sample_pyth_config: PythConfig) -> PythOracle:
    return PythOracle(sample_pyth_config)


def _make_pyth_response(items: list[dict]) -> dict:
    return {"parsed": items}


def _mock_session(status: int = 200, data: dict | None = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


FULL_RESPONSE = _make_pyth_response(
    [
        {"id": "eee555", "price": {"price": "200012345678", "expo": "-8"}},
        {"id": "ccc333", "price": {"price": "100000000", "expo": "-8"}},
    ]
)


class TestToPriceMantissa:
    def test_negative_exponent(self) -> None:
        assert to_price_mantissa(350000000, -8) == 35 * 10**17

    def test_exponent_beyond_precision_truncates(self) -> None:
        assert to_price_mantissa(123, -20) == 1

    def test_positive_exponent(self) -> None:
        assert to_price_mantissa(5, 2) == 500 * E18


class TestPythOracleFetchPrices:
    @pytest.mark.asyncio
    async def test_parses_response_correctly(self, oracle: PythOracle) -> None:
        session = _mock_session(data=FULL_RESPONSE)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices()

        assert prices["WETH"] == 200012345678 * 10**10
        assert prices["USDC"] == E18

    @pytest.mark.asyncio
    async def test_handles_http_error(self, oracle: PythOracle) -> None:
        session = _mock_session(status=500)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices()

        assert prices == {}

    @pytest.mark.asyncio
    async def test_handles_network_error(self, oracle: PythOracle) -> None:
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=ConnectionError("timeout"))
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        with patch(
            "lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=mock_session
        ):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices()

        assert prices == {}

    @pytest.mark.asyncio
    async def test_symbol_filter(self, oracle: PythOracle) -> None:
        data = _make_pyth_response(
            [
                {"id": "eee555", "price": {"price": "200000000000", "expo": "-8"}},
                {"id": "ccc333", "price": {"price": "100000000", "expo": "-8"}},
            ]
        )
        session = _mock_session(data=data)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices(symbols=["WETH"])

        assert prices == {"WETH": 2000 * E18}

    @pytest.mark.asyncio
    async def test_non_positive_price_ignored(self, oracle: PythOracle) -> None:
        data = _make_pyth_response([{"id": "eee555", "price": {"price": "0", "expo": "-8"}}])
        session = _mock_session(data=data)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices()

        assert prices == {}

    @pytest.mark.asyncio
    async def test_empty_feeds_returns_empty(self) -> None:
        oracle = PythOracle(PythConfig(hermes_url="https://x.com", feeds={}))
        prices = await oracle.fetch_prices()
        assert prices == {}


class TestPythOracleRefresh:
    @pytest.mark.asyncio
    async def test_refresh_fills_price_table(self, oracle: PythOracle) -> None:
        session = _mock_session(data=FULL_RESPONSE)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                await oracle.refresh()

        assert oracle.get_price("WETH") == 200012345678 * 10**10
        assert oracle.get_price("USDC") == E18

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_old_prices(self, oracle: PythOracle) -> None:
        oracle.set_fixed_price("WETH", 1900 * E18)
        session = _mock_session(status=503)
        with patch("lending_controller.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("lending_controller.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.refresh()

        assert prices == {}
        assert oracle.get_price("WETH") == 1900 * E18
