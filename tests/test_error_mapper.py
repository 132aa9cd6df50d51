"""
Tests for mapping domain and provider exceptions to HTTP status and detail.
"""

import asyncio

import httpx
import pytest
from fastapi import HTTPException

from meditrade.core.error_mapper import ErrorMapper
from meditrade.core.exceptions import (AccountExists, Forbidden,
                                       InsufficientFunds, InvalidQuantity,
                                       NotFound, PersistenceError,
                                       Unauthorized, WatchlistFull)

MAPPER = ErrorMapper(resource_name="Asset", api_name="CoinGecko")


def status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.test/simple/price")
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestDomainErrors:

    @pytest.mark.parametrize("exc,status", [
        (InvalidQuantity("bad"), 400),
        (InsufficientFunds("poor"), 400),
        (WatchlistFull("full"), 400),
        (AccountExists("dup"), 409),
        (NotFound("gone"), 404),
        (Unauthorized("who"), 401),
        (Forbidden("no"), 403),
        (PersistenceError("db"), 503),
    ])
    def test_status(self, exc, status):
        code, detail = MAPPER.to_http(exc)
        assert code == status
        assert detail == {"kind": type(exc).__name__, "message": exc.message}


class TestProviderErrors:

    def test_value_error_is_not_found(self):
        assert MAPPER.to_http(ValueError("x"), symbol="BTC") == (
            404, {"kind": "NotFound", "message": "Asset 'BTC' not found"}
        )

    def test_upstream_404(self):
        assert MAPPER.to_http(status_error(404))[0] == 404

    def test_upstream_5xx_is_bad_gateway(self):
        code, detail = MAPPER.to_http(status_error(503))
        assert code == 502
        assert detail["message"] == "CoinGecko error"

    def test_upstream_4xx_passthrough(self):
        assert MAPPER.to_http(status_error(429))[0] == 429

    @pytest.mark.parametrize("exc", [
        asyncio.TimeoutError(),
        httpx.ReadTimeout("slow"),
    ])
    def test_timeouts(self, exc):
        assert MAPPER.to_http(exc, symbol="ETH")[0] == 504

    def test_unexpected(self):
        assert MAPPER.to_http(RuntimeError("boom"))[0] == 500

    def test_raise_http(self):
        with pytest.raises(HTTPException) as info:
            MAPPER.raise_http(ValueError("x"), symbol="SOL")
        assert info.value.status_code == 404
