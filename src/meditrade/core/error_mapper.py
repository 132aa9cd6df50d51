"""Maps domain and quote-provider exceptions to HTTP responses."""
import asyncio
from dataclasses import dataclass

import httpx
from fastapi import HTTPException

from meditrade.core.exceptions import (AccountExists, BusinessRuleViolation,
                                       Forbidden, MediTradeError, NotFound,
                                       PersistenceError, Unauthorized,
                                       ValidationError)

# Checked in order; subclasses before their bases.
_STATUS_BY_TYPE: tuple[tuple[type[MediTradeError], int], ...] = (
    (AccountExists, 409),
    (ValidationError, 400),
    (BusinessRuleViolation, 400),
    (NotFound, 404),
    (Unauthorized, 401),
    (Forbidden, 403),
    (PersistenceError, 503),
)


def _detail(kind: str, message: str) -> dict[str, str]:
    return {"kind": kind, "message": message}


@dataclass(frozen=True)
class ErrorMapper:
    """Maps exceptions to HTTP (status_code, detail).

    Domain errors keep their own kind; quote-provider errors are labelled with
    resource_name / api_name (e.g. "Asset", "CoinGecko").
    """

    resource_name: str = "Resource"
    api_name: str = "API"

    def to_http(
        self,
        exc: Exception,
        symbol: str | None = None,
    ) -> tuple[int, dict[str, str]]:
        """Map an exception to (status_code, detail) for HTTP responses.

        Args:
            exc: The exception raised by a service or quote provider.
            symbol: Optional symbol to include in not-found messages (e.g. "BTC").

        Returns:
            (status_code, detail) where detail is {"kind", "message"}.
        """
        if isinstance(exc, MediTradeError):
            for exc_type, status in _STATUS_BY_TYPE:
                if isinstance(exc, exc_type):
                    return (status, _detail(exc.kind, exc.message))
            return (500, _detail(exc.kind, exc.message))
        not_found = (
            f"{self.resource_name} not found"
            if symbol is None
            else f"{self.resource_name} '{symbol}' not found"
        )
        if isinstance(exc, (ValueError, KeyError)):
            return (404, _detail("NotFound", not_found))
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            if status == 404:
                return (404, _detail("NotFound", not_found))
            if status >= 500:
                return (502, _detail("UpstreamError", f"{self.api_name} error"))
            return (status, _detail("UpstreamError", f"{self.api_name} error"))
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
            detail = "Request timed out"
            if symbol is not None:
                detail = f"Request to {self.api_name} timed out for '{symbol}'"
            return (504, _detail("Timeout", detail))
        return (500, _detail("InternalError", "Internal server error"))

    def raise_http(
        self,
        exc: Exception,
        symbol: str | None = None,
    ) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc, symbol=symbol)
        raise HTTPException(status_code=status_code, detail=detail) from exc
