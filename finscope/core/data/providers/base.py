"""Price source client abstractions."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
from loguru import logger

from finscope.core.exceptions import SourceUnavailableError
from finscope.core.http_adapter import HttpClient
from finscope.core.models import Asset, SourceRole


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch: a decoded payload or the error that prevented it."""

    source: str
    payload: Any = None
    error: SourceUnavailableError | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class QuoteMatcher:
    """Looks up a supplemental price by symbol, case-insensitively."""

    def __init__(self, quotes: Mapping[str, Decimal] | None = None):
        self._quotes = {symbol.upper(): price for symbol, price in (quotes or {}).items()}

    def try_match(self, symbol: str) -> Decimal | None:
        """Return the quoted price for ``symbol`` or None; never a default of zero."""
        return self._quotes.get(symbol.upper())

    def __len__(self) -> int:
        return len(self._quotes)

    def __repr__(self) -> str:
        return f"QuoteMatcher(symbols={sorted(self._quotes)})"


def to_decimal(value: Any) -> Decimal | None:
    """Convert a JSON number or numeric string to a finite Decimal, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


class PriceSourceClient(ABC):
    """One external price provider.

    ``fetch()`` issues a single request, without retries, and always returns a
    ``FetchResult``; no network, HTTP or payload failure escapes it.
    """

    role: SourceRole = SourceRole.SUPPLEMENTAL

    def __init__(self, name: str, http: HttpClient, endpoint: str, params: dict[str, Any] | None = None):
        self.name = name
        self.http = http
        self.endpoint = endpoint
        self.params = params or {}

    async def fetch(self) -> FetchResult:
        start = time.perf_counter()
        try:
            raw = await self._request()
            payload = self.decode(raw)
        except SourceUnavailableError as e:
            return self._failed(e, start)
        except httpx.TimeoutException as e:
            return self._failed(
                SourceUnavailableError(f"{self.name} timed out: {e}", self.name, reason="timeout"), start
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            return self._failed(
                SourceUnavailableError(
                    f"{self.name} returned HTTP {status_code}",
                    self.name,
                    reason="http_status",
                    status_code=status_code,
                ),
                start,
            )
        except httpx.HTTPError as e:
            return self._failed(
                SourceUnavailableError(f"{self.name} request failed: {e}", self.name, reason="network"), start
            )
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            return self._failed(
                SourceUnavailableError(
                    f"{self.name} returned an unexpected payload: {e}", self.name, reason="malformed_payload"
                ),
                start,
            )
        return FetchResult(source=self.name, payload=payload, elapsed=time.perf_counter() - start)

    def _failed(self, error: SourceUnavailableError, start: float) -> FetchResult:
        logger.bind(source=self.name, error_code=error.error_code.value).warning(error.message)
        return FetchResult(source=self.name, error=error, elapsed=time.perf_counter() - start)

    async def _request(self) -> Any:
        return await self.http.get_json(self.endpoint, params=self.params)

    @abstractmethod
    def decode(self, raw: Any) -> Any:
        """Turn the raw JSON body into the typed payload; raise on unexpected shapes."""

    async def close(self) -> None:
        await self.http.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


class PrimarySource(PriceSourceClient):
    """Full market listing; its failure fails the whole refresh cycle."""

    role = SourceRole.PRIMARY

    def decode(self, raw: Any) -> list[Asset]:
        return self.parse_listing(raw)

    @abstractmethod
    def parse_listing(self, raw: Any) -> list[Asset]:
        """Normalise the provider listing into assets, ranked as received."""


class SupplementalSource(PriceSourceClient):
    """Best-effort price quotes for a narrow symbol set."""

    role = SourceRole.SUPPLEMENTAL

    def decode(self, raw: Any) -> QuoteMatcher:
        return self.build_matcher(raw)

    @abstractmethod
    def build_matcher(self, raw: Any) -> QuoteMatcher:
        """Expose the provider payload through the symbol lookup capability."""


__all__ = [
    "FetchResult",
    "QuoteMatcher",
    "PriceSourceClient",
    "PrimarySource",
    "SupplementalSource",
    "to_decimal",
]
