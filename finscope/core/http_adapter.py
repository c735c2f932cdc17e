"""
HTTP adapter for price source clients.

Wraps a lazily created ``httpx.AsyncClient`` per provider base URL. Requests are
issued exactly once; failures propagate as httpx exceptions and are translated
into source errors by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger


@dataclass
class HttpConfig:
    """Configuration for HTTP client behavior."""

    base_url: str
    timeout: float = 10.0
    max_redirects: int = 5
    verify_ssl: bool = True
    user_agent: str = "finscope/0.1.0"
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("base_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

    def request_headers(self) -> dict[str, str]:
        """Default headers merged with the configured extras, extras winning."""
        return {"User-Agent": self.user_agent, "Accept": "application/json", **self.headers}


class HttpClient:
    """Async HTTP client bound to one provider base URL."""

    def __init__(
        self,
        http_config: HttpConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.http_config = http_config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            config = self.http_config
            self._client = httpx.AsyncClient(
                base_url=config.base_url,
                timeout=httpx.Timeout(config.timeout),
                follow_redirects=True,
                max_redirects=config.max_redirects,
                verify=config.verify_ssl,
                headers=config.request_headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one GET; the response is returned whatever its status."""
        response = await self._ensure_client().get(url, **kwargs)
        logger.debug(f"GET {response.request.url} -> {response.status_code}")
        return response

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET ``url`` and decode the JSON body; non-2xx raises ``httpx.HTTPStatusError``."""
        response = await self.get(url, **kwargs)
        response.raise_for_status()
        return response.json()

    def __repr__(self) -> str:
        return f"HttpClient(base_url='{self.http_config.base_url}')"


__all__ = ["HttpConfig", "HttpClient"]
