from __future__ import annotations

import logging
import typing as t

import httpx

from ..errors import UpstreamError
from ..utils.config import TMDBConfig

_logger = logging.getLogger(__name__)

JSON = t.Dict[str, t.Any]


class TMDBClient:
    """Minimal async client for the TMDB v3 API.

    Requests are not retried: any transport failure or non-2xx response is
    raised as `UpstreamError` for the caller to surface.
    """

    def __init__(
        self,
        api_token: t.Optional[str],
        *,
        base_url: str = "https://api.themoviedb.org/3",
        timeout_seconds: float = 10.0,
        transport: t.Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_token:
            _logger.warning("TMDB_API_READ_ACCESS_TOKEN is not set; upstream requests will be rejected")
        headers = {"accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: TMDBConfig, transport: t.Optional[httpx.AsyncBaseTransport] = None) -> "TMDBClient":
        return cls(
            config.api_token,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def fetch(self, endpoint: str, params: t.Optional[t.Mapping[str, t.Any]] = None) -> JSON:
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            _logger.error("TMDB fetch failed for: %s (%s)", url, exc)
            raise UpstreamError(f"TMDB request failed: {exc}") from exc

        if response.is_error:
            _logger.error("TMDB fetch failed for: %s (status %d)", url, response.status_code)
            raise UpstreamError(
                f"TMDB API error: {response.status_code} {response.reason_phrase} - {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"TMDB returned invalid JSON for {endpoint}") from exc

    async def close(self) -> None:
        await self._client.aclose()
