"""GW2 WvW matches feed client.

Uses the official Guild Wars 2 API (api.guildwars2.com). One call returns
the cumulative state of every active match; a second returns the world
directory used to name each team.
"""

from __future__ import annotations

from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..config import GW2ApiConfig, settings
from ..exceptions import FeedError
from ..logging import logger


class GW2Client:
    """Client for the ``/v2/wvw/matches`` and ``/v2/worlds`` endpoints."""

    def __init__(self, config: GW2ApiConfig | None = None, client: httpx.Client | None = None) -> None:
        self.config = config or settings.gw2_config
        self.client = client or httpx.Client(
            base_url=self.config.base_url,
            headers={"User-Agent": "wvw-scraper/1.0"},
            timeout=self.config.request_timeout_seconds,
        )

    def fetch_matches(self) -> list[dict[str, Any]]:
        """Fetch every active match.

        Raises FeedError on an HTTP error status, a non-list body, or a
        transport failure that persists after retries.
        """
        return self._fetch_all(self.config.matches_path, "matches")

    def fetch_worlds(self) -> list[dict[str, Any]]:
        return self._fetch_all(self.config.worlds_path, "worlds")

    def _fetch_all(self, path: str, resource: str) -> list[dict[str, Any]]:
        fetch = retry(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_fixed(self.config.retry_wait_seconds),
            reraise=True,
        )(self._get_all)

        try:
            response = fetch(path)
        except httpx.TransportError as exc:
            logger.warning(f"gw2_{resource}_fetch_error", error=str(exc))
            raise FeedError(f"GW2 {resource} request failed: {exc}") from exc

        if response.status_code != 200:
            logger.warning(
                f"gw2_{resource}_fetch_failed",
                status=response.status_code,
                body=response.text[:200],
            )
            raise FeedError(
                f"GW2 API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedError(f"GW2 {resource} response is not JSON") from exc

        if not isinstance(payload, list):
            raise FeedError(f"GW2 {resource} response is not a list")

        logger.info(f"gw2_{resource}_fetched", count=len(payload))
        return payload

    def _get_all(self, path: str) -> httpx.Response:
        return self.client.get(path, params={"ids": "all"})
