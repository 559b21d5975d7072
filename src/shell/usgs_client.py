"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS real-time
GeoJSON feed. All I/O is contained here; parsing is in the core module.
"""

import logging

import requests

from src.core.config import DEFAULT_FEED_URL
from src.core.earthquake import parse_earthquakes
from src.core.feed import FetchError, FetchErrorKind, FetchResult


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


class USGSClient:
    """Client for fetching the USGS earthquake feed.

    This is part of the imperative shell - it handles HTTP I/O.
    Each call is independent and never retries.
    """

    def __init__(
        self,
        feed_url: str = DEFAULT_FEED_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize USGS client.

        Args:
            feed_url: GeoJSON feed endpoint
            timeout: Request timeout in seconds
        """
        self.feed_url = feed_url
        self.timeout = timeout

    def fetch_events(self) -> FetchResult:
        """Fetch and parse the feed.

        This method performs HTTP I/O. Malformed records are dropped;
        transport failures and non-2xx responses fail the whole call.

        Returns:
            FetchResult with parsed earthquakes or the failure cause
        """
        logger.info("Fetching earthquake feed from %s", self.feed_url)

        try:
            response = requests.get(self.feed_url, timeout=self.timeout)
        except requests.Timeout:
            logger.error("USGS feed request timed out")
            return FetchResult(
                success=False,
                error=FetchError(kind=FetchErrorKind.NETWORK, message="Request timed out"),
            )
        except requests.RequestException as e:
            logger.error("USGS feed request failed: %s", str(e))
            return FetchResult(
                success=False,
                error=FetchError(kind=FetchErrorKind.NETWORK, message=str(e)),
            )

        if not response.ok:
            logger.warning(
                "USGS feed returned non-success: %d",
                response.status_code,
            )
            return FetchResult(
                success=False,
                error=FetchError(
                    kind=FetchErrorKind.STATUS,
                    message=f"Feed returned HTTP {response.status_code}",
                    status_code=response.status_code,
                ),
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("USGS feed returned invalid JSON: %s", str(e))
            return FetchResult(
                success=False,
                error=FetchError(kind=FetchErrorKind.NETWORK, message="Invalid JSON body"),
            )

        earthquakes = parse_earthquakes(data)
        features = data.get("features") if isinstance(data, dict) else None
        skipped = (len(features) if isinstance(features, list) else 0) - len(earthquakes)

        logger.info(
            "Fetched %d earthquakes from USGS (%d malformed records skipped)",
            len(earthquakes),
            skipped,
        )

        return FetchResult(success=True, earthquakes=earthquakes)
