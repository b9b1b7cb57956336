"""Block-explorer API client that produces fee observations."""

from typing import Any, Dict

import requests

from .constants import DEFAULT_API_BASE_URL, DEFAULT_HTTP_TIMEOUT_SECS
from .logging import get_logger

logger = get_logger(__name__)


class SourceError(Exception):
    """Raised when the explorer API cannot supply a fee sample."""
    def __init__(self, endpoint: str, message: str = None):
        self.endpoint = endpoint
        self.message = message or f"Request to {endpoint} failed"
        super().__init__(self.message)


class MempoolSpaceClient:
    """mempool.space-compatible REST client with persistent session."""

    def __init__(self, base_url: str = DEFAULT_API_BASE_URL, timeout: int = DEFAULT_HTTP_TIMEOUT_SECS):
        """
        Initialize explorer client.

        Args:
            base_url: API base URL (e.g., "https://mempool.space/api")
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = "feeforecast/0.1"

    def _get(self, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceError(path, f"Request to {url} failed: {e}") from e
        return response

    def _get_json(self, path: str) -> Any:
        response = self._get(path)
        try:
            return response.json()
        except ValueError as e:
            raise SourceError(path, f"Invalid JSON from {path}: {e}") from e

    def fetch_recommended_fees(self) -> Dict[str, Any]:
        """Tiered fee estimates (fastestFee, halfHourFee, hourFee, economyFee, minimumFee)."""
        return self._get_json("/v1/fees/recommended")

    def fetch_mempool(self) -> Dict[str, Any]:
        """Mempool summary with ``count`` and ``vsize``."""
        return self._get_json("/mempool")

    def fetch_tip_height(self) -> int:
        """Current chain tip height."""
        text = self._get("/blocks/tip/height").text.strip()
        try:
            return int(text)
        except ValueError as e:
            raise SourceError("/blocks/tip/height", f"Invalid tip height: {text!r}") from e

    def fetch_sample(self) -> Dict[str, Any]:
        """
        Fetch one fee sample shaped as keyword arguments for
        ``FeePredictionService.add_observation``.

        Returns:
            Dictionary of the seven observation fields

        Raises:
            SourceError: If any request fails or the response is incomplete
        """
        fees = self.fetch_recommended_fees()
        mempool = self.fetch_mempool()
        height = self.fetch_tip_height()

        try:
            sample = {
                "fastest_fee": float(fees["fastestFee"]),
                "half_hour_fee": float(fees["halfHourFee"]),
                "hour_fee": float(fees["hourFee"]),
                "economy_fee": float(fees.get("economyFee", fees.get("minimumFee", 1))),
                "mempool_size_bytes": int(mempool.get("vsize", 0)),
                "pending_tx_count": int(mempool.get("count", 0)),
                "block_height": height,
            }
        except (KeyError, TypeError, ValueError) as e:
            raise SourceError("/v1/fees/recommended", f"Incomplete fee data: {e}") from e

        logger.debug(f"Fetched fee sample: {sample}")
        return sample
