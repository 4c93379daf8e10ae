"""HTTP client for the public activity endpoint of the prediction-market data API."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from config import DATA_API, REQUEST_TIMEOUT, USER_AGENT
from errors import FetchError, OffsetCeilingError

logger = logging.getLogger(__name__)


class ActivityClient:
    """Thin wrapper around ``GET {DATA_API}/activity``.

    One call, one page. No retries: an offset the server refuses (HTTP 400)
    raises OffsetCeilingError so the pager can rotate its window; every other
    failure raises FetchError.
    """

    def __init__(self, base_url: str = DATA_API, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.session.headers.setdefault("Accept", "application/json")

    def get_activity(self, user: str, limit: int, offset: int,
                     end: Optional[int] = None) -> list[dict]:
        params = {"user": user, "limit": limit, "offset": offset}
        if end is not None:
            params["end"] = end

        try:
            resp = self.session.get(f"{self.base_url}/activity", params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise FetchError(f"Activity request timed out (offset {offset})") from e
        except requests.RequestException as e:
            raise FetchError(f"Activity request failed: {e}") from e

        if resp.status_code == 400:
            raise OffsetCeilingError(f"Offset {offset} refused by the activity API")
        if not resp.ok:
            raise FetchError(f"Activity API returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError("Activity API returned a non-JSON body") from e

        if not isinstance(data, list):
            raise FetchError(f"Unexpected activity payload: {type(data).__name__}")
        return data

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ActivityClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
