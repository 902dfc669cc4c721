"""HTTP client for the DataGolf betting feeds."""

from __future__ import annotations

import logging
import re
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlencode

import requests
from requests.exceptions import RequestException

from golfmx.config import Settings, Tour
from golfmx.errors import FeedFetchError

logger = logging.getLogger(__name__)


class FeedKind(str, Enum):
    THREE_BALL = "3_balls"
    ROUND_MATCHUPS = "round_matchups"
    ALL_PAIRINGS = "all_pairings"
    FIELD_UPDATES = "field_updates"


# Feed kind → (path, extra query params)
_ENDPOINTS: dict[FeedKind, tuple[str, dict[str, str]]] = {
    FeedKind.THREE_BALL: (
        "/betting-tools/matchups",
        {"market": "3_balls", "odds_format": "decimal"},
    ),
    FeedKind.ROUND_MATCHUPS: (
        "/betting-tools/matchups",
        {"market": "round_matchups", "odds_format": "decimal"},
    ),
    FeedKind.ALL_PAIRINGS: (
        "/betting-tools/matchups-all-pairings",
        {"odds_format": "decimal"},
    ),
    FeedKind.FIELD_UPDATES: ("/field-updates", {}),
}

_KEY_PARAM = re.compile(r"(key=)[^&]+")


def redact(url: str) -> str:
    """Hide the API key in a feed URL before it reaches logs or errors."""
    return _KEY_PARAM.sub(r"\1***", url)


@dataclass
class FeedBundle:
    """The four raw feed bodies fetched for one ingestion cycle."""

    three_ball: dict[str, Any]
    round_matchups: dict[str, Any]
    pairings: dict[str, Any]
    field_updates: dict[str, Any]

    def as_dict(self) -> dict[FeedKind, dict[str, Any]]:
        return {
            FeedKind.THREE_BALL: self.three_ball,
            FeedKind.ROUND_MATCHUPS: self.round_matchups,
            FeedKind.ALL_PAIRINGS: self.pairings,
            FeedKind.FIELD_UPDATES: self.field_updates,
        }


class DataGolfClient:
    """Uncached GETs against the DataGolf feeds, configured per instance."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.base_url = settings.datagolf_base_url.rstrip("/")
        self.api_key = settings.datagolf_api_key
        self.timeout = settings.request_timeout_s
        self.session = session or requests.Session()

    def feed_url(self, tour: Tour, kind: FeedKind) -> str:
        path, extra = _ENDPOINTS[kind]
        params = {"tour": Tour(tour).value, **extra, "file_format": "json", "key": self.api_key}
        return f"{self.base_url}{path}?{urlencode(params)}"

    def fetch(self, tour: Tour, kind: FeedKind) -> Any:
        """GET one feed and return its decoded JSON body.

        Raises FeedFetchError on transport errors, non-2xx statuses and
        bodies that are not JSON. No retries.
        """
        url = self.feed_url(tour, kind)
        safe_url = redact(url)
        logger.info("Fetching %s feed for tour %s", kind.value, Tour(tour).value)
        try:
            resp = self.session.get(
                url,
                timeout=self.timeout,
                headers={"Cache-Control": "no-cache"},
            )
        except RequestException as e:
            raise FeedFetchError(safe_url, reason=str(e)) from e

        if not resp.ok:
            raise FeedFetchError(safe_url, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise FeedFetchError(safe_url, status_code=resp.status_code, reason="invalid JSON") from e

    def fetch_all(self, tour: Tour) -> FeedBundle:
        """Fetch all four feeds concurrently.

        Returns once every feed has arrived; the first failure is re-raised
        and outstanding requests are cancelled where they have not started.
        """
        kinds = list(FeedKind)
        with ThreadPoolExecutor(max_workers=len(kinds)) as pool:
            futures = {kind: pool.submit(self.fetch, tour, kind) for kind in kinds}
            done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
            for fut in done:
                exc = fut.exception()
                if exc is not None:
                    for other in pending:
                        other.cancel()
                    raise exc
            bodies = {kind: fut.result() for kind, fut in futures.items()}

        return FeedBundle(
            three_ball=_as_object(bodies[FeedKind.THREE_BALL]),
            round_matchups=_as_object(bodies[FeedKind.ROUND_MATCHUPS]),
            pairings=_as_object(bodies[FeedKind.ALL_PAIRINGS]),
            field_updates=_as_object(bodies[FeedKind.FIELD_UPDATES]),
        )


def _as_object(body: Any) -> dict[str, Any]:
    # A top-level list or scalar carries no envelope fields; treat as empty.
    return body if isinstance(body, dict) else {}
