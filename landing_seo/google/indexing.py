"""Google Indexing API: ask Google to (re)crawl or drop a URL.

Quotas: 200 publish requests per day per site, 600 per minute burst.
Batches are sent one URL at a time with a short pause in between.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from landing_seo.config import INDEXING_API_BASE, INDEXING_DELAY, INDEXING_SCOPE
from landing_seo.errors import IndexingRequestFailed
from landing_seo.google.credentials import CredentialedAPIClient

logger = logging.getLogger(__name__)

URL_UPDATED = "URL_UPDATED"
URL_DELETED = "URL_DELETED"
NOTIFICATION_TYPES = (URL_UPDATED, URL_DELETED)


@dataclass(frozen=True)
class IndexingOutcome:
    url: str
    notification_type: str
    success: bool
    response: Optional[dict] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class FailedUrl:
    url: str
    error: str


@dataclass
class BatchIndexingResult:
    """Per-URL partition of one batch, in input order."""

    total_requests: int
    successful: list[str] = field(default_factory=list)
    failed: list[FailedUrl] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    outcomes: list[IndexingOutcome] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Fraction of requested URLs accepted; 0.0 for an empty batch."""
        if self.total_requests == 0:
            return 0.0
        return len(self.successful) / self.total_requests


class IndexingClient(CredentialedAPIClient):
    scope = INDEXING_SCOPE
    error_class = IndexingRequestFailed

    def notify(self, url: str, notification_type: str = URL_UPDATED) -> IndexingOutcome:
        """Publish one URL notification.

        Raises IndexingRequestFailed (with status and body) on a non-2xx answer.
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise ValueError(
                f"notification type must be one of {NOTIFICATION_TYPES}, got {notification_type!r}"
            )
        data = self._request(
            "POST",
            f"{INDEXING_API_BASE}:publish",
            json={"url": url, "type": notification_type},
        )
        logger.debug("Indexing API accepted %s for %s", notification_type, url)
        return IndexingOutcome(url=url, notification_type=notification_type, success=True, response=data)

    def index_url(self, url: str) -> IndexingOutcome:
        return self.notify(url, URL_UPDATED)

    def remove_url(self, url: str) -> IndexingOutcome:
        return self.notify(url, URL_DELETED)

    def get_status(self, url: str) -> dict:
        """Latest notification metadata Google holds for ``url``."""
        return self._request("GET", f"{INDEXING_API_BASE}/metadata", params={"url": url})

    def batch_index(
        self,
        urls: list[str],
        delay: float = INDEXING_DELAY,
        on_progress: Optional[Callable[[int, int], None]] = None,
        cancel_event=None,
    ) -> BatchIndexingResult:
        """Request indexing for each URL in turn.

        A failing URL is recorded and the batch moves on. ``on_progress`` is
        called with ``(completed, total)`` after every URL. Once
        ``cancel_event`` is set no further URLs are sent; they are listed in
        ``skipped``.
        """
        self.require_credentials()
        result = BatchIndexingResult(total_requests=len(urls))

        for i, url in enumerate(urls):
            if cancel_event is not None and cancel_event.is_set():
                result.skipped.extend(urls[i:])
                logger.info("Indexing batch cancelled, %d URL(s) not sent", len(result.skipped))
                break

            try:
                outcome = self.index_url(url)
            except Exception as e:
                logger.warning("Indexing failed for %s: %s", url, e)
                result.failed.append(FailedUrl(url=url, error=str(e)))
                result.outcomes.append(
                    IndexingOutcome(url=url, notification_type=URL_UPDATED, success=False, error=str(e))
                )
            else:
                result.successful.append(url)
                result.outcomes.append(outcome)

            if on_progress is not None:
                on_progress(i + 1, len(urls))

            if i < len(urls) - 1 and delay > 0:
                self.sleep(delay)

        return result


class OfflineIndexingClient(IndexingClient):
    """Stand-in for mock runs: accepts every notification and remembers it.

    No credentials and no network; ``get_status`` answers from memory.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.notifications: dict[str, dict] = {}

    def require_credentials(self) -> None:
        pass

    def notify(self, url: str, notification_type: str = URL_UPDATED) -> IndexingOutcome:
        if notification_type not in NOTIFICATION_TYPES:
            raise ValueError(
                f"notification type must be one of {NOTIFICATION_TYPES}, got {notification_type!r}"
            )
        notify_time = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        latest_key = "latestUpdate" if notification_type == URL_UPDATED else "latestRemove"
        metadata = self.notifications.setdefault(url, {"url": url})
        metadata[latest_key] = {"url": url, "type": notification_type, "notifyTime": notify_time}
        logger.info("[offline] %s %s", notification_type, url)
        return IndexingOutcome(
            url=url,
            notification_type=notification_type,
            success=True,
            response={"urlNotificationMetadata": dict(metadata)},
        )

    def get_status(self, url: str) -> dict:
        if url not in self.notifications:
            raise IndexingRequestFailed(404, f"No notifications recorded for {url}")
        return {"urlNotificationMetadata": dict(self.notifications[url])}
