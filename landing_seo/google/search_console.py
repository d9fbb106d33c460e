"""Search Console analytics and the post-publication feedback loop.

Pulls clicks / impressions / position per page, inspects index status and
classifies each page into a health state with remediation suggestions.

Setup requirements:
1. Enable the Search Console API in Google Cloud Console
2. Add the service account email as a user of the Search Console property
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Optional
from urllib.parse import quote

from landing_seo.config import (
    ANALYTICS_DELAY,
    DEFAULT_HEALTH_THRESHOLDS,
    SEARCH_CONSOLE_API_BASE,
    WEBMASTERS_API_BASE,
    WEBMASTERS_SCOPE,
    HealthThresholds,
)
from landing_seo.errors import AnalyticsRequestFailed
from landing_seo.google.credentials import CredentialedAPIClient

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 28
TOP_QUERY_LIMIT = 10


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    UNDERPERFORMING = "underperforming"
    NOT_INDEXED = "not_indexed"


class SuggestedAction(str, Enum):
    REINDEX = "reindex"
    WAIT_FOR_INDEXING = "wait_for_indexing"
    IMPROVE_TITLE = "improve_title"
    UPDATE_CONTENT = "update_content"
    ADD_INTERNAL_LINKS = "add_internal_links"


# Worse states win; a later rule never upgrades the status
_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.NEEDS_ATTENTION: 1,
    HealthStatus.UNDERPERFORMING: 2,
}


# ── Data ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AnalyticsRow:
    keys: list[str]
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0

    @property
    def key(self) -> str:
        return self.keys[0] if self.keys else ""

    @classmethod
    def from_api(cls, row: dict) -> "AnalyticsRow":
        return cls(
            keys=list(row.get("keys", [])),
            clicks=row.get("clicks", 0),
            impressions=row.get("impressions", 0),
            ctr=row.get("ctr", 0.0),
            position=row.get("position", 0.0),
        )


@dataclass(frozen=True)
class QueryMetrics:
    query: str
    clicks: int
    impressions: int
    position: float


@dataclass(frozen=True)
class PagePerformance:
    """Metrics for one URL over ``[start_date, end_date]``.

    ``ctr`` is what the API reported; classification uses ``derived_ctr``.
    """

    url: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    avg_position: float = 0.0
    top_queries: list[QueryMetrics] = field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def derived_ctr(self) -> float:
        if self.impressions <= 0:
            return 0.0
        return self.clicks / self.impressions


@dataclass(frozen=True)
class InspectionResult:
    url: str
    index_status: dict = field(default_factory=dict)
    mobile_usability: dict = field(default_factory=dict)
    rich_results: dict = field(default_factory=dict)

    @property
    def index_verdict(self) -> Optional[str]:
        return self.index_status.get("verdict")

    @property
    def coverage_state(self) -> Optional[str]:
        return self.index_status.get("coverageState")


@dataclass(frozen=True)
class PageMetrics:
    indexed: bool
    clicks: int
    impressions: int
    ctr: float
    avg_position: float


@dataclass(frozen=True)
class FeedbackAnalysis:
    url: str
    status: HealthStatus
    metrics: PageMetrics
    recommendations: list[str]
    suggested_actions: list[SuggestedAction]


@dataclass(frozen=True)
class SiteSummary:
    total_clicks: int
    total_impressions: int
    avg_ctr: float
    avg_position: float
    top_pages: list[AnalyticsRow]
    top_queries: list[AnalyticsRow]


# ── Classification ────────────────────────────────────────────────────────


def _dedupe(items):
    return list(dict.fromkeys(items))


def classify_performance(
    performance: PagePerformance,
    thresholds: HealthThresholds = DEFAULT_HEALTH_THRESHOLDS,
) -> FeedbackAnalysis:
    """Turn one page's metrics into a health state plus suggested fixes.

    Pure function: no I/O, same input always gives the same analysis.
    """
    ctr = performance.derived_ctr
    position = performance.avg_position
    indexed = performance.impressions > 0
    recommendations: list[str] = []
    actions: list[SuggestedAction] = []

    if not indexed:
        status = HealthStatus.NOT_INDEXED
        recommendations.append("No impressions recorded; the page is probably not indexed yet")
        recommendations.append("Check URL Inspection for the indexing status")
        actions += [SuggestedAction.REINDEX, SuggestedAction.WAIT_FOR_INDEXING]
    else:
        status = HealthStatus.HEALTHY

        def downgrade(to: HealthStatus):
            nonlocal status
            if _SEVERITY[to] > _SEVERITY[status]:
                status = to

        if ctr < thresholds.min_ctr:
            recommendations.append(
                f"Low CTR ({ctr * 100:.2f}%); improve the title and meta description"
            )
            actions.append(SuggestedAction.IMPROVE_TITLE)

        if position > thresholds.underperforming_position:
            downgrade(HealthStatus.UNDERPERFORMING)
            recommendations.append(
                f"Weak average position ({position:.1f}); add content and internal links"
            )
            actions += [SuggestedAction.UPDATE_CONTENT, SuggestedAction.ADD_INTERNAL_LINKS]
        elif position > thresholds.needs_attention_position:
            downgrade(HealthStatus.NEEDS_ATTENTION)
            recommendations.append(f"Average position {position:.1f}; room to move up with fresher content")
            actions.append(SuggestedAction.UPDATE_CONTENT)

        if (
            performance.impressions > thresholds.high_impressions
            and performance.clicks < thresholds.min_clicks_for_impressions
        ):
            recommendations.append("Many impressions but few clicks; optimise the search snippet")
            actions.append(SuggestedAction.IMPROVE_TITLE)

        # Advisory only
        if (
            performance.clicks < thresholds.low_traffic_clicks
            and position <= thresholds.needs_attention_position
        ):
            recommendations.append(
                "Good position but little traffic; check search volume for the target keywords"
            )

    if not recommendations:
        recommendations.append("Page is performing well")

    return FeedbackAnalysis(
        url=performance.url,
        status=status,
        metrics=PageMetrics(
            indexed=indexed,
            clicks=performance.clicks,
            impressions=performance.impressions,
            ctr=ctr,
            avg_position=position,
        ),
        recommendations=_dedupe(recommendations),
        suggested_actions=_dedupe(actions),
    )


def failed_analysis(url: str, error: BaseException) -> FeedbackAnalysis:
    """Analysis recorded for a URL whose metrics could not be fetched."""
    return FeedbackAnalysis(
        url=url,
        status=HealthStatus.NOT_INDEXED,
        metrics=PageMetrics(indexed=False, clicks=0, impressions=0, ctr=0.0, avg_position=0.0),
        recommendations=[f"Analysis failed: {error}"],
        suggested_actions=[SuggestedAction.REINDEX],
    )


def page_filter(url: str, operator: str = "equals") -> list[dict]:
    return [{"filters": [{"dimension": "page", "operator": operator, "expression": url}]}]


# ── Client ────────────────────────────────────────────────────────────────


class AnalyticsClient(CredentialedAPIClient):
    scope = WEBMASTERS_SCOPE
    error_class = AnalyticsRequestFailed

    def __init__(
        self,
        site_url: str,
        credentials=None,
        thresholds: HealthThresholds = DEFAULT_HEALTH_THRESHOLDS,
        today=date.today,
        **kwargs,
    ):
        super().__init__(credentials=credentials, **kwargs)
        self.site_url = site_url
        self.thresholds = thresholds
        self.today = today

    def date_window(self, days: int) -> tuple[str, str]:
        """``(today - days, today)`` as ISO dates."""
        end = self.today()
        start = end - timedelta(days=days)
        return start.isoformat(), end.isoformat()

    def list_sites(self) -> list[dict]:
        data = self._request("GET", f"{WEBMASTERS_API_BASE}/sites")
        return data.get("siteEntry", [])

    def query_analytics(
        self,
        dimensions: Optional[list[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        row_limit: int = 1000,
        dimension_filter_groups: Optional[list[dict]] = None,
    ) -> list[AnalyticsRow]:
        """Raw Search Analytics query; defaults to pages over the last 28 days."""
        default_start, default_end = self.date_window(DEFAULT_WINDOW_DAYS)
        body = {
            "siteUrl": self.site_url,
            "startDate": start_date or default_start,
            "endDate": end_date or default_end,
            "dimensions": ["page"] if dimensions is None else dimensions,
            "rowLimit": row_limit,
        }
        if dimension_filter_groups:
            body["dimensionFilterGroups"] = dimension_filter_groups

        site = quote(self.site_url, safe="")
        data = self._request(
            "POST", f"{WEBMASTERS_API_BASE}/sites/{site}/searchAnalytics/query", json=body
        )
        return [AnalyticsRow.from_api(row) for row in data.get("rows", [])]

    def get_page_performance(self, url: str, days: int = DEFAULT_WINDOW_DAYS) -> PagePerformance:
        start, end = self.date_window(days)
        filters = page_filter(url)

        page_rows = self.query_analytics(
            dimensions=["page"], start_date=start, end_date=end, dimension_filter_groups=filters
        )
        query_rows = self.query_analytics(
            dimensions=["query"],
            start_date=start,
            end_date=end,
            row_limit=TOP_QUERY_LIMIT,
            dimension_filter_groups=filters,
        )

        page = page_rows[0] if page_rows else AnalyticsRow(keys=[url])
        return PagePerformance(
            url=url,
            clicks=page.clicks,
            impressions=page.impressions,
            ctr=page.ctr,
            avg_position=page.position,
            top_queries=[
                QueryMetrics(query=row.key, clicks=row.clicks, impressions=row.impressions, position=row.position)
                for row in query_rows
            ],
            start_date=start,
            end_date=end,
        )

    def inspect_url(self, url: str) -> InspectionResult:
        data = self._request(
            "POST",
            f"{SEARCH_CONSOLE_API_BASE}/urlInspection/index:inspect",
            json={"inspectionUrl": url, "siteUrl": self.site_url},
        )
        result = data.get("inspectionResult", {})
        return InspectionResult(
            url=url,
            index_status=result.get("indexStatusResult", {}),
            mobile_usability=result.get("mobileUsabilityResult", {}),
            rich_results=result.get("richResultsResult", {}),
        )

    def get_pages_under_prefix(self, prefix: str, days: int = DEFAULT_WINDOW_DAYS) -> list[AnalyticsRow]:
        start, end = self.date_window(days)
        return self.query_analytics(
            dimensions=["page"],
            start_date=start,
            end_date=end,
            dimension_filter_groups=page_filter(prefix, operator="contains"),
        )

    def analyze_page(self, url: str) -> FeedbackAnalysis:
        return classify_performance(self.get_page_performance(url), self.thresholds)

    def analyze_pages(
        self,
        urls: list[str],
        delay: float = ANALYTICS_DELAY,
        cancel_event=None,
    ) -> list[FeedbackAnalysis]:
        """Analyze each URL in turn; a failing URL becomes a ``not_indexed`` entry."""
        self.require_credentials()
        analyses = []
        for i, url in enumerate(urls):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Analysis cancelled, %d URL(s) not analyzed", len(urls) - i)
                break
            try:
                analyses.append(self.analyze_page(url))
            except Exception as e:
                logger.warning("Analysis failed for %s: %s", url, e)
                analyses.append(failed_analysis(url, e))

            if i < len(urls) - 1 and delay > 0:
                self.sleep(delay)
        return analyses

    def get_site_summary(self, days: int = DEFAULT_WINDOW_DAYS) -> SiteSummary:
        start, end = self.date_window(days)
        overall = self.query_analytics(dimensions=[], start_date=start, end_date=end)
        top_pages = self.query_analytics(dimensions=["page"], start_date=start, end_date=end, row_limit=10)
        top_queries = self.query_analytics(dimensions=["query"], start_date=start, end_date=end, row_limit=10)

        totals = overall[0] if overall else AnalyticsRow(keys=[])
        return SiteSummary(
            total_clicks=totals.clicks,
            total_impressions=totals.impressions,
            avg_ctr=totals.ctr,
            avg_position=totals.position,
            top_pages=top_pages,
            top_queries=top_queries,
        )


class OfflineAnalyticsClient(AnalyticsClient):
    """Stand-in for mock runs, answering from a fixed performance table.

    URLs missing from the table report zero impressions.
    """

    def __init__(self, site_url: str, performance: Optional[dict[str, PagePerformance]] = None, **kwargs):
        super().__init__(site_url, **kwargs)
        self.performance = dict(performance or {})

    def require_credentials(self) -> None:
        pass

    def query_analytics(self, *args, **kwargs) -> list[AnalyticsRow]:
        return []

    def get_page_performance(self, url: str, days: int = DEFAULT_WINDOW_DAYS) -> PagePerformance:
        start, end = self.date_window(days)
        if url in self.performance:
            return self.performance[url]
        return PagePerformance(url=url, start_date=start, end_date=end)

    def inspect_url(self, url: str) -> InspectionResult:
        indexed = url in self.performance and self.performance[url].impressions > 0
        return InspectionResult(
            url=url,
            index_status={
                "verdict": "PASS" if indexed else "NEUTRAL",
                "coverageState": "Submitted and indexed" if indexed else "URL is unknown to Google",
            },
        )
