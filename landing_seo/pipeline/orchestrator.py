"""Orchestrate landing page generation end to end.

Per unit:
1. Strategy (StrategyAgent): keywords, hook, objections, outline
2. Content (ContentAgent): every page section, meta tags, schema
3. Render and save (render_landing_page + FileSystemSink)

Per batch, optionally:
4. Indexing request for every page that was saved
5. Search Console feedback loop on those pages

Units run one at a time. A failing unit is recorded in its result and the
batch moves on to the next one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, replace
from typing import Callable, Iterable, Optional

from landing_seo.config import PipelineConfig
from landing_seo.errors import CredentialsMissing, UnitGenerationFailed
from landing_seo.generation import TextGenerationClient
from landing_seo.google import (
    AnalyticsClient,
    HealthStatus,
    IndexingClient,
    OfflineAnalyticsClient,
    OfflineIndexingClient,
)
from landing_seo.pipeline.architect import StrategyAgent
from landing_seo.pipeline.models import (
    BatchResult,
    EventType,
    FeedbackLoopResult,
    GenerationResult,
    GenerationUnit,
    Phase,
    PhaseTimings,
    PipelineEvent,
    PipelineStatus,
    Progress,
)
from landing_seo.pipeline.writer import ContentAgent
from landing_seo.publishing import FileSystemSink, SiteInfo, render_landing_page, slugify

logger = logging.getLogger(__name__)

Observer = Callable[[PipelineEvent], None]


class Pipeline:
    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        client: Optional[TextGenerationClient] = None,
        indexing_client: Optional[IndexingClient] = None,
        analytics_client: Optional[AnalyticsClient] = None,
        sink: Optional[FileSystemSink] = None,
        renderer=render_landing_page,
        sleep=time.sleep,
        clock=time.perf_counter,
    ):
        self.config = config or PipelineConfig()
        self.client = client or TextGenerationClient.from_config(
            self.config.provider, api_key=self.config.api_key, model=self.config.model
        )
        self.site = SiteInfo(base_url=self.config.base_url, name=self.config.site_name)
        self.strategy_agent = StrategyAgent(self.client)
        self.content_agent = ContentAgent(self.client, self.site.base_url, self.site.name)
        self.renderer = renderer
        self.sink = sink or FileSystemSink(self.config.output_dir)
        self.indexing_client = indexing_client or self._build_indexing_client()
        self.analytics_client = analytics_client or self._build_analytics_client()
        self.sleep = sleep
        self.clock = clock

        self._observers: list[Observer] = []
        self._status = PipelineStatus()

    def _build_indexing_client(self) -> IndexingClient:
        if self.config.mock_mode:
            return OfflineIndexingClient()
        client = IndexingClient(credentials=self.config.google_credentials)
        if self.config.enable_indexing and not client.has_credentials:
            raise CredentialsMissing("Indexing is enabled but no Google credentials are configured")
        return client

    def _build_analytics_client(self) -> AnalyticsClient:
        site_url = self.config.search_console_site_url
        if self.config.mock_mode:
            return OfflineAnalyticsClient(site_url, thresholds=self.config.thresholds)
        client = AnalyticsClient(
            site_url, credentials=self.config.google_credentials, thresholds=self.config.thresholds
        )
        if self.config.enable_feedback and not client.has_credentials:
            raise CredentialsMissing("Feedback loop is enabled but no Google credentials are configured")
        return client

    # ── Events and status ─────────────────────────────────────────────────

    def on_event(self, observer: Observer) -> Observer:
        """Register ``observer``; returns it so this also works as a decorator."""
        self._observers.append(observer)
        return observer

    def _emit(self, event_type: EventType, **fields) -> None:
        event = PipelineEvent(type=event_type, **fields)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Pipeline observer %r failed on %s", observer, event_type.value)

    def _set_status(self, **changes) -> None:
        self._status = replace(self._status, **changes)

    def get_status(self) -> PipelineStatus:
        """Snapshot of the current run state."""
        return self._status

    def generated_pages(self):
        return self.sink.list_artifacts()

    # ── Generation ────────────────────────────────────────────────────────

    def generate_unit(self, unit: GenerationUnit) -> GenerationResult:
        """Run all phases for one unit; failures come back as a failed result."""
        start = self.clock()
        timings = {}
        phase = Phase.ARCHITECT
        slug = None

        def finish_phase(name: str, began: float) -> None:
            timings[name] = self.clock() - began
            self._emit(EventType.PHASE_COMPLETE, unit=unit, phase=phase, elapsed=timings[name])

        try:
            slug = slugify(unit.business_type)

            self._set_status(phase=phase, current_unit=unit.business_type)
            began = self.clock()
            brief = self.strategy_agent.analyze(unit)
            finish_phase("strategy", began)

            phase = Phase.WRITER
            self._set_status(phase=phase)
            began = self.clock()
            page = self.content_agent.write(brief, slug)
            finish_phase("content", began)

            phase = Phase.RENDER
            self._set_status(phase=phase)
            began = self.clock()
            html = self.renderer(page, self.site)
            output_path = self.sink.save(
                slug,
                html,
                {"unit": asdict(unit), "brief": brief.to_dict(), "page": page.to_dict()},
            )
            finish_phase("render", began)
        except Exception as e:
            failure = UnitGenerationFailed(unit, phase.value, e)
            logger.warning("%s", failure)
            self._set_status(phase=Phase.ERROR, last_error=str(failure))
            result = GenerationResult(
                unit=unit,
                success=False,
                slug=slug,
                timings=PhaseTimings(total=self.clock() - start, **timings),
                error=str(e),
                failed_phase=phase.value,
                exception=failure,
            )
            self._emit(EventType.UNIT_ERROR, unit=unit, phase=phase, error=str(e), result=result)
            return result

        result = GenerationResult(
            unit=unit,
            success=True,
            slug=slug,
            timings=PhaseTimings(total=self.clock() - start, **timings),
            url=page.url,
            output_path=output_path,
            brief=brief,
            page=page,
        )
        self._emit(EventType.UNIT_COMPLETE, unit=unit, result=result)
        return result

    def generate_batch(self, units: Iterable[GenerationUnit], cancel_event=None) -> BatchResult:
        """Generate every unit in order, then index and analyze what succeeded.

        Once ``cancel_event`` is set no new unit is started; the unit in
        flight finishes and the rest are listed in ``BatchResult.skipped``.
        """
        units = list(units)
        total = len(units)
        start = self.clock()
        results: list[GenerationResult] = []
        skipped: list[GenerationUnit] = []

        self._status = PipelineStatus(progress=Progress.of(0, total))
        self._emit(EventType.START, total=total)

        for i, unit in enumerate(units):
            if cancel_event is not None and cancel_event.is_set():
                skipped = units[i:]
                logger.info("Batch cancelled, %d unit(s) not started", len(skipped))
                break

            self._set_status(progress=Progress.of(i + 1, total), current_unit=unit.business_type)
            self._emit(EventType.UNIT_START, unit=unit, index=i, total=total)
            results.append(self.generate_unit(unit))

            if i < total - 1 and self.config.delay_between_units > 0:
                self.sleep(self.config.delay_between_units)

        successful = sum(1 for r in results if r.success)
        elapsed = self.clock() - start
        batch = BatchResult(
            total_pages=total,
            successful=successful,
            failed=len(results) - successful,
            results=results,
            total_seconds=elapsed,
            avg_seconds_per_page=elapsed / len(results) if results else 0.0,
            cancelled=cancel_event is not None and cancel_event.is_set(),
            skipped=skipped,
        )

        if successful and not batch.cancelled:
            if self.config.enable_indexing:
                batch.indexing = self.request_indexing(batch.urls, cancel_event=cancel_event)
            if self.config.enable_feedback:
                batch.feedback = self.run_feedback_loop(batch.urls, cancel_event=cancel_event)

        self._set_status(phase=Phase.COMPLETE, current_unit=None)
        self._emit(EventType.COMPLETE, result=batch)
        return batch

    # ── Google ────────────────────────────────────────────────────────────

    def request_indexing(self, urls: list[str], cancel_event=None):
        """Submit ``urls`` to the Indexing API; returns a BatchIndexingResult."""
        urls = list(urls)
        self._set_status(phase=Phase.INDEXING, progress=Progress.of(0, len(urls)))
        self._emit(EventType.INDEXING_START, urls=urls)

        result = self.indexing_client.batch_index(
            urls,
            delay=self.config.indexing_delay,
            on_progress=lambda done, total: self._set_status(progress=Progress.of(done, total)),
            cancel_event=cancel_event,
        )

        self._set_status(phase=Phase.COMPLETE)
        self._emit(EventType.INDEXING_COMPLETE, urls=urls, result=result)
        return result

    def run_feedback_loop(self, urls: Optional[list[str]] = None, cancel_event=None) -> FeedbackLoopResult:
        """Classify Search Console performance for ``urls``.

        Defaults to every page stored in the output directory.
        """
        if urls is None:
            base = self.site.base_url.rstrip("/")
            urls = [f"{base}/{path.stem}" for path in self.generated_pages()]
        urls = list(urls)

        self._set_status(phase=Phase.FEEDBACK, progress=Progress.of(0, len(urls)))
        self._emit(EventType.FEEDBACK_START, urls=urls)

        analyses = self.analytics_client.analyze_pages(
            urls, delay=self.config.analytics_delay, cancel_event=cancel_event
        )
        summary = {status: 0 for status in HealthStatus}
        for analysis in analyses:
            summary[analysis.status] += 1
        recommendations = list(
            dict.fromkeys(rec for analysis in analyses for rec in analysis.recommendations)
        )
        result = FeedbackLoopResult(
            pages_analyzed=len(analyses),
            analyses=analyses,
            summary=summary,
            recommendations=recommendations,
        )

        self._set_status(phase=Phase.COMPLETE, progress=Progress.of(len(analyses), len(urls)))
        self._emit(EventType.FEEDBACK_COMPLETE, urls=urls, result=result)
        return result
