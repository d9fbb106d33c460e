"""Operator-facing progress output for pipeline runs."""

from __future__ import annotations

import sys

from landing_seo.pipeline.models import PipelineEvent


class ConsoleObserver:
    """Print one short status line per pipeline event."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _print(self, line: str = "") -> None:
        print(line, file=self.stream)

    def __call__(self, event: PipelineEvent) -> None:
        handler = getattr(self, f"on_{event.type.value}", None)
        if handler is not None:
            handler(event)

    def on_start(self, event: PipelineEvent) -> None:
        self._print(f"Generating {event.total} landing page(s)")

    def on_unit_start(self, event: PipelineEvent) -> None:
        self._print()
        self._print(f"{'=' * 60}")
        self._print(f"[{event.index + 1}/{event.total}] {event.unit.business_type}")
        self._print(f"{'=' * 60}")

    def on_phase_complete(self, event: PipelineEvent) -> None:
        self._print(f"  → {event.phase.value} done in {event.elapsed:.1f}s")

    def on_unit_complete(self, event: PipelineEvent) -> None:
        result = event.result
        words = result.page.word_count if result.page else 0
        self._print(f"  ✓ Saved {result.url} ({words} words, {result.timings.total:.1f}s)")

    def on_unit_error(self, event: PipelineEvent) -> None:
        self._print(f"  {event.unit.business_type} failed during {event.phase.value}: {event.error}")

    def on_indexing_start(self, event: PipelineEvent) -> None:
        self._print(f"  -> Requesting indexing for {len(event.urls)} URL(s)...")

    def on_indexing_complete(self, event: PipelineEvent) -> None:
        result = event.result
        self._print(
            f"  ✓ Indexing: {len(result.successful)} accepted, {len(result.failed)} failed "
            f"({result.success_rate:.0%})"
        )
        for failure in result.failed:
            self._print(f"    {failure.url}: {failure.error}")

    def on_feedback_start(self, event: PipelineEvent) -> None:
        self._print(f"  -> Analyzing {len(event.urls)} page(s) in Search Console...")

    def on_feedback_complete(self, event: PipelineEvent) -> None:
        result = event.result
        counts = ", ".join(f"{status.value}: {n}" for status, n in result.summary.items())
        self._print(f"  ✓ Analyzed {result.pages_analyzed} page(s) ({counts})")
        for recommendation in result.recommendations:
            self._print(f"     - {recommendation}")

    def on_complete(self, event: PipelineEvent) -> None:
        result = event.result
        self._print()
        self._print(
            f"Done: {result.successful}/{result.total_pages} succeeded, {result.failed} failed "
            f"in {result.total_seconds:.1f}s"
        )
        if result.cancelled:
            self._print(f"  Cancelled, {len(result.skipped)} unit(s) not started")

