"""Tests for the strategy/content agents and the pipeline orchestrator."""

import io
import logging
import threading

import pytest

from conftest import RecordingSleep
from landing_seo.config import PipelineConfig
from landing_seo.errors import CredentialsMissing, GenerationFailed, MalformedResponse, UnitGenerationFailed
from landing_seo.generation import FixtureProvider, TextGenerationClient
from landing_seo.generation.fixtures import DEFAULT_FIXTURES
from landing_seo.google import HealthStatus, OfflineAnalyticsClient, PagePerformance
from landing_seo.pipeline import (
    ConsoleObserver,
    ContentAgent,
    EventType,
    GenerationUnit,
    Phase,
    Pipeline,
    StrategyAgent,
)
from landing_seo.publishing import render_landing_page
from landing_seo.retry import RetryPolicy

BASE_URL = "https://webnova.ro"

DENTIST = GenerationUnit(
    business_type="Cabinet Stomatologic",
    target_audience="medici stomatologi cu cabinet propriu",
    pain_point="pacienții noi aleg concurența care are programări online",
    location="Cluj-Napoca",
)
VET = GenerationUnit(
    business_type="Clinică Veterinară",
    target_audience="medici veterinari",
    pain_point="telefonul sună non-stop pentru programări",
    related_units=("Cabinet Stomatologic", "Salon Înfrumusețare"),
)
SALON = GenerationUnit(
    business_type="Salon Înfrumusețare",
    target_audience="proprietari de saloane",
    pain_point="clientele nu revin după prima vizită",
)


def client_with(**fixtures):
    table = dict(DEFAULT_FIXTURES)
    table.update(fixtures)
    return TextGenerationClient(
        FixtureProvider(fixtures=table),
        retry_policy=RetryPolicy(sleep=lambda s: None),
    )


@pytest.fixture
def config(tmp_path):
    return PipelineConfig(
        base_url=BASE_URL,
        site_name="Webnova",
        output_dir=tmp_path / "pages",
        delay_between_units=0.5,
        indexing_delay=0,
        analytics_delay=0,
    )


@pytest.fixture
def make_pipeline(config, fixture_client):
    def make(renderer=render_landing_page, client=None, **kwargs):
        pipeline = Pipeline(
            config=config,
            client=client or fixture_client,
            renderer=renderer,
            sleep=kwargs.pop("sleep", RecordingSleep()),
            **kwargs,
        )
        events = []
        pipeline.on_event(events.append)
        return pipeline, events

    return make


def event_types(events):
    return [e.type for e in events]


class TestStrategyAgent:
    def test_brief_from_fixtures(self, fixture_client):
        brief = StrategyAgent(fixture_client).analyze(DENTIST)

        assert brief.unit == DENTIST
        assert len(brief.content_outline) == 3
        assert brief.target_word_count == 1400
        assert brief.estimated_read_time == 7
        assert brief.objections[0].rebuttal_strategy.startswith("Most new clients")
        assert brief.call_to_action.startswith("Get a free audit")

    def test_lists_are_capped(self):
        client = client_with(
            lsi_keywords=[f"kw {n}" for n in range(30)],
            competitor_insights=[f"insight {n}" for n in range(10)],
            objections=[{"id": n, "text": f"objection {n}"} for n in range(1, 9)],
        )

        brief = StrategyAgent(client).analyze(DENTIST)

        assert len(brief.lsi_keywords) == 20
        assert len(brief.competitor_insights) == 7
        assert [o.id for o in brief.objections] == [1, 2, 3, 4, 5]

    def test_wrong_shape_is_malformed(self):
        with pytest.raises(MalformedResponse):
            StrategyAgent(client_with(lsi_keywords={"keywords": []})).analyze(DENTIST)

    def test_outline_prompt_uses_earlier_answers(self, fixture_client, fixture_provider):
        StrategyAgent(fixture_client).analyze(DENTIST)

        outline_request = next(r for r in fixture_provider.requests if r.tag == "content_outline")
        assert "online booking" in outline_request.prompt
        assert "I have no time to manage a website" in outline_request.prompt


class TestContentAgent:
    @pytest.fixture
    def brief(self, fixture_client):
        return StrategyAgent(fixture_client).analyze(DENTIST)

    def test_page_sections(self, fixture_client, brief):
        page = ContentAgent(fixture_client, BASE_URL + "/", "Webnova").write(brief, "cabinet-stomatologic")

        assert page.url == "https://webnova.ro/cabinet-stomatologic"
        assert page.hero.h1 == "A Professional Website for Your Practice"
        assert len(page.faq) == 3
        assert page.call_to_action.button_text == "Get My Free Offer"
        assert page.lsi_keywords == brief.lsi_keywords
        assert page.word_count > 0

    def test_schema_built_from_page(self, fixture_client, brief):
        page = ContentAgent(fixture_client, BASE_URL, "Webnova").write(brief, "cabinet-stomatologic")

        assert page.schema["product"]["@type"] == "Service"
        questions = [q["name"] for q in page.schema["faq"]["mainEntity"]]
        assert questions == [item.question for item in page.faq]
        crumbs = page.schema["breadcrumb"]["itemListElement"]
        assert crumbs[-1]["item"] == "https://webnova.ro/cabinet-stomatologic"

    def test_long_meta_is_truncated(self, brief):
        client = client_with(meta_tags={"metaTitle": "T" * 80, "metaDescription": "D" * 200})

        meta = ContentAgent(client, BASE_URL, "Webnova").meta_tags(brief)

        assert len(meta.title) == 60
        assert meta.title.endswith("...")
        assert len(meta.description) == 160

    def test_internal_links_skipped_without_related_units(self, fixture_client, fixture_provider, brief):
        links = ContentAgent(fixture_client, BASE_URL, "Webnova").internal_links(brief)

        assert links == []
        assert all(r.tag != "internal_links" for r in fixture_provider.requests)

    def test_internal_links_slugs_are_cleaned(self, fixture_client):
        client = client_with(internal_links={"internalLinks": [{"text": "Saloane", "slug": "Salon Înfrumusețare"}]})
        brief = StrategyAgent(fixture_client).analyze(VET)

        links = ContentAgent(client, BASE_URL, "Webnova").internal_links(brief)

        assert links[0].slug == "salon-infrumusetare"

    def test_short_page_only_warns(self, fixture_client, brief, caplog):
        with caplog.at_level(logging.WARNING, logger="landing_seo.pipeline.writer"):
            page = ContentAgent(fixture_client, BASE_URL, "Webnova", min_word_count=100_000).write(brief, "x")

        assert page.word_count < 100_000
        assert "below the 100000 minimum" in caplog.text


class TestGenerateUnit:
    def test_success_saves_page(self, make_pipeline):
        pipeline, events = make_pipeline()

        result = pipeline.generate_unit(DENTIST)

        assert result.success
        assert result.slug == "cabinet-stomatologic"
        assert result.url == "https://webnova.ro/cabinet-stomatologic"
        assert result.output_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
        metadata = pipeline.sink.load_metadata("cabinet-stomatologic")
        assert metadata["unit"]["business_type"] == "Cabinet Stomatologic"
        assert metadata["page"]["word_count"] == result.page.word_count
        assert [e.phase for e in events if e.type == EventType.PHASE_COMPLETE] == [
            Phase.ARCHITECT,
            Phase.WRITER,
            Phase.RENDER,
        ]
        assert events[-1].type == EventType.UNIT_COMPLETE
        assert result.timings.total >= result.timings.strategy

    def test_strategy_failure_is_captured(self, make_pipeline):
        client = client_with()
        del client.provider.fixtures["hook_angle"]
        pipeline, events = make_pipeline(client=client)

        result = pipeline.generate_unit(DENTIST)

        assert not result.success
        assert result.failed_phase == "architect"
        assert "hook_angle" in result.error
        assert result.output_path is None
        assert events[-1].type == EventType.UNIT_ERROR
        status = pipeline.get_status()
        assert status.phase == Phase.ERROR
        assert "Cabinet Stomatologic failed during architect" in status.last_error
        assert isinstance(result.exception, UnitGenerationFailed)
        assert result.exception.phase == "architect"
        assert isinstance(result.exception.cause, GenerationFailed)

    def test_unusable_label_fails_without_calls(self, make_pipeline, fixture_provider):
        pipeline, _ = make_pipeline()

        result = pipeline.generate_unit(GenerationUnit("&&&", "x", "y"))

        assert not result.success
        assert result.slug is None
        assert fixture_provider.requests == []


class TestGenerateBatch:
    def test_one_failure_does_not_stop_the_batch(self, make_pipeline):
        def renderer(page, site):
            if page.slug == "clinica-veterinara":
                raise OSError("disk full")
            return render_landing_page(page, site)

        pipeline, _ = make_pipeline(renderer=renderer)

        batch = pipeline.generate_batch([DENTIST, VET, SALON])

        assert (batch.total_pages, batch.successful, batch.failed) == (3, 2, 1)
        failed = batch.results[1]
        assert failed.failed_phase == "render"
        assert failed.error == "disk full"
        assert batch.urls == [
            "https://webnova.ro/cabinet-stomatologic",
            "https://webnova.ro/salon-infrumusetare",
        ]
        assert [p.name for p in pipeline.generated_pages()] == [
            "cabinet-stomatologic.html",
            "salon-infrumusetare.html",
        ]

    def test_event_order(self, make_pipeline):
        pipeline, events = make_pipeline()

        pipeline.generate_batch([DENTIST])

        assert event_types(events) == [
            EventType.START,
            EventType.UNIT_START,
            EventType.PHASE_COMPLETE,
            EventType.PHASE_COMPLETE,
            EventType.PHASE_COMPLETE,
            EventType.UNIT_COMPLETE,
            EventType.COMPLETE,
        ]
        assert events[0].total == 1
        assert events[1].index == 0

    def test_pauses_between_units(self, make_pipeline):
        sleep = RecordingSleep()
        pipeline, _ = make_pipeline(sleep=sleep)

        pipeline.generate_batch([DENTIST, VET, SALON])

        assert sleep.calls == [0.5, 0.5]

    def test_broken_observer_does_not_stop_run(self, make_pipeline, caplog):
        pipeline, events = make_pipeline()

        @pipeline.on_event
        def broken(event):
            raise RuntimeError("observer bug")

        batch = pipeline.generate_batch([DENTIST, SALON])

        assert batch.successful == 2
        assert events[-1].type == EventType.COMPLETE
        assert "observer bug" in caplog.text

    def test_status_after_run(self, make_pipeline):
        pipeline, _ = make_pipeline()
        assert pipeline.get_status().phase == Phase.IDLE

        pipeline.generate_batch([DENTIST, VET, SALON])

        status = pipeline.get_status()
        assert status.phase == Phase.COMPLETE
        assert (status.progress.current, status.progress.total) == (3, 3)
        assert status.progress.percentage == 100.0
        assert status.current_unit is None

    def test_status_snapshot_is_immutable(self, make_pipeline):
        pipeline, _ = make_pipeline()
        before = pipeline.get_status()

        pipeline.generate_batch([DENTIST])

        assert before.phase == Phase.IDLE

    def test_cancel_skips_remaining_units(self, make_pipeline, config):
        config.enable_indexing = True
        pipeline, events = make_pipeline()
        cancel = threading.Event()

        @pipeline.on_event
        def stop_after_first(event):
            if event.type == EventType.UNIT_COMPLETE:
                cancel.set()

        batch = pipeline.generate_batch([DENTIST, VET, SALON], cancel_event=cancel)

        assert batch.cancelled
        assert len(batch.results) == 1
        assert batch.skipped == [VET, SALON]
        assert batch.indexing is None
        assert EventType.INDEXING_START not in event_types(events)

    def test_empty_batch(self, make_pipeline):
        pipeline, events = make_pipeline()

        batch = pipeline.generate_batch([])

        assert (batch.total_pages, batch.successful, batch.avg_seconds_per_page) == (0, 0, 0.0)
        assert event_types(events) == [EventType.START, EventType.COMPLETE]


class TestIndexingAndFeedback:
    def test_indexing_runs_after_generation(self, make_pipeline, config):
        config.enable_indexing = True
        pipeline, events = make_pipeline()

        batch = pipeline.generate_batch([DENTIST, SALON])

        assert batch.indexing.successful == batch.urls
        assert batch.indexing.success_rate == 1.0
        types = event_types(events)
        assert types.index(EventType.INDEXING_START) > types.index(EventType.UNIT_COMPLETE)
        assert types[-2:] == [EventType.INDEXING_COMPLETE, EventType.COMPLETE]
        status = pipeline.indexing_client.get_status("https://webnova.ro/cabinet-stomatologic")
        assert status["urlNotificationMetadata"]["latestUpdate"]["type"] == "URL_UPDATED"

    def test_indexing_skipped_when_nothing_succeeded(self, make_pipeline, config):
        config.enable_indexing = True
        client = client_with()
        del client.provider.fixtures["lsi_keywords"]
        pipeline, events = make_pipeline(client=client)

        batch = pipeline.generate_batch([DENTIST])

        assert batch.indexing is None
        assert EventType.INDEXING_START not in event_types(events)

    def test_feedback_summary(self, make_pipeline, config):
        config.enable_feedback = True
        analytics = OfflineAnalyticsClient(
            BASE_URL,
            performance={
                "https://webnova.ro/cabinet-stomatologic": PagePerformance(
                    url="https://webnova.ro/cabinet-stomatologic", clicks=100, impressions=1000, avg_position=5.0
                ),
            },
        )
        pipeline, _ = make_pipeline(analytics_client=analytics)

        batch = pipeline.generate_batch([DENTIST, SALON])

        feedback = batch.feedback
        assert feedback.pages_analyzed == 2
        assert feedback.summary[HealthStatus.HEALTHY] == 1
        assert feedback.summary[HealthStatus.NOT_INDEXED] == 1
        assert feedback.summary[HealthStatus.UNDERPERFORMING] == 0
        assert "Page is performing well" in feedback.recommendations

    def test_feedback_defaults_to_stored_pages(self, make_pipeline):
        pipeline, events = make_pipeline()
        pipeline.generate_batch([SALON, DENTIST])

        feedback = pipeline.run_feedback_loop()

        assert [a.url for a in feedback.analyses] == [
            "https://webnova.ro/cabinet-stomatologic",
            "https://webnova.ro/salon-infrumusetare",
        ]
        assert event_types(events)[-1] == EventType.FEEDBACK_COMPLETE

    def test_live_indexing_requires_credentials(self, config):
        config.mock_mode = False
        config.enable_indexing = True

        with pytest.raises(CredentialsMissing):
            Pipeline(config=config)


class TestConsoleObserver:
    def test_handles_every_event_type(self):
        for event_type in EventType:
            assert callable(getattr(ConsoleObserver, f"on_{event_type.value}", None)), event_type

    def test_prints_progress(self, make_pipeline, config):
        config.enable_indexing = True
        stream = io.StringIO()
        pipeline, _ = make_pipeline()
        pipeline.on_event(ConsoleObserver(stream))

        pipeline.generate_batch([DENTIST, SALON])

        output = stream.getvalue()
        assert "Generating 2 landing page(s)" in output
        assert "[1/2] Cabinet Stomatologic" in output
        assert "  → architect done in" in output
        assert "  ✓ Saved https://webnova.ro/salon-infrumusetare" in output
        assert "  ✓ Indexing: 2 accepted, 0 failed (100%)" in output
        assert "Done: 2/2 succeeded, 0 failed" in output
