"""Data passed between the pipeline phases and returned to callers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


# ── Input ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GenerationUnit:
    """One landing page to produce."""

    business_type: str
    target_audience: str
    pain_point: str
    location: Optional[str] = None
    related_units: tuple[str, ...] = ()


# ── Strategy phase ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HookAngle:
    statement: str
    emotion: str = ""
    reasoning: str = ""


@dataclass(frozen=True)
class Objection:
    id: int
    text: str
    category: str = ""
    rebuttal_strategy: str = ""


@dataclass(frozen=True)
class ContentSection:
    title: str
    purpose: str
    key_points: list[str] = field(default_factory=list)
    lsi_keywords: list[str] = field(default_factory=list)
    tone: str = ""


@dataclass(frozen=True)
class StrategyBrief:
    unit: GenerationUnit
    lsi_keywords: list[str]
    competitor_insights: list[str]
    hook_angle: HookAngle
    objections: list[Objection]
    content_outline: list[ContentSection]
    call_to_action: str
    target_word_count: int
    estimated_read_time: int  # minutes
    generated_at: str

    def to_dict(self) -> dict:
        return asdict(self)


# ── Content phase ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetaTags:
    title: str
    description: str


@dataclass(frozen=True)
class HeroSection:
    h1: str
    subheadline: str


@dataclass(frozen=True)
class ComparisonTable:
    headers: list[str]
    rows: list[list[str]]


@dataclass(frozen=True)
class FAQItem:
    question: str
    answer: str


@dataclass(frozen=True)
class CallToAction:
    headline: str
    body: str
    button_text: str


@dataclass(frozen=True)
class InternalLink:
    text: str
    slug: str


@dataclass(frozen=True)
class LandingPage:
    slug: str
    url: str
    meta: MetaTags
    hero: HeroSection
    aio_definition: str
    pain_agitation: str
    comparison_table: ComparisonTable
    technical_solution: str
    faq: list[FAQItem]
    call_to_action: CallToAction
    schema: dict[str, Any]
    internal_links: list[InternalLink]
    lsi_keywords: list[str]
    word_count: int

    def to_dict(self) -> dict:
        return asdict(self)


# ── Results ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PhaseTimings:
    """Seconds spent per phase; phases that never ran stay at 0."""

    strategy: float = 0.0
    content: float = 0.0
    render: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class GenerationResult:
    unit: GenerationUnit
    success: bool
    slug: Optional[str]
    timings: PhaseTimings
    url: Optional[str] = None
    output_path: Optional[Path] = None
    brief: Optional[StrategyBrief] = None
    page: Optional[LandingPage] = None
    error: Optional[str] = None
    failed_phase: Optional[str] = None
    # UnitGenerationFailed wrapping the original exception
    exception: Optional[Exception] = field(default=None, repr=False, compare=False)


@dataclass
class BatchResult:
    total_pages: int
    successful: int
    failed: int
    results: list[GenerationResult]
    total_seconds: float
    avg_seconds_per_page: float
    indexing: Optional[Any] = None  # BatchIndexingResult
    feedback: Optional["FeedbackLoopResult"] = None
    cancelled: bool = False
    skipped: list[GenerationUnit] = field(default_factory=list)

    @property
    def urls(self) -> list[str]:
        return [r.url for r in self.results if r.success and r.url]


@dataclass(frozen=True)
class FeedbackLoopResult:
    pages_analyzed: int
    analyses: list  # FeedbackAnalysis
    summary: dict  # HealthStatus -> count
    recommendations: list[str]


# ── Status and events ─────────────────────────────────────────────────────


class Phase(str, Enum):
    IDLE = "idle"
    ARCHITECT = "architect"
    WRITER = "writer"
    RENDER = "render"
    INDEXING = "indexing"
    FEEDBACK = "feedback"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0
    percentage: float = 0.0

    @classmethod
    def of(cls, current: int, total: int) -> "Progress":
        percentage = (current / total) * 100 if total else 0.0
        return cls(current=current, total=total, percentage=percentage)


@dataclass(frozen=True)
class PipelineStatus:
    phase: Phase = Phase.IDLE
    progress: Progress = field(default_factory=Progress)
    current_unit: Optional[str] = None
    last_error: Optional[str] = None


class EventType(str, Enum):
    START = "start"
    UNIT_START = "unit_start"
    PHASE_COMPLETE = "phase_complete"
    UNIT_COMPLETE = "unit_complete"
    UNIT_ERROR = "unit_error"
    INDEXING_START = "indexing_start"
    INDEXING_COMPLETE = "indexing_complete"
    FEEDBACK_START = "feedback_start"
    FEEDBACK_COMPLETE = "feedback_complete"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PipelineEvent:
    """One lifecycle notification; fields not relevant to ``type`` stay None."""

    type: EventType
    unit: Optional[GenerationUnit] = None
    index: Optional[int] = None
    total: Optional[int] = None
    phase: Optional[Phase] = None
    urls: Optional[list[str]] = None
    result: Any = None
    error: Optional[str] = None
    elapsed: Optional[float] = None
