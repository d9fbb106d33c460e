from landing_seo.pipeline.architect import StrategyAgent
from landing_seo.pipeline.models import (
    BatchResult,
    EventType,
    FeedbackLoopResult,
    GenerationResult,
    GenerationUnit,
    LandingPage,
    Phase,
    PipelineEvent,
    PipelineStatus,
    Progress,
    StrategyBrief,
)
from landing_seo.pipeline.observers import ConsoleObserver
from landing_seo.pipeline.orchestrator import Pipeline
from landing_seo.pipeline.writer import ContentAgent
