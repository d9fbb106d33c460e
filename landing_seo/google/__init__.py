from landing_seo.google.credentials import (
    AccessToken,
    CredentialedAPIClient,
    ServiceCredential,
    load_credential_from_env,
)
from landing_seo.google.indexing import (
    BatchIndexingResult,
    IndexingClient,
    IndexingOutcome,
    OfflineIndexingClient,
)
from landing_seo.google.search_console import (
    AnalyticsClient,
    FeedbackAnalysis,
    HealthStatus,
    OfflineAnalyticsClient,
    PagePerformance,
    SiteSummary,
    SuggestedAction,
    classify_performance,
)
