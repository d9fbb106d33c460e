"""Programmatic SEO landing-page pipeline.

Package structure:
    landing_seo/config.py       – paths, API keys, model settings, endpoints, thresholds
    landing_seo/errors.py       – error taxonomy shared by every layer
    landing_seo/retry.py        – exponential backoff policy for upstream calls
    landing_seo/generation/     – text generation client and providers
    landing_seo/google/         – Indexing API and Search Console clients
    landing_seo/pipeline/       – strategy/content agents, orchestrator, observers
    landing_seo/publishing/     – slugs, HTML rendering, artifact storage
"""
