"""Content phase: write every section of the landing page from a brief."""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from landing_seo.pipeline.architect import expect_list, expect_object
from landing_seo.pipeline.models import (
    CallToAction,
    ComparisonTable,
    FAQItem,
    HeroSection,
    InternalLink,
    LandingPage,
    MetaTags,
    StrategyBrief,
)
from landing_seo.pipeline.prompts import (
    build_aio_definition_prompt,
    build_comparison_table_prompt,
    build_content_system_prompt,
    build_cta_prompt,
    build_faq_prompt,
    build_hero_prompt,
    build_internal_links_prompt,
    build_meta_tags_prompt,
    build_pain_agitation_prompt,
    build_schema_prompt,
    build_technical_solution_prompt,
)
from landing_seo.publishing.slug import is_valid_slug, slugify

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 160
MIN_WORD_COUNT = 1500


def truncate(text: str, limit: int) -> str:
    """Cut to ``limit`` characters, ending in "..." when shortened."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def count_words(text: str) -> int:
    return len(re.findall(r"\S+", text or ""))


def page_word_count(page: LandingPage) -> int:
    texts = [
        page.meta.title,
        page.meta.description,
        page.hero.h1,
        page.hero.subheadline,
        page.aio_definition,
        page.pain_agitation,
        page.technical_solution,
        page.call_to_action.headline,
        page.call_to_action.body,
        page.call_to_action.button_text,
    ]
    texts += [" ".join(row) for row in page.comparison_table.rows]
    texts += [f"{item.question} {item.answer}" for item in page.faq]
    return sum(count_words(t) for t in texts)


def faq_schema(items: list[FAQItem]) -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": item.question,
                "acceptedAnswer": {"@type": "Answer", "text": item.answer},
            }
            for item in items
        ],
    }


def breadcrumb_schema(base_url: str, site_name: str, title: str, url: str) -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": 1, "name": site_name, "item": base_url},
            {"@type": "ListItem", "position": 2, "name": title, "item": url},
        ],
    }


class ContentAgent:
    def __init__(
        self,
        client,
        base_url: str,
        site_name: str,
        language: str = "Romanian",
        min_word_count: int = MIN_WORD_COUNT,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.site_name = site_name
        self.min_word_count = min_word_count
        self.system_prompt = build_content_system_prompt(language)

    def _structured(self, prompt: str, tag: str, temperature: float = 0.7, max_tokens: int = 2048):
        return self.client.generate_structured(
            prompt,
            system_prompt=self.system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            tag=tag,
        )

    def _text(self, prompt: str, tag: str, max_tokens: int = 1024) -> str:
        return self.client.generate(
            prompt,
            system_prompt=self.system_prompt,
            temperature=0.7,
            max_tokens=max_tokens,
            tag=tag,
        ).content.strip()

    # ── Sections ──────────────────────────────────────────────────────────

    def meta_tags(self, brief: StrategyBrief) -> MetaTags:
        data = expect_object(self._structured(build_meta_tags_prompt(brief), "meta_tags", 0.6, 256), "meta tags")
        title = data.get("metaTitle", "")
        description = data.get("metaDescription", "")
        if len(title) > MAX_TITLE_LENGTH:
            logger.warning("Meta title too long (%d chars), trimming", len(title))
        if len(description) > MAX_DESCRIPTION_LENGTH:
            logger.warning("Meta description too long (%d chars), trimming", len(description))
        return MetaTags(
            title=truncate(title, MAX_TITLE_LENGTH),
            description=truncate(description, MAX_DESCRIPTION_LENGTH),
        )

    def hero(self, brief: StrategyBrief) -> HeroSection:
        data = expect_object(self._structured(build_hero_prompt(brief), "hero", 0.8, 512), "hero")
        return HeroSection(h1=data.get("h1", ""), subheadline=data.get("subheadline", ""))

    def comparison_table(self, brief: StrategyBrief) -> ComparisonTable:
        data = expect_object(
            self._structured(build_comparison_table_prompt(brief), "comparison_table"), "comparison table"
        )
        return ComparisonTable(
            headers=[str(h) for h in data.get("headers", [])],
            rows=[[str(cell) for cell in row] for row in data.get("rows", [])],
        )

    def faq(self, brief: StrategyBrief) -> list[FAQItem]:
        items = expect_list(self._structured(build_faq_prompt(brief), "faq", 0.7, 3072), "FAQ entries")
        return [FAQItem(question=i.get("question", ""), answer=i.get("answer", "")) for i in items]

    def call_to_action(self, brief: StrategyBrief) -> CallToAction:
        data = expect_object(self._structured(build_cta_prompt(brief), "cta_section", 0.7, 512), "call to action")
        return CallToAction(
            headline=data.get("headline", ""),
            body=data.get("body", ""),
            button_text=data.get("buttonText", ""),
        )

    def schema(self, brief: StrategyBrief, url: str, title: str, faq_items: list[FAQItem]) -> dict:
        """Product schema from the model; FAQ and breadcrumb built from the page itself."""
        data = expect_object(
            self._structured(build_schema_prompt(brief, url, self.site_name), "schema", 0.3, 2048), "schema"
        )
        return {
            "product": data.get("product") or {},
            "faq": faq_schema(faq_items) if faq_items else {},
            "breadcrumb": breadcrumb_schema(self.base_url, self.site_name, title, url),
        }

    def internal_links(self, brief: StrategyBrief) -> list[InternalLink]:
        if not brief.unit.related_units:
            logger.info("No related units for %s, skipping internal links", brief.unit.business_type)
            return []
        data = expect_object(
            self._structured(build_internal_links_prompt(brief), "internal_links", 0.6, 512), "internal links"
        )
        links = []
        for item in data.get("internalLinks", []):
            slug = item.get("slug", "")
            if not is_valid_slug(slug):
                slug = slugify(slug or item.get("text", ""))
            links.append(InternalLink(text=item.get("text", ""), slug=slug))
        return links

    # ── Page ──────────────────────────────────────────────────────────────

    def write(self, brief: StrategyBrief, slug: str) -> LandingPage:
        url = f"{self.base_url}/{slug}"
        logger.info("Writing page %s", url)

        meta = self.meta_tags(brief)
        hero = self.hero(brief)
        aio_definition = self._text(build_aio_definition_prompt(brief), "aio_definition", 512)
        pain_agitation = self._text(build_pain_agitation_prompt(brief), "pain_agitation")
        comparison = self.comparison_table(brief)
        technical_solution = self._text(build_technical_solution_prompt(brief), "technical_solution")
        faq_items = self.faq(brief)
        cta = self.call_to_action(brief)
        schema = self.schema(brief, url, meta.title, faq_items)
        links = self.internal_links(brief)

        page = LandingPage(
            slug=slug,
            url=url,
            meta=meta,
            hero=hero,
            aio_definition=aio_definition,
            pain_agitation=pain_agitation,
            comparison_table=comparison,
            technical_solution=technical_solution,
            faq=faq_items,
            call_to_action=cta,
            schema=schema,
            internal_links=links,
            lsi_keywords=list(brief.lsi_keywords),
            word_count=0,
        )
        words = page_word_count(page)
        if words < self.min_word_count:
            logger.warning("%s has %d words, below the %d minimum", slug, words, self.min_word_count)
        return replace(page, word_count=words)
