"""Strategy phase: research the niche and plan the page.

Six calls, in order:
1. LSI keywords
2. Competitor insights
3. Hook angle
4. Skeptical objections
5. Content outline (uses 1, 3 and 4)
6. Call to action
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from landing_seo.errors import MalformedResponse
from landing_seo.pipeline.models import (
    ContentSection,
    GenerationUnit,
    HookAngle,
    Objection,
    StrategyBrief,
)
from landing_seo.pipeline.prompts import (
    build_call_to_action_prompt,
    build_competitor_insights_prompt,
    build_content_outline_prompt,
    build_hook_angle_prompt,
    build_lsi_keywords_prompt,
    build_objections_prompt,
    build_strategy_system_prompt,
)

logger = logging.getLogger(__name__)

MAX_LSI_KEYWORDS = 20
MAX_COMPETITOR_INSIGHTS = 7
MAX_OBJECTIONS = 5

INTRO_WORDS = 200
WORDS_PER_SECTION = 350
CLOSING_WORDS = 150
READING_SPEED_WPM = 200


def target_word_count(section_count: int) -> int:
    return INTRO_WORDS + section_count * WORDS_PER_SECTION + CLOSING_WORDS


def estimated_read_time(word_count: int) -> int:
    return math.ceil(word_count / READING_SPEED_WPM)


def expect_list(payload, what: str) -> list:
    if not isinstance(payload, list):
        raise MalformedResponse(repr(payload), f"expected a JSON array of {what}")
    return payload


def expect_object(payload, what: str) -> dict:
    if not isinstance(payload, dict):
        raise MalformedResponse(repr(payload), f"expected a JSON object for {what}")
    return payload


class StrategyAgent:
    def __init__(self, client, language: str = "Romanian"):
        self.client = client
        self.system_prompt = build_strategy_system_prompt(language)

    def _structured(self, prompt: str, tag: str, temperature: float, max_tokens: int):
        return self.client.generate_structured(
            prompt,
            system_prompt=self.system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            tag=tag,
        )

    def analyze(self, unit: GenerationUnit) -> StrategyBrief:
        logger.info("Planning page for %s", unit.business_type)

        lsi_keywords = [
            str(k) for k in expect_list(
                self._structured(build_lsi_keywords_prompt(unit), "lsi_keywords", 0.8, 1024),
                "keywords",
            )
        ][:MAX_LSI_KEYWORDS]

        insights = [
            str(i) for i in expect_list(
                self._structured(build_competitor_insights_prompt(unit), "competitor_insights", 0.7, 1024),
                "insights",
            )
        ][:MAX_COMPETITOR_INSIGHTS]

        hook_data = expect_object(
            self._structured(build_hook_angle_prompt(unit), "hook_angle", 0.8, 512), "hook angle"
        )
        hook = HookAngle(
            statement=hook_data.get("statement", ""),
            emotion=hook_data.get("emotion", ""),
            reasoning=hook_data.get("reasoning", ""),
        )

        objections = [
            Objection(
                id=item.get("id", n),
                text=item.get("text", ""),
                category=item.get("category", ""),
                rebuttal_strategy=item.get("rebuttalStrategy", ""),
            )
            for n, item in enumerate(
                expect_list(
                    self._structured(build_objections_prompt(unit), "objections", 0.7, 2048),
                    "objections",
                ),
                start=1,
            )
        ][:MAX_OBJECTIONS]

        outline_prompt = build_content_outline_prompt(
            unit, hook.statement, [o.text for o in objections], lsi_keywords
        )
        outline = [
            ContentSection(
                title=item.get("title", ""),
                purpose=item.get("purpose", ""),
                key_points=list(item.get("keyPoints", [])),
                lsi_keywords=list(item.get("lsiKeywords", [])),
                tone=item.get("tone", ""),
            )
            for item in expect_list(
                self._structured(outline_prompt, "content_outline", 0.6, 3072), "sections"
            )
        ]

        cta = self.client.generate(
            build_call_to_action_prompt(unit),
            system_prompt=self.system_prompt,
            temperature=0.7,
            max_tokens=256,
            tag="call_to_action",
        ).content.strip()

        words = target_word_count(len(outline))
        brief = StrategyBrief(
            unit=unit,
            lsi_keywords=lsi_keywords,
            competitor_insights=insights,
            hook_angle=hook,
            objections=objections,
            content_outline=outline,
            call_to_action=cta,
            target_word_count=words,
            estimated_read_time=estimated_read_time(words),
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Brief ready: %d keywords, %d objections, %d sections, ~%d words",
            len(lsi_keywords), len(objections), len(outline), words,
        )
        return brief
