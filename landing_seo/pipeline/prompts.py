"""Build the system and user prompts for the strategy and content phases."""

from landing_seo.pipeline.models import GenerationUnit, StrategyBrief


def _unit_context(unit: GenerationUnit) -> str:
    lines = [
        f"- Business type: {unit.business_type}",
        f"- Target audience: {unit.target_audience}",
        f"- Main pain point: {unit.pain_point}",
    ]
    if unit.location:
        lines.append(f"- Location: {unit.location}")
    return "\n".join(lines)


# ── System prompts ────────────────────────────────────────────────────────


def build_strategy_system_prompt(language: str = "Romanian") -> str:
    return f"""You are a direct-response marketing strategist for small B2B businesses.

You plan landing pages that sell professional websites with SEO included. Your plans:
- Speak directly about real business pain and concrete outcomes
- Back claims with numbers and plausible, real-world examples
- Anticipate and answer the reader's objections
- Create genuine urgency, never manufactured hype

All copy you produce is written in {language} with correct diacritics.
When asked for JSON, return ONLY the JSON value: no commentary, no markdown fences."""


def build_content_system_prompt(language: str = "Romanian") -> str:
    return f"""You are a conversion copywriter writing SEO landing pages for small B2B businesses.

Rules:
- Short sentences, concrete benefits, no filler
- Use the LSI keywords from the brief naturally, never stuffed
- Every section moves the reader one step closer to the call to action
- Body text may use light markdown (paragraphs, bold, bullet lists); no headings

All copy you produce is written in {language} with correct diacritics.
When asked for JSON, return ONLY the JSON value: no commentary, no markdown fences."""


# ── Strategy prompts ──────────────────────────────────────────────────────


def build_lsi_keywords_prompt(unit: GenerationUnit) -> str:
    return f"""Analyze this business niche:
{_unit_context(unit)}

List 15-20 LSI keywords for this industry: professional terms, specific services,
common problems it solves, and phrases its clients type into Google.
Prefer terms with commercial intent over generic educational ones.

Return a JSON array of strings."""


def build_competitor_insights_prompt(unit: GenerationUnit) -> str:
    return f"""Describe how competitors in this niche present themselves online:
{_unit_context(unit)}

Give 5-7 short insights about gaps, mistakes or opportunities a better website could exploit.

Return a JSON array of strings."""


def build_hook_angle_prompt(unit: GenerationUnit) -> str:
    return f"""Write the hook angle for a landing page aimed at this niche:
{_unit_context(unit)}

The hook must be surprising (a striking number or an uncomfortable truth), tied to the
pain point, and believable.

Return JSON: {{"statement": "...", "emotion": "fear|curiosity|urgency|aspiration", "reasoning": "..."}}"""


def build_objections_prompt(unit: GenerationUnit) -> str:
    return f"""List the 5 strongest objections a skeptical owner in this niche raises
before buying a new website:
{_unit_context(unit)}

Return a JSON array of objects:
[{{"id": 1, "text": "...", "category": "money|time|trust|knowledge|urgency", "rebuttalStrategy": "..."}}]"""


def build_content_outline_prompt(
    unit: GenerationUnit,
    hook: str,
    objections: list[str],
    lsi_keywords: list[str],
) -> str:
    objection_lines = "\n".join(f"- {o}" for o in objections)
    return f"""Plan the body sections of the landing page for this niche:
{_unit_context(unit)}

Hook: {hook}

Objections to defuse:
{objection_lines}

LSI keywords to distribute: {", ".join(lsi_keywords)}

Return a JSON array of 3-6 sections:
[{{"title": "...", "purpose": "...", "keyPoints": ["..."], "lsiKeywords": ["..."], "tone": "..."}}]"""


def build_call_to_action_prompt(unit: GenerationUnit) -> str:
    return f"""Write one call-to-action sentence for the landing page of this niche:
{_unit_context(unit)}

Offer a free, no-obligation next step. Return the sentence only, as plain text."""


# ── Content prompts ───────────────────────────────────────────────────────


def _brief_context(brief: StrategyBrief) -> str:
    sections = "\n".join(f"- {s.title}: {s.purpose}" for s in brief.content_outline)
    return f"""{_unit_context(brief.unit)}
- Hook: {brief.hook_angle.statement}
- LSI keywords: {", ".join(brief.lsi_keywords)}
- Objections: {"; ".join(o.text for o in brief.objections)}
- Planned sections:
{sections}"""


def build_meta_tags_prompt(brief: StrategyBrief) -> str:
    return f"""Write the SEO meta tags for this landing page:
{_brief_context(brief)}

Title: at most 60 characters, primary keyword first.
Description: at most 160 characters, ends with a reason to click.

Return JSON: {{"metaTitle": "...", "metaDescription": "..."}}"""


def build_hero_prompt(brief: StrategyBrief) -> str:
    return f"""Write the hero section for this landing page:
{_brief_context(brief)}

Return JSON: {{"h1": "...", "subheadline": "..."}}"""


def build_aio_definition_prompt(brief: StrategyBrief) -> str:
    return f"""Write a 2-3 sentence definition paragraph that an AI search overview could quote
verbatim, answering what a modern website does for this business:
{_brief_context(brief)}

Return the paragraph only, as plain text."""


def build_pain_agitation_prompt(brief: StrategyBrief) -> str:
    return f"""Write the pain-agitation section (150-250 words) for this landing page.
Describe the cost of doing nothing, in the reader's own terms:
{_brief_context(brief)}

Return the text only."""


def build_comparison_table_prompt(brief: StrategyBrief) -> str:
    return f"""Build a before/after comparison table (4-6 rows) for this landing page:
{_brief_context(brief)}

Return JSON: {{"headers": ["Without ...", "With ..."], "rows": [["...", "..."]]}}"""


def build_technical_solution_prompt(brief: StrategyBrief) -> str:
    return f"""Explain the technical solution (150-250 words) in plain business language:
what the site includes and what each feature means for revenue:
{_brief_context(brief)}

Return the text only."""


def build_faq_prompt(brief: StrategyBrief) -> str:
    return f"""Write 5-8 FAQ entries for this landing page. Each answer defuses one objection
or answers a question clients actually search for:
{_brief_context(brief)}

Return a JSON array: [{{"question": "...", "answer": "..."}}]"""


def build_cta_prompt(brief: StrategyBrief) -> str:
    return f"""Write the closing call-to-action block for this landing page.
Base it on: {brief.call_to_action}
{_brief_context(brief)}

Return JSON: {{"headline": "...", "body": "...", "buttonText": "..."}}"""


def build_schema_prompt(brief: StrategyBrief, url: str, site_name: str) -> str:
    return f"""Produce schema.org structured data for the service offered on {url} by {site_name}:
{_brief_context(brief)}

Return JSON: {{"product": {{...Service or Product schema...}}, "faq": {{...}}, "breadcrumb": {{...}}}}"""


def build_internal_links_prompt(brief: StrategyBrief) -> str:
    related = "\n".join(f"- {label}" for label in brief.unit.related_units)
    return f"""Suggest internal links from the page about "{brief.unit.business_type}" to these related pages:
{related}

Use short, natural anchor texts.

Return JSON: {{"internalLinks": [{{"text": "...", "slug": "..."}}]}}"""
