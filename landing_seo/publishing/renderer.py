"""Render a generated landing page to a standalone HTML document.

Headings and short fields are escaped; long-form body text is treated as
markdown and converted with the ``markdown`` package. Schema data is
embedded as JSON-LD.
"""

from __future__ import annotations

import html
import json
from dataclasses import dataclass

import markdown as md_lib

from landing_seo.config import SITE_NAME, SITE_URL

MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "smarty"]


@dataclass(frozen=True)
class SiteInfo:
    base_url: str = SITE_URL
    name: str = SITE_NAME
    language: str = "ro"


def _text(value) -> str:
    return html.escape(str(value or ""), quote=True)


def _body(markdown_text: str) -> str:
    return md_lib.markdown(markdown_text or "", extensions=MARKDOWN_EXTENSIONS)


def _json_ld(data: dict) -> str:
    # "</" inside a string would close the script element early
    payload = json.dumps(data, ensure_ascii=False, indent=2).replace("</", "<\\/")
    return f'<script type="application/ld+json">\n{payload}\n</script>'


# ── Sections ──────────────────────────────────────────────────────────────


def _hero(page) -> str:
    return (
        '<section class="hero">\n'
        f"  <h1>{_text(page.hero.h1)}</h1>\n"
        f'  <p class="subheadline">{_text(page.hero.subheadline)}</p>\n'
        "</section>"
    )


def _prose(css_class: str, content: str) -> str:
    return f'<section class="{css_class}">\n{_body(content)}\n</section>'


def _comparison(page) -> str:
    table = page.comparison_table
    head = "".join(f"<th>{_text(h)}</th>" for h in table.headers)
    rows = "\n".join(
        "    <tr>" + "".join(f"<td>{_text(cell)}</td>" for cell in row) + "</tr>"
        for row in table.rows
    )
    return (
        '<section class="comparison">\n'
        "  <table>\n"
        f"    <thead><tr>{head}</tr></thead>\n"
        f"    <tbody>\n{rows}\n    </tbody>\n"
        "  </table>\n"
        "</section>"
    )


def _faq(page) -> str:
    items = "\n".join(
        "  <details>\n"
        f"    <summary>{_text(item.question)}</summary>\n"
        f"    {_body(item.answer)}\n"
        "  </details>"
        for item in page.faq
    )
    return f'<section class="faq">\n  <h2>FAQ</h2>\n{items}\n</section>'


def _cta(page) -> str:
    cta = page.call_to_action
    return (
        '<section class="cta">\n'
        f"  <h2>{_text(cta.headline)}</h2>\n"
        f"  {_body(cta.body)}\n"
        f'  <a class="button" href="#contact">{_text(cta.button_text)}</a>\n'
        "</section>"
    )


def _internal_links(page, site: SiteInfo) -> str:
    base = site.base_url.rstrip("/")
    items = "\n".join(
        f'  <li><a href="{_text(f"{base}/{link.slug}")}">{_text(link.text)}</a></li>'
        for link in page.internal_links
    )
    return f'<nav class="related">\n<ul>\n{items}\n</ul>\n</nav>'


# ── Document ──────────────────────────────────────────────────────────────


def render_landing_page(page, site: SiteInfo = SiteInfo()) -> str:
    """Return the full HTML document for ``page``."""
    sections = [_hero(page)]
    if page.aio_definition:
        sections.append(_prose("aio-definition", page.aio_definition))
    if page.pain_agitation:
        sections.append(_prose("pain-agitation", page.pain_agitation))
    if page.comparison_table and page.comparison_table.rows:
        sections.append(_comparison(page))
    if page.technical_solution:
        sections.append(_prose("technical-solution", page.technical_solution))
    if page.faq:
        sections.append(_faq(page))
    if page.call_to_action:
        sections.append(_cta(page))
    if page.internal_links:
        sections.append(_internal_links(page, site))

    schema_blocks = "\n".join(_json_ld(block) for block in page.schema.values() if block)
    body = "\n".join(sections)
    return f"""<!DOCTYPE html>
<html lang="{_text(site.language)}">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{_text(page.meta.title)}</title>
<meta name="description" content="{_text(page.meta.description)}">
<link rel="canonical" href="{_text(page.url)}">
<meta property="og:title" content="{_text(page.meta.title)}">
<meta property="og:description" content="{_text(page.meta.description)}">
<meta property="og:url" content="{_text(page.url)}">
<meta property="og:site_name" content="{_text(site.name)}">
{schema_blocks}
</head>
<body>
<main>
{body}
</main>
</body>
</html>
"""
