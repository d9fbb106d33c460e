"""URL-safe identifiers for generated pages."""

import re
import unicodedata

# Comma-below and cedilla forms both occur in Romanian text
ROMANIAN_DIACRITICS = str.maketrans({
    "ă": "a", "â": "a", "î": "i", "ș": "s", "ş": "s", "ț": "t", "ţ": "t",
    "Ă": "a", "Â": "a", "Î": "i", "Ș": "s", "Ş": "s", "Ț": "t", "Ţ": "t",
})

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def slugify(label: str) -> str:
    """Turn a business label into a URL slug.

    "Cabinet Stomatologic"       -> "cabinet-stomatologic"
    "Birou Arhitectură & Design" -> "birou-arhitectura-design"
    "Salon Înfrumusețare"        -> "salon-infrumusetare"
    """
    if not label or not label.strip():
        raise ValueError("label must be a non-empty string")

    slug = label.translate(ROMANIAN_DIACRITICS).lower()
    # Any other accented letters: keep the base letter
    slug = unicodedata.normalize("NFKD", slug).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")

    if not slug:
        raise ValueError(f"label {label!r} has no characters usable in a slug")
    return slug


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and bool(_SLUG_PATTERN.match(slug))
