"""Utility for generating anchor slugs for MDX headings and sections."""

import re

SLUG_RE = re.compile(r"[^a-z0-9]+")


def header_slug(*parts: str) -> str:
    """Join ``parts`` into one lowercase, hyphenated anchor.

    ``header_slug("Model", "#subscribe")`` gives ``model-subscribe``.
    """
    joined = "-".join(p.strip().lower() for p in parts if p and p.strip())
    return SLUG_RE.sub("-", joined).strip("-") or "section"
