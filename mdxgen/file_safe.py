"""Utility for making symbol names safe for use in file names and identifiers."""

import re

FILE_SAFE_RE = re.compile(r"[^A-Za-z0-9_-]+")


def file_safe(name: str) -> str:
    """Make a stable filename-ish token from a symbol name.

    Dots and other separators become hyphens; private ``#`` and ``$`` markers
    are dropped.
    """
    name = name.replace("#", "").replace("$", "")
    name = name.replace(".", "-")
    name = FILE_SAFE_RE.sub("-", name).strip("-")
    return name or "Unknown"


def component_identifier(*parts: str) -> str:
    """Build a PascalCase identifier usable as an MDX component name."""
    words = [w for part in parts for w in re.split(r"[^A-Za-z0-9]+", part) if w]
    ident = "".join(w[:1].upper() + w[1:] for w in words)
    if not ident or not ident[0].isalpha():
        ident = "Doc" + ident
    return ident
