"""Logic for remembering what a previous run generated for a package."""

import json
import logging
from pathlib import Path
from typing import Any

from mdxgen.write_outputs import atomic_write

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1
MANIFEST_FILENAME = ".mdxgen-manifest.json"


class NavigationManifest:
    """Tracks the files, navigation pages and redirects the generator owns.

    Only entries listed here are ever removed from ``docs.json``; anything a
    person added by hand is left alone.
    """

    def __init__(self, path: str | Path, package: str) -> None:
        """Initialize an empty manifest stored at ``path``."""
        self.path = Path(path)
        self.package = package
        self.files: list[str] = []
        self.pages: list[str] = []
        self.redirects: list[dict[str, str]] = []

    @classmethod
    def for_package(cls, docs_root: Path, output_path: str, package: str) -> "NavigationManifest":
        """Return the manifest kept in a package's output directory."""
        return cls(docs_root / output_path / MANIFEST_FILENAME, package)

    def load(self) -> None:
        """Load the manifest from disk; a missing or unreadable file means a first run."""
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Error loading manifest %s", self.path)
            return
        if not isinstance(data, dict):
            logger.warning("Manifest %s is not a JSON object. Ignoring manifest.", self.path)
            return

        meta = data.get("meta")
        schema_ver = meta.get("schema_version", 0) if isinstance(meta, dict) else 0
        if schema_ver != CURRENT_SCHEMA_VERSION:
            logger.warning(
                "Manifest schema version mismatch (%s != %s). Ignoring manifest.",
                schema_ver,
                CURRENT_SCHEMA_VERSION,
            )
            return
        self.files = [str(f) for f in data.get("files", [])]
        self.pages = [str(p) for p in data.get("pages", [])]
        self.redirects = [
            {"source": str(r["source"]), "destination": str(r["destination"])}
            for r in data.get("redirects", [])
            if isinstance(r, dict) and "source" in r and "destination" in r
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": {"schema_version": CURRENT_SCHEMA_VERSION, "package": self.package},
            "files": sorted(self.files),
            "pages": list(self.pages),
            "redirects": sorted(self.redirects, key=lambda r: r["source"]),
        }

    def save(self) -> None:
        """Write the manifest atomically; an unchanged manifest is not rewritten."""
        text = json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"
        atomic_write(self.path, text)
