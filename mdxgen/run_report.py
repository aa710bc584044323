"""Collects per-run counts, warnings and errors and summarizes them."""

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportEntry:
    """A single warning or error raised while generating a package."""

    severity: str  # "warning" | "error"
    package: str
    message: str
    file: str = ""
    symbol: str = ""

    def format(self) -> str:
        """Render the entry as a one-line message."""
        where = self.file
        if self.symbol:
            where = f"{where} ({self.symbol})" if where else self.symbol
        prefix = f"[{self.package}] " if self.package else ""
        return f"{prefix}{where + ': ' if where else ''}{self.message}"


class RunReport:
    """Accumulates the outcome of one generator invocation."""

    def __init__(self) -> None:
        """Initialize an empty report."""
        self.entries: list[ReportEntry] = []
        self.entity_counts: dict[str, int] = {}
        self.files_written: dict[str, int] = {}
        self.start_time = time.time()

    def warn(
        self, package: str, message: str, *, file: str | Path = "", symbol: str = ""
    ) -> None:
        """Record a recoverable problem."""
        entry = ReportEntry("warning", package, message, str(file), symbol)
        self.entries.append(entry)
        logger.warning(entry.format())

    def error(
        self, package: str, message: str, *, file: str | Path = "", symbol: str = ""
    ) -> None:
        """Record a failure that aborted a package."""
        entry = ReportEntry("error", package, message, str(file), symbol)
        self.entries.append(entry)
        logger.error(entry.format())

    def add_entities(self, package: str, count: int) -> None:
        """Record how many entities were documented for a package."""
        self.entity_counts[package] = self.entity_counts.get(package, 0) + count

    def add_written(self, package: str, count: int) -> None:
        """Record how many files were (re)written for a package."""
        self.files_written[package] = self.files_written.get(package, 0) + count

    @property
    def warnings(self) -> list[ReportEntry]:
        """Return warning entries in the order they were recorded."""
        return [e for e in self.entries if e.severity == "warning"]

    @property
    def errors(self) -> list[ReportEntry]:
        """Return error entries in the order they were recorded."""
        return [e for e in self.entries if e.severity == "error"]

    def format_summary(self) -> str:
        """Return the end-of-run summary printed by the CLI."""
        lines = ["--- Summary ---"]
        for package in sorted(set(self.entity_counts) | set(self.files_written)):
            lines.append(
                f"{package}: {self.entity_counts.get(package, 0)} entities, "
                f"{self.files_written.get(package, 0)} files written"
            )
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.extend(f"  - {e.format()}" for e in self.warnings)
        lines.append(f"Errors: {len(self.errors)}")
        lines.extend(f"  - {e.format()}" for e in self.errors)
        return "\n".join(lines)

    def generate_report(self, path: str | Path) -> None:
        """Write the report to a JSON file."""
        report = {
            "meta": {
                "timestamp": time.time(),
                "duration": time.time() - self.start_time,
            },
            "entities": self.entity_counts,
            "files_written": self.files_written,
            "warnings": [asdict(e) for e in self.warnings],
            "errors": [asdict(e) for e in self.errors],
        }
        Path(path).write_text(json.dumps(report, indent=2), encoding="utf-8")
