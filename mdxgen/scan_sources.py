"""Discovery of the source files that belong to a package."""

import logging
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath

from mdxgen.errors import SourceReadError
from mdxgen.package_config import PackageConfig
from mdxgen.run_report import RunReport

logger = logging.getLogger(__name__)


def _matches(relative: PurePosixPath, pattern: str) -> bool:
    """Match a root-relative path against a glob where ``**/`` may match nothing."""
    if relative.match(pattern) or fnmatch(str(relative), pattern):
        return True
    return pattern.startswith("**/") and _matches(relative, pattern[3:])


def scan_sources(package: PackageConfig, report: RunReport) -> list[Path]:
    """Return the package's source files, sorted and deduplicated.

    Missing roots are reported and skipped. Finding no files at all is fatal
    for the package.
    """
    found: set[Path] = set()
    for root in package.source_roots:
        if not root.is_dir():
            report.warn(
                package.key,
                str(SourceReadError(f"Source root not found: {root}", root)),
                file=root,
            )
            continue
        for pattern in package.file_patterns:
            try:
                candidates = list(root.glob(pattern))
            except OSError as exc:
                report.warn(package.key, f"Cannot scan {root}: {exc}", file=root)
                continue
            for path in candidates:
                if not path.is_file():
                    continue
                relative = PurePosixPath(path.relative_to(root).as_posix())
                if any(_matches(relative, ex) for ex in package.exclude_patterns):
                    logger.debug("Excluded %s", path)
                    continue
                found.add(path)

    if not found:
        roots = ", ".join(str(r) for r in package.source_roots)
        msg = f"No source files found for {package.name} under: {roots}"
        raise SourceReadError(msg)

    return sorted(found, key=lambda p: p.as_posix())
