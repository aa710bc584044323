"""Logic for writing generated files atomically."""

import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from mdxgen.errors import WriteError
from mdxgen.plan_outputs import OutputFile

logger = logging.getLogger(__name__)


def _stage(target: Path, content: str) -> Path:
    """Write ``content`` to a temporary file next to ``target``."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
    except OSError:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        raise
    return temp_path


def _unchanged(target: Path, content: str) -> bool:
    try:
        return target.read_text(encoding="utf-8") == content
    except (OSError, UnicodeDecodeError):
        return False


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` so readers never see a partial file."""
    write_outputs([OutputFile(path.name, content)], path.parent)


def write_outputs(files: Iterable[OutputFile], docs_root: Path) -> list[Path]:
    """Write every file, or none of them.

    All files are staged as temporary files first and only then renamed into
    place. Files whose content is unchanged are left alone. Returns the paths
    that were (re)written.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for output in files:
            target = docs_root / output.path
            if _unchanged(target, output.content):
                logger.debug("Unchanged: %s", target)
                continue
            staged.append((_stage(target, output.content), target))
        for temp_path, target in staged:
            temp_path.replace(target)
    except OSError as e:
        for temp_path, _ in staged:
            if temp_path.exists():
                temp_path.unlink()
        msg = f"Failed to write {getattr(e, 'filename', None) or docs_root}: {e.strerror or e}"
        raise WriteError(msg) from e
    return [target for _, target in staged]


def remove_stale(paths: Iterable[str], docs_root: Path) -> list[str]:
    """Delete previously generated files that are no longer produced."""
    removed = []
    for rel in paths:
        target = docs_root / rel
        if target.is_file():
            target.unlink()
            removed.append(rel)
            logger.info("Removed stale page %s", rel)
    return removed
