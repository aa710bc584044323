"""Logic for merging generated pages and redirects into docs.json."""

import copy
import json
import logging
from pathlib import Path
from typing import Any

from mdxgen.errors import WriteError
from mdxgen.navigation_manifest import NavigationManifest
from mdxgen.package_config import PackageConfig
from mdxgen.plan_outputs import OutputPlan
from mdxgen.write_outputs import atomic_write

logger = logging.getLogger(__name__)


def _find_or_add(items: list[Any], key: str, name: str, new: dict[str, Any]) -> dict[str, Any]:
    for item in items:
        if isinstance(item, dict) and item.get(key) == name:
            return item
    items.append(new)
    return new


def _package_group(doc: dict[str, Any], package: PackageConfig) -> dict[str, Any]:
    """Return the navigation group of a package, creating tab and group as needed.

    Supports the ``docs.json`` layout (``navigation.tabs[].groups[]``) and
    the older ``mint.json`` layout where ``navigation`` is a list of groups.
    """
    nav = doc.setdefault("navigation", {})
    if isinstance(nav, list):
        groups = nav
    else:
        tabs = nav.setdefault("tabs", [])
        tab = _find_or_add(tabs, "tab", package.nav_tab, {"tab": package.nav_tab, "groups": []})
        groups = tab.setdefault("groups", [])
    return _find_or_add(
        groups,
        "group",
        package.nav_group,
        {"group": package.nav_group, "icon": package.nav_icon, "pages": []},
    )


def _all_pages(pages: list[Any]) -> set[str]:
    found = set()
    for entry in pages:
        if isinstance(entry, str):
            found.add(entry)
        elif isinstance(entry, dict):
            found |= _all_pages(entry.get("pages", []))
    return found


def _without(pages: list[Any], stale: set[str]) -> list[Any]:
    kept = []
    for entry in pages:
        if isinstance(entry, str) and entry in stale:
            continue
        if isinstance(entry, dict) and isinstance(entry.get("pages"), list):
            entry = {**entry, "pages": _without(entry["pages"], stale)}
        kept.append(entry)
    return kept


def _desired_redirects(
    package: PackageConfig, plan: OutputPlan, manifest: NavigationManifest
) -> list[tuple[str, str]]:
    """Return the redirects this package should own, first source wins."""
    index = f"/{plan.index_page}"
    current = {f"/{p}" for p in plan.nav_pages}
    pairs = [(f"/api-reference/{package.short_name}", index), *package.legacy_redirects]

    # Generated pages that disappeared keep pointing at the package index.
    previous_moved = [
        r["source"]
        for r in manifest.redirects
        if r["destination"] == index and r["source"].startswith(f"/{package.output_path}/")
    ]
    moved = [f"/{p}" for p in manifest.pages if p not in plan.nav_pages]
    pairs += [(src, index) for src in [*previous_moved, *moved]]

    desired: dict[str, str] = {}
    for src, dst in pairs:
        if src not in current and src not in desired:
            desired[src] = dst
    return list(desired.items())


def _merge_redirects(
    doc: dict[str, Any], desired: list[tuple[str, str]], manifest: NavigationManifest
) -> list[dict[str, str]]:
    """Apply ``desired`` to ``doc`` and return the redirects now owned."""
    previous = {(r["source"], r["destination"]) for r in manifest.redirects}
    retired = previous - set(desired)
    existing = doc.get("redirects", [])
    kept = [
        r
        for r in existing
        if not (isinstance(r, dict) and (r.get("source"), r.get("destination")) in retired)
    ]
    sources = {r.get("source") for r in kept if isinstance(r, dict)}

    owned = []
    for src, dst in desired:
        if src in sources:
            # Present already: ours from an earlier run, or a hand-written entry.
            if (src, dst) in previous:
                owned.append({"source": src, "destination": dst})
            continue
        kept.append({"source": src, "destination": dst})
        sources.add(src)
        owned.append({"source": src, "destination": dst})

    if kept or "redirects" in doc:
        doc["redirects"] = kept
    return owned


def merge_navigation(
    doc: dict[str, Any],
    package: PackageConfig,
    plan: OutputPlan,
    manifest: NavigationManifest,
) -> tuple[dict[str, Any], list[dict[str, str]]]:
    """Return a copy of ``doc`` with the package's pages and redirects merged in.

    Missing pages are appended to the package group. Pages and redirects are
    only removed when the manifest shows a previous run added them. Also
    returns the redirects the generator owns after the merge.
    """
    merged = copy.deepcopy(doc)
    group = _package_group(merged, package)
    pages = group.setdefault("pages", [])

    stale = set(manifest.pages) - set(plan.nav_pages)
    if stale:
        pages = _without(pages, stale)
    present = _all_pages(pages)
    for page in plan.nav_pages:
        if page not in present:
            pages.append(page)
            present.add(page)
    group["pages"] = pages

    owned = _merge_redirects(merged, _desired_redirects(package, plan, manifest), manifest)
    return merged, owned


def load_navigation(nav_path: Path) -> dict[str, Any]:
    """Read the navigation document."""
    try:
        doc = json.loads(nav_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Navigation document {nav_path} is not valid JSON: {e}"
        raise WriteError(msg) from e
    except OSError as e:
        msg = f"Cannot read navigation document {nav_path}: {e}"
        raise WriteError(msg) from e
    if not isinstance(doc, dict):
        msg = f"Navigation document {nav_path} must contain a JSON object"
        raise WriteError(msg)
    return doc


def update_navigation(
    nav_path: Path,
    package: PackageConfig,
    plan: OutputPlan,
    manifest: NavigationManifest,
    doc: dict[str, Any] | None = None,
) -> bool:
    """Merge the package into ``nav_path`` and record ownership in ``manifest``.

    ``doc`` is the already loaded document, if the caller validated it
    earlier. The document is only rewritten when the merge changed it, so
    running twice leaves it byte-identical. Returns True when it was written.
    """
    if doc is None:
        doc = load_navigation(nav_path)
    merged, owned = merge_navigation(doc, package, plan, manifest)
    manifest.pages = list(plan.nav_pages)
    manifest.redirects = owned
    if merged == doc:
        logger.info("Navigation already up to date for %s", package.key)
        return False
    atomic_write(nav_path, json.dumps(merged, indent=2, ensure_ascii=False) + "\n")
    logger.info("Updated navigation in %s", nav_path)
    return True
