"""Orchestration logic for generating the API reference of configured packages."""

import logging
from pathlib import Path

from mdxgen.build_entities import build_entities, resolve_aliases
from mdxgen.entity import DocumentedEntity
from mdxgen.errors import GeneratorError, SourceReadError
from mdxgen.iter_doc_blocks import iter_doc_blocks
from mdxgen.merge_resolved_types import merge_resolved_types
from mdxgen.navigation_manifest import NavigationManifest
from mdxgen.package_config import PackageConfig
from mdxgen.plan_outputs import plan_outputs
from mdxgen.resolve_declarations import ResolvedSymbol, resolve_declarations
from mdxgen.run_report import RunReport
from mdxgen.scan_sources import scan_sources
from mdxgen.update_navigation import load_navigation, update_navigation
from mdxgen.write_outputs import remove_stale, write_outputs

logger = logging.getLogger(__name__)

TYPED_SUFFIXES = (".ts", ".tsx")


def extract_file(path: Path, package: PackageConfig, report: RunReport) -> list[DocumentedEntity]:
    """Extract the documented entities of one source file.

    An unreadable file is reported and contributes nothing.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err = SourceReadError(f"Cannot read source file: {e}", path)
        report.warn(package.key, str(err), file=path)
        return []
    return build_entities(
        iter_doc_blocks(text, path),
        path,
        constructor_aliases=package.constructor_aliases,
        report=report,
        package=package.key,
    )


def extract_entities(
    files: list[Path], package: PackageConfig, report: RunReport
) -> list[DocumentedEntity]:
    """Extract entities from every source file plus the optional JSDoc-only file."""
    entities: list[DocumentedEntity] = []
    for path in files:
        entities.extend(extract_file(path, package, report))
    if package.jsdoc_file is not None:
        if package.jsdoc_file.is_file():
            print(f"Processing JSDoc definitions from {package.jsdoc_file.name}...")
            entities.extend(extract_file(package.jsdoc_file, package, report))
        else:
            report.warn(package.key, "JSDoc file not found", file=package.jsdoc_file)
    return resolve_aliases(entities)


def resolve_types(
    files: list[Path], package: PackageConfig, report: RunReport
) -> dict[str, ResolvedSymbol]:
    """Resolve declarations from the package's types files and TypeScript sources.

    Explicit types files come first, so their declarations win.
    """
    sources = [p for p in package.types_files if p.is_file()]
    for missing in (p for p in package.types_files if not p.is_file()):
        report.warn(package.key, "Type declaration file not found", file=missing)
    sources += [p for p in files if p.suffix in TYPED_SUFFIXES]

    resolved: dict[str, ResolvedSymbol] = {}
    for path in sources:
        try:
            symbols = resolve_declarations(path)
        except (OSError, UnicodeDecodeError) as e:
            report.warn(package.key, f"Cannot read type declarations: {e}", file=path)
            continue
        for name, symbol in symbols.items():
            resolved.setdefault(name, symbol)
    return resolved


def run_package(
    package: PackageConfig,
    docs_root: Path,
    report: RunReport,
    *,
    nav_path: Path | None = None,
) -> None:
    """Run the whole pipeline for one package.

    Every page is rendered in memory and the navigation document is read
    and checked before anything is written; any failure raises before that
    point. The manifest is saved as soon as the pages are on disk.
    """
    print(f"--- Generating {package.display_name} ({package.name}) ---")
    files = scan_sources(package, report)
    print(f"Found {len(files)} source files")

    entities = extract_entities(files, package, report)
    resolved = resolve_types(files, package, report)
    if resolved:
        print(f"Resolved {len(resolved)} declarations")
        entities = merge_resolved_types(entities, resolved)
    report.add_entities(package.key, len(entities))
    if not entities:
        report.warn(package.key, "No documented symbols found")

    plan = plan_outputs(entities, package)
    nav_doc = None
    if nav_path is not None:
        if nav_path.is_file():
            nav_doc = load_navigation(nav_path)
        else:
            report.warn(package.key, "Navigation document not found; skipping", file=nav_path)
    manifest = NavigationManifest.for_package(docs_root, package.output_path, package.key)
    manifest.load()

    print(f"Writing {len(plan.files)} files ({package.output_mode} mode)...")
    written = write_outputs(plan.files, docs_root)
    report.add_written(package.key, len(written))
    current = [f.path for f in plan.files]
    remove_stale([p for p in manifest.files if p not in current], docs_root)
    manifest.files = current
    manifest.save()

    if nav_doc is not None:
        update_navigation(nav_path, package, plan, manifest, nav_doc)
        manifest.save()


def run_generation(
    packages: list[PackageConfig],
    docs_root: Path,
    report: RunReport,
    *,
    nav_path: Path | None = None,
) -> int:
    """Generate each package in turn and return how many failed.

    Packages run one after another, so ``docs.json`` has a single writer.
    """
    failed = 0
    for package in packages:
        try:
            run_package(package, docs_root, report, nav_path=nav_path)
        except GeneratorError as e:
            path = getattr(e, "path", None)
            report.error(package.key, str(e), file=path or "")
            failed += 1
    return failed
