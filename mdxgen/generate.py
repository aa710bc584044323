"""Command-line entry point: generate Mintlify API reference pages for packages."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from mdxgen.errors import ConfigurationError
from mdxgen.load_config import load_config, resolve_config_path
from mdxgen.package_config import get_package_config
from mdxgen.run_generation import run_generation
from mdxgen.run_report import RunReport

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="generate",
        description=(
            "Generate Mintlify MDX API reference pages from JSDoc comments and "
            "TypeScript declarations, and merge them into docs.json."
        ),
    )
    ap.add_argument(
        "--package",
        "-p",
        action="append",
        default=[],
        metavar="NAME",
        help="Package to generate (e.g. client, react). May be repeated.",
    )
    ap.add_argument(
        "--all",
        action="store_true",
        help="Generate every configured package",
    )
    ap.add_argument(
        "--no-nav",
        action="store_true",
        help="Do not modify the navigation document",
    )
    ap.add_argument(
        "--config",
        help="Path to configuration file (default: <docs-root>/mdxgen.yml if present)",
    )
    ap.add_argument(
        "--docs-root",
        type=Path,
        default=Path(),
        help="Root of the documentation site (default: current directory)",
    )
    ap.add_argument(
        "--report",
        type=Path,
        help="Write a JSON run report to this path",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    """Run the generator and return the process exit code."""
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    docs_root = args.docs_root.resolve()
    try:
        config_path = resolve_config_path(args.config, docs_root)
        config = load_config(config_path)
        base_dir = config_path.parent.resolve() if config_path else docs_root
        keys = list(config.get("packages") or {}) if args.all else args.package
        if not keys:
            msg = "No package selected; use --package NAME or --all"
            raise ConfigurationError(msg)
        packages = [get_package_config(config, key, base_dir) for key in dict.fromkeys(keys)]
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    nav_path = None if args.no_nav else docs_root / config.get("docs_json", "docs.json")
    report = RunReport()
    failed = run_generation(packages, docs_root, report, nav_path=nav_path)

    print()
    print(report.format_summary())
    if args.report:
        report.generate_report(args.report)
    return EXIT_FAILED if failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
