"""Main orchestration script for regenerating every package's API reference."""

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from mdxgen.load_config import load_config, resolve_config_path


def run_command(cmd_list: Sequence[str | Path], cwd: Path | str | None = None) -> None:
    """Run a command and exit if it fails."""
    cmd_str = " ".join(str(x) for x in cmd_list)
    print(f"Running: {cmd_str}")
    try:
        subprocess.run(cmd_list, check=True, cwd=cwd)
    except subprocess.CalledProcessError as e:
        print(f"Error executing command: {cmd_str}")
        sys.exit(e.returncode)


def main() -> None:
    """Generate the API reference for each configured package in turn."""
    parser = argparse.ArgumentParser(
        description="Generate Mintlify API reference pages for all configured packages."
    )
    parser.add_argument(
        "--docs-root",
        type=Path,
        default=Path(__file__).parent,
        help="Root of the documentation site",
    )
    parser.add_argument(
        "--no-nav",
        action="store_true",
        help="Do not modify the navigation document",
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file",
    )
    args = parser.parse_args()

    config_path = resolve_config_path(args.config, args.docs_root)
    packages = list(load_config(config_path).get("packages") or {})

    # Using the current python interpreter
    python_exe = sys.executable

    for step, key in enumerate(packages, start=1):
        print(f"--- Step {step}/{len(packages)}: {key} ---")
        cmd = [
            python_exe,
            "-m",
            "mdxgen.generate",
            "--package",
            key,
            "--docs-root",
            str(args.docs_root),
        ]
        if args.no_nav:
            cmd.append("--no-nav")
        if config_path:
            cmd.extend(["--config", str(config_path)])
        run_command(cmd)

    print(f"\nSUCCESS: API reference generated in {args.docs_root}")


if __name__ == "__main__":
    main()
