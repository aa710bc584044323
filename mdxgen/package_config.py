"""Typed per-package configuration built from the merged config mapping."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mdxgen.errors import ConfigurationError

OUTPUT_MODES = ("pages", "imports")


@dataclass(frozen=True)
class PackageConfig:
    """Everything the pipeline needs to document one package."""

    key: str
    name: str  # npm name, e.g. @multisynq/client
    display_name: str
    source_roots: tuple[Path, ...]
    file_patterns: tuple[str, ...]
    output_path: str  # docs-root relative, e.g. packages/client
    exclude_patterns: tuple[str, ...] = ()
    nav_tab: str = "Packages"
    nav_group: str = ""
    nav_icon: str = "code"
    types_files: tuple[Path, ...] = ()
    jsdoc_file: Path | None = None
    output_mode: str = "imports"
    constructor_aliases: tuple[str, ...] = ()
    legacy_redirects: tuple[tuple[str, str], ...] = ()

    @property
    def short_name(self) -> str:
        """Return the npm name without its scope."""
        return self.name.rsplit("/", 1)[-1]

    @property
    def index_page(self) -> str:
        """Return the navigation reference of the package index page."""
        return f"{self.output_path}/index"


def _str_list(key: str, field: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"Package '{key}': '{field}' must be a list of strings"
        raise ConfigurationError(msg)
    return tuple(value)


def _redirects(key: str, value: Any) -> tuple[tuple[str, str], ...]:
    pairs = []
    for entry in value or []:
        if not isinstance(entry, dict) or "source" not in entry or "destination" not in entry:
            msg = f"Package '{key}': each legacy redirect needs a source and destination"
            raise ConfigurationError(msg)
        pairs.append((str(entry["source"]), str(entry["destination"])))
    return tuple(pairs)


def package_config_from_dict(
    key: str, data: dict[str, Any], base_dir: Path, nav_tab: str = "Packages"
) -> PackageConfig:
    """Validate a raw package mapping and resolve its paths against ``base_dir``."""
    if not isinstance(data, dict):
        msg = f"Package '{key}' must be a mapping"
        raise ConfigurationError(msg)
    for required in ("name", "source_paths", "output_path"):
        if not data.get(required):
            msg = f"Package '{key}' is missing '{required}'"
            raise ConfigurationError(msg)

    output_mode = data.get("output_mode", "imports")
    if output_mode not in OUTPUT_MODES:
        msg = f"Package '{key}': output_mode must be one of {', '.join(OUTPUT_MODES)}"
        raise ConfigurationError(msg)

    nav = data.get("navigation") or {}
    display_name = data.get("display_name") or data["name"]
    jsdoc_file = data.get("jsdoc_file")

    return PackageConfig(
        key=key,
        name=data["name"],
        display_name=display_name,
        source_roots=tuple(
            base_dir / p for p in _str_list(key, "source_paths", data["source_paths"])
        ),
        file_patterns=_str_list(key, "file_patterns", data.get("file_patterns"))
        or ("**/*.js",),
        output_path=str(data["output_path"]).strip("/"),
        exclude_patterns=_str_list(key, "exclude_patterns", data.get("exclude_patterns")),
        nav_tab=nav.get("tab", nav_tab),
        nav_group=nav.get("group") or display_name,
        nav_icon=nav.get("icon", "code"),
        types_files=tuple(
            base_dir / p for p in _str_list(key, "types_files", data.get("types_files"))
        ),
        jsdoc_file=base_dir / jsdoc_file if jsdoc_file else None,
        output_mode=output_mode,
        constructor_aliases=_str_list(
            key, "constructor_aliases", data.get("constructor_aliases")
        ),
        legacy_redirects=_redirects(key, data.get("legacy_redirects")),
    )


def get_package_config(config: dict[str, Any], key: str, base_dir: Path) -> PackageConfig:
    """Look up a package by key; unknown keys are a configuration error."""
    packages = config.get("packages") or {}
    if key not in packages:
        available = ", ".join(sorted(packages)) or "none"
        msg = f"Unknown package '{key}'. Available packages: {available}"
        raise ConfigurationError(msg)
    nav_tab = (config.get("navigation") or {}).get("tab", "Packages")
    return package_config_from_dict(key, packages[key], base_dir, nav_tab)
