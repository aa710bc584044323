"""Logic for loading and merging configuration files."""

import copy
from pathlib import Path
from typing import Any

import yaml

from mdxgen.deep_merge import deep_merge
from mdxgen.errors import ConfigurationError

CONFIG_FILENAME = "mdxgen.yml"

LEGACY_CLIENT_CLASSES = ["Model", "View", "Session", "Data"]
LEGACY_ANCHORS = ["members", "methods", "events", "props", "properties"]


def _client_legacy_redirects() -> list[dict[str, str]]:
    """Build the redirects from the old JSDoc HTML site to the client index."""
    redirects = []
    for cls in LEGACY_CLIENT_CLASSES:
        destination = f"/packages/client/index#{cls.lower()}"
        redirects.append({"source": f"/client/{cls}.html", "destination": destination})
        for anchor in LEGACY_ANCHORS:
            redirects.append(
                {"source": f"/client/{cls}.html#{anchor}", "destination": destination}
            )
    redirects.append(
        {"source": "/client/View.html#viewId", "destination": "/packages/client/index#view"}
    )
    return redirects


DEFAULT_CONFIG: dict[str, Any] = {
    "docs_json": "docs.json",
    "navigation": {"tab": "Packages"},
    "packages": {
        "client": {
            "name": "@multisynq/client",
            "display_name": "Multisynq Client",
            "source_paths": ["../multisynq-client/client/teatime/src"],
            "file_patterns": ["**/*.js"],
            "exclude_patterns": ["**/node_modules/**"],
            "output_path": "packages/client",
            "navigation": {"group": "Multisynq Client", "icon": "code"},
            "types_files": ["../multisynq-client/client/types.d.ts"],
            "output_mode": "imports",
            "constructor_aliases": ["init"],
            "legacy_redirects": _client_legacy_redirects(),
        },
        "react": {
            "name": "@multisynq/react",
            "display_name": "Multisynq React",
            "source_paths": ["../multisynq-react/bindings/src"],
            "file_patterns": ["**/*.ts", "**/*.tsx"],
            "exclude_patterns": ["**/node_modules/**", "**/*.test.*"],
            "output_path": "packages/react",
            "navigation": {"group": "Multisynq React", "icon": "react"},
            "jsdoc_file": "../multisynq-react/docs/react-doc.js",
            "output_mode": "imports",
        },
        "react-together": {
            "name": "@multisynq/react-together",
            "display_name": "React Together",
            "source_paths": ["../react-together/packages/react-together/src"],
            "file_patterns": ["**/*.ts", "**/*.tsx"],
            "exclude_patterns": ["**/node_modules/**", "**/*.test.*"],
            "output_path": "packages/react-together",
            "navigation": {"group": "React Together", "icon": "react"},
            "output_mode": "imports",
        },
    },
}


def resolve_config_path(path: str | Path | None, docs_root: Path) -> Path | None:
    """Return the config file to load, or None when only defaults apply.

    An explicitly requested file must exist; the conventional ``mdxgen.yml``
    in the docs root is optional.
    """
    if path:
        p = Path(path)
        if not p.is_file():
            msg = f"Configuration file not found: {p}"
            raise ConfigurationError(msg)
        return p
    default = docs_root / CONFIG_FILENAME
    return default if default.is_file() else None


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if p.exists():
            try:
                user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                msg = f"Malformed configuration file {p}: {exc}"
                raise ConfigurationError(msg) from exc
            if not isinstance(user_config, dict):
                msg = f"Configuration file {p} must contain a mapping"
                raise ConfigurationError(msg)
            config = deep_merge(config, user_config)
    return config
