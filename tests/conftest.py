"""Shared fixtures for generator tests."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from mdxgen.package_config import PackageConfig, package_config_from_dict

BASE_DOCS_JSON = {
    "name": "Multisynq",
    "navigation": {
        "tabs": [
            {"tab": "Guides", "groups": [{"group": "Start", "pages": ["index"]}]},
            {
                "tab": "Packages",
                "groups": [
                    {
                        "group": "Multisynq Client",
                        "icon": "code",
                        "pages": ["packages/client/overview"],
                    }
                ],
            },
        ]
    },
    "redirects": [{"source": "/old-home", "destination": "/index"}],
}


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., PackageConfig]:
    """Return a factory for package configs rooted in ``tmp_path``."""

    def factory(**overrides: Any) -> PackageConfig:
        data: dict[str, Any] = {
            "name": "@multisynq/client",
            "display_name": "Multisynq Client",
            "source_paths": ["src"],
            "file_patterns": ["**/*.js"],
            "output_path": "packages/client",
            "navigation": {"group": "Multisynq Client", "icon": "code"},
            "output_mode": "pages",
        }
        data.update(overrides)
        return package_config_from_dict("client", data, tmp_path)

    return factory


@pytest.fixture
def docs_json(tmp_path: Path) -> Path:
    """Write a small navigation document and return its path."""
    path = tmp_path / "docs.json"
    path.write_text(json.dumps(BASE_DOCS_JSON, indent=2) + "\n", encoding="utf-8")
    return path
