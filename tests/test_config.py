"""Tests for configuration loading, merging and package lookup."""

from pathlib import Path

import pytest
import yaml

from mdxgen.deep_merge import deep_merge
from mdxgen.errors import ConfigurationError
from mdxgen.load_config import load_config, resolve_config_path
from mdxgen.package_config import get_package_config, package_config_from_dict


def test_deep_merge_nested() -> None:
    """Verify recursive merging of dictionaries."""
    base = {"packages": {"client": {"name": "a", "output_path": "x"}}}
    update = {"packages": {"client": {"output_path": "y"}}}
    merged = deep_merge(base, update)
    assert merged == {"packages": {"client": {"name": "a", "output_path": "y"}}}


def test_deep_merge_lists_replace() -> None:
    """Verify that lists are replaced by default."""
    merged = deep_merge({"file_patterns": ["**/*.js"]}, {"file_patterns": ["**/*.ts"]})
    assert merged == {"file_patterns": ["**/*.ts"]}


def test_deep_merge_exclude_patterns_additive() -> None:
    """Verify that exclude patterns accumulate without duplicates."""
    base = {"exclude_patterns": ["**/node_modules/**", "**/*.test.*"]}
    update = {"exclude_patterns": ["**/*.test.*", "**/dist/**"]}
    merged = deep_merge(base, update)
    assert merged["exclude_patterns"] == ["**/node_modules/**", "**/*.test.*", "**/dist/**"]


def test_deep_merge_does_not_mutate_base() -> None:
    """Verify that merging leaves the base mapping untouched."""
    base = {"a": {"b": 1}}
    deep_merge(base, {"a": {"b": 2}})
    assert base == {"a": {"b": 1}}


def test_load_config_defaults() -> None:
    """Verify the built-in packages are present without a config file."""
    config = load_config(None)
    assert set(config["packages"]) == {"client", "react", "react-together"}
    assert config["docs_json"] == "docs.json"
    client = config["packages"]["client"]
    assert client["constructor_aliases"] == ["init"]
    sources = {r["source"] for r in client["legacy_redirects"]}
    assert "/client/Model.html#methods" in sources
    assert "/client/View.html#viewId" in sources


def test_load_config_with_file(tmp_path: Path) -> None:
    """Verify that a user file overrides single fields of a package."""
    config_file = tmp_path / "mdxgen.yml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "packages": {
                    "client": {
                        "output_mode": "pages",
                        "exclude_patterns": ["**/legacy/**"],
                    }
                }
            }
        ),
        encoding="utf-8",
    )
    config = load_config(config_file)
    client = config["packages"]["client"]
    assert client["output_mode"] == "pages"
    assert client["name"] == "@multisynq/client"
    assert client["exclude_patterns"] == ["**/node_modules/**", "**/legacy/**"]


def test_load_config_does_not_leak_between_calls(tmp_path: Path) -> None:
    """Verify that loading a file never modifies the defaults."""
    config_file = tmp_path / "mdxgen.yml"
    config_file.write_text("packages:\n  client:\n    output_path: elsewhere\n", encoding="utf-8")
    load_config(config_file)
    assert load_config(None)["packages"]["client"]["output_path"] == "packages/client"


def test_load_config_malformed_yaml(tmp_path: Path) -> None:
    """Verify that invalid YAML is a configuration error."""
    config_file = tmp_path / "mdxgen.yml"
    config_file.write_text("packages: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Malformed"):
        load_config(config_file)


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    """Verify that a YAML list at the top level is rejected."""
    config_file = tmp_path / "mdxgen.yml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(config_file)


def test_resolve_config_path(tmp_path: Path) -> None:
    """Verify explicit and conventional config file discovery."""
    assert resolve_config_path(None, tmp_path) is None
    (tmp_path / "mdxgen.yml").write_text("{}\n", encoding="utf-8")
    assert resolve_config_path(None, tmp_path) == tmp_path / "mdxgen.yml"
    with pytest.raises(ConfigurationError, match="not found"):
        resolve_config_path(tmp_path / "missing.yml", tmp_path)


def test_get_package_config_resolves_paths(tmp_path: Path) -> None:
    """Verify that package paths are resolved against the base directory."""
    package = get_package_config(load_config(None), "react", tmp_path)
    assert package.name == "@multisynq/react"
    assert package.short_name == "react"
    assert package.source_roots == (tmp_path / "../multisynq-react/bindings/src",)
    assert package.jsdoc_file == tmp_path / "../multisynq-react/docs/react-doc.js"
    assert package.nav_tab == "Packages"
    assert package.nav_group == "Multisynq React"
    assert package.index_page == "packages/react/index"


def test_get_package_config_unknown_package(tmp_path: Path) -> None:
    """Verify that an unknown package lists the available ones."""
    with pytest.raises(ConfigurationError, match="Available packages: client, react"):
        get_package_config(load_config(None), "vue", tmp_path)


def test_package_config_validation(tmp_path: Path) -> None:
    """Verify that missing fields and bad output modes are rejected."""
    with pytest.raises(ConfigurationError, match="source_paths"):
        package_config_from_dict("x", {"name": "x", "output_path": "p"}, tmp_path)
    with pytest.raises(ConfigurationError, match="output_mode"):
        package_config_from_dict(
            "x",
            {"name": "x", "source_paths": ["s"], "output_path": "p", "output_mode": "single"},
            tmp_path,
        )
    with pytest.raises(ConfigurationError, match="list of strings"):
        package_config_from_dict(
            "x", {"name": "x", "source_paths": [1], "output_path": "p"}, tmp_path
        )


def test_package_config_defaults(tmp_path: Path) -> None:
    """Verify the defaults applied to a minimal package mapping."""
    package = package_config_from_dict(
        "x", {"name": "@scope/x", "source_paths": "src", "output_path": "/packages/x/"}, tmp_path
    )
    assert package.output_path == "packages/x"
    assert package.file_patterns == ("**/*.js",)
    assert package.output_mode == "imports"
    assert package.display_name == "@scope/x"
    assert package.nav_group == "@scope/x"
    assert package.legacy_redirects == ()
