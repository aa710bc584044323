"""End-to-end tests for the generate command."""

import json
from pathlib import Path

import pytest
import yaml

import mdxgen.plan_outputs as plan_module
from mdxgen.generate import EXIT_CONFIG, EXIT_FAILED, EXIT_OK, main

MODEL_SOURCE = """\
/**
 * A replicated model.
 */
export class Model {
    /**
     * Create the model.
     * @param {Object} options - the options
     */
    init(options) {}

    /**
     * Old publish.
     * @deprecated use publish
     */
    oldPublish(event) {}

    /**
     * Publish an event.
     * @example
     * this.publish("scope", "event");
     */
    publish(event) {}
}
"""

VIEW_SOURCE = """\
/** A view of a model. */
export class View {
    /** Detach. */
    detach() {}
}
"""


def _write_config(root: Path, output_mode: str = "imports") -> None:
    config = {
        "packages": {
            "client": {
                "source_paths": ["src"],
                "types_files": [],
                "legacy_redirects": [],
                "output_mode": output_mode,
            }
        }
    }
    (root / "mdxgen.yml").write_text(yaml.safe_dump(config), encoding="utf-8")


def _write_sources(root: Path, *, view: bool = True) -> None:
    src = root / "src"
    src.mkdir(exist_ok=True)
    (src / "model.js").write_text(MODEL_SOURCE, encoding="utf-8")
    if view:
        (src / "view.js").write_text(VIEW_SOURCE, encoding="utf-8")


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def _run(root: Path, *extra: str) -> int:
    return main(["--package", "client", "--docs-root", str(root), *extra])


def test_generate_end_to_end(tmp_path: Path, docs_json: Path) -> None:
    """Verify fragments, index page, navigation entry and manifest for one class."""
    _write_config(tmp_path)
    _write_sources(tmp_path, view=False)

    assert _run(tmp_path) == EXIT_OK

    out = tmp_path / "packages" / "client"
    fragment = (out / "components" / "classes" / "Model.mdx").read_text(encoding="utf-8")
    assert fragment.startswith('<a id="model"></a>')
    deprecated = fragment.index('title="oldPublish(event) (deprecated)"')
    assert fragment.index("### Constructor") < deprecated
    assert deprecated < fragment.index('title="publish(event)"')
    assert "**Deprecated:** use publish" in fragment
    assert 'this.publish("scope", "event");' in fragment
    assert 'path="options"' in fragment

    index = (out / "index.mdx").read_text(encoding="utf-8")
    assert 'import ClassesModel from "/packages/client/components/classes/Model.mdx";' in index
    assert "<ClassesModel />" in index

    doc = json.loads(docs_json.read_text(encoding="utf-8"))
    group = doc["navigation"]["tabs"][1]["groups"][0]
    assert group["pages"] == ["packages/client/overview", "packages/client/index"]

    manifest = json.loads((out / ".mdxgen-manifest.json").read_text(encoding="utf-8"))
    assert manifest["files"] == [
        "packages/client/components/classes/Model.mdx",
        "packages/client/index.mdx",
    ]


def test_generate_is_idempotent(tmp_path: Path, docs_json: Path) -> None:
    """Verify that a second run leaves every file byte-identical."""
    _write_config(tmp_path)
    _write_sources(tmp_path)

    assert _run(tmp_path) == EXIT_OK
    first = _snapshot(tmp_path)
    assert _run(tmp_path) == EXIT_OK
    assert _snapshot(tmp_path) == first


def test_generate_render_failure_writes_nothing(
    tmp_path: Path, docs_json: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Verify that a failure on a later entity leaves the docs tree untouched."""
    _write_config(tmp_path)
    _write_sources(tmp_path)
    before = docs_json.read_bytes()

    real_render = plan_module.render_fragment
    rendered: list[str] = []

    def fail_second(entity, resolve=None):
        if rendered:
            raise ValueError("cannot render")
        rendered.append(entity.name)
        return real_render(entity, resolve)

    monkeypatch.setattr(plan_module, "render_fragment", fail_second)

    assert _run(tmp_path) == EXIT_FAILED
    assert docs_json.read_bytes() == before
    assert not (tmp_path / "packages").exists()


def test_generate_removes_stale_pages(tmp_path: Path, docs_json: Path) -> None:
    """Verify that pages of removed symbols are deleted and redirected."""
    _write_config(tmp_path, output_mode="pages")
    _write_sources(tmp_path)
    assert _run(tmp_path) == EXIT_OK
    view_page = tmp_path / "packages" / "client" / "View.mdx"
    assert view_page.exists()

    (tmp_path / "src" / "view.js").unlink()
    assert _run(tmp_path) == EXIT_OK

    assert not view_page.exists()
    doc = json.loads(docs_json.read_text(encoding="utf-8"))
    pages = doc["navigation"]["tabs"][1]["groups"][0]["pages"]
    assert "packages/client/View" not in pages
    assert "packages/client/Model" in pages
    assert {"source": "/packages/client/View", "destination": "/packages/client/index"} in doc[
        "redirects"
    ]


def test_generate_no_nav(tmp_path: Path, docs_json: Path) -> None:
    """Verify that --no-nav leaves the navigation document alone."""
    _write_config(tmp_path)
    _write_sources(tmp_path)
    before = docs_json.read_bytes()
    assert _run(tmp_path, "--no-nav") == EXIT_OK
    assert docs_json.read_bytes() == before
    assert (tmp_path / "packages" / "client" / "index.mdx").exists()


def test_generate_missing_sources_fails(tmp_path: Path, docs_json: Path) -> None:
    """Verify that a package without sources exits with a failure and a report."""
    _write_config(tmp_path)
    report_path = tmp_path / "report.json"

    assert _run(tmp_path, "--report", str(report_path)) == EXIT_FAILED

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert len(report["errors"]) == 1
    assert "No source files found" in report["errors"][0]["message"]


@pytest.mark.parametrize(
    "argv",
    [
        ["--package", "vue"],
        [],
        ["--package", "client", "--config", "missing.yml"],
    ],
)
def test_generate_configuration_errors(
    tmp_path: Path, argv: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    """Verify that configuration problems exit with the configuration code."""
    assert main([*argv, "--docs-root", str(tmp_path)]) == EXIT_CONFIG
    assert "Configuration error" in capsys.readouterr().err


def test_generate_malformed_nav_writes_nothing(tmp_path: Path, docs_json: Path) -> None:
    """Verify that a broken docs.json fails the run before any page or manifest changes."""
    _write_config(tmp_path, output_mode="pages")
    _write_sources(tmp_path)
    assert _run(tmp_path) == EXIT_OK
    out = tmp_path / "packages" / "client"
    before = _snapshot(out)

    (tmp_path / "src" / "view.js").unlink()
    docs_json.write_text('{"navigation": ', encoding="utf-8")
    report_path = tmp_path / "report.json"
    assert _run(tmp_path, "--report", str(report_path)) == EXIT_FAILED

    assert _snapshot(out) == before
    manifest = json.loads((out / ".mdxgen-manifest.json").read_text(encoding="utf-8"))
    assert "packages/client/View.mdx" in manifest["files"]
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert "is not valid JSON" in report["errors"][0]["message"]

    # Once the document is fixed the stale page is still known and removed.
    docs_json.write_text(json.dumps({"navigation": {"tabs": []}}), encoding="utf-8")
    assert _run(tmp_path) == EXIT_OK
    assert not (out / "View.mdx").exists()


def test_generate_unreadable_source_is_skipped(tmp_path: Path, docs_json: Path) -> None:
    """Verify that a file that is not UTF-8 is reported and the rest still generated."""
    _write_config(tmp_path)
    _write_sources(tmp_path, view=False)
    (tmp_path / "src" / "broken.js").write_bytes(b"\xff")
    report_path = tmp_path / "report.json"

    assert _run(tmp_path, "--report", str(report_path)) == EXIT_OK

    report = json.loads(report_path.read_text(encoding="utf-8"))
    warnings = [w for w in report["warnings"] if w["file"].endswith("broken.js")]
    assert len(warnings) == 1
    assert "Cannot read source file" in warnings[0]["message"]
    fragment = tmp_path / "packages" / "client" / "components" / "classes" / "Model.mdx"
    assert "A replicated model." in fragment.read_text(encoding="utf-8")
