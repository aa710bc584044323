"""Tests for laying out fragments and index pages."""

from pathlib import Path

import pytest
import yaml

from mdxgen.doc_tags import DocComment
from mdxgen.entity import DocumentedEntity, Member
from mdxgen.errors import RenderError
from mdxgen.plan_outputs import frontmatter, plan_outputs


def _entity(name: str, kind: str, description: str = "", **fields) -> DocumentedEntity:
    return DocumentedEntity(
        name=name,
        kind=kind,
        comment=DocComment(description),
        source_file=Path("model.js"),
        line=fields.pop("line", 3),
        **fields,
    )


def _entities() -> list[DocumentedEntity]:
    return [
        _entity("join", "function", "Join. See {@link Model#publish}."),
        _entity("Model", "class", "A model.", members=(Member("publish", "method"),)),
        _entity("useThing", "hook", "A hook."),
    ]


def test_frontmatter_is_valid_yaml() -> None:
    """Verify that titles with YAML syntax are quoted."""
    text = frontmatter('Model: "x"', "Uses #hash and: colon")
    assert text.startswith("---\n")
    assert text.endswith("---\n")
    assert yaml.safe_load(text.strip("-\n")) == {
        "title": 'Model: "x"',
        "description": "Uses #hash and: colon",
    }


def test_plan_outputs_pages_mode(make_package) -> None:
    """Verify one page per entity, grouped by category, with the index first."""
    plan = plan_outputs(_entities(), make_package(output_mode="pages"))

    assert plan.package == "client"
    assert plan.index_page == "packages/client/index"
    assert [f.path for f in plan.files] == [
        "packages/client/index.mdx",
        "packages/client/Model.mdx",
        "packages/client/useThing.mdx",
        "packages/client/join.mdx",
    ]
    assert plan.nav_pages == (
        "packages/client/index",
        "packages/client/Model",
        "packages/client/useThing",
        "packages/client/join",
    )
    assert plan.entity_count == 3

    model = plan.files[1]
    assert model.entity == "Model"
    assert model.category == "class"
    assert model.content.startswith(
        '---\ntitle: Model\ndescription: A model.\n---\n\n<a id="model"></a>\n'
    )

    index = plan.files[0].content
    assert index.startswith("---\ntitle: Multisynq Client\n")
    assert "Install with `npm install @multisynq/client`." in index
    assert '<Card title="Model" icon="cube" href="/packages/client/Model">' in index
    assert index.index("## Classes") < index.index("## Hooks") < index.index("## Functions")


def test_plan_outputs_pages_links_between_pages(make_package) -> None:
    """Verify that links point to the page and anchor of the target member."""
    plan = plan_outputs(_entities(), make_package(output_mode="pages"))
    join = next(f for f in plan.files if f.entity == "join")
    assert "[Model#publish](/packages/client/Model#model-publish)" in join.content


def test_plan_outputs_unique_slugs(make_package) -> None:
    """Verify that case-insensitive collisions and the index name get suffixes."""
    entities = [
        _entity("Model", "class"),
        _entity("model", "class"),
        _entity("index", "function"),
    ]
    plan = plan_outputs(entities, make_package(output_mode="pages"))
    assert [f.path for f in plan.files[1:]] == [
        "packages/client/Model.mdx",
        "packages/client/model-2.mdx",
        "packages/client/index-2.mdx",
    ]


def test_plan_outputs_imports_mode(make_package) -> None:
    """Verify fragments under components/ and one aggregating index page."""
    plan = plan_outputs(_entities(), make_package(output_mode="imports"))

    assert [f.path for f in plan.files] == [
        "packages/client/index.mdx",
        "packages/client/components/classes/Model.mdx",
        "packages/client/components/hooks/useThing.mdx",
        "packages/client/components/functions/join.mdx",
    ]
    assert plan.nav_pages == ("packages/client/index",)
    for fragment in plan.files[1:]:
        assert not fragment.content.startswith("---")
        assert "import " not in fragment.content

    index = plan.files[0].content
    assert 'import ClassesModel from "/packages/client/components/classes/Model.mdx";' in index
    assert index.index("import ") > index.index("---\n", 4)
    assert index.index("import ") < index.index("Install with")
    assert '<Tab title="Classes">\n\n<ClassesModel />\n\n</Tab>' in index
    assert index.rstrip().endswith("</Tabs>")

    join = plan.files[3].content
    assert "[Model#publish](/packages/client/index#model-publish)" in join


def test_plan_outputs_identifier_collisions(make_package) -> None:
    """Verify that colliding component identifiers get numeric suffixes."""
    entities = [_entity("a_b", "function"), _entity("aB", "function")]
    index = plan_outputs(entities, make_package(output_mode="imports")).files[0].content
    assert "import FunctionsAB from" in index
    assert "import FunctionsAB2 from" in index


def test_plan_outputs_render_failure(make_package, monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify that a failing entity aborts the plan with its location."""

    def boom(entity, resolve=None):
        raise ValueError("boom")

    monkeypatch.setattr("mdxgen.plan_outputs.render_fragment", boom)
    with pytest.raises(RenderError, match=r"Cannot render Model \(model\.js:3\): boom"):
        plan_outputs(_entities(), make_package())
