"""Tests for MDX escaping and inline formatting."""

import pytest

from mdxgen.header_slug import header_slug
from mdxgen.mdx_escape import (
    code_block,
    detect_language,
    escape_attr,
    escape_prose,
    format_description,
    format_inline,
    inline_code,
)


def _resolve(target: str) -> str | None:
    return "/packages/client/model#model" if target == "Model" else None


def test_escape_prose() -> None:
    """Verify that JSX and expression characters are neutralized."""
    assert escape_prose("a < b && {c}") == "a &lt; b &amp;&amp; &#123;c&#125;"


def test_escape_attr() -> None:
    """Verify that attribute values are collapsed and quoted safely."""
    assert escape_attr('Say "hi" {x}\n  now') == "Say &quot;hi&quot; &#123;x&#125; now"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("plain", "`plain`"),
        ("a`b", "``a`b``"),
        ("`x`", "`` `x` ``"),
    ],
)
def test_inline_code(text: str, expected: str) -> None:
    """Verify that inline code fences outgrow backticks in the content."""
    assert inline_code(text) == expected


def test_code_block_fence_outgrows_content() -> None:
    """Verify that code containing a fence cannot close the block."""
    assert code_block("js", "const a = ```;\n") == "````js\nconst a = ```;\n````"
    assert code_block("js", "x", title="My  title") == "```js My title\nx\n```"


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("return <View model={m} />;", "jsx"),
        ("let a: string = '';", "typescript"),
        ("a + b;", "javascript"),
    ],
)
def test_detect_language(code: str, expected: str) -> None:
    """Verify example language detection."""
    assert detect_language(code) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Use `a<b>` and <T>", "Use `a<b>` and &lt;T&gt;"),
        ("a ` b", "a \\` b"),
        ("See {@link Model}.", "See [Model](/packages/client/model#model)."),
        ("{@link Model|the model}", "[the model](/packages/client/model#model)"),
        ("{@link Nope}", "`Nope`"),
        ("[label]{@link Model}", "[label](/packages/client/model#model)"),
        ("{@tutorial intro}", "[intro](/tutorials/intro)"),
        ("{@link https://x.io docs}", "[docs](https://x.io)"),
    ],
)
def test_format_inline(text: str, expected: str) -> None:
    """Verify code spans, links and tutorials in prose."""
    assert format_inline(text, _resolve) == expected


def test_format_description_fenced_code_verbatim() -> None:
    """Verify that fenced code is kept verbatim while prose is escaped."""
    text = "Para {x}\n\n```js\nif (a < b) {}\n```\nafter"
    assert format_description(text) == "Para &#123;x&#125;\n\n```js\nif (a < b) {}\n```\nafter"


def test_format_description_indented_code() -> None:
    """Verify that indented code becomes a fenced block."""
    text = "Example:\n\n    const a = 1;\n    a < 2;\n\nDone."
    assert format_description(text) == (
        "Example:\n\n```javascript\nconst a = 1;\na < 2;\n```\n\nDone."
    )


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (
            "Saves a report.\nexport the result to share it with peers.",
            "Saves a report.\n&#101;xport the result to share it with peers.",
        ),
        ("import data first", "&#105;mport data first"),
        ("  export", "  &#101;xport"),
        ("exported values and imports", "exported values and imports"),
        ("Then export it.", "Then export it."),
    ],
)
def test_format_description_esm_keywords(text: str, expected: str) -> None:
    """Verify that prose lines starting with import or export are not read as ESM."""
    assert format_description(text) == expected


def test_format_description_keeps_esm_keywords_in_code() -> None:
    """Verify that code blocks keep import and export lines verbatim."""
    text = "```js\nimport a from 'a';\nexport default a;\n```"
    assert format_description(text) == "```js\nimport a from 'a';\nexport default a;\n```"


def test_header_slug() -> None:
    """Verify anchor slugs."""
    assert header_slug("Model", "#subscribe") == "model-subscribe"
    assert header_slug("Session.join (deprecated)") == "session-join-deprecated"
    assert header_slug("") == "section"
