"""Tests for pairing doc comments with declarations."""

from pathlib import Path

from mdxgen.iter_doc_blocks import SourceParam, iter_doc_blocks

CLASS_SOURCE = """
import { Base } from "./base";

/**
 * A replicated model.
 */
export class Model extends Base {
    /** Create the model. */
    init(options, persisted) {
        /** not a member: inside a method body */
        const x = { a: 1 };
    }

    /** Publish an event. */
    publish(scope, event, data = null) {}

    /** The id. */
    get id() { return this._id; }

    /** A counter. */
    static count = 0;

    /** Async work. */
    async fetch(...urls) {}
}
"""


def test_iter_doc_blocks_class_and_members() -> None:
    """Verify a class and its members in declaration order."""
    blocks = list(iter_doc_blocks(CLASS_SOURCE))
    assert [(b.kind, b.name, b.owner) for b in blocks] == [
        ("class", "Model", None),
        ("member", "init", "Model"),
        ("member", "publish", "Model"),
        ("member", "id", "Model"),
        ("member", "count", "Model"),
        ("member", "fetch", "Model"),
    ]
    model = blocks[0]
    assert model.extends == "Base"
    assert model.signature == "class Model extends Base"
    assert model.line == 4

    publish = blocks[2]
    assert publish.member_kind == "method"
    assert publish.params == (
        SourceParam("scope"),
        SourceParam("event"),
        SourceParam("data", default="null", optional=True),
    )
    assert publish.signature == "publish(scope, event, data = null)"

    assert blocks[3].modifiers == frozenset({"get"})
    assert blocks[4].member_kind == "property"
    assert blocks[4].modifiers == frozenset({"static"})
    assert blocks[4].value == "0"
    assert blocks[5].modifiers == frozenset({"async"})
    assert blocks[5].params == (SourceParam("urls", rest=True),)


def test_iter_doc_blocks_blank_lines_and_comments_between() -> None:
    """Verify that blank lines and ordinary comments do not break association."""
    source = "/** Adds. */\n\n\n// helper\n/* more */\nfunction add(a, b) { return a + b; }\n"
    blocks = list(iter_doc_blocks(source))
    assert [(b.kind, b.name) for b in blocks] == [("function", "add")]
    assert [p.name for p in blocks[0].params] == ["a", "b"]


def test_iter_doc_blocks_no_misassociation() -> None:
    """Verify that a doc comment before a non-declaration attaches to nothing."""
    source = (
        "/** Orphan. */\n"
        "doSomething();\n"
        "function undocumented() {}\n"
        "/** First. */\n"
        "/** Second. */\n"
        "function documented() {}\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.name, b.comment) for b in blocks] == [("documented", "/** Second. */")]


def test_iter_doc_blocks_ignores_function_bodies() -> None:
    """Verify that doc comments inside function bodies are ignored."""
    source = (
        "function outer() {\n"
        "  /** Inner. */\n"
        "  function inner() {}\n"
        "}\n"
        "/** After. */\n"
        "const after = 1;\n"
    )
    assert [b.name for b in iter_doc_blocks(source)] == ["after"]


def test_iter_doc_blocks_strings_with_braces() -> None:
    """Verify that braces inside literals do not confuse class context."""
    source = (
        "class A {\n"
        "  /** m */\n"
        "  m() { const s = '}'; const r = /{/; const t = `${'}'}`; }\n"
        "  /** n */\n"
        "  n() {}\n"
        "}\n"
        "/** top */\n"
        "function top() {}\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.name, b.owner) for b in blocks] == [("m", "A"), ("n", "A"), ("top", None)]


def test_iter_doc_blocks_variables() -> None:
    """Verify arrow functions, aliases, calls and values are classified."""
    source = (
        "/** Arrow. */\n"
        "export const useThing = (key: string, initial?: number): Thing => {};\n"
        "/** Alias. */\n"
        "export const useAlias = useThing;\n"
        "/** Created. */\n"
        "export const Provider = createProvider(config);\n"
        "/** Value. */\n"
        "export const LIMIT: number = 10;\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.name, b.value_kind) for b in blocks] == [
        ("useThing", "arrow"),
        ("useAlias", "alias"),
        ("Provider", "call"),
        ("LIMIT", "value"),
    ]
    arrow = blocks[0]
    assert arrow.params == (
        SourceParam("key", type="string"),
        SourceParam("initial", type="number", optional=True),
    )
    assert arrow.return_type == "Thing"
    assert blocks[1].value == "useThing"
    assert blocks[3].value_type == "number"
    assert blocks[3].value == "10"


def test_iter_doc_blocks_typescript_declarations() -> None:
    """Verify interfaces, type aliases and enums."""
    source = (
        "/** Options. */\n"
        "export interface Options extends Base<T> {\n"
        "  /** The id. */\n"
        "  id: string;\n"
        "}\n"
        "/** A mode. */\n"
        "export type Mode = 'a' | 'b';\n"
        "/** Colors. */\n"
        "export enum Color { Red, Green }\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.kind, b.name) for b in blocks] == [
        ("interface", "Options"),
        ("type", "Mode"),
        ("enum", "Color"),
    ]
    assert blocks[0].extends == "Base<T>"
    assert blocks[1].value == "'a' | 'b'"


def test_iter_doc_blocks_typedef() -> None:
    """Verify that stand-alone typedef and callback comments yield blocks."""
    source = (
        "/**\n"
        " * Session options.\n"
        " * @typedef {Object} SessionOptions\n"
        " * @property {string} name\n"
        " */\n"
        "/** @callback Handler */\n"
        "let unrelated = 1;\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.kind, b.name, b.value, b.value_kind) for b in blocks] == [
        ("typedef", "SessionOptions", "Object", "typedef"),
        ("typedef", "Handler", None, "callback"),
    ]


def test_iter_doc_blocks_class_expression_and_private_members() -> None:
    """Verify `const X = class` and `#private` members."""
    source = (
        "/** Expr. */\n"
        "const Widget = class extends Base {\n"
        "  /** Secret. */\n"
        "  #secret = 1;\n"
        "};\n"
    )
    blocks = list(iter_doc_blocks(source))
    assert [(b.kind, b.name) for b in blocks] == [("class", "Widget"), ("member", "#secret")]
    assert "private" in blocks[1].modifiers


def test_iter_doc_blocks_parameter_forms() -> None:
    """Verify accessibility, default, this, destructured and rest parameters."""
    source = (
        "class Store {\n"
        "  /** Make. */\n"
        "  constructor(private readonly name: string, opts = {a: 1, b: 2}) {}\n"
        "  /** Each. */\n"
        "  each(this: Window, { a, b }: Props, cb = (x) => x >= 1, ...rest: T[]) {}\n"
        "}\n"
    )
    ctor, each = iter_doc_blocks(source, Path("store.ts"))
    assert ctor.params == (
        SourceParam("name", type="string"),
        SourceParam("opts", default="{a: 1, b: 2}", optional=True),
    )
    assert each.params == (
        SourceParam("{ a, b }", type="Props"),
        SourceParam("cb", default="(x) => x >= 1", optional=True),
        SourceParam("rest", type="T[]", rest=True),
    )


GREETING_SOURCE = """
import React from "react";

/** Greets the visitor. */
export class Greeting extends React.Component {
  /** Render the greeting. */
  render() {
    return <p>Don't forget {this.props.items.map((item) => <b key={item}>{item}</b>)}</p>;
  }

  /** Reset the counter. */
  reset() {
    this.setState({ count: 0 });
  }
}

/** A helper. */
export function helper() {}
"""


def test_iter_doc_blocks_jsx_text() -> None:
    """Verify that quotes and braces in JSX text do not hide later members."""
    blocks = list(iter_doc_blocks(GREETING_SOURCE, Path("Greeting.jsx")))
    assert [(b.owner, b.name) for b in blocks] == [
        (None, "Greeting"),
        ("Greeting", "render"),
        ("Greeting", "reset"),
        (None, "helper"),
    ]
    assert blocks[0].extends == "React.Component"
    assert blocks[2].comment == "/** Reset the counter. */"


def test_iter_doc_blocks_decorators_and_default_export() -> None:
    """Verify decorated declarations and anonymous default exports."""
    source = (
        "/** Injected. */\n"
        "@injectable()\n"
        "export class Service {\n"
        "  /** Load. */\n"
        "  @memoize\n"
        "  load(): Promise<void> {}\n"
        "}\n"
        "/** Fallback. */\n"
        "export default function () {}\n"
    )
    blocks = list(iter_doc_blocks(source, Path("service.ts")))
    assert [(b.kind, b.name, b.owner) for b in blocks] == [
        ("class", "Service", None),
        ("member", "load", "Service"),
        ("function", "default", None),
    ]
    assert blocks[0].signature == "class Service"
    assert blocks[1].signature == "load(): Promise<void>"
    assert blocks[1].return_type == "Promise<void>"
    assert blocks[2].modifiers == frozenset({"export", "default"})
