"""Shared tree-sitter helpers for reading JavaScript and TypeScript sources."""

import logging
from functools import cache
from pathlib import Path

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())
# The TSX grammar also reads plain JavaScript and JSX.
TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

PARAMETER_NODES = frozenset({"required_parameter", "optional_parameter"})


def collapse(text: str) -> str:
    return " ".join(text.split())


def uses_tsx(path: Path | None) -> bool:
    """Return True unless ``path`` is a ``.ts`` file, where ``<T>x`` casts are legal."""
    return path is None or path.suffix != ".ts"


@cache
def _parser(tsx: bool) -> Parser:
    return Parser(TSX_LANGUAGE if tsx else TS_LANGUAGE)


def parse_source(text: str, *, tsx: bool = True, path: Path | None = None) -> tuple[Tree, bytes]:
    """Parse source text and return the tree with the bytes it was built from.

    tree-sitter recovers from syntax errors, so a broken file still yields
    every declaration outside the damaged region.
    """
    source = text.encode("utf-8")
    tree = _parser(tsx).parse(source)
    if tree.root_node.has_error:
        logger.warning(
            "Syntax errors while parsing %s; declarations near them may be missing",
            path or "<text>",
        )
    return tree, source


class SourceText:
    """Reads text, annotations and parameter lists out of one parsed source."""

    def __init__(self, source: bytes) -> None:
        self.source = source

    def text(self, node: Node | None) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def span(self, start: int, end: int) -> str:
        """Return the collapsed text between two byte offsets."""
        if end <= start:
            return ""
        return collapse(self.source[start:end].decode("utf-8", errors="replace"))

    def annotation(self, node: Node | None) -> str | None:
        """Return the type of a ``: T`` annotation node without the colon."""
        if node is None:
            return None
        text = collapse(self.text(node))
        return text[1:].strip() if text.startswith(":") else text or None

    def doc_comment_node(self, node: Node) -> Node | None:
        """Return the ``/** */`` comment documenting ``node``, if any.

        Ordinary comments and decorators may sit in between; any other
        sibling breaks the association.
        """
        prev = node.prev_named_sibling
        while prev is not None and prev.type in {"comment", "decorator"}:
            if prev.type == "comment" and self.text(prev).startswith("/**"):
                return prev
            prev = prev.prev_named_sibling
        return None

    def type_parameters(self, node: Node) -> tuple[str, ...]:
        tp = node.child_by_field_name("type_parameters")
        if tp is None:
            return ()
        return tuple(collapse(self.text(c)) for c in tp.named_children)

    def param_fields(self, node: Node | None) -> list[dict]:
        """Return name, type, optional, default and rest of each formal parameter.

        ``this`` parameters are left out; destructured patterns keep their
        source text as the name.
        """
        if node is None:
            return []
        fields = []
        for child in node.named_children:
            if child.type not in PARAMETER_NODES:
                continue
            pattern = child.child_by_field_name("pattern")
            if pattern is None or pattern.type == "this":
                continue
            rest = pattern.type == "rest_pattern"
            name = collapse(self.text(pattern))
            if rest:
                name = name.removeprefix("...").strip()
            value = child.child_by_field_name("value")
            fields.append(
                {
                    "name": name,
                    "type": self.annotation(child.child_by_field_name("type")),
                    "optional": child.type == "optional_parameter" or value is not None,
                    "default": collapse(self.text(value)) if value is not None else None,
                    "rest": rest,
                }
            )
        return fields
