"""Logic for pairing doc comments with the declarations that follow them."""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from mdxgen.errors import ParseError
from mdxgen.parse_doc_comment import read_braced_type
from mdxgen.syntax_tree import SourceText, collapse, parse_source, uses_tsx

logger = logging.getLogger(__name__)

CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
FUNCTION_NODES = frozenset(
    {"function_declaration", "generator_function_declaration", "function_signature"}
)
FUNCTION_VALUES = frozenset({"function_expression", "function", "generator_function"})
VARIABLE_NODES = frozenset({"lexical_declaration", "variable_declaration"})
METHOD_NODES = frozenset({"method_definition", "method_signature", "abstract_method_signature"})
# Keyword children of a class member that are kept as modifiers.
MEMBER_MODIFIERS = frozenset(
    {"static", "async", "get", "set", "readonly", "abstract", "declare", "accessor"}
)
LITERAL_WORDS = frozenset({"undefined", "NaN", "Infinity"})
TYPEDEF_RE = re.compile(r"(?:^[ \t]*\*?|/\*\*)[ \t]*@(typedef|callback)\b(.*)$", re.MULTILINE)


@dataclass(frozen=True)
class SourceParam:
    """A parameter as written in the source signature."""

    name: str
    type: str | None = None
    default: str | None = None
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True)
class RawDocBlock:
    """A doc comment together with the declaration it documents."""

    comment: str
    line: int
    kind: str  # class | function | variable | interface | type | enum | member | typedef
    name: str
    signature: str = ""
    owner: str | None = None  # enclosing class for members
    modifiers: frozenset[str] = frozenset()
    member_kind: str | None = None  # method | property
    params: tuple[SourceParam, ...] = ()
    return_type: str | None = None
    value_type: str | None = None
    value: str | None = None
    value_kind: str | None = None  # function | arrow | class | call | alias | value
    extends: str | None = None


def _typedef_block(comment: str, line: int) -> RawDocBlock | None:
    match = TYPEDEF_RE.search(comment.removesuffix("*/"))
    if not match:
        return None
    try:
        type_text, rest = read_braced_type(match.group(2))
    except ParseError:
        type_text, rest = None, match.group(2)
    words = rest.split()
    if not words:
        return None
    return RawDocBlock(
        comment=comment,
        line=line,
        kind="typedef",
        name=words[0],
        value=type_text,
        value_kind=match.group(1),
    )


def _has_child(node: Node, kind: str) -> bool:
    return any(child.type == kind for child in node.children)


class _Reader(SourceText):
    """Walks one syntax tree and pairs doc comments with declarations."""

    def line(self, node: Node) -> int:
        return node.start_point[0] + 1

    def head(self, node: Node, end: int) -> str:
        """Return the collapsed text of ``node`` up to ``end``, decorators left out."""
        start = next(
            (c.start_byte for c in node.children if c.type != "decorator"), node.start_byte
        )
        return self.span(start, end)

    def params(self, node: Node | None) -> tuple[SourceParam, ...]:
        return tuple(SourceParam(**fields) for fields in self.param_fields(node))

    def doc(self, node: Node) -> Node | None:
        comment = self.doc_comment_node(node)
        if comment is None or TYPEDEF_RE.search(self.text(comment)):
            return None
        return comment

    def typedefs(self, comment: Node) -> Iterator[RawDocBlock]:
        block = _typedef_block(self.text(comment), self.line(comment))
        if block is not None:
            yield block

    def statements(self, root: Node) -> Iterator[RawDocBlock]:
        """Yield the blocks of top-level declarations and everything nested in them."""
        for child in root.named_children:
            if child.type == "comment":
                yield from self.typedefs(child)
                continue
            comment = self.doc(child)
            if comment is not None:
                block = self.declaration(child, comment)
                if block is not None:
                    yield block
                else:
                    logger.debug(
                        "Doc comment at line %d documents no declaration", self.line(comment)
                    )
            yield from self.nested(child)

    def nested(self, node: Node) -> Iterator[RawDocBlock]:
        """Yield class members and typedefs below ``node``.

        Other doc comments inside function bodies and object literals are
        not part of the API.
        """
        if node.type in CLASS_NODES:
            body = node.child_by_field_name("body")
            if body is not None:
                yield from self.members(body, self.class_name(node))
            return
        for child in node.named_children:
            if child.type == "comment":
                yield from self.typedefs(child)
            else:
                yield from self.nested(child)

    def members(self, body: Node, owner: str | None) -> Iterator[RawDocBlock]:
        for member in body.named_children:
            if member.type == "comment":
                yield from self.typedefs(member)
                continue
            comment = self.doc(member) if owner is not None else None
            if comment is not None:
                block = self.member(member, comment, owner)
                if block is not None:
                    yield block
                else:
                    logger.debug(
                        "Doc comment at line %d in %s documents no member",
                        self.line(comment),
                        owner,
                    )
            yield from self.nested(member)

    def class_name(self, node: Node) -> str | None:
        name = node.child_by_field_name("name")
        if name is not None:
            return self.text(name)
        parent = node.parent
        if parent is not None and parent.type == "variable_declarator":
            target = parent.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                return self.text(target)
        if parent is not None and parent.type == "export_statement":
            return "default"
        return None

    def extends(self, node: Node) -> str | None:
        for child in node.named_children:
            clauses = child.named_children if child.type == "class_heritage" else [child]
            for clause in clauses:
                if clause.type in {"extends_clause", "extends_type_clause"}:
                    return collapse(self.text(clause)).removeprefix("extends").strip() or None
        return None

    def declaration(
        self, node: Node, comment: Node, modifiers: frozenset[str] = frozenset()
    ) -> RawDocBlock | None:
        kind = node.type
        if kind == "export_statement":
            mods = {"export", "default"} if _has_child(node, "default") else {"export"}
            inner = node.child_by_field_name("declaration") or node.child_by_field_name("value")
            if inner is None:
                return None
            return self.declaration(inner, comment, modifiers | frozenset(mods))
        if kind == "ambient_declaration":
            inner = next((c for c in node.named_children if c.type != "comment"), None)
            if inner is None:
                return None
            return self.declaration(inner, comment, modifiers | {"declare"})

        base = {"comment": self.text(comment), "line": self.line(comment), "modifiers": modifiers}
        if kind in CLASS_NODES:
            return self._class(node, base)
        if kind in FUNCTION_NODES or kind in FUNCTION_VALUES:
            return self._function(node, base)
        if kind in VARIABLE_NODES:
            return self._variable(node, base)
        if kind in {"interface_declaration", "enum_declaration"}:
            return self._named_body(node, base)
        if kind == "type_alias_declaration":
            return self._type_alias(node, base)
        return None

    def _class(self, node: Node, base: dict) -> RawDocBlock | None:
        name = self.class_name(node)
        if name is None:
            return None
        body = node.child_by_field_name("body")
        return RawDocBlock(
            kind="class",
            name=name,
            signature=self.head(node, body.start_byte if body else node.end_byte),
            extends=self.extends(node),
            **base,
        )

    def _function(self, node: Node, base: dict) -> RawDocBlock | None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            name = self.text(name_node)
        elif "default" in base["modifiers"]:
            name = "default"
        else:
            return None
        modifiers = set(base["modifiers"])
        if _has_child(node, "async"):
            modifiers.add("async")
        if node.type.startswith("generator") or _has_child(node, "*"):
            modifiers.add("generator")
        parameters = node.child_by_field_name("parameters")
        return_type = node.child_by_field_name("return_type")
        end = return_type or parameters or name_node or node
        return RawDocBlock(
            kind="function",
            name=name,
            signature=self.head(node, end.end_byte),
            params=self.params(parameters),
            return_type=self.annotation(return_type),
            value_kind="function",
            **{**base, "modifiers": frozenset(modifiers)},
        )

    def value_kind(self, value: Node | None) -> str:
        if value is None:
            return "value"
        if value.type == "arrow_function":
            return "arrow"
        if value.type in FUNCTION_VALUES:
            return "function"
        if value.type == "class":
            return "class"
        if value.type == "call_expression":
            return "call"
        if value.type == "identifier" and self.text(value) not in LITERAL_WORDS:
            return "alias"
        return "value"

    def callable_parts(self, value: Node) -> tuple[tuple[SourceParam, ...], str | None]:
        """Return the parameters and return type of a function or arrow value."""
        single = value.child_by_field_name("parameter")
        if single is not None:
            return (SourceParam(self.text(single)),), None
        return (
            self.params(value.child_by_field_name("parameters")),
            self.annotation(value.child_by_field_name("return_type")),
        )

    def _variable(self, node: Node, base: dict) -> RawDocBlock | None:
        declarator = next((c for c in node.named_children if c.type == "variable_declarator"), None)
        if declarator is None:
            return None
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            return None  # destructuring
        keyword = node.child_by_field_name("kind")
        type_node = declarator.child_by_field_name("type")
        value = declarator.child_by_field_name("value")
        signature = self.span(declarator.start_byte, (type_node or name_node).end_byte)
        signature = f"{self.text(keyword) if keyword is not None else 'var'} {signature}"

        value_kind = self.value_kind(value)
        if value_kind == "class":
            return RawDocBlock(
                kind="class",
                name=self.text(name_node),
                signature=signature,
                extends=self.extends(value),
                **base,
            )
        params: tuple[SourceParam, ...] = ()
        return_type = None
        modifiers = set(base["modifiers"])
        if value_kind in {"arrow", "function"}:
            params, return_type = self.callable_parts(value)
            if _has_child(value, "async"):
                modifiers.add("async")
        return RawDocBlock(
            kind="variable",
            name=self.text(name_node),
            signature=signature,
            params=params,
            return_type=return_type,
            value_type=self.annotation(type_node),
            value=collapse(self.text(value)) if value is not None else None,
            value_kind=value_kind,
            **{**base, "modifiers": frozenset(modifiers)},
        )

    def _named_body(self, node: Node, base: dict) -> RawDocBlock | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        body = node.child_by_field_name("body")
        return RawDocBlock(
            kind="interface" if node.type == "interface_declaration" else "enum",
            name=self.text(name_node),
            signature=self.head(node, body.start_byte if body else node.end_byte),
            extends=self.extends(node),
            **base,
        )

    def _type_alias(self, node: Node, base: dict) -> RawDocBlock | None:
        name_node = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        if name_node is None or value is None:
            return None
        return RawDocBlock(
            kind="type",
            name=self.text(name_node),
            signature=self.head(node, value.start_byte).rstrip("= "),
            value=collapse(self.text(value)),
            **base,
        )

    def member(self, node: Node, comment: Node, owner: str) -> RawDocBlock | None:
        if node.type not in METHOD_NODES and node.type != "public_field_definition":
            return None
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = self.text(name_node)
        if name_node.type == "string":
            name = name[1:-1]

        modifiers: set[str] = set()
        for child in node.children:
            if child.type in MEMBER_MODIFIERS:
                modifiers.add(child.type)
            elif child.type == "accessibility_modifier":
                modifiers.add(self.text(child))
            elif child.type == "override_modifier":
                modifiers.add("override")
            elif child.type == "*":
                modifiers.add("generator")
            elif child.type == "?":
                modifiers.add("optional")
        if name.startswith("#"):
            modifiers.add("private")

        base = {
            "comment": self.text(comment),
            "line": self.line(comment),
            "name": name,
            "owner": owner,
            "kind": "member",
        }
        if node.type in METHOD_NODES:
            parameters = node.child_by_field_name("parameters")
            return_type = node.child_by_field_name("return_type")
            end = return_type or parameters or name_node
            return RawDocBlock(
                member_kind="method",
                modifiers=frozenset(modifiers),
                signature=self.head(node, end.end_byte),
                params=self.params(parameters),
                return_type=self.annotation(return_type),
                **base,
            )

        type_node = node.child_by_field_name("type")
        value = node.child_by_field_name("value")
        signature = self.head(node, (type_node or name_node).end_byte)
        value_kind = self.value_kind(value)
        if value_kind in {"arrow", "function"}:
            params, return_type = self.callable_parts(value)
            if _has_child(value, "async"):
                modifiers.add("async")
            return RawDocBlock(
                member_kind="method",
                modifiers=frozenset(modifiers),
                signature=signature,
                params=params,
                return_type=return_type,
                value_kind=value_kind,
                **base,
            )
        return RawDocBlock(
            member_kind="property",
            modifiers=frozenset(modifiers),
            signature=signature,
            value_type=self.annotation(type_node),
            value=collapse(self.text(value)) if value is not None else None,
            **base,
        )


def iter_doc_blocks(text: str, path: Path | None = None) -> Iterator[RawDocBlock]:
    """Yield each doc comment that documents a declaration, in source order.

    The source is parsed with the tree-sitter TSX grammar (TypeScript for
    ``.ts`` files), which also reads JavaScript and JSX. Ordinary comments
    between a doc comment and its declaration are skipped. A doc comment
    followed by another doc comment or by a statement that is not a
    declaration is not attached to anything. Doc comments nested in function
    bodies or object literals are ignored; inside a class body they document
    members. Stand-alone ``@typedef`` and ``@callback`` comments yield type
    blocks wherever they appear.
    """
    tree, source = parse_source(text, tsx=uses_tsx(path), path=path)
    yield from _Reader(source).statements(tree.root_node)
