"""Type resolution from TypeScript sources and declaration files via tree-sitter."""

import logging
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from mdxgen.syntax_tree import SourceText, collapse, parse_source

logger = logging.getLogger(__name__)

WRAPPER_NODES = frozenset(
    {"export_statement", "ambient_declaration", "expression_statement", "statement_block"}
)
MODULE_NODES = frozenset({"internal_module", "module"})
CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration"})
FUNCTION_NODES = frozenset(
    {"function_declaration", "function_signature", "generator_function_declaration"}
)
METHOD_NODES = frozenset({"method_definition", "method_signature", "abstract_method_signature"})
FIELD_NODES = frozenset({"public_field_definition", "property_signature"})
FUNCTION_VALUE_TYPES = frozenset({"arrow_function", "function_expression", "function"})


@dataclass(frozen=True)
class ResolvedParam:
    """A parameter as declared in TypeScript."""

    name: str
    type: str | None = None
    optional: bool = False
    default: str | None = None
    rest: bool = False


@dataclass(frozen=True)
class ResolvedSymbol:
    """Type information for one declared symbol, keyed by its qualified name."""

    name: str
    # class, interface, function, constructor, method, property, type, enum or constant
    kind: str
    params: tuple[ResolvedParam, ...] = ()
    return_type: str | None = None
    value_type: str | None = None
    type_parameters: tuple[str, ...] = ()
    extends: tuple[str, ...] = ()
    implements: tuple[str, ...] = ()
    members: tuple[str, ...] = ()
    variants: tuple[str, ...] = ()
    optional: bool = False
    is_static: bool = False
    accessor: str | None = None
    doc: str | None = None
    source_file: Path | None = None
    line: int = 0


def _split_heritage(text: str, keyword: str) -> tuple[str, ...]:
    text = collapse(text)
    if text.startswith(keyword):
        text = text[len(keyword) :]
    parts = []
    depth = 0
    current = ""
    for ch in text:
        if ch in "<({[":
            depth += 1
        elif ch in ">)}]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        parts.append(current.strip())
    return tuple(parts)


class _Collector(SourceText):
    """Walks one syntax tree and records the symbols it declares."""

    def __init__(self, source: bytes, path: Path | None) -> None:
        super().__init__(source)
        self.path = path
        self.symbols: dict[str, ResolvedSymbol] = {}

    def doc_comment(self, node: Node, inherited: str | None = None) -> str | None:
        comment = self.doc_comment_node(node)
        return self.text(comment) if comment is not None else inherited

    def add(self, symbol: ResolvedSymbol) -> None:
        # Overloads: the first declaration wins.
        if symbol.name not in self.symbols:
            self.symbols[symbol.name] = symbol

    def line(self, node: Node) -> int:
        return node.start_point[0] + 1

    def params(self, node: Node | None) -> tuple[ResolvedParam, ...]:
        return tuple(ResolvedParam(**fields) for fields in self.param_fields(node))

    def walk(self, node: Node, inherited_doc: str | None = None) -> None:
        for child in node.named_children:
            doc = self.doc_comment(child, None)
            kind = child.type
            if kind in WRAPPER_NODES:
                self.walk(child, None if kind == "statement_block" else doc or inherited_doc)
            elif kind in MODULE_NODES:
                body = child.child_by_field_name("body")
                if body is not None:
                    self.walk(body)
            elif kind in CLASS_NODES:
                self.collect_class(child, doc or inherited_doc)
            elif kind == "interface_declaration":
                self.collect_interface(child, doc or inherited_doc)
            elif kind in FUNCTION_NODES:
                self.collect_function(child, doc or inherited_doc)
            elif kind == "type_alias_declaration":
                self.collect_type_alias(child, doc or inherited_doc)
            elif kind == "enum_declaration":
                self.collect_enum(child, doc or inherited_doc)
            elif kind in {"lexical_declaration", "variable_declaration"}:
                self.collect_variables(child, doc or inherited_doc)

    def collect_class(self, node: Node, doc: str | None) -> None:
        name = self.text(node.child_by_field_name("name"))
        if not name:
            return
        extends: tuple[str, ...] = ()
        implements: tuple[str, ...] = ()
        for child in node.named_children:
            if child.type != "class_heritage":
                continue
            for clause in child.named_children:
                if clause.type == "extends_clause":
                    extends = _split_heritage(self.text(clause), "extends")
                elif clause.type == "implements_clause":
                    implements = _split_heritage(self.text(clause), "implements")

        members = self.collect_members(name, node.child_by_field_name("body"))
        self.add(
            ResolvedSymbol(
                name=name,
                kind="class",
                type_parameters=self.type_parameters(node),
                extends=extends,
                implements=implements,
                members=members,
                doc=doc,
                source_file=self.path,
                line=self.line(node),
            )
        )

    def collect_interface(self, node: Node, doc: str | None) -> None:
        name = self.text(node.child_by_field_name("name"))
        if not name:
            return
        extends: tuple[str, ...] = ()
        for child in node.named_children:
            if child.type == "extends_type_clause":
                extends = _split_heritage(self.text(child), "extends")
        members = self.collect_members(name, node.child_by_field_name("body"))
        self.add(
            ResolvedSymbol(
                name=name,
                kind="interface",
                type_parameters=self.type_parameters(node),
                extends=extends,
                members=members,
                doc=doc,
                source_file=self.path,
                line=self.line(node),
            )
        )

    def collect_members(self, owner: str, body: Node | None) -> tuple[str, ...]:
        if body is None:
            return ()
        names = []
        for member in body.named_children:
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            name = self.text(name_node)
            tokens = {c.type for c in member.children}
            doc = self.doc_comment(member)
            if member.type in METHOD_NODES:
                accessor = "get" if "get" in tokens else "set" if "set" in tokens else None
                params = self.params(member.child_by_field_name("parameters"))
                return_type = self.annotation(member.child_by_field_name("return_type"))
                if accessor:
                    kind = "property"
                    value_type = return_type if accessor == "get" else (
                        params[0].type if params else None
                    )
                else:
                    kind = "constructor" if name == "constructor" else "method"
                    value_type = None
                symbol = ResolvedSymbol(
                    name=f"{owner}.{name}",
                    kind=kind,
                    params=() if accessor else params,
                    return_type=None if accessor else return_type,
                    value_type=value_type,
                    type_parameters=self.type_parameters(member),
                    optional="?" in tokens,
                    is_static="static" in tokens,
                    accessor=accessor,
                    doc=doc,
                    source_file=self.path,
                    line=self.line(member),
                )
            elif member.type in FIELD_NODES:
                symbol = ResolvedSymbol(
                    name=f"{owner}.{name}",
                    kind="property",
                    value_type=self.annotation(member.child_by_field_name("type")),
                    optional="?" in tokens,
                    is_static="static" in tokens,
                    doc=doc,
                    source_file=self.path,
                    line=self.line(member),
                )
            else:
                continue
            if name not in names:
                names.append(name)
            self.add(symbol)
        return tuple(names)

    def collect_function(self, node: Node, doc: str | None) -> None:
        name = self.text(node.child_by_field_name("name"))
        if not name:
            return
        self.add(
            ResolvedSymbol(
                name=name,
                kind="function",
                params=self.params(node.child_by_field_name("parameters")),
                return_type=self.annotation(node.child_by_field_name("return_type")),
                type_parameters=self.type_parameters(node),
                doc=doc,
                source_file=self.path,
                line=self.line(node),
            )
        )

    def flatten(self, node: Node, kind: str) -> list[str]:
        if node.type == kind:
            out = []
            for child in node.named_children:
                out.extend(self.flatten(child, kind))
            return out
        return [collapse(self.text(node))]

    def collect_type_alias(self, node: Node, doc: str | None) -> None:
        name = self.text(node.child_by_field_name("name"))
        value = node.child_by_field_name("value")
        if not name or value is None:
            return
        variants: list[str] = []
        if value.type in {"union_type", "intersection_type"}:
            variants = self.flatten(value, value.type)
        self.add(
            ResolvedSymbol(
                name=name,
                kind="type",
                value_type=collapse(self.text(value)),
                type_parameters=self.type_parameters(node),
                variants=tuple(variants),
                doc=doc,
                source_file=self.path,
                line=self.line(node),
            )
        )

    def collect_enum(self, node: Node, doc: str | None) -> None:
        name = self.text(node.child_by_field_name("name"))
        body = node.child_by_field_name("body")
        if not name:
            return
        variants = []
        for child in body.named_children if body is not None else ():
            if child.type == "enum_assignment":
                key = self.text(child.child_by_field_name("name"))
                value = self.text(child.child_by_field_name("value"))
                variants.append(f"{key} = {collapse(value)}" if value else key)
            elif child.type in {"property_identifier", "string"}:
                variants.append(self.text(child))
        self.add(
            ResolvedSymbol(
                name=name,
                kind="enum",
                variants=tuple(variants),
                doc=doc,
                source_file=self.path,
                line=self.line(node),
            )
        )

    def collect_variables(self, node: Node, doc: str | None) -> None:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = self.text(name_node)
            value = declarator.child_by_field_name("value")
            value_type = self.annotation(declarator.child_by_field_name("type"))
            if value is not None and value.type in FUNCTION_VALUE_TYPES:
                self.add(
                    ResolvedSymbol(
                        name=name,
                        kind="function",
                        params=self.params(value.child_by_field_name("parameters")),
                        return_type=self.annotation(value.child_by_field_name("return_type")),
                        type_parameters=self.type_parameters(value),
                        doc=doc,
                        source_file=self.path,
                        line=self.line(declarator),
                    )
                )
                continue
            self.add(
                ResolvedSymbol(
                    name=name,
                    kind="constant",
                    value_type=value_type,
                    doc=doc,
                    source_file=self.path,
                    line=self.line(declarator),
                )
            )


def resolve_source(
    text: str, *, tsx: bool = False, path: Path | None = None
) -> dict[str, ResolvedSymbol]:
    """Resolve the declarations of TypeScript source text."""
    tree, source = parse_source(text, tsx=tsx, path=path)
    collector = _Collector(source, path)
    collector.walk(tree.root_node)
    logger.debug("Resolved %d symbols from %s", len(collector.symbols), path or "<text>")
    return collector.symbols


def resolve_declarations(path: Path) -> dict[str, ResolvedSymbol]:
    """Resolve the declarations of a ``.d.ts``, ``.ts`` or ``.tsx`` file.

    Keys are qualified names: ``Class``, ``Class.member``, ``function``,
    ``Interface``, ``Interface.member``, ``Enum`` and ``Alias``.
    """
    text = path.read_text(encoding="utf-8")
    return resolve_source(text, tsx=path.suffix == ".tsx", path=path)
