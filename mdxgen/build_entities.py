"""Logic for turning raw doc blocks into documented entities."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from mdxgen.doc_tags import DocComment
from mdxgen.entity import DocumentedEntity, Member, Parameter, ReturnDescriptor
from mdxgen.iter_doc_blocks import RawDocBlock
from mdxgen.merge_params import merge_params, params_from_tags
from mdxgen.parse_doc_comment import parse_doc_comment
from mdxgen.run_report import RunReport

logger = logging.getLogger(__name__)

HIDDEN_TAGS = frozenset({"ignore", "private", "internal"})
COMPONENT_SUFFIXES = (".jsx", ".tsx")


def is_hook_name(name: str) -> bool:
    """Return True for React hook names such as ``useStateTogether``."""
    return name.startswith("use") and len(name) > 3 and not name[3].islower()


def is_component_name(name: str) -> bool:
    return name[:1].isupper()


def _is_hidden(comment: DocComment) -> bool:
    return any(comment.has_extra(tag) for tag in HIDDEN_TAGS)


def _returns(comment: DocComment, declared_type: str | None) -> ReturnDescriptor | None:
    tag = comment.returns
    if tag is not None:
        return ReturnDescriptor(comment_type=tag.type or declared_type, description=tag.description)
    if declared_type:
        return ReturnDescriptor(comment_type=declared_type)
    return None


def _split_list(text: str | None) -> tuple[str, ...]:
    if not text:
        return ()
    return tuple(part.strip() for part in text.split(",") if part.strip())


def _entity_kind(block: RawDocBlock, comment: DocComment, path: Path) -> str:
    if block.kind in {"class", "interface", "enum"}:
        return block.kind
    if block.kind in {"type", "typedef"}:
        return "type"
    if comment.has_extra("hook") or is_hook_name(block.name):
        return "hook"
    if comment.has_extra("component"):
        return "component"
    if block.kind == "function":
        if is_component_name(block.name) and path.suffix in COMPONENT_SUFFIXES:
            return "component"
        return "function"
    if block.value_kind in {"arrow", "function", "call"} and is_component_name(block.name):
        return "component"
    if block.value_kind in {"arrow", "function", "alias"}:
        return "function"
    return "constant"


def _member(
    block: RawDocBlock, comment: DocComment, constructor_aliases: tuple[str, ...]
) -> Member:
    modifiers = block.modifiers
    kind = block.member_kind or "property"
    if kind == "method" and (block.name == "constructor" or block.name in constructor_aliases):
        kind = "constructor"

    accessor = "get" if "get" in modifiers else "set" if "set" in modifiers else None
    params: tuple[Parameter, ...] = ()
    returns = None
    value_type = comment.declared_type or block.value_type
    if accessor:
        kind = "property"
        if accessor == "get":
            value_type = value_type or block.return_type or (
                comment.returns.type if comment.returns else None
            )
        else:
            first = block.params[0] if block.params else None
            tag = comment.params[0] if comment.params else None
            value_type = (
                value_type or (tag.type if tag else None) or (first.type if first else None)
            )
    elif kind in {"method", "constructor"}:
        params = merge_params(params_from_tags(comment.params), block.params)
        if kind == "method":
            returns = _returns(comment, block.return_type)

    return Member(
        name=block.name,
        kind=kind,
        comment=comment,
        params=params,
        returns=returns,
        is_static="static" in modifiers or comment.has_extra("static"),
        is_async="async" in modifiers or comment.has_extra("async"),
        accessor=accessor,
        optional="optional" in modifiers,
        value_type=value_type,
        default=block.value if kind == "property" else None,
        line=block.line,
        signature=block.signature,
    )


def _qualified_name(name: str, comment: DocComment) -> str:
    owner = comment.extra_text("memberof")
    return f"{owner.strip()}.{name}" if owner and owner.strip() else name


def _entity(block: RawDocBlock, comment: DocComment, path: Path) -> DocumentedEntity:
    kind = _entity_kind(block, comment, path)
    params: tuple[Parameter, ...] = ()
    returns = None
    if kind in {"function", "hook", "component"} or (
        block.kind == "typedef" and block.value_kind == "callback"
    ):
        params = merge_params(params_from_tags(comment.params), block.params)
        returns = _returns(comment, block.return_type)

    type_text = None
    if block.kind in {"type", "typedef"}:
        type_text = block.value
    elif kind == "constant":
        type_text = comment.declared_type or block.value_type

    return DocumentedEntity(
        name=block.name,
        kind=kind,
        comment=comment,
        source_file=path,
        line=block.line,
        params=params,
        returns=returns,
        signature=block.signature,
        extends=_split_list(block.extends),
        type_text=type_text,
        alias_of=block.value if block.value_kind == "alias" else None,
        qualified_name=_qualified_name(block.name, comment),
        is_async="async" in block.modifiers or comment.has_extra("async"),
    )


def _class_entity(name: str, slot: dict, path: Path) -> DocumentedEntity:
    block: RawDocBlock | None = slot["block"]
    comment: DocComment = slot["comment"]
    members: list[Member] = slot["members"]

    extends = _split_list(block.extends) if block else ()
    if not extends:
        extends = _split_list(comment.extra_text("extends") or comment.extra_text("augments"))

    # JSDoc allows the constructor parameters to be documented on the class.
    if comment.params:
        class_params = tuple(params_from_tags(comment.params))
        ctor = next((i for i, m in enumerate(members) if m.kind == "constructor"), None)
        if ctor is None:
            members.insert(
                0,
                Member(
                    name="constructor",
                    kind="constructor",
                    params=class_params,
                    line=slot["line"],
                ),
            )
        elif not any(p.description for p in members[ctor].params):
            members[ctor] = replace(members[ctor], params=class_params)

    return DocumentedEntity(
        name=name,
        kind="class",
        comment=comment,
        source_file=path,
        line=slot["line"],
        members=tuple(members),
        signature=block.signature if block else f"class {name}",
        extends=extends,
        qualified_name=_qualified_name(name, comment),
    )


def build_entities(
    blocks: Iterable[RawDocBlock],
    source_file: Path,
    *,
    constructor_aliases: tuple[str, ...] = (),
    report: RunReport | None = None,
    package: str = "",
) -> list[DocumentedEntity]:
    """Build the entities documented in one file, in declaration order.

    Member blocks are grouped under their class; a class whose own comment
    is missing still gets an entity when any of its members is documented.
    """
    classes: dict[str, dict] = {}
    order: list[tuple[str, str | DocumentedEntity]] = []

    def class_slot(name: str, line: int) -> dict:
        if name not in classes:
            classes[name] = {"block": None, "comment": DocComment(), "members": [], "line": line}
            order.append(("class", name))
        return classes[name]

    for block in blocks:
        comment = parse_doc_comment(block.comment)
        symbol = f"{block.owner}.{block.name}" if block.owner else block.name
        if report is not None:
            for warning in comment.warnings:
                report.warn(package, warning, file=source_file, symbol=symbol)
        if _is_hidden(comment):
            logger.debug("Skipping hidden symbol %s in %s", symbol, source_file)
            continue

        if block.kind == "member" and block.owner:
            slot = class_slot(block.owner, block.line)
            slot["members"].append(_member(block, comment, constructor_aliases))
        elif block.kind == "class":
            slot = class_slot(block.name, block.line)
            slot.update(block=block, comment=comment, line=block.line)
        else:
            order.append(("entity", _entity(block, comment, source_file)))

    entities = []
    for tag, value in order:
        if tag == "class":
            entities.append(_class_entity(value, classes[value], source_file))
        else:
            entities.append(value)
    return entities


def _alias_target(
    entity: DocumentedEntity, by_name: dict[str, DocumentedEntity]
) -> DocumentedEntity | None:
    seen = {entity.name}
    target = by_name.get(entity.alias_of or "")
    while target is not None and target.alias_of and target.name not in seen:
        seen.add(target.name)
        target = by_name.get(target.alias_of)
    if target is None or target.name == entity.name:
        return None
    return target


def resolve_aliases(entities: list[DocumentedEntity]) -> list[DocumentedEntity]:
    """Give ``const a = b`` aliases the documentation of their target.

    An alias keeps its own description when it has one; missing parameters and
    return information are taken from the target.
    """
    by_name = {e.name: e for e in entities if not e.alias_of}
    resolved = []
    for entity in entities:
        target = _alias_target(entity, by_name) if entity.alias_of else None
        if target is None:
            resolved.append(entity)
            continue
        kind = entity.kind if entity.kind in {"hook", "component"} else target.kind
        comment = entity.comment
        if not comment.description:
            comment = replace(
                target.comment,
                tags=entity.comment.tags + target.comment.tags,
                warnings=entity.comment.warnings + target.comment.warnings,
            )
        resolved.append(
            replace(
                entity,
                kind=kind,
                comment=comment,
                params=entity.params or target.params,
                returns=entity.returns or target.returns,
                members=entity.members or target.members,
                type_text=entity.type_text or target.type_text,
            )
        )
    return resolved
