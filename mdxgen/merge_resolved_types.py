"""Logic for merging resolved TypeScript types into documented entities."""

from dataclasses import replace
from pathlib import Path

from mdxgen.doc_tags import DocComment
from mdxgen.entity import DocumentedEntity, Member, ReturnDescriptor
from mdxgen.merge_params import merge_params, params_from_tags
from mdxgen.parse_doc_comment import parse_doc_comment
from mdxgen.resolve_declarations import ResolvedSymbol

CALLABLE_KINDS = frozenset({"function", "hook", "component"})
DECLARATION_ONLY_KINDS = frozenset({"interface", "type", "enum"})


def _merge_returns(
    returns: ReturnDescriptor | None, resolved_type: str | None
) -> ReturnDescriptor | None:
    if not resolved_type:
        return returns
    if returns is None:
        return ReturnDescriptor(resolved_type=resolved_type)
    return replace(returns, resolved_type=resolved_type)


def _comment_of(symbol: ResolvedSymbol) -> DocComment:
    return parse_doc_comment(symbol.doc) if symbol.doc else DocComment()


def _comment_returns(comment: DocComment) -> ReturnDescriptor | None:
    tag = comment.returns
    return ReturnDescriptor(comment_type=tag.type, description=tag.description) if tag else None


def _member_from_symbol(name: str, symbol: ResolvedSymbol) -> Member:
    comment = _comment_of(symbol)
    kind = symbol.kind if symbol.kind in {"constructor", "method", "property"} else "property"
    params = ()
    returns = None
    if kind != "property":
        params = merge_params(params_from_tags(comment.params), symbol.params, resolved=True)
    if kind == "method":
        returns = _merge_returns(_comment_returns(comment), symbol.return_type)
    return Member(
        name=name,
        kind=kind,
        comment=comment,
        params=params,
        returns=returns,
        is_static=symbol.is_static,
        accessor=symbol.accessor,
        optional=symbol.optional,
        value_type=comment.declared_type,
        resolved_type=symbol.value_type,
        line=symbol.line,
    )


def _merge_member(owner: str, member: Member, resolved: dict[str, ResolvedSymbol]) -> Member:
    symbol = resolved.get(f"{owner}.{member.name}")
    if symbol is None and member.kind == "constructor":
        symbol = resolved.get(f"{owner}.constructor")
    if symbol is None:
        return member
    if member.kind == "property":
        return replace(
            member,
            resolved_type=symbol.value_type or member.resolved_type,
            optional=member.optional or symbol.optional,
        )
    returns = member.returns
    if member.kind == "method":
        returns = _merge_returns(member.returns, symbol.return_type)
    return replace(
        member,
        params=merge_params(member.params, symbol.params, resolved=True),
        returns=returns,
    )


def _declared_only_members(
    entity_members: tuple[Member, ...], symbol: ResolvedSymbol, resolved: dict[str, ResolvedSymbol]
) -> tuple[Member, ...]:
    known = {m.name for m in entity_members}
    extra = []
    for name in symbol.members:
        member_symbol = resolved.get(f"{symbol.name}.{name}")
        if name not in known and member_symbol is not None:
            extra.append(_member_from_symbol(name, member_symbol))
    return tuple(extra)


def _merge_entity(
    entity: DocumentedEntity, resolved: dict[str, ResolvedSymbol]
) -> DocumentedEntity:
    symbol = resolved.get(entity.full_name) or resolved.get(entity.name)
    updates: dict = {}

    if entity.members:
        updates["members"] = tuple(_merge_member(entity.name, m, resolved) for m in entity.members)

    if symbol is None:
        return replace(entity, **updates) if updates else entity

    if entity.kind in CALLABLE_KINDS and symbol.kind == "function":
        updates["params"] = merge_params(entity.params, symbol.params, resolved=True)
        updates["returns"] = _merge_returns(entity.returns, symbol.return_type)

    if symbol.kind in {"class", "interface"}:
        updates["extends"] = entity.extends or symbol.extends
        updates["implements"] = entity.implements or symbol.implements
        if entity.kind != "class":
            members = updates.get("members", entity.members)
            updates["members"] = members + _declared_only_members(members, symbol, resolved)

    if symbol.kind in {"type", "constant"} and symbol.value_type:
        updates["type_text"] = symbol.value_type
    if symbol.variants:
        updates["variants"] = symbol.variants
    if symbol.type_parameters and not entity.type_parameters:
        updates["type_parameters"] = symbol.type_parameters

    return replace(entity, **updates)


def _entity_from_symbol(
    symbol: ResolvedSymbol, resolved: dict[str, ResolvedSymbol]
) -> DocumentedEntity:
    members: tuple[Member, ...] = ()
    if symbol.kind == "interface":
        members = _declared_only_members((), symbol, resolved)
    return DocumentedEntity(
        name=symbol.name,
        kind=symbol.kind,
        comment=_comment_of(symbol),
        source_file=symbol.source_file or Path(),
        line=symbol.line,
        members=members,
        extends=symbol.extends,
        type_parameters=symbol.type_parameters,
        type_text=symbol.value_type if symbol.kind == "type" else None,
        variants=symbol.variants,
        qualified_name=symbol.name,
    )


def merge_resolved_types(
    entities: list[DocumentedEntity], resolved: dict[str, ResolvedSymbol]
) -> list[DocumentedEntity]:
    """Return new entities with resolved types merged in.

    Resolved types win for display while comment types are kept. Symbols
    the declarations do not know keep their comment types. Interfaces,
    enums and type aliases that exist only in the declarations are appended
    as new entities in declaration order.
    """
    if not resolved:
        return list(entities)
    merged = [_merge_entity(e, resolved) for e in entities]
    known = {e.name for e in merged} | {e.full_name for e in merged}
    for name, symbol in resolved.items():
        if symbol.kind in DECLARATION_ONLY_KINDS and "." not in name and name not in known:
            merged.append(_entity_from_symbol(symbol, resolved))
            known.add(name)
    return merged
