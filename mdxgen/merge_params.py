"""Logic for combining documented parameters with declared ones."""

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Protocol

from mdxgen.doc_tags import ParamTag
from mdxgen.entity import Parameter


class DeclaredParam(Protocol):
    """A parameter as declared in code (source signature or type declaration)."""

    name: str
    type: str | None
    default: str | None
    optional: bool
    rest: bool


def params_from_tags(tags: Iterable[ParamTag]) -> list[Parameter]:
    """Convert ``@param`` tags into parameters in comment order."""
    return [
        Parameter(
            name=tag.name,
            comment_type=tag.type,
            optional=tag.optional,
            default=tag.default,
            description=tag.description,
        )
        for tag in tags
    ]


def _is_pattern(name: str) -> bool:
    return name[:1] in {"{", "["}


def merge_params(
    documented: Sequence[Parameter],
    declared: Sequence[DeclaredParam],
    *,
    resolved: bool = False,
) -> tuple[Parameter, ...]:
    """Merge declared parameters into documented ones.

    Declaration order wins; documented ``parent.child`` entries follow their
    parent, and documented parameters the declaration does not know keep
    their comment order at the end. With ``resolved`` the declared type is
    stored as the resolved type, otherwise it only fills a missing comment
    type.
    """
    if not declared:
        return tuple(documented)

    by_name = {p.name: p for p in documented}
    used: set[str] = set()
    merged: list[Parameter] = []

    for decl in declared:
        doc = by_name.get(decl.name)
        if doc is None and _is_pattern(decl.name):
            if documented:
                continue  # destructured: the comment documents it under its own name
            merged.append(Parameter(decl.name, comment_type=decl.type, rest=decl.rest))
            continue

        if doc is None:
            type_fields = {"resolved_type": decl.type} if resolved else {"comment_type": decl.type}
            merged.append(
                Parameter(
                    name=decl.name,
                    optional=decl.optional,
                    default=decl.default,
                    rest=decl.rest,
                    **type_fields,
                )
            )
        else:
            used.add(doc.name)
            if resolved:
                type_fields = {"resolved_type": decl.type or doc.resolved_type}
            else:
                type_fields = {"comment_type": doc.comment_type or decl.type}
            merged.append(
                replace(
                    doc,
                    optional=doc.optional or decl.optional,
                    default=doc.default or decl.default,
                    rest=doc.rest or decl.rest,
                    **type_fields,
                )
            )

        prefix = decl.name + "."
        for child in documented:
            if child.name.startswith(prefix) and child.name not in used:
                used.add(child.name)
                merged.append(child)

    merged.extend(p for p in documented if p.name not in used)
    return tuple(merged)
