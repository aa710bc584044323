"""Logic for rendering one documented entity as a Mintlify MDX fragment."""

from mdxgen.doc_comment_sections import render_comment_sections, render_deprecation
from mdxgen.doc_tags import DocComment
from mdxgen.entity import DocumentedEntity, Member, Parameter, ReturnDescriptor
from mdxgen.mdx_escape import (
    LinkResolver,
    code_block,
    escape_attr,
    format_description,
    format_inline,
    inline_code,
)
from mdxgen.merge_params import params_from_tags

KIND_LABELS = {
    "class": "Class",
    "function": "Function",
    "hook": "Hook",
    "component": "Component",
    "constant": "Constant",
    "interface": "Interface",
    "type": "Type",
    "enum": "Enum",
}
CALLABLE_KINDS = frozenset({"function", "hook", "component"})
TS_SUFFIXES = (".ts", ".tsx", ".mts", ".cts")


def render_fragment(entity: DocumentedEntity, resolve: LinkResolver | None = None) -> str:
    """Render ``entity`` as a standalone MDX fragment.

    The fragment has no frontmatter, imports or exports, so it can be served
    as a page body or imported into an aggregating page unchanged. Members
    keep their declaration order with the constructor first.
    """
    comment = entity.comment
    title = entity.full_name + (" (deprecated)" if entity.is_deprecated else "")
    parts = [f'<a id="{entity.anchor}"></a>', "", f"## {format_inline(title)}", ""]

    parts.extend(_render_overview(entity, resolve))
    parts.extend(render_deprecation(comment, f"This {entity.kind} is deprecated.", resolve))
    if comment.description:
        parts += [format_description(comment.description, resolve), ""]
    if comment.since:
        since = format_inline(comment.since.version)
        parts += ["<Info>", f"Available since version {since}", "</Info>", ""]

    if entity.signature:
        parts += [code_block(_source_language(entity), entity.signature), ""]
    elif entity.type_text and entity.kind == "type":
        parts += [code_block("typescript", f"type {entity.name} = {entity.type_text}"), ""]

    if entity.kind == "class":
        parts.extend(_render_class_body(entity, resolve))
    elif entity.kind == "interface":
        parts.extend(_render_member_list("Members", entity.members, entity, resolve))

    if entity.kind in CALLABLE_KINDS or entity.params:
        heading = "Props" if entity.kind == "component" else "Parameters"
        parts.extend(_render_params(entity.params, resolve, heading=f"### {heading}"))
    elif entity.kind != "class":
        parts.extend(_render_params(params_from_tags(comment.params), resolve))

    returns = entity.returns or _comment_returns(comment)
    if returns is not None:
        parts.extend(_render_returns(returns, resolve, heading="### Returns"))

    if entity.kind == "constant" and entity.type_text:
        parts += [f"**Type:** {inline_code(entity.type_text)}", ""]
    if entity.variants:
        label = "Values" if entity.kind == "enum" else "Variants"
        parts += [f"### {label}", ""]
        parts.extend(f"- {inline_code(v)}" for v in entity.variants)
        parts.append("")

    parts.extend(_render_properties(comment, resolve))
    parts.extend(
        render_comment_sections(
            comment,
            resolve,
            heading_level=3,
            hidden_extras=_hidden_extras(entity),
            shown_flags=_entity_flags(entity),
        )
    )
    return "\n".join(parts).rstrip() + "\n"


def _source_language(entity: DocumentedEntity) -> str:
    return "typescript" if entity.source_file.suffix in TS_SUFFIXES else "javascript"


def _link_names(names: tuple[str, ...], resolve: LinkResolver | None) -> str:
    links = []
    for name in names:
        href = resolve(name) if resolve else None
        links.append(f"[{format_inline(name)}]({href})" if href else inline_code(name))
    return ", ".join(links)


def _render_overview(entity: DocumentedEntity, resolve: LinkResolver | None) -> list[str]:
    """Render kind, inheritance and generics as a short list of facts."""
    facts = [f"**Kind:** {KIND_LABELS.get(entity.kind, entity.kind)}"]
    if entity.is_async:
        facts[0] += " (async)"
    if entity.extends:
        facts.append(f"**Extends:** {_link_names(entity.extends, resolve)}")
    if entity.implements:
        facts.append(f"**Implements:** {_link_names(entity.implements, resolve)}")
    if entity.type_parameters:
        facts.append(
            "**Type parameters:** " + ", ".join(inline_code(t) for t in entity.type_parameters)
        )
    if entity.alias_of:
        facts.append(f"**Alias of:** {_link_names((entity.alias_of,), resolve)}")
    if entity.source_file.name and entity.line:
        facts.append(f"**Defined in:** {inline_code(f'{entity.source_file.name}:{entity.line}')}")
    return ["  \n".join(facts), ""]


def _hidden_extras(entity: DocumentedEntity) -> frozenset[str]:
    # The typedef line becomes the heading and type of the entity itself.
    if entity.kind == "type":
        return frozenset({"typedef", "callback"})
    return frozenset()


def _entity_flags(entity: DocumentedEntity) -> frozenset[str]:
    """Return the flag tags the overview already shows for ``entity``."""
    flags = set()
    if entity.kind in {"hook", "component"}:
        flags.add(entity.kind)
    if entity.is_async:
        flags.add("async")
    if entity.kind == "class":
        flags.add("hideconstructor")
    return frozenset(flags)


def _member_flags(member: Member) -> frozenset[str]:
    flags = set()
    if member.is_static:
        flags.add("static")
    if member.is_async:
        flags.add("async")
    return frozenset(flags)


def _comment_returns(comment: DocComment) -> ReturnDescriptor | None:
    tag = comment.returns
    if tag is None:
        return None
    return ReturnDescriptor(comment_type=tag.type, description=tag.description)


def _param_field(param: Parameter, resolve: LinkResolver | None) -> list[str]:
    name = f"...{param.name}" if param.rest else param.name
    attrs = [f'path="{escape_attr(name)}"', f'type="{escape_attr(param.display_type)}"']
    if not param.optional and param.default is None and not param.rest:
        attrs.append("required")
    if param.default is not None:
        attrs.append(f'default="{escape_attr(param.default)}"')
    parts = [f"<ParamField {' '.join(attrs)}>"]
    if param.description:
        parts += ["", format_description(param.description, resolve), ""]
    if param.comment_type and param.resolved_type and param.comment_type != param.resolved_type:
        parts += [f"Documented type: {inline_code(param.comment_type)}", ""]
    parts.append("</ParamField>")
    return parts


def _render_params(
    params: tuple[Parameter, ...] | list[Parameter],
    resolve: LinkResolver | None,
    *,
    heading: str = "### Parameters",
) -> list[str]:
    if not params:
        return []
    parts = [heading, ""]
    for param in params:
        parts.extend(_param_field(param, resolve))
    parts.append("")
    return parts


def _render_returns(
    returns: ReturnDescriptor, resolve: LinkResolver | None, *, heading: str
) -> list[str]:
    type_attr = escape_attr(returns.display_type)
    parts = [heading, "", f'<ResponseField name="returns" type="{type_attr}">']
    if returns.description:
        parts += ["", format_description(returns.description, resolve), ""]
    parts += ["</ResponseField>", ""]
    return parts


def _render_properties(comment: DocComment, resolve: LinkResolver | None) -> list[str]:
    """Render ``@property`` tags of typedefs and option objects."""
    props = comment.properties
    if not props:
        return []
    parts = ["### Properties", ""]
    for prop in props:
        attrs = [f'name="{escape_attr(prop.name)}"', f'type="{escape_attr(prop.type or "any")}"']
        if not prop.optional:
            attrs.append("required")
        if prop.default is not None:
            attrs.append(f'default="{escape_attr(prop.default)}"')
        parts.append(f"<ResponseField {' '.join(attrs)}>")
        if prop.description:
            parts += ["", format_description(prop.description, resolve), ""]
        parts.append("</ResponseField>")
    parts.append("")
    return parts


def _member_title(member: Member) -> str:
    prefix = ""
    if member.is_static:
        prefix += "static "
    if member.is_async:
        prefix += "async "
    if member.accessor:
        prefix += f"{member.accessor} "
    if member.kind == "property":
        name = member.name + ("?" if member.optional else "")
        title = f"{prefix}{name}: {member.display_type}"
    else:
        args = ", ".join(
            ("..." if p.rest else "") + p.name for p in member.params if "." not in p.name
        )
        title = f"{prefix}{member.name}({args})"
    if member.is_deprecated:
        title += " (deprecated)"
    return title


def _render_member_body(member: Member, resolve: LinkResolver | None) -> list[str]:
    comment = member.comment
    parts = render_deprecation(comment, f"This {member.kind} is deprecated.", resolve)
    if comment.description:
        parts += [format_description(comment.description, resolve), ""]
    if comment.since:
        since = format_inline(comment.since.version)
        parts += ["<Info>", f"Available since version {since}", "</Info>", ""]
    if member.signature:
        parts += [code_block("javascript", member.signature), ""]

    if member.kind == "property":
        attrs = [f'name="{escape_attr(member.name)}"', f'type="{escape_attr(member.display_type)}"']
        if member.default is not None:
            attrs.append(f'default="{escape_attr(member.default)}"')
        parts += [f"<ResponseField {' '.join(attrs)}>", "</ResponseField>", ""]
        tag_params = params_from_tags(comment.params)
        parts.extend(_render_params(tag_params, resolve, heading="#### Parameters"))
    else:
        parts.extend(_render_params(member.params, resolve, heading="#### Parameters"))
    returns = member.returns or (_comment_returns(comment) if member.kind == "property" else None)
    if returns is not None:
        parts.extend(_render_returns(returns, resolve, heading="#### Returns"))

    parts.extend(_render_properties(comment, resolve))
    parts.extend(
        render_comment_sections(
            comment, resolve, heading_level=4, shown_flags=_member_flags(member)
        )
    )
    return parts


def _accordion(entity: DocumentedEntity, member: Member, resolve: LinkResolver | None) -> list[str]:
    title = escape_attr(_member_title(member))
    anchor = entity.member_anchor(member)
    parts = [f'<Accordion title="{title}" id="{anchor}">', ""]
    parts.extend(_render_member_body(member, resolve))
    while parts and parts[-1] == "":
        parts.pop()
    parts += ["", "</Accordion>"]
    return parts


def _render_member_list(
    heading: str,
    members: tuple[Member, ...] | list[Member],
    entity: DocumentedEntity,
    resolve: LinkResolver | None,
) -> list[str]:
    if not members:
        return []
    parts = [f"### {heading}", "", "<AccordionGroup>"]
    for member in members:
        parts.extend(_accordion(entity, member, resolve))
    parts += ["</AccordionGroup>", ""]
    return parts


def _render_class_body(entity: DocumentedEntity, resolve: LinkResolver | None) -> list[str]:
    """Render the constructor, then properties and methods in declaration order."""
    parts = []
    ctor = entity.constructor
    if entity.comment.has_extra("hideconstructor"):
        parts += [
            "<Note>",
            "This class should not be instantiated directly using <code>new</code>.",
            "</Note>",
            "",
        ]
    if ctor is not None:
        parts += ["### Constructor", ""]
        parts += [f'<a id="{entity.member_anchor(ctor)}"></a>', ""]
        parts.extend(_render_member_body(ctor, resolve))

    # Class-level @param tags the constructor documents differently.
    known = {p.name for p in ctor.params} if ctor else set()
    leftover = [p for p in params_from_tags(entity.comment.params) if p.name not in known]
    parts.extend(_render_params(leftover, resolve, heading="#### Class parameters"))

    members = [m for m in entity.members if m.kind != "constructor"]
    properties = [m for m in members if m.kind == "property"]
    methods = [m for m in members if m.kind == "method"]
    if not properties and not methods:
        return parts

    parts += ["<Tabs>"]
    for label, group in (("Properties", properties), ("Methods", methods)):
        if not group:
            continue
        parts += [f'<Tab title="{label}">', "", "<AccordionGroup>"]
        for member in group:
            parts.extend(_accordion(entity, member, resolve))
        parts += ["</AccordionGroup>", "", "</Tab>"]
    parts += ["</Tabs>", ""]
    return parts
