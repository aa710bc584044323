"""Rendering of the doc comment tags shared by entities and members."""

import re

from mdxgen.doc_tags import (
    DocComment,
    ExampleTag,
    FiresTag,
    ListensTag,
    SeeTag,
    ThrowsTag,
    TutorialTag,
)
from mdxgen.mdx_escape import (
    LinkResolver,
    code_block,
    detect_language,
    escape_attr,
    format_description,
    format_inline,
    inline_code,
)


def render_deprecation(
    comment: DocComment, default_message: str, resolve: LinkResolver | None = None
) -> list[str]:
    """Render a ``<Warning>`` callout for a deprecated item."""
    tag = comment.deprecated
    if tag is None:
        return []
    message = format_description(tag.message, resolve) if tag.message else default_message
    return ["<Warning>", f"**Deprecated:** {message}", "</Warning>", ""]


def _render_throws(comment: DocComment, resolve: LinkResolver | None, heading: str) -> list[str]:
    tags = comment.tags_of(ThrowsTag)
    if not tags:
        return []
    parts = [f"{heading} Throws", ""]
    for tag in tags:
        line = inline_code(tag.type) if tag.type else ""
        if tag.description:
            line = f"{line} {format_inline(tag.description, resolve)}".strip()
        parts.append(f"- {line}")
    parts.append("")
    return parts


def _render_examples(comment: DocComment, heading: str) -> list[str]:
    tags = comment.tags_of(ExampleTag)
    if not tags:
        return []
    parts = [f"{heading} Examples" if len(tags) > 1 else f"{heading} Example", "", "<CodeGroup>"]
    for i, tag in enumerate(tags, start=1):
        title = tag.caption or ("Example" if len(tags) == 1 else f"Example {i}")
        parts.append(code_block(detect_language(tag.code), tag.code, title=title))
        parts.append("")
    parts[-1] = "</CodeGroup>"
    parts.append("")
    return parts


def _render_events(comment: DocComment, heading: str) -> list[str]:
    fires = comment.tags_of(FiresTag)
    listens = comment.tags_of(ListensTag)
    if not fires and not listens:
        return []
    parts = [f"{heading} Events", ""]
    for title, icon, events in (
        ("Fires", "broadcast", [t.event for t in fires]),
        ("Listens", "ear-listen", [t.event for t in listens]),
    ):
        if not events:
            continue
        parts += [f'<Card title="{title}" icon="{icon}">', ""]
        parts.extend(f"- {inline_code(event)}" for event in events)
        parts += ["", "</Card>", ""]
    return parts


def _see_item(target: str, resolve: LinkResolver | None) -> str:
    if "{@" in target:
        return format_inline(target, resolve)
    first, _, rest = target.partition(" ")
    href = resolve(first) if resolve else None
    if href is None and re.match(r"https?://", first):
        href = first
    if href is None:
        return format_inline(target, resolve)
    label = rest.strip() or first
    return f"[{format_inline(label)}]({href})"


def _render_see(comment: DocComment, resolve: LinkResolver | None, heading: str) -> list[str]:
    tags = comment.tags_of(SeeTag)
    if not tags:
        return []
    parts = [f"{heading} See also", ""]
    parts.extend(f"- {_see_item(tag.target, resolve)}" for tag in tags)
    parts.append("")
    return parts


def _render_tutorials(comment: DocComment, heading: str) -> list[str]:
    tags = comment.tags_of(TutorialTag)
    if not tags:
        return []
    parts = [f"{heading} Tutorials", "", "<CardGroup cols={2}>"]
    for tag in tags:
        parts.append(
            f'<Card title="Tutorial: {escape_attr(tag.name)}" icon="book-open" '
            f'href="/tutorials/{escape_attr(tag.name)}" />'
        )
    parts += ["</CardGroup>", ""]
    return parts


def _render_extras(
    comment: DocComment, heading: str, hidden: frozenset[str], shown_flags: frozenset[str]
) -> list[str]:
    """Render every unrecognized tag so nothing the author wrote is lost.

    A bare flag tag in ``shown_flags`` is skipped because the caller already
    shows it elsewhere, for example as a ``static`` title prefix.
    """
    extras = [
        t
        for t in comment.extras
        if t.name not in hidden and not (t.name in shown_flags and not t.text.strip())
    ]
    if not extras:
        return []
    parts = [f"{heading} Additional tags", ""]
    for tag in extras:
        text = " ".join(tag.text.split())
        suffix = f" {format_inline(text)}" if text else ""
        parts.append(f"- **@{escape_attr(tag.name)}**{suffix}")
    parts.append("")
    return parts


def render_comment_sections(
    comment: DocComment,
    resolve: LinkResolver | None = None,
    *,
    heading_level: int = 3,
    hidden_extras: frozenset[str] = frozenset(),
    shown_flags: frozenset[str] = frozenset(),
) -> list[str]:
    """Render throws, examples, events, see-also, tutorials and extra tags."""
    heading = "#" * heading_level
    parts = []
    parts.extend(_render_throws(comment, resolve, heading))
    parts.extend(_render_examples(comment, heading))
    parts.extend(_render_events(comment, heading))
    parts.extend(_render_see(comment, resolve, heading))
    parts.extend(_render_tutorials(comment, heading))
    parts.extend(_render_extras(comment, heading, hidden_extras, shown_flags))
    return parts
