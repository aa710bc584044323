"""Logic for parsing ``/** ... */`` documentation comments into tags."""

import logging
import re
import textwrap
from collections.abc import Callable
from dataclasses import asdict

from mdxgen.doc_tags import (
    DeprecatedTag,
    DocComment,
    DocTag,
    ExampleTag,
    ExtraTag,
    FiresTag,
    ListensTag,
    ParamTag,
    PropertyTag,
    ReturnsTag,
    SeeTag,
    SinceTag,
    ThrowsTag,
    TutorialTag,
    TypeTag,
)
from mdxgen.errors import ParseError

logger = logging.getLogger(__name__)

TAG_LINE_RE = re.compile(r"^@([A-Za-z][\w-]*)(?:\s+(.*))?$")
CAPTION_RE = re.compile(r"^\s*<caption>(.*?)</caption>\s*", re.DOTALL)
LEADING_STAR_RE = re.compile(r"^\s*\*(?: |$)?")

TAG_ALIASES = {
    "parameter": "param",
    "arg": "param",
    "argument": "param",
    "return": "returns",
    "exception": "throws",
    "emits": "fires",
    "prop": "property",
}


def clean_comment(text: str) -> list[str]:
    """Strip the comment delimiters and the leading ``*`` of every line.

    Indentation after the ``* `` prefix is preserved for example code.
    """
    body = text.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [LEADING_STAR_RE.sub("", line, count=1) for line in body.split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return [line.rstrip() for line in lines]


def read_braced_type(content: str) -> tuple[str | None, str]:
    """Split a leading ``{type}`` from ``content``.

    Nested braces are balanced, so ``{{a: {b: string}}}`` is one type.
    Returns ``(None, content)`` when there is no leading brace.
    """
    text = content.lstrip()
    if not text.startswith("{"):
        return None, content
    depth = 0
    for i, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[1:i].strip(), text[i + 1 :]
    msg = "unbalanced braces in type expression"
    raise ParseError(msg)


def _strip_dash(text: str) -> str:
    text = text.strip()
    if text.startswith("- "):
        return text[2:].strip()
    if text == "-":
        return ""
    return text


def _split_optional_type(type_text: str | None) -> tuple[str | None, bool]:
    """Handle the Closure ``{string=}`` optional marker."""
    if type_text and type_text.endswith("="):
        return type_text[:-1].strip() or None, True
    return type_text, False


def _read_bracketed_name(text: str) -> tuple[str, str]:
    """Split ``[name=default] rest`` at the matching ``]``."""
    depth = 0
    for i, ch in enumerate(text):
        if ch in "[({":
            depth += 1
        elif ch in "])}":
            depth -= 1
            if depth == 0:
                return text[1:i], text[i + 1 :]
    msg = "unterminated optional parameter name"
    raise ParseError(msg)


def parse_param(content: str) -> ParamTag:
    """Parse the body of a ``@param`` tag in any of its supported grammars."""
    text = content.strip()
    type_text, rest = read_braced_type(text)

    if type_text is None:
        # `name {T} d`, `name:T d` or `name - d`
        first, _, remainder = text.partition(" ")
        if ":" in first and not first.startswith("["):
            name, _, type_text = first.partition(":")
            rest = f"{name} {remainder}"
        else:
            type_text, remainder = read_braced_type(remainder)
            rest = first + " " + remainder
        if not type_text:
            type_text = None

    type_text, optional = _split_optional_type(type_text)
    rest = rest.strip()
    if not rest:
        msg = "missing parameter name"
        raise ParseError(msg)

    default = None
    if rest.startswith("["):
        inner, rest = _read_bracketed_name(rest)
        name, eq, default_text = inner.partition("=")
        name = name.strip()
        default = default_text.strip() if eq else None
        optional = True
    else:
        name, _, rest = rest.partition(" ")
        if not name.startswith("-") and name.endswith("?"):
            name = name[:-1]
            optional = True

    if not name or name.startswith("-"):
        msg = "missing parameter name"
        raise ParseError(msg)

    return ParamTag(
        name=name,
        type=type_text,
        description=_strip_dash(rest),
        optional=optional,
        default=default or None,
    )


def _parse_returns(content: str) -> ReturnsTag:
    type_text, rest = read_braced_type(content.strip())
    return ReturnsTag(type=type_text or None, description=_strip_dash(rest))


def _parse_throws(content: str) -> ThrowsTag:
    type_text, rest = read_braced_type(content.strip())
    return ThrowsTag(type=type_text or None, description=_strip_dash(rest))


def _parse_type(content: str) -> TypeTag:
    type_text, rest = read_braced_type(content.strip())
    type_text = type_text or rest.strip()
    if not type_text:
        msg = "missing type expression"
        raise ParseError(msg)
    return TypeTag(type_text)


def _parse_example(content: str) -> ExampleTag:
    caption = ""
    match = CAPTION_RE.match(content)
    if match:
        caption = " ".join(match.group(1).split())
        content = content[match.end() :]
    code = textwrap.dedent(content).strip("\n")
    if not code.strip():
        msg = "empty example"
        raise ParseError(msg)
    return ExampleTag(code=code, caption=caption)


def _required(value_name: str) -> Callable[[str], str]:
    def read(content: str) -> str:
        value = " ".join(content.split())
        if not value:
            msg = f"missing {value_name}"
            raise ParseError(msg)
        return value

    return read


_read_version = _required("version")
_read_target = _required("reference")
_read_event = _required("event name")
_read_tutorial = _required("tutorial name")

TAG_PARSERS: dict[str, Callable[[str], DocTag]] = {
    "param": parse_param,
    "property": lambda c: PropertyTag(**asdict(parse_param(c))),
    "returns": _parse_returns,
    "throws": _parse_throws,
    "example": _parse_example,
    "type": _parse_type,
    "deprecated": lambda c: DeprecatedTag(" ".join(c.split())),
    "since": lambda c: SinceTag(_read_version(c)),
    "see": lambda c: SeeTag(_read_target(c)),
    "fires": lambda c: FiresTag(_read_event(c)),
    "listens": lambda c: ListensTag(_read_event(c)),
    "tutorial": lambda c: TutorialTag(_read_tutorial(c)),
}


def _split_sections(lines: list[str]) -> tuple[list[str], list[tuple[str, list[str]]]]:
    """Separate the description lines from the ``@tag`` sections."""
    description: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    for line in lines:
        in_example = bool(sections) and sections[-1][0] == "example"
        candidate = line if in_example else line.strip()
        match = TAG_LINE_RE.match(candidate)
        if match:
            sections.append((match.group(1), [match.group(2) or ""]))
        elif sections:
            sections[-1][1].append(line)
        else:
            description.append(line)
    return description, sections


def parse_doc_comment(text: str) -> DocComment:
    """Parse a raw doc comment into a description, ordered tags and warnings.

    A tag that does not match its grammar is kept verbatim as an
    ``ExtraTag`` and a warning is recorded instead of failing the parse.
    """
    description_lines, sections = _split_sections(clean_comment(text))
    tags: list[DocTag] = []
    warnings: list[str] = []

    for raw_name, section in sections:
        name = TAG_ALIASES.get(raw_name, raw_name)
        content = "\n".join(section).strip("\n")
        parser = TAG_PARSERS.get(name)
        if parser is None:
            tags.append(ExtraTag(raw_name, content.strip()))
            continue
        try:
            tags.append(parser(content))
        except ParseError as exc:
            warnings.append(f"@{raw_name}: {exc}")
            logger.debug("Degraded @%s tag: %s", raw_name, exc)
            tags.append(ExtraTag(raw_name, content.strip()))

    description = textwrap.dedent("\n".join(description_lines)).strip()
    return DocComment(description=description, tags=tuple(tags), warnings=tuple(warnings))
