"""Escaping helpers for emitting MDX that Mintlify can parse."""

import html
import re
from collections.abc import Callable

PROSE_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "{": "&#123;",
    "}": "&#125;",
}
PROSE_RE = re.compile(r"[&<>{}]")
FENCE_LINE_RE = re.compile(r"^(\s*)(`{3,}|~{3,})(.*)$")
INLINE_RE = re.compile(
    r"(?P<ticks>`+)"
    r"|\[(?P<label>[^\]\n]+)\]\{@link(?:code|plain)?\s+(?P<label_target>[^}\s]+)\s*\}"
    r"|\{@(?P<tag>link|linkcode|linkplain|tutorial)\s+(?P<target>[^}\s|]+)"
    r"(?:\s*\|\s*|\s+)?(?P<text>[^}]*)\}"
)
BACKTICK_RUN_RE = re.compile(r"`+")
# MDX reads a paragraph line starting with either keyword as an ESM statement.
ESM_LINE_RE = re.compile(r"^(?:import|export)(?=\s|$)")

# Resolves a `{@link target}` to an href, or None when unknown.
LinkResolver = Callable[[str], str | None]


def escape_prose(text: str) -> str:
    """Escape characters MDX would read as JSX or expressions."""
    return PROSE_RE.sub(lambda m: PROSE_ESCAPES[m.group(0)], text)


def escape_attr(text: str) -> str:
    """Escape a value for a double-quoted JSX attribute."""
    escaped = html.escape(" ".join(text.split()), quote=True)
    return escaped.replace("{", "&#123;").replace("}", "&#125;")


def _longest_backtick_run(text: str) -> int:
    return max((len(m) for m in BACKTICK_RUN_RE.findall(text)), default=0)


def inline_code(text: str) -> str:
    """Wrap ``text`` in a backtick fence longer than any run inside it."""
    text = " ".join(text.split("\n"))
    fence = "`" * (_longest_backtick_run(text) + 1)
    if text.startswith("`") or text.endswith("`") or not text.strip():
        text = f" {text} "
    return f"{fence}{text}{fence}"


def code_block(lang: str, code: str, title: str = "") -> str:
    """Generate a fenced code block whose fence cannot be closed by the code."""
    fence = "`" * max(3, _longest_backtick_run(code) + 1)
    info = lang + (f" {' '.join(title.split())}" if title.strip() else "")
    return f"{fence}{info}\n{code.rstrip()}\n{fence}"


def detect_language(code: str) -> str:
    """Guess the highlight language of an example."""
    if re.search(r"<[A-Z][\w.]*[\s/>]|</\w+>|return\s*\(\s*<", code):
        return "jsx"
    if re.search(r"\binterface\s+\w+|:\s*(string|number|boolean|void)\b|\btype\s+\w+\s*=", code):
        return "typescript"
    return "javascript"


def _link(label: str, href: str | None, target: str) -> str:
    if href is None:
        return inline_code(label or target)
    return f"[{escape_prose(label or target).replace('[', '&#91;').replace(']', '&#93;')}]({href})"


def _default_resolver(target: str) -> str | None:
    return target if re.match(r"https?://", target) else None


def format_inline(text: str, resolve: LinkResolver | None = None) -> str:
    """Escape prose while keeping inline code spans and ``{@link}`` tags working.

    Unmatched backticks are escaped so they cannot swallow following text.
    """
    resolve = resolve or _default_resolver
    out: list[str] = []
    pos = 0
    while pos < len(text):
        match = INLINE_RE.search(text, pos)
        if match is None:
            out.append(escape_prose(text[pos:]))
            break
        out.append(escape_prose(text[pos : match.start()]))
        if match.group("ticks"):
            ticks = match.group("ticks")
            close = re.compile(rf"(?<!`){ticks}(?!`)").search(text, match.end())
            if close is None:
                out.append("\\`" * len(ticks))
                pos = match.end()
                continue
            out.append(inline_code(text[match.end() : close.start()]))
            pos = close.end()
            continue
        if match.group("label") is not None:
            target = match.group("label_target")
            out.append(_link(match.group("label"), resolve(target), target))
        elif match.group("tag") == "tutorial":
            name = match.group("target")
            out.append(_link(match.group("text").strip() or name, f"/tutorials/{name}", name))
        else:
            target = match.group("target")
            out.append(_link(match.group("text").strip(), resolve(target), target))
        pos = match.end()
    return "".join(out)


def _escape_first_letter(match: re.Match[str]) -> str:
    word = match.group(0)
    return f"&#{ord(word[0])};{word[1:]}"


def format_description(text: str, resolve: LinkResolver | None = None) -> str:
    """Render a multi-paragraph description as MDX.

    Fenced code blocks are re-fenced and kept verbatim; indented code blocks
    become fenced blocks; everything else goes through ``format_inline``.
    """
    lines = text.split("\n")
    out: list[str] = []
    i = 0
    prev_blank = True
    while i < len(lines):
        line = lines[i]
        fence = FENCE_LINE_RE.match(line)
        if fence:
            marker = fence.group(2)
            lang = fence.group(3).strip()
            body = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(marker):
                body.append(lines[i])
                i += 1
            i += 1  # closing fence
            out.append(code_block(lang, "\n".join(body)))
            prev_blank = False
            continue
        if prev_blank and (line.startswith("    ") or line.startswith("\t")) and line.strip():
            body = []
            while i < len(lines) and (
                lines[i].startswith("    ") or lines[i].startswith("\t") or not lines[i].strip()
            ):
                body.append(lines[i])
                i += 1
            while body and not body[-1].strip():
                body.pop()
            dedented = "\n".join(b[4:] if b.startswith("    ") else b.lstrip("\t") for b in body)
            out.append(code_block(detect_language(dedented), dedented))
            out.append("")
            prev_blank = True
            continue
        stripped = line.lstrip()
        indent = line[: len(line) - len(stripped)]
        formatted = ESM_LINE_RE.sub(_escape_first_letter, format_inline(stripped, resolve))
        out.append(indent + formatted if stripped else "")
        prev_blank = not line.strip()
        i += 1
    return "\n".join(out).strip("\n")
