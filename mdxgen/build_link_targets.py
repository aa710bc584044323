"""Logic for mapping documented symbol names to site URLs."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from mdxgen.entity import DocumentedEntity

TARGET_NOISE_RE = re.compile(r"^module:[^.~#]*[.~#]|\(\)$")


@dataclass(frozen=True)
class LinkTarget:
    """A page, or an anchor on a page, a symbol name links to."""

    title: str
    page_path: str  # site path, e.g. /packages/client/index#model


def build_link_targets(
    entities: list[DocumentedEntity], pages: dict[str, str]
) -> dict[str, LinkTarget]:
    """Build a map of symbol names to link targets.

    ``pages`` maps each entity's full name to the site path that shows it,
    anchor included. Members are reachable as ``Class.member`` and
    ``Class#member``.
    """
    targets: dict[str, LinkTarget] = {}
    for entity in entities:
        page = pages.get(entity.full_name)
        if page is None:
            continue
        target = LinkTarget(title=entity.full_name, page_path=page)
        targets.setdefault(entity.full_name, target)
        targets.setdefault(entity.name, target)
        _add_member_targets(targets, entity, page)
    return targets


def _add_member_targets(
    targets: dict[str, LinkTarget], entity: DocumentedEntity, page: str
) -> None:
    base = page.split("#", 1)[0]
    for member in entity.members:
        title = f"{entity.full_name}.{member.name}"
        target = LinkTarget(title=title, page_path=f"{base}#{entity.member_anchor(member)}")
        targets.setdefault(title, target)
        targets.setdefault(f"{entity.full_name}#{member.name}", target)


def make_resolver(targets: dict[str, LinkTarget]) -> Callable[[str], str | None]:
    """Return a ``{@link}`` resolver backed by ``targets``."""

    def resolve(name: str) -> str | None:
        if re.match(r"https?://", name):
            return name
        cleaned = TARGET_NOISE_RE.sub("", name.strip())
        for candidate in (name, cleaned, cleaned.replace("~", ".").replace("#", ".")):
            target = targets.get(candidate)
            if target is not None:
                return target.page_path
        return None

    return resolve
