"""Logic for laying out a package's fragments and index page in memory."""

import logging
from dataclasses import dataclass

import yaml

from mdxgen.build_link_targets import build_link_targets, make_resolver
from mdxgen.entity import DocumentedEntity
from mdxgen.errors import RenderError
from mdxgen.file_safe import component_identifier, file_safe
from mdxgen.mdx_escape import LinkResolver, escape_attr, format_inline
from mdxgen.package_config import PackageConfig
from mdxgen.render_fragment import render_fragment

logger = logging.getLogger(__name__)

# kind -> (tab/section title, card icon, directory)
CATEGORIES = {
    "class": ("Classes", "cube", "classes"),
    "interface": ("Interfaces", "layer-group", "interfaces"),
    "hook": ("Hooks", "hook", "hooks"),
    "component": ("Components", "puzzle-piece", "components"),
    "function": ("Functions", "code", "functions"),
    "type": ("Types", "brackets-curly", "types"),
    "enum": ("Enums", "list", "enums"),
    "constant": ("Constants", "hashtag", "constants"),
}


@dataclass(frozen=True)
class OutputFile:
    """A generated file, relative to the docs root."""

    path: str  # posix, e.g. packages/client/index.mdx
    content: str
    entity: str = ""  # full name of the rendered entity, empty for the index
    category: str = ""


@dataclass(frozen=True)
class OutputPlan:
    """Everything one package run writes, rendered before anything touches disk."""

    package: str
    files: tuple[OutputFile, ...]
    nav_pages: tuple[str, ...]
    index_page: str

    @property
    def entity_count(self) -> int:
        return sum(1 for f in self.files if f.entity)


def frontmatter(title: str, description: str = "") -> str:
    """Render a YAML frontmatter block."""
    data = {"title": title}
    if description:
        data["description"] = description
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, width=1000)
    return f"---\n{dumped}---\n"


def _ordered(entities: list[DocumentedEntity]) -> list[DocumentedEntity]:
    """Group entities by category, keeping source order inside each group."""
    order = list(CATEGORIES)
    return sorted(entities, key=lambda e: order.index(e.kind) if e.kind in order else len(order))


def _unique(name: str, used: set[str]) -> str:
    candidate = name
    n = 2
    while candidate.lower() in used:
        candidate = f"{name}-{n}"
        n += 1
    used.add(candidate.lower())
    return candidate


def _render(entity: DocumentedEntity, resolve: LinkResolver) -> str:
    try:
        return render_fragment(entity, resolve)
    except Exception as e:
        msg = f"Cannot render {entity.full_name} ({entity.source_file}:{entity.line}): {e}"
        raise RenderError(msg) from e


def _summary(entity: DocumentedEntity) -> str:
    return format_inline(entity.comment.summary) if entity.comment.summary else ""


def _card(entity: DocumentedEntity, href: str) -> list[str]:
    _, icon, _ = CATEGORIES.get(entity.kind, ("", "code", ""))
    parts = [f'<Card title="{escape_attr(entity.full_name)}" icon="{icon}" href="{href}">']
    summary = _summary(entity)
    if summary:
        parts.append(f"  {summary}")
    parts.append("</Card>")
    return parts


def _index_header(package: PackageConfig) -> list[str]:
    return [
        frontmatter(package.display_name, f"API reference for {package.name}"),
        f"Install with `npm install {package.name}`.",
        "",
    ]


def _plan_pages(entities: list[DocumentedEntity], package: PackageConfig) -> OutputPlan:
    used: set[str] = {"index"}
    slugs = {id(e): _unique(file_safe(e.full_name), used) for e in entities}
    pages = {}
    for entity in entities:
        pages.setdefault(entity.full_name, f"/{package.output_path}/{slugs[id(entity)]}")
    resolve = make_resolver(build_link_targets(entities, pages))

    files = []
    nav_pages = [package.index_page]
    index = _index_header(package)
    current = None
    for entity in entities:
        slug = slugs[id(entity)]
        page = f"{package.output_path}/{slug}"
        body = _render(entity, resolve)
        content = frontmatter(entity.full_name, entity.comment.summary) + "\n" + body
        files.append(OutputFile(f"{page}.mdx", content, entity.full_name, entity.kind))
        nav_pages.append(page)

        if entity.kind != current:
            if current is not None:
                index += ["</CardGroup>", ""]
            title = CATEGORIES.get(entity.kind, (entity.kind.title(),))[0]
            index += [f"## {title}", "", "<CardGroup cols={2}>"]
            current = entity.kind
        index.extend(_card(entity, f"/{page}"))
    if current is not None:
        index += ["</CardGroup>", ""]

    files.insert(0, OutputFile(f"{package.index_page}.mdx", "\n".join(index).rstrip() + "\n"))
    return OutputPlan(package.key, tuple(files), tuple(nav_pages), package.index_page)


def _plan_imports(entities: list[DocumentedEntity], package: PackageConfig) -> OutputPlan:
    index_href = f"/{package.index_page}"
    pages = {e.full_name: f"{index_href}#{e.anchor}" for e in entities}
    resolve = make_resolver(build_link_targets(entities, pages))

    files = []
    used_names: set[str] = set()
    used_idents: set[str] = set()
    imports = []
    tabs: dict[str, list[str]] = {}
    for entity in entities:
        fallback = (entity.kind.title(), "code", entity.kind)
        title, _, directory = CATEGORIES.get(entity.kind, fallback)
        name = _unique(file_safe(entity.full_name), used_names)
        path = f"{package.output_path}/components/{directory}/{name}.mdx"
        files.append(OutputFile(path, _render(entity, resolve), entity.full_name, entity.kind))

        ident = component_identifier(directory, name)
        base, n = ident, 2
        while ident in used_idents:
            ident = f"{base}{n}"
            n += 1
        used_idents.add(ident)
        imports.append(f'import {ident} from "/{path}";')
        tabs.setdefault(title, []).append(f"<{ident} />")

    index = _index_header(package)
    if imports:
        index = [index[0], *imports, "", *index[1:]]
        index.append("<Tabs>")
        for title, components in tabs.items():
            index += [f'<Tab title="{title}">', ""]
            for component in components:
                index += [component, ""]
            index.append("</Tab>")
        index.append("</Tabs>")

    files.insert(0, OutputFile(f"{package.index_page}.mdx", "\n".join(index).rstrip() + "\n"))
    return OutputPlan(package.key, tuple(files), (package.index_page,), package.index_page)


def plan_outputs(entities: list[DocumentedEntity], package: PackageConfig) -> OutputPlan:
    """Render every fragment of a package and its index page.

    Nothing is written here, so a rendering failure leaves the docs tree
    untouched.
    """
    ordered = _ordered(entities)
    logger.debug(
        "Planning %d entities for %s in %s mode", len(ordered), package.key, package.output_mode
    )
    if package.output_mode == "pages":
        return _plan_pages(ordered, package)
    return _plan_imports(ordered, package)
