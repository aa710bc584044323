"""Data models for documented entities and their members."""

from dataclasses import dataclass, field
from pathlib import Path

from mdxgen.doc_tags import DocComment
from mdxgen.header_slug import header_slug


@dataclass(frozen=True)
class Parameter:
    """A parameter of a function, hook, component or method."""

    name: str
    comment_type: str | None = None
    resolved_type: str | None = None
    optional: bool = False
    default: str | None = None
    description: str = ""
    rest: bool = False

    @property
    def display_type(self) -> str:
        return self.resolved_type or self.comment_type or "any"


@dataclass(frozen=True)
class ReturnDescriptor:
    """What a callable returns."""

    comment_type: str | None = None
    resolved_type: str | None = None
    description: str = ""

    @property
    def display_type(self) -> str:
        return self.resolved_type or self.comment_type or "any"


@dataclass(frozen=True)
class Member:
    """A constructor, method or property of a class or interface."""

    name: str
    kind: str  # constructor | method | property
    comment: DocComment = field(default_factory=DocComment)
    params: tuple[Parameter, ...] = ()
    returns: ReturnDescriptor | None = None
    is_static: bool = False
    is_async: bool = False
    accessor: str | None = None  # get | set
    optional: bool = False
    value_type: str | None = None
    resolved_type: str | None = None
    default: str | None = None
    line: int = 0
    signature: str = ""

    @property
    def display_type(self) -> str:
        return self.resolved_type or self.value_type or "any"

    @property
    def is_deprecated(self) -> bool:
        return self.comment.deprecated is not None


@dataclass(frozen=True)
class DocumentedEntity:
    """A top-level documented symbol of a package."""

    name: str
    kind: str  # class | function | hook | component | constant | interface | type | enum
    comment: DocComment
    source_file: Path
    line: int = 0
    members: tuple[Member, ...] = ()
    params: tuple[Parameter, ...] = ()
    returns: ReturnDescriptor | None = None
    signature: str = ""
    extends: tuple[str, ...] = ()
    implements: tuple[str, ...] = ()
    type_parameters: tuple[str, ...] = ()
    type_text: str | None = None
    variants: tuple[str, ...] = ()
    alias_of: str | None = None
    qualified_name: str = ""
    is_async: bool = False

    @property
    def full_name(self) -> str:
        return self.qualified_name or self.name

    @property
    def anchor(self) -> str:
        return header_slug(self.full_name)

    def member_anchor(self, member: Member) -> str:
        """Return the anchor of a member section."""
        return header_slug(self.full_name, member.name)

    @property
    def constructor(self) -> Member | None:
        for member in self.members:
            if member.kind == "constructor":
                return member
        return None

    @property
    def is_deprecated(self) -> bool:
        return self.comment.deprecated is not None
