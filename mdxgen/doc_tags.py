"""Data models for parsed documentation comments."""

import re
from dataclasses import dataclass
from typing import TypeVar

SUMMARY_LIMIT = 150


@dataclass(frozen=True)
class ParamTag:
    """A ``@param`` tag."""

    name: str
    type: str | None
    description: str = ""
    optional: bool = False
    default: str | None = None


@dataclass(frozen=True)
class ReturnsTag:
    """A ``@returns`` tag."""

    type: str | None
    description: str = ""


@dataclass(frozen=True)
class ExampleTag:
    """An ``@example`` tag; ``code`` is dedented and otherwise verbatim."""

    code: str
    caption: str = ""


@dataclass(frozen=True)
class DeprecatedTag:
    """A ``@deprecated`` tag with an optional message."""

    message: str = ""


@dataclass(frozen=True)
class SinceTag:
    """A ``@since`` tag."""

    version: str


@dataclass(frozen=True)
class ThrowsTag:
    """A ``@throws`` tag."""

    type: str | None
    description: str = ""


@dataclass(frozen=True)
class SeeTag:
    """A ``@see`` tag."""

    target: str


@dataclass(frozen=True)
class FiresTag:
    """A ``@fires`` tag naming an event the item publishes."""

    event: str


@dataclass(frozen=True)
class ListensTag:
    """A ``@listens`` tag naming an event the item subscribes to."""

    event: str


@dataclass(frozen=True)
class TutorialTag:
    """A ``@tutorial`` tag."""

    name: str


@dataclass(frozen=True)
class TypeTag:
    """A ``@type`` tag on a property or constant."""

    type: str


@dataclass(frozen=True)
class PropertyTag:
    """A ``@property`` tag describing a field of a typedef or object."""

    name: str
    type: str | None
    description: str = ""
    optional: bool = False
    default: str | None = None


@dataclass(frozen=True)
class ExtraTag:
    """Any other tag, kept verbatim so nothing the author wrote is lost."""

    name: str
    text: str = ""


DocTag = (
    ParamTag
    | ReturnsTag
    | ExampleTag
    | DeprecatedTag
    | SinceTag
    | ThrowsTag
    | SeeTag
    | FiresTag
    | ListensTag
    | TutorialTag
    | TypeTag
    | PropertyTag
    | ExtraTag
)

T = TypeVar("T")


def extract_summary(description: str) -> str:
    """Return the first sentence of the first paragraph."""
    paragraph = description.strip().split("\n\n", 1)[0]
    paragraph = " ".join(paragraph.split())
    if not paragraph:
        return ""
    match = re.match(r"(.+?[.!?])(\s|$)", paragraph)
    if match and len(match.group(1)) <= SUMMARY_LIMIT:
        return match.group(1)
    if len(paragraph) <= SUMMARY_LIMIT:
        return paragraph
    return paragraph[:SUMMARY_LIMIT].rstrip() + "..."


@dataclass(frozen=True)
class DocComment:
    """A parsed ``/** ... */`` block: description, ordered tags and warnings."""

    description: str = ""
    tags: tuple[DocTag, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def summary(self) -> str:
        return extract_summary(self.description)

    def tags_of(self, kind: type[T]) -> list[T]:
        """Return the tags of one kind in source order."""
        return [t for t in self.tags if isinstance(t, kind)]

    @property
    def params(self) -> list[ParamTag]:
        return self.tags_of(ParamTag)

    @property
    def returns(self) -> ReturnsTag | None:
        found = self.tags_of(ReturnsTag)
        return found[0] if found else None

    @property
    def deprecated(self) -> DeprecatedTag | None:
        found = self.tags_of(DeprecatedTag)
        return found[0] if found else None

    @property
    def since(self) -> SinceTag | None:
        found = self.tags_of(SinceTag)
        return found[0] if found else None

    @property
    def declared_type(self) -> str | None:
        found = self.tags_of(TypeTag)
        return found[0].type if found else None

    @property
    def properties(self) -> list[PropertyTag]:
        return self.tags_of(PropertyTag)

    @property
    def extras(self) -> list[ExtraTag]:
        return self.tags_of(ExtraTag)

    def has_extra(self, name: str) -> bool:
        """Return True if an unrecognized tag with this name is present."""
        return any(t.name == name for t in self.extras)

    def extra_text(self, name: str) -> str | None:
        """Return the text of the first unrecognized tag with this name."""
        for tag in self.extras:
            if tag.name == name:
                return tag.text
        return None

    @property
    def is_empty(self) -> bool:
        return not self.description and not self.tags
