"""Exception types raised by the documentation generator."""

from pathlib import Path


class GeneratorError(Exception):
    """Base class for failures that abort a package run."""


class ConfigurationError(GeneratorError):
    """Raised when the configuration file or a requested package is invalid."""


class SourceReadError(GeneratorError):
    """Raised when a source root or source file cannot be read."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize the error with an optional offending path."""
        super().__init__(message)
        self.path = path


class ParseError(GeneratorError):
    """Raised when a doc comment tag does not match its grammar."""


class WriteError(GeneratorError):
    """Raised when generated pages or the navigation document cannot be written."""


class RenderError(GeneratorError):
    """Raised when an entity cannot be rendered as MDX."""
