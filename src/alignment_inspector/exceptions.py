"""Custom exception hierarchy for alignment-inspector."""


class InspectorError(Exception):
    """Base exception for all alignment-inspector errors."""


class DocumentError(InspectorError):
    """A base document could not be parsed (bad JSON, wrong shape)."""


class ConfigError(InspectorError):
    """Invalid configuration file."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)


class StorageError(InspectorError):
    """Patch persistence failed and the caller asked to be told."""


class EntityNotFoundError(InspectorError):
    """A glossary entry, rule or word requested by id doesn't exist."""
