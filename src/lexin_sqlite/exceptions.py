"""Custom exception hierarchy for lexin-sqlite."""

from __future__ import annotations


class LexinError(Exception):
    """Base exception for all lexin-sqlite errors."""


class ConfigError(LexinError):
    """Bad or missing command-line input (no source file, no target language)."""


class DatabaseError(LexinError):
    """Store cannot be opened, initialized, or has an incompatible schema."""


class DataImportError(LexinError):
    """Source document cannot be opened or decoded."""


class LoadError(LexinError):
    """Insert or transaction failure while persisting a dictionary.

    The whole transaction has been rolled back when this is raised.
    ``word_index`` is zero-based; ``sense`` reads like ``"base sense #2"``.
    """

    def __init__(
        self,
        message: str,
        *,
        word_index: int | None = None,
        word_value: str | None = None,
        sense: str | None = None,
    ) -> None:
        super().__init__(message)
        self.word_index = word_index
        self.word_value = word_value
        self.sense = sense


class ImportCancelledError(LoadError):
    """The caller asked to stop the import before it committed."""
