"""Errors raised by boughtlist."""

from __future__ import annotations

from pathlib import Path


class BoughtlistError(Exception):
    """Base error for boughtlist failures."""


class MissingInputError(BoughtlistError):
    """Raised when a raw batch is absent or has no order list."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Missing order input: {reason}")


class BatchFileError(BoughtlistError):
    """Raised when a saved page file cannot be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load page data from {path}: {reason}")


class CsvFormatError(BoughtlistError):
    """Raised when an exported CSV cannot be decoded or parsed back into orders."""
