"""Exceptions raised by the ingestion and parsing stages."""

from __future__ import annotations

from typing import Optional


class TaxEngineError(Exception):
    """Base class for errors surfaced to the CLI and UI."""


class ResolutionError(TaxEngineError):
    """The user identifier could not be turned into a wallet address."""


class FetchError(TaxEngineError):
    """Trade history retrieval failed.

    ``partial_count`` is the number of activity records fetched before the
    failure. A partial history is never valid for tax purposes unless the
    caller asked for one explicitly.
    """

    def __init__(self, message: str, partial_count: int = 0):
        super().__init__(message)
        self.partial_count = partial_count


class OffsetCeilingError(FetchError):
    """The API refused the requested offset. Handled by window rotation."""


class FormatError(TaxEngineError):
    """An uploaded CSV is missing a required column or has no data rows."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column
