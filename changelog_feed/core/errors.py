"""Exception taxonomy for the changelog feed.

Per-record malformations inside a feed document are never raised; they are
skipped by the parser. Everything here is a failure the caller must see.
"""

from __future__ import annotations


class ChangelogError(Exception):
    """Base class for every error surfaced by the changelog feed."""


class FetchError(ChangelogError):
    """A feed document could not be retrieved (transport, HTTP status or timeout)."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(ChangelogError):
    """The document violates an assumption of the extraction pattern.

    Raised for the whole document, since it means the parser's view of the
    page layout is stale rather than that a single entry is malformed.
    """


class InvalidArgumentError(ChangelogError):
    """A tool call carried arguments that do not match the tool's schema."""


class UnknownToolError(ChangelogError):
    """A tool call named a tool that does not exist."""
