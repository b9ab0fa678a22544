"""Error types shared by the source adapters and the sources file."""

from __future__ import annotations


class SourceError(Exception):
    """A check for a single item failed.

    Item-scoped and never fatal to a run: the platform checker turns it into
    an error result for that one item.
    """


class NetworkUnavailable(SourceError):
    """The endpoint was unreachable or the transport failed."""


class MalformedResponse(SourceError):
    """The payload could not be parsed as the expected wire format."""


class MissingField(SourceError):
    """The payload parsed but lacks an expected attribute."""


class ConfigError(Exception):
    """The sources file could not be read, parsed or written."""
