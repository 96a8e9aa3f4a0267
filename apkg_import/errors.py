"""
Exceptions raised while importing an Anki package.

Every failure of :func:`apkg_import.parse_apkg` is an :class:`ApkgError`.
None of them are retried; the caller decides whether to ask for another file.
"""


class ApkgError(Exception):
    """Base class for all package import errors."""


class ArchiveError(ApkgError):
    """The ZIP container or its collection entry could not be read."""


class MissingCollection(ArchiveError):
    """No recognizable collection database entry in the archive."""


class CorruptArchive(ArchiveError):
    """The byte stream is not a readable ZIP archive."""


class DecompressionFailed(ArchiveError):
    """The zstd-compressed collection entry is malformed or truncated."""


class SchemaError(ApkgError):
    """The collection database does not have the expected shape."""


class MissingDeckConfig(SchemaError):
    """Legacy collection without the ``col`` row holding the deck map."""


class MalformedDeckData(SchemaError):
    """Deck metadata could not be parsed (bad JSON, ids or names)."""


class CorruptCollection(SchemaError):
    """The decoded payload is not a usable SQLite collection."""
