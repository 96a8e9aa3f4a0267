"""
apkg-import - read decks and notes out of Anki packages.

Core API:
    parse_apkg   - Parse an .apkg file into non-empty decks and their notes
    select_decks - Restrict a parse result to chosen decks

Modules:
    archive     - Locate and decompress the collection database
    collection  - Temporary sqlite3 copy of the collection
    schema      - Deck metadata for legacy and anki21b schemas
    resolver    - Note to deck assignment
    normalize   - Field splitting and HTML stripping
    text_import - Plain-text card exports
    cli         - Command-line interface
"""

from apkg_import.errors import (
    ApkgError,
    ArchiveError,
    CorruptArchive,
    CorruptCollection,
    DecompressionFailed,
    MalformedDeckData,
    MissingCollection,
    MissingDeckConfig,
    SchemaError,
)
from apkg_import.models import Deck, Note, ParseResult
from apkg_import.normalize import split_fields, strip_html
from apkg_import.parser import parse_apkg, select_decks
from apkg_import.text_import import parse_text_export

__all__ = [
    "parse_apkg",
    "select_decks",
    "parse_text_export",
    "split_fields",
    "strip_html",
    "Deck",
    "Note",
    "ParseResult",
    "ApkgError",
    "ArchiveError",
    "MissingCollection",
    "CorruptArchive",
    "DecompressionFailed",
    "SchemaError",
    "MissingDeckConfig",
    "MalformedDeckData",
    "CorruptCollection",
]
