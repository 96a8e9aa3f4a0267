"""
Locate and decode the collection database inside an .apkg archive.

An .apkg file is a ZIP archive containing one of:

- collection.anki21b: Anki 2.1.50+ format (zstd-compressed SQLite, new schema)
- collection.anki21: Anki 2.1 format (plain SQLite, legacy schema)
- collection.anki2: Legacy Anki 2.0 format (plain SQLite)

Packages exported by recent Anki versions may carry both a ``collection.anki21b``
and a stub ``collection.anki2`` telling old clients to upgrade, so the lookup
order matters.
"""

import io
import logging
import zipfile
import zlib

import zstandard

from apkg_import.errors import CorruptArchive, DecompressionFailed, MissingCollection
from apkg_import.models import CollectionEntry, SchemaVariant

logger = logging.getLogger(__name__)

# First match wins
COLLECTION_ENTRIES: tuple[tuple[str, SchemaVariant], ...] = (
    ("collection.anki21b", SchemaVariant.CURRENT),
    ("collection.anki21", SchemaVariant.LEGACY),
    ("collection.anki2", SchemaVariant.LEGACY),
)


def read_collection_entry(data: bytes) -> CollectionEntry:
    """
    Return the collection database entry of an .apkg archive.

    :param data: Raw bytes of the ZIP archive.
    :returns: The matched entry with its bytes and schema variant.
    :raises CorruptArchive: If ``data`` is not a readable ZIP archive.
    :raises MissingCollection: If none of the known entry names is present.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data), "r") as zip_ref:
            names = set(zip_ref.namelist())
            for name, variant in COLLECTION_ENTRIES:
                if name in names:
                    logger.debug("Using %s (%s schema)", name, variant.value)
                    return CollectionEntry(name, zip_ref.read(name), variant)
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as exc:
        # NotImplementedError: unknown compression method, RuntimeError: encrypted member
        raise CorruptArchive(f"Not a valid .apkg archive: {exc}") from exc

    expected = ", ".join(name for name, _ in COLLECTION_ENTRIES)
    raise MissingCollection(f"No collection database in archive (expected one of {expected})")


def decode_payload(entry: CollectionEntry) -> bytes:
    """
    Return the raw SQLite bytes of a collection entry.

    Compressed entries are run through zstd; others pass through unchanged.

    :param entry: Entry from :func:`read_collection_entry`.
    :raises DecompressionFailed: If the zstd data is malformed or truncated.
    """
    if not entry.variant.compressed:
        return entry.data

    # content size may not be in the frame header
    dobj = zstandard.ZstdDecompressor().decompressobj()
    try:
        decompressed = dobj.decompress(entry.data)
    except zstandard.ZstdError as exc:
        raise DecompressionFailed(f"Cannot decompress {entry.name}: {exc}") from exc
    if not dobj.eof:
        raise DecompressionFailed(f"Cannot decompress {entry.name}: truncated zstd frame")

    logger.debug("Decompressed %s: %d -> %d bytes", entry.name, len(entry.data), len(decompressed))
    return decompressed
