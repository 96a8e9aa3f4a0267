"""
Temporary, query-able copy of a decoded collection database.
"""

import contextlib
import logging
import os
import shutil
import sqlite3
import tempfile
from collections.abc import Iterator

logger = logging.getLogger(__name__)

DB_FILENAME = "collection.db"


def _unicase(a: str, b: str) -> int:
    """Case-insensitive collation used by the anki21b schema (decks.name etc)."""
    a, b = a.casefold(), b.casefold()
    return (a > b) - (a < b)


@contextlib.contextmanager
def open_collection(db_bytes: bytes) -> Iterator[sqlite3.Connection]:
    """
    Materialize ``db_bytes`` to a private temp file and yield a connection to it.

    Each call gets its own temp directory, so concurrent imports never share a
    path. On exit the connection is closed and the directory removed, whatever
    happened inside the ``with`` block. Cleanup problems are logged, never
    raised, so they cannot hide the caller's result or exception::

        with open_collection(decode_payload(entry)) as conn:
            conn.execute("SELECT id, flds, tags FROM notes")

    :param db_bytes: Raw SQLite file contents.
    :yields: ``sqlite3.Connection`` with ``sqlite3.Row`` rows.
    """
    temp_dir = tempfile.mkdtemp(prefix="apkg-import-")
    conn = None
    try:
        db_path = os.path.join(temp_dir, DB_FILENAME)
        with open(db_path, "wb") as f:
            f.write(db_bytes)

        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        # invalid UTF-8 in text columns becomes U+FFFD
        conn.text_factory = lambda raw: raw.decode("utf-8", errors="replace")
        conn.create_collation("unicase", _unicase)
        yield conn
    finally:
        if conn is not None:
            try:
                conn.close()
            except sqlite3.Error as exc:
                logger.warning("Failed to close collection database: %s", exc)
        try:
            shutil.rmtree(temp_dir)
        except OSError as exc:
            logger.warning("Failed to remove temporary directory %s: %s", temp_dir, exc)
