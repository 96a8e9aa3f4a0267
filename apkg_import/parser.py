"""
Turn an Anki package (.apkg) into decks and their notes.

Pipeline::

    archive bytes
      -> read_collection_entry   (pick collection.anki21b / .anki21 / .anki2)
      -> decode_payload          (zstd for anki21b)
      -> open_collection         (private temp file + sqlite3 connection)
      -> load_deck_source        (decks table or col.decks JSON)
      -> owning_decks            (note -> lowest deck id among its cards)
      -> normalize_note          (first two fields, HTML stripped)
      -> ParseResult             (decks without notes dropped)

Usage::

    result = parse_apkg("Spanish.apkg")
    for deck in result.decks:
        print(deck.name, deck.note_count)
        for note in result.notes_by_deck[deck.id]:
            print(note.front, "->", note.back)
"""

import logging
import os
import sqlite3
from collections.abc import Iterable
from typing import BinaryIO

from apkg_import.archive import decode_payload, read_collection_entry
from apkg_import.collection import open_collection
from apkg_import.errors import CorruptCollection
from apkg_import.models import Deck, Note, ParseResult
from apkg_import.normalize import normalize_note
from apkg_import.resolver import group_notes, note_counts, owning_decks
from apkg_import.schema import DeckInfo, deck_map, load_deck_source

logger = logging.getLogger(__name__)

Source = bytes | bytearray | memoryview | str | os.PathLike | BinaryIO


def read_source(source: Source) -> bytes:
    """Return the raw bytes of ``source`` (bytes, a path, or a binary file object)."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return f.read()
    return source.read()


def parse_apkg(source: Source) -> ParseResult:
    """
    Parse an Anki package into its non-empty decks and their notes.

    The decoded database only lives in a temp directory for the duration of
    the call; it is removed on success and on every error.

    :param source: Package bytes, a path to the .apkg file, or an open binary file.
    :returns: :class:`ParseResult` where every deck has at least one note.
    :raises ApkgError: On any archive, decompression or schema problem. No
        partial result is returned.
    """
    entry = read_collection_entry(read_source(source))
    db_bytes = decode_payload(entry)

    with open_collection(db_bytes) as conn:
        decks = deck_map(load_deck_source(conn, entry.variant))
        notes, cards = _read_notes_and_cards(conn)

    result = assemble(decks, notes, cards)
    logger.debug(
        "Parsed %s: %d decks, %d notes", entry.name, len(result.decks), result.total_notes
    )
    return result


def _read_notes_and_cards(conn: sqlite3.Connection) -> tuple[list, list]:
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT id, flds, tags FROM notes")
        notes = [(row["id"], (row["flds"], row["tags"])) for row in cursor.fetchall()]
        cursor.execute("SELECT nid, did FROM cards")
        cards = [(row["nid"], row["did"]) for row in cursor.fetchall()]
    except sqlite3.DatabaseError as exc:
        raise CorruptCollection(f"Cannot read notes and cards: {exc}") from exc
    return notes, cards


def assemble(
    decks: dict[int, DeckInfo],
    notes: Iterable[tuple[int, tuple[str, str]]],
    cards: Iterable[tuple[int, int]],
) -> ParseResult:
    """
    Build a :class:`ParseResult` from deck metadata and raw note/card rows.

    :param decks: Output of :func:`apkg_import.schema.deck_map`.
    :param notes: ``(note_id, (flds, tags))`` rows.
    :param cards: ``(note_id, deck_id)`` rows.
    """
    raw_by_deck = group_notes(notes, owning_decks(cards))

    notes_by_deck: dict[int, list[Note]] = {}
    for deck_id, raw_notes in raw_by_deck.items():
        if deck_id not in decks:
            logger.warning("%d notes reference unknown deck %d, skipping", len(raw_notes), deck_id)
            continue
        normalized = [normalize_note(flds, tags) for flds, tags in raw_notes]
        kept = [note for note in normalized if note is not None]
        if kept:
            notes_by_deck[deck_id] = kept

    deck_list = sorted(
        (
            Deck(id=deck_id, name=decks[deck_id].name, note_count=count)
            for deck_id, count in note_counts(notes_by_deck).items()
        ),
        key=lambda deck: (deck.name.casefold(), deck.id),
    )
    return ParseResult(
        decks=deck_list,
        notes_by_deck={deck.id: notes_by_deck[deck.id] for deck in deck_list},
    )


def select_decks(result: ParseResult, deck_ids: Iterable[int]) -> ParseResult:
    """
    Restrict a result to the given deck ids, keeping deck order.

    Ids that are not in ``result`` are ignored.
    """
    wanted = set(deck_ids)
    decks = [deck for deck in result.decks if deck.id in wanted]
    return ParseResult(
        decks=decks,
        notes_by_deck={deck.id: list(result.notes_by_deck[deck.id]) for deck in decks},
    )
