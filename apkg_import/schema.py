"""
Read deck metadata from either collection schema generation.

Schema Differences (anki21b vs legacy)
--------------------------------------
Legacy (anki2/anki21):
    - Decks stored as JSON in the single ``col`` row, ``decks`` column::

        {"1": {"id": 1, "name": "Default", ...},
         "1650000000000": {"id": 1650000000000, "name": "Spanish::Verbs", ...}}

Anki21b:
    - Decks stored in a separate ``decks`` table (id, name, ...)
    - Hierarchy levels in ``decks.name`` are separated by ``\\x1f`` instead of ``::``

Both are turned into the same ``{deck_id: DeckInfo}`` mapping here, so nothing
downstream needs to know which generation the package was.
"""

import json
import sqlite3
from dataclasses import dataclass

from apkg_import.errors import CorruptCollection, MalformedDeckData, MissingDeckConfig
from apkg_import.models import SchemaVariant

DECK_NAME_SEPARATOR = "\x1f"
DECK_PATH_SEPARATOR = "::"


@dataclass(frozen=True)
class DeckInfo:
    id: int
    name: str


@dataclass(frozen=True)
class LegacyDeckSource:
    """Deck map decoded from the ``col.decks`` JSON blob."""

    blob: dict


@dataclass(frozen=True)
class CurrentDeckSource:
    """``(id, name)`` rows of the ``decks`` table."""

    rows: list[tuple]


DeckSource = LegacyDeckSource | CurrentDeckSource


def load_deck_source(conn: sqlite3.Connection, variant: SchemaVariant) -> DeckSource:
    """
    Query the deck metadata for ``variant``.

    :param conn: Open collection connection.
    :param variant: Schema generation of the collection.
    :raises MissingDeckConfig: Legacy collection without a ``col`` deck map.
    :raises MalformedDeckData: Legacy deck map is not a JSON object.
    :raises CorruptCollection: The expected table cannot be queried.
    """
    cursor = conn.cursor()
    try:
        if variant is SchemaVariant.CURRENT:
            cursor.execute("SELECT id, name FROM decks")
            return CurrentDeckSource([tuple(row) for row in cursor.fetchall()])

        cursor.execute("SELECT decks FROM col")
        row = cursor.fetchone()
    except sqlite3.DatabaseError as exc:
        raise CorruptCollection(f"Cannot read deck metadata: {exc}") from exc

    if row is None or not row[0]:
        raise MissingDeckConfig("Collection has no deck configuration in col.decks")

    try:
        blob = json.loads(row[0])
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedDeckData(f"col.decks is not valid JSON: {exc}") from exc
    if not isinstance(blob, dict):
        raise MalformedDeckData(f"col.decks must be a JSON object, got {type(blob).__name__}")
    return LegacyDeckSource(blob)


def deck_map(source: DeckSource) -> dict[int, DeckInfo]:
    """
    Convert a deck source into ``{deck_id: DeckInfo}``.

    :raises MalformedDeckData: If a deck has a non-integer id or no string name.
    """
    decks = {}
    if isinstance(source, CurrentDeckSource):
        for row in source.rows:
            if len(row) < 2:
                raise MalformedDeckData(f"Unexpected decks row: {row!r}")
            deck = _deck_info(row[0], row[1])
            decks[deck.id] = DeckInfo(
                deck.id, deck.name.replace(DECK_NAME_SEPARATOR, DECK_PATH_SEPARATOR)
            )
        return decks

    for key, value in source.blob.items():
        if not isinstance(value, dict):
            raise MalformedDeckData(f"Deck {key!r} is not a JSON object")
        deck = _deck_info(value.get("id", key), value.get("name"))
        decks[deck.id] = deck
    return decks


def _deck_info(deck_id, name) -> DeckInfo:
    if isinstance(deck_id, bool) or not isinstance(deck_id, (int, str)):
        raise MalformedDeckData(f"Invalid deck id: {deck_id!r}")
    try:
        deck_id = int(deck_id)
    except ValueError as exc:
        raise MalformedDeckData(f"Invalid deck id: {deck_id!r}") from exc
    if not isinstance(name, str):
        raise MalformedDeckData(f"Deck {deck_id} has no name")
    return DeckInfo(deck_id, name)
