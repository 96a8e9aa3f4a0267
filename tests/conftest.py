"""
Shared pytest fixtures for all tests.

Packages are built on the fly: a minimal SQLite collection in either schema
generation, zipped under the matching entry name (zstd-compressed for
collection.anki21b).
"""

import io
import json
import os
import sqlite3
import tempfile
import zipfile

import pytest
import zstandard

NOTES_AND_CARDS_SCHEMA = """
    CREATE TABLE notes (
        id integer PRIMARY KEY,
        mid integer NOT NULL DEFAULT 0,
        flds text NOT NULL,
        tags text NOT NULL
    );
    CREATE TABLE cards (
        id integer PRIMARY KEY,
        nid integer NOT NULL,
        did integer NOT NULL,
        ord integer NOT NULL DEFAULT 0
    );
"""

LEGACY_SCHEMA = """
    CREATE TABLE col (
        id integer PRIMARY KEY,
        models text NOT NULL DEFAULT '{}',
        decks text
    );
"""

CURRENT_SCHEMA = """
    CREATE TABLE col (id integer PRIMARY KEY);
    CREATE TABLE decks (
        id integer PRIMARY KEY NOT NULL,
        name text NOT NULL COLLATE unicase,
        common blob,
        kind blob
    );
    CREATE UNIQUE INDEX idx_decks_name ON decks (name);
"""

# Used by most tests: three decks, one left empty, one note with cards in two
# decks and one note without content.
SAMPLE_DECKS = {
    1: "Default",
    1700000000001: "Spanish\x1fVerbs",
    1700000000002: "Spanish\x1fNouns",
}
SAMPLE_NOTES = [
    (10, "<b>hablar</b>\x1fto speak", " verb ar "),
    (11, "comer\x1fto eat<br>to have lunch", ""),
    (12, "la casa\x1fthe house", "noun"),
    (13, "el perro\x1fthe dog", "noun"),
    (14, "<div></div>\x1f<br>", "empty"),
]
SAMPLE_CARDS = [
    (10, 1700000000001),
    (11, 1700000000001),
    # reversed card of "la casa" filed under Verbs: owner is the lower id
    (12, 1700000000002),
    (12, 1700000000001),
    (13, 1700000000002),
    (14, 1700000000002),
]


def _unicase(a, b):
    a, b = a.casefold(), b.casefold()
    return (a > b) - (a < b)


def build_collection(
    variant: str,
    decks: dict[int, str],
    notes: list[tuple[int, str, str]],
    cards: list[tuple[int, int]],
    legacy_decks_json: str | None = None,
    with_col_row: bool = True,
) -> bytes:
    """Return the bytes of a SQLite collection in the ``"legacy"`` or ``"current"`` schema."""
    with tempfile.TemporaryDirectory() as temp_dir:
        db_path = os.path.join(temp_dir, "collection.db")
        conn = sqlite3.connect(db_path)
        conn.create_collation("unicase", _unicase)
        conn.executescript(NOTES_AND_CARDS_SCHEMA)

        if variant == "current":
            conn.executescript(CURRENT_SCHEMA)
            conn.executemany(
                "INSERT INTO decks (id, name) VALUES (?, ?)", list(decks.items())
            )
        else:
            conn.executescript(LEGACY_SCHEMA)
            if legacy_decks_json is None:
                legacy_decks_json = json.dumps(
                    {
                        str(deck_id): {"id": deck_id, "name": name.replace("\x1f", "::")}
                        for deck_id, name in decks.items()
                    }
                )
            if with_col_row:
                conn.execute("INSERT INTO col (id, decks) VALUES (1, ?)", (legacy_decks_json,))

        conn.executemany("INSERT INTO notes (id, flds, tags) VALUES (?, ?, ?)", notes)
        conn.executemany(
            "INSERT INTO cards (id, nid, did) VALUES (?, ?, ?)",
            [(i + 1, nid, did) for i, (nid, did) in enumerate(cards)],
        )
        conn.commit()
        conn.close()

        with open(db_path, "rb") as f:
            return f.read()


def build_zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_ref:
        for name, data in entries.items():
            zip_ref.writestr(name, data)
    return buffer.getvalue()


def build_apkg(
    variant: str = "current",
    decks: dict[int, str] | None = None,
    notes: list[tuple[int, str, str]] | None = None,
    cards: list[tuple[int, int]] | None = None,
    entry_name: str | None = None,
    extra_entries: dict[str, bytes] | None = None,
    **collection_kwargs,
) -> bytes:
    """Build .apkg bytes; defaults to the sample collection."""
    db = build_collection(
        variant,
        SAMPLE_DECKS if decks is None else decks,
        SAMPLE_NOTES if notes is None else notes,
        SAMPLE_CARDS if cards is None else cards,
        **collection_kwargs,
    )
    if variant == "current":
        entry_name = entry_name or "collection.anki21b"
        db = zstandard.ZstdCompressor().compress(db)
    else:
        entry_name = entry_name or "collection.anki21"

    entries = {entry_name: db, "media": b"{}"}
    entries.update(extra_entries or {})
    return build_zip(entries)


@pytest.fixture
def make_apkg():
    """Factory fixture: ``make_apkg(variant, decks, notes, cards, ...)`` -> bytes."""
    return build_apkg


@pytest.fixture
def make_collection():
    """Factory fixture returning raw (uncompressed) collection bytes."""
    return build_collection


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def isolated_tmp(tmp_path, monkeypatch):
    """Point ``tempfile`` at an empty directory so leftovers can be detected."""
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root


@pytest.fixture
def genanki_apkg(tmp_path):
    """A real legacy package written by genanki, with two decks."""
    import genanki

    model = genanki.Model(
        1607392319,
        "Basic",
        fields=[{"name": "Front"}, {"name": "Back"}],
        templates=[
            {
                "name": "Card 1",
                "qfmt": "{{Front}}",
                "afmt": "{{FrontSide}}<hr id=answer>{{Back}}",
            }
        ],
    )

    verbs = genanki.Deck(2059400110, "Spanish::Verbs")
    verbs.add_note(genanki.Note(model=model, fields=["<b>hablar</b>", "to speak"], tags=["verb", "ar"]))
    verbs.add_note(genanki.Note(model=model, fields=["comer", "to eat<br />to have lunch"]))

    nouns = genanki.Deck(2059400111, "Spanish::Nouns")
    nouns.add_note(genanki.Note(model=model, fields=["la casa", "the house"], tags=["noun"]))

    path = tmp_path / "spanish.apkg"
    genanki.Package([verbs, nouns]).write_to_file(str(path))
    return path
