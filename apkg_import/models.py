"""
Result types produced by the package importer.
"""

from dataclasses import dataclass, field
from enum import Enum


class SchemaVariant(Enum):
    """Collection schema generation, decided by the archive entry name.

    - ``CURRENT``: ``collection.anki21b``, zstd-compressed, ``decks`` table
    - ``LEGACY``: ``collection.anki21`` / ``collection.anki2``, deck map as
      JSON in ``col.decks``
    """

    CURRENT = "current"
    LEGACY = "legacy"

    @property
    def compressed(self) -> bool:
        return self is SchemaVariant.CURRENT


@dataclass(frozen=True)
class CollectionEntry:
    """The collection database entry located inside an archive."""

    name: str
    data: bytes = field(repr=False)
    variant: SchemaVariant


@dataclass(frozen=True)
class Deck:
    """A deck with at least one resolved note."""

    id: int
    name: str
    note_count: int


@dataclass(frozen=True)
class Note:
    """Normalized note content: first two fields plus the raw tag string."""

    front: str
    back: str
    tags: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"front": self.front, "back": self.back, "tags": self.tags}


@dataclass(frozen=True)
class ParseResult:
    """
    Decks and their notes recovered from one package.

    For every deck, ``len(notes_by_deck[deck.id]) == deck.note_count`` and the
    count is never zero. ``notes_by_deck`` has exactly one key per deck.
    """

    decks: list[Deck]
    notes_by_deck: dict[int, list[Note]]

    def deck(self, deck_id: int) -> Deck | None:
        """Return the deck with ``deck_id``, or None if it is not in the result."""
        for deck in self.decks:
            if deck.id == deck_id:
                return deck
        return None

    @property
    def total_notes(self) -> int:
        return sum(deck.note_count for deck in self.decks)

    def to_dict(self) -> dict:
        """
        Render the result as JSON-compatible data.

        :returns: Dict with ``decks`` (list of ``id``, ``name``, ``noteCount``)
            and ``notesByDeck`` (deck id as string to list of note dicts).
        """
        return {
            "decks": [
                {"id": deck.id, "name": deck.name, "noteCount": deck.note_count}
                for deck in self.decks
            ],
            "notesByDeck": {
                str(deck_id): [note.to_dict() for note in notes]
                for deck_id, notes in self.notes_by_deck.items()
            },
        }
