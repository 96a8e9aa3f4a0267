"""
Assign every note to exactly one deck.

A note can have cards in several decks (e.g. "Basic (and reversed card)" with
the reverse cards moved elsewhere). The owner is always the lowest deck id
among the note's cards. Both the per-deck note lists and the per-deck counts
come from this one grouping, so they cannot disagree.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import TypeVar

T = TypeVar("T")


def owning_decks(cards: Iterable[tuple[int, int]]) -> dict[int, int]:
    """
    Map each note id to the minimum deck id among its cards.

    :param cards: ``(note_id, deck_id)`` pairs, in any order.
    :returns: Dict mapping note id to owning deck id.
    """
    owners: dict[int, int] = {}
    for note_id, deck_id in cards:
        current = owners.get(note_id)
        if current is None or deck_id < current:
            owners[note_id] = deck_id
    return owners


def group_notes(notes: Iterable[tuple[int, T]], owners: dict[int, int]) -> dict[int, list[T]]:
    """
    Bucket notes under their owning deck, ordered by note id.

    Notes without any card have no owner and are left out.

    :param notes: ``(note_id, note)`` pairs.
    :param owners: Result of :func:`owning_decks`.
    :returns: Dict mapping deck id to its notes.
    """
    groups: dict[int, list[T]] = defaultdict(list)
    for note_id, note in sorted(notes, key=lambda pair: pair[0]):
        deck_id = owners.get(note_id)
        if deck_id is not None:
            groups[deck_id].append(note)
    return dict(groups)


def note_counts(groups: dict[int, list]) -> dict[int, int]:
    """Per-deck note counts, derived from the grouped notes themselves."""
    return {deck_id: len(notes) for deck_id, notes in groups.items()}
