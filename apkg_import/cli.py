"""
CLI for checking what an Anki package (.apkg) import would produce.

Commands:
    inspect decks - Non-empty decks with their note counts
    inspect notes - Normalized notes, optionally for a single deck
    dump          - Write the full import result as JSON
    text          - Preview a plain-text (tab/comma separated) card export
"""

import json
import logging
import sys
from pathlib import Path

import cyclopts

from apkg_import.errors import ApkgError
from apkg_import.models import ParseResult
from apkg_import.parser import parse_apkg, select_decks
from apkg_import.text_import import parse_text_export

app = cyclopts.App(help="Inspect the decks and notes imported from Anki packages")


def _load(apkg_path: Path, verbose: bool) -> ParseResult:
    """Parse the package, exiting with status 1 on import errors."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return parse_apkg(apkg_path)
    except FileNotFoundError:
        print(f"Error: File not found: {apkg_path}")
        sys.exit(1)
    except ApkgError as exc:
        print(f"Error: {exc}")
        sys.exit(1)


def _preview(text: str, width: int) -> str:
    text = text.replace("\n", " / ")
    return text if len(text) <= width else text[: width - 3] + "..."


# =============================================================================
# Inspect commands
# =============================================================================

inspect_app = cyclopts.App(name="inspect", help="Inspect the import result of a package")
app.command(inspect_app)


@inspect_app.command
def decks(apkg_path: Path, *, verbose: bool = False):
    """List decks that contain at least one note.

    :param apkg_path: Path to .apkg file.
    :param verbose: Log pipeline details to stderr.
    """
    result = _load(apkg_path, verbose)

    print(f"Decks ({len(result.decks)}):\n")
    for deck in result.decks:
        print(f"  {deck.name}")
        print(f"    ID: {deck.id}")
        print(f"    Notes: {deck.note_count}")
        print()
    print(f"Total notes: {result.total_notes}")


@inspect_app.command
def notes(
    apkg_path: Path,
    *,
    deck: int | None = None,
    limit: int = 10,
    verbose: bool = False,
):
    """Show normalized notes per deck.

    :param apkg_path: Path to .apkg file.
    :param deck: Only show this deck ID.
    :param limit: Maximum notes to show per deck (0 for all).
    :param verbose: Log pipeline details to stderr.
    """
    result = _load(apkg_path, verbose)
    if deck is not None:
        result = select_decks(result, [deck])
        if not result.decks:
            print(f"No notes in deck {deck}")
            return

    for d in result.decks:
        print(f"{d.name} ({d.note_count} notes):")
        print("-" * 40)
        shown = result.notes_by_deck[d.id][:limit] if limit else result.notes_by_deck[d.id]
        for note in shown:
            print(f"  Front: {_preview(note.front, 80)}")
            print(f"  Back:  {_preview(note.back, 80)}")
            if note.tags:
                print(f"  Tags:  {note.tags}")
            print()
        remaining = d.note_count - len(shown)
        if remaining > 0:
            print(f"  ... and {remaining} more notes\n")


# =============================================================================
# Export commands
# =============================================================================


@app.command
def dump(apkg_path: Path, *, output: Path | None = None, verbose: bool = False):
    """Write decks and notes as JSON.

    :param apkg_path: Path to .apkg file.
    :param output: JSON file to write. Prints to stdout if omitted.
    :param verbose: Log pipeline details to stderr.
    """
    result = _load(apkg_path, verbose)
    data = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)

    if output is None:
        print(data)
        return

    output.write_text(data + "\n", encoding="utf-8")
    print(f"Wrote {len(result.decks)} decks, {result.total_notes} notes to {output}")


@app.command
def text(path: Path, *, limit: int = 10):
    """Preview cards from a plain-text (tab or comma separated) export.

    :param path: Path to the .txt/.csv/.tsv file.
    :param limit: Maximum cards to show (0 for all).
    """
    try:
        cards = parse_text_export(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)
    except UnicodeDecodeError:
        print(f"Error: {path} is not UTF-8 text")
        sys.exit(1)
    print(f"Total cards: {len(cards)}\n")

    for i, card in enumerate(cards[:limit] if limit else cards):
        print(f"Card {i}:")
        print(f"  Front: {_preview(card.front, 80)}")
        print(f"  Back:  {_preview(card.back, 80)}")
        if card.tags:
            print(f"  Tags:  {card.tags}")
        print()


def main() -> None:
    """Main entry point. Invokes the cyclopts app."""
    app()


if __name__ == "__main__":
    main()
