"""
Import cards from Anki's plain-text export (tab or comma separated).

Expected layout::

    #separator:tab
    #html:true
    front<TAB>back<TAB>tags

Lines starting with ``#`` are export directives and are skipped. An optional
header row naming ``front``/``back`` is skipped too.
"""

import csv

from apkg_import.models import Note
from apkg_import.normalize import strip_html


def detect_delimiter(line: str) -> str:
    """Tab if the line contains one, otherwise comma."""
    return "\t" if "\t" in line else ","


def _is_header(line: str) -> bool:
    lowered = line.lower()
    return "front" in lowered or "back" in lowered


def parse_text_export(text: str) -> list[Note]:
    """
    Parse a plain-text card export into notes.

    Columns are front, back, tags; missing columns are empty. Notes whose
    front and back are both empty after cleaning are dropped.

    :param text: File contents.
    :returns: Notes in file order.
    """
    lines = [
        line
        for line in text.strip().splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if not lines:
        return []

    delimiter = detect_delimiter(lines[0])
    if _is_header(lines[0]):
        lines = lines[1:]

    notes = []
    for row in csv.reader(lines, delimiter=delimiter, skipinitialspace=True):
        values = [value.strip() for value in row] + ["", "", ""]
        front, back, tags = values[:3]
        front = strip_html(front)
        back = strip_html(back)
        if not front and not back:
            continue
        notes.append(Note(front=front, back=back, tags=tags))
    return notes
