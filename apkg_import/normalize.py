"""
Clean note field content for display.
"""

import re

from apkg_import.models import Note

FIELD_SEPARATOR = "\x1f"

_BR_RE = re.compile(r"<br\s*/?\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def split_fields(flds: str) -> list[str]:
    """Split a note's ``flds`` column on the unit separator."""
    return flds.split(FIELD_SEPARATOR)


def strip_html(html: str) -> str:
    """
    Remove markup from a field value.

    Line breaks (``<br>``, ``<br/>``, ``<br />``, any case) become ``\\n``,
    every other tag is dropped, and surrounding whitespace is trimmed.

    >>> strip_html("line1<br>line2")
    'line1\\nline2'
    """
    text = _BR_RE.sub("\n", html)
    return _TAG_RE.sub("", text).strip()


def normalize_note(flds: str, tags: str | None) -> Note | None:
    """
    Build a :class:`Note` from raw ``notes.flds`` and ``notes.tags`` values.

    Fields after the second are ignored; missing ones are empty.

    :returns: The note, or None if both front and back are empty.
    """
    fields = split_fields(flds or "")
    front = strip_html(fields[0]) if len(fields) > 0 else ""
    back = strip_html(fields[1]) if len(fields) > 1 else ""
    if not front and not back:
        return None
    return Note(front=front, back=back, tags=(tags or "").strip())
