"""Sequence tokenizers for the bodies of tagged regions.

- :func:`split_chords`  — ``Dm7 → G7 | Cmaj7`` (arrows, dashes, pipes).
- :func:`split_degrees` — ``3m - 4 - 5 - 6m`` (hyphen, en and em dashes).
- :func:`split_score`   — labelled ``chords:`` / ``bass:`` lines.

A plain ``-`` separates degrees only; chord splitting leaves it inside the token.
"""

from __future__ import annotations

import re

_CHORD_SEPARATOR = re.compile(r"\s*(?:→|->|–|—|\|)\s*")
_DEGREE_SEPARATOR = re.compile(r"\s*[-–—]\s*")
_BASS_LINE = re.compile(r"^bass:\s*(.+)$", flags=re.IGNORECASE)
_CHORDS_LINE = re.compile(r"^chords:\s*(.+)$", flags=re.IGNORECASE)


def _split(pattern: re.Pattern[str], body: str) -> list[str]:
    return [piece.strip() for piece in pattern.split(body) if piece.strip()]


def split_chords(body: str) -> list[str]:
    """Split a chord progression into chord names.

    >>> split_chords("Dm7 → G7 → Cmaj7")
    ['Dm7', 'G7', 'Cmaj7']
    """
    return _split(_CHORD_SEPARATOR, body)


def split_degrees(body: str) -> list[str]:
    """Split a degree progression into degrees.

    >>> split_degrees("3m - 4 - 5 - 6m")
    ['3m', '4', '5', '6m']
    """
    return _split(_DEGREE_SEPARATOR, body)


def split_score(body: str) -> tuple[list[str] | None, list[str] | None]:
    """Return ``(chords, bass)`` parsed from labelled lines of ``body``.

    Each label is optional; when a label repeats, the last line wins.
    """
    chords: list[str] | None = None
    bass: list[str] | None = None
    for raw in body.split("\n"):
        line = raw.strip()
        bass_match = _BASS_LINE.match(line)
        if bass_match:
            bass = bass_match.group(1).split()
            continue
        chords_match = _CHORDS_LINE.match(line)
        if chords_match:
            chords = chords_match.group(1).split()
    return chords, bass


__all__ = ["split_chords", "split_degrees", "split_score"]
