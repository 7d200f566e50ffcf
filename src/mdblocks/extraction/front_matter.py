"""
Header/body splitter for tagged regions.

A fenced block may start with a small metadata header::

    title: II-V-I in C
    key: C
    note: the most common cadence
    ---
    Dm7 → G7 → Cmaj7

Rules
-----
- Lines are trimmed and read from the top.
- ``title:``, ``key:`` and ``note:`` (case-insensitive) record a value; the
  first occurrence of a key wins and later repeats are ignored.
- Blank lines inside the header are skipped.
- A ``---`` line ends the header and is consumed.
- Any other line ends the header and belongs to the body.

Malformed header lines are never errors; they simply become body text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_META_LINE = re.compile(r"^(title|key|note):\s*(.*)$", flags=re.IGNORECASE)
_SEPARATOR = "---"


@dataclass(frozen=True, slots=True)
class FrontMatter:
    """Metadata recovered from the header plus the remaining body text."""

    body: str
    title: str | None = None
    key: str | None = None
    note: str | None = None


def split_front_matter(text: str) -> FrontMatter:
    """Split ``text`` into its optional metadata header and its body.

    Examples
    --------
    >>> split_front_matter("title: Foo\\nkey: C\\n---\\nDm7 → G7")
    FrontMatter(body='Dm7 → G7', title='Foo', key='C', note=None)
    >>> split_front_matter("  Dm7 → G7  ").body
    'Dm7 → G7'
    """
    lines = (text or "").split("\n")
    meta: dict[str, str | None] = {}

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if line == _SEPARATOR:
            i += 1
            break
        match = _META_LINE.match(line)
        if match:
            name = match.group(1).lower()
            if name not in meta:
                meta[name] = match.group(2).strip() or None
            i += 1
        elif not line:
            i += 1
        else:
            break

    body = "\n".join(lines[i:]).strip()
    return FrontMatter(
        body=body,
        title=meta.get("title"),
        key=meta.get("key"),
        note=meta.get("note"),
    )


__all__ = ["FrontMatter", "split_front_matter"]
