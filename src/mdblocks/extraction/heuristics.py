"""
Heuristic detector for untagged progressions.

Authors often write progressions as plain prose instead of tagged fences::

    ### Standard cadence

    Usual: Dm7 → G7 → Cmaj7
    Solfège: レ → ソ → ド

This module scans the ``text`` children of every paragraph, line by line, and
accepts a line as a progression when enough of its arrow-separated pieces
match a chord-name (or solfège-note) grammar.

Acceptance rule
---------------
A line is split on ``→`` / ``->``. It is a progression when at least
:data:`MIN_MATCHES` pieces match the grammar **and** the matching pieces make
up at least :data:`MIN_MATCH_RATIO` of all pieces. The ratio tolerates one
stray connector word in a five-piece line (4/5) but rejects sentences with a
single coincidental chord-like token.

Detection is best-effort: a line that does not qualify is simply skipped.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass

from mdblocks.core.contracts.block import (
    Block,
    BlockType,
    ChordProgressionBlock,
    DegreeProgressionBlock,
)
from mdblocks.parsing.tree import Node, extract_text, walk

from .tables import source_of

CHORD_PATTERN = re.compile(
    r"^[A-G][#♯b♭]?(m|maj|min|dim|aug|sus|add|M|7|9|11|13|6)*(\([^)]*\))?(/[A-G][#♯b♭]?)?$"
)
NOTE_NAME_PATTERN = re.compile(r"^(ド|レ|ミ|ファ|ソ|ラ|シ)[♭♯#b]?$")
ARROW_SEPARATOR = re.compile(r"\s*(?:→|->)\s*")
LABEL_PREFIX = re.compile(r"^[-*]?\s*[^:：]+[：:]\s*(.+)$")

MIN_CANDIDATE_LENGTH = 5
MIN_MATCHES = 2
MIN_MATCH_RATIO = 0.8
TITLE_LOOKBACK = 3


@dataclass(frozen=True, slots=True)
class Detection:
    """A line accepted by one grammar, with the matching pieces in order."""

    type: BlockType
    tokens: list[str]


def strip_label(line: str) -> str:
    """Drop a leading ``label:`` prefix (ASCII or full-width colon).

    >>> strip_label("- Usual: Dm7 → G7")
    'Dm7 → G7'
    """
    candidate = line.strip()
    match = LABEL_PREFIX.match(candidate)
    if match:
        candidate = match.group(1).strip()
    return candidate


def matching_pieces(text: str, pattern: re.Pattern[str]) -> list[str] | None:
    """Return the pieces of ``text`` matching ``pattern`` if the line qualifies.

    Returns ``None`` when the line has fewer than two arrow-separated pieces or
    fails the count/ratio rule.
    """
    pieces = [p.strip() for p in ARROW_SEPARATOR.split(text)]
    if len(pieces) < 2:
        return None
    matched = [p for p in pieces if pattern.match(p)]
    if len(matched) < MIN_MATCHES or len(matched) / len(pieces) < MIN_MATCH_RATIO:
        return None
    return matched


def is_chord_progression(text: str) -> bool:
    return matching_pieces(text, CHORD_PATTERN) is not None


def is_note_name_progression(text: str) -> bool:
    return matching_pieces(text, NOTE_NAME_PATTERN) is not None


def detect_line(line: str, types: Collection[BlockType]) -> Detection | None:
    """Classify a single prose line, trying chords first, then note names."""
    candidate = strip_label(line)
    if len(candidate) < MIN_CANDIDATE_LENGTH:
        return None

    if BlockType.CHORD_PROGRESSION in types:
        chords = matching_pieces(candidate, CHORD_PATTERN)
        if chords is not None:
            return Detection(BlockType.CHORD_PROGRESSION, chords)

    if BlockType.DEGREE_PROGRESSION in types:
        notes = matching_pieces(candidate, NOTE_NAME_PATTERN)
        if notes is not None:
            return Detection(BlockType.DEGREE_PROGRESSION, notes)

    return None


def find_preceding_title(parent: Node | None, index: int | None) -> str | None:
    """Infer a title from up to three siblings before ``index``, nearest first.

    A heading supplies its text; otherwise the first bold run inside a
    preceding paragraph does.
    """
    if parent is None or index is None or index <= 0:
        return None

    for i in range(index - 1, max(index - TITLE_LOOKBACK, 0) - 1, -1):
        sibling = parent.children[i]
        if sibling.type == "heading":
            return extract_text(sibling) or None
        if sibling.type == "paragraph":
            for child in sibling.children:
                if child.type == "strong":
                    return extract_text(child) or None
    return None


def detect_progressions(
    tree: Node,
    *,
    file_path: str = "",
    types: Collection[BlockType] = tuple(BlockType),
    start: int = 1,
) -> tuple[list[Block], int]:
    """Scan untagged paragraphs for progressions.

    Returns the detected blocks and the next free occurrence index.
    """
    wanted = {BlockType.CHORD_PROGRESSION, BlockType.DEGREE_PROGRESSION} & set(types)
    if not wanted:
        return [], start

    blocks: list[Block] = []
    counter = start
    for node, index, parent in walk(tree):
        if node.type != "paragraph":
            continue
        for child in node.children:
            if child.type != "text" or not child.value:
                continue
            for line in child.value.strip().split("\n"):
                found = detect_line(line, wanted)
                if found is None:
                    continue
                title = find_preceding_title(parent, index)
                source = source_of(node, file_path)
                if found.type is BlockType.CHORD_PROGRESSION:
                    blocks.append(
                        ChordProgressionBlock(
                            index=counter, title=title, chords=found.tokens, source=source
                        )
                    )
                else:
                    blocks.append(
                        DegreeProgressionBlock(
                            index=counter, title=title, degrees=found.tokens, source=source
                        )
                    )
                counter += 1
    return blocks, counter


__all__ = [
    "CHORD_PATTERN",
    "NOTE_NAME_PATTERN",
    "Detection",
    "detect_line",
    "detect_progressions",
    "find_preceding_title",
    "is_chord_progression",
    "is_note_name_progression",
    "matching_pieces",
    "strip_label",
]
