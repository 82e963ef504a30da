"""
Quote- and bracket-aware splitting of debugger value text.

Debug backends print aggregates in ad-hoc grammars (``{a: 1, b: [2, 3]}``,
``{name = "x", next = 0x0}``, ``['a', ('b', 1)]``). None of them is JSON,
so the handlers share one scanner instead: a two-state machine (inside or
outside a quoted region) with an integer bracket depth. A delimiter only
counts at depth 0 outside quotes.

Unbalanced closers push the depth below zero. That is tolerated: the scan
never aborts, it just stops splitting until the depth recovers.

valuelens/src/valuelens/tokenizer.py
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

__all__ = [
    "Delimiters",
    "ScanState",
    "split_top_level",
    "find_top_level",
    "split_key_value",
    "enclosed_body",
    "strip_quotes",
]

OPENERS = "{[("
CLOSERS = "}])"
MATCHING = {"{": "}", "[": "]", "(": ")"}


@dataclass(frozen=True)
class Delimiters:
    """Quote characters a variant recognises and whether ``\\`` escapes them."""

    quote_chars: FrozenSet[str] = frozenset('"')
    escapes: bool = False


class ScanState(Enum):
    NORMAL = "normal"
    IN_QUOTE = "in_quote"


def _scan(content: str, delimiters: Delimiters) -> Iterator[Tuple[int, str, bool, int]]:
    """Yield ``(index, char, quoted, depth)`` for every character.

    ``quoted`` covers the quote characters themselves and everything
    between them. For brackets ``depth`` is the level the bracket pair
    lives at (0 for an outermost pair); for other characters it is the
    current nesting depth.
    """
    state = ScanState.NORMAL
    quote_char = ""
    depth = 0
    escaped = False

    for index, char in enumerate(content):
        if state is ScanState.IN_QUOTE:
            if escaped:
                escaped = False
            elif delimiters.escapes and char == "\\":
                escaped = True
            elif char == quote_char:
                state = ScanState.NORMAL
                quote_char = ""
            yield index, char, True, depth
            continue

        if char in delimiters.quote_chars:
            state = ScanState.IN_QUOTE
            quote_char = char
            yield index, char, True, depth
        elif char in OPENERS:
            yield index, char, False, depth
            depth += 1
        elif char in CLOSERS:
            depth -= 1
            yield index, char, False, depth
        else:
            yield index, char, False, depth


def split_top_level(content: str, delimiters: Delimiters, separator: str = ",") -> List[str]:
    """Split ``content`` on top-level ``separator`` characters.

    Segments are trimmed and empty ones dropped. The trailing buffer is
    flushed at end of input.
    """
    segments: List[str] = []
    start = 0
    for index, char, quoted, depth in _scan(content, delimiters):
        if char == separator and not quoted and depth == 0:
            segment = content[start:index].strip()
            if segment:
                segments.append(segment)
            start = index + 1

    tail = content[start:].strip()
    if tail:
        segments.append(tail)
    return segments


def find_top_level(content: str, targets: str, delimiters: Delimiters) -> int:
    """Index of the first top-level character in ``targets``, or -1."""
    for index, char, quoted, depth in _scan(content, delimiters):
        if char in targets and not quoted and depth == 0 and char not in OPENERS + CLOSERS:
            return index
    return -1


def split_key_value(
    segment: str, separators: Sequence[str], delimiters: Delimiters
) -> Optional[Tuple[str, str]]:
    """Split one field segment into ``(key, value)``.

    Separators are tried in preference order; the first one present at the
    top level wins. Returns None when no separator is found or the key is
    empty.
    """
    for separator in separators:
        index = find_top_level(segment, separator, delimiters)
        if index <= 0:
            continue
        key = segment[:index].strip()
        if not key:
            continue
        return key, segment[index + 1 :].strip()
    return None


def enclosed_body(
    raw: str,
    open_char: str,
    delimiters: Delimiters,
    allow_prefix: bool = False,
) -> Optional[str]:
    """Body of the outermost bracket group that ends the value.

    Without ``allow_prefix`` the group must span the whole value
    (``{a: 1}``). With it, the last top-level group is taken when it closes
    the value, which skips type-name and header prefixes such as
    ``main.User {..}``, ``map[string]int [..]`` or
    ``[]int len: 3, cap: 3, [..]``.
    """
    text = raw.strip()
    close_char = MATCHING[open_char]
    if len(text) < 2 or text[-1] != close_char:
        return None

    last_open = -1
    top_level_groups = 0
    for index, char, quoted, depth in _scan(text, delimiters):
        if quoted or depth != 0:
            continue
        if char in OPENERS:
            top_level_groups += 1
            last_open = index if char == open_char else -1
        elif char in CLOSERS and index == len(text) - 1:
            if last_open < 0:
                return None
            if not allow_prefix and (last_open != 0 or top_level_groups != 1):
                return None
            return text[last_open + 1 : index]

    return None


def strip_quotes(value: str, quote_chars: FrozenSet[str]) -> str:
    """Remove every balanced layer of surrounding quotes.

    Stripping all layers keeps the function idempotent, at the cost of
    quotes that belong to the content: the Python repr ``'"quoted"'``
    comes back as ``quoted``, not ``"quoted"``.
    """
    text = value
    while len(text) >= 2 and text[0] in quote_chars and text[-1] == text[0]:
        text = text[1:-1]
    return text
