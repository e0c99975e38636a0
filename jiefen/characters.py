"""
Character classification and block splitting for Jiefen.

Text is first cut into script-homogeneous blocks: runs of CJK-class
characters go through the dictionary/HMM machinery, everything else is
split by character class. The CJK class is wider in accurate mode (it
absorbs Latin letters, digits and a few joiners) than in full mode.
"""

import re
from typing import Iterator, List, Pattern, Tuple

# ============================================================================
# Block Patterns
# ============================================================================

# Accurate mode: Han characters plus Latin/digit runs and joiners
RE_HAN_DEFAULT = re.compile(r"([一-鿕a-zA-Z0-9+#&\._%·\-]+)", re.U)

# Full mode: Han characters only
RE_HAN_CUT_ALL = re.compile(r"([一-鿕]+)", re.U)

# Whitespace and control runs inside non-CJK blocks
RE_SKIP = re.compile(r"(\s+)", re.U)

# Han-only runs inside a buffered unknown run
RE_HAN_DETAIL = re.compile(r"([一-鿕]+)", re.U)

# Latin/digit pieces inside a buffered unknown run (boundary decoding)
RE_SKIP_DETAIL = re.compile(r"([a-zA-Z0-9]+(?:\.\d+)?%?)", re.U)

# Number and Latin pieces inside a buffered unknown run (tag decoding)
RE_SKIP_POS_DETAIL = re.compile(r"([\.0-9]+|[a-zA-Z0-9]+)", re.U)

RE_ENG_CHAR = re.compile(r"^[a-zA-Z0-9]$", re.U)
RE_ENG_WORD = re.compile(r"^[a-zA-Z0-9]+$", re.U)
RE_NUMBER = re.compile(r"^[\.0-9]+$", re.U)


# ============================================================================
# Classification
# ============================================================================

def is_eng_char(text: str) -> bool:
    """True for a single ASCII letter or digit."""
    return bool(RE_ENG_CHAR.match(text))


def tag_for_symbol_run(text: str) -> str:
    """
    Part-of-speech tag for a run outside the dictionary.

    Returns:
        'm' for numbers, 'eng' for Latin/digit words, 'x' otherwise.
    """
    if RE_NUMBER.match(text):
        return 'm'
    if RE_ENG_WORD.match(text):
        return 'eng'
    return 'x'


# ============================================================================
# Splitting
# ============================================================================

def split_blocks(text: str, pattern: Pattern) -> Iterator[Tuple[int, str, bool]]:
    """
    Split text into maximal runs matched / not matched by a capturing pattern.

    Args:
        text: Input text.
        pattern: Compiled pattern with one capturing group.

    Yields:
        (start_offset, block, matched) for every non-empty block, in order.
    """
    pos = 0
    for block in pattern.split(text):
        if not block:
            continue
        yield pos, block, bool(pattern.fullmatch(block))
        pos += len(block)


def split_lines(text: str) -> List[str]:
    """Split text into lines, keeping line terminators."""
    return text.splitlines(keepends=True)
