"""
Dictionary file loading for Jiefen.

Main dictionary: UTF-8, one entry per line, ``word freq [tag]``.
User dictionary: UTF-8, one entry per line, ``word [freq] [tag]``.

Every line ends up either kept or skipped with a reason, collected in a
``LoadReport`` so that dropped lines are visible to the caller.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from jiefen.errors import DictionaryLoadError
from jiefen.trie import FrequencyDictionary

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Load Reports
# ============================================================================

@dataclass
class SkippedLine:
    """A dictionary line that was not loaded."""
    line_no: int
    text: str
    reason: str


@dataclass
class LoadReport:
    """
    Outcome of loading one dictionary source.

    ``failed`` is set when the source itself could not be read.
    """
    source: str
    kept: int = 0
    skipped: List[SkippedLine] = field(default_factory=list)
    failed: bool = False

    def skip(self, line_no: int, text: str, reason: str) -> None:
        self.skipped.append(SkippedLine(line_no, text, reason))
        logger.warning(f"{self.source}:{line_no}: skipped {text!r} ({reason})")

    @property
    def ok(self) -> bool:
        return not self.skipped


@dataclass
class DictEntry:
    """One parsed dictionary line. ``freq`` is None when not given."""
    word: str
    freq: Optional[int] = None
    tag: Optional[str] = None


# ============================================================================
# Line Parsing
# ============================================================================

RE_FREQ = re.compile(r"^[0-9]+$")
RE_TAG = re.compile(r"^[a-z]+$")
RE_NUMERIC = re.compile(r"^[-+]?[0-9][0-9.,]*$")


def _decode(line_no: int, line: Union[str, bytes]) -> str:
    if isinstance(line, bytes):
        line = line.decode('utf-8')
    if line_no == 1:
        line = line.lstrip('\ufeff')
    return line.strip()


def _parse_freq(text: str) -> int:
    if not RE_FREQ.match(text):
        raise ValueError(f"invalid frequency {text!r}")
    return int(text)


def parse_dict_line(line: str) -> DictEntry:
    """
    Parse a main dictionary line ``word freq [tag]``.

    Raises:
        ValueError: The line does not have 2 or 3 fields, or the
            frequency is not a nonnegative integer.
    """
    fields = line.split()
    if len(fields) not in (2, 3):
        raise ValueError(f"expected 'word freq [tag]', got {len(fields)} fields")
    tag = fields[2] if len(fields) == 3 else None
    return DictEntry(fields[0], _parse_freq(fields[1]), tag)


def parse_userdict_line(line: str) -> DictEntry:
    """
    Parse a user dictionary line ``word [freq] [tag]``.

    The word may contain spaces. A trailing lowercase field is the tag and
    a trailing nonnegative integer before it is the frequency; everything
    in front of them is the word, so ``new york 5 ns`` is the word
    ``new york``.

    Raises:
        ValueError: The frequency position holds a number that is not a
            nonnegative integer (``-5``, ``1.5``).
    """
    fields = line.split()
    tag = None
    freq = None
    if len(fields) > 1 and RE_TAG.match(fields[-1]):
        tag = fields.pop()
    if len(fields) > 1:
        if RE_FREQ.match(fields[-1]):
            freq = int(fields.pop())
        elif RE_NUMERIC.match(fields[-1]):
            raise ValueError(f"invalid frequency {fields[-1]!r}")
    return DictEntry(' '.join(fields), freq, tag)


def iter_entries(
    lines: Iterable[Union[str, bytes]],
    report: LoadReport,
    user: bool = False,
) -> Iterator[DictEntry]:
    """
    Parse lines, recording every skipped one in ``report``.

    Args:
        lines: Raw lines (str or UTF-8 bytes).
        report: Report to update.
        user: Parse with the user dictionary grammar.

    Yields:
        Parsed entries, in file order.
    """
    parse = parse_userdict_line if user else parse_dict_line
    for line_no, raw in enumerate(lines, 1):
        try:
            line = _decode(line_no, raw)
        except UnicodeDecodeError as e:
            report.skip(line_no, repr(raw), str(e))
            continue
        if not line:
            continue
        try:
            entry = parse(line)
        except ValueError as e:
            report.skip(line_no, line, str(e))
            continue
        report.kept += 1
        yield entry


# ============================================================================
# Main Dictionary
# ============================================================================

def build_dictionary(
    entries: Iterable[DictEntry],
) -> Tuple[FrequencyDictionary, Dict[str, str]]:
    """Build the trie and the word-tag table from parsed entries."""
    dictionary = FrequencyDictionary()
    word_tags: Dict[str, str] = {}
    for entry in entries:
        dictionary.add(entry.word, entry.freq)
        if entry.tag:
            word_tags[entry.word] = entry.tag
    return dictionary, word_tags


def load_dictionary(
    source: Union[PathLike, IO],
) -> Tuple[FrequencyDictionary, Dict[str, str], LoadReport]:
    """
    Load the main dictionary.

    Args:
        source: Path or open file (text or binary).

    Returns:
        (dictionary, word_tags, report).

    Raises:
        DictionaryLoadError: The file cannot be read or holds no entries.
    """
    t0 = time.perf_counter()
    name = str(getattr(source, 'name', source))
    report = LoadReport(source=name)

    try:
        if hasattr(source, 'read'):
            dictionary, word_tags = build_dictionary(iter_entries(source, report))
        else:
            with open(source, 'rb') as f:
                dictionary, word_tags = build_dictionary(iter_entries(f, report))
    except OSError as e:
        raise DictionaryLoadError(f"'{name}' load failure, reason: {e}") from e

    if not len(dictionary):
        raise DictionaryLoadError(f"'{name}' contains no dictionary entries")

    elapsed = (time.perf_counter() - t0) * 1000
    logger.info(
        f"Loaded dictionary {name}: {report.kept:,} entries, "
        f"{len(report.skipped)} skipped, {elapsed:.1f}ms"
    )
    return dictionary, word_tags, report


# ============================================================================
# User Dictionary
# ============================================================================

def read_userdict(source: Union[PathLike, IO]) -> Tuple[List[DictEntry], LoadReport]:
    """
    Parse a user dictionary without applying it.

    Args:
        source: Path or open file (text or binary).

    Returns:
        (entries, report). A file that cannot be opened yields no entries
        and a single skipped pseudo-line 0 describing the failure.
    """
    name = str(getattr(source, 'name', source))
    report = LoadReport(source=name)
    try:
        if hasattr(source, 'read'):
            entries = list(iter_entries(source, report, user=True))
        else:
            with open(source, 'rb') as f:
                entries = list(iter_entries(f, report, user=True))
    except OSError as e:
        report.skip(0, name, f"load failure: {e}")
        report.failed = True
        return [], report
    return entries, report
