"""
Word segmentation for Jiefen.

``Segmenter.cut`` splits text into script-homogeneous blocks and
segments each block:

- CJK blocks, accurate mode: the DAG of dictionary words is solved for
  the most probable path. Runs of single characters left over by the
  path are buffered and flushed through the boundary HMM (or, without
  HMM, emitted character by character with Latin/digit characters
  glued back together).
- CJK blocks, full mode: every dictionary word found in the block is
  emitted, overlapping ones included.
- Other blocks: whitespace runs become one token each; the remaining runs
  become one token (accurate mode) or one token per character (full mode).

Tokens carry their offsets in the input text. In accurate mode they
partition it exactly.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import (
    IO, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union,
)

from jiefen.characters import (
    RE_HAN_CUT_ALL, RE_HAN_DEFAULT, RE_SKIP, is_eng_char, split_blocks,
    split_lines,
)
from jiefen.context import SegmentationContext, get_default_context
from jiefen.dag import build_dag, solve_route
from jiefen.loading.dictionary import LoadReport, read_userdict
from jiefen.settings import DEFAULT_WORKERS

logger = logging.getLogger(__name__)

# A block cutter yields (offset within block, word)
BlockCutter = Callable[[str], Iterator[Tuple[int, str]]]


@dataclass
class Token:
    """A word with its [start, end) offsets and optional tag."""
    text: str
    start: int
    end: int
    tag: Optional[str] = None

    def __str__(self) -> str:
        return self.text

    def shifted(self, offset: int) -> 'Token':
        return Token(self.text, self.start + offset, self.end + offset, self.tag)

    def as_tuple(self) -> Tuple:
        if self.tag is None:
            return (self.text, self.start, self.end)
        return (self.text, self.start, self.end, self.tag)


def ordered_map(func: Callable, items: Iterable, workers: Optional[int] = None) -> List:
    """Apply ``func`` to every item on a thread pool, keeping input order."""
    items = list(items)
    if len(items) <= 1 or workers == 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers or DEFAULT_WORKERS) as executor:
        return list(executor.map(func, items))


class Segmenter:
    """
    Dictionary + HMM word segmenter.

    Example:
        >>> seg = Segmenter()
        >>> seg.lcut("我来到北京清华大学")
        ['我', '来到', '北京', '清华大学']
    """

    def __init__(self, context: Optional[SegmentationContext] = None):
        self.context = context or get_default_context()

    @property
    def dictionary(self):
        return self.context.dictionary

    # ========================================================================
    # Graph helpers
    # ========================================================================

    def get_dag(self, sentence: str):
        """Word graph of a CJK block (see ``jiefen.dag.build_dag``)."""
        return build_dag(sentence, self.context.dictionary)

    def calc(self, sentence: str, dag):
        """Best route through a word graph (see ``jiefen.dag.solve_route``)."""
        return solve_route(sentence, dag, self.context.dictionary)

    # ========================================================================
    # Block cutters
    # ========================================================================

    def _cut_all(self, sentence: str) -> Iterator[Tuple[int, str]]:
        dag = self.get_dag(sentence)
        last = -1
        for k, ends in dag.items():
            if len(ends) == 1 and k > last:
                yield k, sentence[k:ends[0] + 1]
                last = ends[0]
            else:
                for j in ends:
                    if j > k:
                        yield k, sentence[k:j + 1]
                        last = j

    def _flush_buffer(self, buf: str) -> List[str]:
        if len(buf) == 1:
            return [buf]
        if self.context.dictionary.contains(buf):
            return [buf]
        return self.context.boundary_decoder.cut(buf, self.context.force_split)

    def _cut_dag(self, sentence: str) -> Iterator[Tuple[int, str]]:
        route = self.calc(sentence, self.get_dag(sentence))
        x, n = 0, len(sentence)
        buf, buf_start = '', 0
        while x < n:
            y = route[x][0] + 1
            if y - x == 1:
                if not buf:
                    buf_start = x
                buf += sentence[x]
            else:
                if buf:
                    yield from self._emit(buf_start, self._flush_buffer(buf))
                    buf = ''
                yield x, sentence[x:y]
            x = y
        if buf:
            yield from self._emit(buf_start, self._flush_buffer(buf))

    def _cut_dag_no_hmm(self, sentence: str) -> Iterator[Tuple[int, str]]:
        route = self.calc(sentence, self.get_dag(sentence))
        x, n = 0, len(sentence)
        buf, buf_start = '', 0
        while x < n:
            y = route[x][0] + 1
            word = sentence[x:y]
            if is_eng_char(word):
                if not buf:
                    buf_start = x
                buf += word
            else:
                if buf:
                    yield buf_start, buf
                    buf = ''
                yield x, word
            x = y
        if buf:
            yield buf_start, buf

    @staticmethod
    def _emit(start: int, words: Sequence[str]) -> Iterator[Tuple[int, str]]:
        for word in words:
            yield start, word
            start += len(word)

    # ========================================================================
    # Public API
    # ========================================================================

    def cut(self, text: str, cut_all: bool = False, hmm: bool = True) -> List[Token]:
        """
        Segment text into tokens.

        Args:
            text: Input text.
            cut_all: Full mode: return every dictionary word, overlapping.
            hmm: Use the HMM for runs of characters the dictionary cannot
                group (accurate mode only).

        Returns:
            Tokens in order of their start offset.
        """
        if cut_all:
            re_han, cut_block = RE_HAN_CUT_ALL, self._cut_all
        elif hmm:
            re_han, cut_block = RE_HAN_DEFAULT, self._cut_dag
        else:
            re_han, cut_block = RE_HAN_DEFAULT, self._cut_dag_no_hmm

        tokens: List[Token] = []
        for offset, block, is_han in split_blocks(text, re_han):
            if is_han:
                for start, word in cut_block(block):
                    start += offset
                    tokens.append(Token(word, start, start + len(word)))
                continue
            for start, piece, is_space in split_blocks(block, RE_SKIP):
                start += offset
                if is_space or not cut_all:
                    tokens.append(Token(piece, start, start + len(piece)))
                else:
                    for i, char in enumerate(piece):
                        tokens.append(Token(char, start + i, start + i + 1))
        return tokens

    def lcut(self, text: str, cut_all: bool = False, hmm: bool = True) -> List[str]:
        """Like ``cut`` but returns the words only."""
        return [token.text for token in self.cut(text, cut_all=cut_all, hmm=hmm)]

    def _search_grams(self, token: Token) -> Iterator[Token]:
        word = token.text
        for size in (2, 3):
            if len(word) <= size:
                continue
            for i in range(len(word) - size + 1):
                gram = word[i:i + size]
                if self.context.dictionary.contains(gram):
                    start = token.start + i
                    yield Token(gram, start, start + size)

    def cut_for_search(self, text: str, hmm: bool = True) -> List[Token]:
        """
        Segment for search-engine indexing.

        Each long word is preceded by the dictionary 2-grams and 3-grams it
        contains, so both the compound and its parts are indexed.
        """
        tokens: List[Token] = []
        for token in self.cut(text, hmm=hmm):
            tokens.extend(self._search_grams(token))
            tokens.append(token)
        return tokens

    def tokenize(self, text: str, mode: str = "default", hmm: bool = True) -> List[Token]:
        """
        Tokens with offsets, in "default" (accurate) or "search" mode.

        Raises:
            ValueError: Unknown mode.
        """
        if mode == "default":
            return self.cut(text, hmm=hmm)
        if mode == "search":
            return self.cut_for_search(text, hmm=hmm)
        raise ValueError(f"unknown tokenize mode: {mode!r}")

    # ========================================================================
    # Batch API
    # ========================================================================

    def cut_many(
        self,
        texts: Iterable[str],
        cut_all: bool = False,
        hmm: bool = True,
        workers: Optional[int] = None,
    ) -> List[List[Token]]:
        """
        Cut independent texts concurrently.

        Returns:
            One token list per input text, in input order.
        """
        return ordered_map(lambda t: self.cut(t, cut_all=cut_all, hmm=hmm), texts, workers)

    def cut_lines(
        self,
        text: str,
        cut_all: bool = False,
        hmm: bool = True,
        workers: Optional[int] = None,
    ) -> List[Token]:
        """
        Cut a multi-line text line by line in parallel.

        Offsets refer to the whole text.
        """
        lines = split_lines(text)
        results = self.cut_many(lines, cut_all=cut_all, hmm=hmm, workers=workers)
        tokens: List[Token] = []
        offset = 0
        for line, line_tokens in zip(lines, results):
            tokens.extend(token.shifted(offset) for token in line_tokens)
            offset += len(line)
        return tokens

    # ========================================================================
    # Dictionary maintenance
    # ========================================================================

    def suggest_freq(self, segment: Union[str, Sequence[str]], tune: bool = False) -> int:
        """
        Suggest a frequency to force a word to be kept or split.

        Args:
            segment: A word to keep whole, or a sequence of pieces the word
                should be split into.
            tune: Apply the suggested frequency to the dictionary. A
                suggestion of 0 removes the joined word.

        Returns:
            The suggested frequency.
        """
        dictionary = self.context.dictionary
        if isinstance(segment, str):
            word = segment
            freq = dictionary.suggest_frequency(word, self.lcut(word, hmm=False))
        else:
            word = ''.join(segment)
            freq = dictionary.tune_frequency(segment)
        if tune:
            with self.context.lock:
                if freq > 0:
                    self.context.add_entry(word, freq)
                else:
                    self.del_word(word)
        return freq

    def add_word(self, word: str, freq: Optional[int] = None, tag: Optional[str] = None) -> None:
        """
        Add a word to the dictionary.

        Args:
            word: The word.
            freq: Frequency; None, zero or negative means "suggest one".
            tag: Optional part-of-speech tag.
        """
        with self.context.lock:
            if freq is None or freq <= 0:
                freq = self.suggest_freq(word)
            self.context.add_entry(word, freq, tag)

    def del_word(self, word: str) -> None:
        """Remove a word. Absent words are ignored."""
        self.context.delete_entry(word)

    def load_userdict(self, source: Union[str, Path, IO]) -> LoadReport:
        """
        Load a user dictionary (``word [freq] [tag]`` per line).

        Bad lines are skipped and listed in the report. Loading the same
        path twice is a no-op; a path that could not be read is retried
        on the next call.

        Args:
            source: Path or open file.

        Returns:
            The load report.
        """
        name = str(getattr(source, 'name', source))
        with self.context.lock:
            if not hasattr(source, 'read'):
                name = str(Path(source).absolute())
                if not self.context.claim_userdict(name):
                    logger.info(f"User dictionary {name} already loaded")
                    return LoadReport(source=name)

            entries, report = read_userdict(source)
            if report.failed:
                self.context.release_userdict(name)
                return report
            for entry in entries:
                self.add_word(entry.word, entry.freq, entry.tag)
        logger.info(f"Loaded user dictionary {name}: {report.kept} entries, "
                    f"{len(report.skipped)} skipped")
        return report
