"""
Part-of-speech tagging segmentation for Jiefen.

``PosSegmenter`` walks the same DAG route as ``Segmenter`` and tags each
token: dictionary words through the word-tag table (default "x"), runs
unknown to the dictionary through the tagging HMM, whose labels combine
a boundary and a tag ("B-n", "E-n", "S-v", ...).
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from jiefen.characters import (
    RE_HAN_DEFAULT, RE_SKIP, is_eng_char, split_blocks, tag_for_symbol_run,
)
from jiefen.context import SegmentationContext, get_default_context
from jiefen.segment import Segmenter, Token, ordered_map
from jiefen.settings import DEFAULT_TAG

# A tagging block cutter yields (offset within block, word, tag)
Tagged = Tuple[int, str, str]


class PosSegmenter:
    """
    Segmenter that attaches a part-of-speech tag to every token.

    Example:
        >>> pseg = PosSegmenter()
        >>> pseg.lcut("我爱北京天安门")
        [('我', 'r'), ('爱', 'v'), ('北京', 'ns'), ('天安门', 'ns')]
    """

    def __init__(self, segmenter: Optional[Segmenter] = None,
                 context: Optional[SegmentationContext] = None):
        if segmenter is None:
            segmenter = Segmenter(context or get_default_context())
        self.segmenter = segmenter
        self.context = segmenter.context

    def _tag(self, word: str) -> str:
        return self.context.word_tags.get(word, DEFAULT_TAG)

    def _flush_buffer(self, start: int, buf: str) -> Iterator[Tagged]:
        if len(buf) == 1 or self.context.dictionary.contains(buf):
            yield start, buf, self._tag(buf)
            return
        for word, tag in self.context.pos_decoder.cut(buf):
            yield start, word, tag
            start += len(word)

    def _cut_dag(self, sentence: str) -> Iterator[Tagged]:
        route = self.segmenter.calc(sentence, self.segmenter.get_dag(sentence))
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
                    yield from self._flush_buffer(buf_start, buf)
                    buf = ''
                word = sentence[x:y]
                yield x, word, self._tag(word)
            x = y
        if buf:
            yield from self._flush_buffer(buf_start, buf)

    def _cut_dag_no_hmm(self, sentence: str) -> Iterator[Tagged]:
        route = self.segmenter.calc(sentence, self.segmenter.get_dag(sentence))
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
                    yield buf_start, buf, 'eng'
                    buf = ''
                yield x, word, self._tag(word)
            x = y
        if buf:
            yield buf_start, buf, 'eng'

    def cut(self, text: str, hmm: bool = True) -> List[Token]:
        """
        Segment and tag text.

        Tags added through ``add_word`` since the last call are merged into
        the word-tag table first.

        Args:
            text: Input text.
            hmm: Tag unknown runs with the HMM; otherwise they are split into
                characters (Latin/digit characters glued into "eng" runs).

        Returns:
            Tagged tokens partitioning the text.
        """
        self.context.merge_pending_tags()
        cut_block = self._cut_dag if hmm else self._cut_dag_no_hmm

        tokens: List[Token] = []
        for offset, block, is_han in split_blocks(text, RE_HAN_DEFAULT):
            if is_han:
                for start, word, tag in cut_block(block):
                    start += offset
                    tokens.append(Token(word, start, start + len(word), tag))
                continue
            for start, piece, is_space in split_blocks(block, RE_SKIP):
                start += offset
                tag = 'x' if is_space else tag_for_symbol_run(piece)
                tokens.append(Token(piece, start, start + len(piece), tag))
        return tokens

    def lcut(self, text: str, hmm: bool = True) -> List[Tuple[str, str]]:
        """(word, tag) pairs."""
        return [(token.text, token.tag) for token in self.cut(text, hmm=hmm)]

    def cut_many(self, texts: Iterable[str], hmm: bool = True,
                 workers: Optional[int] = None) -> List[List[Token]]:
        """Tag independent texts concurrently, keeping input order."""
        self.context.merge_pending_tags()
        return ordered_map(lambda t: self.cut(t, hmm=hmm), texts, workers)
