"""
Jiefen: Chinese word segmentation and part-of-speech tagging.

Dictionary-driven maximum-probability segmentation with an HMM fallback
for words the dictionary does not know.

The module-level functions use a default context loaded lazily from
``jiefen.settings``. Build a ``SegmentationContext`` explicitly for an
isolated dictionary.
"""

import time
from pathlib import Path
from typing import IO, Iterable, List, Optional, Sequence, Tuple, Union

from jiefen.context import SegmentationContext, get_default_context, reset_default_context
from jiefen.posseg import PosSegmenter
from jiefen.segment import Segmenter, Token
from jiefen.trie import FrequencyDictionary

__version__ = "0.1.0"

__all__ = [
    "FrequencyDictionary", "PosSegmenter", "SegmentationContext", "Segmenter",
    "Token", "add_word", "cut", "cut_for_search", "cut_many", "del_word",
    "get_default_context", "lcut", "load_userdict", "pos_cut",
    "reset_default_context", "suggest_freq", "tokenize", "warm_up",
]


def warm_up(verbose: bool = False) -> Tuple[float, dict]:
    """
    Load the default dictionary and both HMM models.

    Call this once at application startup to avoid first-call latency.

    Args:
        verbose: If True, print timing information.

    Returns:
        Tuple of (total_time_seconds, timing_details_dict)

    Example:
        >>> import jiefen
        >>> elapsed, details = jiefen.warm_up(verbose=True)
        Warming up jiefen...
          Dictionary:      412.3ms
          Boundary HMM:     20.1ms
          Tagging HMM:      95.4ms
        Total warm-up:     527.8ms
    """
    timings = {}
    total_start = time.perf_counter()

    if verbose:
        print("Warming up jiefen...")

    t0 = time.perf_counter()
    context = get_default_context()
    timings['dictionary'] = (time.perf_counter() - t0) * 1000
    if verbose:
        print(f"  Dictionary:    {timings['dictionary']:>7.1f}ms")

    t0 = time.perf_counter()
    context.boundary_decoder
    timings['boundary'] = (time.perf_counter() - t0) * 1000
    if verbose:
        print(f"  Boundary HMM:  {timings['boundary']:>7.1f}ms")

    t0 = time.perf_counter()
    context.pos_decoder
    timings['pos'] = (time.perf_counter() - t0) * 1000
    if verbose:
        print(f"  Tagging HMM:   {timings['pos']:>7.1f}ms")

    total_time = time.perf_counter() - total_start
    timings['total'] = total_time * 1000

    if verbose:
        print(f"Total warm-up:   {timings['total']:>7.1f}ms")

    return total_time, timings


def _segmenter() -> Segmenter:
    return Segmenter(get_default_context())


def cut(text: str, cut_all: bool = False, hmm: bool = True) -> List[Token]:
    """Segment text with the default context. See ``Segmenter.cut``."""
    return _segmenter().cut(text, cut_all=cut_all, hmm=hmm)


def lcut(text: str, cut_all: bool = False, hmm: bool = True) -> List[str]:
    """Segment text and return the words only."""
    return _segmenter().lcut(text, cut_all=cut_all, hmm=hmm)


def cut_for_search(text: str, hmm: bool = True) -> List[Token]:
    return _segmenter().cut_for_search(text, hmm=hmm)


def tokenize(text: str, mode: str = "default", hmm: bool = True) -> List[Token]:
    return _segmenter().tokenize(text, mode=mode, hmm=hmm)


def cut_many(texts: Iterable[str], cut_all: bool = False, hmm: bool = True,
             workers: Optional[int] = None) -> List[List[Token]]:
    """Segment many texts in parallel; results keep input order."""
    return _segmenter().cut_many(texts, cut_all=cut_all, hmm=hmm, workers=workers)


def pos_cut(text: str, hmm: bool = True) -> List[Token]:
    """Segment and tag text with the default context."""
    return PosSegmenter(_segmenter()).cut(text, hmm=hmm)


def add_word(word: str, freq: Optional[int] = None, tag: Optional[str] = None) -> None:
    _segmenter().add_word(word, freq, tag)


def del_word(word: str) -> None:
    _segmenter().del_word(word)


def suggest_freq(segment: Union[str, Sequence[str]], tune: bool = False) -> int:
    return _segmenter().suggest_freq(segment, tune=tune)


def load_userdict(source: Union[str, Path, IO]):
    """Load a user dictionary into the default context; returns the LoadReport."""
    return _segmenter().load_userdict(source)
