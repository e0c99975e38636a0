"""
Segmentation context for Jiefen.

A ``SegmentationContext`` owns everything segmentation reads: the
frequency dictionary, the word-tag table, and the two HMM models. It is
shared by any number of ``Segmenter``/``PosSegmenter`` instances.

Concurrency:
    Segmentation calls only read the context and may run concurrently.
    Dictionary mutation (``add_word``, ``del_word``, user dictionary
    loading) is serialized by ``lock``. Mutation is NOT synchronized
    against in-flight segmentation calls: callers must not mutate the
    dictionary while cuts are running on other threads.

HMM models are loaded on first use, exactly once, behind a ``Cache``.
"""

import logging
from pathlib import Path
import threading
from typing import Dict, FrozenSet, Optional, Set, Union

from jiefen import settings
from jiefen.cache import Cache, defcache
from jiefen.errors import CacheError
from jiefen.hmm import BoundaryDecoder, HmmModel, PosDecoder
from jiefen.loading.dictionary import load_dictionary
from jiefen.loading.dict_cache import load_cache, save_cache
from jiefen.loading.hmm_tables import load_model_dir
from jiefen.trie import FrequencyDictionary

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SegmentationContext:
    """
    Dictionary, tag table and HMM models for a family of segmenters.

    Example:
        >>> ctx = SegmentationContext(FrequencyDictionary([("ab", 5)]))
        >>> ctx.dictionary.contains("ab")
        True
    """

    def __init__(
        self,
        dictionary: FrequencyDictionary,
        word_tags: Optional[Dict[str, str]] = None,
        boundary_model: Optional[HmmModel] = None,
        pos_model: Optional[HmmModel] = None,
        finalseg_dir: Optional[PathLike] = None,
        posseg_dir: Optional[PathLike] = None,
    ):
        """
        Args:
            dictionary: The frequency dictionary (owned from now on).
            word_tags: Word -> part-of-speech tag.
            boundary_model: B/M/E/S model; loaded from ``finalseg_dir``
                on first use when omitted.
            pos_model: Tagging model; loaded from ``posseg_dir`` on first
                use when omitted.
            finalseg_dir: Directory of the boundary model tables.
            posseg_dir: Directory of the tagging model tables.
        """
        self.dictionary = dictionary
        self.word_tags: Dict[str, str] = dict(word_tags or {})
        self.lock = threading.RLock()

        self._pending_tags: Dict[str, str] = {}
        self._force_split: Set[str] = set()
        self._loaded_userdicts: Set[str] = set()

        finalseg_dir = Path(finalseg_dir or settings.FINALSEG_DIR)
        posseg_dir = Path(posseg_dir or settings.POSSEG_DIR)

        self._boundary = Cache(None, lambda: BoundaryDecoder(
            boundary_model or load_model_dir(finalseg_dir)))
        self._pos = Cache(None, lambda: PosDecoder(
            pos_model or load_model_dir(posseg_dir)))

    def __repr__(self) -> str:
        return f"<SegmentationContext {self.dictionary!r} tags={len(self.word_tags)}>"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_files(
        cls,
        dict_path: Optional[PathLike] = None,
        finalseg_dir: Optional[PathLike] = None,
        posseg_dir: Optional[PathLike] = None,
        cache_path: Optional[PathLike] = None,
    ) -> 'SegmentationContext':
        """
        Load a context from a dictionary file and model directories.

        Defaults come from ``jiefen.settings``. When a cache path is given
        (or configured), a valid cache is used instead of parsing the text
        file, and a stale or missing one is rebuilt.

        Raises:
            DictionaryLoadError: The dictionary cannot be loaded.
        """
        dict_path = Path(dict_path or settings.DICT_PATH)
        cache_path = cache_path or settings.CACHE_PATH

        loaded = None
        if cache_path:
            try:
                loaded = load_cache(cache_path, dict_path)
            except CacheError as e:
                logger.warning(f"Ignoring unreadable dictionary cache: {e}")

        if loaded is not None:
            dictionary, word_tags = loaded
        else:
            dictionary, word_tags, _ = load_dictionary(dict_path)
            if cache_path:
                save_cache(cache_path, dictionary, word_tags, dict_path)

        return cls(
            dictionary,
            word_tags,
            finalseg_dir=finalseg_dir,
            posseg_dir=posseg_dir,
        )

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    @property
    def boundary_decoder(self) -> BoundaryDecoder:
        return self._boundary.ensure()

    @property
    def pos_decoder(self) -> PosDecoder:
        return self._pos.ensure()

    @property
    def models_loaded(self) -> bool:
        return self._boundary.initialized and self._pos.initialized

    @property
    def force_split(self) -> FrozenSet[str]:
        """Words the boundary model must not emit whole."""
        return frozenset(self._force_split)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_entry(self, word: str, freq: int, tag: Optional[str] = None) -> None:
        """
        Store a word with a known positive frequency.

        The tag goes to the pending table and is merged into ``word_tags``
        by the next tagging call.
        """
        with self.lock:
            self._force_split.discard(word)
            self.dictionary.add(word, freq)
            if tag:
                self._pending_tags[word] = tag

    def delete_entry(self, word: str) -> None:
        """Drop a word to a prefix marker and stop the HMM from rebuilding it."""
        with self.lock:
            self.dictionary.delete(word)
            if len(word) > 1:
                self._force_split.add(word)

    def merge_pending_tags(self) -> None:
        """Fold tags added since the last tagging call into ``word_tags``."""
        if not self._pending_tags:
            return
        with self.lock:
            self.word_tags.update(self._pending_tags)
            self._pending_tags = {}

    def claim_userdict(self, source: str) -> bool:
        """
        Record a user dictionary path as loaded.

        Returns:
            False if that path was loaded before.
        """
        with self.lock:
            if source in self._loaded_userdicts:
                return False
            self._loaded_userdicts.add(source)
            return True

    def release_userdict(self, source: str) -> None:
        """Forget a claimed path so that a later load reads it again."""
        with self.lock:
            self._loaded_userdicts.discard(source)


# ============================================================================
# Default Context
# ============================================================================

@defcache("default-context")
def _default_context() -> SegmentationContext:
    return SegmentationContext.from_files()


def get_default_context() -> SegmentationContext:
    """The process-wide context, loaded from ``jiefen.settings`` on first use."""
    return _default_context.ensure()


def reset_default_context() -> None:
    """Forget the default context; the next access reloads it."""
    _default_context.invalidate()
