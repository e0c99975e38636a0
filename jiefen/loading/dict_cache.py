"""
Compiled dictionary cache for Jiefen.

Parsing a full-size dictionary text file takes a noticeable share of
start-up time. The parsed entries can be written to a SQLite database
and read back by later processes, as long as the source file has not
changed since (same path, size and modification time).
"""

import logging
import os
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from jiefen.db.connection import session_scope
from jiefen.db.models import CacheInfo, DictWord
from jiefen.errors import CacheError
from jiefen.trie import FrequencyDictionary

logger = logging.getLogger(__name__)

SOURCE_KEY = "source"
PathLike = Union[str, Path]


def source_stamp(source: PathLike) -> str:
    """Identify a dictionary file version by path, size and mtime."""
    path = Path(source).absolute()
    st = os.stat(path)
    return f"{path}|{st.st_size}|{st.st_mtime_ns}"


def save_cache(
    db_path: PathLike,
    dictionary: FrequencyDictionary,
    word_tags: Dict[str, str],
    source: PathLike,
    batch_size: int = 5000,
) -> int:
    """
    Replace the cache contents with a dictionary.

    Args:
        db_path: SQLite file to write.
        dictionary: Parsed dictionary.
        word_tags: Word-tag table parsed with it.
        source: The text file the dictionary came from.
        batch_size: Rows per flush.

    Returns:
        Number of words written.
    """
    t0 = time.perf_counter()
    count = 0
    with session_scope(db_path) as session:
        session.execute(delete(DictWord))
        session.execute(delete(CacheInfo))

        batch = []
        for word, freq in dictionary.items():
            batch.append(DictWord(word=word, freq=freq, tag=word_tags.get(word)))
            if len(batch) >= batch_size:
                session.add_all(batch)
                session.flush()
                count += len(batch)
                batch = []
        if batch:
            session.add_all(batch)
            count += len(batch)

        session.add(CacheInfo(key=SOURCE_KEY, value=source_stamp(source)))

    elapsed = (time.perf_counter() - t0) * 1000
    logger.info(f"Wrote dictionary cache {db_path}: {count:,} words, {elapsed:.1f}ms")
    return count


def load_cache(
    db_path: PathLike,
    source: PathLike,
) -> Optional[Tuple[FrequencyDictionary, Dict[str, str]]]:
    """
    Read a dictionary back from the cache.

    Args:
        db_path: SQLite file to read.
        source: The text file the cache must have been built from.

    Returns:
        (dictionary, word_tags), or None when the cache is missing, empty
        or was built from a different version of ``source``.

    Raises:
        CacheError: The database exists but cannot be read.
    """
    if not Path(db_path).exists():
        return None

    try:
        expected = source_stamp(source)
    except OSError:
        return None

    try:
        with session_scope(db_path) as session:
            info = session.execute(
                select(CacheInfo).where(CacheInfo.key == SOURCE_KEY)
            ).scalar_one_or_none()
            if info is None or info.value != expected:
                logger.debug(f"Dictionary cache {db_path} is stale")
                return None

            dictionary = FrequencyDictionary()
            word_tags: Dict[str, str] = {}
            for word, freq, tag in session.execute(
                select(DictWord.word, DictWord.freq, DictWord.tag)
            ):
                dictionary.add(word, freq)
                if tag:
                    word_tags[word] = tag
    except SQLAlchemyError as e:
        raise CacheError(f"'{db_path}' cache read failure: {e}") from e

    if not len(dictionary):
        return None

    logger.debug(f"Loaded dictionary from cache {db_path}: {len(dictionary):,} words")
    return dictionary, word_tags
