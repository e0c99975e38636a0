"""
Tests for context.py, cache.py and the compiled dictionary cache.
"""

import threading
import time
from unittest.mock import patch

import pytest

from jiefen.cache import Cache, defcache
from jiefen.context import SegmentationContext
from jiefen.db.connection import dispose_all
from jiefen.errors import CacheError, DictionaryLoadError
from jiefen.loading.dict_cache import load_cache, save_cache, source_stamp
from jiefen.loading.dictionary import load_dictionary
from jiefen.segment import Segmenter


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "cache" / "dict.db"
    yield path
    dispose_all()


class TestCache:
    """Tests for the load-once Cache holder."""

    def test_initializes_once(self):
        calls = []
        cache = Cache(None, lambda: calls.append(1) or len(calls))
        assert cache.ensure() == 1
        assert cache.ensure() == 1
        assert calls == [1]

    def test_concurrent_first_access(self):
        calls = []

        def slow():
            calls.append(1)
            time.sleep(0.05)
            return object()

        cache = Cache(None, slow)
        results = []
        threads = [threading.Thread(target=lambda: results.append(cache.ensure()))
                   for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_invalidate(self):
        counter = iter(range(10))
        cache = Cache(None, lambda: next(counter))
        assert cache.ensure() == 0
        cache.invalidate()
        assert not cache.initialized
        assert cache.ensure() == 1

    def test_defcache_builds_named_cache(self):
        @defcache("test-context")
        def value():
            return 42

        assert isinstance(value, Cache)
        assert value.name == "test-context"
        assert not value.initialized
        assert value.ensure() == 42


class TestDictCache:
    """Tests for save_cache / load_cache."""

    def test_round_trip(self, dict_file, db_path):
        dictionary, word_tags, _ = load_dictionary(dict_file)
        assert save_cache(db_path, dictionary, word_tags, dict_file) == 14

        loaded = load_cache(db_path, dict_file)
        assert loaded is not None
        cached, cached_tags = loaded
        assert cached.total == dictionary.total
        assert sorted(cached.items()) == sorted(dictionary.items())
        assert cached_tags == word_tags

    def test_missing_database(self, dict_file, db_path):
        assert load_cache(db_path, dict_file) is None

    def test_stale_after_source_change(self, dict_file, db_path):
        dictionary, word_tags, _ = load_dictionary(dict_file)
        save_cache(db_path, dictionary, word_tags, dict_file)
        with open(dict_file, "a", encoding="utf-8") as f:
            f.write("杭研 10 nz\n")
        assert load_cache(db_path, dict_file) is None

    def test_stamp_includes_path(self, dict_file):
        assert str(dict_file.absolute()) in source_stamp(dict_file)

    def test_unreadable_database(self, dict_file, tmp_path):
        bad = tmp_path / "bad.db"
        bad.write_bytes(b"this is not a sqlite database" * 100)
        try:
            with pytest.raises(CacheError):
                load_cache(bad, dict_file)
        finally:
            dispose_all()


class TestContextFromFiles:
    """Tests for SegmentationContext.from_files."""

    def test_parses_text_file(self, dict_file):
        ctx = SegmentationContext.from_files(dict_path=dict_file)
        assert ctx.dictionary.total == 525
        assert ctx.word_tags["清华大学"] == "nt"

    def test_uses_valid_cache(self, dict_file, db_path):
        SegmentationContext.from_files(dict_path=dict_file, cache_path=db_path)
        assert db_path.exists()

        with patch("jiefen.context.load_dictionary",
                   side_effect=AssertionError("text file parsed")):
            ctx = SegmentationContext.from_files(dict_path=dict_file, cache_path=db_path)
        assert ctx.dictionary.total == 525
        assert Segmenter(ctx).lcut("我来到北京清华大学") == ["我", "来到", "北京", "清华大学"]

    def test_rebuilds_stale_cache(self, dict_file, db_path):
        SegmentationContext.from_files(dict_path=dict_file, cache_path=db_path)
        with open(dict_file, "a", encoding="utf-8") as f:
            f.write("杭研 10 nz\n")
        ctx = SegmentationContext.from_files(dict_path=dict_file, cache_path=db_path)
        assert ctx.dictionary.contains("杭研")
        assert load_cache(db_path, dict_file) is not None

    def test_missing_dictionary(self, tmp_path):
        with pytest.raises(DictionaryLoadError):
            SegmentationContext.from_files(dict_path=tmp_path / "nope.txt")

    def test_models_load_lazily(self, dict_file):
        ctx = SegmentationContext.from_files(dict_path=dict_file)
        assert not ctx.models_loaded
        ctx.boundary_decoder
        ctx.pos_decoder
        assert ctx.models_loaded


class TestContextMutation:
    """Tests for the context's mutation helpers."""

    def test_pending_tags_merge(self, context):
        context.add_entry("杭研", 10, "nz")
        assert "杭研" not in context.word_tags
        context.merge_pending_tags()
        assert context.word_tags["杭研"] == "nz"

    def test_force_split_only_multi_character(self, context):
        context.delete_entry("我")
        context.delete_entry("北京")
        assert context.force_split == frozenset({"北京"})

    def test_claim_userdict(self, context):
        assert context.claim_userdict("/tmp/user.txt")
        assert not context.claim_userdict("/tmp/user.txt")

    def test_release_userdict(self, context):
        context.claim_userdict("/tmp/user.txt")
        context.release_userdict("/tmp/user.txt")
        assert context.claim_userdict("/tmp/user.txt")

    def test_concurrent_add_word(self, context):
        seg = Segmenter(context)
        words = [f"词{i}" for i in range(200)]

        def add(chunk):
            for word in chunk:
                seg.add_word(word, 3)

        threads = [threading.Thread(target=add, args=(words[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert context.dictionary.total == 525 + 3 * 200
        assert all(context.dictionary.contains(w) for w in words)
