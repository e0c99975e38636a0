"""
Tests for posseg.py - Part-of-speech tagging.
"""

from jiefen.posseg import PosSegmenter


class TestPosCut:
    """Tests for PosSegmenter.cut."""

    def test_dictionary_tags(self, pseg):
        assert pseg.lcut("我来到北京清华大学") == [
            ("我", "r"), ("来到", "v"), ("北京", "ns"), ("清华大学", "nt"),
        ]

    def test_untagged_word_defaults_to_x(self, pseg):
        assert pseg.lcut("清华") == [("清华", "x")]

    def test_hmm_tags_unknown_run(self, pseg):
        assert pseg.lcut("小明") == [("小明", "nr")]

    def test_without_hmm(self, pseg):
        assert pseg.lcut("小明", hmm=False) == [("小", "x"), ("明", "x")]

    def test_latin_run(self, pseg):
        assert pseg.lcut("abc北京") == [("abc", "eng"), ("北京", "ns")]
        assert pseg.lcut("abc北京", hmm=False) == [("abc", "eng"), ("北京", "ns")]

    def test_non_cjk_pieces(self, pseg):
        assert pseg.lcut("北京，2024") == [("北京", "ns"), ("，", "x"), ("2024", "m")]

    def test_whitespace_tagged_x(self, pseg):
        assert pseg.lcut("北京 大学") == [("北京", "ns"), (" ", "x"), ("大学", "n")]

    def test_offsets_partition_input(self, pseg):
        text = "我来到 北京，小明abc"
        tokens = pseg.cut(text)
        assert "".join(t.text for t in tokens) == text
        for token in tokens:
            assert text[token.start:token.end] == token.text
            assert token.tag

    def test_same_words_as_segmenter(self, seg, pseg):
        text = "我来到北京清华大学，天安门"
        assert [w for w, _ in pseg.lcut(text)] == seg.lcut(text)


class TestPendingTags:
    """Tests for tags added after the context was built."""

    def test_added_tag_visible_to_next_cut(self, seg, pseg):
        seg.add_word("杭研", 10, "nz")
        assert pseg.lcut("杭研") == [("杭研", "nz")]

    def test_added_tag_overrides(self, seg, pseg):
        seg.add_word("清华", 20, "nt")
        assert pseg.lcut("清华") == [("清华", "nt")]

    def test_userdict_tags(self, seg, pseg, tmp_path):
        path = tmp_path / "user.txt"
        path.write_text("杭研 10 nz\n", encoding="utf-8")
        seg.load_userdict(path)
        assert pseg.lcut("杭研") == [("杭研", "nz")]


class TestBatch:
    def test_cut_many(self, pseg):
        results = pseg.cut_many(["我来到", "小明"], workers=2)
        assert [[(t.text, t.tag) for t in r] for r in results] == [
            [("我", "r"), ("来到", "v")],
            [("小明", "nr")],
        ]

    def test_default_construction_from_context(self, context):
        pseg = PosSegmenter(context=context)
        assert pseg.lcut("北京") == [("北京", "ns")]
