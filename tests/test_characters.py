"""
Tests for characters.py - Block splitting and symbol tags.
"""

from jiefen.characters import (
    RE_HAN_CUT_ALL, RE_HAN_DEFAULT, RE_SKIP, is_eng_char, split_blocks,
    split_lines, tag_for_symbol_run,
)


class TestSplitBlocks:
    def test_accurate_class_absorbs_latin(self):
        assert list(split_blocks("北京2024年，你好", RE_HAN_DEFAULT)) == [
            (0, "北京2024年", True), (7, "，", False), (8, "你好", True),
        ]

    def test_full_mode_class_is_han_only(self):
        assert list(split_blocks("北京2024年", RE_HAN_CUT_ALL)) == [
            (0, "北京", True), (2, "2024", False), (6, "年", True),
        ]

    def test_whitespace(self):
        assert list(split_blocks("！ \t？", RE_SKIP)) == [
            (0, "！", False), (1, " \t", True), (3, "？", False),
        ]

    def test_empty(self):
        assert list(split_blocks("", RE_HAN_DEFAULT)) == []


class TestClassification:
    def test_is_eng_char(self):
        assert is_eng_char("a")
        assert is_eng_char("7")
        assert not is_eng_char("ab")
        assert not is_eng_char("北")

    def test_tag_for_symbol_run(self):
        assert tag_for_symbol_run("3.14") == "m"
        assert tag_for_symbol_run("iPhone12") == "eng"
        assert tag_for_symbol_run("，") == "x"

    def test_split_lines_keeps_terminators(self):
        assert split_lines("a\nb\r\nc") == ["a\n", "b\r\n", "c"]
