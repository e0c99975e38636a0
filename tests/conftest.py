"""
Shared fixtures: small isolated dictionaries and hand-written HMM tables.

Every test builds its own ``SegmentationContext`` so dictionary mutation
in one test never leaks into another.
"""

import pytest

from jiefen.context import SegmentationContext
from jiefen.hmm import HmmModel
from jiefen.posseg import PosSegmenter
from jiefen.segment import Segmenter
from jiefen.trie import FrequencyDictionary


# ============================================================================
# Tables
# ============================================================================

# total = 525
SMALL_DICT = [
    ("我", 100, "r"),
    ("来到", 50, "v"),
    ("来", 30, "v"),
    ("到", 30, "v"),
    ("北京", 80, "ns"),
    ("北", 5, "f"),
    ("京", 5, "ns"),
    ("清华大学", 40, "nt"),
    ("清华", 20, None),
    ("大学", 60, "n"),
    ("大", 50, "a"),
    ("学", 40, "v"),
    ("华", 5, "n"),
    ("天安门", 10, "ns"),
]

BMES_START = {"B": -0.26, "S": -1.47}
BMES_TRANS = {
    "B": {"E": -0.51, "M": -0.92},
    "E": {"B": -0.59, "S": -0.81},
    "M": {"E": -0.33, "M": -1.26},
    "S": {"B": -0.72, "S": -0.67},
}
BMES_EMIT = {
    "B": {"杭": -2.0, "网": -2.0},
    "E": {"研": -2.0, "易": -2.0},
    "M": {},
    "S": {"杭": -9.0, "研": -9.0, "网": -9.0, "易": -9.0, "我": -1.0},
}

POS_START = {"B-nr": -1.0, "S-a": -2.0, "S-r": -1.5}
POS_TRANS = {
    "B-nr": {"E-nr": -0.1},
    "E-nr": {"B-nr": -1.0, "S-a": -1.0, "S-r": -1.0},
    "S-a": {"B-nr": -1.0, "S-a": -1.0, "S-r": -1.0},
    "S-r": {"B-nr": -1.0, "S-a": -1.0, "S-r": -1.0},
}
POS_EMIT = {
    "B-nr": {"小": -1.0},
    "E-nr": {"明": -1.0},
    "S-a": {"小": -3.0},
    "S-r": {"我": -0.5},
}


def make_boundary_model() -> HmmModel:
    return HmmModel.from_tables(BMES_START, BMES_TRANS, BMES_EMIT, end_states=("E", "S"))


def make_pos_model() -> HmmModel:
    return HmmModel.from_tables(
        POS_START, POS_TRANS, POS_EMIT,
        state_tab={"我": ["S-r"]},
        end_states=("E-nr", "S-a", "S-r"),
    )


def make_context(entries=SMALL_DICT) -> SegmentationContext:
    dictionary = FrequencyDictionary((word, freq) for word, freq, _ in entries)
    tags = {word: tag for word, _, tag in entries if tag}
    return SegmentationContext(
        dictionary,
        tags,
        boundary_model=make_boundary_model(),
        pos_model=make_pos_model(),
    )


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def context():
    return make_context()


@pytest.fixture
def seg(context):
    return Segmenter(context)


@pytest.fixture
def pseg(seg):
    return PosSegmenter(seg)


@pytest.fixture
def dict_file(tmp_path):
    """The small dictionary written as a main dictionary file."""
    path = tmp_path / "dict.txt"
    lines = [f"{w} {f} {t}" if t else f"{w} {f}" for w, f, t in SMALL_DICT]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
