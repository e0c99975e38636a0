"""
Pydantic models for Jiefen JSON output.

Used by the CLI's ``--json`` mode and suitable as response schemas for
a web API wrapping the segmenter.

Usage:
    from jiefen.models import SegmentationResult

    tokens = Segmenter().cut("我来到北京清华大学")
    print(SegmentationResult.from_tokens(text, tokens).model_dump_json())
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from jiefen.loading.dictionary import LoadReport


class TokenResult(BaseModel):
    """A single segmented word."""
    model_config = ConfigDict(from_attributes=True)

    text: str = Field(..., description="Surface text as it appears in input")
    start: int = Field(..., description="Start offset in the input (inclusive)")
    end: int = Field(..., description="End offset in the input (exclusive)")
    tag: Optional[str] = Field(None, description="Part-of-speech tag, when tagging")

    @classmethod
    def from_token(cls, token) -> "TokenResult":
        """Create a TokenResult from a ``jiefen.segment.Token``."""
        return cls(text=token.text, start=token.start, end=token.end, tag=token.tag)


class SegmentationResult(BaseModel):
    """All tokens of one input text."""
    text: str = Field(..., description="The input text")
    mode: str = Field("default", description="default, full or search")
    hmm: bool = Field(True, description="Whether the HMM was used")
    tokens: List[TokenResult] = Field(default_factory=list)

    @classmethod
    def from_tokens(cls, text: str, tokens: Sequence, mode: str = "default",
                    hmm: bool = True) -> "SegmentationResult":
        return cls(
            text=text,
            mode=mode,
            hmm=hmm,
            tokens=[TokenResult.from_token(t) for t in tokens],
        )

    def words(self) -> List[str]:
        return [t.text for t in self.tokens]


class SkippedLineResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_no: int
    text: str
    reason: str


class LoadReportResult(BaseModel):
    """Outcome of loading a dictionary file."""
    model_config = ConfigDict(from_attributes=True)

    source: str
    kept: int = 0
    skipped: List[SkippedLineResult] = Field(default_factory=list)
    failed: bool = False

    @classmethod
    def from_report(cls, report: LoadReport) -> "LoadReportResult":
        return cls(
            source=report.source,
            kept=report.kept,
            skipped=[
                SkippedLineResult(line_no=s.line_no, text=s.text, reason=s.reason)
                for s in report.skipped
            ],
            failed=report.failed,
        )
