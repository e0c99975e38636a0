"""
SQLAlchemy ORM models for the compiled dictionary cache.

The cache stores the parsed main dictionary so later processes can skip
re-parsing the text file. ``CacheInfo`` records where the entries came
from; a cache whose recorded source stamp no longer matches the file is
stale.
"""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class DictWord(Base):
    """One dictionary entry."""
    __tablename__ = "dict_word"

    word: Mapped[str] = mapped_column(Text, primary_key=True)
    freq: Mapped[int] = mapped_column(Integer, nullable=False)
    tag: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    def __repr__(self) -> str:
        return f"<DictWord {self.word!r} freq={self.freq} tag={self.tag!r}>"


class CacheInfo(Base):
    """Key/value metadata about the cached dictionary."""
    __tablename__ = "cache_info"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
