"""
Database connection management for the Jiefen dictionary cache.

Engines are created per database path and reused; sessions are handed
out through ``session_scope`` which commits on success and rolls back
on error.
"""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from jiefen.db.models import Base
from jiefen.settings import CACHE_PATH

_engines: Dict[str, Engine] = {}
_engines_lock = threading.Lock()


def get_db_path(db_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Resolve the cache database path (explicit path, else settings)."""
    if db_path is not None:
        return Path(db_path)
    return CACHE_PATH


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.execute("PRAGMA synchronous = NORMAL")
    cursor.close()


def get_engine(db_path: Union[str, Path]) -> Engine:
    """
    Get (or create) the engine for a database file.

    The schema is created on first use.

    Args:
        db_path: Path to the SQLite file.

    Returns:
        SQLAlchemy engine.
    """
    key = str(Path(db_path).absolute())
    with _engines_lock:
        engine = _engines.get(key)
        if engine is None:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(f"sqlite:///{key}")
            event.listen(engine, "connect", _set_sqlite_pragmas)
            Base.metadata.create_all(engine)
            _engines[key] = engine
        return engine


def get_session(db_path: Union[str, Path]) -> Session:
    """Create a new session bound to the database at ``db_path``."""
    return sessionmaker(bind=get_engine(db_path))()


@contextmanager
def session_scope(db_path: Union[str, Path]) -> Iterator[Session]:
    """
    Transactional scope around a series of operations.

    Yields:
        A session, committed on normal exit and rolled back on error.
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_all():
    """Dispose every cached engine (used by tests and on reset)."""
    with _engines_lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()
