"""
Lazily initialized, load-once values for Jiefen.

The dictionary and HMM tables are expensive to load and immutable
afterwards (the dictionary is mutated only through its owning context).
A ``Cache`` computes its value on first use under a lock, so concurrent
first-time access loads exactly once.
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


class Cache(Generic[T]):
    """Thread-safe holder for a value computed on first access."""

    def __init__(self, name: Optional[str], initializer: Callable[[], T]):
        """
        Create a new cache.

        Args:
            name: Label used in logs and reprs, or None.
            initializer: Function computing the cached value.
        """
        self.name = name
        self.initializer = initializer
        self._value: Optional[T] = None
        self._initialized = False
        self._cache_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure(self) -> T:
        """
        Get the cached value, initializing if necessary.

        Returns:
            The cached value.
        """
        if self._initialized:
            return self._value

        with self._cache_lock:
            if not self._initialized:
                self._value = self.initializer()
                self._initialized = True
            return self._value

    def invalidate(self):
        """Mark the cache as needing re-initialization."""
        with self._cache_lock:
            self._initialized = False
            self._value = None


def defcache(name: str):
    """
    Decorator to define a named cached value.

    Usage:
        @defcache("default-context")
        def load_context():
            return SegmentationContext.from_files()

        context = load_context.ensure()

    Args:
        name: Cache label.

    Returns:
        Decorator function.
    """
    def decorator(func: Callable[[], T]) -> Cache[T]:
        return Cache(name, func)
    return decorator
