"""
Service layer for the book catalog.

The catalog is a single process-wide ordered list of titles.  Titles
may repeat; indexes are zero-based and shift when an entry is removed.
Nothing is persisted: the list is seeded when the module is imported
and lives until the process exits.

All operations take a class-level lock, so a lookup followed by a
write (``replace_first_match``, ``remove_first_match``) is atomic with
respect to concurrent requests.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

SEED_TITLES: Tuple[str, ...] = (
    "ASP за 10 дней",
    "ASP за 5 дней",
    "ASP за 1 дней",
    "Комикс",
    "Преступление и наказание",
)


class LibraryService:
    """Service class owning the in-memory list of book titles."""

    _library: List[str] = list(SEED_TITLES)
    _lock = threading.Lock()

    @classmethod
    def list_all(cls) -> List[str]:
        """Return a copy of the whole catalog in insertion order."""
        with cls._lock:
            return list(cls._library)

    @classmethod
    def get_at(cls, index: int) -> Tuple[Optional[str], bool]:
        """Return ``(title, True)`` for a valid index, else ``(None, False)``.

        Negative indexes are never valid; they do not count from the end
        of the list.
        """
        with cls._lock:
            if 0 <= index < len(cls._library):
                return cls._library[index], True
        return None, False

    @classmethod
    def add(cls, title: str) -> None:
        """Append ``title`` to the end of the catalog."""
        with cls._lock:
            cls._library.append(title)
            size = len(cls._library)
        logger.info("Added book %r (catalog size %d)", title, size)

    @classmethod
    def replace_first_match(cls, old_title: str, new_title: str) -> Tuple[bool, str]:
        """Overwrite the first title equal to ``old_title``.

        Comparison is exact and case-sensitive.  Returns
        ``(True, new_title)`` when a slot was overwritten and
        ``(False, "")`` otherwise; nothing is inserted on a miss.
        """
        with cls._lock:
            try:
                position = cls._library.index(old_title)
            except ValueError:
                return False, ""
            cls._library[position] = new_title
        logger.info("Replaced book %r with %r at index %d", old_title, new_title, position)
        return True, new_title

    @classmethod
    def remove_first_match(cls, title: Optional[str]) -> bool:
        """Remove the first occurrence of ``title``.

        Returns ``True`` if an entry was removed.  An empty or ``None``
        title is rejected without searching.
        """
        if not title:
            return False
        with cls._lock:
            try:
                cls._library.remove(title)
            except ValueError:
                return False
        logger.info("Removed book %r", title)
        return True

    @classmethod
    def reset(cls, titles: Optional[Iterable[str]] = None) -> None:
        """Restore the seed titles, or install a copy of ``titles``."""
        with cls._lock:
            cls._library = list(SEED_TITLES if titles is None else titles)
            size = len(cls._library)
        logger.debug("Catalog reset (%d titles)", size)
