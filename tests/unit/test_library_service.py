"""
Unit tests for the in-memory catalog.
"""

import threading

from library_api.app.services.library_service import SEED_TITLES, LibraryService


class TestListAndGet:
    """Tests for read operations."""

    def test_list_all_returns_seed(self):
        assert LibraryService.list_all() == list(SEED_TITLES)
        assert len(LibraryService.list_all()) == 5

    def test_list_all_returns_copy(self):
        titles = LibraryService.list_all()
        titles.append("Mutated")
        assert "Mutated" not in LibraryService.list_all()

    def test_get_at_valid_indexes(self):
        for index, title in enumerate(SEED_TITLES):
            assert LibraryService.get_at(index) == (title, True)

    def test_get_at_out_of_range(self):
        assert LibraryService.get_at(5) == (None, False)
        assert LibraryService.get_at(100) == (None, False)

    def test_get_at_negative_is_not_found(self):
        assert LibraryService.get_at(-1) == (None, False)


class TestMutations:
    """Tests for add, replace and remove."""

    def test_add_appends(self):
        LibraryService.add("Новая книга")
        titles = LibraryService.list_all()
        assert len(titles) == 6
        assert titles[-1] == "Новая книга"

    def test_add_allows_duplicates(self):
        LibraryService.add("Комикс")
        assert LibraryService.list_all().count("Комикс") == 2

    def test_replace_first_match_only(self):
        LibraryService.reset(["A", "B", "A"])
        assert LibraryService.replace_first_match("A", "C") == (True, "C")
        assert LibraryService.list_all() == ["C", "B", "A"]

    def test_replace_miss_leaves_catalog(self):
        LibraryService.reset(["A", "B"])
        assert LibraryService.replace_first_match("Z", "C") == (False, "")
        assert LibraryService.list_all() == ["A", "B"]

    def test_replace_is_case_sensitive(self):
        LibraryService.reset(["Book"])
        assert LibraryService.replace_first_match("book", "Other") == (False, "")
        assert LibraryService.list_all() == ["Book"]

    def test_remove_first_match(self):
        LibraryService.reset(["A", "B", "A"])
        assert LibraryService.remove_first_match("A") is True
        assert LibraryService.list_all() == ["B", "A"]

    def test_remove_missing(self):
        LibraryService.reset(["A", "B"])
        assert LibraryService.remove_first_match("Z") is False
        assert LibraryService.list_all() == ["A", "B"]

    def test_remove_empty_or_none(self):
        LibraryService.reset(["", "A"])
        assert LibraryService.remove_first_match("") is False
        assert LibraryService.remove_first_match(None) is False
        assert LibraryService.list_all() == ["", "A"]

    def test_reset_restores_seed(self):
        LibraryService.add("X")
        LibraryService.reset()
        assert LibraryService.list_all() == list(SEED_TITLES)


def test_concurrent_adds_are_not_lost():
    """Appends from many threads all land in the catalog."""
    LibraryService.reset([])

    def worker(prefix: str) -> None:
        for i in range(200):
            LibraryService.add(f"{prefix}-{i}")

    threads = [threading.Thread(target=worker, args=(str(n),)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(LibraryService.list_all()) == 8 * 200
