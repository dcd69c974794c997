"""
Integration tests for the HTTP surface of the library controller.
"""

from urllib.parse import quote

import pytest

from library_api.app.api.dispatcher import JOKE_MESSAGE
from library_api.app.services.library_service import SEED_TITLES, LibraryService

BASE = "/api/library"


class TestListAll:

    def test_list_routes_return_identical_arrays(self, client):
        responses = [
            client.get(f"{BASE}/all"),
            client.post(f"{BASE}/everything"),
            client.patch(f"{BASE}/all"),
            client.options(f"{BASE}/all"),
        ]
        for response in responses:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("application/json")
            assert response.json() == list(SEED_TITLES)

    def test_post_all_is_not_bound(self, client):
        response = client.post(f"{BASE}/all")
        assert response.status_code == 405
        assert response.headers["allow"] == "GET, OPTIONS, PATCH"

    def test_head_all_is_not_bound(self, client):
        response = client.request("HEAD", f"{BASE}/all")
        assert response.status_code == 405
        assert response.headers["allow"] == "GET, OPTIONS, PATCH"


class TestFetchByIndex:

    def test_root_with_query(self, client):
        response = client.get(BASE, params={"index": 1})
        assert response.status_code == 200
        assert response.text == SEED_TITLES[1]

    def test_take_and_get_with_query(self, client):
        assert client.get(f"{BASE}/take", params={"index": 2}).text == SEED_TITLES[2]
        assert client.get(f"{BASE}/get", params={"index": 4}).text == SEED_TITLES[4]

    def test_get_with_route_value(self, client):
        response = client.get(f"{BASE}/get/3")
        assert response.status_code == 200
        assert response.text == SEED_TITLES[3]

    def test_out_of_range_is_teapot(self, client):
        for url in (f"{BASE}/get/5", f"{BASE}/get?index=-1", f"{BASE}/take?index=99"):
            response = client.get(url)
            assert response.status_code == 418
            assert response.content == b""

    def test_post_root_reads_route_index(self, client):
        response = client.post(BASE)
        assert response.status_code == 200
        assert response.text == SEED_TITLES[0]

    def test_non_integer_index(self, client):
        response = client.get(f"{BASE}/get", params={"index": "abc"})
        assert response.status_code == 400
        assert "index" in response.json()["detail"]

    def test_non_ascii_digit_index(self, client):
        response = client.get(f"{BASE}/get", params={"index": "٣"})
        assert response.status_code == 400

    def test_repeated_index_uses_first_value(self, client):
        response = client.get(f"{BASE}/get?index=1&index=2")
        assert response.text == SEED_TITLES[1]


class TestAddBook:

    def test_bring_book(self, client):
        response = client.post(f"{BASE}/bringBook", params={"bookName": "Мастер и Маргарита"})
        assert response.status_code == 200
        assert response.content == b""
        assert client.get(f"{BASE}/all").json()[-1] == "Мастер и Маргарита"

    def test_send_book(self, client):
        client.post(f"{BASE}/sendBook", params={"bookName": "X"})
        titles = client.get(f"{BASE}/all").json()
        assert len(titles) == 6
        assert titles[-1] == "X"

    def test_missing_book_name_is_a_joke(self, client):
        response = client.post(f"{BASE}/bringBook")
        assert response.status_code == 200
        assert response.text == JOKE_MESSAGE
        assert len(LibraryService.list_all()) == 5


class TestReplaceBook:

    def test_change_book(self, client):
        response = client.put(f"{BASE}/changeBook/{quote('Комикс')}", params={"newName": "Манга"})
        assert response.status_code == 200
        assert response.text == "Манга"
        assert LibraryService.list_all()[3] == "Манга"

    def test_change_missing_book(self, client):
        response = client.put(f"{BASE}/changeBook/Nothing", params={"newName": "Манга"})
        assert response.status_code == 200
        assert response.text == ""
        assert LibraryService.list_all() == list(SEED_TITLES)

    def test_change_title_with_slash(self, client):
        LibraryService.reset(["a/b"])
        response = client.put(f"{BASE}/changeBook/a%2Fb", params={"newName": "c"})
        assert response.text == "c"
        assert LibraryService.list_all() == ["c"]


class TestDeleteBook:

    def test_delete_existing(self, client):
        response = client.delete(f"{BASE}/deleteBook/{quote('ASP за 5 дней')}")
        assert response.status_code == 200
        assert response.content == b""
        assert "ASP за 5 дней" not in LibraryService.list_all()

    def test_delete_missing(self, client):
        LibraryService.reset(["A", "B"])
        response = client.delete(f"{BASE}/deleteBook/Z")
        assert response.status_code == 400
        assert response.content == b""
        assert LibraryService.list_all() == ["A", "B"]

    def test_delete_title_with_slash(self, client):
        client.post(f"{BASE}/bringBook", params={"bookName": "a/b"})
        response = client.delete(f"{BASE}/deleteBook/a%2Fb")
        assert response.status_code == 200
        assert LibraryService.list_all() == list(SEED_TITLES)


def test_unknown_path_is_not_found(client):
    response = client.get(f"{BASE}/nowhere/at/all")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


@pytest.mark.parametrize(
    "method,url",
    [
        ("HEAD", f"{BASE}/nowhere"),
        ("TRACE", f"{BASE}/nowhere/at/all"),
        ("PURGE", f"{BASE}/nowhere"),
    ],
)
def test_any_method_on_unknown_path_is_not_found(client, method, url):
    assert client.request(method, url).status_code == 404


def test_health_check(client):
    assert client.get("/").json() == {"status": "ok"}
