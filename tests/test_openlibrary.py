import requests

from notion_shelf.integrations.openlibrary import OpenLibraryLookup

from fakes import FakeResponse, FakeSession


def test_fetch_book_info_maps_payload() -> None:
    payload = {
        "ISBN:9780441013593": {
            "title": "Dune",
            "authors": [{"name": "Frank Herbert"}],
            "number_of_pages": 604,
        }
    }
    session = FakeSession([FakeResponse(200, payload)])
    failures = []
    book = OpenLibraryLookup(session, timeout_s=5).fetch_book_info("978-0441013593", failures)

    assert book.title == "Dune"
    assert book.authors == ["Frank Herbert"]
    assert book.page_count == 604
    assert book.isbn == "9780441013593"
    assert failures == []
    req = session.requests[0]
    assert req["params"]["bibkeys"] == "ISBN:9780441013593"
    assert req["timeout"] == 5


def test_defaults_when_optional_fields_absent() -> None:
    session = FakeSession([FakeResponse(200, {"ISBN:111": {"title": "Bare"}})])
    book = OpenLibraryLookup(session).fetch_book_info("111")
    assert book.authors == []
    assert book.page_count is None


def test_not_found_cases_append_to_failures() -> None:
    session = FakeSession([
        FakeResponse(200, {}),
        FakeResponse(200, {"ISBN:222": {"authors": []}}),
        FakeResponse(500, None, text="oops"),
        FakeResponse(200, None, text="<html>"),
        requests.ConnectionError("down"),
    ])
    lookup = OpenLibraryLookup(session)
    failures = []
    for isbn in ("111", "222", "333", "444", "555"):
        assert lookup.fetch_book_info(isbn, failures) is None
    assert failures == ["111", "222", "333", "444", "555"]
