import pytest

from notion_shelf.core.icons import DEFAULT_IMPORT_ICON
from notion_shelf.errors import TransportError, ValidationError
from notion_shelf.importer import Importer, read_goodreads_rows

from fakes import FakeLookup, FakeNotion, NoPace

HEADER = "Book Id,Title,Author,ISBN,ISBN13,My Rating"


def _importer(books, notion=None):
    return Importer(notion or FakeNotion([]), FakeLookup(books), throttle=NoPace())


def _write(tmp_path, name, text):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_single_isbn_creates_page_with_default_icon() -> None:
    notion = FakeNotion([])
    result = _importer({"9780306406157": ("Dune", 412)}, notion).import_isbn("978-0-306-40615-7")

    assert result.stats["created"] == 1
    assert result.failures == []
    properties, icon = notion.created[0]
    assert icon.value == DEFAULT_IMPORT_ICON
    assert properties["Title"] == {"title": [{"text": {"content": "Dune"}}]}
    assert properties["Author"] == {"multi_select": [{"name": "Author"}]}
    assert properties["ISBN"] == {"rich_text": [{"text": {"content": "9780306406157"}}]}
    assert properties["Total Pages"] == {"number": 412}


def test_single_isbn_not_found_is_recorded() -> None:
    result = _importer({}).import_isbn("0-306-40615-2")
    assert result.stats["not_found"] == 1
    assert result.failures == ["0306406152"]


def test_file_mode_skips_blank_lines_and_normalizes(tmp_path) -> None:
    path = _write(tmp_path, "isbns.txt", " 111-1 \n\n222\n   \n333\n")
    notion = FakeNotion([])
    result = _importer({"1111": ("One", None), "333": ("Three", 90)}, notion).import_file(path)

    assert result.stats["created"] == 2
    assert result.stats["not_found"] == 1
    assert result.failures == ["222"]
    assert [p["Total Pages"]["number"] for p, _ in notion.created] == [None, 90]


def test_create_error_is_counted_not_raised() -> None:
    class BrokenNotion(FakeNotion):
        def create_page(self, properties, icon=None):
            raise TransportError("notion down")

    result = _importer({"111": ("One", 1)}, BrokenNotion([])).import_isbn("111")
    assert result.stats["create_failed"] == 1
    assert result.stats["created"] == 0


def test_goodreads_prefers_isbn13_and_falls_back(tmp_path) -> None:
    path = _write(
        tmp_path,
        "goodreads.csv",
        "\n".join([
            HEADER,
            '1,"Dune, Deluxe",Frank Herbert,="0441013597",="9780441013593",5',
            '2,Fallback,Someone,="0306406152",="9780000000000",4',
            '3,Nothing,Nobody,="",="",0',
            '4,Missing Both,Nobody,="1111111111",="9781111111111",0',
        ]),
    )
    lookup = FakeLookup({"9780441013593": ("Dune", 600), "0306406152": ("Fallback", 100)})
    notion = FakeNotion([])
    result = Importer(notion, lookup, throttle=NoPace()).import_goodreads(path)

    assert lookup.calls == ["9780441013593", "9780000000000", "0306406152", "9781111111111", "1111111111"]
    assert result.stats["created"] == 2
    assert result.stats["no_isbn"] == 1
    assert result.stats["not_found"] == 1
    # the row without ISBNs never reaches the failure log
    assert result.failures == ["1111111111"]


def test_goodreads_without_isbn_columns_fails(tmp_path) -> None:
    path = _write(tmp_path, "bad.csv", "Book Id,Title\n1,Dune\n")
    with pytest.raises(ValidationError):
        _importer({}).import_goodreads(path)


def test_read_goodreads_rows_drops_rows_without_isbns(tmp_path) -> None:
    path = _write(tmp_path, "gr.csv", "Title,ISBN13\nA,\nB,=\"9780306406157\"\n")
    rows = read_goodreads_rows(path)
    assert [(r.title, r.isbn13) for r in rows] == [("B", "9780306406157")]
