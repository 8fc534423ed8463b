import pytest

from twodb.pagefile import (
    Page,
    PageHeader,
    Record,
    StorageError,
    TextFileHandler,
)

INITIAL = "# DATABASE HEADER\nPAGESIZE=4096\nENCODING=UTF-8\nVERSION=1.0\nPAGES=0\n\n"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


def data_page(page_id=1):
    return Page(header=PageHeader(page_id=page_id, page_type="Data"))


def test_new_file_is_initialised(db_path):
    with TextFileHandler(db_path) as handler:
        assert handler.page_count == 0
        assert handler.page_size == 4096
        assert handler.deallocated_pages == []
    assert db_path.read_text(encoding="utf-8") == INITIAL


def test_load_metadata_from_existing_header(db_path):
    db_path.write_text(
        "# DATABASE HEADER\nPAGESIZE=8192\nPAGES=3\nDEALLOCATED_PAGES=2,5\n\n",
        encoding="utf-8",
    )
    with TextFileHandler(db_path) as handler:
        assert handler.page_size == 8192
        assert handler.page_count == 3
        assert handler.deallocated_pages == [2, 5]


def test_allocate_page_prefers_deallocated(db_path):
    db_path.write_text(
        "# DATABASE HEADER\nPAGES=3\nDEALLOCATED_PAGES=2,5\n\n", encoding="utf-8"
    )
    with TextFileHandler(db_path) as handler:
        assert handler.allocate_page().header.page_id == 2
        assert handler.allocate_page().header.page_id == 5
        assert handler.allocate_page().header.page_id == 4
        assert handler.page_count == 4


def test_allocate_page_increments_count(db_path):
    with TextFileHandler(db_path) as handler:
        first = handler.allocate_page()
        second = handler.allocate_page()
        assert (first.header.page_id, second.header.page_id) == (1, 2)
        assert first.data == {}
        assert handler.page_count == 2


def test_write_and_read_round_trip(db_path):
    with TextFileHandler(db_path) as handler:
        page = handler.allocate_page()
        page.header.page_type = "Index"
        page.header.page_lsn = 7
        page.data["Keys"] = "a,b"
        handler.write_page(page)
        loaded = handler.read_page(page.header.page_id)
    assert loaded.header == PageHeader(page_lsn=7, page_id=1, page_type="Index")
    assert loaded.data == {"Keys": "a,b"}


def test_read_page_rejects_invalid_ids(db_path):
    with TextFileHandler(db_path) as handler:
        with pytest.raises(StorageError, match="Invalid PageID"):
            handler.read_page(0)
        with pytest.raises(StorageError, match="Invalid PageID"):
            handler.read_page(1)


def test_read_page_missing_section(db_path):
    db_path.write_text("# DATABASE HEADER\nPAGES=2\n\n", encoding="utf-8")
    with TextFileHandler(db_path) as handler:
        with pytest.raises(StorageError, match="Page 1 not found"):
            handler.read_page(1)


def test_write_page_beyond_count_updates_header(db_path):
    with TextFileHandler(db_path) as handler:
        handler.write_page(data_page(3))
        assert handler.page_count == 3
    assert "PAGES=3" in db_path.read_text(encoding="utf-8")
    with TextFileHandler(db_path) as reopened:
        assert reopened.page_count == 3
        assert reopened.read_page(3).header.page_type == "Data"


def test_allocated_page_write_keeps_header_count(db_path):
    with TextFileHandler(db_path) as handler:
        handler.write_page(handler.allocate_page())
    assert "PAGES=0" in db_path.read_text(encoding="utf-8")


def test_rewrite_replaces_page_and_keeps_others(db_path):
    with TextFileHandler(db_path) as handler:
        first = data_page(1)
        first.data["Name"] = "old"
        handler.write_page(first)
        second = data_page(2)
        second.data["Name"] = "other"
        handler.write_page(second)

        first.data["Name"] = "new"
        handler.write_page(first)

        assert handler.read_page(1).data == {"Name": "new"}
        assert handler.read_page(2).data == {"Name": "other"}
    assert db_path.read_text(encoding="utf-8").count("PageID: 1\n") == 1


def test_close_closes_file(db_path):
    handler = TextFileHandler(db_path)
    handler.close()
    assert handler.file.closed


def test_add_record_requires_data_page():
    page = Page(header=PageHeader(page_id=1, page_type="Index"))
    with pytest.raises(StorageError, match="Not a Data Page"):
        page.add_record(Record(fields=["x"]))


def test_add_record_assigns_increasing_indices():
    page = data_page()
    first = Record(fields=["user:1", "John Doe"])
    assert page.add_record(first) == 1
    assert first.entry_index == 1
    assert page.add_record(Record(fields=["user:2", "Jane"])) == 2
    assert page.data["EntryIndex"] == "2"
    assert page.data["Entry-1"] == "user:1|John Doe"


def test_add_record_continues_from_stored_index():
    page = data_page()
    page.data["EntryIndex"] = "7"
    assert page.add_record(Record(fields=["k"])) == 8


def test_get_record_round_trip():
    page = data_page()
    index = page.add_record(Record(fields=["user:1", "John Doe"]))
    record = page.get_record(index)
    assert record == Record(entry_index=index, fields=["user:1", "John Doe"])


def test_get_record_errors():
    with pytest.raises(StorageError, match="Not a data page"):
        Page().get_record(1)
    with pytest.raises(StorageError, match="EntryIndex 4"):
        data_page().get_record(4)


def test_delete_record():
    page = data_page()
    index = page.add_record(Record(fields=["a", "b"]))
    page.delete_record(index)
    assert f"Entry-{index}" not in page.data
    with pytest.raises(StorageError, match="Record not found"):
        page.get_record(index)
    with pytest.raises(StorageError, match="Record to delete not found"):
        page.delete_record(index)


def test_records_survive_file_round_trip(db_path):
    with TextFileHandler(db_path) as handler:
        page = handler.allocate_page()
        page.header.page_type = "Data"
        index = page.add_record(Record(fields=["user:1", "John Doe"]))
        handler.write_page(page)
        loaded = handler.read_page(page.header.page_id)
    assert loaded.get_record(index).fields == ["user:1", "John Doe"]