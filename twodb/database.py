"""High-level record API on top of the page file and index."""

from __future__ import annotations

import os
import threading
from typing import Optional

from twodb.bptree import BPlusTree
from twodb.pagefile import Record, StorageError, TextFileHandler


class Database:
    """A key/value record store backed by a text database file."""

    def __init__(self, file_handler: TextFileHandler, index: BPlusTree) -> None:
        self.file_handler = file_handler
        self.index = index
        self._lock = threading.RLock()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying database file."""
        self.file_handler.close()

    def insert(self, record_id: str, data: str) -> None:
        """Store a new record; raise StorageError if the id already exists."""
        with self._lock:
            try:
                existing = self.index.find(record_id)
            except StorageError:
                existing = None
            if existing is not None and existing[0] != 0:
                raise StorageError(f"record with ID '{record_id}' already exists")

            data_page = self.file_handler.allocate_page()
            data_page.header.page_type = "Data"
            entry_index = data_page.add_record(Record(fields=[record_id, data]))
            self.file_handler.write_page(data_page)
            self.index.insert(record_id, data_page.header.page_id, entry_index)

    def _locate(self, record_id: str) -> Optional[tuple[int, int]]:
        location = self.index.find(record_id)
        if location is None or location[0] == 0:
            return None
        return location

    def get(self, record_id: str) -> Optional[Record]:
        """Return the record with the given id, or None if there is none."""
        with self._lock:
            location = self._locate(record_id)
            if location is None:
                return None
            page_id, entry_index = location
            return self.file_handler.read_page(page_id).get_record(entry_index)

    def delete(self, record_id: str) -> None:
        """Remove the record with the given id."""
        with self._lock:
            location = self._locate(record_id)
            if location is None:
                raise StorageError(f"record with ID '{record_id}' not found")
            page_id, entry_index = location
            data_page = self.file_handler.read_page(page_id)
            data_page.delete_record(entry_index)
            self.file_handler.write_page(data_page)
            self.index.delete(record_id)

    def update(self, record_id: str, new_data: str) -> None:
        """Replace the data of an existing record."""
        with self._lock:
            location = self._locate(record_id)
            if location is None:
                raise StorageError(
                    f"cannot update non-existent record with ID '{record_id}'"
                )
            page_id, entry_index = location
            data_page = self.file_handler.read_page(page_id)
            record = data_page.get_record(entry_index)
            if len(record.fields) < 2:
                raise StorageError(
                    f"Record has no data field: EntryIndex {entry_index}"
                )
            record.fields[1] = new_data
            data_page.data[f"Entry-{entry_index}"] = "|".join(record.fields)
            self.file_handler.write_page(data_page)


def open_database(file_path: str | os.PathLike[str]) -> Database:
    """Open (creating if needed) the database file at the given path."""
    file_handler = TextFileHandler(file_path)
    try:
        index = BPlusTree(file_handler)
    except Exception:
        file_handler.close()
        raise
    return Database(file_handler, index)