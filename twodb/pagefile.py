"""Page-oriented storage in a plain-text database file."""

from __future__ import annotations

import os
import re
import threading
from dataclasses import dataclass, field
from typing import Iterator, Optional

HEADER_SECTION = "# DATABASE HEADER"
PAGE_SECTION = "# PAGE"
DEFAULT_PAGE_SIZE = 4096

_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")


class StorageError(Exception):
    """Raised when a page or record operation cannot be carried out."""


def _scan_int(text: str, *, unsigned: bool = False) -> Optional[int]:
    """Parse a leading decimal integer, returning None if there is none."""
    match = _INT_PATTERN.match(text)
    if match is None:
        return None
    value = int(match.group(1))
    if unsigned and value < 0:
        return None
    return value


def _lines(content: str) -> Iterator[str]:
    for line in content.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


@dataclass
class PageHeader:
    """Metadata stored at the top of every page."""

    page_lsn: int = 0
    page_id: int = 0
    page_type: str = ""


@dataclass
class Record:
    """A single entry in a data page."""

    entry_index: int = 0
    fields: list[str] = field(default_factory=list)


@dataclass
class Page:
    """A page of the database file: a header plus key/value data."""

    header: PageHeader = field(default_factory=PageHeader)
    data: dict[str, str] = field(default_factory=dict)

    def _require_data_page(self, message: str) -> None:
        if self.header.page_type != "Data":
            raise StorageError(message)

    def add_record(self, record: Record) -> int:
        """Store a record on this data page and return its entry index."""
        self._require_data_page("Not a Data Page")
        entry_index = 0
        if "EntryIndex" in self.data:
            parsed = _scan_int(self.data["EntryIndex"], unsigned=True)
            if parsed is not None:
                entry_index = parsed
        entry_index += 1
        self.data["EntryIndex"] = str(entry_index)
        self.data[f"Entry-{entry_index}"] = "|".join(record.fields)
        record.entry_index = entry_index
        return entry_index

    def get_record(self, entry_index: int) -> Record:
        """Return the record stored under the given entry index."""
        self._require_data_page("Not a data page")
        try:
            raw = self.data[f"Entry-{entry_index}"]
        except KeyError:
            raise StorageError(
                f"Record not found on page: EntryIndex {entry_index}"
            ) from None
        return Record(entry_index=entry_index, fields=raw.split("|"))

    def delete_record(self, entry_index: int) -> None:
        """Remove the record stored under the given entry index."""
        self._require_data_page("Not a data page")
        key = f"Entry-{entry_index}"
        if key not in self.data:
            raise StorageError(
                f"Record to delete not found on page: EntryIndex {entry_index}"
            )
        del self.data[key]


class TextFileHandler:
    """Reads and writes pages of a text database file."""

    def __init__(self, file_path: str | os.PathLike[str]) -> None:
        self.file_path = os.fspath(file_path)
        self.page_size = DEFAULT_PAGE_SIZE
        self.page_count = 0
        self.deallocated_pages: list[int] = []
        self._lock = threading.Lock()

        if not os.path.exists(self.file_path):
            try:
                self.file = open(self.file_path, "w+", encoding="utf-8", newline="")
            except OSError as exc:
                raise StorageError(f"Failed to create database file: {exc}") from exc
            initial = (
                f"{HEADER_SECTION}\nPAGESIZE={DEFAULT_PAGE_SIZE}\n"
                "ENCODING=UTF-8\nVERSION=1.0\nPAGES=0\n\n"
            )
            try:
                self.file.write(initial)
                self.file.flush()
            except OSError as exc:
                self.file.close()
                raise StorageError(
                    f"Failed to initialize database file: {exc}"
                ) from exc
        else:
            try:
                self.file = open(self.file_path, "r+", encoding="utf-8", newline="")
            except OSError as exc:
                raise StorageError(f"Failed to open database file: {exc}") from exc

        try:
            self.load_metadata()
        except Exception:
            self.file.close()
            raise

    def __enter__(self) -> "TextFileHandler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _read_all(self) -> str:
        self.file.seek(0)
        return self.file.read()

    def load_metadata(self) -> None:
        """Load page size, page count and free pages from the file header."""
        in_header = False
        for line in _lines(self._read_all()):
            if line == HEADER_SECTION:
                in_header = True
                continue
            if line.startswith(PAGE_SECTION):
                break
            if not in_header or not line:
                continue
            parts = line.split("=", 1)
            if len(parts) != 2:
                continue
            key, value = parts[0].strip(), parts[1].strip()
            if key == "PAGESIZE":
                parsed = _scan_int(value)
                if parsed is not None:
                    self.page_size = parsed
            elif key == "PAGES":
                parsed = _scan_int(value, unsigned=True)
                if parsed is not None:
                    self.page_count = parsed
            elif key == "DEALLOCATED_PAGES":
                for item in value.split(","):
                    self.deallocated_pages.append(_scan_int(item, unsigned=True) or 0)

    def read_page(self, page_id: int) -> Page:
        """Read the page with the given id from the file."""
        with self._lock:
            if page_id == 0 or page_id > self.page_count:
                raise StorageError(
                    f"Invalid PageID: {page_id}, PageCount: {self.page_count}"
                )
            page = Page(header=PageHeader(page_id=page_id))
            marker = f"PageID: {page_id}"
            found = False
            in_target = False

            for line in _lines(self._read_all()):
                if line.startswith(PAGE_SECTION):
                    if in_target:
                        break
                    in_target = False
                if marker in line:
                    in_target = True
                    found = True
                if not in_target or not line:
                    continue
                parts = line.split(": ", 1)
                if len(parts) != 2:
                    continue
                key, value = parts[0].strip(), parts[1].strip()
                if key == "LSN":
                    parsed = _scan_int(value, unsigned=True)
                    if parsed is not None:
                        page.header.page_lsn = parsed
                elif key == "Type":
                    page.header.page_type = value
                elif key != "PageID":
                    page.data[key] = value

            if not found:
                raise StorageError(f"Page {page_id} not found")
            return page

    def write_page(self, page: Page) -> None:
        """Write a page into the file, replacing any earlier copy of it."""
        with self._lock:
            try:
                content = self._read_all()
            except OSError as exc:
                raise StorageError(
                    f"Failed to read database file for writing: {exc}"
                ) from exc

            header = page.header
            new_page = "".join(
                [
                    f"{PAGE_SECTION}\n",
                    f"PageID: {header.page_id}\n",
                    f"LSN: {header.page_lsn}\n",
                    f"Type: {header.page_type}\n",
                    *(f"{key}: {value}\n" for key, value in page.data.items()),
                ]
            )

            marker_at = content.find(f"PageID: {header.page_id}")
            if marker_at != -1:
                start = content.rfind(PAGE_SECTION, 0, marker_at)
                if start == -1:
                    raise StorageError(
                        f"Page {header.page_id} has no section marker"
                    )
                end = content.find(PAGE_SECTION, start + len(PAGE_SECTION))
                if end != -1:
                    content = content[:start] + new_page + content[end:]
                else:
                    content = content[:start] + new_page
            else:
                content += "\n" + new_page

            if header.page_id > self.page_count:
                old = f"PAGES={self.page_count}"
                self.page_count = header.page_id
                content = content.replace(old, f"PAGES={self.page_count}", 1)

            try:
                self.file.seek(0)
                self.file.truncate(0)
            except OSError as exc:
                raise StorageError(
                    f"Failed to truncate database file: {exc}"
                ) from exc
            try:
                self.file.write(content)
                self.file.flush()
            except OSError as exc:
                raise StorageError(
                    f"Failed to write to database file: {exc}"
                ) from exc

    def close(self) -> None:
        """Close the underlying file."""
        with self._lock:
            if self.file is not None:
                self.file.close()

    def allocate_page(self) -> Page:
        """Return a fresh page with an unused id."""
        with self._lock:
            if self.deallocated_pages:
                page_id = self.deallocated_pages.pop(0)
            else:
                self.page_count += 1
                page_id = self.page_count
            return Page(header=PageHeader(page_id=page_id))