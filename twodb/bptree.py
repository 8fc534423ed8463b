"""A minimal B+ tree index stored in the pages of a text database file."""

from __future__ import annotations

import bisect
import warnings
from dataclasses import dataclass, field
from typing import Optional

from twodb.pagefile import Page, StorageError, TextFileHandler

BTREE_ORDER = 4

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})


def _parse_bool(text: str) -> bool:
    return text in _TRUE_WORDS


def _parse_uint(text: str) -> int:
    text = text.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    return 0


@dataclass
class BTreeNode:
    """An in-memory view of an index page."""

    page: Page
    is_leaf: bool = False
    keys: list[str] = field(default_factory=list)
    children: list[int] = field(default_factory=list)
    pointers: list[str] = field(default_factory=list)
    next_leaf: int = 0


class BPlusTree:
    """Index mapping keys to record locations ("page:entry")."""

    def __init__(self, file_handler: TextFileHandler) -> None:
        self.file_handler = file_handler
        try:
            root = file_handler.read_page(1)
        except StorageError:
            root = file_handler.allocate_page()
            root.header.page_type = "Index"
            root.data["IsLeaf"] = "true"
            root.data["Keys"] = ""
            root.data["Pointers"] = ""
            file_handler.write_page(root)
        self.root_page_id = root.header.page_id

    def insert(self, key: str, page_id: int, entry_index: int) -> None:
        """Add a key and the location of its record to the root leaf.

        When the root is full or not a leaf, the key is not stored and a
        RuntimeWarning is issued, since node splitting is not supported.
        """
        node = self._read_node(self.root_page_id)
        if node.is_leaf and len(node.keys) < BTREE_ORDER - 1:
            position = bisect.bisect_left(node.keys, key)
            node.keys.insert(position, key)
            node.pointers.insert(position, f"{page_id}:{entry_index}")
            self._write_node(node)
            return
        warnings.warn(
            "B+ Tree insert is simplified. Node splitting not implemented.",
            RuntimeWarning,
            stacklevel=2,
        )

    def find(self, key: str) -> Optional[tuple[int, int]]:
        """Return (page_id, entry_index) for the key, or None if absent."""
        node = self._read_node(self.root_page_id)
        if not node.is_leaf:
            raise StorageError("cannot find in non-leaf root (not implemented)")
        for stored_key, pointer in zip(node.keys, node.pointers):
            if stored_key == key:
                page_part, _, entry_part = pointer.partition(":")
                return _parse_uint(page_part), _parse_uint(entry_part)
        return None

    def delete(self, key: str) -> None:
        """Remove the key from the root leaf."""
        node = self._read_node(self.root_page_id)
        if not node.is_leaf:
            raise StorageError("cannot delete from non-leaf root (not implemented)")
        try:
            position = node.keys.index(key)
        except ValueError:
            raise StorageError("key not found for deletion") from None
        del node.keys[position]
        if position < len(node.pointers):
            del node.pointers[position]
        self._write_node(node)

    def _read_node(self, page_id: int) -> BTreeNode:
        page = self.file_handler.read_page(page_id)
        node = BTreeNode(page=page, is_leaf=_parse_bool(page.data.get("IsLeaf", "")))
        keys = page.data.get("Keys", "")
        if keys:
            node.keys = keys.split(",")
        pointers = page.data.get("Pointers", "")
        if pointers:
            node.pointers = pointers.split(",")
        return node

    def _write_node(self, node: BTreeNode) -> None:
        node.page.data["IsLeaf"] = "true" if node.is_leaf else "false"
        node.page.data["Keys"] = ",".join(node.keys)
        node.page.data["Pointers"] = ",".join(node.pointers)
        self.file_handler.write_page(node.page)