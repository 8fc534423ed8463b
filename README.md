# twodb

A small key/value store that keeps its data in a human-readable text file.
The file starts with a `# DATABASE HEADER` section (page size, encoding,
version, page count), followed by `# PAGE` sections. Each record is stored
on its own data page, and a B+ tree index on page 1 maps record IDs to the
page and entry where the record lives.

## Installation

```
pip install .
```

No third-party libraries are needed.

## Usage

```python
from twodb.database import open_database
from twodb.pagefile import StorageError

with open_database("mydatabase.db") as db:
    db.insert("user:1", "John Doe")
    db.insert("user:2", "Jane Smith")

    record = db.get("user:1")           # Record, or None when the ID is unknown
    print(record.fields)                # ['user:1', 'John Doe']

    db.update("user:2", "Jane Doe")
    db.delete("user:1")

    try:
        db.insert("user:2", "duplicate")
    except StorageError as exc:
        print(exc)                      # record with ID 'user:2' already exists
```

`open_database` creates the file if it does not exist. `Database` can also be
closed explicitly with `close()`.

Operations that cannot be carried out raise `twodb.pagefile.StorageError`:
inserting a duplicate ID, updating or deleting a missing record, or reading a
page that does not exist.

## Lower-level access

- `twodb.pagefile.TextFileHandler` opens the file, loads the header with
  `load_metadata()`, and offers `read_page()`, `write_page()`,
  `allocate_page()` and `close()`. It can be used as a context manager.
- `twodb.pagefile.Page` holds a `PageHeader` and a dictionary of string data;
  on pages of type `"Data"` it offers `add_record()`, `get_record()` and
  `delete_record()` for `Record` objects.
- `twodb.bptree.BPlusTree` is the index, with `insert(key, page_id,
  entry_index)`, `find(key)` (returning `(page_id, entry_index)` or `None`)
  and `delete(key)`.

## Limitations

- The index lives in a single root leaf that holds at most three keys. Node
  splitting is not supported: inserting a fourth key issues a
  `RuntimeWarning`, the record is still written to its data page, but its ID
  is not indexed, so `get()` returns `None` for it.
- Deleting a record removes its entry and its index key but does not free
  its page; page IDs are never reused by the database itself.
- There are no queries, scans or transactions: records are reached by ID only.

## Demo

A short walk-through that inserts, reads, updates and deletes a few records,
printing what happens at each step:

```
twodb-demo [PATH]
```

`PATH` defaults to `mydatabase.db` in the current directory. Failures are
reported on standard error.

## Running the tests

```
pip install .[test]
pytest
```