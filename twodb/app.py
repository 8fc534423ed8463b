"""Command that walks through the basic database operations."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from twodb.database import open_database
from twodb.pagefile import StorageError


def _log(message: str) -> None:
    print(message, file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open a database, then insert, read, update and delete records."""
    parser = argparse.ArgumentParser(
        prog="twodb", description="Demonstrate the text database."
    )
    parser.add_argument(
        "path", nargs="?", default="mydatabase.db", help="database file path"
    )
    args = parser.parse_args(argv)

    try:
        db = open_database(args.path)
    except (StorageError, OSError) as exc:
        _log(f"Failed to open database: {exc}")
        return 1

    with db:
        print("Database opened successfully.")

        print("\n--- Inserting Records ---")
        for record_id, data in (("user:1", "John Doe"), ("user:2", "Jane Smith")):
            try:
                db.insert(record_id, data)
            except StorageError as exc:
                _log(f"Insert failed: {exc}")
            else:
                print(f"Inserted '{record_id}'")

        try:
            db.insert("user:1", "John Doe Again")
        except StorageError as exc:
            print(f"As expected, failed to insert duplicate key: {exc}")

        print("\n--- Retrieving Records ---")
        try:
            record = db.get("user:1")
        except StorageError as exc:
            _log(f"Get failed: {exc}")
        else:
            if record is not None:
                print(
                    f"Retrieved 'user:1': ID={record.fields[0]}, "
                    f"Data={record.fields[1]}"
                )
            else:
                print("Record 'user:1' not found.")

        print("\n--- Updating a Record ---")
        try:
            db.update("user:2", "Jane Doe")
        except StorageError as exc:
            _log(f"Update failed: {exc}")
        else:
            print("Updated 'user:2'")

        try:
            record = db.get("user:2")
        except StorageError as exc:
            _log(f"Get failed: {exc}")
        else:
            if record is not None:
                print(
                    f"Retrieved updated 'user:2': ID={record.fields[0]}, "
                    f"Data={record.fields[1]}"
                )

        print("\n--- Deleting a Record ---")
        try:
            db.delete("user:1")
        except StorageError as exc:
            _log(f"Delete failed: {exc}")
        else:
            print("Deleted 'user:1'")

        try:
            record = db.get("user:1")
        except StorageError:
            record = None
        else:
            if record is None:
                print("As expected, record 'user:1' not found after deletion.")

    return 0


if __name__ == "__main__":
    sys.exit(main())