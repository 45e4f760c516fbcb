"""
Example 02: Writes, Plugins and the Unit of Work

This example demonstrates inserting, updating and deleting records, plugin
hooks, and running several writes atomically.
"""

from row_mapper import (
    ConnectionConfig,
    Engine,
    HookPlugin,
    Mapper,
    MapperLocator,
    StatementExecutionError,
    Table,
)
import tempfile
import sqlite3
from pathlib import Path


class NoteMapper(Mapper):
    table = Table(
        "notes",
        ("note_id", "body", "revision"),
        "note_id",
        autoincrement=True,
        defaults={"revision": 0},
    )


def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE notes (note_id INTEGER PRIMARY KEY, body TEXT NOT NULL UNIQUE, "
        "revision INTEGER NOT NULL)"
    )
    conn.commit()
    conn.close()

    # Bump a revision counter on every update
    plugin = HookPlugin()

    @plugin.on("modify_update")
    def bump_revision(row, update):
        update.values["revision"] = row.revision + 1

    @plugin.on("after_update")
    def keep_revision(row, update, result):
        row.revision = update.values["revision"]

    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=db_path))
    locator = MapperLocator(engine)
    locator.register(NoteMapper, plugin)
    notes = locator.get(NoteMapper)

    print("=== Writes ===\n")

    note = notes.new_record({"body": "first draft"})
    notes.insert(note)
    print(f"Inserted note {note.note_id} ({note.get_row().get_status().value})")

    note.body = "second draft"
    notes.update(note)
    print(f"Updated note {note.note_id}, revision {note.revision}\n")

    print("=== Unit of Work ===\n")

    # 1. Successful plan
    transaction = locator.new_transaction()
    transaction.insert(notes.new_record({"body": "todo: buy milk"}))
    transaction.insert(notes.new_record({"body": "todo: call home"}))
    transaction.exec()
    print(f"1. Committed {len(transaction.completed)} inserts")

    # 2. A failing plan is rolled back as a whole
    transaction = locator.new_transaction()
    transaction.insert(notes.new_record({"body": "todo: water plants"}))
    transaction.insert(notes.new_record({"body": "todo: buy milk"}))
    try:
        transaction.exec()
    except StatementExecutionError as e:
        print(f"2. Rolled back after '{transaction.failed.label}': {e}")

    count = engine.fetch_all("SELECT COUNT(*) AS cnt FROM notes")[0]["cnt"]
    print(f"\nNotes stored: {count}")

    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
