"""
Example 01: Mappers and Relationships

This example demonstrates fetching records with RowMapper and loading their
relationships in batches.
"""

from row_mapper import ConnectionConfig, Engine, Mapper, MapperLocator, Table
import tempfile
import sqlite3
from pathlib import Path


class AuthorMapper(Mapper):
    table = Table("authors", ("author_id", "name"), "author_id", autoincrement=True)

    def define_relationships(self, rel):
        rel.one_to_many("books", "BookMapper").on({"author_id": "author_id"})


class BookMapper(Mapper):
    table = Table("books", ("book_id", "author_id", "title"), "book_id", autoincrement=True)

    def define_relationships(self, rel):
        rel.many_to_one("author", AuthorMapper)


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE authors (author_id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    conn.execute(
        "CREATE TABLE books (book_id INTEGER PRIMARY KEY, author_id INTEGER, title TEXT NOT NULL)"
    )
    conn.execute("INSERT INTO authors (name) VALUES ('Ursula'), ('Italo')")
    conn.execute(
        "INSERT INTO books (author_id, title) VALUES "
        "(1, 'The Dispossessed'), (1, 'The Lathe of Heaven'), (2, 'Invisible Cities')"
    )
    conn.commit()
    conn.close()

    # Wire the engine and the mappers
    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=db_path))
    locator = MapperLocator(engine)
    locator.register(AuthorMapper)
    locator.register(BookMapper)

    print("=== Mappers and Relationships ===\n")

    # fetch_record: one record, or None
    book = locator.get(BookMapper).fetch_record(3, with_=["author"])
    print(f"fetch_record result: {book.title} by {book.author.name}\n")

    # fetch_record_set: books for every author with one extra query
    authors = locator.get(AuthorMapper).fetch_record_set([1, 2], with_=["books"])
    for author in authors:
        titles = ", ".join(b.title for b in author.books)
        print(f"  - {author.name}: {titles}")
    print()

    # Identity map: the same row is shared within one locator scope
    again = locator.get(BookMapper).fetch_record(3)
    print(f"Same row: {again.get_row() is book.get_row()}")

    locator.close()
    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
