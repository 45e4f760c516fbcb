"""Unit tests for the Transaction unit of work."""

from __future__ import annotations

import pytest

from row_mapper.core.enums import RowStatus
from row_mapper.core.exceptions import PriorWorkError
from row_mapper.mapper.locator import MapperLocator
from row_mapper.unit_of_work import Transaction


def _explode(record: object) -> None:
    raise RuntimeError("disk full")


class TestTransaction:
    def test_plans_and_runs_in_order(self, executor, locator: MapperLocator) -> None:
        authors = locator.get("AuthorMapper")
        threads = locator.get("ThreadMapper")
        author = authors.new_record({"name": "dora"})
        thread = threads.fetch_record(1)
        thread.subject = "edited"
        gone = threads.fetch_record(2)

        transaction = locator.new_transaction()
        transaction.insert(author)
        transaction.update(thread)
        transaction.delete(gone)
        assert [work.label for work in transaction.get_plan()] == [
            "insert Record None",
            "update ThreadRecord 1",
            "delete ThreadRecord 2",
        ]

        transaction.exec()
        assert len(transaction.completed) == 3
        assert [work.result for work in transaction.completed] == [True, True, True]
        assert transaction.failed is None
        assert transaction.exception is None
        assert author.get_row().get_status() is RowStatus.INSERTED
        assert gone.get_row().get_status() is RowStatus.DELETED
        assert [type(s).__name__ for s in executor.statements] == ["Insert", "Update", "Delete"]

    def test_failure_rolls_back_and_reraises(self, executor, locator: MapperLocator) -> None:
        authors = locator.get("AuthorMapper")
        author = authors.new_record({"name": "dora"})
        error = RuntimeError("disk full")

        def explode(record: object) -> None:
            raise error

        transaction = Transaction(locator)
        transaction.insert(author)
        failing = transaction.plan("explode", explode, author)

        with pytest.raises(RuntimeError) as excinfo:
            transaction.exec()
        assert excinfo.value is error
        assert transaction.failed is failing
        assert transaction.exception is error
        assert len(transaction.completed) == 1
        assert executor.rollbacks == 1
        assert [row["name"] for row in executor.tables["authors"]] == ["ada", "brian", "carla"]

        row = author.get_row()
        assert row.get_status() is RowStatus.FOR_INSERT
        assert row.author_id is None
        assert authors.fetch_record(4) is None

        assert authors.insert(author) is True
        assert author.author_id == 4
        assert [row["name"] for row in executor.tables["authors"]] == [
            "ada",
            "brian",
            "carla",
            "dora",
        ]

    def test_failed_update_keeps_the_pending_change(
        self, executor, locator: MapperLocator
    ) -> None:
        threads = locator.get("ThreadMapper")
        thread = threads.fetch_record(1)
        thread.subject = "edited"

        transaction = locator.new_transaction()
        transaction.update(thread)
        transaction.plan("explode", _explode, thread)
        with pytest.raises(RuntimeError):
            transaction.exec()

        assert executor.tables["threads"][0]["subject"] == "first post"
        assert thread.get_row().get_status() is RowStatus.MODIFIED
        assert thread.get_row().get_modified() == {"subject": "edited"}

        assert threads.update(thread) is True
        assert executor.tables["threads"][0]["subject"] == "edited"

    def test_failed_delete_revives_the_row(self, executor, locator: MapperLocator) -> None:
        threads = locator.get("ThreadMapper")
        thread = threads.fetch_record(2)

        transaction = locator.new_transaction()
        transaction.delete(thread)
        transaction.plan("explode", _explode, thread)
        with pytest.raises(RuntimeError):
            transaction.exec()

        assert [row["thread_id"] for row in executor.tables["threads"]] == [1, 2, 3]
        assert thread.get_row().get_status() is RowStatus.SELECTED
        selects = len(executor.selects_against("threads"))
        assert threads.fetch_record(2).get_row() is thread.get_row()
        assert len(executor.selects_against("threads")) == selects

    def test_failure_joins_an_outer_transaction(self, executor, locator: MapperLocator) -> None:
        authors = locator.get("AuthorMapper")
        author = authors.new_record({"name": "dora"})
        transaction = locator.new_transaction()
        transaction.insert(author)
        transaction.plan("explode", _explode, author)

        with pytest.raises(RuntimeError), executor.transaction():
            transaction.exec()

        assert executor.rollbacks == 2
        assert len(executor.tables["authors"]) == 3
        assert author.get_row().get_status() is RowStatus.FOR_INSERT

    def test_exec_twice_raises(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        thread.subject = "edited"
        transaction = locator.new_transaction()
        transaction.update(thread)
        transaction.exec()
        with pytest.raises(PriorWorkError):
            transaction.exec()

    def test_empty_plan(self, executor, locator: MapperLocator) -> None:
        transaction = locator.new_transaction()
        transaction.exec()
        assert transaction.completed == []
        assert executor.statements == []
