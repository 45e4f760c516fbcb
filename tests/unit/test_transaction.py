"""Unit tests for TransactionManager."""

from __future__ import annotations

import pytest

from row_mapper.core.connection import ConnectionConfig, ConnectionManager
from row_mapper.core.engine import Engine
from row_mapper.core.exceptions import TransactionStateError
from row_mapper.core.statement import Insert, Select
from row_mapper.core.transaction import JoinedTransaction


def _count(engine: Engine) -> int:
    return engine.fetch_all("SELECT COUNT(*) AS cnt FROM users")[0]["cnt"]


@pytest.fixture
def tx_engine(sqlite_config: ConnectionConfig) -> Engine:
    """Create an engine with an empty users table."""
    eng = Engine(ConnectionManager(sqlite_config))
    eng.execute_sql(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, email TEXT)"
    )
    return eng


class TestTransactionManager:
    def test_commit_persists_changes(self, tx_engine: Engine) -> None:
        with tx_engine.transaction():
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            assert tx_engine.in_transaction

        assert not tx_engine.in_transaction
        assert _count(tx_engine) == 1

    def test_auto_rollback_on_exception(self, tx_engine: Engine) -> None:
        with pytest.raises(RuntimeError, match="boom"), tx_engine.transaction():
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            raise RuntimeError("boom")

        assert _count(tx_engine) == 0

    def test_explicit_rollback(self, tx_engine: Engine) -> None:
        with tx_engine.transaction() as tx:
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            tx.rollback()

        assert tx.state == "rolled_back"
        assert _count(tx_engine) == 0

    def test_select_within_transaction_sees_pending_writes(self, tx_engine: Engine) -> None:
        with tx_engine.transaction():
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            rows = tx_engine.select(Select("users", ("id", "name")))
            assert rows == [{"id": 1, "name": "Alice"}]

    def test_commit_after_rollback(self, tx_engine: Engine) -> None:
        with tx_engine.transaction() as tx:
            tx.rollback()
            with pytest.raises(TransactionStateError):
                tx.commit()

    def test_execute_after_rollback(self, tx_engine: Engine) -> None:
        with tx_engine.transaction() as tx:
            tx.rollback()
            with pytest.raises(TransactionStateError):
                tx_engine.execute(Insert("users", {"name": "Bob"}))

    def test_transaction_cannot_be_reentered(self, tx_engine: Engine) -> None:
        tx = tx_engine.transaction()
        with tx:
            pass
        assert tx.state == "committed"
        with pytest.raises(TransactionStateError):
            tx.__enter__()


class TestNestedTransactions:
    def test_inner_joins_the_outer_connection(self, tx_engine: Engine) -> None:
        with tx_engine.transaction() as outer:
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            with tx_engine.transaction() as inner:
                assert isinstance(inner, JoinedTransaction)
                assert inner.connection is outer.connection
                tx_engine.execute(Insert("users", {"name": "Bob", "email": "bob@ex.com"}))
            assert tx_engine.in_transaction
            tx_engine.execute(Insert("users", {"name": "Carol", "email": "carol@ex.com"}))

        assert outer.state == "committed"
        assert _count(tx_engine) == 3

    def test_inner_failure_rolls_back_everything(self, tx_engine: Engine) -> None:
        with pytest.raises(RuntimeError, match="boom"), tx_engine.transaction():
            tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
            with tx_engine.transaction():
                raise RuntimeError("boom")

        assert not tx_engine.in_transaction
        assert _count(tx_engine) == 0

    def test_swallowed_inner_failure_blocks_commit(self, tx_engine: Engine) -> None:
        with pytest.raises(TransactionStateError, match="rollback_only"):
            with tx_engine.transaction() as outer:
                tx_engine.execute(Insert("users", {"name": "Alice", "email": "alice@ex.com"}))
                try:
                    with tx_engine.transaction():
                        raise RuntimeError("boom")
                except RuntimeError:
                    pass
                assert outer.state == "rollback_only"
                with pytest.raises(TransactionStateError):
                    outer.commit()

        assert outer.state == "rolled_back"
        assert not tx_engine.in_transaction
        assert _count(tx_engine) == 0
