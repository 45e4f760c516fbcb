"""Engine-level transactions.

A TransactionManager pins one pooled connection. While its ``with`` block
runs it is installed on the Engine, so every select and write the mappers
issue lands on that connection; leaving the block commits, or rolls back
when the block raised.

Asking the engine for a transaction while one is active yields a
JoinedTransaction instead. It shares the outer connection and never commits;
if its block raises, the outer transaction can only roll back.
"""

from __future__ import annotations

from enum import Enum
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

from row_mapper.core.exceptions import TransactionStateError

if TYPE_CHECKING:
    from row_mapper.core.engine import Engine

logger = structlog.get_logger(__name__)


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ROLLBACK_ONLY = "rollback_only"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


# action -> states it may be taken from
_ALLOWED: dict[str, frozenset[_TxState]] = {
    "begin": frozenset({_TxState.IDLE}),
    "execute": frozenset({_TxState.ACTIVE, _TxState.ROLLBACK_ONLY}),
    "commit": frozenset({_TxState.IDLE, _TxState.ACTIVE}),
    "rollback": frozenset(
        {_TxState.IDLE, _TxState.ACTIVE, _TxState.ROLLBACK_ONLY, _TxState.ROLLED_BACK}
    ),
}


class TransactionManager:
    def __init__(self, engine: Engine, connection: Any) -> None:
        self._engine = engine
        self._connection = connection
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def state(self) -> str:
        return self._state.value

    def _require(self, action: str) -> None:
        if self._state not in _ALLOWED[action]:
            raise TransactionStateError(self._state.value, action)

    def __enter__(self) -> TransactionManager:
        self._require("begin")
        try:
            self._engine._begin(self)
        except TransactionStateError:
            self._engine._end(self)
            raise
        self._state = _TxState.ACTIVE
        logger.debug("transaction_begin")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            if self._state is _TxState.ACTIVE and exc_type is None:
                self.commit()
            elif self._state is _TxState.ROLLBACK_ONLY and exc_type is None:
                self.rollback()
                # the block swallowed a joined failure; its writes are gone
                raise TransactionStateError(_TxState.ROLLBACK_ONLY.value, "commit")
            elif self._state in (_TxState.ACTIVE, _TxState.ROLLBACK_ONLY):
                self.rollback()
                logger.debug("transaction_rolled_back", error=str(exc_val))
        finally:
            self._engine._end(self)

    def commit(self) -> None:
        self._require("commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED
        logger.debug("transaction_committed")

    def rollback(self) -> None:
        """Roll back; a second rollback is a harmless no-op on the driver."""
        self._require("rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK

    def mark_rollback_only(self) -> None:
        """Forbid committing; the block may still run statements before it ends."""
        if self._state is _TxState.ACTIVE:
            self._state = _TxState.ROLLBACK_ONLY

    def check_active(self) -> None:
        self._require("execute")


class JoinedTransaction:
    """A nested ``engine.transaction()`` that defers to the outer one."""

    def __init__(self, outer: TransactionManager) -> None:
        self._outer = outer

    @property
    def connection(self) -> Any:
        return self._outer.connection

    @property
    def state(self) -> str:
        return self._outer.state

    def __enter__(self) -> JoinedTransaction:
        self._outer.check_active()
        logger.debug("transaction_joined")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self._outer.mark_rollback_only()
            logger.debug("joined_transaction_failed", error=str(exc_val))
