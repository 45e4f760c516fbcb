"""Deferred single-use work items."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import PriorWorkError

if TYPE_CHECKING:
    from row_mapper.mapper.record import Record


class Work:
    """A labelled call of ``callable(record)`` that may run exactly once."""

    def __init__(self, label: str, callable: Callable[[Record], Any], record: Record) -> None:  # noqa: A002
        self._label = label
        self._callable = callable
        self._record = record
        self._invoked = False
        self._result: Any = None

    def __repr__(self) -> str:
        return f"Work({self._label!r}, invoked={self._invoked})"

    def __call__(self) -> Any:
        if self._invoked:
            raise PriorWorkError(self._label)
        self._invoked = True
        self._result = self._callable(self._record)
        return self._result

    @property
    def label(self) -> str:
        return self._label

    @property
    def callable(self) -> Callable[[Record], Any]:
        return self._callable

    @property
    def record(self) -> Record:
        return self._record

    @property
    def result(self) -> Any:
        return self._result

    @property
    def invoked(self) -> bool:
        return self._invoked
