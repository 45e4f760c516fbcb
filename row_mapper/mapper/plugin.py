"""Write-path hooks.

A mapper calls its plugin around every write:

* ``before_*(mapper, record)`` before the statement is built
* ``modify_*(row, statement)`` with the built, not-yet-executed statement
* ``after_*(row, statement, result)`` once the statement has run

``modify_new_record(record)`` runs on every record made by ``new_record``.
Every hook on the base Plugin does nothing.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import PluginError
from row_mapper.core.statement import Delete, ExecutionResult, Insert, Update
from row_mapper.table.row import Row

if TYPE_CHECKING:
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record

HOOK_NAMES = (
    "modify_new_record",
    "before_insert",
    "modify_insert",
    "after_insert",
    "before_update",
    "modify_update",
    "after_update",
    "before_delete",
    "modify_delete",
    "after_delete",
)


class Plugin:
    """Default plugin: every hook is a no-op. Override any subset."""

    def modify_new_record(self, record: Record) -> None:
        pass

    def before_insert(self, mapper: Mapper, record: Record) -> None:
        pass

    def modify_insert(self, row: Row, insert: Insert) -> None:
        pass

    def after_insert(self, row: Row, insert: Insert, result: ExecutionResult) -> None:
        pass

    def before_update(self, mapper: Mapper, record: Record) -> None:
        pass

    def modify_update(self, row: Row, update: Update) -> None:
        pass

    def after_update(self, row: Row, update: Update, result: ExecutionResult) -> None:
        pass

    def before_delete(self, mapper: Mapper, record: Record) -> None:
        pass

    def modify_delete(self, row: Row, delete: Delete) -> None:
        pass

    def after_delete(self, row: Row, delete: Delete, result: ExecutionResult) -> None:
        pass


class HookPlugin(Plugin):
    """Plugin assembled from individually registered hook functions.

    Usage:
        plugin = HookPlugin()

        @plugin.on("before_insert")
        def stamp_created(mapper, record):
            record.created_at = now()

    Several functions may be attached to the same hook; they run in the
    order they were registered.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, hook: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator attaching a function to ``hook``."""
        if hook not in HOOK_NAMES:
            raise PluginError(f"Unknown plugin hook '{hook}'. Known hooks: {list(HOOK_NAMES)}")

        def register(func: Callable[..., Any]) -> Callable[..., Any]:
            self._handlers[hook].append(func)
            return func

        return register

    def handlers(self, hook: str) -> list[Callable[..., Any]]:
        return list(self._handlers.get(hook, ()))

    def _run(self, hook: str, *args: Any) -> None:
        for handler in self._handlers.get(hook, ()):
            handler(*args)

    def modify_new_record(self, record: Record) -> None:
        self._run("modify_new_record", record)

    def before_insert(self, mapper: Mapper, record: Record) -> None:
        self._run("before_insert", mapper, record)

    def modify_insert(self, row: Row, insert: Insert) -> None:
        self._run("modify_insert", row, insert)

    def after_insert(self, row: Row, insert: Insert, result: ExecutionResult) -> None:
        self._run("after_insert", row, insert, result)

    def before_update(self, mapper: Mapper, record: Record) -> None:
        self._run("before_update", mapper, record)

    def modify_update(self, row: Row, update: Update) -> None:
        self._run("modify_update", row, update)

    def after_update(self, row: Row, update: Update, result: ExecutionResult) -> None:
        self._run("after_update", row, update, result)

    def before_delete(self, mapper: Mapper, record: Record) -> None:
        self._run("before_delete", mapper, record)

    def modify_delete(self, row: Row, delete: Delete) -> None:
        self._run("modify_delete", row, delete)

    def after_delete(self, row: Row, delete: Delete, result: ExecutionResult) -> None:
        self._run("after_delete", row, delete, result)
