"""Unit tests for Plugin and HookPlugin."""

from __future__ import annotations

import pytest

from row_mapper.core.exceptions import PluginError
from row_mapper.core.statement import ExecutionResult, Insert
from row_mapper.mapper.plugin import HOOK_NAMES, HookPlugin, Plugin
from row_mapper.table.row import Row


class TestPlugin:
    @pytest.mark.parametrize("hook", HOOK_NAMES)
    def test_every_hook_exists_on_the_base(self, hook: str) -> None:
        assert callable(getattr(Plugin(), hook))

    def test_default_hooks_do_nothing(self) -> None:
        row = Row({"id": None, "name": "ada"}, "id")
        insert = Insert("authors", {"name": "ada"})
        plugin = Plugin()
        plugin.modify_insert(row, insert)
        plugin.after_insert(row, insert, ExecutionResult(rowcount=1))
        assert insert.values == {"name": "ada"}
        assert row.to_dict() == {"id": None, "name": "ada"}


class TestHookPlugin:
    def test_handlers_run_in_registration_order(self) -> None:
        plugin = HookPlugin()
        seen: list[str] = []

        @plugin.on("modify_insert")
        def first(row: Row, insert: Insert) -> None:
            seen.append("first")

        @plugin.on("modify_insert")
        def second(row: Row, insert: Insert) -> None:
            seen.append("second")

        plugin.modify_insert(Row({"id": 1}, "id"), Insert("authors"))
        assert seen == ["first", "second"]
        assert plugin.handlers("modify_insert") == [first, second]

    def test_decorator_returns_the_function(self) -> None:
        plugin = HookPlugin()

        def handler(record: object) -> None:
            pass

        assert plugin.on("modify_new_record")(handler) is handler

    def test_unknown_hook_fails_at_registration(self) -> None:
        plugin = HookPlugin()
        with pytest.raises(PluginError, match="before_save"):
            plugin.on("before_save")

    def test_hooks_without_handlers_do_nothing(self) -> None:
        plugin = HookPlugin()
        plugin.after_delete(Row({"id": 1}, "id"), None, ExecutionResult(rowcount=1))  # type: ignore[arg-type]
        assert plugin.handlers("after_delete") == []
