"""Unit tests for Record and Related."""

from __future__ import annotations

import copy

import pytest

from row_mapper.core.exceptions import (
    MapperNotFoundError,
    RecordTypeError,
    UnknownRelatedFieldError,
)
from row_mapper.mapper.locator import MapperLocator
from row_mapper.mapper.record import Record
from row_mapper.mapper.related import NOT_LOADED, Related
from row_mapper.table.row import Row


class TestRelated:
    def test_fields_start_not_loaded(self) -> None:
        related = Related(["author", "replies"])
        assert related["author"] is NOT_LOADED
        assert not related.is_loaded("author")
        assert list(related) == ["author", "replies"]

    def test_not_loaded_is_falsy_and_distinct_from_none(self) -> None:
        assert not NOT_LOADED
        assert NOT_LOADED is not None

    def test_unknown_field_raises(self) -> None:
        related = Related(["author"])
        with pytest.raises(UnknownRelatedFieldError):
            related["nope"] = None
        with pytest.raises(UnknownRelatedFieldError):
            related["nope"]  # noqa: B018

    def test_copy_is_independent(self) -> None:
        related = Related(["author"])
        clone = related.copy()
        clone["author"] = None
        assert related["author"] is NOT_LOADED

    def test_to_dict_skips_unloaded(self) -> None:
        related = Related(["author", "summary"])
        related["summary"] = None
        assert related.to_dict() == {"summary": None}


class TestRecord:
    def test_columns_and_related_fields(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        assert thread.subject == "first post"
        assert thread["author_id"] == 1
        assert thread.author is NOT_LOADED
        assert "author" in thread
        assert "subject" in thread

    def test_custom_record_class_methods(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        assert type(thread).__name__ == "ThreadRecord"
        assert thread.title() == "First Post"

    def test_unknown_name_raises(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        with pytest.raises(UnknownRelatedFieldError, match="nope"):
            thread.nope  # noqa: B018
        with pytest.raises(AttributeError):
            thread.nope = 1

    def test_setting_column_writes_through_to_row(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        thread.subject = "edited"
        assert thread.get_row().subject == "edited"

    def test_related_value_must_be_record_like(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        with pytest.raises(RecordTypeError):
            thread.author = {"name": "ada"}
        thread.author = None
        assert thread.author is None

    def test_has(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(2, with_=["summary"])
        assert thread.has("subject")
        assert not thread.has("summary")
        assert not thread.has("author")

    def test_copy_shares_row_but_not_related(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        clone = copy.copy(thread)
        clone.author = None
        assert thread.author is NOT_LOADED
        assert clone.get_row() is thread.get_row()

    def test_load_after_fetch(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(1)
        thread.load(["author"])
        assert thread.author.name == "ada"

    def test_load_without_mapper_raises(self) -> None:
        record = Record(None, Row({"id": 1}, "id"), Related())
        with pytest.raises(MapperNotFoundError):
            record.load(["author"])

    def test_to_dict_includes_loaded_related(self, locator: MapperLocator) -> None:
        thread = locator.get("ThreadMapper").fetch_record(3, with_=["author", "replies"])
        data = thread.to_dict()
        assert data["subject"] == "third post"
        assert data["author"] == {"author_id": 2, "name": "brian"}
        assert data["replies"] == [
            {"reply_id": 3, "thread_id": 3, "author_id": 1, "body": "hi brian"}
        ]
        assert "summary" not in data
