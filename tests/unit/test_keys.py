"""Tests for database-prefixed key formatting."""

import pytest

from redisview.exceptions import KeyFormatError
from redisview.keys import (
    DatabaseSelection,
    format_key,
    parse_key,
    trim_database_header,
)

KEYS = ["", "user:1", "a b c", "(0) nested", "weird) key", "ключ", "tab\tkey", "*?[]"]


class TestKeyFormatting:
    """Tests for format_key/parse_key."""

    @pytest.mark.parametrize("database", range(16))
    @pytest.mark.parametrize("key", KEYS)
    def test_round_trip(self, database: int, key: str) -> None:
        assert parse_key(format_key(database, key)) == (database, key)

    def test_format(self) -> None:
        assert format_key(3, "user:1") == "(3) user:1"

    def test_parse_rejects_plain_text(self) -> None:
        with pytest.raises(KeyFormatError):
            parse_key("ERR unknown command")

    def test_key_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_key("(x) key")

    @pytest.mark.parametrize("display", ["(16) k", "(99) k"])
    def test_parse_rejects_database_out_of_range(self, display: str) -> None:
        """Only databases 0-15 exist, so larger headers are not key rows."""
        with pytest.raises(KeyFormatError):
            parse_key(display)

    def test_trim_leaves_out_of_range_header(self) -> None:
        assert trim_database_header("(99) k") == "(99) k"

    def test_trim_header(self) -> None:
        assert trim_database_header("(12) session:abc") == "session:abc"

    def test_trim_leaves_plain_text(self) -> None:
        assert trim_database_header("Index: 0 | Value: x") == "Index: 0 | Value: x"


class TestDatabaseSelection:
    """Tests for DatabaseSelection."""

    def test_single(self) -> None:
        selection = DatabaseSelection.single(4)
        assert list(selection.indices()) == [4]
        assert selection.is_range is False
        assert selection.describe() == "4"

    def test_all_covers_sixteen_databases(self) -> None:
        selection = DatabaseSelection.all()
        assert list(selection.indices()) == list(range(16))
        assert selection.is_range is True
        assert selection.describe() == "0-15"

    @pytest.mark.parametrize("first,last", [(-1, 0), (0, 16), (5, 4)])
    def test_out_of_range_rejected(self, first: int, last: int) -> None:
        with pytest.raises(ValueError):
            DatabaseSelection(first, last)
