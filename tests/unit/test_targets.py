"""Unit tests for surrealmcp/tools/targets.py — target rendering."""

from __future__ import annotations

import pytest

from surrealmcp.guard.params import InvalidParameterError
from surrealmcp.tools.targets import escape_ident, parse_target, parse_targets


class TestEscapeIdent:
    @pytest.mark.parametrize("name", ["person", "_private", "Order2", "a_b_c"])
    def test_plain_identifiers_pass_through(self, name: str) -> None:
        assert escape_ident(name) == name

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("my table", "⟨my table⟩"),
            ("2fast", "⟨2fast⟩"),
            ("a-b", "⟨a-b⟩"),
            ("x; DELETE y", "⟨x; DELETE y⟩"),
            ("bad⟩name", "⟨bad\\⟩name⟩"),
            ("back\\slash", "⟨back\\\\slash⟩"),
        ],
    )
    def test_other_names_are_bracketed(self, name: str, expected: str) -> None:
        assert escape_ident(name) == expected


class TestParseTarget:
    def test_table(self) -> None:
        assert parse_target("person") == "person"

    def test_record_id(self) -> None:
        assert parse_target("person:tobie") == "person:tobie"

    def test_integer_record_id_unquoted(self) -> None:
        assert parse_target("order:1024") == "order:1024"

    def test_negative_integer_record_id(self) -> None:
        assert parse_target("temp:-5") == "temp:-5"

    def test_complex_record_id_escaped(self) -> None:
        assert parse_target("user:john.doe@x.com") == "user:⟨john.doe@x.com⟩"

    def test_only_first_colon_splits(self) -> None:
        assert parse_target("event:2024:01") == "event:⟨2024:01⟩"

    def test_empty_target_rejected(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_target("")
        assert exc_info.value.reason == "empty_target"

    @pytest.mark.parametrize("value", [":abc", "person:"])
    def test_malformed_record_id_rejected(self, value: str) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_target(value, "from")
        assert exc_info.value.parameter == "from"
        assert exc_info.value.reason == "malformed_record_id"


class TestParseTargets:
    def test_joined_with_commas(self) -> None:
        assert parse_targets(["person", "order:1", "my table"]) == "person, order:1, ⟨my table⟩"

    def test_empty_list_rejected(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_targets([])
        assert exc_info.value.parameter == "targets"
        assert exc_info.value.reason == "empty_targets"
