"""
Tests for the claim-entry collect-and-validate pass.

All tests are pure — no backend, no UI.
"""
from __future__ import annotations

import pytest

from expense_core.errors import ValidationError
from expense_core.form.rows import EntryRow, parse_unit_price
from expense_core.form.validation import (
    NOTHING_TO_SUBMIT,
    collect_and_validate,
    is_empty_row,
)
from expense_core.models import ExpenseLine, line_total


def filled_row(**overrides) -> EntryRow:
    values = dict(
        use_date="2024-01-01", purpose="client visit", line_name="JR",
        departure="Tokyo", arrival="Yokohama", unit_price="500", is_round_trip=True,
    )
    values.update(overrides)
    return EntryRow(**values)


# =============================================================================
# Unit price parsing
# =============================================================================


class TestParseUnitPrice:

    @pytest.mark.parametrize("raw, expected", [
        ("500", 500),
        ("  42 ", 42),
        ("12abc", 12),
        ("1.9", 1),
        ("-5", -5),
        ("", 0),
        ("abc", 0),
        ("５００", 0),
        ("１2", 0),
        (None, 0),
        (300, 300),
        (float("nan"), 0),
    ])
    def test_leading_integer_or_zero(self, raw, expected):
        assert parse_unit_price(raw) == expected


class TestLineTotal:

    @pytest.mark.parametrize("price", [0, 1, 320, 99999])
    def test_round_trip_doubles(self, price):
        assert line_total(price, True) == price * 2
        assert line_total(price, False) == price

    def test_entry_row_total_uses_parsed_price(self):
        assert EntryRow(unit_price="250", is_round_trip=True).line_total == 500
        assert EntryRow(unit_price="oops", is_round_trip=True).line_total == 0


# =============================================================================
# Empty rows
# =============================================================================


class TestEmptyRows:

    def test_blank_row_is_empty(self):
        assert is_empty_row(EntryRow())

    def test_whitespace_only_is_empty(self):
        assert is_empty_row(EntryRow(use_date="  ", purpose="\t", unit_price=" "))

    def test_round_trip_flag_alone_is_still_empty(self):
        assert is_empty_row(EntryRow(is_round_trip=True))

    def test_unparseable_price_alone_is_empty(self):
        assert is_empty_row(EntryRow(unit_price="abc"))

    def test_price_alone_is_not_empty(self):
        assert not is_empty_row(EntryRow(unit_price="100"))

    def test_empty_rows_produce_neither_output_nor_errors(self):
        outcome = collect_and_validate([filled_row(), EntryRow(), EntryRow()])
        assert outcome.errors == []
        assert len(outcome.lines) == 1


# =============================================================================
# Field checks
# =============================================================================


class TestFieldChecks:

    def test_missing_date_reports_row_number(self):
        row = filled_row(use_date="", purpose="x", departure="A", arrival="B",
                         unit_price="300", is_round_trip=False)
        outcome = collect_and_validate([row])
        assert outcome.errors == ["1行目: 日付を入力してください。"]
        assert outcome.lines == []
        assert outcome.invalid_fields == [(row.row_id, "use_date")]

    def test_all_failures_in_a_row_are_collected(self):
        row = EntryRow(purpose="打合せ", unit_price="0")
        outcome = collect_and_validate([row])
        assert outcome.errors == [
            "1行目: 日付を入力してください。",
            "1行目: 利用路線を入力してください。",
            "1行目: 区間(出発)を入力してください。",
            "1行目: 区間(到着)を入力してください。",
            "1行目: 単価は1以上の数値を入力してください。",
        ]
        assert [f for _, f in outcome.invalid_fields] == [
            "use_date", "line_name", "departure", "arrival", "unit_price",
        ]

    @pytest.mark.parametrize("field, message", [
        ("use_date", "日付を入力してください。"),
        ("purpose", "業務・訪問先を入力してください。"),
        ("line_name", "利用路線を入力してください。"),
        ("departure", "区間(出発)を入力してください。"),
        ("arrival", "区間(到着)を入力してください。"),
    ])
    def test_each_required_field_errors_once(self, field, message):
        outcome = collect_and_validate([filled_row(), filled_row(**{field: "   "})])
        assert outcome.errors == [f"2行目: {message}"]

    @pytest.mark.parametrize("price", ["0", "-1", "abc", ""])
    def test_non_positive_price_errors(self, price):
        outcome = collect_and_validate([filled_row(unit_price=price)])
        assert outcome.errors == ["1行目: 単価は1以上の数値を入力してください。"]

    def test_full_width_digits_are_not_a_price(self):
        outcome = collect_and_validate([filled_row(unit_price="５００")])
        assert outcome.errors == ["1行目: 単価は1以上の数値を入力してください。"]
        assert [name for _, name in outcome.invalid_fields] == ["unit_price"]
        assert outcome.lines == []

    @pytest.mark.parametrize("price", ["1", "500", "12円"])
    def test_positive_price_passes(self, price):
        outcome = collect_and_validate([filled_row(unit_price=price)])
        assert outcome.errors == []

    def test_row_numbers_count_skipped_rows(self):
        outcome = collect_and_validate([EntryRow(), filled_row(arrival="")])
        assert outcome.errors == ["2行目: 区間(到着)を入力してください。"]


# =============================================================================
# Whole-form outcome
# =============================================================================


class TestOutcome:

    def test_valid_row_plus_blank_row(self):
        outcome = collect_and_validate([filled_row(), EntryRow()])
        assert outcome.ok
        assert outcome.lines == [
            ExpenseLine(
                use_date="2024-01-01", purpose="client visit", line_name="JR",
                departure_station="Tokyo", arrival_station="Yokohama",
                unit_price=500, is_round_trip=True,
            )
        ]
        assert outcome.lines[0].line_total == 1000

    def test_values_are_trimmed(self):
        outcome = collect_and_validate([filled_row(purpose="  visit  ", unit_price=" 80 ")])
        line = outcome.lines[0]
        assert line.purpose == "visit"
        assert line.unit_price == 80

    def test_order_is_preserved(self):
        rows = [filled_row(purpose=f"p{i}") for i in range(4)]
        assert [l.purpose for l in collect_and_validate(rows).lines] == ["p0", "p1", "p2", "p3"]

    def test_any_error_blocks_submission(self):
        outcome = collect_and_validate([filled_row(), filled_row(line_name="")])
        assert not outcome.ok
        with pytest.raises(ValidationError) as exc:
            outcome.raise_for_errors()
        assert str(exc.value) == "2行目: 利用路線を入力してください。"

    def test_messages_are_newline_joined(self):
        outcome = collect_and_validate([filled_row(use_date="", purpose="")])
        with pytest.raises(ValidationError) as exc:
            outcome.raise_for_errors()
        assert str(exc.value) == "1行目: 日付を入力してください。\n1行目: 業務・訪問先を入力してください。"
        assert len(exc.value.messages) == 2

    @pytest.mark.parametrize("rows", [[], [EntryRow()], [EntryRow(), EntryRow(is_round_trip=True)]])
    def test_nothing_to_submit(self, rows):
        outcome = collect_and_validate(rows)
        assert outcome.errors == []
        with pytest.raises(ValidationError) as exc:
            outcome.raise_for_errors()
        assert str(exc.value) == NOTHING_TO_SUBMIT

    def test_payload_uses_backend_keys(self):
        line = collect_and_validate([filled_row()]).lines[0]
        assert line.to_payload() == {
            "use_date": "2024-01-01",
            "purpose": "client visit",
            "line_name": "JR",
            "dep_station": "Tokyo",
            "arr_station": "Yokohama",
            "unit_price": 500,
            "is_round_trip": True,
        }
