"""
Collect-and-validate for the claim-entry form.

Rows are checked in display order:
  - a row whose five text fields are blank and whose unit price is 0 is skipped
  - any other row must have every text field filled and a unit price above 0
  - every failing check is reported (no short-circuit), numbered by 1-based row

The result is all-or-nothing: one bad row blocks the whole submission.
"""
from dataclasses import dataclass, field
from typing import Iterable

from expense_core.errors import ValidationError
from expense_core.form.rows import TEXT_FIELDS, EntryRow, parse_unit_price
from expense_core.models import ExpenseLine

REQUIRED_MESSAGES = {
    "use_date": "日付を入力してください。",
    "purpose": "業務・訪問先を入力してください。",
    "line_name": "利用路線を入力してください。",
    "departure": "区間(出発)を入力してください。",
    "arrival": "区間(到着)を入力してください。",
}
UNIT_PRICE_MESSAGE = "単価は1以上の数値を入力してください。"
NOTHING_TO_SUBMIT = "申請するデータがありません。"


@dataclass
class ValidationOutcome:
    lines: list[ExpenseLine] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    # (row_id, field name) in the order the failures were found
    invalid_fields: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and bool(self.lines)

    def raise_for_errors(self) -> list[ExpenseLine]:
        if self.ok:
            return self.lines
        raise ValidationError(self.errors or NOTHING_TO_SUBMIT)


def is_empty_row(row: EntryRow) -> bool:
    return all(not row.text(name) for name in TEXT_FIELDS) and parse_unit_price(row.unit_price) == 0


def collect_and_validate(rows: Iterable[EntryRow]) -> ValidationOutcome:
    outcome = ValidationOutcome()

    for index, row in enumerate(rows, start=1):
        if is_empty_row(row):
            continue

        row_errors = []
        for name in TEXT_FIELDS:
            if not row.text(name):
                row_errors.append(f"{index}行目: {REQUIRED_MESSAGES[name]}")
                outcome.invalid_fields.append((row.row_id, name))

        unit_price = parse_unit_price(row.unit_price)
        if unit_price <= 0:
            row_errors.append(f"{index}行目: {UNIT_PRICE_MESSAGE}")
            outcome.invalid_fields.append((row.row_id, "unit_price"))

        if row_errors:
            outcome.errors.extend(row_errors)
            continue

        outcome.lines.append(ExpenseLine(
            use_date=row.text("use_date"),
            purpose=row.text("purpose"),
            line_name=row.text("line_name"),
            departure_station=row.text("departure"),
            arrival_station=row.text("arrival"),
            unit_price=unit_price,
            is_round_trip=bool(row.is_round_trip),
        ))

    return outcome
