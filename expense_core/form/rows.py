"""Claim-entry rows as read from the form, before validation."""
import math
import re
import uuid
from dataclasses import dataclass, field

from expense_core.models import line_total

TEXT_FIELDS = ("use_date", "purpose", "line_name", "departure", "arrival")
ALL_FIELDS = TEXT_FIELDS + ("unit_price", "is_round_trip")

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_unit_price(raw) -> int:
    """Leading integer of the input; anything unparseable counts as 0."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else 0
    if raw is None:
        return 0
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else 0


def new_row_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class EntryRow:
    """One editable line of the entry form. Values are kept exactly as typed."""
    row_id: str = field(default_factory=new_row_id)
    use_date: str = ""
    purpose: str = ""
    line_name: str = ""
    departure: str = ""
    arrival: str = ""
    unit_price: str = ""
    is_round_trip: bool = False

    def text(self, name: str) -> str:
        return (getattr(self, name) or "").strip()

    @property
    def line_total(self) -> int:
        return line_total(parse_unit_price(self.unit_price), bool(self.is_round_trip))
