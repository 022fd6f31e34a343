"""
Records exchanged with the expense backend.

Field names are Pythonic; ``from_row`` / ``to_payload`` translate to and from
the snake_case column names the RPC functions use (emp_code, dep_station, ...).
"""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class User:
    employee_code: str
    employee_name: str
    department_name: str

    @classmethod
    def from_row(cls, row: dict) -> "User":
        return cls(
            employee_code=row.get("emp_code") or "",
            employee_name=row.get("emp_name") or "",
            department_name=row.get("dept_name") or "",
        )


def line_total(unit_price: int, is_round_trip: bool) -> int:
    """Unit price doubled for a round trip."""
    return unit_price * (2 if is_round_trip else 1)


@dataclass(frozen=True)
class ExpenseLine:
    use_date: str
    purpose: str
    line_name: str
    departure_station: str
    arrival_station: str
    unit_price: int
    is_round_trip: bool = False

    @property
    def line_total(self) -> int:
        return line_total(self.unit_price, self.is_round_trip)

    def to_payload(self) -> dict:
        return {
            "use_date": self.use_date,
            "purpose": self.purpose,
            "line_name": self.line_name,
            "dep_station": self.departure_station,
            "arr_station": self.arrival_station,
            "unit_price": self.unit_price,
            "is_round_trip": self.is_round_trip,
        }


@dataclass(frozen=True)
class DetailLine(ExpenseLine):
    # Computed by the backend; not re-derived client side.
    total: int = 0

    @classmethod
    def from_row(cls, row: dict) -> "DetailLine":
        return cls(
            use_date=row.get("use_date") or "",
            purpose=row.get("purpose") or "",
            line_name=row.get("line_name") or "",
            departure_station=row.get("dep_station") or "",
            arrival_station=row.get("arr_station") or "",
            unit_price=int(row.get("unit_price") or 0),
            is_round_trip=bool(row.get("is_round_trip")),
            total=int(row.get("line_total") or 0),
        )

    @property
    def line_total(self) -> int:
        return self.total


@dataclass(frozen=True)
class HistoryEntry:
    id: Any
    date: str
    total: int
    status_id: Optional[int]
    status_label: str

    @classmethod
    def from_row(cls, row: dict) -> "HistoryEntry":
        return cls(
            id=row.get("id"),
            date=row.get("date") or "",
            total=int(row.get("total") or 0),
            status_id=row.get("status_id"),
            status_label=row.get("status") or "",
        )


@dataclass(frozen=True)
class ApplicationDetails:
    application_id: Any
    employee_name: str
    department_name: str
    application_date: str
    status_id: Optional[int]
    status_label: str
    total_amount: int
    lines: list[DetailLine] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: dict) -> "ApplicationDetails":
        return cls(
            application_id=row.get("appl_id"),
            employee_name=row.get("emp_name") or "",
            department_name=row.get("dept_name") or "",
            application_date=row.get("appl_date") or "",
            status_id=row.get("status_id"),
            status_label=row.get("status_name") or "",
            total_amount=int(row.get("total_amount") or 0),
            lines=[DetailLine.from_row(d) for d in (row.get("details") or [])],
        )
