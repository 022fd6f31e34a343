"""
View state and rendering for the expense claims UI.

PresentationManager holds everything the screen shows: which screen and page
are visible, the entry rows, field highlights, inline messages, the history
table and the detail modal. It makes no decisions; the controller tells it
what to show and the Gradio adapter projects its state onto components.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from expense_core.form.rows import ALL_FIELDS, EntryRow
from expense_core.models import ApplicationDetails, HistoryEntry, User
from expense_app.ui import components

LOGIN_SCREEN = "login"
MAIN_SCREEN = "main"

HISTORY_PAGE = "history"
ENTRY_PAGE = "entry"
PAGES = (HISTORY_PAGE, ENTRY_PAGE)

LOGIN_AREA = "login"
SUBMIT_AREA = "submit"

# Control keys used with set_loading
LOGIN_BUTTON = "login"
SUBMIT_BUTTON = "submit"
DETAILS_BUTTON = "details"

LOADING_LABELS = {
    LOGIN_BUTTON: "ログイン中...",
    SUBMIT_BUTTON: "申請処理中...",
    DETAILS_BUTTON: "読込中",
}


@dataclass
class Message:
    text: str
    is_error: bool = True
    expires_at: Optional[float] = None

    def html(self) -> str:
        return components.message_html(self.text, self.is_error)


class PresentationManager:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.screen = LOGIN_SCREEN
        self.page = HISTORY_PAGE
        self.employee_code_input = ""
        self.user_name = ""
        self.user_dept = ""
        self.login_enabled = True
        self.messages: dict[str, Message] = {}
        self.rows: list[EntryRow] = []
        self.invalid_fields: set[tuple[str, str]] = set()
        self.focused_field: Optional[tuple[str, str]] = None
        self.history_html = components.history_table_html([])
        self.history_ids: list = []
        self.selected_history_id = None
        self.modal_visible = False
        self.modal_header_html = ""
        self.modal_lines_html = ""
        self.modal_total_html = ""
        self.loading: dict[str, str] = {}
        self._alert: Optional[str] = None

    # ── Messages ──────────────────────────────────────────────────────────

    def show_message(self, area: str, text: str, is_error: bool = True,
                     dismiss_after: Optional[float] = None) -> None:
        expires_at = self._clock() + dismiss_after if dismiss_after is not None else None
        self.messages[area] = Message(text, is_error, expires_at)

    def hide_message(self, area: str) -> None:
        self.messages.pop(area, None)

    def message(self, area: str) -> Optional[Message]:
        return self.messages.get(area)

    def expire_messages(self) -> bool:
        """Drop transient messages whose delay has passed. Returns True if any were dropped."""
        now = self._clock()
        expired = [a for a, m in self.messages.items() if m.expires_at is not None and m.expires_at <= now]
        for area in expired:
            del self.messages[area]
        return bool(expired)

    def show_alert(self, text: str) -> None:
        self._alert = text

    def pop_alert(self) -> Optional[str]:
        alert, self._alert = self._alert, None
        return alert

    def set_loading(self, control: str, is_loading: bool, loading_text: Optional[str] = None) -> None:
        if is_loading:
            self.loading[control] = loading_text or LOADING_LABELS.get(control, "処理中...")
        else:
            self.loading.pop(control, None)

    def is_loading(self, control: str) -> bool:
        return control in self.loading

    # ── Screens ───────────────────────────────────────────────────────────

    def toggle_main_screen(self, is_logged_in: bool) -> None:
        self.screen = MAIN_SCREEN if is_logged_in else LOGIN_SCREEN
        if not is_logged_in:
            self.employee_code_input = ""

    def switch_page(self, page: str) -> None:
        if page not in PAGES:
            raise ValueError(f"Unknown page: {page}")
        self.page = page

    def update_user_info(self, user: Optional[User]) -> None:
        self.user_name = user.employee_name if user else ""
        self.user_dept = user.department_name if user else ""

    def disable_login(self, reason: str) -> None:
        self.show_message(LOGIN_AREA, reason)
        self.login_enabled = False

    def read_employee_code(self) -> str:
        return self.employee_code_input

    # ── Entry form ────────────────────────────────────────────────────────

    def create_row(self) -> EntryRow:
        row = EntryRow()
        self.rows.append(row)
        return row

    def delete_row(self, row_id: str) -> None:
        self.rows = [r for r in self.rows if r.row_id != row_id]
        self.invalid_fields = {f for f in self.invalid_fields if f[0] != row_id}
        if self.focused_field and self.focused_field[0] == row_id:
            self.focused_field = None

    def row(self, row_id: str) -> Optional[EntryRow]:
        return next((r for r in self.rows if r.row_id == row_id), None)

    def update_row(self, row_id: str, **values) -> None:
        """Store typed values for one row. Unknown field names are rejected."""
        row = self.row(row_id)
        if row is None:
            return
        for name, value in values.items():
            if name not in ALL_FIELDS:
                raise ValueError(f"Unknown field: {name}")
            setattr(row, name, value)

    def line_total_text(self, row_id: str) -> str:
        row = self.row(row_id)
        return components.yen(row.line_total if row else 0)

    def update_line_total(self, row_id: str) -> str:
        # Totals are derived from the row's own values on every read, so only
        # the requested row's text is returned.
        return self.line_total_text(row_id)

    def read_rows(self) -> list[EntryRow]:
        return list(self.rows)

    def reset_application_form(self) -> None:
        self.rows = []
        self.invalid_fields = set()
        self.focused_field = None
        self.create_row()
        self.hide_message(SUBMIT_AREA)

    def highlight_error_field(self, row_id: str, field: str) -> None:
        self.invalid_fields.add((row_id, field))
        if self.focused_field is None:
            self.focused_field = (row_id, field)

    def clear_error_field(self, row_id: str, field: str) -> None:
        self.invalid_fields.discard((row_id, field))

    def reset_error_highlights(self) -> None:
        self.invalid_fields = set()
        self.focused_field = None
        self.hide_message(SUBMIT_AREA)

    def is_invalid(self, row_id: str, field: str) -> bool:
        return (row_id, field) in self.invalid_fields

    # ── History & details ─────────────────────────────────────────────────

    def render_history_loading(self) -> None:
        self.history_html = components.history_placeholder_html("読み込み中...")

    def render_history(self, entries: list[HistoryEntry]) -> None:
        self.history_html = components.history_table_html(entries)
        self.history_ids = [e.id for e in entries]
        if self.selected_history_id not in self.history_ids:
            self.selected_history_id = None

    def render_history_error(self, text: str) -> None:
        self.history_html = components.history_placeholder_html(text, is_error=True)
        self.history_ids = []
        self.selected_history_id = None

    def select_history(self, value) -> None:
        """Record the id picked for the detail action; values come back from the UI as strings."""
        if not value:
            self.selected_history_id = None
            return
        self.selected_history_id = next((i for i in self.history_ids if str(i) == str(value)), None)

    def show_details_modal(self, details: ApplicationDetails) -> None:
        self.modal_header_html = components.details_header_html(details)
        self.modal_lines_html = components.details_lines_html(details)
        self.modal_total_html = components.details_total_html(details)
        self.modal_visible = True

    def hide_details_modal(self) -> None:
        self.modal_visible = False
