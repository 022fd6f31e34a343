"""
Expense Claims — Gradio application.

Employees log in with their employee code, enter travel expense lines,
submit them as an application and follow the approval status of past
applications. Everything behind the screen (users, history, approval
workflow, storage) is the Supabase backend reached through RemoteService.

Screens:
  - Login: employee code lookup
  - Main: navigation bar with two pages
      - 申請履歴: history table and the detail overlay
      - 新規申請: entry rows, add/delete row, submit

Each browser session owns one FormController (held in gr.State). Handlers
sync the typed values into its PresentationManager, dispatch a Command, and
project the resulting view state back onto the components.
"""
import sys
import logging
from html import escape
from pathlib import Path

# Ensure project root is on sys.path when run from expense_app/ directly
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import gradio as gr

from expense_core import config
from expense_app.controller import Command, FormController
from expense_app.ui.pages import details as details_page
from expense_app.ui.pages import entry as entry_page
from expense_app.ui.pages import history as history_page
from expense_app.ui.pages import login as login_page
from expense_app.ui.presentation import (
    DETAILS_BUTTON, ENTRY_PAGE, HISTORY_PAGE, LOADING_LABELS, LOGIN_AREA, LOGIN_BUTTON,
    LOGIN_SCREEN, MAIN_SCREEN, SUBMIT_AREA, SUBMIT_BUTTON,
)

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

APP_TITLE = config.APP_TITLE
MAX_ROWS = config.MAX_ENTRY_ROWS
SLOT_FIELDS = entry_page.SLOT_FIELDS


# ─────────────────────────── CSS Design System ───────────────────────────────

EX_CSS = """
.gradio-container {
    font-family: 'Noto Sans JP', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif !important;
    max-width: 1280px !important;
}

/* Navigation */
.ex-nav-bar { gap: 4px !important; border-bottom: 1px solid #e5e7eb; padding-bottom: 8px; }
.ex-user { color: #4b5563; font-size: 0.875rem; }

/* Alerts */
.ex-alert { padding: 10px 14px; border-radius: 8px; font-size: 0.875rem; font-weight: 500; margin: 6px 0; }
.ex-alert-error { background: #fef2f2; color: #ef4444; border: 1px solid #fecaca; }
.ex-alert-success { background: #f0fdf4; color: #16a34a; border: 1px solid #bbf7d0; }

/* Status badges */
.ex-badge { padding: 4px 12px; font-size: 0.75rem; font-weight: 600; border-radius: 9999px; }
.ex-badge-pending  { background: #dbeafe; color: #1e40af; }
.ex-badge-approved { background: #dcfce7; color: #166534; }
.ex-badge-rejected { background: #fef9c3; color: #854d0e; }
.ex-badge-deleted  { background: #fee2e2; color: #991b1b; }
.ex-badge-unknown  { background: #f3f4f6; color: #1f2937; }

/* Tables */
.ex-table { width: 100%; border-collapse: collapse; font-size: 0.875rem; }
.ex-th { text-align: left; padding: 10px 16px; background: #f9fafb; color: #6b7280; font-weight: 600; }
.ex-td { padding: 12px 16px; border-top: 1px solid #f3f4f6; color: #374151; }
.ex-td-muted { text-align: center; color: #6b7280; }
.ex-td-error { text-align: center; color: #ef4444; }
.ex-right { text-align: right; }
.ex-center { text-align: center; }
.ex-strong { font-weight: 500; color: #111827; }
.ex-mono { font-family: ui-monospace, monospace; }
.ex-check { font-weight: 700; color: #4f46e5; }

/* Entry rows */
.ex-entry-row { align-items: end; }
.ex-line-total { text-align: right; font-weight: 600; }
.ex-invalid textarea, .ex-invalid input { border-color: #ef4444 !important; background: #fef2f2 !important; }
.ex-focus textarea, .ex-focus input { box-shadow: 0 0 0 2px #fca5a5 !important; }

/* Detail overlay */
.ex-modal { border: 1px solid #e5e7eb !important; border-radius: 12px !important; padding: 16px !important;
            box-shadow: 0 10px 25px rgba(0, 0, 0, 0.12) !important; }
.ex-fields { display: grid; grid-template-columns: repeat(auto-fit, minmax(160px, 1fr)); gap: 8px; }
.ex-field dt { font-size: 0.75rem; color: #6b7280; }
.ex-field dd { margin: 0; font-weight: 500; }
.ex-total { text-align: right; font-size: 1rem; margin-top: 8px; }
"""

theme = gr.themes.Base(
    primary_hue=gr.themes.colors.indigo,
    neutral_hue=gr.themes.colors.gray,
)


# ─────────────────────────── Session helpers ─────────────────────────────────

def _session(ctrl):
    """Return this browser session's controller, creating it on first use."""
    if ctrl is None:
        ctrl = FormController.for_session()
    return ctrl


def _sync_form(ctrl: FormController, emp_code: str, selected, values) -> None:
    """Copy the typed component values into the controller's view state."""
    ui = ctrl.ui
    ui.employee_code_input = emp_code or ""
    ui.select_history(selected)
    width = len(SLOT_FIELDS)
    for i, row in enumerate(ui.rows[:MAX_ROWS]):
        chunk = values[i * width:(i + 1) * width]
        ui.update_row(row.row_id, **dict(zip(SLOT_FIELDS, chunk)))


def _field_classes(ui, row_id: str, name: str) -> list[str]:
    classes = []
    if ui.is_invalid(row_id, name):
        classes.append("ex-invalid")
    if ui.focused_field == (row_id, name):
        classes.append("ex-focus")
    return classes


def _message_html(ui, area: str) -> str:
    msg = ui.message(area)
    return msg.html() if msg else ""


def _button(ui, control: str, label: str, enabled: bool = True):
    if ui.is_loading(control):
        return gr.update(value=ui.loading[control], interactive=False)
    return gr.update(value=label, interactive=enabled)


def _details_button(ui):
    if any(k.startswith(DETAILS_BUTTON) for k in ui.loading):
        return _show_loading(DETAILS_BUTTON)
    return gr.update(value="詳細", interactive=True)


def _show_loading(control: str):
    """Disabled button under its loading label; sent before the backend call starts."""
    return gr.update(value=LOADING_LABELS[control], interactive=False)


def _login_loading(emp_code):
    # A blank code is rejected locally, no loading state.
    return _show_loading(LOGIN_BUTTON) if (emp_code or "").strip() else gr.update()


def _details_loading(selected):
    return _show_loading(DETAILS_BUTTON) if selected else gr.update()


def _render(ctrl: FormController) -> tuple:
    """Project the view state onto every component, in OUTPUTS order."""
    ui = ctrl.ui
    logged_in = ui.screen == MAIN_SCREEN
    selected = ui.selected_history_id
    user_html = (
        f'<div class="ex-user">{escape(ui.user_name)} <span>({escape(ui.user_dept)})</span></div>'
        if ui.user_name else ""
    )

    updates = [
        ctrl,
        gr.update(visible=ui.screen == LOGIN_SCREEN),
        gr.update(visible=logged_in),
        _message_html(ui, LOGIN_AREA),
        _button(ui, LOGIN_BUTTON, "ログイン", ui.login_enabled),
        gr.update(value=ui.employee_code_input),
        user_html,
        gr.update(variant="primary" if ui.page == HISTORY_PAGE else "secondary"),
        gr.update(variant="primary" if ui.page == ENTRY_PAGE else "secondary"),
        gr.update(visible=ui.page == HISTORY_PAGE),
        gr.update(visible=ui.page == ENTRY_PAGE),
        ui.history_html,
        gr.update(choices=[str(i) for i in ui.history_ids], value=None if selected is None else str(selected)),
        _details_button(ui),
        _message_html(ui, SUBMIT_AREA),
        _button(ui, SUBMIT_BUTTON, "申請する"),
        gr.update(interactive=len(ui.rows) < MAX_ROWS),
        gr.update(visible=ui.modal_visible),
        ui.modal_header_html,
        ui.modal_lines_html,
        ui.modal_total_html,
    ]

    for i in range(MAX_ROWS):
        row = ui.rows[i] if i < len(ui.rows) else None
        if row is None:
            updates.append(gr.update(visible=False))
            updates.extend(gr.update(value=False if name == "is_round_trip" else "", elem_classes=[])
                           for name in SLOT_FIELDS)
            updates.append("0 円")
            updates.append(gr.update())
            continue
        updates.append(gr.update(visible=True))
        updates.extend(
            gr.update(value=getattr(row, name), elem_classes=_field_classes(ui, row.row_id, name))
            for name in SLOT_FIELDS
        )
        updates.append(ui.line_total_text(row.row_id))
        updates.append(gr.update())
    return tuple(updates)


def _row_id_at(ctrl: FormController, index: int):
    rows = ctrl.ui.rows
    return rows[index].row_id if index < len(rows) else None


# ─────────────────────────── Main Blocks app ─────────────────────────────────

def main() -> gr.Blocks:
    with gr.Blocks(title=APP_TITLE, theme=theme, css=EX_CSS) as demo:
        state = gr.State(None)
        timer = gr.Timer(1.0)

        # ═══════════════════════════════════════════════════════════════════
        # LOGIN SCREEN
        # ═══════════════════════════════════════════════════════════════════
        login_view = gr.Group(visible=True)
        with login_view:
            lp = login_page.build()

        # ═══════════════════════════════════════════════════════════════════
        # MAIN SCREEN
        # ═══════════════════════════════════════════════════════════════════
        main_view = gr.Group(visible=False)
        with main_view:
            with gr.Row(elem_classes=["ex-nav-bar"]):
                nav_history = gr.Button("申請履歴", size="sm", variant="primary")
                nav_entry = gr.Button("新規申請", size="sm")
                gr.HTML('<span style="flex:1;"></span>')
                user_html = gr.HTML()
                logout_btn = gr.Button("ログアウト", size="sm")

            submit_msg = gr.HTML()

            history_view = gr.Group(visible=True)
            with history_view:
                hp = history_page.build()

            entry_view = gr.Group(visible=False)
            with entry_view:
                ep = entry_page.build(MAX_ROWS)

            dp = details_page.build()

        slots = ep["slots"]
        slot_inputs = [s[name] for s in slots for name in SLOT_FIELDS]
        form_inputs = [state, lp["emp_code"], hp["detail_select"]] + slot_inputs

        outputs = [
            state, login_view, main_view, lp["login_msg"], lp["login_btn"], lp["emp_code"],
            user_html, nav_history, nav_entry, history_view, entry_view,
            hp["history_html"], hp["detail_select"], hp["detail_btn"],
            submit_msg, ep["submit_btn"], ep["add_row_btn"],
            dp["modal"], dp["header_html"], dp["lines_html"], dp["total_html"],
        ]
        for s in slots:
            outputs += [s["group"]] + [s[name] for name in SLOT_FIELDS] + [s["total"], s["delete_btn"]]

        # ═══════════════════════════════════════════════════════════════════
        # EVENT HANDLERS
        # ═══════════════════════════════════════════════════════════════════

        def handler(command: Command, **fixed):
            """Build an event handler that syncs the form and dispatches ``command``."""
            async def run(ctrl, emp_code, selected, *values):
                ctrl = _session(ctrl)
                _sync_form(ctrl, emp_code, selected, values)
                await ctrl.dispatch(command, **fixed)
                return _render(ctrl)
            return run

        def delete_handler(index: int):
            async def run(ctrl, emp_code, selected, *values):
                ctrl = _session(ctrl)
                _sync_form(ctrl, emp_code, selected, values)
                row_id = _row_id_at(ctrl, index)
                if row_id is not None:
                    await ctrl.dispatch(Command.DELETE_ROW, row_id=row_id)
                return _render(ctrl)
            return run

        def line_total_handler(index: int):
            async def run(ctrl, unit_price, is_round_trip):
                ctrl = _session(ctrl)
                row_id = _row_id_at(ctrl, index)
                if row_id is None:
                    return "0 円"
                ctrl.ui.update_row(row_id, unit_price=unit_price, is_round_trip=is_round_trip)
                await ctrl.dispatch(Command.UPDATE_LINE_TOTAL, row_id=row_id)
                return ctrl.ui.line_total_text(row_id)
            return run

        async def show_details(ctrl, emp_code, selected, *values):
            ctrl = _session(ctrl)
            _sync_form(ctrl, emp_code, selected, values)
            application_id = ctrl.ui.selected_history_id
            if application_id is None:
                return _render(ctrl)
            await ctrl.dispatch(Command.SHOW_DETAILS, application_id=application_id)
            alert = ctrl.ui.pop_alert()
            if alert:
                raise gr.Error(alert)
            return _render(ctrl)

        def restore_details_button(ctrl):
            # Also runs when show_details raised.
            return _details_button(ctrl.ui) if ctrl is not None else gr.update(value="詳細", interactive=True)

        def expire_messages(ctrl):
            if ctrl is None or not ctrl.ui.expire_messages():
                return gr.update(), gr.update()
            return _message_html(ctrl.ui, LOGIN_AREA), _message_html(ctrl.ui, SUBMIT_AREA)

        # ═══════════════════════════════════════════════════════════════════
        # WIRE UP BUTTONS
        # ═══════════════════════════════════════════════════════════════════

        # Busy actions show their loading label first, then run
        lp["login_btn"].click(
            _login_loading, inputs=[lp["emp_code"]], outputs=[lp["login_btn"]],
        ).then(handler(Command.LOGIN), inputs=form_inputs, outputs=outputs)
        lp["emp_code"].submit(
            _login_loading, inputs=[lp["emp_code"]], outputs=[lp["login_btn"]],
        ).then(handler(Command.LOGIN), inputs=form_inputs, outputs=outputs)
        ep["submit_btn"].click(
            lambda: _show_loading(SUBMIT_BUTTON), outputs=[ep["submit_btn"]],
        ).then(handler(Command.SUBMIT), inputs=form_inputs, outputs=outputs)
        hp["detail_btn"].click(
            _details_loading, inputs=[hp["detail_select"]], outputs=[hp["detail_btn"]],
        ).then(
            show_details, inputs=form_inputs, outputs=outputs,
        ).then(restore_details_button, inputs=[state], outputs=[hp["detail_btn"]])

        logout_btn.click(handler(Command.LOGOUT), inputs=form_inputs, outputs=outputs)
        nav_history.click(handler(Command.SWITCH_PAGE, page=HISTORY_PAGE), inputs=form_inputs, outputs=outputs)
        nav_entry.click(handler(Command.SWITCH_PAGE, page=ENTRY_PAGE), inputs=form_inputs, outputs=outputs)
        ep["add_row_btn"].click(handler(Command.ADD_ROW), inputs=form_inputs, outputs=outputs)

        for s in slots:
            s["delete_btn"].click(delete_handler(s["index"]), inputs=form_inputs, outputs=outputs)
            total_handler = line_total_handler(s["index"])
            s["unit_price"].input(total_handler, inputs=[state, s["unit_price"], s["is_round_trip"]],
                                  outputs=[s["total"]])
            s["is_round_trip"].change(total_handler, inputs=[state, s["unit_price"], s["is_round_trip"]],
                                      outputs=[s["total"]])

        dp["close_btn"].click(handler(Command.CLOSE_MODAL), inputs=form_inputs, outputs=outputs)

        timer.tick(expire_messages, inputs=[state], outputs=[lp["login_msg"], submit_msg])

        # Initial view on load
        demo.load(lambda ctrl: _render(_session(ctrl)), inputs=[state], outputs=outputs)

    return demo


if __name__ == "__main__":
    app = main()
    app.launch(server_name=config.SERVER_NAME, server_port=config.SERVER_PORT)
