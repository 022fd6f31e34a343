"""
Form controller: session state, command dispatch and the submit flow.

UI gestures arrive as Command values through ``dispatch``. Actions that call
the backend (login, submit, opening a detail) carry a busy flag; dispatching
the same action again while it is in flight returns DispatchResult.BUSY and
does nothing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from expense_core import config
from expense_core.errors import ExpenseError, ValidationError
from expense_core.form.validation import collect_and_validate
from expense_core.models import User
from expense_core.remote.rpc_client import RemoteService
from expense_app.ui.presentation import (
    DETAILS_BUTTON, ENTRY_PAGE, HISTORY_PAGE, LOADING_LABELS, LOGIN_AREA, LOGIN_BUTTON,
    SUBMIT_AREA, SUBMIT_BUTTON, PresentationManager,
)

logger = logging.getLogger(__name__)


class Command(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    SWITCH_PAGE = "switch_page"
    ADD_ROW = "add_row"
    DELETE_ROW = "delete_row"
    UPDATE_LINE_TOTAL = "update_line_total"
    SUBMIT = "submit"
    SHOW_DETAILS = "show_details"
    CLOSE_MODAL = "close_modal"


class DispatchResult(str, Enum):
    DONE = "done"
    BUSY = "busy"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass
class SessionState:
    current_user: Optional[User] = None

    @property
    def logged_in(self) -> bool:
        return self.current_user is not None


class FormController:
    def __init__(
        self,
        ui: PresentationManager,
        api: Optional[RemoteService] = None,
        init_error: Optional[str] = None,
        submit_message_seconds: float = config.SUBMIT_MESSAGE_SECONDS,
    ):
        self.ui = ui
        self.api = api
        self.state = SessionState()
        self.submit_message_seconds = submit_message_seconds
        self._busy: set = set()

        self._handlers = {
            Command.LOGIN: self.handle_login,
            Command.LOGOUT: self.handle_logout,
            Command.SWITCH_PAGE: self.handle_switch_page,
            Command.ADD_ROW: self.handle_add_row,
            Command.DELETE_ROW: self.handle_delete_row,
            Command.UPDATE_LINE_TOTAL: self.handle_update_line_total,
            Command.SUBMIT: self.handle_submit,
            Command.SHOW_DETAILS: self.handle_show_details,
            Command.CLOSE_MODAL: self.handle_close_modal,
        }

        if init_error or api is None:
            self.ui.disable_login(init_error or "バックエンドが設定されていません。")
            return
        self.ui.toggle_main_screen(False)

    @classmethod
    def for_session(cls, ui: Optional[PresentationManager] = None) -> "FormController":
        """Build a controller wired to the configured backend."""
        ui = ui or PresentationManager()
        try:
            api = RemoteService()
        except ExpenseError as e:
            logger.error("Backend client initialization failed: %s", e)
            return cls(ui, None, init_error=f"バックエンドの初期化に失敗しました: {e}")
        return cls(ui, api)

    # ── Dispatch ──────────────────────────────────────────────────────────

    def is_busy(self, key) -> bool:
        return key in self._busy

    async def dispatch(self, command: Command, **kwargs) -> DispatchResult:
        command = Command(command)
        key = self._busy_key(command, kwargs)
        if key is not None:
            if self.is_busy(key):
                logger.info("Ignoring %s: already in progress", command.value)
                return DispatchResult.BUSY
            self._busy.add(key)
        try:
            return await self._handlers[command](**kwargs)
        finally:
            if key is not None:
                self._busy.discard(key)

    @staticmethod
    def _busy_key(command: Command, kwargs: dict):
        if command in (Command.LOGIN, Command.SUBMIT):
            return command
        if command is Command.SHOW_DETAILS:
            return (command, kwargs.get("application_id"))
        return None

    # ── Handlers ──────────────────────────────────────────────────────────

    async def handle_login(self) -> DispatchResult:
        if not self.ui.login_enabled:
            return DispatchResult.INVALID

        employee_code = self.ui.read_employee_code().strip()
        if not employee_code:
            self.ui.show_message(LOGIN_AREA, "従業員コードを入力してください。")
            return DispatchResult.INVALID

        self.ui.set_loading(LOGIN_BUTTON, True, LOADING_LABELS[LOGIN_BUTTON])
        self.ui.hide_message(LOGIN_AREA)
        try:
            user = await self.api.lookup_user(employee_code)
        except ExpenseError as e:
            logger.error("Login failed for %s: %s", employee_code, e)
            self.ui.show_message(LOGIN_AREA, str(e))
            return DispatchResult.FAILED
        finally:
            self.ui.set_loading(LOGIN_BUTTON, False)

        logger.info("Logged in as %s", user.employee_code)
        self.state.current_user = user
        self.ui.update_user_info(user)
        self.ui.toggle_main_screen(True)
        self.ui.switch_page(HISTORY_PAGE)
        await self.load_history()
        return DispatchResult.DONE

    async def handle_logout(self) -> DispatchResult:
        self.state.current_user = None
        self.ui.update_user_info(None)
        self.ui.hide_details_modal()
        self.ui.toggle_main_screen(False)
        return DispatchResult.DONE

    async def handle_switch_page(self, page: str) -> DispatchResult:
        self.ui.switch_page(page)
        if page == HISTORY_PAGE:
            await self.load_history()
        elif page == ENTRY_PAGE and not self.ui.rows:
            self.ui.create_row()
        return DispatchResult.DONE

    async def handle_add_row(self) -> DispatchResult:
        self.ui.create_row()
        return DispatchResult.DONE

    async def handle_delete_row(self, row_id: str) -> DispatchResult:
        self.ui.delete_row(row_id)
        return DispatchResult.DONE

    async def handle_update_line_total(self, row_id: str) -> DispatchResult:
        self.ui.update_line_total(row_id)
        return DispatchResult.DONE

    async def handle_submit(self) -> DispatchResult:
        self.ui.set_loading(SUBMIT_BUTTON, True, LOADING_LABELS[SUBMIT_BUTTON])
        try:
            return await self._submit()
        finally:
            self.ui.set_loading(SUBMIT_BUTTON, False)

    async def _submit(self) -> DispatchResult:
        self.ui.reset_error_highlights()

        if not self.state.logged_in:
            self.ui.show_message(SUBMIT_AREA, "ログインしてください。")
            return DispatchResult.INVALID
        user = self.state.current_user

        try:
            lines = self.collect_and_validate_details()
        except ValidationError:
            return DispatchResult.INVALID

        try:
            await self.api.submit_application(user.employee_code, lines)
        except ExpenseError as e:
            logger.error("Submission failed for %s: %s", user.employee_code, e)
            self.ui.show_message(SUBMIT_AREA, f"申請に失敗しました: {e}")
            return DispatchResult.FAILED

        self.ui.reset_application_form()
        self.ui.show_message(SUBMIT_AREA, "申請が完了しました。", is_error=False,
                             dismiss_after=self.submit_message_seconds)
        self.ui.switch_page(HISTORY_PAGE)
        await self.load_history()
        return DispatchResult.DONE

    def collect_and_validate_details(self):
        """Validate the entry rows; highlight and report failures, raising ValidationError."""
        outcome = collect_and_validate(self.ui.read_rows())
        for row_id, field in outcome.invalid_fields:
            self.ui.highlight_error_field(row_id, field)
        try:
            return outcome.raise_for_errors()
        except ValidationError as e:
            self.ui.show_message(SUBMIT_AREA, str(e))
            raise

    async def handle_show_details(self, application_id) -> DispatchResult:
        control = f"{DETAILS_BUTTON}:{application_id}"
        self.ui.set_loading(control, True, LOADING_LABELS[DETAILS_BUTTON])
        try:
            details = await self.api.fetch_details(application_id)
        except ExpenseError as e:
            logger.error("Loading details of %s failed: %s", application_id, e)
            self.ui.show_alert(f"詳細の取得に失敗しました: {e}")
            return DispatchResult.FAILED
        finally:
            self.ui.set_loading(control, False)
        self.ui.show_details_modal(details)
        return DispatchResult.DONE

    async def handle_close_modal(self) -> DispatchResult:
        self.ui.hide_details_modal()
        return DispatchResult.DONE

    async def load_history(self) -> DispatchResult:
        if not self.state.logged_in:
            return DispatchResult.INVALID
        user = self.state.current_user
        self.ui.render_history_loading()
        try:
            entries = await self.api.fetch_history(user.employee_code)
        except ExpenseError as e:
            logger.error("Loading history for %s failed: %s", user.employee_code, e)
            self.ui.render_history_error(f"履歴の読み込みに失敗しました: {e}")
            return DispatchResult.FAILED
        self.ui.render_history(entries)
        return DispatchResult.DONE
