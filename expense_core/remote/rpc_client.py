"""
Expense backend client.

The backend is a Supabase (PostgREST) database exposing four RPC functions:
  - get_user_details(p_emp_code)
  - get_expense_history(p_emp_code)
  - get_expense_details(p_appl_id)
  - submit_expense_application(p_emp_code, p_details)

Each call is a single POST to ``/rest/v1/rpc/<function>``. Failures are raised
immediately as NotFoundError / RemoteError; there is no retry.
"""
import logging
from typing import Any, Optional

import httpx

from expense_core import config
from expense_core.errors import ConfigurationError, NotFoundError, RemoteError
from expense_core.models import ApplicationDetails, ExpenseLine, HistoryEntry, User
from expense_core.remote.validation import payload_errors

logger = logging.getLogger(__name__)

RPC_PATH = "/rest/v1/rpc/"

_LOOKUP_FAILED = "ユーザー情報の取得に失敗しました"
_HISTORY_FAILED = "申請履歴の取得に失敗しました"
_DETAILS_FAILED = "申請詳細の取得に失敗しました"
_SUBMIT_FAILED = "申請処理に失敗しました"


def _remote_message(response: httpx.Response) -> str:
    """Pull the PostgREST error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or body.get("hint") or f"HTTP {response.status_code}"
    return str(body)


def _single_row(data: Any) -> Optional[dict]:
    """PostgREST returns set-returning functions as lists; unwrap zero/one row."""
    if isinstance(data, list):
        return data[0] if data else None
    return data


class RemoteService:
    """Typed async wrapper around the four backend RPC calls."""

    def __init__(
        self,
        base_url: str = config.SUPABASE_URL,
        api_key: str = config.SUPABASE_ANON_KEY,
        timeout: Optional[float] = config.RPC_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url or not api_key:
            raise ConfigurationError("SUPABASE_URL と SUPABASE_ANON_KEY を設定してください。")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _rpc(self, function: str, params: dict, failure_prefix: str) -> Any:
        url = f"{self.base_url}{RPC_PATH}{function}"
        logger.debug("RPC %s params=%s", function, list(params))
        try:
            async with httpx.AsyncClient(
                headers=self._headers(),
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=params)
        except httpx.HTTPError as e:
            logger.error("RPC %s transport failure: %s", function, e)
            raise RemoteError(f"{failure_prefix}: {e}", str(e)) from e

        if response.is_error:
            message = _remote_message(response)
            logger.error("RPC %s failed with HTTP %d: %s", function, response.status_code, message)
            raise RemoteError(f"{failure_prefix}: {message}", message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"{failure_prefix}: 応答形式が不正です", str(e)) from e

    def _check(self, data: Any, schema_name: str, failure_prefix: str) -> None:
        errors = payload_errors(data, schema_name)
        if errors:
            logger.error("Malformed %s payload: %s", schema_name, errors)
            raise RemoteError(f"{failure_prefix}: 応答形式が不正です ({errors[0]})", errors[0])

    async def lookup_user(self, employee_code: str) -> User:
        data = await self._rpc("get_user_details", {"p_emp_code": employee_code}, _LOOKUP_FAILED)
        row = _single_row(data)
        if row is None:
            raise NotFoundError(f"ユーザーが見つかりません: {employee_code}")
        self._check(row, "user_details", _LOOKUP_FAILED)
        return User.from_row(row)

    async def fetch_history(self, employee_code: str) -> list[HistoryEntry]:
        data = await self._rpc("get_expense_history", {"p_emp_code": employee_code}, _HISTORY_FAILED)
        rows = data or []
        self._check(rows, "expense_history", _HISTORY_FAILED)
        return [HistoryEntry.from_row(r) for r in rows]

    async def fetch_details(self, application_id) -> ApplicationDetails:
        data = await self._rpc("get_expense_details", {"p_appl_id": application_id}, _DETAILS_FAILED)
        row = _single_row(data)
        if row is None:
            raise NotFoundError(f"申請詳細が見つかりません: {application_id}")
        self._check(row, "expense_details", _DETAILS_FAILED)
        return ApplicationDetails.from_row(row)

    async def submit_application(self, employee_code: str, lines: list[ExpenseLine]):
        """Submit validated lines; returns the new application id."""
        data = await self._rpc(
            "submit_expense_application",
            {"p_emp_code": employee_code, "p_details": [line.to_payload() for line in lines]},
            _SUBMIT_FAILED,
        )
        self._check(data, "submit_application", _SUBMIT_FAILED)
        logger.info("Submitted application %s for %s (%d lines)", data, employee_code, len(lines))
        return data
