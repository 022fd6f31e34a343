"""
Shared fixtures: an in-memory stand-in for the Supabase RPC endpoint.

FakeBackend answers ``POST /rest/v1/rpc/<function>`` the way PostgREST does
(lists for set-returning functions, ``{"message": ...}`` bodies on errors) and
records every call so tests can assert what reached the backend.
"""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from expense_app.controller import FormController
from expense_app.ui.presentation import PresentationManager
from expense_core.remote.rpc_client import RemoteService

BASE_URL = "https://example.supabase.co"
API_KEY = "anon-key"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    def __init__(self):
        self.users = {
            "E001": {"emp_code": "E001", "emp_name": "山田 太郎", "dept_name": "営業部"},
        }
        self.history = {
            "E001": [
                {"id": "A-2", "date": "2024-02-01", "total": 1000, "status_id": 1, "status": "申請中"},
                {"id": "A-1", "date": "2024-01-10", "total": 640, "status_id": 3, "status": "承認済"},
            ],
        }
        self.details = {
            "A-1": {
                "appl_id": "A-1", "emp_name": "山田 太郎", "dept_name": "営業部",
                "appl_date": "2024-01-10", "status_id": 3, "status_name": "承認済",
                "total_amount": 640,
                "details": [
                    {"use_date": "2024-01-09", "purpose": "顧客訪問", "line_name": "JR",
                     "dep_station": "東京", "arr_station": "品川", "unit_price": 320,
                     "is_round_trip": True, "line_total": 640},
                ],
            },
        }
        self.calls: list[tuple[str, dict]] = []
        self.errors: dict[str, tuple[int, dict]] = {}
        self.next_application_id = "A-3"
        # When set, submit waits on this event before answering.
        self.gate: asyncio.Event | None = None
        self.waiting = False

    def fail(self, function: str, message: str, status: int = 400) -> None:
        self.errors[function] = (status, {"code": "P0001", "message": message})

    def calls_to(self, function: str) -> list[dict]:
        return [params for name, params in self.calls if name == function]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        function = request.url.path.rsplit("/", 1)[-1]
        params = json.loads(request.content or b"{}")
        self.calls.append((function, params))

        if function in self.errors:
            status, body = self.errors[function]
            return httpx.Response(status, json=body)

        if function == "get_user_details":
            user = self.users.get(params["p_emp_code"])
            return httpx.Response(200, json=[user] if user else [])
        if function == "get_expense_history":
            return httpx.Response(200, json=self.history.get(params["p_emp_code"], []))
        if function == "get_expense_details":
            row = self.details.get(params["p_appl_id"])
            return httpx.Response(200, json=[row] if row else [])
        if function == "submit_expense_application":
            if self.gate is not None:
                self.waiting = True
                await self.gate.wait()
            return httpx.Response(200, json=self.next_application_id)
        return httpx.Response(404, json={"message": f"Could not find the function {function}"})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api(backend) -> RemoteService:
    return RemoteService(base_url=BASE_URL, api_key=API_KEY, transport=httpx.MockTransport(backend.handle))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ui(clock) -> PresentationManager:
    return PresentationManager(clock=clock)


@pytest.fixture
def controller(ui, api) -> FormController:
    return FormController(ui, api, submit_message_seconds=3)
