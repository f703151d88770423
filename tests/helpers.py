# tests/helpers.py
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from credit_console.errors import HTTPError, TransportError
from credit_console.gateway import ApiResult


# ---------- requests fakes ----------
class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None, reason: str = "OK"):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else repr(body))
        self.reason = reason

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Stands in for requests.Session: replays queued responses, records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


# ---------- gateway fake ----------
APP_UNDER_PROCESS = {
    "application_id": 7,
    "applicant_id": 3,
    "requested_amount": 1500,
    "requested_tenure_months": 12,
    "status": "under_process",
    "decision": "offer",
    "score": 0.55,
    "suggested_offer": {"amount": 1000, "tenure_months": 18},
    "reasoning": "borderline",
    "features": {"monthly_salary": 3000, "past_defaults": 2},
    "created_at": "2024-03-01T10:00:00+00:00",
}


class FakeGateway:
    """Records every call.

    Each operation answers from ``results``: an ApiResult, a list of them
    consumed in order, or a callable taking the call arguments.
    """

    def __init__(self, **results):
        self.results = results
        self.calls: List[tuple] = []
        self.gate: Optional[threading.Event] = None

    def _answer(self, op, *args):
        self.calls.append((op,) + args)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        r = self.results.get(op)
        if isinstance(r, list):
            r = r.pop(0)
        elif callable(r):
            r = r(*args)
        if isinstance(r, BaseException):
            raise r
        return r

    def network_calls(self, op=None):
        return [c for c in self.calls if op is None or c[0] == op]

    def get_summary(self):
        return self._answer("get_summary")

    def get_transactions(self):
        return self._answer("get_transactions")

    def get_analytics(self):
        return self._answer("get_analytics")

    def submit_application(self, applicant_id, amount, tenure_months):
        return self._answer("submit_application", applicant_id, amount, tenure_months)

    def get_application(self, application_id):
        return self._answer("get_application", application_id)

    def submit_human_decision(self, application_id, decision, comment=None, new_offer=None):
        return self._answer("submit_human_decision", application_id, decision, comment, new_offer)

    def list_recent_applications(self):
        return self._answer("list_recent_applications")


def ok(data):
    return ApiResult(data)


def failed(sentinel, status_code=None):
    if status_code is None:
        return ApiResult(sentinel, TransportError("timed out", "read timeout"))
    return ApiResult(sentinel, HTTPError(f"HTTP {status_code}", status_code, {"detail": "boom"}))
