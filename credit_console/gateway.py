# credit_console/gateway.py
# Typed wrapper over the scoring backend's HTTP/JSON endpoints.
# Nothing here raises to the caller: every call resolves to an ApiResult.
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

import requests

from credit_console.config import ConsoleConfig
from credit_console.errors import ConsoleError, HTTPError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Outcome of one gateway call.

    ``data`` is the payload on success, or the operation's empty sentinel
    (``{}``, ``[]`` or ``None``) on failure. ``error`` tells the two apart.
    """

    data: T
    error: Optional[ConsoleError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def empty(self) -> bool:
        return not self.data


def _error_detail(r: requests.Response) -> Any:
    try:
        body = r.json()
    except ValueError:
        body = None
    if body not in (None, "", {}, []):
        return body
    return (r.text or "").strip() or r.reason or None


class APIGateway:
    def __init__(self, config: Optional[ConsoleConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or ConsoleConfig()
        self.session = session or requests.Session()

    # ---- transport ----
    def _request(self, op: str, method: str, path: str, sentinel: Any, payload: Optional[dict] = None) -> ApiResult:
        url = self.config.url(path)
        logger.debug("%s %s %s", op, method, url)
        try:
            r = self.session.request(method, url, json=payload, timeout=self.config.timeout_secs)
        except requests.exceptions.Timeout as e:
            logger.warning("%s timed out after %sms: %s", op, self.config.timeout_ms, e)
            return ApiResult(sentinel, TransportError(f"{op} timed out", str(e)))
        except requests.exceptions.RequestException as e:
            logger.warning("%s transport error: %s", op, e)
            return ApiResult(sentinel, TransportError(f"{op} failed", str(e)))

        if not 200 <= r.status_code < 300:
            detail = _error_detail(r)
            logger.warning("%s returned HTTP %s: %s", op, r.status_code, detail)
            return ApiResult(sentinel, HTTPError(f"{op} returned HTTP {r.status_code}", r.status_code, detail))

        try:
            return ApiResult(r.json())
        except ValueError:
            logger.warning("%s returned a non-JSON body (HTTP %s)", op, r.status_code)
            return ApiResult(
                sentinel, HTTPError(f"{op} returned a non-JSON body", r.status_code, (r.text or "").strip() or None)
            )

    # ---- dashboard ----
    def get_summary(self) -> ApiResult[Dict[str, Any]]:
        return self._request("get_summary", "GET", "/dashboard/summary", {})

    def get_transactions(self) -> ApiResult[List[Dict[str, Any]]]:
        return self._request("get_transactions", "GET", "/transactions", [])

    def get_analytics(self) -> ApiResult[Dict[str, Any]]:
        return self._request("get_analytics", "GET", "/analytics", {})

    # ---- applications ----
    def submit_application(self, applicant_id: int, amount: float, tenure_months: int) -> ApiResult[Optional[Dict[str, Any]]]:
        payload = {
            "applicant_id": applicant_id,
            "requested_amount": amount,
            "requested_tenure_months": tenure_months,
        }
        return self._request("submit_application", "POST", "/applications/submit", None, payload)

    def get_application(self, application_id: Any) -> ApiResult[Optional[Dict[str, Any]]]:
        return self._request("get_application", "GET", f"/applications/{application_id}", None)

    def submit_human_decision(
        self,
        application_id: Any,
        decision: str,
        comment: Optional[str] = None,
        new_offer: Optional[Dict[str, Any]] = None,
    ) -> ApiResult[Optional[Dict[str, Any]]]:
        payload = {"human_decision": decision, "comment": comment, "new_offer": new_offer}
        return self._request(
            "submit_human_decision", "POST", f"/applications/{application_id}/human_decision", None, payload
        )

    def list_recent_applications(self) -> ApiResult[List[Dict[str, Any]]]:
        return self._request("list_recent_applications", "GET", "/applications/recent", [])
