# credit_console/submission.py
# New-application form: validate, submit, then refresh the recent list.
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from credit_console.errors import ConsoleError, from_pydantic
from credit_console.gateway import APIGateway
from credit_console.models import MIN_REQUESTED_AMOUNT, SubmitApplicationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionForm:
    applicant_id: Any = 1
    amount: Any = MIN_REQUESTED_AMOUNT
    tenure_months: Any = 1


@dataclass(frozen=True)
class Message:
    type: str  # success | error
    text: str


@dataclass(frozen=True)
class SubmissionSnapshot:
    form: SubmissionForm = field(default_factory=SubmissionForm)
    submitting: bool = False
    message: Optional[Message] = None
    error: Optional[ConsoleError] = None
    last_application_id: Any = None
    recent: Tuple[Dict[str, Any], ...] = ()
    recent_error: Optional[ConsoleError] = None


def validate_form(form: SubmissionForm) -> SubmitApplicationRequest:
    try:
        return SubmitApplicationRequest(
            applicant_id=form.applicant_id,
            requested_amount=form.amount,
            requested_tenure_months=form.tenure_months,
        )
    except PydanticValidationError as e:
        raise from_pydantic("Invalid application", e) from e


def _raw_error(error: ConsoleError) -> str:
    payload = error.detail if error.detail is not None else error.message
    return json.dumps(payload, default=str)


class SubmissionOrchestrator:
    def __init__(self, gateway: APIGateway):
        self._gateway = gateway
        self._snapshot = SubmissionSnapshot()
        self._alive = True

    @property
    def snapshot(self) -> SubmissionSnapshot:
        return self._snapshot

    def close(self) -> None:
        self._alive = False

    def _commit(self, **changes) -> bool:
        if not self._alive:
            logger.debug("submission view closed; dropping late result")
            return False
        self._snapshot = replace(self._snapshot, **changes)
        return True

    async def refresh(self) -> SubmissionSnapshot:
        result = await asyncio.to_thread(self._gateway.list_recent_applications)
        rows = result.data if isinstance(result.data, list) else []
        self._commit(recent=tuple(r for r in rows if isinstance(r, dict)), recent_error=result.error)
        return self._snapshot

    async def submit(self, form: SubmissionForm) -> SubmissionSnapshot:
        if not self._alive:
            return self._snapshot
        try:
            request = validate_form(form)
        except ConsoleError as e:
            self._snapshot = replace(self._snapshot, form=form, error=e, message=Message("error", e.display()))
            return self._snapshot

        self._snapshot = replace(self._snapshot, form=form, submitting=True, message=None, error=None)
        result = await asyncio.to_thread(
            self._gateway.submit_application,
            request.applicant_id,
            request.requested_amount,
            request.requested_tenure_months,
        )

        created = result.data if isinstance(result.data, dict) else {}
        if not result.ok:
            # keep the form as typed so the operator can retry straight away
            self._commit(submitting=False, error=result.error, message=Message("error", _raw_error(result.error)))
            return self._snapshot

        application_id = created.get("application_id")
        logger.info("application %s submitted for applicant %s", application_id, request.applicant_id)
        if not self._commit(
            submitting=False,
            last_application_id=application_id,
            message=Message("success", f"Application Submitted! ID: {application_id}"),
        ):
            return self._snapshot
        return await self.refresh()
