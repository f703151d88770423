# tests/test_submission.py
import asyncio
import json
import threading

import pytest

from credit_console.errors import ValidationError
from credit_console.submission import SubmissionForm, SubmissionOrchestrator, validate_form
from helpers import FakeGateway, failed, ok

RECENT = [{"application_id": 12, "applicant_id": 1, "status": "approved"}]


def test_amount_below_minimum_is_rejected_client_side():
    gw = FakeGateway()
    orch = SubmissionOrchestrator(gw)
    form = SubmissionForm(applicant_id=1, amount=500, tenure_months=3)

    snap = asyncio.run(orch.submit(form))

    assert gw.calls == []
    assert snap.message.type == "error"
    assert isinstance(snap.error, ValidationError)
    assert snap.form == form


@pytest.mark.parametrize("amount", [1200, 1750])
def test_amount_off_the_500_step_is_rejected(amount):
    with pytest.raises(ValidationError):
        validate_form(SubmissionForm(1, amount, 3))


def test_tenure_must_be_at_least_one_month():
    with pytest.raises(ValidationError) as exc:
        validate_form(SubmissionForm(1, 1000, 0))
    assert any("requested_tenure_months" in p for p in exc.value.problems)


def test_success_reports_id_and_refetches_recent():
    gw = FakeGateway(
        submit_application=ok({"application_id": 12, "status": "approved"}),
        list_recent_applications=ok(RECENT),
    )
    orch = SubmissionOrchestrator(gw)

    snap = asyncio.run(orch.submit(SubmissionForm(1, 1500, 6)))

    assert gw.network_calls("submit_application") == [("submit_application", 1, 1500.0, 6)]
    assert gw.network_calls("list_recent_applications")
    assert snap.message.type == "success"
    assert snap.message.text == "Application Submitted! ID: 12"
    assert snap.last_application_id == 12
    assert snap.recent == tuple(RECENT)
    assert not snap.submitting


def test_gateway_error_surfaces_raw_payload_and_keeps_form():
    gw = FakeGateway(submit_application=failed(None, 422))
    orch = SubmissionOrchestrator(gw)
    form = SubmissionForm(2, 2500, 24)

    snap = asyncio.run(orch.submit(form))

    assert snap.message.type == "error"
    assert json.loads(snap.message.text) == {"detail": "boom"}
    assert snap.form == form
    assert not snap.submitting
    assert not gw.network_calls("list_recent_applications")


def test_refresh_keeps_error_for_failed_list():
    gw = FakeGateway(list_recent_applications=failed([]))
    snap = asyncio.run(SubmissionOrchestrator(gw).refresh())
    assert snap.recent == ()
    assert snap.recent_error is not None


def test_closed_orchestrator_does_not_submit():
    gw = FakeGateway(submit_application=ok({"application_id": 3}), list_recent_applications=ok(RECENT))
    orch = SubmissionOrchestrator(gw)
    orch.close()
    snap = asyncio.run(orch.submit(SubmissionForm(1, 1000, 1)))
    assert gw.calls == []
    assert snap.message is None


def test_teardown_while_submit_in_flight_drops_result():
    gw = FakeGateway(submit_application=ok({"application_id": 3}), list_recent_applications=ok(RECENT))
    gw.gate = threading.Event()
    orch = SubmissionOrchestrator(gw)

    async def scenario():
        task = asyncio.create_task(orch.submit(SubmissionForm(1, 1000, 1)))
        await asyncio.sleep(0.05)
        orch.close()
        gw.gate.set()
        return await task

    snap = asyncio.run(scenario())
    assert snap.submitting is True
    assert snap.message is None
    assert snap.last_application_id is None
    assert gw.network_calls("submit_application")
    assert not gw.network_calls("list_recent_applications")
