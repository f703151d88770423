# credit_console/review.py
# Fetch/decide lifecycle for the one application an operator is reviewing.
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from credit_console.errors import (
    ConcurrencyConflict,
    ConsoleError,
    TransitionError,
    ValidationError,
    from_pydantic,
)
from credit_console.gateway import APIGateway
from credit_console.models import ApplicationStatus, HumanDecision, HumanDecisionRequest

logger = logging.getLogger(__name__)


class ReviewState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    SUBMITTING = "submitting"
    ERROR = "error"


@dataclass(frozen=True)
class DecisionDraft:
    """What the operator has typed into the decision form."""

    decision: str = HumanDecision.approve.value
    comment: str = ""
    offer: Any = None


@dataclass(frozen=True)
class ReviewSnapshot:
    state: ReviewState = ReviewState.UNLOADED
    application_id: Any = None
    application: Optional[Dict[str, Any]] = None
    status: Optional[ApplicationStatus] = None
    draft: DecisionDraft = field(default_factory=DecisionDraft)
    error: Optional[ConsoleError] = None
    conflict: Optional[ConcurrencyConflict] = None
    message: Optional[str] = None
    recent: Tuple[Dict[str, Any], ...] = ()
    recent_error: Optional[ConsoleError] = None

    @property
    def can_decide(self) -> bool:
        return self.state == ReviewState.LOADED and self.status == ApplicationStatus.under_process

    @property
    def raw_status(self) -> Optional[str]:
        return (self.application or {}).get("status")


def _decision_value(decision: Any) -> str:
    if isinstance(decision, Enum):
        return str(decision.value)
    return str(decision or "").strip()


def _offer_draft(offer: Any) -> Any:
    """Copy a mapping or model into a plain dict; anything else is kept as typed
    and left for validation to reject.
    """
    if isinstance(offer, Mapping):
        return dict(offer)
    if hasattr(offer, "model_dump"):
        return dict(offer.model_dump())
    return offer


def build_decision_request(draft: DecisionDraft) -> HumanDecisionRequest:
    """Validate a draft before anything goes on the wire.

    Raises ValidationError for an unknown decision or a malformed offer.
    """
    try:
        decision = HumanDecision(draft.decision)
    except ValueError:
        allowed = ", ".join(d.value for d in HumanDecision)
        raise ValidationError("Invalid decision", [f"decision must be one of: {allowed}"]) from None

    # the offer fields only travel with an offer decision
    offer = draft.offer if decision == HumanDecision.offer else None
    try:
        return HumanDecisionRequest(human_decision=decision, comment=draft.comment, new_offer=offer)
    except PydanticValidationError as e:
        raise from_pydantic("Invalid decision", e) from e


class ApplicationReviewStateMachine:
    """Unloaded -> Loading -> Loaded(status) [-> Submitting -> Loaded(new status)].

    A decision is only accepted from Loaded(under_process). Every transition
    swaps in a new ReviewSnapshot; results that arrive after ``close()`` or
    after a newer ``select()`` are dropped.
    """

    def __init__(self, gateway: APIGateway):
        self._gateway = gateway
        self._snapshot = ReviewSnapshot()
        self._alive = True
        self._token = 0

    @property
    def snapshot(self) -> ReviewSnapshot:
        return self._snapshot

    @property
    def state(self) -> ReviewState:
        return self._snapshot.state

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        self._alive = False

    # ---- internals ----
    def _commit(self, token: Optional[int], **changes) -> bool:
        if not self._alive:
            logger.debug("review closed; dropping late result %s", sorted(changes))
            return False
        if token is not None and token != self._token:
            logger.debug("stale review result (token %s, current %s) dropped", token, self._token)
            return False
        self._snapshot = replace(self._snapshot, **changes)
        return True

    async def _fetch(self, token: int, application_id: Any) -> bool:
        result = await asyncio.to_thread(self._gateway.get_application, application_id)
        app = result.data
        if result.ok and isinstance(app, dict) and app:
            status = ApplicationStatus.parse(app.get("status"))
            if status is None:
                logger.warning("application %s has unrecognised status %r", application_id, app.get("status"))
            return self._commit(token, state=ReviewState.LOADED, application=app, status=status, error=None)

        error = result.error or ConsoleError(f"Application {application_id} not found")
        self._commit(
            token,
            state=ReviewState.ERROR,
            application=None,
            status=None,
            error=error,
            message=f"Could not load application {application_id}: {error.display()}",
        )
        return False

    def _refusal(self, snap: ReviewSnapshot) -> TransitionError:
        if snap.state == ReviewState.LOADED:
            return TransitionError(
                f"Application {snap.application_id} already has status '{snap.raw_status}'; "
                "no further decision is accepted"
            )
        if snap.state in (ReviewState.LOADING, ReviewState.SUBMITTING):
            return TransitionError(f"Cannot decide while {snap.state.value}")
        return TransitionError("No application is loaded")

    # ---- operations ----
    async def open(self) -> ReviewSnapshot:
        """Load the recent-applications picker and select its first entry."""
        result = await asyncio.to_thread(self._gateway.list_recent_applications)
        rows = result.data if isinstance(result.data, list) else []
        recent = tuple(r for r in rows if isinstance(r, dict))
        if not self._commit(None, recent=recent, recent_error=result.error):
            return self._snapshot
        # leave an operator's own selection alone
        if recent and self._snapshot.state == ReviewState.UNLOADED:
            first = recent[0].get("application_id")
            if first is not None:
                await self.select(first)
        return self._snapshot

    async def select(self, application_id: Any) -> ReviewSnapshot:
        if not self._alive:
            return self._snapshot
        self._token += 1
        token = self._token
        logger.info("loading application %s", application_id)
        self._snapshot = ReviewSnapshot(
            state=ReviewState.LOADING,
            application_id=application_id,
            recent=self._snapshot.recent,
            recent_error=self._snapshot.recent_error,
        )
        await self._fetch(token, application_id)
        return self._snapshot

    async def decide(self, decision: Any, comment: Optional[str] = None, offer: Any = None) -> ReviewSnapshot:
        snap = self._snapshot
        if not self._alive:
            return snap
        draft = DecisionDraft(decision=_decision_value(decision), comment=comment or "", offer=_offer_draft(offer))

        if not snap.can_decide:
            error = self._refusal(snap)
            logger.info("decision refused: %s", error.message)
            self._snapshot = replace(snap, error=error, message=error.display())
            return self._snapshot

        try:
            request = build_decision_request(draft)
        except ValidationError as e:
            self._snapshot = replace(snap, draft=draft, error=e, message=e.display())
            return self._snapshot

        token = self._token
        application_id = snap.application_id
        self._snapshot = replace(snap, state=ReviewState.SUBMITTING, draft=draft, error=None, conflict=None, message=None)

        result = await asyncio.to_thread(
            self._gateway.submit_human_decision,
            application_id,
            request.human_decision.value,
            request.comment,
            request.new_offer.model_dump() if request.new_offer else None,
        )
        if not result.ok:
            # back to Loaded(under_process); the draft stays for a retry
            self._commit(
                token,
                state=ReviewState.LOADED,
                error=result.error,
                message=f"Decision not submitted: {result.error.display()}",
            )
            return self._snapshot

        if not await self._fetch(token, application_id):
            return self._snapshot

        expected = request.human_decision.expected_status
        actual = self._snapshot.status
        if actual != expected:
            shown = actual.value if actual else self._snapshot.raw_status
            conflict = ConcurrencyConflict(
                f"Application {application_id} is now '{shown}', not '{expected.value}'; "
                "another reviewer may have finalized it first",
                expected=expected.value,
                actual=shown,
            )
            logger.warning(conflict.message)
            self._commit(token, conflict=conflict, message=conflict.message)
        else:
            logger.info("application %s decided: %s", application_id, actual.value)
            self._commit(
                token,
                draft=DecisionDraft(),
                message=f"Decision recorded. Application {application_id} is now '{actual.value}'.",
            )
        return self._snapshot
