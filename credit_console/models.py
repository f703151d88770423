# credit_console/models.py
# Wire schemas shared by the console and the simulated backend.

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, conint, confloat, field_validator, model_validator

MIN_REQUESTED_AMOUNT = 1000
REQUESTED_AMOUNT_STEP = 500
MIN_OFFER_AMOUNT = 500


# ---------- Enums ----------
class ApplicationStatus(str, Enum):
    under_process = "under_process"
    approved = "approved"
    rejected = "rejected"
    offer = "offer"
    manual_review = "manual_review"

    @classmethod
    def parse(cls, value: Any) -> Optional["ApplicationStatus"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {ApplicationStatus.approved, ApplicationStatus.rejected, ApplicationStatus.offer}
)


class HumanDecision(str, Enum):
    approve = "approve"
    rejected = "rejected"
    offer = "offer"

    @property
    def expected_status(self) -> ApplicationStatus:
        return _EXPECTED_STATUS[self]


_EXPECTED_STATUS = {
    HumanDecision.approve: ApplicationStatus.approved,
    HumanDecision.rejected: ApplicationStatus.rejected,
    HumanDecision.offer: ApplicationStatus.offer,
}


# ---------- Request bodies ----------
class Offer(BaseModel):
    amount: confloat(ge=MIN_OFFER_AMOUNT)
    tenure_months: conint(ge=1)


class HumanDecisionRequest(BaseModel):
    human_decision: HumanDecision
    comment: Optional[str] = None
    new_offer: Optional[Offer] = None

    @field_validator("comment")
    @classmethod
    def blank_comment_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def offer_iff_offer_decision(self) -> "HumanDecisionRequest":
        if self.human_decision == HumanDecision.offer and self.new_offer is None:
            raise ValueError("new_offer is required when the decision is 'offer'")
        if self.human_decision != HumanDecision.offer and self.new_offer is not None:
            raise ValueError("new_offer is only allowed when the decision is 'offer'")
        return self


class SubmitApplicationRequest(BaseModel):
    applicant_id: conint(ge=1)
    requested_amount: confloat(ge=MIN_REQUESTED_AMOUNT)
    requested_tenure_months: conint(ge=1)

    @field_validator("requested_amount")
    @classmethod
    def amount_on_step(cls, v: float) -> float:
        if (v - MIN_REQUESTED_AMOUNT) % REQUESTED_AMOUNT_STEP != 0:
            raise ValueError(
                f"requested_amount must be {MIN_REQUESTED_AMOUNT} plus a multiple of {REQUESTED_AMOUNT_STEP}"
            )
        return v


# ---------- Response shapes (sim backend only; the gateway never validates) ----------
class Application(BaseModel):
    model_config = ConfigDict(extra="allow")

    application_id: int
    applicant_id: int
    requested_amount: float
    requested_tenure_months: int
    status: ApplicationStatus
    decision: str
    score: float
    suggested_offer: Optional[Dict[str, Any]] = None
    reasoning: str = ""
    features: Optional[Dict[str, Any]] = None
    created_at: datetime
