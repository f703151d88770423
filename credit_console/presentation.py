# credit_console/presentation.py
# Display defaults live here and only here: the gateway passes payloads through untouched.
from __future__ import annotations

from datetime import datetime, timezone
from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from credit_console.errors import ConsoleError
from credit_console.gateway import ApiResult

N_A = "N/A"

STATUS_COLORS = {
    "approve": "#28a745",
    "approved": "#28a745",
    "rejected": "#dc3545",
    "offer": "#ffc107",
    "manual_review": "#17a2b8",
    "under_process": "#6c757d",
}
DEFAULT_STATUS_COLOR = "#6c757d"

EMPTY_MESSAGES = {
    "repayment": "No repayment transactions available",
    "distribution": "No decisions yet to show distribution.",
    "analytics": "No analytics available",
    "accepted": "No accepted loans yet.",
    "conditional": "No conditional approvals yet.",
    "recent": "No applications submitted yet.",
    "review": "Select an application from the dropdown to begin.",
}

FAILED_LABELS = {
    "repayment": "repayment transactions",
    "distribution": "the decision summary",
    "analytics": "analytics",
    "accepted": "accepted loans",
    "conditional": "conditional approvals",
    "recent": "recent applications",
    "review": "the application list",
}


# ---- scalar formatting ----
def _is_number(v: Any) -> bool:
    return isinstance(v, Number) and not isinstance(v, bool)


def plain(v: Any) -> str:
    """Numbers the way the backend sent them: 1000.0 -> '1000'."""
    if v is None:
        return N_A
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def fixed(v: Any, decimals: int) -> str:
    return f"{v:.{decimals}f}" if _is_number(v) else N_A


def thousands(v: Any) -> str:
    if not _is_number(v):
        return N_A
    if isinstance(v, float) and not v.is_integer():
        return format(round(v, 3), ",")
    return format(int(v), ",")


def currency(v: Any, code: str = "AED") -> str:
    return f"{code} {v:,.2f}" if _is_number(v) else N_A


def or_default(v: Any, default: Any = N_A) -> Any:
    return default if v is None else v


def offer_text(offer: Optional[Mapping[str, Any]]) -> str:
    if not offer:
        return N_A
    return f"{plain(offer.get('amount'))} AED for {plain(offer.get('tenure_months'))} months"


def clean_reasoning(text: Optional[str]) -> str:
    if text is None:
        return N_A
    return str(text).translate(str.maketrans("", "", "'{}"))


def timestamp_text(v: Any) -> str:
    if not v:
        return N_A
    try:
        ts = v if isinstance(v, datetime) else datetime.fromisoformat(str(v).replace("Z", "+00:00"))
    except ValueError:
        return str(v)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.strftime("%Y-%m-%d %H:%M:%S %Z")


def status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get((status or "").lower(), DEFAULT_STATUS_COLOR)


# ---- empty states ----
def empty_message(section: str, outcome: Union[ApiResult, ConsoleError, None] = None) -> str:
    """Tell "nothing there yet" apart from "we couldn't fetch it".

    ``outcome`` is the ApiResult behind the section, or the error recorded
    for it.
    """
    error = outcome.error if isinstance(outcome, ApiResult) else outcome
    if error is not None:
        return f"Could not load {FAILED_LABELS.get(section, section)}: {error.display()}"
    return EMPTY_MESSAGES.get(section, "Nothing to show.")


def final_status_notice(status: Optional[str]) -> str:
    return (
        f"This application has already been processed with a final status of '{status}'. "
        "No further action is needed."
    )


# ---- dashboard blocks ----
def kpi_cards(summary: Mapping[str, Any]) -> List[Tuple[str, Any, str]]:
    return [
        ("Total Cases", or_default(summary.get("total_cases"), 0), "#0d6efd"),
        ("Approved Loans", or_default(summary.get("approved"), 0), "#28a745"),
        ("Conditional Approval", or_default(summary.get("rejected"), 0), "#dc3545"),
        ("Offers Made", or_default(summary.get("offers"), 0), "#ffc107"),
    ]


def accepted_rows(summary: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "App ID": row.get("application_id"),
            "Applicant": row.get("applicant_id"),
            "Score": fixed(row.get("score"), 3),
            "Suggested Offer": offer_text(row.get("suggested_offer")),
            "Status": or_default(row.get("status")),
        }
        for row in summary.get("accepted_details") or []
    ]


def conditional_rows(summary: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "App ID": row.get("application_id"),
            "Applicant": row.get("applicant_id"),
            "Score": fixed(row.get("score"), 3),
            "Reasoning": clean_reasoning(row.get("reasoning")),
            "Status": or_default(row.get("status")),
        }
        for row in summary.get("rejected_details") or []
    ]


def performance_indicators(summary: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    return [
        ("Avg Confidence Score", fixed(summary.get("avg_score"), 2)),
        ("Acceptance Ratio (%)", or_default(summary.get("acceptance_ratio"))),
        ("Conditional Approval (%)", or_default(summary.get("rejection_ratio"))),
    ]


def analytics_rows(analytics: Mapping[str, Any]) -> List[Tuple[str, str]]:
    return [
        ("Avg Salary (AED)", thousands(analytics.get("avg_salary"))),
        ("Avg Tenure (Months)", fixed(analytics.get("avg_tenure"), 1)),
        ("Remittance Reliability Index", f"{or_default(analytics.get('good_history_pct'))}%"),
        ("Avg Delinquency", str(or_default(analytics.get("avg_defaults")))),
    ]


# ---- applications ----
def recent_rows(applications: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "ID": a.get("application_id"),
            "Applicant": a.get("applicant_id"),
            "Amount": or_default(a.get("requested_amount")),
            "Tenure": or_default(a.get("requested_tenure_months")),
            "Decision": or_default(a.get("decision")),
            "Score": fixed(a.get("score"), 2),
        }
        for a in applications
    ]


def recent_option_label(app: Mapping[str, Any]) -> str:
    return f"ID: {app.get('application_id')} - Applicant: {app.get('applicant_id')} ({app.get('status')})"


def application_details(app: Mapping[str, Any]) -> Dict[str, str]:
    details = {
        "Application ID": f"#{app.get('application_id')}",
        "Applicant ID": f"#{app.get('applicant_id')}",
        "Status": str(or_default(app.get("status"))),
        "Created At": timestamp_text(app.get("created_at")),
        "Requested Amount": currency(app.get("requested_amount")),
        "Requested Tenure": f"{plain(app.get('requested_tenure_months'))} months",
        "Confidence Score": fixed(app.get("score"), 2),
        "AI Decision": str(or_default(app.get("decision"))),
    }
    offer = app.get("suggested_offer")
    if offer:
        details["Suggested Offer"] = f"{currency(offer.get('amount'))} for {plain(offer.get('tenure_months'))} months"
    details["Reasoning"] = str(or_default(app.get("reasoning")))
    return details
