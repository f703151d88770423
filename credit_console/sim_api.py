# credit_console/sim_api.py
# FastAPI + Pydantic stand-in for the scoring backend, in memory and deterministic.
# Run: python -m credit_console.sim_api

import logging
import math
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, HTTPException

from credit_console.models import (
    Application,
    ApplicationStatus,
    HumanDecision,
    HumanDecisionRequest,
    SubmitApplicationRequest,
)

logger = logging.getLogger(__name__)

HOST = os.getenv("SIM_API_HOST", "127.0.0.1")
PORT = int(os.getenv("SIM_API_PORT", "8000"))
RECENT_LIMIT = 50

app = FastAPI(title="Credit Console Sim API")

# ---------- Simulated external system ----------
APPLICANTS: Dict[int, Dict[str, Any]] = {
    1: {"salary": 6500, "tenure_months": 36, "good_history": True, "past_defaults": 0},
    2: {"salary": 4200, "tenure_months": 14, "good_history": True, "past_defaults": 1},
    3: {"salary": 3000, "tenure_months": 6, "good_history": False, "past_defaults": 2},
    4: {"salary": 8800, "tenure_months": 60, "good_history": True, "past_defaults": 0},
    5: {"salary": 2500, "tenure_months": 3, "good_history": False, "past_defaults": 3},
}
GENERIC_APPLICANT = {"salary": 4000, "tenure_months": 12, "good_history": True, "past_defaults": 0}

APPLICATIONS: Dict[int, Dict[str, Any]] = {}
TRANSACTIONS: List[Dict[str, Any]] = []
SEED_START = datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)


# ---------- Scoring (simple & explainable) ----------
def score_application(applicant_id: int, amount: float, tenure: int) -> Dict[str, Any]:
    profile = APPLICANTS.get(applicant_id, GENERIC_APPLICANT)
    salary = float(profile["salary"])
    instalment = amount / max(1, tenure)
    burden = instalment / salary if salary else float("inf")

    score = 0.95 - 1.5 * burden - 0.12 * profile["past_defaults"]
    if profile["good_history"]:
        score += 0.05
    if profile["tenure_months"] < 12:
        score -= 0.1
    score = round(min(1.0, max(0.0, score)), 3)

    features = {
        "monthly_salary": salary,
        "instalment": round(instalment, 2),
        "instalment_to_salary": round(burden, 4),
        "past_defaults": profile["past_defaults"],
        "employment_tenure_months": profile["tenure_months"],
        "good_history": profile["good_history"],
    }

    suggested_offer = None
    if score >= 0.7:
        decision, status = "approve", ApplicationStatus.approved
        reasoning = "Affordable instalment and clean repayment history"
    elif score >= 0.4:
        # shrink to 500-AED steps and stretch the tenure to bring the burden down
        offer_amount = max(500, int(math.floor(amount * score / 500.0)) * 500)
        suggested_offer = {"amount": offer_amount, "tenure_months": min(24, tenure + 6)}
        decision, status = "offer", ApplicationStatus.under_process
        reasoning = "Instalment is borderline for the salary; a smaller offer is suggested"
    elif score >= 0.25:
        decision, status = "manual_review", ApplicationStatus.under_process
        reasoning = "High instalment burden; needs an officer's review"
    else:
        decision, status = "rejected", ApplicationStatus.rejected
        reasoning = "Instalment far exceeds what the salary supports"

    return {
        "decision": decision,
        "status": status.value,
        "score": score,
        "suggested_offer": suggested_offer,
        "reasoning": reasoning,
        "features": features,
    }


def create_application(req: SubmitApplicationRequest, created_at: datetime) -> Dict[str, Any]:
    application_id = max(APPLICATIONS, default=0) + 1
    row = {
        "application_id": application_id,
        "applicant_id": req.applicant_id,
        "requested_amount": req.requested_amount,
        "requested_tenure_months": req.requested_tenure_months,
        "created_at": created_at.isoformat(),
        **score_application(req.applicant_id, req.requested_amount, req.requested_tenure_months),
    }
    APPLICATIONS[application_id] = row
    return row


def reset() -> None:
    """Wipe and re-seed the in-memory store."""
    APPLICATIONS.clear()
    TRANSACTIONS.clear()
    seeds = [
        (1, 2000, 12), (2, 2500, 6), (3, 2500, 3), (4, 1500, 12),
        (3, 1500, 12), (3, 2500, 5), (5, 1000, 12), (5, 2500, 1),
    ]
    for i, (applicant_id, amount, tenure) in enumerate(seeds):
        req = SubmitApplicationRequest(
            applicant_id=applicant_id, requested_amount=amount, requested_tenure_months=tenure
        )
        create_application(req, SEED_START + timedelta(days=17 * i))
    # monthly repayments against the approved seeds
    for row in APPLICATIONS.values():
        if row["status"] != ApplicationStatus.approved.value:
            continue
        instalment = round(row["requested_amount"] / row["requested_tenure_months"], 2)
        start = datetime.fromisoformat(row["created_at"])
        for month in range(1, min(row["requested_tenure_months"], 6) + 1):
            TRANSACTIONS.append(
                {
                    "application_id": row["application_id"],
                    "timestamp": (start + timedelta(days=30 * month)).isoformat(),
                    "amount": instalment,
                }
            )


def _view(row: Dict[str, Any]) -> Dict[str, Any]:
    return Application(**row).model_dump(mode="json")


# ---------- Dashboard ----------
@app.get("/dashboard/summary")
def dashboard_summary():
    rows = list(APPLICATIONS.values())
    by_status = {s: [r for r in rows if r["status"] == s.value] for s in ApplicationStatus}
    total = len(rows)
    approved = len(by_status[ApplicationStatus.approved])
    rejected = len(by_status[ApplicationStatus.rejected])
    keys = ("application_id", "applicant_id", "score", "status")
    return {
        "total_cases": total,
        "approved": approved,
        "rejected": rejected,
        "offers": len(by_status[ApplicationStatus.offer]),
        "accepted_details": [
            {**{k: r[k] for k in keys}, "suggested_offer": r["suggested_offer"]}
            for r in by_status[ApplicationStatus.approved]
        ],
        "rejected_details": [
            {**{k: r[k] for k in keys}, "reasoning": r["reasoning"]}
            for r in by_status[ApplicationStatus.rejected]
        ],
        "avg_score": (sum(r["score"] for r in rows) / total) if total else None,
        "acceptance_ratio": round(100.0 * approved / total, 1) if total else 0,
        "rejection_ratio": round(100.0 * rejected / total, 1) if total else 0,
    }


@app.get("/transactions")
def transactions():
    return TRANSACTIONS


@app.get("/analytics")
def analytics():
    profiles = list(APPLICANTS.values())
    n = len(profiles)
    return {
        "avg_salary": round(sum(p["salary"] for p in profiles) / n, 2),
        "avg_tenure": sum(p["tenure_months"] for p in profiles) / n,
        "good_history_pct": round(100.0 * sum(1 for p in profiles if p["good_history"]) / n, 1),
        "avg_defaults": round(sum(p["past_defaults"] for p in profiles) / n, 2),
    }


# ---------- Applications ----------
@app.post("/applications/submit")
def submit(req: SubmitApplicationRequest):
    row = create_application(req, datetime.now(timezone.utc))
    logger.info("application %s created: %s (score %s)", row["application_id"], row["decision"], row["score"])
    return _view(row)


# declared before /applications/{application_id} so "recent" is not read as an id
@app.get("/applications/recent")
def recent():
    rows = sorted(APPLICATIONS.values(), key=lambda r: r["created_at"], reverse=True)
    return [_view(r) for r in rows[:RECENT_LIMIT]]


@app.get("/applications/{application_id}")
def get_application(application_id: int):
    row = APPLICATIONS.get(application_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"application {application_id} not found")
    return _view(row)


@app.post("/applications/{application_id}/human_decision")
def human_decision(application_id: int, req: HumanDecisionRequest):
    row = APPLICATIONS.get(application_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"application {application_id} not found")
    if row["status"] != ApplicationStatus.under_process.value:
        raise HTTPException(
            status_code=409,
            detail=f"application {application_id} is already '{row['status']}'",
        )
    row["status"] = req.human_decision.expected_status.value
    row["human_decision"] = req.human_decision.value
    row["human_comment"] = req.comment
    if req.human_decision == HumanDecision.offer:
        row["suggested_offer"] = req.new_offer.model_dump()
    logger.info("application %s: human decision %s", application_id, req.human_decision.value)
    return _view(row)


reset()

# ---------- Run ----------
if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("CONSOLE_LOG_LEVEL", "INFO"))
    uvicorn.run("credit_console.sim_api:app", host=HOST, port=PORT, reload=True)
