# tests/test_presentation.py
from credit_console import presentation as fmt
from credit_console.insights import eligibility_summary, explain_score
from helpers import APP_UNDER_PROCESS, failed, ok


def test_empty_message_distinguishes_failure_from_empty():
    assert fmt.empty_message("repayment", ok([])) == "No repayment transactions available"
    msg = fmt.empty_message("repayment", failed([]))
    assert msg.startswith("Could not load repayment transactions")
    assert fmt.empty_message("distribution") == "No decisions yet to show distribution."


def test_kpis_default_to_zero():
    cards = fmt.kpi_cards({"approved": 4})
    assert [(label, value) for label, value, _ in cards] == [
        ("Total Cases", 0),
        ("Approved Loans", 4),
        ("Conditional Approval", 0),
        ("Offers Made", 0),
    ]


def test_detail_rows_format():
    summary = {
        "accepted_details": [
            {"application_id": 1, "applicant_id": 2, "score": 0.91234, "status": "approved",
             "suggested_offer": {"amount": 1500.0, "tenure_months": 6}},
        ],
        "rejected_details": [
            {"application_id": 3, "applicant_id": 4, "reasoning": "{'dti': 'high'}", "status": "rejected"},
        ],
    }
    accepted = fmt.accepted_rows(summary)[0]
    assert accepted["Score"] == "0.912"
    assert accepted["Suggested Offer"] == "1500 AED for 6 months"
    conditional = fmt.conditional_rows(summary)[0]
    assert conditional["Score"] == "N/A"
    assert conditional["Reasoning"] == "dti: high"


def test_performance_and_analytics_defaults():
    assert fmt.performance_indicators({}) == [
        ("Avg Confidence Score", "N/A"),
        ("Acceptance Ratio (%)", "N/A"),
        ("Conditional Approval (%)", "N/A"),
    ]
    rows = dict(fmt.analytics_rows({"avg_salary": 12345.5, "avg_tenure": 7, "good_history_pct": 80}))
    assert rows["Avg Salary (AED)"] == "12,345.5"
    assert rows["Avg Tenure (Months)"] == "7.0"
    assert rows["Remittance Reliability Index"] == "80%"
    assert rows["Avg Delinquency"] == "N/A"


def test_application_details():
    details = fmt.application_details(APP_UNDER_PROCESS)
    assert details["Requested Amount"] == "AED 1,500.00"
    assert details["Requested Tenure"] == "12 months"
    assert details["Confidence Score"] == "0.55"
    assert details["Suggested Offer"] == "AED 1,000.00 for 18 months"
    assert details["Created At"] == "2024-03-01 10:00:00 UTC"


def test_status_color_falls_back():
    assert fmt.status_color("APPROVED") == fmt.STATUS_COLORS["approved"]
    assert fmt.status_color(None) == fmt.DEFAULT_STATUS_COLOR


def test_eligibility_tiers_use_exact_thresholds():
    base = {"applicant_id": 5, "requested_amount": 2000.0, "decision": "approve"}
    strong = eligibility_summary({**base, "score": 0.71})
    assert "high confidence score of 0.71" in strong
    assert "loan of 2000 AED" in strong
    # 0.704 shows as 0.70, which is not above 0.7
    assert "moderate at 0.70" in eligibility_summary({**base, "score": 0.704})
    assert "moderate at 0.41" in eligibility_summary({**base, "score": 0.41})
    assert "low confidence score of 0.40" in eligibility_summary({**base, "score": 0.4})
    assert "low confidence score of N/A" in eligibility_summary(base)


def test_explain_score_rows():
    rows = explain_score({"features": {"monthly_salary": 3000, "good_history": True}})
    assert rows == [("Monthly Salary", "3000.0000"), ("Good History", "True")]
    assert explain_score({"features": None}) is None
