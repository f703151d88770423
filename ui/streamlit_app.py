# ui/streamlit_app.py
# Run: streamlit run ui/streamlit_app.py
import asyncio
import logging
import os

import pandas as pd
import streamlit as st

from credit_console.config import ConsoleConfig
from credit_console.dashboard import DashboardOrchestrator
from credit_console.gateway import APIGateway
from credit_console.insights import eligibility_summary, explain_score
from credit_console.models import HumanDecision
from credit_console import presentation as fmt
from credit_console.review import ApplicationReviewStateMachine, ReviewState
from credit_console.submission import SubmissionForm, SubmissionOrchestrator

# ------------------ App Setup ------------------
st.set_page_config(page_title="Credit Review Console", layout="wide")
logging.basicConfig(level=os.getenv("CONSOLE_LOG_LEVEL", "INFO"))

# ------------------ Styling ------------------
st.markdown(
    """
    <style>
        .stApp { background-color: #f8f9fa; color: #212529; }
        .main-title { font-size: 28px; font-weight: 700; color: #003366; }
        .subtitle { font-size: 15px; color: #6c757d; }
        h2, h3, h4 { color: #003366; }
    </style>
    """,
    unsafe_allow_html=True
)

# ------------------ Header ------------------
st.markdown('<div class="main-title">Credit Review Console</div>', unsafe_allow_html=True)
st.markdown('<div class="subtitle">Portfolio confidence dashboard and manual review</div>', unsafe_allow_html=True)


# ------------------ Session wiring ------------------
def _session():
    if "gateway" not in st.session_state:
        gateway = APIGateway(ConsoleConfig.from_env())
        st.session_state.gateway = gateway
        st.session_state.dashboard = DashboardOrchestrator(gateway)
        st.session_state.submission = SubmissionOrchestrator(gateway)
        st.session_state.review = ApplicationReviewStateMachine(gateway)
        asyncio.run(st.session_state.submission.refresh())
        asyncio.run(st.session_state.review.open())
    return st.session_state


def kpi_card(label, value, color):
    shown = f"{value:,}" if isinstance(value, int) else value
    st.markdown(
        f"""
        <div style="padding:12px; border-radius:8px; background:{color}; text-align:center; color:white;">
            <h5>{label}</h5>
            <h2 style="margin:0;">{shown}</h2>
        </div>
        """,
        unsafe_allow_html=True
    )


def badge(status):
    st.markdown(
        f'<span style="padding:2px 10px; border-radius:10px; background:{fmt.status_color(status)}; '
        f'color:white; font-size:12px;">{status}</span>',
        unsafe_allow_html=True
    )


def info_empty(message):
    st.caption(f"_{message}_")


def table_or_empty(rows, section, result):
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        info_empty(fmt.empty_message(section, result))


# ------------------ Dashboard ------------------
def render_dashboard(orch: DashboardOrchestrator):
    st.markdown("### Alternative Credit Score Dashboard")
    if st.button("Refresh dashboard") or not orch.model.loaded:
        with st.spinner("Loading..."):
            asyncio.run(orch.load())
    m = orch.model
    summary = m.summary.data if isinstance(m.summary.data, dict) else {}
    analytics = m.analytics.data if isinstance(m.analytics.data, dict) else {}

    cols = st.columns(4)
    for col, (label, value, color) in zip(cols, fmt.kpi_cards(summary)):
        with col:
            kpi_card(label, value, color)

    left, right = st.columns([2, 1])
    with left:
        st.markdown("#### Repayment Monitor")
        if m.repayment:
            chart = pd.DataFrame({"Amount Paid (AED)": m.repayment.amounts}, index=m.repayment.months)
            st.line_chart(chart)
        else:
            info_empty(fmt.empty_message("repayment", m.transactions))
    with right:
        st.markdown("#### Credit Access Results")
        if not m.distribution.empty:
            dist = pd.DataFrame({"count": m.distribution.values}, index=["Approved", "Conditional", "Offers"])
            st.bar_chart(dist)
        else:
            info_empty(fmt.empty_message("distribution", m.summary))

    left, right = st.columns(2)
    with left:
        accepted = fmt.accepted_rows(summary)
        st.markdown(f"#### Accepted Loans ({len(accepted)})")
        table_or_empty(accepted, "accepted", m.summary)
    with right:
        conditional = fmt.conditional_rows(summary)
        st.markdown(f"#### Conditional Approval ({len(conditional)})")
        table_or_empty(conditional, "conditional", m.summary)

    left, right = st.columns(2)
    with left:
        st.markdown("#### Performance Indicators")
        for label, value in fmt.performance_indicators(summary):
            st.write(f"{label}: **{value}**")
    with right:
        st.markdown("#### Extra Insights (Analytics)")
        if m.analytics.ok and analytics:
            for label, value in fmt.analytics_rows(analytics):
                st.write(f"{label}: **{value}**")
        else:
            info_empty(fmt.empty_message("analytics", m.analytics))


# ------------------ Submit ------------------
def render_submit(orch: SubmissionOrchestrator, review: ApplicationReviewStateMachine):
    st.markdown("### Submit New Loan Application")
    snap = orch.snapshot
    with st.form("application_form"):
        applicant_id = st.number_input("Applicant ID", min_value=1, value=int(snap.form.applicant_id), step=1)
        amount = st.number_input("Requested Loan Amount (AED)", min_value=1000, value=int(snap.form.amount), step=500)
        tenure = st.number_input("Requested Tenure (Months)", min_value=1, value=int(snap.form.tenure_months), step=1)
        submitted = st.form_submit_button("Submit Application")

    if submitted:
        with st.spinner("Submitting..."):
            snap = asyncio.run(orch.submit(SubmissionForm(int(applicant_id), amount, int(tenure))))
        if snap.message and snap.message.type == "success":
            # make the new application pickable on the Review tab
            asyncio.run(review.open())
    if snap.message:
        (st.success if snap.message.type == "success" else st.error)(snap.message.text)

    st.markdown("#### All Applications")
    if not snap.recent:
        info_empty(fmt.empty_message("recent", snap.recent_error))
        return
    st.dataframe(pd.DataFrame(fmt.recent_rows(snap.recent)), use_container_width=True, hide_index=True)

    by_label = {fmt.recent_option_label(a): a for a in snap.recent}
    picked = by_label[st.selectbox("Inspect application", list(by_label))]
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Analyze with AI"):
            st.info(eligibility_summary(picked))
    with c2:
        if st.button("Explain Score"):
            rows = explain_score(picked)
            if rows:
                st.table(pd.DataFrame(rows, columns=["Feature", "Value"]))
            else:
                info_empty("No feature data available for this application.")


# ------------------ Review ------------------
def render_review(machine: ApplicationReviewStateMachine):
    st.markdown("### Manual Review & Intervention")
    if st.button("Refresh list"):
        asyncio.run(machine.open())
    snap = machine.snapshot
    if not snap.recent:
        info_empty(fmt.empty_message("review", snap.recent_error))
        return

    ids = [a.get("application_id") for a in snap.recent]
    labels = {a.get("application_id"): fmt.recent_option_label(a) for a in snap.recent}
    index = ids.index(snap.application_id) if snap.application_id in ids else 0
    chosen = st.selectbox("Select Application to Review", ids, index=index, format_func=labels.get)
    if chosen != snap.application_id:
        snap = asyncio.run(machine.select(chosen))

    if snap.state == ReviewState.ERROR:
        st.error(snap.message)
        return
    if snap.application is None:
        info_empty(fmt.EMPTY_MESSAGES["review"])
        return

    st.markdown("#### Application Details")
    for label, value in fmt.application_details(snap.application).items():
        if label == "Status":
            st.write(f"{label}:")
            badge(value)
        else:
            st.write(f"{label}: **{value}**")

    if snap.conflict:
        st.warning(snap.conflict.message)
    elif snap.message and snap.error is None:
        st.success(snap.message)

    if not snap.can_decide:
        info_empty(fmt.final_status_notice(snap.raw_status))
        return

    draft = snap.draft
    options = [d.value for d in HumanDecision]
    decision = st.selectbox(
        "Your Decision", options, index=options.index(draft.decision) if draft.decision in options else 0,
        format_func={"approve": "Approve", "rejected": "Reject", "offer": "Make New Offer (Conditional)"}.get,
    )
    comment = st.text_area("Reviewer Comments (Optional)", value=draft.comment,
                           placeholder="e.g., Verified income with payslip.")
    offer = None
    if decision == HumanDecision.offer.value:
        prior = draft.offer if isinstance(draft.offer, dict) else {}
        offer_amount = st.number_input("New Offer Amount (AED)", min_value=500, step=100,
                                       value=int(prior.get("amount", 500)))
        offer_tenure = st.number_input("New Offer Tenure (Months)", min_value=1, step=1,
                                       value=int(prior.get("tenure_months", 1)))
        offer = {"amount": offer_amount, "tenure_months": int(offer_tenure)}

    if st.button("Submit Decision", disabled=snap.state == ReviewState.SUBMITTING):
        with st.spinner("Submitting..."):
            snap = asyncio.run(machine.decide(decision, comment, offer))
            if snap.error is None:
                asyncio.run(machine.open())
        st.rerun()
    if snap.error is not None:
        st.error(f"Error: {snap.error.display()}")


# ------------------ Layout: Tabs ------------------
state = _session()
tab_dash, tab_submit, tab_review = st.tabs(["Dashboard", "Submit", "Review"])
with tab_dash:
    render_dashboard(state.dashboard)
with tab_submit:
    render_submit(state.submission, state.review)
with tab_review:
    render_review(state.review)
