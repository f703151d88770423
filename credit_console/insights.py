# credit_console/insights.py
# "Analyze with AI" is a fixed template, not a model call. Keep the thresholds as they are.
from __future__ import annotations

import logging
from numbers import Number
from typing import Any, List, Mapping, Optional, Tuple

from credit_console.presentation import N_A, plain

logger = logging.getLogger(__name__)

STRONG_THRESHOLD = 0.7
MODERATE_THRESHOLD = 0.4


def _score_2dp(app: Mapping[str, Any]) -> Optional[str]:
    score = app.get("score")
    if not isinstance(score, Number) or isinstance(score, bool):
        return None
    return f"{score:.2f}"


def eligibility_summary(app: Mapping[str, Any]) -> str:
    """Three-tier eligibility blurb keyed on the score rounded to two decimals."""
    score = _score_2dp(app)
    decision = app.get("decision")
    text = (
        f"The applicant (ID: {app.get('applicant_id')}) has applied for a loan of "
        f"{plain(app.get('requested_amount'))} AED. "
    )
    # compare the rounded figure, 0.704 reads as 0.70 and lands in the moderate tier
    value = float(score) if score is not None else None
    shown = score or N_A
    if value is not None and value > STRONG_THRESHOLD:
        text += (
            f"With a high confidence score of {shown}, eligibility is strong. "
            f"The AI's initial decision is to '{decision}'. The applicant shows a reliable financial history."
        )
    elif value is not None and value > MODERATE_THRESHOLD:
        text += (
            f"The confidence score is moderate at {shown}. The AI suggests a '{decision}', possibly with "
            "adjusted terms, to mitigate potential risk. Further review of income stability is recommended."
        )
    else:
        text += (
            f"With a low confidence score of {shown}, this application presents a higher risk. "
            f"The AI's decision is '{decision}', indicating a need for significant adjustments or manual intervention."
        )
    logger.debug("eligibility summary for application %s", app.get("application_id"))
    return text


def explain_score(app: Mapping[str, Any]) -> Optional[List[Tuple[str, str]]]:
    features = app.get("features")
    if not features:
        return None
    rows = []
    for key, value in features.items():
        label = str(key).replace("_", " ").title()
        if isinstance(value, Number) and not isinstance(value, bool):
            rows.append((label, f"{value:.4f}"))
        else:
            rows.append((label, str(value)))
    return rows
