# credit_console/aggregation.py
# Pure transforms: transactions -> monthly repayment series, summary -> decision distribution.
from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Number
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd

AMOUNT_KEYS = ("amount", "amount_aed")
DISTRIBUTION_KEYS = ("approved", "rejected", "offers")


@dataclass(frozen=True)
class MonthlyTotals:
    months: List[str]
    amounts: List[float]


@dataclass(frozen=True)
class Distribution:
    values: List[float]
    total: float

    @property
    def empty(self) -> bool:
        return self.total == 0


# ---- Helpers ----
def _month_key(value: Any) -> Optional[str]:
    """UTC ``YYYY-MM`` of a timestamp, or None when it can't be read."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        if isinstance(value, Number):
            ts = pd.to_datetime(value, unit="ms", utc=True)
        else:
            ts = pd.Timestamp(value)
            if ts is not pd.NaT:
                # naive timestamps are taken as UTC
                ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is pd.NaT or pd.isna(ts):
        return None
    return ts.strftime("%Y-%m")


def _amount(row: Mapping[str, Any]) -> Optional[float]:
    for key in AMOUNT_KEYS:
        v = row.get(key)
        if v is None or isinstance(v, bool):
            continue
        try:
            f = float(v)
        except (TypeError, ValueError):
            return None
        return None if math.isnan(f) else f
    return None


# ---- Public ----
def monthly_totals(transactions: Optional[Iterable[Any]]) -> Optional[MonthlyTotals]:
    """Sum transaction amounts per calendar month (UTC), oldest month first.

    Entries without a usable timestamp or amount are dropped. Returns None when
    nothing is left, so the caller can show an empty state instead of an
    empty chart.
    """
    records = []
    for row in transactions or []:
        if not isinstance(row, Mapping):
            continue
        month = _month_key(row.get("timestamp"))
        amount = _amount(row)
        if month is None or amount is None:
            continue
        records.append({"month": month, "amount": amount})

    if not records:
        return None

    df = pd.DataFrame.from_records(records)
    grouped = df.groupby("month", sort=True)["amount"].sum()
    return MonthlyTotals(
        months=[str(m) for m in grouped.index],
        amounts=[float(a) for a in grouped.tolist()],
    )


def _count(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, Number):
        return 0 if math.isnan(value) else value
    try:
        f = float(str(value).strip())
    except ValueError:
        return 0
    if math.isnan(f):
        return 0
    return int(f) if f.is_integer() else f


def distribution(summary: Optional[Mapping[str, Any]]) -> Distribution:
    """Approved/rejected/offer counts; missing or non-numeric counts are 0."""
    summary = summary or {}
    values = [_count(summary.get(k)) for k in DISTRIBUTION_KEYS]
    return Distribution(values=values, total=sum(values))
