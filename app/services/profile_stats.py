from __future__ import annotations

import math
import secrets
import string
from datetime import datetime, timezone
from typing import Iterable

from app.schemas.profile import MAX_HISTORY, MAX_RANKED_LABELS, AnalysisRecord, ImprovementTrend, UserStats

_ID_ALPHABET = string.ascii_lowercase + string.digits
TREND_WINDOW = 3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def new_record_id(now: datetime) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"{int(now.timestamp() * 1000)}-{suffix}"


def new_analysis_record(
    *,
    job_title: str,
    score: int,
    now: datetime,
    company_name: str | None = None,
    job_category: str | None = None,
    strengths: Iterable[str] | None = None,
    weaknesses: Iterable[str] | None = None,
) -> AnalysisRecord:
    return AnalysisRecord(
        id=new_record_id(now),
        date=iso_timestamp(now),
        job_title=job_title,
        company_name=company_name or "Not specified",
        job_category=job_category or "Not specified",
        score=score,
        strengths=list(strengths or []),
        weaknesses=list(weaknesses or []),
    )


def improvement_trend(scores: list[int]) -> ImprovementTrend:
    if len(scores) < TREND_WINDOW:
        return "not-enough-data"
    a, b, c = scores[-TREND_WINDOW:]
    if a <= b <= c and a < c:
        return "improving"
    if a >= b >= c and a > c:
        return "declining"
    return "stable"


def _one_decimal_half_up(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _merge_counts(counts: dict[str, int], labels: Iterable[str]) -> dict[str, int]:
    merged = dict(counts)
    for label in labels:
        merged[label] = merged.get(label, 0) + 1
    return merged


def _top_labels(counts: dict[str, int], limit: int = MAX_RANKED_LABELS) -> list[str]:
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [label for label, _count in ranked[:limit]]


def _in_month(record: AnalysisRecord, now: datetime) -> bool:
    moment = _parse_timestamp(record.date)
    return moment is not None and moment.year == now.year and moment.month == now.month


def apply_analysis(stats: UserStats, record: AnalysisRecord, now: datetime) -> UserStats:
    """Fold one analysis into ``stats`` and return the new stats; the input is left untouched.

    History is a FIFO window of ``MAX_HISTORY`` records. The month count, the
    average and the trend are computed over that window, while the total, the
    highest score and the strength/weakness tables are lifetime values.
    """
    now = now.astimezone(timezone.utc)
    history = [*stats.analyses_history, record]
    if len(history) > MAX_HISTORY:
        history = history[len(history) - MAX_HISTORY:]

    scores = [item.score for item in history]
    strength_counts = _merge_counts(stats.strength_counts, record.strengths)
    weakness_counts = _merge_counts(stats.weakness_counts, record.weaknesses)

    return UserStats(
        total_analyses=stats.total_analyses + 1,
        highest_match_score=max(stats.highest_match_score, record.score),
        average_match_score=_one_decimal_half_up(sum(scores) / len(scores)),
        analyses_this_month=sum(1 for item in history if _in_month(item, now)),
        analyses_history=history,
        top_strengths=_top_labels(strength_counts),
        common_weaknesses=_top_labels(weakness_counts),
        strength_counts=strength_counts,
        weakness_counts=weakness_counts,
        improvement_trend=improvement_trend(scores),
        last_active=iso_timestamp(now),
    )
