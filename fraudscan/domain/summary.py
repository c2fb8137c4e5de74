"""Dashboard data: headline counters and scatter sample"""

from typing import List, Sequence
from fraudscan.domain.models import ProcessedRecord, FinalRecord, DashboardSummary, ScatterPoint
from fraudscan.domain.merging import HIGH_RISK_SCORE


def summarize(processed: Sequence[ProcessedRecord], final: Sequence[FinalRecord]) -> DashboardSummary:
    return DashboardSummary(
        total_transactions=len(processed),
        candidate_count=sum(1 for r in processed if r.is_candidate),
        total_amount=sum(r.amount for r in processed),
        scored_count=len(final),
        confirmed_high_risk=sum(1 for r in final if r.fraud_score > HIGH_RISK_SCORE),
    )


def scatter_points(processed: Sequence[ProcessedRecord], limit: int = 500) -> List[ScatterPoint]:
    """Highest-amount records for the amount/activity code scatter (bubble size = deviation)"""
    top = sorted(processed, key=lambda r: r.amount, reverse=True)[:limit]
    return [
        ScatterPoint(
            business_area=r.business_area,
            activity_code=r.activity_code,
            amount=r.amount,
            deviation_ratio=r.deviation_ratio,
            risk="High" if r.is_candidate else "Normal",
        )
        for r in top
    ]
