"""Join scorer output back onto processed records"""

from typing import Dict, List, Sequence
from fraudscan.domain.models import ProcessedRecord, ScoreResult, FinalRecord, FraudRiskLevel

HIGH_RISK_SCORE = 0.7


def risk_level(fraud_score: float) -> FraudRiskLevel:
    """
    Map a fraud score to a display band.

    Bands:
    - > 0.8: Critical
    - > 0.7: High (counted as "confirmed high risk")
    - > 0.5: Medium
    - otherwise: Low
    """
    if fraud_score > 0.8:
        return FraudRiskLevel.CRITICAL
    elif fraud_score > HIGH_RISK_SCORE:
        return FraudRiskLevel.HIGH
    elif fraud_score > 0.5:
        return FraudRiskLevel.MEDIUM
    else:
        return FraudRiskLevel.LOW


def merge_results(processed: Sequence[ProcessedRecord], scores: Sequence[ScoreResult]) -> List[FinalRecord]:
    """
    Inner-join scores onto processed records by id, highest fraud score first.

    The scorer may answer for a subset, in any order, and may mention ids
    that do not exist; only ids present on both sides are kept. If an id is
    scored twice the first answer wins. Equal scores keep processed-record order.
    """
    score_by_id: Dict[int, ScoreResult] = {}
    for score in scores:
        score_by_id.setdefault(score.id, score)

    merged = []
    for record in processed:
        score = score_by_id.get(record.id)
        if score is None:
            continue
        merged.append(
            FinalRecord(
                id=record.id,
                business_area=record.business_area,
                period=record.period,
                activity_code=record.activity_code,
                amount=record.amount,
                business_area_frequency=record.business_area_frequency,
                category_average=record.category_average,
                deviation_ratio=record.deviation_ratio,
                is_candidate=record.is_candidate,
                fraud_score=score.fraud_score,
                reason=score.reason,
                risk_level=risk_level(score.fraud_score),
            )
        )

    merged.sort(key=lambda r: r.fraud_score, reverse=True)
    return merged
