"""Feature engine - turns raw CSV rows into scored, flagged transaction records"""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Sequence, Tuple
from fraudscan.domain.models import RawRecord, CategoryAggregate, FeatureSnapshot, ProcessedRecord
from fraudscan.domain.exceptions import FeatureComputationError


NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(text: str | None) -> float:
    """
    Parse comma-grouped decimal text into a number.

    Reads the longest leading numeric prefix, so trailing units or junk are
    ignored. Never raises: empty, non-numeric and non-finite input all
    resolve to 0.0.

    Example:
        "1,250.50" → 1250.5
        "1000 THB" → 1000.0
        "n/a"      → 0.0
    """
    if not text:
        return 0.0
    match = NUMERIC_PREFIX.match(str(text).replace(",", "").strip())
    if match is None:
        return 0.0
    value = float(match.group())
    return value if math.isfinite(value) else 0.0


def is_valid(record: RawRecord) -> bool:
    """Rows without a business area or activity code are excluded everywhere"""
    return bool(record.business_area) and bool(record.activity_code)


@dataclass(frozen=True)
class SuspicionPolicy:
    """
    Deterministic rule deciding which records go to the fraud scorer.

    A record is a candidate when:
    - its amount is more than `deviation_threshold` times the activity code average, or
    - its business area has more than `high_volume_threshold` transactions in the upload
      and the amount is more than `high_volume_deviation_threshold` times the average

    Thresholds are policy values, not derived from the data.
    """

    deviation_threshold: float = 3.0
    high_volume_threshold: int = 100
    high_volume_deviation_threshold: float = 2.0

    def is_candidate(self, deviation_ratio: float, business_area_frequency: int) -> bool:
        if deviation_ratio > self.deviation_threshold:
            return True
        return (
            business_area_frequency > self.high_volume_threshold
            and deviation_ratio > self.high_volume_deviation_threshold
        )


DEFAULT_POLICY = SuspicionPolicy()


@dataclass(frozen=True)
class FeatureResult:
    """Output of the feature pass"""

    records: Tuple[ProcessedRecord, ...]
    snapshot: FeatureSnapshot

    @property
    def candidate_count(self) -> int:
        return sum(1 for r in self.records if r.is_candidate)


def aggregate(records: Sequence[RawRecord]) -> FeatureSnapshot:
    """
    First pass: per-activity-code totals and per-business-area counts.

    Averages are finalised once all rows are folded in; the returned
    snapshot is read-only.
    """
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    frequency: Dict[str, int] = {}

    for record in records:
        if not is_valid(record):
            continue
        amount = parse_amount(record.amount)
        totals[record.activity_code] = totals.get(record.activity_code, 0.0) + amount
        counts[record.activity_code] = counts.get(record.activity_code, 0) + 1
        frequency[record.business_area] = frequency.get(record.business_area, 0) + 1

    category_stats = {
        code: CategoryAggregate(
            total_amount=totals[code],
            count=count,
            average=totals[code] / count if count > 0 else 0.0,
        )
        for code, count in counts.items()
    }

    return FeatureSnapshot(
        category_stats=MappingProxyType(category_stats),
        business_area_frequency=MappingProxyType(frequency),
    )


def build_records(
    records: Sequence[RawRecord],
    snapshot: FeatureSnapshot,
    policy: SuspicionPolicy = DEFAULT_POLICY,
) -> List[ProcessedRecord]:
    """Second pass: materialise one ProcessedRecord per valid row, keyed by original index"""
    processed = []

    for index, record in enumerate(records):
        if not is_valid(record):
            continue

        amount = parse_amount(record.amount)
        average = snapshot.category_average(record.activity_code)
        # How many times larger than the activity code average
        deviation = amount / average if average != 0 else 0.0
        frequency = snapshot.frequency(record.business_area)

        processed.append(
            ProcessedRecord(
                id=index,
                business_area=record.business_area,
                period=record.period,
                activity_code=record.activity_code,
                amount=amount,
                business_area_frequency=frequency,
                category_average=average,
                deviation_ratio=deviation,
                is_candidate=policy.is_candidate(deviation, frequency),
            )
        )

    return processed


def compute_features(
    records: Sequence[RawRecord],
    policy: SuspicionPolicy = DEFAULT_POLICY,
) -> FeatureResult:
    """
    Main entry point: aggregate, then materialise processed records.

    Malformed rows are dropped silently. An empty input yields an empty
    result; deciding whether that is a "no data" condition is up to the caller.

    Raises:
        FeatureComputationError: On any unexpected internal failure
    """
    try:
        snapshot = aggregate(records)
        processed = build_records(records, snapshot, policy)
    except Exception as e:
        raise FeatureComputationError(f"Feature computation failed: {e}") from e

    return FeatureResult(records=tuple(processed), snapshot=snapshot)
