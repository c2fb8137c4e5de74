"""Candidate selection for the external fraud scorer"""

from typing import List, Sequence
from fraudscan.domain.models import ProcessedRecord

MAX_CANDIDATES = 30


def select_candidates(records: Sequence[ProcessedRecord], limit: int = MAX_CANDIDATES) -> List[ProcessedRecord]:
    """
    Pick the most deviating candidates to submit for scoring.

    Only flagged records are considered, ordered by deviation ratio
    (highest first) and capped at `limit` to bound the cost of the
    scorer call. Equal ratios keep their input order.
    """
    candidates = [r for r in records if r.is_candidate]
    candidates.sort(key=lambda r: r.deviation_ratio, reverse=True)
    return candidates[:limit]
