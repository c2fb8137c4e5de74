"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


@dataclass(frozen=True)
class RawRecord:
    """One CSV row, fields kept as text"""

    business_area: str
    period: str
    activity_code: str
    amount: str  # comma-grouped decimal text, e.g. "1,250.00"


@dataclass(frozen=True)
class CategoryAggregate:
    """Amount statistics for a single activity code"""

    total_amount: float
    count: int
    average: float


@dataclass(frozen=True)
class FeatureSnapshot:
    """Aggregates built in the first pass over an upload"""

    category_stats: Mapping[str, CategoryAggregate] = field(default_factory=dict)
    business_area_frequency: Mapping[str, int] = field(default_factory=dict)

    def category_average(self, activity_code: str) -> float:
        stat = self.category_stats.get(activity_code)
        return stat.average if stat else 0.0

    def frequency(self, business_area: str) -> int:
        return self.business_area_frequency.get(business_area, 0)


@dataclass(frozen=True)
class ProcessedRecord:
    """Transaction with engineered features"""

    id: int  # position in the original raw sequence
    business_area: str
    period: str
    activity_code: str
    amount: float
    business_area_frequency: int
    category_average: float
    deviation_ratio: float
    is_candidate: bool


@dataclass(frozen=True)
class ScoreResult:
    """Fraud score returned by the external scorer for one record"""

    id: int
    fraud_score: float
    reason: str


class FraudRiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class FinalRecord:
    """Processed record joined with its fraud score"""

    id: int
    business_area: str
    period: str
    activity_code: str
    amount: float
    business_area_frequency: int
    category_average: float
    deviation_ratio: float
    is_candidate: bool
    fraud_score: float
    reason: str
    risk_level: FraudRiskLevel


@dataclass(frozen=True)
class DashboardSummary:
    """Headline counters for an analysis session"""

    total_transactions: int
    candidate_count: int
    total_amount: float
    scored_count: int
    confirmed_high_risk: int


@dataclass(frozen=True)
class ScatterPoint:
    """Single point of the amount-by-activity-code scatter"""

    business_area: str
    activity_code: str
    amount: float
    deviation_ratio: float
    risk: str  # "High" | "Normal"


