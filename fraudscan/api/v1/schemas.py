"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional
from fraudscan.domain.models import FraudRiskLevel


class SummarySchema(BaseModel):
    """Headline counters for the dashboard"""

    model_config = ConfigDict(from_attributes=True)

    total_transactions: int
    candidate_count: int
    total_amount: float
    scored_count: int
    confirmed_high_risk: int


class ScatterPointSchema(BaseModel):
    """Point of the amount-by-activity-code scatter"""

    model_config = ConfigDict(from_attributes=True)

    business_area: str
    activity_code: str
    amount: float
    deviation_ratio: float
    risk: str


class FinalRecordSchema(BaseModel):
    """Scored transaction row of the results table"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    business_area: str
    period: str
    activity_code: str
    amount: float
    business_area_frequency: int
    category_average: float
    deviation_ratio: float
    fraud_score: float
    reason: str
    risk_level: FraudRiskLevel


class AnalysisResponse(BaseModel):
    """Response for POST /v1/analyses and GET /v1/analyses/{session_id}"""

    session_id: str
    generation: int
    stages: Dict[str, str]
    error: Optional[str] = None
    info: Optional[str] = None
    summary: SummarySchema
    scatter: List[ScatterPointSchema]


class ScoreResponse(BaseModel):
    """Response for POST /v1/analyses/{session_id}/score"""

    session_id: str
    submitted_count: int
    scored_count: int
    info: Optional[str] = None
    results: List[FinalRecordSchema]


class ResultsResponse(BaseModel):
    """Response for GET /v1/analyses/{session_id}/results"""

    session_id: str
    results: List[FinalRecordSchema]


class SaveResponse(BaseModel):
    """Response for POST /v1/analyses/{session_id}/save"""

    session_id: str
    saved_count: int
