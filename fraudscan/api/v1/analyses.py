"""POST /v1/analyses - CSV upload and feature computation"""

import time
import logging
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from fraudscan.api.v1.schemas import AnalysisResponse, SummarySchema, ScatterPointSchema
from fraudscan.api.dependencies import (
    get_analysis_session,
    get_request_id,
    get_session_store,
    get_suspicion_policy,
)
from fraudscan.config import settings
from fraudscan.domain.features import SuspicionPolicy, compute_features
from fraudscan.domain.stages import AnalysisSession, Stage
from fraudscan.domain.summary import summarize, scatter_points
from fraudscan.domain.exceptions import InputError, NoDataError, CSVParseError, FeatureComputationError, StageBusyError
from fraudscan.infrastructure.csv_reader import read_transactions, NO_DATA_MESSAGE
from fraudscan.infrastructure.session_store import SessionStore
from fraudscan.infrastructure.observability.metrics import record_upload
from fraudscan.infrastructure.observability.logging import log_features_computed

router = APIRouter()

COMPUTATION_ERROR_MESSAGE = "Error while computing transaction features"


def build_analysis_response(session: AnalysisSession) -> AnalysisResponse:
    summary = summarize(session.processed, session.final_records)
    return AnalysisResponse(
        session_id=session.session_id,
        generation=session.generation,
        stages={stage.value: status.value for stage, status in session.statuses.items()},
        error=session.error,
        info=session.info,
        summary=SummarySchema.model_validate(summary),
        scatter=[
            ScatterPointSchema.model_validate(p)
            for p in scatter_points(session.processed, settings.scatter_sample_size)
        ],
    )


async def ingest_upload(
    session: AnalysisSession,
    file: UploadFile,
    policy: SuspicionPolicy,
    request_id: str,
) -> None:
    """
    Parse the upload and compute features into the session.

    On failure the session keeps no partial data, only the error message.

    Raises:
        HTTPException: 409 if features are being computed, 422 on unusable input, 500 on computation failure
    """
    start_time = time.time()
    content = await file.read()

    try:
        session.begin(Stage.FEATURES)
    except StageBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    try:
        raw_records = read_transactions(content)
        result = compute_features(raw_records, policy)
        if not result.records:
            raise NoDataError(NO_DATA_MESSAGE)

    except InputError as e:
        session.reset(error=str(e))
        record_upload("parse_error" if isinstance(e, CSVParseError) else "no_data")
        logging.warning(f"Unusable upload: {e}", extra={"request_id": request_id, "session_id": session.session_id})
        raise HTTPException(status_code=422, detail=str(e))

    except FeatureComputationError as e:
        session.reset(error=COMPUTATION_ERROR_MESSAGE)
        record_upload("computation_error")
        logging.error(f"Feature computation failed: {e}", extra={"request_id": request_id, "session_id": session.session_id})
        raise HTTPException(status_code=500, detail=COMPUTATION_ERROR_MESSAGE)

    session.load_dataset(raw_records, result)

    duration_ms = (time.time() - start_time) * 1000
    record_upload("processed", len(result.records))
    log_features_computed(
        request_id,
        session.session_id,
        row_count=len(raw_records),
        record_count=len(result.records),
        candidate_count=result.candidate_count,
        duration_ms=duration_ms,
    )


@router.post("/analyses", response_model=AnalysisResponse, status_code=201)
async def create_analysis(
    request: Request,
    file: UploadFile = File(..., description="CSV with BA, monthly, actCode, amount columns"),
    store: SessionStore = Depends(get_session_store),
    policy: SuspicionPolicy = Depends(get_suspicion_policy),
):
    """
    Upload a transaction CSV and compute features.

    Flow:
    1. Parse CSV rows (text fields)
    2. Aggregate per activity code / business area
    3. Compute deviation ratios and flag candidates
    4. Return session id with summary and scatter data
    """
    session = store.create()
    try:
        await ingest_upload(session, file, policy, get_request_id(request))
    except HTTPException:
        store.discard(session.session_id)
        raise

    return build_analysis_response(session)


@router.put("/analyses/{session_id}/dataset", response_model=AnalysisResponse)
async def replace_dataset(
    request: Request,
    file: UploadFile = File(...),
    session: AnalysisSession = Depends(get_analysis_session),
    policy: SuspicionPolicy = Depends(get_suspicion_policy),
):
    """
    Re-upload a CSV into an existing session.

    Scores from the previous dataset are dropped and any scoring or save
    still in flight for it will be ignored when it completes.
    """
    await ingest_upload(session, file, policy, get_request_id(request))
    return build_analysis_response(session)


@router.get("/analyses/{session_id}", response_model=AnalysisResponse)
def get_analysis(session: AnalysisSession = Depends(get_analysis_session)):
    """Current stage statuses, error/info message, summary and scatter data"""
    return build_analysis_response(session)
