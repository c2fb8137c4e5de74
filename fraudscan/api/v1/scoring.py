"""POST /v1/analyses/{session_id}/score - fraud scoring of top candidates"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from fraudscan.api.v1.schemas import ScoreResponse, ResultsResponse, FinalRecordSchema
from fraudscan.api.dependencies import get_analysis_session, get_gemini_client, get_request_id
from fraudscan.config import settings
from fraudscan.domain.selection import select_candidates
from fraudscan.domain.stages import AnalysisSession, Stage
from fraudscan.domain.exceptions import ConfigurationError, ScorerAPIError, StageBusyError
from fraudscan.infrastructure.clients.gemini import GeminiClient
from fraudscan.infrastructure.observability.metrics import (
    record_candidates,
    scorer_failure_counter,
    scorer_latency_histogram,
)
from fraudscan.infrastructure.observability.logging import log_scoring_complete

router = APIRouter()

NOTHING_SUSPICIOUS_MESSAGE = "No transactions met the suspicion rule; nothing was sent for scoring"
NO_CONFIRMED_RISKS_MESSAGE = "No significant suspicious transactions found, or the scorer returned no data"
SCORER_ERROR_MESSAGE = "Error connecting to the Gemini API: check the API key in the environment"
SUPERSEDED_MESSAGE = "Dataset or scores changed while the request was in flight; its result was discarded"


@router.post("/analyses/{session_id}/score", response_model=ScoreResponse)
async def score_analysis(
    request: Request,
    session: AnalysisSession = Depends(get_analysis_session),
    gemini_client: GeminiClient = Depends(get_gemini_client),
):
    """
    Send the most deviating candidates to the fraud scorer.

    Flow:
    1. Select up to max_candidates flagged records by deviation ratio
    2. Skip the scorer entirely when there are none
    3. Call the scorer and store its results on the session
    4. Return the merged results, highest fraud score first
    """
    start_time = time.time()
    request_id = get_request_id(request)
    log_extra = {"request_id": request_id, "session_id": session.session_id}

    if not session.processed:
        raise HTTPException(status_code=400, detail="No processed transactions; upload a CSV first")

    try:
        generation = session.begin(Stage.SCORING)
    except StageBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    candidates = select_candidates(session.processed, settings.max_candidates)
    record_candidates(len(candidates), settings.max_candidates)

    try:
        if candidates:
            with scorer_latency_histogram.time():
                scores = await gemini_client.score_transactions(candidates)
        else:
            scores = []

    except ConfigurationError as e:
        session.fail(Stage.SCORING, generation, str(e))
        logging.error(f"Scorer not configured: {e}", extra=log_extra)
        raise HTTPException(status_code=500, detail=str(e))

    except ScorerAPIError as e:
        scorer_failure_counter.inc()
        session.fail(Stage.SCORING, generation, SCORER_ERROR_MESSAGE)
        logging.error(f"Scorer API error: {e}", extra=log_extra)
        raise HTTPException(status_code=503, detail=SCORER_ERROR_MESSAGE)

    except Exception as e:
        session.fail(Stage.SCORING, generation, SCORER_ERROR_MESSAGE)
        logging.error(f"Unexpected error: {e}", extra=log_extra)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not candidates:
        info = NOTHING_SUSPICIOUS_MESSAGE
    elif not scores:
        info = NO_CONFIRMED_RISKS_MESSAGE
    else:
        info = None

    if not session.record_scores(generation, scores, info):
        logging.warning("Discarding superseded scoring result", extra=log_extra)
        raise HTTPException(status_code=409, detail=SUPERSEDED_MESSAGE)

    results = session.final_records
    log_scoring_complete(
        request_id,
        session.session_id,
        submitted=len(candidates),
        scored=len(results),
        duration_ms=(time.time() - start_time) * 1000,
    )

    return ScoreResponse(
        session_id=session.session_id,
        submitted_count=len(candidates),
        scored_count=len(results),
        info=info,
        results=[FinalRecordSchema.model_validate(r) for r in results],
    )


@router.get("/analyses/{session_id}/results", response_model=ResultsResponse)
def get_results(session: AnalysisSession = Depends(get_analysis_session)):
    """
    Scored transactions sorted by fraud score (highest first).

    Returns:
        Empty list until scoring has run for the current dataset
    """
    return ResultsResponse(
        session_id=session.session_id,
        results=[FinalRecordSchema.model_validate(r) for r in session.final_records],
    )
