"""POST /v1/analyses/{session_id}/save - persist scored results"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from fraudscan.api.v1.schemas import SaveResponse
from fraudscan.api.v1.scoring import SUPERSEDED_MESSAGE
from fraudscan.api.dependencies import get_analysis_session, get_supabase_client, get_request_id
from fraudscan.domain.stages import AnalysisSession, Stage, StageStatus
from fraudscan.domain.exceptions import ConfigurationError, PersistenceError, StageBusyError
from fraudscan.infrastructure.clients.supabase import SupabaseClient
from fraudscan.infrastructure.observability.metrics import persistence_failure_counter

router = APIRouter()

PERSISTENCE_ERROR_MESSAGE = "Error saving results to Supabase: check the URL and key"


@router.post("/analyses/{session_id}/save", response_model=SaveResponse)
async def save_analysis(
    request: Request,
    session: AnalysisSession = Depends(get_analysis_session),
    supabase_client: SupabaseClient = Depends(get_supabase_client),
):
    """
    Store the scored results as flagged detections.

    The whole batch is inserted in one request. Saving the same results
    twice is refused until a new scoring run or upload.
    """
    log_extra = {"request_id": get_request_id(request), "session_id": session.session_id}

    records = session.final_records
    if not records:
        raise HTTPException(status_code=400, detail="No scored results to save")

    if session.status(Stage.PERSISTENCE) is StageStatus.SUCCEEDED:
        raise HTTPException(status_code=409, detail="Results already saved")

    try:
        generation = session.begin(Stage.PERSISTENCE)
    except StageBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    scores_generation = session.scores_generation

    try:
        saved = await supabase_client.save_results(records)

    except ConfigurationError as e:
        session.fail(Stage.PERSISTENCE, generation, str(e), scores_generation)
        logging.error(f"Persistence not configured: {e}", extra=log_extra)
        raise HTTPException(status_code=500, detail=str(e))

    except PersistenceError as e:
        persistence_failure_counter.inc()
        session.fail(Stage.PERSISTENCE, generation, PERSISTENCE_ERROR_MESSAGE, scores_generation)
        logging.error(f"Persistence error: {e}", extra=log_extra)
        raise HTTPException(status_code=503, detail=PERSISTENCE_ERROR_MESSAGE)

    except Exception as e:
        session.fail(Stage.PERSISTENCE, generation, PERSISTENCE_ERROR_MESSAGE, scores_generation)
        logging.error(f"Unexpected error: {e}", extra=log_extra)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not session.succeed(Stage.PERSISTENCE, generation, scores_generation=scores_generation):
        logging.warning("Ignoring completion of superseded save", extra=log_extra)
        raise HTTPException(status_code=409, detail=SUPERSEDED_MESSAGE)

    logging.info("Results saved", extra={**log_extra, "step": "persistence_complete", "saved_count": len(saved)})
    return SaveResponse(session_id=session.session_id, saved_count=len(saved))
