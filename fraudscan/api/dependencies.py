"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Request
from fraudscan.config import settings
from fraudscan.domain.exceptions import SessionNotFoundError
from fraudscan.domain.features import SuspicionPolicy
from fraudscan.domain.stages import AnalysisSession
from fraudscan.infrastructure.clients.gemini import GeminiClient
from fraudscan.infrastructure.clients.supabase import SupabaseClient
from fraudscan.infrastructure.session_store import SessionStore, session_store


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_store() -> SessionStore:
    """Provide the process-wide analysis session store"""
    return session_store


def get_analysis_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> AnalysisSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def get_suspicion_policy() -> SuspicionPolicy:
    """Suspicion thresholds from configuration"""
    return SuspicionPolicy(
        deviation_threshold=settings.deviation_threshold,
        high_volume_threshold=settings.high_volume_threshold,
        high_volume_deviation_threshold=settings.high_volume_deviation_threshold,
    )


def get_gemini_client() -> GeminiClient:
    """Provide fraud scorer client instance"""
    return GeminiClient()


def get_supabase_client() -> SupabaseClient:
    """Provide persistence client instance"""
    return SupabaseClient()
