"""In-memory registry of analysis sessions"""

import uuid
from collections import OrderedDict
from fraudscan.domain.stages import AnalysisSession
from fraudscan.domain.exceptions import SessionNotFoundError
from fraudscan.config import settings


class SessionStore:
    """Keeps the most recent analysis sessions, evicting the oldest when full"""

    def __init__(self, max_sessions: int | None = None):
        self.max_sessions = max_sessions or settings.max_sessions
        self._sessions: "OrderedDict[str, AnalysisSession]" = OrderedDict()

    def create(self) -> AnalysisSession:
        session = AnalysisSession(session_id=str(uuid.uuid4()))
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session

    def get(self, session_id: str) -> AnalysisSession:
        """
        Raises:
            SessionNotFoundError: Unknown or evicted session id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Analysis session {session_id} not found")
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


session_store = SessionStore()
