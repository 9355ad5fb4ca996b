"""Session and status models for tripreel."""

import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, List, Set

from models.video import Candidate
from utils.errors import InputError


class SessionStatus(Enum):
    """Status enumeration for a planning session."""
    IDLE = "idle"
    SEARCHING = "searching"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass
class PlannerSession:
    """State owned by one page load: prompt, results, selection and itinerary."""

    session_id: str
    prompt: str = ""
    candidates: List[Candidate] = field(default_factory=list)
    selected: Set[int] = field(default_factory=set)
    status: SessionStatus = SessionStatus.IDLE
    error: Optional[str] = None
    itinerary: str = ""
    destination: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def loading(self) -> bool:
        return self.status in (SessionStatus.SEARCHING, SessionStatus.GENERATING)

    def reset_for_search(self, prompt: str) -> None:
        """Clear everything a previous search produced."""
        self.prompt = prompt
        self.candidates = []
        self.selected = set()
        self.itinerary = ""
        self.destination = None
        self.error = None

    def toggle_selection(self, index: int) -> Set[int]:
        """Add the index if absent, remove it if present."""
        if not any(c.sequence_index == index for c in self.candidates):
            raise InputError(f"No video with index {index} in current results")

        updated = set(self.selected)
        if index in updated:
            updated.remove(index)
        else:
            updated.add(index)
        self.selected = updated
        self.updated_at = datetime.now()
        return self.selected

    def selected_candidates(self) -> List[Candidate]:
        return [c for c in self.candidates if c.sequence_index in self.selected]

    def update_status(self, new_status: SessionStatus, error: Optional[str] = None) -> None:
        """Update session status and timestamp."""
        self.status = new_status
        self.updated_at = datetime.now()
        if error:
            self.error = error

    def to_dict(self) -> dict:
        """Convert session to a JSON-friendly dictionary."""
        return {
            'session_id': self.session_id,
            'prompt': self.prompt,
            'videos': [c.to_dict() for c in self.candidates],
            'selected': sorted(self.selected),
            'status': self.status.value,
            'loading': self.loading,
            'error': self.error,
            'itinerary': self.itinerary,
            'destination': self.destination,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }


class SessionStore:
    """In-memory sessions, least recently used first, capped in size and age."""

    def __init__(
        self,
        max_sessions: int = 200,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: "OrderedDict[str, PlannerSession]" = OrderedDict()
        self._last_used = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self) -> PlannerSession:
        """Start a new session, evicting expired and least recently used ones."""
        self.prune()
        while len(self._sessions) >= self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            self._last_used.pop(evicted_id, None)

        session = PlannerSession(session_id=uuid.uuid4().hex)
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self.clock()
        return session

    def get(self, session_id: str) -> Optional[PlannerSession]:
        """Look up a live session and mark it as recently used."""
        self.prune()
        session = self._sessions.get(session_id)
        if session is None:
            return None
        self._sessions.move_to_end(session_id)
        self._last_used[session_id] = self.clock()
        return session

    def prune(self) -> int:
        """Drop sessions idle for longer than the TTL, except ones mid-flow."""
        cutoff = self.clock() - self.ttl_seconds
        expired = [
            session_id for session_id, session in self._sessions.items()
            if self._last_used[session_id] < cutoff and not session.loading
        ]
        for session_id in expired:
            del self._sessions[session_id]
            del self._last_used[session_id]
        return len(expired)
