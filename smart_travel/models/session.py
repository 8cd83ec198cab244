"""
Session management - Per-user profile and conversation history.
"""
import asyncio
import logging
from pydantic import Field
from typing import Optional
from datetime import datetime

from .base import CamelModel
from .profile import UserProfile, ProfilePatch

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class ConversationEntry(CamelModel):
    """A single request/response exchange."""
    request: str = Field(..., description="The user's free-text request")
    response_summary: str = Field(..., description="One-line summary of the plan returned")
    timestamp: datetime = Field(default_factory=datetime.now)


class SessionRecord(CamelModel):
    """Everything the planner remembers about one user."""
    id: str = Field(..., description="User identifier")
    profile: UserProfile = Field(default_factory=UserProfile)
    conversation_history: list[ConversationEntry] = Field(
        default_factory=list,
        description="Most recent exchanges, oldest first"
    )
    created_at: datetime = Field(default_factory=datetime.now)
    last_active_at: datetime = Field(default_factory=datetime.now)

    def touch(self):
        self.last_active_at = datetime.now()


class SessionStore:
    """
    In-memory session store.

    Mutations for the same user id are serialized through a per-user lock;
    different users never wait on each other. Callers always receive copies,
    so state only changes through the store's methods.
    """

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._sessions: dict[str, SessionRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self.history_limit = history_limit

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    def _ensure(self, user_id: str) -> SessionRecord:
        record = self._sessions.get(user_id)
        if record is None:
            record = SessionRecord(id=user_id)
            self._sessions[user_id] = record
            logger.info(f"Created session for user {user_id}")
        record.touch()
        return record

    async def get_or_create(self, user_id: str) -> SessionRecord:
        """Get the user's session, creating an empty one on first contact."""
        async with self._lock_for(user_id):
            return self._ensure(user_id).model_copy(deep=True)

    def get(self, user_id: str) -> Optional[SessionRecord]:
        """Get a session by user id without creating it."""
        record = self._sessions.get(user_id)
        return record.model_copy(deep=True) if record else None

    async def update_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile:
        """Merge a patch into the stored profile and return the merged snapshot."""
        async with self._lock_for(user_id):
            record = self._ensure(user_id)
            record.profile = record.profile.merge(patch)
            return record.profile.model_copy(deep=True)

    async def record_conversation(
        self,
        user_id: str,
        request: str,
        response_summary: str
    ) -> ConversationEntry:
        """Append an exchange, evicting the oldest beyond the history limit."""
        async with self._lock_for(user_id):
            record = self._ensure(user_id)
            entry = ConversationEntry(request=request, response_summary=response_summary)
            record.conversation_history.append(entry)
            overflow = len(record.conversation_history) - self.history_limit
            if overflow > 0:
                del record.conversation_history[:overflow]
            return entry.model_copy()

    def conversation_summary(self, user_id: str, last: int = 3) -> str:
        """Short digest of the most recent exchanges."""
        record = self._sessions.get(user_id)
        if record is None or not record.conversation_history:
            return "No previous conversations"

        lines = []
        for entry in record.conversation_history[-last:]:
            lines.append(
                f'User asked: "{entry.request[:50]}..." | Response: "{entry.response_summary[:50]}..."'
            )
        return "\n".join(lines)

    def list_sessions(self) -> list[SessionRecord]:
        """Snapshot of every known session."""
        return [record.model_copy(deep=True) for record in self._sessions.values()]

    def __len__(self) -> int:
        return len(self._sessions)
