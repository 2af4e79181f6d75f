"""Simple in-memory store for discovery sessions, transcripts and context."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, DefaultDict, Dict, List, Optional

from .schemas import (
    Command,
    DiscoveryContext,
    DiscoveryPhase,
    DiscoverySession,
    Message,
    MessageType,
    utcnow,
)


class SessionStore:
    """Persist sessions and their messages so the UI can rebuild context.

    Stands in for the relational store: lookups are scoped to the owning
    user, messages come back in creation order and sessions newest first.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, DiscoverySession] = {}
        self._messages: DefaultDict[str, List[Message]] = defaultdict(list)
        self._contexts: Dict[str, DiscoveryContext] = {}

    def create_session(
        self,
        user_id: str,
        command: Command | None,
        phase: DiscoveryPhase,
        *,
        agent_session_id: str,
        title: str | None = None,
        problem_statement: str | None = None,
        metadata: Dict[str, Any] | None = None,
    ) -> DiscoverySession:
        session = DiscoverySession(
            id=uuid.uuid4().hex,
            user_id=user_id,
            agent_session_id=agent_session_id,
            command=command,
            title=title,
            problem_statement=problem_statement,
            current_phase=phase,
            metadata=dict(metadata or {}),
        )
        self._sessions[session.id] = session
        return session

    def get_session(self, session_id: str, user_id: str) -> Optional[DiscoverySession]:
        """Return the session only when it belongs to *user_id*."""

        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def update_session(self, session_id: str, **changes: Any) -> DiscoverySession:
        """Apply field changes and bump ``updated_at``."""

        session = self._sessions[session_id]
        updated = session.model_copy(update={**changes, "updated_at": utcnow()})
        self._sessions[session_id] = updated
        return updated

    def list_sessions(self, user_id: str) -> List[DiscoverySession]:
        owned = [session for session in self._sessions.values() if session.user_id == user_id]
        return sorted(owned, key=lambda session: session.created_at, reverse=True)

    def delete_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._messages.pop(session_id, None)
        self._contexts.pop(session_id, None)

    def append_message(
        self,
        session_id: str,
        message_type: MessageType,
        content: str,
        phase: str,
        technique: str | None = None,
    ) -> Message:
        message = Message(
            id=uuid.uuid4().hex,
            session_id=session_id,
            type=message_type,
            content=content,
            phase=phase,
            technique=technique,
        )
        self._messages[session_id].append(message)
        return message

    def list_messages(self, session_id: str) -> List[Message]:
        return list(self._messages.get(session_id, []))

    def context_for(self, session_id: str) -> DiscoveryContext:
        """Return the live discovery context, creating an empty one on first use."""

        context = self._contexts.get(session_id)
        if context is None:
            context = DiscoveryContext()
            self._contexts[session_id] = context
        return context

    def save_context(self, session_id: str, context: DiscoveryContext) -> None:
        self._contexts[session_id] = context


session_store = SessionStore()
