"""Typed failures raised by the discovery core."""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for recoverable discovery failures."""


class InvalidSelection(DiscoveryError):
    """Technique input could not be resolved to any known technique."""

    def __init__(self, user_input: str, guidance: str) -> None:
        super().__init__(guidance)
        self.user_input = user_input
        self.guidance = guidance


class NotFound(DiscoveryError):
    """An idea or workflow step id does not exist."""

    def __init__(self, kind: str, identifier: str, message: str | None = None) -> None:
        super().__init__(message or f"No {kind} found with ID: {identifier}")
        self.kind = kind
        self.identifier = identifier


class SessionNotFound(DiscoveryError):
    """Session id is unknown or belongs to another user."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found or access denied")
        self.session_id = session_id


class SessionAlreadyCompleted(DiscoveryError):
    """A completed session was asked to accept more work."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session is already completed")
        self.session_id = session_id


class UnknownCommand(DiscoveryError):
    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown command: {command}")
        self.command = command


class UpstreamAgentFailure(DiscoveryError):
    """The conversational agent call failed; nothing was committed."""


__all__ = [
    "DiscoveryError",
    "InvalidSelection",
    "NotFound",
    "SessionNotFound",
    "SessionAlreadyCompleted",
    "UnknownCommand",
    "UpstreamAgentFailure",
]
