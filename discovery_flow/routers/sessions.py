"""Discovery session endpoints for the Project Assist backend."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response

from ..commands import list_command_definitions
from ..schemas import (
    CommandDefinition,
    ContinueSessionRequest,
    EndSessionResponse,
    FacilitationState,
    Idea,
    IdeaCluster,
    Message,
    MessageRequest,
    PhaseUpdateRequest,
    PhaseUpdateResponse,
    ProblemStatementRequest,
    SessionReply,
    SessionStartResponse,
    SessionStatusResponse,
    SessionSummary,
    StartSessionRequest,
    TechniqueDefinition,
)
from ..sessions import DiscoverySessionManager
from ..techniques import list_technique_definitions


router = APIRouter(prefix="/discovery", tags=["discovery"])

ANONYMOUS_USER = "anonymous"


def get_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    """Identify the caller from the ``X-User-Id`` header."""

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return ANONYMOUS_USER


def get_manager(user_id: str = Depends(get_user_id)) -> DiscoverySessionManager:
    return DiscoverySessionManager(user_id)


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}


@router.get("/techniques", response_model=list[TechniqueDefinition])
async def list_techniques_endpoint() -> list[TechniqueDefinition]:
    """Expose the brainstorming technique catalog to the UI."""

    return list_technique_definitions()


@router.get("/commands", response_model=list[CommandDefinition])
async def list_commands_endpoint() -> list[CommandDefinition]:
    return list_command_definitions()


@router.post("/sessions/start", response_model=SessionStartResponse)
async def start_with_command(
    payload: StartSessionRequest,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> SessionStartResponse:
    """Start a session from a command such as ``brainstorm`` or ``pm``."""

    return await manager.start_session_with_command(payload.command, payload.args, payload.title)


@router.post("/sessions", response_model=SessionStartResponse)
async def start_discovery(
    payload: ProblemStatementRequest,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> SessionStartResponse:
    """Start a full discovery session from a problem statement."""

    try:
        return await manager.start_session(payload.problem_statement, payload.title)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/sessions/continue", response_model=SessionReply)
async def continue_discovery(
    payload: ContinueSessionRequest,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> SessionReply:
    return await manager.continue_session(payload.session_id, payload.message)


@router.post("/sessions/{session_id}/message", response_model=SessionReply)
async def send_message(
    session_id: str,
    payload: MessageRequest,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> SessionReply:
    """Send one user message to the session's agent."""

    return await manager.continue_session(session_id, payload.message)


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(manager: DiscoverySessionManager = Depends(get_manager)) -> list[SessionSummary]:
    """Return the caller's sessions, newest first."""

    return manager.list_sessions()


@router.get("/sessions/{session_id}", response_model=SessionStatusResponse)
async def get_session(
    session_id: str,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> SessionStatusResponse:
    return manager.get_session_status(session_id)


@router.get("/sessions/{session_id}/messages", response_model=list[Message])
async def list_messages(
    session_id: str,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> list[Message]:
    """Return the transcript in the order it was written."""

    return manager.list_messages(session_id)


@router.get("/sessions/{session_id}/ideas", response_model=list[Idea])
async def list_ideas(
    session_id: str,
    category: Optional[str] = None,
    tags: Optional[list[str]] = Query(default=None),
    source: Optional[str] = None,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> list[Idea]:
    return manager.list_ideas(session_id, category, tags, source)


@router.get("/sessions/{session_id}/clusters", response_model=list[IdeaCluster])
async def list_clusters(
    session_id: str,
    max_clusters: int = Query(default=5, ge=1, le=8),
    manager: DiscoverySessionManager = Depends(get_manager),
) -> list[IdeaCluster]:
    """Group the session's ideas into thematic clusters."""

    return manager.cluster_ideas(session_id, max_clusters)


@router.get("/sessions/{session_id}/facilitation", response_model=FacilitationState)
async def get_facilitation(
    session_id: str,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> FacilitationState:
    return manager.facilitation_state(session_id)


@router.post("/sessions/{session_id}/phase", response_model=PhaseUpdateResponse)
async def update_phase(
    session_id: str,
    payload: PhaseUpdateRequest,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> PhaseUpdateResponse:
    """Record a phase change requested by the client."""

    return manager.update_phase(session_id, payload.phase)


@router.post("/sessions/{session_id}/end", response_model=EndSessionResponse)
async def end_session(
    session_id: str,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> EndSessionResponse:
    return manager.close_session(session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    manager: DiscoverySessionManager = Depends(get_manager),
) -> Response:
    manager.delete_session(session_id)
    return Response(status_code=204)
