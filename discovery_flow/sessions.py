"""Discovery session lifecycle: start, continue, phase changes, close."""

from __future__ import annotations

import logging
import re
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .agent import HistoryEntry, build_runner
from .commands import COMMANDS, HELP_RESPONSE, AgentRole, resolve_command
from .config import get_settings
from .errors import SessionAlreadyCompleted, SessionNotFound, UpstreamAgentFailure
from .ideas import IdeaLedger, cluster_ideas
from .memory import SessionStore, session_store
from .registry import Runner, RunnerRegistry
from .schemas import (
    Command,
    DiscoveryContext,
    DiscoveryPhase,
    DiscoverySession,
    EndSessionResponse,
    FacilitationState,
    Idea,
    IdeaCluster,
    Message,
    MessageType,
    PhaseUpdateResponse,
    SessionReply,
    SessionStartResponse,
    SessionStatus,
    SessionStatusResponse,
    SessionSummary,
    utcnow,
)

logger = logging.getLogger(__name__)

RunnerFactory = Callable[..., Runner]

runner_registry = RunnerRegistry(get_settings().runner_cache_size)

COORDINATOR_GREETING = (
    "Hi! I'm your discovery coordinator. I'll help you take a raw idea to a structured plan, "
    "starting with a guided brainstorm.\n\nWhat idea would you like to explore?"
)
COORDINATOR_NEXT_STEPS = ["Answer the context questions", "Choose your approach", "Start brainstorming"]

HELP_PHASE = "help"

NEXT_STEPS: Dict[DiscoveryPhase, List[str]] = {
    DiscoveryPhase.SETUP: ["Continue with brainstorming", "Select a technique like SCAMPER or Six Thinking Hats"],
    DiscoveryPhase.BRAINSTORMING: [
        "Try SCAMPER technique",
        "Use Six Thinking Hats",
        "Create a mind map",
        "Move to prioritization",
    ],
    DiscoveryPhase.ANALYSIS: ["Research the target market", "Map competitors and alternatives", "Move to prioritization"],
    DiscoveryPhase.PRIORITIZATION: ["Score and rank ideas", "Group ideas into clusters", "Move to technical architecture"],
    DiscoveryPhase.ARCHITECTURE: ["Define technical stack", "Plan implementation", "Move to validation"],
    DiscoveryPhase.VALIDATION: ["Review risks and feasibility", "Generate final report", "Complete discovery"],
    DiscoveryPhase.COMPLETED: ["Review your ideas and clusters", "Start a new discovery session"],
}
DEFAULT_NEXT_STEPS = ["Continue the discovery process"]

_SENTENCE_BREAK = re.compile(r"(?<![0-9])([.!?])[ \t]+(?=[A-Z])")
_NUMBERED_ITEM = re.compile(r"(?<=\S)[ \t]+(\d+\.[ \t])")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def format_response(text: str) -> str:
    """Tidy agent output for display; the wording is never changed."""

    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _SENTENCE_BREAK.sub(r"\1\n\n", cleaned)
    cleaned = _NUMBERED_ITEM.sub(r"\n\1", cleaned)
    cleaned = _EXTRA_NEWLINES.sub("\n\n", cleaned)
    return cleaned.strip()


def next_steps_for_phase(phase: DiscoveryPhase | str) -> List[str]:
    """Advisory next steps for *phase*; unknown phases get a generic list."""

    try:
        resolved = DiscoveryPhase(phase)
    except ValueError:
        return list(DEFAULT_NEXT_STEPS)
    return list(NEXT_STEPS.get(resolved, DEFAULT_NEXT_STEPS))


def _merge_unique(existing: Sequence[str], extra: Iterable[str]) -> List[str]:
    merged = list(existing)
    for item in extra:
        if item not in merged:
            merged.append(item)
    return merged


def _today() -> str:
    return utcnow().strftime("%Y-%m-%d")


class DiscoverySessionManager:
    """Run discovery sessions for one user.

    Sessions are persisted through a :class:`SessionStore`; live runners are
    cached in a :class:`RunnerRegistry` keyed by session id and rebuilt from
    the stored transcript when missing.
    """

    def __init__(
        self,
        user_id: str,
        store: Optional[SessionStore] = None,
        registry: Optional[RunnerRegistry] = None,
        runner_factory: Optional[RunnerFactory] = None,
    ) -> None:
        if not user_id or not user_id.strip():
            raise ValueError("A user id is required to manage discovery sessions")
        self.user_id = user_id.strip()
        self.store = store if store is not None else session_store
        self.registry = registry if registry is not None else runner_registry
        self.runner_factory = runner_factory if runner_factory is not None else build_runner

    # ------------------------------------------------------------------
    # Starting sessions

    async def start_session_with_command(
        self,
        command: str | Command,
        args: str = "",
        title: Optional[str] = None,
    ) -> SessionStartResponse:
        """Start a role session from a command keyword such as ``brainstorm``."""

        resolved = command if isinstance(command, Command) else resolve_command(command)
        profile = COMMANDS[resolved]
        if resolved is Command.HELP or profile.role is None or profile.phase is None:
            return SessionStartResponse(
                session_id="",
                agent_session_id="",
                response=HELP_RESPONSE,
                phase=HELP_PHASE,
                next_steps=list(profile.next_steps),
            )

        args = args.strip()
        session = self.store.create_session(
            self.user_id,
            resolved,
            profile.phase,
            agent_session_id="",
            title=title or f"{profile.title_prefix} - {_today()}",
            problem_statement=args or resolved.value,
            metadata={"role": profile.role.value, "command": resolved.value},
        )
        opening = f"@{resolved.value} {args}".strip()
        response, agent_session_id = await self._open(session, profile.role, profile.greeting, opening)
        logger.info("Started %s session %s for user %s", resolved.value, session.id, self.user_id)
        return SessionStartResponse(
            session_id=session.id,
            agent_session_id=agent_session_id,
            response=response,
            phase=profile.phase.value,
            next_steps=list(profile.next_steps),
        )

    async def start_session(self, problem_statement: str, title: Optional[str] = None) -> SessionStartResponse:
        """Start a full discovery session seeded with a problem statement."""

        statement = problem_statement.strip()
        if not statement:
            raise ValueError("Problem statement must not be empty")
        session = self.store.create_session(
            self.user_id,
            None,
            DiscoveryPhase.SETUP,
            agent_session_id="",
            title=title or f"Discovery Session - {_today()}",
            problem_statement=statement,
            metadata={"role": AgentRole.COORDINATOR.value},
        )
        response, agent_session_id = await self._open(session, AgentRole.COORDINATOR, COORDINATOR_GREETING, statement)
        logger.info("Started discovery session %s for user %s", session.id, self.user_id)
        return SessionStartResponse(
            session_id=session.id,
            agent_session_id=agent_session_id,
            response=response,
            phase=DiscoveryPhase.SETUP.value,
            next_steps=list(COORDINATOR_NEXT_STEPS),
        )

    async def _open(
        self, session: DiscoverySession, role: AgentRole, greeting: str, opening: str
    ) -> Tuple[str, str]:
        runner = self._build_runner(session.id, role, greeting)
        agent_session_id = getattr(runner, "session_id", None) or session.id
        self.store.update_session(session.id, agent_session_id=agent_session_id)
        self.registry.set(session.id, runner)

        try:
            reply = format_response(await self._ask(runner, session.id, opening))
        except UpstreamAgentFailure:
            self.registry.delete(session.id)
            self.store.delete_session(session.id)
            logger.info("Discarded session %s after a failed opening turn", session.id)
            raise
        self.store.append_message(session.id, MessageType.USER, opening, DiscoveryPhase.SETUP.value)
        self.store.append_message(session.id, MessageType.AGENT, reply, session.current_phase.value)
        return reply, agent_session_id

    # ------------------------------------------------------------------
    # Conversation

    async def continue_session(self, session_id: str, message: str) -> SessionReply:
        """Send *message* to the session's runner and persist the exchange."""

        session = self._require_session(session_id)
        if session.status is SessionStatus.COMPLETED:
            raise SessionAlreadyCompleted(session_id)

        role = self._role_for(session)
        greeting = COMMANDS[session.command].greeting if session.command else COORDINATOR_GREETING
        runner, created = self.registry.get_or_create(
            session_id,
            lambda: self._build_runner(session_id, role, greeting, self._transcript(session_id)),
        )
        if created:
            logger.info("Rebuilt runner for session %s from stored transcript", session_id)

        reply = format_response(await self._ask(runner, session_id, message))

        # Phase, status or metadata may have changed while the agent was working.
        session = self._require_session(session_id)
        context = self.store.context_for(session_id)
        technique = context.facilitation.current_technique
        phase = session.current_phase.value
        self.store.append_message(session_id, MessageType.USER, message, phase, technique)
        self.store.append_message(session_id, MessageType.AGENT, reply, phase, technique)

        last_activity = utcnow().isoformat()
        techniques_used = _merge_unique(session.techniques_used, context.facilitation.selected_techniques)
        try:
            self.store.update_session(
                session_id,
                techniques_used=techniques_used,
                metadata={**session.metadata, "last_activity": last_activity},
            )
        except Exception as exc:
            logger.warning("Activity update failed for session %s: %s", session_id, exc)
        return SessionReply(
            response=reply,
            phase=phase,
            next_steps=next_steps_for_phase(session.current_phase),
            metadata={
                "last_activity": last_activity,
                "ideas_count": len(context.ideas),
                "current_technique": technique,
                "techniques_used": techniques_used,
            },
        )

    # ------------------------------------------------------------------
    # Lifecycle

    def update_phase(self, session_id: str, phase: DiscoveryPhase | str) -> PhaseUpdateResponse:
        """Move the session to *phase*. Any phase may follow any other."""

        target = DiscoveryPhase(phase)
        session = self._require_session(session_id)
        history = list(session.metadata.get("phase_history", []))
        history.append({"from": session.current_phase.value, "to": target.value, "at": utcnow().isoformat()})
        self.store.update_session(
            session_id,
            current_phase=target,
            metadata={**session.metadata, "phase_history": history},
        )
        logger.info("Session %s moved from %s to %s", session_id, session.current_phase.value, target.value)
        return PhaseUpdateResponse(session_id=session_id, phase=target, next_steps=next_steps_for_phase(target))

    def close_session(self, session_id: str) -> EndSessionResponse:
        session = self._require_session(session_id)
        if session.status is SessionStatus.COMPLETED:
            return EndSessionResponse(success=True, message="Session already ended", session_id=session_id)
        now = utcnow()
        self.store.update_session(session_id, status=SessionStatus.COMPLETED, completed_at=now)
        logger.info("Closed session %s", session_id)
        return EndSessionResponse(success=True, message="Session ended successfully", session_id=session_id)

    def delete_session(self, session_id: str) -> None:
        self._require_session(session_id)
        self.store.delete_session(session_id)
        self.registry.delete(session_id)
        logger.info("Deleted session %s", session_id)

    # ------------------------------------------------------------------
    # Reads

    def get_session_status(self, session_id: str) -> SessionStatusResponse:
        session = self._require_session(session_id)
        return SessionStatusResponse(
            id=session.id,
            title=session.title,
            current_phase=session.current_phase,
            status=session.status,
            created_at=session.created_at,
            ideas_count=len(self.store.context_for(session.id).ideas),
            problem_statement=session.problem_statement,
            updated_at=session.updated_at,
            completed_at=session.completed_at,
        )

    def list_sessions(self) -> List[SessionSummary]:
        return [
            SessionSummary(
                id=session.id,
                title=session.title,
                current_phase=session.current_phase,
                status=session.status,
                created_at=session.created_at,
                ideas_count=len(self.store.context_for(session.id).ideas),
            )
            for session in self.store.list_sessions(self.user_id)
        ]

    def list_messages(self, session_id: str) -> List[Message]:
        self._require_session(session_id)
        return self.store.list_messages(session_id)

    def list_ideas(
        self,
        session_id: str,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        source: Optional[str] = None,
    ) -> List[Idea]:
        self._require_session(session_id)
        return IdeaLedger(self.store.context_for(session_id).ideas).list(category, tags, source)

    def cluster_ideas(self, session_id: str, max_clusters: int = 5) -> List[IdeaCluster]:
        self._require_session(session_id)
        return cluster_ideas(self.store.context_for(session_id).ideas, max_clusters)

    def facilitation_state(self, session_id: str) -> FacilitationState:
        self._require_session(session_id)
        return self.store.context_for(session_id).facilitation

    # ------------------------------------------------------------------
    # Helpers

    next_steps_for_phase = staticmethod(next_steps_for_phase)
    format_response = staticmethod(format_response)

    @staticmethod
    async def _ask(runner: Runner, session_id: str, message: str) -> str:
        """Call the runner, reporting every failure as :class:`UpstreamAgentFailure`."""

        try:
            return await runner.ask(message)
        except UpstreamAgentFailure:
            raise
        except Exception as exc:
            logger.exception("Runner for session %s failed", session_id)
            raise UpstreamAgentFailure(str(exc) or exc.__class__.__name__) from exc

    def _require_session(self, session_id: str) -> DiscoverySession:
        session = self.store.get_session(session_id, self.user_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    @staticmethod
    def _role_for(session: DiscoverySession) -> AgentRole:
        role = session.metadata.get("role")
        if role:
            return AgentRole(role)
        if session.command is not None and COMMANDS[session.command].role is not None:
            return COMMANDS[session.command].role
        return AgentRole.COORDINATOR

    def _transcript(self, session_id: str) -> List[HistoryEntry]:
        return [
            {"role": "user" if message.type is MessageType.USER else "assistant", "content": message.content}
            for message in self.store.list_messages(session_id)
        ]

    def _build_runner(
        self,
        session_id: str,
        role: AgentRole,
        greeting: str,
        history: Iterable[HistoryEntry] = (),
    ) -> Runner:
        context: DiscoveryContext = self.store.context_for(session_id)
        return self.runner_factory(
            role,
            context,
            greeting=greeting,
            history=list(history),
            on_commit=partial(self.store.save_context, session_id),
        )
