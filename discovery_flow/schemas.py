"""Pydantic models and enums for the discovery session API and core."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscoveryPhase(str, Enum):
    """Enumerate the discovery lifecycle phases."""

    SETUP = "setup"
    BRAINSTORMING = "brainstorming"
    ANALYSIS = "analysis"
    PRIORITIZATION = "prioritization"
    ARCHITECTURE = "architecture"
    VALIDATION = "validation"
    COMPLETED = "completed"

    @property
    def order(self) -> int:
        """Return a human-friendly order index for the phase."""
        phase_order = {
            DiscoveryPhase.SETUP: 1,
            DiscoveryPhase.BRAINSTORMING: 2,
            DiscoveryPhase.ANALYSIS: 3,
            DiscoveryPhase.PRIORITIZATION: 4,
            DiscoveryPhase.ARCHITECTURE: 5,
            DiscoveryPhase.VALIDATION: 6,
            DiscoveryPhase.COMPLETED: 7,
        }
        return phase_order[self]


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class MessageType(str, Enum):
    USER = "user"
    AGENT = "agent"


class Command(str, Enum):
    """Keywords accepted when starting a session."""

    HELP = "help"
    BRAINSTORM = "brainstorm"
    ANALYST = "analyst"
    PM = "pm"
    ARCHITECT = "architect"
    VALIDATOR = "validator"


class SelectionMode(str, Enum):
    MANUAL = "manual"
    RECOMMENDED = "recommended"
    RANDOM = "random"
    PROGRESSIVE = "progressive"


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------


class Idea(BaseModel):
    """A single idea captured during a discovery session."""

    id: str
    title: str
    description: str
    rationale: str = "Generated during discovery session"
    category: str = "General"
    tags: List[str] = Field(default_factory=list)
    source: str = "manual"
    confidence: int = Field(default=7, ge=1, le=10)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IdeaUpdate(BaseModel):
    """Partial update for an existing idea; unset fields are left alone."""

    title: Optional[str] = None
    description: Optional[str] = None
    rationale: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    confidence: Optional[int] = Field(default=None, ge=1, le=10)


class IdeaScore(BaseModel):
    idea_id: str
    title: str
    impact: float
    feasibility: float
    effort: float
    priority: float
    reasoning: Dict[str, str] = Field(default_factory=dict)


class IdeaCluster(BaseModel):
    id: str
    name: str
    description: str
    theme: str
    idea_ids: List[str]
    color: str
    insights: str
    priority: str
    size: int


# ---------------------------------------------------------------------------
# Facilitation
# ---------------------------------------------------------------------------


class FiveWhysEntry(BaseModel):
    level: int
    question: str
    previous_answer: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class YesAndEntry(BaseModel):
    idea: str
    build_type: str
    turn: str
    prompt: str
    timestamp: datetime = Field(default_factory=utcnow)


class CompletedTechnique(BaseModel):
    technique: str
    ideas_generated: int = 0
    summary: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class FacilitationState(BaseModel):
    """Progress of the brainstorming techniques for one session.

    ``current_technique_index`` is -1 when no technique is active, otherwise a
    valid index into ``selected_techniques``. Whenever
    ``waiting_for_response`` is set, ``current_question`` holds the prompt
    shown to the user.
    """

    selected_techniques: List[str] = Field(default_factory=list)
    selection_mode: Optional[SelectionMode] = None
    current_technique_index: int = -1
    current_step: int = 0
    waiting_for_response: bool = False
    current_question: Optional[str] = None
    session_start_time: Optional[datetime] = None
    yes_and_chain: List[YesAndEntry] = Field(default_factory=list)
    five_whys_chain: List[FiveWhysEntry] = Field(default_factory=list)
    completed_techniques: List[CompletedTechnique] = Field(default_factory=list)
    user_responses: List[str] = Field(default_factory=list)

    @property
    def current_technique(self) -> Optional[str]:
        if 0 <= self.current_technique_index < len(self.selected_techniques):
            return self.selected_techniques[self.current_technique_index]
        return None


# ---------------------------------------------------------------------------
# Technique and workflow records
# ---------------------------------------------------------------------------


class ToolRecord(BaseModel):
    """Base for records returned to the model; payload keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PerspectiveAnalysis(ToolRecord):
    """One Six Thinking Hats or Rolestorming pass over an idea."""

    idea: str
    perspective: str
    analysis: str
    timestamp: datetime = Field(default_factory=utcnow)


class MindMapBranch(ToolRecord):
    name: str
    sub_branches: List[str]
    insights: str


class MindMap(ToolRecord):
    id: str
    central_idea: str
    branches: List[MindMapBranch]
    connections: List[str]
    insights: str
    created_at: datetime = Field(default_factory=utcnow)


class WorkflowStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class StepStatus(str, Enum):
    EXECUTING = "executing"
    COMPLETED = "completed"


WorkflowAgent = Literal["brain", "analyst", "pm", "architect", "validator"]


class WorkflowStep(ToolRecord):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    agent: WorkflowAgent
    tools: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    estimated_duration: Optional[str] = None


class Workflow(ToolRecord):
    id: str
    name: str
    steps: List[WorkflowStep]
    parallel_execution: bool = False
    status: WorkflowStatus = WorkflowStatus.CREATED
    current_step: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


class StepExecution(ToolRecord):
    id: str
    workflow_id: str
    step_id: str
    agent: WorkflowAgent
    status: StepStatus = StepStatus.EXECUTING
    input: Optional[str] = None
    results: Any = None
    next_steps: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


class DiscoveryContext(BaseModel):
    """Everything a runner mutates while handling a message."""

    facilitation: FacilitationState = Field(default_factory=FacilitationState)
    ideas: List[Idea] = Field(default_factory=list)
    six_hats: Dict[str, PerspectiveAnalysis] = Field(default_factory=dict)
    rolestorming: Dict[str, PerspectiveAnalysis] = Field(default_factory=dict)
    mind_maps: List[MindMap] = Field(default_factory=list)
    workflows: List[Workflow] = Field(default_factory=list)
    step_executions: List[StepExecution] = Field(default_factory=list)
    active_workflow_id: Optional[str] = None
    setup_answers: List[str] = Field(default_factory=list)
    approach_presented: bool = False
    confirmation_pending: bool = False


# ---------------------------------------------------------------------------
# Persistence records
# ---------------------------------------------------------------------------


class DiscoverySession(BaseModel):
    id: str
    user_id: str
    agent_session_id: str
    command: Optional[Command] = None
    title: Optional[str] = None
    problem_statement: Optional[str] = None
    status: SessionStatus = SessionStatus.ACTIVE
    current_phase: DiscoveryPhase = DiscoveryPhase.SETUP
    techniques_used: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


class Message(BaseModel):
    id: str
    session_id: str
    type: MessageType
    content: str
    phase: str
    technique: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class StartSessionRequest(BaseModel):
    command: str = Field(..., min_length=1, description="help, brainstorm, analyst, pm, architect or validator.")
    args: str = Field(default="", description="Optional free text passed after the command.")
    title: Optional[str] = Field(default=None, description="Optional session title.")


class ProblemStatementRequest(BaseModel):
    problem_statement: str = Field(..., min_length=1, max_length=1000)
    title: Optional[str] = None


class SessionStartResponse(BaseModel):
    session_id: str
    agent_session_id: str
    response: str
    phase: str
    next_steps: List[str]


class ContinueSessionRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class MessageRequest(BaseModel):
    message: str = Field(..., min_length=1)


class SessionReply(BaseModel):
    response: str
    phase: str
    next_steps: List[str]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PhaseUpdateRequest(BaseModel):
    phase: DiscoveryPhase


class PhaseUpdateResponse(BaseModel):
    session_id: str
    phase: DiscoveryPhase
    next_steps: List[str]


class SessionSummary(BaseModel):
    id: str
    title: Optional[str]
    current_phase: DiscoveryPhase
    status: SessionStatus
    created_at: datetime
    ideas_count: int


class SessionStatusResponse(SessionSummary):
    problem_statement: Optional[str]
    updated_at: datetime
    completed_at: Optional[datetime] = None


class EndSessionResponse(BaseModel):
    success: bool
    message: str
    session_id: str


class TechniqueDefinition(BaseModel):
    id: str
    ordinal: int
    name: str
    description: str


class CommandDefinition(BaseModel):
    key: Command
    label: str
    description: str
