"""Startup commands (``@brainstorm``, ``@pm`` ...) and their role profiles."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import UnknownCommand
from .schemas import Command, CommandDefinition, DiscoveryPhase


class AgentRole(str, Enum):
    """Role agents a runner can be built for."""

    BRAIN = "brain"
    ANALYST = "analyst"
    PM = "pm"
    ARCHITECT = "architect"
    VALIDATOR = "validator"
    COORDINATOR = "coordinator"


@dataclass(frozen=True)
class CommandProfile:
    """Describe what a startup command creates."""

    command: Command
    description: str
    role: Optional[AgentRole]
    phase: Optional[DiscoveryPhase]
    title_prefix: str
    greeting: str
    next_steps: Tuple[str, ...]

    @property
    def label(self) -> str:
        return f"@{self.command.value} - {self.description}"


COMMANDS: Dict[Command, CommandProfile] = {
    Command.HELP: CommandProfile(
        command=Command.HELP,
        description="Show all available commands and how to use them",
        role=None,
        phase=None,
        title_prefix="",
        greeting="",
        next_steps=(
            "Type @brainstorm to start a brainstorming session",
            "Type @analyst to start a business analysis session",
            "Type @pm to start a project management session",
        ),
    ),
    Command.BRAINSTORM: CommandProfile(
        command=Command.BRAINSTORM,
        description="Start an interactive brainstorming session with guided techniques",
        role=AgentRole.BRAIN,
        phase=DiscoveryPhase.BRAINSTORMING,
        title_prefix="Brainstorming Session",
        greeting=(
            "Hi! I'm your brainstorming facilitator. I'll guide the process and you generate the ideas.\n\n"
            "What are we brainstorming about?"
        ),
        next_steps=("Share your brainstorming topic", "Answer context questions", "Choose your approach"),
    ),
    Command.ANALYST: CommandProfile(
        command=Command.ANALYST,
        description="Start a business analysis session for market research and competitive analysis",
        role=AgentRole.ANALYST,
        phase=DiscoveryPhase.ANALYSIS,
        title_prefix="Analysis Session",
        greeting=(
            "Hi! I'm your business analyst. I'm here to help you with market research, competitive analysis, "
            "and strategic insights.\n\nWhat would you like to analyze or research today?"
        ),
        next_steps=("Share your analysis topic", "Define research objectives", "Choose analysis approach"),
    ),
    Command.PM: CommandProfile(
        command=Command.PM,
        description="Start a project management session for idea prioritization and planning",
        role=AgentRole.PM,
        phase=DiscoveryPhase.PRIORITIZATION,
        title_prefix="Project Management Session",
        greeting=(
            "Hi! I'm your project manager. I'm here to help you prioritize ideas, plan projects, and create "
            "actionable roadmaps.\n\nWhat project or ideas would you like to prioritize and plan?"
        ),
        next_steps=("Share your project ideas", "Define success criteria", "Create prioritization framework"),
    ),
    Command.ARCHITECT: CommandProfile(
        command=Command.ARCHITECT,
        description="Start a technical architecture session for system design",
        role=AgentRole.ARCHITECT,
        phase=DiscoveryPhase.ARCHITECTURE,
        title_prefix="Architecture Session",
        greeting=(
            "Hi! I'm your technical architect. I'm here to help you design systems, plan technical solutions, "
            "and create architecture blueprints.\n\nWhat system or technical challenge would you like to architect?"
        ),
        next_steps=("Share your technical requirements", "Define system constraints", "Create architecture design"),
    ),
    Command.VALIDATOR: CommandProfile(
        command=Command.VALIDATOR,
        description="Start a validation session for risk assessment and feasibility",
        role=AgentRole.VALIDATOR,
        phase=DiscoveryPhase.VALIDATION,
        title_prefix="Validation Session",
        greeting=(
            "Hi! I'm your validation specialist. I'm here to help you assess risks, validate feasibility, and "
            "ensure your ideas are sound.\n\nWhat would you like to validate or assess for risks?"
        ),
        next_steps=("Share your idea or project", "Identify potential risks", "Create validation plan"),
    ),
}

HELP_RESPONSE = (
    "Available Commands:\n\n"
    + "\n".join(f"• {profile.label}" for profile in COMMANDS.values())
    + "\n\nTo begin, type a command (e.g., @brainstorm)"
)

COMMAND_PATTERN = re.compile(r"^@(\w+)(\s+.*)?$", re.DOTALL)


@dataclass(frozen=True)
class ParsedCommand:
    command: str
    args: str


def parse_command(text: str) -> Optional[ParsedCommand]:
    """Split ``@command args`` input; anything else returns ``None``."""

    match = COMMAND_PATTERN.match(text.strip())
    if not match:
        return None
    return ParsedCommand(command=match.group(1).lower(), args=(match.group(2) or "").strip())


def resolve_command(keyword: str) -> Command:
    """Map a keyword (with or without ``@``) to a :class:`Command`."""

    cleaned = keyword.strip().lstrip("@").lower()
    try:
        return Command(cleaned)
    except ValueError:
        raise UnknownCommand(keyword) from None


def list_command_definitions() -> List[CommandDefinition]:
    return [
        CommandDefinition(key=profile.command, label=profile.label, description=profile.description)
        for profile in COMMANDS.values()
    ]
