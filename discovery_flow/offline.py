"""Deterministic facilitator used when no OpenAI key is configured.

It drives the same facilitation core and idea ledger as the tool-calling
agent, so a session behaves sensibly offline and in tests: setup questions,
approach menu, technique selection, one question at a time, and every
answer captured as an idea.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Dict, Optional, Tuple

from .commands import AgentRole, parse_command
from .facilitation import (
    clear_selection,
    complete_current_technique,
    next_prompt,
    record_response,
    select_techniques,
)
from .ideas import IdeaLedger, scoring_insights
from .prompts import APPROACH_MENU, SETUP_QUESTIONS
from .schemas import DiscoveryContext
from .techniques import resolve

logger = logging.getLogger(__name__)

FACILITATOR_ROLES = (AgentRole.BRAIN, AgentRole.COORDINATOR)

_TOKEN_SPLIT = re.compile(r"[,\s]+")
_MODE_WORDS = {
    "list",
    "manual",
    "recommend",
    "recommended",
    "random",
    "progressive",
    "option:1",
    "option:2",
    "option:3",
    "option:4",
}
_APPROACH_CHOICES = {"1", "2", "3", "4"}
_DECLINE = re.compile(r"^(no|nope|nah|cancel|not really|not now|something else)\b")

FOLLOW_UPS: Dict[AgentRole, Tuple[str, ...]] = {
    AgentRole.ANALYST: (
        "Who are the target users, and which problem hurts them most today?",
        "What do they use instead right now? Name the main competitors or workarounds.",
        "What would make your approach clearly different from those alternatives?",
        "Thanks. I've noted that as a market opportunity. What else should we research?",
    ),
    AgentRole.PM: (
        "What does success look like in the first three months? Pick one or two measurable outcomes.",
        "Which of these ideas must be in the MVP, and which can wait?",
        "Who is available to build this, and what is the rough timeline?",
        "Noted. Tell me about any other idea you want to weigh against the rest.",
    ),
    AgentRole.ARCHITECT: (
        "Who will use the system, and roughly how many users do you expect in the first year?",
        "Which integrations or data sources does it depend on?",
        "Are there hosting, budget or compliance constraints I should design around?",
        "Good. I'd start with a single service and a managed database, then split out components as load grows. "
        "What other requirement should we account for?",
    ),
    AgentRole.VALIDATOR: (
        "What is the riskiest assumption behind this idea?",
        "How could you test that assumption within two weeks and with minimal spend?",
        "Which security, privacy or compliance obligations apply here?",
        "Thanks. Rate that risk low, medium, high or critical, and tell me the next risk to assess.",
    ),
}


def _title_from(answer: str, limit: int = 60) -> str:
    first_line = answer.strip().splitlines()[0] if answer.strip() else "Untitled idea"
    if len(first_line) <= limit:
        return first_line
    return first_line[: limit - 3].rstrip() + "..."


def looks_like_selection(text: str) -> bool:
    """True when every token is an ordinal or a technique name."""

    tokens = [token for token in _TOKEN_SPLIT.split(text.strip().lower()) if token]
    if not tokens:
        return False
    return all(token.isdigit() or resolve(token) is not None for token in tokens)


class ScriptedFacilitator:
    """Produce replies for one role without calling a model."""

    def __init__(self, role: AgentRole, greeting: str, rng: Optional[random.Random] = None) -> None:
        self.role = role
        self.greeting = greeting
        self._rng = rng

    def reply(self, context: DiscoveryContext, message: str, turn: int) -> str:
        """Answer *message*; *turn* counts user messages before this one."""

        if turn == 0:
            return self._opening(context, message)
        if self.role in FACILITATOR_ROLES:
            return self._facilitate(context, message)
        return self._follow_up(context, message, turn)

    # ------------------------------------------------------------------
    # Opening

    def _opening(self, context: DiscoveryContext, message: str) -> str:
        parsed = parse_command(message)
        topic = parsed.args if parsed else message.strip()
        if self.role not in FACILITATOR_ROLES or not topic:
            return self.greeting
        context.setup_answers.append(topic)
        intro = self.greeting.split("\n", 1)[0]
        return f'{intro}\n\nWe\'re brainstorming about: "{topic}".\n\n{SETUP_QUESTIONS[1]}'

    # ------------------------------------------------------------------
    # Brainstorming facilitation

    def _facilitate(self, context: DiscoveryContext, message: str) -> str:
        state = context.facilitation
        text = message.strip()
        lowered = text.lower()

        if state.current_technique is not None and state.waiting_for_response:
            return self._capture(context, text)

        if context.approach_presented and lowered in _APPROACH_CHOICES:
            context.approach_presented = False
            return self._select(context, f"option:{lowered}")

        if lowered in _MODE_WORDS or looks_like_selection(lowered):
            return self._select(context, text)

        if context.confirmation_pending:
            context.confirmation_pending = False
            if _DECLINE.match(lowered):
                clear_selection(state)
                context.approach_presented = True
                return f"No problem, let's pick a different approach.\n\n{APPROACH_MENU}"

        if state.current_technique is not None:
            return self._ask_next(context)

        if len(context.setup_answers) < len(SETUP_QUESTIONS):
            context.setup_answers.append(text)
            if len(context.setup_answers) < len(SETUP_QUESTIONS):
                return SETUP_QUESTIONS[len(context.setup_answers)]
            context.approach_presented = True
            return f"Thanks, that gives me the context I need.\n\n{APPROACH_MENU}"

        if state.completed_techniques:
            return (
                f"We've completed {len(state.completed_techniques)} techniques and captured "
                f"{len(context.ideas)} ideas. Pick more techniques (1-20) to keep going, "
                "or type @pm to prioritize what we have."
            )
        context.approach_presented = True
        return APPROACH_MENU

    def _select(self, context: DiscoveryContext, raw: str) -> str:
        result = select_techniques(context.facilitation, raw, self._rng)
        if not result.ok or result.awaiting_selection:
            return result.message
        context.approach_presented = False
        context.confirmation_pending = result.requires_confirmation
        if result.requires_confirmation:
            return result.message
        prompt = next_prompt(context.facilitation)
        if prompt is None:
            return result.message
        return f"{result.message}\n\n{prompt.message}"

    def _ask_next(self, context: DiscoveryContext) -> str:
        prompt = next_prompt(context.facilitation)
        if prompt is None:
            return self._finish_technique(context)
        return prompt.message

    def _capture(self, context: DiscoveryContext, answer: str) -> str:
        state = context.facilitation
        technique = state.current_technique
        question = state.current_question
        record_response(state, answer)
        IdeaLedger(context.ideas).save(
            _title_from(answer),
            answer,
            rationale=f"Response to: {question}" if question else None,
            tags=[technique] if technique else None,
            source=technique,
        )
        prompt = next_prompt(state)
        if prompt is not None:
            return f"Yes, and... let's build on that.\n\n{prompt.message}"
        return self._finish_technique(context)

    def _finish_technique(self, context: DiscoveryContext) -> str:
        state = context.facilitation
        technique = state.current_technique
        generated = sum(1 for idea in context.ideas if idea.source == technique)
        completion = complete_current_technique(state, ideas_generated=generated)
        logger.debug("Completed %s with %d ideas", technique, generated)
        if completion.has_more:
            prompt = next_prompt(state)
            if prompt is not None:
                return f"{completion.message}\n\n{prompt.message}"
            return completion.message
        return (
            f"{completion.message} You generated {len(context.ideas)} ideas. "
            "Type @pm to prioritize them, or pick more techniques (1-20)."
        )

    # ------------------------------------------------------------------
    # Other roles

    def _follow_up(self, context: DiscoveryContext, message: str, turn: int) -> str:
        ledger = IdeaLedger(context.ideas)
        answer = message.strip()
        if answer:
            ledger.save(
                _title_from(answer),
                answer,
                category="Market" if self.role is AgentRole.ANALYST else None,
                source=self.role.value,
            )

        questions = FOLLOW_UPS.get(self.role, ())
        question = questions[min(turn - 1, len(questions) - 1)] if questions else "Tell me more."

        if self.role is AgentRole.PM and len(ledger) > 1:
            ranked = ledger.rank()
            top = "\n".join(
                f"{position}. {score.title} (priority {score.priority})" for position, score in enumerate(ranked[:3], 1)
            )
            return f"{scoring_insights(ranked)}\n\nCurrent ranking:\n{top}\n\n{question}"
        return question