"""Technique selection and step-by-step facilitation over ``FacilitationState``.

The facilitator never generates ideas itself. Each operation here records
which question the user was asked and where the session stands within the
selected techniques, so the conversational agent can pick up from any turn.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidSelection
from .schemas import (
    CompletedTechnique,
    FacilitationState,
    FiveWhysEntry,
    SelectionMode,
    YesAndEntry,
    utcnow,
)
from .techniques import (
    PROGRESSIVE_TECHNIQUES,
    RECOMMENDED_TECHNIQUES,
    TECHNIQUES,
    Technique,
    get_technique,
    list_techniques,
    resolve,
    technique_menu,
    valid_identifiers,
)

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[,\s]+")

_LIST_KEYWORDS = {"list", "manual", "option:1"}
_MODE_KEYWORDS: Dict[str, SelectionMode] = {
    "recommend": SelectionMode.RECOMMENDED,
    "recommended": SelectionMode.RECOMMENDED,
    "option:2": SelectionMode.RECOMMENDED,
    "random": SelectionMode.RANDOM,
    "option:3": SelectionMode.RANDOM,
    "progressive": SelectionMode.PROGRESSIVE,
    "option:4": SelectionMode.PROGRESSIVE,
}

RANDOM_MIN_TECHNIQUES = 2
RANDOM_MAX_TECHNIQUES = 4

WHAT_IF_SCENARIOS: Dict[str, str] = {
    "unlimited_resources": "What if you had unlimited time, money, and resources? How would you approach this differently?",
    "impossible_constraints": "What if you could only use materials that cost less than $1? How would you solve this?",
    "different_era": "What if you were solving this problem in 1950? Or 2050? How would the approach change?",
    "opposite_audience": "What if your target audience was completely opposite to who you originally thought?",
    "extreme_scale": "What if this had to work for 1 billion people? Or just 10 people?",
    "no_technology": "What if you couldn't use any technology? How would you solve this problem?",
    "everyone_opposes": "What if everyone was against your idea? How would you still make it work?",
    "must_succeed": "What if failure wasn't an option and you had to succeed? What would you do differently?",
}

ANALOGIES: Dict[str, str] = {
    "nature": "How does nature solve similar problems? Think about ecosystems, evolution, or natural processes.",
    "sports": "How do sports teams or athletes approach similar challenges? What strategies do they use?",
    "cooking": "How would a chef approach this problem? What ingredients, techniques, or processes apply?",
    "architecture": "How would an architect design a solution? What structural principles apply?",
    "music": "How do musicians create harmony from different elements? What musical concepts apply?",
    "gardening": "How does a gardener nurture growth? What cultivation principles apply?",
    "transportation": "How do different transportation systems solve similar problems? What logistics apply?",
    "education": "How do teachers help people learn complex concepts? What pedagogical approaches apply?",
}

YES_AND_BUILDS: Dict[str, str] = {
    "add_feature": "Yes, and what if we added a specific feature? How would that enhance the idea?",
    "expand_audience": "Yes, and what if we expanded this to also serve a different audience?",
    "add_context": "Yes, and what if this happened in a different context or environment?",
    "combine_with_other": "Yes, and what if we combined this with another concept or idea?",
    "add_emotion": "Yes, and what if this created a specific feeling in users?",
    "add_constraint": "Yes, and what if we had to work within a specific constraint?",
    "add_benefit": "Yes, and what if this also provided an additional benefit?",
    "add_metaphor": "Yes, and what if we thought of this as a metaphor or analogy?",
}

FIVE_WHYS_TEMPLATES: Dict[int, str] = {
    1: 'Why is "{subject}" important or needed?',
    2: 'Why does that matter? (Building on: "{subject}")',
    3: 'Why is that the case? (Building on: "{subject}")',
    4: 'Why does that happen? (Building on: "{subject}")',
    5: 'Why is that the root cause? (Building on: "{subject}")',
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def _technique_payload(technique: Technique) -> Dict[str, Any]:
    return {
        "id": technique.key,
        "ordinal": technique.ordinal,
        "name": technique.name,
        "description": technique.description,
    }


@dataclass
class SelectionResult:
    """Outcome of interpreting a technique selection."""

    ok: bool
    message: str
    mode: Optional[SelectionMode] = None
    techniques: List[Technique] = field(default_factory=list)
    requires_confirmation: bool = False
    awaiting_selection: bool = False
    error: Optional[InvalidSelection] = None

    @property
    def first_technique(self) -> Optional[Technique]:
        return self.techniques[0] if self.techniques else None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.ok,
            "message": self.message,
            "selectedTechniques": [technique.key for technique in self.techniques],
            "techniqueInfo": [_technique_payload(technique) for technique in self.techniques],
            "totalTechniques": len(self.techniques),
            "requiresConfirmation": self.requires_confirmation,
        }
        if self.mode is not None:
            payload["mode"] = self.mode.value
        if self.awaiting_selection:
            payload["awaitingSelection"] = True
        if self.error is not None:
            payload["error"] = "Could not parse technique selection. Please use numbers (1-20) or technique names."
            payload["userInput"] = self.error.user_input
        return payload


@dataclass
class FacilitationPrompt:
    """A question put to the user by the facilitator."""

    technique: str
    step: int
    total_steps: int
    question: str
    wait_for_user: bool = True
    chain_length: Optional[int] = None

    @property
    def is_last_step(self) -> bool:
        return self.step >= self.total_steps

    @property
    def message(self) -> str:
        name = TECHNIQUES[self.technique].name
        return f"{name} {self.step}/{self.total_steps}: {self.question}"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "technique": TECHNIQUES[self.technique].name,
            "step": self.step,
            "totalSteps": self.total_steps,
            "question": self.question,
            "message": self.message,
            "waitForUserResponse": self.wait_for_user,
            "nextStep": (
                "Complete the technique and move to next"
                if self.is_last_step
                else "Ask the user this question and wait for their response"
            ),
        }
        if self.chain_length is not None:
            payload["chainLength"] = self.chain_length
        return payload


@dataclass
class TechniqueCompletion:
    completed_technique: str
    total_completed: int
    total_selected: int
    next_technique: Optional[str]

    @property
    def has_more(self) -> bool:
        return self.next_technique is not None

    @property
    def message(self) -> str:
        completed_name = TECHNIQUES[self.completed_technique].name
        if self.next_technique:
            return f"Completed {completed_name}. Ready for {TECHNIQUES[self.next_technique].name}?"
        return f"All {self.total_completed} techniques completed!"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "completedTechnique": self.completed_technique,
            "totalCompleted": self.total_completed,
            "totalSelected": self.total_selected,
            "hasMoreTechniques": self.has_more,
            "nextTechnique": self.next_technique,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Technique selection
# ---------------------------------------------------------------------------


def _parse_manual(user_input: str) -> List[Technique]:
    """Resolve tokens in order, dropping unknowns and repeated techniques."""

    seen: set[str] = set()
    resolved: List[Technique] = []
    for token in _TOKEN_SPLIT.split(user_input):
        technique = resolve(token)
        if technique is None or technique.key in seen:
            continue
        seen.add(technique.key)
        resolved.append(technique)
    return resolved


def _apply_selection(state: FacilitationState, techniques: List[Technique], mode: SelectionMode) -> None:
    state.selected_techniques = [technique.key for technique in techniques]
    state.selection_mode = mode
    state.current_technique_index = 0
    state.current_step = 0
    state.waiting_for_response = False
    state.current_question = None
    state.yes_and_chain = []
    state.five_whys_chain = []
    state.completed_techniques = []
    state.session_start_time = utcnow()


def clear_selection(state: FacilitationState) -> None:
    """Drop a selection the user declined so another approach can be chosen."""

    state.selected_techniques = []
    state.selection_mode = None
    state.current_technique_index = -1
    state.current_step = 0
    state.waiting_for_response = False
    state.current_question = None
    state.session_start_time = None


def _names(techniques: List[Technique], joiner: str) -> str:
    return joiner.join(technique.name for technique in techniques)


def _confirmation_prompt(techniques: List[Technique]) -> str:
    numbers = ",".join(str(technique.ordinal) for technique in techniques)
    return f"Reply with '{numbers}' to confirm, or enter your own technique numbers."


def select_techniques(
    state: FacilitationState,
    user_input: str,
    rng: Optional[random.Random] = None,
) -> SelectionResult:
    """Interpret *user_input* as a technique selection and update *state*.

    Accepts a comma or whitespace separated list of ordinals / technique keys,
    or one of the meta modes (``list``, ``recommended``, ``random``,
    ``progressive``). An input with no resolvable technique yields a failed
    result carrying guidance text and leaves *state* untouched.
    """

    raw = (user_input or "").strip().lower()

    if raw in _LIST_KEYWORDS:
        return SelectionResult(ok=True, message=technique_menu(), mode=SelectionMode.MANUAL, awaiting_selection=True)

    mode = _MODE_KEYWORDS.get(raw)
    if mode is SelectionMode.RECOMMENDED:
        techniques = [get_technique(key) for key in RECOMMENDED_TECHNIQUES]
        _apply_selection(state, techniques, mode)
        message = (
            f"Based on your context I recommend: {_names(techniques, ', ')}. "
            f"{_confirmation_prompt(techniques)} We'll begin with {techniques[0].name}."
        )
        return SelectionResult(ok=True, message=message, mode=mode, techniques=techniques, requires_confirmation=True)

    if mode is SelectionMode.RANDOM:
        generator = rng or random.Random()
        pool = list_techniques()
        count = generator.randint(RANDOM_MIN_TECHNIQUES, RANDOM_MAX_TECHNIQUES)
        techniques = generator.sample(pool, count)
        _apply_selection(state, techniques, mode)
        message = (
            f"Random techniques selected: {_names(techniques, ', ')}. "
            f"{_confirmation_prompt(techniques)} We'll begin with {techniques[0].name}."
        )
        return SelectionResult(ok=True, message=message, mode=mode, techniques=techniques, requires_confirmation=True)

    if mode is SelectionMode.PROGRESSIVE:
        techniques = [get_technique(key) for key in PROGRESSIVE_TECHNIQUES]
        _apply_selection(state, techniques, mode)
        message = (
            f"Progressive flow selected (broad to narrow): {_names(techniques, ' -> ')}. "
            f"{_confirmation_prompt(techniques)} We'll begin with {techniques[0].name}."
        )
        return SelectionResult(ok=True, message=message, mode=mode, techniques=techniques, requires_confirmation=True)

    techniques = _parse_manual(raw)
    if not techniques:
        guidance = (
            "Please select techniques using numbers (1-20) or technique names. "
            f"Available: {valid_identifiers()}"
        )
        logger.info("Technique selection %r did not match any technique", user_input)
        return SelectionResult(ok=False, message=guidance, error=InvalidSelection(user_input, guidance))

    _apply_selection(state, techniques, SelectionMode.MANUAL)
    message = (
        f"Great! I'll help you explore your idea using {_names(techniques, ' and ')}. "
        f"Let's start with {techniques[0].name}."
    )
    return SelectionResult(ok=True, message=message, mode=SelectionMode.MANUAL, techniques=techniques)


# ---------------------------------------------------------------------------
# Facilitation steps
# ---------------------------------------------------------------------------


def _activate(state: FacilitationState, key: str) -> None:
    """Point the state at *key*, adding it to the selection when missing."""

    if key not in state.selected_techniques:
        state.selected_techniques.append(key)
        if state.session_start_time is None:
            state.session_start_time = utcnow()
    index = state.selected_techniques.index(key)
    if index != state.current_technique_index:
        state.current_technique_index = index
        state.current_step = 0


def _ask(state: FacilitationState, question: str, step: int, *, wait: bool = True) -> None:
    state.current_step = step
    state.current_question = question
    state.waiting_for_response = wait


def _check_step(step: int, upper: int, label: str) -> None:
    if not 1 <= step <= upper:
        raise ValueError(f"{label} must be between 1 and {upper}, got {step}")


def facilitate_what_if(state: FacilitationState, idea: str, scenario: str, step: int) -> FacilitationPrompt:
    """Ask one What If question about *idea*."""

    if scenario not in WHAT_IF_SCENARIOS:
        raise ValueError(f"Unknown scenario '{scenario}'")
    _check_step(step, 3, "step")
    question = WHAT_IF_SCENARIOS[scenario]
    _activate(state, "what_if_scenarios")
    _ask(state, question, step)
    return FacilitationPrompt(technique="what_if_scenarios", step=step, total_steps=3, question=question)


def facilitate_analogical(state: FacilitationState, idea: str, analogy: str, step: int) -> FacilitationPrompt:
    if analogy not in ANALOGIES:
        raise ValueError(f"Unknown analogy type '{analogy}'")
    _check_step(step, 3, "step")
    question = ANALOGIES[analogy]
    _activate(state, "analogical_thinking")
    _ask(state, question, step)
    return FacilitationPrompt(technique="analogical_thinking", step=step, total_steps=3, question=question)


def facilitate_yes_and(state: FacilitationState, idea: str, build_type: str, turn: str) -> FacilitationPrompt:
    """Extend the Yes, And chain; only the user's turn waits for a reply."""

    if build_type not in YES_AND_BUILDS:
        raise ValueError(f"Unknown build type '{build_type}'")
    if turn not in ("user", "agent"):
        raise ValueError(f"turn must be 'user' or 'agent', got '{turn}'")
    prompt = YES_AND_BUILDS[build_type]
    _activate(state, "yes_and_building")
    state.yes_and_chain.append(YesAndEntry(idea=idea, build_type=build_type, turn=turn, prompt=prompt))
    step = len(state.yes_and_chain)
    _ask(state, prompt, step, wait=turn == "user")
    return FacilitationPrompt(
        technique="yes_and_building",
        step=step,
        total_steps=max(step, len(TECHNIQUES["yes_and_building"].prompts)),
        question=prompt,
        wait_for_user=turn == "user",
        chain_length=step,
    )


def facilitate_five_whys(
    state: FacilitationState,
    idea: str,
    level: int,
    previous_answer: Optional[str] = None,
) -> FacilitationPrompt:
    """Ask the Why question for *level* (1-5), building on the last answer."""

    _check_step(level, 5, "level")
    subject = idea if level == 1 else (previous_answer or idea)
    question = FIVE_WHYS_TEMPLATES[level].format(subject=subject)
    _activate(state, "five_whys")
    state.five_whys_chain.append(FiveWhysEntry(level=level, question=question, previous_answer=previous_answer))
    _ask(state, question, level)
    return FacilitationPrompt(
        technique="five_whys",
        step=level,
        total_steps=5,
        question=question,
        chain_length=len(state.five_whys_chain),
    )


def next_prompt(state: FacilitationState) -> Optional[FacilitationPrompt]:
    """Ask the next catalog prompt of the active technique.

    Returns ``None`` when no technique is active or the active one has run
    out of prompts.
    """

    key = state.current_technique
    if key is None:
        return None
    prompts = TECHNIQUES[key].prompts
    step = state.current_step + 1
    if step > len(prompts):
        return None
    question = prompts[step - 1]
    _ask(state, question, step)
    return FacilitationPrompt(technique=key, step=step, total_steps=len(prompts), question=question)


def record_response(state: FacilitationState, answer: str) -> None:
    """Store the user's answer to the current question."""

    state.user_responses.append(answer)
    state.waiting_for_response = False


def complete_current_technique(
    state: FacilitationState,
    ideas_generated: int = 0,
    summary: Optional[str] = None,
) -> TechniqueCompletion:
    """Mark the active technique complete and move on to the next one."""

    key = state.current_technique
    if key is None:
        raise ValueError("No technique is currently active")

    state.completed_techniques.append(
        CompletedTechnique(technique=key, ideas_generated=ideas_generated, summary=summary)
    )
    next_index = state.current_technique_index + 1
    has_more = next_index < len(state.selected_techniques)
    state.current_technique_index = next_index if has_more else -1
    state.current_step = 0
    state.waiting_for_response = False
    state.current_question = None

    return TechniqueCompletion(
        completed_technique=key,
        total_completed=len(state.completed_techniques),
        total_selected=len(state.selected_techniques),
        next_technique=state.selected_techniques[next_index] if has_more else None,
    )


def describe_progress(state: FacilitationState) -> Dict[str, Any]:
    """Snapshot used by the progress tool and the API."""

    return {
        "selectedTechniques": list(state.selected_techniques),
        "currentTechnique": state.current_technique,
        "currentTechniqueIndex": state.current_technique_index,
        "currentStep": state.current_step,
        "waitingForResponse": state.waiting_for_response,
        "currentQuestion": state.current_question,
        "completedTechniques": [entry.technique for entry in state.completed_techniques],
    }
