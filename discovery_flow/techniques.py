"""Static catalog of the brainstorming techniques offered to users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .schemas import TechniqueDefinition


@dataclass(frozen=True)
class Technique:
    """Describe a brainstorming technique and the prompts it asks."""

    key: str
    ordinal: int
    name: str
    description: str
    prompts: Tuple[str, ...]


# ---------------------------------------------------------------------------
# Catalog definitions
# ---------------------------------------------------------------------------


_TECHNIQUES: Tuple[Technique, ...] = (
    Technique(
        key="what_if_scenarios",
        ordinal=1,
        name="What If Scenarios",
        description="Provocative questions to expand thinking",
        prompts=(
            "What if you had unlimited time, money, and resources? How would you approach this differently?",
            "What if this had to work for 1 billion people? Or just 10 people?",
            "What if failure wasn't an option and you had to succeed? What would you do differently?",
        ),
    ),
    Technique(
        key="analogical_thinking",
        ordinal=2,
        name="Analogical Thinking",
        description="Find connections through analogies",
        prompts=(
            "How does nature solve similar problems? Think about ecosystems, evolution, or natural processes.",
            "How would a chef approach this problem? What ingredients, techniques, or processes apply?",
            "How do sports teams approach similar challenges? What strategies could you borrow?",
        ),
    ),
    Technique(
        key="reversal_inversion",
        ordinal=3,
        name="Reversal/Inversion",
        description="Flip the problem to find new angles",
        prompts=(
            "How could you make this problem worse on purpose?",
            "Looking at those ways to make it worse, what does flipping each one suggest?",
            "Which reversed idea surprises you the most, and why?",
        ),
    ),
    Technique(
        key="first_principles",
        ordinal=4,
        name="First Principles Thinking",
        description="Break down to fundamentals",
        prompts=(
            "What do you know to be absolutely true about this problem?",
            "Which of the usual assumptions here are actually conventions rather than facts?",
            "If you rebuilt a solution from only those fundamentals, what would it look like?",
        ),
    ),
    Technique(
        key="scamper",
        ordinal=5,
        name="SCAMPER Method",
        description="7 perspectives for modification",
        prompts=(
            "Substitute: what part of the idea could be replaced with something else?",
            "Combine: what could you merge this with to create something new?",
            "Adapt: what existing solution elsewhere could you adapt here?",
            "Modify: what could you magnify, shrink, or change in form?",
            "Put to another use: who else could use this, or how else could it be used?",
            "Eliminate: what could you remove entirely?",
            "Reverse: what would happen if you rearranged or reversed the order of things?",
        ),
    ),
    Technique(
        key="six_hats",
        ordinal=6,
        name="Six Thinking Hats",
        description="6 different viewpoints",
        prompts=(
            "White hat: what facts and data do we have, and what is missing?",
            "Red hat: what is your gut feeling about this idea?",
            "Black hat: what could go wrong?",
            "Yellow hat: what are the biggest benefits?",
            "Green hat: what creative alternatives come to mind?",
            "Blue hat: looking at everything so far, what should we do next?",
        ),
    ),
    Technique(
        key="mind_map",
        ordinal=7,
        name="Mind Mapping",
        description="Visual organization and expansion",
        prompts=(
            "Put the core idea in the center. What are the main branches that come off it?",
            "Pick one branch. What sub-ideas grow from it?",
            "Which two branches could connect in an unexpected way?",
        ),
    ),
    Technique(
        key="yes_and_building",
        ordinal=8,
        name="Yes, And... Building",
        description="Build ideas collaboratively",
        prompts=(
            "Share a starting idea, and I'll say 'Yes, and...' to it.",
            "Yes, and what if we expanded this to also serve a different audience?",
            "Yes, and what if this also provided an additional benefit nobody expects?",
        ),
    ),
    Technique(
        key="brainwriting",
        ordinal=9,
        name="Brainwriting/Round Robin",
        description="Pass ideas back and forth",
        prompts=(
            "Write down three quick ideas without judging them.",
            "Take the weakest of those three. How could you make it stronger?",
            "Combine the best parts of two ideas into one.",
        ),
    ),
    Technique(
        key="random_stimulation",
        ordinal=10,
        name="Random Stimulation",
        description="Use random prompts for connections",
        prompts=(
            "Here is a random word: 'lighthouse'. What connections can you draw to your idea?",
            "Another one: 'subscription box'. How might that concept apply?",
            "Pick any object near you. How could it inspire a new angle?",
        ),
    ),
    Technique(
        key="five_whys",
        ordinal=11,
        name="Five Whys",
        description="Drill down to root causes",
        prompts=(
            "Why is this important or needed?",
            "Why does that matter?",
            "Why is that the case?",
            "Why does that happen?",
            "Why is that the root cause?",
        ),
    ),
    Technique(
        key="morphological_analysis",
        ordinal=12,
        name="Morphological Analysis",
        description="Explore parameter combinations",
        prompts=(
            "What are the key parameters or dimensions of this problem?",
            "For each parameter, what are three or four possible options?",
            "Which unusual combination of options looks most promising?",
        ),
    ),
    Technique(
        key="provocation",
        ordinal=13,
        name="Provocation Technique (PO)",
        description="Challenge with provocative statements",
        prompts=(
            "PO: customers pay nothing and you still profit. What would have to be true?",
            "PO: the product works without any screen. How?",
            "Which provocation moved your thinking the most?",
        ),
    ),
    Technique(
        key="forced_relationships",
        ordinal=14,
        name="Forced Relationships",
        description="Connect unrelated concepts",
        prompts=(
            "How is your idea like a bicycle?",
            "How is it like a library?",
            "What feature did those comparisons suggest?",
        ),
    ),
    Technique(
        key="assumption_reversal",
        ordinal=15,
        name="Assumption Reversal",
        description="Challenge core assumptions",
        prompts=(
            "List the core assumptions behind this idea.",
            "Reverse each assumption. What does the reversed version look like?",
            "Which reversed assumption opens a real opportunity?",
        ),
    ),
    Technique(
        key="role_playing",
        ordinal=16,
        name="Role Playing",
        description="Different stakeholder perspectives",
        prompts=(
            "How would your most skeptical customer react to this?",
            "How would a competitor respond if you launched it tomorrow?",
            "What would a regulator or partner worry about?",
        ),
    ),
    Technique(
        key="time_shifting",
        ordinal=17,
        name="Time Shifting",
        description="Solve in different time periods",
        prompts=(
            "How would this problem have been solved in 1950?",
            "How might it be solved in 2050?",
            "What from either era could you bring into today's solution?",
        ),
    ),
    Technique(
        key="resource_constraints",
        ordinal=18,
        name="Resource Constraints",
        description="Limited resources, unlimited creativity",
        prompts=(
            "What if you had to launch this within one week?",
            "What if the budget were only $100?",
            "Which constraint forced the most useful simplification?",
        ),
    ),
    Technique(
        key="metaphor_mapping",
        ordinal=19,
        name="Metaphor Mapping",
        description="Extended metaphors for solutions",
        prompts=(
            "If your idea were a journey, what would the stops along the way be?",
            "Extend the metaphor: who are the travellers and what do they carry?",
            "What does the metaphor suggest you are missing?",
        ),
    ),
    Technique(
        key="question_storming",
        ordinal=20,
        name="Question Storming",
        description="Generate questions before answers",
        prompts=(
            "List as many questions about this problem as you can, without answering any.",
            "Which of those questions surprises you most?",
            "Which question, if answered, would unlock the most progress?",
        ),
    ),
)


TECHNIQUES: Dict[str, Technique] = {technique.key: technique for technique in _TECHNIQUES}

_BY_ORDINAL: Dict[str, Technique] = {str(technique.ordinal): technique for technique in _TECHNIQUES}

RECOMMENDED_TECHNIQUES: Tuple[str, ...] = ("what_if_scenarios", "scamper", "five_whys")

# Broad and divergent first, narrowing toward root causes.
PROGRESSIVE_TECHNIQUES: Tuple[str, ...] = ("random_stimulation", "scamper", "five_whys")


def resolve(identifier: str) -> Optional[Technique]:
    """Return the technique for an ordinal (``"1"``..``"20"``) or key.

    Unknown identifiers resolve to ``None``.
    """

    token = identifier.strip().lower()
    if not token:
        return None
    if token in _BY_ORDINAL:
        return _BY_ORDINAL[token]
    return TECHNIQUES.get(token)


def get_technique(key: str) -> Technique:
    """Return a technique by canonical key, raising ``KeyError`` when unknown."""

    return TECHNIQUES[key]


def list_techniques() -> List[Technique]:
    return sorted(TECHNIQUES.values(), key=lambda item: item.ordinal)


def list_technique_definitions() -> List[TechniqueDefinition]:
    """Return UI-friendly descriptors for all techniques."""

    return [
        TechniqueDefinition(
            id=technique.key,
            ordinal=technique.ordinal,
            name=technique.name,
            description=technique.description,
        )
        for technique in list_techniques()
    ]


def technique_menu() -> str:
    """Numbered list shown when the user picks techniques manually."""

    lines = [f"{technique.ordinal}) {technique.name}" for technique in list_techniques()]
    return (
        "Here are the available brainstorming techniques:\n\n"
        + "\n".join(lines)
        + "\n\nPlease select one or more techniques by entering their numbers separated by commas (e.g., '6,8,10')."
    )


def valid_identifiers() -> str:
    return ", ".join(technique.key for technique in list_techniques())
