"""Structured idea-exploration techniques: SCAMPER, Six Thinking Hats, mind maps and Rolestorming.

Each helper records its output on the :class:`DiscoveryContext` so later
turns and the session summary can refer back to it.
"""

from __future__ import annotations

import time
import uuid
from typing import Dict, List, Literal, Optional, Sequence

from .ideas import IdeaLedger
from .schemas import DiscoveryContext, Idea, MindMap, MindMapBranch, PerspectiveAnalysis, ToolRecord

ScamperLens = Literal["substitute", "combine", "adapt", "modify", "put_to_other_use", "eliminate", "reverse"]
Hat = Literal["white", "red", "black", "yellow", "green", "blue"]
Role = Literal["customer", "competitor", "investor", "developer", "designer", "manager", "user", "critic"]

# ---------------------------------------------------------------------------
# SCAMPER
# ---------------------------------------------------------------------------

SCAMPER_QUESTIONS: Dict[str, str] = {
    "substitute": "What can I substitute or swap in this idea?",
    "combine": "What can I combine this idea with?",
    "adapt": "What can I adapt or borrow from other contexts?",
    "modify": "What can I modify, magnify, or minimize?",
    "put_to_other_use": "What other uses or purposes could this have?",
    "eliminate": "What can I eliminate or remove?",
    "reverse": "What if I reversed or rearranged this idea?",
}

SCAMPER_VARIATIONS: Dict[str, tuple[str, ...]] = {
    "substitute": (
        "{idea} but with different materials or components",
        "{idea} but with different people or roles",
        "{idea} but in a different location or context",
        "{idea} but with alternative technology",
        "{idea} but with different business models",
    ),
    "combine": (
        "{idea} + mobile app integration",
        "{idea} + AI technology enhancement",
        "{idea} + social media features",
        "{idea} + gamification elements",
        "{idea} + subscription model",
        "{idea} + community features",
    ),
    "adapt": (
        "{idea} adapted for remote work environments",
        "{idea} adapted for senior users",
        "{idea} adapted for sustainability goals",
        "{idea} adapted for emerging markets",
        "{idea} adapted for accessibility needs",
        "{idea} adapted for different industries",
    ),
    "modify": (
        "Larger, enterprise-scale version of {idea}",
        "Smaller, portable version of {idea}",
        "Faster, real-time version of {idea}",
        "Simplified, user-friendly version of {idea}",
        "Premium, high-end version of {idea}",
        "Automated version of {idea}",
    ),
    "put_to_other_use": (
        "{idea} for educational purposes",
        "{idea} for entertainment and gaming",
        "{idea} for healthcare applications",
        "{idea} for environmental monitoring",
        "{idea} for disaster response",
        "{idea} for creative industries",
    ),
    "eliminate": (
        "{idea} without the complex technical requirements",
        "{idea} without the expensive components",
        "{idea} without the manual processes",
        "{idea} without the traditional barriers",
        "{idea} without the unnecessary features",
        "{idea} without the geographical limitations",
    ),
    "reverse": (
        "Reverse the traditional process of {idea}",
        "Start from the end result of {idea}",
        "Do the opposite of conventional {idea}",
        "Flip the user experience of {idea}",
        "Invert the business model of {idea}",
        "Reverse the decision-making flow of {idea}",
    ),
}


class ScamperResult(ToolRecord):
    original_idea: str
    technique: ScamperLens
    question: str
    variations: List[str]
    saved_ideas: List[Idea]
    total_ideas: int

    @property
    def message(self) -> str:
        return f"Generated {len(self.variations)} variations using {self.technique} technique"


def scamper_variations(idea: str, lens: str) -> List[str]:
    if lens not in SCAMPER_VARIATIONS:
        raise ValueError(f"Unknown SCAMPER technique: {lens}")
    return [template.format(idea=idea) for template in SCAMPER_VARIATIONS[lens]]


def apply_scamper(context: DiscoveryContext, idea: str, lens: ScamperLens) -> ScamperResult:
    """Generate SCAMPER variations of *idea* and save each one as a new idea."""

    variations = scamper_variations(idea, lens)
    ledger = IdeaLedger(context.ideas)
    label = lens.replace("_", " ").capitalize()
    saved = [
        ledger.save(
            f"{label} variation of {idea}",
            variation,
            rationale=f"Generated using SCAMPER {lens} technique",
            category="SCAMPER",
            tags=["scamper", lens],
            source="scamper",
            confidence=8,
        )
        for variation in variations
    ]
    return ScamperResult(
        original_idea=idea,
        technique=lens,
        question=SCAMPER_QUESTIONS[lens],
        variations=variations,
        saved_ideas=saved,
        total_ideas=len(ledger),
    )


# ---------------------------------------------------------------------------
# Six Thinking Hats
# ---------------------------------------------------------------------------

HAT_PERSPECTIVES: Dict[str, str] = {
    "white": "Facts and information - What do we know? What do we need to know?",
    "red": "Emotions and feelings - What's your gut reaction? How do you feel about this?",
    "black": "Critical thinking - What could go wrong? What are the risks and problems?",
    "yellow": "Optimistic thinking - What are the benefits? What's the best case scenario?",
    "green": "Creative thinking - What are the alternatives? How can we be more creative?",
    "blue": "Process control - How should we think about this? What's the big picture?",
}

HAT_ANALYSES: Dict[str, str] = {
    "white": (
        "Facts about {idea}: This is a concrete concept that can be researched and validated. Key data points "
        "include market size, user demographics, technical feasibility, and competitive landscape. We need to "
        "gather specific metrics, user research data, and industry benchmarks to support this idea."
    ),
    "red": (
        "Gut feeling about {idea}: This feels exciting and has potential to make a real impact. There's an "
        "emotional connection and intuitive sense that this addresses a real need. The idea sparks enthusiasm "
        "and feels personally meaningful. However, we should balance this with objective analysis."
    ),
    "black": (
        "Concerns about {idea}: Potential challenges include implementation complexity, market competition, "
        "resource requirements, technical risks, regulatory hurdles, and user adoption barriers. We need to "
        "identify specific failure modes and develop mitigation strategies."
    ),
    "yellow": (
        "Benefits of {idea}: This could solve real problems and create significant value for users. Potential "
        "benefits include improved efficiency, cost savings, enhanced user experience, market opportunities, "
        "and positive social impact. The upside potential is substantial."
    ),
    "green": (
        "Creative alternatives to {idea}: Consider different approaches, technologies, target markets, business "
        "models, or implementation strategies. Think about hybrid solutions, unconventional partnerships, "
        "emerging technologies, or novel user experiences that could enhance or replace this idea."
    ),
    "blue": (
        "Process for {idea}: We should research, prototype, test, and iterate systematically. The approach "
        "should include user research, technical feasibility studies, market validation, risk assessment, and "
        "phased implementation. We need clear milestones and decision points."
    ),
}


def apply_six_hats(context: DiscoveryContext, idea: str, hat: Hat) -> PerspectiveAnalysis:
    """Analyse *idea* under one hat; a repeat of the same hat replaces the earlier pass."""

    if hat not in HAT_PERSPECTIVES:
        raise ValueError(f"Unknown thinking hat: {hat}")
    analysis = PerspectiveAnalysis(
        idea=idea,
        perspective=HAT_PERSPECTIVES[hat],
        analysis=HAT_ANALYSES[hat].format(idea=idea),
    )
    context.six_hats[hat] = analysis
    return analysis


# ---------------------------------------------------------------------------
# Rolestorming
# ---------------------------------------------------------------------------

ROLE_PERSPECTIVES: Dict[str, str] = {
    "customer": "How would a potential customer view this idea? What would they value most?",
    "competitor": "How would competitors react to this idea? What would they do differently?",
    "investor": "What would an investor want to know about this idea? What are the risks and returns?",
    "developer": "What are the technical challenges and opportunities in implementing this idea?",
    "designer": "How can we make this idea more user-friendly and visually appealing?",
    "manager": "What are the operational and strategic considerations for this idea?",
    "user": "How would end users interact with this idea? What would their experience be like?",
    "critic": "What are the potential flaws, limitations, and areas for improvement?",
}

ROLE_ANALYSES: Dict[str, str] = {
    "customer": (
        "As a customer, I would be interested in {idea} because it could solve a real problem I face. I'd want "
        "to know: How easy is it to use? What's the value proposition? How does it compare to alternatives? "
        "What's the cost? I'd be looking for convenience, reliability, and clear benefits."
    ),
    "competitor": (
        "As a competitor, I'd see {idea} as a potential threat or opportunity. I'd analyze: What's their unique "
        "value proposition? How can we differentiate? What are their weaknesses we can exploit? Should we build "
        "something similar or focus on our strengths?"
    ),
    "investor": (
        "As an investor, I'd evaluate {idea} based on: Market size and growth potential, competitive landscape, "
        "team capability, revenue model, scalability, and exit strategy. I'd want to see clear metrics, user "
        "traction, and a path to profitability."
    ),
    "developer": (
        "As a developer, I'd focus on the technical aspects of {idea}: Architecture decisions, technology stack, "
        "scalability requirements, security considerations, integration challenges, and development timeline. "
        "I'd want to ensure the solution is robust and maintainable."
    ),
    "designer": (
        "As a designer, I'd focus on the user experience of {idea}: User interface design, user journey "
        "mapping, accessibility, visual design, interaction patterns, and usability testing. I'd want to "
        "create an intuitive and engaging experience."
    ),
    "manager": (
        "As a manager, I'd consider the operational aspects of {idea}: Resource allocation, timeline "
        "management, team coordination, risk mitigation, stakeholder communication, and success metrics. I'd "
        "want to ensure smooth execution and delivery."
    ),
    "user": (
        "As an end user, I'd want {idea} to be simple, useful, and reliable. I'd care about: Ease of use, clear "
        "benefits, fast performance, good support, and regular updates. I'd want it to fit naturally into my "
        "workflow."
    ),
    "critic": (
        "As a critic, I'd identify potential issues with {idea}: Market saturation, technical limitations, user "
        "adoption challenges, competitive threats, resource constraints, and execution risks. I'd want to see "
        "how these challenges are addressed."
    ),
}


def apply_rolestorming(context: DiscoveryContext, idea: str, role: Role) -> PerspectiveAnalysis:
    if role not in ROLE_PERSPECTIVES:
        raise ValueError(f"Unknown role: {role}")
    analysis = PerspectiveAnalysis(
        idea=idea,
        perspective=ROLE_PERSPECTIVES[role],
        analysis=ROLE_ANALYSES[role].format(idea=idea),
    )
    context.rolestorming[role] = analysis
    return analysis


# ---------------------------------------------------------------------------
# Mind maps
# ---------------------------------------------------------------------------

DEFAULT_BRANCHES = ("User Experience", "Technology", "Business Model", "Market", "Implementation", "Challenges")

SUB_BRANCHES: Dict[str, tuple[str, ...]] = {
    "User Experience": (
        "User Interface Design", "User Journey Mapping", "Accessibility & Inclusion",
        "Feedback Mechanisms", "Onboarding Experience", "Mobile Responsiveness",
        "Performance & Speed", "Error Handling", "Help & Documentation",
    ),
    "Technology": (
        "Frontend Architecture", "Backend Services", "Database Design",
        "API Integration", "Security & Privacy", "Scalability Planning",
        "Cloud Infrastructure", "DevOps & Deployment", "Monitoring & Analytics",
    ),
    "Business Model": (
        "Revenue Streams", "Cost Structure", "Value Proposition",
        "Customer Segments", "Pricing Strategy", "Partnership Opportunities",
        "Market Positioning", "Competitive Advantage", "Growth Strategy",
    ),
    "Market": (
        "Target Audience Analysis", "Competitive Landscape", "Market Size & Growth",
        "Industry Trends", "Customer Needs", "Market Entry Strategy",
        "Geographic Expansion", "Seasonal Considerations", "Regulatory Environment",
    ),
    "Implementation": (
        "Project Timeline", "Resource Requirements", "Team Structure",
        "Development Phases", "Quality Assurance", "Testing Strategy",
        "Launch Planning", "Post-Launch Support", "Iteration & Updates",
    ),
    "Challenges": (
        "Technical Risks", "Market Risks", "Resource Constraints",
        "Regulatory Compliance", "Competition Response", "User Adoption",
        "Scalability Issues", "Security Concerns", "Timeline Pressures",
    ),
}
SHALLOW_SUB_BRANCHES = 4


def sub_branches(branch: str, depth: int) -> List[str]:
    """Known branches expand fully past depth 1; others get a generic four-step breakdown."""

    template = SUB_BRANCHES.get(branch) or (
        f"{branch} - Strategic Planning",
        f"{branch} - Execution",
        f"{branch} - Monitoring",
        f"{branch} - Optimization",
    )
    return list(template if depth > 1 else template[:SHALLOW_SUB_BRANCHES])


def branch_connections(branches: Sequence[str]) -> List[str]:
    return [f"{first} ↔ {second}" for index, first in enumerate(branches) for second in branches[index + 1 :]]


def create_mind_map(
    context: DiscoveryContext,
    central_idea: str,
    branches: Optional[Sequence[str]] = None,
    depth: int = 2,
) -> MindMap:
    if not central_idea.strip():
        raise ValueError("centralIdea must not be empty")
    names = [name for name in (branches or []) if name.strip()] or list(DEFAULT_BRANCHES)
    mind_map = MindMap(
        id=f"map_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}",
        central_idea=central_idea,
        branches=[
            MindMapBranch(
                name=name,
                sub_branches=sub_branches(name, depth),
                insights=f"Key considerations for {name} in relation to {central_idea}",
            )
            for name in names
        ],
        connections=branch_connections(names),
        insights=f"Mind map exploring {central_idea} from multiple perspectives",
    )
    context.mind_maps.append(mind_map)
    return mind_map
