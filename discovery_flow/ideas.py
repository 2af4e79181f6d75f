"""Per-session idea ledger, heuristic scoring and thematic clustering."""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .errors import NotFound
from .schemas import Idea, IdeaCluster, IdeaScore, IdeaUpdate, utcnow

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


def _new_idea_id() -> str:
    return f"idea_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _dedupe(tags: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            ordered.append(cleaned)
    return ordered


class IdeaLedger:
    """Ordered collection of ideas owned by one discovery session.

    The ledger works on the list it is given, so wrapping
    ``DiscoveryContext.ideas`` mutates the context in place.
    """

    def __init__(self, ideas: Optional[List[Idea]] = None) -> None:
        self._ideas: List[Idea] = ideas if ideas is not None else []

    def __len__(self) -> int:
        return len(self._ideas)

    def __iter__(self) -> Iterator[Idea]:
        return iter(list(self._ideas))

    def save(
        self,
        title: str,
        description: str,
        *,
        rationale: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        source: Optional[str] = None,
        confidence: Optional[int] = None,
    ) -> Idea:
        """Append a new idea, filling in defaults for omitted fields."""

        known = {idea.id for idea in self._ideas}
        idea_id = _new_idea_id()
        while idea_id in known:
            idea_id = _new_idea_id()

        fields: Dict[str, object] = {"id": idea_id, "title": title, "description": description, "tags": _dedupe(tags or [])}
        if rationale:
            fields["rationale"] = rationale
        if category:
            fields["category"] = category
        if source:
            fields["source"] = source
        if confidence is not None:
            fields["confidence"] = confidence
        idea = Idea.model_validate(fields)
        self._ideas.append(idea)
        logger.debug("Saved idea %s (%d total)", idea.id, len(self._ideas))
        return idea

    def get(self, idea_id: str) -> Idea:
        for idea in self._ideas:
            if idea.id == idea_id:
                return idea
        raise NotFound("idea", idea_id)

    def list(
        self,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        source: Optional[str] = None,
    ) -> List[Idea]:
        """Return ideas matching every supplied filter.

        The tag filter matches when the idea carries any of the requested tags.
        """

        ideas = list(self._ideas)
        if category:
            ideas = [idea for idea in ideas if idea.category == category]
        if tags:
            wanted = set(tags)
            ideas = [idea for idea in ideas if wanted.intersection(idea.tags)]
        if source:
            ideas = [idea for idea in ideas if idea.source == source]
        return ideas

    def update(self, idea_id: str, updates: IdeaUpdate | Dict[str, object]) -> Idea:
        """Merge *updates* into the idea and refresh ``updated_at``."""

        patch = updates if isinstance(updates, IdeaUpdate) else IdeaUpdate.model_validate(updates)
        changes = patch.model_dump(exclude_none=True)
        if "tags" in changes:
            changes["tags"] = _dedupe(changes["tags"])

        for index, idea in enumerate(self._ideas):
            if idea.id != idea_id:
                continue
            merged = idea.model_copy(update={**changes, "updated_at": utcnow()})
            self._ideas[index] = merged
            return merged
        raise NotFound("idea", idea_id)

    def delete(self, idea_id: str) -> None:
        for index, idea in enumerate(self._ideas):
            if idea.id == idea_id:
                del self._ideas[index]
                return
        raise NotFound("idea", idea_id)

    def score(self, idea: Idea, weights: Optional["ScoringWeights"] = None) -> IdeaScore:
        return score_idea(idea, weights)

    def rank(self, weights: Optional["ScoringWeights"] = None) -> List[IdeaScore]:
        """Score every idea, most attractive first."""

        scored = [score_idea(idea, weights) for idea in self._ideas]
        return sorted(scored, key=lambda item: item.priority, reverse=True)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoringWeights:
    impact: float = 0.4
    feasibility: float = 0.3
    effort: float = 0.3


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class KeywordFactor:
    """A keyword group that nudges a score by ``step`` per hit, up to ``cap``."""

    keywords: tuple[str, ...]
    step: float
    cap: float


IMPACT_FACTORS = (
    KeywordFactor(("user", "customer", "experience", "satisfaction", "pain", "problem", "need"), 0.5, 2.0),
    KeywordFactor(("market", "revenue", "business", "growth", "scale", "demand", "opportunity"), 0.4, 1.5),
    KeywordFactor(("ai", "machine learning", "blockchain", "iot", "automation", "innovation", "cutting-edge"), 0.3, 1.0),
    KeywordFactor(("social", "community", "sustainability", "accessibility", "inclusion", "impact", "benefit"), 0.2, 0.5),
)

# Complexity, resource needs and risk lower feasibility; speed raises it.
FEASIBILITY_PENALTIES = (
    KeywordFactor(("ai", "machine learning", "blockchain", "iot", "complex", "advanced", "sophisticated"), 0.5, 2.0),
    KeywordFactor(("team", "resources", "budget", "investment", "infrastructure", "equipment"), 0.3, 1.5),
    KeywordFactor(("risk", "uncertainty", "experimental", "unproven", "challenging"), 0.4, 1.5),
)
FEASIBILITY_BONUSES = (
    KeywordFactor(("quick", "fast", "simple", "easy", "rapid", "immediate"), 0.4, 1.5),
)

EFFORT_FACTORS = (
    KeywordFactor(("long", "extensive", "comprehensive", "detailed", "complex", "sophisticated"), 0.5, 2.0),
    KeywordFactor(("team", "collaboration", "multiple", "various", "diverse", "cross-functional"), 0.3, 1.5),
    KeywordFactor(("expensive", "costly", "investment", "budget", "premium", "high-end"), 0.4, 1.5),
    KeywordFactor(("ongoing", "continuous", "regular", "maintenance", "updates", "support"), 0.2, 1.0),
)


def _clamp(value: float, low: float = 1.0, high: float = 10.0) -> float:
    return min(max(value, low), high)


def _idea_text(idea: Idea) -> str:
    return f"{idea.title} {idea.description} {idea.rationale}".lower()


def mentions(text: str, *keywords: str) -> bool:
    """True when *text* contains any keyword as a whole word, ignoring case."""

    lowered = text.lower()
    return any(re.search(rf"\b{re.escape(keyword)}\b", lowered) for keyword in keywords)


def _count_hits(keywords: Iterable[str], text: str, tags: set[str]) -> int:
    hits = 0
    for keyword in keywords:
        if keyword in tags or mentions(text, keyword):
            hits += 1
    return hits


def _factor_total(factors: Iterable[KeywordFactor], text: str, tags: set[str]) -> float:
    return sum(min(_count_hits(factor.keywords, text, tags) * factor.step, factor.cap) for factor in factors)


def impact_score(idea: Idea) -> float:
    text, tags = _idea_text(idea), {tag.lower() for tag in idea.tags}
    return _clamp(5 + _factor_total(IMPACT_FACTORS, text, tags))


def feasibility_score(idea: Idea) -> float:
    text, tags = _idea_text(idea), {tag.lower() for tag in idea.tags}
    score = 5 - _factor_total(FEASIBILITY_PENALTIES, text, tags) + _factor_total(FEASIBILITY_BONUSES, text, tags)
    return _clamp(score)


def effort_score(idea: Idea) -> float:
    """Higher means more work; the priority formula inverts it."""

    text, tags = _idea_text(idea), {tag.lower() for tag in idea.tags}
    return _clamp(5 + _factor_total(EFFORT_FACTORS, text, tags))


def compute_priority(
    impact: float,
    feasibility: float,
    effort: float,
    weights: Optional[ScoringWeights] = None,
) -> float:
    """Weighted priority where low effort counts in an idea's favour."""

    w = weights or DEFAULT_WEIGHTS
    raw = impact * w.impact + feasibility * w.feasibility + (10 - effort) * w.effort
    return round(_clamp(raw), 1)


def _impact_reasoning(title: str, score: float) -> str:
    if score >= 8:
        return f"High impact potential: {title} addresses significant user needs and has strong market potential."
    if score >= 6:
        return f"Moderate impact potential: {title} provides value but may need refinement for maximum impact."
    if score >= 4:
        return f"Limited impact potential: {title} has some value but may not address core user needs effectively."
    return f"Low impact potential: {title} may not provide sufficient value to justify development effort."


def _feasibility_reasoning(title: str, score: float) -> str:
    if score >= 8:
        return f"Highly feasible: {title} can be implemented with current resources and technology."
    if score >= 6:
        return f"Moderately feasible: {title} is achievable but may require additional resources or expertise."
    if score >= 4:
        return f"Challenging feasibility: {title} presents significant technical or resource challenges."
    return f"Low feasibility: {title} may be too complex or resource-intensive to implement successfully."


def _effort_reasoning(title: str, score: float) -> str:
    if score <= 3:
        return f"Low effort required: {title} can be implemented quickly with minimal resources."
    if score <= 5:
        return f"Moderate effort required: {title} needs reasonable time and resource investment."
    if score <= 7:
        return f"High effort required: {title} demands significant time, team, and resource commitment."
    return f"Very high effort required: {title} is a major undertaking requiring extensive resources and long timeline."


def score_idea(idea: Idea, weights: Optional[ScoringWeights] = None) -> IdeaScore:
    """Derive impact, feasibility, effort and priority for *idea*."""

    impact = impact_score(idea)
    feasibility = feasibility_score(idea)
    effort = effort_score(idea)
    return IdeaScore(
        idea_id=idea.id,
        title=idea.title,
        impact=impact,
        feasibility=feasibility,
        effort=effort,
        priority=compute_priority(impact, feasibility, effort, weights),
        reasoning={
            "impact": _impact_reasoning(idea.title, impact),
            "feasibility": _feasibility_reasoning(idea.title, feasibility),
            "effort": _effort_reasoning(idea.title, effort),
        },
    )


def scoring_insights(scores: Sequence[IdeaScore]) -> str:
    if not scores:
        return "No ideas to score yet."
    top = max(scores, key=lambda item: item.priority)
    count = len(scores)
    avg_impact = sum(item.impact for item in scores) / count
    avg_feasibility = sum(item.feasibility for item in scores) / count
    avg_effort = sum(item.effort for item in scores) / count
    return (
        f"Top idea: {top.title} (Priority: {top.priority}). Average scores - Impact: {avg_impact:.1f}, "
        f"Feasibility: {avg_feasibility:.1f}, Effort: {avg_effort:.1f}."
    )


# ---------------------------------------------------------------------------
# Clustering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Theme:
    name: str
    keywords: tuple[str, ...]
    description: str
    insights: str


THEMES = (
    Theme(
        "User Experience & Interface",
        ("user", "interface", "experience", "design", "ui", "ux", "usability", "accessibility"),
        "Ideas focused on improving user interaction and experience",
        "Strong focus on user-centric design and experience optimization",
    ),
    Theme(
        "Technology & Innovation",
        ("technology", "ai", "machine learning", "automation", "blockchain", "iot", "api", "integration"),
        "Ideas leveraging new technologies and technical innovation",
        "Emphasis on cutting-edge technology and technical solutions",
    ),
    Theme(
        "Business & Revenue",
        ("business", "revenue", "monetization", "pricing", "subscription", "market", "sales", "growth"),
        "Ideas focused on business model and revenue generation",
        "Strong business orientation with focus on sustainable revenue",
    ),
    Theme(
        "Social & Community",
        ("social", "community", "collaboration", "sharing", "network", "engagement", "communication"),
        "Ideas that enhance social interaction and community building",
        "Community-driven approach with emphasis on social value",
    ),
    Theme(
        "Content & Media",
        ("content", "media", "video", "audio", "streaming", "publishing", "creation", "distribution"),
        "Ideas related to content creation, management, and distribution",
        "Content-focused solutions with media and publishing emphasis",
    ),
    Theme(
        "Data & Analytics",
        ("data", "analytics", "insights", "reporting", "metrics", "tracking", "monitoring", "dashboard"),
        "Ideas focused on data collection, analysis, and insights",
        "Data-driven approach with emphasis on measurement and optimization",
    ),
    Theme(
        "Mobile & Accessibility",
        ("mobile", "app", "responsive", "accessibility", "portable", "on-the-go", "location"),
        "Ideas optimized for mobile devices and accessibility",
        "Mobile-first thinking with accessibility considerations",
    ),
    Theme(
        "Security & Privacy",
        ("security", "privacy", "encryption", "authentication", "compliance", "protection", "safe"),
        "Ideas focused on security, privacy, and data protection",
        "Security-conscious approach with privacy-first design",
    ),
)

CLUSTER_COLORS = ("#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#06B6D4", "#84CC16", "#F97316")
OTHER_COLOR = "#6B7280"


def _cluster_priority(size: int) -> str:
    if size >= 5:
        return "high"
    if size >= 3:
        return "medium"
    return "low"


def cluster_ideas(ideas: Sequence[Idea], max_clusters: int = 5) -> List[IdeaCluster]:
    """Group ideas by the keyword themes they mention.

    Themes are ranked by total keyword hits weighted by the share of ideas
    they cover. Ideas matching no kept theme go to an "Other Ideas" cluster
    when there is room for it.
    """

    if not ideas or max_clusters < 1:
        return []

    matches: Dict[str, List[Idea]] = {}
    ranking: List[tuple[float, int, Theme]] = []
    for position, theme in enumerate(THEMES):
        hits = 0
        members: List[Idea] = []
        for idea in ideas:
            count = _count_hits(theme.keywords, _idea_text(idea), {tag.lower() for tag in idea.tags})
            if count:
                hits += count
                members.append(idea)
        if members:
            matches[theme.name] = members
            ranking.append((hits * len(members) / len(ideas), -position, theme))

    ranking.sort(key=lambda item: (item[0], item[1]), reverse=True)

    clusters: List[IdeaCluster] = []
    for _, _, theme in ranking[:max_clusters]:
        members = matches[theme.name]
        index = len(clusters)
        clusters.append(
            IdeaCluster(
                id=f"cluster_{index + 1}",
                name=theme.name,
                description=theme.description,
                theme=theme.name,
                idea_ids=[idea.id for idea in members],
                color=CLUSTER_COLORS[index % len(CLUSTER_COLORS)],
                insights=theme.insights,
                priority=_cluster_priority(len(members)),
                size=len(members),
            )
        )

    clustered = {idea_id for cluster in clusters for idea_id in cluster.idea_ids}
    leftovers = [idea for idea in ideas if idea.id not in clustered]
    if leftovers and len(clusters) < max_clusters:
        clusters.append(
            IdeaCluster(
                id=f"cluster_{len(clusters) + 1}",
                name="Other Ideas",
                description="Ideas that don't fit into the main thematic clusters",
                theme="Miscellaneous",
                idea_ids=[idea.id for idea in leftovers],
                color=OTHER_COLOR,
                insights="These ideas may represent unique opportunities or need further exploration",
                priority="medium",
                size=len(leftovers),
            )
        )
    return clusters
