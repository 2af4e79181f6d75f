"""Rule-based risk and feasibility checks used by the validator agent."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Sequence

from pydantic import Field

from .ideas import mentions
from .schemas import ToolRecord

Level = Literal["low", "medium", "high"]

RISK_CATEGORIES: Dict[str, List[str]] = {
    "technical": [
        "Technology complexity",
        "Integration challenges",
        "Performance bottlenecks",
        "Security vulnerabilities",
        "Scalability limitations",
    ],
    "business": ["Market changes", "Competitor actions", "Regulatory changes", "User adoption", "Revenue model"],
    "operational": ["Team capacity", "Skill gaps", "Resource availability", "Timeline pressure", "Quality assurance"],
    "external": [
        "Third-party dependencies",
        "Vendor reliability",
        "Infrastructure issues",
        "Economic factors",
        "Legal compliance",
    ],
}

RISK_RECOMMENDATIONS: Dict[str, List[str]] = {
    "high": [
        "Consider reducing scope or extending timeline",
        "Implement comprehensive risk monitoring",
        "Prepare contingency plans",
    ],
    "medium": ["Monitor key risk indicators", "Prepare mitigation strategies"],
    "low": ["Continue with current plan", "Regular risk reviews"],
}


class Risk(ToolRecord):
    category: str
    risk: str
    impact: Level
    probability: Level
    mitigation: str


class RiskAssessment(ToolRecord):
    risk_level: Level
    risk_score: int
    risks: List[Risk]
    recommendations: List[str]
    categories: Dict[str, List[str]] = Field(default_factory=lambda: dict(RISK_CATEGORIES))

    @property
    def message(self) -> str:
        return f"Risk assessment completed: {self.risk_level} risk level with {len(self.risks)} identified risks"


def risk_level(score: int) -> Level:
    if score >= 8:
        return "high"
    if score >= 5:
        return "medium"
    return "low"


def assess_risks(
    project_scope: str,
    timeline: Optional[str] = None,
    budget: Optional[str] = None,
    team: Sequence[str] = (),
    dependencies: Sequence[str] = (),
) -> RiskAssessment:
    """Score a project plan against a fixed set of risk rules.

    Complexity adds 3, an aggressive or tight timeline 4, a team of fewer
    than three people 2, and more than three external dependencies 2. The
    total maps to a level: 8 and above is high, 5 and above medium.
    ``budget`` is accepted for the record but does not affect the score.
    """

    risks: List[Risk] = []
    score = 0

    if mentions(project_scope, "complex", "advanced"):
        risks.append(
            Risk(
                category="technical",
                risk="High technical complexity",
                impact="high",
                probability="medium",
                mitigation="Break down into smaller components, conduct proof of concept",
            )
        )
        score += 3

    if timeline and mentions(timeline, "aggressive", "tight"):
        risks.append(
            Risk(
                category="operational",
                risk="Aggressive timeline",
                impact="high",
                probability="high",
                mitigation="Prioritize MVP features, consider phased delivery",
            )
        )
        score += 4

    if len(team) < 3:
        risks.append(
            Risk(
                category="operational",
                risk="Small team size",
                impact="medium",
                probability="high",
                mitigation="Consider outsourcing or hiring additional resources",
            )
        )
        score += 2

    if len(dependencies) > 3:
        risks.append(
            Risk(
                category="external",
                risk="High external dependencies",
                impact="medium",
                probability="medium",
                mitigation="Identify backup options, negotiate SLAs",
            )
        )
        score += 2

    level = risk_level(score)
    return RiskAssessment(
        risk_level=level,
        risk_score=score,
        risks=risks,
        recommendations=list(RISK_RECOMMENDATIONS[level]),
    )


# ---------------------------------------------------------------------------
# Feasibility
# ---------------------------------------------------------------------------

FEASIBILITY_CRITERIA: Dict[str, List[str]] = {
    "technical": ["Technology maturity", "Team expertise", "Integration complexity", "Performance requirements"],
    "business": ["Market demand", "Competitive advantage", "Revenue potential", "User adoption"],
    "operational": ["Resource availability", "Timeline feasibility", "Risk management", "Quality assurance"],
    "financial": ["Budget adequacy", "ROI potential", "Cost structure", "Revenue model"],
}
AREA_MAX_SCORE = 4
MAX_FEASIBILITY_SCORE = AREA_MAX_SCORE * len(FEASIBILITY_CRITERIA)

VERDICTS: Dict[str, str] = {
    "high": "Proceed with confidence",
    "medium": "Proceed with caution",
    "low": "Reconsider approach",
}


class FeasibilityArea(ToolRecord):
    criteria: List[str]
    score: int = 0
    max_score: int = AREA_MAX_SCORE


class FeasibilityIssue(ToolRecord):
    area: str
    issue: str
    severity: Literal["medium", "high"]


class FeasibilityReport(ToolRecord):
    feasibility_level: Level
    feasibility_percentage: int
    total_score: int
    max_total_score: int = MAX_FEASIBILITY_SCORE
    areas: Dict[str, FeasibilityArea]
    issues: List[FeasibilityIssue]
    critical_issues: int
    medium_issues: int
    recommendations: List[str]
    verdict: str

    @property
    def message(self) -> str:
        return (
            f"Feasibility check completed: {self.feasibility_level} feasibility "
            f"({self.feasibility_percentage}%) with {len(self.issues)} issues identified"
        )


def check_feasibility(
    solution: str,
    requirements: Sequence[str],
    constraints: Sequence[str] = (),
    timeline: Optional[str] = None,
    resources: Sequence[str] = (),
) -> FeasibilityReport:
    """Score technical, business, operational and financial feasibility out of 16."""

    areas = {name: FeasibilityArea(criteria=list(criteria)) for name, criteria in FEASIBILITY_CRITERIA.items()}
    issues: List[FeasibilityIssue] = []
    recommendations: List[str] = []

    if mentions(solution, "ai", "machine learning"):
        if not any(mentions(resource, "data scientist", "ml engineer") for resource in resources):
            issues.append(
                FeasibilityIssue(area="technical", issue="AI/ML solution requires specialized expertise", severity="high")
            )
            recommendations.append("Hire or train ML specialists")

    if any(mentions(requirement, "real-time") for requirement in requirements):
        areas["technical"].score += 1
        if not mentions(solution, "websocket", "websockets", "streaming"):
            issues.append(
                FeasibilityIssue(
                    area="technical",
                    issue="Real-time requirements may need specialized infrastructure",
                    severity="medium",
                )
            )
    else:
        areas["technical"].score += 2

    if any(mentions(requirement, "market") for requirement in requirements):
        areas["business"].score += 2
    else:
        issues.append(
            FeasibilityIssue(area="business", issue="Market validation not clearly defined", severity="medium")
        )

    if timeline and mentions(timeline, "aggressive"):
        areas["operational"].score += 1
        issues.append(
            FeasibilityIssue(area="operational", issue="Aggressive timeline may impact quality", severity="high")
        )
        recommendations.append("Consider phased delivery approach")
    else:
        areas["operational"].score += 2

    if len(resources) >= 3:
        areas["operational"].score += 2
    else:
        issues.append(
            FeasibilityIssue(area="operational", issue="Limited team size may impact delivery", severity="medium")
        )

    if any(mentions(constraint, "budget") for constraint in constraints):
        areas["financial"].score += 1
        recommendations.append("Optimize solution for cost-effectiveness")
    else:
        areas["financial"].score += 2

    total = sum(area.score for area in areas.values())
    percentage = total / MAX_FEASIBILITY_SCORE * 100
    if percentage >= 75:
        level: Level = "high"
    elif percentage >= 50:
        level = "medium"
    else:
        level = "low"

    return FeasibilityReport(
        feasibility_level=level,
        feasibility_percentage=int(percentage + 0.5),
        total_score=total,
        areas=areas,
        issues=issues,
        critical_issues=sum(1 for issue in issues if issue.severity == "high"),
        medium_issues=sum(1 for issue in issues if issue.severity == "medium"),
        recommendations=recommendations,
        verdict=VERDICTS[level],
    )
