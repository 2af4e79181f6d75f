"""Product planning artefacts built from a session's ideas: PRDs, epics and PRD reviews."""

from __future__ import annotations

from typing import Callable, Dict, List, Literal, Optional, Sequence

from pydantic import Field

from .ideas import score_idea
from .schemas import Idea, IdeaScore, ToolRecord, utcnow

ProjectKind = Literal["greenfield", "brownfield"]
Priority = Literal["high", "medium", "low"]
ValidationLevel = Literal["comprehensive", "quick", "focused"]

DEFAULT_TARGET_USERS = "Primary users of the product"
DEFAULT_BUSINESS_GOALS = ["Increase user engagement", "Improve user experience"]
SUCCESS_METRICS = [
    "User engagement: 20% increase in daily active users",
    "Task completion: 90% of users complete primary workflows",
    "User satisfaction: 4.5+ star rating in user feedback",
    "Performance: 95% of actions complete within 2 seconds",
    "Adoption: 80% of target users actively using the product within 30 days",
]
DEFAULT_TECHNICAL_CONSTRAINTS = [
    "Platform: Web-based application",
    "Browser support: Modern browsers (Chrome, Firefox, Safari, Edge)",
    "Mobile support: Responsive design for mobile devices",
    "Integration: RESTful API architecture",
]
ACCEPTANCE_CRITERIA = [
    "{title} functions as described",
    "User can successfully complete the primary workflow",
    "Feature meets performance requirements",
    "Feature is accessible and usable",
]
MVP_SIZE = 5
_DEFAULT_RATIONALE = Idea.model_fields["rationale"].default
MVP_MIN_FEASIBILITY = 5.0


class PerformanceRequirements(ToolRecord):
    response_time: Optional[str] = None
    throughput: Optional[str] = None
    scalability: Optional[str] = None


class DeploymentRequirements(ToolRecord):
    environment: Optional[str] = None
    infrastructure: Optional[str] = None
    operational: List[str] = Field(default_factory=list)


class Feature(ToolRecord):
    idea_id: Optional[str] = None
    title: str
    description: str
    benefit: str = "achieve desired outcomes"
    priority: Priority = "medium"
    category: str = "core"
    acceptance_criteria: List[str] = Field(default_factory=list)


class PrdSections(ToolRecord):
    problem_statement: str
    target_users: str
    business_goals: List[str]
    features: List[Feature]
    success_metrics: List[str]
    mvp_scope: List[Feature]
    technical_constraints: List[str] = Field(default_factory=list)
    architecture_guidance: str = ""
    performance_requirements: Optional[PerformanceRequirements] = None
    security_requirements: List[str] = Field(default_factory=list)
    integration_requirements: List[str] = Field(default_factory=list)
    deployment_requirements: Optional[DeploymentRequirements] = None


class ProductRequirements(ToolRecord):
    prd: str
    sections: PrdSections

    @property
    def message(self) -> str:
        return (
            f"Successfully generated PRD with {len(self.sections.features)} features "
            "and comprehensive requirements"
        )


def feature_priority(score: IdeaScore) -> Priority:
    if score.priority >= 7:
        return "high"
    if score.priority >= 5:
        return "medium"
    return "low"


def _feature(idea: Idea, score: IdeaScore) -> Feature:
    return Feature(
        idea_id=idea.id,
        title=idea.title,
        description=idea.description,
        benefit=(
            idea.rationale
            if idea.rationale and idea.rationale != _DEFAULT_RATIONALE
            else "achieve desired outcomes"
        ),
        priority=feature_priority(score),
        category=idea.category or "core",
        acceptance_criteria=[line.format(title=idea.title) for line in ACCEPTANCE_CRITERIA],
    )


def mvp_scope(ideas: Sequence[Idea]) -> List[Feature]:
    """Top ideas by priority whose feasibility is at least moderate."""

    scored = sorted(((idea, score_idea(idea)) for idea in ideas), key=lambda pair: pair[1].priority, reverse=True)
    feasible = [(idea, score) for idea, score in scored if score.feasibility >= MVP_MIN_FEASIBILITY]
    return [_feature(idea, score) for idea, score in feasible[:MVP_SIZE]]


def _bullets(lines: Sequence[str], indent: str = "") -> str:
    return "".join(f"{indent}- {line}\n" for line in lines)


def render_prd(sections: PrdSections, project_type: ProjectKind, future: Sequence[Feature]) -> str:
    target = sections.target_users
    out = [
        f"# Product Requirements Document: {sections.problem_statement}\n\n",
        f"**Generated:** {utcnow().isoformat()}\n",
        f"**Project Type:** {project_type}\n\n---\n\n",
        "## Executive Summary\n\n",
        f'This PRD defines the requirements for solving: "{sections.problem_statement}"\n\n',
        f"**Target Users:** {target}\n\n**Business Goals:**\n",
        _bullets(sections.business_goals),
        "\n## Problem Statement\n\n",
        f"{sections.problem_statement}\n\n**Why this problem matters:**\n",
        _bullets(
            [
                "Directly impacts user experience and satisfaction",
                "Addresses core user pain points identified in research",
                "Aligns with business objectives and growth strategy",
            ]
        ),
        "\n## Target Users\n\n### Primary Personas\n\n",
        f"**{target}**\n",
        "- **Needs:** Efficient, intuitive solutions to core problems\n",
        "- **Pain Points:** Current solutions are inadequate or non-existent\n",
        "- **Goals:** Achieve desired outcomes with minimal friction\n\n",
        "## Success Metrics\n\n",
        _bullets(sections.success_metrics),
        "\n## MVP Scope\n\n### Core Features (Must Have)\n\n",
        _bullets([f"**{feature.title}**: {feature.description}" for feature in sections.mvp_scope]),
        "\n## Feature Requirements\n\n",
    ]

    persona = target if target != DEFAULT_TARGET_USERS else "user"
    for index, feature in enumerate(sections.features, start=1):
        out.append(f"### {index}. {feature.title}\n\n**Description:** {feature.description}\n\n")
        out.append(
            f"**User Story:**\nAs a {persona}, I want {feature.title.lower()} so that I can {feature.benefit}.\n\n"
        )
        out.append("**Acceptance Criteria:**\n")
        out.append("".join(f"- [ ] {line}\n" for line in feature.acceptance_criteria))
        out.append(f"\n**Priority:** {feature.priority}\n\n---\n\n")

    out.append("## Non-Functional Requirements\n\n### Performance\n")
    out.append(
        _bullets(
            [
                "Response time: < 2 seconds for primary actions",
                "System availability: 99.9% uptime",
                "Concurrent users: Support 1000+ simultaneous users",
            ]
        )
    )
    out.append("\n### Security\n")
    out.append(
        _bullets(
            [
                "User data encryption in transit and at rest",
                "Authentication and authorization required",
                "GDPR compliance for data handling",
            ]
        )
    )
    out.append("\n### Usability\n")
    out.append(
        _bullets(
            [
                "Intuitive user interface with minimal learning curve",
                "Mobile-responsive design",
                "Accessibility compliance (WCAG 2.1 AA)",
            ]
        )
    )
    out.append("\n## Technical Constraints\n\n")
    out.append(_bullets(sections.technical_constraints or DEFAULT_TECHNICAL_CONSTRAINTS))
    out.append("\n")

    if sections.architecture_guidance:
        out.append(f"## Architecture Guidance\n\n{sections.architecture_guidance}\n\n")

    perf = sections.performance_requirements
    if perf is not None:
        out.append("## Performance Requirements\n\n")
        if perf.response_time:
            out.append(f"- **Response Time:** {perf.response_time}\n")
        if perf.throughput:
            out.append(f"- **Throughput:** {perf.throughput}\n")
        if perf.scalability:
            out.append(f"- **Scalability:** {perf.scalability}\n")
        out.append("\n")

    if sections.security_requirements:
        out.append("## Security Requirements\n\n" + _bullets(sections.security_requirements) + "\n")
    if sections.integration_requirements:
        out.append("## Integration Requirements\n\n" + _bullets(sections.integration_requirements) + "\n")

    deploy = sections.deployment_requirements
    if deploy is not None:
        out.append("## Deployment Requirements\n\n")
        if deploy.environment:
            out.append(f"- **Environment:** {deploy.environment}\n")
        if deploy.infrastructure:
            out.append(f"- **Infrastructure:** {deploy.infrastructure}\n")
        if deploy.operational:
            out.append("- **Operational Requirements:**\n" + _bullets(deploy.operational, indent="  "))
        out.append("\n")

    out.append("## Future Enhancements\n\nIdeas identified for future development:\n\n")
    out.append(_bullets([f"**{feature.title}**: {feature.description}" for feature in future]))
    out.append("\n## Risk Assessment\n\n### Technical Risks\n")
    out.append(
        _bullets(
            [
                "Integration complexity with existing systems",
                "Performance requirements under high load",
                "Data migration and compatibility issues",
            ]
        )
    )
    out.append("\n### Business Risks\n")
    out.append(
        _bullets(
            [
                "User adoption and engagement",
                "Competitive landscape changes",
                "Resource and timeline constraints",
            ]
        )
    )
    out.append("\n---\n\n*PRD generated by Project Assist*\n")
    return "".join(out)


def generate_prd(
    problem_statement: str,
    ideas: Sequence[Idea],
    *,
    project_type: ProjectKind = "greenfield",
    target_users: Optional[str] = None,
    business_goals: Optional[Sequence[str]] = None,
    technical_constraints: Optional[Sequence[str]] = None,
    architecture_guidance: Optional[str] = None,
    performance_requirements: Optional[PerformanceRequirements] = None,
    security_requirements: Optional[Sequence[str]] = None,
    integration_requirements: Optional[Sequence[str]] = None,
    deployment_requirements: Optional[DeploymentRequirements] = None,
) -> ProductRequirements:
    """Turn the session's ideas into a markdown PRD.

    Every idea becomes a feature whose priority comes from its heuristic
    score. Low priority or low feasibility ideas are also listed as future
    enhancements.
    """

    if not problem_statement or not problem_statement.strip():
        raise ValueError("Session data and problem statement are required")
    if not ideas:
        raise ValueError("At least one idea is required to generate a PRD")

    scored = [(idea, score_idea(idea)) for idea in ideas]
    features = [_feature(idea, score) for idea, score in scored]
    future = [
        _feature(idea, score)
        for idea, score in scored
        if feature_priority(score) == "low" or score.feasibility < MVP_MIN_FEASIBILITY
    ]

    sections = PrdSections(
        problem_statement=problem_statement.strip(),
        target_users=target_users or DEFAULT_TARGET_USERS,
        business_goals=list(business_goals or DEFAULT_BUSINESS_GOALS),
        features=features,
        success_metrics=list(SUCCESS_METRICS),
        mvp_scope=mvp_scope(ideas),
        technical_constraints=list(technical_constraints or []),
        architecture_guidance=architecture_guidance or "",
        performance_requirements=performance_requirements,
        security_requirements=list(security_requirements or []),
        integration_requirements=list(integration_requirements or []),
        deployment_requirements=deployment_requirements,
    )
    return ProductRequirements(prd=render_prd(sections, project_type, future), sections=sections)


# ---------------------------------------------------------------------------
# Epics
# ---------------------------------------------------------------------------


class EpicFeature(ToolRecord):
    title: str
    description: str
    user_benefit: Optional[str] = None


class UserStory(ToolRecord):
    id: str
    title: str
    description: str
    acceptance_criteria: List[str]
    priority: Priority = "medium"
    estimated_effort: str = "medium"


class EpicSummary(ToolRecord):
    title: str
    priority: Priority
    estimated_effort: str
    story_count: int
    business_value: str


class Epic(ToolRecord):
    epic: str
    user_stories: List[UserStory]
    epic_summary: EpicSummary

    @property
    def message(self) -> str:
        return (
            f'Successfully created epic "{self.epic_summary.title}" '
            f"with {self.epic_summary.story_count} user stories"
        )


def user_stories(features: Sequence[EpicFeature], persona: str) -> List[UserStory]:
    return [
        UserStory(
            id=f"US-{index}",
            title=feature.title,
            description=(
                f"As a {persona}, I want {feature.title.lower()} "
                f"so that I can {feature.user_benefit or 'achieve my goals'}."
            ),
            acceptance_criteria=[line.format(title=feature.title) for line in ACCEPTANCE_CRITERIA],
        )
        for index, feature in enumerate(features, start=1)
    ]


def create_epic(
    title: str,
    description: str,
    business_value: str,
    user_persona: str,
    features: Sequence[EpicFeature],
    *,
    priority: Priority = "medium",
    estimated_effort: Optional[Literal["small", "medium", "large", "xlarge"]] = None,
    project_type: ProjectKind = "greenfield",
) -> Epic:
    stories = user_stories(features, user_persona)
    effort = estimated_effort or "medium"

    out = [
        f"# Epic: {title}\n\n",
        f"**Created:** {utcnow().isoformat()}\n",
        f"**Project Type:** {project_type}\n",
        f"**Priority:** {priority.upper()}\n",
        f"**Estimated Effort:** {effort}\n\n---\n\n",
        "## Epic Overview\n\n",
        f"**Description:** {description}\n\n",
        f"**Business Value:** {business_value}\n\n",
        f"**Target User:** {user_persona}\n\n",
        "## Success Criteria\n\nThis epic will be considered complete when:\n",
        "- [ ] All user stories are implemented and tested\n",
        "- [ ] User acceptance criteria are met\n",
        "- [ ] Performance requirements are satisfied\n",
        "- [ ] Security and accessibility standards are met\n",
        "- [ ] Documentation is complete and up-to-date\n\n",
        "## Features Included\n\n",
    ]
    for index, feature in enumerate(features, start=1):
        out.append(f"### {index}. {feature.title}\n{feature.description}\n\n")
        if feature.user_benefit:
            out.append(f"**User Benefit:** {feature.user_benefit}\n\n")

    out.append("## Dependencies\n\n")
    if project_type == "brownfield":
        out.append(
            _bullets(
                [
                    "Integration with existing system architecture",
                    "Data migration and compatibility considerations",
                    "Testing against current production environment",
                ]
            )
        )
    else:
        out.append(
            _bullets(
                [
                    "Initial project setup and infrastructure",
                    "Core platform and framework establishment",
                    "Development environment configuration",
                ]
            )
        )
    out.append("\n## User Stories\n\n")
    for story in stories:
        out.append(f"- **{story.id}** {story.description}\n")
    out.append("\n## Definition of Done\n\nEach user story in this epic must meet the following criteria:\n")
    out.append(
        "".join(
            f"- [ ] {line}\n"
            for line in (
                "Code is written and reviewed",
                "Unit tests pass with adequate coverage",
                "Integration tests pass",
                "User acceptance criteria are verified",
                "Performance requirements are met",
                "Security review is completed",
                "Documentation is updated",
                "Feature is deployed to staging environment",
                "Stakeholder approval is obtained",
            )
        )
    )
    out.append("\n---\n\n*Epic created by Project Assist*\n")

    return Epic(
        epic="".join(out),
        user_stories=stories,
        epic_summary=EpicSummary(
            title=title,
            priority=priority,
            estimated_effort=effort,
            story_count=len(stories),
            business_value=business_value,
        ),
    )


# ---------------------------------------------------------------------------
# PRD validation
# ---------------------------------------------------------------------------


class PrdFeature(ToolRecord):
    title: str
    description: str = ""
    priority: Optional[str] = None
    acceptance_criteria: List[str] = Field(default_factory=list)


class PrdDraft(ToolRecord):
    """The parts of a PRD the validator looks at."""

    problem_statement: str = ""
    target_users: Optional[str] = None
    business_goals: List[str] = Field(default_factory=list)
    features: List[PrdFeature] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)
    mvp_scope: List[str] = Field(default_factory=list)
    technical_constraints: List[str] = Field(default_factory=list)
    architecture_guidance: Optional[str] = None
    performance_requirements: Optional[PerformanceRequirements] = None
    security_requirements: Optional[List[str]] = None
    integration_requirements: Optional[List[str]] = None
    deployment_requirements: Optional[DeploymentRequirements] = None


Severity = Literal["critical", "high", "medium", "low"]


class ValidationIssue(ToolRecord):
    category: str
    issue: str
    severity: Severity
    recommendation: str


class CheckResult(ToolRecord):
    score: int
    issues: List[ValidationIssue]


class _Check:
    def __init__(self) -> None:
        self.score = 100
        self.issues: List[ValidationIssue] = []

    def flag(self, penalty: int, category: str, issue: str, severity: Severity, recommendation: str) -> None:
        self.issues.append(
            ValidationIssue(category=category, issue=issue, severity=severity, recommendation=recommendation)
        )
        self.score -= penalty

    def result(self) -> CheckResult:
        return CheckResult(score=max(0, self.score), issues=self.issues)


def check_problem_definition(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if len(draft.problem_statement.strip()) < 20:
        check.flag(
            40,
            "Problem Statement",
            "Problem statement is missing or too brief",
            "critical",
            "Provide a clear, detailed problem statement",
        )
    if not draft.target_users:
        check.flag(20, "Target Users", "Target user personas not defined", "high", "Define specific target user personas")
    return check.result()


def check_user_research(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if not draft.target_users:
        check.flag(
            30,
            "User Research",
            "No user research or persona definition",
            "high",
            "Conduct user research and define personas",
        )
    return check.result()


def check_business_goals(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if not draft.business_goals:
        check.flag(
            40,
            "Business Goals",
            "Business goals not defined",
            "critical",
            "Define clear business objectives and success metrics",
        )
    return check.result()


def check_mvp_scope(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if not draft.mvp_scope:
        check.flag(25, "MVP Scope", "MVP scope not clearly defined", "high", "Define minimum viable product scope")
    if len(draft.features) > 10:
        check.flag(15, "MVP Scope", "Too many features for MVP", "medium", "Reduce scope to essential features only")
    return check.result()


def check_features(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if not draft.features:
        check.flag(50, "Features", "No features defined", "critical", "Define core features for the product")
        return check.result()
    for feature in draft.features:
        if not feature.acceptance_criteria:
            check.flag(
                10,
                "Features",
                f'Feature "{feature.title}" lacks acceptance criteria',
                "high",
                "Add testable acceptance criteria",
            )
        if len(feature.description) < 10:
            check.flag(
                5,
                "Features",
                f'Feature "{feature.title}" description is too brief',
                "medium",
                "Provide detailed feature description",
            )
    return check.result()


def check_success_metrics(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if not draft.success_metrics:
        check.flag(30, "Success Metrics", "No success metrics defined", "high", "Define measurable success metrics")
    return check.result()


def check_technical_guidance(draft: PrdDraft) -> CheckResult:
    check = _Check()
    category = "Technical Guidance"
    if not draft.technical_constraints:
        check.flag(
            25,
            category,
            "No technical constraints defined",
            "high",
            "Define platform, browser, and integration constraints",
        )
    if not draft.architecture_guidance:
        check.flag(
            20,
            category,
            "No architecture guidance provided",
            "high",
            "Include high-level architecture direction and technical decisions",
        )
    if draft.performance_requirements is None:
        check.flag(
            15,
            category,
            "Performance requirements not specified",
            "medium",
            "Define response time, throughput, and scalability requirements",
        )
    if draft.security_requirements is None:
        check.flag(
            20,
            category,
            "Security requirements not defined",
            "high",
            "Specify authentication, authorization, and data protection requirements",
        )
    if draft.integration_requirements is None:
        check.flag(
            10,
            category,
            "Integration requirements not specified",
            "medium",
            "Define external system integrations and API requirements",
        )
    if draft.deployment_requirements is None:
        check.flag(
            10,
            category,
            "Deployment requirements not addressed",
            "medium",
            "Specify deployment environment, infrastructure, and operational requirements",
        )
    return check.result()


def check_clarity(draft: PrdDraft) -> CheckResult:
    check = _Check()
    if len(draft.problem_statement) > 200:
        check.flag(5, "Clarity", "Problem statement may be too verbose", "low", "Consider simplifying the problem statement")
    return check.result()


PRD_CHECKS: Dict[str, Callable[[PrdDraft], CheckResult]] = {
    "problemDefinition": check_problem_definition,
    "userResearch": check_user_research,
    "businessGoals": check_business_goals,
    "mvpScope": check_mvp_scope,
    "features": check_features,
    "successMetrics": check_success_metrics,
    "technicalGuidance": check_technical_guidance,
    "clarity": check_clarity,
}

CHECKS_BY_LEVEL: Dict[str, tuple[str, ...]] = {
    "comprehensive": tuple(PRD_CHECKS),
    "quick": ("problemDefinition", "userResearch", "businessGoals", "mvpScope", "features", "successMetrics"),
    "focused": ("problemDefinition", "mvpScope", "features"),
}


class PrdValidation(ToolRecord):
    overall_score: int
    readiness: str
    critical_issues: List[ValidationIssue]
    checks: Dict[str, CheckResult]
    recommendations: List[str]

    @property
    def message(self) -> str:
        return f"PRD validation complete. Overall score: {self.overall_score}% - {self.readiness}"


def readiness(overall_score: int, critical_count: int) -> str:
    if critical_count > 0:
        return "Not Ready - Critical issues must be resolved"
    if overall_score >= 90:
        return "Ready for Architecture"
    if overall_score >= 70:
        return "Nearly Ready - Minor improvements needed"
    if overall_score >= 50:
        return "Needs Significant Work"
    return "Not Ready - Major gaps identified"


def _recommendations(checks: Dict[str, CheckResult], overall_score: int) -> List[str]:
    recommendations: List[str] = []
    if overall_score < 70:
        recommendations.append("Focus on addressing critical and high-priority issues first")
    follow_ups = (
        ("problemDefinition", "Strengthen problem definition and user research"),
        ("features", "Improve feature definitions and acceptance criteria"),
        ("mvpScope", "Refine MVP scope to be more focused and achievable"),
    )
    for name, advice in follow_ups:
        if name in checks and checks[name].score < 80:
            recommendations.append(advice)
    recommendations.append("Review and validate all requirements with stakeholders")
    recommendations.append("Ensure technical feasibility is assessed for all features")
    return recommendations


def validate_prd(draft: PrdDraft, level: ValidationLevel = "comprehensive") -> PrdValidation:
    """Run the checks for *level* and average their scores.

    ``comprehensive`` runs all eight checks. ``quick`` leaves out technical
    guidance and clarity, ``focused`` keeps only problem definition, MVP
    scope and features.
    """

    if level not in CHECKS_BY_LEVEL:
        raise ValueError(f"Unknown validation level: {level}")
    checks = {name: PRD_CHECKS[name](draft) for name in CHECKS_BY_LEVEL[level]}
    overall = int(sum(check.score for check in checks.values()) / len(checks) + 0.5)
    critical = [issue for check in checks.values() for issue in check.issues if issue.severity == "critical"]
    return PrdValidation(
        overall_score=overall,
        readiness=readiness(overall, len(critical)),
        critical_issues=critical,
        checks=checks,
        recommendations=_recommendations(checks, overall),
    )
