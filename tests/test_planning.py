from __future__ import annotations

from typing import List

import pytest

from discovery_flow.ideas import IdeaLedger
from discovery_flow.planning import (
    EpicFeature,
    PerformanceRequirements,
    PrdDraft,
    PrdFeature,
    create_epic,
    generate_prd,
    validate_prd,
)
from discovery_flow.schemas import Idea


def _ideas() -> List[Idea]:
    ledger = IdeaLedger()
    ledger.save("Quick onboarding checklist", "A simple fast setup flow for every customer")
    ledger.save(
        "Blockchain machine learning platform",
        "Complex advanced sophisticated AI infrastructure with experimental risk",
    )
    return list(ledger)


def test_prd_splits_mvp_and_future_work() -> None:
    result = generate_prd("Founders lose track of onboarding", _ideas())
    sections = result.sections

    assert [feature.priority for feature in sections.features] == ["medium", "low"]
    assert [feature.title for feature in sections.mvp_scope] == ["Quick onboarding checklist"]
    assert sections.target_users == "Primary users of the product"
    assert sections.business_goals == ["Increase user engagement", "Improve user experience"]

    future = result.prd.split("## Future Enhancements", 1)[1]
    assert "**Blockchain machine learning platform**" in future
    assert "Quick onboarding checklist" not in future
    assert "As a user, I want quick onboarding checklist so that I can achieve desired outcomes." in result.prd
    assert "- Platform: Web-based application" in result.prd
    assert result.message == "Successfully generated PRD with 2 features and comprehensive requirements"


def test_prd_includes_optional_sections_when_given() -> None:
    result = generate_prd(
        "Founders lose track of onboarding",
        _ideas(),
        target_users="Solo founders",
        technical_constraints=["Python only"],
        architecture_guidance="Single FastAPI service",
        performance_requirements=PerformanceRequirements(response_time="< 200ms"),
        security_requirements=["SOC 2"],
    )

    assert "## Architecture Guidance\n\nSingle FastAPI service" in result.prd
    assert "- **Response Time:** < 200ms" in result.prd
    assert "## Security Requirements\n\n- SOC 2" in result.prd
    assert "## Integration Requirements" not in result.prd
    assert "- Python only" in result.prd
    assert "Platform: Web-based application" not in result.prd
    assert "As a Solo founders, I want" in result.prd


def test_prd_needs_problem_and_ideas() -> None:
    with pytest.raises(ValueError, match="problem statement"):
        generate_prd("  ", _ideas())
    with pytest.raises(ValueError, match="At least one idea"):
        generate_prd("Something real", [])


def test_epic_user_stories() -> None:
    epic = create_epic(
        "Reporting",
        "Give founders shareable progress reports",
        "Keeps investors informed",
        "founder",
        [
            EpicFeature(title="Export to PDF", description="One click export", user_benefit="share reports"),
            EpicFeature(title="Weekly digest", description="Email summary"),
        ],
        priority="high",
        project_type="brownfield",
    )

    assert [story.id for story in epic.user_stories] == ["US-1", "US-2"]
    assert epic.user_stories[0].description == "As a founder, I want export to pdf so that I can share reports."
    assert epic.user_stories[1].description.endswith("so that I can achieve my goals.")
    assert epic.user_stories[0].acceptance_criteria[0] == "Export to PDF functions as described"
    assert "**Priority:** HIGH" in epic.epic
    assert "Integration with existing system architecture" in epic.epic
    assert epic.epic_summary.estimated_effort == "medium"
    assert epic.message == 'Successfully created epic "Reporting" with 2 user stories'


def test_empty_prd_is_not_ready() -> None:
    validation = validate_prd(PrdDraft(problem_statement="Too short"))

    assert validation.checks["problemDefinition"].score == 40
    assert validation.checks["technicalGuidance"].score == 0
    assert validation.checks["clarity"].score == 100
    assert validation.overall_score == 58
    assert validation.readiness == "Not Ready - Critical issues must be resolved"
    assert len(validation.critical_issues) == 3
    assert validation.recommendations[:4] == [
        "Focus on addressing critical and high-priority issues first",
        "Strengthen problem definition and user research",
        "Improve feature definitions and acceptance criteria",
        "Refine MVP scope to be more focused and achievable",
    ]


def _complete_draft(feature_count: int = 2) -> PrdDraft:
    return PrdDraft(
        problem_statement="Founders lose track of customer onboarding tasks",
        target_users="Solo founders",
        business_goals=["Cut onboarding time in half"],
        features=[
            PrdFeature(
                title=f"Feature {index}",
                description="A detailed description of the feature",
                acceptance_criteria=["Works as described"],
            )
            for index in range(feature_count)
        ],
        success_metrics=["Onboarding under 10 minutes"],
        mvp_scope=["Feature 0"],
        technical_constraints=["Web only"],
        architecture_guidance="Single service",
        performance_requirements=PerformanceRequirements(response_time="< 2s"),
        security_requirements=[],
        integration_requirements=[],
    )


def test_complete_prd_is_ready() -> None:
    draft = _complete_draft()
    draft.deployment_requirements = None
    validation = validate_prd(draft)

    assert validation.checks["technicalGuidance"].score == 90
    assert validation.overall_score == 99
    assert validation.readiness == "Ready for Architecture"
    assert validation.recommendations == [
        "Review and validate all requirements with stakeholders",
        "Ensure technical feasibility is assessed for all features",
    ]


def test_too_many_features_costs_mvp_points() -> None:
    validation = validate_prd(_complete_draft(feature_count=11))

    assert validation.checks["mvpScope"].score == 85
    assert validation.checks["mvpScope"].issues[0].issue == "Too many features for MVP"


def test_validation_levels_pick_checks() -> None:
    draft = PrdDraft(problem_statement="Too short")

    quick = validate_prd(draft, "quick")
    focused = validate_prd(draft, "focused")

    assert "technicalGuidance" not in quick.checks
    assert "clarity" not in quick.checks
    assert len(quick.checks) == 6
    assert quick.overall_score == 61
    assert set(focused.checks) == {"problemDefinition", "mvpScope", "features"}
    assert focused.to_payload()["overallScore"] == focused.overall_score
