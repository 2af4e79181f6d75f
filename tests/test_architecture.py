from __future__ import annotations

import pytest

from discovery_flow.architecture import PATTERNS, design_architecture, recommend_tech_stack


def test_design_lays_out_components_and_integrations() -> None:
    design = design_architecture("microservices", ["Billing", "Auth"], ["Stripe"], "critical", "99.99%")

    assert design.pattern.description == PATTERNS["microservices"].description
    assert design.components[0].responsibilities == "Handles billing functionality"
    assert design.components[1].interfaces == "Exposes APIs for auth operations"
    assert design.integrations[0].protocol == "REST/GraphQL"
    assert design.performance.recommendations[0] == "Distributed caching"
    assert design.availability.strategies[0] == "Multi-region deployment"
    assert design.message == "Designed microservices architecture for 2 components with critical performance requirements"


def test_design_defaults() -> None:
    design = design_architecture("hexagonal", ["Catalog"])

    assert design.pattern.description.startswith("Domain core isolated")
    assert design.integrations == []
    assert design.performance.recommendations == ["Basic caching", "Database indexing"]
    assert design.availability.target == "99.9%"
    assert design.availability.strategies == ["Single region", "Basic monitoring", "Backup systems"]

    payload = design.to_payload()
    assert payload["systemType"] == "hexagonal"
    assert "bestFor" in payload["pattern"]


def test_unknown_system_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        design_architecture("spaghetti", ["Everything"])  # type: ignore[arg-type]


def test_stack_reasoning_follows_requirements() -> None:
    recommendation = recommend_tech_stack(
        "game",
        ["real-time multiplayer", "scalability to 1M players"],
        ["budget under 10k"],
        team_size=3,
    )

    assert "frontend" in recommendation.recommended_stack
    assert len(recommendation.reasoning) == 4
    assert recommendation.reasoning[-1] == "Small team size suggests full-stack frameworks and managed services"
    assert recommendation.message == "Recommended tech stack for game project with medium scale"


def test_curated_stack_without_reasoning() -> None:
    recommendation = recommend_tech_stack("api", ["CRUD endpoints"], scale="large")

    assert "FastAPI" in recommendation.recommended_stack["frameworks"]
    assert recommendation.reasoning == []
    assert recommendation.to_payload()["recommendedStack"]["database"][0] == "PostgreSQL"


def test_unknown_project_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        recommend_tech_stack("spaceship", [])  # type: ignore[arg-type]
