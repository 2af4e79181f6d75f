from __future__ import annotations

import pytest

from discovery_flow.exploration import (
    apply_rolestorming,
    apply_scamper,
    apply_six_hats,
    branch_connections,
    create_mind_map,
)
from discovery_flow.schemas import DiscoveryContext


def test_scamper_saves_each_variation_as_an_idea() -> None:
    context = DiscoveryContext()

    result = apply_scamper(context, "Meal planner", "combine")

    assert len(result.variations) == 6
    assert result.variations[0] == "Meal planner + mobile app integration"
    assert result.question == "What can I combine this idea with?"
    assert result.total_ideas == 6
    idea = context.ideas[0]
    assert idea.title == "Combine variation of Meal planner"
    assert idea.category == "SCAMPER"
    assert idea.tags == ["scamper", "combine"]
    assert idea.source == "scamper"
    assert idea.confidence == 8
    assert result.message == "Generated 6 variations using combine technique"


def test_scamper_lens_names_read_naturally() -> None:
    context = DiscoveryContext()

    apply_scamper(context, "Meal planner", "put_to_other_use")

    assert context.ideas[0].title == "Put to other use variation of Meal planner"


def test_unknown_scamper_lens() -> None:
    with pytest.raises(ValueError):
        apply_scamper(DiscoveryContext(), "Meal planner", "shrink")  # type: ignore[arg-type]


def test_six_hats_keeps_latest_pass_per_hat() -> None:
    context = DiscoveryContext()

    apply_six_hats(context, "Meal planner", "black")
    analysis = apply_six_hats(context, "Grocery bot", "black")

    assert list(context.six_hats) == ["black"]
    assert context.six_hats["black"].idea == "Grocery bot"
    assert analysis.analysis.startswith("Concerns about Grocery bot:")
    assert analysis.perspective.startswith("Critical thinking")


def test_rolestorming_records_the_role() -> None:
    context = DiscoveryContext()

    analysis = apply_rolestorming(context, "Meal planner", "investor")

    assert context.rolestorming["investor"] is analysis
    assert analysis.analysis.startswith("As an investor, I'd evaluate Meal planner")
    with pytest.raises(ValueError):
        apply_rolestorming(context, "Meal planner", "pirate")  # type: ignore[arg-type]


def test_default_mind_map() -> None:
    context = DiscoveryContext()

    mind_map = create_mind_map(context, "Meal planner")

    assert [branch.name for branch in mind_map.branches][:2] == ["User Experience", "Technology"]
    assert len(mind_map.branches) == 6
    assert all(len(branch.sub_branches) == 9 for branch in mind_map.branches)
    assert len(mind_map.connections) == 15
    assert mind_map.connections[0] == "User Experience ↔ Technology"
    assert context.mind_maps == [mind_map]


def test_shallow_mind_map_with_custom_branches() -> None:
    context = DiscoveryContext()

    mind_map = create_mind_map(context, "Meal planner", ["Pricing", "Market"], depth=1)

    pricing, market = mind_map.branches
    assert pricing.sub_branches == [
        "Pricing - Strategic Planning",
        "Pricing - Execution",
        "Pricing - Monitoring",
        "Pricing - Optimization",
    ]
    assert market.sub_branches == [
        "Target Audience Analysis",
        "Competitive Landscape",
        "Market Size & Growth",
        "Industry Trends",
    ]
    assert mind_map.connections == ["Pricing ↔ Market"]
    assert mind_map.to_payload()["centralIdea"] == "Meal planner"


def test_connections_pair_every_branch_once() -> None:
    assert branch_connections(["A", "B", "C"]) == ["A ↔ B", "A ↔ C", "B ↔ C"]
    assert branch_connections(["A"]) == []
