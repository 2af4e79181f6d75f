from __future__ import annotations

import pytest

from discovery_flow.errors import NotFound
from discovery_flow.ideas import (
    IdeaLedger,
    ScoringWeights,
    cluster_ideas,
    compute_priority,
    effort_score,
    feasibility_score,
    impact_score,
    scoring_insights,
)


def test_priority_formula_inverts_effort() -> None:
    assert compute_priority(8, 6, 4) == 6.8
    assert compute_priority(8, 6, 9) < compute_priority(8, 6, 2)


def test_priority_is_clamped_and_rounded() -> None:
    assert compute_priority(1, 1, 10) == 1.0
    assert compute_priority(10, 10, 1) == 9.7
    assert compute_priority(10, 10, 0, ScoringWeights(1.0, 1.0, 1.0)) == 10.0


def test_ledger_round_trip() -> None:
    ledger = IdeaLedger()

    idea = ledger.save("X", "Y")
    assert [item.title for item in ledger.list()] == ["X"]
    assert idea.category == "General"
    assert idea.source == "manual"
    assert idea.confidence == 7

    updated = ledger.update(idea.id, {"title": "Z"})
    listed = ledger.list()
    assert listed[0].title == "Z"
    assert listed[0].id == idea.id
    assert updated.updated_at >= idea.updated_at
    assert updated.description == "Y"

    ledger.delete(idea.id)
    assert ledger.list() == []


def test_ledger_mutates_the_list_it_wraps() -> None:
    ideas = []
    IdeaLedger(ideas).save("Shared", "Lives in the session context")
    assert len(ideas) == 1


def test_tag_filter_matches_any_requested_tag() -> None:
    ledger = IdeaLedger()
    first = ledger.save("A", "a", tags=["ui"])
    ledger.save("B", "b", tags=["backend"])
    third = ledger.save("C", "c", tags=["ui", "backend"])

    assert [idea.id for idea in ledger.list(tags=["ui"])] == [first.id, third.id]


def test_filters_combine() -> None:
    ledger = IdeaLedger()
    ledger.save("A", "a", category="Market", source="scamper")
    kept = ledger.save("B", "b", category="Market", source="five_whys")
    ledger.save("C", "c", category="Tech", source="five_whys")

    assert [idea.id for idea in ledger.list(category="Market", source="five_whys")] == [kept.id]


def test_missing_ids_raise_not_found() -> None:
    ledger = IdeaLedger()
    with pytest.raises(NotFound):
        ledger.update("idea_missing", {"title": "nope"})
    with pytest.raises(NotFound):
        ledger.delete("idea_missing")
    with pytest.raises(NotFound):
        ledger.get("idea_missing")


def test_ids_are_unique() -> None:
    ledger = IdeaLedger()
    ids = {ledger.save(f"Idea {index}", "d").id for index in range(50)}
    assert len(ids) == 50


def test_heuristic_scores_stay_in_bounds() -> None:
    ledger = IdeaLedger()
    heavy = ledger.save(
        "Complex AI blockchain IoT platform",
        "An extensive, sophisticated, expensive, cross-functional machine learning effort with ongoing maintenance, "
        "experimental and risky, needing a big team, budget and infrastructure",
    )
    light = ledger.save("Quick fix", "A simple, fast and easy improvement for customer satisfaction")

    for idea in (heavy, light):
        for score in (impact_score(idea), feasibility_score(idea), effort_score(idea)):
            assert 1.0 <= score <= 10.0

    assert feasibility_score(light) > feasibility_score(heavy)
    assert effort_score(light) < effort_score(heavy)


def test_keywords_match_whole_words_only() -> None:
    idea = IdeaLedger().save("Maintain a plain list", "Nothing about the domain")
    assert impact_score(idea) == 5.0


def test_rank_orders_by_priority() -> None:
    ledger = IdeaLedger()
    ledger.save("Sophisticated rewrite", "A long, complex, expensive program")
    ledger.save("Quick win", "A simple, fast change that solves a real user problem")

    ranked = ledger.rank()

    assert [score.title for score in ranked] == ["Quick win", "Sophisticated rewrite"]
    assert set(ranked[0].reasoning) == {"impact", "feasibility", "effort"}
    quick = ledger.list()[1]
    assert ledger.score(quick).priority == ranked[0].priority
    assert scoring_insights(ranked).startswith("Top idea: Quick win")
    assert scoring_insights([]) == "No ideas to score yet."


def test_cluster_ideas_groups_by_theme() -> None:
    ledger = IdeaLedger()
    ux = ledger.save("Better onboarding", "Improve the user interface and design")
    data = ledger.save("Usage dashboard", "Analytics and metrics for tracking")
    other = ledger.save("Office plants", "Greener workplace")

    clusters = cluster_ideas(list(ledger))
    by_name = {cluster.name: cluster for cluster in clusters}

    assert ux.id in by_name["User Experience & Interface"].idea_ids
    assert data.id in by_name["Data & Analytics"].idea_ids
    assert by_name["Other Ideas"].idea_ids == [other.id]
    assert all(cluster.size == len(cluster.idea_ids) for cluster in clusters)


def test_cluster_limits() -> None:
    assert cluster_ideas([]) == []
    ledger = IdeaLedger()
    ledger.save("Mobile app", "A secure mobile app with analytics, social sharing and subscription revenue")
    assert len(cluster_ideas(list(ledger), max_clusters=2)) == 2
