from __future__ import annotations

import pytest

from discovery_flow.techniques import (
    PROGRESSIVE_TECHNIQUES,
    RECOMMENDED_TECHNIQUES,
    TECHNIQUES,
    list_technique_definitions,
    list_techniques,
    resolve,
    technique_menu,
)


def test_catalog_has_twenty_ordered_techniques() -> None:
    techniques = list_techniques()
    assert len(techniques) == 20
    assert [technique.ordinal for technique in techniques] == list(range(1, 21))
    assert all(technique.prompts for technique in techniques)


@pytest.mark.parametrize(
    ("identifier", "key"),
    [
        ("1", "what_if_scenarios"),
        (" 6 ", "six_hats"),
        ("10", "random_stimulation"),
        ("20", "question_storming"),
        ("SCAMPER", "scamper"),
        ("Five_Whys", "five_whys"),
    ],
)
def test_resolve_accepts_ordinals_and_names(identifier: str, key: str) -> None:
    technique = resolve(identifier)
    assert technique is not None
    assert technique.key == key


@pytest.mark.parametrize("identifier", ["0", "21", "99", "", "   ", "brainstorm"])
def test_resolve_unknown_returns_none(identifier: str) -> None:
    assert resolve(identifier) is None


def test_fixed_mode_sets_point_at_catalog_entries() -> None:
    assert set(RECOMMENDED_TECHNIQUES) <= set(TECHNIQUES)
    assert PROGRESSIVE_TECHNIQUES == ("random_stimulation", "scamper", "five_whys")


def test_menu_lists_every_technique_by_number() -> None:
    menu = technique_menu()
    for technique in list_techniques():
        assert f"{technique.ordinal}) {technique.name}" in menu
    assert "'6,8,10'" in menu


def test_definitions_expose_ids_and_ordinals() -> None:
    definitions = list_technique_definitions()
    assert definitions[0].id == "what_if_scenarios"
    assert definitions[-1].ordinal == 20
