from __future__ import annotations

import random

import pytest

from discovery_flow.errors import InvalidSelection
from discovery_flow.facilitation import (
    complete_current_technique,
    describe_progress,
    facilitate_analogical,
    facilitate_five_whys,
    facilitate_what_if,
    facilitate_yes_and,
    next_prompt,
    record_response,
    select_techniques,
)
from discovery_flow.schemas import FacilitationState, SelectionMode


def _keys(result) -> list[str]:
    return [technique.key for technique in result.techniques]


def test_manual_selection_updates_state() -> None:
    state = FacilitationState()

    result = select_techniques(state, "6,8,10")

    assert result.ok
    assert result.mode is SelectionMode.MANUAL
    assert _keys(result) == ["six_hats", "yes_and_building", "random_stimulation"]
    assert state.selected_techniques == ["six_hats", "yes_and_building", "random_stimulation"]
    assert state.current_technique_index == 0
    assert state.current_technique == "six_hats"
    assert state.current_step == 0
    assert state.waiting_for_response is False
    assert state.session_start_time is not None
    assert "Let's start with Six Thinking Hats." in result.message


def test_duplicates_collapse_in_first_seen_order() -> None:
    with_duplicates = select_techniques(FacilitationState(), "6,8,6,10")
    without = select_techniques(FacilitationState(), "6,8,10")

    assert _keys(with_duplicates) == _keys(without)


def test_unknown_tokens_are_dropped() -> None:
    result = select_techniques(FacilitationState(), "6,99,8")

    assert result.ok
    assert _keys(result) == ["six_hats", "yes_and_building"]


def test_whitespace_and_names_mix() -> None:
    result = select_techniques(FacilitationState(), "scamper  11, six_hats")

    assert _keys(result) == ["scamper", "five_whys", "six_hats"]


def test_empty_selection_reports_guidance_and_keeps_state() -> None:
    state = FacilitationState()
    select_techniques(state, "1,2")
    before = list(state.selected_techniques)

    result = select_techniques(state, "99,100")

    assert result.ok is False
    assert isinstance(result.error, InvalidSelection)
    assert result.error.user_input == "99,100"
    assert "numbers (1-20)" in result.message
    assert state.selected_techniques == before
    assert result.to_payload()["success"] is False


def test_recommended_mode_requires_confirmation() -> None:
    state = FacilitationState()

    result = select_techniques(state, "Recommended")

    assert result.requires_confirmation
    assert result.mode is SelectionMode.RECOMMENDED
    assert _keys(result) == ["what_if_scenarios", "scamper", "five_whys"]
    assert "What If Scenarios" in result.message


def test_progressive_mode_runs_broad_to_narrow() -> None:
    result = select_techniques(FacilitationState(), "option:4")

    assert _keys(result) == ["random_stimulation", "scamper", "five_whys"]
    assert result.requires_confirmation


def test_random_mode_samples_two_to_four_unique() -> None:
    for seed in range(20):
        result = select_techniques(FacilitationState(), "random", rng=random.Random(seed))
        keys = _keys(result)
        assert 2 <= len(keys) <= 4
        assert len(set(keys)) == len(keys)


def test_list_request_leaves_state_untouched() -> None:
    state = FacilitationState()

    result = select_techniques(state, "list")

    assert result.ok and result.awaiting_selection
    assert "1) What If Scenarios" in result.message
    assert state.selected_techniques == []
    assert state.current_technique_index == -1


def test_next_prompt_walks_catalog_prompts_then_stops() -> None:
    state = FacilitationState()
    select_techniques(state, "10")

    steps = []
    while (prompt := next_prompt(state)) is not None:
        assert state.waiting_for_response
        assert state.current_question == prompt.question
        steps.append(prompt.step)
        record_response(state, "an answer")

    assert steps == [1, 2, 3]
    assert state.user_responses == ["an answer"] * 3


def test_next_prompt_without_active_technique() -> None:
    assert next_prompt(FacilitationState()) is None


def test_complete_advances_and_finishes() -> None:
    state = FacilitationState()
    select_techniques(state, "6,8")

    first = complete_current_technique(state, ideas_generated=2)
    assert first.has_more and first.next_technique == "yes_and_building"
    assert state.current_technique_index == 1

    second = complete_current_technique(state)
    assert not second.has_more
    assert second.message == "All 2 techniques completed!"
    assert state.current_technique_index == -1
    assert [entry.technique for entry in state.completed_techniques] == ["six_hats", "yes_and_building"]

    with pytest.raises(ValueError):
        complete_current_technique(state)


def test_what_if_activates_technique_and_waits() -> None:
    state = FacilitationState()

    prompt = facilitate_what_if(state, "smart garden", "extreme_scale", 2)

    assert state.current_technique == "what_if_scenarios"
    assert state.current_step == 2
    assert state.waiting_for_response
    assert "1 billion people" in prompt.question

    with pytest.raises(ValueError):
        facilitate_what_if(state, "smart garden", "made_up", 1)
    with pytest.raises(ValueError):
        facilitate_what_if(state, "smart garden", "extreme_scale", 4)


def test_analogical_activates_technique_outside_selection() -> None:
    state = FacilitationState(selected_techniques=["scamper"], current_technique_index=0)

    prompt = facilitate_analogical(state, "meal planning app", "cooking", 1)

    assert state.selected_techniques == ["scamper", "analogical_thinking"]
    assert state.current_technique == "analogical_thinking"
    assert "chef" in prompt.question
    assert prompt.message.startswith("Analogical Thinking 1/3")

    with pytest.raises(ValueError):
        facilitate_analogical(state, "meal planning app", "astronomy", 1)


def test_yes_and_only_waits_on_user_turn() -> None:
    state = FacilitationState()

    agent_turn = facilitate_yes_and(state, "garden app", "add_feature", "agent")
    assert agent_turn.wait_for_user is False
    assert state.waiting_for_response is False

    user_turn = facilitate_yes_and(state, "garden app", "add_emotion", "user")
    assert user_turn.wait_for_user is True
    assert user_turn.chain_length == 2
    assert len(state.yes_and_chain) == 2


def test_five_whys_builds_on_previous_answer() -> None:
    state = FacilitationState()

    first = facilitate_five_whys(state, "late deliveries", 1)
    second = facilitate_five_whys(state, "late deliveries", 2, previous_answer="drivers get lost")

    assert "late deliveries" in first.question
    assert "drivers get lost" in second.question
    assert [entry.level for entry in state.five_whys_chain] == [1, 2]
    assert facilitate_five_whys(state, "x", 5, "y").is_last_step
    with pytest.raises(ValueError):
        facilitate_five_whys(state, "x", 6)


def test_progress_snapshot() -> None:
    state = FacilitationState()
    select_techniques(state, "5")
    next_prompt(state)

    progress = describe_progress(state)

    assert progress["currentTechnique"] == "scamper"
    assert progress["currentStep"] == 1
    assert progress["waitingForResponse"] is True
