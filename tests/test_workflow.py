from __future__ import annotations

import pytest

from discovery_flow.errors import NotFound
from discovery_flow.schemas import DiscoveryContext, StepStatus, WorkflowStatus
from discovery_flow.workflow import complete_step, create_workflow, execute_step, workflow_status

STEPS = [
    {"id": "research", "name": "Market research", "agent": "analyst"},
    {"id": "plan", "name": "Draft PRD", "agent": "pm", "dependencies": ["research"]},
]


def _context_with_workflow() -> DiscoveryContext:
    context = DiscoveryContext()
    create_workflow(context, "Idea to plan", STEPS)
    return context


def test_create_makes_workflow_active() -> None:
    context = DiscoveryContext()

    workflow = create_workflow(context, "Idea to plan", STEPS)

    assert context.active_workflow_id == workflow.id
    assert workflow.status is WorkflowStatus.CREATED
    assert [step.agent for step in workflow.steps] == ["analyst", "pm"]


@pytest.mark.parametrize(
    "steps",
    [
        [],
        [STEPS[0], STEPS[0]],
        [{"id": "plan", "name": "Draft PRD", "agent": "pm", "dependencies": ["research"]}],
        [{"id": "x", "name": "X", "agent": "marketing"}],
    ],
)
def test_create_rejects_malformed_steps(steps) -> None:
    context = DiscoveryContext()

    with pytest.raises(ValueError):
        create_workflow(context, "Broken", steps)
    assert context.workflows == []
    assert context.active_workflow_id is None


def test_full_run_completes_workflow() -> None:
    context = _context_with_workflow()

    execution = execute_step(context, "research", step_input="B2B founders")
    assert execution.status is StepStatus.EXECUTING
    assert execution.agent == "analyst"
    assert workflow_status(context).workflow.status is WorkflowStatus.IN_PROGRESS

    complete_step(context, "research", results={"segments": 3})
    halfway = workflow_status(context)
    assert halfway.progress.percentage == 50
    assert halfway.in_progress_steps == 0

    execute_step(context, "plan")
    assert workflow_status(context).workflow.current_step == 1
    done = complete_step(context, "plan", results="PRD v1", next_steps=["Review with team"])

    report = workflow_status(context)
    assert done.next_steps == ["Review with team"]
    assert report.workflow.status is WorkflowStatus.COMPLETED
    assert report.workflow.completed_at is not None
    assert report.progress.percentage == 100
    assert report.progress.completed == report.progress.total == 2


def test_dependencies_must_finish_first() -> None:
    context = _context_with_workflow()

    with pytest.raises(ValueError, match="waiting on: research"):
        execute_step(context, "plan")


def test_unknown_step_is_not_found() -> None:
    context = _context_with_workflow()

    with pytest.raises(NotFound) as excinfo:
        execute_step(context, "deploy")
    assert excinfo.value.kind == "workflow step"
    assert excinfo.value.identifier == "deploy"

    with pytest.raises(NotFound):
        complete_step(context, "deploy")


def test_completing_a_step_that_never_started() -> None:
    context = _context_with_workflow()

    with pytest.raises(ValueError, match="has not been started"):
        complete_step(context, "research")


def test_no_active_workflow() -> None:
    context = DiscoveryContext()

    with pytest.raises(NotFound, match="No active workflow"):
        workflow_status(context)


def test_rerunning_a_step_counts_it_once() -> None:
    context = _context_with_workflow()

    for _ in range(2):
        execute_step(context, "research")
        complete_step(context, "research")

    report = workflow_status(context)
    assert len(report.step_executions) == 2
    assert report.progress.completed == 1
    assert report.workflow.status is WorkflowStatus.IN_PROGRESS
