"""Multi-step workflows the coordinator uses to hand work between role agents."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

from .errors import NotFound
from .schemas import (
    DiscoveryContext,
    StepExecution,
    StepStatus,
    ToolRecord,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
    utcnow,
)

logger = logging.getLogger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


def active_workflow(context: DiscoveryContext) -> Workflow:
    if context.active_workflow_id is None:
        raise NotFound("workflow", "", "No active workflow. Please create a workflow first")
    for workflow in context.workflows:
        if workflow.id == context.active_workflow_id:
            return workflow
    raise NotFound("workflow", context.active_workflow_id)


def _step(workflow: Workflow, step_id: str) -> tuple[int, WorkflowStep]:
    for index, step in enumerate(workflow.steps):
        if step.id == step_id:
            return index, step
    raise NotFound("workflow step", step_id)


def _executions(context: DiscoveryContext, workflow: Workflow) -> List[StepExecution]:
    return [execution for execution in context.step_executions if execution.workflow_id == workflow.id]


def completed_step_ids(context: DiscoveryContext, workflow: Workflow) -> set[str]:
    return {
        execution.step_id
        for execution in _executions(context, workflow)
        if execution.status is StepStatus.COMPLETED
    }


def create_workflow(
    context: DiscoveryContext,
    name: str,
    steps: Sequence[WorkflowStep | Dict[str, Any]],
    parallel_execution: bool = False,
) -> Workflow:
    """Register a workflow and make it the active one.

    Step ids must be unique and every dependency must name another step.
    """

    parsed = [step if isinstance(step, WorkflowStep) else WorkflowStep.model_validate(step) for step in steps]
    if not parsed:
        raise ValueError("A workflow needs at least one step")
    ids = [step.id for step in parsed]
    if len(set(ids)) != len(ids):
        raise ValueError("Workflow step ids must be unique")
    for step in parsed:
        unknown = [dep for dep in step.dependencies if dep not in ids or dep == step.id]
        if unknown:
            raise ValueError(f"Step {step.id} depends on unknown steps: {', '.join(unknown)}")

    workflow = Workflow(id=_new_id("workflow"), name=name, steps=parsed, parallel_execution=parallel_execution)
    context.workflows.append(workflow)
    context.active_workflow_id = workflow.id
    logger.debug("Created workflow %s with %d steps", workflow.id, len(parsed))
    return workflow


def execute_step(context: DiscoveryContext, step_id: str, step_input: Optional[str] = None) -> StepExecution:
    """Start *step_id* on the active workflow once its dependencies are complete."""

    workflow = active_workflow(context)
    index, step = _step(workflow, step_id)
    done = completed_step_ids(context, workflow)
    pending = [dep for dep in step.dependencies if dep not in done]
    if pending:
        raise ValueError(f"Step {step_id} is waiting on: {', '.join(pending)}")

    execution = StepExecution(
        id=_new_id("execution"),
        workflow_id=workflow.id,
        step_id=step.id,
        agent=step.agent,
        input=step_input,
    )
    context.step_executions.append(execution)
    workflow.current_step = index
    if workflow.status is WorkflowStatus.CREATED:
        workflow.status = WorkflowStatus.IN_PROGRESS
    workflow.updated_at = utcnow()
    return execution


def complete_step(
    context: DiscoveryContext,
    step_id: str,
    results: Any = None,
    next_steps: Optional[Sequence[str]] = None,
) -> StepExecution:
    """Close the latest running execution of *step_id*.

    The workflow completes when every step has at least one completed execution.
    """

    workflow = active_workflow(context)
    _step(workflow, step_id)
    running = [
        execution
        for execution in _executions(context, workflow)
        if execution.step_id == step_id and execution.status is StepStatus.EXECUTING
    ]
    if not running:
        raise ValueError(f"Step {step_id} has not been started")

    execution = running[-1]
    execution.status = StepStatus.COMPLETED
    execution.results = results
    execution.next_steps = list(next_steps or [])
    execution.completed_at = utcnow()

    workflow.updated_at = execution.completed_at
    if completed_step_ids(context, workflow) >= {step.id for step in workflow.steps}:
        workflow.status = WorkflowStatus.COMPLETED
        workflow.completed_at = execution.completed_at
    return execution


class WorkflowProgress(ToolRecord):
    percentage: int
    completed: int
    total: int


class WorkflowReport(ToolRecord):
    workflow: Workflow
    in_progress_steps: int
    step_executions: List[StepExecution]
    progress: WorkflowProgress


def workflow_status(context: DiscoveryContext) -> WorkflowReport:
    workflow = active_workflow(context)
    executions = _executions(context, workflow)
    completed = len(completed_step_ids(context, workflow))
    total = len(workflow.steps)
    return WorkflowReport(
        workflow=workflow,
        in_progress_steps=sum(1 for execution in executions if execution.status is StepStatus.EXECUTING),
        step_executions=executions,
        progress=WorkflowProgress(percentage=int(completed / total * 100 + 0.5), completed=completed, total=total),
    )
