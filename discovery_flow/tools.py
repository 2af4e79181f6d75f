"""Function-calling tools exposed to the role agents.

Each tool is a member of :class:`ToolName`; :func:`run_tool` dispatches on
it explicitly and applies the effect to a :class:`DiscoveryContext`.
Recoverable problems (unknown idea or workflow step id, bad arguments, unparseable technique
selection) come back as tool results so the model can correct itself.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from .architecture import design_architecture, recommend_tech_stack
from .commands import AgentRole
from .errors import NotFound
from .facilitation import (
    ANALOGIES,
    WHAT_IF_SCENARIOS,
    YES_AND_BUILDS,
    complete_current_technique,
    describe_progress,
    facilitate_analogical,
    facilitate_five_whys,
    facilitate_what_if,
    facilitate_yes_and,
    next_prompt,
    select_techniques,
)
from .exploration import (
    HAT_PERSPECTIVES,
    ROLE_PERSPECTIVES,
    SCAMPER_QUESTIONS,
    apply_rolestorming,
    apply_scamper,
    apply_six_hats,
    create_mind_map,
)
from .ideas import IdeaLedger, cluster_ideas, scoring_insights
from .planning import (
    DeploymentRequirements,
    EpicFeature,
    PerformanceRequirements,
    PrdDraft,
    create_epic,
    generate_prd,
    validate_prd,
)
from .schemas import DiscoveryContext, WorkflowStatus
from .validation import assess_risks, check_feasibility
from .workflow import active_workflow, complete_step, create_workflow, execute_step, workflow_status

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    SELECT_TECHNIQUES = "select_brainstorming_techniques"
    WHAT_IF = "facilitate_what_if_scenarios"
    ANALOGICAL = "facilitate_analogical_thinking"
    YES_AND = "facilitate_yes_and_building"
    FIVE_WHYS = "facilitate_five_whys"
    NEXT_PROMPT = "next_technique_prompt"
    COMPLETE_TECHNIQUE = "complete_current_technique"
    PROGRESS = "get_technique_progress"
    SAVE_IDEA = "save_idea"
    GET_IDEAS = "get_ideas"
    UPDATE_IDEA = "update_idea"
    DELETE_IDEA = "delete_idea"
    SCORE_IDEAS = "score_ideas"
    CLUSTER_IDEAS = "cluster_ideas"
    SCAMPER = "apply_scamper"
    SIX_HATS = "apply_six_hats"
    MIND_MAP = "create_mind_map"
    ROLESTORMING = "apply_rolestorming"
    ASSESS_RISKS = "assess_risks"
    CHECK_FEASIBILITY = "check_feasibility"
    DESIGN_ARCHITECTURE = "design_architecture"
    TECH_STACK = "recommend_tech_stack"
    GENERATE_PRD = "generate_prd"
    CREATE_EPIC = "create_epic"
    VALIDATE_PRD = "validate_prd"
    CREATE_WORKFLOW = "create_workflow"
    EXECUTE_STEP = "execute_workflow_step"
    COMPLETE_STEP = "complete_workflow_step"
    WORKFLOW_STATUS = "get_workflow_status"


def _object(properties: Dict[str, Any], required: Tuple[str, ...] = ()) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required)}


_STRING = {"type": "string"}
_TAGS = {"type": "array", "items": {"type": "string"}}
_STRINGS = _TAGS
_PROJECT_KIND = {"type": "string", "enum": ["greenfield", "brownfield"]}
_PERFORMANCE = _object({"responseTime": _STRING, "throughput": _STRING, "scalability": _STRING})
_DEPLOYMENT = _object({"environment": _STRING, "infrastructure": _STRING, "operational": _STRINGS})

TOOL_DEFINITIONS: Dict[ToolName, Tuple[str, Dict[str, Any]]] = {
    ToolName.SELECT_TECHNIQUES: (
        "Process the user's technique selection (like '6,8,10', technique names, or "
        "'recommended' / 'random' / 'progressive') and start the first technique.",
        _object({"userInput": _STRING}, ("userInput",)),
    ),
    ToolName.WHAT_IF: (
        "Ask one What If Scenarios question to expand the user's thinking.",
        _object(
            {
                "idea": _STRING,
                "scenario": {"type": "string", "enum": list(WHAT_IF_SCENARIOS)},
                "step": {"type": "integer", "minimum": 1, "maximum": 3},
            },
            ("idea", "scenario", "step"),
        ),
    ),
    ToolName.ANALOGICAL: (
        "Ask the user to find connections through an analogy.",
        _object(
            {
                "idea": _STRING,
                "analogyType": {"type": "string", "enum": list(ANALOGIES)},
                "step": {"type": "integer", "minimum": 1, "maximum": 3},
            },
            ("idea", "analogyType", "step"),
        ),
    ),
    ToolName.YES_AND: (
        "Build on the current idea with 'Yes, and...', alternating user and agent turns.",
        _object(
            {
                "idea": _STRING,
                "buildType": {"type": "string", "enum": list(YES_AND_BUILDS)},
                "turn": {"type": "string", "enum": ["user", "agent"]},
            },
            ("idea", "buildType", "turn"),
        ),
    ),
    ToolName.FIVE_WHYS: (
        "Ask one 'Why' question at a time, building on the previous answer.",
        _object(
            {
                "idea": _STRING,
                "whyLevel": {"type": "integer", "minimum": 1, "maximum": 5},
                "previousAnswer": _STRING,
            },
            ("idea", "whyLevel"),
        ),
    ),
    ToolName.NEXT_PROMPT: (
        "Get the next facilitation question for the active technique.",
        _object({}),
    ),
    ToolName.COMPLETE_TECHNIQUE: (
        "Mark the current technique as complete and move to the next one.",
        _object({"ideasGenerated": {"type": "integer", "minimum": 0}, "summary": _STRING}),
    ),
    ToolName.PROGRESS: (
        "Report which techniques are selected, active and completed.",
        _object({}),
    ),
    ToolName.SAVE_IDEA: (
        "Save an idea the user generated.",
        _object(
            {
                "title": _STRING,
                "description": _STRING,
                "rationale": _STRING,
                "category": _STRING,
                "tags": _TAGS,
                "source": _STRING,
                "confidence": {"type": "integer", "minimum": 1, "maximum": 10},
            },
            ("title", "description"),
        ),
    ),
    ToolName.GET_IDEAS: (
        "List ideas, optionally filtered by category, tags (any match) and source.",
        _object({"category": _STRING, "tags": _TAGS, "source": _STRING}),
    ),
    ToolName.UPDATE_IDEA: (
        "Update fields of an existing idea.",
        _object(
            {
                "ideaId": _STRING,
                "updates": _object(
                    {
                        "title": _STRING,
                        "description": _STRING,
                        "rationale": _STRING,
                        "category": _STRING,
                        "tags": _TAGS,
                        "confidence": {"type": "integer", "minimum": 1, "maximum": 10},
                    }
                ),
            },
            ("ideaId", "updates"),
        ),
    ),
    ToolName.DELETE_IDEA: (
        "Delete an idea by id.",
        _object({"ideaId": _STRING}, ("ideaId",)),
    ),
    ToolName.SCORE_IDEAS: (
        "Score every saved idea on impact, feasibility and effort and rank by priority.",
        _object({}),
    ),
    ToolName.CLUSTER_IDEAS: (
        "Group saved ideas into thematic clusters.",
        _object({"maxClusters": {"type": "integer", "minimum": 1, "maximum": 8}}),
    ),
    ToolName.SCAMPER: (
        "Apply one SCAMPER lens to an idea and save the variations as new ideas.",
        _object(
            {"idea": _STRING, "technique": {"type": "string", "enum": list(SCAMPER_QUESTIONS)}},
            ("idea", "technique"),
        ),
    ),
    ToolName.SIX_HATS: (
        "Analyse an idea from one of the Six Thinking Hats perspectives.",
        _object({"idea": _STRING, "hat": {"type": "string", "enum": list(HAT_PERSPECTIVES)}}, ("idea", "hat")),
    ),
    ToolName.MIND_MAP: (
        "Create a mind map around a central idea.",
        _object(
            {
                "centralIdea": _STRING,
                "branches": _STRINGS,
                "depth": {"type": "integer", "minimum": 1, "maximum": 3},
            },
            ("centralIdea",),
        ),
    ),
    ToolName.ROLESTORMING: (
        "Explore an idea from the point of view of a specific role.",
        _object({"idea": _STRING, "role": {"type": "string", "enum": list(ROLE_PERSPECTIVES)}}, ("idea", "role")),
    ),
    ToolName.ASSESS_RISKS: (
        "Assess risks and identify potential issues in the project plan.",
        _object(
            {
                "projectScope": _STRING,
                "timeline": _STRING,
                "budget": _STRING,
                "team": _STRINGS,
                "dependencies": _STRINGS,
            },
            ("projectScope",),
        ),
    ),
    ToolName.CHECK_FEASIBILITY: (
        "Check technical, business, operational and financial feasibility of a solution.",
        _object(
            {
                "solution": _STRING,
                "requirements": _STRINGS,
                "constraints": _STRINGS,
                "timeline": _STRING,
                "resources": _STRINGS,
            },
            ("solution", "requirements"),
        ),
    ),
    ToolName.DESIGN_ARCHITECTURE: (
        "Design a system architecture for the given components and constraints.",
        _object(
            {
                "systemType": {
                    "type": "string",
                    "enum": [
                        "monolith",
                        "microservices",
                        "serverless",
                        "event_driven",
                        "layered",
                        "hexagonal",
                        "clean_architecture",
                    ],
                },
                "components": _STRINGS,
                "integrations": _STRINGS,
                "performance": {"type": "string", "enum": ["low", "medium", "high", "critical"]},
                "availability": {"type": "string", "enum": ["99%", "99.9%", "99.99%", "99.999%"]},
            },
            ("systemType", "components"),
        ),
    ),
    ToolName.TECH_STACK: (
        "Recommend a technology stack for the project type and requirements.",
        _object(
            {
                "projectType": {
                    "type": "string",
                    "enum": [
                        "web_app",
                        "mobile_app",
                        "desktop_app",
                        "api",
                        "data_pipeline",
                        "ml_model",
                        "blockchain",
                        "iot",
                        "game",
                        "other",
                    ],
                },
                "requirements": _STRINGS,
                "constraints": _STRINGS,
                "scale": {"type": "string", "enum": ["small", "medium", "large", "enterprise"]},
                "teamSize": {"type": "integer", "minimum": 1},
            },
            ("projectType", "requirements"),
        ),
    ),
    ToolName.GENERATE_PRD: (
        "Generate a Product Requirements Document from the problem statement and the saved ideas.",
        _object(
            {
                "problemStatement": _STRING,
                "projectType": _PROJECT_KIND,
                "targetUsers": _STRING,
                "businessGoals": _STRINGS,
                "technicalConstraints": _STRINGS,
                "architectureGuidance": _STRING,
                "performanceRequirements": _PERFORMANCE,
                "securityRequirements": _STRINGS,
                "integrationRequirements": _STRINGS,
                "deploymentRequirements": _DEPLOYMENT,
            },
            ("problemStatement",),
        ),
    ),
    ToolName.CREATE_EPIC: (
        "Create a product epic with user stories and acceptance criteria.",
        _object(
            {
                "title": _STRING,
                "description": _STRING,
                "businessValue": _STRING,
                "userPersona": _STRING,
                "priority": {"type": "string", "enum": ["high", "medium", "low"]},
                "estimatedEffort": {"type": "string", "enum": ["small", "medium", "large", "xlarge"]},
                "features": {
                    "type": "array",
                    "items": _object(
                        {"title": _STRING, "description": _STRING, "userBenefit": _STRING}, ("title", "description")
                    ),
                },
                "projectType": _PROJECT_KIND,
            },
            ("title", "description", "businessValue", "userPersona", "features"),
        ),
    ),
    ToolName.VALIDATE_PRD: (
        "Validate a PRD draft against product management standards.",
        _object(
            {
                "prd": _object(
                    {
                        "problemStatement": _STRING,
                        "targetUsers": _STRING,
                        "businessGoals": _STRINGS,
                        "features": {
                            "type": "array",
                            "items": _object(
                                {
                                    "title": _STRING,
                                    "description": _STRING,
                                    "priority": _STRING,
                                    "acceptanceCriteria": _STRINGS,
                                },
                                ("title",),
                            ),
                        },
                        "successMetrics": _STRINGS,
                        "mvpScope": _STRINGS,
                        "technicalConstraints": _STRINGS,
                        "architectureGuidance": _STRING,
                        "performanceRequirements": _PERFORMANCE,
                        "securityRequirements": _STRINGS,
                        "integrationRequirements": _STRINGS,
                        "deploymentRequirements": _DEPLOYMENT,
                    },
                    ("problemStatement",),
                ),
                "validationLevel": {"type": "string", "enum": ["comprehensive", "quick", "focused"]},
            },
            ("prd",),
        ),
    ),
    ToolName.CREATE_WORKFLOW: (
        "Create a multi-step workflow and make it the active one.",
        _object(
            {
                "workflowName": _STRING,
                "steps": {
                    "type": "array",
                    "items": _object(
                        {
                            "id": _STRING,
                            "name": _STRING,
                            "description": _STRING,
                            "agent": {"type": "string", "enum": ["brain", "analyst", "pm", "architect", "validator"]},
                            "tools": _STRINGS,
                            "dependencies": _STRINGS,
                            "estimatedDuration": _STRING,
                        },
                        ("id", "name", "agent"),
                    ),
                },
                "parallelExecution": {"type": "boolean"},
            },
            ("workflowName", "steps"),
        ),
    ),
    ToolName.EXECUTE_STEP: (
        "Start a step of the active workflow.",
        _object({"stepId": _STRING, "input": _STRING}, ("stepId",)),
    ),
    ToolName.COMPLETE_STEP: (
        "Mark a running workflow step as completed with its results.",
        _object({"stepId": _STRING, "results": {}, "nextSteps": _STRINGS}, ("stepId",)),
    ),
    ToolName.WORKFLOW_STATUS: (
        "Report progress of the active workflow.",
        _object({}),
    ),
}

_FACILITATION_TOOLS = (
    ToolName.SELECT_TECHNIQUES,
    ToolName.WHAT_IF,
    ToolName.ANALOGICAL,
    ToolName.YES_AND,
    ToolName.FIVE_WHYS,
    ToolName.NEXT_PROMPT,
    ToolName.COMPLETE_TECHNIQUE,
    ToolName.PROGRESS,
)
_IDEA_TOOLS = (ToolName.SAVE_IDEA, ToolName.GET_IDEAS, ToolName.UPDATE_IDEA, ToolName.DELETE_IDEA)
_ANALYSIS_TOOLS = (ToolName.SCORE_IDEAS, ToolName.CLUSTER_IDEAS)
_EXPLORATION_TOOLS = (ToolName.SCAMPER, ToolName.SIX_HATS, ToolName.MIND_MAP, ToolName.ROLESTORMING)
_PM_TOOLS = (ToolName.GENERATE_PRD, ToolName.CREATE_EPIC, ToolName.VALIDATE_PRD)
_ARCHITECTURE_TOOLS = (ToolName.DESIGN_ARCHITECTURE, ToolName.TECH_STACK)
_VALIDATION_TOOLS = (ToolName.ASSESS_RISKS, ToolName.CHECK_FEASIBILITY)
_WORKFLOW_TOOLS = (
    ToolName.CREATE_WORKFLOW,
    ToolName.EXECUTE_STEP,
    ToolName.COMPLETE_STEP,
    ToolName.WORKFLOW_STATUS,
)

ROLE_TOOLS: Dict[AgentRole, Tuple[ToolName, ...]] = {
    AgentRole.BRAIN: _FACILITATION_TOOLS + _EXPLORATION_TOOLS + _IDEA_TOOLS,
    AgentRole.ANALYST: _IDEA_TOOLS + _ANALYSIS_TOOLS,
    AgentRole.PM: _IDEA_TOOLS + _ANALYSIS_TOOLS + _PM_TOOLS,
    AgentRole.ARCHITECT: (ToolName.GET_IDEAS, ToolName.SAVE_IDEA)
    + _ARCHITECTURE_TOOLS
    + (ToolName.CHECK_FEASIBILITY,),
    AgentRole.VALIDATOR: (ToolName.GET_IDEAS, ToolName.SCORE_IDEAS)
    + _VALIDATION_TOOLS
    + (ToolName.VALIDATE_PRD,),
    AgentRole.COORDINATOR: _FACILITATION_TOOLS
    + _EXPLORATION_TOOLS
    + _IDEA_TOOLS
    + _ANALYSIS_TOOLS
    + _PM_TOOLS
    + _ARCHITECTURE_TOOLS
    + _VALIDATION_TOOLS
    + _WORKFLOW_TOOLS,
}


def tool_specs(role: AgentRole) -> List[Dict[str, Any]]:
    """OpenAI ``tools`` payload for *role*."""

    specs = []
    for name in ROLE_TOOLS[role]:
        description, parameters = TOOL_DEFINITIONS[name]
        specs.append(
            {
                "type": "function",
                "function": {"name": name.value, "description": description, "parameters": parameters},
            }
        )
    return specs


def _error(message: str, **extra: Any) -> Dict[str, Any]:
    return {"success": False, "error": message, "message": message, **extra}


def _parse_arguments(raw: str | Mapping[str, Any] | None) -> Dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Tool arguments must be a JSON object")
    return parsed


def run_tool(context: DiscoveryContext, name: str, raw_arguments: str | Mapping[str, Any] | None) -> Dict[str, Any]:
    """Execute tool *name* against *context* and return a JSON-able result."""

    try:
        tool = ToolName(name)
    except ValueError:
        logger.warning("Model requested unknown tool %s", name)
        return _error(f"Unknown tool: {name}")

    try:
        args = _parse_arguments(raw_arguments)
        return _dispatch(context, tool, args)
    except NotFound as exc:
        if exc.kind == "idea":
            return _error(str(exc), ideaId=exc.identifier)
        if exc.kind == "workflow step":
            return _error(str(exc), stepId=exc.identifier)
        return _error(str(exc))
    except (KeyError, TypeError, ValueError) as exc:
        logger.info("Tool %s rejected arguments: %s", tool.value, exc)
        return _error(f"Invalid arguments for {tool.value}: {exc}")


def _dispatch(context: DiscoveryContext, tool: ToolName, args: Dict[str, Any]) -> Dict[str, Any]:
    state = context.facilitation
    ledger = IdeaLedger(context.ideas)

    if tool is ToolName.SELECT_TECHNIQUES:
        return select_techniques(state, str(args.get("userInput", ""))).to_payload()

    if tool is ToolName.WHAT_IF:
        return facilitate_what_if(state, args["idea"], args["scenario"], int(args["step"])).to_payload()

    if tool is ToolName.ANALOGICAL:
        return facilitate_analogical(state, args["idea"], args["analogyType"], int(args["step"])).to_payload()

    if tool is ToolName.YES_AND:
        return facilitate_yes_and(state, args["idea"], args["buildType"], args["turn"]).to_payload()

    if tool is ToolName.FIVE_WHYS:
        return facilitate_five_whys(
            state, args["idea"], int(args["whyLevel"]), args.get("previousAnswer")
        ).to_payload()

    if tool is ToolName.NEXT_PROMPT:
        prompt = next_prompt(state)
        if prompt is None:
            return {
                "success": False,
                "message": "No further prompts for the active technique. Call complete_current_technique.",
                "progress": describe_progress(state),
            }
        return prompt.to_payload()

    if tool is ToolName.COMPLETE_TECHNIQUE:
        completion = complete_current_technique(
            state, int(args.get("ideasGenerated", 0)), args.get("summary")
        )
        return completion.to_payload()

    if tool is ToolName.PROGRESS:
        return describe_progress(state)

    if tool is ToolName.SAVE_IDEA:
        idea = ledger.save(
            args["title"],
            args["description"],
            rationale=args.get("rationale"),
            category=args.get("category"),
            tags=args.get("tags"),
            source=args.get("source") or state.current_technique,
            confidence=args.get("confidence"),
        )
        return {
            "success": True,
            "idea": idea.model_dump(mode="json"),
            "totalIdeas": len(ledger),
            "message": f'Saved idea: "{idea.title}" ({len(ledger)} total ideas)',
        }

    if tool is ToolName.GET_IDEAS:
        ideas = ledger.list(args.get("category"), args.get("tags"), args.get("source"))
        return {
            "ideas": [idea.model_dump(mode="json") for idea in ideas],
            "totalCount": len(ideas),
            "message": f"Found {len(ideas)} ideas matching criteria",
        }

    if tool is ToolName.UPDATE_IDEA:
        idea = ledger.update(args["ideaId"], args.get("updates") or {})
        return {"success": True, "idea": idea.model_dump(mode="json"), "message": f'Updated idea: "{idea.title}"'}

    if tool is ToolName.DELETE_IDEA:
        ledger.delete(args["ideaId"])
        return {
            "success": True,
            "deletedId": args["ideaId"],
            "totalIdeas": len(ledger),
            "message": f"Deleted idea with ID: {args['ideaId']}",
        }

    if tool is ToolName.SCORE_IDEAS:
        scores = ledger.rank()
        return {
            "scoredIdeas": [score.model_dump() for score in scores],
            "topIdeas": [score.model_dump() for score in scores[:3]],
            "insights": scoring_insights(scores),
            "message": f"Scored {len(scores)} ideas",
        }

    if tool is ToolName.CLUSTER_IDEAS:
        clusters = cluster_ideas(list(ledger), int(args.get("maxClusters", 5)))
        return {
            "clusters": [cluster.model_dump() for cluster in clusters],
            "clusterCount": len(clusters),
            "message": f"Grouped {len(ledger)} ideas into {len(clusters)} thematic clusters",
        }

    if tool is ToolName.SCAMPER:
        result = apply_scamper(context, args["idea"], args["technique"])
        return {**result.to_payload(), "success": True, "message": result.message}

    if tool is ToolName.SIX_HATS:
        analysis = apply_six_hats(context, args["idea"], args["hat"])
        return {
            **analysis.to_payload(),
            "hat": args["hat"],
            "message": f"Analyzed idea from {args['hat']} hat perspective",
        }

    if tool is ToolName.MIND_MAP:
        mind_map = create_mind_map(
            context, args["centralIdea"], args.get("branches"), int(args.get("depth", 2))
        )
        return {
            "mindMap": mind_map.to_payload(),
            "totalMaps": len(context.mind_maps),
            "message": f"Created mind map with {len(mind_map.branches)} main branches",
        }

    if tool is ToolName.ROLESTORMING:
        analysis = apply_rolestorming(context, args["idea"], args["role"])
        return {
            **analysis.to_payload(),
            "role": args["role"],
            "message": f"Analyzed idea from {args['role']} perspective",
        }

    if tool is ToolName.ASSESS_RISKS:
        assessment = assess_risks(
            args["projectScope"],
            args.get("timeline"),
            args.get("budget"),
            args.get("team") or [],
            args.get("dependencies") or [],
        )
        return {**assessment.to_payload(), "message": assessment.message}

    if tool is ToolName.CHECK_FEASIBILITY:
        report = check_feasibility(
            args["solution"],
            args["requirements"],
            args.get("constraints") or [],
            args.get("timeline"),
            args.get("resources") or [],
        )
        return {**report.to_payload(), "message": report.message}

    if tool is ToolName.DESIGN_ARCHITECTURE:
        design = design_architecture(
            args["systemType"],
            args["components"],
            args.get("integrations") or [],
            args.get("performance") or "medium",
            args.get("availability") or "99.9%",
        )
        return {**design.to_payload(), "message": design.message}

    if tool is ToolName.TECH_STACK:
        team_size = args.get("teamSize")
        recommendation = recommend_tech_stack(
            args["projectType"],
            args["requirements"],
            args.get("constraints") or [],
            args.get("scale") or "medium",
            int(team_size) if team_size is not None else None,
        )
        return {**recommendation.to_payload(), "message": recommendation.message}

    if tool is ToolName.GENERATE_PRD:
        performance = args.get("performanceRequirements")
        deployment = args.get("deploymentRequirements")
        prd = generate_prd(
            args["problemStatement"],
            list(ledger),
            project_type=args.get("projectType") or "greenfield",
            target_users=args.get("targetUsers"),
            business_goals=args.get("businessGoals"),
            technical_constraints=args.get("technicalConstraints"),
            architecture_guidance=args.get("architectureGuidance"),
            performance_requirements=(
                PerformanceRequirements.model_validate(performance) if performance is not None else None
            ),
            security_requirements=args.get("securityRequirements"),
            integration_requirements=args.get("integrationRequirements"),
            deployment_requirements=(
                DeploymentRequirements.model_validate(deployment) if deployment is not None else None
            ),
        )
        return {**prd.to_payload(), "success": True, "message": prd.message}

    if tool is ToolName.CREATE_EPIC:
        epic = create_epic(
            args["title"],
            args["description"],
            args["businessValue"],
            args["userPersona"],
            [EpicFeature.model_validate(feature) for feature in args["features"]],
            priority=args.get("priority") or "medium",
            estimated_effort=args.get("estimatedEffort"),
            project_type=args.get("projectType") or "greenfield",
        )
        return {**epic.to_payload(), "message": epic.message}

    if tool is ToolName.VALIDATE_PRD:
        validation = validate_prd(
            PrdDraft.model_validate(args["prd"]), args.get("validationLevel") or "comprehensive"
        )
        return {**validation.to_payload(), "message": validation.message}

    if tool is ToolName.CREATE_WORKFLOW:
        workflow = create_workflow(
            context, args["workflowName"], args["steps"], bool(args.get("parallelExecution", False))
        )
        return {
            "success": True,
            "workflow": workflow.to_payload(),
            "message": f'Created workflow: "{workflow.name}" with {len(workflow.steps)} steps',
        }

    if tool is ToolName.EXECUTE_STEP:
        execution = execute_step(context, args["stepId"], args.get("input"))
        workflow = active_workflow(context)
        step = workflow.steps[workflow.current_step]
        return {
            "success": True,
            "stepExecution": execution.to_payload(),
            "workflow": workflow.to_payload(),
            "message": f'Executing step: "{step.name}" using {step.agent} agent',
        }

    if tool is ToolName.COMPLETE_STEP:
        execution = complete_step(context, args["stepId"], args.get("results"), args.get("nextSteps"))
        workflow = active_workflow(context)
        finished = workflow.status is WorkflowStatus.COMPLETED
        return {
            "success": True,
            "stepExecution": execution.to_payload(),
            "workflow": workflow.to_payload(),
            "isWorkflowComplete": finished,
            "message": f'Completed step: "{execution.step_id}"' + (" - Workflow complete!" if finished else ""),
        }

    if tool is ToolName.WORKFLOW_STATUS:
        return {"success": True, **workflow_status(context).to_payload()}

    raise ValueError(f"Unhandled tool {tool.value}")
