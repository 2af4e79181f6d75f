"""Architecture pattern and technology stack recommendations for the architect agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

from .ideas import mentions
from .schemas import ToolRecord

SystemType = Literal[
    "monolith", "microservices", "serverless", "event_driven", "layered", "hexagonal", "clean_architecture"
]
PerformanceLevel = Literal["low", "medium", "high", "critical"]
Availability = Literal["99%", "99.9%", "99.99%", "99.999%"]
ProjectType = Literal[
    "web_app", "mobile_app", "desktop_app", "api", "data_pipeline", "ml_model", "blockchain", "iot", "game", "other"
]
Scale = Literal["small", "medium", "large", "enterprise"]


@dataclass(frozen=True)
class ArchitecturePattern:
    description: str
    pros: tuple[str, ...]
    cons: tuple[str, ...]
    best_for: tuple[str, ...]


PATTERNS: Dict[str, ArchitecturePattern] = {
    "monolith": ArchitecturePattern(
        "Single deployable unit with all functionality",
        ("Simple deployment", "Easy development", "Consistent data"),
        ("Hard to scale", "Technology lock-in", "Single point of failure"),
        ("Small teams", "Simple applications", "Rapid prototyping"),
    ),
    "microservices": ArchitecturePattern(
        "Loosely coupled services with independent deployment",
        ("Independent scaling", "Technology diversity", "Fault isolation"),
        ("Complex deployment", "Network latency", "Data consistency"),
        ("Large teams", "Complex domains", "High scalability needs"),
    ),
    "serverless": ArchitecturePattern(
        "Event-driven functions with automatic scaling",
        ("No server management", "Pay per use", "Automatic scaling"),
        ("Cold starts", "Vendor lock-in", "Limited execution time"),
        ("Event processing", "APIs", "Batch jobs"),
    ),
    "event_driven": ArchitecturePattern(
        "Asynchronous communication through events",
        ("Loose coupling", "Scalability", "Resilience"),
        ("Complex debugging", "Eventual consistency", "Message ordering"),
        ("Real-time systems", "High throughput", "Distributed systems"),
    ),
    "layered": ArchitecturePattern(
        "Horizontal layers for presentation, business logic and data access",
        ("Clear separation of concerns", "Familiar to most teams", "Easy to test per layer"),
        ("Changes ripple across layers", "Risk of anemic domain", "Tends toward a monolith"),
        ("Line-of-business applications", "CRUD-heavy systems", "Teams new to the domain"),
    ),
    "hexagonal": ArchitecturePattern(
        "Domain core isolated behind ports with swappable adapters",
        ("Infrastructure independence", "Highly testable core", "Easy adapter swaps"),
        ("More indirection", "Extra boilerplate", "Steeper learning curve"),
        ("Long-lived products", "Many integrations", "Domain-heavy logic"),
    ),
    "clean_architecture": ArchitecturePattern(
        "Concentric layers with dependencies pointing toward the domain",
        ("Framework independence", "Testable business rules", "Clear boundaries"),
        ("Upfront design cost", "More files and mappings", "Overkill for small apps"),
        ("Complex business rules", "Large codebases", "Multiple delivery mechanisms"),
    ),
}

PERFORMANCE_RECOMMENDATIONS: Dict[str, List[str]] = {
    "high": ["Caching layer", "CDN", "Database optimization", "Load balancing"],
    "critical": ["Distributed caching", "Global CDN", "Database sharding", "Auto-scaling"],
}
BASIC_PERFORMANCE = ["Basic caching", "Database indexing"]

HIGH_AVAILABILITY = ("99.99%", "99.999%")
HIGH_AVAILABILITY_STRATEGIES = ["Multi-region deployment", "Circuit breakers", "Health checks", "Auto-recovery"]
STANDARD_AVAILABILITY_STRATEGIES = ["Single region", "Basic monitoring", "Backup systems"]


class PatternSummary(ToolRecord):
    description: str
    pros: List[str]
    cons: List[str]
    best_for: List[str]


class Component(ToolRecord):
    name: str
    responsibilities: str
    interfaces: str


class Integration(ToolRecord):
    name: str
    type: str = "external"
    protocol: str = "REST/GraphQL"
    authentication: str = "API Key/OAuth"


class PerformancePlan(ToolRecord):
    level: PerformanceLevel
    recommendations: List[str]


class AvailabilityPlan(ToolRecord):
    target: Availability
    strategies: List[str]


class ArchitectureDesign(ToolRecord):
    system_type: SystemType
    pattern: PatternSummary
    components: List[Component]
    integrations: List[Integration]
    performance: PerformancePlan
    availability: AvailabilityPlan

    @property
    def message(self) -> str:
        return (
            f"Designed {self.system_type} architecture for {len(self.components)} components "
            f"with {self.performance.level} performance requirements"
        )


def design_architecture(
    system_type: SystemType,
    components: Sequence[str],
    integrations: Sequence[str] = (),
    performance: PerformanceLevel = "medium",
    availability: Availability = "99.9%",
) -> ArchitectureDesign:
    """Lay out components and integrations on the chosen architecture pattern."""

    if system_type not in PATTERNS:
        raise ValueError(f"Unknown system type: {system_type}")
    pattern = PATTERNS[system_type]
    strategies = HIGH_AVAILABILITY_STRATEGIES if availability in HIGH_AVAILABILITY else STANDARD_AVAILABILITY_STRATEGIES

    return ArchitectureDesign(
        system_type=system_type,
        pattern=PatternSummary(
            description=pattern.description,
            pros=list(pattern.pros),
            cons=list(pattern.cons),
            best_for=list(pattern.best_for),
        ),
        components=[
            Component(
                name=name,
                responsibilities=f"Handles {name.lower()} functionality",
                interfaces=f"Exposes APIs for {name.lower()} operations",
            )
            for name in components
        ],
        integrations=[Integration(name=name) for name in integrations],
        performance=PerformancePlan(
            level=performance,
            recommendations=list(PERFORMANCE_RECOMMENDATIONS.get(performance, BASIC_PERFORMANCE)),
        ),
        availability=AvailabilityPlan(target=availability, strategies=list(strategies)),
    )


# ---------------------------------------------------------------------------
# Technology stacks
# ---------------------------------------------------------------------------

TECH_STACKS: Dict[str, Dict[str, List[str]]] = {
    "web_app": {
        "frontend": ["React", "Vue.js", "Angular", "Svelte"],
        "backend": ["Node.js", "Python (Django/FastAPI)", "Ruby on Rails", "Java (Spring)"],
        "database": ["PostgreSQL", "MongoDB", "MySQL", "Redis"],
        "deployment": ["Vercel", "Netlify", "AWS", "Google Cloud", "Docker"],
    },
    "mobile_app": {
        "native": ["Swift (iOS)", "Kotlin (Android)"],
        "cross_platform": ["React Native", "Flutter", "Xamarin"],
        "backend": ["Node.js", "Firebase", "AWS Amplify"],
        "database": ["Firebase", "MongoDB", "PostgreSQL"],
    },
    "api": {
        "frameworks": ["Express.js", "FastAPI", "Django REST", "Spring Boot", "NestJS"],
        "database": ["PostgreSQL", "MongoDB", "Redis"],
        "deployment": ["AWS Lambda", "Google Cloud Functions", "Docker", "Kubernetes"],
    },
    "data_pipeline": {
        "processing": ["Apache Spark", "Apache Kafka", "Apache Airflow"],
        "storage": ["AWS S3", "Google Cloud Storage", "Apache Hadoop"],
        "databases": ["PostgreSQL", "ClickHouse", "BigQuery", "Snowflake"],
    },
}
DEFAULT_STACK = "web_app"


class TechStackRecommendation(ToolRecord):
    project_type: ProjectType
    scale: Scale
    team_size: Optional[int] = None
    recommended_stack: Dict[str, List[str]]
    reasoning: List[str]
    alternatives: List[str]

    @property
    def message(self) -> str:
        return f"Recommended tech stack for {self.project_type} project with {self.scale} scale"


def recommend_tech_stack(
    project_type: ProjectType,
    requirements: Sequence[str],
    constraints: Sequence[str] = (),
    scale: Scale = "medium",
    team_size: Optional[int] = None,
) -> TechStackRecommendation:
    """Pick a stack for *project_type*; types without a curated stack get the web app one."""

    stack = TECH_STACKS.get(project_type, TECH_STACKS[DEFAULT_STACK])
    reasoning: List[str] = []
    if any(mentions(item, "real-time") for item in requirements):
        reasoning.append("Real-time requirements suggest WebSocket support and event-driven architecture")
    if any(mentions(item, "scalability") for item in requirements):
        reasoning.append("Scalability requirements suggest microservices architecture and cloud deployment")
    if any(mentions(item, "budget") for item in constraints):
        reasoning.append("Budget constraints suggest open-source technologies and cost-effective cloud solutions")
    if team_size and team_size < 5:
        reasoning.append("Small team size suggests full-stack frameworks and managed services")

    return TechStackRecommendation(
        project_type=project_type,
        scale=scale,
        team_size=team_size,
        recommended_stack={layer: list(options) for layer, options in stack.items()},
        reasoning=reasoning,
        alternatives=[],
    )
