from __future__ import annotations

from discovery_flow.validation import assess_risks, check_feasibility, risk_level


def test_risk_level_thresholds() -> None:
    assert risk_level(0) == "low"
    assert risk_level(4) == "low"
    assert risk_level(5) == "medium"
    assert risk_level(8) == "high"


def test_every_risk_rule_adds_up_to_high() -> None:
    assessment = assess_risks(
        "A complex marketplace",
        timeline="Tight three month deadline",
        team=["founder"],
        dependencies=["Stripe", "Twilio", "Maps API", "Auth0"],
    )

    assert assessment.risk_score == 11
    assert assessment.risk_level == "high"
    assert [risk.risk for risk in assessment.risks] == [
        "High technical complexity",
        "Aggressive timeline",
        "Small team size",
        "High external dependencies",
    ]
    assert assessment.recommendations[0] == "Consider reducing scope or extending timeline"
    assert assessment.message == "Risk assessment completed: high risk level with 4 identified risks"


def test_medium_and_low_risk_plans() -> None:
    medium = assess_risks("Advanced search", team=["dev"])
    assert medium.risk_score == 5
    assert medium.risk_level == "medium"
    assert medium.recommendations == ["Monitor key risk indicators", "Prepare mitigation strategies"]

    low = assess_risks("Reduce complexity for new users", team=["a", "b", "c"])
    assert low.risk_score == 0
    assert low.risks == []
    assert low.recommendations[0] == "Continue with current plan"


def test_risk_payload_uses_camel_case() -> None:
    payload = assess_risks("Checklist app", team=["a", "b", "c"]).to_payload()

    assert payload["riskLevel"] == "low"
    assert payload["riskScore"] == 0
    assert set(payload["categories"]) == {"technical", "business", "operational", "external"}


def test_clean_solution_is_feasible_with_caution() -> None:
    report = check_feasibility(
        "A web dashboard for invoices",
        ["Validated market demand"],
        resources=["designer", "backend dev", "frontend dev"],
    )

    assert report.total_score == 10
    assert report.max_total_score == 16
    assert report.feasibility_percentage == 63
    assert report.feasibility_level == "medium"
    assert report.verdict == "Proceed with caution"
    assert report.issues == []


def test_risky_solution_collects_issues() -> None:
    report = check_feasibility(
        "An AI tutor for kids",
        ["real-time feedback"],
        constraints=["tight budget"],
        timeline="aggressive",
    )

    assert report.areas["technical"].score == 1
    assert report.areas["business"].score == 0
    assert report.areas["operational"].score == 1
    assert report.areas["financial"].score == 1
    assert report.feasibility_level == "low"
    assert report.verdict == "Reconsider approach"
    assert report.critical_issues == 2
    assert report.medium_issues == 3
    assert report.recommendations == [
        "Hire or train ML specialists",
        "Consider phased delivery approach",
        "Optimize solution for cost-effectiveness",
    ]


def test_ml_staff_and_streaming_clear_their_issues() -> None:
    report = check_feasibility(
        "AI captions over a streaming pipeline",
        ["real-time transcripts", "market pull from schools"],
        resources=["ML engineer", "backend dev", "designer"],
    )

    assert all("AI/ML" not in issue.issue for issue in report.issues)
    assert all("Real-time" not in issue.issue for issue in report.issues)
    assert report.issues == []
