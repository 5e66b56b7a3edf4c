"""Deterministic stand-in content for non-production fallbacks.

Used when generation fails outside production so local development and
demos keep working without a model backend.  Output depends only on the
arguments, never on time or randomness, and is never written to the
response cache.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from ai_gateway.models.project import (
    IdeaCard,
    InsightsReport,
    KeyInsight,
    Priority,
    PriorityRecommendations,
    Quadrant,
    RiskAssessment,
)
from ai_gateway.services.matrix import position_for_quadrant
from ai_gateway.utils.errors import GatewayError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)

_CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("user", "interface", "ux"), "user experience", "Streamlined user onboarding process"),
    (("api", "integration", "connect"), "integration", "Third-party service integration"),
    (("data", "analytics", "report"), "analytics", "Real-time reporting system"),
)

_MOCK_IDEAS: tuple[tuple[str, str, Quadrant], ...] = (
    ("Quick Setup Process", "Streamline the initial setup with guided onboarding", Quadrant.QUICK_WINS),
    ("Advanced Analytics Dashboard", "Comprehensive reporting and insights platform", Quadrant.MAJOR_PROJECTS),
    ("Social Media Integration", "Connect with popular social platforms", Quadrant.FILL_INS),
    ("Legacy System Migration", "Complex migration from old infrastructure", Quadrant.THANKLESS_TASKS),
    ("Mobile App Version", "Native mobile application with core features", Quadrant.MAJOR_PROJECTS),
    ("Email Templates", "Pre-designed email templates for communication", Quadrant.QUICK_WINS),
    ("API Rate Limiting", "Implement sophisticated rate limiting system", Quadrant.THANKLESS_TASKS),
    ("User Feedback System", "In-app feedback collection and management", Quadrant.FILL_INS),
)


def mock_idea(title: str) -> dict[str, Any]:
    """Single idea in the ``{content, details, priority}`` shape."""
    lowered = title.lower()
    category, suggestion = "general", "Core functionality implementation"
    for keywords, kw_category, kw_suggestion in _CATEGORY_KEYWORDS:
        if any(word in lowered for word in keywords):
            category, suggestion = kw_category, kw_suggestion
            break
    return {
        "content": title[:1].upper() + title[1:],
        "details": (
            f"{suggestion} for {title}. This {category} enhancement would improve "
            "overall system functionality and user satisfaction."
        ),
        "priority": Priority.MODERATE.value,
    }


def mock_ideas(count: int) -> list[IdeaCard]:
    cards = []
    for index, (content, details, quadrant) in enumerate(_MOCK_IDEAS[: max(count, 0)]):
        x, y = position_for_quadrant(quadrant, index)
        cards.append(
            IdeaCard(
                id=f"mock-{index}",
                content=content,
                details=details,
                x=x,
                y=y,
                priority=Priority.MODERATE,
            )
        )
    return cards


def mock_insights(
    ideas: Sequence[IdeaCard],
    project_name: str,
    document_count: int = 0,
) -> InsightsReport:
    top = [idea.content for idea in ideas[:2]] or ["core features"]
    summary = (
        f"Analysis of {len(ideas)} ideas for {project_name} highlights "
        f"{' and '.join(repr(t) for t in top)} as the clearest opportunities"
    )
    if document_count:
        summary += f", with {document_count} supporting documents providing additional context"
    return InsightsReport(
        executive_summary=summary + ".",
        key_insights=[
            KeyInsight(insight=f"Prioritise {title}", impact="Focus early effort where impact is highest")
            for title in top
        ],
        priority_recommendations=PriorityRecommendations(
            immediate=["Validate the top ideas with target users"],
            short_term=["Ship the quick wins identified on the matrix"],
            long_term=["Revisit major projects once early results are in"],
        ),
        risk_assessment=mock_risks(project_name),
    )


def mock_risks(project_name: str) -> RiskAssessment:
    return RiskAssessment(
        risks=[
            f"Scope creep across {project_name} workstreams",
            "Adoption lower than planned",
        ],
        mitigations=[
            "Fix scope per milestone and review it at each phase gate",
            "Measure activation from the first release and adjust onboarding",
        ],
    )


def mock_roadmap(project_name: str, project_type: str | None = None) -> dict[str, Any]:
    return {
        "roadmapAnalysis": {
            "totalDuration": "12-16 weeks",
            "phases": [
                {
                    "phase": "Foundation & Planning",
                    "description": f"Establish foundations and detailed planning for {project_name}",
                    "duration": "3-4 weeks",
                    "epics": [],
                },
                {
                    "phase": "Core Delivery",
                    "description": f"Build the highest-impact {project_type or 'General'} features",
                    "duration": "6-8 weeks",
                    "epics": [],
                },
                {
                    "phase": "Launch & Iterate",
                    "description": "Release, measure and refine",
                    "duration": "3-4 weeks",
                    "epics": [],
                },
            ],
        },
        "executionStrategy": {
            "methodology": "Agile",
            "sprintLength": "2 weeks",
            "teamRecommendations": "Cross-functional team structure recommended",
            "keyMilestones": [],
        },
    }


def fallback_allowed(exc: GatewayError, enabled: bool, operation: str) -> bool:
    """Whether a failed generation may be answered with mock content.

    Rate limits always reach the caller so they are reported as such.
    """
    if isinstance(exc, RateLimitError) or not enabled:
        return False
    logger.warning(
        "generation_fallback_to_mock",
        operation=operation,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return True
