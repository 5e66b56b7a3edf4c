"""Roadmap generation through the gateway.

Roadmaps are the longest, most structured output the gateway produces, so
they route as strategic insights and are cached for 30 minutes.  Legacy
endpoint payloads (``timeline``/``phases`` at the top level) are normalised
into the ``roadmapAnalysis`` + ``executionStrategy`` shape.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import structlog

from ai_gateway.models.project import IdeaCard
from ai_gateway.models.routing import TaskContext, TaskType, UserTier
from ai_gateway.services import mock_content
from ai_gateway.services.ai_gateway import AIGateway
from ai_gateway.services.insights_service import idea_signature
from ai_gateway.services.matrix import quadrant_from_position
from ai_gateway.utils.errors import GatewayError, LLMError

logger = structlog.get_logger(logger_name=__name__)

ROADMAP_TTL_MS = 30 * 60 * 1000

_SYSTEM_PROMPT = (
    "You are a delivery lead turning prioritised ideas into an execution "
    "roadmap. Respond with a JSON object with keys roadmapAnalysis "
    "({totalDuration, phases}) and executionStrategy ({methodology, "
    "sprintLength, teamRecommendations, keyMilestones})."
)


class RoadmapService:
    def __init__(self, gateway: AIGateway, allow_mock_fallback: bool = True) -> None:
        self._gateway = gateway
        self._allow_mock_fallback = allow_mock_fallback

    async def generate_roadmap(
        self,
        ideas: Sequence[IdeaCard],
        project_name: str,
        project_type: str | None = None,
        user_id: str | None = None,
        user_tier: UserTier = UserTier.FREE,
    ) -> dict[str, Any]:
        project_name = project_name or "Project"
        project_type = project_type or "General"
        params = {
            "ideas": idea_signature(ideas),
            "projectName": project_name,
            "projectType": project_type,
            "userId": user_id,
        }
        context = TaskContext(
            task_type=TaskType.STRATEGIC_INSIGHTS,
            complexity=self._gateway.router.analyze_complexity(idea_count=len(ideas)),
            idea_count=len(ideas),
            user_tier=user_tier,
        )
        user_prompt = json.dumps(
            {
                "projectName": project_name,
                "projectType": project_type,
                "ideas": [
                    {
                        "title": idea.content,
                        "description": idea.details,
                        "quadrant": quadrant_from_position(idea.x, idea.y).value,
                    }
                    for idea in ideas
                ],
            },
            ensure_ascii=False,
        )

        try:
            data = await self._gateway.generate(
                "generateRoadmap",
                params,
                context,
                _SYSTEM_PROMPT,
                user_prompt,
                ROADMAP_TTL_MS,
                validate=_roadmap_payload,
            )
            return _roadmap_payload(data)
        except GatewayError as exc:
            if not mock_content.fallback_allowed(exc, self._allow_mock_fallback, "generateRoadmap"):
                raise
            return mock_content.mock_roadmap(project_name, project_type)


def normalize_roadmap(roadmap: dict[str, Any]) -> dict[str, Any]:
    """Return *roadmap* in the current shape, converting the legacy one."""
    if not isinstance(roadmap, dict):
        raise LLMError(f"Roadmap payload must be an object, got {type(roadmap).__name__}")
    if "roadmapAnalysis" in roadmap and "executionStrategy" in roadmap:
        return roadmap
    logger.debug("roadmap_legacy_format_normalized")
    return {
        "roadmapAnalysis": {
            "totalDuration": roadmap.get("timeline", "3-6 months"),
            "phases": roadmap.get("phases", []),
        },
        "executionStrategy": {
            "methodology": roadmap.get("methodology", "Agile"),
            "sprintLength": roadmap.get("sprintLength", "2 weeks"),
            "teamRecommendations": roadmap.get(
                "teamRecommendations", "Cross-functional team structure recommended"
            ),
            "keyMilestones": roadmap.get("keyMilestones", []),
        },
    }


def _roadmap_payload(data: dict[str, Any]) -> dict[str, Any]:
    return normalize_roadmap(data.get("roadmap", data))
