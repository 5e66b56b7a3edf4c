"""Idea generation through the gateway.

Two operations, each cached under its own operation name:

* ``generateIdea``          -- one idea for a title; keys are bucketed into
  5-minute windows so repeated clicks within a window reuse the answer but
  a later request gets a fresh suggestion.  TTL 10 minutes.
* ``generateMultipleIdeas`` -- a batch of ideas placed on the effort/impact
  matrix.  TTL 15 minutes.

The model is expected to answer ``{"ideas": [{"title", "description",
"impact", "effort"}, ...]}``.  Payloads without at least one idea object
are rejected before caching and handled like any other generation failure.
"""

from __future__ import annotations

import time
from typing import Any

import structlog

from ai_gateway.models.project import IdeaCard, ProjectContext
from ai_gateway.models.routing import TaskContext, TaskType, UserTier
from ai_gateway.services import mock_content
from ai_gateway.services.ai_gateway import AIGateway
from ai_gateway.services.matrix import map_priority_level, map_to_quadrant, position_for_quadrant
from ai_gateway.utils.cache_keys import time_bucket
from ai_gateway.utils.errors import GatewayError, LLMError

logger = structlog.get_logger(logger_name=__name__)

IDEA_TTL_MS = 10 * 60 * 1000
IDEAS_TTL_MS = 15 * 60 * 1000
IDEA_BUCKET_MS = 5 * 60 * 1000

_SYSTEM_PROMPT = (
    "You are a product strategist helping a team brainstorm. Respond with a JSON "
    'object of the form {"ideas": [{"title": str, "description": str, '
    '"impact": "low"|"medium"|"high", "effort": "low"|"medium"|"high"}]}.'
)


class IdeaService:
    """Generates single ideas and idea batches for a project."""

    def __init__(self, gateway: AIGateway, allow_mock_fallback: bool = True) -> None:
        self._gateway = gateway
        self._allow_mock_fallback = allow_mock_fallback

    async def generate_idea(
        self,
        title: str,
        project_context: ProjectContext | None = None,
        user_id: str | None = None,
        user_tier: UserTier = UserTier.FREE,
        now_ms: float | None = None,
    ) -> dict[str, Any]:
        """Return ``{"content", "details", "priority"}`` for *title*."""
        project_context = project_context or ProjectContext()
        now_ms = time.time() * 1000.0 if now_ms is None else now_ms
        params = {
            "title": title.strip().lower(),
            "projectContext": project_context.model_dump(exclude_defaults=True),
            "userId": user_id,
            "timestamp": time_bucket(now_ms, IDEA_BUCKET_MS),
        }
        user_prompt = (
            f"Suggest one idea titled {title!r} for a {project_context.type or 'General'} "
            f"project. Project description: {project_context.description or 'n/a'}."
        )
        context = TaskContext(task_type=TaskType.IDEA_GENERATION, idea_count=1, user_tier=user_tier)

        try:
            data = await self._gateway.generate(
                "generateIdea",
                params,
                context,
                _SYSTEM_PROMPT,
                user_prompt,
                IDEA_TTL_MS,
                validate=_raw_ideas,
            )
            ideas = _raw_ideas(data)
        except GatewayError as exc:
            if not mock_content.fallback_allowed(exc, self._allow_mock_fallback, "generateIdea"):
                raise
            return mock_content.mock_idea(title)

        first = ideas[0]
        return {
            "content": first.get("title", title),
            "details": first.get("description", ""),
            "priority": map_priority_level(first.get("impact"), first.get("effort")).value,
        }

    async def generate_ideas(
        self,
        title: str,
        description: str,
        project_type: str = "General",
        count: int = 8,
        tolerance: int = 50,
        user_id: str | None = None,
        user_tier: UserTier = UserTier.FREE,
    ) -> list[IdeaCard]:
        """Generate *count* ideas, positioned by their impact/effort labels.

        *tolerance* (0-100) tells the model how adventurous the ideas may be.
        """
        params = {
            "title": title,
            "description": description,
            "projectType": project_type,
            "count": count,
            "tolerance": tolerance,
            "userId": user_id,
        }
        user_prompt = (
            f"Project: {title} ({project_type}).\n"
            f"Description: {description}\n"
            f"Generate {count} ideas. Risk tolerance: {tolerance}% "
            "(0 = safe, proven ideas; 100 = experimental)."
        )
        context = TaskContext(
            task_type=TaskType.IDEA_GENERATION,
            complexity=self._gateway.router.analyze_complexity(idea_count=count),
            idea_count=count,
            user_tier=user_tier,
        )

        try:
            data = await self._gateway.generate(
                "generateMultipleIdeas",
                params,
                context,
                _SYSTEM_PROMPT,
                user_prompt,
                IDEAS_TTL_MS,
                validate=_raw_ideas,
            )
            ideas = _raw_ideas(data)
        except GatewayError as exc:
            if not mock_content.fallback_allowed(exc, self._allow_mock_fallback, "generateMultipleIdeas"):
                raise
            return mock_content.mock_ideas(count)

        return [_to_card(idea, index) for index, idea in enumerate(ideas)]


def _raw_ideas(data: dict[str, Any]) -> list[dict[str, Any]]:
    ideas = data.get("ideas")
    if not isinstance(ideas, list) or not all(isinstance(i, dict) for i in ideas):
        raise LLMError("Idea payload must contain a list of objects under 'ideas'")
    if not ideas:
        logger.warning("idea_payload_empty")
        raise LLMError("Idea payload contained no ideas")
    return ideas


def _to_card(idea: dict[str, Any], index: int) -> IdeaCard:
    impact, effort = idea.get("impact"), idea.get("effort")
    x, y = position_for_quadrant(map_to_quadrant(effort, impact), index)
    return IdeaCard(
        id=f"ai-{index}",
        content=str(idea.get("title", "")),
        details=str(idea.get("description", "")),
        x=x,
        y=y,
        priority=map_priority_level(impact, effort),
    )
