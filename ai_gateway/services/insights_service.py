"""Strategic insights and risk assessment over a project's ideas.

Both operations fold the project's supporting files into the prompt and
let their attachment flags drive routing: a project with uploaded images
or audio is routed to the multimodal tier even when it has few ideas.
The file lookup runs only when the producer does, so a cached report is
served without touching the files API.

Cache keys use an idea *signature* rather than the raw cards.  Positions are
rounded to the nearest 10 so nudging a card on the board does not
invalidate a 20-minute insights result.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from ai_gateway.models.project import DocumentContext, IdeaCard, InsightsReport, RiskAssessment
from ai_gateway.models.routing import TaskContext, TaskType, UserTier
from ai_gateway.services import mock_content
from ai_gateway.services.ai_gateway import AIGateway
from ai_gateway.services.file_context_service import FileContextService
from ai_gateway.services.matrix import quadrant_from_position
from ai_gateway.utils.errors import GatewayError, LLMError

logger = structlog.get_logger(logger_name=__name__)

INSIGHTS_TTL_MS = 20 * 60 * 1000
RISKS_TTL_MS = 20 * 60 * 1000

# Bump to invalidate every cached insights result after a prompt change.
INSIGHTS_KEY_VERSION = "v2-multimodal"

_INSIGHTS_SYSTEM_PROMPT = (
    "You are a senior strategy consultant. Analyse the project's ideas and any "
    "supporting documents and respond with a JSON object with keys "
    "executiveSummary (str), keyInsights ([{insight, impact}]), "
    "priorityRecommendations ({immediate, shortTerm, longTerm}) and "
    "riskAssessment ({risks, mitigations})."
)
_RISKS_SYSTEM_PROMPT = (
    "You are a delivery risk analyst. Respond with a JSON object "
    '{"riskAssessment": {"risks": [str], "mitigations": [str]}} grounded in the '
    "project's ideas and supporting documents."
)


def _round_to_ten(value: float) -> int:
    # Half-up, so 15 -> 20 and 25 -> 30.
    return int(math.floor(value / 10 + 0.5)) * 10


def idea_signature(ideas: Sequence[IdeaCard]) -> list[dict[str, Any]]:
    """Compact, position-tolerant description of *ideas* for cache keys."""
    return [
        {"content": idea.content, "x": _round_to_ten(idea.x), "y": _round_to_ten(idea.y)}
        for idea in ideas
    ]


def _user_prompt(
    ideas: Sequence[IdeaCard],
    project_name: str,
    project_type: str,
    documents: Sequence[DocumentContext],
) -> str:
    payload = {
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
        "documentContext": [
            {"name": doc.name, "type": doc.type, "content": doc.content} for doc in documents
        ],
    }
    return json.dumps(payload, ensure_ascii=False)


class InsightsService:
    """Generates insight reports and risk assessments for a project."""

    def __init__(
        self,
        gateway: AIGateway,
        file_context: FileContextService,
        allow_mock_fallback: bool = True,
    ) -> None:
        self._gateway = gateway
        self._file_context = file_context
        self._allow_mock_fallback = allow_mock_fallback

    async def generate_insights(
        self,
        ideas: Sequence[IdeaCard],
        project_name: str | None = None,
        project_type: str | None = None,
        project_id: str | None = None,
        user_id: str | None = None,
        user_tier: UserTier = UserTier.FREE,
    ) -> InsightsReport:
        project_name = project_name or "Project"
        project_type = project_type or "General"
        params = {
            "ideas": idea_signature(ideas),
            "projectName": project_name,
            "projectType": project_type,
            "projectId": project_id or "none",
            "userId": user_id,
            "version": INSIGHTS_KEY_VERSION,
        }

        async def _prepare() -> tuple[TaskContext, str]:
            documents = await self._file_context.build_document_context(project_id)
            context = self._task_context(TaskType.STRATEGIC_INSIGHTS, ideas, documents, user_tier)
            return context, _user_prompt(ideas, project_name, project_type, documents)

        try:
            data = await self._gateway.generate_prepared(
                "generateInsights",
                params,
                _INSIGHTS_SYSTEM_PROMPT,
                _prepare,
                INSIGHTS_TTL_MS,
                validate=_insights_report,
            )
            return _insights_report(data)
        except GatewayError as exc:
            if not mock_content.fallback_allowed(exc, self._allow_mock_fallback, "generateInsights"):
                raise
            documents = await self._file_context.build_document_context(project_id)
            return mock_content.mock_insights(ideas, project_name, len(documents))

    async def assess_risks(
        self,
        ideas: Sequence[IdeaCard],
        project_name: str | None = None,
        project_type: str | None = None,
        project_id: str | None = None,
        user_id: str | None = None,
        user_tier: UserTier = UserTier.FREE,
    ) -> RiskAssessment:
        project_name = project_name or "Project"
        project_type = project_type or "General"
        params = {
            "ideas": idea_signature(ideas),
            "projectName": project_name,
            "projectType": project_type,
            "projectId": project_id or "none",
            "userId": user_id,
        }

        async def _prepare() -> tuple[TaskContext, str]:
            documents = await self._file_context.build_document_context(project_id)
            context = self._task_context(TaskType.RISK_ASSESSMENT, ideas, documents, user_tier)
            return context, _user_prompt(ideas, project_name, project_type, documents)

        try:
            data = await self._gateway.generate_prepared(
                "assessRisks",
                params,
                _RISKS_SYSTEM_PROMPT,
                _prepare,
                RISKS_TTL_MS,
                validate=_risk_assessment,
            )
            return _risk_assessment(data)
        except GatewayError as exc:
            if not mock_content.fallback_allowed(exc, self._allow_mock_fallback, "assessRisks"):
                raise
            return mock_content.mock_risks(project_name)

    def _task_context(
        self,
        task_type: TaskType,
        ideas: Sequence[IdeaCard],
        documents: Sequence[DocumentContext],
        user_tier: UserTier,
    ) -> TaskContext:
        signals = self._file_context.attachment_signals(documents)
        complexity = self._gateway.router.analyze_complexity(
            idea_count=len(ideas),
            has_files=signals.has_files,
            has_images=signals.has_images,
            has_audio=signals.has_audio,
            document_count=signals.document_count,
        )
        return TaskContext(
            task_type=task_type,
            complexity=complexity,
            idea_count=len(ideas),
            has_files=signals.has_files,
            has_images=signals.has_images,
            has_audio=signals.has_audio,
            user_tier=user_tier,
        )


def _parse(model: type, payload: Any) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.warning("generation_payload_invalid", model=model.__name__, errors=exc.error_count())
        raise LLMError(f"Generated {model.__name__} payload failed validation") from exc


def _insights_report(data: dict[str, Any]) -> InsightsReport:
    return _parse(InsightsReport, data.get("insights", data))


def _risk_assessment(data: dict[str, Any]) -> RiskAssessment:
    return _parse(RiskAssessment, data.get("riskAssessment", data))
