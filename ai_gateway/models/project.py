"""Project-side models consumed or produced by the generation services.

Rows coming from the hosted database use snake_case; payloads coming back
from the generation endpoint use camelCase.  Models that parse endpoint
payloads declare explicit aliases and accept either spelling.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Priority(str, Enum):  # noqa: UP042
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    STRATEGIC = "strategic"
    INNOVATION = "innovation"


class Quadrant(str, Enum):  # noqa: UP042
    """Effort/impact matrix quadrants."""

    QUICK_WINS = "quick-wins"        # low effort, high impact
    MAJOR_PROJECTS = "major-projects"  # high effort, high impact
    FILL_INS = "fill-ins"            # low effort, low impact
    THANKLESS_TASKS = "thankless-tasks"  # high effort, low impact


class IdeaCard(BaseModel):
    """An idea placed on the project's effort/impact matrix."""

    id: str
    content: str
    details: str = ""
    x: float = 0.0
    y: float = 0.0
    priority: Priority = Priority.MODERATE
    created_by: str = "ai-assistant"


class ProjectContext(BaseModel):
    """Optional project metadata folded into prompts and cache keys."""

    name: str | None = None
    description: str | None = None
    type: str | None = None
    tags: list[str] = Field(default_factory=list)


class ProjectFile(BaseModel):
    """One row of the project's supporting-files table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    project_id: str
    name: str
    file_type: str = ""
    mime_type: str = "application/octet-stream"
    file_size: int = 0
    storage_path: str = ""
    content_preview: str | None = None


class DocumentContext(BaseModel):
    """A supporting file reduced to what a prompt needs."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    mime_type: str
    content: str
    storage_path: str
    file_size: int | None = None


class AttachmentSignals(BaseModel):
    """Attachment flags derived from a project's documents."""

    model_config = ConfigDict(frozen=True)

    has_files: bool = False
    has_images: bool = False
    has_audio: bool = False
    document_count: int = 0


# ---------------------------------------------------------------------------
# Insights payload
# ---------------------------------------------------------------------------

class KeyInsight(BaseModel):
    insight: str
    impact: str = ""


class PriorityRecommendations(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list, alias="shortTerm")
    long_term: list[str] = Field(default_factory=list, alias="longTerm")


class RiskAssessment(BaseModel):
    risks: list[str] = Field(default_factory=list)
    mitigations: list[str] = Field(default_factory=list)


class InsightsReport(BaseModel):
    """Strategic insights for a project, as returned by the generation endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    executive_summary: str = Field(alias="executiveSummary")
    key_insights: list[KeyInsight] = Field(default_factory=list, alias="keyInsights")
    priority_recommendations: PriorityRecommendations = Field(
        default_factory=PriorityRecommendations, alias="priorityRecommendations"
    )
    risk_assessment: RiskAssessment | None = Field(default=None, alias="riskAssessment")
