"""Routing models: the request descriptor and the router's decision.

Both are frozen Pydantic v2 models.  A ``TaskContext`` is built fresh per
generation request and never stored; a ``ModelSelection`` is consumed right
away by the caller's producer and is never cached (only the generated content
it leads to is).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaskType(str, Enum):  # noqa: UP042
    """Closed set of AI task families the router knows about."""

    STRATEGIC_INSIGHTS = "strategic-insights"
    RISK_ASSESSMENT = "risk-assessment"
    IDEA_GENERATION = "idea-generation"
    QUICK_ANALYSIS = "quick-analysis"
    CONTENT_ENHANCEMENT = "content-enhancement"


class Complexity(str, Enum):  # noqa: UP042
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UserTier(str, Enum):  # noqa: UP042
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class CostTier(str, Enum):  # noqa: UP042
    """Coarse cost classification used for routing and reporting, not billing."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Model families that only accept temperature=1.
FIXED_TEMPERATURE_PREFIXES: tuple[str, ...] = ("gpt-5", "o1", "o3", "o4")
FIXED_TEMPERATURE = 1.0


class TaskContext(BaseModel):
    """Descriptor of one generation request, used to drive model selection.

    ``task_type`` accepts any string so that unknown task types reach the
    router's default rule instead of failing validation.
    """

    model_config = ConfigDict(frozen=True)

    task_type: TaskType | str
    complexity: Complexity = Complexity.MEDIUM
    idea_count: int = Field(default=0, ge=0)
    has_files: bool = False
    has_images: bool = False
    has_audio: bool = False
    user_tier: UserTier = UserTier.FREE

    @property
    def has_attachments(self) -> bool:
        return self.has_files or self.has_images or self.has_audio

    @property
    def task_name(self) -> str:
        """Plain string form of ``task_type`` (enum member or raw string)."""
        if isinstance(self.task_type, TaskType):
            return self.task_type.value
        return str(self.task_type)


class ModelSelection(BaseModel):
    """The router's decision for one request."""

    model_config = ConfigDict(frozen=True)

    model: str
    temperature: float
    max_tokens: int = Field(gt=0)
    cost: CostTier
    reasoning: str = Field(min_length=1)

    @model_validator(mode="after")
    def _check_fixed_temperature(self) -> ModelSelection:
        if self.model.startswith(FIXED_TEMPERATURE_PREFIXES) and self.temperature != FIXED_TEMPERATURE:
            raise ValueError(
                f"{self.model} only supports temperature={FIXED_TEMPERATURE}, "
                f"got {self.temperature}"
            )
        return self
