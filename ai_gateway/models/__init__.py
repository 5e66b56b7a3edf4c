"""Gateway domain models, re-exported for ``from ai_gateway.models import ...``.

Submodules:
    - cache.py   : response-cache entries and metrics snapshot
    - routing.py : TaskContext / ModelSelection and their enumerations
    - project.py : ideas, supporting files and insights payloads
"""

from __future__ import annotations

from ai_gateway.models.cache import CacheEntry, CacheMetrics
from ai_gateway.models.project import (
    AttachmentSignals,
    DocumentContext,
    IdeaCard,
    InsightsReport,
    KeyInsight,
    Priority,
    PriorityRecommendations,
    ProjectContext,
    ProjectFile,
    Quadrant,
    RiskAssessment,
)
from ai_gateway.models.routing import (
    Complexity,
    CostTier,
    ModelSelection,
    TaskContext,
    TaskType,
    UserTier,
)

__all__ = [
    # cache
    "CacheEntry",
    "CacheMetrics",
    # routing
    "Complexity",
    "CostTier",
    "ModelSelection",
    "TaskContext",
    "TaskType",
    "UserTier",
    # project
    "AttachmentSignals",
    "DocumentContext",
    "IdeaCard",
    "InsightsReport",
    "KeyInsight",
    "Priority",
    "PriorityRecommendations",
    "ProjectContext",
    "ProjectFile",
    "Quadrant",
    "RiskAssessment",
]
