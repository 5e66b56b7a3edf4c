"""Cost-aware model router.

Maps a :class:`TaskContext` to a :class:`ModelSelection` with a fixed,
ordered rule table.  Selection is pure and deterministic: no state, no I/O,
and identical contexts always get identical selections.  Logging happens
only in :meth:`ModelRouter.log_selection`, which callers invoke explicitly.

Rule order (first match wins):

    1. audio attached   -> high-capability model, largest multimodal budget
    2. images attached  -> high-capability model, smaller multimodal budget
    3. per task type:
         strategic-insights   upgrade on high complexity, >15 ideas, or files
         risk-assessment      upgrade on high complexity (no tier downgrade)
         idea-generation      upgrade for enterprise, high complexity, >15 ideas
         quick-analysis       economy only
         content-enhancement  economy only
         anything else        economy, generic budget

Both capability tiers are GPT-5 family models, which only accept
temperature=1, so every selection carries that value.
"""

from __future__ import annotations

from typing import NamedTuple

import structlog

from ai_gateway.models.routing import (
    FIXED_TEMPERATURE,
    Complexity,
    CostTier,
    ModelSelection,
    TaskContext,
    TaskType,
    UserTier,
)

logger = structlog.get_logger(logger_name=__name__)

HIGH_CAPABILITY_MODEL = "gpt-5"
ECONOMY_MODEL = "gpt-5-mini"

# Ideas beyond this count upgrade strategic insights and idea generation.
LARGE_IDEA_COUNT = 15

_OUTPUT_SHARE = 0.3  # assumed output share of a request's total tokens
_TOKENS_PER_PRICE_UNIT = 1_000_000


class ModelPricing(NamedTuple):
    """Published USD price per million tokens."""

    input: float
    output: float


# Keyed by exact model id: several ids share a capability tier but not a price.
MODEL_PRICING: dict[str, ModelPricing] = {
    "gpt-5": ModelPricing(input=1.25, output=10.00),
    "gpt-5-mini": ModelPricing(input=0.25, output=2.00),
    "gpt-5-nano": ModelPricing(input=0.05, output=0.40),
    "gpt-4o": ModelPricing(input=2.50, output=10.00),
    "gpt-4o-mini": ModelPricing(input=0.15, output=0.60),
    "o1-preview": ModelPricing(input=15.00, output=60.00),
    "o1-mini": ModelPricing(input=3.00, output=12.00),
}


class _Route(NamedTuple):
    model: str
    max_tokens: int
    reasoning: str


_AUDIO = _Route(HIGH_CAPABILITY_MODEL, 8000, "Upgraded to GPT-5 for multimodal audio understanding")
_IMAGES = _Route(HIGH_CAPABILITY_MODEL, 6000, "Multimodal image analysis needs GPT-5 vision reasoning")

_STRATEGIC_UPGRADED = _Route(
    HIGH_CAPABILITY_MODEL, 8000,
    "GPT-5 advanced reasoning for complex or attachment-backed strategic analysis",
)
_STRATEGIC_STANDARD = _Route(
    ECONOMY_MODEL, 6000, "GPT-5 Mini balances strategic insight quality with efficiency"
)
_RISK_UPGRADED = _Route(
    HIGH_CAPABILITY_MODEL, 7000, "GPT-5 for comprehensive coverage of high-complexity risks"
)
_RISK_STANDARD = _Route(ECONOMY_MODEL, 5000, "GPT-5 Mini for standard risk assessment")
_IDEAS_ENTERPRISE = _Route(HIGH_CAPABILITY_MODEL, 4000, "Enterprise tier gets GPT-5 for idea generation")
_IDEAS_UPGRADED = _Route(
    HIGH_CAPABILITY_MODEL, 4000, "GPT-5 for high-complexity or large-scale idea generation"
)
_IDEAS_STANDARD = _Route(ECONOMY_MODEL, 2500, "GPT-5 Mini for cost-efficient idea generation")
_QUICK_ANALYSIS = _Route(ECONOMY_MODEL, 2500, "Quick analysis always uses the economy model")
_CONTENT_ENHANCEMENT = _Route(ECONOMY_MODEL, 3000, "Content enhancement always uses the economy model")
_DEFAULT = _Route(ECONOMY_MODEL, 3000, "Default routing for unknown task type")

_COST_BY_MODEL: dict[str, CostTier] = {
    HIGH_CAPABILITY_MODEL: CostTier.MEDIUM,
    ECONOMY_MODEL: CostTier.LOW,
}


class ModelRouter:
    """Stateless model selection plus the complexity and cost helpers."""

    @staticmethod
    def select_model(context: TaskContext) -> ModelSelection:
        """Return the model selection for *context*.  Never raises."""
        route = ModelRouter._route(context)
        return ModelSelection(
            model=route.model,
            temperature=FIXED_TEMPERATURE,
            max_tokens=route.max_tokens,
            cost=_COST_BY_MODEL[route.model],
            reasoning=route.reasoning,
        )

    @staticmethod
    def _route(context: TaskContext) -> _Route:
        if context.has_audio:
            return _AUDIO
        if context.has_images:
            return _IMAGES

        high = context.complexity == Complexity.HIGH
        many_ideas = context.idea_count > LARGE_IDEA_COUNT
        task = context.task_type

        if task == TaskType.STRATEGIC_INSIGHTS:
            if high or many_ideas or context.has_attachments:
                return _STRATEGIC_UPGRADED
            return _STRATEGIC_STANDARD
        if task == TaskType.RISK_ASSESSMENT:
            return _RISK_UPGRADED if high else _RISK_STANDARD
        if task == TaskType.IDEA_GENERATION:
            if context.user_tier == UserTier.ENTERPRISE:
                return _IDEAS_ENTERPRISE
            if high or many_ideas:
                return _IDEAS_UPGRADED
            return _IDEAS_STANDARD
        if task == TaskType.QUICK_ANALYSIS:
            return _QUICK_ANALYSIS
        if task == TaskType.CONTENT_ENHANCEMENT:
            return _CONTENT_ENHANCEMENT
        return _DEFAULT

    @staticmethod
    def analyze_complexity(
        idea_count: int = 0,
        has_files: bool = False,
        has_images: bool = False,
        has_audio: bool = False,
        document_count: int = 0,
    ) -> Complexity:
        """Classify raw request signals into a complexity band.

        Points: more than 15 ideas +2 (more than 5: +1), files +1, images +1,
        audio +2, more than 3 supporting documents +1.  Four or more points
        is high, two or three is medium.
        """
        points = 0
        if idea_count > LARGE_IDEA_COUNT:
            points += 2
        elif idea_count > 5:
            points += 1
        if has_files:
            points += 1
        if has_images:
            points += 1
        if has_audio:
            points += 2
        if document_count > 3:
            points += 1

        if points >= 4:
            return Complexity.HIGH
        if points >= 2:
            return Complexity.MEDIUM
        return Complexity.LOW

    @staticmethod
    def get_cost_estimate(selection: ModelSelection, total_tokens: int) -> str:
        """Estimate the USD cost of *total_tokens* on the selected model.

        Tokens are split 70% input / 30% output and priced by exact model
        id; ids without a published rate are priced as the economy model.
        Returns a string like ``"$0.0077"``.
        """
        pricing = MODEL_PRICING.get(selection.model, MODEL_PRICING[ECONOMY_MODEL])
        input_tokens = round(total_tokens * (1 - _OUTPUT_SHARE))
        output_tokens = total_tokens - input_tokens
        input_cost = (input_tokens / _TOKENS_PER_PRICE_UNIT) * pricing.input
        output_cost = (output_tokens / _TOKENS_PER_PRICE_UNIT) * pricing.output
        return f"${input_cost + output_cost:.4f}"

    @staticmethod
    def log_selection(context: TaskContext, selection: ModelSelection) -> None:
        """Emit one structured ``model_router_decision`` event."""
        logger.info(
            "model_router_decision",
            task=context.task_name,
            complexity=context.complexity.value,
            selected_model=selection.model,
            temperature=selection.temperature,
            max_tokens=selection.max_tokens,
            reasoning=selection.reasoning,
            cost_tier=selection.cost.value,
            idea_count=context.idea_count,
            has_files=context.has_files,
            has_images=context.has_images,
            has_audio=context.has_audio,
            user_tier=context.user_tier.value,
        )
