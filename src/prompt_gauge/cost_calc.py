"""
Cost Calculation

Computes per-call token cost from the static pricing table and sums run cost.
"""

import logging
from typing import Iterable

from prompt_gauge.domain.constants import MODEL_PRICING, _UNKNOWN_MODEL_PRICING
from prompt_gauge.domain.value_objects import ModelPricing, TokenUsage

logger = logging.getLogger(__name__)


def get_pricing(model_id: str) -> ModelPricing:
    """
    Look up pricing for a model

    Args:
        model_id: Model identifier (e.g. openai/gpt-4o-mini)

    Returns:
        ModelPricing. Models missing from the table are priced at zero.
    """
    pricing = MODEL_PRICING.get(model_id)
    if pricing is None:
        logger.warning("No pricing for model '%s'; cost will be reported as 0.", model_id)
        return ModelPricing(
            model_id=model_id,
            name=model_id,
            input_price_per_m=_UNKNOWN_MODEL_PRICING["input"],
            output_price_per_m=_UNKNOWN_MODEL_PRICING["output"],
        )
    return pricing


def calculate_cost(usage: TokenUsage, pricing: ModelPricing) -> float:
    """
    Calculate the cost of one model call

    cost = prompt_tokens * input_price / 1M + completion_tokens * output_price / 1M

    Args:
        usage: Token usage of the call
        pricing: Pricing of the model that served the call

    Returns:
        Cost (USD)
    """
    return (
        (usage.prompt_tokens / 1_000_000) * pricing.input_price_per_m +
        (usage.completion_tokens / 1_000_000) * pricing.output_price_per_m
    )


def calculate_call_cost(usage: TokenUsage, model_id: str) -> float:
    """Cost of one call, looking the model up in the pricing table"""
    return calculate_cost(usage, get_pricing(model_id))


def total_cost(costs: Iterable[float]) -> float:
    """Sum of per-item costs"""
    return float(sum(costs))


def cost_per_hundred_items(run_cost: float, dataset_size: int) -> float:
    """
    Average cost per 100 dataset items

    Returns 0 for an empty dataset.
    """
    if dataset_size <= 0:
        return 0.0
    return run_cost / dataset_size * 100
