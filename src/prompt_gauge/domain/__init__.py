"""
Domain Layer

Defines constants, entities, and value objects that form the core of the evaluation logic.
Has no dependencies on external libraries.
"""

from prompt_gauge.domain.constants import (
    DEFAULT_MODEL,
    DEFAULT_PROMPT,
    ERROR_MARKER,
    MODEL_PRICING,
    OUTPUT_SCHEMA,
    PARSER_MODEL,
)
from prompt_gauge.domain.entities import (
    ConfusionCounts,
    DatasetItem,
    ItemPrediction,
    PredictionResult,
    RunMetrics,
    RunOutcome,
    ZERO_METRICS,
)
from prompt_gauge.domain.value_objects import (
    ArticleInput,
    EvaluationMode,
    ItemInput,
    ModelPricing,
    ObjectResponse,
    PlainTextInput,
    ProfileInput,
    RunConfiguration,
    TextResponse,
    TokenUsage,
    parse_item_input,
)

__all__ = [
    # constants
    "DEFAULT_MODEL",
    "DEFAULT_PROMPT",
    "ERROR_MARKER",
    "MODEL_PRICING",
    "OUTPUT_SCHEMA",
    "PARSER_MODEL",
    # entities
    "ConfusionCounts",
    "DatasetItem",
    "ItemPrediction",
    "PredictionResult",
    "RunMetrics",
    "RunOutcome",
    "ZERO_METRICS",
    # value objects
    "ArticleInput",
    "EvaluationMode",
    "ItemInput",
    "ModelPricing",
    "ObjectResponse",
    "PlainTextInput",
    "ProfileInput",
    "RunConfiguration",
    "TextResponse",
    "TokenUsage",
    "parse_item_input",
]
