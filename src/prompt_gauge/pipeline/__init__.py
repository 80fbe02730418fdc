"""
Prediction pipeline sub-package

Pre-filters, message building, generation stages and the per-item pipeline.
"""

from prompt_gauge.pipeline.prediction import PredictionPipeline, input_text
from prompt_gauge.pipeline.prefilters import check_char_count, check_line_count
from prompt_gauge.pipeline.stages import (
    FreeTextStage,
    SchemaCoercionStage,
    StageOutput,
    StructuredStage,
    TwoStageGeneration,
)

__all__ = [
    "PredictionPipeline",
    "input_text",
    "check_char_count",
    "check_line_count",
    "FreeTextStage",
    "SchemaCoercionStage",
    "StageOutput",
    "StructuredStage",
    "TwoStageGeneration",
]
