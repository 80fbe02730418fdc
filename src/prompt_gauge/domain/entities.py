"""
Domain Entities

Defines the primary data structures used in the evaluation process.
"""

from dataclasses import dataclass, field
from typing import Any

from prompt_gauge.domain.value_objects import (
    ItemInput,
    OutputValue,
    item_input_to_raw,
    parse_item_input,
)


@dataclass
class DatasetItem:
    """One labeled example"""
    input: ItemInput
    expected_output: OutputValue | None
    predicted_output: OutputValue | None = None
    explanation: str | None = None
    image_url: str | None = None

    def to_dict(self, include_image: bool = True) -> dict:
        """Convert to the persisted/exported dictionary format"""
        data: dict[str, Any] = {
            "input": item_input_to_raw(self.input),
            "expectedOutput": self.expected_output,
        }
        if self.predicted_output is not None:
            data["predictedOutput"] = self.predicted_output
        if self.explanation is not None:
            data["explanation"] = self.explanation
        if include_image and self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DatasetItem":
        return cls(
            input=parse_item_input(data.get("input", "")),
            expected_output=data.get("expectedOutput"),
            predicted_output=data.get("predictedOutput"),
            explanation=data.get("explanation"),
            image_url=data.get("imageUrl") or None,
        )


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of one item (predicted=None with failed=True signals an error)"""
    predicted: OutputValue | None
    expected: OutputValue | None
    failed: bool = False
    scored: bool = True


@dataclass(frozen=True)
class ConfusionCounts:
    """Binary classification tallies"""
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    true_negatives: int = 0
    excluded: int = 0


@dataclass(frozen=True)
class RunMetrics:
    """Metrics of one completed run"""
    precision: float
    recall: float
    f1_score: float
    prompt_text: str
    model_id: str
    total_cost: float

    def to_dict(self) -> dict:
        return {
            "precision": self.precision,
            "recall": self.recall,
            "f1Score": self.f1_score,
            "prompt": self.prompt_text,
            "model": self.model_id,
            "cost": self.total_cost,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunMetrics":
        return cls(
            precision=float(data.get("precision", 0.0)),
            recall=float(data.get("recall", 0.0)),
            f1_score=float(data.get("f1Score", 0.0)),
            prompt_text=str(data.get("prompt", "")),
            model_id=str(data.get("model", "")),
            total_cost=float(data.get("cost", 0.0)),
        )


ZERO_METRICS = RunMetrics(
    precision=0.0,
    recall=0.0,
    f1_score=0.0,
    prompt_text="",
    model_id="",
    total_cost=0.0,
)


@dataclass(frozen=True)
class ItemPrediction:
    """Pipeline output for one item: updated item, result and incremental cost"""
    item: DatasetItem
    result: PredictionResult
    cost: float = 0.0


@dataclass
class RunOutcome:
    """Everything a run produced"""
    dataset: list[DatasetItem]
    results: list[PredictionResult]
    counts: ConfusionCounts
    metrics: RunMetrics | None
    total_cost: float
    cancelled: bool = False
    elapsed_seconds: float = 0.0
    item_costs: list[float] = field(default_factory=list)
