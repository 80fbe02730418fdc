"""
Metrics Aggregation

Converts prediction results into confusion-matrix counts and
precision / recall / F1. Failures are charged as misses.
"""

from typing import Iterable

from prompt_gauge.domain.entities import ConfusionCounts, PredictionResult, RunMetrics
from prompt_gauge.domain.value_objects import RunConfiguration


def _safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, 0 when the denominator is 0"""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def count_outcomes(results: Iterable[PredictionResult]) -> ConfusionCounts:
    """
    Tally TP / FP / FN / TN

    Rules:
    - unscored results are only counted as excluded
    - failed: expected True -> FN, otherwise FP (whatever the expected type)
    - non-boolean expected values of completed items are only counted as excluded
    - boolean predicted: the usual four cells
    - non-boolean predicted against a boolean expected is a miss, like a failure

    Args:
        results: Prediction results (order does not matter)

    Returns:
        ConfusionCounts
    """
    tp = fp = fn = tn = excluded = 0

    for result in results:
        if not result.scored:
            excluded += 1
            continue

        if result.failed:
            if result.expected is True:
                fn += 1
            else:
                fp += 1
            continue

        if not isinstance(result.expected, bool):
            excluded += 1
            continue

        if not isinstance(result.predicted, bool):
            if result.expected is True:
                fn += 1
            else:
                fp += 1
            continue

        if result.predicted and result.expected:
            tp += 1
        elif result.predicted and not result.expected:
            fp += 1
        elif not result.predicted and result.expected:
            fn += 1
        else:
            tn += 1

    return ConfusionCounts(
        true_positives=tp,
        false_positives=fp,
        false_negatives=fn,
        true_negatives=tn,
        excluded=excluded,
    )


def compute_metrics(counts: ConfusionCounts) -> tuple[float, float, float]:
    """
    Precision, recall and F1 from counts

    Each value defaults to 0 when its denominator is 0 (never NaN).

    Returns:
        (precision, recall, f1_score)
    """
    precision = _safe_ratio(counts.true_positives, counts.true_positives + counts.false_positives)
    recall = _safe_ratio(counts.true_positives, counts.true_positives + counts.false_negatives)
    f1_score = _safe_ratio(2 * precision * recall, precision + recall)
    return precision, recall, f1_score


def build_run_metrics(
    counts: ConfusionCounts,
    config: RunConfiguration,
    run_cost: float,
) -> RunMetrics:
    """Wrap computed metrics with the prompt, model and cost of the run"""
    precision, recall, f1_score = compute_metrics(counts)
    return RunMetrics(
        precision=precision,
        recall=recall,
        f1_score=f1_score,
        prompt_text=config.prompt_text,
        model_id=config.model_id,
        total_cost=run_cost,
    )
