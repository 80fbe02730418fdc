"""
Run History

Append-only log of completed run metrics with best-of-history tracking.
"""

from typing import Callable, Iterable, Iterator

import pandas as pd

from prompt_gauge.cost_calc import cost_per_hundred_items
from prompt_gauge.domain.entities import RunMetrics, ZERO_METRICS


def best_metrics(history: Iterable[RunMetrics]) -> RunMetrics:
    """
    Componentwise maximum of precision, recall and F1 over a history

    The maxima may come from different runs; this is not "the best single run".
    prompt_text, model_id and total_cost stay those of the zero record.

    Args:
        history: Recorded runs

    Returns:
        RunMetrics (ZERO_METRICS for an empty history)
    """
    best = ZERO_METRICS
    for current in history:
        best = RunMetrics(
            precision=max(best.precision, current.precision),
            recall=max(best.recall, current.recall),
            f1_score=max(best.f1_score, current.f1_score),
            prompt_text=best.prompt_text,
            model_id=best.model_id,
            total_cost=best.total_cost,
        )
    return best


class RunHistory:
    """Ordered, append-only sequence of RunMetrics"""

    def __init__(
        self,
        records: Iterable[RunMetrics] | None = None,
        on_change: Callable[[list[RunMetrics]], None] | None = None,
    ) -> None:
        self._records: list[RunMetrics] = list(records or [])
        self._on_change = on_change

    @property
    def records(self) -> tuple[RunMetrics, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RunMetrics]:
        return iter(tuple(self._records))

    def append(self, metrics: RunMetrics) -> None:
        self._records.append(metrics)
        self._notify()

    def reset(self) -> None:
        """Clear the entire history (irreversible)"""
        self._records = []
        self._notify()

    def best(self) -> RunMetrics:
        return best_metrics(self._records)

    def to_dataframe(self, dataset_size: int) -> pd.DataFrame:
        """
        History table, newest run first

        Columns: run, precision, recall, f1_score, model, cost,
        cost_per_100_items, prompt and is_best_* flags for highlighting.
        """
        best = self.best()
        rows = []
        for run_number, metrics in enumerate(self._records, start=1):
            rows.append({
                "run": run_number,
                "precision": metrics.precision,
                "recall": metrics.recall,
                "f1_score": metrics.f1_score,
                "model": metrics.model_id,
                "cost": metrics.total_cost,
                "cost_per_100_items": cost_per_hundred_items(metrics.total_cost, dataset_size),
                "prompt": metrics.prompt_text,
                "is_best_precision": metrics.precision == best.precision,
                "is_best_recall": metrics.recall == best.recall,
                "is_best_f1_score": metrics.f1_score == best.f1_score,
            })
        columns = [
            "run", "precision", "recall", "f1_score", "model", "cost",
            "cost_per_100_items", "prompt",
            "is_best_precision", "is_best_recall", "is_best_f1_score",
        ]
        df = pd.DataFrame(rows, columns=columns)
        return df.iloc[::-1].reset_index(drop=True)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(list(self._records))
