"""
実行履歴のテスト
"""

import pytest

from prompt_gauge.domain.entities import RunMetrics, ZERO_METRICS
from prompt_gauge.use_cases.history import RunHistory, best_metrics


def _metrics(precision, recall, f1_score, model="openai/gpt-4o-mini", cost=0.01):
    return RunMetrics(precision, recall, f1_score, f"prompt {precision}", model, cost)


class TestBestMetrics:
    """best_metrics() のテスト"""

    def test_empty_history_is_zero(self):
        assert best_metrics([]) == ZERO_METRICS

    def test_componentwise_maximum(self):
        """各指標の最大値は別々の実行から来てよい"""
        best = best_metrics([
            _metrics(0.9, 0.1, 0.2),
            _metrics(0.5, 0.8, 0.6),
            _metrics(0.3, 0.4, 0.5),
        ])
        assert (best.precision, best.recall, best.f1_score) == (0.9, 0.8, 0.6)

    def test_not_attributed_to_a_run(self):
        best = best_metrics([_metrics(0.9, 0.9, 0.9)])
        assert best.prompt_text == ""
        assert best.model_id == ""
        assert best.total_cost == 0.0


class TestRunHistory:
    """RunHistory のテスト"""

    def test_append_preserves_order(self):
        history = RunHistory()
        first, second = _metrics(0.1, 0.1, 0.1), _metrics(0.2, 0.2, 0.2)
        history.append(first)
        history.append(second)
        assert history.records == (first, second)
        assert len(history) == 2
        assert list(history) == [first, second]

    def test_best(self):
        history = RunHistory([_metrics(0.9, 0.1, 0.2), _metrics(0.5, 0.8, 0.6)])
        best = history.best()
        assert (best.precision, best.recall, best.f1_score) == (0.9, 0.8, 0.6)

    def test_reset(self):
        history = RunHistory([_metrics(0.9, 0.1, 0.2)])
        history.reset()
        assert len(history) == 0
        assert history.best() == ZERO_METRICS

    def test_on_change_receives_records(self):
        changes = []
        history = RunHistory(on_change=changes.append)
        record = _metrics(0.5, 0.5, 0.5)

        history.append(record)
        history.reset()

        assert changes == [[record], []]

    def test_records_cannot_be_mutated(self):
        history = RunHistory([_metrics(0.5, 0.5, 0.5)])
        with pytest.raises(AttributeError):
            history.records.append(_metrics(0.1, 0.1, 0.1))


class TestHistoryDataFrame:
    """to_dataframe() のテスト"""

    def test_newest_first_with_best_flags(self):
        history = RunHistory([
            _metrics(0.9, 0.1, 0.2, cost=0.5),
            _metrics(0.5, 0.8, 0.6, model="openai/gpt-4o", cost=1.0),
        ])

        df = history.to_dataframe(dataset_size=50)

        assert list(df["run"]) == [2, 1]
        assert list(df["model"]) == ["openai/gpt-4o", "openai/gpt-4o-mini"]
        assert list(df["cost_per_100_items"]) == pytest.approx([2.0, 1.0])
        assert list(df["is_best_precision"]) == [False, True]
        assert list(df["is_best_recall"]) == [True, False]
        assert list(df["is_best_f1_score"]) == [True, False]

    def test_empty_history(self):
        df = RunHistory().to_dataframe(dataset_size=10)
        assert df.empty
        assert "f1_score" in df.columns
