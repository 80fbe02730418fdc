"""
Evaluation Execution

Runs the prediction pipeline for every dataset item concurrently, tracks
progress and cancellation, then aggregates metrics and cost.
"""

import asyncio
import logging
from typing import Callable

from prompt_gauge.cancellation import CancellationToken
from prompt_gauge.cost_calc import total_cost
from prompt_gauge.domain.entities import DatasetItem, ItemPrediction, RunOutcome
from prompt_gauge.domain.value_objects import RunConfiguration
from prompt_gauge.errors import RunValidationError
from prompt_gauge.harness_config import PipelineConfig
from prompt_gauge.infrastructure.capture import ContentCapture, DocumentTextExtractor
from prompt_gauge.infrastructure.model_clients.base import ModelClient
from prompt_gauge.pipeline.prediction import PredictionPipeline
from prompt_gauge.use_cases.history import RunHistory
from prompt_gauge.use_cases.metrics import build_run_metrics, count_outcomes
from prompt_gauge.use_cases.progress import ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)


def validate_run_configuration(config: RunConfiguration) -> None:
    """
    Fail fast on an incomplete configuration

    Raises:
        RunValidationError: If api_key, model_id or prompt_text is empty, or a
            pre-filter threshold is negative
    """
    missing = [
        name for name, value in (
            ("api_key", config.api_key),
            ("model_id", config.model_id),
            ("prompt_text", config.prompt_text),
        )
        if not value or not str(value).strip()
    ]
    if missing:
        raise RunValidationError(f"Please fill in all fields (missing: {', '.join(missing)})")
    if config.min_char_count < 0 or config.min_line_count < 0:
        raise RunValidationError("min_char_count and min_line_count must be non-negative")


class Evaluator:
    """
    Runs one evaluation at a time

    Every item is dispatched at once (optionally capped by max_concurrency)
    and results are collected positionally. Metrics are appended to the
    history only when the run finished without cancellation.
    """

    def __init__(
        self,
        client_factory: Callable[[str], ModelClient],
        history: RunHistory | None = None,
        *,
        capture: ContentCapture | None = None,
        extractor: DocumentTextExtractor | None = None,
        pipeline_config: PipelineConfig | None = None,
        on_progress: ProgressCallback | None = None,
        on_dataset: Callable[[list[DatasetItem]], None] | None = None,
    ) -> None:
        """
        Args:
            client_factory: Creates a model client from the run's API key
            history: Run history to append completed metrics to
            capture: Line capture service for the images mode
            extractor: Article text extractor for the article mode
            pipeline_config: Parser model, settle delay and concurrency cap
            on_progress: Called after the run starts and after every settled item
            on_dataset: Receives the updated dataset snapshot when the run ends
        """
        self.client_factory = client_factory
        self.history = history
        self.capture = capture
        self.extractor = extractor
        self.pipeline_config = pipeline_config or PipelineConfig()
        self.on_progress = on_progress
        self.on_dataset = on_dataset
        self._token: CancellationToken | None = None

    @property
    def is_running(self) -> bool:
        return self._token is not None

    def cancel(self) -> None:
        """Cancel the running evaluation, if any"""
        if self._token is not None:
            self._token.cancel()

    async def run(
        self,
        dataset: list[DatasetItem],
        config: RunConfiguration,
        token: CancellationToken | None = None,
    ) -> RunOutcome:
        """
        Evaluate every item of `dataset` under `config`

        Args:
            dataset: Items to evaluate (the list itself is not modified)
            config: Immutable run configuration
            token: Cancellation token (a new one is created if omitted)

        Returns:
            RunOutcome. When cancelled, `metrics` is None, nothing is appended
            to the history and `dataset` holds the items completed so far.

        Raises:
            RunValidationError: Before any item is dispatched
        """
        validate_run_configuration(config)
        if self._token is not None:
            raise RunValidationError("An evaluation is already running")

        client = self.client_factory(config.api_key)
        token = token or CancellationToken()
        self._token = token

        snapshot = list(dataset)
        tracker = ProgressTracker(len(snapshot), self.on_progress)
        tracker.start()

        max_concurrency = self.pipeline_config.max_concurrency
        semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

        pipeline = PredictionPipeline(
            client,
            capture=self.capture,
            extractor=self.extractor,
            parser_model=self.pipeline_config.parser_model,
            settle_delay_seconds=self.pipeline_config.settle_delay_seconds,
        )

        async def _evaluate(index: int, item: DatasetItem) -> ItemPrediction:
            if semaphore is None:
                prediction = await pipeline.predict(index, item, config, token)
            else:
                async with semaphore:
                    prediction = await pipeline.predict(index, item, config, token)
            # Each coroutine owns exactly one slot
            snapshot[index] = prediction.item
            tracker.mark_completed()
            return prediction

        logger.info(
            "Evaluating %d items with %s (%s mode)",
            len(snapshot), config.model_id, config.evaluation_mode.value,
        )
        try:
            predictions = await asyncio.gather(
                *(_evaluate(index, item) for index, item in enumerate(snapshot))
            )
        finally:
            self._token = None
            await client.aclose()

        results = [p.result for p in predictions]
        item_costs = [p.cost for p in predictions]
        run_cost = total_cost(item_costs)
        counts = count_outcomes(results)
        logger.info(
            "TP=%d FP=%d FN=%d TN=%d excluded=%d cost=$%.6f",
            counts.true_positives, counts.false_positives,
            counts.false_negatives, counts.true_negatives,
            counts.excluded, run_cost,
        )

        metrics = None
        if token.cancelled:
            logger.info("Evaluation was cancelled; metrics discarded")
        else:
            metrics = build_run_metrics(counts, config, run_cost)
            if self.history is not None and config.evaluation_mode.is_scored:
                self.history.append(metrics)

        if self.on_dataset is not None:
            self.on_dataset(list(snapshot))

        return RunOutcome(
            dataset=snapshot,
            results=results,
            counts=counts,
            metrics=metrics,
            total_cost=run_cost,
            cancelled=token.cancelled,
            elapsed_seconds=tracker.elapsed_seconds,
            item_costs=item_costs,
        )


async def run_evaluation(
    dataset: list[DatasetItem],
    config: RunConfiguration,
    client_factory: Callable[[str], ModelClient],
    history: RunHistory | None = None,
    **kwargs,
) -> RunOutcome:
    """
    Run one evaluation with a throwaway Evaluator (high-level function)

    Keyword arguments are passed to Evaluator (capture, extractor,
    pipeline_config, on_progress, on_dataset) except `token`, which is passed
    to Evaluator.run().
    """
    token = kwargs.pop("token", None)
    evaluator = Evaluator(client_factory, history, **kwargs)
    return await evaluator.run(dataset, config, token=token)
