"""
Prediction Pipeline

Resolves one dataset item's predicted output under a run configuration.

Strategy per evaluation mode:
- images: char-count pre-filter -> settle delay -> line capture -> line-count
  pre-filter -> free text from the run model -> parse with the parser model
- post_image: structured generation with the stored image attached
- article: structured generation on the extracted article text
- linkedin_message: free-text message, not scored
- plain_text: structured generation on the raw input text

Every failure is contained here and turned into a failed PredictionResult.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace

from prompt_gauge.cancellation import CancellationToken
from prompt_gauge.domain.constants import ERROR_MARKER, PARSER_MODEL
from prompt_gauge.domain.entities import DatasetItem, ItemPrediction, PredictionResult
from prompt_gauge.domain.value_objects import (
    ArticleInput,
    EvaluationMode,
    PlainTextInput,
    ProfileInput,
    RunConfiguration,
    item_input_to_raw,
)
from prompt_gauge.errors import CaptureError, EvaluationCancelled, InputShapeError
from prompt_gauge.infrastructure.capture import (
    ContentCapture,
    DocumentTextExtractor,
    HtmlTextExtractor,
    TextLayoutCapture,
)
from prompt_gauge.infrastructure.model_clients.base import ModelClient
from prompt_gauge.pipeline.messages import (
    build_article_message,
    build_image_message,
    build_lines_message,
    build_linkedin_message,
    build_text_message,
)
from prompt_gauge.pipeline.prefilters import check_char_count, check_line_count
from prompt_gauge.pipeline.stages import (
    FreeTextStage,
    SchemaCoercionStage,
    StageOutput,
    StructuredStage,
    TwoStageGeneration,
)

logger = logging.getLogger(__name__)


def input_text(item: DatasetItem) -> str:
    """Raw text of an item; structured inputs are serialized as JSON"""
    if isinstance(item.input, PlainTextInput):
        return item.input.text
    return json.dumps(item_input_to_raw(item.input), ensure_ascii=False)


class PredictionPipeline:
    """Runs the mode strategy for one item at a time"""

    def __init__(
        self,
        client: ModelClient,
        capture: ContentCapture | None = None,
        extractor: DocumentTextExtractor | None = None,
        parser_model: str = PARSER_MODEL,
        settle_delay_seconds: float = 0.5,
    ) -> None:
        """
        Args:
            client: Model client used for every call of the run
            capture: Line capture service (default: TextLayoutCapture)
            extractor: Article text extractor (default: HtmlTextExtractor)
            parser_model: Model that parses free text into {output, explanation}
            settle_delay_seconds: Wait before each line capture
        """
        self.structured = StructuredStage(client)
        self.two_stage = TwoStageGeneration(
            FreeTextStage(client),
            SchemaCoercionStage(client, parser_model),
        )
        self.message_stage = FreeTextStage(client, system=None)
        self.capture = capture or TextLayoutCapture()
        self.extractor = extractor or HtmlTextExtractor()
        self.settle_delay_seconds = settle_delay_seconds

        self._strategies = {
            EvaluationMode.IMAGES: self._predict_images,
            EvaluationMode.POST_IMAGE: self._predict_post_image,
            EvaluationMode.ARTICLE: self._predict_article,
            EvaluationMode.LINKEDIN_MESSAGE: self._predict_linkedin_message,
            EvaluationMode.PLAIN_TEXT: self._predict_plain_text,
        }

    async def predict(
        self,
        index: int,
        item: DatasetItem,
        config: RunConfiguration,
        token: CancellationToken,
    ) -> ItemPrediction:
        """
        Predict one item

        Args:
            index: Dataset index of the item
            item: The item (never mutated; an updated copy is returned)
            config: Run configuration snapshot
            token: Cancellation token shared by the run

        Returns:
            ItemPrediction. On error the item carries ERROR_MARKER; on
            cancellation the item is returned unchanged. Both yield a failed result.
        """
        scored = config.evaluation_mode.is_scored
        try:
            token.raise_if_cancelled()
            strategy = self._strategies[config.evaluation_mode]
            return await strategy(index, item, config, token)
        except EvaluationCancelled:
            logger.info("Item %d cancelled", index)
            return ItemPrediction(
                item=item,
                result=PredictionResult(None, item.expected_output, failed=True, scored=scored),
            )
        except Exception as e:
            logger.error("Error generating output for item %d: %s", index, e)
            return ItemPrediction(
                item=replace(item, predicted_output=ERROR_MARKER, explanation=None),
                result=PredictionResult(None, item.expected_output, failed=True, scored=scored),
            )

    # --- Strategies ---

    async def _predict_images(self, index, item, config, token) -> ItemPrediction:
        text = input_text(item)

        explanation = check_char_count(text, config.min_char_count)
        if explanation:
            return self._short_circuit(item, explanation)

        # Layout must be stable before lines are measured
        await token.sleep(self.settle_delay_seconds)
        try:
            lines = await token.guard(self.capture.capture_lines(index, text))
        except CaptureError as e:
            logger.warning("Failed to capture lines for item %d: %s", index, e)
            messages = [build_text_message(config.prompt_text, text)]
        else:
            logger.debug("Captured %d lines for item %d", len(lines), index)
            explanation = check_line_count(lines, config.min_line_count)
            if explanation:
                return self._short_circuit(item, explanation)
            messages = [build_lines_message(config.prompt_text, lines)]

        output = await self.two_stage.run(config.model_id, messages, token)
        return self._completed(item, output)

    async def _predict_post_image(self, index, item, config, token) -> ItemPrediction:
        if item.image_url:
            message = build_image_message(config.prompt_text, item.image_url)
        else:
            message = build_text_message(config.prompt_text, input_text(item))
        output = await self.structured.run(config.model_id, [message], token)
        return self._completed(item, output)

    async def _predict_article(self, index, item, config, token) -> ItemPrediction:
        if not isinstance(item.input, ArticleInput):
            raise InputShapeError(f"Item {index} has no article input")
        article_text = self.extractor.extract(item.input)
        message = build_article_message(config.prompt_text, item.input.title, article_text)
        output = await self.structured.run(config.model_id, [message], token)
        return self._completed(item, output)

    async def _predict_linkedin_message(self, index, item, config, token) -> ItemPrediction:
        if not isinstance(item.input, ProfileInput):
            raise InputShapeError(f"Item {index} has no profile input")
        message = build_linkedin_message(config.prompt_text, item.input)
        response = await self.message_stage.run(config.model_id, [message], token)
        return ItemPrediction(
            item=replace(item, predicted_output=response.text),
            result=PredictionResult(response.text, item.expected_output, scored=False),
            cost=response.cost,
        )

    async def _predict_plain_text(self, index, item, config, token) -> ItemPrediction:
        message = build_text_message(config.prompt_text, input_text(item))
        output = await self.structured.run(config.model_id, [message], token)
        return self._completed(item, output)

    # --- Helpers ---

    @staticmethod
    def _short_circuit(item: DatasetItem, explanation: str) -> ItemPrediction:
        """Pre-filter verdict: predicted False, no cost"""
        return ItemPrediction(
            item=replace(item, predicted_output=False, explanation=explanation),
            result=PredictionResult(False, item.expected_output),
            cost=0.0,
        )

    @staticmethod
    def _completed(item: DatasetItem, output: StageOutput) -> ItemPrediction:
        return ItemPrediction(
            item=replace(item, predicted_output=output.output, explanation=output.explanation),
            result=PredictionResult(output.output, item.expected_output),
            cost=output.cost,
        )
