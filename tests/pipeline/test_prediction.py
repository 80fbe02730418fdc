"""
予測パイプラインのテスト

モードごとの戦略、事前フィルタ(モデル呼び出しなしで判定)、
失敗時のエラーマーカーをテストする。
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from prompt_gauge.cancellation import CancellationToken
from prompt_gauge.domain.constants import ERROR_MARKER
from prompt_gauge.domain.entities import DatasetItem
from prompt_gauge.domain.value_objects import (
    ArticleInput,
    EvaluationMode,
    PlainTextInput,
    ProfileInput,
    RunConfiguration,
    TokenUsage,
)
from prompt_gauge.errors import CaptureError, InferenceError
from prompt_gauge.pipeline.prediction import PredictionPipeline, input_text

MODEL = "openai/gpt-4o-mini"


def _config(mode=EvaluationMode.PLAIN_TEXT, **kwargs):
    return RunConfiguration(
        api_key="sk-test",
        model_id=MODEL,
        prompt_text="Is this post engaging?",
        evaluation_mode=mode,
        **kwargs,
    )


def _predict(pipeline, item, config, index=0, token=None):
    async def _main():
        return await pipeline.predict(index, item, config, token or CancellationToken())
    return asyncio.run(_main())


def _pipeline(client, **kwargs):
    return PredictionPipeline(client, settle_delay_seconds=0, **kwargs)


class TestInputText:
    """input_text() のテスト"""

    def test_plain_text(self):
        item = DatasetItem(input=PlainTextInput("hello"), expected_output=True)
        assert input_text(item) == "hello"

    def test_structured_input_is_json(self):
        item = DatasetItem(input=ArticleInput(title="t", body="b"), expected_output=True)
        assert json.loads(input_text(item)) == {"title": "t", "body": "b"}


class TestPlainTextMode:
    """plain_text モードのテスト"""

    def test_structured_generation(self, make_fake_client):
        client = make_fake_client(
            object_data={"output": True, "explanation": "Paris is the capital"},
            usage=TokenUsage(prompt_tokens=1000, completion_tokens=500),
        )
        item = DatasetItem(input=PlainTextInput("Is the capital of France Paris?"), expected_output=True)

        prediction = _predict(_pipeline(client), item, _config())

        assert prediction.item.predicted_output is True
        assert prediction.item.explanation == "Paris is the capital"
        assert prediction.result.predicted is True
        assert prediction.result.expected is True
        assert prediction.result.failed is False
        assert prediction.cost == pytest.approx(0.00045)
        sent = client.object_calls[0]["messages"][0]["content"]
        assert sent[0]["text"] == "Is this post engaging?"
        assert sent[1]["text"] == "Is the capital of France Paris?"

    def test_input_item_is_not_mutated(self, fake_client):
        item = DatasetItem(input=PlainTextInput("q"), expected_output=True)
        _predict(_pipeline(fake_client), item, _config())
        assert item.predicted_output is None
        assert item.explanation is None

    def test_error_writes_marker(self, make_fake_client, caplog):
        """失敗時はエラーマーカーを書き込み、failed の結果を返す"""
        client = make_fake_client(error=InferenceError("provider down"))
        item = DatasetItem(
            input=PlainTextInput("q"), expected_output=True, explanation="stale explanation",
        )

        prediction = _predict(_pipeline(client), item, _config(), index=3)

        assert prediction.item.predicted_output == ERROR_MARKER
        assert prediction.item.explanation is None
        assert prediction.result.failed is True
        assert prediction.result.predicted is None
        assert prediction.cost == 0.0
        assert "item 3" in caplog.text

    def test_unexpected_exception_is_contained(self, make_fake_client):
        client = make_fake_client(error=RuntimeError("bug"))
        item = DatasetItem(input=PlainTextInput("q"), expected_output=False)
        prediction = _predict(_pipeline(client), item, _config())
        assert prediction.result.failed is True

    def test_cancelled_before_start(self, fake_client):
        """キャンセル済みならモデルを呼ばず、項目は変更しない"""
        item = DatasetItem(input=PlainTextInput("q"), expected_output=True)

        async def _main():
            token = CancellationToken()
            token.cancel()
            return await _pipeline(fake_client).predict(0, item, _config(), token)

        prediction = asyncio.run(_main())

        assert prediction.item is item
        assert prediction.result.failed is True
        assert fake_client.call_count == 0


class TestImagesMode:
    """images モードのテスト"""

    def test_char_prefilter_short_circuits(self, fake_client):
        """文字数が足りない場合はモデルを呼ばずに False と判定する"""
        item = DatasetItem(input=PlainTextInput("x" * 50), expected_output=False)
        config = _config(EvaluationMode.IMAGES, min_char_count=200)

        prediction = _predict(_pipeline(fake_client), item, config)

        assert prediction.item.predicted_output is False
        assert prediction.item.explanation == (
            "Post is too short (50 characters). Minimum required: 200 characters."
        )
        assert prediction.result.predicted is False
        assert prediction.result.failed is False
        assert prediction.cost == 0.0
        assert fake_client.call_count == 0

    def test_disabled_char_prefilter_calls_model(self, fake_client):
        item = DatasetItem(input=PlainTextInput("x" * 50), expected_output=False)
        config = _config(EvaluationMode.IMAGES, min_char_count=0)

        _predict(_pipeline(fake_client), item, config)

        assert len(fake_client.text_calls) == 1
        assert len(fake_client.object_calls) == 1

    def test_line_prefilter_short_circuits(self, fake_client):
        item = DatasetItem(input=PlainTextInput("one\ntwo\nthree"), expected_output=True)
        config = _config(EvaluationMode.IMAGES, min_line_count=5)

        prediction = _predict(_pipeline(fake_client), item, config)

        assert prediction.item.predicted_output is False
        assert prediction.item.explanation == (
            "Post has too few lines (3 lines). Minimum required: 5 lines."
        )
        assert fake_client.call_count == 0

    def test_captured_lines_are_sent_then_parsed(self, make_fake_client):
        client = make_fake_client(
            text="Yes, engaging.",
            object_data={"output": True, "explanation": "engaging"},
        )
        item = DatasetItem(input=PlainTextInput("one\ntwo"), expected_output=True)

        prediction = _predict(_pipeline(client), item, _config(EvaluationMode.IMAGES))

        sent = client.text_calls[0]["messages"][0]["content"][1]["text"]
        assert json.loads(sent) == ["one<br>", "two<br>"]
        assert client.object_calls[0]["model_id"] == "openai/gpt-4.1-mini"
        assert prediction.item.predicted_output is True
        assert prediction.item.explanation == "engaging"

    def test_two_stage_cost_is_summed(self, make_fake_client):
        client = make_fake_client(usage=TokenUsage(prompt_tokens=1_000_000, completion_tokens=0))
        item = DatasetItem(input=PlainTextInput("post"), expected_output=True)

        prediction = _predict(_pipeline(client), item, _config(EvaluationMode.IMAGES))

        assert prediction.cost == pytest.approx(0.15 + 0.4)

    def test_capture_failure_falls_back_to_text(self, fake_client):
        """キャプチャ失敗時は元のテキストで評価を続ける"""
        capture = MagicMock()
        capture.capture_lines = AsyncMock(side_effect=CaptureError("no layout"))
        item = DatasetItem(input=PlainTextInput("raw post text"), expected_output=True)
        config = _config(EvaluationMode.IMAGES, min_line_count=5)

        prediction = _predict(_pipeline(fake_client, capture=capture), item, config)

        assert prediction.result.failed is False
        sent = fake_client.text_calls[0]["messages"][0]["content"][1]["text"]
        assert sent == "raw post text"

    def test_capture_receives_index_and_text(self, fake_client):
        capture = MagicMock()
        capture.capture_lines = AsyncMock(return_value=["a<br>"])
        item = DatasetItem(input=PlainTextInput("a"), expected_output=True)

        _predict(_pipeline(fake_client, capture=capture), item, _config(EvaluationMode.IMAGES), index=7)

        capture.capture_lines.assert_awaited_once_with(7, "a")


class TestPostImageMode:
    """post_image モードのテスト"""

    def test_image_is_attached(self, fake_client):
        item = DatasetItem(
            input=PlainTextInput("post"), expected_output=True, image_url="data:image/png;base64,AAAA",
        )

        _predict(_pipeline(fake_client), item, _config(EvaluationMode.POST_IMAGE))

        part = fake_client.object_calls[0]["messages"][0]["content"][1]
        assert part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}

    def test_without_image_falls_back_to_text(self, fake_client):
        item = DatasetItem(input=PlainTextInput("post"), expected_output=True)

        _predict(_pipeline(fake_client), item, _config(EvaluationMode.POST_IMAGE))

        part = fake_client.object_calls[0]["messages"][0]["content"][1]
        assert part == {"type": "text", "text": "post"}


class TestArticleMode:
    """article モードのテスト"""

    def test_article_text_is_extracted(self, fake_client):
        item = DatasetItem(
            input=ArticleInput(title="News", body="<style>p{}</style><p>Body text</p>"),
            expected_output=True,
        )

        _predict(_pipeline(fake_client), item, _config(EvaluationMode.ARTICLE))

        sent = fake_client.object_calls[0]["messages"][0]["content"][1]["text"]
        assert sent == "Article title: News\nArticle content: Body text"

    def test_plain_input_fails(self, fake_client):
        item = DatasetItem(input=PlainTextInput("not an article"), expected_output=True)

        prediction = _predict(_pipeline(fake_client), item, _config(EvaluationMode.ARTICLE))

        assert prediction.item.predicted_output == ERROR_MARKER
        assert prediction.result.failed is True
        assert fake_client.call_count == 0


class TestLinkedInMessageMode:
    """linkedin_message モードのテスト"""

    def test_message_is_generated_and_not_scored(self, make_fake_client):
        client = make_fake_client(text="Bonjour Jeanne, ...")
        item = DatasetItem(input=ProfileInput(name="Jeanne", title="CTO"), expected_output=None)

        prediction = _predict(_pipeline(client), item, _config(EvaluationMode.LINKEDIN_MESSAGE))

        assert prediction.item.predicted_output == "Bonjour Jeanne, ..."
        assert prediction.result.scored is False
        assert prediction.result.failed is False
        call = client.text_calls[0]
        assert call["system"] is None
        assert "Nom: Jeanne" in call["messages"][0]["content"]

    def test_error_is_not_scored(self, make_fake_client):
        client = make_fake_client(error=InferenceError("down"))
        item = DatasetItem(input=ProfileInput(name="Jeanne"), expected_output=None)

        prediction = _predict(_pipeline(client), item, _config(EvaluationMode.LINKEDIN_MESSAGE))

        assert prediction.result.failed is True
        assert prediction.result.scored is False
