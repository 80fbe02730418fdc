"""
stages.pyのテスト

各ステージを単独で、フェイククライアントを使ってテストする。
"""

import asyncio

import pytest

from prompt_gauge.cancellation import CancellationToken
from prompt_gauge.domain.constants import OUTPUT_SCHEMA, PARSER_SYSTEM_MESSAGE, SYSTEM_MESSAGE
from prompt_gauge.domain.value_objects import TokenUsage
from prompt_gauge.errors import EvaluationCancelled
from prompt_gauge.pipeline.stages import (
    FreeTextStage,
    SchemaCoercionStage,
    StructuredStage,
    TwoStageGeneration,
)

MODEL = "openai/gpt-4o-mini"
PARSER = "openai/gpt-4.1-mini"
MESSAGES = [{"role": "user", "content": "q"}]


class TestStructuredStage:
    """StructuredStage のテスト"""

    def test_returns_output_and_cost(self, make_fake_client):
        client = make_fake_client(
            object_data={"output": False, "explanation": "no"},
            usage=TokenUsage(prompt_tokens=1000, completion_tokens=500),
        )
        output = asyncio.run(StructuredStage(client).run(MODEL, MESSAGES, CancellationToken()))

        assert output.output is False
        assert output.explanation == "no"
        assert output.cost == pytest.approx(0.00045)
        call = client.object_calls[0]
        assert call["schema"] is OUTPUT_SCHEMA
        assert call["system"] == SYSTEM_MESSAGE

    def test_cancelled_token_skips_result(self, fake_client):
        async def _main():
            token = CancellationToken()
            token.cancel()
            return await StructuredStage(fake_client).run(MODEL, MESSAGES, token)

        with pytest.raises(EvaluationCancelled):
            asyncio.run(_main())


class TestFreeTextStage:
    """FreeTextStage のテスト"""

    def test_returns_text(self, make_fake_client):
        client = make_fake_client(text="It is true.")
        output = asyncio.run(FreeTextStage(client).run(MODEL, MESSAGES, CancellationToken()))
        assert output.text == "It is true."
        assert output.cost == 0.0

    def test_system_can_be_omitted(self, fake_client):
        asyncio.run(FreeTextStage(fake_client, system=None).run(MODEL, MESSAGES, CancellationToken()))
        assert fake_client.text_calls[0]["system"] is None


class TestSchemaCoercionStage:
    """SchemaCoercionStage のテスト"""

    def test_uses_parser_model(self, make_fake_client):
        client = make_fake_client(object_data={"output": True, "explanation": "parsed"})
        output = asyncio.run(
            SchemaCoercionStage(client, PARSER).run("raw answer", CancellationToken())
        )

        assert output.output is True
        call = client.object_calls[0]
        assert call["model_id"] == PARSER
        assert call["system"] == PARSER_SYSTEM_MESSAGE
        assert call["messages"][0]["content"][0]["text"].endswith("raw answer")


class TestTwoStageGeneration:
    """TwoStageGeneration のテスト"""

    def test_costs_of_both_stages_are_summed(self, make_fake_client):
        """本体モデルとパーサーモデルのコストを合算する"""
        usage = TokenUsage(prompt_tokens=1_000_000, completion_tokens=0)
        client = make_fake_client(
            text="free text answer",
            object_data={"output": True, "explanation": "parsed"},
            usage=usage,
        )
        generation = TwoStageGeneration(
            FreeTextStage(client),
            SchemaCoercionStage(client, PARSER),
        )

        output = asyncio.run(generation.run(MODEL, MESSAGES, CancellationToken()))

        # gpt-4o-mini input 0.15 + gpt-4.1-mini input 0.4
        assert output.cost == pytest.approx(0.55)
        assert output.output is True
        assert client.text_calls[0]["model_id"] == MODEL
        assert client.object_calls[0]["model_id"] == PARSER
        assert client.object_calls[0]["messages"][0]["content"][0]["text"].endswith("free text answer")
