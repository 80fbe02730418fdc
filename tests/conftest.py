"""
共通フィクスチャ

ネットワークに出ないフェイクのモデルクライアントを提供する。
"""

import pytest

from prompt_gauge.domain.value_objects import ObjectResponse, TextResponse, TokenUsage
from prompt_gauge.infrastructure.model_clients.base import ModelClient


def message_texts(messages):
    """Flatten the text parts of chat messages"""
    texts = []
    for message in messages:
        content = message["content"]
        if isinstance(content, str):
            texts.append(content)
            continue
        texts.extend(part["text"] for part in content if part["type"] == "text")
    return texts


class FakeModelClient(ModelClient):
    """
    Records every call and answers from fixed values

    object_data may be a dict or a callable taking the messages.
    """

    def __init__(self, object_data=None, text="raw model output", usage=None, error=None):
        self.object_data = object_data or {"output": True, "explanation": "looks right"}
        self.text = text
        self.usage = usage or TokenUsage()
        self.error = error
        self.text_calls = []
        self.object_calls = []
        self.closed = False

    async def generate_text(self, model_id, messages, system=None):
        self.text_calls.append({"model_id": model_id, "messages": messages, "system": system})
        if self.error is not None:
            raise self.error
        return TextResponse(text=self.text, model_id=model_id, usage=self.usage)

    async def generate_object(self, model_id, messages, schema, system=None):
        self.object_calls.append({
            "model_id": model_id, "messages": messages, "schema": schema, "system": system,
        })
        if self.error is not None:
            raise self.error
        data = self.object_data(messages) if callable(self.object_data) else dict(self.object_data)
        return ObjectResponse(data=data, model_id=model_id, usage=self.usage)

    async def aclose(self):
        self.closed = True

    @property
    def call_count(self):
        return len(self.text_calls) + len(self.object_calls)


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def make_fake_client():
    return FakeModelClient
