"""
OpenRouter (OpenAI-compatible API) model client
"""

import json
import os
import re
import time
from typing import Any

import openai
from openai import AsyncOpenAI

from prompt_gauge.domain.value_objects import ObjectResponse, TextResponse, TokenUsage
from prompt_gauge.errors import InferenceError, SchemaViolationError
from prompt_gauge.infrastructure.model_clients.base import (
    Message,
    ModelClient,
    validate_output_object,
)

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def _usage_from(response) -> TokenUsage:
    """Retrieve token usage (absent usage counts as zero)"""
    if not response.usage:
        return TokenUsage()
    return TokenUsage(
        prompt_tokens=response.usage.prompt_tokens or 0,
        completion_tokens=response.usage.completion_tokens or 0,
    )


def _with_system(messages: list[Message], system: str | None) -> list[Message]:
    if system is None:
        return list(messages)
    return [{"role": "system", "content": system}, *messages]


def parse_json_object(text: str) -> Any:
    """
    Decode a JSON object from model output, tolerating a fenced code block

    Raises:
        SchemaViolationError: If no valid JSON can be decoded
    """
    stripped = text.strip()
    match = _CODE_BLOCK_RE.search(stripped)
    json_text = match.group(1) if match else stripped
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        raise SchemaViolationError(f"Response is not valid JSON: {stripped[:200]}") from e


class OpenRouterClient(ModelClient):
    """Client for OpenRouter or any OpenAI-compatible endpoint"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
    ):
        """
        Args:
            api_key: API key (falls back to OPENROUTER_API_KEY env var if not specified)
            base_url: API endpoint (falls back to OPENROUTER_BASE_URL env var, then OpenRouter)
            timeout_seconds: HTTP timeout per request (default: 120)
        """
        self.api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        self.base_url = base_url or os.environ.get("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")

        if not self.api_key:
            raise ValueError("OPENROUTER_API_KEY is not set")

        # Failed calls are never retried
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

    async def _complete(self, model_id: str, messages: list[Message], **kwargs):
        try:
            return await self.client.chat.completions.create(
                model=model_id,
                messages=messages,
                **kwargs,
            )
        except openai.APIError as e:
            raise InferenceError(f"{model_id}: {e}") from e

    async def generate_text(
        self,
        model_id: str,
        messages: list[Message],
        system: str | None = None,
    ) -> TextResponse:
        """
        Send messages and retrieve a free-text response

        Raises:
            InferenceError: On any provider or network failure
        """
        start_time = time.time()
        response = await self._complete(model_id, _with_system(messages, system))
        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise InferenceError(f"{model_id}: response contained no choices")
        text = response.choices[0].message.content or ""

        return TextResponse(
            text=text.strip(),
            model_id=model_id,
            usage=_usage_from(response),
            latency_ms=latency_ms,
        )

    async def generate_object(
        self,
        model_id: str,
        messages: list[Message],
        schema: dict[str, Any],
        system: str | None = None,
    ) -> ObjectResponse:
        """
        Send messages and retrieve an object conforming to `schema`

        Raises:
            SchemaViolationError: If the response does not match the schema
            InferenceError: On any provider or network failure
        """
        start_time = time.time()
        response = await self._complete(
            model_id,
            _with_system(messages, system),
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "prediction", "strict": True, "schema": schema},
            },
        )
        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise InferenceError(f"{model_id}: response contained no choices")
        content = response.choices[0].message.content
        if not content:
            raise SchemaViolationError(f"{model_id}: empty structured response")

        data = validate_output_object(parse_json_object(content))

        return ObjectResponse(
            data=data,
            model_id=model_id,
            usage=_usage_from(response),
            latency_ms=latency_ms,
        )

    async def aclose(self) -> None:
        await self.client.close()
