"""
Model client base class

Defines the abstract base class inherited by all model clients, plus
the schema check applied to every structured generation response.
"""

from abc import ABC, abstractmethod
from typing import Any

from prompt_gauge.domain.value_objects import ObjectResponse, TextResponse
from prompt_gauge.errors import SchemaViolationError

Message = dict[str, Any]


def validate_output_object(data: Any) -> dict[str, Any]:
    """
    Check a decoded object against the {output, explanation} schema

    Raises:
        SchemaViolationError: If a key is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise SchemaViolationError(f"Expected a JSON object, got {type(data).__name__}")
    if "output" not in data:
        raise SchemaViolationError("Missing 'output' key")
    output = data["output"]
    if output is None or not isinstance(output, (bool, str, int, float)):
        raise SchemaViolationError(f"'output' must be a boolean, string or number, got {output!r}")
    explanation = data.get("explanation")
    if not isinstance(explanation, str):
        raise SchemaViolationError("'explanation' must be a string")
    return {"output": output, "explanation": explanation}


class ModelClient(ABC):
    """Abstract base class for model clients"""

    @abstractmethod
    async def generate_text(
        self,
        model_id: str,
        messages: list[Message],
        system: str | None = None,
    ) -> TextResponse:
        """Free-text generation"""
        pass

    @abstractmethod
    async def generate_object(
        self,
        model_id: str,
        messages: list[Message],
        schema: dict[str, Any],
        system: str | None = None,
    ) -> ObjectResponse:
        """Structured generation constrained to `schema`"""
        pass

    async def aclose(self) -> None:
        """Release network resources"""
        return None
