"""
Generation stages

A prediction is produced either by one StructuredStage call, or by a
FreeTextStage followed by an optional SchemaCoercionStage that parses the free
text into {output, explanation} with a second model. Each stage reports the
cost of the calls it made.
"""

from dataclasses import dataclass

from prompt_gauge.cancellation import CancellationToken
from prompt_gauge.cost_calc import calculate_call_cost
from prompt_gauge.domain.constants import OUTPUT_SCHEMA, PARSER_SYSTEM_MESSAGE, SYSTEM_MESSAGE
from prompt_gauge.domain.value_objects import OutputValue
from prompt_gauge.infrastructure.model_clients.base import Message, ModelClient
from prompt_gauge.pipeline.messages import build_parse_message


@dataclass(frozen=True)
class StageOutput:
    """Parsed {output, explanation} plus the cost of producing it"""
    output: OutputValue
    explanation: str
    cost: float


@dataclass(frozen=True)
class FreeTextOutput:
    text: str
    cost: float


class StructuredStage:
    """Single structured generation call"""

    def __init__(self, client: ModelClient, system: str = SYSTEM_MESSAGE) -> None:
        self.client = client
        self.system = system

    async def run(
        self,
        model_id: str,
        messages: list[Message],
        token: CancellationToken,
    ) -> StageOutput:
        response = await token.guard(
            self.client.generate_object(model_id, messages, OUTPUT_SCHEMA, system=self.system)
        )
        return StageOutput(
            output=response.data["output"],
            explanation=response.data["explanation"],
            cost=calculate_call_cost(response.usage, model_id),
        )


class FreeTextStage:
    """Single free-text generation call"""

    def __init__(self, client: ModelClient, system: str | None = SYSTEM_MESSAGE) -> None:
        self.client = client
        self.system = system

    async def run(
        self,
        model_id: str,
        messages: list[Message],
        token: CancellationToken,
    ) -> FreeTextOutput:
        response = await token.guard(
            self.client.generate_text(model_id, messages, system=self.system)
        )
        return FreeTextOutput(
            text=response.text,
            cost=calculate_call_cost(response.usage, model_id),
        )


class SchemaCoercionStage:
    """Parses free text into {output, explanation} with a fixed parser model"""

    def __init__(self, client: ModelClient, parser_model: str) -> None:
        self.client = client
        self.parser_model = parser_model

    async def run(self, raw_output: str, token: CancellationToken) -> StageOutput:
        response = await token.guard(
            self.client.generate_object(
                self.parser_model,
                [build_parse_message(raw_output)],
                OUTPUT_SCHEMA,
                system=PARSER_SYSTEM_MESSAGE,
            )
        )
        return StageOutput(
            output=response.data["output"],
            explanation=response.data["explanation"],
            cost=calculate_call_cost(response.usage, self.parser_model),
        )


class TwoStageGeneration:
    """FreeTextStage -> SchemaCoercionStage"""

    def __init__(self, free_text: FreeTextStage, coercion: SchemaCoercionStage) -> None:
        self.free_text = free_text
        self.coercion = coercion

    async def run(
        self,
        model_id: str,
        messages: list[Message],
        token: CancellationToken,
    ) -> StageOutput:
        primary = await self.free_text.run(model_id, messages, token)
        parsed = await self.coercion.run(primary.text, token)
        return StageOutput(
            output=parsed.output,
            explanation=parsed.explanation,
            cost=primary.cost + parsed.cost,
        )
