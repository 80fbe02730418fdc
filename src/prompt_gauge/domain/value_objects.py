"""
Domain Value Objects

Defines immutable data structures representing values such as token usage,
model responses, pricing, item inputs and run configuration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

OutputValue = Union[bool, str, int, float]


class EvaluationMode(str, Enum):
    """Which content is attached to the model request for a run"""
    PLAIN_TEXT = "plain_text"
    IMAGES = "images"
    POST_IMAGE = "post_image"
    ARTICLE = "article"
    LINKEDIN_MESSAGE = "linkedin_message"

    @property
    def is_scored(self) -> bool:
        """Whether runs in this mode produce classification metrics"""
        return self is not EvaluationMode.LINKEDIN_MESSAGE


@dataclass(frozen=True)
class ModelPricing:
    """Token pricing for one model (USD per 1M tokens)"""
    model_id: str
    name: str
    input_price_per_m: float
    output_price_per_m: float
    reasoning_effort: str | None = None


@dataclass(frozen=True)
class TokenUsage:
    """Token usage reported by a model call"""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def __post_init__(self):
        if self.prompt_tokens < 0:
            raise ValueError("prompt_tokens must be non-negative")
        if self.completion_tokens < 0:
            raise ValueError("completion_tokens must be non-negative")


@dataclass(frozen=True)
class TextResponse:
    """Free-text generation response"""
    text: str
    model_id: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: int = 0


@dataclass(frozen=True)
class ObjectResponse:
    """Structured generation response (data already validated against the schema)"""
    data: dict[str, Any]
    model_id: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: int = 0


# --- Item inputs ---


@dataclass(frozen=True)
class PlainTextInput:
    """Plain text question, statement or post"""
    text: str

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ArticleInput:
    """Article with a title and an HTML body"""
    title: str
    body: str
    url: str | None = None


@dataclass(frozen=True)
class ProfileInput:
    """Outreach profile used to draft a LinkedIn message"""
    name: str
    title: str = ""
    role: str = ""
    summary: str = ""
    case_study: str | None = None
    signal: str = "like"
    include_case_study: bool = True


ItemInput = Union[PlainTextInput, ArticleInput, ProfileInput]


def parse_item_input(raw: Any) -> ItemInput:
    """
    Map a raw JSON input value onto its ItemInput variant

    Strings become PlainTextInput; dicts with a "name" key become ProfileInput;
    dicts with a "title" key become ArticleInput. Anything else is stringified.
    """
    if isinstance(raw, (PlainTextInput, ArticleInput, ProfileInput)):
        return raw
    if isinstance(raw, str):
        return PlainTextInput(raw)
    if isinstance(raw, dict):
        if "name" in raw:
            return ProfileInput(
                name=str(raw["name"]),
                title=str(raw.get("title") or ""),
                role=str(raw.get("role") or ""),
                summary=str(raw.get("summary") or ""),
                case_study=raw.get("caseStudy", raw.get("case_study")),
                signal=str(raw.get("signal") or "like"),
                include_case_study=raw.get("includeCaseStudy", raw.get("include_case_study")) is not False,
            )
        if "title" in raw:
            return ArticleInput(
                title=str(raw["title"]),
                body=str(raw.get("body") or raw.get("content") or ""),
                url=raw.get("url"),
            )
    return PlainTextInput(str(raw))


def item_input_to_raw(item_input: ItemInput) -> Any:
    """Inverse of parse_item_input, used for persistence"""
    if isinstance(item_input, PlainTextInput):
        return item_input.text
    if isinstance(item_input, ArticleInput):
        raw = {"title": item_input.title, "body": item_input.body}
        if item_input.url is not None:
            raw["url"] = item_input.url
        return raw
    return {
        "name": item_input.name,
        "title": item_input.title,
        "role": item_input.role,
        "summary": item_input.summary,
        "caseStudy": item_input.case_study,
        "signal": item_input.signal,
        "includeCaseStudy": item_input.include_case_study,
    }


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable snapshot of the settings used for one run"""
    api_key: str
    model_id: str
    prompt_text: str
    evaluation_mode: EvaluationMode = EvaluationMode.PLAIN_TEXT
    min_char_count: int = 0
    min_line_count: int = 0
