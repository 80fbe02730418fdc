"""
Domain Constants

Centrally manages constants shared across the evaluation harness.
"""

from prompt_gauge.domain.value_objects import ModelPricing

# Default model selected for a fresh configuration
DEFAULT_MODEL = "openai/gpt-4.1-mini"

# Fixed low-cost model that parses free text into {output, explanation}
PARSER_MODEL = "openai/gpt-4.1-mini"

DEFAULT_PROMPT = (
    "Answer the following question or statement with a JSON object containing a single key "
    "'output' with the appropriate value (boolean, string, or number)."
)

SYSTEM_MESSAGE = (
    "You are a helpful AI that responds with a JSON object containing an 'output' key with the "
    "appropriate value (boolean, string, or number) and an 'explanation' key with a string "
    "explaining your reasoning."
)

PARSER_SYSTEM_MESSAGE = "You are a helpful assistant that parses text into structured JSON objects."

PARSER_INSTRUCTION = (
    "Parse the following text into a JSON object with 'output' and 'explanation' keys. "
    "The output should be a boolean, string, or number as appropriate:"
)

# Written into predicted_output when an item fails
ERROR_MARKER = "Error: Failed to generate output"

# Structured output schema (JSON Schema) for classification calls
OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "output": {
            "anyOf": [
                {"type": "boolean"},
                {"type": "string"},
                {"type": "number"},
            ]
        },
        "explanation": {"type": "string"},
    },
    "required": ["output", "explanation"],
    "additionalProperties": False,
}

# Dataset used when no dataset has been stored yet
INITIAL_DATASET = [
    {"input": "Is the capital of France Paris?", "expectedOutput": True},
    {"input": "What is 2 + 2?", "expectedOutput": 4},
    {"input": "Who wrote Romeo and Juliet?", "expectedOutput": "William Shakespeare"},
]

LINKEDIN_SIGNALS = ("like", "comment", "invitation", "repost")
DEFAULT_LINKEDIN_SIGNAL = "like"

# Model pricing (USD / 1M tokens)
MODEL_PRICING: dict[str, ModelPricing] = {
    pricing.model_id: pricing
    for pricing in [
        ModelPricing("openai/gpt-4o-mini", "GPT-4o-mini", 0.15, 0.6),
        ModelPricing("openai/gpt-4.1-mini", "GPT-4.1-mini", 0.4, 1.6),
        ModelPricing("openai/gpt-4o", "GPT-4o", 2.5, 10.0),
        ModelPricing("openai/o3-mini", "o3-mini", 1.1, 4.4),
        ModelPricing("openai/o3-mini-high", "o3-mini-high", 1.1, 4.4, reasoning_effort="high"),
        ModelPricing("anthropic/claude-3.7-sonnet", "Claude 3.7 Sonnet", 3.0, 15.0),
        ModelPricing("anthropic/claude-3.7-sonnet:thinking", "Claude 3.7 Sonnet (Thinking)", 3.0, 15.0),
        ModelPricing("deepseek/deepseek-r1", "Deepseek R1", 0.55, 2.19),
        ModelPricing("google/gemini-2.0-flash-001", "Gemini 2.0 Flash", 0.1, 0.4),
        ModelPricing("google/gemini-2.0-flash-lite-001", "Gemini 2.0 Flash Lite", 0.075, 0.3),
        ModelPricing(
            "mistralai/mistral-small-3.1-24b-instruct",
            "Mistral Small 3.1 24B Instruct",
            0.1,
            0.3,
        ),
    ]
}

# Pricing used for models missing from MODEL_PRICING
_UNKNOWN_MODEL_PRICING = {"input": 0.0, "output": 0.0}
