"""
Evaluation Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from prompt_gauge.domain.constants import PARSER_MODEL


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_optional_int(key: str, default: int | None) -> int | None:
    """Convert an environment variable to int; empty or 0 means unset"""
    val = os.environ.get(key)
    if val is None:
        return default
    if not val.strip():
        return None
    parsed = _env_int(key, 0)
    return parsed if parsed > 0 else None


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class OpenRouterConfig:
    """OpenAI-compatible endpoint configuration"""
    base_url: str = "https://openrouter.ai/api/v1"
    api_key: str = ""
    timeout_seconds: float = 120.0


@dataclass
class PipelineConfig:
    """Prediction pipeline configuration"""
    parser_model: str = PARSER_MODEL
    settle_delay_seconds: float = 0.5
    max_concurrency: int | None = None  # None = every item in flight at once


@dataclass
class CaptureConfig:
    """Rendered line capture configuration"""
    line_width: int = 60
    line_suffix: str = "<br>"


@dataclass
class StateConfig:
    """Local state persistence configuration"""
    state_file: str = ".prompt_gauge_state.json"


@dataclass
class HarnessConfig:
    """Overall evaluation harness configuration"""
    openrouter: OpenRouterConfig = field(default_factory=OpenRouterConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    state: StateConfig = field(default_factory=StateConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            openrouter=OpenRouterConfig(**config_data.get("openrouter", {})),
            pipeline=PipelineConfig(**config_data.get("pipeline", {})),
            capture=CaptureConfig(**config_data.get("capture", {})),
            state=StateConfig(**config_data.get("state", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig
    """
    openrouter = OpenRouterConfig(
        base_url=_env_str("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
        api_key=_env_str("OPENROUTER_API_KEY", ""),
        timeout_seconds=_env_float("OPENROUTER_TIMEOUT_SECONDS", 120.0),
    )
    pipeline = PipelineConfig(
        parser_model=_env_str("PROMPT_GAUGE_PARSER_MODEL", PARSER_MODEL),
        settle_delay_seconds=_env_float("PROMPT_GAUGE_SETTLE_DELAY_SECONDS", 0.5),
        max_concurrency=_env_optional_int("PROMPT_GAUGE_MAX_CONCURRENCY", None),
    )
    capture = CaptureConfig(
        line_width=_env_int("PROMPT_GAUGE_LINE_WIDTH", 60),
        line_suffix=_env_str("PROMPT_GAUGE_LINE_SUFFIX", "<br>"),
    )
    state = StateConfig(
        state_file=_env_str("PROMPT_GAUGE_STATE_FILE", ".prompt_gauge_state.json"),
    )
    return HarnessConfig(
        openrouter=openrouter,
        pipeline=pipeline,
        capture=capture,
        state=state,
    )
