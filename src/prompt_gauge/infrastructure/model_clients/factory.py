"""
Model client factory

Creates a client bound to the API key of a run.
"""

from __future__ import annotations

from prompt_gauge.harness_config import HarnessConfig, load_config
from prompt_gauge.infrastructure.model_clients.base import ModelClient
from prompt_gauge.infrastructure.model_clients.openrouter import OpenRouterClient


def create_client(api_key: str, config: HarnessConfig | None = None) -> ModelClient:
    """
    Create a model client for a run

    Args:
        api_key: API key taken from the run configuration
        config: HarnessConfig (loads from env if not provided)

    Returns:
        ModelClient: The client instance
    """
    if config is None:
        config = load_config()

    return OpenRouterClient(
        api_key=api_key or config.openrouter.api_key,
        base_url=config.openrouter.base_url,
        timeout_seconds=config.openrouter.timeout_seconds,
    )
