"""
Model client package

Provides a unified async interface for structured and free-text generation.
"""

from prompt_gauge.infrastructure.model_clients.base import ModelClient, validate_output_object
from prompt_gauge.infrastructure.model_clients.factory import create_client
from prompt_gauge.infrastructure.model_clients.openrouter import OpenRouterClient

__all__ = ["ModelClient", "OpenRouterClient", "create_client", "validate_output_object"]
