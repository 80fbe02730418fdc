"""
Infrastructure Layer

Adapters for model providers, content capture and local state persistence.
"""
