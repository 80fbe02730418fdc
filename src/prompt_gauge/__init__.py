"""
prompt-gauge

Evaluate one prompt/model configuration against a labeled dataset:
precision, recall, F1 and token cost.
"""

__version__ = "0.1.0"
