"""
Use Cases Layer

Aggregates the evaluation logic called from the runner or an embedding UI.
"""

from prompt_gauge.use_cases.evaluation import (
    Evaluator,
    run_evaluation,
    validate_run_configuration,
)
from prompt_gauge.use_cases.history import RunHistory, best_metrics
from prompt_gauge.use_cases.metrics import (
    build_run_metrics,
    compute_metrics,
    count_outcomes,
)
from prompt_gauge.use_cases.progress import (
    ProgressTracker,
    ProgressUpdate,
    format_elapsed,
)

__all__ = [
    # evaluation
    "Evaluator",
    "run_evaluation",
    "validate_run_configuration",
    # history
    "RunHistory",
    "best_metrics",
    # metrics
    "build_run_metrics",
    "compute_metrics",
    "count_outcomes",
    # progress
    "ProgressTracker",
    "ProgressUpdate",
    "format_elapsed",
]
