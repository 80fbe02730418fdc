"""
prompt-gauge CLI Runner

Minimal CLI for running one evaluation against the stored or a given dataset.

Usage:
    python -m prompt_gauge.runner --dataset data/posts.json --model openai/gpt-4o-mini --prompt-file prompt.txt
    python -m prompt_gauge.runner --dataset data/posts.json --mode images --min-chars 200 --min-lines 5

History:
    python -m prompt_gauge.runner --show-history
    python -m prompt_gauge.runner --reset-history --yes
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from functools import partial
from pathlib import Path

from dotenv import load_dotenv

from prompt_gauge.app_state import AppState
from prompt_gauge.cost_calc import cost_per_hundred_items
from prompt_gauge.dataset_loader import FieldMapping, dataset_to_dataframe, load_dataset
from prompt_gauge.domain.entities import RunOutcome
from prompt_gauge.domain.value_objects import EvaluationMode
from prompt_gauge.errors import DatasetFormatError, RunValidationError
from prompt_gauge.harness_config import HarnessConfig, load_config
from prompt_gauge.infrastructure.capture import TextLayoutCapture
from prompt_gauge.infrastructure.model_clients.factory import create_client
from prompt_gauge.infrastructure.state_store import JsonFileStateStore
from prompt_gauge.use_cases.evaluation import Evaluator
from prompt_gauge.use_cases.progress import ProgressUpdate, format_elapsed

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="prompt-gauge: Evaluate a prompt/model configuration against a labeled dataset",
    )
    parser.add_argument("--dataset", default=None, help="Path to a dataset JSON array (default: stored dataset)")
    parser.add_argument("--input-field", default="input", help="Input field name (default: input)")
    parser.add_argument("--output-field", default="expectedOutput", help="Expected output field name (default: expectedOutput)")
    parser.add_argument("--image-url-field", default="imageUrl", help="Image URL field name (default: imageUrl)")
    parser.add_argument("--model", default=None, help="Model identifier (default: stored setting)")
    prompt_group = parser.add_mutually_exclusive_group()
    prompt_group.add_argument("--prompt", default=None, help="Prompt text")
    prompt_group.add_argument("--prompt-file", default=None, help="Read the prompt text from a file")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in EvaluationMode],
        default=None,
        help="Evaluation mode (default: stored setting)",
    )
    parser.add_argument("--min-chars", type=int, default=None, help="Minimum character count in images mode (0 disables)")
    parser.add_argument("--min-lines", type=int, default=None, help="Minimum rendered line count in images mode (0 disables)")
    parser.add_argument("--api-key", default=None, help="API key (default: stored setting or OPENROUTER_API_KEY)")
    parser.add_argument("--max-concurrency", type=int, default=None, help="Cap on in-flight items (default: unbounded)")
    parser.add_argument("--state-file", default=None, help="State file (default: PROMPT_GAUGE_STATE_FILE)")
    parser.add_argument("--output-dir", default="results", help="Directory for the results CSV (default: results)")
    parser.add_argument("--show-history", action="store_true", help="Print the run history and exit")
    parser.add_argument("--reset-history", action="store_true", help="Clear the run history and exit")
    parser.add_argument("--yes", action="store_true", help="Confirm destructive operations")
    return parser.parse_args(argv)


def _apply_arguments(state: AppState, args: argparse.Namespace, config: HarnessConfig) -> None:
    """Copy CLI overrides into the stored settings"""
    changes: dict = {}
    if args.model:
        changes["model_id"] = args.model
    if args.prompt is not None:
        changes["prompt_text"] = args.prompt
    if args.prompt_file:
        changes["prompt_text"] = Path(args.prompt_file).read_text(encoding="utf-8").strip()
    if args.mode:
        changes["evaluation_mode"] = EvaluationMode(args.mode)
    if args.min_chars is not None:
        changes["min_char_count"] = args.min_chars
    if args.min_lines is not None:
        changes["min_line_count"] = args.min_lines
    if args.api_key:
        changes["api_key"] = args.api_key
    elif not state.settings.api_key and config.openrouter.api_key:
        changes["api_key"] = config.openrouter.api_key
    if changes:
        state.update_settings(**changes)


def _print_progress(update: ProgressUpdate) -> None:
    print(
        f"  [{update.completed}/{update.total}] {update.percent:5.1f}% "
        f"| {format_elapsed(update.elapsed_seconds)}"
    )


def _best_mark(flag) -> str:
    return "*" if flag else " "


def _print_history(state: AppState) -> None:
    history_df = state.history.to_dataframe(len(state.dataset))
    if history_df.empty:
        print("  (no runs recorded)\n")
        return
    print(f"  {'Run':>4} {'Precision':>10} {'Recall':>8} {'F1':>8} {'Cost':>10} {'Cost/100':>10}  Model")
    print(f"  {'-'*4} {'-'*10} {'-'*8} {'-'*8} {'-'*10} {'-'*10}  {'-'*30}")
    for _, row in history_df.iterrows():
        print(
            f"  {row['run']:>4} "
            f"{row['precision']:>9.3f}{_best_mark(row['is_best_precision'])}"
            f"{row['recall']:>7.3f}{_best_mark(row['is_best_recall'])}"
            f"{row['f1_score']:>7.3f}{_best_mark(row['is_best_f1_score'])} "
            f"{row['cost']:>10.4f} "
            f"{row['cost_per_100_items']:>10.4f}  "
            f"{row['model']}"
        )
    print("  (* = best value in history)\n")


def _print_outcome(outcome: RunOutcome) -> None:
    counts = outcome.counts
    print(f"\n=== Results ({format_elapsed(outcome.elapsed_seconds)}) ===\n")
    print(f"  TP={counts.true_positives} FP={counts.false_positives} "
          f"FN={counts.false_negatives} TN={counts.true_negatives} "
          f"(excluded: {counts.excluded})")
    if outcome.metrics is not None:
        print(f"  Precision: {outcome.metrics.precision:.3f}")
        print(f"  Recall:    {outcome.metrics.recall:.3f}")
        print(f"  F1 Score:  {outcome.metrics.f1_score:.3f}")
    print(f"  Cost:      ${outcome.total_cost:.4f} "
          f"(${cost_per_hundred_items(outcome.total_cost, len(outcome.dataset)):.4f} per 100 items)")
    failed = sum(1 for r in outcome.results if r.failed)
    if failed:
        print(f"  Failed items: {failed}")
    print()


async def _run(evaluator: Evaluator, state: AppState) -> RunOutcome:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, evaluator.cancel)
    except NotImplementedError:
        logger.debug("Signal handlers are not supported on this platform; Ctrl+C will not cancel cleanly")
    try:
        return await evaluator.run(state.dataset, state.settings.snapshot())
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            logger.debug("Signal handlers are not supported on this platform")


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = load_config()
    if args.max_concurrency is not None:
        config.pipeline.max_concurrency = args.max_concurrency if args.max_concurrency > 0 else None

    store = JsonFileStateStore(args.state_file or config.state.state_file)
    state = AppState.load(store)

    if args.reset_history:
        if not args.yes:
            print("ERROR: --reset-history clears every recorded run. Re-run with --yes to confirm.")
            sys.exit(1)
        state.history.reset()
        print("=== Run history cleared ===\n")
        return

    if args.show_history:
        print("\n=== Metrics History ===\n")
        _print_history(state)
        return

    _apply_arguments(state, args, config)

    if args.dataset:
        mapping = FieldMapping(
            input_field=args.input_field,
            output_field=args.output_field,
            image_url_field=args.image_url_field,
        )
        try:
            state.set_dataset(load_dataset(args.dataset, mapping))
        except DatasetFormatError as e:
            print(f"ERROR: Invalid dataset format: {e}")
            sys.exit(1)

    settings = state.settings
    print("\n=== Evaluation ===\n")
    print(f"  Items: {len(state.dataset)}")
    print(f"  Model: {settings.model_id}")
    print(f"  Mode:  {settings.evaluation_mode.value}")
    if settings.evaluation_mode is EvaluationMode.IMAGES:
        print(f"  Min chars: {settings.min_char_count} | Min lines: {settings.min_line_count}")
    print()

    evaluator = Evaluator(
        partial(create_client, config=config),
        state.history,
        capture=TextLayoutCapture(config.capture.line_width, config.capture.line_suffix),
        pipeline_config=config.pipeline,
        on_progress=_print_progress,
        on_dataset=state.set_dataset,
    )

    try:
        outcome = asyncio.run(_run(evaluator, state))
    except RunValidationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if outcome.cancelled:
        print("\n=== Evaluation was cancelled (metrics not recorded) ===")
    _print_outcome(outcome)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    results_path = output_dir / "results.csv"
    dataset_to_dataframe(outcome.dataset).to_csv(results_path, index=False)
    print(f"  Results: {results_path}\n")

    print("=== Metrics History ===\n")
    _print_history(state)


if __name__ == "__main__":
    main()
