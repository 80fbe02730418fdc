"""
Application State

Explicit process-wide state (settings, dataset, run history) with a
load-at-startup / save-on-change lifecycle over a StateStore.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, replace

from prompt_gauge.domain.constants import DEFAULT_MODEL, DEFAULT_PROMPT, INITIAL_DATASET
from prompt_gauge.domain.entities import DatasetItem, RunMetrics
from prompt_gauge.domain.value_objects import EvaluationMode, RunConfiguration
from prompt_gauge.infrastructure.state_store import StateStore
from prompt_gauge.use_cases.history import RunHistory

logger = logging.getLogger(__name__)

FORM_STATE_KEY = "formState"
DATASET_KEY = "dataset"
HISTORY_KEY = "metricsHistory"

# Boolean mode flags of older state files, in precedence order
_LEGACY_MODE_FLAGS = [
    ("evaluateImages", EvaluationMode.IMAGES),
    ("evaluatePostImage", EvaluationMode.POST_IMAGE),
    ("evaluateArticle", EvaluationMode.ARTICLE),
    ("evaluateLinkedInMessage", EvaluationMode.LINKEDIN_MESSAGE),
]


@dataclass
class RunSettings:
    """Live, editable run settings"""
    api_key: str = ""
    model_id: str = DEFAULT_MODEL
    prompt_text: str = DEFAULT_PROMPT
    evaluation_mode: EvaluationMode = EvaluationMode.PLAIN_TEXT
    min_char_count: int = 0
    min_line_count: int = 0

    def snapshot(self) -> RunConfiguration:
        """Freeze the current settings for one run"""
        return RunConfiguration(**asdict(self))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["evaluation_mode"] = self.evaluation_mode.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RunSettings":
        """Create from a stored dictionary (accepts the legacy boolean mode flags)"""
        mode_value = data.get("evaluation_mode")
        if mode_value is not None:
            mode = EvaluationMode(mode_value)
        else:
            mode = next(
                (m for flag, m in _LEGACY_MODE_FLAGS if data.get(flag)),
                EvaluationMode.PLAIN_TEXT,
            )
        return cls(
            api_key=data.get("api_key", data.get("openaiKey", "")),
            model_id=data.get("model_id", data.get("selectedModel", DEFAULT_MODEL)),
            prompt_text=data.get("prompt_text", data.get("prompt", DEFAULT_PROMPT)),
            evaluation_mode=mode,
            min_char_count=int(data.get("min_char_count", data.get("minCharCount", 0))),
            min_line_count=int(data.get("min_line_count", data.get("minLineCount", 0))),
        )


class AppState:
    """Settings, dataset and history, persisted on every change"""

    def __init__(
        self,
        store: StateStore,
        settings: RunSettings,
        dataset: list[DatasetItem],
        history_records: list[RunMetrics],
    ) -> None:
        self._store = store
        self._settings = settings
        self._dataset = list(dataset)
        self.history = RunHistory(history_records, on_change=self._save_history)

    @classmethod
    def load(cls, store: StateStore) -> "AppState":
        """
        Hydrate state from the store once

        Missing or unreadable keys fall back to defaults.
        """
        settings = RunSettings()
        form_state = store.get(FORM_STATE_KEY)
        if form_state:
            try:
                settings = RunSettings.from_dict(form_state)
            except (TypeError, ValueError) as e:
                logger.error("Error reading stored key '%s': %s", FORM_STATE_KEY, e)

        raw_dataset = store.get(DATASET_KEY)
        if raw_dataset is None:
            raw_dataset = INITIAL_DATASET
        try:
            dataset = [DatasetItem.from_dict(d) for d in raw_dataset]
        except (TypeError, AttributeError) as e:
            logger.error("Error reading stored key '%s': %s", DATASET_KEY, e)
            dataset = [DatasetItem.from_dict(d) for d in INITIAL_DATASET]

        try:
            history_records = [RunMetrics.from_dict(m) for m in store.get(HISTORY_KEY, [])]
        except (TypeError, ValueError, AttributeError) as e:
            logger.error("Error reading stored key '%s': %s", HISTORY_KEY, e)
            history_records = []

        return cls(store, settings, dataset, history_records)

    @property
    def settings(self) -> RunSettings:
        return self._settings

    def update_settings(self, **changes) -> RunSettings:
        """Apply changes to the live settings and persist them"""
        self._settings = replace(self._settings, **changes)
        self._store.set(FORM_STATE_KEY, self._settings.to_dict())
        return self._settings

    def load_prompt(self, prompt_text: str) -> RunSettings:
        """Load a prompt (typically from a history row) into the settings"""
        return self.update_settings(prompt_text=prompt_text)

    @property
    def dataset(self) -> list[DatasetItem]:
        return list(self._dataset)

    def set_dataset(self, dataset: list[DatasetItem]) -> None:
        """
        Replace the dataset

        The in-memory copy keeps image URLs; the stored copy drops them so
        large inline images cannot exhaust the store.
        """
        self._dataset = list(dataset)
        self._store.set(DATASET_KEY, [item.to_dict(include_image=False) for item in self._dataset])

    def update_item(self, index: int, item: DatasetItem) -> None:
        dataset = list(self._dataset)
        dataset[index] = item
        self.set_dataset(dataset)

    def _save_history(self, records: list[RunMetrics]) -> None:
        self._store.set(HISTORY_KEY, [m.to_dict() for m in records])
