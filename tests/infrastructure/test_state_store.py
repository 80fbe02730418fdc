"""
state_store.pyのテスト
"""

import json
from unittest.mock import patch

import pytest

from prompt_gauge.infrastructure.state_store import InMemoryStateStore, JsonFileStateStore


class TestInMemoryStateStore:
    """InMemoryStateStore のテスト"""

    def test_get_default(self):
        assert InMemoryStateStore().get("missing", 5) == 5

    def test_set_and_get(self):
        store = InMemoryStateStore({"a": 1})
        store.set("b", [1, 2])
        assert store.get("a") == 1
        assert store.get("b") == [1, 2]


class TestJsonFileStateStore:
    """JsonFileStateStore のテスト"""

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStateStore(tmp_path / "state.json")
        assert store.get("dataset") is None

    def test_set_writes_file(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        store = JsonFileStateStore(path)
        store.set("formState", {"model_id": "m"})

        assert json.loads(path.read_text(encoding="utf-8")) == {"formState": {"model_id": "m"}}
        assert JsonFileStateStore(path).get("formState") == {"model_id": "m"}

    def test_corrupt_file_is_ignored(self, tmp_path, caplog):
        """壊れたファイルは空として扱い、エラーログを出す"""
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileStateStore(path)

        assert store.get("dataset") is None
        assert "Error reading state file" in caplog.text

    def test_non_object_file_is_ignored(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert JsonFileStateStore(path).get("dataset") is None

    def test_set_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileStateStore(path)
        store.set("dataset", [{"input": "a"}])
        store.set("history", [])

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_failed_write_keeps_previous_file(self, tmp_path):
        """書き込み途中で失敗しても、以前のファイル内容は壊れない"""
        path = tmp_path / "state.json"
        store = JsonFileStateStore(path)
        store.set("formState", {"model_id": "m"})

        with patch(
            "prompt_gauge.infrastructure.state_store.json.dump",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(OSError, match="disk full"):
                store.set("formState", {"model_id": "other"})

        assert json.loads(path.read_text(encoding="utf-8")) == {"formState": {"model_id": "m"}}
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]
