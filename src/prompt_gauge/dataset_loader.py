"""
Dataset Loader

Loads a dataset from a JSON array, mapping configurable field names onto
DatasetItem (input, expected output, image URL).
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from prompt_gauge.domain.entities import DatasetItem
from prompt_gauge.domain.value_objects import item_input_to_raw, parse_item_input
from prompt_gauge.errors import DatasetFormatError


@dataclass
class FieldMapping:
    """Names of the source fields"""
    input_field: str = "input"
    output_field: str = "expectedOutput"
    image_url_field: str = "imageUrl"


def parse_dataset(data: Any, mapping: FieldMapping | None = None) -> list[DatasetItem]:
    """
    Create DatasetItems from decoded JSON

    Args:
        data: Decoded JSON (must be a list of objects)
        mapping: Source field names (default: input / expectedOutput / imageUrl)

    Returns:
        list[DatasetItem]

    Raises:
        DatasetFormatError: If the data is not a list of objects or an
            expected output is not a boolean, string or number, or an
            image URL is not a string
    """
    if mapping is None:
        mapping = FieldMapping()
    if not isinstance(data, list):
        raise DatasetFormatError("Input must be an array")

    items = []
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise DatasetFormatError(f"Item {position} is not an object")
        if mapping.input_field not in record:
            raise DatasetFormatError(f"Item {position} has no '{mapping.input_field}' field")

        expected = record.get(mapping.output_field)
        if expected is not None and not isinstance(expected, (bool, str, int, float)):
            raise DatasetFormatError(
                f"Item {position}: '{mapping.output_field}' must be a boolean, string or number"
            )

        image_url = record.get(mapping.image_url_field)
        if image_url is not None and not isinstance(image_url, str):
            raise DatasetFormatError(f"Item {position}: '{mapping.image_url_field}' must be a string")

        items.append(DatasetItem(
            input=parse_item_input(record[mapping.input_field]),
            expected_output=expected,
            image_url=image_url or None,
        ))
    return items


def load_dataset(file_path: str | Path, mapping: FieldMapping | None = None) -> list[DatasetItem]:
    """
    Load a dataset JSON file

    Raises:
        FileNotFoundError: If the file does not exist
        DatasetFormatError: If the content is not a valid dataset
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetFormatError(f"Invalid JSON input: {file_path}") from e
    return parse_dataset(data, mapping)


def _is_correct(predicted: Any, expected: Any) -> bool:
    """Equality for display; booleans never equal numbers"""
    if predicted is None:
        return False
    if isinstance(predicted, bool) != isinstance(expected, bool):
        return False
    return predicted == expected


def dataset_to_dataframe(dataset: list[DatasetItem]) -> pd.DataFrame:
    """Per-item results table (input, expected, predicted, correct, explanation)"""
    rows = []
    for index, item in enumerate(dataset):
        raw_input = item_input_to_raw(item.input)
        rows.append({
            "index": index,
            "input": raw_input if isinstance(raw_input, str) else json.dumps(raw_input, ensure_ascii=False),
            "expected_output": item.expected_output,
            "predicted_output": item.predicted_output,
            "correct": _is_correct(item.predicted_output, item.expected_output),
            "explanation": item.explanation,
        })
    columns = ["index", "input", "expected_output", "predicted_output", "correct", "explanation"]
    return pd.DataFrame(rows, columns=columns)
