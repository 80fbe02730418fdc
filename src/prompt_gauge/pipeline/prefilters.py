"""
Pre-filter heuristics

Cheap local checks that decide an item without a model call. A threshold of 0
disables the check ("no minimum").
"""


def check_char_count(text: str, min_chars: int) -> str | None:
    """
    Character-count filter on the raw input (not the rendered text)

    Returns:
        The explanation to record when the item is too short, else None
    """
    if min_chars <= 0:
        return None
    length = len(text)
    if length >= min_chars:
        return None
    return f"Post is too short ({length} characters). Minimum required: {min_chars} characters."


def check_line_count(lines: list[str], min_lines: int) -> str | None:
    """
    Line-count filter on captured rendered lines

    Returns:
        The explanation to record when the item has too few lines, else None
    """
    if min_lines <= 0:
        return None
    line_count = len(lines)
    if line_count >= min_lines:
        return None
    return f"Post has too few lines ({line_count} lines). Minimum required: {min_lines} lines."
