"""Typed accessors for open plan and manifest payloads."""

from __future__ import annotations

from typing import Any, Mapping


def safe_get(data: Any, *keys: str | int, default: Any = None) -> Any:
    """Safely get a nested value from mappings and lists.

    Args:
        data: Mapping (or list) to read from
        *keys: Keys or list indices to traverse
        default: Default value if any step is missing

    Returns:
        Value at the nested key path, or default
    """
    current = data
    for key in keys:
        if isinstance(current, Mapping) and not isinstance(key, int):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int):
            current = current[key] if -len(current) <= key < len(current) else None
        else:
            return default
        if current is None:
            return default
    return current


def get_list(data: Any, *keys: str | int) -> list[Any]:
    """Get a nested list, or an empty list if absent or not a list."""
    value = safe_get(data, *keys)
    return value if isinstance(value, list) else []


def get_mappings(data: Any, *keys: str | int) -> list[Mapping[str, Any]]:
    """Get the mapping entries of a nested list, skipping anything else."""
    return [item for item in get_list(data, *keys) if isinstance(item, Mapping)]


def get_str_list(data: Any, *keys: str | int) -> list[str]:
    """Get the string entries of a nested list."""
    return [item for item in get_list(data, *keys) if isinstance(item, str)]


def get_int(data: Any, *keys: str | int, default: int | None = None) -> int | None:
    """Get a nested integer; numeric strings are converted, booleans are not."""
    value = safe_get(data, *keys)
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return default


def is_truthy(data: Any, *keys: str | int) -> bool:
    """Whether a nested value is present and truthy."""
    return bool(safe_get(data, *keys))
