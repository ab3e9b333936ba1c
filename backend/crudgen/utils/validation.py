"""Small predicates shared by the builder's validation rules."""
from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Iterable


def has_string_value(value: Any) -> bool:
    return isinstance(value, str) and value != ''


def has_boolean_value(value: Any) -> bool:
    return value is True or value is False


def has_callable(value: Any) -> bool:
    return value is not None and callable(value)


def has_nonempty_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) > 0


def object_has_method(obj: Any, name: str) -> bool:
    return obj is not None and callable(getattr(obj, name, None))


def all_callables(items: Iterable[Any]) -> bool:
    return all(callable(i) for i in items)


__all__ = [
    'has_string_value',
    'has_boolean_value',
    'has_callable',
    'has_nonempty_mapping',
    'object_has_method',
    'all_callables',
]
