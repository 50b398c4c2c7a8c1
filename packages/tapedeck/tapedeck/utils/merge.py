"""Layered configuration merge.

Policy:
  - scalars: the later layer wins
  - lists: replaced wholesale by the latest layer that defines them
  - mappings: merged recursively key-by-key
  - keys listed in ``REPLACE_KEYS`` hold opaque objects and are replaced,
    never merged

Replaced values are taken by reference, so plugins receive the very
objects they were configured with.  Every mapping outside
``REPLACE_KEYS`` is rebuilt while recursing, so no input layer is mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REPLACE_KEYS = frozenset({"context"})


def merge_configs(*configs: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge *configs* left to right into a fresh dict."""
    merged: dict[str, Any] = {}
    for config in configs:
        if config:
            _merge_into(merged, config)
    return merged


def _merge_into(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in source.items():
        if isinstance(value, Mapping) and key not in REPLACE_KEYS:
            current = target.get(key)
            if not isinstance(current, dict):
                current = target[key] = {}
            _merge_into(current, value)
        else:
            target[key] = value
    return target
