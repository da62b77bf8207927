"""Lightweight in-memory counters for DBC ingestion.

Process-local. The loader increments counters for parsed, skipped and
rejected lines so callers can inspect how much of a file was understood.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict

_c = Counter()


def inc(name: str, n: int = 1) -> None:
    _c[name] += n


def get(name: str) -> int:
    return _c[name]


def get_all() -> Dict[str, int]:
    return dict(_c)


def reset_all() -> None:
    _c.clear()
