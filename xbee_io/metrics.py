"""Lightweight in-memory metrics counter used by the framer, adapters and API.

Process-local and dependency free. Components call inc() with a counter name;
the API exposes get_all() through /api/metrics.
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
