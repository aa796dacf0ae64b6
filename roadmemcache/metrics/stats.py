"""RoadMemcache Stats - Server Statistics Normalization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Union

logger = logging.getLogger(__name__)

StatValue = Union[int, float, str]
StatsRecord = Dict[str, Dict[str, StatValue]]

STRING_METRICS = frozenset({"version"})


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def normalize_metric(name: str, value: Any) -> StatValue:
    """Convert one raw metric value.

    Args:
        name: Metric name
        value: Raw value (bytes, str, bool, int or float)

    Returns:
        ``version`` as a string; everything else as a number, collapsed
        to int when it has no fractional part
    """
    if name in STRING_METRICS:
        return _text(value)

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value

    if isinstance(value, float):
        number = value
    else:
        try:
            number = float(_text(value))
        except ValueError:
            logger.debug(f"Non-numeric stat {name}={value!r} kept as text")
            return _text(value)

    if number.is_integer():
        return int(number)
    return number


def normalize_stats(raw: Mapping[Any, Mapping[Any, Any]]) -> StatsRecord:
    """Normalize raw per-server statistics.

    Args:
        raw: Mapping of server -> metric -> raw value

    Returns:
        Mapping of server -> metric name -> typed value

    Example:
        normalize_stats({"h:11211": {b"rusage_system": b"3.0", b"version": b"1.6"}})
        # {"h:11211": {"rusage_system": 3, "version": "1.6"}}
    """
    stats: StatsRecord = {}
    for server, metrics in raw.items():
        server_stats: Dict[str, StatValue] = {}
        for name, value in metrics.items():
            metric = _text(name)
            server_stats[metric] = normalize_metric(metric, value)
        stats[_text(server)] = server_stats
    return stats


__all__ = ["normalize_stats", "normalize_metric", "StatsRecord", "StatValue"]
