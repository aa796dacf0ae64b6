"""RoadMemcache Namespace - Key Namespacing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Namespaces partition one physical cluster into logical caches. The
transformation is one way: keys are never un-namespaced on read.
"""

from __future__ import annotations

from typing import Optional

NAMESPACE_SEPARATOR = ":"


def make_cache_key(key: str, namespace: Optional[str] = None) -> str:
    """Make namespaced key.

    Args:
        key: Logical key
        namespace: Namespace, or None for no prefix

    Returns:
        ``namespace:key``, or the key unchanged
    """
    if namespace is None:
        return key
    return f"{namespace}{NAMESPACE_SEPARATOR}{key}"


__all__ = ["make_cache_key", "NAMESPACE_SEPARATOR"]
