"""RoadMemcache Write Options - Per-Call Options and Write Modes.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Union

from roadmemcache.errors import ConfigurationError

# Expiry values up to this many seconds are relative in memcached.
RELATIVE_EXPIRY_LIMIT = 60 * 60 * 24 * 30


class WriteMode(Enum):
    """Store operation selected for a write."""

    CREATE_ONLY = "add"         # Only if the key is absent
    REPLACE_ONLY = "replace"    # Only if the key is present
    UNCONDITIONAL = "set"       # Always


@dataclass(frozen=True)
class WriteOptions:
    """Per-call options.

    Attributes:
        expires_in: Seconds until expiry; 0 means never, negative means
            already expired
        raw: Store and read the value verbatim
        unless_exist: Only write if the key is absent
        if_exist: Only write if the key is present (checked first)
        force: Make fetch recompute even on a hit
    """

    expires_in: float = 0
    raw: bool = False
    unless_exist: bool = False
    if_exist: bool = False
    force: bool = False

    @classmethod
    def coerce(
        cls,
        options: Union["WriteOptions", Mapping[str, Any], None] = None,
        **overrides: Any,
    ) -> "WriteOptions":
        """Build options from None, a mapping or another WriteOptions.

        Args:
            options: Base options
            **overrides: Individual options taking precedence

        Returns:
            WriteOptions instance

        Raises:
            ConfigurationError: On unknown option names
        """
        if isinstance(options, WriteOptions):
            base = options
        elif options is None:
            base = cls()
        elif isinstance(options, Mapping):
            base = cls()
            overrides = {**{str(k): v for k, v in options.items()}, **overrides}
        else:
            raise ConfigurationError(f"options must be a mapping, got {type(options).__name__}")

        if not overrides:
            return base

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            if "namespace" in unknown:
                raise ConfigurationError("namespace cannot be overridden per call")
            raise ConfigurationError(f"Unknown options: {sorted(unknown)}")

        if overrides.get("expires_in", 0) is None:
            overrides["expires_in"] = 0
        return replace(base, **overrides)


def select_write_mode(options: WriteOptions) -> WriteMode:
    """Pick the store operation for a write.

    ``if_exist`` wins when both conditional flags are set.
    """
    if options.if_exist:
        return WriteMode.REPLACE_ONLY
    if options.unless_exist:
        return WriteMode.CREATE_ONLY
    return WriteMode.UNCONDITIONAL


def expiration(expires_in: float, now: Optional[float] = None) -> Optional[int]:
    """Convert a relative expiry into the absolute timestamp memcached expects.

    Args:
        expires_in: Seconds from now; 0 means no expiry
        now: Current unix time (defaults to time.time())

    Returns:
        Unix timestamp (rounded up, so it never lands on the current
        second), -1 for an expiry that is already past, or None for no
        expiry
    """
    if expires_in == 0:
        return None
    if now is None:
        now = time.time()
    if expires_in > 0:
        return math.ceil(now + expires_in)

    # memcached reads small values as relative; negative means expired.
    expires_at = int(now + expires_in)
    return expires_at if expires_at > RELATIVE_EXPIRY_LIMIT else -1


__all__ = ["WriteMode", "WriteOptions", "select_write_mode", "expiration"]
