"""Deterministic metric synthesis.

Demo metrics are derived from an entity identifier instead of stored telemetry:

* ``seed``  = sum of the identifier's character codes
* ``x``     = sin(seed * (salt + 1)) * 10000
* ``value`` = floor(frac(x) * (high - low) + low)

The same ``(identifier, salt, low, high)`` always yields the same integer in
``[low, high)``. The stream is sine based, so it is neither uniform nor
suitable for anything beyond fixture data.
"""

from __future__ import annotations

import math


def identifier_seed(identifier: str) -> int:
    return sum(ord(char) for char in identifier)


def unit_draw(identifier: str, salt: int) -> float:
    """Return the fractional draw in ``[0, 1)`` for *identifier* and *salt*."""

    if salt < 0:
        raise ValueError(f"salt must be >= 0, got {salt}")
    x = math.sin(identifier_seed(identifier) * (salt + 1)) * 10000
    return x - math.floor(x)


def synth_int(identifier: str, salt: int, low: int, high: int) -> int:
    return math.floor(unit_draw(identifier, salt) * (high - low) + low)


def pair_salt(parent_index: int, child_index: int) -> int:
    """Salt for a paired entity so ``salt + 1 == (parent + 1) * (child + 1)``."""

    return (parent_index + 1) * (child_index + 1) - 1
