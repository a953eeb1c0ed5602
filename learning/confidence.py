"""
learning/confidence.py

Wilson score interval lower bound used to rank selectors and categories.
"""

from __future__ import annotations

import math

# 95% confidence level
Z_95: float = 1.96

_PRECISION = 4


def wilson_lower_bound(success_count: int, failure_count: int, z: float = Z_95) -> float:
    """Return the lower bound of the Wilson score interval for a success rate.

    Small samples are penalized: one success out of one try scores ~0.21,
    not 1.0. The bound converges to the observed rate as evidence grows.

    Args:
        success_count: Number of observed successes (>= 0).
        failure_count: Number of observed failures (>= 0).
        z: Standard-normal quantile for the confidence level.

    Returns:
        A float in [0.0, 1.0] rounded to 4 decimal places. 0.0 when there
        is no evidence at all.
    """
    n = success_count + failure_count
    if n <= 0:
        return 0.0

    z2 = z * z
    p_hat = success_count / n

    numerator = p_hat + z2 / (2 * n) - z * math.sqrt((p_hat * (1 - p_hat) + z2 / (4 * n)) / n)
    denominator = 1 + z2 / n

    # Floating-point noise can push 0/n slightly below zero.
    return max(0.0, min(1.0, round(numerator / denominator, _PRECISION)))
