"""
Central configuration for OTG tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")

TRACE_ENABLED = str(os.getenv("OTG_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)

# Default control rate (Hz); generators run one update() per cycle
CONTROL_RATE_HZ: float = float(os.getenv("OTG_CONTROL_RATE_HZ", "1000"))

# Centralized loop interval (seconds).
INTERVAL_S: float = max(1e-6, 1.0 / max(CONTROL_RATE_HZ, 1.0))

# A finished trajectory only counts as reached below this velocity norm
GOAL_REACHED_VELOCITY_TOL: float = float(os.getenv("OTG_GOAL_REACHED_VELOCITY_TOL", "1e-3"))

# Goal equality: ||a - b|| <= max(RTOL * min(||a||, ||b||), ATOL)
GOAL_EQUALITY_RTOL: float = 1e-12
GOAL_EQUALITY_ATOL: float = 1e-12

# Orthonormality / determinant tolerance for rotation matrix arguments
ORIENTATION_TOL: float = 1e-3


def _parse_limit_triplet(name: str, default: tuple[float, float, float]) -> tuple[float, float, float]:
    """
    Parse a "velocity,acceleration,jerk" CSV environment variable.

    Falls back to the default on missing, malformed or non-positive values.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        vals = tuple(float(p.strip()) for p in raw.split(","))
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}, using {default}")
        return default
    if len(vals) != 3 or min(vals) <= 0:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    return vals  # type: ignore[return-value]


# Default limits applied at construction (rad, rad/s, ... for joints; m and rad for Cartesian)
(
    DEFAULT_JOINT_MAX_VELOCITY,
    DEFAULT_JOINT_MAX_ACCELERATION,
    DEFAULT_JOINT_MAX_JERK,
) = _parse_limit_triplet("OTG_JOINT_LIMITS", (1.0, 5.0, 50.0))

(
    DEFAULT_LINEAR_MAX_VELOCITY,
    DEFAULT_LINEAR_MAX_ACCELERATION,
    DEFAULT_LINEAR_MAX_JERK,
) = _parse_limit_triplet("OTG_LINEAR_LIMITS", (0.3, 1.0, 10.0))

(
    DEFAULT_ANGULAR_MAX_VELOCITY,
    DEFAULT_ANGULAR_MAX_ACCELERATION,
    DEFAULT_ANGULAR_MAX_JERK,
) = _parse_limit_triplet("OTG_ANGULAR_LIMITS", (1.0, 3.0, 30.0))
