"""Numeric configuration for the logrss package.

Controls the rounding granularity used when the closed-form and
linear-predictor log-RSS vectors are reconciled, and the positive
floor substituted for zero covariate values before a log transform.

Resolution order for each setting (first match wins):
    1. Programmatic override via :func:`set_decimals` /
       :func:`set_covariate_floor`.
    2. The ``LOGRSS_DECIMALS`` / ``LOGRSS_COVARIATE_FLOOR``
       environment variables.
    3. The package default (``"auto"`` decimals, floor ``0.001``).

``"auto"`` decimals scale with the magnitude of the values being
compared: a float64 carries roughly 15.9 significant digits, and five
of them are reserved for the rounding error accumulated along the two
evaluation paths (direct algebra vs. a design-matrix product).

Examples:
    Pin the historical 10-decimal granularity from the shell::

        export LOGRSS_DECIMALS=10

    Pin it programmatically::

        import logrss
        logrss.set_decimals(10)

    Restore magnitude-aware rounding::

        logrss.set_decimals("auto")
"""

from __future__ import annotations

import math
import os

import numpy as np

_SIGNIFICANT_DIGITS = 10
_MAX_DECIMALS = 15
_DEFAULT_FLOOR = 0.001

# Sentinels indicating "no programmatic override has been set".
_decimals_override: int | str | None = None
_floor_override: float | None = None


def _parse_decimals(value: int | str) -> int | str:
    """Normalise a decimals setting to an ``int`` or ``"auto"``."""
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised == "auto":
            return "auto"
        try:
            value = int(normalised)
        except ValueError:
            raise ValueError(
                f"Unknown decimals setting '{value}'. "
                f"Use an integer in [0, {_MAX_DECIMALS}] or 'auto'."
            ) from None
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"decimals must be an int or 'auto', got {type(value).__name__}.")
    if not 0 <= value <= _MAX_DECIMALS:
        raise ValueError(f"decimals must lie in [0, {_MAX_DECIMALS}], got {value}.")
    return int(value)


def suggest_decimals(*arrays: np.ndarray | float) -> int:
    """Return a rounding granularity suited to the magnitude of *arrays*.

    The largest finite absolute value ``m`` across all inputs sets the
    number of integer digits; the remaining significant digits (out of
    ten) become decimals.  Values below one keep all ten.

    Args:
        *arrays: Scalars or arrays that will be rounded and compared.

    Returns:
        Number of decimal places in ``[0, 10]``.
    """
    magnitude = 0.0
    for arr in arrays:
        values = np.abs(np.asarray(arr, dtype=float)).ravel()
        values = values[np.isfinite(values)]
        if values.size:
            magnitude = max(magnitude, float(values.max()))
    if magnitude < 1.0:
        return _SIGNIFICANT_DIGITS
    integer_digits = math.floor(math.log10(magnitude)) + 1
    return max(0, min(_SIGNIFICANT_DIGITS, _SIGNIFICANT_DIGITS - integer_digits))


def _decimals_setting() -> int | str:
    if _decimals_override is not None and _decimals_override != "auto":
        return _decimals_override

    env = os.environ.get("LOGRSS_DECIMALS", "").strip()
    if env:
        return _parse_decimals(env)

    return "auto"


def get_decimals(*arrays: np.ndarray | float) -> int:
    """Return the active rounding granularity.

    Resolution order:
        1. Value set by :func:`set_decimals` (unless ``"auto"``).
        2. ``LOGRSS_DECIMALS`` environment variable.
        3. :func:`suggest_decimals` over *arrays*.

    Args:
        *arrays: Values about to be compared; only consulted when the
            setting resolves to ``"auto"``.

    Returns:
        Number of decimal places.

    Raises:
        ValueError: If ``LOGRSS_DECIMALS`` holds an invalid value.
    """
    setting = _decimals_setting()
    if setting == "auto":
        return suggest_decimals(*arrays)
    return int(setting)


def set_decimals(value: int | str) -> None:
    """Override the rounding granularity.

    Args:
        value: An integer in ``[0, 15]`` or ``"auto"``
            (case-insensitive).  ``"auto"`` restores the default
            resolution order.

    Raises:
        ValueError: If *value* is out of range or not recognised.
        TypeError: If *value* is neither an int nor a string.
    """
    global _decimals_override
    _decimals_override = _parse_decimals(value)


def get_covariate_floor() -> float:
    """Return the positive value substituted for non-positive covariates."""
    if _floor_override is not None:
        return _floor_override

    env = os.environ.get("LOGRSS_COVARIATE_FLOOR", "").strip()
    if env:
        try:
            floor = float(env)
        except ValueError:
            raise ValueError(
                f"LOGRSS_COVARIATE_FLOOR must be a positive number, got '{env}'."
            ) from None
        if not floor > 0:
            raise ValueError(
                f"LOGRSS_COVARIATE_FLOOR must be a positive number, got '{env}'."
            )
        return floor

    return _DEFAULT_FLOOR


def set_covariate_floor(value: float | None) -> None:
    """Override the covariate floor; ``None`` restores the default.

    Raises:
        ValueError: If *value* is not strictly positive.
    """
    global _floor_override
    if value is not None and not value > 0:
        raise ValueError(f"Covariate floor must be strictly positive, got {value}.")
    _floor_override = None if value is None else float(value)
