"""Typed result objects for log-RSS comparisons.

Frozen dataclasses that provide:

* **Attribute access** — ``result.case``, ``result.agree``, etc.
* **Dict-like access** — ``result["formula"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python.

:class:`EquivalenceCheck` records one rounded comparison of two
log-RSS vectors; :class:`ComparisonResult` bundles the fitted case,
both vectors and its checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

if TYPE_CHECKING:
    from ._context import AnalysisContext
    from .cases import ModelCase

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, _DictAccessMixin):
        return obj.to_dict()
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Subclasses may override ``_SERIALIZERS`` to register conversion
    functions for non-primitive fields (e.g. ``ModelCase`` → ``str``).
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {}

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"context"})

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            val = getattr(self, f.name)
            if f.name in self._SERIALIZERS:
                val = self._SERIALIZERS[f.name](val)
            result[f.name] = _numpy_to_python(val)
        return result


# ------------------------------------------------------------------ #
# EquivalenceCheck
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class EquivalenceCheck(_DictAccessMixin):
    """Outcome of comparing two log-RSS vectors after rounding.

    Both vectors are rounded to :attr:`decimals` places and subtracted.
    By default any nonzero rounded difference is a mismatch, so
    :attr:`agree` equals :attr:`exact`.  With ``tolerance_units > 0``
    differences of up to that many units in the last place are
    accepted, which absorbs values that straddle a rounding boundary.
    """

    decimals: int
    """Decimal places both vectors were rounded to."""

    differences: np.ndarray
    """Rounded elementwise differences, shape ``(n_points,)``."""

    summed_difference: float
    """Sum of the rounded signed differences."""

    max_abs_difference: float
    """Largest unrounded absolute difference."""

    n_mismatched: int
    """Points whose rounded difference exceeds the allowed tolerance."""

    tolerance_units: int = 0
    """Units in the last place a rounded difference may reach."""

    @property
    def n_points(self) -> int:
        return int(self.differences.shape[0])

    @property
    def agree(self) -> bool:
        return self.n_mismatched == 0

    @property
    def exact(self) -> bool:
        """Whether every rounded difference is exactly zero."""
        return bool(np.all(self.differences == 0))


# ------------------------------------------------------------------ #
# ComparisonResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ComparisonResult(_DictAccessMixin):
    """Closed-form vs. linear-predictor log-RSS for one fitted case.

    All fields are accessible both as attributes (``result.formula``)
    and via dict syntax (``result["formula"]``).
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {
        "case": lambda c: c.name,
    }

    case: ModelCase
    """Case instance (serialised as its name)."""

    formula: str
    """Formula the model was fitted with."""

    coefficients: dict[str, float]
    """Fitted coefficients, intercept included."""

    closed_form: np.ndarray
    """Closed-form log-RSS, one value per x1 point."""

    linear_predictor: np.ndarray
    """η(x1) − η(x2), one value per x1 point."""

    equivalence: EquivalenceCheck
    """Rounded comparison of the two vectors above."""

    reparametrization: EquivalenceCheck | None = None
    """Literal vs. ``β ln(a/b)`` closed form; ``None`` for polynomial cases."""

    context: AnalysisContext | None = field(default=None, repr=False, compare=False)
    """Fitted model and evaluated points.  Excluded from ``to_dict()``."""

    @property
    def agree(self) -> bool:
        """Whether both checks passed."""
        if self.reparametrization is not None and not self.reparametrization.agree:
            return False
        return self.equivalence.agree

    @property
    def n_points(self) -> int:
        return self.equivalence.n_points

    @property
    def decimals(self) -> int:
        return self.equivalence.decimals


__all__ = ["ComparisonResult", "EquivalenceCheck"]
