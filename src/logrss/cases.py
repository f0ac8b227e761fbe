"""Closed-form log-RSS cases and their registry.

Each case pairs a model specification (the formula a habitat-selection
GLM is fitted with) with the algebraic log-RSS expression obtained by
taking ``ln(w(x1) / w(x2))`` of the exponential selection function

    w(x) = exp(β₀ + Σ βₖ fₖ(x))

and cancelling the shared intercept β₀.  The seven built-in cases are

====  ===========================  ==========================================
 No.  Name                         Model
====  ===========================  ==========================================
 1    ``additive``                 βᵢhᵢ + βⱼhⱼ
 2    ``interaction``              βᵢhᵢ + βⱼhⱼ + βᵢⱼhᵢhⱼ
 3    ``quadratic``                βᵢhᵢ + βᵢ₂hᵢ²
 4    ``quadratic_interaction``    βᵢhᵢ + βⱼhⱼ + βᵢⱼhᵢhⱼ + βᵢ₂hᵢ²
 5    ``log``                      βᵢ ln(hᵢ)
 6    ``log_interaction``          βᵢ ln(hᵢ) + βⱼhⱼ + βᵢⱼ ln(hᵢ)hⱼ
 7    ``log_additive``             βᵢ ln(hᵢ) + βⱼ ln(hⱼ)
====  ===========================  ==========================================

The closed forms are evaluated literally, as written in the derivation
(``ln((h₁/(h₁ − Δh))^β)`` rather than ``β ln(h₁/h₂)``), so that a sign
or exponent-placement slip in the algebra shows up as a disagreement
with the generic linear-predictor difference.  The log cases also
expose :meth:`reparametrized`, the ``β ln(a/b)`` rewriting, so that the
two spellings can be checked against each other.

x1 may hold many points (a grid); x2 must be a single point.  All
arithmetic broadcasts x2's scalars against x1's columns.

Extensibility
~~~~~~~~~~~~~
A new case implements the ``ModelCase`` protocol and is registered
with :func:`register_case`.  The comparison routine in
``log_rss.py`` programs against the protocol only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np

from ._compat import _as_points_frame
from .exceptions import DegenerateCovariateError
from .models import coefficient_getter

# ------------------------------------------------------------------ #
# Covariate access helpers
# ------------------------------------------------------------------ #


def _column(points: Any, column: str, name: str) -> np.ndarray:
    """Return *column* of *points* as a float array, one value per point."""
    frame = _as_points_frame(points, name=name)
    if column not in frame.columns:
        raise ValueError(
            f"'{name}' is missing covariate '{column}'. "
            f"Columns present: {', '.join(map(str, frame.columns))}."
        )
    return np.asarray(frame[column], dtype=float)  # shape: (n_points,)


def _reference(points: Any, column: str) -> float:
    """Return *column* of the single reference point x2."""
    values = _column(points, column, "x2")
    if values.shape[0] != 1:
        raise ValueError(
            f"x2 must be a single covariate point, got {values.shape[0]} rows."
        )
    return float(values[0])


def _require_positive(values: np.ndarray | float, column: str, name: str) -> None:
    """Raise if a covariate entering ``ln`` or a ratio is not > 0."""
    arr = np.asarray(values, dtype=float)
    bad = ~(arr > 0)  # catches NaN as well as <= 0
    if np.any(bad):
        raise DegenerateCovariateError(
            f"Covariate '{column}' in {name} must be strictly positive to enter "
            f"a log transform; {int(np.sum(bad))} value(s) are <= 0 or NaN. "
            "Sanitise zero values before fitting (see sanitize_covariates)."
        )


def _finite(values: np.ndarray, case: str) -> np.ndarray:
    if not np.all(np.isfinite(values)):
        raise DegenerateCovariateError(
            f"Closed-form log-RSS for case '{case}' produced non-finite values; "
            "check covariate magnitudes and that logged covariates are positive."
        )
    return values


# ------------------------------------------------------------------ #
# ModelCase protocol
# ------------------------------------------------------------------ #


@runtime_checkable
class ModelCase(Protocol):
    """Interface that every closed-form log-RSS case implements.

    Attributes:
        name: Registry key (e.g. ``"additive"``).
        number: Position in the canonical ordering (1–7 for the
            built-in cases); used for display and iteration order.
        description: One-line model form, e.g. ``"βᵢhᵢ + βⱼhⱼ"``.
    """

    @property
    def name(self) -> str: ...

    @property
    def number(self) -> int: ...

    @property
    def description(self) -> str: ...

    @property
    def terms(self) -> tuple[str, ...]:
        """Coefficient labels the closed form reads, intercept excluded."""
        ...

    @property
    def covariates(self) -> tuple[str, ...]:
        """Data columns the model formula reads."""
        ...

    @property
    def log_covariates(self) -> tuple[str, ...]:
        """Columns that enter the model through ``ln`` (must be > 0)."""
        ...

    def formula(self, response: str = "STATUS") -> str:
        """Return the patsy formula whose terms match :attr:`terms`."""
        ...

    def validate_points(self, points: Any, name: str = "x") -> None:
        """Raise ``DegenerateCovariateError`` for unusable covariate values."""
        ...

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        """Evaluate the closed-form log-RSS of x1 relative to x2.

        Args:
            model: A ``SelectionModel`` or a mapping of term label to
                coefficient.
            x1: One covariate point or a frame of points.
            x2: A single covariate point.

        Returns:
            Array of shape ``(n_points,)``.

        Raises:
            MissingTermError: If *model* lacks one of :attr:`terms`.
            DegenerateCovariateError: If a logged covariate is not
                positive or the result is not finite.
        """
        ...


class _CaseBase:
    """Validation shared by the concrete cases."""

    @property
    def log_covariates(self) -> tuple[str, ...]:
        return ()

    def validate_points(self, points: Any, name: str = "x") -> None:
        for column in self.log_covariates:  # type: ignore[attr-defined]
            _require_positive(_column(points, column, name), column, name)

    def _check_positive(self, x1: Any, x2: Any) -> None:
        self.validate_points(x1, "x1")
        self.validate_points(x2, "x2")


# ------------------------------------------------------------------ #
# Polynomial cases (1–4)
# ------------------------------------------------------------------ #
#
# Writing Δh = h(x1) − h(x2), every polynomial case reduces to a sum
# of βΔ(feature) terms once β₀ cancels.  The quadratic piece uses
#   h₁² − h₂² = (h₁ − h₂)(h₁ + h₂) = Δh·(2h₁ − Δh)
# so that it is expressed in x1 values and Δh alone.


@dataclass(frozen=True)
class AdditiveCase(_CaseBase):
    """Case 1: two linear covariates, ``βᵢΔhᵢ + βⱼΔhⱼ``."""

    hi: str = "elev"
    hj: str = "slope"

    @property
    def name(self) -> str:
        return "additive"

    @property
    def number(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "βᵢhᵢ + βⱼhⱼ"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {self.hi} + {self.hj}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        beta = coefficient_getter(model)
        b_i, b_j = beta(self.hi), beta(self.hj)
        d_i = _column(x1, self.hi, "x1") - _reference(x2, self.hi)
        d_j = _column(x1, self.hj, "x1") - _reference(x2, self.hj)
        return _finite(b_i * d_i + b_j * d_j, self.name)


@dataclass(frozen=True)
class InteractionCase(_CaseBase):
    """Case 2: two linear covariates and their product.

    ``βᵢΔhᵢ + βⱼΔhⱼ + βᵢⱼ(hᵢ(x1)hⱼ(x1) − hᵢ(x2)hⱼ(x2))``
    """

    hi: str = "elev"
    hj: str = "slope"

    @property
    def name(self) -> str:
        return "interaction"

    @property
    def number(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "βᵢhᵢ + βⱼhⱼ + βᵢⱼhᵢhⱼ"

    @property
    def interaction_term(self) -> str:
        return f"{self.hi}:{self.hj}"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.hi, self.hj, self.interaction_term)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {self.hi} + {self.hj} + {self.interaction_term}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        beta = coefficient_getter(model)
        b_i, b_j = beta(self.hi), beta(self.hj)
        b_ij = beta(self.interaction_term)
        hi1, hj1 = _column(x1, self.hi, "x1"), _column(x1, self.hj, "x1")
        hi2, hj2 = _reference(x2, self.hi), _reference(x2, self.hj)
        d_prod = hi1 * hj1 - hi2 * hj2
        return _finite(b_i * (hi1 - hi2) + b_j * (hj1 - hj2) + b_ij * d_prod, self.name)


@dataclass(frozen=True)
class QuadraticCase(_CaseBase):
    """Case 3: one covariate with a squared term, ``Δhᵢ(βᵢ + βᵢ₂(2hᵢ(x1) − Δhᵢ))``."""

    hi: str = "elev"

    @property
    def name(self) -> str:
        return "quadratic"

    @property
    def number(self) -> int:
        return 3

    @property
    def description(self) -> str:
        return "βᵢhᵢ + βᵢ₂hᵢ²"

    @property
    def squared_term(self) -> str:
        return f"I({self.hi} ** 2)"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.hi, self.squared_term)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi,)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {self.hi} + {self.squared_term}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        beta = coefficient_getter(model)
        b_i, b_i2 = beta(self.hi), beta(self.squared_term)
        hi1 = _column(x1, self.hi, "x1")
        d_i = hi1 - _reference(x2, self.hi)
        return _finite(d_i * (b_i + b_i2 * (2 * hi1 - d_i)), self.name)


@dataclass(frozen=True)
class QuadraticInteractionCase(_CaseBase):
    """Case 4: interaction model plus a squared term on hᵢ."""

    hi: str = "elev"
    hj: str = "slope"

    @property
    def name(self) -> str:
        return "quadratic_interaction"

    @property
    def number(self) -> int:
        return 4

    @property
    def description(self) -> str:
        return "βᵢhᵢ + βⱼhⱼ + βᵢⱼhᵢhⱼ + βᵢ₂hᵢ²"

    @property
    def interaction_term(self) -> str:
        return f"{self.hi}:{self.hj}"

    @property
    def squared_term(self) -> str:
        return f"I({self.hi} ** 2)"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.hi, self.hj, self.interaction_term, self.squared_term)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    def formula(self, response: str = "STATUS") -> str:
        return (
            f"{response} ~ {self.hi} + {self.hj} + "
            f"{self.interaction_term} + {self.squared_term}"
        )

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        beta = coefficient_getter(model)
        b_i, b_j = beta(self.hi), beta(self.hj)
        b_ij, b_i2 = beta(self.interaction_term), beta(self.squared_term)
        hi1, hj1 = _column(x1, self.hi, "x1"), _column(x1, self.hj, "x1")
        hi2, hj2 = _reference(x2, self.hi), _reference(x2, self.hj)
        d_i, d_j = hi1 - hi2, hj1 - hj2
        d_prod = hi1 * hj1 - hi2 * hj2
        out = b_i * d_i + b_j * d_j + b_ij * d_prod + b_i2 * d_i * (2 * hi1 - d_i)
        return _finite(out, self.name)


# ------------------------------------------------------------------ #
# Log-transformed cases (5–7)
# ------------------------------------------------------------------ #
#
# With w(x) = exp(β ln h(x)) = h(x)^β the ratio w(x1)/w(x2) is
# (h₁/h₂)^β, and h₂ = h₁ − Δh.  The literal forms keep the power
# inside the log; ``reparametrized`` pulls it out as a factor.


@dataclass(frozen=True)
class LogCase(_CaseBase):
    """Case 5: one log-transformed covariate, ``ln[(hᵢ(x1)/(hᵢ(x1) − Δhᵢ))^βᵢ]``."""

    hi: str = "SLOPE"

    @property
    def name(self) -> str:
        return "log"

    @property
    def number(self) -> int:
        return 5

    @property
    def description(self) -> str:
        return "βᵢ ln(hᵢ)"

    @property
    def log_term(self) -> str:
        return f"np.log({self.hi})"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.log_term,)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi,)

    @property
    def log_covariates(self) -> tuple[str, ...]:
        return (self.hi,)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {self.log_term}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        self._check_positive(x1, x2)
        b_i = coefficient_getter(model)(self.log_term)
        hi1 = _column(x1, self.hi, "x1")
        d_i = hi1 - _reference(x2, self.hi)
        return _finite(np.log((hi1 / (hi1 - d_i)) ** b_i), self.name)

    def reparametrized(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        """``βᵢ ln(hᵢ(x1)/hᵢ(x2))``."""
        self._check_positive(x1, x2)
        b_i = coefficient_getter(model)(self.log_term)
        ratio = _column(x1, self.hi, "x1") / _reference(x2, self.hi)
        return _finite(b_i * np.log(ratio), self.name)


@dataclass(frozen=True)
class LogInteractionCase(_CaseBase):
    """Case 6: log-transformed hᵢ interacting with linear hⱼ.

    ``ln[(hᵢ(x1)/hᵢ(x2))^βᵢ] + βⱼΔhⱼ
    + ln[hᵢ(x1)^(βᵢⱼhⱼ(x1)) / hᵢ(x2)^(βᵢⱼhⱼ(x2))]``
    """

    hi: str = "SLOPE"
    hj: str = "elev"

    @property
    def name(self) -> str:
        return "log_interaction"

    @property
    def number(self) -> int:
        return 6

    @property
    def description(self) -> str:
        return "βᵢ ln(hᵢ) + βⱼhⱼ + βᵢⱼ ln(hᵢ)hⱼ"

    @property
    def log_term(self) -> str:
        return f"np.log({self.hi})"

    @property
    def interaction_term(self) -> str:
        return f"{self.log_term}:{self.hj}"

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.log_term, self.hj, self.interaction_term)

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    @property
    def log_covariates(self) -> tuple[str, ...]:
        return (self.hi,)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {self.log_term} + {self.hj} + {self.interaction_term}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        self._check_positive(x1, x2)
        beta = coefficient_getter(model)
        b_i, b_j = beta(self.log_term), beta(self.hj)
        b_ij = beta(self.interaction_term)
        hi1, hj1 = _column(x1, self.hi, "x1"), _column(x1, self.hj, "x1")
        hi2, hj2 = _reference(x2, self.hi), _reference(x2, self.hj)
        main = np.log((hi1 / hi2) ** b_i)
        inter = np.log(hi1 ** (b_ij * hj1) / hi2 ** (b_ij * hj2))
        return _finite(main + b_j * (hj1 - hj2) + inter, self.name)

    def reparametrized(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        """``βᵢ ln(hᵢ₁/hᵢ₂) + βⱼΔhⱼ + βᵢⱼ(hⱼ₁ ln hᵢ₁ − hⱼ₂ ln hᵢ₂)``."""
        self._check_positive(x1, x2)
        beta = coefficient_getter(model)
        b_i, b_j = beta(self.log_term), beta(self.hj)
        b_ij = beta(self.interaction_term)
        hi1, hj1 = _column(x1, self.hi, "x1"), _column(x1, self.hj, "x1")
        hi2, hj2 = _reference(x2, self.hi), _reference(x2, self.hj)
        out = (
            b_i * np.log(hi1 / hi2)
            + b_j * (hj1 - hj2)
            + b_ij * (hj1 * np.log(hi1) - hj2 * np.log(hi2))
        )
        return _finite(out, self.name)


@dataclass(frozen=True)
class LogAdditiveCase(_CaseBase):
    """Case 7: two log-transformed covariates.

    ``ln[(hᵢ(x1)/(hᵢ(x1) − Δhᵢ))^βᵢ] + ln[(hⱼ(x1)/(hⱼ(x1) − Δhⱼ))^βⱼ]``
    """

    hi: str = "ELEVATION"
    hj: str = "SLOPE"

    @property
    def name(self) -> str:
        return "log_additive"

    @property
    def number(self) -> int:
        return 7

    @property
    def description(self) -> str:
        return "βᵢ ln(hᵢ) + βⱼ ln(hⱼ)"

    @property
    def terms(self) -> tuple[str, ...]:
        return (f"np.log({self.hi})", f"np.log({self.hj})")

    @property
    def covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    @property
    def log_covariates(self) -> tuple[str, ...]:
        return (self.hi, self.hj)

    def formula(self, response: str = "STATUS") -> str:
        return f"{response} ~ {' + '.join(self.terms)}"

    def closed_form(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        self._check_positive(x1, x2)
        beta = coefficient_getter(model)
        out = np.zeros(_column(x1, self.hi, "x1").shape[0])
        for column, term in zip(self.covariates, self.terms):
            h1 = _column(x1, column, "x1")
            d = h1 - _reference(x2, column)
            out = out + np.log((h1 / (h1 - d)) ** beta(term))
        return _finite(out, self.name)

    def reparametrized(self, model: Any, x1: Any, x2: Any) -> np.ndarray:
        """``βᵢ ln(hᵢ₁/hᵢ₂) + βⱼ ln(hⱼ₁/hⱼ₂)``."""
        self._check_positive(x1, x2)
        beta = coefficient_getter(model)
        out = np.zeros(_column(x1, self.hi, "x1").shape[0])
        for column, term in zip(self.covariates, self.terms):
            out = out + beta(term) * np.log(
                _column(x1, column, "x1") / _reference(x2, column)
            )
        return _finite(out, self.name)


# ------------------------------------------------------------------ #
# Case resolution
# ------------------------------------------------------------------ #
#
# The registry maps names to case classes.  Classes (rather than
# instances) are stored so that resolve_case always hands out a fresh
# instance with default covariate names; callers wanting other columns
# construct the dataclass directly, e.g. ``AdditiveCase("ET", "HITS")``.

_CASES: dict[str, type] = {}
"""Registry mapping case name strings to concrete ModelCase classes."""


def register_case(name: str, cls: type) -> None:
    """Register a concrete ``ModelCase`` class under *name*.

    Raises:
        TypeError: If *cls* does not satisfy the ``ModelCase`` protocol.
    """
    try:
        instance = cls()
    except Exception:  # noqa: BLE001
        msg = f"{cls!r} could not be instantiated for protocol check."
        raise TypeError(msg) from None
    if not isinstance(instance, ModelCase):
        msg = f"{cls!r} does not implement the ModelCase protocol."
        raise TypeError(msg)
    _CASES[name] = cls


def available_cases() -> list[ModelCase]:
    """Return one default instance of every registered case, by number."""
    instances: list[ModelCase] = [cls() for cls in _CASES.values()]
    return sorted(instances, key=lambda c: c.number)


def resolve_case(case: str | int | ModelCase) -> ModelCase:
    """Resolve a case name, number or instance to a ``ModelCase``.

    Instances are returned as-is so that callers can pass cases built
    on non-default covariates.

    Raises:
        ValueError: If *case* names no registered case.
    """
    if isinstance(case, ModelCase):
        return case
    if isinstance(case, (int, np.integer)) and not isinstance(case, bool):
        for instance in available_cases():
            if instance.number == case:
                return instance
        msg = f"No case numbered {case}. Available: 1-{len(_CASES)}."
        raise ValueError(msg)
    if case not in _CASES:
        available = ", ".join(sorted(_CASES)) or "(none registered)"
        msg = f"Unknown case {case!r}.  Available cases: {available}."
        raise ValueError(msg)
    instance: ModelCase = _CASES[case]()
    return instance


def has_reparametrization(case: ModelCase) -> bool:
    """Whether *case* offers the ``β ln(a/b)`` rewriting."""
    return callable(getattr(case, "reparametrized", None))


# ------------------------------------------------------------------ #
# Register built-in cases
# ------------------------------------------------------------------ #

register_case("additive", AdditiveCase)
register_case("interaction", InteractionCase)
register_case("quadratic", QuadraticCase)
register_case("quadratic_interaction", QuadraticInteractionCase)
register_case("log", LogCase)
register_case("log_interaction", LogInteractionCase)
register_case("log_additive", LogAdditiveCase)


__all__ = [
    "AdditiveCase",
    "InteractionCase",
    "LogAdditiveCase",
    "LogCase",
    "LogInteractionCase",
    "ModelCase",
    "QuadraticCase",
    "QuadraticInteractionCase",
    "available_cases",
    "has_reparametrization",
    "register_case",
    "resolve_case",
]
