"""Symbolic derivation of the closed-form log-RSS expressions.

For each case the selection function

    w(x) = exp(β₀ + f(x; β))

is written out in ``sympy`` at two covariate points, the generic
log-RSS ``ln(w(x1) / w(x2))`` is expanded, and the hand-derived closed
form is checked against it.  The subtraction ``closed − generic`` must
simplify to zero, and β₀ must not survive in the generic expression.

Symbols
~~~~~~~
``beta_i``, ``beta_j`` (main effects), ``beta_ij`` (interaction),
``beta_i2`` (squared term) and ``beta_0`` (intercept) are real.
``h_i1``/``h_i2`` and ``h_j1``/``h_j2`` are the covariates at x1 and
x2; they are declared positive when the case logs them, real
otherwise.  The log identities ``ln(a^b) = b ln(a)`` and
``ln(a/b) = ln(a) − ln(b)`` are applied only where these assumptions
hold, so a closed form that needs positivity the symbols lack is not
verified.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import sympy as sp

from .cases import ModelCase, available_cases, resolve_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Derivation:
    """Symbolic derivation of one case's closed-form log-RSS."""

    case: str
    """Case name."""

    selection_x1: sp.Expr
    """w(x1), intercept included."""

    selection_x2: sp.Expr
    """w(x2), intercept included."""

    generic: sp.Expr
    """``ln(w(x1)/w(x2))`` after log expansion."""

    closed_form: sp.Expr
    """Hand-derived closed form, as written (unsimplified)."""

    verified: bool
    """Whether ``closed_form − generic`` simplifies to 0."""

    intercept_cancels: bool
    """Whether β₀ is absent from :attr:`generic`."""

    @property
    def symbols(self) -> tuple[sp.Symbol, ...]:
        """Free symbols of the closed form, ordered by name."""
        return tuple(sorted(self.closed_form.free_symbols, key=lambda s: s.name))

    def as_function(self) -> Callable[..., Any]:
        """Lambdify the closed form; arguments are :attr:`symbols` by name."""
        return sp.lambdify(self.symbols, self.closed_form, modules="numpy")

    def evaluate(self, **values: float | np.ndarray) -> np.ndarray:
        """Evaluate the closed form numerically.

        >>> d = derive_case("additive")
        >>> float(d.evaluate(beta_i=1.0, beta_j=2.0, h_i1=3.0, h_i2=1.0,
        ...                  h_j1=0.0, h_j2=0.0))
        2.0
        """
        missing = [s.name for s in self.symbols if s.name not in values]
        if missing:
            raise ValueError(f"Missing value(s) for: {', '.join(missing)}.")
        f = self.as_function()
        return np.asarray(f(*(values[s.name] for s in self.symbols)), dtype=float)


# ------------------------------------------------------------------ #
# Per-case model and closed form
# ------------------------------------------------------------------ #
#
# Each builder returns (f(x1), f(x2), closed) given the symbol table.
# f is the linear predictor without the intercept.


def _symbols(log_i: bool, log_j: bool) -> dict[str, sp.Symbol]:
    real = {"real": True}
    pos = {"positive": True}
    return {
        "beta_0": sp.Symbol("beta_0", **real),
        "beta_i": sp.Symbol("beta_i", **real),
        "beta_j": sp.Symbol("beta_j", **real),
        "beta_ij": sp.Symbol("beta_ij", **real),
        "beta_i2": sp.Symbol("beta_i2", **real),
        "h_i1": sp.Symbol("h_i1", **(pos if log_i else real)),
        "h_i2": sp.Symbol("h_i2", **(pos if log_i else real)),
        "h_j1": sp.Symbol("h_j1", **(pos if log_j else real)),
        "h_j2": sp.Symbol("h_j2", **(pos if log_j else real)),
    }


def _additive(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr, hj: sp.Expr) -> sp.Expr:
        return s["beta_i"] * hi + s["beta_j"] * hj

    d_i, d_j = s["h_i1"] - s["h_i2"], s["h_j1"] - s["h_j2"]
    closed = s["beta_i"] * d_i + s["beta_j"] * d_j
    return f(s["h_i1"], s["h_j1"]), f(s["h_i2"], s["h_j2"]), closed


def _interaction(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr, hj: sp.Expr) -> sp.Expr:
        return s["beta_i"] * hi + s["beta_j"] * hj + s["beta_ij"] * hi * hj

    d_i, d_j = s["h_i1"] - s["h_i2"], s["h_j1"] - s["h_j2"]
    d_prod = s["h_i1"] * s["h_j1"] - s["h_i2"] * s["h_j2"]
    closed = s["beta_i"] * d_i + s["beta_j"] * d_j + s["beta_ij"] * d_prod
    return f(s["h_i1"], s["h_j1"]), f(s["h_i2"], s["h_j2"]), closed


def _quadratic(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr) -> sp.Expr:
        return s["beta_i"] * hi + s["beta_i2"] * hi**2

    d_i = s["h_i1"] - s["h_i2"]
    closed = d_i * (s["beta_i"] + s["beta_i2"] * (2 * s["h_i1"] - d_i))
    return f(s["h_i1"]), f(s["h_i2"]), closed


def _quadratic_interaction(
    s: dict[str, sp.Symbol],
) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr, hj: sp.Expr) -> sp.Expr:
        return (
            s["beta_i"] * hi
            + s["beta_j"] * hj
            + s["beta_ij"] * hi * hj
            + s["beta_i2"] * hi**2
        )

    d_i, d_j = s["h_i1"] - s["h_i2"], s["h_j1"] - s["h_j2"]
    d_prod = s["h_i1"] * s["h_j1"] - s["h_i2"] * s["h_j2"]
    closed = (
        s["beta_i"] * d_i
        + s["beta_j"] * d_j
        + s["beta_ij"] * d_prod
        + s["beta_i2"] * d_i * (2 * s["h_i1"] - d_i)
    )
    return f(s["h_i1"], s["h_j1"]), f(s["h_i2"], s["h_j2"]), closed


def _log(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr) -> sp.Expr:
        return s["beta_i"] * sp.log(hi)

    d_i = s["h_i1"] - s["h_i2"]
    closed = sp.log((s["h_i1"] / (s["h_i1"] - d_i)) ** s["beta_i"])
    return f(s["h_i1"]), f(s["h_i2"]), closed


def _log_interaction(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr, hj: sp.Expr) -> sp.Expr:
        return (
            s["beta_i"] * sp.log(hi)
            + s["beta_j"] * hj
            + s["beta_ij"] * sp.log(hi) * hj
        )

    hi1, hi2, hj1, hj2 = s["h_i1"], s["h_i2"], s["h_j1"], s["h_j2"]
    closed = (
        sp.log((hi1 / hi2) ** s["beta_i"])
        + s["beta_j"] * (hj1 - hj2)
        + sp.log(hi1 ** (s["beta_ij"] * hj1) / hi2 ** (s["beta_ij"] * hj2))
    )
    return f(hi1, hj1), f(hi2, hj2), closed


def _log_additive(s: dict[str, sp.Symbol]) -> tuple[sp.Expr, sp.Expr, sp.Expr]:
    def f(hi: sp.Expr, hj: sp.Expr) -> sp.Expr:
        return s["beta_i"] * sp.log(hi) + s["beta_j"] * sp.log(hj)

    d_i, d_j = s["h_i1"] - s["h_i2"], s["h_j1"] - s["h_j2"]
    closed = sp.log((s["h_i1"] / (s["h_i1"] - d_i)) ** s["beta_i"]) + sp.log(
        (s["h_j1"] / (s["h_j1"] - d_j)) ** s["beta_j"]
    )
    return f(s["h_i1"], s["h_j1"]), f(s["h_i2"], s["h_j2"]), closed


_BUILDERS: dict[str, Callable[[dict[str, sp.Symbol]], tuple[sp.Expr, sp.Expr, sp.Expr]]] = {
    "additive": _additive,
    "interaction": _interaction,
    "quadratic": _quadratic,
    "quadratic_interaction": _quadratic_interaction,
    "log": _log,
    "log_interaction": _log_interaction,
    "log_additive": _log_additive,
}


def _is_zero(expr: sp.Expr) -> bool:
    expanded = sp.expand(sp.expand_log(expr))
    return bool(sp.simplify(expanded) == 0)


def derive_case(case: str | int | ModelCase) -> Derivation:
    """Derive and verify the closed-form log-RSS for *case*.

    Raises:
        ValueError: If *case* has no symbolic derivation (e.g. a
            user-registered case).
    """
    resolved = resolve_case(case)
    if resolved.name not in _BUILDERS:
        raise ValueError(f"No symbolic derivation for case '{resolved.name}'.")

    log_cols = set(resolved.log_covariates)
    hi = getattr(resolved, "hi", None)
    hj = getattr(resolved, "hj", None)
    s = _symbols(log_i=hi in log_cols, log_j=hj in log_cols)

    f1, f2, closed = _BUILDERS[resolved.name](s)
    w1 = sp.exp(s["beta_0"] + f1)
    w2 = sp.exp(s["beta_0"] + f2)
    generic = sp.expand(sp.expand_log(sp.log(w1 / w2)))

    derivation = Derivation(
        case=resolved.name,
        selection_x1=w1,
        selection_x2=w2,
        generic=generic,
        closed_form=closed,
        verified=_is_zero(closed - generic),
        intercept_cancels=s["beta_0"] not in generic.free_symbols,
    )
    logger.debug(
        "Derived case %s: generic=%s verified=%s",
        resolved.name,
        generic,
        derivation.verified,
    )
    return derivation


def derive_all() -> list[Derivation]:
    """Derive every registered case that has a symbolic builder."""
    return [derive_case(c) for c in available_cases() if c.name in _BUILDERS]


__all__ = ["Derivation", "derive_all", "derive_case"]
