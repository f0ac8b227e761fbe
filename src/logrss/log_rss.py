"""Generic log-RSS and its reconciliation with the closed forms.

For an exponential selection function w(x) = exp(η(x)) with linear
predictor η(x) = β₀ + Σ βₖ fₖ(x),

    log-RSS(x1, x2) = ln(w(x1) / w(x2)) = η(x1) − η(x2)

and β₀ cancels.  Nothing in that identity depends on which features
fₖ the model uses, so the difference of the fitted model's link-scale
predictions is a model-agnostic log-RSS.  :func:`compare_case`
evaluates it next to each case's hand-derived closed form and checks
that the two agree.

Reconciliation policy
~~~~~~~~~~~~~~~~~~~~~
The two paths differ in floating-point evaluation order (direct
algebra vs. a design-matrix product inside statsmodels), so both
vectors are rounded to a fixed number of decimals before subtracting.
The granularity comes from :func:`~logrss._config.get_decimals`
unless passed explicitly; any nonzero rounded difference is a
mismatch unless a ``tolerance_units`` allowance is passed (see
:class:`~logrss._results.EquivalenceCheck`).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import numpy as np

from ._compat import DataFrameLike, _as_points_frame, _ensure_pandas_df
from ._config import _parse_decimals, get_decimals, suggest_decimals
from ._context import AnalysisContext
from ._results import ComparisonResult, EquivalenceCheck
from ._typing import Points
from .cases import ModelCase, available_cases, has_reparametrization, resolve_case
from .data import HabitatScaling
from .exceptions import LogRSSMismatchError
from .grid import make_covariate_grid, make_reference_point
from .models import SelectionModel, fit_selection_model

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------ #
# Evaluators
# ------------------------------------------------------------------ #


def linear_predictor_log_rss(model: SelectionModel, x1: Points, x2: Points) -> np.ndarray:
    """Log-RSS of x1 relative to x2 as η(x1) − η(x2).

    Works for any model exposing ``linear_predictor``; no per-case
    algebra is involved.

    Args:
        model: Fitted selection model.
        x1: One covariate point or a frame of points.
        x2: A single covariate point.

    Returns:
        Array of shape ``(n_points,)``.
    """
    if not isinstance(model, SelectionModel):
        raise TypeError(
            f"model must implement SelectionModel, got {type(model).__name__}."
        )
    ref = _as_points_frame(x2, name="x2")
    if ref.shape[0] != 1:
        raise ValueError(f"x2 must be a single covariate point, got {ref.shape[0]} rows.")
    eta_1 = model.linear_predictor(x1)  # shape: (n_points,)
    eta_2 = float(model.linear_predictor(ref)[0])
    return eta_1 - eta_2


def closed_form_log_rss(
    case: str | int | ModelCase, model: Any, x1: Points, x2: Points
) -> np.ndarray:
    """Log-RSS of x1 relative to x2 via *case*'s closed-form expression."""
    return resolve_case(case).closed_form(model, x1, x2)


# ------------------------------------------------------------------ #
# Equivalence checks
# ------------------------------------------------------------------ #


def check_equivalence(
    closed: np.ndarray,
    generic: np.ndarray,
    decimals: int | str | None = None,
    tolerance_units: int = 0,
) -> EquivalenceCheck:
    """Round two log-RSS vectors and compare them elementwise.

    Args:
        closed: Closed-form log-RSS values.
        generic: Linear-predictor log-RSS values, same shape.
        decimals: Rounding granularity; ``None`` uses the configured
            setting, ``"auto"`` scales with the values' magnitude.
        tolerance_units: Rounded differences of up to this many units
            in the last kept place still count as agreement.  ``0``
            requires the rounded values to be identical.

    Returns:
        The comparison outcome.  Never raises on disagreement; see
        :func:`assert_equivalent`.
    """
    a = np.atleast_1d(np.asarray(closed, dtype=float))
    b = np.atleast_1d(np.asarray(generic, dtype=float))
    if a.shape != b.shape:
        raise ValueError(f"Shapes differ: {a.shape} vs {b.shape}.")

    if decimals is None:
        d = get_decimals(a, b)
    else:
        setting = _parse_decimals(decimals)
        d = suggest_decimals(a, b) if setting == "auto" else int(setting)

    if tolerance_units < 0:
        raise ValueError(f"tolerance_units must be >= 0, got {tolerance_units}.")

    differences = np.round(a, d) - np.round(b, d)
    if tolerance_units == 0:
        mismatched = differences != 0
    else:
        # Allowance plus the representation error of subtracting two
        # rounded floats of this magnitude.
        slack = 4 * np.finfo(float).eps * np.maximum(np.abs(a), np.abs(b))
        mismatched = ~(np.abs(differences) <= tolerance_units * 10.0**-d + slack)
    n_mismatched = int(np.sum(mismatched))
    return EquivalenceCheck(
        decimals=d,
        differences=differences,
        summed_difference=float(np.sum(differences)),
        max_abs_difference=float(np.max(np.abs(a - b))) if a.size else 0.0,
        n_mismatched=n_mismatched,
        tolerance_units=int(tolerance_units),
    )


def assert_equivalent(
    closed: np.ndarray,
    generic: np.ndarray,
    decimals: int | str | None = None,
    *,
    tolerance_units: int = 0,
    label: str = "log-RSS",
) -> EquivalenceCheck:
    """Like :func:`check_equivalence`, but raise when the vectors disagree.

    Raises:
        LogRSSMismatchError: If any point mismatches after rounding.
    """
    check = check_equivalence(closed, generic, decimals, tolerance_units)
    if not check.agree:
        raise LogRSSMismatchError(
            f"{label}: {check.n_mismatched} of {check.n_points} point(s) disagree "
            f"after rounding to {check.decimals} decimals "
            f"(max |diff| = {check.max_abs_difference:.3e})."
        )
    return check


def check_reparametrization(
    case: str | int | ModelCase,
    model: Any,
    x1: Any,
    x2: Any,
    decimals: int | str | None = None,
    tolerance_units: int = 0,
) -> EquivalenceCheck:
    """Compare ``ln((a/b)^β)`` with ``β ln(a/b)`` for a log-transformed case.

    Raises:
        ValueError: If *case* has no reparametrised form.
    """
    resolved = resolve_case(case)
    if not has_reparametrization(resolved):
        raise ValueError(f"Case '{resolved.name}' has no log reparametrisation.")
    literal = resolved.closed_form(model, x1, x2)
    rewritten = resolved.reparametrized(model, x1, x2)  # type: ignore[attr-defined]
    return check_equivalence(literal, rewritten, decimals, tolerance_units)


# ------------------------------------------------------------------ #
# Case comparison
# ------------------------------------------------------------------ #


def compare_case(
    case: str | int | ModelCase,
    data: DataFrameLike,
    *,
    response: str = "STATUS",
    x1: Any = None,
    x2: Any = None,
    scaling: HabitatScaling | None = None,
    vary: str = "ELEVATION",
    hold: str | None = "SLOPE",
    n_points: int = 100,
    quantiles: tuple[float, ...] = (0.1, 0.5, 0.9),
    decimals: int | str | None = None,
    tolerance_units: int = 0,
    strict: bool = True,
) -> ComparisonResult:
    """Fit *case*'s model and compare closed-form with generic log-RSS.

    Args:
        case: Case name, number or instance.
        data: Prepared habitat data (see ``prepare_habitat_data``).
        response: Used/available indicator column.
        x1: Covariate points to evaluate.  Defaults to a grid over
            *vary* at the *quantiles* of *hold*.
        x2: Reference point.  Defaults to the sample means.
        scaling: Standardisation applied to the default grid and
            reference point.  Refitted on *data* when omitted; the
            refit reproduces the constants ``prepare_habitat_data``
            used on the same rows.
        vary, hold, n_points, quantiles: Grid layout, see
            :func:`~logrss.grid.make_covariate_grid`.
        decimals: Rounding granularity for both checks.
        tolerance_units: Rounding-boundary allowance for both checks,
            see :func:`check_equivalence`.
        strict: Raise ``LogRSSMismatchError`` on disagreement instead
            of returning a result with ``agree == False``.

    Returns:
        The comparison result with its :class:`AnalysisContext`.

    Raises:
        MissingTermError: If the fitted model lacks a term the closed
            form reads.
        DegenerateCovariateError: If a logged covariate is not positive.
        LogRSSMismatchError: If *strict* and the methods disagree.
    """
    resolved = resolve_case(case)
    frame = _ensure_pandas_df(data, name="data")
    ctx = AnalysisContext(case=resolved)

    resolved.validate_points(frame, "data")
    model = fit_selection_model(resolved.formula(response), frame)
    ctx.model = model

    if x1 is None or x2 is None:
        ctx.scaling = scaling if scaling is not None else HabitatScaling.fit(frame)
    if x1 is None:
        x1 = make_covariate_grid(
            frame,
            vary=vary,
            hold=hold,
            n_points=n_points,
            quantiles=quantiles,
            scaling=ctx.scaling,
        )
        ctx.vary, ctx.hold = vary, hold
    if x2 is None:
        x2 = make_reference_point(frame, scaling=ctx.scaling)
    ctx.x1 = _as_points_frame(x1, name="x1")
    ctx.x2 = x2

    closed = resolved.closed_form(model, ctx.x1, x2)
    generic = linear_predictor_log_rss(model, ctx.x1, x2)
    equivalence = check_equivalence(closed, generic, decimals, tolerance_units)
    reparam = (
        check_reparametrization(
            resolved, model, ctx.x1, x2, decimals, tolerance_units
        )
        if has_reparametrization(resolved)
        else None
    )

    result = ComparisonResult(
        case=resolved,
        formula=model.formula,
        coefficients=dict(model.coefficients),
        closed_form=closed,
        linear_predictor=generic,
        equivalence=equivalence,
        reparametrization=reparam,
        context=ctx,
    )
    logger.debug(
        "Case %d (%s): %d points, %d decimals, max |diff| %.3e, agree=%s",
        resolved.number,
        resolved.name,
        result.n_points,
        result.decimals,
        equivalence.max_abs_difference,
        result.agree,
    )

    if strict and not result.agree:
        failed = equivalence if not equivalence.agree else (reparam or equivalence)
        raise LogRSSMismatchError(
            f"Case {resolved.number} ({resolved.name}): {failed.n_mismatched} of "
            f"{failed.n_points} point(s) disagree after rounding to "
            f"{failed.decimals} decimals (max |diff| = "
            f"{failed.max_abs_difference:.3e})."
        )
    return result


def compare_all_cases(
    data: DataFrameLike,
    cases: Iterable[str | int | ModelCase] | None = None,
    **kwargs: Any,
) -> list[ComparisonResult]:
    """Run :func:`compare_case` for each case, in case-number order.

    The cases are independent; the first error aborts the run.

    Args:
        data: Prepared habitat data.
        cases: Cases to compare; defaults to every registered case.
        **kwargs: Forwarded to :func:`compare_case`.
    """
    resolved = (
        available_cases() if cases is None else [resolve_case(c) for c in cases]
    )
    frame = _ensure_pandas_df(data, name="data")
    needs_grid = kwargs.get("x1") is None or kwargs.get("x2") is None
    if needs_grid and kwargs.get("scaling") is None:
        kwargs["scaling"] = HabitatScaling.fit(frame)
    results = [compare_case(case, frame, **kwargs) for case in resolved]
    logger.info(
        "Compared %d case(s): %d agree",
        len(results),
        sum(r.agree for r in results),
    )
    return results


__all__ = [
    "assert_equivalent",
    "check_equivalence",
    "check_reparametrization",
    "closed_form_log_rss",
    "compare_all_cases",
    "compare_case",
    "linear_predictor_log_rss",
]
