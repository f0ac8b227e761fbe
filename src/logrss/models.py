"""Selection-model protocol and the statsmodels-backed implementation.

The closed-form and generic log-RSS evaluators never touch statsmodels
directly.  They program against :class:`SelectionModel`, which exposes
exactly the two things the comparison needs:

* a coefficient mapping (term label → estimate), with a ``coef``
  lookup that raises :class:`~logrss.exceptions.MissingTermError`;
* ``linear_predictor(points)`` — the link-scale prediction
  ``β₀ + Σ βₖ fₖ(x)``, intercept included, inverse link **not**
  applied.

:class:`FittedSelectionModel` implements the protocol on top of a
binomial ``statsmodels`` GLM fitted through the formula interface, so
covariate transforms written in the formula (``np.log(SLOPE)``,
``I(elev ** 2)``, interactions) are re-applied to new covariate points
by patsy at prediction time.

Term labels
~~~~~~~~~~~
patsy names columns after the formula code it parsed, normalising
whitespace around operators (``I(elev**2)`` → ``I(elev ** 2)``) and
keeping the factor order of interactions as written.  Lookups here are
whitespace-insensitive and treat ``a:b`` and ``b:a`` as the same term,
so a case does not need to know how the formula was spelled.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning as SmConvergenceWarning,
)
from statsmodels.tools.sm_exceptions import (
    PerfectSeparationWarning,
)

from ._compat import DataFrameLike, _as_points_frame, _ensure_pandas_df
from .exceptions import MissingTermError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------ #
# Term-label matching
# ------------------------------------------------------------------ #


def _term_key(label: str) -> frozenset[str]:
    """Canonical key for a term label: whitespace-free factor set."""
    return frozenset("".join(label.split()).split(":"))


def lookup_coefficient(coefficients: Mapping[str, float], term: str) -> float:
    """Return the estimate for *term* from a coefficient mapping.

    An exact label match wins; otherwise labels are compared after
    removing whitespace and ignoring factor order within interactions.

    Raises:
        MissingTermError: If no coefficient matches *term*.
    """
    if term in coefficients:
        return float(coefficients[term])
    wanted = _term_key(term)
    for label, value in coefficients.items():
        if _term_key(label) == wanted:
            return float(value)
    raise MissingTermError(term, list(coefficients))


def coefficient_getter(model: Any) -> Callable[[str], float]:
    """Return a ``term -> estimate`` callable for a model or mapping.

    Closed-form evaluators accept either a :class:`SelectionModel` or a
    plain coefficient mapping (useful for hand-worked examples).
    """
    if isinstance(model, SelectionModel):
        return model.coef
    if isinstance(model, Mapping):
        return lambda term: lookup_coefficient(model, term)
    raise TypeError(
        "Expected a SelectionModel or a mapping of term -> coefficient, "
        f"got {type(model).__name__}."
    )


# ------------------------------------------------------------------ #
# SelectionModel protocol
# ------------------------------------------------------------------ #


@runtime_checkable
class SelectionModel(Protocol):
    """Interface every fitted exponential selection model exposes.

    Attributes:
        coefficients: Read-only mapping of term label to estimate,
            including the intercept.
    """

    @property
    def coefficients(self) -> Mapping[str, float]: ...

    def coef(self, term: str) -> float:
        """Return the estimate for *term*.

        Raises:
            MissingTermError: If the model has no such term.
        """
        ...

    def linear_predictor(self, points: Any) -> np.ndarray:
        """Evaluate the link-scale predictor at one or many points.

        Args:
            points: A covariate point mapping or a frame with one row
                per point.  Must carry every column the model formula
                reads.

        Returns:
            Array of shape ``(n_points,)``.
        """
        ...


# ------------------------------------------------------------------ #
# statsmodels implementation
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class FittedSelectionModel:
    """Binomial GLM fitted through ``statsmodels.formula.api.glm``.

    Wraps the ``GLMResults`` object; it is only read, never refitted.
    """

    results: Any
    """``statsmodels`` ``GLMResultsWrapper``."""

    formula: str
    """Formula the model was fitted with."""

    @property
    def coefficients(self) -> Mapping[str, float]:
        return MappingProxyType(
            {str(k): float(v) for k, v in self.results.params.items()}
        )

    @property
    def terms(self) -> list[str]:
        """Coefficient labels in design-matrix order."""
        return [str(k) for k in self.results.params.index]

    @property
    def n_obs(self) -> int:
        return int(self.results.nobs)

    @property
    def aic(self) -> float:
        return float(self.results.aic)

    def coef(self, term: str) -> float:
        return lookup_coefficient(self.coefficients, term)

    def linear_predictor(self, points: Any) -> np.ndarray:
        frame = _as_points_frame(points, name="points")
        # which="linear" returns X @ params, i.e. before the logit inverse.
        eta = self.results.predict(frame, which="linear")
        return np.asarray(eta, dtype=float)  # shape: (n_points,)

    def response_predictor(self, points: Any) -> np.ndarray:
        """Evaluate the fitted probability of use (inverse-link scale)."""
        frame = _as_points_frame(points, name="points")
        return np.asarray(self.results.predict(frame, which="mean"), dtype=float)


def _response_name(formula: str) -> str:
    if "~" not in formula:
        raise ValueError(f"Formula {formula!r} has no '~' separating the response.")
    return formula.split("~", 1)[0].strip()


def validate_response(y: pd.Series) -> None:
    """Check that the used/available indicator is binary with values in {0, 1}."""
    if not pd.api.types.is_numeric_dtype(y) and not pd.api.types.is_bool_dtype(y):
        raise ValueError(f"Response '{y.name}' must be numeric 0/1, got dtype {y.dtype}.")
    unique = np.unique(np.asarray(y, dtype=float))
    if not (len(unique) == 2 and np.all(np.isin(unique, [0, 1]))):
        msg = (
            f"Response '{y.name}' must be a used/available indicator with "
            "exactly two unique values in {0, 1}."
        )
        raise ValueError(msg)


def fit_selection_model(formula: str, data: DataFrameLike) -> FittedSelectionModel:
    """Fit a binomial (logit-link) GLM for a used/available design.

    statsmodels convergence and perfect-separation warnings are caught
    and logged; any other warning is re-issued to the caller.

    Args:
        formula: patsy formula, e.g. ``"STATUS ~ elev + slope"``.
            ``np`` is available inside formula terms.
        data: Frame holding the response and every covariate column
            the formula reads.

    Returns:
        The fitted model.

    Raises:
        ValueError: If the response column is missing or not 0/1.
    """
    frame = _ensure_pandas_df(data, name="data")
    response = _response_name(formula)
    if response not in frame.columns:
        raise ValueError(f"Response column '{response}' not found in data.")
    validate_response(frame[response])

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        results = smf.glm(
            formula,
            data=frame,
            family=sm.families.Binomial(),
        ).fit()

    for w in caught:
        if issubclass(w.category, (SmConvergenceWarning, PerfectSeparationWarning)):
            logger.warning("Fit of %r: %s", formula, w.message)
        else:
            warnings.warn(w.message, w.category, stacklevel=2)

    model = FittedSelectionModel(results=results, formula=formula)
    logger.debug(
        "Fitted %r on %d rows (AIC %.3f): %s",
        formula,
        model.n_obs,
        model.aic,
        dict(model.coefficients),
    )
    return model


__all__ = [
    "FittedSelectionModel",
    "SelectionModel",
    "coefficient_getter",
    "fit_selection_model",
    "lookup_coefficient",
    "validate_response",
]
