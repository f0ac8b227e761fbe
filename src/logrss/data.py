"""Used/available habitat data: loading, sanitising and standardising.

The comparison works on a resource-selection design in the layout of
the mountain-goat data distributed with R's *ResourceSelection*
package:

==============  ===========================================
Column          Meaning
==============  ===========================================
``STATUS``      1 = used location, 0 = available location
``ID``          animal identifier
``ELEVATION``   elevation (m)
``SLOPE``       slope (degrees); contains exact zeros
``ET``          distance to escape terrain
``ASPECTSIN``   sine of aspect
``HITS``        number of telemetry hits
==============  ===========================================

Only ``STATUS``, ``ELEVATION`` and ``SLOPE`` are required.  Two
preparation steps precede model fitting:

1. **Sanitising** — zero slopes are replaced by a small positive floor
   so that ``np.log(SLOPE)`` stays finite.  Negative values are not
   remapped; they indicate corrupt data and raise.
2. **Standardising** — raw columns are z-scored into lower-case
   companions (``ELEVATION`` → ``elev``, ``SLOPE`` → ``slope``).  The
   fitted centring and scaling are kept in a :class:`HabitatScaling`
   so covariate grids and reference points are transformed with the
   same constants as the fitting data.
"""

from __future__ import annotations

import logging
import os
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.preprocessing import StandardScaler

from ._compat import DataFrameLike, _ensure_pandas_df
from ._config import get_covariate_floor
from .exceptions import DegenerateCovariateError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("STATUS", "ELEVATION", "SLOPE")

STANDARDIZED_NAMES: dict[str, str] = {"ELEVATION": "elev", "SLOPE": "slope"}
"""Default name of the z-scored companion of each raw column."""


def standardized_name(column: str) -> str:
    """Return the z-scored companion name for a raw column."""
    return STANDARDIZED_NAMES.get(column, f"{column.lower()}_z")


# ------------------------------------------------------------------ #
# Loading
# ------------------------------------------------------------------ #


def load_habitat_data(
    source: str | os.PathLike[str] | DataFrameLike,
    required: Sequence[str] = REQUIRED_COLUMNS,
) -> pd.DataFrame:
    """Load a used/available table from a CSV path or a DataFrame.

    Args:
        source: Path to a CSV file, or a pandas/Polars DataFrame.
        required: Columns that must be present.

    Returns:
        A pandas DataFrame (a copy when *source* is a DataFrame).

    Raises:
        ValueError: If a required column is missing.
    """
    if isinstance(source, (str, os.PathLike)):
        frame = pd.read_csv(source)
        logger.debug("Read %d rows from %s", len(frame), os.fspath(source))
    else:
        frame = _ensure_pandas_df(source, name="source").copy()

    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise ValueError(
            f"Habitat data is missing required column(s): {', '.join(missing)}."
        )
    return frame


# ------------------------------------------------------------------ #
# Sanitising
# ------------------------------------------------------------------ #


def sanitize_covariates(
    data: DataFrameLike,
    columns: Sequence[str] = ("SLOPE",),
    floor: float | None = None,
) -> pd.DataFrame:
    """Replace exact zeros in *columns* with a small positive *floor*.

    Args:
        data: Habitat data.
        columns: Columns that will later enter a log transform.
        floor: Replacement value; defaults to the configured covariate
            floor (``0.001`` unless overridden).

    Returns:
        A sanitised copy of *data*.

    Raises:
        DegenerateCovariateError: If a column holds negative values.
        ValueError: If *floor* is not strictly positive.
    """
    floor = get_covariate_floor() if floor is None else float(floor)
    if not floor > 0:
        raise ValueError(f"floor must be strictly positive, got {floor}.")

    frame = _ensure_pandas_df(data, name="data").copy()
    for column in columns:
        values = frame[column].astype(float)
        if (values < 0).any():
            raise DegenerateCovariateError(
                f"Column '{column}' holds {int((values < 0).sum())} negative "
                "value(s); only zeros are remapped."
            )
        zeros = values == 0
        n_zero = int(zeros.sum())
        if n_zero:
            warnings.warn(
                f"Replaced {n_zero} zero value(s) in '{column}' with {floor:g} "
                "so the column can be log-transformed.",
                UserWarning,
                stacklevel=2,
            )
            frame[column] = values.mask(zeros, floor)
    return frame


# ------------------------------------------------------------------ #
# Standardising
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class HabitatScaling:
    """Z-score standardisation fitted on raw habitat columns.

    Wraps a fitted scikit-learn ``StandardScaler``.  Note the scaler
    divides by the population standard deviation (``ddof=0``).
    """

    columns: tuple[str, ...]
    """Raw columns the scaler was fitted on."""

    names: tuple[str, ...]
    """Standardised column names, aligned with :attr:`columns`."""

    scaler: StandardScaler

    @classmethod
    def fit(
        cls,
        data: DataFrameLike,
        columns: Sequence[str] = ("ELEVATION", "SLOPE"),
        names: Sequence[str] | None = None,
    ) -> HabitatScaling:
        frame = _ensure_pandas_df(data, name="data")
        columns = tuple(columns)
        names = tuple(names) if names is not None else tuple(
            standardized_name(c) for c in columns
        )
        if len(names) != len(columns):
            raise ValueError("names must align one-to-one with columns.")
        scaler = StandardScaler().fit(frame[list(columns)].astype(float))
        return cls(columns=columns, names=names, scaler=scaler)

    @property
    def center(self) -> dict[str, float]:
        return dict(zip(self.columns, map(float, self.scaler.mean_)))

    @property
    def scale(self) -> dict[str, float]:
        return dict(zip(self.columns, map(float, self.scaler.scale_)))

    def transform(self, data: DataFrameLike) -> pd.DataFrame:
        """Return a copy of *data* with the standardised columns appended."""
        frame = _ensure_pandas_df(data, name="data").copy()
        missing = [c for c in self.columns if c not in frame.columns]
        if missing:
            raise ValueError(
                f"Cannot standardise: missing column(s) {', '.join(missing)}."
            )
        z = self.scaler.transform(frame[list(self.columns)].astype(float))
        for k, name in enumerate(self.names):
            frame[name] = z[:, k]
        return frame


def prepare_habitat_data(
    source: str | os.PathLike[str] | DataFrameLike,
    *,
    sanitize: Sequence[str] = ("SLOPE",),
    standardize: Sequence[str] = ("ELEVATION", "SLOPE"),
    floor: float | None = None,
) -> tuple[pd.DataFrame, HabitatScaling]:
    """Load, sanitise and standardise habitat data in one step.

    Returns:
        ``(frame, scaling)`` — the prepared data and the fitted scaling
        to reuse on covariate grids and reference points.
    """
    frame = load_habitat_data(source)
    frame = sanitize_covariates(frame, columns=sanitize, floor=floor)
    scaling = HabitatScaling.fit(frame, columns=standardize)
    frame = scaling.transform(frame)
    logger.debug(
        "Prepared %d rows (%d used); centre %s, scale %s",
        len(frame),
        int(frame["STATUS"].sum()),
        scaling.center,
        scaling.scale,
    )
    return frame, scaling


# ------------------------------------------------------------------ #
# Simulation
# ------------------------------------------------------------------ #
#
# Used locations are drawn from a candidate landscape with
# probability proportional to exp(β_elev z_elev + β_slope z_slope),
# i.e. an exponential selection function on standardised covariates.
# Available locations are a uniform draw from the same landscape.
# Slopes are rounded to whole degrees so exact zeros occur, as in the
# field data.


def _landscape(n: int, rng: np.random.Generator) -> pd.DataFrame:
    lo, hi = (800.0 - 1700.0) / 300.0, (2700.0 - 1700.0) / 300.0
    elevation = stats.truncnorm(lo, hi, loc=1700.0, scale=300.0).rvs(n, random_state=rng)
    slope = np.clip(np.round(rng.gamma(1.6, 14.0, n)), 0.0, 75.0)
    return pd.DataFrame(
        {
            "ELEVATION": np.round(elevation),
            "SLOPE": slope,
            "ET": np.round(rng.uniform(0.0, 400.0, n), 1),
            "ASPECTSIN": np.round(np.sin(rng.uniform(0.0, 2 * np.pi, n)), 4),
        }
    )


def simulate_used_available(
    n_used: int = 1000,
    n_available: int = 1000,
    *,
    coefs: Mapping[str, float] | None = None,
    n_animals: int = 4,
    random_state: int | np.random.Generator | None = None,
) -> pd.DataFrame:
    """Simulate a goats-like used/available table.

    Args:
        n_used: Number of used locations (``STATUS == 1``).
        n_available: Number of available locations (``STATUS == 0``).
        coefs: Selection coefficients on standardised ``ELEVATION``
            and ``SLOPE``, keyed ``"elev"`` and ``"slope"``.  Defaults
            to ``{"elev": 0.8, "slope": 0.5}``.
        n_animals: Number of distinct ``ID`` values.
        random_state: Seed or ``numpy.random.Generator``.

    Returns:
        DataFrame with columns ``STATUS, ID, ELEVATION, SLOPE, ET,
        ASPECTSIN, HITS``; used rows first.
    """
    if n_used < 1 or n_available < 1:
        raise ValueError("n_used and n_available must both be >= 1.")
    coefs = {"elev": 0.8, "slope": 0.5, **(coefs or {})}
    rng = (
        random_state
        if isinstance(random_state, np.random.Generator)
        else np.random.default_rng(random_state)
    )

    candidates = _landscape(5 * n_used, rng)
    z_elev = (candidates["ELEVATION"] - candidates["ELEVATION"].mean()) / candidates[
        "ELEVATION"
    ].std()
    z_slope = (candidates["SLOPE"] - candidates["SLOPE"].mean()) / candidates[
        "SLOPE"
    ].std()
    eta = coefs["elev"] * z_elev + coefs["slope"] * z_slope
    weights = np.exp(eta - eta.max())  # shifted for overflow safety
    weights = np.asarray(weights / weights.sum(), dtype=float)
    picked = rng.choice(len(candidates), size=n_used, replace=True, p=weights)

    used = candidates.iloc[picked].reset_index(drop=True)
    used.insert(0, "STATUS", 1)
    available = _landscape(n_available, rng)
    available.insert(0, "STATUS", 0)

    frame = pd.concat([used, available], ignore_index=True)
    frame.insert(1, "ID", rng.integers(1, n_animals + 1, len(frame)))
    frame["HITS"] = np.where(frame["STATUS"] == 1, rng.poisson(3.0, len(frame)) + 1, 0)
    return frame


__all__ = [
    "HabitatScaling",
    "REQUIRED_COLUMNS",
    "STANDARDIZED_NAMES",
    "load_habitat_data",
    "prepare_habitat_data",
    "sanitize_covariates",
    "simulate_used_available",
    "standardized_name",
]
