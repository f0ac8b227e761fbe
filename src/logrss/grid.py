"""Covariate points and grids for log-RSS evaluation.

x1 is a grid of points spanning the range of interest; x2 is a single
reference point (by default the sample means).  Both carry raw columns
and, when a :class:`~logrss.data.HabitatScaling` is supplied, the
standardised companions computed with the fitting data's constants,
so every case formula can be evaluated on them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

import numpy as np
import pandas as pd

from ._compat import DataFrameLike, _ensure_pandas_df
from ._typing import CovariatePoint
from .data import HabitatScaling


def covariate_point(
    values: Mapping[str, float] | None = None, **kwargs: float
) -> CovariatePoint:
    """Build an immutable covariate point.

    >>> x = covariate_point(elev=0.5, slope=-1.0)
    >>> x["elev"]
    0.5
    """
    merged = {**(values or {}), **kwargs}
    return MappingProxyType({str(k): float(v) for k, v in merged.items()})


def _fill_missing(
    frame: pd.DataFrame, data: pd.DataFrame, scaling: HabitatScaling | None
) -> pd.DataFrame:
    """Hold raw columns the scaling needs but the grid lacks at their means."""
    if scaling is None:
        return frame
    for column in scaling.columns:
        if column not in frame.columns:
            frame[column] = float(data[column].mean())
    return scaling.transform(frame)


def make_covariate_grid(
    data: DataFrameLike,
    *,
    vary: str = "ELEVATION",
    hold: str | None = "SLOPE",
    n_points: int = 100,
    quantiles: Sequence[float] = (0.1, 0.5, 0.9),
    scaling: HabitatScaling | None = None,
) -> pd.DataFrame:
    """Cross an evenly spaced range of *vary* with quantiles of *hold*.

    Args:
        data: Habitat data the ranges and quantiles are taken from.
        vary: Column spanned from its observed minimum to maximum.
        hold: Column held at each of *quantiles*; ``None`` varies
            *vary* alone.
        n_points: Number of values of *vary*.
        quantiles: Quantiles of *hold* (each in ``[0, 1]``).
        scaling: When given, standardised columns are appended.

    Returns:
        Frame of ``n_points * len(quantiles)`` rows ordered by held
        quantile, then by *vary*.  A ``"quantile"`` column records the
        quantile each row was held at.
    """
    frame = _ensure_pandas_df(data, name="data")
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2, got {n_points}.")
    values = np.linspace(frame[vary].min(), frame[vary].max(), n_points)

    if hold is None:
        grid = pd.DataFrame({vary: values})
    else:
        qs = [float(q) for q in quantiles]
        if not qs or any(not 0.0 <= q <= 1.0 for q in qs):
            raise ValueError("quantiles must be a non-empty sequence within [0, 1].")
        held = frame[hold].quantile(qs).to_numpy(dtype=float)
        grid = pd.DataFrame(
            {
                vary: np.tile(values, len(qs)),
                hold: np.repeat(held, n_points),
                "quantile": np.repeat(qs, n_points),
            }
        )
    return _fill_missing(grid, frame, scaling)


def make_reference_point(
    data: DataFrameLike,
    columns: Sequence[str] = ("ELEVATION", "SLOPE"),
    scaling: HabitatScaling | None = None,
) -> CovariatePoint:
    """Return the sample-mean covariate point used as x2.

    With *scaling* the standardised means (≈ 0 for the fitting data)
    are included alongside the raw means.
    """
    frame = _ensure_pandas_df(data, name="data")
    wanted = list(dict.fromkeys([*columns, *(scaling.columns if scaling else ())]))
    means = pd.DataFrame({c: [float(frame[c].mean())] for c in wanted})
    means = _fill_missing(means, frame, scaling)
    return covariate_point(means.iloc[0].to_dict())


__all__ = ["covariate_point", "make_covariate_grid", "make_reference_point"]
