"""Input compatibility layer for optional Polars support.

Every public entry point that takes tabular data accepts a pandas
DataFrame.  When a user passes a ``polars.DataFrame`` (or
``polars.LazyFrame``) it is converted to ``pandas.DataFrame`` at the
boundary, because statsmodels' formula interface evaluates terms
against pandas columns.

Polars is **not** a required dependency.  If it is not installed, the
converter simply passes pandas objects through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, TypeAlias

import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Polars is optional.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(obj: DataFrameLike, *, name: str = "data") -> pd.DataFrame:
    """Convert *obj* to a :class:`pandas.DataFrame` if necessary.

    Accepted types:
        * ``pandas.DataFrame`` — returned as-is.
        * ``polars.DataFrame`` — converted via ``.to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.

    Args:
        obj: A pandas or Polars DataFrame (or LazyFrame).
        name: Label used in error messages (e.g. ``"data"`` or ``"x1"``).

    Returns:
        A pandas ``DataFrame``.

    Raises:
        TypeError: If *obj* is not a recognised DataFrame type.
    """
    if isinstance(obj, pd.DataFrame):
        return obj

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, pl.DataFrame):
            return obj.to_pandas()

    raise TypeError(
        f"'{name}' must be a pandas DataFrame"
        + (" or Polars DataFrame/LazyFrame" if _HAS_POLARS else "")
        + f", got {type(obj).__name__}."
    )


def _as_points_frame(points: object, *, name: str = "x") -> pd.DataFrame:
    """Coerce one or many covariate points to a row-per-point frame.

    Accepted types:
        * any DataFrame accepted by :func:`_ensure_pandas_df` — one row
          per point, returned with a fresh ``RangeIndex``;
        * ``pandas.Series`` — a single point keyed by covariate name;
        * any ``Mapping`` of covariate name to scalar — a single point.

    Args:
        points: The point(s) to coerce.
        name: Label used in error messages.

    Returns:
        A pandas ``DataFrame`` with at least one row.

    Raises:
        TypeError: If *points* is none of the accepted types.
        ValueError: If *points* holds no rows.
    """
    if isinstance(points, pd.Series):
        frame = pd.DataFrame([points.to_dict()])
    elif isinstance(points, Mapping):
        frame = pd.DataFrame({key: [value] for key, value in points.items()})
    else:
        frame = _ensure_pandas_df(points, name=name)  # type: ignore[arg-type]
    if frame.shape[0] == 0:
        raise ValueError(f"'{name}' must contain at least one covariate point.")
    return frame.reset_index(drop=True)
