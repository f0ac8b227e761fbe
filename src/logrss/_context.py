"""Analysis context — artefacts produced while comparing one case.

A :class:`AnalysisContext` is filled in by
:func:`~logrss.log_rss.compare_case` and attached to the returned
:class:`~logrss._results.ComparisonResult`.  Downstream consumers
(plotting, debugging in an interactive session) read the fitted model
and the evaluated points from it instead of refitting.

The context is **not** part of the serialisation API: it carries
DataFrames and a statsmodels results object.
:meth:`~logrss._results.ComparisonResult.to_dict` skips it.

Lifecycle::

    ┌──────────────────────────────────────────────┐
    │  compare_case(case, data)                    │
    │  ├─ ctx = AnalysisContext(case=case)         │
    │  ├─ ctx.scaling = HabitatScaling.fit(…)      │
    │  ├─ ctx.model = fit_selection_model(…)       │
    │  ├─ ctx.x1 = make_covariate_grid(…)          │
    │  ├─ ctx.x2 = make_reference_point(…)         │
    │  └─ ComparisonResult(…, context=ctx)         │
    └──────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd


@dataclass
class AnalysisContext:
    """Mutable accumulator for one case's comparison artefacts.

    Every field defaults to ``None`` so the context can be created
    empty and populated as the comparison proceeds.
    """

    case: Any = None
    """Resolved ``ModelCase`` instance."""

    model: Any = None
    """Fitted ``SelectionModel``."""

    scaling: Any = None
    """``HabitatScaling`` used to standardise the grid, if any."""

    x1: pd.DataFrame | None = None
    """Grid of covariate points, one row per point."""

    x2: Any = None
    """Reference covariate point."""

    vary: str | None = None
    """Column spanned by the grid (``None`` for user-supplied x1)."""

    hold: str | None = None
    """Column held at quantiles in the grid (``None`` if not gridded)."""


__all__ = ["AnalysisContext"]
