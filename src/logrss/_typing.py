"""Shared type aliases for the logrss package."""

from collections.abc import Mapping

import pandas as pd

# A single covariate point: covariate name -> value.
CovariatePoint = Mapping[str, float]

# One or many covariate points: a point mapping or a frame of rows.
Points = CovariatePoint | pd.Series | pd.DataFrame
