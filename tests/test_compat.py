"""Tests for Polars DataFrame input compatibility."""

import warnings

import numpy as np
import pandas as pd
import pytest

from logrss._compat import _as_points_frame, _ensure_pandas_df
from logrss.grid import covariate_point


class TestAsPointsFrame:
    """Tests for the covariate-point coercion (no Polars needed)."""

    def test_mapping_is_one_row(self):
        frame = _as_points_frame(covariate_point(elev=1.0, slope=2.0))
        assert frame.shape == (1, 2)

    def test_series_is_one_row(self):
        frame = _as_points_frame(pd.Series({"elev": 1.0, "slope": 2.0}))
        assert frame.shape == (1, 2)
        assert frame["slope"].iloc[0] == 2.0

    def test_frame_index_reset(self):
        df = pd.DataFrame({"elev": [1.0, 2.0]}, index=[10, 20])
        assert list(_as_points_frame(df).index) == [0, 1]

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="at least one covariate point"):
            _as_points_frame(pd.DataFrame({"elev": []}), name="x1")

    def test_rejects_invalid_type(self):
        with pytest.raises(TypeError, match="'x1'"):
            _as_points_frame([1.0, 2.0], name="x1")


class TestEnsurePandasDf:
    """Tests for the data-frame boundary converter."""

    def test_pandas_returned_as_is(self):
        df = pd.DataFrame({"STATUS": [1, 0], "SLOPE": [4.0, 0.001]})
        assert _ensure_pandas_df(df) is df

    @pytest.mark.parametrize("lazy", [False, True])
    def test_polars_frames_converted(self, lazy):
        pl = pytest.importorskip("polars")
        frame = pl.DataFrame({"STATUS": [1, 0], "SLOPE": [4.0, 0.001]})
        result = _ensure_pandas_df(frame.lazy() if lazy else frame)
        assert isinstance(result, pd.DataFrame)
        assert result.columns.tolist() == ["STATUS", "SLOPE"]
        assert result["SLOPE"].tolist() == [4.0, 0.001]

    def test_rejects_array(self):
        with pytest.raises(TypeError, match="must be a pandas DataFrame"):
            _ensure_pandas_df(np.zeros((2, 2)))

    def test_error_names_argument(self):
        with pytest.raises(TypeError, match="'data' must be"):
            _ensure_pandas_df({"STATUS": 1}, name="data")


class TestPolarsEndToEnd:
    """Verify that public API functions accept Polars DataFrames."""

    @staticmethod
    def _make_polars_data(n=400, seed=42):
        pl = pytest.importorskip("polars")
        from logrss.data import prepare_habitat_data, simulate_used_available

        raw = simulate_used_available(n_used=n, n_available=n, random_state=seed)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            data, _ = prepare_habitat_data(raw)
        return pl.from_pandas(data), data

    def test_fit_selection_model(self):
        from logrss.models import fit_selection_model

        pl_df, _ = self._make_polars_data()
        model = fit_selection_model("STATUS ~ elev + slope", pl_df)
        assert set(model.coefficients) == {"Intercept", "elev", "slope"}

    def test_prepare_habitat_data(self):
        from logrss.data import prepare_habitat_data

        pl_df, _ = self._make_polars_data()
        data, scaling = prepare_habitat_data(pl_df)
        assert isinstance(data, pd.DataFrame)
        assert scaling.columns == ("ELEVATION", "SLOPE")

    def test_results_match_pandas(self):
        """Polars and pandas inputs should produce identical results."""
        from logrss.log_rss import compare_case

        pl_df, pd_df = self._make_polars_data()
        result_pl = compare_case("log_interaction", pl_df, decimals=10)
        result_pd = compare_case("log_interaction", pd_df, decimals=10)
        np.testing.assert_allclose(result_pl.closed_form, result_pd.closed_form)
        assert result_pl.coefficients == pytest.approx(result_pd.coefficients)
