"""Large-n smoke tests for regression detection.

These tests run the full comparison on a goats-sized dataset
(n=20,000 locations) and a fine grid.  They catch accidental
quadratic behaviour in grid construction and precision drift in the
equivalence check as magnitudes grow.

With 30,000 compared points some values straddle a rounding boundary,
so the checks allow one unit in the last place.

All tests are marked ``@pytest.mark.slow``.  Skip them with::

    pytest -m "not slow"
"""

from __future__ import annotations

import time
import warnings

import pandas as pd
import pytest

from logrss.data import prepare_habitat_data, simulate_used_available
from logrss.log_rss import compare_all_cases

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #

N = 10_000
SEED = 42


def _make_large() -> tuple[pd.DataFrame, object]:
    raw = simulate_used_available(n_used=N, n_available=N, random_state=SEED)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        return prepare_habitat_data(raw)


# ------------------------------------------------------------------ #
# Smoke tests
# ------------------------------------------------------------------ #


@pytest.mark.slow
class TestAllCasesSmoke:
    """Seven fits on 20,000 rows, 1,000-point grid at three quantiles."""

    def test_completes_within_bound(self) -> None:
        data, scaling = _make_large()
        t0 = time.monotonic()
        results = compare_all_cases(
            data, scaling=scaling, n_points=1000, decimals=10, tolerance_units=1
        )
        elapsed = time.monotonic() - t0
        assert elapsed < 60, f"All-case smoke test took {elapsed:.1f}s (limit 60s)"
        assert len(results) == 7

    def test_all_agree_at_auto_decimals(self) -> None:
        data, scaling = _make_large()
        results = compare_all_cases(
            data, scaling=scaling, n_points=1000, tolerance_units=1
        )
        for r in results:
            assert r.agree, f"Case {r.case.number} disagrees: {r.equivalence}"
            assert r.n_points == 3000
