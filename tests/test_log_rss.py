"""Tests for the generic log-RSS and its agreement with the closed forms."""

import json
import os
import warnings
from dataclasses import dataclass

import numpy as np
import pytest

from logrss import _config
from logrss.cases import AdditiveCase, available_cases
from logrss.exceptions import (
    DegenerateCovariateError,
    LogRSSMismatchError,
    MissingTermError,
)
from logrss.data import prepare_habitat_data, simulate_used_available
from logrss.grid import covariate_point, make_covariate_grid, make_reference_point
from logrss.log_rss import (
    assert_equivalent,
    check_equivalence,
    check_reparametrization,
    closed_form_log_rss,
    compare_all_cases,
    compare_case,
    linear_predictor_log_rss,
)
from logrss.models import fit_selection_model


@pytest.fixture(scope="module")
def prepared():
    raw = simulate_used_available(n_used=600, n_available=600, random_state=11)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        return prepare_habitat_data(raw)


@pytest.fixture(autouse=True)
def _default_config():
    _config._decimals_override = None
    os.environ.pop("LOGRSS_DECIMALS", None)
    yield
    _config._decimals_override = None
    os.environ.pop("LOGRSS_DECIMALS", None)


# ------------------------------------------------------------------ #
# Generic evaluator
# ------------------------------------------------------------------ #


class TestLinearPredictorLogRSS:
    @pytest.fixture(scope="class")
    def model(self, prepared):
        data, _ = prepared
        return fit_selection_model(
            "STATUS ~ elev + slope + elev:slope + I(elev ** 2)", data
        )

    def test_zero_at_reference(self, model):
        x = covariate_point(elev=0.4, slope=-0.9)
        assert linear_predictor_log_rss(model, x, x).tolist() == [0.0]

    def test_antisymmetric(self, model):
        a = covariate_point(elev=0.4, slope=-0.9)
        b = covariate_point(elev=-1.1, slope=0.2)
        np.testing.assert_allclose(
            linear_predictor_log_rss(model, a, b),
            -linear_predictor_log_rss(model, b, a),
        )

    def test_intercept_cancels(self, model):
        a = covariate_point(elev=0.4, slope=-0.9)
        b = covariate_point(elev=-1.1, slope=0.2)
        expected = model.linear_predictor(a) - model.linear_predictor(b)
        np.testing.assert_allclose(linear_predictor_log_rss(model, a, b), expected)

    def test_grid_shape(self, model, prepared):
        data, scaling = prepared
        grid = make_covariate_grid(data, n_points=20, scaling=scaling)
        x2 = make_reference_point(data, scaling=scaling)
        assert linear_predictor_log_rss(model, grid, x2).shape == (60,)

    def test_rejects_multi_row_reference(self, model, prepared):
        data, _ = prepared
        with pytest.raises(ValueError, match="single covariate point"):
            linear_predictor_log_rss(model, data.iloc[:3], data.iloc[:2])

    def test_rejects_coefficient_mapping(self):
        x = covariate_point(elev=0.0, slope=0.0)
        with pytest.raises(TypeError, match="SelectionModel"):
            linear_predictor_log_rss({"elev": 1.0}, x, x)

    def test_closed_form_by_name(self, prepared):
        data, _ = prepared
        model = fit_selection_model("STATUS ~ elev + slope", data)
        a = covariate_point(elev=1.0, slope=0.5)
        b = covariate_point(elev=0.0, slope=0.0)
        np.testing.assert_allclose(
            closed_form_log_rss("additive", model, a, b),
            linear_predictor_log_rss(model, a, b),
        )


# ------------------------------------------------------------------ #
# Equivalence checks
# ------------------------------------------------------------------ #


class TestCheckEquivalence:
    def test_identical_vectors(self):
        a = np.linspace(-2, 2, 11)
        check = check_equivalence(a, a.copy(), decimals=10)
        assert check.agree
        assert check.exact
        assert check.summed_difference == 0.0
        assert check.n_points == 11

    def test_last_bit_noise_tolerated(self):
        a = np.linspace(-2, 2, 11)
        noisy = a + np.spacing(np.abs(a) + 1.0)
        check = check_equivalence(a, noisy, decimals=10)
        assert check.agree
        assert check.exact
        assert check.max_abs_difference > 0

    def test_one_unit_apart_mismatch(self):
        check = check_equivalence(np.array([1.0000000001]), np.array([1.0]), decimals=10)
        assert not check.agree
        assert check.n_mismatched == 1
        assert check.tolerance_units == 0

    def test_one_unit_apart_agrees_with_tolerance(self):
        check = check_equivalence(
            np.array([1.0000000001]), np.array([1.0]), decimals=10, tolerance_units=1
        )
        assert check.agree
        assert not check.exact
        assert check.tolerance_units == 1

    def test_two_units_apart_mismatch_with_tolerance(self):
        check = check_equivalence(
            np.array([1.0000000002]), np.array([1.0]), decimals=10, tolerance_units=1
        )
        assert not check.agree
        assert check.n_mismatched == 1

    def test_real_difference_detected(self):
        a = np.linspace(0, 1, 5)
        check = check_equivalence(a, a + 1e-6, decimals=10)
        assert check.n_mismatched == 5
        assert check.max_abs_difference == pytest.approx(1e-6)

    def test_uses_configured_decimals(self):
        _config.set_decimals(3)
        check = check_equivalence(np.array([0.1231]), np.array([0.1234]))
        assert check.decimals == 3
        assert check.exact

    def test_auto_decimals(self):
        check = check_equivalence(np.array([250.0]), np.array([250.0]), decimals="auto")
        assert check.decimals == 7

    def test_env_decimals(self, monkeypatch):
        monkeypatch.setenv("LOGRSS_DECIMALS", "4")
        check = check_equivalence(np.array([0.12341]), np.array([0.12344]))
        assert check.decimals == 4
        assert check.exact

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError, match="tolerance_units"):
            check_equivalence(np.zeros(1), np.zeros(1), tolerance_units=-1)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="Shapes differ"):
            check_equivalence(np.zeros(3), np.zeros(4))

    def test_assert_equivalent_raises(self):
        with pytest.raises(LogRSSMismatchError, match="3 of 3 point"):
            assert_equivalent(np.zeros(3), np.ones(3), decimals=4, label="toy")

    def test_assert_equivalent_tolerance(self):
        with pytest.raises(LogRSSMismatchError, match="1 of 1 point"):
            assert_equivalent(np.array([0.0001]), np.zeros(1), decimals=4)
        check = assert_equivalent(
            np.array([0.0001]), np.zeros(1), decimals=4, tolerance_units=1
        )
        assert not check.exact

    def test_mismatch_is_assertion_error(self):
        with pytest.raises(AssertionError):
            assert_equivalent(np.zeros(1), np.ones(1), decimals=4)

    def test_assert_equivalent_returns_check(self):
        check = assert_equivalent(np.ones(2), np.ones(2), decimals=4)
        assert check.exact

    def test_to_dict_is_json_ready(self):
        check = check_equivalence(np.ones(2), np.ones(2), decimals=4)
        payload = check.to_dict()
        assert payload["differences"] == [0.0, 0.0]
        json.dumps(payload)


# ------------------------------------------------------------------ #
# Case comparison
# ------------------------------------------------------------------ #


class TestCompareCase:
    def test_additive_scenario(self, prepared):
        """Additive model, 100 elevations at three slope quantiles."""
        data, scaling = prepared
        result = compare_case("additive", data, scaling=scaling, decimals=10)
        assert result.n_points == 300
        assert result.decimals == 10
        assert result.equivalence.agree
        assert result.equivalence.exact
        assert result.equivalence.summed_difference == 0.0
        assert result.reparametrization is None

    @pytest.mark.parametrize("case", [c.name for c in available_cases()])
    def test_every_case_agrees(self, prepared, case):
        data, scaling = prepared
        result = compare_case(case, data, scaling=scaling, decimals=10)
        assert result.agree
        assert result.case.name == case
        np.testing.assert_allclose(
            result.closed_form, result.linear_predictor, rtol=1e-9, atol=1e-9
        )

    @pytest.mark.parametrize("case", ["log", "log_interaction", "log_additive"])
    def test_log_cases_check_reparametrisation(self, prepared, case):
        data, scaling = prepared
        result = compare_case(case, data, scaling=scaling, decimals=10)
        assert result.reparametrization is not None
        assert result.reparametrization.agree

    def test_default_auto_decimals(self, prepared):
        data, scaling = prepared
        result = compare_case("interaction", data, scaling=scaling)
        assert result.agree
        assert 0 <= result.decimals <= 10
        assert result.equivalence.tolerance_units == 0

    def test_tolerance_units_forwarded(self, prepared):
        data, scaling = prepared
        result = compare_case(
            "log_interaction", data, scaling=scaling, decimals=10, tolerance_units=1
        )
        assert result.equivalence.tolerance_units == 1
        assert result.reparametrization.tolerance_units == 1
        assert result.agree

    def test_scaling_refitted_when_omitted(self, prepared):
        data, scaling = prepared
        with_scaling = compare_case("additive", data, scaling=scaling, decimals=10)
        refitted = compare_case("additive", data, decimals=10)
        np.testing.assert_allclose(
            with_scaling.linear_predictor, refitted.linear_predictor, atol=1e-12
        )

    def test_user_points(self, prepared):
        data, _ = prepared
        x1 = data.iloc[:25]
        x2 = covariate_point(elev=0.0, slope=0.0)
        result = compare_case("quadratic_interaction", data, x1=x1, x2=x2, decimals=10)
        assert result.n_points == 25
        assert result.context.vary is None
        assert result.agree

    def test_context_populated(self, prepared):
        data, scaling = prepared
        result = compare_case("log", data, scaling=scaling, decimals=10)
        ctx = result.context
        assert ctx.model.formula == result.formula
        assert ctx.scaling is scaling
        assert ctx.vary == "ELEVATION"
        assert ctx.hold == "SLOPE"
        assert len(ctx.x1) == result.n_points

    def test_to_dict(self, prepared):
        data, scaling = prepared
        result = compare_case("interaction", data, scaling=scaling, decimals=10)
        payload = result.to_dict()
        assert payload["case"] == "interaction"
        assert "context" not in payload
        assert set(payload["coefficients"]) == {
            "Intercept",
            "elev",
            "slope",
            "elev:slope",
        }
        assert result["formula"] == "STATUS ~ elev + slope + elev:slope"
        assert "equivalence" in result
        json.dumps(payload)

    def test_zero_slope_rejected_for_log_case(self, prepared):
        data, scaling = prepared
        broken = data.copy()
        broken.loc[broken.index[0], "SLOPE"] = 0.0
        with pytest.raises(DegenerateCovariateError, match="SLOPE"):
            compare_case("log", broken, scaling=scaling)

    def test_missing_term_surfaces(self, prepared):
        @dataclass(frozen=True)
        class ElevOnlyFormula(AdditiveCase):
            def formula(self, response="STATUS"):
                return f"{response} ~ {self.hi}"

        data, scaling = prepared
        with pytest.raises(MissingTermError, match="slope"):
            compare_case(ElevOnlyFormula(), data, scaling=scaling)

    def test_wrong_closed_form_detected(self, prepared):
        @dataclass(frozen=True)
        class SignFlipped(AdditiveCase):
            def closed_form(self, model, x1, x2):
                return -super().closed_form(model, x1, x2)

        data, scaling = prepared
        with pytest.raises(LogRSSMismatchError, match="Case 1"):
            compare_case(SignFlipped(), data, scaling=scaling, decimals=10)

        result = compare_case(
            SignFlipped(), data, scaling=scaling, decimals=10, strict=False
        )
        assert not result.agree
        assert result.equivalence.n_mismatched > 0

    def test_reparametrisation_requires_log_case(self, prepared):
        data, _ = prepared
        model = fit_selection_model("STATUS ~ elev + slope", data)
        x = covariate_point(elev=0.0, slope=0.0)
        with pytest.raises(ValueError, match="no log reparametrisation"):
            check_reparametrization("additive", model, x, x)


class TestCompareAllCases:
    @pytest.fixture(scope="class")
    def results(self, prepared):
        data, _ = prepared
        return compare_all_cases(data, decimals=10)

    def test_every_case_in_order(self, results):
        assert [r.case.number for r in results] == [1, 2, 3, 4, 5, 6, 7]

    def test_all_agree(self, results):
        assert all(r.agree for r in results)

    def test_shared_scaling(self, results):
        assert len({id(r.context.scaling) for r in results}) == 1

    def test_subset(self, prepared):
        data, scaling = prepared
        results = compare_all_cases(data, cases=[7, "log"], scaling=scaling, decimals=10)
        assert [r.case.name for r in results] == ["log_additive", "log"]
