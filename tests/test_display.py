"""Tests for the display module."""

import numpy as np
import pandas as pd

from logrss._results import ComparisonResult, EquivalenceCheck
from logrss.cases import AdditiveCase, LogCase, available_cases
from logrss.display import (
    _fmt_diff,
    _truncate,
    _verdict,
    print_case_info_table,
    print_comparison_table,
    print_dataset_info_table,
)


def _check(n_mismatched=0, differences=(0.0, 0.0, 0.0), max_abs=2e-16, tolerance_units=0):
    return EquivalenceCheck(
        decimals=10,
        differences=np.array(differences),
        summed_difference=float(np.sum(differences)),
        max_abs_difference=max_abs,
        n_mismatched=n_mismatched,
        tolerance_units=tolerance_units,
    )


def _result(case, equivalence=None, reparametrization=None):
    return ComparisonResult(
        case=case,
        formula=case.formula(),
        coefficients={},
        closed_form=np.zeros(3),
        linear_predictor=np.zeros(3),
        equivalence=equivalence or _check(),
        reparametrization=reparametrization,
    )


class TestTruncate:
    def test_short_name_unchanged(self):
        assert _truncate("abc", 10) == "abc"

    def test_exact_length_unchanged(self):
        assert _truncate("abcdefghij", 10) == "abcdefghij"

    def test_long_name_truncated(self):
        result = _truncate("abcdefghijk", 10)
        assert len(result) == 10
        assert result.endswith("...")


class TestFmtDiff:
    def test_zero(self):
        assert _fmt_diff(0.0) == "0"

    def test_nan(self):
        assert _fmt_diff(float("nan")) == "N/A"

    def test_scientific(self):
        assert _fmt_diff(1.5e-16) == "1.50e-16"


class TestVerdict:
    def test_ok(self):
        assert _verdict(_result(AdditiveCase())) == "OK"

    def test_mismatch(self):
        assert _verdict(_result(AdditiveCase(), _check(n_mismatched=1))) == "MISMATCH"

    def test_reparam(self):
        bad = _check(n_mismatched=2)
        assert _verdict(_result(LogCase(), reparametrization=bad)) == "REPARAM"


class TestPrintComparisonTable:
    def test_prints_without_error(self, capsys):
        results = [
            _result(AdditiveCase()),
            _result(LogCase(), reparametrization=_check(max_abs=4e-16)),
        ]
        print_comparison_table(results)
        out = capsys.readouterr().out
        assert "Closed-form vs. Linear-predictor log-RSS" in out
        assert "additive" in out
        assert "STATUS ~ np.log(SLOPE)" in out
        assert "Case 5" in out
        assert "2 of 2 case(s) agree." in out

    def test_reports_mismatch(self, capsys):
        print_comparison_table([_result(AdditiveCase(), _check(n_mismatched=3))])
        out = capsys.readouterr().out
        assert "MISMATCH" in out
        assert "0 of 1 case(s) agree." in out

    def test_straddle_note(self, capsys):
        straddle = _check(differences=(1e-10, 0.0, 0.0), tolerance_units=1)
        print_comparison_table([_result(AdditiveCase(), straddle)])
        out = capsys.readouterr().out
        assert "rounding boundary" in out
        assert "within 1 unit(s)" in " ".join(out.split())

    def test_lines_fit_width(self, capsys):
        print_comparison_table([_result(c) for c in available_cases()])
        for line in capsys.readouterr().out.splitlines():
            assert len(line) <= 80


class TestPrintCaseInfoTable:
    def test_lists_every_case(self, capsys):
        print_case_info_table()
        out = capsys.readouterr().out
        for case in available_cases():
            assert case.name in out
            assert case.formula() in out
        assert "log-transformed: ELEVATION, SLOPE" in out

    def test_custom_response(self, capsys):
        print_case_info_table([AdditiveCase()], response="USED")
        assert "USED ~ elev + slope" in capsys.readouterr().out


class TestPrintDatasetInfoTable:
    def test_counts_and_summary(self, capsys):
        data = pd.DataFrame(
            {
                "STATUS": [1, 0, 0, 1],
                "ELEVATION": [1500.0, 1600.0, 1700.0, 1800.0],
                "SLOPE": [0.0, 10.0, 20.0, 30.0],
            }
        )
        print_dataset_info_table(data, name="goats")
        out = capsys.readouterr().out
        assert "goats" in out
        assert "2 / 2" in out
        assert "1650.0000" in out
        assert "SLOPE" in out

    def test_skips_absent_covariates(self, capsys):
        data = pd.DataFrame({"STATUS": [1, 0]})
        print_dataset_info_table(data)
        out = capsys.readouterr().out
        assert "Covariate" not in out
