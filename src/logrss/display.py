"""Formatted ASCII table display for log-RSS comparisons.

These tables mirror the statsmodels summary style: an 80-column
bordered panel with a centred title.  :func:`print_comparison_table`
puts every case side by side so a derivation error stands out as the
one row whose verdict is not ``OK``.
"""

from __future__ import annotations

import math
import textwrap
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .cases import ModelCase, available_cases, has_reparametrization

if TYPE_CHECKING:
    import pandas as pd

    from ._results import ComparisonResult

W = 80


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_diff(val: float) -> str:
    """Format a difference: ``0`` exactly, scientific otherwise."""
    if val == 0:
        return "0"
    if math.isnan(val):
        return "N/A"
    return f"{val:.2e}"


def _print_title(title: str) -> None:
    print("=" * W)
    for line in textwrap.wrap(title, width=W - 2):
        print(f"{line:^{W}}")
    print("=" * W)


def _verdict(result: ComparisonResult) -> str:
    if not result.equivalence.agree:
        return "MISMATCH"
    if result.reparametrization is not None and not result.reparametrization.agree:
        return "REPARAM"
    return "OK"


def print_comparison_table(
    results: Sequence[ComparisonResult],
    title: str = "Closed-form vs. Linear-predictor log-RSS",
) -> None:
    """Print one row per compared case.

    Columns: case number and name, points compared, decimals, largest
    unrounded absolute difference, summed rounded difference, verdict.
    Formulas are listed beneath the table.

    Args:
        results: Output of ``compare_all_cases`` (or several
            ``compare_case`` calls).
        title: Title for the output table.
    """
    _print_title(title)

    print(
        f"{'#':>2} {'Case':<24}{'Points':>8}{'Dec.':>6}"
        f"{'max |Δ|':>12}{'ΣΔ (rounded)':>16}{'Verdict':>10}"
    )
    print("-" * W)
    for r in results:
        print(
            f"{r.case.number:>2} {_truncate(r.case.name, 23):<24}"
            f"{r.n_points:>8}{r.decimals:>6}"
            f"{_fmt_diff(r.equivalence.max_abs_difference):>12}"
            f"{_fmt_diff(r.equivalence.summed_difference):>16}"
            f"{_verdict(r):>10}"
        )
    print("-" * W)

    for r in results:
        print(f"  {r.case.number}: {_truncate(r.formula, W - 5)}")

    notes: list[str] = []
    for r in results:
        if r.reparametrization is not None:
            notes.append(
                f"Case {r.case.number}: ln((a/b)^β) vs β·ln(a/b) max |Δ| = "
                f"{_fmt_diff(r.reparametrization.max_abs_difference)}."
            )
        if not r.equivalence.exact and r.equivalence.agree:
            notes.append(
                f"Case {r.case.number}: rounded values straddle a rounding "
                f"boundary at some points (within {r.equivalence.tolerance_units} "
                "unit(s) in the last place)."
            )
    if notes:
        print("-" * W)
        print("Notes:")
        for note in notes:
            print(textwrap.fill(note, width=W, initial_indent="  ", subsequent_indent="    "))

    n_ok = sum(r.agree for r in results)
    print("=" * W)
    print(f"{n_ok} of {len(results)} case(s) agree.")
    print()


def print_case_info_table(
    cases: Sequence[ModelCase] | None = None,
    response: str = "STATUS",
    title: str = "Registered log-RSS Cases",
) -> None:
    """Print the registered cases with their model form and formula."""
    cases = list(cases) if cases is not None else available_cases()
    lw = 24

    _print_title(title)
    for case in cases:
        print(f"  {f'{case.number}. {case.name}':<{lw}}{case.description}")
        print(f"     {_truncate(case.formula(response), W - 5)}")
        if has_reparametrization(case):
            logged = ", ".join(case.log_covariates)
            print(f"     log-transformed: {logged}")
    print("=" * W)
    print()


def print_dataset_info_table(
    data: pd.DataFrame,
    *,
    name: str = "Habitat data",
    response: str = "STATUS",
    covariates: Sequence[str] = ("ELEVATION", "SLOPE"),
    title: str = "Dataset Information",
) -> None:
    """Print used/available counts and covariate summaries.

    Args:
        data: Habitat data.
        name: Dataset label.
        response: Used/available indicator column.
        covariates: Columns to summarise (min, mean, max).
        title: Title for the output table.
    """
    lw = 20
    n_used = int((data[response] == 1).sum())

    _print_title(title)
    print(f"  {'Dataset:':<{lw}}{name}")
    print(f"  {'No. Observations:':<{lw}}{len(data)}")
    print(f"  {'Used / Available:':<{lw}}{n_used} / {len(data) - n_used}")

    present = [c for c in covariates if c in data.columns]
    if present:
        print("-" * W)
        print(f"  {'Covariate':<{lw}}{'Min':>14}{'Mean':>14}{'Max':>14}{'Zeros':>8}")
        for c in present:
            col = data[c].astype(float)
            print(
                f"  {_truncate(c, lw - 1):<{lw}}{col.min():>14.4f}"
                f"{col.mean():>14.4f}{col.max():>14.4f}{int((col == 0).sum()):>8}"
            )
    print("=" * W)
    print()


__all__ = [
    "print_case_info_table",
    "print_comparison_table",
    "print_dataset_info_table",
]
