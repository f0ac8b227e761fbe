"""Plot both log-RSS curves for one compared case.

matplotlib is an optional dependency (``pip install logrss[plot]``);
it is imported on first use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from ._results import ComparisonResult


def plot_log_rss(result: ComparisonResult, ax: Any = None) -> Any:
    """Draw closed-form and linear-predictor log-RSS against the grid.

    The closed form is a solid line, the linear-predictor difference a
    dashed overlay; when the two agree the lines coincide.  One pair of
    lines is drawn per held quantile.

    Args:
        result: Output of ``compare_case`` run on its default grid.
        ax: Axes to draw on; a new figure is created when ``None``.

    Returns:
        The matplotlib ``Axes``.

    Raises:
        ValueError: If *result* was not computed on a generated grid.
    """
    import matplotlib.pyplot as plt

    ctx = result.context
    if ctx is None or ctx.x1 is None or ctx.vary is None:
        raise ValueError(
            "plot_log_rss needs a result computed on a generated covariate grid."
        )
    if ax is None:
        _, ax = plt.subplots(figsize=(7, 4.5))

    x1 = ctx.x1
    if ctx.hold is not None and "quantile" in x1.columns:
        groups = [
            (f"{ctx.hold} q{q:g}", (x1["quantile"] == q).to_numpy())
            for q in x1["quantile"].unique()
        ]
    else:
        groups = [("", np.ones(len(x1), dtype=bool))]

    for label, mask in groups:
        x = x1.loc[mask, ctx.vary].to_numpy()
        (line,) = ax.plot(x, result.closed_form[mask], label=f"closed form {label}".strip())
        ax.plot(
            x,
            result.linear_predictor[mask],
            linestyle="--",
            color=line.get_color(),
            label=f"η(x1) − η(x2) {label}".strip(),
        )

    ax.axhline(0.0, color="grey", linewidth=0.8)
    ax.set_xlabel(ctx.vary)
    ax.set_ylabel("log-RSS")
    ax.set_title(f"Case {result.case.number}: {result.formula}")
    ax.legend(fontsize="small")
    return ax


__all__ = ["plot_log_rss"]
