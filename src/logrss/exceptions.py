"""
Exceptions raised by logrss.

All three concrete errors also derive from the built-in exception a
caller would naturally catch (``KeyError`` for a missing coefficient,
``ValueError`` for bad covariate values, ``AssertionError`` for a failed
equivalence check), so generic handlers keep working.
"""

__all__ = [
    "LogRSSError",
    "MissingTermError",
    "DegenerateCovariateError",
    "LogRSSMismatchError",
]


class LogRSSError(Exception):
    """Base exception for all logrss errors."""
    pass


class MissingTermError(LogRSSError, KeyError):
    """
    A coefficient required by a closed-form expression is not in the model.

    The fitted formula does not match the case structure assumed by the
    caller. Fix the formula or pick the case that matches it.
    """

    def __init__(self, term: str, available: list[str] | None = None):
        self.term = term
        self.available = list(available or [])
        super().__init__(term)

    def __str__(self) -> str:
        msg = f"Term {self.term!r} is not a coefficient of the fitted model."
        if self.available:
            msg += f" Available terms: {', '.join(self.available)}."
        return msg


class DegenerateCovariateError(LogRSSError, ValueError):
    """
    A covariate value cannot enter a log transform or a ratio.

    Common causes:
    - Zero or negative slope/elevation values that were not sanitised
    - Standardised (centred) columns passed where raw positive values
      are required
    - Closed-form output that overflowed to inf/nan
    """
    pass


class LogRSSMismatchError(LogRSSError, AssertionError):
    """
    The closed-form and linear-predictor log-RSS disagree after rounding.

    Either the closed-form derivation is wrong or the rounding
    granularity is finer than the floating-point error of the two
    evaluation paths.
    """
    pass
