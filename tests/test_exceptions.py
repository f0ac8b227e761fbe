"""Tests for the exception hierarchy."""

import pytest

from logrss.exceptions import (
    DegenerateCovariateError,
    LogRSSError,
    LogRSSMismatchError,
    MissingTermError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc, builtin",
        [
            (MissingTermError, KeyError),
            (DegenerateCovariateError, ValueError),
            (LogRSSMismatchError, AssertionError),
        ],
    )
    def test_dual_inheritance(self, exc, builtin):
        assert issubclass(exc, LogRSSError)
        assert issubclass(exc, builtin)


class TestMissingTermError:
    def test_message_lists_available_terms(self):
        err = MissingTermError("elev:slope", ["Intercept", "elev", "slope"])
        assert str(err) == (
            "Term 'elev:slope' is not a coefficient of the fitted model. "
            "Available terms: Intercept, elev, slope."
        )

    def test_message_without_available(self):
        assert "Available" not in str(MissingTermError("elev"))

    def test_caught_as_key_error(self):
        with pytest.raises(KeyError):
            raise MissingTermError("slope")
