"""logrss — log relative selection strength for habitat-selection GLMs.

Shows, symbolically and numerically, that the log-RSS of any
exponential selection model equals the difference of its linear
predictor at two covariate points, so the seven bespoke closed-form
expressions (additive, interaction, quadratic, quadratic + interaction,
log, log × linear, log + log) are special cases of one generic
computation.

Public API:
    .. autosummary::
        compare_case
        compare_all_cases
        linear_predictor_log_rss
        closed_form_log_rss
        check_equivalence
        assert_equivalent
        check_reparametrization
        fit_selection_model
        FittedSelectionModel
        SelectionModel
        ModelCase
        AdditiveCase
        InteractionCase
        QuadraticCase
        QuadraticInteractionCase
        LogCase
        LogInteractionCase
        LogAdditiveCase
        available_cases
        register_case
        resolve_case
        derive_case
        derive_all
        load_habitat_data
        prepare_habitat_data
        sanitize_covariates
        simulate_used_available
        HabitatScaling
        covariate_point
        make_covariate_grid
        make_reference_point
        print_case_info_table
        print_comparison_table
        print_dataset_info_table
        plot_log_rss
        get_decimals
        set_decimals
        get_covariate_floor
        set_covariate_floor
        ComparisonResult
        EquivalenceCheck
"""

from ._config import get_covariate_floor, get_decimals, set_covariate_floor, set_decimals
from ._context import AnalysisContext
from ._results import ComparisonResult, EquivalenceCheck
from .cases import (
    AdditiveCase,
    InteractionCase,
    LogAdditiveCase,
    LogCase,
    LogInteractionCase,
    ModelCase,
    QuadraticCase,
    QuadraticInteractionCase,
    available_cases,
    register_case,
    resolve_case,
)
from .data import (
    HabitatScaling,
    load_habitat_data,
    prepare_habitat_data,
    sanitize_covariates,
    simulate_used_available,
)
from .derivations import Derivation, derive_all, derive_case
from .display import (
    print_case_info_table,
    print_comparison_table,
    print_dataset_info_table,
)
from .exceptions import (
    DegenerateCovariateError,
    LogRSSError,
    LogRSSMismatchError,
    MissingTermError,
)
from .grid import covariate_point, make_covariate_grid, make_reference_point
from .log_rss import (
    assert_equivalent,
    check_equivalence,
    check_reparametrization,
    closed_form_log_rss,
    compare_all_cases,
    compare_case,
    linear_predictor_log_rss,
)
from .models import FittedSelectionModel, SelectionModel, fit_selection_model
from .plotting import plot_log_rss

__all__ = [
    "AnalysisContext",
    "ComparisonResult",
    "EquivalenceCheck",
    "compare_case",
    "compare_all_cases",
    "linear_predictor_log_rss",
    "closed_form_log_rss",
    "check_equivalence",
    "assert_equivalent",
    "check_reparametrization",
    "fit_selection_model",
    "FittedSelectionModel",
    "SelectionModel",
    "ModelCase",
    "AdditiveCase",
    "InteractionCase",
    "QuadraticCase",
    "QuadraticInteractionCase",
    "LogCase",
    "LogInteractionCase",
    "LogAdditiveCase",
    "available_cases",
    "register_case",
    "resolve_case",
    "Derivation",
    "derive_case",
    "derive_all",
    "HabitatScaling",
    "load_habitat_data",
    "prepare_habitat_data",
    "sanitize_covariates",
    "simulate_used_available",
    "covariate_point",
    "make_covariate_grid",
    "make_reference_point",
    "print_case_info_table",
    "print_comparison_table",
    "print_dataset_info_table",
    "plot_log_rss",
    "get_decimals",
    "set_decimals",
    "get_covariate_floor",
    "set_covariate_floor",
    "LogRSSError",
    "MissingTermError",
    "DegenerateCovariateError",
    "LogRSSMismatchError",
]

__version__ = "0.1.0"
