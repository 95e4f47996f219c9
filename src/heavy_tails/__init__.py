# ---------------------------------------------------------------------------
# heavy_tails — Bayesian Gompertz models with heavy-tailed process error
# ---------------------------------------------------------------------------
"""Fit autoregressive and state-space Gompertz population models with
Student-t or normal process error, and quantify the evidence for
heavy-tailed (black-swan) population dynamics."""

from .batch import run_batch
from .checks import (
    compare_models,
    compute_loo,
    nu_prior_prob_below,
    prob_below,
    sample_prior,
    tabulate_prob_below,
)
from .config import (
    BASE_DIR,
    DATA_DIR,
    DEFAULT_PRIORS,
    MODELS,
    OUTPUT_DIR,
    ModelVariant,
    Priors,
    get_variant,
)
from .data import SeriesError, build_model_data, load_series
from .model import build_model
from .residuals import flag_residuals, flag_threshold
from .sampling import (
    DEFAULT_SAMPLER_KWARGS,
    LIGHT_SAMPLER_KWARGS,
    fit_variant,
    sample_model,
)
from .sensitivity import run_sensitivity
from .simulate import simulate_gompertz
from .summary import summarize_parameters, summarize_predictions

__all__ = [
    "BASE_DIR",
    "DATA_DIR",
    "OUTPUT_DIR",
    "MODELS",
    "ModelVariant",
    "Priors",
    "DEFAULT_PRIORS",
    "get_variant",
    "SeriesError",
    "load_series",
    "build_model_data",
    "build_model",
    "sample_model",
    "fit_variant",
    "DEFAULT_SAMPLER_KWARGS",
    "LIGHT_SAMPLER_KWARGS",
    "summarize_parameters",
    "summarize_predictions",
    "flag_threshold",
    "flag_residuals",
    "sample_prior",
    "prob_below",
    "nu_prior_prob_below",
    "tabulate_prob_below",
    "compute_loo",
    "compare_models",
    "simulate_gompertz",
    "run_batch",
    "run_sensitivity",
]
