# ---------------------------------------------------------------------------
# heavy_tails.sampling — MCMC sampling
# ---------------------------------------------------------------------------
from __future__ import annotations

import arviz as az
import polars as pl
import pymc as pm

from .config import ModelVariant, Priors, get_variant
from .data import build_model_data
from .model import build_model

# Default sampling configuration (report run)
DEFAULT_SAMPLER_KWARGS: dict = dict(
    draws=2000,
    tune=2000,
    chains=4,
    target_accept=0.95,
    max_treedepth=15,
)

# Lighter configuration for batch fits and prior sweeps
LIGHT_SAMPLER_KWARGS: dict = dict(
    draws=1000,
    tune=1000,
    chains=2,
    target_accept=0.9,
)


def sample_model(
    model: pm.Model,
    sampler_kwargs: dict | None = None,
    random_seed: int | None = None,
) -> az.InferenceData:
    """Sample the model using nutpie (preferred) or PyMC NUTS.

    Parameters
    ----------
    model : pm.Model
        Compiled PyMC model.
    sampler_kwargs : dict, optional
        ``draws``, ``tune``, ``chains``, ``target_accept`` and optionally
        ``max_treedepth``.  Defaults to ``DEFAULT_SAMPLER_KWARGS``.
    random_seed : int, optional
        Seed passed to the sampler for reproducible draws.

    Divergences and poor mixing are not errors here; they are reported
    by :func:`heavy_tails.diagnostics.print_diagnostics`.
    """
    if sampler_kwargs is None:
        sampler_kwargs = DEFAULT_SAMPLER_KWARGS

    kwargs = dict(sampler_kwargs)
    max_treedepth = kwargs.pop("max_treedepth", None)

    nutpie_kwargs = dict(kwargs)
    pymc_kwargs = dict(kwargs)
    if max_treedepth is not None:
        nutpie_kwargs["nuts_sampler_kwargs"] = {"maxdepth": max_treedepth}
        pymc_kwargs["nuts"] = {"max_treedepth": max_treedepth}

    with model:
        try:
            idata = pm.sample(
                nuts_sampler="nutpie", random_seed=random_seed, progressbar=False,
                **nutpie_kwargs,
            )
            sampler_used = "nutpie"
        except Exception as e:
            print(f"nutpie unavailable ({e}), falling back to PyMC NUTS")
            idata = pm.sample(random_seed=random_seed, progressbar=False, **pymc_kwargs)
            sampler_used = "pymc"

    print(f"\nSampling complete ({sampler_used})")
    return idata


def fit_variant(
    series: pl.DataFrame,
    variant: str | ModelVariant = "gompertz_t",
    priors: Priors | None = None,
    sampler_kwargs: dict | None = None,
    random_seed: int | None = None,
) -> az.InferenceData:
    """Build, sample, and attach pointwise log-likelihood for one variant.

    Parameters
    ----------
    series : pl.DataFrame
        Output of :func:`heavy_tails.data.load_series`.
    variant : str or ModelVariant
        Model to fit.
    priors : Priors, optional
        Prior hyperparameters.  Defaults to ``DEFAULT_PRIORS``.
    sampler_kwargs : dict, optional
        Sampler configuration record.
    random_seed : int, optional
        Sampler seed.

    Returns
    -------
    az.InferenceData
        Posterior, sample stats, observed data and log-likelihood groups.
    """
    variant = get_variant(variant)
    data = build_model_data(series, priors)
    model = build_model(data, variant)

    print(f"Fitting {variant.label} to N = {data['N']} observations…")
    idata = sample_model(model, sampler_kwargs=sampler_kwargs, random_seed=random_seed)

    with model:
        pm.compute_log_likelihood(idata, extend_inferencedata=True, progressbar=False)

    return idata
