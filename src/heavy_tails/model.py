# ---------------------------------------------------------------------------
# heavy_tails.model — PyMC Gompertz model specification
# ---------------------------------------------------------------------------
"""Gompertz population models on the log scale with Student-t or normal
process error, in autoregressive and state-space form."""

from __future__ import annotations

import numpy as np
import pymc as pm
import pytensor
import pytensor.tensor as pt

from .config import ModelVariant, get_variant
from .data import model_coords


def build_model(
    data: dict,
    variant: str | ModelVariant = "gompertz_t",
    prior_only: bool = False,
) -> pm.Model:
    """Build one Gompertz model variant.

    Parameters
    ----------
    data : dict
        Output of :func:`heavy_tails.data.build_model_data`.
    variant : str or ModelVariant
        Registry name in :pydata:`heavy_tails.config.MODELS` or a
        variant instance.
    prior_only : bool
        Omit the likelihood so that sampling returns the prior.

    Process model
    -------------
    ``x_t = λ + b·x_{t-1} + ε_t`` with ``ε_t ~ t(ν, 0, σ_proc)`` or
    ``N(0, σ_proc)``.

    * Autoregressive variants use the log observations as ``x`` and
      condition on the first year.  ``pred`` is the one-step-ahead mean
      with ``pred[0] = y[0]``.
    * State-space variants put the process on a latent state ``U`` and
      observe ``y_t ~ N(U_t, σ_obs)``.  ``pred = U``.

    Every variant exposes ``pred`` (dims ``year``) and ``sigma_proc``;
    heavy-tailed variants also expose ``nu``.
    """
    variant = get_variant(variant)
    y = data["y"]
    coords = model_coords(data)
    coords["step"] = data["years"][1:]

    with pm.Model(coords=coords) as model:

        # =============================================================
        # Gompertz process parameters
        # =============================================================

        lam = pm.Normal("lambda", mu=0.0, sigma=data["lambda_sd"])
        b = pm.Uniform("b", lower=data["b_lower"], upper=data["b_upper"])
        sigma_proc = pm.HalfCauchy("sigma_proc", beta=data["sigma_scale"])

        if variant.heavy_tailed:
            # Truncated exponential == nu_lower + Exponential(rate)
            nu = pm.Truncated(
                "nu",
                pm.Exponential.dist(lam=data["nu_rate"]),
                lower=data["nu_lower"],
            )
        else:
            nu = None

        if variant.observation_error:
            _state_space(data, lam, b, sigma_proc, nu, prior_only)
        else:
            _autoregressive(y, lam, b, sigma_proc, nu, prior_only)

    return model


def _process_dist(name: str, nu, mu, sigma, **kwargs):
    """Student-t when *nu* is given, otherwise normal."""
    if nu is not None:
        return pm.StudentT(name, nu=nu, mu=mu, sigma=sigma, **kwargs)
    return pm.Normal(name, mu=mu, sigma=sigma, **kwargs)


def _autoregressive(y: np.ndarray, lam, b, sigma_proc, nu, prior_only: bool) -> None:
    # =============================================================
    # Process error only: x_t = y_t, conditioning on y[0]
    # =============================================================
    y_prev = pt.as_tensor_variable(y[:-1])
    mu = lam + b * y_prev
    pm.Deterministic(
        "pred",
        pt.concatenate([pt.as_tensor_variable(y[:1]), mu]),
        dims="year",
    )

    if not prior_only:
        _process_dist("obs", nu, mu, sigma_proc, observed=y[1:], dims="step")


def _state_space(data: dict, lam, b, sigma_proc, nu, prior_only: bool) -> None:
    # =============================================================
    # Latent state with non-centred process deviations
    #
    #   U_0 ~ N(y_0, init_sd)
    #   U_t = λ + b·U_{t-1} + σ_proc·ε_t
    # =============================================================
    y = data["y"]

    u0 = pm.Normal("U0", mu=y[0], sigma=data["init_sd"])
    eps = _process_dist("eps", nu, 0.0, 1.0, dims="step")

    def gompertz_step(e_t, u_prev, _lam, _b, _sig):
        return _lam + _b * u_prev + _sig * e_t

    u_rest, _ = pytensor.scan(
        fn=gompertz_step,
        sequences=[eps],
        outputs_info=[u0],
        non_sequences=[lam, b, sigma_proc],
        strict=True,
    )
    U = pt.concatenate([u0.reshape((1,)), u_rest])
    pm.Deterministic("pred", U, dims="year")

    sigma_obs = pm.HalfCauchy("sigma_obs", beta=data["sigma_scale"])

    if not prior_only:
        pm.Normal("obs", mu=U, sigma=sigma_obs, observed=y, dims="year")
