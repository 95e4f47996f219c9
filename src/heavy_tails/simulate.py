# ---------------------------------------------------------------------------
# heavy_tails.simulate — Synthetic Gompertz series
# ---------------------------------------------------------------------------
"""Simulate log-scale Gompertz dynamics with Student-t or normal process
deviations and optional normal observation error.  Used to check that
the heavy-tailed models recover nu on data with known tails."""

from __future__ import annotations

import numpy as np
import polars as pl

from .data import series_from_frame


def simulate_gompertz(
    n_years: int = 50,
    lam: float = 1.5,
    b: float = 0.5,
    sigma_proc: float = 0.2,
    nu: float | None = None,
    sigma_obs: float = 0.0,
    x0: float | None = None,
    start_year: int = 1960,
    random_seed: int | None = None,
) -> pl.DataFrame:
    """Simulate a population index series.

    Parameters
    ----------
    n_years : int
        Series length.
    lam, b : float
        Gompertz intercept and density dependence; ``|b| < 1`` keeps the
        process stationary around ``lam / (1 - b)``.
    sigma_proc : float
        Process-deviation scale.
    nu : float, optional
        Student-t degrees of freedom.  ``None`` gives normal deviations.
    sigma_obs : float
        Observation-error standard deviation (0 for none).
    x0 : float, optional
        Initial log state.  Defaults to the stationary mean.
    start_year : int
        First year label.
    random_seed : int, optional
        Seed for ``numpy.random.default_rng``.

    Returns
    -------
    pl.DataFrame
        Validated series with ``year``, ``index`` and ``log_index``.
    """
    if n_years < 3:
        raise ValueError(f"n_years must be at least 3, got {n_years}")
    rng = np.random.default_rng(random_seed)

    if nu is None:
        eps = rng.normal(0.0, 1.0, size=n_years - 1)
    else:
        eps = rng.standard_t(nu, size=n_years - 1)

    x = np.empty(n_years)
    x[0] = lam / (1.0 - b) if x0 is None else x0
    for t in range(1, n_years):
        x[t] = lam + b * x[t - 1] + sigma_proc * eps[t - 1]

    y = x + rng.normal(0.0, sigma_obs, size=n_years) if sigma_obs > 0 else x

    frame = pl.DataFrame(
        {
            "year": np.arange(start_year, start_year + n_years),
            "index": np.exp(y),
        }
    )
    return series_from_frame(frame)


def with_shocks(
    series: pl.DataFrame,
    years: list[int],
    log_shock: float = -1.5,
) -> pl.DataFrame:
    """Move the observations in *years* by *log_shock* on the log scale.

    Other years are unchanged, so each shock is a single extreme point.
    """
    shocked = series.with_columns(
        pl.when(pl.col("year").is_in(years))
        .then(pl.col("log_index") + log_shock)
        .otherwise(pl.col("log_index"))
        .alias("log_index")
    )
    return shocked.with_columns(pl.col("log_index").exp().alias("index"))
