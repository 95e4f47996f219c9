# ---------------------------------------------------------------------------
# heavy_tails.summary — Posterior extraction and per-year summaries
# ---------------------------------------------------------------------------
from __future__ import annotations

import arviz as az
import numpy as np
import polars as pl

from .config import SUMMARY_QUANTILES
from .data import SeriesError
from .residuals import compute_residuals


def posterior_draws(idata: az.InferenceData, name: str) -> np.ndarray:
    """All posterior draws of *name*, chains pooled.

    Scalars come back as ``(n_samples,)``; vectors as
    ``(n_samples, ...)``.
    """
    values = idata.posterior[name].values
    return values.reshape(-1, *values.shape[2:])


def summarize_parameters(
    idata: az.InferenceData,
    var_names: list[str] | None = None,
    quantiles: tuple[float, float, float] = SUMMARY_QUANTILES,
) -> pl.DataFrame:
    """Median and interval for each scalar parameter.

    Parameters
    ----------
    idata : az.InferenceData
        Fit result.
    var_names : list[str], optional
        Parameters to summarise.  Defaults to every scalar variable in
        the posterior group.
    quantiles : (lower, mid, upper)
        Quantile levels for ``lower``, ``median`` and ``upper``.
    """
    if var_names is None:
        var_names = [
            vn for vn, da in idata.posterior.data_vars.items() if da.ndim == 2
        ]

    rows = []
    for vn in var_names:
        draws = posterior_draws(idata, vn)
        if draws.ndim != 1:
            raise ValueError(f"{vn!r} is not a scalar parameter (shape {draws.shape[1:]})")
        lo, mid, hi = np.quantile(draws, quantiles)
        rows.append(
            {
                "parameter": vn,
                "median": float(mid),
                "lower": float(lo),
                "upper": float(hi),
                "mean": float(draws.mean()),
            }
        )
    return pl.DataFrame(
        rows,
        schema={
            "parameter": pl.Utf8,
            "median": pl.Float64,
            "lower": pl.Float64,
            "upper": pl.Float64,
            "mean": pl.Float64,
        },
    )


def summarize_predictions(
    idata: az.InferenceData,
    series: pl.DataFrame,
    var_name: str = "pred",
    quantiles: tuple[float, float, float] = SUMMARY_QUANTILES,
) -> pl.DataFrame:
    """One summary row per observation year.

    Predictions are matched to observations by ``year`` coordinate,
    not by position.

    Returns
    -------
    pl.DataFrame
        ``year``, ``index``, ``log_index``, ``estimate`` (median),
        ``lower``, ``upper`` and ``residual``.

    Raises
    ------
    SeriesError
        If the prediction vector and the series disagree in length or
        in the years they cover.
    """
    da = idata.posterior[var_name]
    time_dim = da.dims[-1]
    draws = da.values.reshape(-1, da.shape[-1])

    if draws.shape[1] != series.height:
        raise SeriesError(
            f"{var_name!r} has {draws.shape[1]} time steps but the series has "
            f"{series.height} observations"
        )

    lo, mid, hi = np.quantile(draws, quantiles, axis=0)
    pred = pl.DataFrame(
        {
            "year": np.asarray(da.coords[time_dim].values).astype(np.int64),
            "estimate": mid,
            "lower": lo,
            "upper": hi,
        }
    )

    summary = series.join(pred, on="year", how="left")
    n_unmatched = summary["estimate"].null_count()
    if n_unmatched:
        raise SeriesError(
            f"{n_unmatched} observation year(s) have no matching {var_name!r} entry"
        )

    return compute_residuals(summary)
