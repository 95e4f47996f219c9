# ---------------------------------------------------------------------------
# heavy_tails.batch — Fit one model variant to many series
# ---------------------------------------------------------------------------
"""For each series CSV in a directory: load, fit, and record the
posterior probability of heavy tails and the number of flagged years.
Series that cannot be loaded are logged and skipped."""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import polars as pl

from .checks import prob_below
from .config import (
    DATA_DIR,
    FLAG_TAIL_PROB,
    NU_CUTOFF,
    OUTPUT_DIR,
    ModelVariant,
    Priors,
    get_variant,
)
from .data import SeriesError, load_series
from .residuals import flag_residuals, flag_threshold
from .sampling import LIGHT_SAMPLER_KWARGS, fit_variant
from .summary import posterior_draws, summarize_predictions

logger = logging.getLogger(__name__)

BATCH_SCHEMA = {
    "series": pl.Utf8,
    "n_obs": pl.Int64,
    "prob_nu_below": pl.Float64,
    "nu_median": pl.Float64,
    "sigma_proc_median": pl.Float64,
    "n_flagged": pl.Int64,
    "divergences": pl.Int64,
}


def run_batch(
    data_dir: str | Path | None = None,
    variant: str | ModelVariant = "gompertz_t",
    pattern: str = "*.csv",
    year_col: str = "year",
    index_col: str = "index",
    priors: Priors | None = None,
    sampler_kwargs: dict | None = None,
    random_seed: int | None = None,
) -> pl.DataFrame:
    """Fit *variant* to every file matching *pattern* in *data_dir*.

    Parameters
    ----------
    data_dir : str or Path, optional
        Directory of series CSVs.  Defaults to ``DATA_DIR``.
    variant : str or ModelVariant
        Model to fit.  ``prob_nu_below`` / ``nu_median`` are null for
        normal variants.
    pattern : str
        Glob for series files.
    year_col, index_col : str
        Column names shared by all files.
    priors, sampler_kwargs, random_seed
        Passed to :func:`heavy_tails.sampling.fit_variant`.
        ``sampler_kwargs`` defaults to ``LIGHT_SAMPLER_KWARGS``.

    Returns
    -------
    pl.DataFrame
        One row per successfully fitted series (``BATCH_SCHEMA``).
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    variant = get_variant(variant)
    if sampler_kwargs is None:
        sampler_kwargs = LIGHT_SAMPLER_KWARGS

    paths = sorted(data_dir.glob(pattern))
    if not paths:
        raise FileNotFoundError(f"No files matching {pattern!r} in {data_dir}")

    rows: list[dict] = []
    for run, path in enumerate(paths):
        print(f"\n--- Batch fit {run + 1}/{len(paths)}: {path.name} ---")
        try:
            series = load_series(path, year_col=year_col, index_col=index_col)
        except SeriesError as e:
            logger.warning(f"Skipping {path.name}: {e}")
            continue

        idata = fit_variant(
            series, variant, priors=priors, sampler_kwargs=sampler_kwargs,
            random_seed=random_seed,
        )
        rows.append(_batch_row(path.stem, series, idata, variant))

    results = pl.DataFrame(rows, schema=BATCH_SCHEMA)
    _print_batch_table(results)
    if variant.heavy_tailed and results.height > 0:
        _plot_batch(results, variant)
    return results


def _batch_row(name: str, series: pl.DataFrame, idata, variant: ModelVariant) -> dict:
    sigma_med = float(np.median(posterior_draws(idata, "sigma_proc")))
    summary = summarize_predictions(idata, series)
    summary = flag_residuals(summary, flag_threshold(sigma_med, FLAG_TAIL_PROB))

    if variant.heavy_tailed:
        p_nu = prob_below(idata, "nu", NU_CUTOFF)
        nu_med = float(np.median(posterior_draws(idata, "nu")))
    else:
        p_nu = None
        nu_med = None

    return {
        "series": name,
        "n_obs": series.height,
        "prob_nu_below": p_nu,
        "nu_median": nu_med,
        "sigma_proc_median": sigma_med,
        "n_flagged": int(summary["flagged"].sum()),
        "divergences": int(idata.sample_stats.diverging.sum().values),
    }


def _print_batch_table(results: pl.DataFrame) -> None:
    print("\n" + "=" * 88)
    print(f"BATCH RESULTS: P(ν < {NU_CUTOFF:g}), flagged years, divergences")
    print("=" * 88)
    print(f"{'Series':<28} {'N':>4} {'P(ν<cut)':>9} {'ν med':>8} {'σ med':>8} "
          f"{'Flagged':>8} {'Divs':>6}")
    print("-" * 88)
    for r in results.iter_rows(named=True):
        p = "n/a" if r["prob_nu_below"] is None else f"{r['prob_nu_below']:.3f}"
        nu = "n/a" if r["nu_median"] is None else f"{r['nu_median']:.1f}"
        print(f"{r['series']:<28} {r['n_obs']:>4} {p:>9} {nu:>8} "
              f"{r['sigma_proc_median']:>8.3f} {r['n_flagged']:>8} {r['divergences']:>6}")


def _plot_batch(results: pl.DataFrame, variant: ModelVariant) -> None:
    ordered = results.sort("prob_nu_below")
    n = ordered.height

    fig, ax = plt.subplots(1, 1, figsize=(8, max(3, 0.3 * n)))
    ax.barh(np.arange(n), ordered["prob_nu_below"].to_numpy(), color="steelblue", alpha=0.8)
    ax.set_yticks(np.arange(n))
    ax.set_yticklabels(ordered["series"].to_list(), fontsize=8)
    ax.set_xlim(0, 1)
    ax.set_xlabel(f"P(ν < {NU_CUTOFF:g})")
    ax.set_title(f"Heavy-tail probability by series: {variant.label}")
    plt.tight_layout()
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    fig.savefig(OUTPUT_DIR / "batch_prob_nu.png", dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"\nSaved: {OUTPUT_DIR / 'batch_prob_nu.png'}")
