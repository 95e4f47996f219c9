# ---------------------------------------------------------------------------
# heavy_tails.plots — Trace, nu histogram, and prediction ribbon plots
# ---------------------------------------------------------------------------
from __future__ import annotations

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import polars as pl
from scipy import stats as sp_stats

from .config import DEFAULT_PRIORS, MODEL_COLORS, NU_CUTOFF, OUTPUT_DIR, Priors


# =========================================================================
# Trace plots
# =========================================================================


def plot_trace(idata: az.InferenceData, var_names: list[str],
               fname: str = "trace.png") -> None:
    """Per-chain traces and marginal densities."""
    axes = az.plot_trace(idata, var_names=var_names, compact=True)
    fig = np.asarray(axes).ravel()[0].figure
    fig.tight_layout()
    _save(fig, fname)


# =========================================================================
# Degrees of freedom
# =========================================================================


def plot_nu_histogram(idata: az.InferenceData, priors: Priors | None = None,
                      title: str = "ν posterior", fname: str = "nu_histogram.png") -> None:
    """Posterior histogram of nu with the prior density and cutoff overlaid."""
    if priors is None:
        priors = DEFAULT_PRIORS
    nu = idata.posterior["nu"].values.flatten()

    fig, ax = plt.subplots(1, 1, figsize=(8, 4.5))
    hi = max(float(np.percentile(nu, 99)), NU_CUTOFF * 2)
    bins = np.linspace(priors.nu_lower, hi, 60)
    ax.hist(nu[nu <= hi], bins=bins, density=True, alpha=0.6, color="steelblue",
            label="Posterior")

    grid = np.linspace(priors.nu_lower, hi, 200)
    prior_pdf = sp_stats.expon.pdf(grid, loc=priors.nu_lower, scale=1.0 / priors.nu_rate)
    ax.plot(grid, prior_pdf, color="darkorange", lw=1.5, label="Prior")
    ax.axvline(NU_CUTOFF, color="k", lw=1, ls="--",
               label=f"ν = {NU_CUTOFF:g} (P = {np.mean(nu < NU_CUTOFF):.2f})")

    ax.set_xlabel("ν (degrees of freedom)")
    ax.set_ylabel("Density")
    ax.set_title(title)
    ax.legend(fontsize=8)
    plt.tight_layout()
    _save(fig, fname)


def plot_nu_comparison(fits: dict[str, az.InferenceData],
                       fname: str = "nu_comparison.png") -> None:
    """Overlaid nu posteriors, one per fit that estimates nu."""
    with_nu = {k: v for k, v in fits.items() if "nu" in v.posterior}
    if not with_nu:
        print("No fits with ν — skipping ν comparison plot.")
        return

    fig, ax = plt.subplots(1, 1, figsize=(8, 4.5))
    for i, (label, idata) in enumerate(with_nu.items()):
        nu = idata.posterior["nu"].values.flatten()
        log_nu = np.log10(nu)
        ax.hist(log_nu, bins=60, density=True, histtype="step", lw=1.5,
                color=MODEL_COLORS[i % len(MODEL_COLORS)], label=label)
    ax.axvline(np.log10(NU_CUTOFF), color="k", lw=1, ls="--")
    ax.set_xlabel("log10 ν")
    ax.set_ylabel("Density")
    ax.set_title("Posterior ν by fit")
    ax.legend(fontsize=8)
    plt.tight_layout()
    _save(fig, fname)


# =========================================================================
# Predictions vs observations
# =========================================================================


def plot_predictions(summary: pl.DataFrame, title: str,
                     fname: str = "predictions.png") -> None:
    """95% ribbon and median of the predicted log state vs observed values.

    *summary* is the output of
    :func:`heavy_tails.summary.summarize_predictions`; flagged rows (if
    a ``flagged`` column is present) are drawn in red.
    """
    years = summary["year"].to_numpy()
    obs = summary["log_index"].to_numpy()

    fig, ax = plt.subplots(1, 1, figsize=(10, 4.5))
    ax.fill_between(years, summary["lower"].to_numpy(), summary["upper"].to_numpy(),
                    alpha=0.25, color="steelblue", label="95% CI")
    ax.plot(years, summary["estimate"].to_numpy(), "steelblue", lw=1.5, label="Median")
    ax.scatter(years, obs, s=14, c="k", zorder=5, label="Observed")

    if "flagged" in summary.columns:
        flagged = summary["flagged"].to_numpy().astype(bool)
        if flagged.any():
            ax.scatter(years[flagged], obs[flagged], s=40, c="red", zorder=6,
                       label="Flagged")

    ax.set_xlabel("Year")
    ax.set_ylabel("log index")
    ax.set_title(title)
    ax.legend(fontsize=8)
    plt.tight_layout()
    _save(fig, fname)


# =========================================================================
# Helpers
# =========================================================================


def _save(fig, fname: str) -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    fig.savefig(OUTPUT_DIR / fname, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {OUTPUT_DIR / fname}")
