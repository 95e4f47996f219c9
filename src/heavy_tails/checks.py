# ---------------------------------------------------------------------------
# heavy_tails.checks — Prior sampling, tail probabilities, LOO-CV
# ---------------------------------------------------------------------------
from __future__ import annotations

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import polars as pl
import pymc as pm

from .config import (
    DEFAULT_PRIORS,
    MODEL_COLORS,
    NU_CUTOFF,
    OUTPUT_DIR,
    ModelVariant,
    Priors,
    get_variant,
)
from .data import build_model_data
from .model import build_model


# =========================================================================
# Prior-only sampling
# =========================================================================


def sample_prior(
    series: pl.DataFrame,
    variant: str | ModelVariant = "gompertz_t",
    priors: Priors | None = None,
    draws: int = 4000,
    random_seed: int | None = None,
) -> az.InferenceData:
    """Draw from the prior of *variant* with the likelihood removed.

    *series* only fixes the shape of the model (and the centre of the
    first latent state); it carries no information into the draws of
    the process parameters.
    """
    variant = get_variant(variant)
    data = build_model_data(series, priors)
    model = build_model(data, variant, prior_only=True)
    with model:
        return pm.sample_prior_predictive(draws=draws, random_seed=random_seed)


# =========================================================================
# Tail probabilities for nu
# =========================================================================


def prob_below(
    idata: az.InferenceData,
    var_name: str = "nu",
    cutoff: float = NU_CUTOFF,
    group: str = "posterior",
) -> float:
    """Fraction of draws of *var_name* strictly below *cutoff*."""
    draws = idata[group][var_name].values.flatten()
    return float(np.mean(draws < cutoff))


def nu_prior_prob_below(cutoff: float = NU_CUTOFF, priors: Priors | None = None) -> float:
    """Analytic ``P(nu < cutoff)`` under the truncated exponential prior."""
    if priors is None:
        priors = DEFAULT_PRIORS
    if cutoff <= priors.nu_lower:
        return 0.0
    return float(1.0 - np.exp(-priors.nu_rate * (cutoff - priors.nu_lower)))


def tabulate_prob_below(
    fits: dict[str, az.InferenceData],
    var_name: str = "nu",
    cutoff: float = NU_CUTOFF,
) -> pl.DataFrame:
    """``P(var < cutoff)`` and posterior median for each fit that has *var_name*.

    Parameters
    ----------
    fits : dict[str, az.InferenceData]
        Fit results keyed by a display label (model or series name).
    """
    rows = []
    for label, idata in fits.items():
        if var_name not in idata.posterior:
            continue
        draws = idata.posterior[var_name].values.flatten()
        rows.append(
            {
                "fit": label,
                "prob_below": float(np.mean(draws < cutoff)),
                "median": float(np.median(draws)),
            }
        )
    return pl.DataFrame(
        rows, schema={"fit": pl.Utf8, "prob_below": pl.Float64, "median": pl.Float64}
    )


def print_prob_below(table: pl.DataFrame, var_name: str = "nu",
                     cutoff: float = NU_CUTOFF, priors: Priors | None = None) -> None:
    print("\n" + "=" * 72)
    print(f"POSTERIOR PROBABILITY {var_name} < {cutoff:g}")
    print("=" * 72)
    for row in table.iter_rows(named=True):
        print(f"  {row['fit']:<32} P = {row['prob_below']:.3f}   median = {row['median']:.2f}")
    if var_name == "nu":
        print(f"  {'(prior)':<32} P = {nu_prior_prob_below(cutoff, priors):.3f}")


# =========================================================================
# LOO-CV
# =========================================================================


def run_loo(idata: az.InferenceData, label: str) -> az.ELPDData:
    """PSIS-LOO for one fit; prints LOOIC, ELPD and k-hat counts.

    The result is on the deviance scale, so ``elpd_loo`` holds the
    LOOIC. Unreliable approximations are reported through ArviZ
    warnings and the k-hat counts only.
    """
    loo_result = az.loo(idata, pointwise=True, scale="deviance")
    khat = np.asarray(loo_result.pareto_k)
    n_high = int(np.sum(khat > 0.7))
    n_warn = int(np.sum((khat > 0.5) & (khat <= 0.7)))

    print(f"\n{label}:")
    print(f"  LOOIC:    {loo_result.elpd_loo:.1f} +/- {loo_result.se:.1f}")
    print(f"  ELPD LOO: {-loo_result.elpd_loo / 2:.1f}")
    print(f"  p_loo:    {loo_result.p_loo:.1f}")
    print(f"  k-hat > 0.7 (bad):  {n_high}")
    print(f"  k-hat > 0.5 (warn): {n_warn}")
    return loo_result


def compute_loo(fits: dict[str, az.InferenceData]) -> dict[str, az.ELPDData]:
    """:func:`run_loo` for every fit, keyed like *fits*."""
    print("\n" + "=" * 72)
    print("LEAVE-ONE-OUT CROSS-VALIDATION (PSIS-LOO)")
    print("=" * 72)
    return {label: run_loo(idata, label) for label, idata in fits.items()}


def compare_models(
    fits: dict[str, az.InferenceData],
    loo_results: dict[str, az.ELPDData] | None = None,
) -> pd.DataFrame:
    """LOOIC comparison table across fits of the same series.

    Fits must share the same likelihood structure (autoregressive
    variants with each other, state-space variants with each other);
    ArviZ raises otherwise. Pass *loo_results* from :func:`compute_loo`
    to reuse them; otherwise they are computed here.
    """
    if loo_results is None:
        loo_results = compute_loo(fits)

    table = az.compare({label: loo_results[label] for label in fits}, ic="loo",
                       scale="deviance")
    table = table.rename(columns={"elpd_loo": "looic"})
    print("\nModel comparison (LOOIC, lower is better):")
    print(table.to_string())
    return table


def plot_khat(
    fits: dict[str, az.InferenceData],
    loo_results: dict[str, az.ELPDData] | None = None,
    fname: str = "loo_khat.png",
) -> None:
    """PSIS-LOO Pareto k-hat per observation for each fit.

    Fits with an entry in *loo_results* reuse it instead of rerunning LOO.
    """
    if loo_results is None:
        loo_results = {}
    n = len(fits)
    fig, axes = plt.subplots(1, n, figsize=(5 * n, 4), squeeze=False)

    for idx, (label, idata) in enumerate(fits.items()):
        ax = axes[0, idx]
        loo_result = loo_results.get(label)
        if loo_result is None:
            loo_result = az.loo(idata, pointwise=True)
        khat = np.asarray(loo_result.pareto_k)
        colors = np.where(khat > 0.7, "red", np.where(khat > 0.5, "orange",
                                                       MODEL_COLORS[idx % len(MODEL_COLORS)]))
        ax.scatter(range(len(khat)), khat, s=10, c=colors, alpha=0.7)
        ax.axhline(0.7, color="red", ls="--", lw=1, alpha=0.7, label="k-hat = 0.7")
        ax.axhline(0.5, color="orange", ls="--", lw=1, alpha=0.7, label="k-hat = 0.5")
        ax.set_xlabel("Observation index")
        ax.set_ylabel("k-hat")
        ax.set_title(label)
        ax.legend(fontsize=7)

    fig.suptitle("LOO-CV k-hat Diagnostics (Pareto shape parameter)",
                 fontsize=13, fontweight="bold")
    plt.tight_layout()
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    fig.savefig(OUTPUT_DIR / fname, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"\nSaved: {OUTPUT_DIR / fname}")
