# ---------------------------------------------------------------------------
# heavy_tails.diagnostics — Sampling diagnostics and divergence plots
# ---------------------------------------------------------------------------
from __future__ import annotations

import arviz as az
import matplotlib.pyplot as plt

from .config import NU_CUTOFF, OUTPUT_DIR, ModelVariant, get_variant

RHAT_MAX = 1.01
ESS_MIN = 400


def parameter_names(variant: str | ModelVariant) -> list[str]:
    """Scalar parameters estimated by *variant*."""
    variant = get_variant(variant)
    names = ["lambda", "b", "sigma_proc"]
    if variant.heavy_tailed:
        names.append("nu")
    if variant.observation_error:
        names.append("sigma_obs")
    return names


# =========================================================================
# Parameter summary & convergence
# =========================================================================


def convergence_warnings(idata: az.InferenceData, var_names: list[str]) -> list[str]:
    """Warning lines for divergences, high R-hat and low bulk ESS."""
    warnings: list[str] = []

    divs = int(idata.sample_stats.diverging.sum().values)
    if divs > 0:
        warnings.append(f"{divs} divergent transitions after warmup")

    summary = az.summary(idata, var_names=var_names, kind="diagnostics")
    for pname, row in summary.iterrows():
        if row["r_hat"] > RHAT_MAX:
            warnings.append(f"{pname}: R-hat = {row['r_hat']:.4f} > {RHAT_MAX}")
        if row["ess_bulk"] < ESS_MIN:
            warnings.append(f"{pname}: ESS_bulk = {row['ess_bulk']:.0f} < {ESS_MIN}")
    return warnings


def print_diagnostics(idata: az.InferenceData, variant: str | ModelVariant) -> None:
    """Print sampling diagnostics and the parameter summary table."""
    variant = get_variant(variant)
    var_names = parameter_names(variant)

    print("=" * 72)
    print(f"SAMPLING DIAGNOSTICS — {variant.label}")
    print("=" * 72)

    divs = int(idata.sample_stats.diverging.sum().values)
    print(f"Divergences: {divs}")
    for depth_key in ("tree_depth", "depth"):
        if depth_key in idata.sample_stats:
            max_td = int(idata.sample_stats[depth_key].max().values)
            print(f"Max tree depth: {max_td}")
            break

    print("\n" + "=" * 72)
    print("PARAMETER SUMMARY")
    print("=" * 72)
    summary = az.summary(idata, var_names=var_names, hdi_prob=0.95)
    print(summary.to_string())

    warnings = convergence_warnings(idata, var_names)
    if warnings:
        print("\n** WARNING: sampler diagnostics")
        for w in warnings:
            print(f"    {w}")
    else:
        print(f"\nAll parameters converged (R-hat <= {RHAT_MAX}, ESS_bulk >= {ESS_MIN})")


# =========================================================================
# Divergence scatter-plots
# =========================================================================


def plot_divergences(idata: az.InferenceData, variant: str | ModelVariant,
                     fname: str | None = None) -> None:
    """Bivariate scatter-plots highlighting divergent transitions."""
    variant = get_variant(variant)
    diverging = idata.sample_stats.diverging.values
    n_divs = int(diverging.sum())
    if n_divs == 0:
        print("\nNo divergent transitions — skipping divergence plot.")
        return

    print(f"\nPlotting {n_divs} divergent transitions…")
    div_flat = diverging.flatten().astype(bool)

    pairs: list[tuple[str, str, str, str]] = [
        ("lambda", "b", "λ", "b"),
        ("b", "sigma_proc", "b", "σ_proc"),
    ]
    if variant.heavy_tailed:
        pairs.append(("nu", "sigma_proc", "ν", "σ_proc"))
    if variant.observation_error:
        pairs.append(("sigma_obs", "sigma_proc", "σ_obs", "σ_proc"))

    n_pairs = len(pairs)
    fig, axes = plt.subplots(1, n_pairs, figsize=(5 * n_pairs, 4.5), squeeze=False)

    for ax, (p1, p2, l1, l2) in zip(axes[0], pairs):
        v1 = idata.posterior[p1].values.flatten()
        v2 = idata.posterior[p2].values.flatten()

        ax.scatter(v1[~div_flat], v2[~div_flat], s=2, alpha=0.1, c="steelblue", rasterized=True)
        ax.scatter(
            v1[div_flat],
            v2[div_flat],
            s=15,
            alpha=0.8,
            c="limegreen",
            edgecolors="darkgreen",
            lw=0.5,
            label=f"Divergent (n={n_divs})",
            zorder=10,
        )
        if p1 == "nu":
            ax.axvline(NU_CUTOFF, color="k", lw=0.5, ls="--")
        ax.set_xlabel(l1)
        ax.set_ylabel(l2)
        ax.legend(fontsize=8)

    fig.suptitle(f"Divergence Diagnostics: {variant.label}", fontsize=13, fontweight="bold")
    plt.tight_layout()
    fname = fname or f"divergences_{variant.name}.png"
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    fig.savefig(OUTPUT_DIR / fname, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {OUTPUT_DIR / fname}")
