# ---------------------------------------------------------------------------
# heavy_tails.residuals — Residuals, extreme-event flags, residual plots
# ---------------------------------------------------------------------------
from __future__ import annotations

import matplotlib.pyplot as plt
import polars as pl
from scipy import stats as sp_stats

from .config import FLAG_TAIL_PROB, OUTPUT_DIR


def compute_residuals(summary: pl.DataFrame) -> pl.DataFrame:
    """Add ``residual = log_index − estimate`` to a prediction summary."""
    return summary.with_columns(
        (pl.col("log_index") - pl.col("estimate")).alias("residual")
    )


def flag_threshold(sigma: float, tail_prob: float = FLAG_TAIL_PROB) -> float:
    """Residual magnitude with upper-tail probability *tail_prob* under
    ``N(0, sigma)``.

    *sigma* is normally the posterior median of ``sigma_proc``.
    """
    if not 0.0 < tail_prob < 0.5:
        raise ValueError(f"tail_prob must be in (0, 0.5), got {tail_prob}")
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")
    return float(sp_stats.norm.ppf(1.0 - tail_prob) * sigma)


def flag_residuals(summary: pl.DataFrame, threshold: float) -> pl.DataFrame:
    """Mark residuals strictly beyond ±*threshold*.

    No multiple-comparison correction is applied.
    """
    return summary.with_columns(
        (pl.col("residual").abs() > threshold).alias("flagged")
    )


def print_flagged(summary: pl.DataFrame, threshold: float) -> None:
    """List the flagged years."""
    flagged = summary.filter(pl.col("flagged"))
    print(f"\nResidual threshold ±{threshold:.4f} (log scale)")
    if flagged.height == 0:
        print("  No residuals beyond threshold.")
        return
    for row in flagged.iter_rows(named=True):
        print(f"  {row['year']}: residual = {row['residual']:+.4f}")


def plot_residuals(summary: pl.DataFrame, threshold: float, title: str,
                   fname: str = "residuals.png") -> None:
    """Residuals over time with ±threshold guides."""
    years = summary["year"].to_numpy()
    resid = summary["residual"].to_numpy()
    flagged = summary["flagged"].to_numpy().astype(bool)

    fig, ax = plt.subplots(1, 1, figsize=(10, 4))
    ax.scatter(years[~flagged], resid[~flagged], s=14, c="steelblue", alpha=0.8)
    ax.scatter(years[flagged], resid[flagged], s=30, c="red", alpha=0.9,
               label=f"Flagged (n={int(flagged.sum())})", zorder=5)
    _resid_lines(ax, threshold, title)
    if flagged.any():
        ax.legend(fontsize=8)

    plt.tight_layout()
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    fig.savefig(OUTPUT_DIR / fname, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {OUTPUT_DIR / fname}")


def _resid_lines(ax, threshold: float, title: str) -> None:
    """Add zero-line, ±threshold guides, and axis labels."""
    ax.axhline(0, color="k", lw=0.5, ls="--")
    ax.axhline(threshold, color="red", lw=0.5, ls=":", alpha=0.5)
    ax.axhline(-threshold, color="red", lw=0.5, ls=":", alpha=0.5)
    ax.set_xlabel("Year")
    ax.set_ylabel("Residual (log)")
    ax.set_title(title)
