"""Shared fixtures: headless plotting, a temporary output directory, and
small synthetic posteriors built with ``az.from_dict``."""

import matplotlib

matplotlib.use("Agg")

import arviz as az
import numpy as np
import polars as pl
import pytest

from heavy_tails.data import series_from_frame

YEARS = np.arange(1990, 2000)


@pytest.fixture
def series() -> pl.DataFrame:
    """Ten-year series with one crash in 1995."""
    index = [100.0, 110.0, 95.0, 105.0, 120.0, 30.0, 70.0, 90.0, 100.0, 108.0]
    return series_from_frame(pl.DataFrame({"year": YEARS, "index": index}))


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Redirect every module's OUTPUT_DIR to a temporary directory."""
    import heavy_tails.batch
    import heavy_tails.checks
    import heavy_tails.diagnostics
    import heavy_tails.plots
    import heavy_tails.residuals
    import heavy_tails.sensitivity

    for mod in (
        heavy_tails.batch,
        heavy_tails.checks,
        heavy_tails.diagnostics,
        heavy_tails.plots,
        heavy_tails.residuals,
        heavy_tails.sensitivity,
    ):
        monkeypatch.setattr(mod, "OUTPUT_DIR", tmp_path)
    return tmp_path


def make_idata(
    series: pl.DataFrame,
    n_chains: int = 4,
    n_draws: int = 500,
    heavy_tailed: bool = True,
    n_divergent: int = 0,
    years: np.ndarray | None = None,
    seed: int = 0,
) -> az.InferenceData:
    """Fake fit result: ``pred`` scattered around the observed log index."""
    rng = np.random.default_rng(seed)
    y = series["log_index"].to_numpy()
    if years is None:
        years = series["year"].to_numpy()

    posterior = {
        "pred": y[None, None, :] + rng.normal(0, 0.1, size=(n_chains, n_draws, len(y))),
        "lambda": rng.normal(1.5, 0.2, size=(n_chains, n_draws)),
        "b": rng.normal(0.6, 0.05, size=(n_chains, n_draws)),
        "sigma_proc": np.abs(rng.normal(0.3, 0.03, size=(n_chains, n_draws))),
    }
    if heavy_tailed:
        posterior["nu"] = 2.0 + rng.exponential(5.0, size=(n_chains, n_draws))

    diverging = np.zeros((n_chains, n_draws), dtype=bool)
    diverging.flat[:n_divergent] = True

    return az.from_dict(
        posterior=posterior,
        sample_stats={"diverging": diverging},
        coords={"year": years},
        dims={"pred": ["year"]},
    )


@pytest.fixture
def fake_idata():
    """Factory for synthetic fit results (see :func:`make_idata`)."""
    return make_idata
