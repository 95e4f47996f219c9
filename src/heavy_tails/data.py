# ---------------------------------------------------------------------------
# heavy_tails.data — Series loading and model data records
# ---------------------------------------------------------------------------
"""Load a (year, index) population series from CSV, validate it, and
package the log-transformed values with prior hyperparameters for the
model builder."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import numpy as np
import polars as pl

from .config import DEFAULT_PRIORS, Priors


class SeriesError(ValueError):
    """Raised when an observation series is malformed."""


def load_series(
    path: str | Path,
    year_col: str = "year",
    index_col: str = "index",
    verbose: bool = True,
) -> pl.DataFrame:
    """Read a population series from *path*.

    Parameters
    ----------
    path : str or Path
        CSV file with at least *year_col* and *index_col*.  Other
        columns are ignored.
    year_col, index_col : str
        Source column names; relabelled to ``year`` and ``index``.
    verbose : bool
        Print a one-block summary of the loaded series.

    Returns
    -------
    pl.DataFrame
        Columns ``year`` (Int64), ``index`` and ``log_index`` (Float64),
        sorted by year. Years must form an unbroken annual sequence.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SeriesError
        If the file cannot be parsed into a valid series.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Series file not found: {path}")

    try:
        raw = pl.read_csv(str(path))
    except pl.exceptions.PolarsError as e:
        raise SeriesError(f"Could not parse {path}: {e}") from e

    series = series_from_frame(raw, year_col=year_col, index_col=index_col)

    if verbose:
        years = series["year"]
        print(f"Series {path.name}: N = {series.height} years ({years.min()} → {years.max()})")
        print(f"  mean log index: {series['log_index'].mean():+.4f}")
        print(f"  range:          [{series['index'].min():.4g}, {series['index'].max():.4g}]")

    return series


def series_from_frame(
    frame: pl.DataFrame,
    year_col: str = "year",
    index_col: str = "index",
) -> pl.DataFrame:
    """Select, relabel, validate and log-transform an in-memory series."""
    missing = [c for c in (year_col, index_col) if c not in frame.columns]
    if missing:
        raise SeriesError(f"Missing column(s) {missing}; found {frame.columns}")

    try:
        series = frame.select(
            pl.col(year_col).cast(pl.Int64).alias("year"),
            pl.col(index_col).cast(pl.Float64).alias("index"),
        )
    except pl.exceptions.PolarsError as e:
        raise SeriesError(f"Non-numeric year or index values: {e}") from e

    if series.height < 3:
        raise SeriesError(f"Need at least 3 observations, got {series.height}")
    if series.null_count().sum_horizontal().item() > 0:
        raise SeriesError("Series contains missing year or index values")
    if not series["index"].is_finite().all():
        raise SeriesError("Index values must be finite (no NaN or inf)")
    if (series["index"] <= 0).any():
        raise SeriesError("Index values must be strictly positive to log-transform")
    if series["year"].is_duplicated().any():
        dupes = series.filter(pl.col("year").is_duplicated())["year"].unique().sort().to_list()
        raise SeriesError(f"Duplicated years: {dupes}")

    series = series.sort("year")
    # Gompertz recursion steps one year per row
    gaps = series.filter(pl.col("year").diff() != 1)["year"].to_list()
    if gaps:
        raise SeriesError(f"Years must be consecutive; gap before {gaps}")

    return series.with_columns(pl.col("index").log().alias("log_index"))


def build_model_data(series: pl.DataFrame, priors: Priors | None = None) -> dict:
    """Package a series and prior hyperparameters for :func:`build_model`.

    Returns
    -------
    dict
        ``N``, ``years``, ``y`` (log index) plus every field of *priors*.
    """
    if priors is None:
        priors = DEFAULT_PRIORS

    y = series["log_index"].to_numpy().astype(float)
    return dict(
        N=len(y),
        years=series["year"].to_numpy().astype(int),
        y=y,
        **asdict(priors),
    )


def model_coords(data: dict) -> dict[str, np.ndarray]:
    """PyMC coordinates keyed on the observation year."""
    return {"year": data["years"]}
