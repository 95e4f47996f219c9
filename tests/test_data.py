"""Tests for heavy_tails.data — series loading and validation."""

import numpy as np
import polars as pl
import pytest

from heavy_tails.config import Priors
from heavy_tails.data import SeriesError, build_model_data, load_series, series_from_frame


def _write_csv(path, text: str):
    path.write_text(text)
    return path


class TestLoadSeries:
    """Tests for load_series."""

    def test_selects_and_relabels_columns(self, tmp_path):
        """Extra columns are dropped; source columns become year/index."""
        fpath = _write_csv(
            tmp_path / "pop.csv",
            "site,Year,count\nA,2001,10\nA,2002,20\nA,2003,40\n",
        )
        series = load_series(fpath, year_col="Year", index_col="count", verbose=False)

        assert series.columns == ["year", "index", "log_index"]
        assert series["year"].to_list() == [2001, 2002, 2003]
        np.testing.assert_allclose(series["log_index"].to_numpy(), np.log([10, 20, 40]))

    def test_sorts_by_year(self, tmp_path):
        fpath = _write_csv(tmp_path / "pop.csv", "year,index\n2003,3\n2001,1\n2002,2\n")
        series = load_series(fpath, verbose=False)
        assert series["year"].to_list() == [2001, 2002, 2003]
        assert series["index"].to_list() == [1.0, 2.0, 3.0]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_series(tmp_path / "nope.csv")

    def test_missing_column_raises(self, tmp_path):
        fpath = _write_csv(tmp_path / "pop.csv", "year,abundance\n2001,1\n2002,2\n2003,3\n")
        with pytest.raises(SeriesError, match="Missing column"):
            load_series(fpath, verbose=False)

    def test_non_numeric_index_raises(self, tmp_path):
        fpath = _write_csv(tmp_path / "pop.csv", "year,index\n2001,1\n2002,lots\n2003,3\n")
        with pytest.raises(SeriesError):
            load_series(fpath, verbose=False)

    def test_prints_summary(self, tmp_path, capsys):
        fpath = _write_csv(tmp_path / "pop.csv", "year,index\n2001,1\n2002,2\n2003,3\n")
        load_series(fpath)
        assert "N = 3 years" in capsys.readouterr().out


class TestSeriesFromFrame:
    """Validation rules for in-memory series."""

    def test_non_positive_index_raises(self):
        frame = pl.DataFrame({"year": [1, 2, 3], "index": [1.0, 0.0, 2.0]})
        with pytest.raises(SeriesError, match="strictly positive"):
            series_from_frame(frame)

    def test_duplicate_years_raise(self):
        frame = pl.DataFrame({"year": [1, 2, 2, 3], "index": [1.0, 2.0, 3.0, 4.0]})
        with pytest.raises(SeriesError, match="Duplicated years"):
            series_from_frame(frame)

    def test_nulls_raise(self):
        frame = pl.DataFrame({"year": [1, 2, 3], "index": [1.0, None, 2.0]})
        with pytest.raises(SeriesError, match="missing"):
            series_from_frame(frame)

    def test_too_short_raises(self):
        frame = pl.DataFrame({"year": [1, 2], "index": [1.0, 2.0]})
        with pytest.raises(SeriesError, match="at least 3"):
            series_from_frame(frame)

    def test_series_error_is_value_error(self):
        assert issubclass(SeriesError, ValueError)


class TestBuildModelData:
    """Tests for the model data record."""

    def test_contains_series_and_priors(self, series):
        data = build_model_data(series, Priors(nu_rate=0.05))

        assert data["N"] == series.height
        np.testing.assert_allclose(data["y"], series["log_index"].to_numpy())
        assert data["years"].tolist() == series["year"].to_list()
        assert data["nu_rate"] == 0.05
        assert data["nu_lower"] == 2.0

    def test_default_priors(self, series):
        data = build_model_data(series)
        assert data["nu_rate"] == 0.01


class TestNonFiniteAndGaps:
    """NaN/inf index values and broken year sequences are rejected up front."""

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_non_finite_index_in_frame_raises(self, bad):
        frame = pl.DataFrame({"year": [2001, 2002, 2003, 2004], "index": [1.0, bad, 3.0, 4.0]})
        with pytest.raises(SeriesError, match="finite"):
            series_from_frame(frame)

    @pytest.mark.parametrize("bad", ["NaN", "inf"])
    def test_non_finite_index_in_csv_raises(self, tmp_path, bad):
        fpath = _write_csv(
            tmp_path / "pop.csv", f"year,index\n2001,1\n2002,{bad}\n2003,3\n2004,4\n"
        )
        with pytest.raises(SeriesError, match="finite"):
            load_series(fpath, verbose=False)

    def test_year_gap_raises(self):
        frame = pl.DataFrame({"year": [1970, 1971, 1973, 1974], "index": [1.0, 2.0, 3.0, 4.0]})
        with pytest.raises(SeriesError, match="consecutive"):
            series_from_frame(frame)

    def test_unsorted_consecutive_years_accepted(self):
        frame = pl.DataFrame({"year": [1972, 1970, 1971], "index": [3.0, 1.0, 2.0]})
        assert series_from_frame(frame)["year"].to_list() == [1970, 1971, 1972]
