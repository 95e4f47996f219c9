"""Tests for heavy_tails.residuals — thresholds and extreme-year flags."""

import polars as pl
import pytest
from scipy import stats as sp_stats

from heavy_tails.residuals import (
    compute_residuals,
    flag_residuals,
    flag_threshold,
    plot_residuals,
    print_flagged,
)


def _summary(residuals: list[float]) -> pl.DataFrame:
    n = len(residuals)
    return pl.DataFrame(
        {
            "year": list(range(2000, 2000 + n)),
            "log_index": [0.0] * n,
            "estimate": [-r for r in residuals],
        }
    ).pipe(compute_residuals)


class TestFlagThreshold:

    def test_normal_quantile_times_sigma(self):
        assert flag_threshold(0.2, 0.01) == pytest.approx(sp_stats.norm.ppf(0.99) * 0.2)

    def test_scales_linearly_with_sigma(self):
        assert flag_threshold(2.0, 0.05) == pytest.approx(2 * flag_threshold(1.0, 0.05))

    @pytest.mark.parametrize("tail_prob", [0.0, 0.5, 1.2, -0.1])
    def test_invalid_tail_prob_raises(self, tail_prob):
        with pytest.raises(ValueError):
            flag_threshold(1.0, tail_prob)

    def test_non_positive_sigma_raises(self):
        with pytest.raises(ValueError):
            flag_threshold(0.0)


class TestFlagResiduals:

    def test_residual_equals_log_obs_minus_estimate(self):
        summary = _summary([0.1, -0.2])
        assert summary["residual"].to_list() == pytest.approx([0.1, -0.2])

    def test_exactly_at_threshold_not_flagged(self):
        threshold = flag_threshold(0.3, 0.01)
        summary = pl.DataFrame({"residual": [threshold, -threshold]})
        assert flag_residuals(summary, threshold)["flagged"].to_list() == [False, False]

    def test_beyond_threshold_flagged_both_sides(self):
        threshold = 0.5
        summary = _summary([0.51, -0.6, 0.49, 0.0])
        flagged = flag_residuals(summary, threshold)["flagged"].to_list()
        assert flagged == [True, True, False, False]

    def test_print_flagged_lists_years(self, capsys):
        summary = flag_residuals(_summary([0.0, 2.0, 0.1]), 1.0)
        print_flagged(summary, 1.0)
        out = capsys.readouterr().out
        assert "2001" in out
        assert "2000:" not in out

    def test_print_flagged_none(self, capsys):
        summary = flag_residuals(_summary([0.0, 0.1, 0.1]), 1.0)
        print_flagged(summary, 1.0)
        assert "No residuals beyond threshold" in capsys.readouterr().out


class TestPlotResiduals:

    def test_writes_png(self, output_dir):
        summary = flag_residuals(_summary([0.0, 2.0, -0.3, 0.2]), 1.0)
        plot_residuals(summary, 1.0, "test", fname="resid.png")
        assert (output_dir / "resid.png").exists()
