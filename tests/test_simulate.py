"""Tests for heavy_tails.simulate and heavy_tails.config."""

import numpy as np
import pytest

from heavy_tails.config import MODELS, ModelVariant, get_variant
from heavy_tails.simulate import simulate_gompertz, with_shocks


class TestSimulateGompertz:

    def test_shape_and_years(self):
        series = simulate_gompertz(n_years=25, start_year=1950, random_seed=1)
        assert series.height == 25
        assert series["year"].to_list() == list(range(1950, 1975))
        assert (series["index"] > 0).all()

    def test_reproducible_with_seed(self):
        a = simulate_gompertz(random_seed=5, nu=3.0)
        b = simulate_gompertz(random_seed=5, nu=3.0)
        np.testing.assert_array_equal(a["log_index"].to_numpy(), b["log_index"].to_numpy())

    def test_zero_noise_is_deterministic_gompertz(self):
        series = simulate_gompertz(n_years=5, lam=1.0, b=0.5, sigma_proc=0.0, x0=0.0)
        np.testing.assert_allclose(
            series["log_index"].to_numpy(), [0.0, 1.0, 1.5, 1.75, 1.875]
        )

    def test_starts_at_stationary_mean(self):
        series = simulate_gompertz(lam=1.5, b=0.5, random_seed=2)
        assert series["log_index"][0] == pytest.approx(3.0)

    def test_too_short_raises(self):
        with pytest.raises(ValueError):
            simulate_gompertz(n_years=2)


class TestWithShocks:

    def test_only_listed_years_move(self):
        series = simulate_gompertz(n_years=10, start_year=2000, random_seed=3)
        shocked = with_shocks(series, [2004], log_shock=-2.0)

        diff = shocked["log_index"].to_numpy() - series["log_index"].to_numpy()
        expected = np.zeros(10)
        expected[4] = -2.0
        np.testing.assert_allclose(diff, expected, atol=1e-12)
        np.testing.assert_allclose(
            shocked["index"].to_numpy(), np.exp(shocked["log_index"].to_numpy())
        )


class TestModelRegistry:

    def test_four_variants(self):
        assert set(MODELS) == {
            "gompertz_t",
            "gompertz_normal",
            "gompertz_ss_t",
            "gompertz_ss_normal",
        }

    def test_heavy_tailed_flag(self):
        assert get_variant("gompertz_ss_t").heavy_tailed
        assert not get_variant("gompertz_normal").heavy_tailed

    def test_variant_instance_passes_through(self):
        v = ModelVariant("custom", "Custom", "normal", True)
        assert get_variant(v) is v

    def test_unknown_name_lists_known(self):
        with pytest.raises(KeyError, match="gompertz_t"):
            get_variant("logistic")
