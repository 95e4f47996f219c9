"""Tests for heavy_tails.diagnostics — convergence reporting."""

from heavy_tails.diagnostics import (
    convergence_warnings,
    parameter_names,
    plot_divergences,
    print_diagnostics,
)


class TestParameterNames:

    def test_heavy_tailed_autoregressive(self):
        assert parameter_names("gompertz_t") == ["lambda", "b", "sigma_proc", "nu"]

    def test_normal_state_space(self):
        assert parameter_names("gompertz_ss_normal") == ["lambda", "b", "sigma_proc", "sigma_obs"]


class TestConvergenceWarnings:

    def test_well_mixed_chains_pass(self, series, fake_idata):
        idata = fake_idata(series, n_chains=4, n_draws=1000)
        assert convergence_warnings(idata, ["lambda", "b", "sigma_proc"]) == []

    def test_divergences_reported(self, series, fake_idata):
        idata = fake_idata(series, n_divergent=7)
        warnings = convergence_warnings(idata, ["b"])
        assert any("7 divergent" in w for w in warnings)

    def test_stuck_chain_reported(self, series, fake_idata):
        idata = fake_idata(series, n_chains=4, n_draws=1000)
        idata.posterior["b"].values[0] += 5.0
        warnings = convergence_warnings(idata, ["b"])
        assert any(w.startswith("b: R-hat") for w in warnings)

    def test_print_diagnostics_is_non_fatal(self, series, fake_idata, capsys):
        idata = fake_idata(series, n_divergent=3)
        print_diagnostics(idata, "gompertz_t")
        out = capsys.readouterr().out
        assert "Divergences: 3" in out
        assert "WARNING" in out


class TestPlotDivergences:

    def test_skips_without_divergences(self, series, fake_idata, output_dir, capsys):
        plot_divergences(fake_idata(series), "gompertz_t")
        assert "skipping" in capsys.readouterr().out
        assert not list(output_dir.glob("*.png"))

    def test_writes_png(self, series, fake_idata, output_dir):
        plot_divergences(fake_idata(series, n_divergent=5), "gompertz_t")
        assert (output_dir / "divergences_gompertz_t.png").exists()
