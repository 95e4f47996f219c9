# ---------------------------------------------------------------------------
# heavy_tails.config — Model variants, priors, and project constants
# ---------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root
DATA_DIR = BASE_DIR / "data"
OUTPUT_DIR = BASE_DIR / "output"

# ---------------------------------------------------------------------------
# Analysis constants
# ---------------------------------------------------------------------------

# nu below this value is read as "heavy-tailed" process error
NU_CUTOFF = 10.0

# Upper-tail probability used to flag extreme residuals
FLAG_TAIL_PROB = 0.01

# Interval reported by the posterior summaries (2.5% / 97.5%)
SUMMARY_QUANTILES = (0.025, 0.5, 0.975)

# Plot colours — one per model variant, cycled if more variants are added
MODEL_COLORS = [
    "#1f77b4",  # blue
    "#d62728",  # red
    "#2ca02c",  # green
    "#9467bd",  # purple
    "#8c564b",  # brown
]


# ---------------------------------------------------------------------------
# Priors
# ---------------------------------------------------------------------------


@dataclass
class Priors:
    """Prior hyperparameters shared by every model variant.

    Parameters
    ----------
    nu_rate : float
        Rate of the exponential prior on the degrees of freedom *nu*.
    nu_lower : float
        Lower truncation of *nu*.  With the exponential being memoryless
        the prior is ``nu_lower + Exponential(nu_rate)``.
    lambda_sd : float
        Scale of the normal prior on the Gompertz intercept.
    b_lower, b_upper : float
        Uniform bounds on the density-dependence coefficient *b*.
    sigma_scale : float
        Scale of the half-Cauchy priors on the process- and
        observation-error standard deviations.
    init_sd : float
        Scale of the prior on the first latent state (state-space only),
        centred on the first log observation.
    """

    nu_rate: float = 0.01
    nu_lower: float = 2.0
    lambda_sd: float = 10.0
    b_lower: float = -1.0
    b_upper: float = 2.0
    sigma_scale: float = 2.5
    init_sd: float = 2.0


DEFAULT_PRIORS = Priors()


# ---------------------------------------------------------------------------
# Model variants
# ---------------------------------------------------------------------------


@dataclass
class ModelVariant:
    """Declarative definition of one Gompertz model.

    Adding a new variant requires only a new entry in ``MODELS``.
    :func:`heavy_tails.model.build_model` reads these fields.

    Parameters
    ----------
    name : str
        Registry key (e.g. ``'gompertz_t'``).
    label : str
        Display name used in tables and plots.
    process_error : ``'student_t'`` | ``'normal'``
        Distribution of the process deviations.
    observation_error : bool
        ``True`` for the state-space form with a latent state and normal
        observation error; ``False`` for the autoregressive form fitted
        directly to the log observations.
    """

    name: str
    label: str
    process_error: Literal["student_t", "normal"] = "student_t"
    observation_error: bool = False

    @property
    def heavy_tailed(self) -> bool:
        return self.process_error == "student_t"


MODELS: dict[str, ModelVariant] = {
    v.name: v
    for v in [
        ModelVariant("gompertz_t", "Gompertz (t)", "student_t", False),
        ModelVariant("gompertz_normal", "Gompertz (normal)", "normal", False),
        ModelVariant("gompertz_ss_t", "Gompertz state-space (t)", "student_t", True),
        ModelVariant("gompertz_ss_normal", "Gompertz state-space (normal)", "normal", True),
    ]
}


def get_variant(name: str | ModelVariant) -> ModelVariant:
    """Look up a model variant by name; variants pass straight through."""
    if isinstance(name, ModelVariant):
        return name
    try:
        return MODELS[name]
    except KeyError:
        raise KeyError(
            f"Unknown model variant {name!r}; known: {sorted(MODELS)}"
        ) from None
