"""awgn_gmi: MI and GMI (BICM capacity) of 2D constellations over AWGN by Gauss-Hermite quadrature."""

from .quadrature import GaussHermiteTable, gauss_hermite, GH10, DEFAULT_GH_ORDER
from .constellation import (
    InvalidConstellationSize,
    bits_per_symbol,
    gray_code,
    gray_decode,
    symbol_energy,
    normalize_energy,
    sigma_from_snr_db,
    validate_constellation,
    qam_constellation,
    psk_constellation,
)
from .labeling import insert_zero, coset_indices
from .evaluator import (
    DegenerateNoiseError,
    noise_regime,
    qam_eval_mi,
    qam_eval_gmi,
    qam_eval_gmi_per_bit,
)
from .sweep import GmiPoint, GmiSweepResult, DegenerationWarning, sweep_mi_gmi, evaluate

__version__ = "0.1.0"
