"""hextone — dominant-frequency detector for one analysis window.

Pipeline per window (length FFT_SIZE)
-------------------------------------
  samples
    → Hann window (same formula as synthesis)
    → FFT (radix-2 on the zero-padded window, or general length)   → M bins
    → |X[k]| for k = 1 … M/2 − 2  (DC and the top bins excluded)
    → strongest strict local maximum k*
    → parabolic fit through |X[k*−1]|, |X[k*]|, |X[k*+1]|
    → f = (k* + δ) · SR / M

Parabolic interpolation
-----------------------
With α, β, γ the magnitudes at k*−1, k*, k*+1 the vertex of the parabola
through the three points lies at

    δ = 0.5 · (α − γ) / (α − 2β + γ)          −0.5 < δ < 0.5

Because β is a strict local maximum the denominator is always negative.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ..profiles import ToneConfig
from .fft import run_transform, transform_length
from .tones import hann


def spectrum(
    window: NDArray[np.floating],
    config: ToneConfig,
) -> NDArray[np.float64]:
    """Magnitude spectrum of one Hann-windowed analysis window.

    Returns all M bins (M = padded or exact transform length).
    """
    window = np.asarray(window, dtype=np.float64)
    if len(window) != config.fft_size:
        raise ValueError(
            f"analysis window must be {config.fft_size} samples, got {len(window)}"
        )
    return np.abs(run_transform(window * hann(len(window)), config.transform))


def find_peak(magnitudes: NDArray[np.floating]) -> Optional[int]:
    """Index of the strongest strict local maximum in bins 1 … M/2 − 2.

    Returns None when no interior bin beats both of its neighbours
    (silence, or a spectrum that only rises towards an edge).
    """
    m    = len(magnitudes)
    hi   = m // 2 - 1                       # exclusive upper bound
    if hi < 2:
        return None

    mid   = magnitudes[1:hi]
    left  = magnitudes[0:hi - 1]
    right = magnitudes[2:hi + 1]
    is_peak = (mid > left) & (mid > right)
    if not np.any(is_peak):
        return None

    candidates = np.where(is_peak, mid, -np.inf)
    return int(np.argmax(candidates)) + 1


def parabolic_offset(alpha: float, beta: float, gamma: float) -> float:
    """Sub-bin vertex offset of the parabola through three magnitudes."""
    denom = alpha - 2.0 * beta + gamma
    if denom == 0.0:
        return 0.0
    return 0.5 * (alpha - gamma) / denom


def detect_frequency(
    window: NDArray[np.floating],
    config: ToneConfig,
) -> Optional[float]:
    """Dominant frequency (Hz) in *window*, or None if no tone is present."""
    mags = spectrum(window, config)
    peak = find_peak(mags)
    if peak is None:
        return None

    delta = parabolic_offset(
        float(mags[peak - 1]),
        float(mags[peak]),
        float(mags[peak + 1]),
    )
    n_bins = transform_length(config.fft_size, config.transform)
    return (peak + delta) * config.sample_rate / n_bins
