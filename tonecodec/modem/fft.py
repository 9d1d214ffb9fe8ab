"""hextone — transforms used by the frequency detector.

Radix-2 Cooley–Tukey
--------------------
The reference analysis window (8820 samples) is not a power of two, so plain
recursive halving never reaches a length-1 base case cleanly.  We zero-pad the
window to the next power of two (16384) and run an iterative, numpy-vectorised
decimation-in-time FFT:

  1. reshape the padded input (N,) → (N_MIN, N/N_MIN); column c is the
     sub-sequence x[c], x[c + N/N_MIN], …  (stride N/N_MIN)
  2. direct DFT of every column with an (N_MIN × N_MIN) matrix
  3. repeatedly merge column pairs (c, c + cols/2) with one butterfly stage
     until a single column of length N remains

Zero-padding interpolates the spectrum; callers MUST convert bins with the
padded length (sample_rate / N), not the window length.

General length
--------------
:func:`fft_general` defers to scipy.fft (mixed-radix / Bluestein) and keeps
the exact window length as the bin count.
"""

import numpy as np
import scipy.fft as _spfft
from numpy.typing import NDArray

from ..profiles import TRANSFORM_RADIX2, TRANSFORM_SCIPY

# Columns are transformed directly below this size; butterflies above it.
_N_MIN = 32


def is_pow2(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def next_pow2(n: int) -> int:
    """Smallest power of two ≥ *n* (n ≥ 1)."""
    if n < 1:
        raise ValueError(f"length must be ≥ 1, got {n}")
    return 1 << (n - 1).bit_length()


def fft_radix2(x: NDArray) -> NDArray[np.complexfloating]:
    """Cooley–Tukey FFT of a power-of-two length sequence.

    Raises ValueError if ``len(x)`` is not a power of two.
    """
    x = np.asarray(x, dtype=complex)
    n = x.shape[0]
    if not is_pow2(n):
        raise ValueError(f"radix-2 FFT needs a power-of-two length, got {n}")

    n_min = min(n, _N_MIN)
    k     = np.arange(n_min)
    dft   = np.exp(-2j * np.pi * k[:, np.newaxis] * k / n_min)
    X     = dft @ x.reshape((n_min, -1))

    # Butterfly: X_new[k] = E[k] + W^k O[k],  X_new[k + M] = E[k] − W^k O[k]
    while X.shape[0] < n:
        half    = X.shape[1] // 2
        even    = X[:, :half]
        odd     = X[:, half:]
        twiddle = np.exp(-1j * np.pi * np.arange(X.shape[0]) / X.shape[0])[:, np.newaxis]
        X       = np.vstack([even + twiddle * odd, even - twiddle * odd])

    return X.ravel()


def fft_padded(x: NDArray) -> NDArray[np.complexfloating]:
    """Zero-pad *x* to the next power of two and run :func:`fft_radix2`."""
    x = np.asarray(x, dtype=complex)
    n = next_pow2(len(x))
    if n != len(x):
        x = np.concatenate([x, np.zeros(n - len(x), dtype=complex)])
    return fft_radix2(x)


def fft_general(x: NDArray) -> NDArray[np.complexfloating]:
    """Any-length FFT, bin count = ``len(x)``."""
    return _spfft.fft(np.asarray(x))


def transform_length(window_len: int, transform: str) -> int:
    """Number of output bins the given transform produces for a window."""
    if transform == TRANSFORM_RADIX2:
        return next_pow2(window_len)
    if transform == TRANSFORM_SCIPY:
        return window_len
    raise ValueError(f"Unknown transform '{transform}'")


def run_transform(x: NDArray, transform: str) -> NDArray[np.complexfloating]:
    if transform == TRANSFORM_RADIX2:
        return fft_padded(x)
    if transform == TRANSFORM_SCIPY:
        return fft_general(x)
    raise ValueError(f"Unknown transform '{transform}'")
