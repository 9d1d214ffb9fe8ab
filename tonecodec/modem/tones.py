"""hextone — tone synthesis, quantization and the per-depth tone table.

Each nibble i ∈ [0, 16) is a Hann-windowed sine at f_i = BASE_FREQ + i·FREQ_STEP
lasting one tone (N = SAMPLE_RATE × TONE_DURATION samples):

    s[t] = A · sin(2π f_i t / SR) · 0.5·(1 − cos(2π t / (N − 1)))

The window takes the tone to zero at both ends, so concatenated tones never
click and each analysis window holds a single clean spectral line.

Quantization (value truncated toward zero first)
------------------------------------------------
  8-bit  : unsigned offset-binary, byte = s + 127
  16-bit : signed big-endian int16, no bias

:func:`dequantize` is the exact inverse scaling back to [-1.0, 1.0] floats.
"""

import numpy as np
from numpy.typing import NDArray

from ..profiles import N_TONES, SampleDepth, ToneConfig
from .mapping import nibble_to_freq


def hann(n: int) -> NDArray[np.float64]:
    """Symmetric Hann window, w[t] = 0.5·(1 − cos(2πt/(n−1)))."""
    return np.hanning(n)


def synthesize_tone(
    freq: float,
    depth: SampleDepth,
    config: ToneConfig,
) -> NDArray[np.int64]:
    """Integer samples of one windowed tone in *depth*'s native range (no bias)."""
    n = config.samples_per_tone
    t = np.arange(n, dtype=np.float64)
    wave = config.amplitude(depth) * np.sin(2.0 * np.pi * freq * t / config.sample_rate)
    wave *= hann(n)
    return np.trunc(wave).astype(np.int64)


def quantize(
    samples: NDArray[np.integer],
    depth: SampleDepth,
    config: ToneConfig,
) -> bytes:
    """Pack integer samples into the raw byte layout for *depth*."""
    samples = np.asarray(samples, dtype=np.int64)
    if depth is SampleDepth.PCM16:
        return samples.astype(">i2").tobytes()
    return (samples + config.bias_8bit).astype(np.uint8).tobytes()


def dequantize(
    raw: bytes,
    depth: SampleDepth,
    config: ToneConfig,
) -> NDArray[np.float64]:
    """Raw sample bytes → normalised float samples.

    A trailing byte that does not fill a whole 16-bit sample is dropped.
    """
    if depth is SampleDepth.PCM16:
        n = len(raw) // 2
        pcm = np.frombuffer(raw, dtype=">i2", count=n)
        return pcm.astype(np.float64) / config.amplitude_16bit
    pcm = np.frombuffer(raw, dtype=np.uint8)
    return (pcm.astype(np.float64) - config.bias_8bit) / config.amplitude_8bit


class ToneTable:
    """The 16 encoded tone buffers for one depth.  Read-only after build."""

    __slots__ = ("depth", "config", "_tones")

    def __init__(self, depth: SampleDepth, config: ToneConfig, tones: tuple[bytes, ...]):
        if len(tones) != N_TONES:
            raise ValueError(f"tone table needs {N_TONES} entries, got {len(tones)}")
        self.depth  = depth
        self.config = config
        self._tones = tuple(tones)

    def __getitem__(self, nibble: int) -> bytes:
        return self._tones[nibble]

    def __len__(self) -> int:
        return N_TONES

    def __iter__(self):
        return iter(self._tones)

    @property
    def frequencies(self) -> list[float]:
        return [nibble_to_freq(i, self.config) for i in range(N_TONES)]

    def __repr__(self) -> str:
        return (
            f"ToneTable({self.depth.value}-bit, {N_TONES} tones × "
            f"{self.config.tone_bytes(self.depth)}B, "
            f"{self.config.base_freq:g}–{self.config.max_freq:g} Hz)"
        )


def build_tone_table(depth: SampleDepth, config: ToneConfig) -> ToneTable:
    """Synthesize and quantize all 16 tones for *depth*."""
    tones = tuple(
        quantize(synthesize_tone(nibble_to_freq(i, config), depth, config), depth, config)
        for i in range(N_TONES)
    )
    return ToneTable(depth, config, tones)


def build_tone_tables(config: ToneConfig) -> dict[SampleDepth, ToneTable]:
    """One table per supported depth."""
    return {depth: build_tone_table(depth, config) for depth in SampleDepth}
