"""hextone — all tuning constants, keyed in one place.

Nothing here is computed at runtime except the derived values at the bottom.
The defaults are LOCKED to the reference tone format — changing them breaks
compatibility with existing recordings.  Use a named profile (or build a
:class:`ToneConfig` directly) to try an alternate tuning.
"""

from dataclasses import dataclass, replace
from enum import IntEnum

# ── tone PHY ──────────────────────────────────────────────────────────────────
SAMPLE_RATE    = 44_100      # Hz
TONE_DURATION  = 0.2         # seconds per nibble → 8820 samples
FFT_SIZE       = 8820        # analysis window = one tone
BASE_FREQ      = 440.0       # nibble 0
FREQ_STEP      = 25.0        # Hz between adjacent nibbles
N_TONES        = 16          # one tone per hex digit

# Peak amplitudes in each depth's native integer range
AMPLITUDE_8BIT  = 127        # also the offset-binary bias
AMPLITUDE_16BIT = 32760

# ── transforms ────────────────────────────────────────────────────────────────
# "radix2": Cooley–Tukey on the window zero-padded to the next power of two
#           (8820 → 16384, bin width ≈ 2.69 Hz)
# "scipy":  general-length FFT at exactly FFT_SIZE bins (5 Hz)
TRANSFORM_RADIX2 = "radix2"
TRANSFORM_SCIPY  = "scipy"
TRANSFORMS       = (TRANSFORM_RADIX2, TRANSFORM_SCIPY)

# ── AU container ──────────────────────────────────────────────────────────────
AU_MAGIC         = b".snd"
AU_HEADER_LEN    = 24        # bytes — minimum legal data offset
AU_UNKNOWN_SIZE  = 0xFFFFFFFF
AU_ENC_LINEAR_8  = 0x02
AU_ENC_LINEAR_16 = 0x03
AU_CHANNELS      = 1


class SampleDepth(IntEnum):
    """Sample bit-width mode.  Selects quantization and the AU encoding byte."""

    PCM8  = 8    # unsigned offset-binary, bias AMPLITUDE_8BIT
    PCM16 = 16   # signed big-endian

    @property
    def bytes_per_sample(self) -> int:
        return 2 if self is SampleDepth.PCM16 else 1

    @property
    def au_encoding(self) -> int:
        return AU_ENC_LINEAR_16 if self is SampleDepth.PCM16 else AU_ENC_LINEAR_8

    @classmethod
    def from_au_encoding(cls, encoding: int) -> "SampleDepth":
        for depth in cls:
            if depth.au_encoding == encoding:
                return depth
        raise ValueError(f"Unsupported AU encoding: {encoding}")


@dataclass(frozen=True)
class ToneConfig:
    """Immutable tuning for one codec instance.

    Defaults reproduce the reference format.  ``fft_size`` must equal
    ``samples_per_tone`` so that every analysis window covers exactly one
    tone, and the amplitudes must fit their sample depth.
    """

    sample_rate:     int   = SAMPLE_RATE
    duration:        float = TONE_DURATION
    fft_size:        int   = FFT_SIZE
    base_freq:       float = BASE_FREQ
    freq_step:       float = FREQ_STEP
    amplitude_8bit:  int   = AMPLITUDE_8BIT
    amplitude_16bit: int   = AMPLITUDE_16BIT
    transform:       str   = TRANSFORM_RADIX2

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.samples_per_tone < 2:
            raise ValueError(f"tone too short: {self.samples_per_tone} samples")
        if self.fft_size < 4:
            raise ValueError(f"fft_size must be ≥ 4, got {self.fft_size}")
        if self.fft_size != self.samples_per_tone:
            raise ValueError(
                f"fft_size ({self.fft_size}) must equal the tone length "
                f"({self.samples_per_tone} samples)"
            )
        if not 0 < self.amplitude_8bit <= 127:
            raise ValueError(f"amplitude_8bit must be in 1..127, got {self.amplitude_8bit}")
        if not 0 < self.amplitude_16bit <= 32767:
            raise ValueError(f"amplitude_16bit must be in 1..32767, got {self.amplitude_16bit}")
        if self.freq_step <= 0:
            raise ValueError(f"freq_step must be positive, got {self.freq_step}")
        if self.transform not in TRANSFORMS:
            raise ValueError(
                f"Unknown transform '{self.transform}': choose from {list(TRANSFORMS)}"
            )
        if self.max_freq >= self.sample_rate / 2:
            raise ValueError(
                f"highest tone {self.max_freq} Hz is above Nyquist "
                f"({self.sample_rate / 2} Hz)"
            )

    # ── derived helpers ───────────────────────────────────────────────────────

    @property
    def samples_per_tone(self) -> int:
        return int(round(self.sample_rate * self.duration))

    @property
    def max_freq(self) -> float:
        return self.base_freq + (N_TONES - 1) * self.freq_step

    @property
    def bias_8bit(self) -> int:
        return self.amplitude_8bit

    def amplitude(self, depth: SampleDepth) -> int:
        if depth is SampleDepth.PCM16:
            return self.amplitude_16bit
        return self.amplitude_8bit

    def tone_bytes(self, depth: SampleDepth) -> int:
        """Byte length of one encoded tone at *depth*."""
        return self.samples_per_tone * depth.bytes_per_sample

    def with_overrides(self, **changes) -> "ToneConfig":
        return replace(self, **changes)


# ── named tunings ─────────────────────────────────────────────────────────────
# "reference" is the only profile compatible with recordings made by other
# implementations of the format.  "fast" halves the tone length (and the
# analysis window with it); ≈5.4 Hz bins after padding still clear the
# 25 Hz tone spacing.
PROFILES: dict[str, dict] = {
    "reference": {},
    "fast": {
        "duration": 0.1,
        "fft_size": 4410,
    },
    # same timing as reference, analysed without zero-padding
    "exact_bins": {
        "transform": TRANSFORM_SCIPY,
    },
}
DEFAULT_PROFILE = "reference"


def config_for_profile(name: str = DEFAULT_PROFILE) -> ToneConfig:
    """Return the :class:`ToneConfig` for a named profile."""
    if name not in PROFILES:
        raise ValueError(f"Unknown profile '{name}': choose from {list(PROFILES)}")
    return ToneConfig(**PROFILES[name])


DEFAULT_CONFIG = ToneConfig()
