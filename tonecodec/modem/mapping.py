"""hextone — nibble ↔ frequency ↔ hex digit mapping.

Tone i sits at BASE_FREQ + i·FREQ_STEP.  A detected frequency decodes to the
nearest tone centre; anything within FREQ_STEP/2 of a centre is that nibble.
That half-step band is the whole noise margin of the format, so the rounding
rule below must not change.

  440 Hz → 0   465 Hz → 1   …   815 Hz → 15 (f)
"""

from typing import Optional

from ..profiles import N_TONES, ToneConfig

HEX_DIGITS = "0123456789abcdef"


def nibble_to_freq(nibble: int, config: ToneConfig) -> float:
    if not 0 <= nibble < N_TONES:
        raise ValueError(f"nibble out of range: {nibble}")
    return config.base_freq + nibble * config.freq_step


def freq_to_nibble(freq: float, config: ToneConfig) -> Optional[int]:
    """Nearest nibble for *freq*, or None if it falls outside the tone band."""
    index = round((freq - config.base_freq) / config.freq_step)
    if 0 <= index < N_TONES:
        return index
    return None


def nibble_to_hex(nibble: int) -> str:
    return HEX_DIGITS[nibble]


def hex_to_nibble(digit: str) -> int:
    """Hex digit (either case) → nibble.  Raises ValueError on anything else."""
    index = HEX_DIGITS.find(digit.lower()) if len(digit) == 1 else -1
    if index < 0:
        raise ValueError(f"not a hex digit: {digit!r}")
    return index


def freq_to_hex(freq: float, config: ToneConfig) -> Optional[str]:
    nibble = freq_to_nibble(freq, config)
    return None if nibble is None else HEX_DIGITS[nibble]


def bytes_to_nibbles(data: bytes) -> list[int]:
    """Most-significant nibble first, two per byte (the order of ``data.hex()``)."""
    return [hex_to_nibble(c) for c in data.hex()]
