"""hextone — high-level encode / decode API.

ToneCodec(config).encode(payload, depth)   -> bytes          (AU stream)
ToneCodec(config).decode(data, depth=None) -> DecodeResult

Full pipeline
=============

Encode
------
  payload bytes
    → hex string, most-significant nibble first       (2 digits per byte)
    → tone table lookup per nibble                     (modem.tones)
    → AU header (24 bytes) || tone || tone || …        (framing)

Decode
------
  AU stream
    → parse header, slice samples at data_offset       (framing)
    → de-quantize to float samples                     (modem.tones.dequantize)
    → non-overlapping FFT_SIZE windows, tail dropped
    → dominant frequency per window                    (modem.detect)
    → nearest nibble, skipping silent/unmapped windows (modem.mapping)
    → hex string → bytes                               (bytes.fromhex)

A codec owns its tone tables; they are built once in ``__init__`` and never
mutated, so one instance can be shared freely.  The module-level functions
use a default instance built at import time.
"""

import numpy as np

from .diagnostics import DecodeError, DecodeResult, FailureCode
from .framing import AUHeader, HeaderError, header_for
from .modem.detect import detect_frequency
from .modem.mapping import bytes_to_nibbles, freq_to_nibble, nibble_to_hex
from .modem.tones import build_tone_tables, dequantize
from .profiles import AU_HEADER_LEN, DEFAULT_CONFIG, SampleDepth, ToneConfig


class ToneCodec:
    """Symmetric nibble ↔ tone codec for one :class:`ToneConfig`."""

    def __init__(self, config: ToneConfig = DEFAULT_CONFIG):
        self.config = config
        self.tables = build_tone_tables(config)

    # ── encode ────────────────────────────────────────────────────────────────

    def encode(self, payload: bytes, depth: SampleDepth = SampleDepth.PCM8) -> bytes:
        """Encode *payload* to a complete AU byte stream.

        Output length = 24 + 2 · len(payload) · tone_bytes(depth).
        """
        depth = SampleDepth(depth)
        table = self.tables[depth]
        tones = [table[n] for n in bytes_to_nibbles(bytes(payload))]
        return header_for(depth, self.config.sample_rate) + b"".join(tones)

    def encoded_length(self, n_bytes: int, depth: SampleDepth = SampleDepth.PCM8) -> int:
        return AU_HEADER_LEN + 2 * n_bytes * self.config.tone_bytes(SampleDepth(depth))

    # ── decode ────────────────────────────────────────────────────────────────

    def windows(self, samples: np.ndarray) -> list[np.ndarray]:
        """Split *samples* into whole FFT_SIZE windows; a short tail is dropped."""
        size = self.config.fft_size
        n_win = len(samples) // size
        return [samples[i * size:(i + 1) * size] for i in range(n_win)]

    def detect_nibbles(self, samples: np.ndarray) -> tuple[list[int], int]:
        """Run the detector over every window.

        Returns (nibbles, n_windows).  Windows with no peak or a frequency
        outside the tone band contribute nothing.
        """
        nibbles = []
        windows = self.windows(samples)
        for window in windows:
            freq = detect_frequency(window, self.config)
            if freq is None or freq <= 0:
                continue
            nibble = freq_to_nibble(freq, self.config)
            if nibble is not None:
                nibbles.append(nibble)
        return nibbles, len(windows)

    def decode(self, data: bytes, depth: SampleDepth | None = None) -> DecodeResult:
        """Decode an AU tone stream.

        Args:
            data:  Complete stream, header included.
            depth: Expected sample depth.  None trusts the header; otherwise a
                   header that says something else is a DEPTH_MISMATCH failure.

        Returns:
            :class:`DecodeResult` — check ``.success`` before using ``.data``.
        """
        data  = bytes(data)
        depth = None if depth is None else SampleDepth(depth)

        # ── 1. Header ─────────────────────────────────────────────────────────
        try:
            header = AUHeader.unpack(data)
        except HeaderError as exc:
            return DecodeResult(
                success=False,
                failure=FailureCode.HEADER_INVALID,
                message=str(exc),
                depth=depth,
            )
        if header.sample_rate != self.config.sample_rate:
            return DecodeResult(
                success=False,
                failure=FailureCode.HEADER_INVALID,
                message=(
                    f"stream sample rate {header.sample_rate} Hz, "
                    f"codec tuned for {self.config.sample_rate} Hz"
                ),
                depth=header.depth,
            )

        if depth is not None and depth is not header.depth:
            return DecodeResult(
                success=False,
                failure=FailureCode.DEPTH_MISMATCH,
                message=(
                    f"stream is {header.depth.value}-bit, "
                    f"decoder expects {depth.value}-bit"
                ),
                depth=header.depth,
            )

        # ── 2. Samples → nibbles ──────────────────────────────────────────────
        samples = dequantize(data[header.data_offset:], header.depth, self.config)
        nibbles, n_win = self.detect_nibbles(samples)
        skipped = n_win - len(nibbles)
        hex_str = "".join(nibble_to_hex(n) for n in nibbles)

        # ── 3. Hex → bytes ────────────────────────────────────────────────────
        if len(hex_str) % 2:
            return DecodeResult(
                success=False,
                data=bytes.fromhex(hex_str[:-1]),
                failure=FailureCode.ODD_NIBBLE_COUNT,
                message=f"{len(hex_str)} hex digits cannot pair into bytes",
                depth=header.depth,
                windows=n_win,
                windows_skipped=skipped,
                nibbles=len(nibbles),
            )

        return DecodeResult(
            success=True,
            data=bytes.fromhex(hex_str),
            failure=FailureCode.OK,
            depth=header.depth,
            windows=n_win,
            windows_skipped=skipped,
            nibbles=len(nibbles),
        )

    def decode_bytes(self, data: bytes, depth: SampleDepth | None = None) -> bytes:
        """Like :meth:`decode` but returns the payload or raises DecodeError."""
        result = self.decode(data, depth)
        if not result.success:
            raise DecodeError(result)
        return result.data


# ── module-level convenience ──────────────────────────────────────────────────

_DEFAULT_CODEC = ToneCodec(DEFAULT_CONFIG)


def default_codec() -> ToneCodec:
    return _DEFAULT_CODEC


def encode_bytes(payload: bytes, depth: SampleDepth = SampleDepth.PCM8) -> bytes:
    """Encode *payload* with the reference tuning.  See :meth:`ToneCodec.encode`."""
    return _DEFAULT_CODEC.encode(payload, depth)


def decode_audio(data: bytes, depth: SampleDepth | None = None) -> DecodeResult:
    """Decode with the reference tuning.  See :meth:`ToneCodec.decode`."""
    return _DEFAULT_CODEC.decode(data, depth)


def decode_bytes(data: bytes, depth: SampleDepth | None = None) -> bytes:
    """Decode with the reference tuning, raising DecodeError on failure."""
    return _DEFAULT_CODEC.decode_bytes(data, depth)
