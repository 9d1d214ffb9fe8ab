"""hextone — Sun/NeXT AU container header.

Layout (all integers unsigned 32-bit big-endian):
  [0:4]   magic        = ".snd"
  [4:8]   data_offset  — byte offset of the first sample (≥ 24)
  [8:12]  data_size    — sample byte count, 0xFFFFFFFF = unknown
  [12:16] encoding     = 2:8-bit linear | 3:16-bit linear
  [16:20] sample_rate  = 44100
  [20:24] channels     = 1
  ── 24 bytes ──
  [24:data_offset]     optional annotation, skipped on decode

The encoder always writes data_offset=24.  Some writers append an 8-byte
zero annotation (data_offset=32); the decoder honours whatever offset the
header carries.
"""

import struct
from dataclasses import dataclass

from .profiles import (
    AU_MAGIC, AU_HEADER_LEN, AU_UNKNOWN_SIZE,
    AU_CHANNELS, SAMPLE_RATE,
    SampleDepth,
)

_STRUCT = struct.Struct(">4sIIIII")
assert _STRUCT.size == AU_HEADER_LEN, f"Header struct size mismatch: {_STRUCT.size}"


class HeaderError(ValueError):
    """The byte stream does not start with a usable AU header."""


@dataclass
class AUHeader:
    """Parsed representation of the 24-byte AU header."""

    depth:       SampleDepth = SampleDepth.PCM8
    sample_rate: int         = SAMPLE_RATE
    channels:    int         = AU_CHANNELS
    data_offset: int         = AU_HEADER_LEN
    data_size:   int         = AU_UNKNOWN_SIZE

    @property
    def encoding(self) -> int:
        return self.depth.au_encoding

    # ── pack / unpack ─────────────────────────────────────────────────────────

    def pack(self) -> bytes:
        """Serialise to exactly ``data_offset`` bytes.

        Any gap between the 24 fixed bytes and ``data_offset`` is zero-filled.
        """
        if self.data_offset < AU_HEADER_LEN:
            raise HeaderError(
                f"data_offset must be ≥ {AU_HEADER_LEN}, got {self.data_offset}"
            )
        fixed = _STRUCT.pack(
            AU_MAGIC,
            self.data_offset,
            self.data_size,
            self.encoding,
            self.sample_rate,
            self.channels,
        )
        return fixed + bytes(self.data_offset - AU_HEADER_LEN)

    @classmethod
    def unpack(cls, data: bytes) -> "AUHeader":
        """Deserialise from the start of *data*.

        Raises HeaderError on short data, bad magic, an impossible data
        offset, or an encoding/channel layout this codec cannot decode.
        """
        if len(data) < AU_HEADER_LEN:
            raise HeaderError(
                f"Data too short for AU header: {len(data)} < {AU_HEADER_LEN}"
            )

        (
            magic,
            data_offset,
            data_size,
            encoding,
            sample_rate,
            channels,
        ) = _STRUCT.unpack(data[:AU_HEADER_LEN])

        if magic != AU_MAGIC:
            raise HeaderError(
                f"Bad AU magic: {magic.hex()} (expected {AU_MAGIC.hex()})"
            )
        if data_offset < AU_HEADER_LEN or data_offset > len(data):
            raise HeaderError(
                f"Bad AU data offset: {data_offset} (stream is {len(data)} bytes)"
            )
        try:
            depth = SampleDepth.from_au_encoding(encoding)
        except ValueError as exc:
            raise HeaderError(str(exc)) from None
        if channels != AU_CHANNELS:
            raise HeaderError(f"Unsupported channel count: {channels}")

        return cls(
            depth=depth,
            sample_rate=sample_rate,
            channels=channels,
            data_offset=data_offset,
            data_size=data_size,
        )

    def __repr__(self) -> str:
        size = "?" if self.data_size == AU_UNKNOWN_SIZE else f"{self.data_size}B"
        return (
            f"AUHeader({self.depth.value}-bit {self.sample_rate}Hz "
            f"ch={self.channels} offset={self.data_offset} size={size})"
        )


def header_for(depth: SampleDepth, sample_rate: int = SAMPLE_RATE) -> bytes:
    """The fixed header bytes the encoder prepends for *depth*."""
    return AUHeader(depth=depth, sample_rate=sample_rate).pack()
