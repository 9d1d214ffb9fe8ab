"""hextone — decode result type and failure codes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .profiles import SampleDepth


class FailureCode(str, Enum):
    """Reason a decode attempt did not produce the full payload."""

    OK                = "ok"
    HEADER_INVALID    = "header_invalid"     # bad magic / offset / encoding
    DEPTH_MISMATCH    = "depth_mismatch"     # header depth ≠ requested depth
    ODD_NIBBLE_COUNT  = "odd_nibble_count"   # hex digits cannot pair into bytes


@dataclass
class DecodeResult:
    """Full decode outcome returned by :func:`tonecodec.decode_audio`.

    On success  : ``success=True``, ``data`` is the recovered payload.
    On failure  : ``success=False``, ``failure`` explains why.  For
                  ``ODD_NIBBLE_COUNT`` ``data`` still holds the bytes decoded
                  from the complete leading nibble pairs; otherwise it is empty.
    """

    success:          bool
    data:             bytes                 = b""
    failure:          Optional[FailureCode] = None
    message:          str                   = ""

    # Diagnostics — always populated as far as decoding got
    depth:            Optional[SampleDepth] = None
    windows:          int                   = 0   # analysis windows examined
    windows_skipped:  int                   = 0   # no peak / unmapped frequency
    nibbles:          int                   = 0   # hex digits recovered

    def summary(self) -> str:
        bits = f"{self.depth.value}-bit" if self.depth is not None else "?-bit"
        if self.success:
            return (
                f"[OK] {len(self.data)} bytes decoded  {bits} "
                f"win={self.windows} skipped={self.windows_skipped}"
            )
        return (
            f"[FAIL:{self.failure.value}]  {bits} "
            f"win={self.windows} nibbles={self.nibbles} recovered={len(self.data)}B"
        )

    def __repr__(self) -> str:
        return f"DecodeResult({self.summary()})"


class DecodeError(RuntimeError):
    """Raised by :func:`tonecodec.decode_bytes` when decoding fails."""

    def __init__(self, result: DecodeResult):
        self.result = result
        detail = f": {result.message}" if result.message else ""
        super().__init__(f"decode failed ({result.failure.value}){detail}")
