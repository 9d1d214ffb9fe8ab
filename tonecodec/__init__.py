"""hextone — binary data as hexadecimal audio tones.

Public API:
    encode_bytes(payload, depth=SampleDepth.PCM8) -> bytes          (AU stream)
    decode_audio(data, depth=None)                -> DecodeResult
    decode_bytes(data, depth=None)                -> bytes  (raises DecodeError)
    ToneCodec(config)                             — same, for a custom tuning
"""

from .api import ToneCodec, encode_bytes, decode_audio, decode_bytes
from .diagnostics import DecodeError, DecodeResult, FailureCode
from .profiles import SampleDepth, ToneConfig, config_for_profile

__version__ = "1.0.0"
__all__ = [
    "ToneCodec", "encode_bytes", "decode_audio", "decode_bytes",
    "DecodeError", "DecodeResult", "FailureCode",
    "SampleDepth", "ToneConfig", "config_for_profile",
]
