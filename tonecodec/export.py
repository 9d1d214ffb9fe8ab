"""hextone — float sample access and WAV export for tone streams.

The AU stream is the canonical format; a WAV copy is only for listening or
for feeding other tools (spectrogram viewers, DAWs).  Export always writes
16-bit mono PCM at the stream's own sample rate.
"""

from __future__ import annotations

import numpy as np
import soundfile as sf

from .framing import AUHeader, header_for
from .modem.tones import dequantize, quantize
from .profiles import DEFAULT_CONFIG, SampleDepth, ToneConfig


def stream_samples(data: bytes, config: ToneConfig = DEFAULT_CONFIG) -> tuple[np.ndarray, int]:
    """AU tone stream → (float32 samples in [-1, 1], sample_rate).

    Raises HeaderError if *data* has no valid AU header.
    """
    header  = AUHeader.unpack(data)
    samples = dequantize(data[header.data_offset:], header.depth, config)
    return np.clip(samples, -1.0, 1.0).astype(np.float32), header.sample_rate


def write_wav(path: str, data: bytes, config: ToneConfig = DEFAULT_CONFIG) -> int:
    """Write the tones in AU stream *data* to *path* as 16-bit WAV.

    Returns the number of samples written.
    """
    samples, sr = stream_samples(data, config)
    sf.write(path, samples, sr, subtype="PCM_16")
    return len(samples)


def read_wav(path: str) -> tuple[np.ndarray, int]:
    """Read WAV file. Returns (samples float32, sample_rate int)."""
    samples, sr = sf.read(path, dtype="float32", always_2d=False)
    if samples.ndim == 2:
        samples = samples.mean(axis=1)  # stereo → mono
    return samples, sr


def stream_from_samples(
    samples: np.ndarray,
    depth: SampleDepth,
    sample_rate: int,
    config: ToneConfig = DEFAULT_CONFIG,
) -> bytes:
    """Float samples → AU tone stream at *depth* (header included)."""
    amp  = config.amplitude(depth)
    pcm  = np.trunc(np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0) * amp)
    return header_for(depth, sample_rate) + quantize(pcm.astype(np.int64), depth, config)


def stream_from_wav(
    path: str,
    depth: SampleDepth = SampleDepth.PCM16,
    config: ToneConfig = DEFAULT_CONFIG,
) -> bytes:
    """Load a WAV rendering and rebuild the AU stream the decoder expects."""
    samples, sr = read_wav(path)
    return stream_from_samples(samples, depth, sr, config)
