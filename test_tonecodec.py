#!/usr/bin/env python3
"""
test_tonecodec.py — hextone codec test suite.

Tests:
  1. Radix-2 FFT against numpy.fft (pure math, no audio)
  2. Tone table shape and quantization
  3. Detector accuracy on every nominal tone, both depths
  4. Nibble ↔ frequency mapping and its half-step tolerance
  5. Round-trips: empty, one byte, all byte values, random payloads
  6. Silent-skip, odd nibble count, depth mismatch
  7. Alternate tunings (general-length transform, fast profile)
"""
from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from tonecodec import (
    DecodeError, FailureCode, SampleDepth, ToneCodec, ToneConfig,
    config_for_profile, decode_audio, decode_bytes, encode_bytes,
)
from tonecodec.api import default_codec
from tonecodec.framing import AUHeader, header_for
from tonecodec.modem.detect import detect_frequency, find_peak, parabolic_offset
from tonecodec.modem.fft import fft_padded, fft_radix2, next_pow2, transform_length
from tonecodec.modem.mapping import (
    bytes_to_nibbles, freq_to_hex, freq_to_nibble, hex_to_nibble, nibble_to_freq,
    nibble_to_hex,
)
from tonecodec.modem.tones import build_tone_table, dequantize, hann
from tonecodec.profiles import AU_HEADER_LEN, DEFAULT_CONFIG, N_TONES

CFG    = DEFAULT_CONFIG
DEPTHS = [SampleDepth.PCM8, SampleDepth.PCM16]


def silence(depth: SampleDepth, config: ToneConfig = CFG) -> bytes:
    """One tone's worth of zero-valued samples in *depth*'s byte layout."""
    if depth is SampleDepth.PCM16:
        return bytes(config.tone_bytes(depth))
    return bytes([config.bias_8bit]) * config.samples_per_tone


# ─────────────────────────────────────────────────────────────────────────────
# 1. FFT
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize('n', [1, 2, 4, 32, 64, 1024, 16384])
def test_fft_radix2_matches_numpy(n):
    rng = np.random.default_rng(n)
    x   = rng.standard_normal(n) + 1j * rng.standard_normal(n)
    assert np.allclose(fft_radix2(x), np.fft.fft(x), atol=1e-8 * n)


def test_fft_radix2_rejects_non_power_of_two():
    with pytest.raises(ValueError):
        fft_radix2(np.zeros(CFG.fft_size))


def test_fft_padded_matches_zero_padded_numpy():
    rng = np.random.default_rng(7)
    x   = rng.standard_normal(CFG.fft_size)
    got = fft_padded(x)
    assert len(got) == 16384
    assert np.allclose(got, np.fft.fft(x, n=16384), atol=1e-6)


def test_next_pow2():
    assert next_pow2(1) == 1
    assert next_pow2(8820) == 16384
    assert next_pow2(4410) == 8192
    assert next_pow2(16384) == 16384
    with pytest.raises(ValueError):
        next_pow2(0)


def test_transform_length():
    assert transform_length(8820, 'radix2') == 16384
    assert transform_length(8820, 'scipy') == 8820


# ─────────────────────────────────────────────────────────────────────────────
# 2. Tone table
# ─────────────────────────────────────────────────────────────────────────────

def test_hann_matches_formula():
    n = CFG.samples_per_tone
    t = np.arange(n)
    assert np.allclose(hann(n), 0.5 * (1 - np.cos(2 * np.pi * t / (n - 1))))


@pytest.mark.parametrize('depth', DEPTHS)
def test_tone_table_shape(depth):
    table = default_codec().tables[depth]
    assert len(table) == N_TONES
    for tone in table:
        assert len(tone) == CFG.samples_per_tone * depth.bytes_per_sample == CFG.tone_bytes(depth)
    assert table.frequencies == [440.0 + 25.0 * i for i in range(16)]


def test_tone_8bit_is_offset_binary():
    tone = build_tone_table(SampleDepth.PCM8, CFG)[3]
    pcm  = np.frombuffer(tone, dtype=np.uint8).astype(int)
    # Hann window is zero at both ends → bias value
    assert pcm[0] == 127 and pcm[-1] == 127
    assert pcm.min() >= 0 and pcm.max() <= 254
    assert pcm.max() > 240 and pcm.min() < 14


def test_tone_16bit_is_signed_big_endian():
    tone = build_tone_table(SampleDepth.PCM16, CFG)[9]
    assert tone[:2] == b'\x00\x00'
    pcm = np.frombuffer(tone, dtype='>i2').astype(int)
    assert pcm.min() < -32000 and pcm.max() > 32000
    assert np.abs(pcm).max() <= 32760


def test_tone_samples_follow_synthesis_formula():
    n    = CFG.samples_per_tone
    t    = np.arange(n)
    freq = nibble_to_freq(5, CFG)
    want = np.trunc(32760 * np.sin(2 * np.pi * freq * t / 44100)
                    * 0.5 * (1 - np.cos(2 * np.pi * t / (n - 1))))
    got  = np.frombuffer(build_tone_table(SampleDepth.PCM16, CFG)[5], dtype='>i2').astype(int)
    # float rounding can move a value across an integer boundary; allow 1 LSB
    diff = np.abs(got - want.astype(int))
    assert diff.max() <= 1
    assert np.count_nonzero(diff) < 10


def test_tables_are_built_per_codec():
    a, b = ToneCodec(), ToneCodec()
    assert a.tables is not b.tables
    assert a.tables[SampleDepth.PCM8][0] == b.tables[SampleDepth.PCM8][0]


# ─────────────────────────────────────────────────────────────────────────────
# 3. Detector
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize('depth', DEPTHS)
def test_every_tone_detected_within_1hz(depth):
    table = default_codec().tables[depth]
    for i, tone in enumerate(table):
        samples = dequantize(tone, depth, CFG)
        freq    = detect_frequency(samples, CFG)
        assert freq is not None
        assert abs(freq - nibble_to_freq(i, CFG)) < 1.0, (i, freq)
        assert freq_to_nibble(freq, CFG) == i


def test_detect_silence_is_none():
    assert detect_frequency(np.zeros(CFG.fft_size), CFG) is None


def test_detect_rejects_wrong_window_length():
    with pytest.raises(ValueError):
        detect_frequency(np.zeros(CFG.fft_size - 1), CFG)


def test_find_peak_strict_local_maximum():
    mags = np.zeros(32)
    mags[5] = 1.0
    mags[9] = 3.0
    mags[10] = 2.0
    assert find_peak(mags) == 9
    # a plateau is not a strict maximum
    flat = np.zeros(32)
    flat[4] = flat[5] = 1.0
    assert find_peak(flat) is None


def test_find_peak_ignores_dc_and_top_bins():
    mags = np.zeros(32)
    mags[0] = 10.0          # DC
    mags[15] = 10.0         # M/2 − 1, outside the scan
    assert find_peak(mags) is None
    mags[14] = 1.0          # last scanned bin, right neighbour is larger
    assert find_peak(mags) is None


def test_parabolic_offset():
    assert parabolic_offset(1.0, 2.0, 1.0) == 0.0
    # parabola y = −(x − 0.25)² + c sampled at −1, 0, 1
    a, b, g = -(1.25 ** 2), -(0.25 ** 2), -(0.75 ** 2)
    assert parabolic_offset(a, b, g) == pytest.approx(0.25)


def test_off_grid_sine_interpolated():
    n = CFG.fft_size
    t = np.arange(n)
    for freq in (452.3, 611.7, 799.9):
        samples = 0.8 * np.sin(2 * np.pi * freq * t / CFG.sample_rate)
        assert detect_frequency(samples, CFG) == pytest.approx(freq, abs=1.0)


# ─────────────────────────────────────────────────────────────────────────────
# 4. Mapping
# ─────────────────────────────────────────────────────────────────────────────

def test_nibble_frequencies():
    assert nibble_to_freq(0, CFG) == 440.0
    assert nibble_to_freq(15, CFG) == 815.0
    with pytest.raises(ValueError):
        nibble_to_freq(16, CFG)


def test_freq_to_nibble_half_step_band():
    assert freq_to_nibble(440.0, CFG) == 0
    assert freq_to_nibble(452.4, CFG) == 0
    assert freq_to_nibble(452.6, CFG) == 1
    assert freq_to_nibble(815.0 + 12.4, CFG) == 15
    assert freq_to_nibble(440.0 - 12.6, CFG) is None
    assert freq_to_nibble(815.0 + 12.6, CFG) is None
    assert freq_to_nibble(0.0, CFG) is None


def test_hex_digits():
    assert freq_to_hex(690.0, CFG) == 'a'
    assert freq_to_hex(100.0, CFG) is None
    assert hex_to_nibble('F') == hex_to_nibble('f') == 15
    with pytest.raises(ValueError):
        hex_to_nibble('g')
    assert bytes_to_nibbles(b'\xa5\x0f') == [10, 5, 0, 15]
    assert nibble_to_hex(10) == 'a'
    assert ''.join(nibble_to_hex(i) for i in range(16)) == '0123456789abcdef'


# ─────────────────────────────────────────────────────────────────────────────
# 5. Round-trips
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize('depth', DEPTHS)
def test_empty_payload_is_header_only(depth):
    stream = encode_bytes(b'', depth)
    assert len(stream) == AU_HEADER_LEN
    result = decode_audio(stream, depth)
    assert result.success and result.data == b''
    assert result.windows == 0


@pytest.mark.parametrize('depth', DEPTHS)
def test_one_byte_is_two_tones(depth):
    stream = encode_bytes(b'\xab', depth)
    table  = default_codec().tables[depth]
    assert stream == header_for(depth) + table[0xa] + table[0xb]
    assert decode_bytes(stream, depth) == b'\xab'


@pytest.mark.parametrize('depth', DEPTHS)
def test_output_length(depth):
    payload = b'hello world'
    stream  = encode_bytes(payload, depth)
    assert len(stream) == AU_HEADER_LEN + 2 * len(payload) * 8820 * depth.bytes_per_sample
    assert len(stream) == default_codec().encoded_length(len(payload), depth)


@pytest.mark.parametrize('depth', DEPTHS)
def test_roundtrip_all_byte_values(depth):
    payload = bytes(range(256))
    result  = decode_audio(encode_bytes(payload, depth), depth)
    assert result.success, result.summary()
    assert result.data == payload
    assert result.windows_skipped == 0
    assert result.nibbles == 512


@pytest.mark.parametrize('depth', DEPTHS)
def test_roundtrip_random_payloads(depth):
    rng = np.random.default_rng(1234 + depth.value)
    for size in (1, 3, 17, 40):
        payload = rng.integers(0, 256, size, dtype=np.uint8).tobytes()
        assert decode_bytes(encode_bytes(payload, depth), depth) == payload


def test_decode_trusts_header_when_depth_omitted():
    stream = encode_bytes(b'\x42', SampleDepth.PCM16)
    result = decode_audio(stream)
    assert result.success and result.data == b'\x42'
    assert result.depth is SampleDepth.PCM16


def test_trailing_partial_window_dropped():
    stream = encode_bytes(b'\x7e') + silence(SampleDepth.PCM8)[:1000]
    result = decode_audio(stream, SampleDepth.PCM8)
    assert result.success and result.data == b'\x7e'
    assert result.windows == 2


def test_trailing_odd_byte_ignored_16bit():
    stream = encode_bytes(b'\x42', SampleDepth.PCM16) + b'\x01'
    result = decode_audio(stream, SampleDepth.PCM16)
    assert result.success and result.data == b'\x42'
    assert result.windows == 2
    assert result.windows_skipped == 0


def test_reference_32_byte_header_decodes():
    for depth in DEPTHS:
        body   = encode_bytes(b'ok', depth)[AU_HEADER_LEN:]
        stream = AUHeader(depth=depth, data_offset=32).pack() + body
        assert len(stream) == 32 + len(body)
        assert decode_bytes(stream, depth) == b'ok'


# ─────────────────────────────────────────────────────────────────────────────
# 6. Skips and failures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize('depth', DEPTHS)
def test_silent_window_skipped(depth):
    table  = default_codec().tables[depth]
    stream = header_for(depth) + table[1] + silence(depth) + table[2]
    result = decode_audio(stream, depth)
    assert result.success
    assert result.data == b'\x12'
    assert result.windows == 3
    assert result.windows_skipped == 1


def test_out_of_band_window_skipped():
    n    = CFG.fft_size
    t    = np.arange(n)
    hum  = np.trunc(127 * np.sin(2 * np.pi * 2000.0 * t / CFG.sample_rate) * hann(n))
    hum  = (hum.astype(int) + 127).astype(np.uint8).tobytes()
    table = default_codec().tables[SampleDepth.PCM8]
    stream = header_for(SampleDepth.PCM8) + hum + table[0xc] + table[0xd]
    result = decode_audio(stream, SampleDepth.PCM8)
    assert result.success and result.data == b'\xcd'
    assert result.windows_skipped == 1


def test_odd_nibble_count_fails_with_partial_bytes():
    table  = default_codec().tables[SampleDepth.PCM8]
    stream = header_for(SampleDepth.PCM8) + table[1] + table[2] + table[3]
    result = decode_audio(stream, SampleDepth.PCM8)
    assert not result.success
    assert result.failure is FailureCode.ODD_NIBBLE_COUNT
    assert result.data == b'\x12'
    assert result.nibbles == 3
    with pytest.raises(DecodeError) as exc:
        decode_bytes(stream, SampleDepth.PCM8)
    assert exc.value.result.failure is FailureCode.ODD_NIBBLE_COUNT


def test_depth_mismatch_is_not_cross_compatible():
    for enc, dec in ((SampleDepth.PCM8, SampleDepth.PCM16), (SampleDepth.PCM16, SampleDepth.PCM8)):
        result = decode_audio(encode_bytes(b'secret', enc), dec)
        assert not result.success
        assert result.failure is FailureCode.DEPTH_MISMATCH
        assert result.data == b''


def test_invalid_header_reported():
    result = decode_audio(b'RIFF' + bytes(40))
    assert not result.success
    assert result.failure is FailureCode.HEADER_INVALID
    assert 'magic' in result.message
    assert 'header_invalid' in result.summary()


def test_sample_rate_mismatch_reported():
    stream = header_for(SampleDepth.PCM8, sample_rate=48000)
    result = decode_audio(stream)
    assert result.failure is FailureCode.HEADER_INVALID


# ─────────────────────────────────────────────────────────────────────────────
# 7. Alternate tunings
# ─────────────────────────────────────────────────────────────────────────────

def test_general_length_transform_roundtrip():
    codec = ToneCodec(config_for_profile('exact_bins'))
    assert codec.config.transform == 'scipy'
    for i, tone in enumerate(codec.tables[SampleDepth.PCM16]):
        freq = detect_frequency(dequantize(tone, SampleDepth.PCM16, codec.config), codec.config)
        assert abs(freq - nibble_to_freq(i, codec.config)) < 1.0
    payload = b'\x00\x7f\x80\xff general'
    for depth in DEPTHS:
        assert codec.decode_bytes(codec.encode(payload, depth), depth) == payload


def test_fast_profile_roundtrip():
    codec = ToneCodec(config_for_profile('fast'))
    assert codec.config.samples_per_tone == codec.config.fft_size == 4410
    payload = b'fast tones'
    stream  = codec.encode(payload, SampleDepth.PCM8)
    assert len(stream) == AU_HEADER_LEN + 2 * len(payload) * 4410
    assert codec.decode_bytes(stream) == payload
    # the reference codec windows this stream at the wrong size
    assert default_codec().decode(stream).data != payload


def test_config_validation():
    with pytest.raises(ValueError):
        ToneConfig(transform='dft')
    with pytest.raises(ValueError):
        ToneConfig(freq_step=0)
    with pytest.raises(ValueError):
        ToneConfig(sample_rate=1000, fft_size=200)   # top tone above Nyquist
    with pytest.raises(ValueError):
        config_for_profile('nope')
    with pytest.raises(dataclasses.FrozenInstanceError):
        CFG.fft_size = 1024                   # type: ignore[misc]


def test_config_rejects_window_not_matching_tone():
    with pytest.raises(ValueError) as exc:
        ToneConfig(fft_size=4096)
    assert 'fft_size' in str(exc.value)
    with pytest.raises(ValueError):
        ToneConfig(duration=0.1)                      # 4410-sample tones, 8820 window
    for name in ('reference', 'fast', 'exact_bins'):
        cfg = config_for_profile(name)
        assert cfg.fft_size == cfg.samples_per_tone


@pytest.mark.parametrize('changes', [
    {'amplitude_8bit': 200},
    {'amplitude_8bit': 128},
    {'amplitude_8bit': 0},
    {'amplitude_16bit': 40000},
    {'amplitude_16bit': 32768},
    {'amplitude_16bit': -5},
])
def test_config_rejects_amplitude_outside_depth(changes):
    with pytest.raises(ValueError) as exc:
        ToneConfig(**changes)
    assert 'amplitude' in str(exc.value)


def test_full_scale_amplitudes_roundtrip():
    codec = ToneCodec(ToneConfig(amplitude_8bit=127, amplitude_16bit=32767))
    for depth in DEPTHS:
        assert codec.decode_bytes(codec.encode(b'\x5a\xa5', depth), depth) == b'\x5a\xa5'


def test_config_defaults_match_reference_format():
    assert CFG.sample_rate == 44100
    assert CFG.samples_per_tone == CFG.fft_size == 8820
    assert (CFG.amplitude_8bit, CFG.amplitude_16bit) == (127, 32760)
    assert (CFG.base_freq, CFG.freq_step) == (440.0, 25.0)
    assert CFG.with_overrides(freq_step=30.0).max_freq == 440.0 + 15 * 30.0


if __name__ == '__main__':
    raise SystemExit(pytest.main([__file__, '-v']))
