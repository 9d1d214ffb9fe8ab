#!/usr/bin/env python3
"""
hextone.py — hextone CLI entry point.

Reads all of stdin, writes the result to stdout:

  encode (default)   bytes      → AU tone stream (8-bit, or 16-bit with -16)
  decode (-d)        AU stream  → original bytes

Status lines go to stderr, so the tool is safe in pipes:

  echo -n "hello" | python3 hextone.py > hello.au
  python3 hextone.py -d < hello.au
  python3 hextone.py -16 --wav hello.wav < payload.bin > payload.au

Run `python3 hextone.py --help` for full usage.
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Add the repo root to path so the package imports when called from anywhere
sys.path.insert(0, str(Path(__file__).parent))

from tonecodec import DecodeError, SampleDepth, ToneCodec, config_for_profile  # noqa: E402
from tonecodec.export import stream_from_wav, write_wav                         # noqa: E402
from tonecodec.profiles import DEFAULT_PROFILE, PROFILES                        # noqa: E402


# ─────────────────────────────────────────────────────────────────────────────
# Sub-command handlers
# ─────────────────────────────────────────────────────────────────────────────

def _depth(args: argparse.Namespace) -> SampleDepth:
    return SampleDepth.PCM16 if args.use16 else SampleDepth.PCM8


def _read_stdin() -> bytes:
    try:
        return sys.stdin.buffer.read()
    except OSError as exc:
        raise RuntimeError(f'reading input failed: {exc}') from exc


def cmd_encode(args: argparse.Namespace, codec: ToneCodec):
    depth   = _depth(args)
    payload = _read_stdin()
    print(f'→ Encode  {len(payload)} bytes  {depth.value}-bit  profile={args.profile}',
          file=sys.stderr)

    stream = codec.encode(payload, depth)
    sys.stdout.buffer.write(stream)
    sys.stdout.buffer.flush()

    seconds = 2 * len(payload) * codec.config.duration
    print(f'✓ {len(stream)} bytes  ({2 * len(payload)} tones, {seconds:.1f}s)',
          file=sys.stderr)

    if args.wav:
        n = write_wav(args.wav, stream, codec.config)
        print(f'✓ Saved: {args.wav}  ({n} samples)', file=sys.stderr)


def cmd_decode(args: argparse.Namespace, codec: ToneCodec):
    depth = _depth(args)
    if args.wav:
        print(f'→ Decode  {args.wav}  (WAV → {depth.value}-bit)', file=sys.stderr)
        stream = stream_from_wav(args.wav, depth, codec.config)
    else:
        stream = _read_stdin()
        print(f'→ Decode  {len(stream)} bytes  {depth.value}-bit  profile={args.profile}',
              file=sys.stderr)

    result = codec.decode(stream, depth)
    print(f'  {result.summary()}', file=sys.stderr)
    if not result.success:
        raise DecodeError(result)

    sys.stdout.buffer.write(result.data)
    sys.stdout.buffer.flush()


# ─────────────────────────────────────────────────────────────────────────────
# Argument parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='hextone',
        description='hextone — encode bytes as hexadecimal audio tones and back.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  echo -n "hello" | python3 hextone.py > hello.au          # 8-bit AU stream
  python3 hextone.py -16 < photo.jpg > photo.au             # 16-bit AU stream
  python3 hextone.py -d < hello.au                          # → hello
  python3 hextone.py -d -16 < photo.au > photo.jpg
  python3 hextone.py --wav hello.wav < msg.txt > msg.au     # also write a WAV copy
  python3 hextone.py -d -16 --wav recorded.wav              # decode from a WAV file
""",
    )
    p.add_argument('-d', '--decode', action='store_true',
                   help='Decode mode (default: encode)')
    p.add_argument('-16', '--16bit', dest='use16', action='store_true',
                   help='Use 16-bit audio (default: 8-bit)')
    p.add_argument('--profile', default=DEFAULT_PROFILE, choices=list(PROFILES),
                   help=f'Tone tuning profile (default: {DEFAULT_PROFILE})')
    p.add_argument('--wav', default=None, metavar='PATH',
                   help='Encode: also write a 16-bit WAV copy. '
                        'Decode: read tones from this WAV instead of stdin.')
    return p


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None):
    parser = build_parser()
    args   = parser.parse_args(argv)

    try:
        codec = ToneCodec(config_for_profile(args.profile))
        if args.decode:
            cmd_decode(args, codec)
        else:
            cmd_encode(args, codec)
    except KeyboardInterrupt:
        print('\n⚠ Interrupted.', file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f'✗ Error: {e}', file=sys.stderr)
        if os.environ.get('HEXTONE_DEBUG'):
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
