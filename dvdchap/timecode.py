"""BCD playback-time decoding and frame/millisecond conversion.

DVD cell and PGC durations are stored as four BCD bytes
``hour, minute, second, frame_u``.  The two top bits of ``frame_u`` carry
the frame rate (``01`` = 25 fps, ``11`` = 30 fps), the remaining six bits
hold the frame count as two BCD digits.
"""

from __future__ import annotations

PAL_FPS = 25
NTSC_FPS = 30

_PAL_RATE_CODE = 1


def decode_bcd(value: int) -> int:
    """Decode a byte holding two BCD digits (``0x59`` -> 59).

    Digits above 9 are not rejected; the result is simply the nibble sum.
    """
    return ((value & 0xF0) >> 4) * 10 + (value & 0x0F)


def frame_rate_of(frame_byte: int) -> int:
    """Return 25 or 30 from the rate bits (6-7) of a ``frame_u`` byte."""
    if ((frame_byte & 0xC0) >> 6) == _PAL_RATE_CODE:
        return PAL_FPS
    return NTSC_FPS


def frame_digits(frame_byte: int) -> int:
    """Return the BCD frame count held in the low six bits of ``frame_u``."""
    return ((frame_byte & 0x30) >> 4) * 10 + (frame_byte & 0x0F)


def frames_to_ms(total_frames: int, fps: int) -> int:
    """Convert a frame count to milliseconds.

    30 fps material is really 30000/1001 fps, so NTSC counts are scaled by
    1001 instead of 1000.  A zero rate (nothing measured yet) divides by 1.
    """
    factor = 1001 if fps == NTSC_FPS else 1000
    return total_frames * factor // (fps or 1)


def format_timestamp(ms: int) -> str:
    """Format *ms* as ``HH:MM:SS.mmm`` for Matroska chapter files."""
    ms = max(0, ms)
    hours = ms // 3_600_000
    minutes = (ms // 60_000) % 60
    seconds = (ms // 1000) % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms % 1000:03d}"
