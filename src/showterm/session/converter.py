"""ttyrecord to script/timing conversion."""

import logging
import struct

from showterm.errors import FormatError
from showterm.session.base import TermSession

logger = logging.getLogger(__name__)

# seconds, microseconds, payload length; little-endian uint32 each
FRAME_HEADER = struct.Struct("<III")
CONVERTED_HEADER = b"Converted from ttyrecord\n"


def convert(raw: bytes) -> TermSession:
    """
    Convert a ttyrecord stream into a TermSession.

    Every frame becomes one timing line holding the delay since the previous
    frame and the payload size. Payload bytes are copied verbatim after a
    fixed header line.

    Args:
        raw: Complete contents of a ttyrec file

    Returns:
        TermSession with default geometry

    Raises:
        FormatError: If the stream is shorter than one frame header or ends
            in a partial frame
    """
    total = len(raw)
    if total < FRAME_HEADER.size:
        raise FormatError(f"Corrupt ttyrecord: only {total} bytes ({raw[:FRAME_HEADER.size]!r})")

    script = bytearray(CONVERTED_HEADER)
    timing = []

    prev_sec, prev_usec, _ = FRAME_HEADER.unpack_from(raw, 0)
    pos = 0
    while pos < total:
        if total - pos < FRAME_HEADER.size:
            raise FormatError(
                f"Corrupt ttyrecord: {total - pos} trailing bytes at offset {pos}, "
                f"expected a {FRAME_HEADER.size} byte frame header"
            )
        sec, usec, length = FRAME_HEADER.unpack_from(raw, pos)
        start = pos + FRAME_HEADER.size
        end = start + length
        if end > total:
            raise FormatError(
                f"Corrupt ttyrecord: frame at offset {pos} declares {length} bytes "
                f"but only {total - start} remain"
            )

        # Not clamped: clock jitter can make this slightly negative.
        delta = (sec - prev_sec) + (usec - prev_usec) * 1e-6
        timing.append(f"{delta} {length}\n")
        script += raw[start:end]

        prev_sec, prev_usec = sec, usec
        pos = end

    logger.debug(
        "Converted %d ttyrecord frames (%d payload bytes)",
        len(timing),
        len(script) - len(CONVERTED_HEADER),
    )
    return TermSession(script_text=bytes(script), timing_text="".join(timing))
