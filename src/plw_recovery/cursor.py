"""
Forward-only positioned reader over a PLW byte stream.

The cursor is an immutable value: every read returns the decoded value
together with a new cursor whose position has advanced. The underlying
stream is only ever read, never seeked, so the cursor works on pipes and
other non-seekable sources too.
"""

import struct
from dataclasses import dataclass, replace
from typing import BinaryIO, Optional, Tuple

from .errors import BackwardSeekError, TruncatedReadError, UnsupportedWidthError

# Read widths accepted by skip_or_read_to
MOVE_ONLY = 0
WIDTH_U16 = 2
WIDTH_U32 = 4

# Skips and chunk reads are done in bounded blocks so a corrupt header cannot allocate a huge buffer
READ_BLOCK_SIZE = 64 * 1024

U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
I32 = struct.Struct("<i")
F32 = struct.Struct("<f")


def decode_u16(data: bytes) -> int:
    return U16.unpack(data)[0]


def decode_u32(data: bytes) -> int:
    """Little-endian unsigned: b0 + 256*b1 + 65536*b2 + 16777216*b3."""
    return U32.unpack(data)[0]


def decode_i32(data: bytes) -> int:
    return I32.unpack(data)[0]


def decode_f32(data: bytes) -> float:
    """Reinterpret four little-endian bytes as an IEEE-754 single."""
    return F32.unpack(data)[0]


_DECODERS = {
    WIDTH_U16: decode_u16,
    WIDTH_U32: decode_u32,
}


@dataclass(frozen=True)
class ByteCursor:
    stream: BinaryIO
    position: int = 0

    def _read_exact(self, size: int, field: Optional[str]) -> bytes:
        try:
            data = self.stream.read(size)
        except OSError as e:
            raise TruncatedReadError(self.position, size, 0, field) from e
        if len(data) != size:
            raise TruncatedReadError(self.position, size, len(data), field)
        return data

    def _skip(self, count: int, field: Optional[str]) -> "ByteCursor":
        cursor = self
        while count > 0:
            block = min(count, READ_BLOCK_SIZE)
            cursor._read_exact(block, field)
            cursor = replace(cursor, position=cursor.position + block)
            count -= block
        return cursor

    def skip_or_read_to(
        self, target: int, width: int, field: Optional[str] = None
    ) -> Tuple[Optional[int], "ByteCursor"]:
        """
        Move forward to byte `target`, then decode `width` bytes there.

        Args:
            target: Absolute byte offset; must not be behind the current position
            width: 0 to only move, 2 for uint16, 4 for uint32
            field: Name of the header field being read, attached to any error

        Returns:
            Tuple of (decoded value or None for width 0, advanced cursor)

        Raises:
            BackwardSeekError: target is behind the current position
            UnsupportedWidthError: width is not 0, 2 or 4
            TruncatedReadError: the stream ended or failed before enough bytes were read
        """
        if target < self.position:
            raise BackwardSeekError(self.position, target, field)
        if width != MOVE_ONLY and width not in _DECODERS:
            raise UnsupportedWidthError(width, field)

        cursor = self._skip(target - self.position, field)
        if width == MOVE_ONLY:
            return None, cursor

        data = cursor._read_exact(width, field)
        return _DECODERS[width](data), replace(cursor, position=cursor.position + width)

    def read_chunk(self, size: int) -> Tuple[bytes, "ByteCursor"]:
        """
        Read up to `size` bytes. A short result is returned as-is, not raised.

        Raises:
            OSError: the underlying stream failed
        """
        blocks = []
        remaining = size
        while remaining > 0:
            wanted = min(remaining, READ_BLOCK_SIZE)
            block = self.stream.read(wanted)
            blocks.append(block)
            remaining -= len(block)
            if len(block) < wanted:
                break
        data = b"".join(blocks)
        return data, replace(self, position=self.position + len(data))
