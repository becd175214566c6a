"""
Record stream decoder for the PLW data section.

Each record is an int32 time marker followed by one float32 per channel,
little-endian. Decoding stops at whichever comes first: the reconciled record
count, or a chunk the file cannot fill (end of file or a record torn by a
logger crash). A torn record is dropped, never partially decoded.
"""

import logging
import struct
from typing import Iterator

from .cursor import ByteCursor
from .models import DecodedRecord

logger = logging.getLogger(__name__)


def record_size(channel_count: int) -> int:
    """Bytes per record: 4-byte time marker + 4 bytes per channel."""
    return 4 + 4 * channel_count


def record_struct(channel_count: int) -> struct.Struct:
    return struct.Struct(f"<i{channel_count}f")


def iter_records(
    cursor: ByteCursor, channel_count: int, valid_record_count: int
) -> Iterator[DecodedRecord]:
    """
    Lazily decode records from a cursor at the start of the data section.

    Args:
        cursor: Cursor positioned at header_size
        channel_count: Samples per record
        valid_record_count: Maximum number of records to trust

    Yields:
        DecodedRecord in file order
    """
    layout = record_struct(channel_count)
    size = layout.size
    emitted = 0
    logger.debug("Record size %d bytes, at most %d records", size, valid_record_count)

    while emitted < valid_record_count:
        chunk, cursor = cursor.read_chunk(size)
        if len(chunk) < size:
            if chunk:
                logger.info(
                    "Dropped torn record at byte %d (%d of %d bytes)",
                    cursor.position - len(chunk), len(chunk), size,
                )
            logger.info(
                "Data ended after %d of %d records", emitted, valid_record_count
            )
            return

        time_marker, *samples = layout.unpack(chunk)
        emitted += 1
        yield DecodedRecord(time_marker, tuple(samples))
