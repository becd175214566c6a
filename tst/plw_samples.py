"""
Synthetic PLW file contents built with struct.

Every header field and record byte is known exactly.
"""

import struct
from datetime import date

HEADER_SIZE = 1684
START_DATE = date(2024, 1, 22)
START_SECONDS = 37800  # 10:30:00


def build_header(
    header_size: int = HEADER_SIZE,
    format_version: int = 4,
    channel_count: int = 2,
    sample_count_a: int = 5,
    sample_count_b: int = 5,
    interval: int = 1,
    unit_index: int = 5,
    date_ordinal: int = START_DATE.toordinal(),
    time_seconds: int = START_SECONDS,
) -> bytes:
    """Header bytes with every decoded field set; everything else zero."""
    header = bytearray(max(header_size, 594))
    struct.pack_into("<H", header, 0, header_size)
    header[2:42] = b"PicoLog data file".ljust(40, b"\x00")
    struct.pack_into("<I", header, 42, format_version)
    struct.pack_into("<I", header, 46, channel_count)
    struct.pack_into("<I", header, 550, sample_count_a)
    struct.pack_into("<I", header, 554, sample_count_b)
    struct.pack_into("<I", header, 558, max(sample_count_a, sample_count_b))
    struct.pack_into("<I", header, 562, interval)
    struct.pack_into("<H", header, 566, unit_index)
    struct.pack_into("<I", header, 586, date_ordinal)
    struct.pack_into("<I", header, 590, time_seconds)
    return bytes(header)


def pack_records(records) -> bytes:
    """Pack (time_marker, [samples...]) pairs as int32 + float32 * N."""
    data = b""
    for time_marker, samples in records:
        data += struct.pack(f"<i{len(samples)}f", time_marker, *samples)
    return data


def make_records(count: int, channel_count: int):
    return [
        (i, [0.5 * i + ch for ch in range(channel_count)])
        for i in range(count)
    ]

