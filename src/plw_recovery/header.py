"""
PLW header decoder.

Reads the fixed-offset fields this package needs from the start of the file,
validates them, and leaves the cursor at the start of the data section.
Fields not listed in HEADER_LAYOUT (signature, parameter table, notes, ...)
are skipped over.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, NamedTuple, Tuple

from .cursor import MOVE_ONLY, WIDTH_U16, WIDTH_U32, ByteCursor
from .errors import (
    InvalidChannelCountError,
    InvalidStartDateError,
    UnsupportedFormatVersionError,
)
from .models import RawHeader, SamplingUnit

logger = logging.getLogger(__name__)

MIN_FORMAT_VERSION = 3

# One uint16 parameter slot per channel between offsets 50 and 550
MAX_CHANNELS = 250

# Day number of 1970-01-01 when 0001-01-01 is day 1
DATE_ORDINAL_UNIX_EPOCH = 719163
MS_PER_DAY = 86_400_000
UNIX_EPOCH = datetime(1970, 1, 1)


class HeaderField(NamedTuple):
    key: str
    label: str
    offset: int
    width: int


# ==================== Header Layout ====================
# Little-endian. Must stay sorted by offset: the cursor only moves forward.

HEADER_LAYOUT: Tuple[HeaderField, ...] = (
    HeaderField("header_size", "Header Size", 0, WIDTH_U16),
    HeaderField("format_version", "Header Version", 42, WIDTH_U32),
    HeaderField("channel_count", "Number of Channels", 46, WIDTH_U32),
    HeaderField("sample_count_primary", "Sample Count A", 550, WIDTH_U32),
    HeaderField("sample_count_secondary", "Sample Count B", 554, WIDTH_U32),
    HeaderField("sampling_interval", "Interval", 562, WIDTH_U32),
    HeaderField("sampling_unit", "Timing Units", 566, WIDTH_U16),
    HeaderField("start_date_ordinal", "Start Date", 586, WIDTH_U32),
    HeaderField("start_time_of_day_seconds", "Start Time", 590, WIDTH_U32),
)

# Smallest file that holds every field in HEADER_LAYOUT
MIN_HEADER_BYTES = max(f.offset + f.width for f in HEADER_LAYOUT)


def read_header_fields(cursor: ByteCursor) -> Tuple[Dict[str, int], ByteCursor]:
    """
    Read every HEADER_LAYOUT field as a raw integer.

    Returns:
        Tuple of (field key -> value, cursor just past the last field)
    """
    values: Dict[str, int] = {}
    for field in HEADER_LAYOUT:
        value, cursor = cursor.skip_or_read_to(field.offset, field.width, field.label)
        logger.debug("%s @%d = %d", field.label, field.offset, value)
        values[field.key] = value

        # Reject old layouts before reading anything else from them
        if field.key == "format_version" and value < MIN_FORMAT_VERSION:
            raise UnsupportedFormatVersionError(value, MIN_FORMAT_VERSION)
    return values, cursor


def reconstruct_start_time(date_ordinal: int, seconds_of_day: float) -> datetime:
    """
    Build the start timestamp from the two independent header fields.

    The date comes from the ordinal day count; hour, minute and second are
    then split out of the seconds-of-day field and set on that date.
    Sub-second precision is dropped.
    """
    epoch_millis = (date_ordinal - DATE_ORDINAL_UNIX_EPOCH) * MS_PER_DAY

    hour = seconds_of_day / 3600.0
    hour_int = int(hour)
    minute = (hour - hour_int) * 60
    minute_int = int(minute)
    second = (minute - minute_int) * 60
    second_int = int(second)

    try:
        day = UNIX_EPOCH + timedelta(milliseconds=epoch_millis)
        # Hours past 23 roll over into the following days
        return day + timedelta(hours=hour_int, minutes=minute_int, seconds=second_int)
    except OverflowError as e:
        raise InvalidStartDateError(date_ordinal, seconds_of_day) from e


def decode_header(cursor: ByteCursor) -> Tuple[RawHeader, ByteCursor]:
    """
    Decode the header from a cursor at the start of the file.

    Args:
        cursor: Cursor at position 0

    Returns:
        Tuple of (RawHeader, cursor positioned at header_size)

    Raises:
        CursorError: a field could not be read (field name attached)
        InvalidHeaderError: a field holds an unusable value
    """
    values, cursor = read_header_fields(cursor)

    if not 0 < values["channel_count"] <= MAX_CHANNELS:
        raise InvalidChannelCountError(values["channel_count"])

    unit = SamplingUnit.from_index(values["sampling_unit"])
    start_time = reconstruct_start_time(
        values["start_date_ordinal"], values["start_time_of_day_seconds"]
    )

    header = RawHeader(
        header_size=values["header_size"],
        format_version=values["format_version"],
        channel_count=values["channel_count"],
        sample_count_primary=values["sample_count_primary"],
        sample_count_secondary=values["sample_count_secondary"],
        sampling_interval=values["sampling_interval"],
        sampling_unit=unit,
        start_date_ordinal=values["start_date_ordinal"],
        start_time_of_day_seconds=values["start_time_of_day_seconds"],
        start_time=start_time,
    )

    if header.sample_count_primary != header.sample_count_secondary:
        logger.warning(
            "Sample counters disagree (A=%d, B=%d); trusting %d records",
            header.sample_count_primary,
            header.sample_count_secondary,
            header.valid_record_count,
        )

    # Move to start of data
    _, cursor = cursor.skip_or_read_to(header.header_size, MOVE_ONLY, "Data Start")
    return header, cursor
