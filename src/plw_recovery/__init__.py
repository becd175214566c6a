"""
PLW Recovery - data recovery for truncated or corrupted PLW logger files

Decodes the PLW header and streams the intact records of the data section
into a pandas DataFrame, trusting only the lower of the two record counters.
"""

from .errors import (
    PLWError,
    CursorError,
    BackwardSeekError,
    TruncatedReadError,
    UnsupportedWidthError,
    InvalidHeaderError,
    UnsupportedFormatVersionError,
    InvalidChannelCountError,
    UnsupportedSamplingUnitError,
    InvalidStartDateError,
    TimestampOutOfRangeError,
)
from .models import (
    READER_VERSION,
    SamplingUnit,
    RawHeader,
    DecodedRecord,
    RunningStats,
)
from .cursor import ByteCursor
from .header import decode_header, reconstruct_start_time
from .records import iter_records
from .decoder import (
    DecodedLog,
    aggregate,
    decode_stream,
    decode_file,
    read_header,
    validate_file,
)

__version__ = READER_VERSION
__all__ = [
    "PLWError",
    "CursorError",
    "BackwardSeekError",
    "TruncatedReadError",
    "UnsupportedWidthError",
    "InvalidHeaderError",
    "UnsupportedFormatVersionError",
    "InvalidChannelCountError",
    "UnsupportedSamplingUnitError",
    "InvalidStartDateError",
    "TimestampOutOfRangeError",
    "SamplingUnit",
    "RawHeader",
    "DecodedRecord",
    "RunningStats",
    "ByteCursor",
    "decode_header",
    "reconstruct_start_time",
    "iter_records",
    "DecodedLog",
    "aggregate",
    "decode_stream",
    "decode_file",
    "read_header",
    "validate_file",
]
