"""
Exception hierarchy for PLW decoding.

Every failure that aborts a decode derives from PLWError. Short reads inside
the record section are not errors and never raise.
"""

from typing import Optional


class PLWError(Exception):
    """Base class for all decode failures."""


# ==================== Cursor Errors ====================


class CursorError(PLWError):
    """A positioned read failed. `field` names the header field being read, if any."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"Error reading {field}: {message}"
        super().__init__(message)


class BackwardSeekError(CursorError):
    def __init__(self, position: int, target: int, field: Optional[str] = None):
        self.position = position
        self.target = target
        super().__init__(
            f"cannot move backwards from byte {position} to byte {target}", field
        )


class TruncatedReadError(CursorError):
    def __init__(self, position: int, requested: int, received: int, field: Optional[str] = None):
        self.position = position
        self.requested = requested
        self.received = received
        super().__init__(
            f"wanted {requested} bytes at byte {position}, got {received}", field
        )


class UnsupportedWidthError(CursorError):
    def __init__(self, width: int, field: Optional[str] = None):
        self.width = width
        super().__init__(f"unsupported read width {width} (expected 0, 2 or 4)", field)


# ==================== Header Validation Errors ====================


class InvalidHeaderError(PLWError):
    """The header was read in full but holds values this decoder cannot use."""


class UnsupportedFormatVersionError(InvalidHeaderError):
    def __init__(self, version: int, minimum: int):
        self.version = version
        self.minimum = minimum
        super().__init__(f"Header Version: {version} not supported (minimum {minimum})")


class InvalidChannelCountError(InvalidHeaderError):
    def __init__(self, channel_count: int):
        self.channel_count = channel_count
        super().__init__(f"Header declares {channel_count} channels (expected 1-250)")


class UnsupportedSamplingUnitError(InvalidHeaderError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Sampling unit index {index} is outside 0-7")


class InvalidStartDateError(InvalidHeaderError):
    def __init__(self, date_ordinal: int, seconds_of_day: int):
        self.date_ordinal = date_ordinal
        self.seconds_of_day = seconds_of_day
        super().__init__(
            f"Start date {date_ordinal} / time {seconds_of_day}s is not a representable timestamp"
        )


# ==================== Projection Errors ====================


class TimestampOutOfRangeError(PLWError):
    def __init__(self, time_marker: int, unit: str):
        self.time_marker = time_marker
        self.unit = unit
        super().__init__(
            f"Time marker {time_marker} {unit} from the start time is not a representable timestamp"
        )
