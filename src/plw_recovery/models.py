"""
Data models for decoded PLW headers and records.

RawHeader is a frozen Pydantic model built once per file; DecodedRecord is a
plain tuple since one is produced for every record in the data section.
"""

import math
from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import UnsupportedSamplingUnitError

READER_VERSION = "0.1.0"


class SamplingUnit(str, Enum):
    """Sampling interval unit, in the order the header indexes them (0-7)."""
    FEMTOSECOND = "fs"
    PICOSECOND = "ps"
    NANOSECOND = "ns"
    MICROSECOND = "us"
    MILLISECOND = "ms"
    SECOND = "s"
    MINUTE = "min"
    HOUR = "hour"

    @classmethod
    def from_index(cls, index: int) -> "SamplingUnit":
        if not 0 <= index < len(SAMPLING_UNITS):
            raise UnsupportedSamplingUnitError(index)
        return SAMPLING_UNITS[index]

    @property
    def header_index(self) -> int:
        return SAMPLING_UNITS.index(self)

    @property
    def seconds(self) -> float:
        """Multiplier converting one unit to seconds."""
        return UNIT_SECONDS[self]


SAMPLING_UNITS: Tuple[SamplingUnit, ...] = tuple(SamplingUnit)

UNIT_SECONDS = {
    SamplingUnit.FEMTOSECOND: 1e-15,
    SamplingUnit.PICOSECOND: 1e-12,
    SamplingUnit.NANOSECOND: 1e-9,
    SamplingUnit.MICROSECOND: 1e-6,
    SamplingUnit.MILLISECOND: 1e-3,
    SamplingUnit.SECOND: 1.0,
    SamplingUnit.MINUTE: 60.0,
    SamplingUnit.HOUR: 3600.0,
}


def format_timestamp(value: datetime) -> str:
    """Render as D/M/YYYY H:M:S, unpadded, the way the logger software prints dates."""
    return (
        f"{value.day}/{value.month}/{value.year} "
        f"{value.hour}:{value.minute}:{value.second}"
    )


# ==================== Header ====================


class RawHeader(BaseModel):
    """
    Header fields needed to decode the data section.

    The logger keeps two record counters that can disagree after a crash;
    only the lower of the two is trusted (see valid_record_count).
    """
    model_config = ConfigDict(frozen=True)

    header_size: int = Field(ge=0, lt=2**16, description="Byte offset of the data section")
    format_version: int = Field(ge=0, lt=2**32, description="PLW header version")
    channel_count: int = Field(gt=0, le=250, description="Number of logged channels")
    sample_count_primary: int = Field(ge=0, lt=2**32, description="Record counter A (offset 550)")
    sample_count_secondary: int = Field(ge=0, lt=2**32, description="Record counter B (offset 554)")
    sampling_interval: int = Field(ge=0, lt=2**32, description="Interval between records")
    sampling_unit: SamplingUnit = Field(description="Unit of sampling_interval")
    start_date_ordinal: int = Field(ge=0, lt=2**32, description="Start date as day count from 0001-01-01")
    start_time_of_day_seconds: int = Field(ge=0, lt=2**32, description="Start time as seconds since midnight")
    start_time: datetime = Field(description="Reconstructed start timestamp (naive, logger local time)")

    @property
    def valid_record_count(self) -> int:
        """Reconciled record count: the lower of the two counters."""
        return min(self.sample_count_primary, self.sample_count_secondary)

    @property
    def record_size(self) -> int:
        """Bytes per record: int32 time marker plus one float32 per channel."""
        return 4 + 4 * self.channel_count

    def summary(self, file_name: str) -> str:
        """Human-readable header summary."""
        lines = [
            f"PLW Reader Version: {READER_VERSION}",
            f"PLW Version: {self.format_version}",
            f"File Name: {file_name}",
            f"Date of Test: {format_timestamp(self.start_time)}",
            f"Number of Channels: {self.channel_count}",
            f"Last Sample Number: {self.valid_record_count}",
            f"Sample Interval: {self.sampling_interval}{self.sampling_unit.value}",
        ]
        return "\n".join(lines)


# ==================== Records ====================


class DecodedRecord(NamedTuple):
    """One fixed-width record: raw time marker and one sample per channel."""
    time_marker: int
    samples: Tuple[float, ...]


class RunningStats(BaseModel):
    """Minimum/maximum over every accepted sample. None until the first sample."""
    model_config = ConfigDict(frozen=True)

    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.minimum is not None

    def merged(self, samples: Sequence[float]) -> "RunningStats":
        """Return new stats that also cover `samples`."""
        minimum, maximum = self.minimum, self.maximum
        for value in samples:
            # NaN never wins a comparison, so it cannot poison the bounds
            if math.isnan(value):
                continue
            if minimum is None or value < minimum:
                minimum = value
            if maximum is None or value > maximum:
                maximum = value
        return RunningStats(minimum=minimum, maximum=maximum)


def channel_columns(channel_count: int) -> List[str]:
    """Result table column names: time, channel_1 .. channel_N."""
    return ["time"] + [f"channel_{i + 1}" for i in range(channel_count)]
