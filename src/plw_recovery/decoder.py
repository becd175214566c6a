"""
Top-level PLW decode: header, record stream and result table.

Opens the file, decodes the header, streams the records into a pandas
DataFrame with columns time, channel_1 .. channel_N, and tracks the running
minimum/maximum sample value.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, Optional, Tuple, Union

import pandas as pd
from pandas.errors import OutOfBoundsDatetime, OutOfBoundsTimedelta

from .cursor import ByteCursor
from .errors import PLWError, TimestampOutOfRangeError
from .header import decode_header
from .models import (
    DecodedRecord,
    RawHeader,
    RunningStats,
    SamplingUnit,
    channel_columns,
)
from .records import iter_records

logger = logging.getLogger(__name__)

TIME_DTYPE = "int32"
SAMPLE_DTYPE = "float32"

MAX_TIMEDELTA_SECONDS = pd.Timedelta.max.total_seconds()


# ==================== Aggregation ====================


def aggregate(
    records: Iterable[DecodedRecord], channel_count: int
) -> Tuple[pd.DataFrame, RunningStats]:
    """
    Collect records into the result table and running min/max.

    Args:
        records: Decoded records, consumed once in order
        channel_count: Declared number of channels

    Returns:
        Tuple of (DataFrame with time and channel columns, RunningStats)
    """
    columns = channel_columns(channel_count)
    stats = RunningStats()
    rows = []
    for record in records:
        assert len(record.samples) == channel_count, (
            f"record has {len(record.samples)} samples, expected {channel_count}"
        )
        rows.append((record.time_marker, *record.samples))
        stats = stats.merged(record.samples)

    table = pd.DataFrame.from_records(rows, columns=columns)
    dtypes = {col: SAMPLE_DTYPE for col in columns[1:]}
    dtypes["time"] = TIME_DTYPE
    return table.astype(dtypes), stats


# ==================== Result ====================


@dataclass(frozen=True)
class DecodedLog:
    """Result of one decode. rows_produced < valid_record_count means the file was cut short."""
    file_name: str
    header: RawHeader
    table: pd.DataFrame
    stats: RunningStats

    @property
    def channel_count(self) -> int:
        return self.header.channel_count

    @property
    def valid_record_count(self) -> int:
        return self.header.valid_record_count

    @property
    def sampling_interval(self) -> int:
        return self.header.sampling_interval

    @property
    def sampling_unit(self) -> SamplingUnit:
        return self.header.sampling_unit

    @property
    def start_time(self) -> datetime:
        return self.header.start_time

    @property
    def minimum_sample(self) -> Optional[float]:
        return self.stats.minimum

    @property
    def maximum_sample(self) -> Optional[float]:
        return self.stats.maximum

    @property
    def rows_produced(self) -> int:
        return len(self.table)

    def timestamp_for_record(self, time_marker: int) -> datetime:
        """Absolute time of a record: start time + time_marker sampling units."""
        try:
            return self.start_time + timedelta(
                seconds=time_marker * self.sampling_unit.seconds
            )
        except OverflowError as e:
            raise TimestampOutOfRangeError(time_marker, self.sampling_unit.value) from e

    def timestamps(self) -> pd.Series:
        """timestamp_for_record applied to every row of the table."""
        markers = self.table["time"].astype("int64")
        seconds = markers.astype("float64") * self.sampling_unit.seconds
        worst = int(markers.abs().max()) if len(markers) else 0

        # Float to timedelta conversion does not range-check on every pandas version
        if len(seconds) and seconds.abs().max() >= MAX_TIMEDELTA_SECONDS:
            raise TimestampOutOfRangeError(worst, self.sampling_unit.value)
        try:
            offsets = pd.to_timedelta(seconds, unit="s")
            return (pd.Timestamp(self.start_time) + offsets).rename("timestamp")
        except (OverflowError, OutOfBoundsDatetime, OutOfBoundsTimedelta) as e:
            raise TimestampOutOfRangeError(worst, self.sampling_unit.value) from e

    def summary(self) -> str:
        return self.header.summary(self.file_name)


# ==================== Entry Points ====================


def decode_stream(stream: BinaryIO, file_name: str = "<stream>") -> DecodedLog:
    """
    Decode an open binary stream positioned at the start of a PLW file.

    Raises:
        PLWError: the header could not be read or is not supported
        OSError: the stream failed while reading records
    """
    header, cursor = decode_header(ByteCursor(stream))
    logger.info(
        "Decoding %s: %d channels, up to %d records",
        file_name, header.channel_count, header.valid_record_count,
    )

    records = iter_records(cursor, header.channel_count, header.valid_record_count)
    table, stats = aggregate(records, header.channel_count)

    if len(table) < header.valid_record_count:
        logger.warning(
            "%s: recovered %d of %d records", file_name, len(table), header.valid_record_count
        )
    else:
        logger.info("%s: recovered %d records", file_name, len(table))

    return DecodedLog(file_name=file_name, header=header, table=table, stats=stats)


def decode_file(filepath: Union[str, Path]) -> DecodedLog:
    """
    Decode a PLW file.

    Args:
        filepath: Path to the .plw file

    Returns:
        DecodedLog with the header, result table and running stats

    Raises:
        FileNotFoundError / PermissionError: the file could not be opened
        PLWError: the header could not be read or is not supported
    """
    filepath = Path(filepath)
    with open(filepath, "rb") as f:
        return decode_stream(f, filepath.name)


def read_header(filepath: Union[str, Path]) -> RawHeader:
    """Decode only the header of a PLW file, leaving the data section unread."""
    filepath = Path(filepath)
    with open(filepath, "rb") as f:
        header, _ = decode_header(ByteCursor(f))
    return header


def validate_file(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Check a PLW file's header against its size on disk, without decoding records.

    Args:
        filepath: Path to the .plw file

    Returns:
        Validation results dictionary
    """
    filepath = Path(filepath)
    results: Dict[str, Any] = {
        "valid": True,
        "errors": [],
        "warnings": [],
        "header": None,
        "file_size": None,
        "physical_records": None,
        "has_partial_record": False,
    }

    try:
        header = read_header(filepath)
    except (PLWError, OSError) as e:
        results["errors"].append(str(e))
        results["valid"] = False
        return results

    file_size = filepath.stat().st_size
    data_bytes = max(file_size - header.header_size, 0)
    physical_records, remainder = divmod(data_bytes, header.record_size)

    results["header"] = header
    results["file_size"] = file_size
    results["physical_records"] = physical_records
    results["has_partial_record"] = remainder > 0

    if header.sample_count_primary != header.sample_count_secondary:
        results["warnings"].append(
            f"Sample counters disagree (A={header.sample_count_primary}, "
            f"B={header.sample_count_secondary}); using {header.valid_record_count}"
        )
    if remainder > 0:
        results["warnings"].append(
            f"Data section ({data_bytes} bytes) ends with a partial record "
            f"({remainder} of {header.record_size} bytes)"
        )
    if physical_records < header.valid_record_count:
        results["warnings"].append(
            f"File holds {physical_records} complete records, "
            f"header declares {header.valid_record_count}"
        )
    elif physical_records > header.valid_record_count:
        results["warnings"].append(
            f"{physical_records - header.valid_record_count} records beyond the "
            f"declared count will be ignored"
        )

    return results
