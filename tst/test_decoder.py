"""Tests for decoding whole PLW files into result tables."""

import io
import struct
from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pydantic
import pytest

from plw_samples import HEADER_SIZE, build_header, make_records, pack_records
from plw_recovery.decoder import (
    aggregate,
    decode_file,
    decode_stream,
    read_header,
    validate_file,
)
from plw_recovery.errors import (
    InvalidChannelCountError,
    TimestampOutOfRangeError,
    TruncatedReadError,
    UnsupportedFormatVersionError,
)
from plw_recovery.models import DecodedRecord, SamplingUnit


class TestDecodeFile:
    def test_decode_complete_file(self, plw_file):
        log = decode_file(plw_file)

        assert log.file_name == "test.plw"
        assert log.channel_count == 2
        assert log.valid_record_count == 5
        assert log.rows_produced == 5
        assert list(log.table.columns) == ["time", "channel_1", "channel_2"]
        assert log.table["time"].tolist() == [0, 1, 2, 3, 4]
        assert log.table["channel_2"].tolist() == [1.0, 1.5, 2.0, 2.5, 3.0]

    def test_column_dtypes(self, plw_file):
        table = decode_file(plw_file).table
        assert table["time"].dtype == np.int32
        assert table["channel_1"].dtype == np.float32

    def test_lower_counter_wins(self, mismatched_counts_file):
        log = decode_file(mismatched_counts_file)
        assert log.valid_record_count == 3
        assert log.rows_produced == 3
        assert log.table["time"].tolist() == [0, 1, 2]

    def test_truncated_file(self, truncated_file):
        log = decode_file(truncated_file)
        assert log.valid_record_count == 10
        assert log.rows_produced == 4
        assert log.table["channel_1"].tolist() == [0.0, 0.5, 1.0, 1.5]

    def test_zero_records(self, plw_factory):
        path = plw_factory(records=make_records(3, 2), sample_count_a=0, sample_count_b=4)
        log = decode_file(path)
        assert log.rows_produced == 0
        assert list(log.table.columns) == ["time", "channel_1", "channel_2"]
        assert log.minimum_sample is None
        assert log.maximum_sample is None
        assert not log.stats.is_set

    def test_bit_exact_round_trip(self, plw_factory):
        values = [1.0, -2.25, 3.4028234663852886e38, 1e-45, 0.1, -0.0]
        records = [(i, [v]) for i, v in enumerate(values)]
        path = plw_factory(
            records=records, channel_count=1,
            sample_count_a=len(values), sample_count_b=len(values),
        )
        log = decode_file(path)

        expected = struct.pack(f"<{len(values)}f", *values)
        actual = log.table["channel_1"].to_numpy().astype("<f4").tobytes()
        assert actual == expected

    def test_running_stats(self, plw_factory):
        records = [(0, [1.5, -3.0]), (1, [7.25, 0.0]), (2, [2.0, 2.0])]
        path = plw_factory(records=records, sample_count_a=3, sample_count_b=3)
        log = decode_file(path)
        assert log.minimum_sample == -3.0
        assert log.maximum_sample == 7.25

    def test_unsupported_version(self, plw_factory):
        path = plw_factory(records=make_records(5, 2), format_version=2)
        with pytest.raises(UnsupportedFormatVersionError):
            decode_file(path)

    def test_truncated_header(self, tmp_path):
        path = tmp_path / "short.plw"
        path.write_bytes(build_header()[:300])
        with pytest.raises(TruncatedReadError):
            decode_file(path)

    def test_corrupt_channel_count(self, plw_factory):
        path = plw_factory(
            trailing=b"\x00" * 16,
            channel_count=0xFFFFFFFF,
            sample_count_a=3,
            sample_count_b=3,
        )
        with pytest.raises(InvalidChannelCountError):
            decode_file(path)

    def test_stats_frozen(self, plw_file):
        log = decode_file(plw_file)
        with pytest.raises(pydantic.ValidationError):
            log.stats.minimum = -100.0
        assert log.minimum_sample == 0.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            decode_file(tmp_path / "nonexistent.plw")

    def test_decode_stream(self):
        data = build_header(channel_count=1, sample_count_a=2, sample_count_b=2)
        data += pack_records(make_records(2, 1))
        log = decode_stream(io.BytesIO(data), "memory.plw")
        assert log.rows_produced == 2
        assert "File Name: memory.plw" in log.summary()


class TestTimestamps:
    def test_timestamp_for_record_seconds(self, plw_factory):
        log = decode_file(plw_factory(records=make_records(5, 2), unit_index=5))
        assert log.timestamp_for_record(10) == datetime(2024, 1, 22, 10, 30, 10)

    def test_timestamp_for_record_minutes(self, plw_factory):
        log = decode_file(plw_factory(records=make_records(5, 2), unit_index=6))
        assert log.sampling_unit == SamplingUnit.MINUTE
        assert log.timestamp_for_record(3) == log.start_time + timedelta(minutes=3)

    def test_timestamp_for_record_milliseconds(self, plw_factory):
        log = decode_file(plw_factory(records=make_records(5, 2), unit_index=4))
        assert log.timestamp_for_record(500) == log.start_time + timedelta(milliseconds=500)

    def test_timestamps_series(self, plw_file):
        log = decode_file(plw_file)
        stamps = log.timestamps()
        assert len(stamps) == 5
        assert stamps.iloc[0] == pd.Timestamp(log.start_time)
        assert stamps.iloc[4] == pd.Timestamp(log.timestamp_for_record(4))

    def test_timestamp_for_record_out_of_range(self, plw_factory):
        records = [(2**31 - 1, [1.0, 2.0])]
        log = decode_file(plw_factory(
            records=records, unit_index=7, sample_count_a=1, sample_count_b=1,
        ))
        with pytest.raises(TimestampOutOfRangeError) as exc:
            log.timestamp_for_record(2**31 - 1)
        assert exc.value.time_marker == 2**31 - 1
        assert exc.value.unit == "hour"

    def test_timestamps_out_of_range(self, plw_factory):
        records = [(0, [1.0, 2.0]), (2**31 - 1, [1.0, 2.0])]
        log = decode_file(plw_factory(
            records=records, unit_index=7, sample_count_a=2, sample_count_b=2,
        ))
        with pytest.raises(TimestampOutOfRangeError):
            log.timestamps()


class TestAggregate:
    def test_empty(self):
        table, stats = aggregate(iter([]), 3)
        assert table.empty
        assert list(table.columns) == ["time", "channel_1", "channel_2", "channel_3"]
        assert not stats.is_set

    def test_sample_count_mismatch_is_assertion(self):
        with pytest.raises(AssertionError):
            aggregate([DecodedRecord(0, (1.0,))], 2)


class TestReadHeader:
    def test_header_only(self, plw_file):
        header = read_header(plw_file)
        assert header.channel_count == 2
        assert header.valid_record_count == 5

    def test_summary(self, plw_file):
        summary = read_header(plw_file).summary(plw_file.name)
        assert "PLW Version: 4" in summary
        assert "File Name: test.plw" in summary
        assert "Date of Test: 22/1/2024 10:30:0" in summary
        assert "Number of Channels: 2" in summary
        assert "Last Sample Number: 5" in summary
        assert "Sample Interval: 1s" in summary


class TestValidateFile:
    def test_validate_complete_file(self, plw_file):
        results = validate_file(plw_file)
        assert results["valid"] is True
        assert results["errors"] == []
        assert results["warnings"] == []
        assert results["physical_records"] == 5
        assert results["has_partial_record"] is False
        assert results["file_size"] == HEADER_SIZE + 5 * 12

    def test_validate_truncated_file(self, truncated_file):
        results = validate_file(truncated_file)
        assert results["valid"] is True
        assert results["physical_records"] == 4
        assert results["has_partial_record"] is True
        assert any("partial record" in w for w in results["warnings"])
        assert any("declares 10" in w for w in results["warnings"])

    def test_validate_mismatched_counts(self, mismatched_counts_file):
        results = validate_file(mismatched_counts_file)
        assert any("disagree" in w for w in results["warnings"])
        assert any("will be ignored" in w for w in results["warnings"])

    def test_validate_bad_version(self, plw_factory):
        results = validate_file(plw_factory(format_version=2))
        assert results["valid"] is False
        assert results["header"] is None
        assert any("not supported" in e for e in results["errors"])
