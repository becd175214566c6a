"""
Pytest fixtures for plw_recovery tests.

Writes synthetic PLW files to temporary directories.
"""

import pytest

from plw_samples import build_header, make_records, pack_records


@pytest.fixture
def plw_factory(tmp_path):
    """Write header + record bytes to a .plw file and return its path."""
    def _make(name="test.plw", records=None, trailing=b"", **header_fields):
        path = tmp_path / name
        body = pack_records(records or [])
        path.write_bytes(build_header(**header_fields) + body + trailing)
        return path
    return _make


@pytest.fixture
def plw_file(plw_factory):
    """Two channels, five declared and present records."""
    return plw_factory(records=make_records(5, 2))


@pytest.fixture
def mismatched_counts_file(plw_factory):
    """Counter A says 5, counter B says 3, and five good records are present."""
    return plw_factory(
        records=make_records(5, 2),
        channel_count=2,
        sample_count_a=5,
        sample_count_b=3,
    )


@pytest.fixture
def truncated_file(plw_factory):
    """One channel, ten declared records, four present plus two stray bytes."""
    return plw_factory(
        records=make_records(4, 1),
        trailing=b"\x01\x02",
        channel_count=1,
        sample_count_a=10,
        sample_count_b=10,
    )
