"""
Arrow IPC stream codec.

The gateway answers run searches and metric history requests with
self-describing Arrow IPC streams. The number and names of the dynamic columns
change with every request, so the schema is always read from the payload
itself and never assumed.
"""

from __future__ import annotations

import io
import logging

import polars as pl

from fastertrack.exceptions import SnapshotDecodeError

logger = logging.getLogger(__name__)

SNAPSHOT_MEDIA_TYPE = "application/vnd.apache.arrow.stream"

_DECODE_ERRORS = (
    pl.exceptions.PolarsError,
    pl.exceptions.PanicException,
    OSError,
    ValueError,
)


def decode_snapshot(payload: bytes) -> pl.DataFrame:
    """Decode an Arrow IPC stream into a DataFrame.

    A stream that only carries a schema decodes to an empty DataFrame with
    that schema.

    Args:
        payload: Raw stream bytes as returned by the gateway

    Returns:
        DataFrame with one column per schema field, in schema order

    Raises:
        SnapshotDecodeError: If the payload is empty, malformed or truncated
    """
    if not payload:
        raise SnapshotDecodeError("Snapshot payload is empty")

    try:
        table = pl.read_ipc_stream(io.BytesIO(payload))
    except _DECODE_ERRORS as e:
        raise SnapshotDecodeError(f"Failed to decode snapshot ({len(payload)} bytes): {e}") from e

    logger.debug("Decoded snapshot: %d rows, %d columns", table.height, table.width)
    return table


def encode_snapshot(table: pl.DataFrame) -> bytes:
    """Encode a DataFrame as an Arrow IPC stream.

    Args:
        table: DataFrame to encode

    Returns:
        Stream bytes readable by decode_snapshot
    """
    buffer = io.BytesIO()
    table.write_ipc_stream(buffer)
    return buffer.getvalue()


def describe_schema(table: pl.DataFrame) -> list[tuple[str, str]]:
    """Get the ordered (name, logical type) pairs of a decoded snapshot.

    Args:
        table: Decoded snapshot

    Returns:
        List of (column name, type name) tuples in schema order
    """
    return [(name, str(dtype)) for name, dtype in table.schema.items()]
