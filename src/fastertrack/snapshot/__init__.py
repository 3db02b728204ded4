"""
Columnar snapshot decoding.

Snapshots are Apache Arrow IPC streams whose schema is discovered at read time.
"""

from .codec import SNAPSHOT_MEDIA_TYPE, decode_snapshot, describe_schema, encode_snapshot

__all__ = [
    "SNAPSHOT_MEDIA_TYPE",
    "decode_snapshot",
    "describe_schema",
    "encode_snapshot",
]
