"""Snapshot store package for slot persistence boundaries."""

from .codec import (
	SNAPSHOT_FORMAT_VERSION,
	codec_decode_metadata,
	codec_decode_snapshot,
	codec_dump_snapshot_json,
	codec_encode_snapshot,
	codec_parse_document,
)
from .file_store import FileSnapshotStore
from .interfaces import SnapshotStorePort

__all__ = [
	"SNAPSHOT_FORMAT_VERSION",
	"FileSnapshotStore",
	"SnapshotStorePort",
	"codec_decode_metadata",
	"codec_decode_snapshot",
	"codec_dump_snapshot_json",
	"codec_encode_snapshot",
	"codec_parse_document",
]
