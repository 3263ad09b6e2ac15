"""Release sync for the prebuilt lighter-go signer libraries."""

from .errors import (
    AssetNotFoundError,
    ChecksumMismatchError,
    DownloadError,
    LibSyncError,
    MetadataFetchError,
    MissingLocalFileWarning,
    UnsupportedPlatformError,
)
from .manifest import render_manifest, write_manifest
from .resolver import TARGETS, Asset, PlatformTarget, ReleaseMetadata, Target, find_asset, resolve_target
from .service import ReleaseClient, parse_digest, sha256_file
from .sync import SyncOutcome, SyncReport, SyncResult, check_local_files, sync_release, sync_target

__all__ = [
    "Asset",
    "AssetNotFoundError",
    "ChecksumMismatchError",
    "DownloadError",
    "LibSyncError",
    "MetadataFetchError",
    "MissingLocalFileWarning",
    "PlatformTarget",
    "ReleaseClient",
    "ReleaseMetadata",
    "SyncOutcome",
    "SyncReport",
    "SyncResult",
    "TARGETS",
    "Target",
    "UnsupportedPlatformError",
    "check_local_files",
    "find_asset",
    "parse_digest",
    "render_manifest",
    "resolve_target",
    "sha256_file",
    "sync_release",
    "sync_target",
    "write_manifest",
]
