"""Error taxonomy for release sync runs."""

from __future__ import annotations


class LibSyncError(Exception):
    pass


class MetadataFetchError(LibSyncError):
    """Release metadata could not be fetched or lacks a tag. Fatal for the run."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class AssetNotFoundError(LibSyncError):
    def __init__(self, asset_name: str) -> None:
        super().__init__(f"Asset {asset_name} not found in release")
        self.asset_name = asset_name


class DownloadError(LibSyncError):
    def __init__(self, asset_name: str, reason: str) -> None:
        super().__init__(f"Download of {asset_name} failed: {reason}")
        self.asset_name = asset_name
        self.reason = reason


class ChecksumMismatchError(LibSyncError):
    def __init__(self, asset_name: str, expected: str, actual: str) -> None:
        super().__init__(f"SHA256 mismatch for {asset_name}: expected {expected}, got {actual}")
        self.asset_name = asset_name
        self.expected = expected
        self.actual = actual


class UnsupportedPlatformError(LibSyncError):
    pass


class MissingLocalFileWarning(UserWarning):
    """Advisory: an expected library file is absent after a sync."""
