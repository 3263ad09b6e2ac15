"""Sequential download, verification and placement of the signer libraries."""

from __future__ import annotations

import enum
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

from libsync_core.logging_setup import get_logger

from .errors import (
    AssetNotFoundError,
    ChecksumMismatchError,
    DownloadError,
    MissingLocalFileWarning,
)
from .resolver import TARGETS, Asset, ReleaseMetadata, Target, find_asset
from .service import parse_digest, sha256_file


class SyncOutcome(str, enum.Enum):
    SYNCED = "synced"
    UNVERIFIED = "unverified"
    NOT_FOUND = "not_found"
    DOWNLOAD_FAILED = "download_failed"
    WRITE_FAILED = "write_failed"
    MISMATCH = "mismatch"


class AssetSource(Protocol):
    def fetch_release(self, tag: str | None = None) -> ReleaseMetadata: ...

    def download(self, asset: Asset, dest: Path) -> Path: ...


@dataclass(frozen=True)
class SyncResult:
    target: Target
    outcome: SyncOutcome
    local_path: Path
    computed_hash: str | None = None
    expected_hash: str | None = None
    error: str | None = None

    @property
    def verified(self) -> bool:
        return self.outcome is SyncOutcome.SYNCED

    @property
    def published(self) -> bool:
        return self.outcome in (SyncOutcome.SYNCED, SyncOutcome.UNVERIFIED) and self.computed_hash is not None


@dataclass(frozen=True)
class PresenceReport:
    found: tuple[Path, ...] = ()
    missing: tuple[Path, ...] = ()


@dataclass(frozen=True)
class SyncReport:
    release: ReleaseMetadata
    results: tuple[SyncResult, ...]
    presence: PresenceReport = field(default_factory=PresenceReport)

    @property
    def mismatches(self) -> tuple[SyncResult, ...]:
        return tuple(r for r in self.results if r.outcome is SyncOutcome.MISMATCH)

    @property
    def failed(self) -> bool:
        return bool(self.mismatches)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def counts(self) -> dict[str, int]:
        out = {outcome.value: 0 for outcome in SyncOutcome}
        for result in self.results:
            out[result.outcome.value] += 1
        return out


def sync_target(
    source: AssetSource,
    release: ReleaseMetadata,
    target: Target,
    libs_dir: Path,
    work_dir: Path,
) -> SyncResult:
    """Download, verify and place one target. Per-target errors become results."""
    logger = get_logger()
    local_path = target.local_path(libs_dir)

    try:
        asset = find_asset(release, target.asset_name)
    except AssetNotFoundError as exc:
        logger.warning(f"  {exc}", extra={"event": "asset_missing"})
        return SyncResult(target, SyncOutcome.NOT_FOUND, local_path, error=str(exc))

    logger.info(f"  Downloading {asset.name}...", extra={"event": "asset_download"})
    tmp_path = work_dir / asset.name
    try:
        source.download(asset, tmp_path)
    except DownloadError as exc:
        logger.warning(f"  {exc}", extra={"event": "asset_download_failed"})
        return SyncResult(target, SyncOutcome.DOWNLOAD_FAILED, local_path, error=str(exc))

    expected = parse_digest(asset.digest)
    actual = sha256_file(tmp_path)
    if expected is not None:
        try:
            verify_digest(asset.name, expected, actual)
        except ChecksumMismatchError as exc:
            logger.error("  ✗ SHA256 mismatch!", extra={"event": "checksum_mismatch"})
            logger.error(f"    Expected: {exc.expected}")
            logger.error(f"    Actual:   {exc.actual}")
            logger.error(f"  Hash verification failed for {asset.name}!")
            return SyncResult(
                target,
                SyncOutcome.MISMATCH,
                local_path,
                computed_hash=actual,
                expected_hash=expected,
                error=str(exc),
            )
        logger.info(f"  ✓ SHA256 verified: {actual}", extra={"event": "checksum_verified"})
        outcome = SyncOutcome.SYNCED
    else:
        logger.info(f"  SHA256: {actual} (no digest in API)", extra={"event": "checksum_unverified"})
        outcome = SyncOutcome.UNVERIFIED

    try:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(tmp_path, local_path)
        # Publish the hash of what is on disk, not of the temp copy.
        on_disk = sha256_file(local_path)
    except OSError as exc:
        logger.warning(f"  Could not write {local_path}: {exc}", extra={"event": "asset_write_failed"})
        return SyncResult(
            target,
            SyncOutcome.WRITE_FAILED,
            local_path,
            expected_hash=expected,
            error=f"Could not write {local_path}: {exc}",
        )

    return SyncResult(
        target,
        outcome,
        local_path,
        computed_hash=on_disk,
        expected_hash=expected,
    )


def verify_digest(asset_name: str, expected: str, actual: str) -> None:
    if actual != expected:
        raise ChecksumMismatchError(asset_name, expected=expected, actual=actual)


def check_local_files(libs_dir: Path, targets: Sequence[Target] = TARGETS) -> PresenceReport:
    logger = get_logger()
    found: list[Path] = []
    missing: list[Path] = []
    for target in targets:
        path = target.local_path(libs_dir)
        if path.is_file():
            logger.info(f"  Found: {path}", extra={"event": "file_found"})
            found.append(path)
        else:
            warning = MissingLocalFileWarning(f"Missing: {path}")
            logger.warning(f"  {warning}", extra={"event": "file_missing"})
            missing.append(path)

    if missing:
        logger.warning(
            f"Warning: {len(missing)} file(s) are missing. You may need to manually download them.",
            extra={"event": "files_missing"},
        )
    return PresenceReport(found=tuple(found), missing=tuple(missing))


def sync_release(
    source: AssetSource,
    libs_dir: Path,
    tag: str | None = None,
    targets: Sequence[Target] = TARGETS,
) -> SyncReport:
    """Fetch the release and sync every target in order.

    One temporary directory holds all downloads and is removed on every exit
    path, including a metadata failure. :class:`MetadataFetchError` propagates;
    every other per-target problem is recorded in the returned report.
    """
    logger = get_logger()

    with tempfile.TemporaryDirectory(prefix="lighter-libsync-") as tmp:
        work_dir = Path(tmp)
        release = source.fetch_release(tag)
        logger.info(f"Latest release: {release.tag_name}", extra={"event": "release_fetched"})

        logger.info("Downloading and processing binaries...")
        results: list[SyncResult] = []
        for target in targets:
            result = sync_target(source, release, target, libs_dir, work_dir)
            results.append(result)

    logger.info("Verifying files...")
    presence = check_local_files(libs_dir, targets)
    return SyncReport(release=release, results=tuple(results), presence=presence)
