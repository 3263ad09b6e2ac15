"""Release asset model and the fixed platform target table."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import AssetNotFoundError, UnsupportedPlatformError


LIB_BASENAME = "liblighter-signer"

LIBRARY = "library"
HEADER = "header"


@dataclass(frozen=True)
class PlatformTarget:
    platform: str
    arch: str


@dataclass(frozen=True)
class Asset:
    name: str
    url: str
    digest: str | None = None
    size: int | None = None


@dataclass(frozen=True)
class ReleaseMetadata:
    tag_name: str
    assets: tuple[Asset, ...] = ()
    html_url: str | None = None


@dataclass(frozen=True)
class Target:
    platform: str
    arch: str
    kind: str
    asset_name: str
    filename: str

    @property
    def relative_path(self) -> str:
        return f"{self.platform}/{self.arch}/{self.filename}"

    def local_path(self, libs_dir: Path) -> Path:
        return libs_dir / self.platform / self.arch / self.filename


SUPPORTED_PLATFORMS: tuple[PlatformTarget, ...] = (
    PlatformTarget("linux", "amd64"),
    PlatformTarget("linux", "arm64"),
    PlatformTarget("darwin", "arm64"),
    PlatformTarget("windows", "amd64"),
)

_LIBRARY_EXT = {"linux": "so", "darwin": "dylib", "windows": "dll"}


def library_extension(platform_name: str) -> str:
    return _LIBRARY_EXT[platform_name]


# Manifest order: library then header for each platform pair.
TARGETS: tuple[Target, ...] = (
    Target("linux", "amd64", LIBRARY, "lighter-signer-linux-amd64.so", "liblighter-signer.so"),
    Target("linux", "amd64", HEADER, "lighter-signer-linux-amd64.h", "liblighter-signer.h"),
    Target("linux", "arm64", LIBRARY, "lighter-signer-linux-arm64.so", "liblighter-signer.so"),
    Target("linux", "arm64", HEADER, "lighter-signer-linux-arm64.h", "liblighter-signer.h"),
    Target("darwin", "arm64", LIBRARY, "lighter-signer-darwin-arm64.dylib", "liblighter-signer.dylib"),
    Target("darwin", "arm64", HEADER, "lighter-signer-darwin-arm64.h", "liblighter-signer.h"),
    Target("windows", "amd64", LIBRARY, "lighter-signer-windows-amd64.dll", "liblighter-signer.dll"),
    Target("windows", "amd64", HEADER, "lighter-signer-windows-amd64.h", "liblighter-signer.h"),
)


def find_asset(release: ReleaseMetadata, name: str) -> Asset:
    """Return the first asset named exactly ``name``."""
    for asset in release.assets:
        if asset.name == name:
            return asset
    raise AssetNotFoundError(name)


def _normalize_platform(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("darwin") or s.startswith("mac"):
        return "darwin"
    if s.startswith("linux"):
        return "linux"
    return s


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "amd64"
    if m in ("aarch64", "arm64"):
        return "arm64"
    return m


def resolve_target(system: str, machine: str) -> PlatformTarget:
    target = PlatformTarget(platform=_normalize_platform(system), arch=_normalize_arch(machine))
    if target not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(f"No prebuilt signer library for {target.platform}/{target.arch}")
    return target


@dataclass(frozen=True)
class LibraryPaths:
    directory: Path
    library: Path
    header: Path


def library_paths(libs_dir: Path, target: PlatformTarget) -> LibraryPaths:
    directory = libs_dir / target.platform / target.arch
    return LibraryPaths(
        directory=directory,
        library=directory / f"{LIB_BASENAME}.{library_extension(target.platform)}",
        header=directory / f"{LIB_BASENAME}.h",
    )
