"""README manifest listing the synced version and checksums."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from libsync_core.config import SourceConfig

from .resolver import TARGETS
from .sync import SyncResult


_STRUCTURE = """### Structure

- `linux/amd64/` - Linux x86_64 binaries
- `linux/arm64/` - Linux ARM64 binaries
- `darwin/arm64/` - macOS ARM64 binaries
- `windows/amd64/` - Windows x86_64 binaries

Each directory contains:
- `liblighter-signer.{so|dylib|dll}` - Platform-specific library
- `liblighter-signer.h` - C header file
"""

_UPDATING = """### Updating

Run `lighter-libsync sync` to download the latest binaries from GitHub releases.

The tool automatically:
- Downloads the latest release assets
- Verifies SHA256 checksums using digests from GitHub API
- Updates this README with the latest version and checksums
"""


def release_page_url(source: SourceConfig, tag: str) -> str:
    return f"{source.html_base}/{source.owner}/{source.repo}/releases/tag/{tag}"


def checksum_lines(results: Iterable[SyncResult], libs_prefix: str = "libs") -> list[str]:
    """Checksum lines for published results, in target table order."""
    by_target = {r.target: r for r in results if r.published}
    prefix = libs_prefix.rstrip("/")
    lines = []
    for target in TARGETS:
        result = by_target.get(target)
        if result is None:
            continue
        lines.append(f"{result.computed_hash}  {prefix}/{target.relative_path}")
    return lines


def render_manifest(
    source: SourceConfig,
    tag: str,
    results: Iterable[SyncResult],
    libs_prefix: str = "libs",
) -> str:
    parts = [
        f"## {source.repo} signing libraries",
        "",
        f"Latest version: **{tag}**",
        "",
        f"Source: {release_page_url(source, tag)}",
        "",
        _STRUCTURE,
        "### SHA256 Checksums",
        "",
        "```",
        *checksum_lines(results, libs_prefix),
        "```",
        "",
        _UPDATING,
    ]
    return "\n".join(parts)


def write_manifest(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")
    return path
