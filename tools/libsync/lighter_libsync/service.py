"""GitHub Releases client and hashing helpers used by the sync pipeline."""

from __future__ import annotations

import hashlib
import json
import shutil
import ssl
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from libsync_core.config import NetworkConfig, SourceConfig

from .errors import DownloadError, MetadataFetchError
from .resolver import Asset, ReleaseMetadata

try:
    import certifi
except Exception:  # pragma: no cover - fallback when optional dependency unavailable
    certifi = None


DIGEST_PREFIX = "sha256:"


def _build_ssl_context(network: NetworkConfig) -> ssl.SSLContext:
    """Create TLS context for API and asset requests with explicit CA handling."""
    if network.allow_insecure_tls:
        return ssl._create_unverified_context()

    if network.ca_bundle:
        return ssl.create_default_context(cafile=network.ca_bundle)

    if certifi is not None:
        return ssl.create_default_context(cafile=certifi.where())

    return ssl.create_default_context()


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_digest(digest: str | None) -> str | None:
    """Return the lowercase hex part of a ``sha256:<hex>`` digest, or None."""
    if not digest:
        return None
    value = digest.strip()
    if value.lower().startswith(DIGEST_PREFIX):
        value = value[len(DIGEST_PREFIX):]
    value = value.strip().lower()
    return value or None


def _parse_asset(item: dict[str, Any]) -> Asset | None:
    name = item.get("name")
    url = item.get("browser_download_url")
    if not name or not url:
        return None
    size = item.get("size")
    digest = item.get("digest")
    return Asset(
        name=str(name),
        url=str(url),
        digest=digest if isinstance(digest, str) and digest else None,
        size=int(size) if isinstance(size, int) else None,
    )


def parse_release(payload: Any, url: str | None = None) -> ReleaseMetadata:
    if not isinstance(payload, dict):
        raise MetadataFetchError("Release response is not a JSON object", url=url)
    tag = payload.get("tag_name")
    if not isinstance(tag, str) or not tag:
        raise MetadataFetchError("Release response has no tag_name", url=url)

    assets: list[Asset] = []
    for item in payload.get("assets") or []:
        if isinstance(item, dict):
            asset = _parse_asset(item)
            if asset is not None:
                assets.append(asset)
    return ReleaseMetadata(tag_name=tag, assets=tuple(assets), html_url=payload.get("html_url"))


class ReleaseClient:
    """Reads release metadata and downloads assets for one repository."""

    def __init__(self, source: SourceConfig, network: NetworkConfig | None = None) -> None:
        self.source = source
        self.network = network or NetworkConfig()

    def release_url(self, tag: str | None = None) -> str:
        tag = tag or self.source.tag
        base = f"{self.source.api_base}/repos/{self.source.owner}/{self.source.repo}/releases"
        if tag == "latest":
            return f"{base}/latest"
        return f"{base}/tags/{tag}"

    def _urlopen(self, url: str, timeout: int, accept: str = "*/*", auth: bool = False):
        headers = {"User-Agent": self.network.user_agent, "Accept": accept}
        if auth and self.network.token:
            headers["Authorization"] = f"Bearer {self.network.token}"
        request = urllib.request.Request(url, headers=headers)
        return urllib.request.urlopen(request, timeout=timeout, context=_build_ssl_context(self.network))

    def fetch_release(self, tag: str | None = None) -> ReleaseMetadata:
        url = self.release_url(tag)
        try:
            with self._urlopen(
                url,
                timeout=self.network.api_timeout_s,
                accept="application/vnd.github+json",
                auth=True,
            ) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raise MetadataFetchError(f"GitHub API returned HTTP {exc.code}", url=url) from exc
        except (urllib.error.URLError, OSError) as exc:
            raise MetadataFetchError(f"Could not reach GitHub API: {exc}", url=url) from exc
        except ValueError as exc:
            raise MetadataFetchError(f"Release response is not valid JSON: {exc}", url=url) from exc

        return parse_release(payload, url=url)

    def download(self, asset: Asset, dest: Path) -> Path:
        try:
            with self._urlopen(asset.url, timeout=self.network.download_timeout_s) as response:
                with dest.open("wb") as fh:
                    shutil.copyfileobj(response, fh)
        except urllib.error.HTTPError as exc:
            raise DownloadError(asset.name, f"HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise DownloadError(asset.name, str(exc)) from exc
        return dest
