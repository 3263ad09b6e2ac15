"""CLI entrypoints for syncing, checking and locating the signer libraries."""

from __future__ import annotations

import argparse
import json
import platform
from pathlib import Path

from libsync_core.config import (
    DEFAULT_CONFIG_NAME,
    ConfigError,
    SyncConfig,
    load_config,
    redacted,
    set_libs_dir,
    set_repo,
)
from libsync_core.logging_setup import configure_logging, get_logger

from .errors import MetadataFetchError, UnsupportedPlatformError
from .manifest import render_manifest, write_manifest
from .resolver import library_paths, resolve_target
from .service import ReleaseClient
from .sync import check_local_files, sync_release


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _root(args: argparse.Namespace) -> Path:
    return Path(args.root).expanduser().resolve()


def _load(args: argparse.Namespace) -> SyncConfig:
    config_path = Path(args.config).expanduser() if args.config else _root(args) / DEFAULT_CONFIG_NAME
    cfg = load_config(config_path)
    if getattr(args, "repo", None):
        set_repo(cfg, args.repo)
    if getattr(args, "tag", None):
        cfg.source.tag = args.tag
    if getattr(args, "libs_dir", None) is not None:
        set_libs_dir(cfg, args.libs_dir)
    return cfg


def cmd_sync(args: argparse.Namespace) -> int:
    logger = get_logger()
    cfg = _load(args)
    libs_dir = _root(args) / cfg.layout.libs_dir
    readme_path = libs_dir / cfg.layout.readme_name

    logger.info(f"Fetching latest release from {cfg.source.slug}...", extra={"event": "release_fetch"})
    client = ReleaseClient(cfg.source, cfg.network)
    try:
        report = sync_release(client, libs_dir, tag=cfg.source.tag)
    except MetadataFetchError as exc:
        logger.error(f"Error: Failed to fetch release information: {exc}", extra={"event": "release_fetch_failed"})
        return 1

    if report.failed:
        logger.error("Error: Hash verification failed for one or more files!", extra={"event": "sync_failed"})
        logger.error("The downloaded files may be corrupted or tampered with.")
    else:
        logger.info(f"Updating {readme_path}...", extra={"event": "manifest_write"})
        text = render_manifest(cfg.source, report.release.tag_name, report.results, libs_prefix=cfg.layout.libs_dir)
        write_manifest(readme_path, text)
        logger.info("✓ Update complete!", extra={"event": "sync_complete"})
        logger.info(f"Latest version: {report.release.tag_name}")

    if args.json:
        _print_json(
            {
                "tag": report.release.tag_name,
                "success": not report.failed,
                "counts": report.counts(),
                "missing_files": [str(p) for p in report.presence.missing],
                "results": [
                    {
                        "asset": r.target.asset_name,
                        "path": str(r.local_path),
                        "outcome": r.outcome.value,
                        "sha256": r.computed_hash,
                        "expected_sha256": r.expected_hash,
                        "error": r.error,
                    }
                    for r in report.results
                ],
            }
        )
    return report.exit_code


def cmd_check(args: argparse.Namespace) -> int:
    cfg = _load(args)
    get_logger().info("Verifying files...")
    presence = check_local_files(_root(args) / cfg.layout.libs_dir)
    if args.strict and presence.missing:
        return 1
    return 0


def cmd_locate(args: argparse.Namespace) -> int:
    cfg = _load(args)
    system = args.system or platform.system()
    machine = args.machine or platform.machine()
    try:
        target = resolve_target(system, machine)
    except UnsupportedPlatformError as exc:
        get_logger().error(str(exc), extra={"event": "unsupported_platform"})
        return 2

    paths = library_paths(_root(args) / cfg.layout.libs_dir, target)
    _print_json(
        {
            "platform": target.platform,
            "arch": target.arch,
            "directory": str(paths.directory),
            "library": str(paths.library),
            "header": str(paths.header),
            "present": paths.library.is_file() and paths.header.is_file(),
        }
    )
    return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    _print_json(redacted(_load(args)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lighter-libsync", description="Sync prebuilt lighter-go signer libraries")
    parser.add_argument("--config", default=None, help=f"Config file (default: <root>/{DEFAULT_CONFIG_NAME})")
    parser.add_argument("--log-file", default=None, help="Also write JSON-lines logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--no-color", action="store_true", help="Disable coloured console output")
    sub = parser.add_subparsers(dest="command", required=True)

    def _layout_args(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("--root", default=".", help="Directory the libs directory lives in")
        cmd.add_argument("--libs-dir", default=None, help="Libs directory relative to root")

    sync_cmd = sub.add_parser("sync", help="Download, verify and install the latest release")
    _layout_args(sync_cmd)
    sync_cmd.add_argument("--repo", default=None, help="GitHub owner/repo")
    sync_cmd.add_argument("--tag", default=None, help="Release tag or 'latest'")
    sync_cmd.add_argument("--json", action="store_true", help="Print a JSON summary on stdout")
    sync_cmd.set_defaults(func=cmd_sync)

    check_cmd = sub.add_parser("check", help="Report which library files are present")
    _layout_args(check_cmd)
    check_cmd.add_argument("--strict", action="store_true", help="Exit non-zero when files are missing")
    check_cmd.set_defaults(func=cmd_check)

    locate_cmd = sub.add_parser("locate", help="Print library paths for a host platform")
    _layout_args(locate_cmd)
    locate_cmd.add_argument("--system", default=None, help="Override platform.system()")
    locate_cmd.add_argument("--machine", default=None, help="Override platform.machine()")
    locate_cmd.set_defaults(func=cmd_locate)

    config_cmd = sub.add_parser("show-config", help="Print the effective configuration")
    _layout_args(config_cmd)
    config_cmd.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(
        verbose=args.verbose,
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
        color=False if args.no_color else None,
    )
    try:
        return int(args.func(args))
    except ConfigError as exc:
        get_logger().error(f"Error: {exc}", extra={"event": "config_error"})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
