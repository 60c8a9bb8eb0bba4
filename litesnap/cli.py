"""
Command-line interface for litesnap.

Usage:
    litesnap create <database> [--backup-dir DIR] [--filename NAME] [--no-timestamp]
                               [--no-verify] [--method backup|copy|vacuum]
    litesnap list <database> [--include-checksums]
    litesnap cleanup <database> (--retention-days N | --max-backups N)
    litesnap restore <backup> <database> [--target PATH] [--no-verify]
    litesnap verify <backup>

Exit codes:
    0 on success, 1 on any failure (including bad arguments)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from . import __version__
from .config import EngineBackend, EngineConfig, LitesnapConfig
from .engine import DatabaseEngine, Strategy, create_engine
from .errors import ConfigError, LitesnapError
from .formatting import format_duration, format_size
from .logging_setup import setup_logging
from .manager import BackupManager, validate_database
from .restore import RestoreRequest
from .snapshot import SnapshotRequest

logger = logging.getLogger(__name__)

EXAMPLES = """\
Examples:
  litesnap create ./data/app.db
  litesnap create ./data/app.db --backup-dir ./backups --filename custom-backup
  litesnap list ./data/app.db --include-checksums
  litesnap cleanup ./data/app.db --retention-days 30
  litesnap restore ./backups/backup.db ./data/app.db
  litesnap verify ./backups/backup.db
"""


def _common_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--backup-dir", help="Directory to store backups (default: <database-dir>/backups)"
    )
    parent.add_argument("--filename", help="Custom filename for backup")
    parent.add_argument(
        "--no-timestamp",
        dest="include_timestamp",
        action="store_false",
        help="Don't include timestamp in filename",
    )
    parent.add_argument(
        "--no-verify", dest="verify", action="store_false", help="Skip backup verification"
    )
    parent.add_argument(
        "--method",
        choices=[s.value for s in Strategy],
        default=Strategy.NATIVE_COPY.value,
        help="Backup method (default: backup)",
    )
    parent.add_argument("--retention-days", type=float, help="Number of days to keep backups")
    parent.add_argument("--max-backups", type=int, help="Maximum number of backups to keep")
    parent.add_argument("--target", help="Target path for restore")
    parent.add_argument(
        "--include-checksums", action="store_true", help="Include checksums when listing backups"
    )
    parent.add_argument(
        "--engine",
        choices=[b.value for b in EngineBackend],
        help="Engine tooling backend (default: $LITESNAP_ENGINE or native)",
    )
    parent.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    return parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="litesnap",
        description="SQLite backup tool",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")
    common = _common_options()

    create_parser = subparsers.add_parser(
        "create", parents=[common], help="Create a backup of the specified database"
    )
    create_parser.add_argument("database")

    list_parser = subparsers.add_parser(
        "list", parents=[common], help="List all backups for the specified database"
    )
    list_parser.add_argument("database")

    cleanup_parser = subparsers.add_parser("cleanup", parents=[common], help="Clean up old backups")
    cleanup_parser.add_argument("database")

    restore_parser = subparsers.add_parser(
        "restore", parents=[common], help="Restore a backup to a database"
    )
    restore_parser.add_argument("backup")
    restore_parser.add_argument("database")

    verify_parser = subparsers.add_parser("verify", parents=[common], help="Verify backup integrity")
    verify_parser.add_argument("backup")

    subparsers.add_parser("help", help="Show this help message")
    return parser


def _engine_for(args: argparse.Namespace, config: LitesnapConfig) -> DatabaseEngine:
    engine_config = config.engine
    if args.engine:
        engine_config = EngineConfig(
            backend=EngineBackend(args.engine),
            sqlite_binary=engine_config.sqlite_binary,
            checksum_command=engine_config.checksum_command,
        )
    return create_engine(engine_config)


def _open_manager(args: argparse.Namespace, engine: DatabaseEngine) -> BackupManager:
    return BackupManager.open(args.database, backup_directory=args.backup_dir, engine=engine)


async def cmd_create(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    print(f"Creating backup for: {args.database if args.verbose else Path(args.database).name}")
    manager = _open_manager(args, engine)

    result = await manager.create_backup(
        SnapshotRequest(
            filename=args.filename,
            include_timestamp=args.include_timestamp,
            verify_after_create=args.verify,
            strategy=Strategy.parse(args.method),
        )
    )

    if not result.success:
        print(f"Backup failed: {result.error}")
        return 1

    print("Backup created successfully")
    print(f"  Location: {result.backup_path}")
    print(f"  Size: {format_size(result.size or 0)}")
    print(f"  Duration: {format_duration(result.duration_ms or 0)}")
    if result.checksum:
        print(f"  Checksum: {result.checksum}")
    if args.verbose:
        print(json.dumps(result.to_dict(), indent=2))
    return 0


async def cmd_list(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    print(f"Listing backups for: {Path(args.database).name}")
    manager = _open_manager(args, engine)

    backups = await manager.list_backups(include_checksums=args.include_checksums)
    if not backups:
        print("No backups found")
        return 0

    print(f"\nFound {len(backups)} backup(s):\n")
    for index, backup in enumerate(backups, start=1):
        print(f"{index}. {backup.filename}")
        print(f"   Path: {backup.path}")
        print(f"   Size: {format_size(backup.size)}")
        print(f"   Created: {backup.created.isoformat()}")
        if args.include_checksums:
            valid = "Unknown" if backup.is_valid is None else ("Yes" if backup.is_valid else "No")
            print(f"   Checksum: {backup.checksum or 'N/A'}")
            print(f"   Valid: {valid}")
        print()
    return 0


async def cmd_cleanup(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    if args.retention_days is None and args.max_backups is None:
        print("Either --retention-days or --max-backups must be specified")
        return 1

    manager = _open_manager(args, engine)
    result = await manager.cleanup(
        retention_days=args.retention_days,
        max_backups=args.max_backups,
    )

    if not result.success:
        print(f"Cleanup failed: {result.error}")
        return 1

    if result.removed > 0:
        print(f"Removed {result.removed} old backup(s)")
        if args.verbose:
            print("Removed files:")
            for name in result.removed_files:
                print(f"   - {name}")
    else:
        print("No old backups to remove")

    print(f"Total backups: {result.total_files}, Remaining: {result.remaining_files}")

    if result.errors:
        print("Some errors occurred:")
        for error in result.errors:
            print(f"   {error}")
    return 0


async def cmd_restore(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    print(f"Restoring backup: {Path(args.backup).name}")
    print(f"Target: {args.target or args.database}")
    manager = _open_manager(args, engine)

    result = await manager.restore(
        args.backup,
        RestoreRequest(
            target_path=Path(args.target or args.database),
            verify_before_restore=args.verify,
            snapshot_current_before_restore=True,
        ),
    )

    if not result.success:
        print(f"Restore failed: {result.error}")
        if result.pre_restore_backup:
            print(f"  Pre-restore backup: {result.pre_restore_backup}")
        return 1

    print("Restore completed successfully")
    print(f"  Restored to: {result.restored_to}")
    if result.pre_restore_backup:
        print(f"  Pre-restore backup: {result.pre_restore_backup}")
    return 0


async def cmd_verify(args: argparse.Namespace, engine: DatabaseEngine) -> int:
    backup_path = Path(args.backup)
    print(f"Verifying backup: {backup_path.name}")

    if not await validate_database(backup_path, engine=engine):
        print("Backup is corrupted or invalid")
        return 1

    print("Backup is valid")
    if args.verbose:
        stats = backup_path.stat()
        print(f"  Size: {format_size(stats.st_size)}")
        print(f"  Modified: {datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc).isoformat()}")
    return 0


COMMANDS = {
    "create": cmd_create,
    "list": cmd_list,
    "cleanup": cmd_cleanup,
    "restore": cmd_restore,
    "verify": cmd_verify,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in ("help", "-h", "--help"):
        parser.print_help()
        return 0

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; this tool reports every failure as 1
        return 0 if e.code in (0, None) else 1

    if args.command == "help":
        parser.print_help()
        return 0

    try:
        config = LitesnapConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    setup_logging(config.observability, verbose=args.verbose)
    if args.verbose:
        config.log_config()
        print(f"Options: {vars(args)}")

    try:
        engine = _engine_for(args, config)
        return asyncio.run(COMMANDS[args.command](args, engine))
    except LitesnapError as e:
        print(f"Error: {e}")
        return 1


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
