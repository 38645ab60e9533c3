"""homeshift command line: scan a tree, or migrate users from a mapping CSV."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from homeshift.candidates import parse_since
from homeshift.config import load_migration_config
from homeshift.destination import GraphDestination
from homeshift.errors import failed_identities
from homeshift.mapping import load_mappings
from homeshift.migrate import MigrationOptions, migrate_all
from homeshift.scanner import scan_tree

log = logging.getLogger("homeshift")

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Console handler on stderr, plus a transcript file when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homeshift",
        description="Migrate home folders to per-user OneDrive sites.",
    )
    parser.add_argument("--log-file", help="Write a transcript of the run to this file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Report (and optionally fix) illegal names.")
    scan.add_argument("root", help="Directory to scan.")
    scan.add_argument("--report", help="Report CSV (default: ./<root name>_remediation.csv).")
    scan.add_argument("--fix", action="store_true", help="Rename entries with illegal characters.")

    migrate = sub.add_parser("migrate", help="Upload home folders listed in a mapping CSV.")
    migrate.add_argument("mapping", help="CSV with Identity,SourcePath[,TargetFolder].")
    migrate.add_argument("--report-dir", default="reports", help="Per-user remediation reports.")
    migrate.add_argument("--fix", action="store_true", help="Rename entries with illegal characters.")
    migrate.add_argument(
        "--modified-since",
        help="Only upload files modified since an ISO date or N days ago (e.g. 90d).",
    )
    migrate.add_argument(
        "--dry-run", action="store_true", help="Scan and count files without remote calls."
    )
    return parser


def cmd_scan(args: argparse.Namespace) -> int:
    root = os.path.abspath(args.root)
    report = args.report or f"{os.path.basename(root) or 'root'}_remediation.csv"
    try:
        result = scan_tree(root, report, auto_fix=args.fix)
    except OSError as exc:
        log.error("%s", exc)
        return 2

    stats = result.stats()
    print(
        f"visited={stats['visited']} flagged={stats['flagged']} "
        f"renamed={stats['renamed']} errors={stats['errors']} report={result.report_path}"
    )
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    try:
        mappings = load_mappings(args.mapping)
        since = parse_since(args.modified_since) if args.modified_since else None
        destination = None if args.dry_run else GraphDestination(load_migration_config())
    except (OSError, ValueError, RuntimeError) as exc:
        log.error("%s", exc)
        return 2

    options = MigrationOptions(
        report_dir=args.report_dir,
        auto_fix=args.fix,
        modified_since=since,
        dry_run=args.dry_run,
    )
    results = migrate_all(mappings, destination, options)

    for r in results:
        if r["ok"]:
            res = r["result"]
            print(
                f"OK    {r['identity']}: uploaded={res['uploaded']} failed={res['failed']} "
                f"skipped={res['skipped']} flagged={res['scan']['flagged']}"
            )
        else:
            e = r["error"]
            print(f"FAIL  {r['identity']}: {e['code']} {e['message']}")

    return 1 if failed_identities(results) else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.log_file)
    if args.command == "scan":
        return cmd_scan(args)
    return cmd_migrate(args)


if __name__ == "__main__":
    sys.exit(main())
