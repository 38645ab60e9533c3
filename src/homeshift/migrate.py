"""Per-user migration: scan, resolve site, grant admin, upload, revoke."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from homeshift.candidates import iter_upload_candidates
from homeshift.destination import DestinationError
from homeshift.errors import (
    E_GRANT_FAILED,
    E_INTERNAL,
    E_SITE_NOT_FOUND,
    E_SOURCE_MISSING,
    err,
    failed_identities,
    ok,
)
from homeshift.models import UploadItem, UserMapping
from homeshift.scanner import scan_tree

log = logging.getLogger(__name__)

_UNSAFE_FILE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class Destination(Protocol):
    def resolve_site(self, identity: str) -> str: ...
    def grant_admin(self, site_url: str) -> None: ...
    def revoke_admin(self, site_url: str) -> None: ...
    def upload(self, identity: str, remote_folder: str, item: UploadItem) -> None: ...


@dataclass(frozen=True)
class MigrationOptions:
    report_dir: str = "reports"
    auto_fix: bool = False
    modified_since: datetime | None = None
    dry_run: bool = False


def report_path_for(report_dir: str, identity: str) -> str:
    """Report file for a user: jane.doe@contoso.com -> jane.doe_contoso.com.csv"""
    stem = _UNSAFE_FILE_CHARS.sub("_", identity).strip("_") or "user"
    return os.path.join(report_dir, f"{stem}.csv")


def migrate_user(
    mapping: UserMapping,
    destination: Destination | None,
    options: MigrationOptions,
) -> dict[str, Any]:
    """Migrate one user's home folder. Returns an ok/err envelope."""
    identity = mapping.identity
    if not os.path.isdir(mapping.source_path):
        return err(
            identity,
            E_SOURCE_MISSING,
            "Source folder does not exist or is not a directory.",
            {"sourcePath": mapping.source_path},
        )

    report_path = report_path_for(options.report_dir, identity)
    scan = scan_tree(mapping.source_path, report_path, auto_fix=options.auto_fix)
    if scan.flagged:
        log.warning(
            "%s: %d name(s) need attention, see %s", identity, scan.flagged, report_path
        )

    candidates = iter_upload_candidates(mapping.source_path, options.modified_since)
    summary: dict[str, Any] = {
        "siteUrl": None,
        "uploaded": 0,
        "failed": 0,
        "skipped": 0,
        "scan": {**scan.stats(), "reportPath": scan.report_path},
        "adminRevoked": True,
    }

    if options.dry_run:
        summary["skipped"] = sum(1 for _ in candidates)
        log.info("%s: dry run, %d file(s) would be uploaded", identity, summary["skipped"])
        return ok(identity, summary)

    if destination is None:
        raise ValueError("A destination is required unless dry_run is set")

    try:
        site_url = destination.resolve_site(identity)
    except DestinationError as exc:
        return err(
            identity,
            E_SITE_NOT_FOUND,
            "Could not resolve the user's personal site.",
            {"exception": str(exc)},
        )
    summary["siteUrl"] = site_url

    try:
        destination.grant_admin(site_url)
    except DestinationError as exc:
        return err(
            identity,
            E_GRANT_FAILED,
            "Could not grant temporary site admin.",
            {"siteUrl": site_url, "exception": str(exc)},
        )

    try:
        for item in candidates:
            try:
                destination.upload(identity, mapping.relative_folder, item)
            except (DestinationError, OSError) as exc:
                summary["failed"] += 1
                log.warning("%s: upload failed for %s: %s", identity, item.local_path, exc)
                continue
            summary["uploaded"] += 1
            log.info("%s: uploaded %s", identity, item.local_path)
    finally:
        try:
            destination.revoke_admin(site_url)
        except (DestinationError, OSError) as exc:
            summary["adminRevoked"] = False
            log.error("%s: could not revoke site admin on %s: %s", identity, site_url, exc)

    log.info(
        "%s: %d uploaded, %d failed", identity, summary["uploaded"], summary["failed"]
    )
    return ok(identity, summary)


def migrate_all(
    mappings: list[UserMapping],
    destination: Destination | None,
    options: MigrationOptions,
) -> list[dict[str, Any]]:
    """Migrate every mapped user; one user's failure never stops the batch."""
    results: list[dict[str, Any]] = []
    for mapping in mappings:
        log.info("Migrating %s from %s", mapping.identity, mapping.source_path)
        try:
            result = migrate_user(mapping, destination, options)
        except Exception as exc:
            log.exception("%s: unexpected failure", mapping.identity)
            result = err(
                mapping.identity,
                E_INTERNAL,
                "Unhandled error while migrating user.",
                {"exception": str(exc)},
            )
        if not result["ok"]:
            log.warning(
                "%s: %s (%s)",
                result["identity"],
                result["error"]["message"],
                result["error"]["code"],
            )
        results.append(result)

    failed = failed_identities(results)
    log.info("Migration finished: %d user(s), %d failed", len(results), len(failed))
    if failed:
        log.warning("Users needing another run: %s", ", ".join(failed))
    return results
