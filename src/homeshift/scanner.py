"""Legality scanner: walk a tree, report illegal names, auto-fix the safe ones."""

from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass, field

from homeshift.config import COMMENT_SEPARATOR
from homeshift.legality import detect_violations, is_auto_fixable, propose_name
from homeshift.models import RemediationRecord
from homeshift.report import RemediationReport

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    root: str
    report_path: str
    visited: int = 0
    flagged: int = 0
    renamed: int = 0
    errors: int = 0
    records: list[RemediationRecord] = field(default_factory=list)

    def stats(self) -> dict[str, int]:
        return {
            "visited": self.visited,
            "flagged": self.flagged,
            "renamed": self.renamed,
            "errors": self.errors,
        }


def scan_tree(root: str, report_path: str, auto_fix: bool = False) -> ScanResult:
    """Scan every entry under root and write the remediation report.

    Enumeration and rename failures are contained per entry and become
    report rows. Renames are deferred until the walk completes and applied
    deepest-first, so recorded paths are always pre-rename paths.
    """
    root_abs = os.path.abspath(root)
    if not os.path.exists(root_abs):
        raise FileNotFoundError(errno.ENOENT, "Scan root does not exist", root_abs)
    if not os.path.isdir(root_abs):
        raise NotADirectoryError(errno.ENOTDIR, "Scan root is not a directory", root_abs)

    result = ScanResult(root=root_abs, report_path=os.path.abspath(report_path))
    pending: list[tuple[str, str]] = []  # (original full path, proposed name)

    with RemediationReport(report_path) as report:

        def emit(record: RemediationRecord) -> None:
            report.write(record)
            result.records.append(record)

        def walk(current: str) -> None:
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as exc:
                result.errors += 1
                log.warning("Cannot enumerate %s: %s", current, exc)
                emit(RemediationRecord("", "", str(exc)))
                return

            for entry in entries:
                result.visited += 1
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError as exc:
                    # Still classified by name, but never descended into
                    is_dir = False
                    result.errors += 1
                    log.warning("Cannot stat %s: %s", entry.path, exc)
                    emit(RemediationRecord("", "", str(exc)))

                violations = detect_violations(entry.name)
                if violations:
                    result.flagged += 1
                    new_name = propose_name(entry.name)
                    emit(RemediationRecord(
                        original_path=entry.path,
                        proposed_path=os.path.join(current, new_name),
                        comments=COMMENT_SEPARATOR.join(v.detail for v in violations),
                    ))
                    if auto_fix and new_name != entry.name and is_auto_fixable(violations):
                        pending.append((entry.path, new_name))
                    elif auto_fix and new_name != entry.name:
                        log.info("Not renaming %s: manual fix required", entry.path)

                if is_dir:
                    walk(entry.path)

        walk(root_abs)

        # Children sit deeper than their parents, so they go first
        pending.sort(key=lambda p: (p[0].count(os.sep), p[0]), reverse=True)
        for path, new_name in pending:
            target = os.path.join(os.path.dirname(path), new_name)
            try:
                rename_entry(path, new_name)
            except OSError as exc:
                result.errors += 1
                log.warning("Rename failed for %s: %s", path, exc)
                emit(RemediationRecord(path, target, f"Rename failed: {exc}"))
                continue
            result.renamed += 1
            log.info("Renamed %s -> %s", path, new_name)

    log.info(
        "Scanned %s: %d visited, %d flagged, %d renamed, %d errors",
        root_abs, result.visited, result.flagged, result.renamed, result.errors,
    )
    return result


def rename_entry(path: str, new_name: str) -> str:
    """Rename an entry in place, refusing to replace an existing entry."""
    target = os.path.join(os.path.dirname(path), new_name)
    # os.rename silently replaces files on POSIX
    if os.path.lexists(target):
        raise FileExistsError(errno.EEXIST, "Target name already exists", target)
    os.rename(path, target)
    return target
