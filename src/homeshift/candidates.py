"""Upload candidates: regular files under a source folder, recency-filtered."""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timedelta, timezone
from typing import Iterator

from homeshift.legality import is_legal
from homeshift.models import UploadItem

log = logging.getLogger(__name__)

_DAYS_RE = re.compile(r"^\s*(\d+)\s*d?\s*$", re.IGNORECASE)


def parse_since(value: str, now: datetime | None = None) -> datetime:
    """Parse a recency cutoff into an aware UTC datetime.

    "30" or "30d" -> now minus 30 days
    "2024-01-31"  -> midnight UTC on that date
    "2024-01-31T08:00:00+01:00" -> as given, converted to UTC
    """
    m = _DAYS_RE.match(value)
    if m:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=int(m.group(1)))

    try:
        dt = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(
            f"Invalid cutoff {value!r}: expected a number of days or an ISO date"
        ) from exc

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iter_upload_candidates(
    source: str,
    modified_since: datetime | None = None,
) -> Iterator[UploadItem]:
    """Yield every uploadable file under source, in sorted walk order.

    Symlinks are not followed. Files or folders whose name still breaks the
    naming rules are skipped; the remediation report lists them.
    """
    source_abs = os.path.abspath(source)

    def walk(current: str, rel: str) -> Iterator[UploadItem]:
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            log.warning("Cannot enumerate %s: %s", current, exc)
            return

        for entry in entries:
            if entry.is_symlink():
                continue
            if not is_legal(entry.name):
                log.warning("Skipping %s: name not allowed at destination", entry.path)
                continue

            child_rel = f"{rel}/{entry.name}" if rel else entry.name
            if entry.is_dir(follow_symlinks=False):
                yield from walk(entry.path, child_rel)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue

            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as exc:
                log.warning("Cannot stat %s: %s", entry.path, exc)
                continue

            modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
            if modified_since is not None and modified < modified_since:
                log.debug("Skipping %s: not modified since %s", entry.path, modified_since)
                continue

            yield UploadItem(
                local_path=entry.path,
                relative_dir=rel,
                size=st.st_size,
                modified=modified,
            )

    yield from walk(source_abs, "")
