"""Remediation report: CSV, truncated per scan, rows appended as found."""

from __future__ import annotations

import csv
import os
from typing import IO

from homeshift.config import REPORT_HEADER
from homeshift.models import RemediationRecord


class RemediationReport:
    """Append-only CSV writer. Use as a context manager.

    Each row is flushed immediately so an interrupted scan still leaves
    a readable report.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self.rows_written = 0
        self._fh: IO[str] | None = None
        self._writer = None

    def open(self) -> RemediationReport:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self._fh = open(self.path, "w", encoding="utf-8", newline="")
        self._writer = csv.writer(self._fh, lineterminator="\n")
        self._writer.writerow(REPORT_HEADER)
        self._fh.flush()
        return self

    def write(self, record: RemediationRecord) -> None:
        if self._writer is None or self._fh is None:
            raise RuntimeError("Report is not open")
        self._writer.writerow(record.as_row())
        self._fh.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
        self._fh = None
        self._writer = None

    def __enter__(self) -> RemediationReport:
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()


def read_report(path: str) -> list[RemediationRecord]:
    """Load a report back into records (header row skipped)."""
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)
        return [RemediationRecord(*row) for row in reader if row]
