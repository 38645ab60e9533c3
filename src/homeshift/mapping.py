"""User mapping CSV: Identity,SourcePath[,TargetFolder]."""

from __future__ import annotations

import csv
import os
import posixpath

from homeshift.config import DEFAULT_TARGET_FOLDER
from homeshift.models import UserMapping

REQUIRED_COLUMNS = ("identity", "sourcepath")


def normalize_folder(folder: str) -> str:
    """Posix-style drive folder without leading/trailing slashes."""
    parts = [p for p in folder.replace("\\", "/").split("/") if p and p != "."]
    return posixpath.join(*parts) if parts else ""


def default_folder(source_path: str) -> str:
    leaf = os.path.basename(os.path.normpath(source_path))
    return normalize_folder(f"{DEFAULT_TARGET_FOLDER}/{leaf}")


def load_mappings(path: str) -> list[UserMapping]:
    """Parse the mapping CSV into typed records.

    Headers are matched case-insensitively. Blank rows are skipped;
    rows missing a required value raise ValueError with the line number.
    """
    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            raise ValueError(f"Mapping file is empty: {path}")

        columns = {name.strip().lower(): i for i, name in enumerate(header)}
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise ValueError(
                f"Mapping file {path} is missing column(s): "
                + ", ".join(missing)
                + " (expected Identity,SourcePath[,TargetFolder])"
            )

        def cell(row: list[str], column: str) -> str:
            i = columns.get(column)
            if i is None or i >= len(row):
                return ""
            return row[i].strip()

        mappings: list[UserMapping] = []
        for row in reader:
            if not any(c.strip() for c in row):
                continue
            identity = cell(row, "identity")
            source = cell(row, "sourcepath")
            if not identity or not source:
                raise ValueError(
                    f"{path}:{reader.line_num}: Identity and SourcePath are required"
                )
            target = normalize_folder(cell(row, "targetfolder")) or default_folder(source)
            mappings.append(UserMapping(
                identity=identity,
                source_path=os.path.abspath(source),
                relative_folder=target,
            ))

    return mappings
