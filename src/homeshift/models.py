"""Data models: Violation, RemediationRecord, UserMapping, UploadItem."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime

NAME_TOO_LONG = "NAME_TOO_LONG"
RESERVED_NAME = "RESERVED_NAME"
ILLEGAL_CHARACTER = "ILLEGAL_CHARACTER"

# Violations with no safe automatic correction
UNFIXABLE_KINDS = frozenset({NAME_TOO_LONG, RESERVED_NAME})


@dataclass(frozen=True)
class Violation:
    kind: str
    detail: str
    replacement: str | None = None  # ILLEGAL_CHARACTER only


@dataclass(frozen=True)
class RemediationRecord:
    original_path: str
    proposed_path: str
    comments: str

    def as_row(self) -> tuple[str, str, str]:
        return (self.original_path, self.proposed_path, self.comments)


@dataclass(frozen=True)
class UserMapping:
    identity: str
    source_path: str
    relative_folder: str  # posix, inside the user's drive root


@dataclass(frozen=True)
class UploadItem:
    local_path: str
    relative_dir: str  # posix, "" for files directly under the source root
    size: int
    modified: datetime

    @property
    def name(self) -> str:
        return os.path.basename(self.local_path)
