"""Tests for upload candidate enumeration and recency cutoffs."""

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta, timezone

import pytest

from homeshift.candidates import iter_upload_candidates, parse_since
from conftest import make_files


def test_yields_files_with_relative_dirs(tmp_path):
    make_files(tmp_path, "a.txt", "docs/b.txt", "docs/deep/c.txt", "empty/")
    items = list(iter_upload_candidates(str(tmp_path)))

    assert [(i.relative_dir, i.name) for i in items] == [
        ("", "a.txt"),
        ("docs", "b.txt"),
        ("docs/deep", "c.txt"),
    ]
    assert items[0].size == 1
    assert items[0].modified.tzinfo is not None


def test_illegal_names_are_skipped(tmp_path, caplog):
    make_files(tmp_path, "ok.txt", "bad#1.txt", "desktop.ini", "_vti_pvt/inner.txt")
    names = [i.name for i in iter_upload_candidates(str(tmp_path))]
    assert names == ["ok.txt"]
    assert "not allowed at destination" in caplog.text


def test_modified_since_filters_old_files(tmp_path):
    make_files(tmp_path, "old.txt", "new.txt")
    old = time.time() - 400 * 86400
    os.utime(tmp_path / "old.txt", (old, old))

    cutoff = datetime.now(timezone.utc) - timedelta(days=30)
    names = [i.name for i in iter_upload_candidates(str(tmp_path), cutoff)]
    assert names == ["new.txt"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
def test_symlinks_are_skipped(tmp_path):
    make_files(tmp_path, "src/real.txt", "elsewhere/other.txt")
    os.symlink(str(tmp_path / "elsewhere"), str(tmp_path / "src" / "linkdir"))
    os.symlink(str(tmp_path / "elsewhere" / "other.txt"), str(tmp_path / "src" / "link.txt"))

    names = [i.name for i in iter_upload_candidates(str(tmp_path / "src"))]
    assert names == ["real.txt"]


def test_parse_since_days():
    now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
    assert parse_since("30", now) == datetime(2024, 5, 31, 12, 0, tzinfo=timezone.utc)
    assert parse_since("30d", now) == parse_since("30", now)
    assert parse_since(" 7D ", now) == now - timedelta(days=7)


def test_parse_since_dates():
    assert parse_since("2024-01-31") == datetime(2024, 1, 31, tzinfo=timezone.utc)
    assert parse_since("2024-01-31T08:00:00+01:00") == datetime(
        2024, 1, 31, 7, 0, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("value", ["yesterday", "", "30 weeks", "2024-13-01"])
def test_parse_since_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_since(value)
