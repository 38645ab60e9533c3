"""Shared test fixtures for homeshift tests."""

from __future__ import annotations

import os

import pytest

from homeshift.destination import DestinationError
from homeshift.models import UploadItem, UserMapping


def make_files(root, *relpaths: str, content: str = "x") -> None:
    """Create files (and parent dirs) under root. Trailing "/" makes a dir."""
    for rel in relpaths:
        full = os.path.join(str(root), *rel.rstrip("/").split("/"))
        if rel.endswith("/"):
            os.makedirs(full, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "w", encoding="utf-8") as f:
            f.write(content)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: dict | None = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self) -> dict:
        return self._payload


class FakeSession:
    """Replays queued responses and records every request."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        data = kwargs.get("data")
        if hasattr(data, "read"):
            kwargs["data"] = data.read()
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def put(self, url, **kwargs):
        return self.request("PUT", url, **kwargs)


class FakeDestination:
    """In-memory destination that records every call."""

    def __init__(
        self,
        fail_resolve: Exception | None = None,
        fail_grant: bool = False,
        fail_revoke: bool = False,
        fail_uploads: set[str] | None = None,
    ) -> None:
        self.calls: list[tuple] = []
        self.uploads: list[tuple[str, str, UploadItem]] = []
        self.fail_resolve = fail_resolve
        self.fail_grant = fail_grant
        self.fail_revoke = fail_revoke
        self.fail_uploads = fail_uploads or set()

    def resolve_site(self, identity: str) -> str:
        self.calls.append(("resolve_site", identity))
        if self.fail_resolve is not None:
            raise self.fail_resolve
        user = identity.replace("@", "_").replace(".", "_")
        return f"https://contoso-my.sharepoint.com/personal/{user}"

    def grant_admin(self, site_url: str) -> None:
        self.calls.append(("grant_admin", site_url))
        if self.fail_grant:
            raise DestinationError("403 Forbidden", 403)

    def revoke_admin(self, site_url: str) -> None:
        self.calls.append(("revoke_admin", site_url))
        if self.fail_revoke:
            raise DestinationError("503 Service Unavailable", 503)

    def upload(self, identity: str, remote_folder: str, item: UploadItem) -> None:
        self.calls.append(("upload", item.name))
        if item.name in self.fail_uploads:
            raise DestinationError("500 Internal Server Error", 500)
        self.uploads.append((identity, remote_folder, item))

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_destination() -> FakeDestination:
    return FakeDestination()


@pytest.fixture
def home(tmp_path):
    """A small home folder with clean and hazardous names."""
    root = tmp_path / "home"
    make_files(
        root,
        "notes.txt",
        "report#card%2024.pdf",
        "desktop.ini",
        "Projects/plan.docx",
        "Projects/budget%final.xlsx",
    )
    return root


@pytest.fixture
def mapping(home) -> UserMapping:
    return UserMapping(
        identity="jane.doe@contoso.com",
        source_path=str(home),
        relative_folder="Home Folder Migration/home",
    )
