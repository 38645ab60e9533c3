"""Destination service: personal site lookup, temporary admin, file upload.

Graph handles drive lookup and uploads; site admin membership goes through
the SharePoint REST API of the personal site itself. Every call is a single
attempt: failures raise DestinationError and the caller decides what to log.
"""

from __future__ import annotations

import logging
from typing import Any, Callable
from urllib.parse import quote, urlparse

import msal
import requests

from homeshift.config import (
    HTTP_TIMEOUT_SECONDS,
    SIMPLE_UPLOAD_LIMIT,
    UPLOAD_CHUNK_SIZE,
    MigrationConfig,
)
from homeshift.models import UploadItem

log = logging.getLogger(__name__)

GRAPH_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
CLAIMS_PREFIX = "i:0#.f|membership|"

TokenProvider = Callable[[str], str]


class DestinationError(Exception):
    """A remote call failed or returned an unusable answer."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def msal_token_provider(config: MigrationConfig) -> TokenProvider:
    """Client-credentials token provider, one cached token per scope."""
    app = msal.ConfidentialClientApplication(
        client_id=config.client_id,
        client_credential=config.client_credential(),
        authority=config.authority,
    )

    def get_token(scope: str) -> str:
        result = app.acquire_token_for_client(scopes=[scope])
        if "access_token" not in result:
            error = result.get("error_description", result.get("error", "Unknown error"))
            raise DestinationError(f"Token request for {scope} failed: {error}")
        return result["access_token"]

    return get_token


def sharepoint_scope(site_url: str) -> str:
    return f"https://{urlparse(site_url).netloc}/.default"


def drive_path(*segments: str) -> str:
    """Join and percent-encode drive path segments ("a/b", "c d" -> "a/b/c%20d")."""
    parts: list[str] = []
    for segment in segments:
        parts.extend(p for p in segment.split("/") if p)
    return "/".join(quote(p, safe="") for p in parts)


class GraphDestination:
    """OneDrive for Business destination for one tenant."""

    def __init__(
        self,
        config: MigrationConfig,
        session: requests.Session | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.token_provider = token_provider or msal_token_provider(config)

    # --- Site lookup ---

    def resolve_site(self, identity: str) -> str:
        """Return the personal site URL for a user (drive webUrl minus library)."""
        url = f"{GRAPH_URL}/users/{quote(identity, safe='@')}/drive"
        resp = self._request("GET", url, GRAPH_SCOPE, params={"$select": "webUrl"})
        web_url = resp.json().get("webUrl", "")
        if not web_url:
            raise DestinationError(f"Drive for {identity} has no webUrl")
        return web_url.rstrip("/").rsplit("/", 1)[0]

    # --- Temporary site admin ---

    def grant_admin(self, site_url: str) -> None:
        self._set_site_admin(site_url, True)
        log.info("Granted site admin on %s to %s", site_url, self.config.admin_upn)

    def revoke_admin(self, site_url: str) -> None:
        self._set_site_admin(site_url, False)
        log.info("Revoked site admin on %s from %s", site_url, self.config.admin_upn)

    def _set_site_admin(self, site_url: str, is_admin: bool) -> None:
        scope = sharepoint_scope(site_url)
        headers = {
            "Accept": "application/json;odata=nometadata",
            "Content-Type": "application/json;odata=verbose",
        }
        resp = self._request(
            "POST",
            f"{site_url}/_api/web/ensureuser",
            scope,
            headers=headers,
            json={"logonName": CLAIMS_PREFIX + self.config.admin_upn},
        )
        user_id = resp.json().get("Id")
        if user_id is None:
            raise DestinationError(f"ensureuser on {site_url} returned no user id")

        self._request(
            "POST",
            f"{site_url}/_api/web/siteusers/getbyid({user_id})",
            scope,
            headers={**headers, "X-HTTP-Method": "MERGE", "IF-MATCH": "*"},
            json={"__metadata": {"type": "SP.User"}, "IsSiteAdmin": is_admin},
        )

    # --- Upload ---

    def upload(self, identity: str, remote_folder: str, item: UploadItem) -> None:
        """Upload one file into remote_folder/relative_dir, replacing any existing copy."""
        path = drive_path(remote_folder, item.relative_dir, item.name)
        base = f"{GRAPH_URL}/users/{quote(identity, safe='@')}/drive/root:/{path}:"

        if item.size <= SIMPLE_UPLOAD_LIMIT:
            with open(item.local_path, "rb") as f:
                self._request(
                    "PUT",
                    f"{base}/content",
                    GRAPH_SCOPE,
                    params={"@microsoft.graph.conflictBehavior": "replace"},
                    headers={"Content-Type": "application/octet-stream"},
                    data=f,
                )
        else:
            self._upload_large(base, item)
        log.debug("Uploaded %s -> %s", item.local_path, path)

    def _upload_large(self, base: str, item: UploadItem) -> None:
        resp = self._request(
            "POST",
            f"{base}/createUploadSession",
            GRAPH_SCOPE,
            json={"item": {"@microsoft.graph.conflictBehavior": "replace"}},
        )
        upload_url = resp.json().get("uploadUrl")
        if not upload_url:
            raise DestinationError(f"No uploadUrl returned for {item.local_path}")

        # The upload URL is pre-authenticated; no bearer token
        with open(item.local_path, "rb") as f:
            start = 0
            while start < item.size:
                chunk = f.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    raise DestinationError(f"{item.local_path} shrank during upload")
                end = start + len(chunk) - 1
                r = self.session.put(
                    upload_url,
                    headers={
                        "Content-Length": str(len(chunk)),
                        "Content-Range": f"bytes {start}-{end}/{item.size}",
                    },
                    data=chunk,
                    timeout=HTTP_TIMEOUT_SECONDS,
                )
                if r.status_code not in (200, 201, 202):
                    raise DestinationError(
                        f"Chunk upload failed: {r.status_code} {r.text[:200]}",
                        r.status_code,
                    )
                start = end + 1

    # --- Internal helpers ---

    def _request(self, method: str, url: str, scope: str, **kwargs: Any) -> requests.Response:
        try:
            headers = {"Authorization": f"Bearer {self.token_provider(scope)}"}
            headers.update(kwargs.pop("headers", None) or {})
            resp = self.session.request(
                method, url, headers=headers, timeout=HTTP_TIMEOUT_SECONDS, **kwargs
            )
        except (requests.RequestException, OSError) as exc:
            raise DestinationError(f"{method} {url} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise DestinationError(
                f"{method} {url} failed: {resp.status_code} {resp.text[:200]}",
                resp.status_code,
            )
        return resp
