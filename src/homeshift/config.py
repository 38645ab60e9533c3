"""Configuration: naming rules, destination credentials, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Destination naming rules
MAX_NAME_LENGTH = 400
RESERVED_NAMES: tuple[str, ...] = ("desktop.ini",)  # whole-name match
RESERVED_SUBSTRINGS: tuple[str, ...] = ("_vti_",)  # match anywhere in the name
ILLEGAL_CHARACTERS: tuple[str, ...] = ("#", "%")
REPLACEMENT_CHARACTER = "-"

REPORT_HEADER = ("File/Folder Name", "New Name", "Comments")
COMMENT_SEPARATOR = "; "

DEFAULT_TARGET_FOLDER = "Home Folder Migration"
SIMPLE_UPLOAD_LIMIT = 4 * 1024 * 1024  # 4 MiB
UPLOAD_CHUNK_SIZE = 10 * 1024 * 1024  # must stay a multiple of 320 KiB
HTTP_TIMEOUT_SECONDS = 120

_REQUIRED_ENV = {
    "tenant_id": "HOMESHIFT_TENANT_ID",
    "client_id": "HOMESHIFT_CLIENT_ID",
    "admin_upn": "HOMESHIFT_ADMIN_UPN",
}


@dataclass(frozen=True)
class MigrationConfig:
    tenant_id: str
    client_id: str
    admin_upn: str  # account granted temporary site admin
    client_secret: str = ""
    cert_path: str = ""  # PEM private key; SharePoint REST rejects secret-only app tokens
    cert_thumbprint: str = ""

    @property
    def authority(self) -> str:
        return f"https://login.microsoftonline.com/{self.tenant_id}"

    def client_credential(self) -> str | dict[str, str]:
        """Credential in the shape msal.ConfidentialClientApplication expects."""
        if self.cert_path:
            with open(self.cert_path, encoding="utf-8") as f:
                return {"private_key": f.read(), "thumbprint": self.cert_thumbprint}
        return self.client_secret


def load_migration_config() -> MigrationConfig:
    """Load destination credentials from HOMESHIFT_* env vars.

    Requires tenant, client and admin account, plus either a client secret
    or a certificate (HOMESHIFT_CERT_PATH + HOMESHIFT_CERT_THUMBPRINT).
    Fail closed if anything is missing.
    """
    values: dict[str, str] = {}
    missing: list[str] = []
    for field_name, env_name in _REQUIRED_ENV.items():
        value = os.environ.get(env_name, "").strip()
        if not value:
            missing.append(env_name)
        values[field_name] = value

    secret = os.environ.get("HOMESHIFT_CLIENT_SECRET", "").strip()
    cert_path = os.environ.get("HOMESHIFT_CERT_PATH", "").strip()
    thumbprint = os.environ.get("HOMESHIFT_CERT_THUMBPRINT", "").strip()
    if cert_path and not thumbprint:
        missing.append("HOMESHIFT_CERT_THUMBPRINT")
    elif not cert_path and not secret:
        missing.append("HOMESHIFT_CLIENT_SECRET (or HOMESHIFT_CERT_PATH)")

    if missing:
        raise RuntimeError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )

    if cert_path and not os.path.isfile(cert_path):
        raise RuntimeError(f"Certificate file does not exist: {cert_path}")

    return MigrationConfig(
        client_secret=secret,
        cert_path=cert_path,
        cert_thumbprint=thumbprint,
        **values,
    )
