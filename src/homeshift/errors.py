"""Per-user migration outcomes.

Every outcome carries the identity it belongs to at the top level, so a
batch can be summarised without digging into result or error bodies:

    {"ok": True, "identity": "jane@contoso.com", "result": {...}}
    {"ok": False, "identity": "jane@contoso.com",
     "error": {"code": "E_SITE_NOT_FOUND", "message": "...", "details": {...}}}
"""

from __future__ import annotations

from typing import Any

E_SOURCE_MISSING = "E_SOURCE_MISSING"
E_SITE_NOT_FOUND = "E_SITE_NOT_FOUND"
E_GRANT_FAILED = "E_GRANT_FAILED"
E_INTERNAL = "E_INTERNAL"


def err(
    identity: str,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A user whose migration stopped before or instead of uploading."""
    return {
        "ok": False,
        "identity": identity,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


def ok(identity: str, result: dict[str, Any]) -> dict[str, Any]:
    return {"ok": True, "identity": identity, "result": result}


def failed_identities(outcomes: list[dict[str, Any]]) -> list[str]:
    return [o["identity"] for o in outcomes if not o["ok"]]
