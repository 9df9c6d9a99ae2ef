from flask import request

from .. import config


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    return auth[7:].strip() if auth.startswith("Bearer ") else ""


def resolve_token() -> str:
    """Configured token wins; otherwise accept the caller's bearer token."""
    return (config.GHL_TOKEN or bearer_token()).strip()


def token_prefix(token: str) -> str:
    """First characters of a credential, safe to echo back for diagnosis."""
    return (token or "")[:10]
