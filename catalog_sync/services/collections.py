# catalog_sync/services/collections.py
from typing import Optional

from ..clients.ghl import COLLECTION_ID_PATHS, extract_id


def _norm(v) -> str:
    return str(v or "").strip().lower()


def resolve_collection_id(collections: list[dict], name: str) -> Optional[str]:
    """Exact (case-insensitive, trimmed) name match first, then first name containing the target."""
    target = _norm(name)
    if not target:
        return None
    candidates = [c for c in (collections or []) if isinstance(c, dict)]

    for c in candidates:
        if _norm(c.get("name")) == target:
            cid = extract_id(c, COLLECTION_ID_PATHS)
            if cid:
                return cid

    for c in candidates:
        if target in _norm(c.get("name")):
            cid = extract_id(c, COLLECTION_ID_PATHS)
            if cid:
                return cid
    return None


def collections_seen(collections: list[dict]) -> list[dict]:
    return [{"name": c.get("name"), "id": extract_id(c, COLLECTION_ID_PATHS)}
            for c in (collections or []) if isinstance(c, dict)]
