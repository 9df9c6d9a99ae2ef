# catalog_sync/services/locate.py
from dataclasses import dataclass
from typing import Optional

from ..clients.ghl import GHLClient, extract_id
from ..utils.logger import debug, info
from .mapping_store import MappingStore


def tag_for(key: str) -> str:
    return f"[DBE:{key}]"


def tagged_name(key: str, name: str) -> str:
    return f"{tag_for(key)} {name}"


@dataclass
class Located:
    product_id: str
    price_id: Optional[str] = None
    via: str = ""


class MappingLocator:
    """Finds a previous sync through the durable key -> id mapping."""

    uses_tag = False

    def __init__(self, store: MappingStore):
        self.store = store

    def locate(self, client: GHLClient, key: str, name: str) -> Optional[Located]:
        m = self.store.get(client.location_id, key)
        if not m:
            return None
        info(f"[locate] mapping hit {key} -> product {m.product_id} price {m.price_id}")
        return Located(m.product_id, m.price_id, via="mapping")


class TagSearchLocator:
    """Finds a previous sync by the "[DBE:<key>]" tag embedded in the product name. Best effort."""

    uses_tag = True

    def locate(self, client: GHLClient, key: str, name: str) -> Optional[Located]:
        tag = tag_for(key)
        wanted = tagged_name(key, name).lower()
        products = client.search_products(tag)
        debug(f"[locate] tag search {tag}: {len(products)} result(s)")

        exact = partial = None
        for p in products:
            pname = str(p.get("name") or "").lower()
            if exact is None and pname == wanted:
                exact = p
            elif partial is None and tag.lower() in pname:
                partial = p
        hit = exact or partial
        pid = extract_id(hit) if hit else None
        if not pid:
            return None
        info(f"[locate] tag hit {tag} -> product {pid}")
        return Located(pid, None, via="tag")


def locator_for(store: MappingStore, store_ok: bool):
    """Pick discovery by this request's own probe result."""
    return MappingLocator(store) if store_ok else TagSearchLocator()
