# catalog_sync/services/request.py
import json
import math
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ClientInputError

TRUTHY = ("true", "1", "yes", "y", "on")


def _s(v) -> str:
    return "" if v is None else str(v).strip()


def _flag(v, default: bool) -> bool:
    if v is None or v == "":
        return default
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    return str(v).strip().lower() in TRUTHY


def _number(v, field_name: str) -> Optional[float]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ClientInputError(f"Invalid {field_name}: must be a number")
    try:
        n = float(v)
    except (TypeError, ValueError):
        raise ClientInputError(f"Invalid {field_name}: must be a number")
    if math.isnan(n) or math.isinf(n):
        raise ClientInputError(f"Invalid {field_name}: must be a number")
    if n < 0:
        raise ClientInputError(f"Invalid {field_name}: must be >= 0")
    return n


@dataclass
class MediaItem:
    url: str
    title: str = ""
    type: str = "image"
    is_featured: bool = False


@dataclass
class PriceInput:
    amount: float
    currency: str = "USD"
    type: str = "one_time"
    name: str = ""
    sku: Optional[str] = None
    compare_at: Optional[float] = None


@dataclass
class SyncRequest:
    name: str
    collection_name: str
    description: str = ""
    media: list[MediaItem] = field(default_factory=list)
    price: Optional[PriceInput] = None
    sku: Optional[str] = None
    external_id: Optional[str] = None
    upsert: bool = False
    available_in_store: bool = True
    product_type: str = "PHYSICAL"
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    location_id: Optional[str] = None

    @property
    def dedupe_key(self) -> str:
        """Lower-cased sku, else lower-cased externalId, else ''."""
        return (self.sku or self.external_id or "").lower()

    @classmethod
    def from_body(cls, body) -> "SyncRequest":
        if isinstance(body, (str, bytes)):
            try:
                body = json.loads(body) if body else {}
            except ValueError:
                body = {}
        if not isinstance(body, dict):
            body = {}

        name = _s(body.get("name"))
        collection_name = _s(body.get("collectionName"))
        if not name:
            raise ClientInputError("Missing name")
        if not collection_name:
            raise ClientInputError("Missing collectionName")

        sku = _s(body.get("sku")) or None
        external_id = _s(body.get("externalId")) or None
        upsert = _flag(body.get("upsert"), False)
        if upsert and not (sku or external_id):
            raise ClientInputError("upsert requires sku or externalId")

        return cls(
            name=name,
            collection_name=collection_name,
            description=_s(body.get("description")),
            media=parse_media(body),
            price=parse_price(body.get("price"), name, sku),
            sku=sku,
            external_id=external_id,
            upsert=upsert,
            available_in_store=_flag(body.get("availableInStore"), True),
            product_type=(_s(body.get("productType")) or "PHYSICAL").upper(),
            seo_title=_s(body.get("seoTitle")) or None,
            seo_description=_s(body.get("seoDescription")) or None,
            location_id=_s(body.get("locationId")) or None,
        )


def parse_media(body: dict) -> list[MediaItem]:
    """Explicit `media` objects win over `images`; first item is featured unless one is flagged."""
    items: list[MediaItem] = []
    seen = set()

    raw_media = body.get("media")
    if isinstance(raw_media, list) and raw_media:
        for m in raw_media:
            if isinstance(m, str):
                m = {"url": m}
            if not isinstance(m, dict):
                continue
            url = _s(m.get("url"))
            if not url or url in seen:
                continue
            seen.add(url)
            items.append(MediaItem(
                url=url,
                title=_s(m.get("title")),
                type=_s(m.get("type")) or "image",
                is_featured=_flag(m.get("isFeatured"), False),
            ))
    else:
        images = body.get("images")
        if not isinstance(images, list):
            images = [body.get("image")] if body.get("image") else []
        for u in images:
            url = _s(u)
            if not url or url in seen:
                continue
            seen.add(url)
            items.append(MediaItem(url=url))

    if items and not any(m.is_featured for m in items):
        items[0].is_featured = True
    return items


def parse_price(raw, product_name: str, sku: Optional[str]) -> Optional[PriceInput]:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, dict):
        raw = {"amount": raw}
    amount = _number(raw.get("amount"), "price.amount")
    if amount is None:
        return None
    return PriceInput(
        amount=amount,
        currency=(_s(raw.get("currency")) or "USD").upper(),
        type=_s(raw.get("type")) or "one_time",
        name=_s(raw.get("name")) or product_name,
        sku=_s(raw.get("sku")) or sku,
        compare_at=_number(raw.get("compareAt"), "price.compareAt"),
    )
