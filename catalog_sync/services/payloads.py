# catalog_sync/services/payloads.py
#
# Candidate payload shapes, tried in order until the API accepts one.
# Add a builder to the tuple when a tenant rejects the existing shapes.
import uuid
from dataclasses import dataclass
from typing import Optional

from .request import PriceInput, SyncRequest


@dataclass
class ProductContext:
    req: SyncRequest
    name: str
    collection_id: str
    location_id: str


@dataclass
class PriceContext:
    price: PriceInput
    product_id: str
    location_id: str


def media_id(url: str) -> str:
    """Stable per url, so re-sending the same media list does not churn ids."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, url))


def _featured_url(req: SyncRequest) -> Optional[str]:
    for m in req.media:
        if m.is_featured:
            return m.url
    return None


def _product_base(ctx: ProductContext) -> dict:
    req = ctx.req
    body = {
        "locationId": ctx.location_id,
        "name": ctx.name,
        "description": req.description,
        "productType": req.product_type,
        "availableInStore": req.available_in_store,
        "collectionIds": [ctx.collection_id],
    }
    if req.seo_title or req.seo_description:
        body["seo"] = {"title": req.seo_title or "", "description": req.seo_description or ""}
    image = _featured_url(req)
    if image:
        body["image"] = image
    return body


def product_with_medias(ctx: ProductContext) -> dict:
    body = _product_base(ctx)
    body["medias"] = [
        {"id": media_id(m.url), "title": m.title or ctx.req.name, "url": m.url,
         "type": m.type, "isFeatured": m.is_featured}
        for m in ctx.req.media
    ]
    return body


def product_with_collection_aliases(ctx: ProductContext) -> dict:
    # some tenants only honor the singular collection fields, and want sku on the product
    body = product_with_medias(ctx)
    body["collectionId"] = ctx.collection_id
    body["assignedCollectionId"] = ctx.collection_id
    if ctx.req.sku:
        body["sku"] = ctx.req.sku
    return body


def product_image_only(ctx: ProductContext) -> dict:
    return _product_base(ctx)


PRODUCT_VARIANTS = (product_with_collection_aliases, product_with_medias, product_image_only)


def _price_base(ctx: PriceContext) -> dict:
    p = ctx.price
    body = {
        "product": ctx.product_id,
        "locationId": ctx.location_id,
        "name": p.name,
        "type": p.type,
        "currency": p.currency,
    }
    if p.sku:
        body["sku"] = p.sku
    if p.compare_at is not None:
        body["compareAtPrice"] = p.compare_at
    return body


def price_amount(ctx: PriceContext) -> dict:
    return {**_price_base(ctx), "amount": ctx.price.amount}


def price_legacy_field(ctx: PriceContext) -> dict:
    return {**_price_base(ctx), "price": ctx.price.amount}


PRICE_VARIANTS = (price_amount, price_legacy_field)
