# catalog_sync/services/reconciler.py
from typing import Optional

from ..clients.ghl import GHLClient, PRICE_ID_PATHS, extract_id
from ..errors import CollectionNotFoundError, DownstreamRequestError, InvariantViolationError, SyncError
from ..utils.attempts import try_variants
from ..utils.logger import info, warn
from .collections import collections_seen, resolve_collection_id
from .locate import Located, locator_for, tagged_name
from .mapping_store import Mapping, MappingStore, NullMappingStore
from .payloads import PRICE_VARIANTS, PRODUCT_VARIANTS, PriceContext, ProductContext
from .request import SyncRequest

# =========================================================
# Stages
# =========================================================

RESOLVE_COLLECTION = "resolve_collection"
LOCATE_EXISTING = "locate_existing"
CREATE_OR_UPDATE_PRODUCT = "create_or_update_product"
RECONCILE_PRICE = "reconcile_price"
PERSIST_MAPPING = "persist_mapping"
VERIFY = "verify"
DONE = "done"

MODE_CREATE = "create"
MODE_UPDATE = "update"


def _same_sku(a, b) -> bool:
    a = str(a or "").strip().lower()
    return bool(a) and a == str(b or "").strip().lower()


class Reconciler:
    """
    Create-or-update one product (plus its price) for a sync request.

    Anything failing before the product write aborts the request. Price,
    mapping and verification failures after that are recorded in the result
    and leave `ok` true.
    """

    def __init__(self, client: GHLClient, store: Optional[MappingStore] = None):
        self.client = client
        self.store = store or NullMappingStore()
        self.stage = RESOLVE_COLLECTION

    def run(self, req: SyncRequest) -> dict:
        try:
            return self._run(req)
        except SyncError as e:
            e.stage = self.stage
            raise

    def _run(self, req: SyncRequest) -> dict:
        location = self.client.location_id
        key = req.dedupe_key
        store_ok = self.store.probe()

        # 1) collection
        self.stage = RESOLVE_COLLECTION
        collection_id = self.resolve_collection(req.collection_name)

        # 2) previous sync
        self.stage = LOCATE_EXISTING
        locator = locator_for(self.store, store_ok)
        located: Optional[Located] = None
        if req.upsert and key:
            located = locator.locate(self.client, key, req.name)
        mode = MODE_UPDATE if located else MODE_CREATE
        info(f"[locate] key={key or '-'} upsert={req.upsert} store={store_ok} -> {mode}")

        # 3) product
        self.stage = CREATE_OR_UPDATE_PRODUCT
        name = req.name
        if req.upsert and key and locator.uses_tag:
            name = tagged_name(key, req.name)
        ctx = ProductContext(req=req, name=name, collection_id=collection_id, location_id=location)
        product_id = self.write_product(ctx, located.product_id if located else None)

        # 4) price
        self.stage = RECONCILE_PRICE
        price = self.reconcile_price(req, product_id, mode, located)

        # 5) mapping
        self.stage = PERSIST_MAPPING
        price_id = price.get("priceId")
        # never map a price that this request just deleted
        if not price_id and located and located.price_id not in price.get("deleted", []):
            price_id = located.price_id
        mapping = self.persist_mapping(req, key, store_ok, product_id, price_id)

        # 6) verify
        self.stage = VERIFY
        verified, verify_error = None, None
        try:
            verified = self.client.get_product(product_id)
        except DownstreamRequestError as e:
            warn(f"[verify] product {product_id} re-read failed: {e.status}")
            verify_error = e.summary()

        self.stage = DONE
        info(f"[sync] {mode} product {product_id} price={price.get('action')} mapping={mapping.get('ok')}")
        result = {
            "ok": True,
            "mode": mode,
            "productId": product_id,
            "collection": {"name": req.collection_name, "id": collection_id},
            "dedupeKey": key or None,
            "locatedVia": located.via if located else None,
            "price": price,
            "mapping": mapping,
            "verified": verified,
        }
        if verify_error:
            result["verifyError"] = verify_error
        return result

    # =========================================================
    # Stage helpers
    # =========================================================

    def resolve_collection(self, collection_name: str) -> str:
        collections = self.client.list_collections()
        cid = resolve_collection_id(collections, collection_name)
        if not cid:
            warn(f"[collection] '{collection_name}' not found among {len(collections)} collection(s)")
            raise CollectionNotFoundError(collection_name, collections_seen(collections))
        info(f"[collection] '{collection_name}' -> {cid}")
        return cid

    def write_product(self, ctx: ProductContext, existing_id: Optional[str]) -> str:
        """PUT the full record on the located id, or POST then force a full PUT on the new id."""
        if existing_id:
            info(f"[product] updating {existing_id}")
            try_variants(PRODUCT_VARIANTS, ctx, lambda body: self.client.update_product(existing_id, body), "product")
            return existing_id

        info(f"[product] creating '{ctx.name}'")
        created, idx = try_variants(PRODUCT_VARIANTS, ctx, self.client.create_product, "product")
        product_id = extract_id(created)
        if not product_id:
            raise InvariantViolationError("Created product but ID missing", created)

        # create ignores some fields (availability, collection); the follow-up PUT makes them stick
        try:
            try_variants(PRODUCT_VARIANTS[idx:], ctx,
                         lambda body: self.client.update_product(product_id, body), "product")
        except DownstreamRequestError as e:
            e.product_id = product_id
            raise
        info(f"[product] created {product_id}")
        return product_id

    def reconcile_price(self, req: SyncRequest, product_id: str, mode: str, located: Optional[Located]) -> dict:
        if not req.price:
            return {"ok": True, "action": "skipped", "priceId": None}

        ctx = PriceContext(price=req.price, product_id=product_id, location_id=self.client.location_id)
        try:
            if req.upsert and req.price.sku:
                return self._replace_price(ctx)
            if mode == MODE_UPDATE and located and located.price_id:
                return self._update_price(ctx, located.price_id)
            price_id = self._create_price(ctx)
            return {"ok": True, "action": "created", "priceId": price_id}
        except DownstreamRequestError as e:
            warn(f"[price] failed for product {product_id}: {e.status} {e.data}")
            return {"ok": False, "action": "failed", "priceId": None, "error": e.summary()}

    def _create_price(self, ctx: PriceContext) -> Optional[str]:
        created, _ = try_variants(PRICE_VARIANTS, ctx,
                                  lambda body: self.client.create_price(ctx.product_id, body), "price")
        price_id = extract_id(created, PRICE_ID_PATHS)
        if not price_id:
            warn(f"[price] created on {ctx.product_id} but no id in response")
        return price_id

    def _replace_price(self, ctx: PriceContext) -> dict:
        """Delete every price carrying the sku, then create one fresh price."""
        sku = ctx.price.sku
        deleted, delete_errors = [], []
        for p in self.client.list_prices(ctx.product_id):
            if not _same_sku(p.get("sku"), sku):
                continue
            pid = extract_id(p, PRICE_ID_PATHS)
            if not pid:
                continue
            try:
                self.client.delete_price(ctx.product_id, pid)
                deleted.append(pid)
            except DownstreamRequestError as e:
                warn(f"[price] delete {pid} failed: {e.status}")
                delete_errors.append({"priceId": pid, **e.summary()})

        try:
            price_id = self._create_price(ctx)
        except DownstreamRequestError as e:
            warn(f"[price] sku {sku}: deleted {len(deleted)} but replacement failed: {e.status}")
            return {"ok": False, "action": "failed", "priceId": None, "noPrice": bool(deleted),
                    "deleted": deleted, "deleteErrors": delete_errors, "error": e.summary()}
        info(f"[price] sku {sku}: deleted {len(deleted)}, created {price_id}")
        return {"ok": True, "action": "replaced", "priceId": price_id,
                "deleted": deleted, "deleteErrors": delete_errors}

    def _update_price(self, ctx: PriceContext, price_id: str) -> dict:
        try:
            try_variants(PRICE_VARIANTS, ctx,
                         lambda body: self.client.update_price(ctx.product_id, price_id, body), "price")
            info(f"[price] updated {price_id}")
            return {"ok": True, "action": "updated", "priceId": price_id}
        except DownstreamRequestError as e:
            warn(f"[price] update {price_id} failed ({e.status}), creating a new price")
            new_id = self._create_price(ctx)
            return {"ok": True, "action": "created_fallback", "priceId": new_id,
                    "duplicateRisk": True, "updateError": e.summary()}

    def persist_mapping(self, req: SyncRequest, key: str, store_ok: bool,
                        product_id: str, price_id: Optional[str]) -> dict:
        if not (req.upsert and key):
            return {"ok": False, "skipped": True, "reason": "upsert not requested"}
        if not store_ok:
            return {"ok": False, "skipped": True, "reason": "mapping store unavailable"}
        ok = self.store.set(self.client.location_id, key, Mapping(product_id, price_id))
        if not ok:
            warn(f"[mapping] write failed for {key}")
        return {"ok": ok, "key": key, "productId": product_id, "priceId": price_id}
