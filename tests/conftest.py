"""Pytest fixtures: in-memory catalog and mapping store."""

import pytest

from catalog_sync import config, create_app
from catalog_sync.errors import DownstreamRequestError
from catalog_sync.services.mapping_store import Mapping, MappingStore


class FakeCatalog:
    """Stands in for GHLClient. Records every call; `fail[op]` injects errors."""

    def __init__(self, collections=None, location_id="loc_1"):
        self.location_id = location_id
        self.collections = list(collections or [])
        self.products: dict[str, dict] = {}
        self.prices: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.fail: dict = {}
        self.create_response = None
        self.closed = False
        self._seq = 0

    def _next(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}_{self._seq}"

    def _call(self, op: str, *args):
        self.calls.append((op, *args))
        err = self.fail.get(op)
        if isinstance(err, list):
            err = err.pop(0) if err else None
        if err is not None:
            raise err

    def ops(self, *names) -> list[tuple]:
        return [c for c in self.calls if c[0] in names]

    @property
    def mutating_calls(self) -> list[tuple]:
        return self.ops("create_product", "update_product", "create_price", "update_price", "delete_price")

    def list_collections(self):
        self._call("list_collections")
        return list(self.collections)

    def get_product(self, pid):
        self._call("get_product", pid)
        if pid not in self.products:
            raise DownstreamRequestError(404, {"message": "Product not found"}, f"https://x/products/{pid}")
        return dict(self.products[pid])

    def create_product(self, payload):
        self._call("create_product", payload)
        if self.create_response is not None:
            return self.create_response
        pid = self._next("prod")
        self.products[pid] = {"_id": pid, **payload}
        return {"product": {"_id": pid, "name": payload.get("name")}}

    def update_product(self, pid, payload):
        self._call("update_product", pid, payload)
        if pid not in self.products:
            raise DownstreamRequestError(404, {"message": "Product not found"}, f"https://x/products/{pid}")
        self.products[pid] = {"_id": pid, **payload}
        return {"product": dict(self.products[pid])}

    def search_products(self, term):
        self._call("search_products", term)
        return [dict(p) for p in self.products.values() if term.lower() in str(p.get("name", "")).lower()]

    def list_prices(self, pid):
        self._call("list_prices", pid)
        return [dict(p) for p in self.prices.values() if p.get("product") == pid]

    def create_price(self, pid, payload):
        self._call("create_price", pid, payload)
        price_id = self._next("price")
        self.prices[price_id] = {"_id": price_id, **payload, "product": pid}
        return {"_id": price_id, **payload}

    def update_price(self, pid, price_id, payload):
        self._call("update_price", pid, price_id, payload)
        self.prices[price_id] = {"_id": price_id, **payload, "product": pid}
        return {"_id": price_id}

    def delete_price(self, pid, price_id):
        self._call("delete_price", pid, price_id)
        self.prices.pop(price_id, None)

    def close(self):
        self.closed = True

    def prices_with_sku(self, sku: str) -> list[dict]:
        return [p for p in self.prices.values() if str(p.get("sku", "")).lower() == sku.lower()]


class MemoryMappingStore(MappingStore):
    def __init__(self, up: bool = True):
        self.up = up
        self.data: dict[tuple, Mapping] = {}
        self.probes = 0

    def probe(self) -> bool:
        self.probes += 1
        return self.up

    def get(self, location_id, key):
        return self.data.get((location_id, key)) if self.up else None

    def set(self, location_id, key, mapping):
        if not self.up:
            return False
        self.data[(location_id, key)] = mapping
        return True


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(collections=[{"id": "col_1", "name": "Gadgets"}, {"_id": "col_2", "name": "Summer Sale"}])


@pytest.fixture
def store() -> MemoryMappingStore:
    return MemoryMappingStore()


@pytest.fixture
def widget_body() -> dict:
    return {
        "name": "Widget",
        "collectionName": "Gadgets",
        "sku": "W-100",
        "price": {"amount": 19.99, "currency": "USD"},
        "upsert": True,
    }


@pytest.fixture
def app(store, monkeypatch):
    monkeypatch.setattr(config, "GHL_TOKEN", "tok_abcdefghijklmnop")
    monkeypatch.setattr(config, "GHL_LOCATION_ID", "loc_1")
    return create_app(mapping_store=store)


@pytest.fixture
def client(app):
    return app.test_client()
