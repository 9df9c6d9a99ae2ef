# catalog_sync/clients/ghl.py
from typing import Optional
from urllib.parse import quote

import requests

from .. import config
from ..errors import DownstreamRequestError
from ..utils.logger import debug

ALT_TYPE = "location"

PRODUCT_ID_PATHS = ("product.id", "product._id", "data.id", "data._id", "id", "_id")
PRICE_ID_PATHS = ("price.id", "price._id", "data.id", "data._id", "id", "_id")
COLLECTION_ID_PATHS = ("id", "_id", "collectionId", "collection_id", "uuid")


def rest_headers(token: str, version: str) -> dict:
    return {
        "Authorization": f"Bearer {token}",
        "Version": version,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def tenant_params(location_id: str) -> dict:
    # this tenant requires locationId in the query as well as altId/altType
    return {"altId": location_id, "altType": ALT_TYPE, "locationId": location_id}


def parse_body(resp: requests.Response):
    text = resp.text
    if not text:
        return None
    try:
        return resp.json()
    except ValueError:
        return text


def as_list(data, *keys) -> list:
    """Unwrap `{<key>:[...]}`, `{items:[...]}`, `{data:[...]}` or a bare list."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    for k in (*keys, "items", "data"):
        v = data.get(k)
        if isinstance(v, list):
            return v
    return []


def as_object(data, *keys) -> Optional[dict]:
    if not isinstance(data, dict):
        return None
    for k in keys:
        v = data.get(k)
        if isinstance(v, dict):
            return v
    return data


def extract_id(obj, paths=PRODUCT_ID_PATHS) -> Optional[str]:
    for path in paths:
        node = obj
        for part in path.split("."):
            node = node.get(part) if isinstance(node, dict) else None
        if node not in (None, ""):
            return str(node)
    return None


class GHLClient:
    """Catalog API calls for one location. Raises DownstreamRequestError on any non-2xx."""

    def __init__(self, token: str, location_id: str, base: Optional[str] = None,
                 version: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.token = token
        self.location_id = location_id
        self.base = (base or config.API_BASE).rstrip("/")
        self.version = version or config.API_VERSION
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def request(self, method: str, path: str, json: Optional[dict] = None, params: Optional[dict] = None):
        url = f"{self.base}{path}"
        query = {**(params or {}), **tenant_params(self.location_id)}
        prepared = requests.Request(method, url, params=query).prepare().url
        debug(f"[ghl] {method} {path}")
        try:
            r = self.session.request(method, url, params=query, json=json,
                                     headers=rest_headers(self.token, self.version), timeout=self.timeout)
        except requests.RequestException as e:
            raise DownstreamRequestError(502, data=str(e), url=prepared, message=f"GHL unreachable: {e}") from e
        data = parse_body(r)
        if not r.ok:
            raise DownstreamRequestError(r.status_code, data=data, url=r.url or prepared)
        return data

    # -------------------------------------------------------
    # Collections
    # -------------------------------------------------------

    def list_collections(self) -> list[dict]:
        return as_list(self.request("GET", "/products/collections"), "collections")

    # -------------------------------------------------------
    # Products
    # -------------------------------------------------------

    def get_product(self, pid: str) -> Optional[dict]:
        return as_object(self.request("GET", f"/products/{quote(str(pid), safe='')}"), "product", "data")

    def create_product(self, payload: dict):
        return self.request("POST", "/products/", json=payload)

    def update_product(self, pid: str, payload: dict):
        return self.request("PUT", f"/products/{quote(str(pid), safe='')}", json=payload)

    def search_products(self, term: str) -> list[dict]:
        return as_list(self.request("GET", "/products/", params={"search": term}), "products")

    # -------------------------------------------------------
    # Prices (scoped under a product)
    # -------------------------------------------------------

    def list_prices(self, pid: str) -> list[dict]:
        return as_list(self.request("GET", f"/products/{quote(str(pid), safe='')}/price"), "prices")

    def create_price(self, pid: str, payload: dict):
        return self.request("POST", f"/products/{quote(str(pid), safe='')}/price", json=payload)

    def update_price(self, pid: str, price_id: str, payload: dict):
        return self.request("PUT", f"/products/{quote(str(pid), safe='')}/price/{quote(str(price_id), safe='')}",
                            json=payload)

    def delete_price(self, pid: str, price_id: str):
        self.request("DELETE", f"/products/{quote(str(pid), safe='')}/price/{quote(str(price_id), safe='')}")
