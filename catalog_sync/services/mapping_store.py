# catalog_sync/services/mapping_store.py
"""
Durable dedupe-key -> {productId, priceId} mapping.

The store is optional. When KV_URL is unset or Redis cannot be reached, a
NullMappingStore is used and every call is a no-op.
"""
import json
import time
from dataclasses import dataclass
from typing import Optional

import redis

from .. import config
from ..utils.logger import info, warn


@dataclass
class Mapping:
    product_id: str
    price_id: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps({"productId": self.product_id, "priceId": self.price_id, "updatedAt": int(time.time())})

    @classmethod
    def from_json(cls, raw) -> Optional["Mapping"]:
        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except ValueError:
            return None
        if not isinstance(data, dict) or not data.get("productId"):
            return None
        return cls(product_id=str(data["productId"]),
                   price_id=str(data["priceId"]) if data.get("priceId") else None)


class MappingStore:
    def probe(self) -> bool:
        """Re-check reachability. Called once per request."""
        return False

    def get(self, location_id: str, key: str) -> Optional[Mapping]:
        return None

    def set(self, location_id: str, key: str, mapping: Mapping) -> bool:
        return False


class NullMappingStore(MappingStore):
    pass


class RedisMappingStore(MappingStore):
    def __init__(self, url: str, prefix: str = "dbe:map", client=None):
        self._client = client if client is not None else redis.from_url(url, decode_responses=True)
        self._prefix = prefix

    def _key(self, location_id: str, key: str) -> str:
        return f"{self._prefix}:{location_id}:{key}"

    def probe(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            warn(f"[mapping] store unreachable, falling back to tag search: {e}")
            return False

    def get(self, location_id: str, key: str) -> Optional[Mapping]:
        if not key:
            return None
        try:
            raw = self._client.get(self._key(location_id, key))
        except redis.RedisError as e:
            warn(f"[mapping] get failed for {key}: {e}")
            return None
        return Mapping.from_json(raw) if raw else None

    def set(self, location_id: str, key: str, mapping: Mapping) -> bool:
        if not key:
            return False
        try:
            self._client.set(self._key(location_id, key), mapping.to_json())
            return True
        except redis.RedisError as e:
            warn(f"[mapping] set failed for {key}: {e}")
            return False


def mapping_store_from_config() -> MappingStore:
    if not config.KV_URL:
        return NullMappingStore()
    try:
        store = RedisMappingStore(config.KV_URL, config.KV_PREFIX)
    except (redis.RedisError, ValueError) as e:
        warn(f"[mapping] could not configure store: {e}")
        return NullMappingStore()
    info("[mapping] durable mapping store configured")
    return store
