# catalog_sync/errors.py
from typing import Optional


class SyncError(Exception):
    status = 500

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.stage: Optional[str] = None
        self.product_id: Optional[str] = None
        if status is not None:
            self.status = status

    def details(self) -> dict:
        return {}

    def to_payload(self) -> dict:
        body = {"ok": False, "error": self.message, **self.details()}
        if self.stage:
            body["stage"] = self.stage
        if self.product_id:
            body["productId"] = self.product_id
        return body


class ClientInputError(SyncError):
    status = 400


class ConfigurationError(SyncError):
    status = 500


class CollectionNotFoundError(SyncError):
    status = 404

    def __init__(self, collection_name: str, collections_seen: list[dict]):
        super().__init__(f"Collection not found: {collection_name}")
        self.collection_name = collection_name
        self.collections_seen = collections_seen

    def details(self) -> dict:
        return {"collectionsSeen": self.collections_seen}


class DownstreamRequestError(SyncError):
    """Non-2xx (or unreachable) response from the catalog API."""

    def __init__(self, status: int, data=None, url: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"GHL {status}", status=status)
        self.data = data
        self.url = url

    def details(self) -> dict:
        return {"status": self.status, "details": self.data, "ghlUrl": self.url}

    def summary(self) -> dict:
        return {"error": self.message, "status": self.status, "details": self.data, "url": self.url}


class InvariantViolationError(SyncError):
    status = 500

    def __init__(self, message: str, payload=None):
        super().__init__(message)
        self.payload = payload

    def details(self) -> dict:
        return {"details": self.payload}
