"""Unit tests for the catalog API client."""

import json

import pytest
import requests

from catalog_sync.clients.ghl import GHLClient, as_list, extract_id
from catalog_sync.errors import DownstreamRequestError


class FakeResponse:
    def __init__(self, status: int = 200, body=None, text=None, url: str = ""):
        self.status_code = status
        self.ok = 200 <= status < 300
        self.text = text if text is not None else ("" if body is None else json.dumps(body))
        self.url = url

    def json(self):
        return json.loads(self.text)


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def make_client(*responses) -> tuple[GHLClient, FakeSession]:
    session = FakeSession(*responses)
    return GHLClient("tok_123", "loc_1", base="https://api.test", version="2021-07-28", session=session), session


def test_every_call_carries_tenant_params_and_headers() -> None:
    client, session = make_client(FakeResponse(200, {"collections": []}))
    client.list_collections()

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/products/collections"
    assert call["params"] == {"altId": "loc_1", "altType": "location", "locationId": "loc_1"}
    assert call["headers"]["Authorization"] == "Bearer tok_123"
    assert call["headers"]["Version"] == "2021-07-28"


def test_search_keeps_term_alongside_tenant_params() -> None:
    client, session = make_client(FakeResponse(200, {"products": [{"_id": "p1", "name": "[DBE:w-1] W"}]}))
    found = client.search_products("[DBE:w-1]")

    assert found == [{"_id": "p1", "name": "[DBE:w-1] W"}]
    assert session.calls[0]["params"]["search"] == "[DBE:w-1]"
    assert session.calls[0]["params"]["altType"] == "location"


@pytest.mark.parametrize("body", [
    {"collections": [{"id": "c1"}]},
    {"items": [{"id": "c1"}]},
    {"data": [{"id": "c1"}]},
    [{"id": "c1"}],
])
def test_envelopes_are_normalized(body) -> None:
    client, _ = make_client(FakeResponse(200, body))
    assert client.list_collections() == [{"id": "c1"}]


def test_empty_body_normalizes_to_empty_list() -> None:
    client, _ = make_client(FakeResponse(200, text=""))
    assert client.list_prices("p1") == []


def test_non_2xx_raises_with_status_body_and_url() -> None:
    client, _ = make_client(FakeResponse(422, {"message": ["name must be a string"]},
                                         url="https://api.test/products/?altId=loc_1"))
    with pytest.raises(DownstreamRequestError) as exc:
        client.create_product({"name": 1})

    err = exc.value
    assert err.status == 422
    assert err.data == {"message": ["name must be a string"]}
    assert err.url == "https://api.test/products/?altId=loc_1"


def test_non_json_error_body_is_kept_as_text() -> None:
    client, _ = make_client(FakeResponse(502, text="Bad Gateway"))
    with pytest.raises(DownstreamRequestError) as exc:
        client.get_product("p1")
    assert exc.value.data == "Bad Gateway"
    assert "locationId=loc_1" in exc.value.url


def test_transport_failure_becomes_downstream_error() -> None:
    client, _ = make_client(requests.ConnectionError("refused"))
    with pytest.raises(DownstreamRequestError) as exc:
        client.list_collections()
    assert exc.value.status == 502
    assert "altId=loc_1" in exc.value.url


def test_get_product_unwraps_product_envelope() -> None:
    client, _ = make_client(FakeResponse(200, {"product": {"_id": "p1", "name": "W"}}))
    assert client.get_product("p1") == {"_id": "p1", "name": "W"}


def test_price_paths_are_scoped_under_product() -> None:
    client, session = make_client(FakeResponse(200, {}), FakeResponse(200, {}), FakeResponse(200, text=""))
    client.create_price("p1", {"amount": 1})
    client.update_price("p1", "pr1", {"amount": 2})
    client.delete_price("p1", "pr1")

    assert [(c["method"], c["url"]) for c in session.calls] == [
        ("POST", "https://api.test/products/p1/price"),
        ("PUT", "https://api.test/products/p1/price/pr1"),
        ("DELETE", "https://api.test/products/p1/price/pr1"),
    ]


def test_as_list_rejects_unknown_shapes() -> None:
    assert as_list(None) == []
    assert as_list("oops") == []
    assert as_list({"total": 0}) == []


def test_extract_id_walks_key_paths_in_order() -> None:
    assert extract_id({"product": {"_id": "a"}, "id": "b"}) == "a"
    assert extract_id({"data": {"id": "c"}}) == "c"
    assert extract_id({"_id": 42}) == "42"
    assert extract_id({"message": "ok"}) is None
    assert extract_id(None) is None
