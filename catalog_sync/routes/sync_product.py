# catalog_sync/routes/sync_product.py
from flask import Blueprint, current_app, jsonify, request

from .. import config
from ..clients.ghl import GHLClient
from ..errors import ClientInputError, ConfigurationError, SyncError
from ..services.mapping_store import NullMappingStore
from ..services.reconciler import MODE_CREATE, Reconciler
from ..services.request import SyncRequest
from ..utils.logger import error, info
from ..utils.security import resolve_token, token_prefix

ROUTE = "/api/ghl/sync-product"

bp = Blueprint("sync_product", __name__)


@bp.after_request
def cors(resp):
    resp.headers["Access-Control-Allow-Origin"] = "*"
    resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    return resp


def _store():
    return current_app.extensions.get("mapping_store") or NullMappingStore()


def _reply(body: dict, status: int, debug: dict):
    return jsonify({**body, "build": config.BUILD_MARKER, "debug": debug}), status


@bp.route("", methods=["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"], strict_slashes=False)
def sync_product():
    if request.method == "OPTIONS":
        return "", 204

    if request.method == "GET":
        return jsonify({
            "ok": True,
            "route": ROUTE,
            "build": config.BUILD_MARKER,
            "message": "DB Engine API live (v7 query includes locationId).",
            "mappingStore": _store().probe(),
        }), 200

    if request.method != "POST":
        return jsonify({"ok": False, "error": "Method not allowed"}), 405

    body = request.get_json(silent=True)
    if body is None:
        body = request.get_data(as_text=True)

    token = resolve_token()
    debug = {"tokenPrefix": token_prefix(token), "locationId": None, "productType": None}

    client = None
    try:
        if not token:
            raise ConfigurationError("Missing GHL token")
        req = SyncRequest.from_body(body)
        location_id = req.location_id or (config.GHL_LOCATION_ID or "").strip()
        if not location_id:
            raise ClientInputError("Missing locationId")
        debug.update(locationId=location_id, productType=req.product_type)

        info(f"[sync] '{req.name}' -> '{req.collection_name}' location={location_id} upsert={req.upsert}")
        client = GHLClient(token, location_id)
        result = Reconciler(client, _store()).run(req)
        return _reply(result, 201 if result["mode"] == MODE_CREATE else 200, debug)

    except SyncError as e:
        payload = e.to_payload()
        debug["ghlUrl"] = payload.pop("ghlUrl", None)
        error(f"[sync] {e.status} {e.message}")
        return _reply(payload, e.status, debug)
    except Exception as e:
        error(f"[sync] unexpected {type(e).__name__}: {e}")
        return _reply({"ok": False, "error": str(e) or type(e).__name__}, 500, debug)
    finally:
        if client is not None:
            client.close()
