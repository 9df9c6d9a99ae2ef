import os

BUILD_MARKER = "DB_ENGINE_API_BUILD_2026-01-20_FINAL_v7_QP_LOCATIONID"

API_BASE = os.getenv("GHL_API_BASE", "https://services.leadconnectorhq.com")
API_VERSION = os.getenv("GHL_API_VERSION", "2021-07-28")
HTTP_TIMEOUT = float(os.getenv("GHL_HTTP_TIMEOUT", "30"))

GHL_TOKEN = os.getenv("GHL_TOKEN", "")
GHL_LOCATION_ID = os.getenv("GHL_LOCATION_ID", "")

# Optional durable id mapping (Redis / Vercel KV compatible URL)
KV_URL = os.getenv("KV_URL") or os.getenv("REDIS_URL")
KV_PREFIX = os.getenv("KV_PREFIX", "dbe:map")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
