"""
Remote sync client for a generic JSON-blob store (JSONBin-compatible).

Reads accept the store's ``{"record": ...}`` wrapper and both the compressed
and the legacy uncompressed payload. Writes always send the compressed form.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from legal_secretary.config import log_event, SYNC_TIMEOUT
from legal_secretary.errors import DecompressionError, SyncError
from legal_secretary.models import CloudConfig, CloudData
from legal_secretary.services.codec import compress, decompress

DECOMPRESSION_FAILED_MESSAGE = "Dữ liệu đám mây bị lỗi hoặc không tương thích (Lỗi giải nén)."


# --- HEADERS ---

def attach_credential(headers: Dict[str, str], config: CloudConfig) -> Dict[str, str]:
    """
    Attach the API key under every header convention the supported stores use.
    Narrow this when the backend is known.
    """
    if config.api_key:
        headers["X-Access-Key"] = config.api_key
        headers["X-Master-Key"] = config.api_key
        headers["Authorization"] = f"Bearer {config.api_key}"
    return headers


def build_headers(config: CloudConfig) -> Dict[str, str]:
    return attach_credential({"Content-Type": "application/json"}, config)


# --- RESPONSE NORMALIZATION ---

def normalize_response(raw: Any) -> Any:
    """Unwrap and, when needed, decompress a fetched document."""
    payload = raw
    if isinstance(raw, dict) and raw.get("record"):
        payload = raw["record"]

    if isinstance(payload, dict) and payload.get("compressed") is True and isinstance(payload.get("data"), str):
        log_event(logging.INFO, "sync_compressed_payload_detected", chars=len(payload["data"]))
        try:
            return decompress(payload["data"])
        except DecompressionError as e:
            log_event(logging.ERROR, "sync_decompression_failed", error=str(e))
            raise SyncError(DECOMPRESSION_FAILED_MESSAGE) from e

    if isinstance(payload, dict) and isinstance(payload.get("templates"), list):
        # Legacy uncompressed format
        return payload

    return payload


# --- REQUESTS ---

def _request(method: str, config: CloudConfig, client: Optional[httpx.Client], **kwargs) -> httpx.Response:
    headers = build_headers(config)
    label = "Save Error" if method == "PUT" else "Sync Error"
    try:
        if client is not None:
            response = client.request(method, config.endpoint, headers=headers, **kwargs)
        else:
            with httpx.Client(timeout=SYNC_TIMEOUT) as own_client:
                response = own_client.request(method, config.endpoint, headers=headers, **kwargs)
    except httpx.HTTPError as e:
        log_event(logging.ERROR, "sync_transport_error", method=method, error=str(e))
        raise SyncError(f"{label}: {e}") from e

    if not response.is_success:
        log_event(logging.WARNING, "sync_http_error", method=method, status=response.status_code)
        raise SyncError(
            f"{label}: {response.status_code} {response.reason_phrase}",
            status=response.status_code,
            status_text=response.reason_phrase,
        )
    return response


def fetch_cloud_data(config: CloudConfig, client: Optional[httpx.Client] = None) -> Any:
    """GET the remote document and return the normalized payload."""
    response = _request("GET", config, client)
    try:
        body = response.json()
    except ValueError as e:
        raise SyncError(f"Sync Error: response is not JSON ({e})", status=response.status_code) from e

    data = normalize_response(body)
    log_event(
        logging.INFO,
        "sync_fetched",
        status=response.status_code,
        templates=len(data["templates"]) if isinstance(data, dict) and isinstance(data.get("templates"), list) else None,
    )
    return data


def save_cloud_data(config: CloudConfig, data: CloudData, client: Optional[httpx.Client] = None) -> None:
    """PUT the compressed document to the remote store."""
    payload = {
        "compressed": True,
        "data": compress(data.to_dict()),
        "updatedAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    response = _request("PUT", config, client, json=payload)
    log_event(
        logging.INFO,
        "sync_saved",
        status=response.status_code,
        version=data.version,
        templates=len(data.templates),
        chars=len(payload["data"]),
    )
