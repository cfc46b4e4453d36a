from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from ..config.loader import ConfigError, GrouperConfig, resolve_config
from ..excel.reader import decode_spreadsheet
from ..services.processor import Decoder, process_workbook, to_json
from ..upload.multipart import ExtractionFailure, UploadMissing, decode_body, extract_file, get_header, parse_boundary

"""Serverless-style upload endpoint.

Event in (``httpMethod``, ``headers``, ``body``, ``isBase64Encoded``),
response mapping out (``statusCode``, ``headers``, ``body``).

Status contract:
    OPTIONS -> 200 (empty body, CORS preflight)
    non-POST -> 405 (method names are matched exactly, "post" is rejected)
    no boundary / no body -> 400 "No file uploaded"
    no file part -> 400 "Could not extract file data"
    anything else -> 500 "Error processing Excel file: <cause>"
"""

__all__ = [
    "cors_headers",
    "handle",
]

logger = logging.getLogger(__name__)


def cors_headers(config: GrouperConfig) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": config.allow_origin,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


def _response(status: int, headers: dict[str, str], body: str = "") -> dict[str, Any]:
    return {"statusCode": status, "headers": headers, "body": body}


def _error(status: int, headers: dict[str, str], message: str) -> dict[str, Any]:
    return _response(status, headers, json.dumps({"error": message}, ensure_ascii=False))


def handle(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    config: GrouperConfig | None = None,
    decoder: Decoder = decode_spreadsheet,
) -> dict[str, Any]:
    """Handle one upload request; every call builds its own aggregation state."""
    try:
        cfg = config if config is not None else resolve_config()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return _error(500, cors_headers(GrouperConfig()), f"Error processing Excel file: {e}")
    headers = cors_headers(cfg)

    method = event.get("httpMethod")
    if method == "OPTIONS":
        return _response(200, headers)
    if method != "POST":
        return _error(405, headers, "Method not allowed")

    try:
        boundary = parse_boundary(get_header(event.get("headers"), "content-type"))
        body = event.get("body")
        if not boundary or not body:
            raise UploadMissing("No file uploaded")
        data = decode_body(body, is_base64=event.get("isBase64Encoded", True) is not False)
        file_bytes = extract_file(data, boundary)
        result = process_workbook(file_bytes, cfg, decoder=decoder)
        payload = to_json(result)
    except UploadMissing as e:
        logger.warning(f"upload rejected: {e}")
        return _error(400, headers, "No file uploaded")
    except ExtractionFailure as e:
        logger.warning(f"upload rejected: {e}")
        return _error(400, headers, "Could not extract file data")
    except Exception as e:
        logger.error(f"Error processing Excel: {e}", exc_info=True)
        return _error(500, headers, f"Error processing Excel file: {e}")
    return _response(200, headers, payload)
