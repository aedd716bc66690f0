from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from starlette.responses import Response

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def preflight_response() -> Response:
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


async def read_json_body(request: Request) -> Any:
    """Decode the request body; raises ValueError on malformed JSON."""
    raw = await request.body()
    if not raw.strip():
        return {}
    return json.loads(raw)
