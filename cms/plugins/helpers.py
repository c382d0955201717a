"""Small helpers shared by plugin API handlers and page components."""

from __future__ import annotations

import json
from typing import Any

from starlette.requests import Request

from cms.exceptions import ResourceNotFoundError, ValidationError


async def read_json(request: Request) -> Any:
    """Parse the request body as JSON, raising ValidationError on bad input."""
    body = await request.body()
    if not body:
        raise ValidationError("Request body is required")
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON", details={"reason": str(exc)}) from exc


def int_param(params: dict[str, str], name: str, resource_type: str) -> int:
    """Read a numeric path parameter; non-numeric ids are reported as not found."""
    value = params.get(name, "")
    try:
        return int(value)
    except ValueError:
        raise ResourceNotFoundError(resource_type, value) from None


def query_flag(request: Request, name: str) -> bool:
    return request.query_params.get(name, "").lower() in ("1", "true", "yes")
