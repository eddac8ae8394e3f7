"""
Response helpers shared by the route modules.

Every JSON body produced here carries the CORS headers, including error
bodies built by exception handlers that run outside the middleware stack.
"""
import json
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.application.dtos import FunctionInvocation
from core.domain.clock import utc_now
from core.settings import AppSettings


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


def json_response(content: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=dict(CORS_HEADERS))


def error_response(status_code: int, message: str) -> JSONResponse:
    """Client error shape: ``{"error": message}``."""
    return json_response({"error": message}, status_code=status_code)


def crash_response(exc: BaseException, status_code: int = 500) -> JSONResponse:
    """Server error shape: ``{"error": "Function crashed", "details": ...}``."""
    return json_response(
        {"error": "Function crashed", "details": str(exc)},
        status_code=status_code,
    )


def health_payload(settings: AppSettings, message: str) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "timestamp": utc_now().isoformat(),
        "version": settings.service.version,
    }


async def read_invocation(request: Request) -> FunctionInvocation:
    """
    Parse the optional JSON body accepted by the batch endpoints.

    An empty body means a normal run. Anything that is not a JSON object
    is rejected with a validation error (mapped to HTTP 400).
    """
    raw = await request.body()
    if not raw.strip():
        return FunctionInvocation()

    try:
        payload = json.loads(raw)
    except ValueError:
        raise RequestValidationError(
            [{"loc": ("body",), "msg": "Invalid JSON body", "type": "json_invalid"}]
        )

    if not isinstance(payload, dict):
        raise RequestValidationError(
            [{"loc": ("body",), "msg": "Body must be a JSON object", "type": "dict_type"}]
        )
    try:
        return FunctionInvocation.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
