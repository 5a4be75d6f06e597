# venue_booking/api/responses.py

from typing import Any

from fastapi.responses import JSONResponse


def ok(data: Any = None, message: str | None = None) -> dict:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def failure(
    status_code: int,
    message: str,
    error: str,
    data: Any = None,
    details: list[dict] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message, "error": error}
    if data is not None:
        body["data"] = data
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)
