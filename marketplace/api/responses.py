"""
Response envelopes shared by every route.
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """``{"success": true, "message": ..., "data": ...}``"""
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "message": message, "data": jsonable_encoder(data)},
    )


def error_response(
    status_code: int,
    message: str,
    code: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """``{"success": false, "message": ..., "code": ...}``"""
    content: dict[str, Any] = {"success": False, "message": message, "code": code}
    if details:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)
