"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from app.core.exceptions import DomainError
from app.schemas.common import StandardResponse, ErrorResponse

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Wrap data in the success envelope"""
    response = StandardResponse(message=message, data=data)
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Wrap a failure in the error envelope"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def domain_error_response(exc: DomainError) -> JSONResponse:
    return error_response(message=exc.message, error_code=exc.code.value, status_code=exc.status_code)

def validation_error_response(errors: list) -> JSONResponse:
    return error_response(
        message="Invalid request",
        error_code="VALIDATION_ERROR",
        details=jsonable_encoder(errors),
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
    )

def csv_download(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

def png_inline(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename={filename}"}
    )

# Route guards: raised HTTPExceptions are rendered into the error envelope by main.py

def not_found_error(resource: str = "Resource"):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")

def unauthorized_error(message: str = "Unauthorized"):
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)

def forbidden_error(message: str = "Forbidden"):
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)

def rate_limit_error():
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many attempts. Please wait a minute and try again."
    )
