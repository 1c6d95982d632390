import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.core.errors import AppError

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "INVALID_OPERATION": 400,
    "CONFLICT": 409,
}

async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    logger.info("Rejected %s %s: %s %s", request.method, request.url.path, exc.error_code, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())

async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "VALIDATION_ERROR", "message": "Request validation failed", "details": exc.errors()},
    )

async def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An internal server error occurred."},
    )

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
