import logging
import traceback

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import InternalServerError

logger = logging.getLogger("tokenup")


def _log_error(request: Request, status_code: int, error_code: str, message) -> None:
    client = request.client.host if request.client else "-"
    line = f"[{error_code}] {request.method} {request.url.path} from {client} -> {status_code}: {message}"
    if status_code >= 500:
        logger.error(line)
    else:
        logger.warning(line)


def _error_body(error_code: str, message: str, details=None) -> dict:
    return {
        "success": False,
        "error": {"code": error_code, "message": message, "details": details or {}},
    }


async def handle_base_api_exception(request, exc):
    _log_error(request, exc.status_code, exc.error_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    if isinstance(exc.detail, dict) and "error" in exc.detail:  # type: ignore[truthy-bool]
        content = exc.detail  # type: ignore[assignment]
    else:
        content = _error_body("HTTP_ERROR", str(exc.detail))
    _log_error(request, exc.status_code, content["error"]["code"], content["error"]["message"])
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request, exc):
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    _log_error(request, 422, "VALIDATION_001", errors)
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_001", "Validation failed", {"errors": errors}),
    )


async def handle_unexpected_error(request, exc):
    internal = InternalServerError()
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    _log_error(
        request,
        internal.status_code,
        internal.error_code,
        f"{type(exc).__name__}: {exc}\n{tb_str}",
    )
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
