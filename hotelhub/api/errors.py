import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hotelhub.core.errors import HubError
from hotelhub.schemas.common import ErrorEnvelope


log = logging.getLogger(__name__)


def _envelope(status_code: int, message: str, *, code: str | None = None, details: dict | None = None,
              headers: dict | None = None) -> JSONResponse:
    body = ErrorEnvelope(message=message, code=code or None, details=details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HubError)
    async def _hub_error(request: Request, exc: HubError) -> JSONResponse:
        return _envelope(exc.status_code, exc.message, code=exc.code, details=exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        log.info("request validation failed on %s: %s", request.url.path, exc.errors())
        return _envelope(422, _first_validation_message(exc), code="validation_error")
