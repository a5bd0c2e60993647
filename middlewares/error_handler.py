import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from schemas.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def add_error_handlers(app: FastAPI):
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        body = ErrorResponse(
            error=ErrorDetail(code="INTERNAL_ERROR", message=str(exc)),
            latency_ms=0,
        )
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
