"""Map domain exceptions onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mdwrangler.content.filenames import InvalidFilename
from mdwrangler.security.csrf import InvalidCsrfToken
from mdwrangler.security.paths import PathEscapedError, SandboxError

logger = logging.getLogger(__name__)


def _detail(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse({"detail": detail}, status_code=status_code)


async def sandbox_error_handler(request: Request, exc: SandboxError) -> JSONResponse:
    if isinstance(exc, PathEscapedError):
        # never echo the path or say where it pointed
        return _detail(401, "Unauthorized access")
    return _detail(400, str(exc))


async def csrf_error_handler(request: Request, exc: InvalidCsrfToken) -> JSONResponse:
    return _detail(403, "Invalid CSRF Token")


async def filename_error_handler(request: Request, exc: InvalidFilename) -> JSONResponse:
    return _detail(400, str(exc))


async def decode_error_handler(request: Request, exc: UnicodeDecodeError) -> JSONResponse:
    return _detail(400, "File is not valid UTF-8 text")


async def os_error_handler(request: Request, exc: OSError) -> JSONResponse:
    logger.exception(f"I/O error handling {request.url.path}")
    return _detail(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SandboxError, sandbox_error_handler)
    app.add_exception_handler(InvalidCsrfToken, csrf_error_handler)
    app.add_exception_handler(InvalidFilename, filename_error_handler)
    app.add_exception_handler(UnicodeDecodeError, decode_error_handler)
    app.add_exception_handler(OSError, os_error_handler)
