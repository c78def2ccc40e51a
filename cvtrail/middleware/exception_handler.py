"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import CvTrailException

logger = logging.getLogger(__name__)


async def cvtrail_exception_handler(request: Request, exc: CvTrailException) -> JSONResponse:
    """
    Convert a CvTrailException into its JSON error body.

    Client errors (4xx) are logged as warnings; upstream and store failures
    (5xx) as errors.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.error_code.value}: {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
