"""
API Middleware - localhost enforcement and JSON error formatting.

Error responses share one shape:
{
    "error": {"code": "ERROR_CODE", "message": "Human-readable message"},
    "status": 400
}
"""

from typing import Callable

from aiohttp import web

from lens_translator.core.logging_utils import get_module_logger


logger = get_module_logger("APIMiddleware")

LOCALHOST_IPS = frozenset({"127.0.0.1", "::1", "::ffff:127.0.0.1"})


def create_error_response(code: str, message: str, status: int = 400) -> web.Response:
    """Create standardized error response."""
    return web.json_response(
        {"error": {"code": code, "message": message}, "status": status},
        status=status,
    )


@web.middleware
async def localhost_only_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Reject requests from any peer other than the local host."""
    peername = request.transport.get_extra_info("peername") if request.transport else None
    if peername:
        remote_ip = peername[0]
        if remote_ip not in LOCALHOST_IPS:
            logger.warning("Rejected request from non-localhost IP: %s", remote_ip)
            return create_error_response(
                "ACCESS_DENIED",
                "API access is restricted to localhost only",
                status=403,
            )

    return await handler(request)


@web.middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Catch and format all errors as JSON responses."""
    try:
        return await handler(request)
    except web.HTTPException as e:
        # aiohttp HTTP exceptions (404, 405, ...)
        return create_error_response(
            e.reason.upper().replace(" ", "_") if e.reason else "HTTP_ERROR",
            e.text or str(e),
            status=e.status,
        )
    except ValueError as e:
        logger.warning("Validation error: %s", e)
        return create_error_response("VALIDATION_ERROR", str(e), status=400)
    except Exception as e:
        logger.exception("Unexpected error handling %s %s: %s", request.method, request.path, e)
        return create_error_response(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            status=500,
        )
