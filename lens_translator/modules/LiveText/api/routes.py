"""
LiveText API routes.

Read-only views of the session plus the language selectors.
"""

from aiohttp import web

from ..errors import UnknownLanguageError
from ..languages import LanguageSlot
from .middleware import create_error_response


def setup_live_text_routes(app: web.Application) -> None:
    """Register LiveText routes."""
    app.router.add_get("/api/v1/health", health_handler)
    app.router.add_get("/api/v1/state", get_state_handler)
    app.router.add_get("/api/v1/overlay", get_overlay_handler)

    # Language selectors
    app.router.add_get("/api/v1/languages", get_languages_handler)
    app.router.add_put("/api/v1/languages/{slot}", set_language_handler)


async def health_handler(request: web.Request) -> web.Response:
    """GET /api/v1/health - Liveness check."""
    controller = request.app["controller"]
    return web.json_response({
        "status": "ok",
        "camera_ready": controller.state.camera_ready,
    })


async def get_state_handler(request: web.Request) -> web.Response:
    """GET /api/v1/state - Session state and loop metrics."""
    controller = request.app["controller"]
    return web.json_response(controller.describe())


async def get_overlay_handler(request: web.Request) -> web.Response:
    """GET /api/v1/overlay - Current overlay text."""
    controller = request.app["controller"]
    return web.json_response({"text": controller.state.overlay_text})


async def get_languages_handler(request: web.Request) -> web.Response:
    """GET /api/v1/languages - Catalog and the current selection."""
    controller = request.app["controller"]
    state = controller.state
    return web.json_response({
        "languages": [
            {"name": language.display_name, "code": language.code}
            for language in controller.catalog
        ],
        "source": state.source_language,
        "target": state.target_language,
    })


async def set_language_handler(request: web.Request) -> web.Response:
    """PUT /api/v1/languages/{slot} - Select the source or target language."""
    controller = request.app["controller"]

    try:
        slot = LanguageSlot.parse(request.match_info["slot"])
    except ValueError as e:
        return create_error_response("INVALID_SLOT", str(e))

    try:
        body = await request.json()
    except Exception:
        return create_error_response(
            "INVALID_BODY",
            "Request body must be valid JSON",
        )

    code = body.get("code") if isinstance(body, dict) else None
    if not isinstance(code, str) or not code:
        return create_error_response(
            "MISSING_FIELD",
            "Field 'code' is required",
        )

    try:
        task = controller.change_language(slot, code)
    except UnknownLanguageError as e:
        return create_error_response("UNKNOWN_LANGUAGE", str(e))

    return web.json_response({
        "success": True,
        "slot": slot.value,
        "code": code,
        "retranslating": task is not None,
    })
