"""HTTP service exposing the converter as a JSON API.

Routes:
    POST /api/parse   {"url": "..."} -> {"title": "...", "content": "..."}
    GET  /healthz     {"status": "ok"}

Failures answer with {"error": "..."} and the status carried by the error.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

from aiohttp import web

from .core.converter import ArticleConverter
from .exceptions import ConversionError, InputError, Link2mdError
from .models.config import Link2mdConfig

logger = logging.getLogger(__name__)

CONVERTER_KEY = web.AppKey("converter", ArticleConverter)

# Article text is mostly non-ASCII; keep it readable on the wire
_dumps = functools.partial(json.dumps, ensure_ascii=False)


def _error_response(error: Link2mdError) -> web.Response:
    status = error.status_code or 500
    return web.json_response(error.to_dict(), status=status, dumps=_dumps)


def _read_url(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise InputError("Request body must be a JSON object")
    url = payload.get("url")
    if url is None or (isinstance(url, str) and not url.strip()):
        raise InputError("URL is required")
    if not isinstance(url, str):
        raise InputError("URL must be a string")
    return url.strip()


async def handle_parse(request: web.Request) -> web.Response:
    """Convert the URL in the request body."""
    try:
        payload = await request.json()
    except ValueError:
        return _error_response(InputError("Invalid JSON body"))

    try:
        url = _read_url(payload)
        result = await request.app[CONVERTER_KEY].convert(url)
    except Link2mdError as e:
        logger.warning(f"POST /api/parse failed ({e.status_code}): {e.message}")
        return _error_response(e)
    except Exception:
        logger.exception("Unexpected error while handling /api/parse")
        return _error_response(ConversionError("Internal server error"))

    return web.json_response(result.to_dict(), dumps=_dumps)


async def handle_health(request: web.Request) -> web.Response:
    """Liveness probe."""
    return web.json_response({"status": "ok"})


def create_app(
    config: Optional[Link2mdConfig] = None,
    converter: Optional[ArticleConverter] = None,
) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        config: Configuration used to build a converter when none is given
        converter: Converter to serve (its lifecycle stays with the caller)

    Returns:
        Configured web.Application
    """
    app = web.Application()

    if converter is None:
        converter = ArticleConverter(config or Link2mdConfig())

        async def converter_session(app: web.Application) -> AsyncIterator[None]:
            async with app[CONVERTER_KEY]:
                yield

        app.cleanup_ctx.append(converter_session)

    app[CONVERTER_KEY] = converter
    app.router.add_post("/api/parse", handle_parse)
    app.router.add_get("/healthz", handle_health)
    return app


def run_server(config: Optional[Link2mdConfig] = None) -> None:
    """
    Serve the API until interrupted.

    Client disconnects cancel the in-flight conversion.

    Args:
        config: Configuration (host and port come from config.server)
    """
    config = config or Link2mdConfig()
    logger.info(f"Serving on http://{config.server.host}:{config.server.port}")
    web.run_app(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        handler_cancellation=True,
        print=None,
    )
