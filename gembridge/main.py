"""Main FastAPI application for gembridge."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import chat_completions, embeddings, list_models
from .config_loader import BridgeSettings, load_config, load_settings
from .core.constants import SAFETY_SETTINGS
from .core.registry import set_services
from .core.upstream import GeminiClient
from .logging import setup_logging
from .middleware import register_error_handlers
from .translation import MediaResolver, RequestTranslator

logger = logging.getLogger("gembridge")

# OpenAI-style base paths; /v1beta/openai is the base path Gemini's own
# OpenAI compatibility layer uses.
ROUTE_PREFIXES = ("/v1", "/v1beta/openai")


def create_app(
    settings: Optional[BridgeSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Runtime settings; loaded from the config file when omitted.
        transport: Optional httpx transport used for every outbound call
            (Gemini and image fetches). Tests pass an httpx.MockTransport.

    Returns:
        The configured FastAPI application instance.
    """
    if settings is None:
        settings = load_settings(load_config())
    setup_logging(settings.log_level)

    client = GeminiClient(settings, transport=transport)
    translator = RequestTranslator(
        safety_settings=SAFETY_SETTINGS,
        media_resolver=MediaResolver(timeout=settings.timeout_seconds, transport=transport),
    )
    set_services(client, translator)
    logger.info(f"Upstream API base: {settings.api_base} (default model {settings.default_model})")

    app = FastAPI(title="gembridge")
    register_error_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for prefix in ROUTE_PREFIXES:
        app.post(f"{prefix}/chat/completions")(chat_completions)
        app.post(f"{prefix}/embeddings")(embeddings)
        app.get(f"{prefix}/models")(list_models)
    logger.info("FastAPI application created")
    return app


def main() -> None:
    """Run the bridge with uvicorn using the configured bind address."""
    import uvicorn

    settings = load_settings(load_config())
    app = create_app(settings)
    logger.info("gembridge starting on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
