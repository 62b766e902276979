"""
Pet Butler Web - FastAPI application.

Routes:
- GET  /                          liveness text
- GET  /health                    health check for the host platform
- POST /api/chat                  local testing without Telegram
- POST /telegram/webhook/{secret} Telegram webhook delivery

Services are built in the lifespan handler (or passed in by tests) and
kept on app.state.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from pet_butler import __version__
from pet_butler.config import configure_logging, get_settings
from pet_butler.services import Services, build_services
from pet_butler.telegram import (
    create_bot,
    create_telegram_dispatcher,
    feed_webhook_update,
    set_webhook,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class ChatRequest(BaseModel):
    identifier: str = Field(min_length=1)
    message: str = ""


class ChatResponse(BaseModel):
    reply: str


# =============================================================================
# App factory
# =============================================================================


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the web app.

    Args:
        services: Pre-built services (tests). Built from settings at
            startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is None:
            settings = get_settings()
            configure_logging(settings.log_level)
            app.state.services = build_services(settings)
        else:
            app.state.services = services

        settings = app.state.services.settings
        app.state.bot = None
        app.state.telegram = None
        if settings.telegram_bot_token:
            app.state.bot = create_bot(settings)
            app.state.telegram = create_telegram_dispatcher(app.state.services.dispatcher)
            if settings.use_webhook:
                await set_webhook(app.state.bot, settings)

        logger.info(f"Pet Butler {__version__} starting up ({settings.pet_butler_env})")
        yield

        if app.state.bot is not None:
            await app.state.bot.session.close()

    app = FastAPI(title="Pet Butler", version=__version__, lifespan=lifespan)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Pet Butler AI is running!"

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(req: ChatRequest, request: Request) -> ChatResponse:
        """Send one message as if it came from a chat."""
        dispatcher = request.app.state.services.dispatcher
        reply = await dispatcher.route(req.identifier, req.message)
        return ChatResponse(reply=reply)

    @app.post("/telegram/webhook/{secret}")
    async def telegram_webhook(secret: str, request: Request):
        """Receive one Telegram update."""
        settings = request.app.state.services.settings
        if secret != settings.webhook_secret:
            raise HTTPException(status_code=404, detail="Not found")
        if request.app.state.bot is None:
            raise HTTPException(status_code=503, detail="Telegram bot is not configured")

        payload = await request.json()
        await feed_webhook_update(request.app.state.telegram, request.app.state.bot, payload)
        return {"ok": True}

    return app


app = create_app()
