"""
Pet Butler - Telegram transport.

Receives text messages through aiogram, hands (chat id, text) to the
Dispatcher, and sends the reply back. Two delivery modes:

- Long polling: `pet-butler poll` (local development)
- Webhook: POST /telegram/webhook/<secret> on the web app (production)
"""

import logging

from aiogram import Bot, F, Router
from aiogram import Dispatcher as TelegramDispatcher
from aiogram.types import Message, Update

from pet_butler.config import Settings
from pet_butler.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

TRANSPORT_ERROR_REPLY = (
    "I apologize, but I encountered an error trying to process your request. "
    "Could you please try again?"
)

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a reply into Telegram-sized chunks, preferring line breaks."""
    chunks = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining or not chunks:
        chunks.append(remaining)
    return chunks


def create_router(dispatcher: Dispatcher) -> Router:
    """Router with a single handler for every text message."""
    router = Router(name="pet_butler")

    @router.message(F.text)
    async def handle_text(message: Message) -> None:
        chat_id = str(message.chat.id)
        logger.info(f"Incoming Telegram message from chat {chat_id}")
        try:
            reply = await dispatcher.route(chat_id, message.text)
        except Exception:
            logger.exception(f"Error processing Telegram message from chat {chat_id}")
            reply = TRANSPORT_ERROR_REPLY

        for chunk in split_message(reply):
            await message.answer(chunk)

    return router


def create_bot(settings: Settings) -> Bot:
    return Bot(token=settings.telegram_bot_token)


def create_telegram_dispatcher(dispatcher: Dispatcher) -> TelegramDispatcher:
    """aiogram dispatcher wired to our message Dispatcher."""
    telegram_dispatcher = TelegramDispatcher()
    telegram_dispatcher.include_router(create_router(dispatcher))
    return telegram_dispatcher


def webhook_path(settings: Settings) -> str:
    return f"/telegram/webhook/{settings.webhook_secret}"


async def set_webhook(bot: Bot, settings: Settings) -> None:
    """Point Telegram at this deployment's webhook route."""
    url = settings.webhook_url.rstrip("/") + webhook_path(settings)
    try:
        await bot.set_webhook(url)
        logger.info(f"Telegram webhook set to: {url}")
    except Exception as e:
        logger.error(f"Error setting Telegram webhook: {e}")


async def feed_webhook_update(
    telegram_dispatcher: TelegramDispatcher,
    bot: Bot,
    payload: dict,
) -> None:
    """Process one update delivered to the webhook route."""
    update = Update.model_validate(payload, context={"bot": bot})
    await telegram_dispatcher.feed_update(bot, update)


async def run_polling(dispatcher: Dispatcher, settings: Settings) -> None:
    """Receive updates by long polling until interrupted."""
    bot = create_bot(settings)
    telegram_dispatcher = create_telegram_dispatcher(dispatcher)
    # Polling and webhooks are mutually exclusive on Telegram's side
    await bot.delete_webhook()
    logger.info("Telegram bot started via long polling")
    try:
        await telegram_dispatcher.start_polling(bot)
    finally:
        await bot.session.close()
