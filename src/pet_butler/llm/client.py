"""
Pet Butler - LLM Client.

Wraps the OpenAI SDK pointed at OpenRouter's OpenAI-compatible API.
All assistant completions go through here.
"""

import logging
import time

from openai import AsyncOpenAI

from pet_butler.config import Settings

logger = logging.getLogger(__name__)


def create_llm_client(settings: Settings) -> AsyncOpenAI:
    """Create the chat-completions client. Requests time out per settings."""
    return AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        timeout=settings.llm_timeout_seconds,
    )


async def call_llm_chat(
    client: AsyncOpenAI,
    *,
    model: str,
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = 1500,
) -> str | None:
    """
    Make a single chat completion call.

    Args:
        client: Client from create_llm_client()
        model: OpenRouter model name (e.g. "x-ai/grok-3-mini")
        system_prompt: System message setting context
        user_prompt: The user's chat message
        max_tokens: Completion length cap

    Returns:
        Text of the first choice, or None if the response had no content.
        API errors propagate to the caller.
    """
    started = time.perf_counter()
    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        max_tokens=max_tokens,
    )
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"LLM call to {model} took {elapsed_ms:.0f}ms")

    if not response.choices:
        return None
    return response.choices[0].message.content or None
