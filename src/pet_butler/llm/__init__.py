"""Pet Butler - LLM access."""

from pet_butler.llm.client import call_llm_chat, create_llm_client

__all__ = ["call_llm_chat", "create_llm_client"]
