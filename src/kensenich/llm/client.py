"""
KensenichManager - LLM Client.

Wraps the OpenAI chat completions API. All LLM calls go through here.

Any OpenAI-compatible server works: set LLM_BASE_URL to point at
Ollama (http://localhost:11434/v1), LM Studio or a proxy. Local
servers usually ignore the API key, so a placeholder is sent when none
is configured.
"""

import logging
from typing import Any

import openai
from openai import OpenAI

from kensenich.config import settings
from kensenich.errors import APIError

logger = logging.getLogger(__name__)

# Singleton client instance
_client: OpenAI | None = None

LOCAL_API_KEY_PLACEHOLDER = "not-needed"


class LLMUnavailableError(APIError):
    """The model provider could not be reached or rejected the request."""

    status_code = 502


def get_client() -> OpenAI:
    """
    Get the OpenAI client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        api_key = settings.openai_api_key
        if not api_key and settings.llm_base_url:
            api_key = LOCAL_API_KEY_PLACEHOLDER
        if not api_key:
            raise LLMUnavailableError("AI provider unavailable", details="OPENAI_API_KEY is not set")

        _client = OpenAI(api_key=api_key, base_url=settings.llm_base_url)
        logger.info(f"LLM client ready (model={settings.llm_model}, base_url={settings.llm_base_url or 'default'})")

    return _client


async def complete_chat(*, system_prompt: str, messages: list[dict[str, Any]]) -> str:
    """
    Run one chat completion and return the assistant text.

    Args:
        system_prompt: System message (persona, context, tool listing)
        messages: Conversation so far as {"role", "content"} dicts

    Raises:
        LLMUnavailableError: if the provider call fails
    """
    client = get_client()

    api_messages = [{"role": "system", "content": system_prompt}]
    api_messages.extend({"role": m["role"], "content": m["content"]} for m in messages)

    try:
        response = client.chat.completions.create(
            model=settings.llm_model,
            messages=api_messages,
            temperature=settings.llm_temperature,
        )
    except openai.OpenAIError as e:
        logger.error(f"LLM call failed: {e}")
        raise LLMUnavailableError("AI provider unavailable") from e

    content = response.choices[0].message.content or ""
    logger.debug(f"LLM response ({len(content)} chars)")
    return content
