"""
KensenichManager - LLM.

Chat completions against OpenAI or any OpenAI-compatible endpoint.
"""

from kensenich.llm.client import LLMUnavailableError, complete_chat, get_client

__all__ = [
    "LLMUnavailableError",
    "complete_chat",
    "get_client",
]
