"""LLM integration module for constitutional law answers."""

from constitution_chat.llm.gemini_client import GeminiClient, gemini_available

__all__ = [
    # Gemini client
    "GeminiClient",
    "gemini_available",
]
