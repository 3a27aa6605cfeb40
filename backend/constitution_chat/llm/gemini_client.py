"""Gemini client wrapper for constitutional law answers."""

import logging
import os
from typing import TYPE_CHECKING

from google import genai
from google.genai import types

if TYPE_CHECKING:
    from constitution_chat.llm.chat.models import ConversationTurn

logger = logging.getLogger(__name__)

# Model to use unless GEMINI_MODEL overrides it
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

# Generation settings sent with every request
TEMPERATURE = 0.7
TOP_P = 0.95
TOP_K = 40
MAX_OUTPUT_TOKENS = 1024

BLOCKED_HARM_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def get_api_key() -> str | None:
    """Read the Gemini credential from the environment."""
    return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


def gemini_available() -> bool:
    """Check if Gemini is available (API key is set)."""
    return bool(get_api_key())


def build_generation_config(system_instruction: str) -> types.GenerateContentConfig:
    """Build the fixed request configuration.

    Args:
        system_instruction: Preamble constraining the model's scope and tone.

    Returns:
        Config with sampling parameters and safety thresholds applied.
    """
    return types.GenerateContentConfig(
        system_instruction=system_instruction,
        temperature=TEMPERATURE,
        top_p=TOP_P,
        top_k=TOP_K,
        max_output_tokens=MAX_OUTPUT_TOKENS,
        safety_settings=[
            types.SafetySetting(
                category=category,
                threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            )
            for category in BLOCKED_HARM_CATEGORIES
        ],
    )


def turns_to_contents(turns: list["ConversationTurn"]) -> list[types.Content]:
    """Convert user/model turns to Gemini contents.

    System turns are skipped; they travel as the system instruction.
    """
    return [
        types.Content(role=turn.role, parts=[types.Part(text=turn.content)])
        for turn in turns
        if turn.role != "system"
    ]


class GeminiClient:
    """Wrapper around Google GenAI client for multi-turn chat replies."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        """Initialize the client.

        Args:
            api_key: Google API key. If not provided, uses GOOGLE_API_KEY
                (or GEMINI_API_KEY) env var.
            model: Model name. If not provided, uses GEMINI_MODEL env var.
        """
        self.api_key = api_key or get_api_key()
        if not self.api_key:
            raise ValueError(
                "Google API key required. Set GOOGLE_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model or os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)
        self._client = genai.Client(api_key=self.api_key)

    async def generate_reply(
        self,
        system_instruction: str,
        turns: list["ConversationTurn"],
    ) -> str:
        """Generate the next model turn for a conversation.

        Args:
            system_instruction: Fixed preamble for the session
            turns: Retained user/model turns, oldest first, ending with the
                user's latest message

        Returns:
            Text response

        Raises:
            google.genai.errors.APIError: If the provider rejects the request
        """
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=turns_to_contents(turns),
            config=build_generation_config(system_instruction),
        )

        return response.text or ""
