import httpx
from google import genai
from google.genai import errors, types

from .base import EnhancementError, LLMProvider


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.client = genai.Client(api_key=api_key)
        self.model_name = model

    async def complete(self, system: str, prompt: str) -> str:
        """Send the prompt to Gemini with the system message as instruction."""
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=0.1,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            raise EnhancementError(f"Gemini request failed: {e}") from e
        except httpx.HTTPError as e:
            # Transport failures and timeouts surface as raw httpx errors.
            raise EnhancementError(f"Gemini request failed: {e}") from e

        if not response.text:
            raise EnhancementError("Gemini returned an empty response")
        return response.text
