from .base import EnhancementError, LLMProvider
from .mock import MockLLMProvider
from .openrouter import OpenRouterProvider
from .gemini import GeminiProvider

__all__ = [
    "EnhancementError",
    "LLMProvider",
    "MockLLMProvider",
    "OpenRouterProvider",
    "GeminiProvider",
]
