from abc import ABC, abstractmethod


class EnhancementError(RuntimeError):
    """Raised when the remote model cannot produce enhanced code."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def complete(self, system: str, prompt: str) -> str:
        """Send a system message and a user prompt, return the reply text."""
        pass
