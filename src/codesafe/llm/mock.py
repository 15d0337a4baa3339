from .base import LLMProvider

# build_prompt places the code last, right after this line and an opening fence.
_CODE_MARKER = "Reply with the complete updated file in a single code block.\n```\n"


class MockLLMProvider(LLMProvider):
    """Mock LLM for development and testing."""

    async def complete(self, system: str, prompt: str) -> str:
        """Echo the prompt's code back unchanged, fenced."""
        _, found, code = prompt.partition(_CODE_MARKER)
        if not found:
            return ""
        code = code.removesuffix("\n```")
        return f"```\n{code}\n```"
