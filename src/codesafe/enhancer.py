"""Code enhancement through a remote model.

The enhancer receives its configuration at construction. It never reads the
environment itself; see codesafe.config for the service-side loading.
"""

import logging
import re
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .llm import (
    EnhancementError,
    GeminiProvider,
    LLMProvider,
    MockLLMProvider,
    OpenRouterProvider,
)
from .models import Finding

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an AI assistant that enhances code."

DEFAULT_MODELS = {
    "openrouter": "nvidia/llama-3.1-nemotron-nano-8b-v1:free",
    "gemini": "gemini-2.5-flash",
    "mock": "mock",
}

_CODE_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)


class EnhancerConfig(BaseModel):
    """Configuration for the enhancement boundary.

    api_key is required for the remote providers (openrouter, gemini).
    """

    provider: Literal["openrouter", "gemini", "mock"] = Field(
        default="openrouter", description="Which model backend to call"
    )
    api_key: Optional[str] = Field(default=None, description="Provider API key")
    model: Optional[str] = Field(
        default=None, description="Model identifier; defaults per provider"
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter API root"
    )
    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")
    referer: Optional[str] = Field(default=None, description="HTTP-Referer sent to OpenRouter")

    @model_validator(mode="after")
    def _require_api_key(self) -> "EnhancerConfig":
        if self.provider != "mock" and not self.api_key:
            raise ValueError(f"api_key is required for provider '{self.provider}'")
        return self

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]


def build_provider(config: EnhancerConfig) -> LLMProvider:
    """Create the LLM provider named by the config."""
    if config.provider == "openrouter":
        return OpenRouterProvider(
            api_key=config.api_key,
            model=config.model_name,
            base_url=config.base_url,
            timeout=config.timeout,
            referer=config.referer,
        )
    if config.provider == "gemini":
        return GeminiProvider(api_key=config.api_key, model=config.model_name)
    return MockLLMProvider()


def build_prompt(code: str, file_name: str, findings: Iterable[Finding] = ()) -> str:
    """Build the user prompt from the code and its scan findings."""
    findings = list(findings)
    parts = [f"Enhance this code from `{file_name}`."]

    if findings:
        parts.append("Fix these issues found by a static scan:")
        for finding in findings:
            parts.append(
                f"- [{finding.severity.value}] {finding.rule} (line {finding.line}): "
                f"{finding.message}. Suggested fix: {finding.improvement}"
            )
    else:
        parts.append("Improve its security and code quality.")

    parts.append("Reply with the complete updated file in a single code block.")
    parts.append(f"```\n{code}\n```")
    return "\n".join(parts)


def strip_code_fences(text: str) -> str:
    """Return the body of a reply wrapped in one Markdown code fence."""
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1)
    return text


class CodeEnhancer:
    """Sends code and findings to a model and returns replacement code."""

    def __init__(self, config: EnhancerConfig, provider: LLMProvider | None = None):
        self.config = config
        self.provider = provider or build_provider(config)

    async def enhance(
        self,
        code: str,
        file_name: str,
        findings: Iterable[Finding] = (),
    ) -> str:
        """
        Ask the model for an improved version of the code.

        Args:
            code: Original file content
            file_name: Original file name, given to the model as context
            findings: Scan findings the model should address

        Returns:
            The enhanced code

        Raises:
            EnhancementError: If the provider fails or returns nothing usable
        """
        prompt = build_prompt(code, file_name, findings)
        logger.info(f"Enhancing {file_name} with {self.config.provider}/{self.config.model_name}")

        reply = await self.provider.complete(SYSTEM_PROMPT, prompt)
        enhanced = strip_code_fences(reply)

        if not enhanced.strip():
            raise EnhancementError("Model returned an empty response")
        return enhanced
