"""Tests for the enhancement boundary and LLM providers."""

import json
from types import SimpleNamespace

import httpx
import pytest
from pydantic import ValidationError

from codesafe.analyzer import scan
from codesafe.enhancer import (
    DEFAULT_MODELS,
    SYSTEM_PROMPT,
    CodeEnhancer,
    EnhancerConfig,
    build_prompt,
    build_provider,
    strip_code_fences,
)
from codesafe.llm import (
    EnhancementError,
    GeminiProvider,
    LLMProvider,
    MockLLMProvider,
    OpenRouterProvider,
)


class StaticProvider(LLMProvider):
    """Provider returning a fixed reply and recording the prompt."""

    def __init__(self, reply: str):
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        return self.reply


class FailingProvider(LLMProvider):
    async def complete(self, system: str, prompt: str) -> str:
        raise EnhancementError("upstream unavailable")


def _chat_response(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestEnhancerConfig:
    """Test configuration validation."""

    def test_api_key_required_for_openrouter(self):
        with pytest.raises(ValidationError):
            EnhancerConfig(provider="openrouter")

    def test_api_key_required_for_gemini(self):
        with pytest.raises(ValidationError):
            EnhancerConfig(provider="gemini")

    def test_mock_needs_no_key(self):
        config = EnhancerConfig(provider="mock")

        assert config.model_name == "mock"

    def test_default_model_per_provider(self):
        config = EnhancerConfig(api_key="k")

        assert config.provider == "openrouter"
        assert config.model_name == DEFAULT_MODELS["openrouter"]

    def test_explicit_model(self):
        config = EnhancerConfig(api_key="k", model="openai/gpt-4")

        assert config.model_name == "openai/gpt-4"


class TestBuildProvider:
    """Test provider selection."""

    def test_openrouter(self):
        provider = build_provider(EnhancerConfig(api_key="k", timeout=5))

        assert isinstance(provider, OpenRouterProvider)
        assert provider.api_key == "k"
        assert provider.timeout == 5

    def test_gemini(self):
        provider = build_provider(EnhancerConfig(provider="gemini", api_key="k"))

        assert isinstance(provider, GeminiProvider)
        assert provider.model_name == DEFAULT_MODELS["gemini"]

    def test_mock(self):
        assert isinstance(build_provider(EnhancerConfig(provider="mock")), MockLLMProvider)


class TestPrompt:
    """Test prompt construction and reply cleanup."""

    def test_prompt_lists_findings_and_code(self):
        code = "eval(x)\nconsole.log(x)"
        findings = scan(code, "js")

        prompt = build_prompt(code, "app.js", findings)

        assert "`app.js`" in prompt
        assert "no-eval (line 1)" in prompt
        assert "no-console (line 2)" in prompt
        assert prompt.endswith(f"```\n{code}\n```")

    def test_prompt_without_findings(self):
        prompt = build_prompt("x = 1", "a.py")

        assert "Improve its security and code quality." in prompt

    @pytest.mark.parametrize(
        ("reply", "expected"),
        [
            ("```python\nprint(1)\n```", "print(1)"),
            ("```\na\nb\n```\n", "a\nb"),
            ("print(1)", "print(1)"),
            ("Here you go:\n```\nx\n```", "Here you go:\n```\nx\n```"),
        ],
    )
    def test_strip_code_fences(self, reply, expected):
        assert strip_code_fences(reply) == expected


class TestCodeEnhancer:
    """Test CodeEnhancer.enhance()."""

    @pytest.mark.asyncio
    async def test_enhance_strips_fences(self):
        provider = StaticProvider("```js\nJSON.parse(x)\n```")
        enhancer = CodeEnhancer(EnhancerConfig(provider="mock"), provider=provider)

        result = await enhancer.enhance("eval(x)", "app.js", scan("eval(x)", "js"))

        assert result == "JSON.parse(x)"
        system, prompt = provider.calls[0]
        assert system == SYSTEM_PROMPT
        assert "no-eval" in prompt

    @pytest.mark.asyncio
    async def test_enhance_with_mock_provider_returns_code(self):
        enhancer = CodeEnhancer(EnhancerConfig(provider="mock"))

        result = await enhancer.enhance("x = 1", "a.py")

        assert result == "x = 1"

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self):
        enhancer = CodeEnhancer(EnhancerConfig(provider="mock"), provider=StaticProvider("```\n```"))

        with pytest.raises(EnhancementError):
            await enhancer.enhance("x = 1", "a.py")

    @pytest.mark.asyncio
    async def test_provider_error_propagates_and_findings_are_untouched(self):
        code = "exec(payload)\n"
        findings = scan(code, "py")
        before = [f.model_dump() for f in findings]
        enhancer = CodeEnhancer(EnhancerConfig(provider="mock"), provider=FailingProvider())

        with pytest.raises(EnhancementError):
            await enhancer.enhance(code, "run.py", findings)

        assert [f.model_dump() for f in findings] == before


class TestOpenRouterProvider:
    """Test the OpenRouter provider against a mocked transport."""

    @pytest.mark.asyncio
    async def test_posts_chat_completion(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["referer"] = request.headers.get("HTTP-Referer")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_chat_response("print('safe')"))

        provider = OpenRouterProvider(
            api_key="sk-test",
            model="openai/gpt-4",
            referer="http://localhost:5173",
            transport=httpx.MockTransport(handler),
        )

        result = await provider.complete("system text", "user text")

        assert result == "print('safe')"
        assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["referer"] == "http://localhost:5173"
        assert seen["body"] == {
            "model": "openai/gpt-4",
            "messages": [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
        }

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(401, json={"error": "bad key"})
        )
        provider = OpenRouterProvider(api_key="bad", model="m", transport=transport)

        with pytest.raises(EnhancementError, match="HTTP 401"):
            await provider.complete("s", "p")

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        provider = OpenRouterProvider(api_key="k", model="m", transport=httpx.MockTransport(handler))

        with pytest.raises(EnhancementError, match="request failed"):
            await provider.complete("s", "p")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"choices": []},
            {"error": {"message": "rate limited"}},
            _chat_response(None),
        ],
    )
    async def test_malformed_response_raises(self, body):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        provider = OpenRouterProvider(api_key="k", model="m", transport=transport)

        with pytest.raises(EnhancementError):
            await provider.complete("s", "p")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
        provider = OpenRouterProvider(api_key="k", model="m", transport=transport)

        with pytest.raises(EnhancementError, match="invalid JSON"):
            await provider.complete("s", "p")


def _gemini_with(generate_content) -> GeminiProvider:
    provider = GeminiProvider(api_key="k")
    provider.client = SimpleNamespace(
        aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
    )
    return provider


class TestGeminiProvider:
    """Test the Gemini provider with a stubbed client."""

    @pytest.mark.asyncio
    async def test_returns_text(self):
        async def generate_content(**kwargs):
            assert kwargs["config"].system_instruction == "s"
            return SimpleNamespace(text="print('safe')")

        assert await _gemini_with(generate_content).complete("s", "p") == "print('safe')"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("All connection attempts failed"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    async def test_transport_error_raises(self, error):
        async def generate_content(**kwargs):
            raise error

        with pytest.raises(EnhancementError, match="Gemini request failed"):
            await _gemini_with(generate_content).complete("s", "p")

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self):
        async def generate_content(**kwargs):
            return SimpleNamespace(text=None)

        with pytest.raises(EnhancementError, match="empty response"):
            await _gemini_with(generate_content).complete("s", "p")


class TestMockProvider:
    """Test the offline provider."""

    @pytest.mark.asyncio
    async def test_code_with_fences_comes_back_unchanged(self):
        code = 'DOC = """\n```py\nx = 1\n```\n"""\ny = 2'
        enhancer = CodeEnhancer(EnhancerConfig(provider="mock"))

        assert await enhancer.enhance(code, "a.py") == code

    @pytest.mark.asyncio
    async def test_prompt_without_code_block(self):
        assert await MockLLMProvider().complete("s", "no code here") == ""
