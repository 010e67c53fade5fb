"""
Tests for readerlens/llm/gateway.py

The provider client is replaced with a stub via the gateway's client_factory.
"""

import json

import httpx
import pytest

from readerlens.config.settings import LLMSettings, Provider
from readerlens.documents.text import TRUNCATION_MARKER
from readerlens.llm.exceptions import (
    EmptyModelOutputError,
    ErrorCategory,
    LLMError,
    LLMNotConfiguredError,
    MalformedModelOutputError,
    ProviderError,
)
from readerlens.llm.gateway import LLMGateway


def _http_error(status: int, body: dict) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    response = httpx.Response(status, json=body, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestAnalyzeDocument:

    @pytest.mark.asyncio
    async def test_returns_analysis_and_readers(self, make_gateway, analysis_json):
        gw, client, _ = make_gateway(json.dumps(analysis_json, ensure_ascii=False))

        result = await gw.analyze_document("一篇关于远程办公的文章")

        assert result.analysis.theme == analysis_json["theme"]
        assert len(result.suggested_readers) == 3
        assert all(not r.is_custom for r in result.suggested_readers)

    @pytest.mark.asyncio
    async def test_prompts(self, make_gateway, analysis_json):
        gw, client, _ = make_gateway(json.dumps(analysis_json))

        await gw.analyze_document("文档正文")

        call = client.calls[0]
        assert "suggestedReaders" in call["system_prompt"]
        assert "恰好 3 个" in call["system_prompt"]
        assert call["user_prompt"].startswith("文档内容：")
        assert call["user_prompt"].endswith("文档正文")

    @pytest.mark.asyncio
    async def test_long_text_truncated_before_prompting(self, make_gateway, analysis_json):
        settings = LLMSettings(deepseek_api_key="k", max_text_length=100)
        gw, client, _ = make_gateway(json.dumps(analysis_json), settings=settings)

        await gw.analyze_document("字" * 500)

        user_prompt = client.calls[0]["user_prompt"]
        assert user_prompt.endswith(TRUNCATION_MARKER.strip())
        assert user_prompt.count("字") == 100

    @pytest.mark.asyncio
    async def test_short_text_not_marked(self, make_gateway, analysis_json):
        gw, client, _ = make_gateway(json.dumps(analysis_json))
        await gw.analyze_document("短文")
        assert TRUNCATION_MARKER.strip() not in client.calls[0]["user_prompt"]

    @pytest.mark.asyncio
    async def test_template_syntax_in_document_left_alone(self, make_gateway, analysis_json):
        gw, client, _ = make_gateway(json.dumps(analysis_json))
        await gw.analyze_document("模板示例 {{name}} 与 {{#if x}}保留{{/if}}")
        assert "{{name}}" in client.calls[0]["user_prompt"]
        assert "{{#if x}}保留{{/if}}" in client.calls[0]["user_prompt"]

    @pytest.mark.asyncio
    async def test_idempotent_except_ids(self, make_gateway, analysis_json):
        gw, _, _ = make_gateway(json.dumps(analysis_json))

        first = await gw.analyze_document("同一篇文档")
        second = await gw.analyze_document("同一篇文档")

        assert first.analysis == second.analysis
        strip = lambda res: [r.model_dump(exclude={"id"}) for r in res.suggested_readers]
        assert strip(first) == strip(second)
        assert {r.id for r in first.suggested_readers}.isdisjoint(
            {r.id for r in second.suggested_readers}
        )

    @pytest.mark.asyncio
    async def test_fewer_readers_accepted(self, make_gateway):
        gw, _, _ = make_gateway('{"theme": "T", "suggestedReaders": [{"name": "A"}]}')
        result = await gw.analyze_document("text")
        assert len(result.suggested_readers) == 1

    @pytest.mark.asyncio
    async def test_malformed_output(self, make_gateway):
        gw, _, _ = make_gateway("I am not JSON")
        with pytest.raises(MalformedModelOutputError):
            await gw.analyze_document("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["", "   \n  ", None])
    async def test_empty_output(self, make_gateway, reply):
        gw, _, _ = make_gateway(reply)
        with pytest.raises(EmptyModelOutputError) as exc_info:
            await gw.analyze_document("text")
        assert exc_info.value.category == ErrorCategory.EMPTY_MODEL_OUTPUT
        assert "DeepSeek" in exc_info.value.message


class TestProviderFailures:

    @pytest.mark.asyncio
    async def test_quota_error_classified(self, make_gateway):
        gw, _, _ = make_gateway(_http_error(429, {"error": {"code": "insufficient_quota"}}))

        with pytest.raises(ProviderError) as exc_info:
            await gw.analyze_document("text")

        assert exc_info.value.category == ErrorCategory.RATE_LIMIT_OR_QUOTA
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_auth_error_classified(self, make_gateway):
        gw, _, _ = make_gateway(_http_error(401, {"error": {"code": "invalid_api_key"}}))
        with pytest.raises(ProviderError) as exc_info:
            await gw.get_reader_feedback("text", "读者")
        assert exc_info.value.category == ErrorCategory.INVALID_CREDENTIAL

    @pytest.mark.asyncio
    async def test_transport_error_classified(self, make_gateway):
        gw, _, _ = make_gateway(httpx.ConnectError("connection refused"))
        with pytest.raises(ProviderError) as exc_info:
            await gw.analyze_document("text")
        assert exc_info.value.category == ErrorCategory.PROVIDER_FAILURE
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, make_gateway):
        gw, client, chosen = make_gateway(_http_error(429, {}))
        with pytest.raises(ProviderError):
            await gw.analyze_document("text")
        assert len(client.calls) == 1
        assert len(chosen) == 1

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        def factory(choice, settings):
            raise AssertionError("client must not be built")

        gw = LLMGateway(LLMSettings(), client_factory=factory)

        with pytest.raises(LLMNotConfiguredError) as exc_info:
            await gw.analyze_document("text")

        assert exc_info.value.category == ErrorCategory.UNCONFIGURED
        assert exc_info.value.to_dict()["code"] == "NO_LLM_CONFIG"


class TestProviderSelectionPerCall:

    @pytest.mark.asyncio
    async def test_preference_used(self, make_gateway, all_keys_settings, analysis_json):
        settings = all_keys_settings.model_copy(update={"preferred_provider": Provider.ANTHROPIC})
        gw, _, chosen = make_gateway(json.dumps(analysis_json), settings=settings)

        await gw.analyze_document("text")

        assert chosen == [Provider.ANTHROPIC]

    @pytest.mark.asyncio
    async def test_default_is_deepseek(self, make_gateway, all_keys_settings, feedback_json):
        gw, _, chosen = make_gateway(json.dumps(feedback_json), settings=all_keys_settings)
        await gw.get_reader_feedback("text", "读者")
        assert chosen == [Provider.DEEPSEEK]


class TestGetReaderFeedback:

    @pytest.mark.asyncio
    async def test_returns_payload(self, make_gateway, feedback_json):
        gw, _, _ = make_gateway(json.dumps(feedback_json, ensure_ascii=False))

        payload = await gw.get_reader_feedback("文档", "挑剔的投资人", "关注商业价值")

        assert payload.first_impression_score == 7
        assert payload.reading_feeling == feedback_json["readingFeeling"]
        assert payload.revision_suggestions == feedback_json["revisionSuggestions"]

    @pytest.mark.asyncio
    async def test_prompt_embeds_reader(self, make_gateway, feedback_json):
        gw, client, _ = make_gateway(json.dumps(feedback_json))

        await gw.get_reader_feedback("正文内容", "挑剔的投资人", "关注商业价值")

        call = client.calls[0]
        assert "深度模拟" in call["system_prompt"]
        assert "readingFeeling" in call["system_prompt"]
        assert "「挑剔的投资人」" in call["user_prompt"]
        assert "关注商业价值" in call["user_prompt"]
        assert call["user_prompt"].endswith("正文内容")
        assert "用户自定义" not in call["user_prompt"]

    @pytest.mark.asyncio
    async def test_custom_reader_hint(self, make_gateway, feedback_json):
        gw, client, _ = make_gateway(json.dumps(feedback_json))

        await gw.get_reader_feedback("正文", "产品经理", "关注落地", is_custom=True)

        user_prompt = client.calls[0]["user_prompt"]
        assert user_prompt.startswith("【该读者身份由用户自定义】")
        assert "「产品经理」" in user_prompt

    @pytest.mark.asyncio
    async def test_feedback_truncates_text(self, make_gateway, feedback_json):
        settings = LLMSettings(openai_api_key="k", max_text_length=10)
        gw, client, _ = make_gateway(json.dumps(feedback_json), settings=settings)

        await gw.get_reader_feedback("a" * 50, "读者")

        assert client.calls[0]["user_prompt"].endswith("a" * 10 + TRUNCATION_MARKER)

    @pytest.mark.asyncio
    async def test_score_always_in_range(self, make_gateway):
        gw, _, _ = make_gateway('{"firstImpressionScore": -40}')
        payload = await gw.get_reader_feedback("text", "读者")
        assert payload.first_impression_score == 1
        assert payload.reading_feeling == ""

    @pytest.mark.asyncio
    async def test_malformed_feedback(self, make_gateway):
        gw, _, _ = make_gateway("no json here")
        with pytest.raises(MalformedModelOutputError):
            await gw.get_reader_feedback("text", "读者")

    @pytest.mark.asyncio
    async def test_huge_score_is_clamped(self, make_gateway):
        gw, _, _ = make_gateway('{"firstImpressionScore": ' + "9" * 400 + "}")
        payload = await gw.get_reader_feedback("text", "读者")
        assert payload.first_impression_score == 10


class TestErrorTypes:

    def test_category_defaults_per_class(self):
        assert LLMError("x").category == ErrorCategory.PROVIDER_FAILURE
        assert LLMNotConfiguredError("x").category == ErrorCategory.UNCONFIGURED
        assert EmptyModelOutputError("x").category == ErrorCategory.EMPTY_MODEL_OUTPUT

    def test_explicit_category_overrides_default(self):
        error = ProviderError("quota", ErrorCategory.RATE_LIMIT_OR_QUOTA)
        assert error.to_dict() == {"error": "quota", "code": "RATE_LIMIT_OR_QUOTA"}
        assert error.category.http_status == 429
