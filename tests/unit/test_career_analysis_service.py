"""Unit tests for app.services.career_analysis_service with an in-process provider."""
import json

import httpx
import pytest

from app.errors import (
    ConfigurationError,
    MalformedOutputError,
    UnexpectedError,
    UpstreamError,
    ValidationError,
)
from app.services.career_analysis_service import AnalysisOutcome, CareerAnalysisService, _outcome_for
from app.services.completion_client import OpenAICompletionProvider


def service_with(settings, provider):
    built = []

    def factory(s):
        built.append(s)
        return provider

    return CareerAnalysisService(settings, provider_factory=factory), built


@pytest.mark.asyncio
async def test_valid_reply_is_returned_verbatim(test_settings, graduate_input, make_provider, valid_analysis):
    provider = make_provider(reply=json.dumps(valid_analysis))
    service, _ = service_with(test_settings, provider)

    result = await service.analyze(graduate_input)

    assert result == valid_analysis
    assert len(provider.calls) == 1
    system_instruction, user_text, params = provider.calls[0]
    assert user_text == graduate_input
    assert '"careerPaths"' in system_instruction
    assert params.temperature == 0.7


@pytest.mark.asyncio
async def test_short_input_never_reaches_provider(test_settings, graduate_input, make_provider):
    provider = make_provider(reply="{}")
    service, built = service_with(test_settings, provider)

    with pytest.raises(ValidationError):
        await service.analyze("short")

    assert built == []
    assert provider.calls == []


@pytest.mark.asyncio
async def test_missing_credential_is_configuration_error(test_settings, graduate_input, make_provider):
    settings = test_settings.model_copy(update={"openai_api_key": ""})
    provider = make_provider(reply="{}")
    service, built = service_with(settings, provider)

    with pytest.raises(ConfigurationError) as exc_info:
        await service.analyze(graduate_input)

    assert built == []
    assert provider.calls == []
    assert "OPENAI" not in exc_info.value.message


@pytest.mark.asyncio
async def test_upstream_failure_is_not_retried(test_settings, graduate_input, make_provider):
    provider = make_provider(error=UpstreamError(detail="OpenAI returned 503", upstream_status=503))
    service, _ = service_with(test_settings, provider)

    with pytest.raises(UpstreamError) as exc_info:
        await service.analyze(graduate_input)

    assert exc_info.value.upstream_status == 503
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_empty_reply_is_upstream_error(test_settings, graduate_input, make_provider):
    service, _ = service_with(test_settings, make_provider(reply=None))

    with pytest.raises(UpstreamError):
        await service.analyze(graduate_input)


@pytest.mark.asyncio
async def test_truncated_reply_is_malformed(test_settings, graduate_input, make_provider, valid_analysis):
    provider = make_provider(reply=json.dumps(valid_analysis)[:120])
    service, _ = service_with(test_settings, provider)

    with pytest.raises(MalformedOutputError):
        await service.analyze(graduate_input)
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_schema_violation_depends_on_strict_setting(test_settings, graduate_input, make_provider, valid_analysis):
    valid_analysis["careerPaths"] = valid_analysis["careerPaths"][:2]
    reply = json.dumps(valid_analysis)

    strict_service, _ = service_with(test_settings, make_provider(reply=reply))
    with pytest.raises(MalformedOutputError):
        await strict_service.analyze(graduate_input)

    lenient = test_settings.model_copy(update={"strict_schema_validation": False})
    lenient_service, _ = service_with(lenient, make_provider(reply=reply))
    assert await lenient_service.analyze(graduate_input) == valid_analysis


@pytest.mark.asyncio
async def test_unclassified_exception_becomes_unexpected_error(test_settings, graduate_input, make_provider):
    service, _ = service_with(test_settings, make_provider(error=KeyError("choices")))

    with pytest.raises(UnexpectedError) as exc_info:
        await service.analyze(graduate_input)

    assert exc_info.value.message == "An unexpected error occurred"
    assert isinstance(exc_info.value.__cause__, KeyError)


@pytest.mark.parametrize("error, outcome", [
    (ValidationError("x"), AnalysisOutcome.REJECTED),
    (ConfigurationError(), AnalysisOutcome.MISCONFIGURED),
    (UpstreamError(), AnalysisOutcome.UPSTREAM_FAILED),
    (MalformedOutputError(), AnalysisOutcome.MALFORMED_OUTPUT),
    (UnexpectedError(), AnalysisOutcome.UNEXPECTED),
])
def test_every_failure_maps_to_one_outcome(error, outcome):
    assert _outcome_for(error) is outcome


@pytest.mark.asyncio
async def test_openai_provider_is_released_after_analysis(test_settings, graduate_input, valid_analysis):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 1700000000,
            "model": "gpt-4o-mini",
            "choices": [{
                "index": 0,
                "message": {"role": "assistant", "content": json.dumps(valid_analysis)},
                "finish_reason": "stop",
            }],
        })

    built = []

    def factory(settings):
        provider = OpenAICompletionProvider(
            api_key=settings.openai_api_key,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        built.append(provider)
        return provider

    service = CareerAnalysisService(test_settings, provider_factory=factory)

    assert await service.analyze(graduate_input) == valid_analysis
    assert built[0].client.is_closed()
