"""
Text-to-speech pass-through for ElevenLabs and OpenAI.

Both services open the upstream stream before returning, so a provider error
becomes a JSON error response instead of a half-sent audio body. The caller
owns the returned AudioStream and must call `close` once the body is sent.
"""
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional
from urllib.parse import quote

import httpx
from openai import APIStatusError, AsyncOpenAI, OpenAIError

from app.config import Settings
from app.errors import ConfigurationError, ProviderError
from app.schemas.speech import SpeechOptions
from app.utils.logger import get_logger

logger = get_logger("speech")

ELEVENLABS_DEFAULT_VOICE = "Rachel"
ELEVENLABS_DEFAULT_MODEL = "eleven_multilingual_v2"
ELEVENLABS_VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}

OPENAI_DEFAULT_VOICE = "alloy"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini-tts"
OPENAI_DEFAULT_FORMAT = "mp3"


def media_type_for(audio_format: Optional[str]) -> str:
    return "audio/wav" if audio_format == "wav" else "audio/mpeg"


@dataclass
class AudioStream:
    chunks: AsyncIterator[bytes]
    media_type: str
    close: Callable[[], Awaitable[None]]


class ElevenLabsSpeechService:
    """POST /v1/text-to-speech/{voice_id} with the xi-api-key header"""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    async def synthesize(self, options: SpeechOptions) -> AudioStream:
        if not self.settings.elevenlabs_api_key:
            raise ConfigurationError(detail="speech provider credential is not set")

        url = f"{self.settings.elevenlabs_base_url}/v1/text-to-speech/{quote(options.voice, safe='')}"
        stack = AsyncExitStack()
        client = self.http_client
        if client is None:
            client = await stack.enter_async_context(
                httpx.AsyncClient(timeout=self.settings.upstream_timeout_seconds)
            )

        request = client.build_request(
            "POST",
            url,
            headers={
                "accept": "audio/mpeg",
                "content-type": "application/json",
                "xi-api-key": self.settings.elevenlabs_api_key,
            },
            json={
                "text": options.text,
                "model_id": options.model,
                "voice_settings": ELEVENLABS_VOICE_SETTINGS,
            },
        )

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await stack.aclose()
            logger.error(f"ElevenLabs request failed: {e}", extra={"provider": "elevenlabs"})
            raise ProviderError(detail=str(e) or type(e).__name__, status_code=500) from e
        stack.push_async_callback(response.aclose)

        if response.is_error:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await stack.aclose()
            logger.error(
                f"ElevenLabs returned {response.status_code}: {body[:300]}",
                extra={"provider": "elevenlabs", "upstream_status": response.status_code},
            )
            raise ProviderError(detail=body, status_code=500, upstream_status=response.status_code)

        logger.info(f"Streaming ElevenLabs audio for {len(options.text)} chars", extra={"provider": "elevenlabs"})
        return AudioStream(chunks=response.aiter_bytes(), media_type="audio/mpeg", close=stack.aclose)


class OpenAISpeechService:
    """audio.speech via the OpenAI SDK, streamed"""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    async def synthesize(self, options: SpeechOptions) -> AudioStream:
        if not self.settings.openai_api_key:
            raise ConfigurationError(detail="speech provider credential is not set")

        client = AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            timeout=self.settings.upstream_timeout_seconds,
            max_retries=0,
            http_client=self.http_client,
        )
        stack = AsyncExitStack()
        stack.push_async_callback(client.close)
        try:
            response = await stack.enter_async_context(
                client.audio.speech.with_streaming_response.create(
                    model=options.model,
                    voice=options.voice,
                    input=options.text,
                    response_format=options.format,
                )
            )
        except APIStatusError as e:
            await stack.aclose()
            details = e.response.text if e.response is not None else str(e)
            logger.error(
                f"OpenAI speech returned {e.status_code}: {details[:300]}",
                extra={"provider": "openai", "upstream_status": e.status_code},
            )
            raise ProviderError(detail=details, status_code=502, upstream_status=e.status_code) from e
        except OpenAIError as e:
            await stack.aclose()
            logger.error(f"OpenAI speech request failed: {e}", extra={"provider": "openai"})
            raise ProviderError(detail=str(e), status_code=502) from e

        logger.info(f"Streaming OpenAI audio for {len(options.text)} chars", extra={"provider": "openai"})
        return AudioStream(
            chunks=response.iter_bytes(),
            media_type=media_type_for(options.format),
            close=stack.aclose,
        )
