"""
Text-to-speech proxy routes
/api/tts -> ElevenLabs, /api/voice-tts -> OpenAI speech
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.config import Settings, get_settings
from app.errors import ValidationError
from app.schemas.speech import ElevenLabsSpeechRequest, OpenAISpeechRequest, SpeechOptions, text_or_default
from app.services.speech_service import (
    ELEVENLABS_DEFAULT_MODEL,
    ELEVENLABS_DEFAULT_VOICE,
    OPENAI_DEFAULT_FORMAT,
    OPENAI_DEFAULT_MODEL,
    OPENAI_DEFAULT_VOICE,
    AudioStream,
    ElevenLabsSpeechService,
    OpenAISpeechService,
)

router = APIRouter()

TEXT_REQUIRED_MESSAGE = "text is required"


def get_elevenlabs_service(settings: Settings = Depends(get_settings)) -> ElevenLabsSpeechService:
    return ElevenLabsSpeechService(settings)


def get_openai_speech_service(settings: Settings = Depends(get_settings)) -> OpenAISpeechService:
    return OpenAISpeechService(settings)


def _required_text(value) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(TEXT_REQUIRED_MESSAGE)
    return text


def _audio_response(stream: AudioStream) -> StreamingResponse:
    return StreamingResponse(
        stream.chunks,
        media_type=stream.media_type,
        headers={"cache-control": "no-store"},
        background=BackgroundTask(stream.close),
    )


@router.post("/tts")
async def elevenlabs_tts(
    data: Optional[ElevenLabsSpeechRequest] = Body(None),
    service: ElevenLabsSpeechService = Depends(get_elevenlabs_service),
):
    """Stream ElevenLabs speech for `text` (voiceId/modelId optional)"""
    data = data or ElevenLabsSpeechRequest()
    options = SpeechOptions(
        text=_required_text(data.text),
        voice=text_or_default(data.voiceId, ELEVENLABS_DEFAULT_VOICE),
        model=text_or_default(data.modelId, ELEVENLABS_DEFAULT_MODEL),
    )
    return _audio_response(await service.synthesize(options))


@router.post("/voice-tts")
async def openai_tts(
    data: Optional[OpenAISpeechRequest] = Body(None),
    service: OpenAISpeechService = Depends(get_openai_speech_service),
):
    """Stream OpenAI speech for `text` (voice/model/format optional)"""
    data = data or OpenAISpeechRequest()
    options = SpeechOptions(
        text=_required_text(data.text),
        voice=text_or_default(data.voice, OPENAI_DEFAULT_VOICE),
        model=text_or_default(data.model, OPENAI_DEFAULT_MODEL),
        format=text_or_default(data.format, OPENAI_DEFAULT_FORMAT),
    )
    return _audio_response(await service.synthesize(options))
