"""
Request bodies for the text-to-speech proxies.

Fields are loosely typed: the handlers fall back to defaults for anything that
is not a non-empty string instead of rejecting the request.
"""
from typing import Any, Optional

from pydantic import BaseModel


def text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


class ElevenLabsSpeechRequest(BaseModel):
    text: Any = None
    voiceId: Any = None
    modelId: Any = None


class OpenAISpeechRequest(BaseModel):
    text: Any = None
    voice: Any = None
    model: Any = None
    format: Any = None


class SpeechOptions(BaseModel):
    """Resolved provider call options after defaulting"""
    text: str
    voice: str
    model: str
    format: Optional[str] = None
