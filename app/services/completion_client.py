"""
Completion provider - the one effectful dependency of the career analysis pipeline.

The pipeline only sees the CompletionProvider protocol, so tests can swap in a
fake. The OpenAI implementation enforces a hard timeout and never retries:
a failed call is reported once and the caller decides whether to resubmit.
"""
import asyncio
from typing import Optional, Protocol

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAIError

from app.config import Settings
from app.errors import UpstreamError
from app.services.prompt_compiler import GenerationParams
from app.utils.logger import get_logger

logger = get_logger("completion")


class CompletionProvider(Protocol):
    async def complete(self, system_instruction: str, user_text: str, params: GenerationParams) -> Optional[str]:
        """Return the generated text (None when the envelope carries none) or raise UpstreamError"""
        ...


class OpenAICompletionProvider:
    """Chat completions over the OpenAI SDK"""

    def __init__(self, api_key: str, timeout_seconds: float = 30.0, http_client: Optional[httpx.AsyncClient] = None):
        self.timeout_seconds = timeout_seconds
        self.client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, system_instruction: str, user_text: str, params: GenerationParams) -> Optional[str]:
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=params.model,
                    messages=[
                        {"role": "system", "content": system_instruction},
                        {"role": "user", "content": user_text},
                    ],
                    temperature=params.temperature,
                    max_tokens=params.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except APIStatusError as e:
            raise UpstreamError(
                detail=f"OpenAI returned {e.status_code}: {str(e)[:500]}",
                upstream_status=e.status_code,
            ) from e
        except (APITimeoutError, asyncio.TimeoutError) as e:
            raise UpstreamError(detail=f"OpenAI call timed out after {self.timeout_seconds}s") from e
        except APIConnectionError as e:
            raise UpstreamError(detail=f"OpenAI connection failed: {e}") from e
        except OpenAIError as e:
            raise UpstreamError(detail=f"OpenAI call failed: {e}") from e
        finally:
            # One provider per request; release its connection pool with it
            await self.client.close()

        if not response.choices:
            return None
        content = response.choices[0].message.content
        logger.debug(f"OpenAI returned {len(content or '')} characters")
        return content


def build_completion_provider(settings: Settings) -> CompletionProvider:
    return OpenAICompletionProvider(
        api_key=settings.openai_api_key,
        timeout_seconds=settings.upstream_timeout_seconds,
    )
