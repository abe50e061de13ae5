"""
Career Analysis Service
Guard -> configuration check -> compile -> one upstream call -> validate.
Each request ends in exactly one outcome; nothing is retried.
"""
from enum import Enum
from typing import Any, Callable, Dict

from app.config import Settings
from app.errors import (
    CareerServiceError,
    ConfigurationError,
    MalformedOutputError,
    UnexpectedError,
    UpstreamError,
    ValidationError,
)
from app.services.completion_client import CompletionProvider, build_completion_provider
from app.services.input_guard import guard_input
from app.services.prompt_compiler import compile_prompt
from app.services.response_validator import ResponseValidator
from app.utils.logger import get_logger

logger = get_logger("career_analysis")


class AnalysisOutcome(str, Enum):
    VALIDATED = "validated"
    REJECTED = "rejected"
    MISCONFIGURED = "misconfigured"
    UPSTREAM_FAILED = "upstream_failed"
    MALFORMED_OUTPUT = "malformed_output"
    UNEXPECTED = "unexpected"


_OUTCOMES = (
    (ValidationError, AnalysisOutcome.REJECTED),
    (ConfigurationError, AnalysisOutcome.MISCONFIGURED),
    (UpstreamError, AnalysisOutcome.UPSTREAM_FAILED),
    (MalformedOutputError, AnalysisOutcome.MALFORMED_OUTPUT),
)


def _outcome_for(exc: CareerServiceError) -> AnalysisOutcome:
    for error_type, outcome in _OUTCOMES:
        if isinstance(exc, error_type):
            return outcome
    return AnalysisOutcome.UNEXPECTED


class CareerAnalysisService:
    """Synthesizes a CareerAnalysisResult from free text"""

    def __init__(
        self,
        settings: Settings,
        provider_factory: Callable[[Settings], CompletionProvider] = build_completion_provider,
    ):
        self.settings = settings
        self.provider_factory = provider_factory
        self.validator = ResponseValidator(strict=settings.strict_schema_validation)

    async def analyze(self, raw_input: Any) -> Dict[str, Any]:
        try:
            result = await self._run(raw_input)
        except CareerServiceError as e:
            self._log_failure(e)
            raise
        except Exception as e:
            logger.error(f"✗ Career analysis error: {e}", exc_info=True)
            logger.info("analysis.completed", extra={"outcome": AnalysisOutcome.UNEXPECTED.value})
            raise UnexpectedError(detail=str(e)) from e

        logger.info("analysis.completed", extra={"outcome": AnalysisOutcome.VALIDATED.value})
        return result

    async def _run(self, raw_input: Any) -> Dict[str, Any]:
        text = guard_input(raw_input)

        if not self.settings.openai_api_key:
            raise ConfigurationError(detail="completion provider credential is not set")

        prompt = compile_prompt(text, self.settings)
        provider = self.provider_factory(self.settings)

        logger.info(
            f"📝 Requesting career analysis ({len(text)} chars of input)",
            extra={"model": prompt.params.model},
        )
        content = await provider.complete(prompt.system_instruction, prompt.user_text, prompt.params)
        return self.validator.validate(content)

    @staticmethod
    def _log_failure(exc: CareerServiceError) -> None:
        outcome = _outcome_for(exc)
        if outcome is AnalysisOutcome.REJECTED:
            logger.info("analysis.rejected: input failed the guard")
        elif outcome is AnalysisOutcome.MISCONFIGURED:
            logger.error("✗ Career analysis service is not configured (OPENAI_API_KEY missing)")
        elif outcome is AnalysisOutcome.UPSTREAM_FAILED:
            logger.error(
                f"✗ Upstream completion failed: {exc.detail}",
                extra={"upstream_status": getattr(exc, "upstream_status", None)},
            )
        else:
            logger.error(f"✗ Career analysis rejected model output: {exc.detail}")
        logger.info("analysis.completed", extra={"outcome": outcome.value})
