"""
Response Validator
Parses the model reply and accepts or rejects it against CareerAnalysisResult.
Never repairs: an accepted document is returned exactly as parsed.
"""
import json
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from app.errors import MalformedOutputError, UpstreamError
from app.schemas.career_analysis import CareerAnalysisResult, SchemaViolation, ValidationResult
from app.utils.logger import get_logger

logger = get_logger("response_validator")

# How much of an unparseable reply goes into the log, from each end
RAW_LOG_CHARS = 500


class ResponseValidator:
    """
    strict=True validates the parsed document field by field (cardinality,
    blank items, year ranges). strict=False only requires the reply to parse
    into a JSON object and trusts the instruction for the rest.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def validate(self, content: Optional[str]) -> Dict[str, Any]:
        if content is None or not content.strip():
            raise UpstreamError(detail="empty response")

        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            self._log_raw_reply(content, e)
            raise MalformedOutputError(detail=f"Invalid JSON from model: {e}") from e

        if not isinstance(document, dict):
            self._log_raw_reply(content, f"top-level JSON is {type(document).__name__}, expected object")
            raise MalformedOutputError(detail="Model reply is not a JSON object")

        if self.strict:
            result = self.check_schema(document)
            if not result.valid:
                for i, err in enumerate(result.errors[:10]):
                    logger.warning(f"  {i+1}. {err.field}: {err.error} (received {err.received!r:.120})")
                logger.warning(
                    f"⚠ Career analysis failed schema validation with {len(result.errors)} errors",
                    extra={"violations": len(result.errors)},
                )
                raise MalformedOutputError(detail=f"{len(result.errors)} schema violations")

        logger.info("✓ Career analysis passed validation")
        return document

    @staticmethod
    def check_schema(document: Dict[str, Any]) -> ValidationResult:
        try:
            CareerAnalysisResult.model_validate(document)
            return ValidationResult(valid=True, errors=[])
        except PydanticValidationError as e:
            errors = []
            for error in e.errors():
                errors.append(SchemaViolation(
                    field=" -> ".join(str(loc) for loc in error["loc"]) or "(root)",
                    error=error["msg"],
                    expected=error["type"],
                    received=error.get("input", "unknown"),
                ))
            return ValidationResult(valid=False, errors=errors)

    @staticmethod
    def _log_raw_reply(content: str, reason: Any) -> None:
        logger.error(f"✗ Unparseable model reply: {reason}")
        logger.error(f"✗ Raw reply (first {RAW_LOG_CHARS} chars): {content[:RAW_LOG_CHARS]}")
        if len(content) > RAW_LOG_CHARS:
            logger.error(f"✗ Raw reply (last {RAW_LOG_CHARS} chars): {content[-RAW_LOG_CHARS:]}")
