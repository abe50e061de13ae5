"""Input Guard - rejects caller text too thin to ground a career analysis"""
from typing import Any

from app.errors import ValidationError

MIN_INPUT_LENGTH = 50
INPUT_TOO_SHORT_MESSAGE = f"Please provide a detailed description (at least {MIN_INPUT_LENGTH} characters)"


def guard_input(raw_input: Any) -> str:
    """
    Return the caller's text unmodified, or raise ValidationError.

    Missing, non-string and short (trimmed length < MIN_INPUT_LENGTH) input are
    all rejected with the same user-actionable message. The trim only measures;
    the returned text keeps its original whitespace.
    """
    if not isinstance(raw_input, str) or len(raw_input.strip()) < MIN_INPUT_LENGTH:
        raise ValidationError(INPUT_TOO_SHORT_MESSAGE)
    return raw_input
