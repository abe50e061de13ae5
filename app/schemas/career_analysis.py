"""
Pydantic schemas for the career analysis endpoint
Defines the CareerAnalysisResult contract the model reply is validated against
"""
import re
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# "0-2 years", "3 - 5 yrs", "5 to 7 years", "2–4 years"
YEARS_RANGE_PATTERN = re.compile(r"\d+\s*(?:-|–|—|to)\s*\d+\s*(?:years?|yrs?)", re.IGNORECASE)


def _non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _non_blank_items(values: List[str]) -> List[str]:
    for i, item in enumerate(values):
        if not item.strip():
            raise ValueError(f"item {i} must not be blank")
    return values


# ========== Request Schemas ==========
class CareerAnalysisRequest(BaseModel):
    """Caller input; `input` is left untyped so the Input Guard owns the type check"""
    input: Any = None


# ========== Result Schemas ==========
class CareerPathStage(BaseModel):
    """One stage of the career progression"""
    model_config = ConfigDict(strict=True)

    title: str
    yearsExperience: str = Field(..., description='Range such as "0-2 years"')
    description: str
    keySkills: List[str] = Field(..., min_length=4, max_length=6)
    salaryRange: str = Field(..., description="Currency range, e.g. RM 3,500 - RM 5,000")

    @field_validator("title", "description")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        return _non_blank(v)

    @field_validator("yearsExperience")
    @classmethod
    def years_is_range(cls, v: str) -> str:
        if not YEARS_RANGE_PATTERN.fullmatch(v.strip()):
            raise ValueError('must be a range like "N-M years"')
        return v

    @field_validator("salaryRange")
    @classmethod
    def salary_has_amount(cls, v: str) -> str:
        _non_blank(v)
        if not any(ch.isdigit() for ch in v):
            raise ValueError("must contain an amount")
        return v

    @field_validator("keySkills")
    @classmethod
    def skills_not_blank(cls, v: List[str]) -> List[str]:
        return _non_blank_items(v)


class CareerAnalysisResult(BaseModel):
    """The document returned to the caller, exactly as the model produced it"""
    model_config = ConfigDict(strict=True)

    currentRole: str
    strengths: List[str] = Field(..., min_length=3, max_length=5)
    careerPaths: List[CareerPathStage] = Field(..., min_length=4, max_length=5)
    recommendations: List[str] = Field(..., min_length=3, max_length=5)

    @field_validator("currentRole")
    @classmethod
    def role_not_blank(cls, v: str) -> str:
        return _non_blank(v)

    @field_validator("strengths", "recommendations")
    @classmethod
    def items_not_blank(cls, v: List[str]) -> List[str]:
        return _non_blank_items(v)


# ========== Validation Schemas ==========
class SchemaViolation(BaseModel):
    """Schema validation error details"""
    field: str
    error: str
    expected: str
    received: Any


class ValidationResult(BaseModel):
    """Result of schema validation"""
    valid: bool
    errors: List[SchemaViolation] = Field(default_factory=list)

