"""
Prompt Compiler
Builds the chat request for career analysis. The system instruction carries the
full output schema and is derived from configuration only, never from user text.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List

from app.config import Settings


@dataclass(frozen=True)
class GenerationParams:
    model: str
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class CompiledPrompt:
    system_instruction: str
    user_text: str
    params: GenerationParams

    def as_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_instruction},
            {"role": "user", "content": self.user_text},
        ]


@lru_cache(maxsize=8)
def build_system_instruction(region: str, currency: str) -> str:
    """Career counselor instruction with the exact CareerAnalysisResult shape embedded"""
    return f"""You are a career counselor AI specialized in helping fresh graduates and early-career professionals in {region}. Analyze the user's input about their education, skills, and experience, and provide:
1. A suitable current/starting role title
2. 3-5 key strengths based on their description
3. A career progression path with 4-5 stages spanning 5-7 years, starting at an entry-level stage
4. 3-5 actionable recommendations

For each career path stage, include:
- Job title
- Years of experience as a range in the form "N-M years" (e.g., "0-1 years", "1-3 years", "3-5 years")
- Description of responsibilities
- 4-6 key skills to develop
- Salary range in {currency}, as a monthly range with amounts

Respond ONLY with valid JSON in this exact format:
{{
  "currentRole": "string",
  "strengths": ["string", "string", "string"],
  "careerPaths": [
    {{
      "title": "string",
      "yearsExperience": "0-2 years",
      "description": "string",
      "keySkills": ["string", "string", "string", "string"],
      "salaryRange": "string"
    }}
  ],
  "recommendations": ["string", "string", "string"]
}}

Rules:
- "strengths": between 3 and 5 items
- "careerPaths": between 4 and 5 stages, in progression order
- "keySkills": between 4 and 6 items per stage
- "recommendations": between 3 and 5 items
- Every string must be non-empty. Do not add other fields. Do not wrap the JSON in markdown.

Be realistic about {region} job market conditions and salary ranges. Focus on practical, achievable career progression."""


def compile_prompt(text: str, settings: Settings) -> CompiledPrompt:
    """Pair the fixed instruction with the caller's text, passed through untouched"""
    return CompiledPrompt(
        system_instruction=build_system_instruction(settings.job_market_region, settings.currency_label),
        user_text=text,
        params=GenerationParams(
            model=settings.analysis_model,
            temperature=settings.analysis_temperature,
            max_tokens=settings.analysis_max_tokens,
        ),
    )
