"""Shared pytest fixtures for the Career Compass API tests."""
import copy
import json
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.main import app
from app.routes.career_analysis import get_career_analysis_service
from app.services.career_analysis_service import CareerAnalysisService


GRADUATE_INPUT = (
    "Computer science graduate from Universiti Malaya with two internships in "
    "web development, building React and Flask apps."
)

VALID_ANALYSIS: Dict[str, Any] = {
    "currentRole": "Junior Web Developer",
    "strengths": [
        "Full-stack web development with React and Flask",
        "Hands-on internship delivery experience",
        "Solid computer science fundamentals",
    ],
    "careerPaths": [
        {
            "title": "Graduate Software Engineer",
            "yearsExperience": "0-1 years",
            "description": "Ship features on an established web product under senior guidance.",
            "keySkills": ["React", "REST APIs", "Git", "Unit testing"],
            "salaryRange": "RM 3,500 - RM 4,500",
        },
        {
            "title": "Software Engineer",
            "yearsExperience": "1-3 years",
            "description": "Own features end to end and take part in code reviews.",
            "keySkills": ["TypeScript", "PostgreSQL", "CI/CD", "System design basics", "Docker"],
            "salaryRange": "RM 5,000 - RM 7,500",
        },
        {
            "title": "Senior Software Engineer",
            "yearsExperience": "3-5 years",
            "description": "Lead technical design for a product area and mentor juniors.",
            "keySkills": ["Architecture", "Cloud (AWS)", "Mentoring", "Performance tuning"],
            "salaryRange": "RM 8,000 - RM 12,000",
        },
        {
            "title": "Tech Lead",
            "yearsExperience": "5-7 years",
            "description": "Set technical direction for a team and coordinate delivery.",
            "keySkills": ["Technical leadership", "Stakeholder management", "Roadmapping", "Hiring", "Security"],
            "salaryRange": "RM 12,000 - RM 18,000",
        },
    ],
    "recommendations": [
        "Publish two polished portfolio projects on GitHub",
        "Earn the AWS Cloud Practitioner certification",
        "Apply to graduate programmes at regional tech companies",
    ],
}


class FakeCompletionProvider:
    """In-process CompletionProvider that records every call"""

    def __init__(self, reply: Optional[str] = None, error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, system_instruction, user_text, params):
        self.calls.append((system_instruction, user_text, params))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def valid_analysis() -> Dict[str, Any]:
    return copy.deepcopy(VALID_ANALYSIS)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with fake credentials; never reads .env"""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        elevenlabs_api_key="xi-test",
        supabase_url="https://abcdefgh.supabase.co",
        supabase_anon_key="anon-test",
        app_env="production",
    )


@pytest.fixture
def fake_provider(valid_analysis) -> FakeCompletionProvider:
    return FakeCompletionProvider(reply=json.dumps(valid_analysis))


@pytest.fixture
def test_client(test_settings, fake_provider):
    """TestClient whose career analysis service talks to the fake provider"""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_career_analysis_service] = lambda: CareerAnalysisService(
        test_settings, provider_factory=lambda _settings: fake_provider
    )
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_provider():
    """Build a FakeCompletionProvider with a custom reply or error"""
    return FakeCompletionProvider


@pytest.fixture
def graduate_input() -> str:
    """A 120-character description of a CS graduate with web internships"""
    return GRADUATE_INPUT
