"""
Career Analysis API Route
Free-text background in, structured career progression out
"""
import json

from fastapi import APIRouter, Depends, Request

from app.config import Settings, get_settings
from app.schemas.career_analysis import CareerAnalysisRequest
from app.services.career_analysis_service import CareerAnalysisService

router = APIRouter()


def get_career_analysis_service(settings: Settings = Depends(get_settings)) -> CareerAnalysisService:
    return CareerAnalysisService(settings)


async def read_analysis_request(request: Request) -> CareerAnalysisRequest:
    """
    Read the body leniently: a body that is not a JSON object simply has no
    `input`, which the Input Guard then rejects with its 400.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        return CareerAnalysisRequest()
    return CareerAnalysisRequest(input=body.get("input"))


@router.post("/analyze-career")
async def analyze_career(
    data: CareerAnalysisRequest = Depends(read_analysis_request),
    service: CareerAnalysisService = Depends(get_career_analysis_service),
) -> dict:
    """
    Analyze an early-career background description

    Returns currentRole, 3-5 strengths, 4-5 careerPaths stages and
    3-5 recommendations, exactly as generated and validated.
    """
    return await service.analyze(data.input)
