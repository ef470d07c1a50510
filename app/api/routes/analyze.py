from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.agents.orchestrator import ContentAnalyzer
from app.api.deps import get_content_analyzer
from app.errors import AnalyzerError
from app.models.schemas import AnalysisResponse
from app.services import logger as log_service

router = APIRouter(tags=["analyze"])

REQUEST_ID_HEADER = "X-Request-ID"


@router.post("/analyze", response_model=AnalysisResponse)
@router.post("/api/analyze", response_model=AnalysisResponse, include_in_schema=False)
async def analyze_content(
    request: Request,
    response: Response,
    secret: str | None = None,
    analyzer: ContentAnalyzer = Depends(get_content_analyzer),
):
    """Score content for freshness, originality and SEO quality."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    with log_service.request_scope() as request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
        try:
            return await analyzer.analyze(body, secret)
        except AnalyzerError as exc:
            log_service.log_analysis_event(
                "analyze_rejected",
                exc.public_message,
                status_code=exc.status_code,
                error=type(exc).__name__,
            )
            raise HTTPException(
                status_code=exc.status_code,
                detail=exc.public_message,
                headers={REQUEST_ID_HEADER: request_id},
            ) from exc
