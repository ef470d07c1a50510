from __future__ import annotations

import json

from fastapi import APIRouter, HTTPException, Request

from app.models.schemas import HeuristicResponse
from app.services.heuristic_scorer import score_fields

router = APIRouter(tags=["analyze"])


@router.post("/analyze", response_model=HeuristicResponse)
@router.post("/api/analyze", response_model=HeuristicResponse, include_in_schema=False)
async def analyze_fields(request: Request):
    """Score rich text fields with local heuristics only."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    fields = body.get("fields") if isinstance(body, dict) else None
    if not isinstance(fields, dict):
        raise HTTPException(status_code=400, detail="Missing required field: fields")

    # Non-string values are scored as empty fields.
    normalized = {str(k): v if isinstance(v, str) else "" for k, v in fields.items()}
    return score_fields(normalized)
