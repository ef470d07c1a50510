from __future__ import annotations

import math
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

from app.errors import SchemaViolation


# --- Analysis result contract ---


class Suggestion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: StrictStr
    impact: Literal["high", "medium", "low"]
    recommendation: StrictStr


class AnalysisResult(BaseModel):
    """What the synthesis step must produce."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    content_score: Union[StrictInt, StrictFloat] = Field(alias="contentScore")
    suggestions: list[Suggestion]

    @field_validator("content_score")
    @classmethod
    def _score_in_range(cls, value: int | float) -> int | float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        if value < 0 or value > 100:
            raise ValueError("must be between 0 and 100")
        return value


class AnalysisResponse(AnalysisResult):
    sources: list[str] = Field(default_factory=list)


# Handed to the schema-constrained generation call. Kept in step with
# AnalysisResult; strict json_schema mode needs every key required and
# additionalProperties disabled.
ANALYSIS_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "contentScore": {
            "type": "number",
            "minimum": 0,
            "maximum": 100,
            "description": "Overall score from 0 (stale, derivative, poorly structured) to 100.",
        },
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "impact": {"type": "string", "enum": ["high", "medium", "low"]},
                    "recommendation": {"type": "string"},
                },
                "required": ["title", "impact", "recommendation"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["contentScore", "suggestions"],
    "additionalProperties": False,
}


def validate_analysis(candidate: Any) -> AnalysisResult:
    """Verify ``candidate`` against the analysis contract.

    Out-of-range scores are violations; nothing is clamped here.
    Raises SchemaViolation naming the first offending field.
    """
    if isinstance(candidate, AnalysisResult):
        candidate = candidate.model_dump(by_alias=True)
    if not isinstance(candidate, dict):
        raise SchemaViolation("<root>", f"expected an object, got {type(candidate).__name__}")
    try:
        return AnalysisResult.model_validate(candidate)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise SchemaViolation(field, first.get("msg", "invalid value")) from exc


# --- Heuristic scorer ---


class HeuristicIssue(BaseModel):
    type: str
    message: str
    severity: Literal["low", "medium", "high"]


class FieldSuggestion(BaseModel):
    field: str
    original: str
    suggested: str
    reason: str


class HeuristicResponse(BaseModel):
    score: int
    issues: list[HeuristicIssue]
    suggestions: list[FieldSuggestion]
