"""Deterministic content scorer that needs no external calls.

Scores a set of named text fields by subtracting fixed penalties from 100 for
empty fields, short content, vague link text and heavy passive voice.
"""
from __future__ import annotations

import re

from app.models.schemas import FieldSuggestion, HeuristicIssue, HeuristicResponse

MIN_WORDS = 50
SUGGESTION_MIN_WORDS = 20
PASSIVE_LIMIT = 3
EXCERPT_CHARS = 60

PENALTY_EMPTY = 15
PENALTY_SHORT = 10
PENALTY_VAGUE_CTA = 5
PENALTY_PASSIVE = 5

_PASSIVE = re.compile(r"\b(was|were|been|being|is|are)\s+\w+ed\b", re.IGNORECASE)
_SENTENCE_END = re.compile(r"[.!?]")


def _excerpt(text: str) -> str:
    return text[:EXCERPT_CHARS] + ("..." if len(text) > EXCERPT_CHARS else "")


def score_fields(fields: dict[str, str]) -> HeuristicResponse:
    if not fields:
        return HeuristicResponse(
            score=0,
            issues=[
                HeuristicIssue(
                    type="no-content",
                    message="No Rich Text fields found to analyze",
                    severity="high",
                )
            ],
            suggestions=[],
        )

    issues: list[HeuristicIssue] = []
    suggestions: list[FieldSuggestion] = []
    score = 100

    for field_id, content in fields.items():
        if not content or not content.strip():
            issues.append(
                HeuristicIssue(type="empty-field", message=f'Field "{field_id}" is empty', severity="medium")
            )
            score -= PENALTY_EMPTY
            continue

        word_count = len(content.split())

        if word_count < MIN_WORDS:
            issues.append(
                HeuristicIssue(
                    type="short-content",
                    message=f'Field "{field_id}" has only {word_count} words. Consider adding more detail.',
                    severity="medium",
                )
            )
            score -= PENALTY_SHORT

        if "click here" in content.lower():
            issues.append(
                HeuristicIssue(
                    type="vague-cta",
                    message=f'Field "{field_id}": Avoid vague link text like "click here"',
                    severity="low",
                )
            )
            score -= PENALTY_VAGUE_CTA

        if len(_PASSIVE.findall(content)) > PASSIVE_LIMIT:
            issues.append(
                HeuristicIssue(
                    type="passive-voice",
                    message=f'Field "{field_id}": Consider using more active voice',
                    severity="low",
                )
            )
            score -= PENALTY_PASSIVE

        if word_count >= SUGGESTION_MIN_WORDS:
            first_sentence = _SENTENCE_END.split(content, maxsplit=1)[0]
            if len(first_sentence) > 10:
                suggestions.append(
                    FieldSuggestion(
                        field=field_id,
                        original=_excerpt(first_sentence),
                        suggested=f"**Key Point:** {first_sentence[:EXCERPT_CHARS]}...",
                        reason="Adding emphasis to opening statements improves engagement",
                    )
                )

    return HeuristicResponse(score=max(0, min(100, score)), issues=issues, suggestions=suggestions)
