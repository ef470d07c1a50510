from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tavily import AsyncTavilyClient

from app.config import settings


@dataclass
class SearchResult:
    title: str
    url: str
    content: str
    score: float


async def search(
    query: str,
    *,
    max_results: int = 5,
    time_range: str | None = None,
    search_depth: str = "basic",
    topic: str = "general",
) -> dict[str, Any]:
    """Execute a Tavily web search and return the raw response payload.

    The payload is passed on untouched; callers that need typed results go
    through ``results_from_payload``.
    """
    client = AsyncTavilyClient(api_key=settings.tavily_api_key)

    kwargs: dict[str, Any] = {
        "query": query,
        "search_depth": search_depth,
        "max_results": max_results,
        "topic": topic,
    }
    if time_range:
        kwargs["time_range"] = time_range

    return await client.search(**kwargs)


def results_from_payload(payload: Any) -> list[SearchResult]:
    """Best-effort typed view of a search payload; malformed entries are dropped."""
    raw_results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(raw_results, list):
        return []
    mapped: list[SearchResult] = []
    for r in raw_results:
        if not isinstance(r, dict) or not isinstance(r.get("url"), str):
            continue
        score = r.get("score")
        mapped.append(
            SearchResult(
                title=str(r.get("title") or ""),
                url=r["url"],
                content=str(r.get("content") or ""),
                score=float(score) if isinstance(score, (int, float)) else 0.0,
            )
        )
    return mapped
