from __future__ import annotations

import hmac
import time
from typing import Any, Protocol

from loguru import logger

from app.agents.research_agent import describe_steps
from app.config import AnalyzerConfig
from app.errors import (
    ConfigurationMissing,
    ExternalServiceUnavailable,
    Internal,
    InvalidInput,
    SchemaViolation,
    StageFailed,
    Unauthorized,
)
from app.models.research import ResearchOutcome
from app.models.schemas import AnalysisResponse, validate_analysis
from app.services import logger as log_service
from app.services.evidence import extract_source_urls


class Researcher(Protocol):
    async def run(self, content: str) -> ResearchOutcome: ...


class Synthesizer(Protocol):
    async def run(self, narrative: str, sources: list[str], content: str) -> dict[str, Any]: ...


class ContentAnalyzer:
    """Runs one analysis request end to end.

    Flow:
      1. Check configuration, then the caller's credential
      2. Validate the request body
      3. Research the content (bounded tool-use session)
      4. Extract source URLs from the research tool results
      5. Synthesize a schema-constrained score and suggestions
      6. Validate the synthesized result before returning it

    Each request is handled sequentially; nothing is shared between requests
    except the immutable ``config``.
    """

    def __init__(self, config: AnalyzerConfig, researcher: Researcher, synthesizer: Synthesizer):
        self.config = config
        self.researcher = researcher
        self.synthesizer = synthesizer

    def authorize(self, credential: str | None) -> None:
        if not self.config.is_complete:
            missing = [
                name
                for name, value in (
                    ("AI_GATEWAY_API_KEY", self.config.gateway_api_key),
                    ("AGENT_SECRET", self.config.agent_secret),
                )
                if not value
            ]
            logger.error(f"Analyzer misconfigured, missing: {', '.join(missing)}")
            raise ConfigurationMissing()
        if not isinstance(credential, str) or not credential:
            raise Unauthorized()
        if not hmac.compare_digest(credential.encode("utf-8"), self.config.agent_secret.encode("utf-8")):
            raise Unauthorized()

    @staticmethod
    def parse_content(body: Any) -> str:
        if not isinstance(body, dict):
            raise InvalidInput()
        content = body.get("content")
        if not isinstance(content, str):
            raise InvalidInput()
        content = content.strip()
        if not content:
            raise InvalidInput("Content must not be empty")
        return content

    async def analyze(self, body: Any, credential: str | None) -> AnalysisResponse:
        self.authorize(credential)
        content = self.parse_content(body)

        t0 = time.monotonic()
        try:
            research = await self.researcher.run(content)
            sources = extract_source_urls(research.steps)
            log_service.log_analysis_event(
                "research_complete",
                "Research finished",
                steps=len(research.steps),
                sources=len(sources),
                truncated=research.truncated,
                tools=describe_steps(research.steps),
            )
            candidate = await self.synthesizer.run(research.narrative, sources, content)
            result = validate_analysis(candidate)
        except StageFailed as exc:
            logger.error(f"{exc.stage} failed (api_fault={exc.api_fault}): {exc}")
            if exc.api_fault:
                raise ExternalServiceUnavailable() from exc
            raise Internal() from exc
        except SchemaViolation as exc:
            logger.error(f"Synthesis result rejected: {exc}")
            raise
        except Exception as exc:
            logger.exception(f"Unexpected analysis failure: {type(exc).__name__}")
            raise Internal() from exc

        log_service.log_analysis_event(
            "analysis_complete",
            "Analysis complete",
            content_score=result.content_score,
            suggestions=len(result.suggestions),
            runtime_ms=int((time.monotonic() - t0) * 1000),
        )
        return AnalysisResponse(
            content_score=result.content_score,
            suggestions=result.suggestions,
            sources=sources,
        )
