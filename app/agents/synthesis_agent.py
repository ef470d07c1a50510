from __future__ import annotations

import json
from typing import Any

from app.agents.base import BaseAgent
from app.errors import SchemaViolation, SynthesisFailed
from app.llm_client import GatewayClientAdapter
from app.models.schemas import ANALYSIS_JSON_SCHEMA
from app.services.prompt_store import get_prompt, render_prompt

TRUNCATION_MARKER = "[Content truncated]"


def truncate_content(content: str, max_chars: int) -> tuple[str, bool]:
    if len(content) <= max_chars:
        return content, False
    return f"{content[:max_chars]}\n\n{TRUNCATION_MARKER}", True


def build_synthesis_prompt(
    narrative: str,
    sources: list[str],
    content: str,
    *,
    max_content_chars: int,
) -> str:
    """Assemble the synthesis user prompt.

    The source list is included only when non-empty, in extraction order.
    """
    excerpt, _ = truncate_content(content, max_content_chars)
    sources_section = ""
    if sources:
        sources_section = render_prompt(
            "synthesis.sources_section",
            source_lines="\n".join(f"- {url}" for url in sources),
        )
    return render_prompt(
        "synthesis.user_prompt",
        narrative=narrative.strip() or "No research findings were produced.",
        sources_section=sources_section,
        content=excerpt,
    )


class SynthesisAgent(BaseAgent):
    """Turns research findings into a schema-constrained score and suggestions."""

    name = "synthesis"
    failure = SynthesisFailed

    def __init__(
        self,
        model: str,
        *,
        client: GatewayClientAdapter,
        max_content_chars: int = 6000,
    ):
        super().__init__(model, client=client)
        self.max_content_chars = max_content_chars

    async def run(self, narrative: str, sources: list[str], content: str) -> dict[str, Any]:
        prompt = build_synthesis_prompt(
            narrative,
            sources,
            content,
            max_content_chars=self.max_content_chars,
        )
        response = await self._create(
            get_prompt("synthesis.system_prompt"),
            [{"role": "user", "content": prompt}],
            json_schema=ANALYSIS_JSON_SCHEMA,
            schema_name="content_analysis",
        )
        raw_text = response.text.strip()
        try:
            parsed = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise SchemaViolation("<root>", "synthesis output is not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise SchemaViolation("<root>", f"expected an object, got {type(parsed).__name__}")
        return parsed
