from __future__ import annotations

import json
from datetime import date
from typing import Any, Awaitable, Callable

from loguru import logger

from app.agents.base import BaseAgent
from app.errors import ResearchFailed
from app.llm_client import GatewayClientAdapter
from app.models.research import ResearchOutcome, ResearchStep, ToolResult
from app.services.prompt_store import render_prompt
from app.tools import tavily_search

SearchFn = Callable[..., Awaitable[Any]]


class ResearchAgent(BaseAgent):
    """Bounded tool-use loop that researches content freshness and novelty.

    The model decides when to stop searching. The loop only enforces the
    round cap and returns whatever it has when the cap is reached.
    """

    name = "research"
    failure = ResearchFailed
    tools = [
        {
            "name": "web_search",
            "description": (
                "Search the web for recent information. Use specific, targeted queries. "
                "Call it several times to check different claims or find competing content."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query. Be specific and targeted.",
                    },
                },
                "required": ["query"],
            },
        }
    ]

    def __init__(
        self,
        model: str,
        *,
        client: GatewayClientAdapter,
        max_steps: int = 5,
        max_results: int = 5,
        time_range: str | None = "year",
        search: SearchFn | None = None,
    ):
        super().__init__(model, client=client)
        self.max_steps = max(max_steps, 1)
        self.max_results = max_results
        self.time_range = time_range or None
        self.search = search or tavily_search.search

    @property
    def system_prompt(self) -> str:
        today = date.today()
        return render_prompt(
            "research.system_prompt",
            today_iso=today.isoformat(),
            today_year=today.year,
        )

    async def handle_tool_call(self, tool_name: str, tool_input: dict[str, Any]) -> tuple[str, Any]:
        """Execute a tool call and return (text_for_model, raw_payload)."""
        if tool_name != "web_search":
            raise NotImplementedError(f"Unknown tool: {tool_name}")

        query = tool_input.get("query")
        if not isinstance(query, str) or not query.strip():
            raise ValueError("web_search requires a non-empty 'query'")

        payload = await self.search(
            query.strip(),
            max_results=self.max_results,
            time_range=self.time_range,
        )
        results = tavily_search.results_from_payload(payload)
        logger.debug(f"web_search '{query[:80]}' returned {len(results)} results")
        return (
            f"Found {len(results)} results for '{query}':\n"
            + "\n".join(f"- [{r.title}]({r.url}): {r.content[:300]}" for r in results),
            payload,
        )

    async def _run_tools(self, step: ResearchStep, tool_uses: list[Any]) -> list[dict[str, Any]]:
        tool_results: list[dict[str, Any]] = []
        for block in tool_uses:
            try:
                result_text, payload = await self.handle_tool_call(block.name, block.input)
            except Exception as e:
                # A failed search is reported back to the model; the session goes on.
                logger.warning(f"Tool {block.name} failed in step {step.index}: {type(e).__name__}: {e}")
                step.tool_results.append(
                    ToolResult(
                        tool_call_id=block.id,
                        tool_name=block.name,
                        args=block.input,
                        output={"error": str(e)},
                        is_error=True,
                    )
                )
                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": block.id,
                    "content": "Search failed.",
                    "is_error": True,
                })
                continue

            step.tool_results.append(
                ToolResult(
                    tool_call_id=block.id,
                    tool_name=block.name,
                    args=block.input,
                    output=payload,
                )
            )
            tool_results.append({
                "type": "tool_result",
                "tool_use_id": block.id,
                "content": result_text,
            })
        return tool_results

    async def run(self, content: str) -> ResearchOutcome:
        """Research ``content`` and return the narrative plus every step taken.

        Raises ResearchFailed if a gateway call fails.
        """
        system = self.system_prompt
        messages: list[dict[str, Any]] = [
            {"role": "user", "content": render_prompt("research.user_prompt", content=content)}
        ]
        steps: list[ResearchStep] = []

        for index in range(self.max_steps):
            response = await self._create(system, messages, tools=self.tools)
            step = ResearchStep(index=index, text=response.text)
            steps.append(step)

            tool_uses = response.tool_uses
            if not tool_uses:
                return ResearchOutcome(narrative=_narrative(steps), steps=steps)

            messages.append({"role": "assistant", "content": response.content})
            messages.append({"role": "user", "content": await self._run_tools(step, tool_uses)})

        logger.info(f"Research stopped at the {self.max_steps}-step cap")
        return ResearchOutcome(narrative=_narrative(steps), steps=steps, truncated=True)


def _narrative(steps: list[ResearchStep]) -> str:
    return "\n\n".join(step.text.strip() for step in steps if step.text.strip())


def describe_steps(steps: list[ResearchStep]) -> str:
    """Compact JSON summary of a session's tool activity, for logs."""
    return json.dumps(
        [
            {
                "step": step.index,
                "tools": [
                    {"name": r.tool_name, "query": r.args.get("query"), "error": r.is_error}
                    for r in step.tool_results
                ],
            }
            for step in steps
        ]
    )
