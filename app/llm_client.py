"""AI gateway client factory with an Anthropic-style message adapter.

The gateway speaks the OpenAI chat completions protocol. Agents build
messages as content blocks (``text`` / ``tool_use`` / ``tool_result``) and the
adapter maps them to and from the OpenAI wire format.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

DEFAULT_BASE_URL = "https://ai-gateway.vercel.sh/v1"


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class TextBlock:
    type: str
    text: str


@dataclass
class ToolUseBlock:
    type: str
    id: str
    name: str
    input: dict[str, Any]


@dataclass
class MessageResponse:
    content: list[Any]
    usage: Usage

    @property
    def text(self) -> str:
        return "\n".join(b.text for b in self.content if b.type == "text")

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if b.type == "tool_use"]


def _block_field(block: Any, name: str) -> Any:
    if isinstance(block, dict):
        return block.get(name)
    return getattr(block, name, None)


class GatewayMessagesAdapter:
    def __init__(self, openai_client: Any):
        self._client = openai_client

    @staticmethod
    def _temperature_for_model(model: str) -> int:
        # Some GPT-5-compatible gateways reject temperature=0.
        lowered = (model or "").lower()
        if "gpt-5" in lowered:
            return 1
        return 0

    def _to_openai_messages(self, system: str, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        openai_messages: list[dict[str, Any]] = [{"role": "system", "content": system}]

        for message in messages:
            role = message["role"]
            content = message["content"]

            if isinstance(content, str):
                openai_messages.append({"role": role, "content": content})
                continue

            if role == "assistant" and isinstance(content, list):
                text_parts: list[str] = []
                tool_calls: list[dict[str, Any]] = []
                for block in content:
                    btype = _block_field(block, "type")
                    if btype == "text":
                        text_value = _block_field(block, "text")
                        if text_value:
                            text_parts.append(text_value)
                    elif btype == "tool_use":
                        tool_calls.append(
                            {
                                "id": _block_field(block, "id"),
                                "type": "function",
                                "function": {
                                    "name": _block_field(block, "name"),
                                    "arguments": json.dumps(_block_field(block, "input") or {}),
                                },
                            }
                        )
                msg: dict[str, Any] = {"role": "assistant"}
                msg["content"] = "\n".join(text_parts) if text_parts else None
                if tool_calls:
                    msg["tool_calls"] = tool_calls
                openai_messages.append(msg)
                continue

            if role == "user" and isinstance(content, list):
                for tool_result in content:
                    if tool_result.get("type") != "tool_result":
                        continue
                    tool_content = str(tool_result.get("content", ""))
                    if tool_result.get("is_error"):
                        tool_content = f"ERROR: {tool_content}"
                    openai_messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": tool_result.get("tool_use_id", ""),
                            "content": tool_content,
                        }
                    )
                continue

            openai_messages.append({"role": role, "content": str(content)})

        return openai_messages

    def _to_openai_tools(self, tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": t["name"],
                    "description": t.get("description", ""),
                    "parameters": t.get("input_schema", {"type": "object", "properties": {}}),
                },
            }
            for t in tools
        ]

    def _from_openai_response(self, response: Any) -> MessageResponse:
        choice = response.choices[0].message
        content: list[Any] = []

        text = getattr(choice, "content", None)
        if text:
            content.append(TextBlock(type="text", text=text))

        for tc in getattr(choice, "tool_calls", []) or []:
            args = getattr(tc.function, "arguments", "{}") or "{}"
            try:
                parsed_args = json.loads(args)
            except json.JSONDecodeError:
                parsed_args = {}
            if not isinstance(parsed_args, dict):
                parsed_args = {}
            content.append(
                ToolUseBlock(
                    type="tool_use",
                    id=tc.id,
                    name=tc.function.name,
                    input=parsed_args,
                )
            )

        usage = getattr(response, "usage", None)
        mapped_usage = Usage(
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )

        return MessageResponse(content=content, usage=mapped_usage)

    async def create(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        json_schema: dict[str, Any] | None = None,
        schema_name: str = "result",
    ) -> MessageResponse:
        """Run one chat completion.

        With ``json_schema`` the gateway is asked for strict structured output
        and the JSON text comes back as a single text block.
        """
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": self._to_openai_messages(system, messages),
            "max_tokens": max_tokens,
            "temperature": self._temperature_for_model(model),
        }
        if tools:
            kwargs["tools"] = self._to_openai_tools(tools)
            kwargs["tool_choice"] = "auto"
        if json_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": json_schema, "strict": True},
            }

        response = await self._client.chat.completions.create(**kwargs)
        return self._from_openai_response(response)


class GatewayClientAdapter:
    def __init__(self, openai_client: Any):
        self.messages = GatewayMessagesAdapter(openai_client)


def get_client(api_key: str, base_url: str) -> GatewayClientAdapter:
    """Get an AI gateway client via the OpenAI-compatible SDK."""
    from openai import AsyncOpenAI

    openai_client = AsyncOpenAI(
        api_key=api_key,
        base_url=base_url.strip() or DEFAULT_BASE_URL,
    )
    return GatewayClientAdapter(openai_client)
