from __future__ import annotations

import re
import time
from typing import Any

import httpx
import openai

from app.errors import StageFailed
from app.llm_client import GatewayClientAdapter, MessageResponse
from app.services import logger as log_service

_API_MESSAGE = re.compile(r"\bAPI\b")


def is_api_fault(exc: BaseException) -> bool:
    """True when ``exc`` comes from the gateway/provider API layer."""
    if isinstance(exc, (openai.APIError, httpx.HTTPError)):
        return True
    return bool(_API_MESSAGE.search(str(exc)))


class BaseAgent:
    """Shared plumbing for agents that make gateway calls.

    Subclasses set ``name`` and ``failure`` (the StageFailed subclass raised
    when the gateway call itself fails).
    """

    name: str = "base"
    failure: type[StageFailed] = StageFailed
    max_tokens: int = 4096

    def __init__(self, model: str, *, client: GatewayClientAdapter):
        self.model = model
        self.client = client

    async def _create(self, system: str, messages: list[dict[str, Any]], **kwargs: Any) -> MessageResponse:
        t0 = time.monotonic()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=messages,
                **kwargs,
            )
        except Exception as exc:
            log_service.log_gateway_call(
                self.name,
                self.model,
                duration_ms=int((time.monotonic() - t0) * 1000),
                error=f"{type(exc).__name__}: {exc}",
            )
            raise self.failure(str(exc), api_fault=is_api_fault(exc)) from exc

        usage = response.usage
        log_service.log_gateway_call(
            self.name,
            self.model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return response
