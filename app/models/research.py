from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ToolResult:
    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = field(default_factory=dict)
    # Raw provider payload; shape is not guaranteed.
    output: Any = None
    is_error: bool = False


@dataclass(slots=True)
class ResearchStep:
    """One reasoning round of a research session."""

    index: int
    text: str = ""
    tool_results: list[ToolResult] = field(default_factory=list)


@dataclass(slots=True)
class ResearchOutcome:
    narrative: str
    steps: list[ResearchStep] = field(default_factory=list)
    # True when the round cap was hit while the model still wanted tools.
    truncated: bool = False
