from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # AI gateway (OpenAI-compatible)
    ai_gateway_api_key: str = ""
    ai_gateway_base_url: str = "https://ai-gateway.vercel.sh/v1"
    research_model: str = "openai/gpt-4o-mini"
    synthesis_model: str = "openai/gpt-4o-mini"

    # Shared secret callers pass as ?secret=...
    agent_secret: str = ""

    # Tavily
    tavily_api_key: str = ""

    # Research / synthesis bounds
    research_max_steps: int = 5
    search_max_results: int = 5
    search_time_range: str = "year"  # day | week | month | year
    synthesis_max_content_chars: int = 6000

    # Deployment variant for /analyze
    analyzer_backend: str = "llm"  # llm | heuristic

    # App
    cors_origin_regex: str = r"^https://[\w-]+\.vercel\.app$"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@dataclass(frozen=True)
class AnalyzerConfig:
    """Immutable per-process configuration handed to the content analyzer."""

    gateway_api_key: str
    agent_secret: str
    gateway_base_url: str = "https://ai-gateway.vercel.sh/v1"
    research_model: str = "openai/gpt-4o-mini"
    synthesis_model: str = "openai/gpt-4o-mini"
    research_max_steps: int = 5
    search_max_results: int = 5
    search_time_range: str = "year"
    synthesis_max_content_chars: int = 6000

    @classmethod
    def from_settings(cls, source: Settings) -> "AnalyzerConfig":
        return cls(
            gateway_api_key=source.ai_gateway_api_key.strip(),
            agent_secret=source.agent_secret.strip(),
            gateway_base_url=source.ai_gateway_base_url.strip(),
            research_model=source.research_model,
            synthesis_model=source.synthesis_model,
            research_max_steps=max(int(source.research_max_steps), 1),
            search_max_results=max(int(source.search_max_results), 1),
            search_time_range=source.search_time_range.lower().strip(),
            synthesis_max_content_chars=max(int(source.synthesis_max_content_chars), 1),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.gateway_api_key) and bool(self.agent_secret)


settings = Settings()
