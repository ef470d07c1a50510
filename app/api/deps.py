from __future__ import annotations

from functools import lru_cache

from app.agents.orchestrator import ContentAnalyzer
from app.agents.research_agent import ResearchAgent
from app.agents.synthesis_agent import SynthesisAgent
from app.config import AnalyzerConfig, settings
from app.llm_client import GatewayClientAdapter, get_client


@lru_cache(maxsize=1)
def get_analyzer_config() -> AnalyzerConfig:
    return AnalyzerConfig.from_settings(settings)


@lru_cache(maxsize=4)
def get_gateway_client(config: AnalyzerConfig) -> GatewayClientAdapter:
    return get_client(api_key=config.gateway_api_key, base_url=config.gateway_base_url)


def get_content_analyzer() -> ContentAnalyzer:
    """Build a per-request analyzer from the process configuration.

    The gateway client is built from the same config the analyzer checks;
    with incomplete config, requests stop before the client is used.
    """
    config = get_analyzer_config()
    gateway = get_gateway_client(config)
    return ContentAnalyzer(
        config,
        researcher=ResearchAgent(
            config.research_model,
            max_steps=config.research_max_steps,
            max_results=config.search_max_results,
            time_range=config.search_time_range,
            client=gateway,
        ),
        synthesizer=SynthesisAgent(
            config.synthesis_model,
            max_content_chars=config.synthesis_max_content_chars,
            client=gateway,
        ),
    )
