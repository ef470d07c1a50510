"""Centralized logging service using loguru.

Every record carries a ``request_id`` extra. Inside ``request_scope`` it is
the id of the analysis request being served; elsewhere it is ``-``.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from uuid import uuid4

from loguru import logger

from app.config import settings

LOG_DIR = Path("logs")

logger.remove()
logger.configure(extra={"request_id": "-"})

logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <magenta>{extra[request_id]}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.app_log_level.upper(),
    colorize=True,
)

if settings.log_to_file:
    LOG_DIR.mkdir(exist_ok=True)
    logger.add(
        LOG_DIR / "content_analyzer_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "openai._base_client",
    "asyncio",
):
    logging.getLogger(logger_name).setLevel(settings.noisy_log_level.upper())


def new_request_id() -> str:
    return uuid4().hex[:12]


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Tag every record logged inside the block with one request id."""
    request_id = request_id or new_request_id()
    with logger.contextualize(request_id=request_id):
        yield request_id


def log_gateway_call(
    stage: str,
    model: str,
    *,
    input_tokens: int = 0,
    output_tokens: int = 0,
    duration_ms: int = 0,
    error: Optional[str] = None,
) -> None:
    """Log one AI gateway round trip made by an analysis stage."""
    details = {
        "stage": stage,
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "duration_ms": duration_ms,
    }
    bound = logger.bind(event="gateway_call", **details)
    if error:
        bound.bind(error=error).error(f"GATEWAY_CALL_FAILED {stage} via {model} after {duration_ms}ms: {error}")
    else:
        bound.info(
            f"GATEWAY_CALL {stage} via {model}: {input_tokens} in / {output_tokens} out, {duration_ms}ms"
        )


def log_analysis_event(event: str, message: str, **details) -> None:
    """Log a milestone of an analysis request; ``details`` land in the record extras."""
    summary = " ".join(f"{key}={value}" for key, value in details.items())
    logger.bind(event=event, **details).info(f"ANALYSIS {event}: {message}" + (f" ({summary})" if summary else ""))
