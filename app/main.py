from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from loguru import logger

from app.api.routes import analyze, heuristic
from app.config import settings
from app.services import logger as log_service  # noqa: F401  configures sinks

INDEX_HTML = Path(__file__).resolve().parent / "static" / "index.html"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Content analyzer starting with backend={settings.analyzer_backend}")
    yield


app = FastAPI(
    title="Content Analyzer",
    description="Freshness, originality and SEO scoring for content",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.cors_origin_regex,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-ID"],
    max_age=86400,
)

# Routes
if settings.analyzer_backend.lower().strip() == "heuristic":
    app.include_router(heuristic.router)
else:
    app.include_router(analyze.router)


@app.get("/", response_class=HTMLResponse)
async def index():
    return HTMLResponse(
        INDEX_HTML.read_text(encoding="utf-8"),
        media_type="text/html; charset=utf-8",
    )


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "content-analyzer"}
