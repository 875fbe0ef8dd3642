import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patronage.api.deps import get_settings
from patronage.api.errors import register_exception_handlers
from patronage.app_shell.config import validate_ops_rules
from patronage.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Patronage API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

# --- Routers ---
from patronage.api.routes import (  # noqa: E402
    collections,
    comments,
    commerce,
    feed,
    posts,
    social,
    tiers,
)

app.include_router(feed.router, prefix="/api/content", tags=["Feed"])
app.include_router(posts.router, prefix="/api/content", tags=["Posts"])
app.include_router(collections.router, prefix="/api/content", tags=["Collections"])
app.include_router(tiers.router, prefix="/api/content", tags=["Tiers"])
app.include_router(commerce.router, prefix="/api/content", tags=["Commerce"])
app.include_router(comments.router, prefix="/api/content", tags=["Comments"])
app.include_router(social.router, prefix="/api/content", tags=["Social"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
