"""FastAPI application entry point."""

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from constitution_chat.db.database import close_database, init_database
from constitution_chat.llm.chat.manager import init_session_manager, shutdown_session_manager
from constitution_chat.llm.gemini_client import gemini_available

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown."""
    # Startup
    db_path = os.getenv("DATABASE_PATH", "./data/constitution_chat.db")
    await init_database(db_path)

    if not gemini_available():
        logger.warning("GOOGLE_API_KEY is not set; chat requests will fail until it is")

    # Start chat session manager
    await init_session_manager()

    yield

    # Shutdown
    await shutdown_session_manager()

    await close_database()


app = FastAPI(
    title="Constitutional Law Assistant",
    description="Ask questions about the Indian Constitution and keep a bookmarked transcript of each conversation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow any localhost port for local app development
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^http://localhost(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers after app is created to avoid circular imports
from constitution_chat.api import chat  # noqa: E402

app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
