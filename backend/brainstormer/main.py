"""Idea Brainstormer API.

Run with ``python -m brainstormer.main`` from ``backend/`` or point uvicorn at
``brainstormer.main:app``.
"""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from . import models  # noqa: F401  registers tables on Base.metadata
from .database import Base, engine
from .routes.sessions import router as sessions_router
from .routes.validation import router as validation_router

load_dotenv()

SERVICE_NAME = "idea-brainstormer"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"


def _cors_origins():
    raw = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _debug_enabled() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    print(f"🧠 [STARTUP] Idea Brainstormer {__version__}")
    print(f"   functions: {os.getenv('FUNCTIONS_BASE_URL') or 'unset, remote calls degrade to local fallbacks'}")
    print(f"   policy:    {os.getenv('VALIDATION_POLICY', 'conjunction')}")
    yield
    print("🧠 [SHUTDOWN] Idea Brainstormer stopped")


app = FastAPI(
    title="Idea Brainstormer",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router)
app.include_router(validation_router)


@app.get("/", summary="API Root", tags=["General"])
async def root():
    return {
        "name": "Idea Brainstormer",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "sessions": "POST /sessions",
            "messages": "POST /sessions/{id}/messages",
            "validate": "POST /validate-idea",
            "starter": "GET /suggestions/starter",
            "health": "GET /health",
        },
    }


@app.get("/health", summary="Health Check", tags=["General"])
async def health():
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@app.exception_handler(Exception)
async def unhandled_error(request, exc):
    detail = str(exc) if _debug_enabled() else "An unexpected error occurred"
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "detail": detail},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "brainstormer.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=_debug_enabled(),
    )
