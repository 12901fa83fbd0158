"""
StoreCheck FastAPI Application.

App-store compliance checker for repositories:
  POST /checks           → analyze a GitHub repository (background run)
  POST /checks/evaluate  → deterministic check of supplied files
  GET  /checks           → recent check runs
  GET  /checks/events    → check run event log
  GET  /checks/{id}      → check run status and issues
  GET  /rules            → rule catalog
  GET  /health           → {"status": "ok", "tokens_used": ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.dependencies import get_file_fetcher, get_pipeline
from app.api.routes.checks import router as checks_router
from app.api.routes.health import router as health_router
from app.api.routes.rules import router as rules_router
from app.config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("storecheck")


@asynccontextmanager
async def lifespan(app):
    """Close the shared GitHub client on shutdown."""
    yield
    if get_file_fetcher.cache_info().currsize:
        await get_file_fetcher().aclose()
        get_pipeline.cache_clear()
        get_file_fetcher.cache_clear()
        logger.info("GitHub client closed")


app = FastAPI(
    title="StoreCheck",
    description="App-store compliance analysis: deterministic rules + AI augmentation",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(rules_router)
app.include_router(checks_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": body.decode("utf-8")[:100]},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
