"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_llm_gateway
from app.config import settings
from app.llm.gateway import LLMGateway

router = APIRouter()


@router.get("/health")
async def health(gateway: LLMGateway = Depends(get_llm_gateway)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "validation_model": settings.validation_model,
        "augmentation_model": settings.augmentation_model,
        "tokens_used": gateway.get_tokens_used(),
        "version": "1.0.0",
        "engine": "deterministic-first",
    }
