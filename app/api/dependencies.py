"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from app.core.catalog import RuleCatalog, build_default_catalog
from app.core.rule_engine import RuleEngine
from app.engine.pipeline import CompliancePipeline
from app.llm.gateway import LLMGateway
from app.services.github_fetcher import GitHubFileFetcher
from app.storage.check_runs import JsonlCheckRunStore


def get_catalog() -> RuleCatalog:
    """Rule catalog (built once, cached by the catalog module)."""
    return build_default_catalog()


@lru_cache
def get_rule_engine() -> RuleEngine:
    return RuleEngine(get_catalog())


@lru_cache
def get_check_run_store() -> JsonlCheckRunStore:
    """Shared check run store singleton."""
    return JsonlCheckRunStore()


@lru_cache
def get_llm_gateway() -> LLMGateway:
    """Shared LLM gateway singleton."""
    return LLMGateway()


@lru_cache
def get_file_fetcher() -> GitHubFileFetcher:
    return GitHubFileFetcher()


@lru_cache
def get_pipeline() -> CompliancePipeline:
    """Shared compliance pipeline singleton."""
    return CompliancePipeline(
        fetcher=get_file_fetcher(),
        store=get_check_run_store(),
        generator=get_llm_gateway(),
        catalog=get_catalog(),
    )
