"""
Rules Route — GET /rules

Lists the compliance rule catalog, optionally narrowed to one platform.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_catalog
from app.core.catalog import RuleCatalog
from app.models.rule_models import Platform, RuleSummary

router = APIRouter()


@router.get("/rules", response_model=list[RuleSummary])
async def list_rules(
    platform: Platform | None = None,
    catalog: RuleCatalog = Depends(get_catalog),
):
    """
    Catalog listing in authoring order.

    With ``platform`` set, only the rules evaluated for that platform are
    returned; MOBILE_PLATFORMS includes Apple and Google rules.
    """
    rules = catalog.rules_for_platform(platform) if platform else catalog.list_rules()
    return [RuleSummary.from_rule(rule) for rule in rules]
