"""
Rule Catalog — Immutable registry of compliance rules.

Built once at startup and handed to the RuleEngine by reference. Catalog order
is authoring order and drives report order.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from app.core.rules import apple_app_store, chrome_web_store, google_play_store
from app.models.rule_models import ComplianceRule, Platform


class RuleCatalog:
    """Ordered, read-only collection of ComplianceRule."""

    def __init__(self, rules: Iterable[ComplianceRule]) -> None:
        rules = tuple(rules)
        index: dict[str, ComplianceRule] = {}
        for rule in rules:
            if rule.rule_id in index:
                raise ValueError(f"Duplicate rule id: {rule.rule_id}")
            index[rule.rule_id] = rule
        self._rules = rules
        self._index = index

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._index

    def list_rules(self) -> tuple[ComplianceRule, ...]:
        return self._rules

    def get(self, rule_id: str) -> ComplianceRule:
        if rule_id not in self._index:
            raise KeyError(f"Unknown rule: {rule_id}")
        return self._index[rule_id]

    def rules_for_platform(self, platform: Platform) -> tuple[ComplianceRule, ...]:
        """
        Rules that apply to ``platform``, in catalog order.

        An aggregate platform selects every rule tagged with one of its
        underlying platforms or with the aggregate itself. Since each rule
        appears once in the catalog, the union is already deduplicated.
        """
        if platform.is_aggregate:
            wanted = {platform, *platform.underlying()}
            return tuple(rule for rule in self._rules if rule.platform in wanted)
        return tuple(rule for rule in self._rules if rule.applies_to(platform))

    def platforms(self) -> list[Platform]:
        seen: list[Platform] = []
        for rule in self._rules:
            if rule.platform not in seen:
                seen.append(rule.platform)
        return seen


DEFAULT_RULES: tuple[ComplianceRule, ...] = (
    *apple_app_store.RULES,
    *google_play_store.RULES,
    *chrome_web_store.RULES,
)


@lru_cache
def build_default_catalog() -> RuleCatalog:
    """The bundled Apple / Google Play / Chrome catalog."""
    return RuleCatalog(DEFAULT_RULES)
