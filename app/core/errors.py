"""
Error taxonomy for the compliance pipeline.

Every error except OrchestrationError is recovered at the boundary where it
occurs; see the module that raises each one for the degraded result it maps to.
"""

from __future__ import annotations


class ComplianceError(Exception):
    """Base class for all StoreCheck errors."""


class RuleEvaluationError(ComplianceError):
    """A single rule predicate raised. Logged; the rule counts as not violated."""

    def __init__(self, rule_id: str, cause: Exception) -> None:
        super().__init__(f"Rule '{rule_id}' failed: {type(cause).__name__}: {cause}")
        self.rule_id = rule_id


class ContentParseError(ComplianceError):
    """A structured repository file could not be parsed. Degrades to absent."""


class AIParseError(ComplianceError):
    """The AI response contained no extractable JSON object."""


class AIServiceError(ComplianceError):
    """Network, timeout or model failure talking to the AI generation service."""


class FileFetchError(ComplianceError):
    """A single file could not be fetched. Recorded as absent, never escalated."""


class FileFetchUnavailable(ComplianceError):
    """The file-fetch service itself is unreachable. Fatal for the run."""


class OrchestrationError(ComplianceError):
    """Uncaught failure of a check run. Moves the run to FAILED and propagates."""

    def __init__(self, check_run_id: str, message: str) -> None:
        super().__init__(message)
        self.check_run_id = check_run_id
