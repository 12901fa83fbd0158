"""
Prompt Builder — Prompts for content validation and issue augmentation.

Both prompts ask for a bare JSON object. Responses are scraped with
``extract_json_object``, so the model is never trusted to follow the format.
"""

from __future__ import annotations

from typing import Literal

from app.models.issue_models import ComplianceIssue
from app.models.rule_models import Platform

ContentType = Literal["privacy_policy", "manifest", "readme", "config"]


VALIDATION_CRITERIA: dict[str, str] = {
    "privacy_policy": """\
Analyze this privacy policy for {platform} compliance. Check for:
- Specific data collection practices (not generic templates)
- Clear explanation of data usage
- Contact information for privacy inquiries
- Compliance with platform-specific requirements
- Legitimate, non-placeholder content""",
    "manifest": """\
Analyze this manifest file for {platform} compliance. Check for:
- Proper permission declarations with justification
- Correct configuration values (not defaults/placeholders)
- Required fields are properly filled
- Security configurations are appropriate""",
    "readme": """\
Analyze this README for {platform} app store compliance. Check for:
- Clear app description (not template text)
- Proper feature documentation
- Contact/support information
- Privacy policy links
- Legitimate project information (not placeholder)""",
    "config": """\
Analyze this configuration file for {platform} compliance. Check for:
- Proper security settings
- Non-default/placeholder values
- Required configurations are present
- Best practices are followed""",
}

VALIDATION_RESPONSE_FORMAT = """\
Respond ONLY with valid JSON:
{
  "isValid": boolean,
  "issues": ["specific problems found"],
  "suggestions": ["specific improvements needed"]
}"""

AUGMENTATION_TASKS = """\
Tasks:
1. Validate if the file content is legitimate and compliant (not just placeholder/fake content)
2. Identify exact line numbers where this rule is violated or where a fix should be added
3. Provide specific, actionable code fixes

For content validation, check for:
- Placeholder text (e.g., "Lorem ipsum", "TODO", "Coming soon", "Your app name here")
- Generic/template content that hasn't been customized
- Missing required information for the compliance rule
- Fake or insufficient privacy policy content
- Incomplete or non-functional configuration

Respond ONLY with valid JSON:
{
  "isLegitimate": boolean,
  "contentIssues": ["list of specific content problems found"],
  "suggestions": ["list of specific improvements needed"],
  "lineNumbers": [array of line numbers where issues occur],
  "explanation": "brief explanation of the violation",
  "codeSnippet": "exact code to add/modify"
}"""


def number_lines(content: str, max_lines: int) -> str:
    """First ``max_lines`` lines of ``content``, each prefixed with its 1-based number."""
    lines = content.split("\n")[:max_lines]
    return "\n".join(f"{i}: {line}" for i, line in enumerate(lines, start=1))


def build_validation_prompt(
    file_path: str,
    content: str,
    content_type: ContentType,
    platform: Platform,
    max_chars: int,
) -> str:
    criteria = VALIDATION_CRITERIA[content_type].format(platform=platform.value)
    return f"""{criteria}

File: {file_path}
Content:
```
{content[:max_chars]}
```

{VALIDATION_RESPONSE_FORMAT}
"""


def build_augmentation_prompt(
    issue: ComplianceIssue,
    file_path: str,
    content: str,
    platform: Platform,
    max_lines: int,
) -> str:
    return f"""You are a compliance expert for {platform.value} app store policies. A compliance violation has been detected:

Rule ID: {issue.rule_id or issue.id}
Category: {issue.category}
Description: {issue.description}
Platform: {platform.value}

File: {file_path}
Content (with line numbers):
```
{number_lines(content, max_lines)}
```

{AUGMENTATION_TASKS}
"""
