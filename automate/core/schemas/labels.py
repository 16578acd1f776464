"""Display metadata for modes and scopes."""

from __future__ import annotations

from automate.core.schemas.models import AutomationMode

MODE_CONFIGS: dict[AutomationMode, dict[str, str]] = {
    AutomationMode.MANUAL: {
        "label": "Manual",
        "description": "You drive every action. AI stays out of the way.",
    },
    AutomationMode.COPILOT: {
        "label": "Copilot",
        "description": "AI proposes plans and drafts; you approve before anything runs.",
    },
    AutomationMode.AUTOPILOT: {
        "label": "Autopilot",
        "description": "Routine work runs automatically; only exceptions reach you.",
    },
}

SCOPE_LABELS: dict[str, str] = {
    "pr": "PR & Media",
    "content": "Content",
    "seo": "SEO",
}


def mode_label(mode: AutomationMode) -> str:
    return MODE_CONFIGS[AutomationMode(mode)]["label"]


def scope_label(scope: str) -> str:
    """Label for a scope, falling back to the raw identifier."""
    return SCOPE_LABELS.get(scope, scope)
