"""Mode ceilings for individual actions and lifecycle steps.

A ceiling is the highest automation mode an action may run under.
System-enforced ceilings protect irreversible or relationship-facing
actions and cannot be overridden; the rest can be tuned per deployment.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, Field

from automate.core.schemas.models import AutomationMode, min_mode

logger = logging.getLogger(__name__)


class CeilingLockedError(Exception):
    """Raised when changing a system-enforced ceiling."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Ceiling for '{action}' is system-enforced")


class CeilingRule(BaseModel):
    """Maximum automation mode for one action kind."""

    action: str = Field(description="Action identifier")
    mode_ceiling: AutomationMode
    rationale: str = Field(default="")
    overridable: bool = Field(default=True)


DEFAULT_CEILING_RULES: list[CeilingRule] = [
    # Relationship actions
    CeilingRule(
        action="send_pitch",
        mode_ceiling=AutomationMode.MANUAL,
        rationale="Each pitch represents the brand to a journalist.",
        overridable=False,
    ),
    CeilingRule(
        action="send_followup",
        mode_ceiling=AutomationMode.COPILOT,
        rationale="Follow-ups can be drafted, but a human reviews tone and timing.",
        overridable=False,
    ),
    CeilingRule(
        action="citemind_audio",
        mode_ceiling=AutomationMode.MANUAL,
        rationale="Audio content creation requires explicit human approval.",
        overridable=False,
    ),
    # Technical optimization
    CeilingRule(
        action="generate_schema",
        mode_ceiling=AutomationMode.AUTOPILOT,
        rationale="Schema generation is a low-risk technical optimization.",
    ),
    CeilingRule(
        action="submit_indexnow",
        mode_ceiling=AutomationMode.AUTOPILOT,
        rationale="IndexNow submission has no relationship or brand risk.",
    ),
    # Monitoring & enrichment
    CeilingRule(
        action="track_coverage",
        mode_ceiling=AutomationMode.AUTOPILOT,
        rationale="Passive monitoring with no external-facing action.",
    ),
    CeilingRule(
        action="contact_enrichment",
        mode_ceiling=AutomationMode.COPILOT,
        rationale="Contact record updates should be reviewed first.",
    ),
]

# Publishing is irreversible and brand-affecting: manual only.
LIFECYCLE_CEILINGS: dict[str, AutomationMode] = {
    "draft": AutomationMode.COPILOT,
    "review": AutomationMode.COPILOT,
    "approved": AutomationMode.COPILOT,
    "published": AutomationMode.MANUAL,
}


def lifecycle_ceiling(status: str) -> AutomationMode:
    """Ceiling for a content lifecycle step; unknown steps are Manual."""
    return LIFECYCLE_CEILINGS.get(status, AutomationMode.MANUAL)


class CeilingPolicy:
    """Registry of action ceilings."""

    def __init__(self, rules: Iterable[CeilingRule] | None = None):
        source = DEFAULT_CEILING_RULES if rules is None else rules
        self._rules: dict[str, CeilingRule] = {
            rule.action: rule.model_copy() for rule in source
        }

    @property
    def rules(self) -> list[CeilingRule]:
        return list(self._rules.values())

    def get_rule(self, action: str) -> CeilingRule | None:
        return self._rules.get(action)

    def ceiling_for(self, action: str) -> AutomationMode | None:
        """Ceiling for an action, or None if the action is unrestricted."""
        rule = self._rules.get(action)
        return rule.mode_ceiling if rule else None

    def ceiling_for_all(self, actions: Iterable[str]) -> AutomationMode | None:
        """Strictest ceiling across several actions."""
        ceilings = [c for c in (self.ceiling_for(a) for a in actions) if c is not None]
        if not ceilings:
            return None
        return min_mode(*ceilings)

    def override(self, action: str, mode: AutomationMode) -> CeilingRule:
        """Change an overridable ceiling, or register a new one."""
        mode = AutomationMode(mode)
        rule = self._rules.get(action)
        if rule is None:
            rule = CeilingRule(action=action, mode_ceiling=mode)
        elif not rule.overridable:
            logger.warning("Refusing to change system-enforced ceiling: %s", action)
            raise CeilingLockedError(action)
        else:
            rule = rule.model_copy(update={"mode_ceiling": mode})
        self._rules[action] = rule
        logger.info("Ceiling for %s set to %s", action, mode.value)
        return rule

    # =========================================================================
    # Serialization
    # =========================================================================

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CeilingPolicy:
        """Load a policy from a dictionary.

        Entries in ``ceilings`` replace defaults with the same action,
        unless the default is system-enforced.
        """
        policy = cls()
        for data in raw.get("ceilings", []):
            rule = CeilingRule(
                action=data["action"],
                mode_ceiling=AutomationMode(data["mode_ceiling"]),
                rationale=data.get("rationale", ""),
                overridable=data.get("overridable", True),
            )
            existing = policy._rules.get(rule.action)
            if existing is not None and not existing.overridable:
                logger.warning("Ignoring configured ceiling for locked action %s", rule.action)
                continue
            policy._rules[rule.action] = rule
        return policy

    def to_dict(self) -> dict[str, Any]:
        return {"ceilings": [rule.model_dump(mode="json") for rule in self._rules.values()]}


def load_ceiling_policy(path: str | Path | None) -> CeilingPolicy:
    """Load a policy file, falling back to defaults if absent or unreadable."""
    if path is None:
        return CeilingPolicy()
    path = Path(path)
    if not path.exists():
        return CeilingPolicy()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return CeilingPolicy.from_dict(raw)
    except Exception as e:
        logger.error("Failed to load ceiling policy %s: %s", path, e)
        return CeilingPolicy()
