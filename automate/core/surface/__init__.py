"""Work surface: mode governance and the action queue for one scope."""

from __future__ import annotations

import logging
from typing import Iterable

from automate.config import Settings
from automate.core.governance import ModeResolver
from automate.core.governance.ceilings import CeilingPolicy, load_ceiling_policy
from automate.core.preferences import ModePreferenceStore, create_preference_store
from automate.core.prioritization import ActionPrioritizationEngine
from automate.core.schemas.models import (
    AutomationMode,
    CandidateAction,
    GateDecision,
    ModeOption,
    ModeResolutionResult,
    RankedQueue,
    min_mode,
)

logger = logging.getLogger(__name__)


class WorkSurface:
    """Binds a scope to its preferences, ceilings and ranking engine.

    The surface ceiling is the strictest of the explicit ceiling and the
    ceilings of the actions the surface can perform.
    """

    def __init__(
        self,
        scope: str,
        store: ModePreferenceStore,
        engine: ActionPrioritizationEngine | None = None,
        ceilings: CeilingPolicy | None = None,
        ceiling: AutomationMode | None = None,
        surface_actions: Iterable[str] = (),
    ):
        self.scope = scope
        self.store = store
        self.resolver = ModeResolver(store)
        self.engine = engine or ActionPrioritizationEngine()
        self.ceilings = ceilings or CeilingPolicy()
        self.explicit_ceiling = AutomationMode(ceiling) if ceiling is not None else None
        self.surface_actions = list(surface_actions)

    @property
    def ceiling(self) -> AutomationMode | None:
        candidates = []
        if self.explicit_ceiling is not None:
            candidates.append(self.explicit_ceiling)
        action_ceiling = self.ceilings.ceiling_for_all(self.surface_actions)
        if action_ceiling is not None:
            candidates.append(action_ceiling)
        return min_mode(*candidates) if candidates else None

    def resolution(self) -> ModeResolutionResult:
        return self.resolver.resolve(self.scope, self.ceiling)

    def mode_options(self) -> list[ModeOption]:
        return self.resolver.mode_options(self.scope, self.ceiling)

    def set_mode(self, mode: AutomationMode) -> ModeResolutionResult:
        """Set this scope's override."""
        self.store.set_scope_override(self.scope, mode)
        return self.resolution()

    def set_global_mode(self, mode: AutomationMode) -> ModeResolutionResult:
        self.store.set_global_mode(mode)
        return self.resolution()

    def clear_override(self) -> ModeResolutionResult:
        self.store.clear_scope_override(self.scope)
        return self.resolution()

    def queue(
        self,
        candidates: Iterable[CandidateAction],
        pinned_id: str | None = None,
    ) -> RankedQueue:
        """Rank candidates under the current effective mode."""
        return self.engine.rank(candidates, self.resolution().effective_mode, pinned_id)

    def gate(self, action: CandidateAction) -> GateDecision:
        return self.engine.gate(action, self.resolution().effective_mode)

    def switch_to_manual(self, action: CandidateAction) -> GateDecision:
        """Downgrade the scope to Manual and re-evaluate the gate."""
        resolution = self.resolver.downgrade_to_manual(self.scope, self.ceiling)
        logger.info("Scope %s switched to Manual to execute %s", self.scope, action.id)
        return self.engine.gate(action, resolution.effective_mode)


def create_work_surface(
    scope: str,
    settings: Settings | None = None,
    store: ModePreferenceStore | None = None,
    ceiling: AutomationMode | None = None,
    surface_actions: Iterable[str] = (),
) -> WorkSurface:
    """Build a work surface wired from settings."""
    settings = settings or Settings()
    return WorkSurface(
        scope=scope,
        store=store or create_preference_store(settings),
        engine=ActionPrioritizationEngine(settings),
        ceilings=load_ceiling_policy(settings.ceiling_policy_path),
        ceiling=ceiling,
        surface_actions=surface_actions,
    )


__all__ = ["WorkSurface", "create_work_surface"]
