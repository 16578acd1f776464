"""Governance module for automation mode resolution."""

from __future__ import annotations

import logging

from automate.core.preferences import ModePreferenceStore
from automate.core.schemas.labels import MODE_CONFIGS
from automate.core.schemas.models import (
    AutomationMode,
    ModeOption,
    ModePreferences,
    ModeResolutionResult,
    ResolutionSource,
    is_above,
    min_mode,
    mode_rank,
)

logger = logging.getLogger(__name__)


def resolve_mode(
    preferences: ModePreferences | None,
    scope: str,
    ceiling: AutomationMode | None = None,
) -> ModeResolutionResult:
    """Resolve the effective mode for a scope.

    Strict precedence: scope override, then global mode, then Manual.
    A ceiling can only lower the result.
    """
    if preferences is not None and scope in preferences.scope_overrides:
        selected = preferences.scope_overrides[scope]
        source = ResolutionSource.SCOPE_OVERRIDE
    elif preferences is not None and preferences.global_mode is not None:
        selected = preferences.global_mode
        source = ResolutionSource.GLOBAL
    else:
        selected = AutomationMode.MANUAL
        source = ResolutionSource.DEFAULT

    if ceiling is not None:
        ceiling = AutomationMode(ceiling)
        effective = min_mode(selected, ceiling)
    else:
        effective = selected

    return ModeResolutionResult(
        scope=scope,
        selected_mode=selected,
        effective_mode=effective,
        ceiling_applied=effective != selected,
        ceiling=ceiling,
        source=source,
    )


def build_mode_options(
    resolution: ModeResolutionResult,
) -> list[ModeOption]:
    """List every mode, flagging selected/effective and those above the ceiling."""
    options = []
    for mode in sorted(AutomationMode, key=mode_rank):
        config = MODE_CONFIGS[mode]
        options.append(ModeOption(
            mode=mode,
            label=config["label"],
            description=config["description"],
            selected=mode == resolution.selected_mode,
            effective=mode == resolution.effective_mode,
            above_ceiling=(
                resolution.ceiling is not None and is_above(mode, resolution.ceiling)
            ),
        ))
    return options


class ModeResolver:
    """Resolves modes against a preference store.

    Preferences are re-read on every call, so results always reflect
    the latest mutation.
    """

    def __init__(self, store: ModePreferenceStore):
        self.store = store

    def resolve(
        self,
        scope: str,
        ceiling: AutomationMode | None = None,
    ) -> ModeResolutionResult:
        result = resolve_mode(self.store.load(), scope, ceiling)
        if result.ceiling_applied:
            logger.debug(
                "Mode for %s capped from %s to %s",
                scope,
                result.selected_mode.value,
                result.effective_mode.value,
            )
        return result

    def mode_options(
        self,
        scope: str,
        ceiling: AutomationMode | None = None,
    ) -> list[ModeOption]:
        return build_mode_options(self.resolve(scope, ceiling))

    def downgrade_to_manual(
        self,
        scope: str,
        ceiling: AutomationMode | None = None,
    ) -> ModeResolutionResult:
        """Switch a scope to Manual and return the new resolution.

        This is the only way past a manual-required confidence gate.
        """
        self.store.set_scope_override(scope, AutomationMode.MANUAL)
        return self.resolve(scope, ceiling)


__all__ = [
    "ModeResolver",
    "build_mode_options",
    "resolve_mode",
]

# Import ceilings for convenience access
from automate.core.governance.ceilings import (
    DEFAULT_CEILING_RULES,
    LIFECYCLE_CEILINGS,
    CeilingLockedError,
    CeilingPolicy,
    CeilingRule,
    lifecycle_ceiling,
    load_ceiling_policy,
)

__all__ += [
    "DEFAULT_CEILING_RULES",
    "LIFECYCLE_CEILINGS",
    "CeilingLockedError",
    "CeilingPolicy",
    "CeilingRule",
    "lifecycle_ceiling",
    "load_ceiling_policy",
]
