"""Schema definitions."""

from automate.core.schemas.labels import (
    MODE_CONFIGS,
    SCOPE_LABELS,
    mode_label,
    scope_label,
)
from automate.core.schemas.models import (
    EPOCH,
    MODE_RANK,
    ActionPriority,
    ActionType,
    AutomationMode,
    CandidateAction,
    GateDecision,
    GateState,
    ModeOption,
    ModePreferences,
    ModeResolutionResult,
    RankedAction,
    RankedQueue,
    ResolutionSource,
    ScoreBreakdown,
    is_above,
    min_mode,
    mode_rank,
)

__all__ = [
    "EPOCH",
    "MODE_CONFIGS",
    "MODE_RANK",
    "SCOPE_LABELS",
    "ActionPriority",
    "ActionType",
    "AutomationMode",
    "CandidateAction",
    "GateDecision",
    "GateState",
    "ModeOption",
    "ModePreferences",
    "ModeResolutionResult",
    "RankedAction",
    "RankedQueue",
    "ResolutionSource",
    "ScoreBreakdown",
    "is_above",
    "min_mode",
    "mode_label",
    "mode_rank",
    "scope_label",
]
