"""Action prioritization engine.

Turns a list of candidate actions and an effective automation mode into
a ranked queue: one dominant action, a capped list of secondary actions,
and counts for everything else.

MODE-AWARE FILTERING:
- Manual/Copilot: every candidate is eligible (workbench posture)
- Autopilot: exception queue only (issues and critical items); the rest
  is reported as auto-handled
"""

from __future__ import annotations

import logging
from typing import Iterable

from automate.config import Settings
from automate.core.prioritization.gate import (
    LOW_CONFIDENCE_THRESHOLD,
    MODERATE_CONFIDENCE_THRESHOLD,
    confidence_band,
    evaluate_gate,
)
from automate.core.prioritization.scoring import (
    PRIORITY_BONUS,
    TYPE_BASE_SCORES,
    compute_action_score,
    explain_score,
)
from automate.core.schemas.models import (
    ActionPriority,
    ActionType,
    AutomationMode,
    CandidateAction,
    GateDecision,
    RankedAction,
    RankedQueue,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_CAPS: dict[AutomationMode, int] = {
    AutomationMode.MANUAL: 8,
    AutomationMode.COPILOT: 3,
    AutomationMode.AUTOPILOT: 3,
}


def is_exception(action: CandidateAction) -> bool:
    """Whether an action must stay visible in Autopilot.

    Issues and anything critical qualify; critical execution items are
    covered by the priority check.
    """
    return action.type == ActionType.ISSUE or action.priority == ActionPriority.CRITICAL


def filter_actions_by_mode(
    candidates: Iterable[CandidateAction],
    mode: AutomationMode,
) -> tuple[list[CandidateAction], list[CandidateAction]]:
    """Split candidates into (eligible, auto_handled), preserving order."""
    candidates = list(candidates)
    if AutomationMode(mode) != AutomationMode.AUTOPILOT:
        return candidates, []

    eligible: list[CandidateAction] = []
    auto_handled: list[CandidateAction] = []
    for action in candidates:
        (eligible if is_exception(action) else auto_handled).append(action)
    return eligible, auto_handled


def sort_actions(actions: Iterable[CandidateAction]) -> list[CandidateAction]:
    """Sort by descending score; input order breaks ties."""
    return sorted(actions, key=lambda a: -compute_action_score(a))


def rank_actions(
    candidates: Iterable[CandidateAction],
    mode: AutomationMode,
    pinned_id: str | None = None,
    display_caps: dict[AutomationMode, int] | None = None,
    low_threshold: float = LOW_CONFIDENCE_THRESHOLD,
    moderate_threshold: float = MODERATE_CONFIDENCE_THRESHOLD,
) -> RankedQueue:
    """Filter, score and order candidates into a RankedQueue.

    Args:
        candidates: Actions for this pass, in caller order
        mode: Effective automation mode
        pinned_id: Action to force to the top (Manual mode only)
        display_caps: Secondary window size per mode
        low_threshold: Gate threshold below which Copilot requires Manual
        moderate_threshold: Gate threshold for full emphasis

    Returns:
        RankedQueue; empty (no dominant action) when nothing is eligible
    """
    mode = AutomationMode(mode)
    candidates = list(candidates)
    caps = {**DEFAULT_DISPLAY_CAPS, **(display_caps or {})}

    eligible, auto_handled = filter_actions_by_mode(candidates, mode)
    ordered = sort_actions(eligible)

    pinned_index: int | None = None
    if pinned_id is not None:
        if mode != AutomationMode.MANUAL:
            logger.debug("Ignoring pinned action %s outside Manual mode", pinned_id)
        else:
            for i, action in enumerate(ordered):
                if action.id == pinned_id:
                    pinned_index = i
                    break
            if pinned_index is not None:
                ordered.insert(0, ordered.pop(pinned_index))

    ranked = [
        RankedAction(
            action=action,
            score=compute_action_score(action),
            position=position,
            pinned=pinned_index is not None and position == 0,
            gate=evaluate_gate(action, mode, low_threshold, moderate_threshold),
        )
        for position, action in enumerate(ordered)
    ]

    cap = caps[mode]
    dominant = ranked[0] if ranked else None
    secondary = ranked[1:1 + cap]
    overflow = max(len(ranked) - 1 - cap, 0)

    logger.debug(
        "Ranked %d/%d actions in %s mode (%d auto-handled, %d overflow)",
        len(ranked),
        len(candidates),
        mode.value,
        len(auto_handled),
        overflow,
    )

    return RankedQueue(
        mode=mode,
        dominant=dominant,
        secondary=secondary,
        overflow_count=overflow,
        auto_handled_count=len(auto_handled),
        eligible_count=len(eligible),
        total_count=len(candidates),
    )


class ActionPrioritizationEngine:
    """Ranking and gating with configured thresholds and display caps."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or Settings()
        self.low_threshold = settings.low_confidence_threshold
        self.moderate_threshold = settings.moderate_confidence_threshold
        self.display_caps = {
            AutomationMode.MANUAL: settings.manual_secondary_limit,
            AutomationMode.COPILOT: settings.assisted_secondary_limit,
            AutomationMode.AUTOPILOT: settings.assisted_secondary_limit,
        }

    def rank(
        self,
        candidates: Iterable[CandidateAction],
        mode: AutomationMode,
        pinned_id: str | None = None,
    ) -> RankedQueue:
        return rank_actions(
            candidates,
            mode,
            pinned_id=pinned_id,
            display_caps=self.display_caps,
            low_threshold=self.low_threshold,
            moderate_threshold=self.moderate_threshold,
        )

    def gate(self, action: CandidateAction, mode: AutomationMode) -> GateDecision:
        return evaluate_gate(action, mode, self.low_threshold, self.moderate_threshold)

    def explain(self, action: CandidateAction) -> ScoreBreakdown:
        return explain_score(action)


__all__ = [
    "DEFAULT_DISPLAY_CAPS",
    "LOW_CONFIDENCE_THRESHOLD",
    "MODERATE_CONFIDENCE_THRESHOLD",
    "PRIORITY_BONUS",
    "TYPE_BASE_SCORES",
    "ActionPrioritizationEngine",
    "compute_action_score",
    "confidence_band",
    "evaluate_gate",
    "explain_score",
    "filter_actions_by_mode",
    "is_exception",
    "rank_actions",
    "sort_actions",
]
