"""Action scoring for the execution priority model.

PRIORITY ORDER (deterministic, highest to lowest):
1. Execution-ready work        - 500
2. Open issues                 - 400
3. Authority/opportunity gaps  - 300
4. Scheduled work              - 200
5. Advisory suggestions        - 100

Within a tier, priority is the tiebreaker:
critical +20, high +15, medium +10, low +5.

The gap between tiers is larger than the biggest bonus, so priority
never moves an action across tiers.
"""

from __future__ import annotations

from automate.core.schemas.models import (
    ActionPriority,
    ActionType,
    CandidateAction,
    ScoreBreakdown,
)

TYPE_BASE_SCORES: dict[ActionType, int] = {
    ActionType.EXECUTION: 500,
    ActionType.ISSUE: 400,
    ActionType.OPPORTUNITY: 300,
    ActionType.SCHEDULED: 200,
    ActionType.ADVISORY: 100,
}

PRIORITY_BONUS: dict[ActionPriority, int] = {
    ActionPriority.CRITICAL: 20,
    ActionPriority.HIGH: 15,
    ActionPriority.MEDIUM: 10,
    ActionPriority.LOW: 5,
}


def _min_tier_gap() -> int:
    bases = sorted(TYPE_BASE_SCORES.values())
    return min(b - a for a, b in zip(bases, bases[1:]))


# Tiering only holds while this is true; fail at import if retuned badly.
if _min_tier_gap() <= max(PRIORITY_BONUS.values()):
    raise RuntimeError("Type tier gap must exceed the largest priority bonus")


def explain_score(action: CandidateAction) -> ScoreBreakdown:
    """Break an action's score into its tier base and priority bonus."""
    type_base = TYPE_BASE_SCORES[action.type]
    bonus = PRIORITY_BONUS[action.priority]
    return ScoreBreakdown(
        action_id=action.id,
        type_base=type_base,
        priority_bonus=bonus,
        score=type_base + bonus,
    )


def compute_action_score(action: CandidateAction) -> int:
    return TYPE_BASE_SCORES[action.type] + PRIORITY_BONUS[action.priority]
