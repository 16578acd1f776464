"""Confidence gate for executing ranked actions.

States:
- DIRECT: no confidence signal, or confidence >= moderate threshold
- REDUCED_EMPHASIS: low <= confidence < moderate; still executable
- MANUAL_REQUIRED: confidence < low while in Copilot, or the action's
  risk ceiling is below the current mode; blocked until the scope is
  switched to a mode at or below ``required_mode``

The policy depends on who is driving. In Manual the human already is,
and Autopilot only surfaces exceptions, never routine low-confidence
items.
"""

from __future__ import annotations

from automate.core.schemas.models import (
    AutomationMode,
    CandidateAction,
    GateDecision,
    GateState,
    is_above,
)

LOW_CONFIDENCE_THRESHOLD = 70.0
MODERATE_CONFIDENCE_THRESHOLD = 80.0

HIGH_BAND_THRESHOLD = 80.0
MEDIUM_BAND_THRESHOLD = 50.0


def confidence_band(confidence: float | None) -> str | None:
    """Classify confidence for display: high, medium or low."""
    if confidence is None:
        return None
    if confidence >= HIGH_BAND_THRESHOLD:
        return "high"
    if confidence >= MEDIUM_BAND_THRESHOLD:
        return "medium"
    return "low"


def exceeds_risk_ceiling(action: CandidateAction, mode: AutomationMode) -> bool:
    """True when the action may not run under ``mode`` at all."""
    return action.risk_ceiling is not None and is_above(mode, action.risk_ceiling)


def evaluate_gate(
    action: CandidateAction,
    mode: AutomationMode,
    low_threshold: float = LOW_CONFIDENCE_THRESHOLD,
    moderate_threshold: float = MODERATE_CONFIDENCE_THRESHOLD,
) -> GateDecision:
    """Decide whether an action may execute directly."""
    effective = AutomationMode(mode)
    confidence = action.confidence

    if exceeds_risk_ceiling(action, effective):
        return GateDecision(
            action_id=action.id,
            state=GateState.MANUAL_REQUIRED,
            can_execute=False,
            mode=effective,
            confidence=confidence,
            required_mode=action.risk_ceiling,
            reason=f"Action is capped at {action.risk_ceiling.value} mode",
        )

    if confidence is None:
        return GateDecision(
            action_id=action.id,
            state=GateState.DIRECT,
            can_execute=True,
            mode=effective,
            reason="No confidence signal",
        )

    if confidence >= moderate_threshold:
        return GateDecision(
            action_id=action.id,
            state=GateState.DIRECT,
            can_execute=True,
            mode=effective,
            confidence=confidence,
            reason="Confidence meets moderate threshold",
        )

    if confidence >= low_threshold:
        return GateDecision(
            action_id=action.id,
            state=GateState.REDUCED_EMPHASIS,
            can_execute=True,
            mode=effective,
            confidence=confidence,
            reason="Moderate confidence; review before executing",
        )

    if effective == AutomationMode.COPILOT:
        return GateDecision(
            action_id=action.id,
            state=GateState.MANUAL_REQUIRED,
            can_execute=False,
            mode=effective,
            confidence=confidence,
            required_mode=AutomationMode.MANUAL,
            reason="Low confidence; switch to Manual mode to proceed",
        )

    # Manual: the human is driving. Autopilot: only exceptions reach a human.
    return GateDecision(
        action_id=action.id,
        state=GateState.DIRECT,
        can_execute=True,
        mode=effective,
        confidence=confidence,
        reason="Low confidence, human in control",
    )
