"""Unit tests for the confidence gate."""

import pytest

from automate.core.prioritization.gate import (
    confidence_band,
    evaluate_gate,
    exceeds_risk_ceiling,
)
from automate.core.schemas.models import (
    ActionType,
    AutomationMode,
    CandidateAction,
    GateState,
)


def make_action(confidence=None, risk_ceiling=None) -> CandidateAction:
    return CandidateAction(
        id="action-1",
        type=ActionType.EXECUTION,
        confidence=confidence,
        risk_ceiling=risk_ceiling,
    )


class TestGateStates:
    """Test gate outcomes by confidence and mode."""

    @pytest.mark.parametrize("mode", list(AutomationMode))
    def test_no_confidence_is_direct(self, mode):
        """Absent confidence is never treated as low confidence."""
        decision = evaluate_gate(make_action(), mode)

        assert decision.state == GateState.DIRECT
        assert decision.can_execute is True

    @pytest.mark.parametrize("confidence", [80, 92.5, 100])
    def test_high_confidence_is_direct(self, confidence):
        decision = evaluate_gate(make_action(confidence), AutomationMode.COPILOT)

        assert decision.state == GateState.DIRECT

    @pytest.mark.parametrize("confidence", [70, 75, 79.9])
    @pytest.mark.parametrize("mode", list(AutomationMode))
    def test_moderate_confidence_reduces_emphasis(self, confidence, mode):
        """70-79 is informational only and still executable."""
        decision = evaluate_gate(make_action(confidence), mode)

        assert decision.state == GateState.REDUCED_EMPHASIS
        assert decision.can_execute is True

    def test_low_confidence_in_copilot_requires_manual(self):
        decision = evaluate_gate(make_action(65), AutomationMode.COPILOT)

        assert decision.state == GateState.MANUAL_REQUIRED
        assert decision.can_execute is False
        assert decision.required_mode == AutomationMode.MANUAL
        assert decision.confidence == 65

    def test_low_confidence_in_manual_is_direct(self):
        """The same action is free to run when the human is driving."""
        decision = evaluate_gate(make_action(65), AutomationMode.MANUAL)

        assert decision.state == GateState.DIRECT
        assert decision.can_execute is True
        assert decision.required_mode is None

    def test_low_confidence_in_autopilot_is_direct(self):
        decision = evaluate_gate(make_action(10), AutomationMode.AUTOPILOT)

        assert decision.state == GateState.DIRECT

    def test_custom_thresholds(self):
        decision = evaluate_gate(
            make_action(85), AutomationMode.COPILOT, low_threshold=90, moderate_threshold=95
        )

        assert decision.state == GateState.MANUAL_REQUIRED


class TestRiskCeiling:
    """Test per-action risk ceilings in the gate."""

    def test_manual_ceiling_blocks_low_confidence_in_copilot(self):
        """A Manual ceiling never makes a low-confidence Copilot action executable."""
        action = make_action(65, risk_ceiling=AutomationMode.MANUAL)

        decision = evaluate_gate(action, AutomationMode.COPILOT)

        assert decision.state == GateState.MANUAL_REQUIRED
        assert decision.can_execute is False
        assert decision.mode == AutomationMode.COPILOT
        assert decision.required_mode == AutomationMode.MANUAL

    @pytest.mark.parametrize("confidence", [None, 75, 95])
    def test_ceiling_below_mode_blocks_any_confidence(self, confidence):
        """Confidence cannot lift an action over its risk ceiling."""
        action = make_action(confidence, risk_ceiling=AutomationMode.COPILOT)

        decision = evaluate_gate(action, AutomationMode.AUTOPILOT)

        assert decision.state == GateState.MANUAL_REQUIRED
        assert decision.can_execute is False
        assert decision.required_mode == AutomationMode.COPILOT

    def test_ceiling_at_or_above_mode_uses_confidence_rules(self):
        """Within its ceiling an action is gated like any other."""
        capped = make_action(65, risk_ceiling=AutomationMode.COPILOT)

        assert evaluate_gate(capped, AutomationMode.COPILOT).required_mode == AutomationMode.MANUAL
        assert evaluate_gate(capped, AutomationMode.MANUAL).state == GateState.DIRECT
        assert evaluate_gate(
            make_action(90, risk_ceiling=AutomationMode.AUTOPILOT), AutomationMode.COPILOT
        ).state == GateState.DIRECT

    @pytest.mark.parametrize("mode,ceiling,expected", [
        (AutomationMode.MANUAL, AutomationMode.MANUAL, False),
        (AutomationMode.COPILOT, AutomationMode.MANUAL, True),
        (AutomationMode.AUTOPILOT, AutomationMode.COPILOT, True),
        (AutomationMode.COPILOT, AutomationMode.AUTOPILOT, False),
        (AutomationMode.AUTOPILOT, None, False),
    ])
    def test_exceeds_risk_ceiling(self, mode, ceiling, expected):
        assert exceeds_risk_ceiling(make_action(risk_ceiling=ceiling), mode) is expected


class TestConfidenceBand:
    """Test display bands."""

    @pytest.mark.parametrize(
        "confidence,band",
        [(None, None), (0, "low"), (49.9, "low"), (50, "medium"), (79, "medium"), (80, "high")],
    )
    def test_bands(self, confidence, band):
        assert confidence_band(confidence) == band
