"""Unit tests for mode resolution."""

import itertools
import json

import pytest

from automate.core.governance import ModeResolver, build_mode_options, resolve_mode
from automate.core.preferences import (
    InMemoryBackend,
    ModePreferenceStore,
    StorageUnavailableError,
)
from automate.core.schemas.models import (
    AutomationMode,
    ModePreferences,
    ResolutionSource,
    is_above,
    min_mode,
    mode_rank,
)

MODES = list(AutomationMode)
NAMESPACE = "automate.mode-preferences"


# ============================================================================
# Fixtures
# ============================================================================

class ReadOnlyBackend(InMemoryBackend):
    """Serves a fixed record and rejects writes."""

    def __init__(self, records: dict[str, str]):
        super().__init__()
        self._records.update(records)

    def write(self, key: str, value: str) -> None:
        raise StorageUnavailableError("read-only")


@pytest.fixture
def store() -> ModePreferenceStore:
    """Isolated in-memory store."""
    return ModePreferenceStore(backend=InMemoryBackend())


@pytest.fixture
def resolver(store: ModePreferenceStore) -> ModeResolver:
    return ModeResolver(store)


# ============================================================================
# Test: autonomy order
# ============================================================================

class TestModeOrder:
    """Test the explicit total order of modes."""

    def test_rank_order(self):
        """Manual < Copilot < Autopilot."""
        assert mode_rank(AutomationMode.MANUAL) < mode_rank(AutomationMode.COPILOT)
        assert mode_rank(AutomationMode.COPILOT) < mode_rank(AutomationMode.AUTOPILOT)
        assert AutomationMode.AUTOPILOT.rank == 2

    def test_min_mode(self):
        """min_mode picks the least autonomous."""
        assert min_mode(AutomationMode.AUTOPILOT, AutomationMode.COPILOT) == AutomationMode.COPILOT
        assert min_mode(AutomationMode.MANUAL, AutomationMode.AUTOPILOT) == AutomationMode.MANUAL
        assert min_mode("copilot") == AutomationMode.COPILOT

    def test_min_mode_requires_argument(self):
        with pytest.raises(ValueError):
            min_mode()

    def test_is_above(self):
        """is_above compares by rank, not by name."""
        assert is_above(AutomationMode.AUTOPILOT, AutomationMode.COPILOT)
        assert not is_above(AutomationMode.COPILOT, AutomationMode.COPILOT)
        assert not is_above(AutomationMode.MANUAL, AutomationMode.AUTOPILOT)


# ============================================================================
# Test: resolve_mode precedence
# ============================================================================

class TestResolvePrecedence:
    """Test override > global > default."""

    @pytest.mark.parametrize("global_mode", MODES)
    def test_no_override_uses_global(self, global_mode):
        """Without an override the global mode applies."""
        prefs = ModePreferences(global_mode=global_mode)

        result = resolve_mode(prefs, "content")

        assert result.selected_mode == global_mode
        assert result.effective_mode == global_mode
        assert result.source == ResolutionSource.GLOBAL
        assert result.ceiling_applied is False

    @pytest.mark.parametrize("global_mode,override", list(itertools.product(MODES, MODES)))
    def test_override_wins_regardless_of_global(self, global_mode, override):
        """A scope override always beats the global mode."""
        prefs = ModePreferences(global_mode=global_mode, scope_overrides={"pr": override})

        result = resolve_mode(prefs, "pr")

        assert result.selected_mode == override
        assert result.source == ResolutionSource.SCOPE_OVERRIDE

    def test_override_is_scope_local(self):
        """An override on one scope does not leak to another."""
        prefs = ModePreferences(
            global_mode=AutomationMode.COPILOT,
            scope_overrides={"pr": AutomationMode.MANUAL},
        )

        assert resolve_mode(prefs, "seo").selected_mode == AutomationMode.COPILOT

    def test_missing_preferences_default_to_manual(self):
        """No preferences at all resolves to Manual with default source."""
        result = resolve_mode(None, "content")

        assert result.selected_mode == AutomationMode.MANUAL
        assert result.source == ResolutionSource.DEFAULT


# ============================================================================
# Test: ceilings
# ============================================================================

class TestCeilingClamp:
    """Test ceiling enforcement."""

    @pytest.mark.parametrize("mode,ceiling", list(itertools.product(MODES, MODES)))
    def test_effective_never_exceeds_either(self, mode, ceiling):
        """Effective mode is at most both the selected mode and the ceiling."""
        prefs = ModePreferences(global_mode=mode)

        result = resolve_mode(prefs, "content", ceiling)

        assert mode_rank(result.effective_mode) <= mode_rank(mode)
        assert mode_rank(result.effective_mode) <= mode_rank(ceiling)
        if mode_rank(mode) <= mode_rank(ceiling):
            assert result.effective_mode == mode
            assert result.ceiling_applied is False
        else:
            assert result.effective_mode == ceiling
            assert result.ceiling_applied is True

    def test_copilot_global_capped_to_manual(self):
        """Global Copilot with a Manual ceiling resolves to Manual."""
        prefs = ModePreferences(global_mode=AutomationMode.COPILOT)

        result = resolve_mode(prefs, "content", AutomationMode.MANUAL)

        assert result.effective_mode == AutomationMode.MANUAL
        assert result.selected_mode == AutomationMode.COPILOT
        assert result.ceiling_applied is True
        assert result.ceiling == AutomationMode.MANUAL
        assert result.source == ResolutionSource.GLOBAL

    def test_ceiling_never_raises(self):
        """An Autopilot ceiling leaves Manual untouched."""
        prefs = ModePreferences(global_mode=AutomationMode.MANUAL)

        result = resolve_mode(prefs, "content", AutomationMode.AUTOPILOT)

        assert result.effective_mode == AutomationMode.MANUAL
        assert result.ceiling_applied is False


# ============================================================================
# Test: ModeResolver
# ============================================================================

class TestModeResolver:
    """Test store-backed resolution."""

    def test_reflects_latest_mutation(self, resolver: ModeResolver, store: ModePreferenceStore):
        """Results are never cached across preference changes."""
        assert resolver.resolve("content").effective_mode == AutomationMode.MANUAL

        store.set_global_mode(AutomationMode.AUTOPILOT)
        assert resolver.resolve("content").effective_mode == AutomationMode.AUTOPILOT

        store.set_scope_override("content", AutomationMode.COPILOT)
        result = resolver.resolve("content")
        assert result.effective_mode == AutomationMode.COPILOT
        assert result.source == ResolutionSource.SCOPE_OVERRIDE

    def test_downgrade_to_manual(self, resolver: ModeResolver, store: ModePreferenceStore):
        """Downgrading writes a Manual override for the scope only."""
        store.set_global_mode(AutomationMode.COPILOT)

        result = resolver.downgrade_to_manual("content")

        assert result.effective_mode == AutomationMode.MANUAL
        assert result.source == ResolutionSource.SCOPE_OVERRIDE
        assert resolver.resolve("pr").effective_mode == AutomationMode.COPILOT

    def test_downgrade_sticks_when_write_fails(self):
        """A rejected durable write does not undo the Manual switch."""
        backend = ReadOnlyBackend({NAMESPACE: json.dumps({"globalMode": "copilot"})})
        resolver = ModeResolver(ModePreferenceStore(backend=backend, namespace=NAMESPACE))

        result = resolver.downgrade_to_manual("content")

        assert result.effective_mode == AutomationMode.MANUAL
        assert resolver.resolve("content").effective_mode == AutomationMode.MANUAL

    def test_mode_options_flags(self, resolver: ModeResolver, store: ModePreferenceStore):
        """Options mark selected, effective and above-ceiling modes."""
        store.set_global_mode(AutomationMode.AUTOPILOT)

        options = resolver.mode_options("content", AutomationMode.COPILOT)

        assert [o.mode for o in options] == MODES
        by_mode = {o.mode: o for o in options}
        assert by_mode[AutomationMode.AUTOPILOT].selected is True
        assert by_mode[AutomationMode.AUTOPILOT].above_ceiling is True
        assert by_mode[AutomationMode.COPILOT].effective is True
        assert by_mode[AutomationMode.COPILOT].above_ceiling is False
        assert by_mode[AutomationMode.MANUAL].label == "Manual"

    def test_mode_options_without_ceiling(self):
        """Without a ceiling nothing is above it."""
        options = build_mode_options(resolve_mode(ModePreferences(), "seo"))

        assert not any(o.above_ceiling for o in options)
