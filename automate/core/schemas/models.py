"""Core data models for AUTOMATE."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class AutomationMode(str, Enum):
    """Autonomy levels, least to most autonomous."""

    MANUAL = "manual"
    COPILOT = "copilot"
    AUTOPILOT = "autopilot"

    @property
    def rank(self) -> int:
        return MODE_RANK[self]


MODE_RANK = {
    AutomationMode.MANUAL: 0,
    AutomationMode.COPILOT: 1,
    AutomationMode.AUTOPILOT: 2,
}


def mode_rank(mode: AutomationMode) -> int:
    """Position of a mode in the autonomy order."""
    return MODE_RANK[AutomationMode(mode)]


def min_mode(*modes: AutomationMode) -> AutomationMode:
    """Return the least autonomous of the given modes."""
    if not modes:
        raise ValueError("min_mode() requires at least one mode")
    return min((AutomationMode(m) for m in modes), key=mode_rank)


def is_above(mode: AutomationMode, ceiling: AutomationMode) -> bool:
    """True when ``mode`` grants more autonomy than ``ceiling`` allows."""
    return mode_rank(mode) > mode_rank(ceiling)


class ResolutionSource(str, Enum):
    """Where a resolved mode came from."""

    SCOPE_OVERRIDE = "scope-override"
    GLOBAL = "global"
    DEFAULT = "default"


class ActionType(str, Enum):
    """Kinds of candidate work, in precedence order."""

    EXECUTION = "execution"
    ISSUE = "issue"
    OPPORTUNITY = "opportunity"
    SCHEDULED = "scheduled"
    ADVISORY = "advisory"


class ActionPriority(str, Enum):
    """Business priority of a candidate action."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GateState(str, Enum):
    """Outcome of the confidence gate."""

    DIRECT = "direct"
    REDUCED_EMPHASIS = "reduced-emphasis"
    MANUAL_REQUIRED = "manual-required"


class ModePreferences(BaseModel):
    """Persisted user/organization autonomy preferences.

    Field aliases match the persisted record layout
    (``globalMode``, ``scopeOverrides``, ``updatedAt``).
    """

    model_config = ConfigDict(populate_by_name=True)

    global_mode: AutomationMode = Field(
        default=AutomationMode.MANUAL,
        alias="globalMode",
        description="Platform-wide default mode",
    )
    scope_overrides: dict[str, AutomationMode] = Field(
        default_factory=dict,
        alias="scopeOverrides",
        description="Per-scope overrides; absence means inherit global",
    )
    updated_at: datetime = Field(
        default=EPOCH,
        alias="updatedAt",
        description="Last save time",
    )

    def to_record(self) -> dict:
        """Serialize to the persisted record layout."""
        return self.model_dump(mode="json", by_alias=True)


class ModeResolutionResult(BaseModel):
    """Effective mode for a scope plus provenance."""

    scope: str
    selected_mode: AutomationMode
    effective_mode: AutomationMode
    ceiling_applied: bool = False
    ceiling: AutomationMode | None = None
    source: ResolutionSource


class ModeOption(BaseModel):
    """One entry of a mode switcher listing."""

    mode: AutomationMode
    label: str
    description: str
    selected: bool = False
    effective: bool = False
    above_ceiling: bool = False


class CandidateAction(BaseModel):
    """A unit of proposed work awaiting ranking."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: ActionType
    priority: ActionPriority = ActionPriority.MEDIUM
    confidence: float | None = Field(default=None, ge=0, le=100)
    risk_ceiling: AutomationMode | None = Field(
        default=None, description="Highest mode this action may run under"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    title: str = ""


class GateDecision(BaseModel):
    """Result of evaluating the confidence gate for one action."""

    action_id: str
    state: GateState
    can_execute: bool
    mode: AutomationMode
    confidence: float | None = None
    required_mode: AutomationMode | None = None
    reason: str = ""


class ScoreBreakdown(BaseModel):
    """Components of an action's ranking score."""

    action_id: str
    type_base: int
    priority_bonus: int
    score: int


class RankedAction(BaseModel):
    """A candidate placed in the ranked queue."""

    action: CandidateAction
    score: int
    position: int
    pinned: bool = False
    gate: GateDecision


class RankedQueue(BaseModel):
    """Filtered, ordered output of a ranking pass."""

    mode: AutomationMode
    dominant: RankedAction | None = None
    secondary: list[RankedAction] = Field(default_factory=list)
    overflow_count: int = 0
    auto_handled_count: int = 0
    eligible_count: int = 0
    total_count: int = 0

    @field_validator("overflow_count", "auto_handled_count", "eligible_count", "total_count")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("counts must be non-negative")
        return v

    @property
    def is_empty(self) -> bool:
        return self.dominant is None

    @property
    def ordered(self) -> list[RankedAction]:
        """Dominant followed by the visible secondary actions."""
        if self.dominant is None:
            return []
        return [self.dominant, *self.secondary]

    @property
    def headline(self) -> str:
        if self.mode == AutomationMode.AUTOPILOT:
            return "Exception Queue"
        return "Next Best Action"
