"""Key result type enums and the value record used for progress computation.

Pure domain logic with no external dependencies.
"""
from dataclasses import dataclass
from enum import Enum


class KeyResultType(str, Enum):
    """How a key result's current value is measured against its target."""

    INCREASE_TO = "should_increase_to"
    DECREASE_TO = "should_decrease_to"
    STAY_ABOVE = "should_stay_above"
    STAY_BELOW = "should_stay_below"
    ACHIEVED_OR_NOT = "achieved_or_not"

    @classmethod
    def parse(cls, value: "str | KeyResultType | None") -> "KeyResultType | None":
        """Return the matching member, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_binary(self) -> bool:
        """Threshold variants only ever report 0 or 100 and ignore the initial value."""
        return self in (
            KeyResultType.STAY_ABOVE,
            KeyResultType.STAY_BELOW,
            KeyResultType.ACHIEVED_OR_NOT,
        )


_LABELS = {
    KeyResultType.INCREASE_TO: "Should increase to",
    KeyResultType.DECREASE_TO: "Should decrease to",
    KeyResultType.STAY_ABOVE: "Should stay above",
    KeyResultType.STAY_BELOW: "Should stay below",
    KeyResultType.ACHIEVED_OR_NOT: "Achieved or not",
}


class ConfidenceLevel(str, Enum):
    """Owner's confidence that the key result will be hit."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class KeyResultValues:
    """Numeric state of a key result, as read from persistence."""

    key_result_type: KeyResultType | str | None
    initial_value: float | None = 0
    current_value: float | None = 0
    target_value: float | None = 0
