"""
Priority → presentation mapping.

Vibration, persistence (require_interaction) and silence are derived
from priority alone. The payload can never set them directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from wetdry.notifications.base import Priority

VIBRATION_PATTERNS: dict[str, tuple[int, ...]] = {
    Priority.CRITICAL.value: (200, 100, 200, 100, 200),
    Priority.HIGH.value: (200, 100, 200),
    Priority.MEDIUM.value: (100, 50, 100),
    Priority.LOW.value: (),
}

_PERSISTENT = frozenset({Priority.CRITICAL.value, Priority.HIGH.value})


@dataclass(frozen=True, slots=True)
class Presentation:
    """Presentation flags for one priority level."""

    vibrate: tuple[int, ...]
    require_interaction: bool
    silent: bool


def vibration_pattern(priority: str) -> list[int]:
    """On/off pattern in ms. Unrecognized priorities do not vibrate."""
    return list(VIBRATION_PATTERNS.get(priority, ()))


def requires_interaction(priority: str) -> bool:
    return priority in _PERSISTENT


def is_silent(priority: str) -> bool:
    # Only an explicit "low" is silent; unknown values still make sound.
    return priority == Priority.LOW.value


def presentation_for(priority: str) -> Presentation:
    return Presentation(
        vibrate=tuple(vibration_pattern(priority)),
        require_interaction=requires_interaction(priority),
        silent=is_silent(priority),
    )
