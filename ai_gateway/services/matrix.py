"""Effort/impact matrix helpers shared by the generation services.

The board is a 520x520 canvas split at (260, 260):

    +----------------+------------------+
    | quick-wins     | major-projects   |   low y  = high impact
    +----------------+------------------+
    | fill-ins       | thankless-tasks  |   high y = low impact
    +----------------+------------------+
      low x = low effort   high x = high effort
"""

from __future__ import annotations

from ai_gateway.models.project import Priority, Quadrant

CENTER = 260.0
_MARGIN = 50.0
_STEP = 60.0

_QUADRANT_ORIGIN: dict[Quadrant, tuple[float, float]] = {
    Quadrant.QUICK_WINS: (_MARGIN + 30.0, _MARGIN + 30.0),
    Quadrant.MAJOR_PROJECTS: (CENTER + _MARGIN, _MARGIN + 30.0),
    Quadrant.FILL_INS: (_MARGIN + 30.0, CENTER + _MARGIN),
    Quadrant.THANKLESS_TASKS: (CENTER + _MARGIN, CENTER + _MARGIN),
}


def map_priority_level(impact: str | None, effort: str | None) -> Priority:
    """Priority from the model's impact/effort labels."""
    if impact == "high":
        if effort == "low":
            return Priority.STRATEGIC
        if effort == "medium":
            return Priority.HIGH
        if effort == "high":
            return Priority.INNOVATION
    if impact == "medium":
        return Priority.MODERATE
    return Priority.LOW


def map_to_quadrant(effort: str | None, impact: str | None) -> Quadrant:
    """Quadrant from impact/effort labels; medium values lean to the bigger bet."""
    if impact == "high":
        return Quadrant.QUICK_WINS if effort == "low" else Quadrant.MAJOR_PROJECTS
    if impact == "low":
        if effort == "low":
            return Quadrant.FILL_INS
        if effort == "high":
            return Quadrant.THANKLESS_TASKS
    if effort == "low":
        return Quadrant.QUICK_WINS
    return Quadrant.MAJOR_PROJECTS


def position_for_quadrant(quadrant: Quadrant, index: int = 0) -> tuple[float, float]:
    """Deterministic slot inside *quadrant*; *index* fans ideas out on a 3x3 grid."""
    origin_x, origin_y = _QUADRANT_ORIGIN[quadrant]
    slot = index % 9
    return origin_x + (slot % 3) * _STEP, origin_y + (slot // 3) * _STEP


def quadrant_from_position(x: float, y: float) -> Quadrant:
    left = x < CENTER
    top = y < CENTER
    if top:
        return Quadrant.QUICK_WINS if left else Quadrant.MAJOR_PROJECTS
    return Quadrant.FILL_INS if left else Quadrant.THANKLESS_TASKS
