"""Point arithmetic shared by the task and points services."""

import math
from numbers import Real


def calculate_task_points(story_points: int | None) -> int:
    """Points earned for completing a task: story points convert 1:1.

    Raises ``ValueError`` for a missing or negative value.
    """
    if story_points is None:
        raise ValueError("Story points cannot be None")
    if story_points < 0:
        raise ValueError("Story points cannot be negative")
    return int(story_points)


def validate_manual_award(points: object) -> bool:
    """A manual award must be a finite number greater than zero."""
    if points is None or isinstance(points, bool) or not isinstance(points, Real):
        return False
    if not math.isfinite(points):
        return False
    return points > 0
