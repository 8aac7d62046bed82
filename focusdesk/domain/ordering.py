"""
Sibling ordering for tasks.

Positions are advisory sort keys scoped by parent_id (tasks without a parent
form one root scope). New tasks go to max + 1 of their scope; explicit
repositioning writes the given value and never renumbers siblings, so gaps
and duplicates are allowed. Ties sort newest first.
"""
from __future__ import annotations

from typing import Iterable

from ..errors import ValidationError

TASK_ORDER_BY = "position ASC, created_at DESC"


def next_position(current_max: int | None) -> int:
    return int(current_max or 0) + 1


def check_reparent(task_id: str, new_parent_id: str | None, parent_ancestry: Iterable[str]) -> None:
    """
    Reject moves that would make a task its own ancestor.

    ``parent_ancestry`` is the new parent followed by its ancestors up to the root.
    """
    if new_parent_id is None:
        return
    if new_parent_id == task_id or task_id in set(parent_ancestry):
        raise ValidationError(f"task {task_id} cannot be moved under its own subtree")
