"""Validation and persistence payloads for boundary actions."""

from typing import Iterable

from ..exceptions import ConflictingBoundaryAction, InvalidBoundaryAction
from ..logging_config import get_logger
from ..models.boundary import ActionKind, BoundaryAction, EdgeRecord
from ..models.geometry import Polygon
from .boundary_geometry import edge_index_for_name

logger = get_logger("boundary_actions")

_OPPOSITE = {
    ActionKind.INCREMENT: ActionKind.DECREMENT,
    ActionKind.DECREMENT: ActionKind.INCREMENT,
}


def check_action_conflicts(action: BoundaryAction, existing: Iterable[BoundaryAction]) -> None:
    """Reject counter actions that clash with actions on the same edge direction.

    A counter may not be both incremented and decremented by one edge
    direction, and may not be attached twice with the same action. Actions on
    other edges or the other direction are ignored.
    """
    if action.kind == ActionKind.NOTIFY:
        return

    same_slot = [
        other for other in existing
        if other.edge_id == action.edge_id and other.direction == action.direction
    ]
    direction = action.direction.value

    if any(other.kind == _OPPOSITE[action.kind] and other.counter_ref == action.counter_ref
           for other in same_slot):
        raise ConflictingBoundaryAction(
            f"Cannot have both increment and decrement for the same counter on {direction} direction"
        )

    if any(other.kind == action.kind and other.counter_ref == action.counter_ref
           for other in same_slot):
        raise ConflictingBoundaryAction(
            f"Counter already selected for {action.kind.value} on {direction} direction"
        )


def build_edge_record(roi_id: str, polygon: Polygon, action: BoundaryAction) -> EdgeRecord:
    """Edge payload for ``action`` with the vertices that bound its edge."""
    if action.edge_id not in polygon.edge_names():
        raise InvalidBoundaryAction(f"ROI has no boundary named {action.edge_id}")

    index = edge_index_for_name(action.edge_id, len(polygon))
    start, end = polygon.edge(index)
    record = EdgeRecord(
        roi_id=roi_id,
        start=start,
        end=end,
        boundary_name=action.edge_id,
        direction=action.direction,
        action=action.kind,
        counter_id=action.counter_ref,
        notify_condition=action.notify_condition,
    )
    logger.debug(f"Edge record built for ROI {roi_id} boundary {action.edge_id} ({action.direction.value})")
    return record
