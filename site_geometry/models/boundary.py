"""Boundary action and arrow geometry models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .geometry import Point
from ..exceptions import InvalidBoundaryAction


class Direction(Enum):
    """Crossing direction across an ROI edge."""
    INWARD = "inward"
    OUTWARD = "outward"


class ActionKind(Enum):
    """What happens when an object crosses an edge."""
    NOTIFY = "notify"
    INCREMENT = "increment"
    DECREMENT = "decrement"


@dataclass(frozen=True)
class BoundaryAction:
    """An action attached to one direction of an ROI edge.

    ``notify`` actions carry a condition and no counter; ``increment`` and
    ``decrement`` carry a counter and no condition. Both rules are checked on
    construction.
    """
    edge_id: str
    direction: Direction
    kind: ActionKind
    counter_ref: Optional[str] = None
    notify_condition: Optional[str] = None

    def __post_init__(self):
        if not self.edge_id:
            raise InvalidBoundaryAction("Boundary action needs an edge name")
        if not isinstance(self.direction, Direction):
            raise InvalidBoundaryAction(f"Unknown direction: {self.direction!r}")
        if not isinstance(self.kind, ActionKind):
            raise InvalidBoundaryAction(f"Unknown action: {self.kind!r}")

        if self.kind == ActionKind.NOTIFY:
            if not self.notify_condition:
                raise InvalidBoundaryAction("Notify actions require a notify condition")
            if self.counter_ref:
                raise InvalidBoundaryAction("Notify actions cannot reference a counter")
        else:
            if not self.counter_ref:
                raise InvalidBoundaryAction("Please select a counter")
            if self.notify_condition:
                raise InvalidBoundaryAction(
                    f"{self.kind.value.capitalize()} actions cannot carry a notify condition"
                )

    @classmethod
    def create(cls, edge_id: str, direction: str, kind: str,
               counter_ref: Optional[str] = None,
               notify_condition: Optional[str] = None) -> "BoundaryAction":
        """Build an action from plain string values."""
        try:
            direction_value = Direction(direction)
        except ValueError:
            raise InvalidBoundaryAction(f"Unknown direction: {direction!r}")
        try:
            kind_value = ActionKind(kind)
        except ValueError:
            raise InvalidBoundaryAction(f"Unknown action: {kind!r}")
        return cls(edge_id, direction_value, kind_value, counter_ref or None, notify_condition or None)

    @classmethod
    def from_edge_record(cls, record: Dict[str, Any]) -> "BoundaryAction":
        """Rebuild an action from a stored edge record."""
        return cls.create(
            edge_id=record["boundary_name"],
            direction=record["direction"],
            kind=record["action"],
            counter_ref=record.get("counter_id"),
            notify_condition=record.get("notify_condition"),
        )


@dataclass(frozen=True)
class ArrowPlacement:
    """Render-ready arrow geometry for one edge direction."""
    edge_index: int
    edge_name: str
    direction: Direction
    anchor: Point
    angle: float  # radians, image coordinates (y down)
    length: float
    distance_to_opposite: float
    head_width: float
    shaft_length: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "edge_index": self.edge_index,
            "edge_name": self.edge_name,
            "direction": self.direction.value,
            "anchor": self.anchor.to_dict(),
            "angle": self.angle,
            "length": self.length,
            "distance_to_opposite": self.distance_to_opposite,
            "head_width": self.head_width,
            "shaft_length": self.shaft_length,
        }


@dataclass(frozen=True)
class VertexMarker:
    """Position and size of a vertex letter label."""
    label: str
    anchor: Point
    radius: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "anchor": self.anchor.to_dict(), "radius": self.radius}


@dataclass(frozen=True)
class EdgeRecord:
    """Edge payload handed to the external edge-create/update API."""
    roi_id: str
    start: Point
    end: Point
    boundary_name: str
    direction: Direction
    action: ActionKind
    counter_id: Optional[str]
    notify_condition: Optional[str]

    @property
    def visible(self) -> bool:
        return self.action != ActionKind.NOTIFY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roi_id": self.roi_id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "boundary_name": self.boundary_name,
            "direction": self.direction.value,
            "action": self.action.value,
            "counter_id": self.counter_id,
            "notify_condition": self.notify_condition,
            "visible": self.visible,
        }
