"""Represents a continuous Stroke of ink in the Page"""

from dataclasses import dataclass, field
from typing import Any, NamedTuple, cast


class Point(NamedTuple):
    """A sampled pen position"""

    x: float
    y: float
    pressure: float = 1.0


@dataclass
class Stroke:
    """Represents a continuous Stroke of ink in the Page"""

    points: list[Point] = field(default_factory=list)
    color: str = "black"
    thickness: float = 1.0
    tool: str = "pen"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a msgpack friendly dictionary"""
        return {
            "points": [[float(p.x), float(p.y), float(p.pressure)] for p in self.points],
            "color": self.color,
            "thickness": float(self.thickness),
            "tool": self.tool,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Stroke":
        points = [
            Point(float(p[0]), float(p[1]), float(p[2]))
            for p in cast(list[list[float]], data.get("points", []))
        ]
        return cls(
            points=points,
            color=cast(str, data.get("color", "black")),
            thickness=float(data.get("thickness", 1.0)),
            tool=cast(str, data.get("tool", "pen")),
        )
