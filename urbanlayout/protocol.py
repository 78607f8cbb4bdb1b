# urbanlayout/protocol.py
# -----------------------------------------------------------------------------
#  urbanlayout – city descriptor in, building footprints out
# -----------------------------------------------------------------------------
"""Value types exchanged between the layout engine and its collaborators.

The *descriptor* side mirrors the JSON a city designer hands over::

    {"roads": {"width": 10, "lines": [[[0, 30], [100, 30]]]},
     "parks": [{"vertices": [...]}],
     "rivers": [{"vertices": [...]}],
     "buildings": {"landmarks": [...], "blocks": [...], "defaults": {...}}}

The *result* side (``CityLayout``) is what a renderer consumes. It packs to
msgpack and carries a sha256 of its payload so two passes can be compared
cheaply.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import msgpack

from urbanlayout.constants import BLOCK_DEFAULTS
from urbanlayout.utils.hash import sha256_bytes

Point = Tuple[float, float]


def _point(raw: Any) -> Point:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"Expected an [x, y] pair, got {raw!r}")
    try:
        return (float(raw[0]), float(raw[1]))
    except (TypeError, ValueError):
        raise ValueError(f"Expected numeric coordinates, got {raw!r}") from None


def _points(raw: Any) -> List[Point]:
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Expected a list of [x, y] pairs, got {raw!r}")
    return [_point(p) for p in raw]


def _as_floats(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (list, tuple)):
        return [_as_floats(v) for v in value]
    if isinstance(value, dict):
        return {k: _as_floats(v) for k, v in value.items()}
    return value


def _pair(raw: Any, name: str) -> Tuple[float, float]:
    if isinstance(raw, (int, float)):
        return (float(raw), float(raw))
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"'{name}' must be a number or a [min, max] pair")
    return (float(raw[0]), float(raw[1]))


# --------------------------------------------------------------------------- #
# 1.  Geometry values                                                          #
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class BBox:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, point: Point) -> bool:
        return (
            self.min_x <= point[0] <= self.max_x
            and self.min_y <= point[1] <= self.max_y
        )


@dataclass(slots=True)
class BuildingCandidate:
    center: Point
    width: float
    length: float
    rotation: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.length


# --------------------------------------------------------------------------- #
# 2.  Descriptor types                                                         #
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class Roads:
    width: float
    lines: List[List[Point]] = field(default_factory=list)

    def segments(self) -> List[Tuple[Point, Point]]:
        return [
            (line[i], line[i + 1])
            for line in self.lines
            for i in range(len(line) - 1)
        ]

    @staticmethod
    def from_dict(raw: Optional[Dict[str, Any]]) -> "Roads":
        if not raw:
            return Roads(width=0.0, lines=[])
        if "width" not in raw:
            raise ValueError("Roads need a 'width'")
        try:
            width = float(raw["width"])
        except (TypeError, ValueError):
            raise ValueError(f"Road width must be a number, got {raw['width']!r}") from None
        if width < 0:
            raise ValueError(f"Road width must be non-negative, got {width}")
        lines = []
        for idx, line in enumerate(raw.get("lines", [])):
            pts = _points(line)
            if len(pts) < 2:
                raise ValueError(f"Road line {idx} has fewer than 2 points")
            lines.append(pts)
        return Roads(width=width, lines=lines)


@dataclass(slots=True)
class Block:
    boundary: List[Point]
    size: Tuple[float, float]
    height: Tuple[float, float]
    spacing: float
    coverage: float
    layout: str
    color: str = "grey"

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Block":
        """Build a block from an already-merged settings dict.

        Missing keys fall back to ``BLOCK_DEFAULTS``; an unknown layout is
        kept as-is so the generator can apply its own fallback.
        """
        merged = {**BLOCK_DEFAULTS, **raw}
        boundary = _points(merged.get("boundary") or [])
        if len(boundary) < 3:
            raise ValueError("Block boundary needs at least 3 vertices")
        coverage = float(merged["coverage"])
        if not 0.0 <= coverage <= 1.0:
            raise ValueError(f"Block coverage must be in [0, 1], got {coverage}")
        layout = merged.get("layout") or BLOCK_DEFAULTS["layout"]
        return Block(
            boundary=boundary,
            size=_pair(merged["size"], "size"),
            height=_pair(merged["height"], "height"),
            spacing=float(merged["spacing"]),
            coverage=coverage,
            layout=str(layout),
            color=str(merged.get("color") or BLOCK_DEFAULTS["color"]),
        )


@dataclass(slots=True)
class Landmark:
    center: Point
    size: Tuple[float, float, float]
    rotation: float = 0.0

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Landmark":
        if not isinstance(raw, dict):
            raise ValueError(f"Landmark must be a mapping, got {raw!r}")
        if "center" not in raw:
            raise ValueError("Landmark needs a 'center'")
        size = raw.get("size")
        if not isinstance(size, (list, tuple)) or len(size) != 3:
            raise ValueError("Landmark size must be [width, length, height]")
        try:
            dims = (float(size[0]), float(size[1]), float(size[2]))
            rotation = float(raw.get("rotation") or 0.0)
        except (TypeError, ValueError):
            raise ValueError(f"Landmark size and rotation must be numeric, got {raw!r}") from None
        return Landmark(center=_point(raw["center"]), size=dims, rotation=rotation)


@dataclass(slots=True)
class Park:
    vertices: List[Point]

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Park":
        if not isinstance(raw, dict):
            raise ValueError(f"Park must be a mapping, got {raw!r}")
        return Park(vertices=_points(raw.get("vertices", [])))


@dataclass(slots=True)
class River:
    vertices: List[Point]

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "River":
        if not isinstance(raw, dict):
            raise ValueError(f"River must be a mapping, got {raw!r}")
        return River(vertices=_points(raw.get("vertices", [])))


@dataclass(slots=True)
class CityDescriptor:
    roads: Roads
    parks: List[Park] = field(default_factory=list)
    rivers: List[River] = field(default_factory=list)
    landmarks: List[Landmark] = field(default_factory=list)
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    defaults: Dict[str, Any] = field(default_factory=dict)

    def block_settings(self) -> List[Dict[str, Any]]:
        """Per-block settings with the city defaults shallow-merged underneath."""
        return [{**self.defaults, **raw} for raw in self.blocks]

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "CityDescriptor":
        buildings = raw.get("buildings") or {}
        blocks = buildings.get("blocks") or []
        if not all(isinstance(b, dict) for b in blocks):
            raise ValueError("Every block must be a mapping")
        return CityDescriptor(
            roads=Roads.from_dict(raw.get("roads")),
            parks=[Park.from_dict(p) for p in raw.get("parks") or []],
            rivers=[River.from_dict(r) for r in raw.get("rivers") or []],
            landmarks=[
                Landmark.from_dict(lm) for lm in buildings.get("landmarks") or []
            ],
            blocks=list(blocks),
            defaults=dict(buildings.get("defaults") or {}),
        )

    @staticmethod
    def load(path: Path) -> "CityDescriptor":
        with Path(path).open("r", encoding="utf-8") as f:
            return CityDescriptor.from_dict(json.load(f))


# --------------------------------------------------------------------------- #
# 3.  Result types                                                             #
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class Building:
    center: Point
    size: Tuple[float, float, float]
    rotation: float = 0.0
    color: str = "grey"

    @property
    def footprint(self) -> float:
        return self.size[0] * self.size[1]


@dataclass(slots=True)
class RoadRenderSegment:
    position: Point
    length: float
    width: float
    angle: float


@dataclass(slots=True)
class Tree:
    center: Point
    kind: str


@dataclass(slots=True)
class CityLayout:
    seed: int
    landmarks: List[Landmark] = field(default_factory=list)
    buildings: List[Building] = field(default_factory=list)
    parks: List[Park] = field(default_factory=list)
    rivers: List[River] = field(default_factory=list)
    road_segments: List[RoadRenderSegment] = field(default_factory=list)
    trees: List[Tree] = field(default_factory=list)
    sha256: str | None = None

    def _payload(self) -> Dict[str, Any]:
        # Numbers are hashed as floats so integer input survives a pack/unpack.
        return {
            "seed": self.seed,
            "landmarks": [_as_floats(asdict(lm)) for lm in self.landmarks],
            "buildings": [_as_floats(asdict(b)) for b in self.buildings],
            "parks": [_as_floats(asdict(p)) for p in self.parks],
            "rivers": [_as_floats(asdict(r)) for r in self.rivers],
            "road_segments": [_as_floats(asdict(s)) for s in self.road_segments],
            "trees": [_as_floats(asdict(t)) for t in self.trees],
        }

    def digest(self) -> str:
        return sha256_bytes(msgpack.packb(self._payload(), use_bin_type=True))

    def __post_init__(self):
        if self.sha256 is None:
            self.sha256 = self.digest()

    def to_dict(self) -> Dict[str, Any]:
        return {**self._payload(), "sha256": self.sha256}

    def pack(self) -> bytes:
        return msgpack.packb(self.to_dict(), use_bin_type=True)

    @staticmethod
    def unpack(blob: bytes) -> "CityLayout":
        obj = msgpack.unpackb(blob, raw=False)
        layout = CityLayout(
            seed=obj["seed"],
            landmarks=[
                Landmark(_point(lm["center"]), tuple(lm["size"]), lm["rotation"])
                for lm in obj["landmarks"]
            ],
            buildings=[
                Building(_point(b["center"]), tuple(b["size"]), b["rotation"], b["color"])
                for b in obj["buildings"]
            ],
            parks=[Park(_points(p["vertices"])) for p in obj["parks"]],
            rivers=[River(_points(r["vertices"])) for r in obj["rivers"]],
            road_segments=[
                RoadRenderSegment(_point(s["position"]), s["length"], s["width"], s["angle"])
                for s in obj["road_segments"]
            ],
            trees=[Tree(_point(t["center"]), t["kind"]) for t in obj["trees"]],
            sha256=obj["sha256"],
        )
        if layout.digest() != layout.sha256:
            raise ValueError("CityLayout digest mismatch after unpack")
        return layout
