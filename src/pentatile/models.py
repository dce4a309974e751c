from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

Point = Tuple[float, float]


class TileState(Enum):
    """Alignment status of a tile.

    ``LOCKED`` tiles are user anchors: they count as aligned and are never
    moved by the alignment engine.
    """

    UNALIGNED = "unaligned"
    ALIGNED = "aligned"
    LOCKED = "locked"


class Direction(Enum):
    """Side of a shared line on which a neighbour lies, measured along the
    line's own tangent."""

    FORWARD = "forward"
    BACKWARD = "backward"

    def opposite(self) -> "Direction":
        return Direction.BACKWARD if self is Direction.FORWARD else Direction.FORWARD

    @property
    def sign(self) -> int:
        return 1 if self is Direction.FORWARD else -1


class RhombType(Enum):
    THICK = "thick"
    THIN = "thin"


@dataclass(frozen=True)
class GridLine:
    """One line of the pentagrid.

    The line is ``{p : a*x + b*y = c}`` with unit normal ``(a, b)``.
    ``(x1, y1)``–``(x2, y2)`` is the finite segment clipped to the drawing
    bounds; intersection testing only uses the segment.
    """

    family: int
    n: int
    angle: float
    a: float
    b: float
    c: float
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def key(self) -> tuple[int, int]:
        """Identity of the infinite line: ``(family, n)``."""
        return (self.family, self.n)

    @property
    def normal(self) -> Point:
        return (math.cos(self.angle), math.sin(self.angle))

    @property
    def tangent(self) -> Point:
        """Direction vector of the line, from ``(x1, y1)`` towards ``(x2, y2)``."""
        return (math.sin(self.angle), -math.cos(self.angle))

    @property
    def endpoints(self) -> tuple[Point, Point]:
        return ((self.x1, self.y1), (self.x2, self.y2))

    def contains(self, x: float, y: float, tol: float = 1e-9) -> bool:
        return abs(self.a * x + self.b * y - self.c) <= tol


@dataclass(frozen=True)
class Intersection:
    x: float
    y: float
    line1: Optional[GridLine]
    line2: Optional[GridLine]

    @property
    def point(self) -> Point:
        return (self.x, self.y)

    @property
    def family_delta(self) -> int:
        return (self.line2.family - self.line1.family) % 5

    def lines(self) -> tuple[GridLine, GridLine]:
        return (self.line1, self.line2)


@dataclass(eq=False)
class Tile:
    """A rhombus built from one :class:`Intersection`.

    *vertices* is mutated in place by dragging and alignment;
    *original* keeps the freshly built positions for :meth:`restore`;
    *unlocked_state* remembers whether the tile was aligned when it was
    pinned.
    """

    vertices: List[Point]
    intersection: Intersection
    state: TileState = TileState.UNALIGNED
    original: Tuple[Point, ...] = field(default_factory=tuple)
    unlocked_state: TileState = field(default=TileState.UNALIGNED, repr=False)

    def __post_init__(self) -> None:
        self.vertices = [(float(x), float(y)) for x, y in self.vertices]
        if not self.original:
            self.original = tuple(self.vertices)

    @property
    def aligned(self) -> bool:
        return self.state is not TileState.UNALIGNED

    @property
    def locked(self) -> bool:
        return self.state is TileState.LOCKED

    @property
    def kind(self) -> RhombType:
        delta = self.intersection.family_delta
        return RhombType.THICK if delta in (1, 4) else RhombType.THIN

    def edges(self) -> Iterator[tuple[Point, Point]]:
        """Boundary edges in vertex order, closing back to the first vertex."""
        count = len(self.vertices)
        for i in range(count):
            yield self.vertices[i], self.vertices[(i + 1) % count]

    def centroid(self) -> Point:
        xs = [v[0] for v in self.vertices]
        ys = [v[1] for v in self.vertices]
        return (sum(xs) / len(xs), sum(ys) / len(ys))

    def translate(self, dx: float, dy: float) -> None:
        self.vertices = [(x + dx, y + dy) for x, y in self.vertices]

    def lock(self) -> None:
        if not self.locked:
            self.unlocked_state = self.state
            self.state = TileState.LOCKED

    def unlock(self) -> None:
        """Release the pin, going back to the state held before locking."""
        if self.locked:
            self.state = self.unlocked_state

    def restore(self) -> None:
        self.vertices = list(self.original)
        self.state = TileState.UNALIGNED
        self.unlocked_state = TileState.UNALIGNED


@dataclass(frozen=True)
class Neighbor:
    """Adjacency record: tile *index* lies on *line* in *direction*."""

    index: int
    line: GridLine
    direction: Direction


@dataclass(frozen=True)
class TileGraph:
    """Arena-indexed adjacency: ``neighbors[i]`` belongs to ``tiles[i]``."""

    neighbors: Tuple[Tuple[Neighbor, ...], ...] = ()

    def __len__(self) -> int:
        return len(self.neighbors)

    def neighbors_of(self, index: int) -> Tuple[Neighbor, ...]:
        return self.neighbors[index]

    def degree(self, index: int) -> int:
        return len(self.neighbors[index])

    def edges(self) -> Iterator[tuple[int, Neighbor]]:
        for index, records in enumerate(self.neighbors):
            for record in records:
                yield index, record
