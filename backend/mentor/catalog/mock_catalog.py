"""Static library of example meshes used when live mesh generation is off or fails."""

import logging
from typing import Iterable, List, Optional, Tuple

from mentor.models.domain import Mesh

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Two triangles per box face, counter-clockwise seen from outside.
_BOX_FACES = (
    (0, 2, 1), (0, 3, 2),  # back  (z-)
    (4, 5, 6), (4, 6, 7),  # front (z+)
    (0, 1, 5), (0, 5, 4),  # bottom (y-)
    (3, 7, 6), (3, 6, 2),  # top (y+)
    (0, 4, 7), (0, 7, 3),  # left (x-)
    (1, 2, 6), (1, 6, 5),  # right (x+)
)

DEFAULT_QUAD = Mesh(
    vertices=(-1, -1, -1, 1, -1, -1, 1, 1, -1, -1, 1, -1),
    indices=(0, 1, 2, 0, 2, 3),
)


def _box(center: Vec3, size: Vec3) -> Tuple[List[List[float]], List[List[int]]]:
    cx, cy, cz = center
    hx, hy, hz = size[0] / 2, size[1] / 2, size[2] / 2
    points = [
        [cx - hx, cy - hy, cz - hz],
        [cx + hx, cy - hy, cz - hz],
        [cx + hx, cy + hy, cz - hz],
        [cx - hx, cy + hy, cz - hz],
        [cx - hx, cy - hy, cz + hz],
        [cx + hx, cy - hy, cz + hz],
        [cx + hx, cy + hy, cz + hz],
        [cx - hx, cy + hy, cz + hz],
    ]
    return points, [list(face) for face in _BOX_FACES]


def build_mesh(boxes: Iterable[Tuple[Vec3, Vec3]]) -> Mesh:
    """Merge axis-aligned boxes, given as (center, size), into one mesh."""
    points: List[List[float]] = []
    faces: List[List[int]] = []
    for center, size in boxes:
        box_points, box_faces = _box(center, size)
        offset = len(points)
        points.extend(box_points)
        faces.extend([[i + offset for i in face] for face in box_faces])
    return Mesh.from_nested(points, faces)


def _camera() -> Mesh:
    return build_mesh([
        ((0.0, 0.0, 0.0), (2.0, 1.2, 0.8)),     # body
        ((0.0, 0.0, 0.6), (0.7, 0.7, 0.4)),     # lens barrel
        ((0.6, 0.75, 0.0), (0.4, 0.3, 0.3)),    # shutter button
        ((-0.6, 0.7, 0.0), (0.5, 0.2, 0.4)),    # viewfinder
    ])


def _transistor() -> Mesh:
    return build_mesh([
        ((0.0, 0.6, 0.0), (1.0, 1.0, 0.5)),     # epoxy package
        ((-0.3, -0.4, 0.0), (0.08, 1.0, 0.08)),  # emitter lead
        ((0.0, -0.4, 0.0), (0.08, 1.0, 0.08)),   # base lead
        ((0.3, -0.4, 0.0), (0.08, 1.0, 0.08)),   # collector lead
    ])


class MockCatalog:
    """Keyword-indexed canned meshes.

    Lookup never fails: unmatched or empty input returns ``DEFAULT_QUAD``.
    """

    def __init__(self, entries: Optional[Iterable[Tuple[str, Mesh]]] = None):
        if entries is None:
            entries = (("camera", _camera()), ("transistor", _transistor()))
        self._entries: Tuple[Tuple[str, Mesh], ...] = tuple(
            (keyword.lower(), mesh) for keyword, mesh in entries
        )

    @property
    def keywords(self) -> List[str]:
        return [keyword for keyword, _ in self._entries]

    def lookup(self, text: Optional[str]) -> Mesh:
        """Return the first catalog mesh whose keyword occurs in ``text``."""
        haystack = (text or "").lower()
        for keyword, mesh in self._entries:
            if keyword in haystack:
                logger.debug(f"Mock catalog matched keyword '{keyword}'")
                return mesh
        return DEFAULT_QUAD


mock_catalog = MockCatalog()
